"""Ordering of curriculum modules within a project.

The modules of a project always carry ``order_index`` values 1..N with no
gaps or duplicates. Only the three commands below change those values and
each of them commits once, after locking the owning project row.
"""
from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import select, update

from database import db
from models.project import Project
from models.project_module import ProjectModule
from services.authorization import ensure_project_owner
from services.result import NotFoundError, ServiceResult, ValidationError, service_operation


def calculate_insert_position(requested: int | None, existing_count: int) -> int:
    """Return the 1-based slot a new module should occupy.

    Missing or non-positive requests append; requests past the end are
    clamped to an append instead of being rejected.
    """

    if requested is None or requested <= 0:
        return existing_count + 1
    return min(requested, existing_count + 1)


def _lock_project(project_id: int) -> Project:
    project = Project.query.filter_by(id=project_id).with_for_update().one_or_none()
    if project is None:
        raise NotFoundError("Project not found.")
    return project


def _module_count(project_id: int) -> int:
    return ProjectModule.query.filter_by(project_id=project_id).count()


def _reindex_modules(project_id: int) -> None:
    """Renumber the project's modules densely by their current order."""

    rows = db.session.execute(
        select(ProjectModule.id, ProjectModule.order_index)
        .where(ProjectModule.project_id == project_id)
        .order_by(ProjectModule.order_index, ProjectModule.id)
    ).all()
    changes = [
        {"id": row.id, "order_index": position}
        for position, row in enumerate(rows, start=1)
        if row.order_index != position
    ]
    if changes:
        db.session.execute(update(ProjectModule), changes)


def serialize_modules(modules: Iterable[ProjectModule]) -> list[dict[str, object]]:
    ordered = sorted(modules, key=lambda item: (item.order_index, item.id))
    return [module.to_dict() for module in ordered]


@service_operation("An error occurred while adding the module.")
def add_module(
    company_user_id: int | None,
    project_id: int,
    title: str | None,
    description: str | None = None,
    duration: str | None = None,
    order_index: int | None = None,
) -> ServiceResult:
    """Insert a module at ``order_index`` (or append) and shift later siblings up."""

    project = _lock_project(project_id)
    ensure_project_owner(project, company_user_id)

    title = (title or "").strip()
    if not title:
        raise ValidationError("Module title is required.")

    existing_count = _module_count(project.id)
    position = calculate_insert_position(order_index, existing_count)
    if position <= existing_count:
        ProjectModule.query.filter(
            ProjectModule.project_id == project.id,
            ProjectModule.order_index >= position,
        ).update(
            {ProjectModule.order_index: ProjectModule.order_index + 1},
            synchronize_session="fetch",
        )

    module = ProjectModule(
        project_id=project.id,
        title=title,
        description=description or None,
        estimated_duration=duration or None,
        order_index=position,
    )
    db.session.add(module)
    db.session.commit()
    logging.info("Added module %s to project %s at position %s", module.id, project_id, position)
    return ServiceResult.ok(module.to_dict(), "Project module added successfully.")


@service_operation("An error occurred while retrieving modules.")
def get_project_modules(project_id: int) -> ServiceResult:
    project = db.session.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found.")
    return ServiceResult.ok(serialize_modules(project.modules), "Project modules retrieved.")


@service_operation("An error occurred while deleting the module.")
def delete_module(company_user_id: int | None, module_id: int) -> ServiceResult:
    """Remove a module and renumber the survivors 1..N."""

    module = db.session.get(ProjectModule, module_id)
    if module is None:
        raise NotFoundError("Module not found.")
    project_id = module.project_id
    project = _lock_project(project_id)
    ensure_project_owner(project, company_user_id)

    db.session.delete(module)
    db.session.flush()
    _reindex_modules(project_id)
    db.session.commit()
    logging.info("Deleted module %s from project %s", module_id, project_id)
    return ServiceResult.ok(True, "Module deleted successfully.")


@service_operation("An error occurred while reordering modules.")
def reorder_modules(company_user_id: int | None, project_id: int, module_ids: list[int] | None) -> ServiceResult:
    """Assign order 1..N following ``module_ids``, which must be a permutation of the project's modules."""

    if not module_ids:
        raise ValidationError("Module order payload is required.")

    project = _lock_project(project_id)
    ensure_project_owner(project, company_user_id)

    current_ids = set(
        db.session.execute(select(ProjectModule.id).where(ProjectModule.project_id == project.id)).scalars()
    )
    if not current_ids:
        raise ValidationError("No modules found for project.")
    if len(module_ids) != len(current_ids) or len(set(module_ids)) != len(module_ids):
        raise ValidationError("Module order list does not match existing modules.")
    if set(module_ids) != current_ids:
        raise ValidationError("Module order contains invalid identifiers.")

    db.session.execute(
        update(ProjectModule),
        [{"id": module_id, "order_index": position} for position, module_id in enumerate(module_ids, start=1)],
    )
    db.session.commit()
    logging.info("Reordered %s modules of project %s", len(module_ids), project_id)
    return ServiceResult.ok(True, "Modules reordered successfully.")
