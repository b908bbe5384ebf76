"""Per-application module completion and the progress derived from it."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from database import db
from models.application import Application
from models.application_module_progress import ApplicationModuleProgress
from services.authorization import user_owns_application
from services.notification_service import notify_modules_completed
from services.result import (
    NotFoundError,
    ServiceResult,
    UnauthorizedError,
    ValidationError,
    service_operation,
)


@dataclass
class ProgressSnapshot:
    """Progress of one application across its project's current modules."""

    application_id: int
    project_id: int
    total_modules: int
    completed_module_ids: list[int] = field(default_factory=list)

    @property
    def completed_modules_count(self) -> int:
        return len(self.completed_module_ids)

    @property
    def progress_percentage(self) -> float:
        if self.total_modules == 0:
            return 0.0
        return round(self.completed_modules_count / self.total_modules * 100, 2)

    @property
    def is_complete(self) -> bool:
        return self.total_modules > 0 and self.completed_modules_count == self.total_modules

    def to_dict(self) -> dict[str, object]:
        return {
            "application_id": self.application_id,
            "project_id": self.project_id,
            "total_modules": self.total_modules,
            "completed_modules_count": self.completed_modules_count,
            "progress_percentage": self.progress_percentage,
            "completed_module_ids": list(self.completed_module_ids),
        }


def build_progress_snapshot(application: Application) -> ProgressSnapshot:
    """Derive progress from the project's modules and the application's progress rows.

    Rows pointing at modules that are no longer part of the project are ignored.
    """

    project = application.project
    modules = list(project.modules) if project is not None else []
    module_ids = {module.id for module in modules}
    completed = {
        entry.project_module_id
        for entry in application.module_progress
        if entry.is_completed and entry.project_module_id in module_ids
    }
    ordered_completed = [module.id for module in modules if module.id in completed]
    return ProgressSnapshot(
        application_id=application.id,
        project_id=project.id if project is not None else application.project_id,
        total_modules=len(module_ids),
        completed_module_ids=ordered_completed,
    )


def _module_breakdown(application: Application) -> list[dict[str, object]]:
    project = application.project
    breakdown = []
    for module in (project.modules if project is not None else []):
        entry = application.progress_for_module(module.id)
        completed = bool(entry and entry.is_completed)
        breakdown.append(
            {
                "module_id": module.id,
                "title": module.title,
                "order_index": module.order_index,
                "is_completed": completed,
                "completed_at": entry.completed_at.isoformat() if completed and entry.completed_at else None,
            }
        )
    return breakdown


@service_operation("An error occurred while updating module progress.")
def toggle_module_completion(
    application_id: int,
    module_id: int,
    is_completed: bool,
    acting_user_id: int | None,
) -> ServiceResult:
    """Mark a module complete (create or flip the row) or incomplete (delete the row)."""

    if acting_user_id is None:
        raise UnauthorizedError("User authentication required.")

    application = Application.query.filter_by(id=application_id).with_for_update().one_or_none()
    if application is None:
        raise NotFoundError("Application not found.")
    if application.student is None:
        raise NotFoundError("Student not found.")
    if not user_owns_application(application, acting_user_id):
        raise UnauthorizedError("You are not authorized to update this application.")

    project = application.project
    if project is None:
        raise NotFoundError("Project not found.")
    if not any(module.id == module_id for module in project.modules):
        raise ValidationError("Module does not belong to this project.")

    existing = application.progress_for_module(module_id)
    newly_completed = False
    if is_completed:
        if existing is None:
            entry = ApplicationModuleProgress(application_id=application.id, project_module_id=module_id)
            entry.mark_completed()
            application.module_progress.append(entry)
            newly_completed = True
        elif not existing.is_completed:
            existing.mark_completed()
            newly_completed = True
    elif existing is not None:
        application.module_progress.remove(existing)
        db.session.delete(existing)

    snapshot = build_progress_snapshot(application)
    if newly_completed and snapshot.is_complete:
        notify_modules_completed(application)

    db.session.commit()
    logging.info(
        "Module %s of application %s set to %s (%s%%)",
        module_id,
        application_id,
        "completed" if is_completed else "not completed",
        snapshot.progress_percentage,
    )
    return ServiceResult.ok(snapshot.to_dict(), "Module progress updated successfully.")


def update_progress(
    student_user_id: int | None,
    application_id: int,
    module_id: int,
    is_completed: bool,
) -> ServiceResult:
    """Boolean flavour of ``toggle_module_completion`` for the student API."""

    result = toggle_module_completion(application_id, module_id, is_completed, student_user_id)
    if not result.success:
        return result
    return ServiceResult.ok(True, result.message)


@service_operation("An error occurred while retrieving progress.")
def get_application_progress(application_id: int) -> ServiceResult:
    application = db.session.get(Application, application_id)
    if application is None:
        raise NotFoundError("Application not found.")
    if application.project is None:
        raise NotFoundError("Project not found.")

    payload = build_progress_snapshot(application).to_dict()
    payload["application_status"] = application.status
    payload["modules"] = _module_breakdown(application)
    return ServiceResult.ok(payload, "Application progress retrieved.")
