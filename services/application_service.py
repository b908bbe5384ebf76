"""Application lifecycle: submit, review, withdraw.

Completion is handled by ``services.completion_service`` and is never set here.
"""
from __future__ import annotations

import logging
from datetime import datetime

from flask import current_app

from database import db
from models.application import Application, ApplicationStatus
from models.project import Project
from services.authorization import ensure_project_owner, student_for_user, user_owns_application
from services.notification_service import notify_application_reviewed
from services.result import (
    NotFoundError,
    ServiceResult,
    UnauthorizedError,
    ValidationError,
    service_operation,
)

DEFAULT_ACCEPTING_STATUSES = ("active",)

# target status -> statuses it may be reached from by a company review
REVIEW_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.UNDER_REVIEW: frozenset({ApplicationStatus.SUBMIT, ApplicationStatus.PENDING}),
    ApplicationStatus.ACCEPTED: frozenset(
        {ApplicationStatus.SUBMIT, ApplicationStatus.PENDING, ApplicationStatus.UNDER_REVIEW}
    ),
    ApplicationStatus.REJECTED: frozenset(
        {ApplicationStatus.SUBMIT, ApplicationStatus.PENDING, ApplicationStatus.UNDER_REVIEW}
    ),
}

WITHDRAWABLE_STATUSES = frozenset(
    {ApplicationStatus.SUBMIT, ApplicationStatus.PENDING, ApplicationStatus.UNDER_REVIEW}
)


def _accepting_statuses() -> set[str]:
    configured = current_app.config.get("APPLICATION_ACCEPTING_STATUSES") or DEFAULT_ACCEPTING_STATUSES
    return {str(value).lower() for value in configured}


def _active_application(project_id: int, student_id: int) -> Application | None:
    return (
        Application.query.filter(
            Application.project_id == project_id,
            Application.student_id == student_id,
            Application.status != ApplicationStatus.WITHDRAWN.value,
        )
        .order_by(Application.applied_at.desc())
        .first()
    )


def _lock_application(application_id: int) -> Application:
    application = Application.query.filter_by(id=application_id).with_for_update().one_or_none()
    if application is None:
        raise NotFoundError("Application not found.")
    return application


@service_operation("An error occurred while submitting the application.")
def submit_application(student_user_id: int | None, project_id: int, cover_letter: str | None = None) -> ServiceResult:
    if student_user_id is None:
        raise UnauthorizedError("User authentication required.")
    project = Project.query.filter_by(id=project_id).with_for_update().one_or_none()
    if project is None:
        raise NotFoundError("Project not found.")
    student = student_for_user(student_user_id)
    if student is None:
        raise NotFoundError("Student profile not found.")

    if _active_application(project.id, student.id) is not None:
        raise ValidationError("Student has already applied to this project.")
    if project.status not in _accepting_statuses():
        raise ValidationError("Project is not accepting applications.")
    if project.is_full:
        raise ValidationError("Project has reached maximum applicants.")

    application = Application(
        project_id=project.id,
        student_id=student.id,
        cover_letter=cover_letter or None,
        status=ApplicationStatus.PENDING.value,
        applied_at=datetime.utcnow(),
    )
    db.session.add(application)
    project.application_count = (project.application_count or 0) + 1
    db.session.commit()
    logging.info("Student %s applied to project %s (application %s)", student.id, project.id, application.id)
    return ServiceResult.ok(application.to_dict(), "Application submitted successfully.")


@service_operation("An error occurred while reviewing the application.")
def review_application(
    company_user_id: int | None,
    application_id: int,
    status: str | ApplicationStatus,
    review_notes: str | None = None,
) -> ServiceResult:
    """Record the company's decision (or move the application under review)."""

    try:
        target = ApplicationStatus(str(status).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown application status '{status}'.") from None
    if target not in REVIEW_TRANSITIONS:
        raise ValidationError(f"Applications cannot be reviewed to '{target}'.")

    application = _lock_application(application_id)
    project = application.project
    if project is None:
        raise NotFoundError("Project not found.")
    ensure_project_owner(project, company_user_id)

    current = application.status_enum
    if current not in REVIEW_TRANSITIONS[target]:
        raise ValidationError(f"Cannot move an application from '{current}' to '{target}'.")

    application.status_enum = target
    application.reviewed_by = company_user_id
    application.reviewed_at = datetime.utcnow()
    application.review_notes = review_notes or None
    notify_application_reviewed(application)
    db.session.commit()
    logging.info("Application %s reviewed by user %s: %s", application_id, company_user_id, target)
    return ServiceResult.ok(application.to_dict(), f"Application status updated to {target}.")


@service_operation("An error occurred while withdrawing the application.")
def withdraw_application(student_user_id: int | None, application_id: int) -> ServiceResult:
    application = _lock_application(application_id)
    if not user_owns_application(application, student_user_id):
        raise UnauthorizedError("Unauthorized to withdraw this application.")
    if application.is_decided:
        raise ValidationError("Cannot withdraw application after it has been reviewed.")
    if application.status_enum not in WITHDRAWABLE_STATUSES:
        raise ValidationError(f"An application with status '{application.status}' cannot be withdrawn.")

    application.status_enum = ApplicationStatus.WITHDRAWN
    project = Project.query.filter_by(id=application.project_id).with_for_update().one_or_none()
    if project is not None and (project.application_count or 0) > 0:
        project.application_count -= 1
    db.session.commit()
    logging.info("Application %s withdrawn", application_id)
    return ServiceResult.ok(True, "Application withdrawn successfully.")


@service_operation("An error occurred while checking the application.")
def has_student_applied(project_id: int, student_id: int) -> ServiceResult:
    applied = _active_application(project_id, student_id) is not None
    message = "Student has applied." if applied else "Student has not applied."
    return ServiceResult.ok(applied, message)
