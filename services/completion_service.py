"""Formal closing of an accepted application by the owning company."""
from __future__ import annotations

import logging
from datetime import datetime

from flask import current_app

from database import db
from models.application import Application, ApplicationStatus
from services.authorization import ensure_project_owner
from services.notification_service import notify_job_completed
from services.progress_service import ProgressSnapshot, build_progress_snapshot
from services.result import NotFoundError, ServiceResult, ValidationError, service_operation


def format_duration(days: int) -> str:
    """Return e.g. ``"2 weeks, 3 days"`` for a number of days."""

    weeks, remainder = divmod(max(days, 0), 7)
    parts = []
    if weeks:
        parts.append(f"{weeks} week{'s' if weeks != 1 else ''}")
    if remainder or not parts:
        parts.append(f"{remainder} day{'s' if remainder != 1 else ''}")
    return ", ".join(parts)


def build_completion_summary(application: Application, snapshot: ProgressSnapshot) -> dict[str, object]:
    """Combine the final progress snapshot with the completion metadata."""

    start_date = application.reviewed_at or application.applied_at
    end_date = application.completed_at
    duration_days = (end_date.date() - start_date.date()).days if start_date and end_date else 0
    student = application.student
    summary = snapshot.to_dict()
    summary.update(
        {
            "project_name": application.project.name if application.project else "",
            "student_name": student.full_name if student else "Unknown",
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
            "duration_days": duration_days,
            "duration_text": format_duration(duration_days),
            "total_modules_completed": snapshot.completed_modules_count,
            "completed_at": end_date.isoformat() if end_date else None,
            "feedback": application.company_feedback_note,
            "deliverable_url": application.final_deliverable_url,
        }
    )
    return summary


@service_operation("An error occurred while completing the job.")
def complete_job(
    company_user_id: int | None,
    application_id: int,
    feedback: str | None = None,
    deliverable_url: str | None = None,
) -> ServiceResult:
    application = Application.query.filter_by(id=application_id).with_for_update().one_or_none()
    if application is None:
        raise NotFoundError("Application not found.")
    project = application.project
    if project is None:
        raise NotFoundError("Project not found.")
    ensure_project_owner(project, company_user_id)

    if application.status_enum == ApplicationStatus.COMPLETED:
        raise ValidationError("This job has already been completed.")
    if application.status_enum != ApplicationStatus.ACCEPTED:
        raise ValidationError(
            f"Only accepted applications can be completed (current status: '{application.status}')."
        )

    snapshot = build_progress_snapshot(application)
    if current_app.config.get("COMPLETION_REQUIRES_ALL_MODULES") and snapshot.total_modules and not snapshot.is_complete:
        raise ValidationError("All modules must be completed before the job can be closed.")

    application.completed_at = datetime.utcnow()
    application.company_feedback_note = (feedback or "").strip() or None
    application.final_deliverable_url = (deliverable_url or "").strip() or None
    application.status_enum = ApplicationStatus.COMPLETED
    notify_job_completed(application)
    db.session.commit()
    logging.info("Application %s completed by user %s", application_id, company_user_id)
    return ServiceResult.ok(build_completion_summary(application, snapshot), "Job completed successfully.")
