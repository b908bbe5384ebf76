"""Utilities for creating and presenting user notifications."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable

from database import db
from models.application import Application, ApplicationStatus
from models.notification import Notification, NotificationStatus, NotificationType
from models.user import User


def _student_name(application: Application) -> str:
    student = application.student
    return student.full_name if student and student.full_name else "A student"


def _project_name(application: Application) -> str:
    return application.project.name if application.project else "a project"


def _company_user_id(application: Application) -> int | None:
    project = application.project
    if project is None:
        return None
    if project.company is not None:
        return project.company.user_id
    return project.created_by


def notify_modules_completed(application: Application) -> Notification | None:
    """Tell the owning company that every module of the application is complete."""

    recipient_id = _company_user_id(application)
    if recipient_id is None:
        return None
    student_name = _student_name(application)
    project_name = _project_name(application)
    notification = Notification(
        user_id=recipient_id,
        project_id=application.project_id,
        application_id=application.id,
        notification_type=NotificationType.MODULES_COMPLETED.value,
        title="Project modules completed",
        message=f"{student_name} has completed all modules for '{project_name}'.",
        payload={"action_url": f"/applications/{application.id}/progress"},
    )
    db.session.add(notification)
    return notification


def notify_application_reviewed(application: Application) -> Notification | None:
    """Tell the student about the company's decision on their application."""

    student = application.student
    if student is None:
        return None
    project_name = _project_name(application)
    if application.status_enum == ApplicationStatus.ACCEPTED:
        title = f"Accepted for '{project_name}'"
        message = f"Your application to '{project_name}' was accepted."
    elif application.status_enum == ApplicationStatus.REJECTED:
        title = f"Application to '{project_name}' declined"
        message = f"Your application to '{project_name}' was not accepted."
    else:
        title = f"Application to '{project_name}' under review"
        message = f"The company started reviewing your application to '{project_name}'."
    notification = Notification(
        user_id=student.user_id,
        project_id=application.project_id,
        application_id=application.id,
        notification_type=NotificationType.APPLICATION_REVIEWED.value,
        title=title,
        message=message,
        payload={"status": application.status, "review_notes": application.review_notes},
    )
    db.session.add(notification)
    return notification


def notify_job_completed(application: Application) -> Notification | None:
    """Tell the student that the company formally closed the job."""

    student = application.student
    if student is None:
        return None
    project_name = _project_name(application)
    notification = Notification(
        user_id=student.user_id,
        project_id=application.project_id,
        application_id=application.id,
        notification_type=NotificationType.JOB_COMPLETED.value,
        title=f"'{project_name}' completed",
        message=f"The company marked your work on '{project_name}' as completed.",
        payload={
            "feedback": application.company_feedback_note,
            "deliverable_url": application.final_deliverable_url,
        },
    )
    db.session.add(notification)
    return notification


def get_unread_notifications(user: User | None) -> list[Notification]:
    """Return notifications the user has not seen yet."""

    if not user:
        return []
    return (
        Notification.query.filter_by(user_id=user.id, status=NotificationStatus.UNREAD.value)
        .order_by(Notification.created_at.desc())
        .all()
    )


def get_recent_notifications(user: User | None, *, limit: int = 10) -> list[Notification]:
    """Return recent notifications for the user."""

    if not user:
        return []
    return (
        Notification.query.filter_by(user_id=user.id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )


def _format_notification_timestamp(value: datetime | None) -> str | None:
    """Return a human-friendly timestamp for notification display."""

    if value is None:
        return None
    month = value.strftime("%b")
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{month} {value.day}, {value.year} at {hour}:{value.minute:02d} {meridiem}"


def serialize_notification(notification: Notification) -> dict[str, object]:
    """Serialize a notification for API responses."""

    payload = notification.to_dict()
    payload["created_display"] = _format_notification_timestamp(notification.created_at)
    return payload


def serialize_notifications(notifications: Iterable[Notification]) -> list[dict[str, object]]:
    return [serialize_notification(notification) for notification in notifications]


def build_notifications_summary(user: User | None) -> dict[str, object]:
    """Return aggregated notification data for the current user."""

    unread = get_unread_notifications(user)
    return {
        "unread": serialize_notifications(unread),
        "recent": serialize_notifications(get_recent_notifications(user)),
        "unread_count": len(unread),
    }


def mark_notifications_read(user: User | None, notification_ids: Iterable[int]) -> int:
    """Mark the user's notifications as read and return how many changed."""

    if not user:
        return 0
    ids = {int(value) for value in notification_ids}
    if not ids:
        return 0
    updated = 0
    for notification in Notification.query.filter(
        Notification.user_id == user.id, Notification.id.in_(ids)
    ).all():
        if not notification.is_read:
            notification.mark_read()
            updated += 1
    return updated
