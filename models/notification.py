"""Notification models for user-facing alerts."""
from __future__ import annotations
from datetime import datetime
from enum import StrEnum

from database import db


class NotificationType(StrEnum):
    """Supported notification categories."""

    APPLICATION_REVIEWED = "application_reviewed"
    MODULES_COMPLETED = "modules_completed"
    JOB_COMPLETED = "job_completed"


class NotificationStatus(StrEnum):
    """Lifecycle states for notifications."""

    UNREAD = "unread"
    READ = "read"


class Notification(db.Model):
    """Persisted in-app message for a user."""

    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    project_id = db.Column(db.Integer, db.ForeignKey("project.id"), nullable=True, index=True)
    application_id = db.Column(db.Integer, db.ForeignKey("application.id"), nullable=True, index=True)
    notification_type = db.Column(db.String(50), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=NotificationStatus.UNREAD.value)
    payload = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    read_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", back_populates="notifications", foreign_keys=[user_id])

    __table_args__ = (
        db.Index("ix_notifications_user_status", "user_id", "status"),
    )

    @property
    def status_enum(self) -> NotificationStatus:
        """Return the status as an enum value."""

        return NotificationStatus(self.status)

    @status_enum.setter
    def status_enum(self, value: NotificationStatus) -> None:
        self.status = value.value

    @property
    def type_enum(self) -> NotificationType:
        """Return the notification type as an enum value."""

        return NotificationType(self.notification_type)

    @property
    def is_read(self) -> bool:
        return self.status_enum == NotificationStatus.READ

    def mark_read(self) -> None:
        """Record that the notification has been seen."""

        if self.read_at is None:
            self.read_at = datetime.utcnow()
        self.status_enum = NotificationStatus.READ

    def to_dict(self) -> dict[str, object]:
        """Return a serialized representation of the notification."""

        return {
            "id": self.id,
            "user_id": self.user_id,
            "project_id": self.project_id,
            "application_id": self.application_id,
            "title": self.title,
            "message": self.message,
            "status": self.status,
            "is_read": self.is_read,
            "notification_type": self.notification_type,
            "payload": self.payload or {},
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "read_at": self.read_at.isoformat() if self.read_at else None,
        }
