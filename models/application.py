"""An Application is a Student's bid for a Project.

An Application is owned by the Student who submitted it
The Company owning the Project reviews the Application (accept or reject)
A Student can withdraw an Application until it has been accepted or rejected
An accepted Application tracks Module progress until the Company completes the job

"""
from __future__ import annotations
from datetime import datetime
from enum import StrEnum

from database import db


class ApplicationStatus(StrEnum):
    """Lifecycle states for an application."""

    SUBMIT = "submit"
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    COMPLETED = "completed"


class Application(db.Model):
    """Join of a Student and a Project with its own status lifecycle."""

    __tablename__ = "application"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey("project.id"), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("student.id"), nullable=False, index=True)
    cover_letter = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=ApplicationStatus.PENDING.value)
    applied_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    review_notes = db.Column(db.Text, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    company_feedback_note = db.Column(db.Text, nullable=True)
    final_deliverable_url = db.Column(db.String(500), nullable=True)
    is_paid = db.Column(db.Boolean, nullable=False, default=False)

    project = db.relationship("Project", back_populates="applications")
    student = db.relationship("Student", back_populates="applications")
    module_progress = db.relationship(
        "ApplicationModuleProgress",
        back_populates="application",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.Index("ix_application_project_student", "project_id", "student_id"),
    )

    @property
    def status_enum(self) -> ApplicationStatus:
        """Return the status as an enum value."""

        return ApplicationStatus(self.status)

    @status_enum.setter
    def status_enum(self, value: ApplicationStatus) -> None:
        self.status = value.value

    @property
    def is_decided(self) -> bool:
        """True once the company has accepted or rejected the application."""

        return self.status_enum in {ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED}

    def progress_for_module(self, module_id: int | None) -> "ApplicationModuleProgress" | None:
        """Return the progress row for the supplied module if present."""

        if module_id is None:
            return None
        for entry in self.module_progress:
            if entry.project_module_id == module_id:
                return entry
        return None

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-ready representation of the application."""

        return {
            "id": self.id,
            "project_id": self.project_id,
            "student_id": self.student_id,
            "status": self.status,
            "applied_at": self.applied_at.isoformat() if self.applied_at else None,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "review_notes": self.review_notes,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "company_feedback_note": self.company_feedback_note,
            "final_deliverable_url": self.final_deliverable_url,
            "is_paid": self.is_paid,
        }

    def __repr__(self):
        return f"<Application {self.student_id} -> {self.project_id}>"
