""" Completion record of one Module for one Application

An Application has at most one row per Module
A row exists only while the Module is completed; un-completing deletes it
"""
from datetime import datetime

from database import db


class ApplicationModuleProgress(db.Model):
    __tablename__ = "application_module_progress"

    id = db.Column(db.Integer, primary_key=True)
    application_id = db.Column(
        db.Integer, db.ForeignKey("application.id", ondelete="CASCADE"), nullable=False, index=True
    )
    project_module_id = db.Column(
        db.Integer, db.ForeignKey("project_module.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime, nullable=True)

    application = db.relationship("Application", back_populates="module_progress")
    module = db.relationship("ProjectModule", back_populates="progress_entries")

    __table_args__ = (
        db.UniqueConstraint("application_id", "project_module_id", name="uq_application_module_progress"),
    )

    def mark_completed(self) -> None:
        self.is_completed = True
        self.completed_at = datetime.utcnow()

    def __repr__(self):
        return f"<ApplicationModuleProgress {self.application_id}:{self.project_module_id}>"
