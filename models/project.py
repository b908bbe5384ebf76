"""A Project is an opportunity (internship or job) published by a Company.

A Project owns an ordered list of curriculum Modules
A Project is owned by the User who created it and by the User behind its Company
A Student can apply to a Project while it accepts applications
A Project may cap the number of applicants it receives

"""
from __future__ import annotations
from datetime import datetime
from enum import StrEnum

from database import db


class ProjectStatus(StrEnum):
    """Lifecycle of the project listing itself."""

    DRAFT = "draft"
    ACTIVE = "active"
    PENDING = "pending"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    CLOSED = "closed"


class Project(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    company_id = db.Column(db.Integer, db.ForeignKey('company.id'), nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    status = db.Column(db.String(20), nullable=False, default=ProjectStatus.ACTIVE.value)
    max_applicants = db.Column(db.Integer, nullable=True)
    application_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    company = db.relationship("Company", back_populates="projects")
    modules = db.relationship(
        "ProjectModule",
        back_populates="project",
        lazy="selectin",
        order_by="ProjectModule.order_index",
        cascade="all, delete-orphan",
    )
    applications = db.relationship("Application", back_populates="project", lazy=True)

    @property
    def status_enum(self) -> ProjectStatus:
        """Return the status as an enum value."""

        return ProjectStatus(self.status)

    @status_enum.setter
    def status_enum(self, value: ProjectStatus) -> None:
        self.status = value.value

    @property
    def is_full(self) -> bool:
        """True when the applicant cap has been reached."""

        return self.max_applicants is not None and (self.application_count or 0) >= self.max_applicants

    def __repr__(self):
        return f'<Project {self.name}>'
