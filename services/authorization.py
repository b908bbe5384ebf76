"""Ownership checks shared by every mutating project operation."""
from __future__ import annotations

from models.application import Application
from models.company import Company
from models.project import Project
from models.student import Student
from services.result import UnauthorizedError


def user_owns_project(project: Project | None, user_id: int | None) -> bool:
    """Return True when the user created the project or represents its company."""

    if project is None or user_id is None:
        return False
    if project.created_by == user_id:
        return True
    company = project.company
    if company is None and project.company_id is not None:
        company = Company.query.get(project.company_id)
    return bool(company and company.user_id == user_id)


def ensure_project_owner(project: Project, user_id: int | None) -> None:
    """Raise ``UnauthorizedError`` unless the user owns the project."""

    if user_id is None:
        raise UnauthorizedError("User authentication required.")
    if not user_owns_project(project, user_id):
        raise UnauthorizedError("You are not authorized to modify this project.")


def student_for_user(user_id: int | None) -> Student | None:
    if user_id is None:
        return None
    return Student.query.filter_by(user_id=user_id).one_or_none()


def user_owns_application(application: Application | None, user_id: int | None) -> bool:
    """Return True if the application was submitted by the user's student profile."""

    if application is None or user_id is None:
        return False
    student = application.student or Student.query.get(application.student_id)
    return bool(student and student.user_id == user_id)
