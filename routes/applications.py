"""Application lifecycle and execution progress blueprint."""
from __future__ import annotations

from flask import Blueprint, g

from forms import (
    ApplicationForm,
    CompleteJobForm,
    ModuleToggleForm,
    ProgressForm,
    ReviewForm,
)
from routes import (
    form_error_response,
    json_error,
    json_formdata,
    json_payload,
    result_response,
    validate_request_csrf,
)
from services.application_service import (
    has_student_applied,
    review_application,
    submit_application,
    withdraw_application,
)
from services.completion_service import complete_job
from services.progress_service import (
    get_application_progress,
    toggle_module_completion,
    update_progress,
)

applications_bp = Blueprint("applications", __name__, url_prefix="/api")


@applications_bp.route("/applications", methods=["POST"])
def submit():
    form = ApplicationForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)
    result = submit_application(g.user.id, form.project_id.data, form.cover_letter.data)
    return result_response(result, success_status=201)


@applications_bp.route("/projects/<int:project_id>/students/<int:student_id>/applied", methods=["GET"])
def applied(project_id: int, student_id: int):
    return result_response(has_student_applied(project_id, student_id))


@applications_bp.route("/applications/<int:application_id>/review", methods=["POST"])
def review(application_id: int):
    form = ReviewForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)
    return result_response(
        review_application(g.user.id, application_id, form.status.data, form.review_notes.data)
    )


@applications_bp.route("/applications/<int:application_id>/withdraw", methods=["POST"])
def withdraw(application_id: int):
    csrf_valid, csrf_message = validate_request_csrf(json_payload().get("csrf_token"))
    if not csrf_valid:
        return json_error(csrf_message or "Invalid CSRF token.")
    return result_response(withdraw_application(g.user.id, application_id))


@applications_bp.route("/applications/<int:application_id>/modules/<int:module_id>/toggle", methods=["POST"])
def toggle_module(application_id: int, module_id: int):
    """Mark one module complete or incomplete and return the new progress."""

    form = ModuleToggleForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)
    return result_response(
        toggle_module_completion(application_id, module_id, form.is_completed.data, g.user.id)
    )


@applications_bp.route("/applications/<int:application_id>/progress", methods=["PUT"])
def put_progress(application_id: int):
    form = ProgressForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)
    return result_response(
        update_progress(g.user.id, application_id, form.module_id.data, form.is_completed.data)
    )


@applications_bp.route("/applications/<int:application_id>/progress", methods=["GET"])
def progress(application_id: int):
    return result_response(get_application_progress(application_id))


@applications_bp.route("/applications/complete", methods=["POST"])
def complete():
    """Close an accepted application; only the project's company may do this."""

    form = CompleteJobForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)
    return result_response(
        complete_job(
            g.user.id,
            form.application_id.data,
            feedback=form.feedback.data,
            deliverable_url=form.deliverable_url.data,
        )
    )
