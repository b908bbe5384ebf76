"""Project curriculum (module) management blueprint."""
from __future__ import annotations

from flask import Blueprint, g

from forms import ModuleForm, ReorderModulesForm
from routes import (
    form_error_response,
    json_error,
    json_formdata,
    json_payload,
    result_response,
    validate_request_csrf,
)
from services.module_service import (
    add_module,
    delete_module,
    get_project_modules,
    reorder_modules,
)

modules_bp = Blueprint("modules", __name__, url_prefix="/api")


@modules_bp.route("/projects/<int:project_id>/modules", methods=["POST"])
def create_module(project_id: int):
    """Insert a module into the project's curriculum."""

    form = ModuleForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)
    result = add_module(
        g.user.id,
        project_id,
        form.title.data,
        description=form.description.data,
        duration=form.duration.data,
        order_index=form.order_index.data,
    )
    return result_response(result, success_status=201)


@modules_bp.route("/projects/<int:project_id>/modules", methods=["GET"])
def list_modules(project_id: int):
    return result_response(get_project_modules(project_id))


@modules_bp.route("/projects/<int:project_id>/modules/reorder", methods=["PUT"])
def reorder_project_modules(project_id: int):
    form = ReorderModulesForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)
    return result_response(reorder_modules(g.user.id, project_id, form.module_ids.data))


@modules_bp.route("/modules/<int:module_id>", methods=["DELETE"])
def remove_module(module_id: int):
    csrf_valid, csrf_message = validate_request_csrf(json_payload().get("csrf_token"))
    if not csrf_valid:
        return json_error(csrf_message or "Invalid CSRF token.")
    return result_response(delete_module(g.user.id, module_id))
