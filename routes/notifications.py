"""Notification listing routes."""
from __future__ import annotations

import logging

from flask import Blueprint, g, jsonify
from sqlalchemy.exc import SQLAlchemyError

from database import db
from forms import MarkNotificationsReadForm
from routes import form_error_response, json_error, json_formdata
from services.notification_service import build_notifications_summary, mark_notifications_read
from services.result import ErrorKind

notifications_bp = Blueprint("notifications", __name__, url_prefix="/notifications")


@notifications_bp.route("/list", methods=["GET"])
def list_notifications_json():
    """Return unread and recent notifications for the current user."""

    summary = build_notifications_summary(g.user)
    return jsonify({"success": True, **summary})


@notifications_bp.route("/read", methods=["POST"])
def mark_read():
    form = MarkNotificationsReadForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)

    updated = mark_notifications_read(g.user, form.notification_ids.data or [])
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logging.error("Unable to mark notifications read for user %s", g.user.id, exc_info=True)
        return json_error("Unable to update notifications. Please try again.", error=ErrorKind.UNEXPECTED)

    summary = build_notifications_summary(g.user)
    return jsonify({"success": True, "updated": updated, **summary})
