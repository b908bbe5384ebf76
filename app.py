import logging
import os

from dotenv import load_dotenv
from flask import Flask, g, jsonify, request, session
from flask_migrate import Migrate

from database import db

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.environ.get(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


# Initialize Flask app
app = Flask(__name__)
app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", "sqlite:///projectexecution.db")
app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-secret-key")
app.config["WTF_CSRF_ENABLED"] = _env_flag("WTF_CSRF_ENABLED", True)
app.config["COMPLETION_REQUIRES_ALL_MODULES"] = _env_flag("COMPLETION_REQUIRES_ALL_MODULES")
app.config["APPLICATION_ACCEPTING_STATUSES"] = _env_list("APPLICATION_ACCEPTING_STATUSES", ["active"])

db.init_app(app)

# Models import should be after initializing db
from models.user import User
from models.company import Company
from models.student import Student
from models.project import Project
from models.project_module import ProjectModule
from models.application import Application
from models.application_module_progress import ApplicationModuleProgress
from models.notification import Notification

from routes.applications import applications_bp
from routes.modules import modules_bp
from routes.notifications import notifications_bp
from routes import json_error
from services.result import ErrorKind

# Create flask command lines to update the db based on the model
# Useage:
# Create a migration script in ./migrations/versions
# > flask db migrate -m "Update comments"
# Run the update
# > flask db upgrade
migrate = Migrate(app, db)
app.register_blueprint(modules_bp)
app.register_blueprint(applications_bp)
app.register_blueprint(notifications_bp)

# User identity
# ------------------------------
login_exempt_routes = ["static"]


@app.before_request
def require_user():
    """Every route needs a known user, except the ones listed in login_exempt_routes

    Sign-in happens outside this service; it stores the user id in the session.
    The matching User is loaded into g.user for the services to authorize against.

    Returns:
        A 401 JSON response when the session carries no known user
    """
    user_id = session.get("user_id")
    g.user = db.session.get(User, user_id) if user_id else None
    if g.user is None and request.endpoint not in login_exempt_routes:
        logging.info("Rejected anonymous request to %s", request.path)
        return json_error("User authentication required.", error=ErrorKind.UNAUTHORIZED, status=401)


# Application Execution
# ------------------------------
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True)
