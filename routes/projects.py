"""Project CRUD endpoints. Every route requires a bearer token."""
from __future__ import annotations

from flask import Blueprint, jsonify, request

from database import db
from errors import NotFound
from forms import ProjectForm
from routes import authenticate_request, json_payload, validate_form
from services import project_service

projects_bp = Blueprint("projects", __name__, url_prefix="/api/projects")

PROJECT_NOT_FOUND_MESSAGE = "Project not found."


@projects_bp.before_app_request
def require_token():
    """Rejects any request under the projects prefix without a valid token.

    Runs before URL matching errors are raised, so unknown paths and
    methods under the prefix answer 401 rather than 404 or 405.
    """
    prefix = projects_bp.url_prefix
    if request.path == prefix or request.path.startswith(prefix + "/"):
        authenticate_request()


@projects_bp.route("", methods=["GET"])
def list_projects():
    filters = {
        "status": request.args.get("status", "").strip(),
        "search": request.args.get("search", "").strip(),
    }
    projects = project_service.list_projects(db.session, filters)
    return jsonify([project.to_dict() for project in projects])


@projects_bp.route("/<int:project_id>", methods=["GET"])
def get_project(project_id: int):
    project = project_service.get_project(db.session, project_id)
    if project is None:
        raise NotFound(PROJECT_NOT_FOUND_MESSAGE)
    return jsonify(project.to_dict())


@projects_bp.route("", methods=["POST"])
def create_project():
    form = validate_form(ProjectForm, json_payload())
    project = project_service.create_project(db.session, form.project_data())
    return jsonify(project.to_dict()), 201


@projects_bp.route("/<int:project_id>", methods=["PUT"])
def update_project(project_id: int):
    """Replace all fields of a project. Fields left out are cleared."""
    form = validate_form(ProjectForm, json_payload())
    project = project_service.update_project(db.session, project_id, form.project_data())
    if project is None:
        raise NotFound(PROJECT_NOT_FOUND_MESSAGE)
    return jsonify(project.to_dict())


@projects_bp.route("/<int:project_id>", methods=["DELETE"])
def delete_project(project_id: int):
    if not project_service.delete_project(db.session, project_id):
        raise NotFound(PROJECT_NOT_FOUND_MESSAGE)
    return jsonify({"deleted": True, "project_id": project_id})
