"""Data access for projects.

Every function receives the SQLAlchemy session to run against. Queries
are built from SQLAlchemy expressions so filter values are always sent
as bound parameters.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from errors import InternalError, InvalidInput
from models.project import BUDGET_PLACES, MAX_BUDGET, STATUS_ALL, Project

MUTABLE_FIELDS = ("name", "status", "deadline", "assigned_team_member", "budget")
LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _coerce_deadline(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise InvalidInput("Deadline must be a date in YYYY-MM-DD format.") from exc


def _coerce_budget(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidInput("Budget must be a number.")
    try:
        budget = Decimal(str(value))
    except InvalidOperation as exc:
        raise InvalidInput("Budget must be a number.") from exc
    if not budget.is_finite():
        raise InvalidInput("Budget must be a number.")
    if budget < 0 or budget > MAX_BUDGET:
        raise InvalidInput(f"Budget must be between 0 and {MAX_BUDGET}.")
    if budget.normalize().as_tuple().exponent < -BUDGET_PLACES:
        raise InvalidInput(f"Budget cannot have more than {BUDGET_PLACES} decimal places.")
    return budget


def _project_values(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a full set of project fields and coerce them to column types."""
    if not isinstance(data, Mapping):
        raise InvalidInput("Project data must be an object.")

    name = str(data.get("name") or "").strip()
    status = str(data.get("status") or "").strip()
    missing = [field for field, value in (("name", name), ("status", status)) if not value]
    if missing:
        raise InvalidInput(
            "Missing required fields: " + ", ".join(missing),
            errors={field: ["This field is required."] for field in missing},
        )
    if status == STATUS_ALL:
        raise InvalidInput("'all' is not a valid project status.")

    assignee = data.get("assigned_team_member")
    assignee = str(assignee).strip() if assignee is not None else None

    return {
        "name": name,
        "status": status,
        "deadline": _coerce_deadline(data.get("deadline")),
        "assigned_team_member": assignee or None,
        "budget": _coerce_budget(data.get("budget")),
    }


def list_projects(session, filters: Optional[Mapping[str, Any]] = None) -> List[Project]:
    """Return projects matching ``status`` and ``search``, newest first.

    ``status`` is an exact match and is ignored when empty or ``"all"``.
    ``search`` is a case-insensitive substring match on the name or the
    assigned team member.
    """
    filters = filters or {}
    query = session.query(Project)

    status = filters.get("status")
    if status and status != STATUS_ALL:
        query = query.filter(Project.status == status)

    search = filters.get("search")
    if search:
        pattern = f"%{_escape_like(search)}%"
        query = query.filter(
            or_(
                Project.name.ilike(pattern, escape=LIKE_ESCAPE),
                Project.assigned_team_member.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    try:
        return query.order_by(Project.created_at.desc(), Project.id.desc()).all()
    except SQLAlchemyError as exc:
        logging.exception("Error fetching projects")
        raise InternalError() from exc


def get_project(session, project_id: int) -> Optional[Project]:
    try:
        return session.get(Project, project_id)
    except SQLAlchemyError as exc:
        logging.exception("Error fetching project %s", project_id)
        raise InternalError() from exc


def create_project(session, data: Mapping[str, Any]) -> Project:
    project = Project(**_project_values(data))
    try:
        session.add(project)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logging.exception("Error creating project")
        raise InternalError() from exc
    return project


def update_project(session, project_id: int, data: Mapping[str, Any]) -> Optional[Project]:
    """Replace every mutable field of the project.

    Optional fields left out of ``data`` are cleared, the caller has to
    send the complete project.
    """
    values = _project_values(data)
    project = get_project(session, project_id)
    if project is None:
        return None

    for field in MUTABLE_FIELDS:
        setattr(project, field, values[field])
    # no UPDATE is emitted when every value is unchanged
    project.updated_at = datetime.utcnow()
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logging.exception("Error updating project %s", project_id)
        raise InternalError() from exc
    return project


def delete_project(session, project_id: int) -> bool:
    try:
        deleted = session.query(Project).filter(Project.id == project_id).delete(
            synchronize_session="fetch"
        )
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logging.exception("Error deleting project %s", project_id)
        raise InternalError() from exc
    return deleted > 0
