"""A Project tracked by the team.

A Project has a name, a status, an optional deadline, an optional
assigned team member and an optional budget.
The id never changes once assigned.
Deleting a Project removes the row.

"""
from datetime import datetime
from decimal import Decimal

from database import db

STATUS_ALL = "all"
# budget is stored as numeric(12, 2)
BUDGET_PLACES = 2
MAX_BUDGET = Decimal("9999999999.99")


class Project(db.Model):
    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(50), nullable=False, index=True)
    deadline = db.Column(db.Date, nullable=True)
    assigned_team_member = db.Column(db.String(255), nullable=True)
    budget = db.Column(db.Numeric(12, BUDGET_PLACES), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "assigned_team_member": self.assigned_team_member,
            "budget": float(self.budget) if self.budget is not None else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Project {self.name}>"
