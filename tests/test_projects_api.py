import json
import unittest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app import app, db
from models.project import Project
from tests.utils.api import ApiTestCase


class ProjectRoutesTestCase(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.user_id = self.create_user()
        self.headers = self.auth_headers(self.token_for(self.user_id))

    def _create(self, **overrides):
        payload = {
            "name": "Website Redesign",
            "status": "active",
            "deadline": "2025-01-01",
            "assigned_team_member": "Alice Smith",
            "budget": 1500.5,
        }
        payload.update(overrides)
        return self.client.post("/api/projects", json=payload, headers=self.headers)

    def test_project_routes_require_token(self):
        requests = [
            ("get", "/api/projects"),
            ("get", "/api/projects/1"),
            ("post", "/api/projects"),
            ("put", "/api/projects/1"),
            ("delete", "/api/projects/1"),
        ]
        for method, path in requests:
            response = getattr(self.client, method)(path)
            self.assertEqual(response.status_code, 401, f"{method.upper()} {path}")
            self.assertIn("error", response.get_json())

    def test_unmatched_project_paths_still_require_token(self):
        requests = [
            ("get", "/api/projects/abc"),
            ("get", "/api/projects/"),
            ("patch", "/api/projects/1"),
            ("get", "/api/projects/1/members"),
        ]
        for method, path in requests:
            response = getattr(self.client, method)(path)
            self.assertEqual(response.status_code, 401, f"{method.upper()} {path}")

    def test_unmatched_project_paths_with_token_are_not_found(self):
        response = self.client.get("/api/projects/abc", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.get_json())
        response = self.client.patch("/api/projects/1", headers=self.headers)
        self.assertEqual(response.status_code, 405)

    def test_expired_token_is_rejected_everywhere(self):
        expired = self.auth_headers(self.token_for(self.user_id, expires_in=-1))
        for path in ("/api/projects", "/api/projects/1", "/api/auth/me"):
            response = self.client.get(path, headers=expired)
            self.assertEqual(response.status_code, 401, path)

    def test_create_and_fetch(self):
        response = self._create()
        self.assertEqual(response.status_code, 201)
        created = response.get_json()
        self.assertEqual(created["name"], "Website Redesign")
        self.assertEqual(created["deadline"], "2025-01-01")
        self.assertEqual(created["budget"], 1500.5)
        self.assertIsNotNone(created["created_at"])

        response = self.client.get(f"/api/projects/{created['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), created)

    def test_create_with_invalid_body_returns_400(self):
        response = self.client.post(
            "/api/projects",
            json={"status": "all", "deadline": "tomorrow", "budget": "-5"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)
        errors = response.get_json()["errors"]
        for field in ("name", "status", "deadline", "budget"):
            self.assertIn(field, errors)
        with app.app_context():
            self.assertEqual(Project.query.count(), 0)

    def test_create_rejects_budget_the_column_cannot_hold(self):
        for budget in ("1e400", "Infinity", "10000000000", 1000.555):
            response = self._create(budget=budget)
            self.assertEqual(response.status_code, 400, budget)
            self.assertIn("budget", response.get_json()["errors"])

        response = self.client.get("/api/projects", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.get_data(as_text=True)), [])

    def test_budget_round_trips_unchanged(self):
        created = self._create(budget="9999999999.99").get_json()
        self.assertEqual(created["budget"], 9999999999.99)
        response = self.client.get(f"/api/projects/{created['id']}", headers=self.headers)
        self.assertEqual(response.get_json()["budget"], 9999999999.99)

    def test_storage_failure_returns_500(self):
        failure = OperationalError("SELECT", {}, Exception("database is unavailable"))
        with patch("sqlalchemy.orm.Query.all", side_effect=failure):
            with self.assertLogs(level="ERROR"):
                response = self.client.get("/api/projects", headers=self.headers)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json(), {"error": "An internal error has occurred."})

    def test_list_with_filters(self):
        self._create(name="Website Redesign", status="active", assigned_team_member="Alice Smith")
        self._create(name="Mobile App", status="completed", assigned_team_member="Bob")
        self._create(name="Data Pipeline", status="active", assigned_team_member="Carol")

        response = self.client.get("/api/projects", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [p["name"] for p in response.get_json()],
            ["Data Pipeline", "Mobile App", "Website Redesign"],
        )

        response = self.client.get("/api/projects?status=active", headers=self.headers)
        self.assertEqual({p["status"] for p in response.get_json()}, {"active"})
        self.assertEqual(len(response.get_json()), 2)

        response = self.client.get("/api/projects?status=all&search=ALICE", headers=self.headers)
        self.assertEqual([p["name"] for p in response.get_json()], ["Website Redesign"])

    def test_get_missing_project_returns_404(self):
        response = self.client.get("/api/projects/999", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json(), {"error": "Project not found."})

    def test_update_replaces_project(self):
        project_id = self._create().get_json()["id"]
        response = self.client.put(
            f"/api/projects/{project_id}",
            json={"name": "Website v2", "status": "on_hold"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        updated = response.get_json()
        self.assertEqual(updated["id"], project_id)
        self.assertEqual(updated["name"], "Website v2")
        self.assertEqual(updated["status"], "on_hold")
        self.assertIsNone(updated["deadline"])
        self.assertIsNone(updated["assigned_team_member"])
        self.assertIsNone(updated["budget"])

    def test_update_missing_project_returns_404(self):
        response = self.client.put(
            "/api/projects/999",
            json={"name": "Nothing", "status": "active"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 404)

    def test_delete_project(self):
        project_id = self._create().get_json()["id"]
        response = self.client.delete(f"/api/projects/{project_id}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {"deleted": True, "project_id": project_id})

        response = self.client.delete(f"/api/projects/{project_id}", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        with app.app_context():
            self.assertIsNone(db.session.get(Project, project_id))


if __name__ == "__main__":
    unittest.main()
