"""
Integration tests for the Timekeeper API.

Tests complete workflows across multiple endpoints and the full stack
(routes → services → repositories → database).
"""

from fastapi.testclient import TestClient

from timekeeper.database import get_db
from timekeeper.main import app
from tests.conftest import FULL_WEEK


class TestCompleteTenantWorkflow:
    """A new organisation from sign-up to an approved week"""

    def test_signup_to_approval(self, client):
        # Step 1: Owner registers a new organisation
        response = client.post(
            "/api/register",
            json={
                "username": "founder",
                "email": "founder@globex.example.com",
                "password": "correct-horse-battery",
                "first_name": "Hank",
                "last_name": "Scorpio",
                "tenant_name": "Globex",
                "tenant_slug": "globex",
            },
        )
        assert response.status_code == 201
        owner_headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
        assert response.json()["is_new_tenant"] is True

        # Step 2: An employee signs up into the tenant addressed by header
        response = client.post(
            "/api/register",
            headers={"X-Tenant-Slug": "globex"},
            json={
                "username": "homer",
                "email": "homer@globex.example.com",
                "password": "donuts-forever",
                "first_name": "Homer",
                "last_name": "Simpson",
            },
        )
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "user"

        # Step 3: Employee logs in through the tenant subdomain
        response = client.post(
            "/api/login",
            headers={"Host": "globex.timekeeper.test"},
            json={"username": "homer", "password": "donuts-forever"},
        )
        assert response.status_code == 200
        employee_headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

        # Step 4: Owner sets up a project with a task
        project = client.post(
            "/api/projects", headers=owner_headers, json={"name": "Doomsday Device", "hourly_rate": 200}
        ).json()
        task = client.post(
            "/api/tasks",
            headers=owner_headers,
            json={"project_id": project["id"], "name": "Assembly"},
        ).json()

        # Step 5: Employee fills in a week (any day opens the Monday week)
        sheet = client.get("/api/timesheets/week/2024-03-06", headers=employee_headers).json()
        assert sheet["week_start_date"] == "2024-03-04"
        for day, hours in FULL_WEEK.items():
            response = client.post(
                "/api/timesheet-entries",
                headers=employee_headers,
                json={
                    "timesheet_id": sheet["id"],
                    "project_id": project["id"],
                    "task_id": task["id"],
                    f"{day}_hours": hours,
                },
            )
            assert response.status_code == 201

        # Step 6: Submit, approve, lock
        submitted = client.post(f"/api/timesheets/{sheet['id']}/submit", headers=employee_headers)
        assert submitted.json()["total_hours"] == 40.0
        assert client.get("/api/approvals", headers=owner_headers).json()["total"] == 1

        approved = client.post(f"/api/timesheets/{sheet['id']}/approve", headers=owner_headers)
        assert approved.json()["status"] == "approved"
        locked = client.post(f"/api/timesheets/{sheet['id']}/lock", headers=owner_headers)
        assert locked.json()["status"] == "locked"

        # Step 7: Dashboard reflects the approved week
        stats = client.get("/api/dashboard/stats", headers=owner_headers).json()
        assert stats == {
            "total_hours": 40.0,
            "active_projects": 1,
            "team_members": 2,
            "pending_approvals": 0,
        }

        # Step 8: Logging out ends the employee's session
        assert client.post("/api/logout", headers=employee_headers).status_code == 200
        assert client.get("/api/timesheets", headers=employee_headers).status_code == 401


class TestTenantIsolationWorkflow:
    """Two tenants side by side never see each other's data"""

    def test_acme_and_beta(self, client, alice_headers, bob_headers, eve_headers, victor_headers, acme_project, beta_project):
        acme_sheet = client.get("/api/timesheets/week/2024-01-01", headers=alice_headers).json()
        client.post(
            "/api/timesheet-entries",
            headers=alice_headers,
            json={"timesheet_id": acme_sheet["id"], "project_id": acme_project["id"], "monday_hours": 8},
        )

        # Eve cannot log time against acme's project on her own sheet
        beta_sheet = client.get("/api/timesheets/week/2024-01-01", headers=eve_headers).json()
        response = client.post(
            "/api/timesheet-entries",
            headers=eve_headers,
            json={"timesheet_id": beta_sheet["id"], "project_id": acme_project["id"], "monday_hours": 8},
        )
        assert response.status_code == 404

        # Victor sees neither acme's sheet nor its pending approvals
        client.post(f"/api/timesheets/{acme_sheet['id']}/submit", headers=alice_headers)
        assert client.get("/api/approvals", headers=victor_headers).json()["total"] == 0
        assert client.get("/api/approvals", headers=bob_headers).json()["total"] == 1
        assert (
            client.post(f"/api/timesheets/{acme_sheet['id']}/approve", headers=victor_headers).status_code
            == 404
        )

        # Project listings are disjoint
        acme_ids = {p["id"] for p in client.get("/api/projects", headers=alice_headers).json()["projects"]}
        beta_ids = {p["id"] for p in client.get("/api/projects", headers=eve_headers).json()["projects"]}
        assert acme_ids == {acme_project["id"]}
        assert beta_ids == {beta_project["id"]}


class TestUnhandledErrors:
    """Unexpected failures are reported as a generic 500"""

    def test_internal_error_is_generic(self, db_session):
        def broken_db():
            raise RuntimeError("database exploded")
            yield  # pragma: no cover

        app.dependency_overrides[get_db] = broken_db
        try:
            with TestClient(app, raise_server_exceptions=False) as test_client:
                response = test_client.get("/api/tenant/validate/acme")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
        assert "exploded" not in response.text
