import pytest

from timekeeper.models.timesheet import DAY_FIELDS, TimesheetEntry
from tests.conftest import FULL_WEEK, add_entry, week_of


def read_sheet(client, headers, timesheet_id):
    response = client.get(f"/api/timesheets/{timesheet_id}", headers=headers)
    assert response.status_code == 200
    return response.json()


class TestEntryTotal:
    """Row total is the sum of the seven day columns"""

    def test_compute_total(self):
        entry = TimesheetEntry(monday_hours=7.5, tuesday_hours=8, sunday_hours=0.25)
        assert entry.compute_total() == 15.75
        assert entry.total_hours == 15.75

    def test_missing_days_count_as_zero(self):
        assert TimesheetEntry().compute_total() == 0


class TestCreateEntry:
    """Tests for POST /api/timesheet-entries"""

    def test_entry_total_and_timesheet_totals(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        entry = add_entry(client, alice_headers, sheet["id"], acme_project["id"], **FULL_WEEK)
        assert entry["total_hours"] == 40.0

        data = read_sheet(client, alice_headers, sheet["id"])
        assert data["total_hours"] == 40.0
        assert data["billable_hours"] == 40.0
        assert data["overtime_hours"] == 0

    def test_non_billable_hours_excluded_from_billable(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=6)
        response = client.post(
            "/api/timesheet-entries",
            headers=alice_headers,
            json={
                "timesheet_id": sheet["id"],
                "project_id": acme_project["id"],
                "monday_hours": 2,
                "is_billable": False,
            },
        )
        assert response.status_code == 201

        data = read_sheet(client, alice_headers, sheet["id"])
        assert data["total_hours"] == 8.0
        assert data["billable_hours"] == 6.0

    def test_overtime_above_standard_week(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], **FULL_WEEK)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], saturday=5.5)

        data = read_sheet(client, alice_headers, sheet["id"])
        assert data["total_hours"] == 45.5
        assert data["overtime_hours"] == 5.5

    def test_entry_with_task(self, client, alice_headers, acme_project, acme_task):
        sheet = week_of(client, alice_headers)
        response = client.post(
            "/api/timesheet-entries",
            headers=alice_headers,
            json={
                "timesheet_id": sheet["id"],
                "project_id": acme_project["id"],
                "task_id": acme_task.id,
                "wednesday_hours": 3,
            },
        )
        assert response.status_code == 201
        assert response.json()["task_id"] == acme_task.id

    def test_task_from_another_project(self, client, alice_headers, bob_headers, acme_task):
        other = client.post("/api/projects", headers=bob_headers, json={"name": "Internal"}).json()
        sheet = week_of(client, alice_headers)
        response = client.post(
            "/api/timesheet-entries",
            headers=alice_headers,
            json={
                "timesheet_id": sheet["id"],
                "project_id": other["id"],
                "task_id": acme_task.id,
                "monday_hours": 1,
            },
        )
        assert response.status_code == 400

    def test_project_of_other_tenant(self, client, alice_headers, beta_project):
        sheet = week_of(client, alice_headers)
        response = client.post(
            "/api/timesheet-entries",
            headers=alice_headers,
            json={"timesheet_id": sheet["id"], "project_id": beta_project["id"], "monday_hours": 1},
        )
        assert response.status_code == 404

    @pytest.mark.parametrize("hours", [-1, 24.5])
    def test_day_hours_out_of_range(self, client, alice_headers, acme_project, hours):
        sheet = week_of(client, alice_headers)
        response = client.post(
            "/api/timesheet-entries",
            headers=alice_headers,
            json={"timesheet_id": sheet["id"], "project_id": acme_project["id"], "monday_hours": hours},
        )
        assert response.status_code == 400

    def test_cannot_add_to_someone_elses_timesheet(self, client, alice_headers, bob_headers, acme_project):
        sheet = week_of(client, alice_headers)
        response = client.post(
            "/api/timesheet-entries",
            headers=bob_headers,
            json={"timesheet_id": sheet["id"], "project_id": acme_project["id"], "monday_hours": 1},
        )
        assert response.status_code == 403

    def test_cannot_add_to_other_tenant_timesheet(self, client, alice_headers, eve_headers, acme_project):
        sheet = week_of(client, alice_headers)
        response = client.post(
            "/api/timesheet-entries",
            headers=eve_headers,
            json={"timesheet_id": sheet["id"], "project_id": acme_project["id"], "monday_hours": 1},
        )
        assert response.status_code == 404

    def test_submitted_timesheet_is_frozen(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=8)
        client.post(f"/api/timesheets/{sheet['id']}/submit", headers=alice_headers)

        response = client.post(
            "/api/timesheet-entries",
            headers=alice_headers,
            json={"timesheet_id": sheet["id"], "project_id": acme_project["id"], "tuesday_hours": 8},
        )
        assert response.status_code == 400
        assert read_sheet(client, alice_headers, sheet["id"])["total_hours"] == 8.0


class TestUpdateDeleteEntry:
    """Tests for PUT/DELETE /api/timesheet-entries/{id}"""

    def test_update_recomputes(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        entry = add_entry(client, alice_headers, sheet["id"], acme_project["id"], **FULL_WEEK)

        response = client.put(
            f"/api/timesheet-entries/{entry['id']}",
            headers=alice_headers,
            json={"friday_hours": 4, "description": "Half day Friday"},
        )
        assert response.status_code == 200
        assert response.json()["total_hours"] == 36.0
        assert response.json()["monday_hours"] == 8
        assert read_sheet(client, alice_headers, sheet["id"])["total_hours"] == 36.0

    def test_update_billable_flag(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        entry = add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=5)
        client.put(
            f"/api/timesheet-entries/{entry['id']}", headers=alice_headers, json={"is_billable": False}
        )
        data = read_sheet(client, alice_headers, sheet["id"])
        assert data["total_hours"] == 5.0
        assert data["billable_hours"] == 0

    def test_delete_recomputes(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        keep = add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=3)
        drop = add_entry(client, alice_headers, sheet["id"], acme_project["id"], tuesday=5)

        response = client.delete(f"/api/timesheet-entries/{drop['id']}", headers=alice_headers)
        assert response.status_code == 204

        data = read_sheet(client, alice_headers, sheet["id"])
        assert [e["id"] for e in data["entries"]] == [keep["id"]]
        assert data["total_hours"] == 3.0

    def test_other_user_cannot_update(self, client, alice_headers, bob_headers, acme_project):
        sheet = week_of(client, alice_headers)
        entry = add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=3)
        response = client.put(
            f"/api/timesheet-entries/{entry['id']}", headers=bob_headers, json={"monday_hours": 9}
        )
        assert response.status_code == 403

    def test_other_tenant_cannot_delete(self, client, alice_headers, eve_headers, acme_project):
        sheet = week_of(client, alice_headers)
        entry = add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=3)
        response = client.delete(f"/api/timesheet-entries/{entry['id']}", headers=eve_headers)
        assert response.status_code == 404

    def test_approved_entry_cannot_change(self, client, alice_headers, bob_headers, acme_project):
        sheet = week_of(client, alice_headers)
        entry = add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=3)
        client.post(f"/api/timesheets/{sheet['id']}/submit", headers=alice_headers)
        client.post(f"/api/timesheets/{sheet['id']}/approve", headers=bob_headers)

        update = client.put(
            f"/api/timesheet-entries/{entry['id']}", headers=alice_headers, json={"monday_hours": 9}
        )
        delete = client.delete(f"/api/timesheet-entries/{entry['id']}", headers=alice_headers)
        assert update.status_code == 400
        assert delete.status_code == 400


class TestDailyLimit:
    """A day adds up to at most 24 hours across all entries of a timesheet"""

    def test_entries_may_fill_a_day(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=16)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=8)
        assert read_sheet(client, alice_headers, sheet["id"])["total_hours"] == 24.0

    def test_new_entry_overflowing_a_day(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=20)
        response = client.post(
            "/api/timesheet-entries",
            headers=alice_headers,
            json={"timesheet_id": sheet["id"], "project_id": acme_project["id"], "monday_hours": 4.5},
        )
        assert response.status_code == 400
        assert "Monday" in response.json()["detail"]
        assert read_sheet(client, alice_headers, sheet["id"])["total_hours"] == 20.0

    def test_many_full_entries_cannot_overflow_weekly_totals(self, client, alice_headers, acme_project):
        full_days = {day.removesuffix("_hours"): 24 for day in DAY_FIELDS}
        sheet = week_of(client, alice_headers)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], **full_days)
        for _ in range(5):
            response = client.post(
                "/api/timesheet-entries",
                headers=alice_headers,
                json={"timesheet_id": sheet["id"], "project_id": acme_project["id"], "sunday_hours": 24},
            )
            assert response.status_code == 400
        assert read_sheet(client, alice_headers, sheet["id"])["total_hours"] == 168.0

    def test_update_counts_other_entries_only(self, client, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        entry = add_entry(client, alice_headers, sheet["id"], acme_project["id"], tuesday=10)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], tuesday=10)

        allowed = client.put(
            f"/api/timesheet-entries/{entry['id']}", headers=alice_headers, json={"tuesday_hours": 14}
        )
        refused = client.put(
            f"/api/timesheet-entries/{entry['id']}", headers=alice_headers, json={"tuesday_hours": 14.5}
        )
        assert allowed.status_code == 200
        assert refused.status_code == 400
        assert read_sheet(client, alice_headers, sheet["id"])["total_hours"] == 24.0


class TestTotalsInvariant:
    """Timesheet total always equals the sum of its entry totals"""

    def test_after_mixed_edits(self, client, db_session, alice_headers, acme_project):
        sheet = week_of(client, alice_headers)
        a = add_entry(client, alice_headers, sheet["id"], acme_project["id"], monday=1.25, sunday=2)
        b = add_entry(client, alice_headers, sheet["id"], acme_project["id"], **FULL_WEEK)
        add_entry(client, alice_headers, sheet["id"], acme_project["id"], thursday=0.5)
        client.put(f"/api/timesheet-entries/{a['id']}", headers=alice_headers, json={"saturday_hours": 3})
        client.delete(f"/api/timesheet-entries/{b['id']}", headers=alice_headers)

        data = read_sheet(client, alice_headers, sheet["id"])
        expected = sum(
            sum(e[field] for field in DAY_FIELDS) for e in data["entries"]
        )
        assert data["total_hours"] == pytest.approx(expected)
        assert data["total_hours"] == pytest.approx(6.75)
