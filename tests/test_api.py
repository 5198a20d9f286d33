"""HTTP tests for the FastAPI routers."""

import pytest

EDITION = {
    "code": "2405-A",
    "training_type": "GLR",
    "start_date": "2024-05-20",
    "tasks_start_date": "2024-04-15",
}


@pytest.fixture
def edition(client):
    response = client.post("/api/editions/with-template", json=EDITION)
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


class TestEditionEndpoints:
    def test_create_and_get(self, client):
        created = client.post("/api/editions", json=EDITION)
        assert created.status_code == 201
        body = created.json()
        assert body["code"] == "2405-A"
        assert body["training_type"] == "GLR"
        assert body["current_week"] == 1

        fetched = client.get(f"/api/editions/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["start_date"] == "2024-05-20"

    def test_with_template_seeds_tasks(self, client, edition):
        tasks = client.get(f"/api/editions/{edition['id']}/tasks").json()
        assert len(tasks) == 26
        assert tasks[0]["week"] == "Week -5"
        assert tasks[0]["due_date"] == "2024-04-08"

    def test_week_filter(self, client, edition):
        tasks = client.get(f"/api/editions/{edition['id']}/tasks", params={"week": "8"}).json()
        assert [t["task_code"] for t in tasks] == ["W08T01", "W08T02", "W08T03"]

    def test_duplicate_code(self, client, edition):
        response = client.post("/api/editions", json=EDITION)
        assert response.status_code == 409
        assert "2405-A" in response.json()["message"]

    def test_invalid_payload(self, client):
        response = client.post("/api/editions", json={**EDITION, "training_type": "ALL"})
        assert response.status_code == 400
        assert response.json()["message"].startswith("Validation error")

    def test_code_variant_mismatch(self, client):
        response = client.post("/api/editions", json={**EDITION, "code": "2405-B"})
        assert response.status_code == 400
        assert "does not match training type GLR" in response.json()["message"]

    def test_unknown_template_kind(self, client):
        response = client.post("/api/editions/with-template", json={**EDITION, "template_kind": "other"})
        assert response.status_code == 400

    def test_missing(self, client):
        assert client.get("/api/editions/999").status_code == 404
        assert client.delete("/api/editions/999").status_code == 404
        assert client.get("/api/editions/999/tasks").status_code == 404

    def test_patch(self, client, edition):
        response = client.patch(f"/api/editions/{edition['id']}", json={"current_week": 3})
        assert response.status_code == 200
        assert response.json()["current_week"] == 3

    def test_patch_start_date_rejected(self, client, edition):
        response = client.patch(f"/api/editions/{edition['id']}", json={"start_date": "2024-06-03"})
        assert response.status_code == 400

    def test_archive_and_restore(self, client, edition):
        assert client.patch(f"/api/editions/{edition['id']}/archive").json()["archived"] is True
        assert client.get("/api/editions").json() == []
        assert len(client.get("/api/editions", params={"include_archived": True}).json()) == 1
        assert client.patch(f"/api/editions/{edition['id']}/restore").json()["archived"] is False

    def test_duplicate(self, client, edition):
        response = client.post(f"/api/editions/{edition['id']}/duplicate", json={
            "code": "2409-A",
            "training_type": "GLR",
            "start_date": "2024-09-16",
            "tasks_start_date": "2024-08-12",
        })
        assert response.status_code == 201
        copy = response.json()
        tasks = client.get(f"/api/editions/{copy['id']}/tasks", params={"week": "Week 2"}).json()
        assert tasks[0]["due_date"] == "2024-09-16"
        assert {t["status"] for t in tasks} == {"Not Started"}

    def test_duplicate_code_taken(self, client, edition):
        response = client.post(f"/api/editions/{edition['id']}/duplicate", json=EDITION)
        assert response.status_code == 409

    def test_delete(self, client, edition):
        assert client.delete(f"/api/editions/{edition['id']}").status_code == 204
        assert client.get(f"/api/editions/{edition['id']}").status_code == 404
        assert client.get("/api/tasks").json() == []

    def test_week_overview(self, client, edition):
        weeks = client.get(f"/api/editions/{edition['id']}/weeks").json()
        assert weeks[0]["week"] == "Week -5"
        assert sum(w["task_count"] for w in weeks) == 26

    def test_refresh_week(self, client, edition):
        response = client.post(f"/api/editions/{edition['id']}/refresh-week")
        assert response.status_code == 200
        assert -5 <= response.json()["current_week"] <= 8


class TestTaskEndpoints:
    def test_create_and_complete(self, client, edition):
        created = client.post("/api/tasks", json={
            "edition_id": edition["id"],
            "week": "3",
            "name": "Call the venue",
            "training_type": "GLR",
        })
        assert created.status_code == 201
        task = created.json()
        assert task["task_code"] == "W03T03"
        assert task["week"] == "Week 3"

        done = client.patch(f"/api/tasks/{task['id']}", json={"status": "Done"}).json()
        assert done["status"] == "Done"
        assert done["completion_date"] is not None

    def test_invalid_status(self, client, edition):
        task_id = client.get(f"/api/editions/{edition['id']}/tasks").json()[0]["id"]
        response = client.patch(f"/api/tasks/{task_id}", json={"status": "Finished"})
        assert response.status_code == 400

    def test_bad_week(self, client, edition):
        response = client.post("/api/tasks", json={
            "edition_id": edition["id"], "week": "Week 42", "name": "x", "training_type": "GLR"
        })
        assert response.status_code == 400
        assert "Week must be between" in response.json()["message"]

    def test_unknown_edition(self, client):
        response = client.post("/api/tasks", json={
            "edition_id": 999, "week": "1", "name": "x", "training_type": "GLR"
        })
        assert response.status_code == 404

    def test_delete(self, client, edition):
        task_id = client.get(f"/api/editions/{edition['id']}/tasks").json()[0]["id"]
        assert client.delete(f"/api/tasks/{task_id}").status_code == 204
        assert client.get(f"/api/tasks/{task_id}").status_code == 404
        assert client.delete(f"/api/tasks/{task_id}").status_code == 404


class TestTemplateAndActivityEndpoints:
    def test_template_kinds(self, client):
        kinds = client.get("/api/templates").json()
        assert {k["kind"]: k["task_count"] for k in kinds} == {"default": 26, "glr": 26, "slr": 26}

    def test_template_detail(self, client):
        tasks = client.get("/api/templates/slr").json()
        assert tasks[0]["week"] == "Week -5"
        assert {t["training_type"] for t in tasks} == {"SLR"}
        assert client.get("/api/templates/other").status_code == 404

    def test_template_week(self, client):
        tasks = client.get("/api/templates/glr", params={"week": "2"}).json()
        assert [t["task_code"] for t in tasks] == ["W02T01", "W02T02"]
        assert tasks[0]["name"] == "Guided training session for Week 2"

    def test_audit_logs(self, client, edition):
        client.patch(f"/api/editions/{edition['id']}/archive")
        logs = client.get("/api/audit-logs", params={"entity_type": "edition"}).json()
        assert [log["action"] for log in logs] == ["update", "create"]

    def test_notifications(self, client):
        assert client.get("/api/notifications", params={"user_id": 1}).json() == []
        assert client.get("/api/notifications/count", params={"user_id": 1}).json() == {"count": 0}
        assert client.post("/api/notifications/999/read").status_code == 404
