# (c) Copyright Datacraft, 2026
"""Tests for the quality check REST endpoints."""
import pytest
from fastapi.testclient import TestClient

from archaudit.app import app
from archaudit.core.features.audit import Task, TaskState, get_task_manager
from conftest import SERVICE_URL

FORMAT_RULES = {"formatRules": {"title": {"nonEmpty": True}}}


@pytest.fixture
def client(manager):
	app.dependency_overrides[get_task_manager] = lambda: manager
	# no context manager: the lifespan would build the global manager
	yield TestClient(app)
	app.dependency_overrides.clear()


def submit(client, rows, rules=FORMAT_RULES, collection_id="c1"):
	return client.post("/quality-checks", json={
		"collection_id": collection_id,
		"rows": rows,
		"rules": rules,
	})


class TestQualityCheckRouter:
	def test_submit_and_fetch_result(self, client, manager):
		response = submit(client, [{"title": "a"}, {"title": ""}])

		assert response.status_code == 202
		task_id = response.json()["id"]
		assert response.json()["collection_id"] == "c1"
		manager.wait(task_id, timeout=5)

		status_response = client.get(f"/quality-checks/{task_id}")
		assert status_response.status_code == 200
		assert status_response.json()["state"] == "completed"
		assert status_response.json()["progress"] == 100.0

		result = client.get(f"/quality-checks/{task_id}/result")
		assert result.status_code == 200
		body = result.json()
		assert body["summary"]["failed_rows"] == 1
		assert body["summary"]["format_errors"] == 1
		assert body["result"]["findings"][0]["row_index"] == 1

	def test_list(self, client, manager):
		task_id = submit(client, [{"title": "a"}]).json()["id"]
		manager.wait(task_id, timeout=5)

		response = client.get("/quality-checks", params={"collection_id": "c1"})

		assert response.status_code == 200
		assert response.json()["total"] == 1
		assert response.json()["items"][0]["id"] == task_id
		assert client.get("/quality-checks", params={"collection_id": "c2"}).json()["total"] == 0

	def test_no_rules(self, client):
		response = submit(client, [{"title": "a"}], rules={})
		assert response.status_code == 400
		assert response.json()["error_key"] == "error-no-rules-configured"

	def test_invalid_body(self, client):
		response = client.post("/quality-checks", json={"collection_id": "", "rules": {}})
		assert response.status_code == 422

	def test_unknown_task(self, client):
		response = client.get("/quality-checks/qc-missing-1")
		assert response.status_code == 404
		assert response.json() == {
			"code": "error",
			"error_key": "error-task-not-found",
			"message": "Task qc-missing-1 not found",
		}

	def test_pause_finished_task(self, client, manager):
		task_id = submit(client, [{"title": "a"}]).json()["id"]
		manager.wait(task_id, timeout=5)

		response = client.post(f"/quality-checks/{task_id}/pause")

		assert response.status_code == 409
		assert response.json()["error_key"] == "error-invalid-transition"

	def test_result_not_ready(self, client, manager):
		task = Task(id="qc-c5-1", collection_id="c5", state=TaskState.RUNNING)
		manager.registry.register(task)

		response = client.get(f"/quality-checks/{task.id}/result")

		assert response.status_code == 409
		assert response.json()["error_key"] == "error-result-not-ready"

	def test_cancel_pending(self, client, manager):
		task = Task(id="qc-c6-1", collection_id="c6")
		manager.registry.register(task)

		response = client.post(f"/quality-checks/{task.id}/cancel")

		assert response.status_code == 200
		assert response.json()["state"] == "cancelled"

	def test_service_health(self, client):
		response = client.get("/quality-checks/service/health")
		assert response.status_code == 200
		assert response.json() == {"url": SERVICE_URL, "mode": "single_shot", "available": True}

	def test_delete(self, client, manager):
		task_id = submit(client, [{"title": "a"}]).json()["id"]
		manager.wait(task_id, timeout=5)

		response = client.delete(f"/quality-checks/{task_id}")

		assert response.status_code == 204
		assert client.get(f"/quality-checks/{task_id}").status_code == 404

	def test_delete_active(self, client, manager):
		manager.registry.register(Task(id="qc-c5-1", collection_id="c5", state=TaskState.RUNNING))
		response = client.delete("/quality-checks/qc-c5-1")
		assert response.status_code == 409

	def test_latest(self, client, manager):
		task_id = submit(client, [{"title": "a"}]).json()["id"]
		manager.wait(task_id, timeout=5)

		response = client.get("/quality-checks/collections/c1/latest")

		assert response.status_code == 200
		assert response.json()["id"] == task_id
		assert client.get("/quality-checks/collections/c2/latest").status_code == 404
