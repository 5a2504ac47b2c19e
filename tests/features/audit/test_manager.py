# (c) Copyright Datacraft, 2026
"""Tests for the task manager lifecycle."""
import threading
import time

import pytest

from archaudit.core.exceptions import (
	InvalidTransitionError,
	NoRulesConfiguredError,
	ResultNotReadyError,
	ServiceNotConfiguredError,
	TaskConflictError,
	TaskNotFoundError,
)
from archaudit.core.features.audit import Task, TaskManager, TaskState
from archaudit.core.features.checks import RuleConfiguration
from conftest import image_rules


def wait_for(predicate, timeout=5.0):
	deadline = time.monotonic() + timeout
	while time.monotonic() < deadline:
		if predicate():
			return True
		time.sleep(0.01)
	return False


def live_task(manager, collection_id="c1"):
	return manager.registry.active_for_collection(collection_id)


class TestSubmit:
	"""Tests for starting runs."""

	def test_format_only_run(self, manager):
		rows = [{"title": "a"}, {"title": ""}]
		rules = {"formatRules": {"title": {"nonEmpty": True}}}

		task = manager.submit("c1", rows, rules)
		finished = manager.wait(task.id, timeout=5)

		assert finished.state == TaskState.COMPLETED
		result = manager.get_result(task.id)
		assert result.failed_rows == 1
		assert task.id.startswith("qc-c1-")

	def test_no_rules(self, manager):
		with pytest.raises(NoRulesConfiguredError):
			manager.submit("c1", [{}], {"items": [{"code": "blank", "enabled": False}]})

	def test_image_checks_need_service(self, store, settings, archive):
		base, rows = archive
		settings.inspection_service_url = None
		manager = TaskManager(store=store, settings=settings)
		try:
			with pytest.raises(ServiceNotConfiguredError):
				manager.submit("c1", rows, image_rules(base, "blank"))
		finally:
			manager.shutdown()

	def test_service_url_priority(self, manager):
		rules = RuleConfiguration(service_url="http://from-rules:8089")
		assert manager.resolve_service_url(rules, "http://from-request:8089") == "http://from-request:8089"
		assert manager.resolve_service_url(rules) == manager.settings.inspection_service_url
		manager.settings.inspection_service_url = None
		assert manager.resolve_service_url(rules) == "http://from-rules:8089"

	def test_one_active_run_per_collection(self, manager, archive, stub_client):
		base, rows = archive
		release = threading.Event()
		stub_client.on_inspect = lambda path: release.wait(5)

		first = manager.submit("c1", rows, image_rules(base, "blank"))
		try:
			with pytest.raises(TaskConflictError):
				manager.submit("c1", rows, image_rules(base, "blank"))
			other = manager.submit("c2", [{"title": "x"}], {"formatRules": {"title": {"nonEmpty": True}}})
			assert manager.wait(other.id, timeout=5).state == TaskState.COMPLETED
		finally:
			release.set()
		assert manager.wait(first.id, timeout=5).state == TaskState.COMPLETED

	def test_client_closed(self, manager, archive, stub_client):
		base, rows = archive
		task = manager.submit("c1", rows, image_rules(base, "blank"))
		manager.wait(task.id, timeout=5)
		assert stub_client.closed


class TestControl:
	"""Tests for pause, resume and cancel on live runs."""

	def test_pause_and_resume(self, manager, archive, stub_client):
		"""No row past the pause point is processed until resume."""
		base, rows = archive
		gate = threading.Event()

		def pause_on_second_row(path):
			if path.name == "page_002.jpg" and path.parent.name == "A001":
				manager.pause(live_task(manager).id)
			elif path.parent.name == "A002":
				gate.wait(5)

		stub_client.on_inspect = pause_on_second_row
		task = manager.submit("c1", rows, image_rules(base, "blank"))

		assert wait_for(lambda: task.state == TaskState.PAUSED)
		calls_at_pause = len(stub_client.calls)
		assert calls_at_pause == 4
		assert task.processed_rows == 2
		assert task.checkpoint.last_processed_row == 1
		time.sleep(0.1)
		assert len(stub_client.calls) == calls_at_pause
		assert manager.store.load(task.id).state == TaskState.PAUSED

		manager.resume(task.id)
		try:
			assert wait_for(lambda: manager.store.load(task.id).state == TaskState.RUNNING)
			assert manager.store.load(task.id).resumed_at is not None
		finally:
			gate.set()
		finished = manager.wait(task.id, timeout=5)

		assert finished.state == TaskState.COMPLETED
		assert finished.processed_rows == len(rows)
		assert len(stub_client.calls) == 10
		assert finished.resumed_at is not None

	def test_cancel_running(self, manager, archive, stub_client):
		base, rows = archive

		def cancel_on_third_row(path):
			task = live_task(manager)
			if path.parent.name == "A002" and not task.should_stop():
				manager.cancel(task.id)

		stub_client.on_inspect = cancel_on_third_row
		task = manager.submit("c1", rows, image_rules(base, "blank"))
		finished = manager.wait(task.id, timeout=5)

		assert finished.state == TaskState.CANCELLED
		assert finished.processed_rows == 3
		assert manager.get_result(task.id).checked_rows == 3
		assert manager.store.load(task.id).state == TaskState.CANCELLED

	def test_cancel_paused(self, manager, archive, stub_client):
		base, rows = archive

		def pause_on_first_image(path):
			if len(stub_client.calls) == 1:
				manager.pause(live_task(manager).id)

		stub_client.on_inspect = pause_on_first_image
		task = manager.submit("c1", rows, image_rules(base, "blank"))
		assert wait_for(lambda: task.state == TaskState.PAUSED)

		manager.cancel(task.id)
		finished = manager.wait(task.id, timeout=5)

		assert finished.state == TaskState.CANCELLED
		assert finished.processed_rows == 1

	def test_control_on_finished_task(self, manager):
		task = manager.submit("c1", [{"title": "a"}], {"formatRules": {"title": {"nonEmpty": True}}})
		manager.wait(task.id, timeout=5)
		with pytest.raises(InvalidTransitionError):
			manager.pause(task.id)
		with pytest.raises(InvalidTransitionError):
			manager.cancel(task.id)

	def test_unknown_task(self, manager):
		with pytest.raises(TaskNotFoundError):
			manager.get("qc-none-0")

	def test_result_not_ready(self, manager):
		task = Task(id="qc-c9-1", collection_id="c9", state=TaskState.RUNNING)
		manager.registry.register(task)
		with pytest.raises(ResultNotReadyError):
			manager.get_result(task.id)


class TestPersistence:
	"""Tests for store-backed listing and restart recovery."""

	def test_list_merges_store(self, manager, store):
		stored = Task(id="qc-c1-old", collection_id="c1", state=TaskState.COMPLETED)
		stored.created_at = stored.created_at.replace(year=2020)
		store.save(stored)
		task = manager.submit("c1", [{"title": "a"}], {"formatRules": {"title": {"nonEmpty": True}}})
		manager.wait(task.id, timeout=5)

		ids = [t.id for t in manager.list_tasks("c1")]

		assert ids == [task.id, "qc-c1-old"]
		assert manager.get("qc-c1-old").state == TaskState.COMPLETED

	def test_restore_marks_interrupted(self, store, settings):
		store.save(Task(id="qc-c1-a", collection_id="c1", state=TaskState.RUNNING))
		store.save(Task(id="qc-c1-b", collection_id="c1", state=TaskState.COMPLETED))
		manager = TaskManager(store=store, settings=settings)
		try:
			assert manager.restore() == 1
		finally:
			manager.shutdown()

		interrupted = store.load("qc-c1-a")
		assert interrupted.state == TaskState.FAILED
		assert interrupted.error_key == "error-interrupted"
		assert store.load("qc-c1-b").state == TaskState.COMPLETED

	def test_finished_task_evicted(self, manager):
		"""A stored finished run leaves memory and is served from the store."""
		task = manager.submit("c1", [{"title": "a"}], {"formatRules": {"title": {"nonEmpty": True}}})
		manager.wait(task.id, timeout=5)

		assert manager.registry.get(task.id) is None
		assert wait_for(lambda: task.id not in manager._futures)
		assert manager.get(task.id).state == TaskState.COMPLETED
		assert manager.get_result(task.id).total_rows == 1

	def test_kept_in_memory_without_store(self, settings):
		manager = TaskManager(settings=settings)
		try:
			task = manager.submit("c1", [{"title": ""}], {"formatRules": {"title": {"nonEmpty": True}}})
			manager.wait(task.id, timeout=5)
			assert manager.registry.get(task.id) is task
			assert manager.get_result(task.id).failed_rows == 1
		finally:
			manager.shutdown()

	def test_delete_finished(self, manager):
		task = manager.submit("c1", [{"title": "a"}], {"formatRules": {"title": {"nonEmpty": True}}})
		manager.wait(task.id, timeout=5)

		manager.delete(task.id)

		assert manager.store.load(task.id) is None
		with pytest.raises(TaskNotFoundError):
			manager.get(task.id)

	def test_delete_active_rejected(self, manager):
		task = Task(id="qc-c9-1", collection_id="c9", state=TaskState.RUNNING)
		manager.registry.register(task)
		with pytest.raises(InvalidTransitionError):
			manager.delete(task.id)
		assert manager.get(task.id) is task

	def test_latest(self, manager, store):
		old = Task(id="qc-c1-old", collection_id="c1", state=TaskState.COMPLETED)
		old.created_at = old.created_at.replace(year=2020)
		store.save(old)
		assert manager.latest("c1").id == "qc-c1-old"

		active = Task(id="qc-c1-live", collection_id="c1", state=TaskState.RUNNING)
		manager.registry.register(active)
		assert manager.latest("c1") is active

		with pytest.raises(TaskNotFoundError):
			manager.latest("c2")
