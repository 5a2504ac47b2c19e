# (c) Copyright Datacraft, 2026
"""
Task lifecycle management.

The manager starts each run on a bounded worker pool, routes control
requests to the live task, and persists state at start, pause, resume and
terminal transitions. Finished tasks are evicted from memory once stored;
from then on they are answered from the store.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from typing import Any, Callable, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError

from archaudit.core.config import Settings, get_settings
from archaudit.core.db import get_engine
from archaudit.core.exceptions import (
	InvalidTransitionError,
	NoRulesConfiguredError,
	ResultNotReadyError,
	ServiceNotConfiguredError,
	TaskConflictError,
	TaskNotFoundError,
)
from archaudit.core.features import checks
from archaudit.core.features.checks import RuleConfiguration
from archaudit.core.features.inspection import InspectionClient
from archaudit.core.features.monitoring.metrics import RUNS_TOTAL
from archaudit.core.features.results import CheckResult
from .orchestrator import CheckOrchestrator
from .registry import TaskRegistry
from .store import TaskStore
from .task import ERROR_INTERRUPTED, ERROR_UNKNOWN, Task, new_task_id

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], InspectionClient]


class TaskManager:
	def __init__(
		self,
		store: TaskStore | None = None,
		client_factory: ClientFactory | None = None,
		settings: Settings | None = None,
		max_workers: int | None = None,
	):
		self.settings = settings or get_settings()
		self.store = store
		self.registry = TaskRegistry()
		self.client_factory = client_factory or self._default_client
		self.orchestrator = CheckOrchestrator(
			poll_interval=self.settings.pause_poll_interval,
			on_pause=self._persist,
			on_resume=self._persist,
		)
		self._executor = ThreadPoolExecutor(
			max_workers=max_workers or self.settings.max_concurrent_runs,
			thread_name_prefix="qc-run",
		)
		self._futures: dict[str, Future] = {}
		self._submit_lock = threading.Lock()

	def _default_client(self, endpoint: str) -> InspectionClient:
		return InspectionClient.from_settings(endpoint, self.settings)

	def resolve_service_url(
		self,
		rules: RuleConfiguration,
		service_url: str | None = None,
	) -> str | None:
		"""Request URL first, then settings, then the rule configuration."""
		return service_url or self.settings.inspection_service_url or rules.service_url

	def submit(
		self,
		collection_id: str,
		rows: Sequence[Mapping[str, Any]],
		rules: RuleConfiguration | Mapping[str, Any],
		service_url: str | None = None,
		rule_id: str | None = None,
	) -> Task:
		"""
		Start a quality check run for a collection.

		Raises:
			NoRulesConfiguredError: If no check is enabled
			ServiceNotConfiguredError: If image checks are enabled but no
				inspection service URL is known
			TaskConflictError: If the collection already has an active run
		"""
		if not isinstance(rules, RuleConfiguration):
			rules = RuleConfiguration.model_validate(rules)

		has_row_checks = bool(checks.enabled_row_checkers(rules))
		has_image_checks = bool(checks.enabled_image_checkers(rules))
		has_folder_checks = bool(checks.enabled_folder_checkers(rules))
		if not (has_row_checks or has_image_checks or has_folder_checks):
			raise NoRulesConfiguredError()

		endpoint = None
		if has_image_checks:
			endpoint = self.resolve_service_url(rules, service_url)
			if not endpoint:
				raise ServiceNotConfiguredError()

		with self._submit_lock:
			active = self.registry.active_for_collection(collection_id)
			if active is not None:
				raise TaskConflictError(
					f"Collection {collection_id} already has an active run: {active.id}"
				)
			task = Task(
				id=new_task_id(collection_id),
				collection_id=collection_id,
				rule_id=rule_id or rules.id,
				total_rows=len(rows),
			)
			self.registry.register(task)

		self._persist(task)
		logger.info(f"Submitted task {task.id} for collection {collection_id} ({len(rows)} rows)")
		future = self._executor.submit(self._run, task, list(rows), rules, endpoint)
		self._futures[task.id] = future
		future.add_done_callback(lambda _: self._futures.pop(task.id, None))
		return task

	def _run(self, task: Task, rows: list, rules: RuleConfiguration, endpoint: str | None) -> None:
		if not task.mark_running():
			logger.info(f"Task {task.id} was cancelled before it started")
			self._evict(task, persisted=self._persist(task))
			return
		self._persist(task)

		client = self.client_factory(endpoint) if endpoint else None
		try:
			self.orchestrator.run(task, rows, rules, client)
		except Exception as e:
			logger.exception(f"Task {task.id} failed")
			task.mark_failed(str(e), error_key=ERROR_UNKNOWN)
		finally:
			if client is not None:
				client.close()
			RUNS_TOTAL.labels(state=task.state.value).inc()
			self._evict(task, persisted=self._persist(task))

	def _persist(self, task: Task) -> bool:
		if self.store is None:
			return False
		try:
			self.store.save(task)
		except SQLAlchemyError:
			logger.exception(f"Failed to persist task {task.id}")
			return False
		return True

	def _evict(self, task: Task, persisted: bool) -> None:
		"""Drop a finished task from memory once the store holds its final state."""
		if persisted and task.is_terminal:
			self.registry.remove(task.id)
			logger.debug(f"Evicted task {task.id} from memory")

	def get(self, task_id: str) -> Task:
		task = self.registry.get(task_id)
		if task is None and self.store is not None:
			task = self.store.load(task_id)
		if task is None:
			raise TaskNotFoundError(f"Task {task_id} not found")
		return task

	def pause(self, task_id: str) -> Task:
		task = self.get(task_id)
		task.request_pause()
		return task

	def resume(self, task_id: str) -> Task:
		task = self.get(task_id)
		task.request_resume()
		return task

	def cancel(self, task_id: str) -> Task:
		task = self.get(task_id)
		task.request_cancel()
		if task.is_terminal:
			self._persist(task)
		return task

	def list_tasks(self, collection_id: str | None = None) -> list[Task]:
		"""Live and stored tasks, newest first; live state wins."""
		if collection_id is None:
			live = self.registry.all()
		else:
			live = self.registry.for_collection(collection_id)
		tasks = {task.id: task for task in live}
		if self.store is not None:
			for task in self.store.list(collection_id):
				tasks.setdefault(task.id, task)
		return sorted(tasks.values(), key=lambda t: t.created_at, reverse=True)

	def get_result(self, task_id: str) -> CheckResult:
		task = self.get(task_id)
		if not task.is_terminal or task.result is None:
			raise ResultNotReadyError(f"Task {task_id} is {task.state.value}; no result yet")
		return task.result

	def latest(self, collection_id: str) -> Task:
		"""The collection's active run, else its most recent stored one."""
		task = self.registry.active_for_collection(collection_id)
		if task is None and self.store is not None:
			task = self.store.latest(collection_id)
		if task is None:
			raise TaskNotFoundError(f"No runs for collection {collection_id}")
		return task

	def delete(self, task_id: str) -> None:
		"""
		Remove a finished task from memory and the store.

		Raises:
			TaskNotFoundError: If the task is unknown
			InvalidTransitionError: If the task is still active
		"""
		task = self.get(task_id)
		if task.is_active:
			raise InvalidTransitionError("delete", task.state.value)
		self.registry.remove(task_id)
		if self.store is not None:
			self.store.delete(task_id)
		logger.info(f"Deleted task {task_id}")

	def wait(self, task_id: str, timeout: float | None = None) -> Task:
		"""Block until the run of ``task_id`` has finished or ``timeout`` elapses."""
		future = self._futures.get(task_id)
		if future is not None:
			wait_futures([future], timeout=timeout)
		return self.get(task_id)

	def restore(self) -> int:
		"""
		Fail tasks left active by a previous process.

		Returns:
			Number of tasks marked as interrupted
		"""
		if self.store is None:
			return 0
		count = 0
		for task in self.store.list():
			if not task.is_active or self.registry.get(task.id) is not None:
				continue
			task.mark_failed("Run interrupted by a service restart", error_key=ERROR_INTERRUPTED)
			self._persist(task)
			count += 1
		if count:
			logger.warning(f"Marked {count} interrupted task(s) as failed")
		return count

	def shutdown(self, wait: bool = True) -> None:
		for task in self.registry.all():
			if not task.is_active:
				continue
			try:
				task.request_cancel()
			except InvalidTransitionError:
				# finished in the meantime
				pass
		self._executor.shutdown(wait=wait, cancel_futures=True)
		logger.info("Task manager shut down")


_manager: TaskManager | None = None
_manager_lock = threading.Lock()


def get_task_manager() -> TaskManager:
	global _manager
	with _manager_lock:
		if _manager is None:
			_manager = TaskManager(store=TaskStore(get_engine()))
	return _manager
