# (c) Copyright Datacraft, 2026
"""In-memory registry of tasks known to this process."""
import logging
import threading

from .task import ACTIVE_STATES, Task

logger = logging.getLogger(__name__)


class TaskRegistry:
	"""Thread-safe task lookup by id and by collection."""

	def __init__(self):
		self._lock = threading.Lock()
		self._tasks: dict[str, Task] = {}
		self._by_collection: dict[str, list[str]] = {}

	def register(self, task: Task) -> None:
		with self._lock:
			self._tasks[task.id] = task
			self._by_collection.setdefault(task.collection_id, []).append(task.id)
		logger.debug(f"Registered task {task.id}")

	def get(self, task_id: str) -> Task | None:
		with self._lock:
			return self._tasks.get(task_id)

	def for_collection(self, collection_id: str) -> list[Task]:
		"""Tasks of a collection, newest first."""
		with self._lock:
			ids = self._by_collection.get(collection_id, [])
			tasks = [self._tasks[i] for i in ids if i in self._tasks]
		return sorted(tasks, key=lambda t: t.created_at, reverse=True)

	def active_for_collection(self, collection_id: str) -> Task | None:
		for task in self.for_collection(collection_id):
			if task.state in ACTIVE_STATES:
				return task
		return None

	def all(self) -> list[Task]:
		with self._lock:
			tasks = list(self._tasks.values())
		return sorted(tasks, key=lambda t: t.created_at, reverse=True)

	def remove(self, task_id: str) -> Task | None:
		with self._lock:
			task = self._tasks.pop(task_id, None)
			if task is not None:
				ids = self._by_collection.get(task.collection_id, [])
				if task_id in ids:
					ids.remove(task_id)
		return task

	def __len__(self):
		with self._lock:
			return len(self._tasks)
