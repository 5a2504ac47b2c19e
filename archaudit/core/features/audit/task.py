# (c) Copyright Datacraft, 2026
"""
Quality check task state.

A Task is owned by the manager and mutated by exactly one orchestrator
thread. Control requests (pause, resume, cancel) arrive from other threads
and only flip events; the orchestrator observes them at row boundaries.
"""
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from uuid_extensions import uuid7str

from archaudit.core.exceptions import InvalidTransitionError
from archaudit.core.features.results import CheckCategory, CheckResult, Finding
from archaudit.core.utils.tz import utc_now

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
	PENDING = "pending"
	RUNNING = "running"
	PAUSED = "paused"
	COMPLETED = "completed"
	FAILED = "failed"
	CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({TaskState.COMPLETED, TaskState.FAILED, TaskState.CANCELLED})
ACTIVE_STATES = frozenset({TaskState.PENDING, TaskState.RUNNING, TaskState.PAUSED})


class CheckPhase(str, Enum):
	"""Phases run in declaration order."""
	FORMAT = "format"
	RESOURCE = "resource"
	IMAGES = "images"


PHASE_WEIGHTS = {
	CheckPhase.FORMAT: 20,
	CheckPhase.RESOURCE: 20,
	CheckPhase.IMAGES: 60,
}

ERROR_UNKNOWN = "error-unknown"
ERROR_SERVICE_UNAVAILABLE = "error-service-unavailable"
ERROR_INTERRUPTED = "error-interrupted"


def new_task_id(collection_id: str) -> str:
	"""Time-ordered task id scoped to a collection."""
	return f"qc-{collection_id}-{uuid7str()}"


@dataclass
class Checkpoint:
	"""Where a run stood when it paused or stopped."""
	phase: CheckPhase
	last_processed_row: int
	saved_at: datetime = field(default_factory=utc_now)

	def to_dict(self) -> dict[str, Any]:
		return {
			"phase": self.phase.value,
			"last_processed_row": self.last_processed_row,
			"saved_at": self.saved_at.isoformat(),
		}

	@classmethod
	def from_dict(cls, data: dict[str, Any]) -> "Checkpoint":
		return cls(
			phase=CheckPhase(data["phase"]),
			last_processed_row=int(data["last_processed_row"]),
			saved_at=datetime.fromisoformat(data["saved_at"]),
		)


@dataclass(eq=False)
class Task:
	id: str
	collection_id: str
	rule_id: str | None = None
	state: TaskState = TaskState.PENDING
	phase: CheckPhase | None = None
	phases: list[CheckPhase] = field(default_factory=list)
	total_rows: int = 0
	processed_rows: int = 0
	total_images: int = 0
	processed_images: int = 0
	format_errors: int = 0
	resource_errors: int = 0
	content_errors: int = 0
	created_at: datetime = field(default_factory=utc_now)
	started_at: datetime | None = None
	paused_at: datetime | None = None
	resumed_at: datetime | None = None
	completed_at: datetime | None = None
	error_message: str | None = None
	error_key: str | None = None
	checkpoint: Checkpoint | None = None
	result: CheckResult | None = None

	_lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
	_pause: threading.Event = field(default_factory=threading.Event, repr=False)
	_cancel: threading.Event = field(default_factory=threading.Event, repr=False)
	# set while the run may proceed; cleared by a pause request
	_proceed: threading.Event = field(default_factory=threading.Event, repr=False)

	def __post_init__(self):
		self._proceed.set()

	@property
	def is_terminal(self) -> bool:
		return self.state in TERMINAL_STATES

	@property
	def is_active(self) -> bool:
		return self.state in ACTIVE_STATES

	@property
	def pause_requested(self) -> bool:
		return self._pause.is_set()

	def should_stop(self) -> bool:
		return self._cancel.is_set()

	# Control requests, callable from any thread

	def request_pause(self) -> None:
		with self._lock:
			if self.state != TaskState.RUNNING or self._pause.is_set():
				raise InvalidTransitionError("pause", self.state.value)
			self._proceed.clear()
			self._pause.set()
		logger.info(f"Pause requested for task {self.id}")

	def request_resume(self) -> None:
		with self._lock:
			allowed = self.state == TaskState.PAUSED or (
				self.state == TaskState.RUNNING and self._pause.is_set()
			)
			if not allowed:
				raise InvalidTransitionError("resume", self.state.value)
			self._pause.clear()
			self._proceed.set()
		logger.info(f"Resume requested for task {self.id}")

	def request_cancel(self) -> None:
		with self._lock:
			if self.is_terminal:
				raise InvalidTransitionError("cancel", self.state.value)
			self._cancel.set()
			self._proceed.set()
			if self.state == TaskState.PENDING:
				self.mark_cancelled()
		logger.info(f"Cancel requested for task {self.id}")

	def wait_if_paused(self, interval: float = 1.0) -> bool:
		"""
		Block while a pause is pending.

		Returns:
			False if the task was cancelled while waiting
		"""
		while not self._proceed.wait(interval):
			if self._cancel.is_set():
				break
		return not self._cancel.is_set()

	# Orchestrator side

	def mark_running(self) -> bool:
		"""Move a pending task to RUNNING; False if it was cancelled first."""
		with self._lock:
			if self.state != TaskState.PENDING:
				return False
			self.state = TaskState.RUNNING
			self.started_at = utc_now()
		return True

	def schedule(self, phases: Iterable[CheckPhase]) -> None:
		self.phases = list(phases)

	def begin_phase(self, phase: CheckPhase) -> None:
		self.phase = phase
		self.processed_rows = 0
		logger.debug(f"Task {self.id} entering phase {phase.value}")

	def advance(self) -> None:
		if self.processed_rows < self.total_rows:
			self.processed_rows += 1

	def plan_images(self, total: int) -> None:
		self.total_images = total
		self.processed_images = 0

	def advance_image(self) -> None:
		if self.processed_images < self.total_images:
			self.processed_images += 1

	def record_findings(self, findings: Iterable[Finding]) -> None:
		for finding in findings:
			if finding.category == CheckCategory.FORMAT:
				self.format_errors += 1
			elif finding.category == CheckCategory.RESOURCE:
				self.resource_errors += 1
			else:
				self.content_errors += 1

	def mark_paused(self, checkpoint: Checkpoint) -> bool:
		"""Enter PAUSED unless the pause was withdrawn or the task cancelled."""
		with self._lock:
			if not self._pause.is_set() or self._cancel.is_set():
				return False
			self.state = TaskState.PAUSED
			self.paused_at = utc_now()
			self.checkpoint = checkpoint
		logger.info(f"Task {self.id} paused after row {checkpoint.last_processed_row}")
		return True

	def mark_resumed(self) -> None:
		with self._lock:
			if self.state == TaskState.PAUSED:
				self.state = TaskState.RUNNING
				self.resumed_at = utc_now()

	def mark_completed(self) -> None:
		self._finish(TaskState.COMPLETED)

	def mark_cancelled(self) -> None:
		self._finish(TaskState.CANCELLED)

	def mark_failed(self, message: str, error_key: str = ERROR_UNKNOWN) -> None:
		self.error_message = message
		self.error_key = error_key
		self._finish(TaskState.FAILED)

	def _finish(self, state: TaskState) -> None:
		with self._lock:
			self.state = state
			self.completed_at = utc_now()
			if self.phase is not None and self.checkpoint is None and state != TaskState.COMPLETED:
				self.checkpoint = Checkpoint(phase=self.phase, last_processed_row=self.processed_rows - 1)
			if self.result is not None and not self.result.completed:
				self.result.complete(checked_rows=self.processed_rows)
			# release a run parked in the pause wait
			self._proceed.set()
		logger.info(f"Task {self.id} finished as {state.value}")

	@property
	def progress(self) -> float:
		"""
		Percent complete, weighting phases over those actually scheduled.

		The images phase advances per inspected image when any are planned,
		otherwise per row.
		"""
		if self.state == TaskState.COMPLETED:
			return 100.0
		if not self.phases or self.phase is None:
			return 0.0
		total_weight = sum(PHASE_WEIGHTS[p] for p in self.phases)
		done = 0.0
		for phase in self.phases:
			if phase == self.phase:
				if phase == CheckPhase.IMAGES and self.total_images:
					done += PHASE_WEIGHTS[phase] * self.processed_images / self.total_images
				elif self.total_rows:
					done += PHASE_WEIGHTS[phase] * self.processed_rows / self.total_rows
				break
			done += PHASE_WEIGHTS[phase]
		return round(100.0 * done / total_weight, 2)

	def snapshot(self) -> dict[str, Any]:
		"""One consistent copy of the public fields."""
		with self._lock:
			return {
				"id": self.id,
				"collection_id": self.collection_id,
				"rule_id": self.rule_id,
				"state": self.state,
				"phase": self.phase,
				"progress": self.progress,
				"total_rows": self.total_rows,
				"processed_rows": self.processed_rows,
				"total_images": self.total_images,
				"processed_images": self.processed_images,
				"format_errors": self.format_errors,
				"resource_errors": self.resource_errors,
				"content_errors": self.content_errors,
				"created_at": self.created_at,
				"started_at": self.started_at,
				"paused_at": self.paused_at,
				"resumed_at": self.resumed_at,
				"completed_at": self.completed_at,
				"error_message": self.error_message,
				"error_key": self.error_key,
				"checkpoint": self.checkpoint.to_dict() if self.checkpoint else None,
			}

	def __repr__(self):
		return f"Task(id={self.id!r}, state={self.state.value}, processed={self.processed_rows}/{self.total_rows})"
