# (c) Copyright Datacraft, 2026
"""Quality check task Pydantic schemas."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from archaudit.core.features.checks import RuleConfiguration
from archaudit.core.features.results import CheckResult, ResultSummary
from .task import CheckPhase, Task, TaskState


class QualityCheckSubmit(BaseModel):
	"""Schema for submitting a quality check run."""
	collection_id: str = Field(min_length=1)
	rows: list[dict[str, Any]] = Field(default_factory=list)
	rules: RuleConfiguration
	rule_id: str | None = None
	service_url: str | None = None


class CheckpointInfo(BaseModel):
	phase: CheckPhase
	last_processed_row: int
	saved_at: datetime


class TaskInfo(BaseModel):
	"""Status and progress of one run."""
	id: str
	collection_id: str
	rule_id: str | None = None
	state: TaskState
	phase: CheckPhase | None = None
	progress: float = 0.0
	total_rows: int = 0
	processed_rows: int = 0
	total_images: int = 0
	processed_images: int = 0
	format_errors: int = 0
	resource_errors: int = 0
	content_errors: int = 0
	created_at: datetime
	started_at: datetime | None = None
	paused_at: datetime | None = None
	resumed_at: datetime | None = None
	completed_at: datetime | None = None
	error_message: str | None = None
	error_key: str | None = None
	checkpoint: CheckpointInfo | None = None

	@classmethod
	def from_task(cls, task: Task) -> "TaskInfo":
		return cls.model_validate(task.snapshot())


class TaskListResponse(BaseModel):
	items: list[TaskInfo]
	total: int


class TaskResultResponse(BaseModel):
	"""Final result of a run with its summary block."""
	task_id: str
	state: TaskState
	summary: ResultSummary
	result: CheckResult

	@classmethod
	def from_task(cls, task: Task) -> "TaskResultResponse":
		return cls(
			task_id=task.id,
			state=task.state,
			summary=task.result.summary(),
			result=task.result,
		)


class ServiceHealth(BaseModel):
	url: str
	mode: str
	available: bool
