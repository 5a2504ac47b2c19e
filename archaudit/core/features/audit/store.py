# (c) Copyright Datacraft, 2026
"""Durable storage of task state and results."""
import logging
from datetime import datetime, timezone

from sqlalchemy import Engine, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from archaudit.core.db.base import Base
from archaudit.core.features.results import CheckResult
from .db.orm import AuditTaskRecord
from .task import Checkpoint, CheckPhase, Task, TaskState

logger = logging.getLogger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
	# sqlite drops tzinfo on the way back
	if value is not None and value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value


def task_to_record(task: Task, record: AuditTaskRecord | None = None) -> AuditTaskRecord:
	snapshot = task.snapshot()
	record = record or AuditTaskRecord(id=task.id)
	record.collection_id = task.collection_id
	record.rule_id = task.rule_id
	record.state = snapshot["state"].value
	record.phase = snapshot["phase"].value if snapshot["phase"] else None
	record.phases = [p.value for p in task.phases]
	record.error_message = snapshot["error_message"]
	record.error_key = snapshot["error_key"]
	record.total_rows = snapshot["total_rows"]
	record.processed_rows = snapshot["processed_rows"]
	record.total_images = snapshot["total_images"]
	record.processed_images = snapshot["processed_images"]
	record.progress = snapshot["progress"]
	record.format_errors = snapshot["format_errors"]
	record.resource_errors = snapshot["resource_errors"]
	record.content_errors = snapshot["content_errors"]
	record.checkpoint = snapshot["checkpoint"]
	record.result = task.result.model_dump(mode="json") if task.result is not None else None
	record.created_at = snapshot["created_at"]
	record.started_at = snapshot["started_at"]
	record.paused_at = snapshot["paused_at"]
	record.resumed_at = snapshot["resumed_at"]
	record.completed_at = snapshot["completed_at"]
	return record


def record_to_task(record: AuditTaskRecord) -> Task:
	return Task(
		id=record.id,
		collection_id=record.collection_id,
		rule_id=record.rule_id,
		state=TaskState(record.state),
		phase=CheckPhase(record.phase) if record.phase else None,
		phases=[CheckPhase(p) for p in record.phases or []],
		total_rows=record.total_rows,
		processed_rows=record.processed_rows,
		total_images=record.total_images or 0,
		processed_images=record.processed_images or 0,
		format_errors=record.format_errors,
		resource_errors=record.resource_errors,
		content_errors=record.content_errors,
		created_at=_as_utc(record.created_at),
		started_at=_as_utc(record.started_at),
		paused_at=_as_utc(record.paused_at),
		resumed_at=_as_utc(record.resumed_at),
		completed_at=_as_utc(record.completed_at),
		error_message=record.error_message,
		error_key=record.error_key,
		checkpoint=Checkpoint.from_dict(record.checkpoint) if record.checkpoint else None,
		result=CheckResult.model_validate(record.result) if record.result else None,
	)


class TaskStore:
	"""
	SQLAlchemy-backed task persistence.

	Tables are created on construction. Loaded tasks are detached copies;
	they carry fresh control events and are never wired to a running thread.
	"""

	def __init__(self, engine: Engine):
		self.engine = engine
		self._session = sessionmaker(engine, expire_on_commit=False)
		Base.metadata.create_all(engine, tables=[AuditTaskRecord.__table__])

	def save(self, task: Task) -> None:
		with self._session() as session:
			record = session.get(AuditTaskRecord, task.id)
			session.add(task_to_record(task, record))
			session.commit()
		logger.debug(f"Saved task {task.id} ({task.state.value})")

	def load(self, task_id: str) -> Task | None:
		with self._session() as session:
			record = session.get(AuditTaskRecord, task_id)
			return record_to_task(record) if record is not None else None

	def list(self, collection_id: str | None = None) -> list[Task]:
		"""Stored tasks, newest first."""
		stmt = select(AuditTaskRecord).order_by(AuditTaskRecord.created_at.desc())
		if collection_id is not None:
			stmt = stmt.where(AuditTaskRecord.collection_id == collection_id)
		with self._session() as session:
			return [record_to_task(r) for r in session.scalars(stmt)]

	def latest(self, collection_id: str) -> Task | None:
		stmt = (
			select(AuditTaskRecord)
			.where(AuditTaskRecord.collection_id == collection_id)
			.order_by(AuditTaskRecord.created_at.desc())
			.limit(1)
		)
		with self._session() as session:
			record = session.scalars(stmt).first()
			return record_to_task(record) if record is not None else None

	def delete(self, task_id: str) -> bool:
		with self._session() as session:
			record = session.get(AuditTaskRecord, task_id)
			if record is None:
				return False
			session.delete(record)
			session.commit()
		return True

	def ping(self) -> bool:
		try:
			with self.engine.connect() as conn:
				conn.execute(text("SELECT 1"))
			return True
		except SQLAlchemyError as e:
			logger.error(f"Task store health check failed: {e}")
			return False
