# (c) Copyright Datacraft, 2026
"""Audit task ORM models."""
from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from archaudit.core.db.base import Base
from archaudit.core.utils.tz import utc_now


class AuditTaskRecord(Base):
	"""Persisted state of one quality check run."""
	__tablename__ = "audit_tasks"

	id: Mapped[str] = mapped_column(String(128), primary_key=True)
	collection_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
	rule_id: Mapped[str | None] = mapped_column(String(64))

	# Lifecycle
	state: Mapped[str] = mapped_column(String(20), nullable=False)  # TaskState
	phase: Mapped[str | None] = mapped_column(String(20))  # CheckPhase
	phases: Mapped[list] = mapped_column(JSON, default=list)
	error_message: Mapped[str | None] = mapped_column(Text)
	error_key: Mapped[str | None] = mapped_column(String(64))

	# Progress
	total_rows: Mapped[int] = mapped_column(Integer, default=0)
	processed_rows: Mapped[int] = mapped_column(Integer, default=0)
	total_images: Mapped[int] = mapped_column(Integer, default=0)
	processed_images: Mapped[int] = mapped_column(Integer, default=0)
	progress: Mapped[float] = mapped_column(Float, default=0.0)
	format_errors: Mapped[int] = mapped_column(Integer, default=0)
	resource_errors: Mapped[int] = mapped_column(Integer, default=0)
	content_errors: Mapped[int] = mapped_column(Integer, default=0)

	# Payloads
	checkpoint: Mapped[dict | None] = mapped_column(JSON)
	result: Mapped[dict | None] = mapped_column(JSON)

	# Timestamps
	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, nullable=False
	)
	started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
	paused_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
	resumed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
	completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
	)

	__table_args__ = (
		Index("idx_audit_tasks_collection_created", "collection_id", "created_at"),
		Index("idx_audit_tasks_state", "state"),
	)
