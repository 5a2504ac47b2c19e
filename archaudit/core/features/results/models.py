# (c) Copyright Datacraft, 2026
"""Aggregate result model produced by a quality check run."""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from archaudit.core.exceptions import ResultFrozenError
from archaudit.core.utils.tz import utc_now

logger = logging.getLogger(__name__)

NO_ROW = -1


class CheckCategory(str, Enum):
	"""Which family of checks produced a finding."""
	FORMAT = 'format'
	RESOURCE = 'resource'
	CONTENT = 'content'


class FindingSeverity(str, Enum):
	"""Only errors make a row fail."""
	WARNING = 'warning'
	ERROR = 'error'


class ErrorType(str, Enum):
	"""Discriminator for findings."""
	# Format rules
	NON_EMPTY = 'non_empty'
	REGEX = 'regex'
	DATE_FORMAT = 'date_format'
	VALUE_LIST = 'value_list'
	UNIQUE = 'unique'

	# Resource links
	FOLDER_EXISTENCE = 'folder_existence'
	FILE_COUNT = 'file_count'
	FILE_NAME_FORMAT = 'file_name_format'
	FILE_SEQUENTIAL = 'file_sequential'

	# Image defects
	BLANK = 'blank'
	SKEW = 'bias'
	HOUSE_ANGLE = 'house_angle'
	STAIN = 'stain'
	HOLE = 'hole'
	EDGE = 'edge'
	DPI = 'dpi'
	FILE_SIZE = 'file_size'
	QUALITY = 'quality'
	BIT_DEPTH = 'bit_depth'
	FORMAT = 'format'
	PAGE_SIZE = 'page_size'

	# Folder checks
	DAMAGE = 'damage'
	DUPLICATE = 'duplicate'
	ILLEGAL_FILE = 'illegal_file'
	EMPTY_FOLDER = 'empty_folder'
	PAGE_CONTINUITY = 'page_continuity'
	PIECE_CONTINUITY = 'piece_continuity'
	PDF_IMAGE_MISMATCH = 'pdf_image_mismatch'

	PROCESSING_ERROR = 'processing_error'


class BoundingBox(BaseModel):
	model_config = ConfigDict(frozen=True)

	x: int
	y: int
	width: int
	height: int

	@classmethod
	def from_corners(cls, box: list[float]) -> "BoundingBox":
		"""Convert detector output ``[x1, y1, x2, y2]`` to x/y/width/height."""
		x1, y1, x2, y2 = (int(round(v)) for v in box[:4])
		return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

	def as_list(self) -> list[int]:
		return [self.x, self.y, self.width, self.height]


class Finding(BaseModel):
	"""One recorded defect or rule violation. Immutable once created."""
	model_config = ConfigDict(frozen=True)

	row_index: int = NO_ROW
	column: str | None = None
	value: str | None = None
	category: CheckCategory
	error_type: ErrorType
	message: str
	severity: FindingSeverity = FindingSeverity.ERROR
	extracted_value: str | None = None
	expected_value: str | None = None
	location: BoundingBox | None = None
	file_name: str | None = None
	details: dict[str, Any] = Field(default_factory=dict)


class FileStatistics(BaseModel):
	"""Folder and file counts gathered during a run."""
	total_folders: int = 0
	total_files: int = 0
	image_files: int = 0
	other_files: int = 0
	blank_pages: int = 0
	empty_folders: int = 0
	page_size_distribution: dict[str, int] = Field(default_factory=dict)

	def add_page_size(self, page_size: str | None, count: int = 1) -> None:
		key = page_size or 'UNKNOWN'
		self.page_size_distribution[key] = self.page_size_distribution.get(key, 0) + count

	def merge(self, other: "FileStatistics | None") -> "FileStatistics":
		"""Add ``other``'s counts into this instance and return it."""
		if other is None:
			return self
		self.total_folders += other.total_folders
		self.total_files += other.total_files
		self.image_files += other.image_files
		self.other_files += other.other_files
		self.blank_pages += other.blank_pages
		self.empty_folders += other.empty_folders
		for size, count in other.page_size_distribution.items():
			self.add_page_size(size, count)
		return self


class ResultSummary(BaseModel):
	total_rows: int
	checked_rows: int
	passed_rows: int
	failed_rows: int
	total_errors: int
	format_errors: int
	resource_errors: int
	content_errors: int


class CheckResult(BaseModel):
	"""
	Aggregate outcome of one run.

	Findings are append-only. Once :meth:`complete` has been called the
	result is frozen and further findings are rejected.
	"""
	total_rows: int = 0
	checked_rows: int = 0
	passed_rows: int = 0
	failed_rows: int = 0
	findings: list[Finding] = Field(default_factory=list)
	file_statistics: FileStatistics | None = None
	service_unavailable: bool = False
	service_unavailable_message: str | None = None
	started_at: datetime = Field(default_factory=utc_now)
	completed_at: datetime | None = None
	completed: bool = False

	def add_finding(self, finding: Finding) -> None:
		if self.completed:
			raise ResultFrozenError()
		self.findings.append(finding)

	def add_findings(self, findings: Iterable[Finding]) -> None:
		for finding in findings:
			self.add_finding(finding)

	def merge_statistics(self, statistics: FileStatistics | None) -> None:
		if statistics is None:
			return
		if self.file_statistics is None:
			self.file_statistics = FileStatistics()
		self.file_statistics.merge(statistics)

	def mark_service_unavailable(self, message: str | None) -> None:
		self.service_unavailable = True
		self.service_unavailable_message = message

	def count_by_category(self) -> dict[CheckCategory, int]:
		counts = {category: 0 for category in CheckCategory}
		for finding in self.findings:
			counts[finding.category] += 1
		return counts

	def failed_row_indexes(self) -> set[int]:
		return {
			f.row_index for f in self.findings
			if f.row_index != NO_ROW and f.severity == FindingSeverity.ERROR
		}

	def complete(self, checked_rows: int | None = None) -> None:
		"""
		Freeze the result and derive pass/fail counts.

		A row with an error finding from any phase is failed, even when a
		stopped run never reached it in its last phase. Passed rows are the
		rows below ``checked_rows`` without an error finding.

		Args:
			checked_rows: Rows processed by the last phase reached; defaults
				to all rows
		"""
		if checked_rows is None:
			checked_rows = self.total_rows
		self.checked_rows = min(checked_rows, self.total_rows)
		failed = {i for i in self.failed_row_indexes() if i < self.total_rows}
		self.failed_rows = len(failed)
		self.passed_rows = sum(1 for i in range(self.checked_rows) if i not in failed)
		self.completed_at = utc_now()
		self.completed = True
		logger.debug(
			f"Result completed: {self.checked_rows}/{self.total_rows} rows, "
			f"{len(self.findings)} findings"
		)

	def summary(self) -> ResultSummary:
		counts = self.count_by_category()
		return ResultSummary(
			total_rows=self.total_rows,
			checked_rows=self.checked_rows,
			passed_rows=self.passed_rows,
			failed_rows=self.failed_rows,
			total_errors=len(self.findings),
			format_errors=counts[CheckCategory.FORMAT],
			resource_errors=counts[CheckCategory.RESOURCE],
			content_errors=counts[CheckCategory.CONTENT],
		)
