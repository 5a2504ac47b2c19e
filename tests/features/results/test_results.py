# (c) Copyright Datacraft, 2026
"""Tests for the check result model."""
import pytest

from archaudit.core.exceptions import ResultFrozenError
from archaudit.core.features.results import (
	NO_ROW,
	BoundingBox,
	CheckCategory,
	CheckResult,
	ErrorType,
	FileStatistics,
	Finding,
	FindingSeverity,
)


def finding(row_index, category=CheckCategory.CONTENT, severity=FindingSeverity.ERROR):
	return Finding(
		row_index=row_index,
		category=category,
		error_type=ErrorType.BLANK,
		message="Blank page",
		severity=severity,
	)


class TestCheckResult:
	"""Tests for result aggregation."""

	def test_complete_counts_rows(self):
		result = CheckResult(total_rows=4)
		result.add_findings([
			finding(0),
			finding(0, CheckCategory.FORMAT),
			finding(2, CheckCategory.RESOURCE),
			finding(3, severity=FindingSeverity.WARNING),
			finding(NO_ROW),
		])
		result.complete()

		assert result.completed
		assert result.checked_rows == 4
		assert result.failed_rows == 2
		assert result.passed_rows == 2

	def test_partial_completion(self):
		"""Findings an earlier phase recorded past the stop point still fail their row."""
		result = CheckResult(total_rows=5)
		result.add_findings([finding(1), finding(4, CheckCategory.FORMAT)])
		result.complete(checked_rows=3)
		assert result.checked_rows == 3
		assert result.failed_rows == 2
		assert result.passed_rows == 2
		assert result.summary().failed_rows == len({f.row_index for f in result.findings})

	def test_frozen_after_complete(self):
		result = CheckResult(total_rows=1)
		result.complete()
		with pytest.raises(ResultFrozenError):
			result.add_finding(finding(0))

	def test_summary(self):
		result = CheckResult(total_rows=2)
		result.add_findings([
			finding(0, CheckCategory.FORMAT),
			finding(1, CheckCategory.CONTENT),
			finding(1, CheckCategory.CONTENT),
		])
		result.complete()
		summary = result.summary()
		assert summary.total_errors == 3
		assert summary.format_errors == 1
		assert summary.resource_errors == 0
		assert summary.content_errors == 2
		assert summary.failed_rows == 2

	def test_service_unavailable(self):
		result = CheckResult()
		result.mark_service_unavailable("down")
		assert result.service_unavailable
		assert result.service_unavailable_message == "down"

	def test_round_trip_json(self):
		result = CheckResult(total_rows=1)
		result.add_finding(Finding(
			row_index=0,
			category=CheckCategory.CONTENT,
			error_type=ErrorType.STAIN,
			message="Stain",
			location=BoundingBox.from_corners([10, 20, 30, 50]),
		))
		result.merge_statistics(FileStatistics(blank_pages=1))
		result.complete()

		restored = CheckResult.model_validate(result.model_dump(mode="json"))

		assert restored.findings[0].location == BoundingBox(x=10, y=20, width=20, height=30)
		assert restored.file_statistics.blank_pages == 1
		assert restored.completed


class TestFileStatistics:
	"""Tests for statistics merging."""

	def test_merge(self):
		total = FileStatistics(total_files=2)
		total.add_page_size("A4")
		other = FileStatistics(total_files=3, blank_pages=1)
		other.add_page_size("A4")
		other.add_page_size(None)

		total.merge(other).merge(None)

		assert total.total_files == 5
		assert total.blank_pages == 1
		assert total.page_size_distribution == {"A4": 2, "UNKNOWN": 1}
