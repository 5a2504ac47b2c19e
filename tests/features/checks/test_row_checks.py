# (c) Copyright Datacraft, 2026
"""Tests for the format rule and resource link row checkers."""
from archaudit.core.features.checks import (
	FormatRulesChecker,
	ResourceLinkChecker,
	RuleConfiguration,
)
from archaudit.core.features.checks.format import matches_date_format, matches_regex, to_strptime_format
from archaudit.core.features.checks.resource import sequence_gaps
from archaudit.core.features.results import CheckCategory, ErrorType, FindingSeverity


def format_rules(**columns) -> RuleConfiguration:
	return RuleConfiguration.model_validate({"formatRules": columns})


class TestFormatHelpers:
	"""Tests for value matching helpers."""

	def test_java_date_pattern(self):
		assert to_strptime_format("yyyy-MM-dd") == "%Y-%m-%d"
		assert to_strptime_format("%Y%m%d") == "%Y%m%d"

	def test_matches_date_format(self):
		assert matches_date_format("2024-02-29", "yyyy-MM-dd")
		assert not matches_date_format("2023-02-29", "yyyy-MM-dd")
		assert not matches_date_format("29/02/2024", "yyyy-MM-dd")

	def test_regex_full_match(self):
		assert matches_regex("AB123", r"[A-Z]{2}\d+")
		assert not matches_regex("AB123x", r"[A-Z]{2}\d+")

	def test_invalid_regex_never_fails(self):
		assert matches_regex("anything", "([unclosed")


class TestFormatRulesChecker:
	"""Tests for per-column format rules."""

	def test_disabled_without_rules(self):
		assert not FormatRulesChecker().is_enabled(RuleConfiguration())

	def test_empty_value_only_reports_non_empty(self):
		"""An empty cell is checked for presence and nothing else."""
		rules = format_rules(code={"nonEmpty": True, "regex": r"\d+", "valueList": ["1"]})
		findings = FormatRulesChecker().check([{"code": ""}], rules)
		assert [f.error_type for f in findings] == [ErrorType.NON_EMPTY]
		assert findings[0].category == CheckCategory.FORMAT

	def test_each_rule(self):
		rules = format_rules(
			code={"regex": r"[A-Z]{2}\d+"},
			date={"dateFormat": "yyyy-MM-dd"},
			level={"valueList": ["permanent", "30y"]},
		)
		rows = [
			{"code": "AB1", "date": "2024-01-31", "level": "permanent"},
			{"code": "ab1", "date": "31.01.2024", "level": "10y"},
		]
		findings = FormatRulesChecker().check(rows, rules)
		assert {f.row_index for f in findings} == {1}
		assert {f.error_type for f in findings} == {
			ErrorType.REGEX, ErrorType.DATE_FORMAT, ErrorType.VALUE_LIST,
		}

	def test_unique(self):
		"""Only later occurrences of a value are reported."""
		rules = format_rules(archive_no={"unique": True})
		rows = [{"archive_no": "A1"}, {"archive_no": "A2"}, {"archive_no": "A1"}]
		findings = FormatRulesChecker().check(rows, rules)
		assert len(findings) == 1
		assert findings[0].row_index == 2
		assert findings[0].message == "Duplicate value found"

	def test_iter_rows_yields_every_row(self):
		rules = format_rules(title={"nonEmpty": True})
		rows = [{"title": "x"}, {"title": None}, {}]
		indexes = [i for i, _ in FormatRulesChecker().iter_rows(rows, rules)]
		assert indexes == [0, 1, 2]


class TestResourceLinkChecker:
	"""Tests for row to folder cross checks."""

	def rules(self, base, **file_checks) -> RuleConfiguration:
		return RuleConfiguration.model_validate({
			"resource": {
				"basePath": str(base),
				"pathFields": ["archive_no"],
				"separator": "/",
				"fileChecks": file_checks,
			},
		})

	def test_missing_folder(self, tmp_path):
		rules = self.rules(tmp_path)
		findings = ResourceLinkChecker().check([{"archive_no": "nope"}], rules)
		assert len(findings) == 1
		assert findings[0].error_type == ErrorType.FOLDER_EXISTENCE
		assert findings[0].category == CheckCategory.RESOURCE

	def test_unresolved_path(self, tmp_path):
		rules = self.rules(tmp_path)
		findings = ResourceLinkChecker().check([{"archive_no": ""}], rules)
		assert [f.error_type for f in findings] == [ErrorType.FOLDER_EXISTENCE]

	def test_count_mismatch_severity(self, tmp_path):
		"""Off by one is a warning; a larger gap is an error."""
		folder = tmp_path / "A1"
		folder.mkdir()
		for name in ("1.jpg", "2.jpg", "3.jpg"):
			(folder / name).write_bytes(b"x")
		rules = self.rules(tmp_path, countMatch=True, countColumn="pages")

		near = ResourceLinkChecker().check([{"archive_no": "A1", "pages": "4"}], rules)
		far = ResourceLinkChecker().check([{"archive_no": "A1", "pages": "9"}], rules)
		exact = ResourceLinkChecker().check([{"archive_no": "A1", "pages": "3"}], rules)

		assert near[0].severity == FindingSeverity.WARNING
		assert far[0].severity == FindingSeverity.ERROR
		assert far[0].expected_value == "9"
		assert exact == []

	def test_name_format_and_sequence(self, tmp_path):
		folder = tmp_path / "A1"
		folder.mkdir()
		for name in ("p001.jpg", "p002.jpg", "p005.jpg", "scan.jpg"):
			(folder / name).write_bytes(b"x")
		rules = self.rules(tmp_path, nameFormat=r"p\d{3}\.jpg", sequential=True)

		findings = ResourceLinkChecker().check([{"archive_no": "A1"}], rules)
		by_type = {}
		for f in findings:
			by_type.setdefault(f.error_type, []).append(f)

		assert [f.file_name for f in by_type[ErrorType.FILE_NAME_FORMAT]] == ["scan.jpg"]
		assert by_type[ErrorType.FILE_SEQUENTIAL][0].details == {"missing_count": 2, "missing": [3, 4]}

	def test_wide_sequence_gap_not_listed(self, tmp_path):
		folder = tmp_path / "A1"
		folder.mkdir()
		for name in ("scan_001.jpg", "scan_20240115.jpg"):
			(folder / name).write_bytes(b"x")
		rules = self.rules(tmp_path, sequential=True)

		findings = ResourceLinkChecker().check([{"archive_no": "A1"}], rules)

		assert [f.details for f in findings] == [{"missing_count": 20240113}]

	def test_unreadable_folder(self, tmp_path, monkeypatch):
		"""A listing error fails the row instead of escaping the check."""
		folder = tmp_path / "A1"
		folder.mkdir()
		rules = self.rules(tmp_path, sequential=True)

		def deny(path):
			raise PermissionError(f"Permission denied: '{path}'")

		monkeypatch.setattr("archaudit.core.features.checks.resource.list_files", deny)
		findings = ResourceLinkChecker().check([{"archive_no": "A1"}, {"archive_no": "A2"}], rules)

		assert [(f.row_index, f.error_type) for f in findings] == [
			(0, ErrorType.PROCESSING_ERROR),
			(1, ErrorType.FOLDER_EXISTENCE),
		]

	def test_sequence_gaps(self):
		assert sequence_gaps(["a1.jpg", "a2.jpg", "a4.jpg", "a7.jpg"]) == [(2, 4), (4, 7)]
		assert sequence_gaps(["x.jpg"]) == []
