# (c) Copyright Datacraft, 2026
"""Cross-check metadata rows against their resource folders."""
import logging
import re
from pathlib import Path
from typing import Iterator, Sequence

from archaudit.core.features.results import CheckCategory, ErrorType, Finding, FindingSeverity
from archaudit.core.utils.files import list_files, split_name
from .base import Row, RowChecker
from .format import matches_regex
from .kinds import CheckKind
from .paths import resolve_resource_path
from .rules import ResourcePathConfig, RuleConfiguration

logger = logging.getLogger(__name__)

PATH_COLUMN = 'resource_path'
_TRAILING_NUMBER_RE = re.compile(r'(\d+)$')


def parse_count(value) -> int | None:
	if value is None:
		return None
	try:
		return int(str(value).strip())
	except ValueError:
		return None


def trailing_number(file_name: str) -> int | None:
	stem, _ = split_name(file_name)
	match = _TRAILING_NUMBER_RE.search(stem)
	return int(match.group(1)) if match else None


def sequence_gaps(file_names: Sequence[str]) -> list[tuple[int, int]]:
	"""Pairs of consecutive numbers (a, b) with b - a > 1."""
	numbers = sorted({n for n in (trailing_number(name) for name in file_names) if n is not None})
	return [(a, b) for a, b in zip(numbers, numbers[1:]) if b - a > 1]


class ResourceLinkChecker(RowChecker):
	"""Folder existence, file count, file naming and numbering checks."""

	kind = CheckKind.RESOURCE_LINKS
	name = 'Resource links'
	category = CheckCategory.RESOURCE

	def is_enabled(self, rules: RuleConfiguration) -> bool:
		return rules.resource is not None and rules.resource.has_link_checks()

	def iter_rows(self, rows: Sequence[Row], rules: RuleConfiguration) -> Iterator[tuple[int, list[Finding]]]:
		config = rules.resource
		for row_index, row in enumerate(rows):
			yield row_index, self.check_row(row_index, row, config)

	def check_row(self, row_index: int, row: Row, config: ResourcePathConfig) -> list[Finding]:
		folder = None
		try:
			folder = resolve_resource_path(row, config)
			return self._check_folder(row_index, row, folder, config)
		except OSError as e:
			logger.error(f"Row {row_index}: cannot read resource folder {folder}: {e}")
			return [self.finding(
				ErrorType.PROCESSING_ERROR, f"Cannot read resource folder: {e}",
				row_index=row_index, column=PATH_COLUMN, value=str(folder or ''),
			)]

	def _check_folder(
		self,
		row_index: int,
		row: Row,
		folder: Path | None,
		config: ResourcePathConfig,
	) -> list[Finding]:
		findings = []

		if folder is None:
			if config.folder_checks.existence and config.path_fields:
				findings.append(self.finding(
					ErrorType.FOLDER_EXISTENCE,
					"Resource path could not be resolved: path fields are empty",
					row_index=row_index, column=PATH_COLUMN, value='',
				))
			return findings

		if not folder.is_dir():
			if config.folder_checks.existence:
				findings.append(self.finding(
					ErrorType.FOLDER_EXISTENCE, f"Folder does not exist: {folder}",
					row_index=row_index, column=PATH_COLUMN, value=str(folder),
				))
			return findings

		files = list_files(folder)
		file_checks = config.file_checks

		if file_checks.count_match and file_checks.count_column:
			findings.extend(self._check_count(row_index, row, folder, files, file_checks.count_column))

		if file_checks.name_format:
			for path in files:
				if not matches_regex(path.name, file_checks.name_format):
					findings.append(self.finding(
						ErrorType.FILE_NAME_FORMAT,
						f"File name does not match format: {file_checks.name_format}",
						row_index=row_index, column='file_name', value=path.name,
						expected_value=file_checks.name_format, file_name=path.name,
					))

		if file_checks.sequential:
			for a, b in sequence_gaps([p.name for p in files]):
				details = {'missing_count': b - a - 1}
				if b - a - 1 <= file_checks.max_missing:
					details['missing'] = list(range(a + 1, b))
				findings.append(self.finding(
					ErrorType.FILE_SEQUENTIAL,
					f"Sequence gap: missing number(s) between {a} and {b}",
					row_index=row_index, column=PATH_COLUMN, value=str(folder),
					details=details,
				))
		return findings

	def _check_count(
		self,
		row_index: int,
		row: Row,
		folder: Path,
		files: list[Path],
		count_column: str,
	) -> list[Finding]:
		expected = parse_count(row.get(count_column))
		if expected is None or expected < 0:
			return []
		actual = len(files)
		if expected == actual:
			return []
		# Off-by-one is reported but does not fail the row
		severity = FindingSeverity.WARNING if abs(expected - actual) <= 1 else FindingSeverity.ERROR
		return [self.finding(
			ErrorType.FILE_COUNT,
			f"File count mismatch: expected {expected}, actual {actual}",
			row_index=row_index, column=count_column, value=str(actual),
			expected_value=str(expected), severity=severity,
			details={'folder': str(folder)},
		)]
