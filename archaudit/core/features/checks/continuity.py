# (c) Copyright Datacraft, 2026
"""
Page and piece number continuity.

A number is derived from each image file name and every integer missing
between the smallest and the largest number in a folder is reported. This
is a closed-range completeness check; it does not compare against any
expected count from the metadata.
"""
import logging
import re
from abc import abstractmethod
from typing import Sequence

from archaudit.core.features.results import ErrorType, Finding
from archaudit.core.utils.files import list_images
from .base import FolderChecker, RowFolder
from .kinds import CheckKind
from .rules import MAX_MISSING_NUMBERS, CheckItem

logger = logging.getLogger(__name__)

PAGE_NUMBER_RE = re.compile(r'(?:page|_|-)(\d+)', re.IGNORECASE)
TRAILING_NUMBER_RE = re.compile(r'(\d+)(?:\.[a-zA-Z]+)?$')
PIECE_NUMBER_RE = re.compile(r'(\d+)')

MAX_TRAILING_DIGITS = 5


def extract_page_number(file_name: str) -> int | None:
	"""
	Best-effort page number from a file name.

	The first digit run following ``page``, ``_`` or ``-`` wins; otherwise a
	trailing digit run of at most five digits before the extension.
	"""
	if not file_name:
		return None
	match = PAGE_NUMBER_RE.search(file_name)
	if match:
		return int(match.group(1))
	match = TRAILING_NUMBER_RE.search(file_name)
	if match and len(match.group(1)) <= MAX_TRAILING_DIGITS:
		return int(match.group(1))
	return None


def extract_piece_number(file_name: str) -> int | None:
	"""The first digit run in the file name."""
	if not file_name:
		return None
	match = PIECE_NUMBER_RE.search(file_name)
	return int(match.group(1)) if match else None


def find_missing_numbers(
	numbers: set[int],
	limit: int = MAX_MISSING_NUMBERS,
) -> tuple[list[int], int, tuple[int, int] | None]:
	"""
	Integers missing from the closed range spanned by ``numbers``.

	Only the first ``limit`` missing numbers are listed; the count covers
	all of them.

	Returns:
		Tuple of (listed missing numbers, missing count, (min, max) range or None)
	"""
	if not numbers:
		return [], 0, None
	ordered = sorted(numbers)
	low, high = ordered[0], ordered[-1]
	count = high - low + 1 - len(ordered)
	missing: list[int] = []
	for a, b in zip(ordered, ordered[1:]):
		if len(missing) >= limit:
			break
		if b - a > 1:
			missing.extend(range(a + 1, min(b, a + 1 + limit - len(missing))))
	return missing, count, (low, high)


def unique_folders(folders: Sequence[RowFolder]) -> list[RowFolder]:
	"""First occurrence of each folder path, in path order."""
	seen: dict[str, RowFolder] = {}
	for folder in folders:
		seen.setdefault(str(folder.path), folder)
	return [seen[key] for key in sorted(seen)]


class _ContinuityChecker(FolderChecker):
	error_type: ErrorType
	label: str

	@abstractmethod
	def extract(self, file_name: str) -> int | None:
		pass

	def check(self, folders: Sequence[RowFolder], item: CheckItem) -> list[Finding]:
		limit = item.get_int('maxMissing', 'max_missing', default=MAX_MISSING_NUMBERS)
		findings = []
		for folder in unique_folders(folders):
			numbers = {
				n for n in (self.extract(path.name) for path in list_images(folder.path))
				if n is not None
			}
			missing, count, bounds = find_missing_numbers(numbers, limit)
			if not count:
				continue
			low, high = bounds
			if count > len(missing):
				logger.warning(f"{self.label} range {low}-{high} in {folder.path} misses {count} numbers")
				findings.append(self.folder_finding(
					folder, self.error_type,
					f"{count} {self.label}s missing within {low}-{high}",
					details={'missing_count': count, 'range': [low, high]},
				))
				continue
			logger.info(f"{self.label} gaps in {folder.path}: {missing}")
			for number in missing:
				findings.append(self.folder_finding(
					folder, self.error_type,
					f"Missing {self.label} {number} (expected within {low}-{high})",
					extracted_value=str(number),
					details={'missing': number, 'range': [low, high]},
				))
		return findings


class PageContinuityChecker(_ContinuityChecker):
	kind = CheckKind.PAGE_CONTINUITY
	name = 'Page number continuity'
	error_type = ErrorType.PAGE_CONTINUITY
	label = 'page number'

	def extract(self, file_name):
		return extract_page_number(file_name)


class PieceContinuityChecker(_ContinuityChecker):
	kind = CheckKind.PIECE_CONTINUITY
	name = 'Piece number continuity'
	error_type = ErrorType.PIECE_CONTINUITY
	label = 'piece number'

	def extract(self, file_name):
		return extract_piece_number(file_name)
