# (c) Copyright Datacraft, 2026
"""Base checker interfaces."""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Mapping, Sequence

from archaudit.core.features.inspection.schema import InspectionRequest, InspectionResult
from archaudit.core.features.results import (
	NO_ROW,
	CheckCategory,
	ErrorType,
	FileStatistics,
	Finding,
)
from .kinds import CheckKind
from .rules import CheckItem, RuleConfiguration

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

RESOURCE_COLUMN = 'resource'


@dataclass(frozen=True)
class RowFolder:
	"""An existing resource folder and the row it was resolved from."""
	row_index: int
	path: Path


@dataclass(frozen=True)
class ImageRef:
	"""One image inside a row's resource folder."""
	row_index: int
	path: Path

	@property
	def folder(self) -> Path:
		return self.path.parent

	@property
	def name(self) -> str:
		return self.path.name


class Checker(ABC):
	"""
	A single, independent concern of the audit.

	Checkers hold no per-run state: everything they need arrives as
	arguments, and everything they produce is returned.
	"""

	kind: CheckKind
	name: str
	category: CheckCategory = CheckCategory.CONTENT

	@property
	def code(self) -> str:
		return self.kind.value

	def is_enabled(self, rules: RuleConfiguration) -> bool:
		return rules.is_enabled(self.kind)

	def finding(
		self,
		error_type: ErrorType,
		message: str,
		row_index: int = NO_ROW,
		**fields,
	) -> Finding:
		return Finding(
			row_index=row_index,
			category=self.category,
			error_type=error_type,
			message=message,
			**fields,
		)

	def __repr__(self):
		return f"{self.__class__.__name__}({self.code})"


class RowChecker(Checker):
	"""Checks metadata rows one at a time."""

	@abstractmethod
	def iter_rows(
		self,
		rows: Sequence[Row],
		rules: RuleConfiguration,
	) -> Iterator[tuple[int, list[Finding]]]:
		"""
		Check rows in order.

		Yields:
			Tuple of (row_index, findings for that row)
		"""
		pass

	def check(self, rows: Sequence[Row], rules: RuleConfiguration) -> list[Finding]:
		findings = []
		for _, row_findings in self.iter_rows(rows, rules):
			findings.extend(row_findings)
		return findings


class ImageDefectChecker(Checker):
	"""
	A defect detected by the external inspection service.

	Each checker adds its own flags and thresholds to the shared per-image
	request, then reads its own fields back out of the result.
	"""

	@abstractmethod
	def configure(self, request: InspectionRequest, item: CheckItem) -> None:
		"""Enable this check on ``request`` using ``item``'s parameters."""
		pass

	@abstractmethod
	def evaluate(
		self,
		result: InspectionResult,
		image: ImageRef,
		item: CheckItem,
	) -> list[Finding]:
		"""Translate this checker's part of ``result`` into findings."""
		pass

	def image_statistics(self, result: InspectionResult, item: CheckItem) -> FileStatistics | None:
		return None

	def image_finding(
		self,
		image: ImageRef,
		error_type: ErrorType,
		message: str,
		**fields,
	) -> Finding:
		return self.finding(
			error_type,
			message,
			row_index=image.row_index,
			column=RESOURCE_COLUMN,
			value=str(image.folder),
			file_name=image.name,
			**fields,
		)


class FolderChecker(Checker):
	"""A check over local files in every resolved resource folder."""

	@abstractmethod
	def check(self, folders: Sequence[RowFolder], item: CheckItem) -> list[Finding]:
		pass

	def statistics(self, folders: Sequence[RowFolder], item: CheckItem) -> FileStatistics | None:
		return None

	def folder_finding(
		self,
		folder: RowFolder,
		error_type: ErrorType,
		message: str,
		**fields,
	) -> Finding:
		return self.finding(
			error_type,
			message,
			row_index=folder.row_index,
			column=RESOURCE_COLUMN,
			value=str(folder.path),
			**fields,
		)
