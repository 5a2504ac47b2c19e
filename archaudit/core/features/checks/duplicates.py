# (c) Copyright Datacraft, 2026
"""Exact duplicate image detection by content hash."""
import logging
from collections import defaultdict
from pathlib import Path
from typing import Sequence

from archaudit.core.features.results import ErrorType, Finding
from archaudit.core.utils.files import list_images
from archaudit.core.utils.hash import calculate_blake3
from .base import FolderChecker, RowFolder
from .continuity import unique_folders
from .kinds import CheckKind
from .rules import CheckItem

logger = logging.getLogger(__name__)


def group_by_content(paths: Sequence[Path]) -> dict[str, list[Path]]:
	"""
	Bucket files by the BLAKE3 hash of their bytes.

	Unreadable files are logged and left out.
	"""
	buckets: dict[str, list[Path]] = defaultdict(list)
	for path in paths:
		try:
			buckets[calculate_blake3(path)].append(path)
		except OSError as e:
			logger.warning(f"Cannot hash {path}: {e}")
	return dict(buckets)


class DuplicateChecker(FolderChecker):
	"""
	Report every image whose content is identical to another image.

	Identity is content-addressed, so renamed copies are found and distinct
	files sharing a name are not. Each member of a duplicate group gets its
	own finding naming the other members.
	"""

	kind = CheckKind.DUPLICATE
	name = 'Duplicate images'

	def check(self, folders: Sequence[RowFolder], item: CheckItem) -> list[Finding]:
		owners: dict[Path, RowFolder] = {}
		for folder in unique_folders(folders):
			for path in list_images(folder.path):
				owners.setdefault(path, folder)

		findings = []
		buckets = group_by_content(list(owners))
		for digest, members in sorted(buckets.items(), key=lambda kv: str(kv[1][0])):
			if len(members) < 2:
				continue
			logger.info(f"Found {len(members)} identical images: {[str(p) for p in members]}")
			for path in members:
				others = [str(p) for p in members if p != path]
				findings.append(self.folder_finding(
					owners[path], ErrorType.DUPLICATE,
					f"Duplicate image, identical to {len(others)} other file(s): {', '.join(others)}",
					file_name=path.name,
					details={
						'duplicate_count': len(others),
						'duplicates': others,
						'hash': digest,
					},
				))
		return findings
