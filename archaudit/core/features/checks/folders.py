# (c) Copyright Datacraft, 2026
"""Local checks over the contents of resource folders."""
import logging
from typing import Sequence

from archaudit.core.features.results import ErrorType, FileStatistics, Finding
from archaudit.core.utils.files import (
	IMAGE_EXTENSIONS,
	PDF_EXTENSION,
	is_archival_file,
	list_files,
	split_name,
)
from .base import FolderChecker, RowFolder
from .continuity import unique_folders
from .kinds import CheckKind
from .rules import CheckItem

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVAL_FORMATS = ['jpeg', 'jpg', 'tiff', 'tif', 'pdf', 'ofd']


class IllegalFilesChecker(FolderChecker):
	"""Flag files whose extension is not an allowed archival format."""

	kind = CheckKind.ILLEGAL_FILES
	name = 'Illegal archival files'

	def allowed(self, item: CheckItem) -> set[str]:
		formats = item.get_list('allowedFormats', 'formats', default=DEFAULT_ARCHIVAL_FORMATS)
		return {fmt.strip().lower().lstrip('.') for fmt in formats}

	def check(self, folders: Sequence[RowFolder], item: CheckItem) -> list[Finding]:
		allowed = self.allowed(item)
		expected = ', '.join(sorted(fmt.upper() for fmt in allowed))
		findings = []
		for folder in unique_folders(folders):
			for path in list_files(folder.path):
				_, extension = split_name(path.name)
				extension = extension.lstrip('.')
				if extension in allowed:
					continue
				findings.append(self.folder_finding(
					folder, ErrorType.ILLEGAL_FILE,
					f"File {path.name} has an illegal format {extension.upper() or '(none)'}",
					file_name=path.name,
					extracted_value=extension.upper(),
					expected_value=expected,
				))
		return findings


class EmptyFolderChecker(FolderChecker):
	"""Flag resource folders that hold no images or PDFs."""

	kind = CheckKind.EMPTY_FOLDER
	name = 'Empty folders'

	def _empty(self, folders: Sequence[RowFolder]) -> list[RowFolder]:
		return [
			folder for folder in unique_folders(folders)
			if not any(is_archival_file(p) for p in list_files(folder.path))
		]

	def check(self, folders, item):
		return [
			self.folder_finding(folder, ErrorType.EMPTY_FOLDER, f"Folder is empty: {folder.path}")
			for folder in self._empty(folders)
		]

	def statistics(self, folders, item):
		return FileStatistics(empty_folders=len(self._empty(folders)))


class PdfImageConsistencyChecker(FolderChecker):
	"""Every image should have a PDF with the same stem, and vice versa."""

	kind = CheckKind.PDF_IMAGE_CONSISTENCY
	name = 'PDF and image consistency'

	def check(self, folders, item):
		findings = []
		for folder in unique_folders(folders):
			images: set[str] = set()
			pdfs: set[str] = set()
			for path in list_files(folder.path):
				stem, extension = split_name(path.name)
				if extension in IMAGE_EXTENSIONS:
					images.add(stem)
				elif extension == PDF_EXTENSION:
					pdfs.add(stem)

			for stem in sorted(pdfs - images):
				findings.append(self.folder_finding(
					folder, ErrorType.PDF_IMAGE_MISMATCH,
					f"PDF without a matching image: {stem}.pdf",
					extracted_value=stem,
				))
			for stem in sorted(images - pdfs):
				findings.append(self.folder_finding(
					folder, ErrorType.PDF_IMAGE_MISMATCH,
					f"Image without a matching PDF: {stem}",
					extracted_value=stem,
				))
		return findings


class QuantityChecker(FolderChecker):
	"""Count folders and files; produces statistics only."""

	kind = CheckKind.QUANTITY
	name = 'Quantity statistics'

	def check(self, folders, item):
		return []

	def statistics(self, folders, item):
		statistics = FileStatistics()
		for folder in unique_folders(folders):
			statistics.total_folders += 1
			for path in folder.path.rglob('*'):
				if not path.is_file():
					continue
				statistics.total_files += 1
				if is_archival_file(path):
					statistics.image_files += 1
				else:
					statistics.other_files += 1
		logger.info(
			f"Counted {statistics.total_folders} folders, {statistics.total_files} files "
			f"({statistics.image_files} images, {statistics.other_files} other)"
		)
		return statistics
