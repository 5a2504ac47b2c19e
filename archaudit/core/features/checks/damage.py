# (c) Copyright Datacraft, 2026
"""Detect damaged or truncated image files."""
import logging
from pathlib import Path
from typing import Sequence

from PIL import Image

from archaudit.core.features.results import ErrorType, Finding
from archaudit.core.utils.files import list_images
from .base import FolderChecker, RowFolder
from .continuity import unique_folders
from .kinds import CheckKind
from .rules import CheckItem

logger = logging.getLogger(__name__)


def is_readable_image(path: Path) -> bool:
	"""
	Check that an image file is structurally intact.

	Only the header and container structure are verified; pixel data is
	never decoded.
	"""
	try:
		with Image.open(path) as img:
			width, height = img.size
			img.verify()
	except (OSError, SyntaxError, ValueError, EOFError, Image.DecompressionBombError) as e:
		logger.warning(f"Unreadable image {path}: {e}")
		return False
	return width > 0 and height > 0


class DamageChecker(FolderChecker):
	kind = CheckKind.DAMAGE
	name = 'Damaged files'

	def check(self, folders: Sequence[RowFolder], item: CheckItem) -> list[Finding]:
		findings = []
		for folder in unique_folders(folders):
			for path in list_images(folder.path):
				if not is_readable_image(path):
					findings.append(self.folder_finding(
						folder, ErrorType.DAMAGE, f"Image file is damaged: {path.name}",
						file_name=path.name,
					))
		return findings
