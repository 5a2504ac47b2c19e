# (c) Copyright Datacraft, 2026
"""Helpers for enumerating resource folder contents."""
from pathlib import Path

IMAGE_EXTENSIONS = frozenset({
	'.jpg', '.jpeg', '.png', '.tif', '.tiff', '.bmp', '.gif', '.webp',
})
PDF_EXTENSION = '.pdf'


def is_image_file(path: Path) -> bool:
	return path.suffix.lower() in IMAGE_EXTENSIONS


def is_archival_file(path: Path) -> bool:
	"""Images and PDFs both count as archival content."""
	suffix = path.suffix.lower()
	return suffix in IMAGE_EXTENSIONS or suffix == PDF_EXTENSION


def list_files(folder: Path, include_hidden: bool = False) -> list[Path]:
	"""Regular files directly inside ``folder``, sorted by name."""
	if not folder.is_dir():
		return []
	files = [
		p for p in folder.iterdir()
		if p.is_file() and (include_hidden or not p.name.startswith('.'))
	]
	return sorted(files, key=lambda p: p.name)


def list_images(folder: Path) -> list[Path]:
	"""Image files directly inside ``folder``, sorted by name."""
	return [p for p in list_files(folder) if is_image_file(p)]


def split_name(file_name: str) -> tuple[str, str]:
	"""Split a file name into stem and lowercased extension (with dot)."""
	dot = file_name.rfind('.')
	if dot <= 0:
		return file_name, ''
	return file_name[:dot], file_name[dot:].lower()
