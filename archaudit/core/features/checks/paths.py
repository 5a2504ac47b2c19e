# (c) Copyright Datacraft, 2026
"""Resolve the resource folder that belongs to a metadata row."""
import os
from pathlib import Path
from typing import Any, Mapping

from .rules import PathMode, ResourcePathConfig

Row = Mapping[str, Any]


def _cell_text(value: Any) -> str:
	if value is None:
		return ''
	return str(value).strip()


def resolve_resource_path(row: Row, config: ResourcePathConfig | None) -> Path | None:
	"""
	Build the folder path for ``row``.

	With no ``path_fields`` configured every row maps to ``base_path``. When
	path fields are configured but none of them has a value the row has no
	resource folder and None is returned.

	In separator mode the non-empty field values are joined with the
	separator; in template mode ``{0}``, ``{1}``, ... are replaced with them.
	The result is prefixed with ``base_path``.
	"""
	if config is None:
		return None
	base_path = config.base_path or ''
	if not config.path_fields:
		return Path(base_path) if base_path else None

	values = [
		text for text in (_cell_text(row.get(field)) for field in config.path_fields)
		if text
	]
	if not values:
		return None

	separator = config.separator or os.sep
	if config.path_mode == PathMode.TEMPLATE and config.template:
		relative = config.template
		for index, value in enumerate(values):
			relative = relative.replace(f"{{{index}}}", value)
	else:
		relative = separator.join(values)

	if not base_path:
		return Path(relative)
	if base_path.endswith(('/', '\\')):
		return Path(f"{base_path}{relative}")
	return Path(f"{base_path}{separator}{relative}")
