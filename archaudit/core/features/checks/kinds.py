# (c) Copyright Datacraft, 2026
"""Closed set of check kinds and the legacy code aliases that map onto them."""
from enum import Enum


class CheckKind(str, Enum):
	"""Every check the pipeline knows how to run."""
	# Row checks
	FORMAT_RULES = 'format_rules'
	RESOURCE_LINKS = 'resource_links'

	# Network-backed image checks
	BLANK = 'blank'
	SKEW = 'skew'
	HOUSE_ANGLE = 'house_angle'
	STAIN = 'stain'
	HOLE = 'hole'
	EDGE = 'edge'
	DPI = 'dpi'
	FILE_SIZE = 'file_size'
	QUALITY = 'quality'
	BIT_DEPTH = 'bit_depth'
	FORMAT = 'format'
	PAGE_SIZE = 'page_size'

	# Local folder checks
	DAMAGE = 'damage'
	DUPLICATE = 'duplicate'
	ILLEGAL_FILES = 'illegal_files'
	EMPTY_FOLDER = 'empty_folder'
	PAGE_CONTINUITY = 'page_continuity'
	PIECE_CONTINUITY = 'piece_continuity'
	PDF_IMAGE_CONSISTENCY = 'pdf_image_consistency'
	QUANTITY = 'quantity'


CHECK_KIND_ALIASES: dict[str, CheckKind] = {
	'binding-hole': CheckKind.HOLE,
	'binding_hole': CheckKind.HOLE,
	'blank-page': CheckKind.BLANK,
	'blank_page': CheckKind.BLANK,
	'bias': CheckKind.SKEW,
	'rectify': CheckKind.SKEW,
	'kb': CheckKind.FILE_SIZE,
	'file-size': CheckKind.FILE_SIZE,
	'bit-depth': CheckKind.BIT_DEPTH,
	'minBitDepth': CheckKind.BIT_DEPTH,
	'resolution': CheckKind.DPI,
	'image_quality': CheckKind.QUALITY,
	'size': CheckKind.PAGE_SIZE,
	'page-size': CheckKind.PAGE_SIZE,
	'edge_remove': CheckKind.EDGE,
	'repeat_image': CheckKind.DUPLICATE,
	'illegalFiles': CheckKind.ILLEGAL_FILES,
	'countStats': CheckKind.QUANTITY,
	'page_continuous': CheckKind.PAGE_CONTINUITY,
	'piece_continuous': CheckKind.PIECE_CONTINUITY,
	'pdf_image_uniformity': CheckKind.PDF_IMAGE_CONSISTENCY,
}

NETWORK_KINDS = frozenset({
	CheckKind.BLANK, CheckKind.SKEW, CheckKind.HOUSE_ANGLE, CheckKind.STAIN,
	CheckKind.HOLE, CheckKind.EDGE, CheckKind.DPI, CheckKind.FILE_SIZE,
	CheckKind.QUALITY, CheckKind.BIT_DEPTH, CheckKind.FORMAT, CheckKind.PAGE_SIZE,
})

FOLDER_KINDS = frozenset({
	CheckKind.DAMAGE, CheckKind.DUPLICATE, CheckKind.ILLEGAL_FILES,
	CheckKind.EMPTY_FOLDER, CheckKind.PAGE_CONTINUITY, CheckKind.PIECE_CONTINUITY,
	CheckKind.PDF_IMAGE_CONSISTENCY, CheckKind.QUANTITY,
})


def resolve_check_kind(code: str | CheckKind) -> CheckKind | None:
	"""
	Map a configured check code onto its kind.

	Args:
		code: Canonical code or one of the accepted aliases

	Returns:
		The matching CheckKind, or None if the code is unknown
	"""
	if isinstance(code, CheckKind):
		return code
	code = (code or '').strip()
	if code in CHECK_KIND_ALIASES:
		return CHECK_KIND_ALIASES[code]
	try:
		return CheckKind(code)
	except ValueError:
		pass
	normalized = code.lower().replace('-', '_')
	if normalized in CHECK_KIND_ALIASES:
		return CHECK_KIND_ALIASES[normalized]
	try:
		return CheckKind(normalized)
	except ValueError:
		return None
