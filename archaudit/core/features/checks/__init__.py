# (c) Copyright Datacraft, 2026
"""
Checker registry for the quality audit pipeline.

Every checker is registered under its CheckKind. The orchestrator asks the
registry for the enabled checkers of each family rather than matching
configuration codes itself.
"""
from .base import Checker, FolderChecker, ImageDefectChecker, ImageRef, RowChecker, RowFolder
from .continuity import PageContinuityChecker, PieceContinuityChecker
from .damage import DamageChecker
from .duplicates import DuplicateChecker
from .folders import (
	EmptyFolderChecker,
	IllegalFilesChecker,
	PdfImageConsistencyChecker,
	QuantityChecker,
)
from .format import FormatRulesChecker
from .image import (
	BitDepthChecker,
	BlankChecker,
	DpiChecker,
	EdgeChecker,
	FileSizeChecker,
	HoleChecker,
	HouseAngleChecker,
	ImageFormatChecker,
	PageSizeChecker,
	QualityChecker,
	SkewChecker,
	StainChecker,
	build_request,
	evaluate_image,
)
from .kinds import CheckKind, resolve_check_kind
from .paths import resolve_resource_path
from .resource import ResourceLinkChecker
from .rules import CheckItem, FormatRule, ResourcePathConfig, RuleConfiguration

# Registry mapping check kinds to checker instances
CHECKER_REGISTRY: dict[CheckKind, Checker] = {
	# Row checks
	CheckKind.FORMAT_RULES: FormatRulesChecker(),
	CheckKind.RESOURCE_LINKS: ResourceLinkChecker(),

	# Inspection service checks
	CheckKind.BLANK: BlankChecker(),
	CheckKind.SKEW: SkewChecker(),
	CheckKind.HOUSE_ANGLE: HouseAngleChecker(),
	CheckKind.STAIN: StainChecker(),
	CheckKind.HOLE: HoleChecker(),
	CheckKind.EDGE: EdgeChecker(),
	CheckKind.DPI: DpiChecker(),
	CheckKind.FILE_SIZE: FileSizeChecker(),
	CheckKind.QUALITY: QualityChecker(),
	CheckKind.BIT_DEPTH: BitDepthChecker(),
	CheckKind.FORMAT: ImageFormatChecker(),
	CheckKind.PAGE_SIZE: PageSizeChecker(),

	# Local folder checks
	CheckKind.DAMAGE: DamageChecker(),
	CheckKind.DUPLICATE: DuplicateChecker(),
	CheckKind.ILLEGAL_FILES: IllegalFilesChecker(),
	CheckKind.EMPTY_FOLDER: EmptyFolderChecker(),
	CheckKind.PAGE_CONTINUITY: PageContinuityChecker(),
	CheckKind.PIECE_CONTINUITY: PieceContinuityChecker(),
	CheckKind.PDF_IMAGE_CONSISTENCY: PdfImageConsistencyChecker(),
	CheckKind.QUANTITY: QuantityChecker(),
}


def get_checker(code: str | CheckKind) -> Checker | None:
	"""
	Get a checker by check code.

	Args:
		code: Check kind, canonical code or a legacy alias

	Returns:
		The registered checker, or None if the code is unknown
	"""
	kind = resolve_check_kind(code)
	if kind is None:
		return None
	return CHECKER_REGISTRY.get(kind)


def list_available_checkers() -> list[str]:
	"""Return the codes of all registered checkers."""
	return [kind.value for kind in CHECKER_REGISTRY]


def is_check_code_valid(code: str) -> bool:
	"""Check if a code (or alias) maps onto a registered checker."""
	return get_checker(code) is not None


def enabled_row_checkers(rules: RuleConfiguration) -> list[RowChecker]:
	return [
		checker for checker in CHECKER_REGISTRY.values()
		if isinstance(checker, RowChecker) and checker.is_enabled(rules)
	]


def enabled_image_checkers(rules: RuleConfiguration) -> list[tuple[ImageDefectChecker, CheckItem]]:
	"""Enabled inspection-backed checkers paired with their configuration."""
	return [
		(checker, rules.get_item(checker.kind))
		for checker in CHECKER_REGISTRY.values()
		if isinstance(checker, ImageDefectChecker) and checker.is_enabled(rules)
	]


def enabled_folder_checkers(rules: RuleConfiguration) -> list[tuple[FolderChecker, CheckItem]]:
	"""Enabled local folder checkers paired with their configuration."""
	return [
		(checker, rules.get_item(checker.kind))
		for checker in CHECKER_REGISTRY.values()
		if isinstance(checker, FolderChecker) and checker.is_enabled(rules)
	]


__all__ = [
	"CHECKER_REGISTRY",
	"get_checker",
	"list_available_checkers",
	"is_check_code_valid",
	"enabled_row_checkers",
	"enabled_image_checkers",
	"enabled_folder_checkers",
	# Models
	"CheckItem",
	"CheckKind",
	"FormatRule",
	"ResourcePathConfig",
	"RuleConfiguration",
	"resolve_check_kind",
	"resolve_resource_path",
	# Interfaces
	"Checker",
	"RowChecker",
	"ImageDefectChecker",
	"FolderChecker",
	"ImageRef",
	"RowFolder",
	"build_request",
	"evaluate_image",
	# Checkers
	"FormatRulesChecker",
	"ResourceLinkChecker",
	"BlankChecker",
	"SkewChecker",
	"HouseAngleChecker",
	"StainChecker",
	"HoleChecker",
	"EdgeChecker",
	"DpiChecker",
	"FileSizeChecker",
	"QualityChecker",
	"BitDepthChecker",
	"ImageFormatChecker",
	"PageSizeChecker",
	"DamageChecker",
	"DuplicateChecker",
	"IllegalFilesChecker",
	"EmptyFolderChecker",
	"PageContinuityChecker",
	"PieceContinuityChecker",
	"PdfImageConsistencyChecker",
	"QuantityChecker",
]
