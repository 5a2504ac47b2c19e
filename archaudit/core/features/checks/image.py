# (c) Copyright Datacraft, 2026
"""
Image defect checks backed by the external inspection service.

All enabled checkers contribute to one request per image, so each image is
sent to the service exactly once regardless of how many defects are checked.
"""
import logging
from abc import abstractmethod

from archaudit.core.features.inspection.schema import (
	DEFAULT_ALLOWED_FORMATS,
	InspectionRequest,
	InspectionResult,
)
from archaudit.core.features.results import BoundingBox, ErrorType, FileStatistics, Finding
from .base import ImageDefectChecker, ImageRef
from .kinds import CheckKind
from .rules import CheckItem

logger = logging.getLogger(__name__)

_FORMAT_SYNONYMS = {
	'.jpg': '.jpeg',
	'.tif': '.tiff',
}


def normalize_format(fmt: str) -> str:
	fmt = fmt.strip().lower()
	if not fmt.startswith('.'):
		fmt = f".{fmt}"
	return _FORMAT_SYNONYMS.get(fmt, fmt)


def _number(value: float) -> str:
	return f"{value:g}"


class BlankChecker(ImageDefectChecker):
	kind = CheckKind.BLANK
	name = 'Blank page'

	def configure(self, request, item):
		request.check_blank = True

	def evaluate(self, result, image, item):
		if result.blank:
			return [self.image_finding(image, ErrorType.BLANK, "Blank page")]
		return []

	def image_statistics(self, result, item):
		if result.blank:
			return FileStatistics(blank_pages=1)
		return None


class SkewChecker(ImageDefectChecker):
	kind = CheckKind.SKEW
	name = 'Skew'

	def tolerance(self, item: CheckItem) -> float:
		return item.get_float('skewTolerance', 'tolerance', 'angle', default=0.5)

	def configure(self, request, item):
		request.check_skew = True
		request.skew_tolerance = self.tolerance(item)

	def evaluate(self, result, image, item):
		angle = result.skew_angle
		if angle is None or abs(angle) <= self.tolerance(item):
			return []
		return [self.image_finding(
			image, ErrorType.SKEW, f"Image is skewed by {_number(angle)} degrees",
			extracted_value=_number(angle),
			expected_value=f"<= {_number(self.tolerance(item))}",
		)]


class HouseAngleChecker(ImageDefectChecker):
	kind = CheckKind.HOUSE_ANGLE
	name = 'Text orientation'

	def configure(self, request, item):
		request.check_house_angle = True

	def evaluate(self, result, image, item):
		if not result.house_angle:
			return []
		return [self.image_finding(
			image, ErrorType.HOUSE_ANGLE,
			f"Text orientation is rotated by {result.house_angle} degrees",
			extracted_value=str(result.house_angle),
		)]


class _BoxDefectChecker(ImageDefectChecker):
	"""A defect reported as a list of two-corner bounding boxes."""

	error_type: ErrorType
	label: str

	@abstractmethod
	def boxes(self, result: InspectionResult) -> list[list[float]]:
		"""The boxes of this defect in ``result``."""
		pass

	def evaluate(self, result, image, item):
		findings = []
		for box in self.boxes(result):
			location = BoundingBox.from_corners(box)
			findings.append(self.image_finding(
				image, self.error_type,
				f"{self.label} detected at ({location.x}, {location.y}, {location.width}x{location.height})",
				location=location,
			))
		return findings


class StainChecker(_BoxDefectChecker):
	kind = CheckKind.STAIN
	name = 'Stain'
	error_type = ErrorType.STAIN
	label = 'Stain'

	def configure(self, request, item):
		request.check_stain = True
		request.stain_threshold = item.get_int('threshold', 'stainValue', default=10)

	def boxes(self, result):
		return result.stain


class HoleChecker(_BoxDefectChecker):
	kind = CheckKind.HOLE
	name = 'Binding hole'
	error_type = ErrorType.HOLE
	label = 'Binding hole'

	def configure(self, request, item):
		request.check_hole = True
		request.hole_threshold = item.get_int('threshold', 'holeValue', default=1)

	def boxes(self, result):
		return result.hole


class EdgeChecker(_BoxDefectChecker):
	kind = CheckKind.EDGE
	name = 'Black edge'
	error_type = ErrorType.EDGE
	label = 'Black edge'

	def configure(self, request, item):
		request.check_edge = True
		mode = str(item.get('checkMode', 'mode', default='')).lower()
		request.edge_strict_mode = 1 if mode == 'strict' or item.get_bool('strict') else 0

	def boxes(self, result):
		return result.edge


class DpiChecker(ImageDefectChecker):
	kind = CheckKind.DPI
	name = 'DPI'

	def min_dpi(self, item: CheckItem) -> int:
		return item.get_int('minDpi', 'dpi', 'min_dpi', default=300)

	def configure(self, request, item):
		request.check_dpi = True
		request.min_dpi = self.min_dpi(item)

	def evaluate(self, result, image, item):
		minimum = self.min_dpi(item)
		if result.dpi is None or result.dpi >= minimum:
			return []
		return [self.image_finding(
			image, ErrorType.DPI, f"Resolution {result.dpi} DPI is below {minimum} DPI",
			extracted_value=str(result.dpi), expected_value=f">= {minimum}",
		)]


class FileSizeChecker(ImageDefectChecker):
	kind = CheckKind.FILE_SIZE
	name = 'File size'

	def limits(self, item: CheckItem) -> tuple[int, int]:
		return (
			item.get_int('minKb', 'setKb', 'min_kb', default=10),
			item.get_int('maxKb', 'max_kb', default=10000),
		)

	def configure(self, request, item):
		request.check_file_size = True
		request.min_kb, request.max_kb = self.limits(item)

	def evaluate(self, result, image, item):
		if result.kb is None:
			return []
		min_kb, max_kb = self.limits(item)
		if result.kb < min_kb:
			problem = 'too small'
		elif result.kb > max_kb:
			problem = 'too large'
		else:
			return []
		return [self.image_finding(
			image, ErrorType.FILE_SIZE, f"File size {_number(result.kb)} KB is {problem}",
			extracted_value=_number(result.kb), expected_value=f"{min_kb}-{max_kb} KB",
		)]


class QualityChecker(ImageDefectChecker):
	kind = CheckKind.QUALITY
	name = 'Image quality'

	def min_quality(self, item: CheckItem) -> int:
		return item.get_int('minQuality', 'quality', default=80)

	def configure(self, request, item):
		request.check_quality = True
		request.min_quality = self.min_quality(item)

	def evaluate(self, result, image, item):
		minimum = self.min_quality(item)
		if result.quality is None or result.quality >= minimum:
			return []
		return [self.image_finding(
			image, ErrorType.QUALITY, f"Image quality {_number(result.quality)} is below {minimum}",
			extracted_value=_number(result.quality), expected_value=f">= {minimum}",
		)]


class BitDepthChecker(ImageDefectChecker):
	kind = CheckKind.BIT_DEPTH
	name = 'Bit depth'

	def min_bit_depth(self, item: CheckItem) -> int:
		return item.get_int('minBitDepth', 'bitDepth', 'bit_depth', default=8)

	def configure(self, request, item):
		request.check_bit_depth = True
		request.min_bit_depth = self.min_bit_depth(item)

	def evaluate(self, result, image, item):
		minimum = self.min_bit_depth(item)
		if result.bit_depth is None or result.bit_depth >= minimum:
			return []
		return [self.image_finding(
			image, ErrorType.BIT_DEPTH, f"Bit depth {result.bit_depth} is below {minimum}",
			extracted_value=str(result.bit_depth), expected_value=f">= {minimum}",
		)]


class ImageFormatChecker(ImageDefectChecker):
	kind = CheckKind.FORMAT
	name = 'File format'

	def allowed(self, item: CheckItem) -> list[str]:
		formats = item.get_list('allowedFormats', 'formats', default=DEFAULT_ALLOWED_FORMATS)
		return [normalize_format(fmt) for fmt in formats]

	def configure(self, request, item):
		request.check_format = True
		request.allowed_formats = self.allowed(item)

	def evaluate(self, result, image, item):
		actual = normalize_format(result.format or image.path.suffix or '')
		allowed = self.allowed(item)
		if actual in allowed:
			return []
		return [self.image_finding(
			image, ErrorType.FORMAT, f"File format {actual} is not allowed",
			extracted_value=actual, expected_value=', '.join(allowed),
		)]


class PageSizeChecker(ImageDefectChecker):
	kind = CheckKind.PAGE_SIZE
	name = 'Page size'

	CUSTOM = 'CUSTOM'

	def configure(self, request, item):
		request.check_page_size = True

	def evaluate(self, result, image, item):
		if result.page_size is None:
			return []
		page_size = result.page_size.upper()
		allowed = [size.upper() for size in item.get_list('allowedSizes', 'sizes')]
		if page_size == self.CUSTOM:
			message = "Page size does not match any standard size"
		elif allowed and page_size not in allowed:
			message = f"Page size {page_size} is not allowed"
		else:
			return []
		return [self.image_finding(
			image, ErrorType.PAGE_SIZE, message,
			extracted_value=page_size,
			expected_value=', '.join(allowed) if allowed else None,
		)]

	def image_statistics(self, result, item):
		statistics = FileStatistics()
		statistics.add_page_size(result.page_size)
		return statistics


def build_request(checkers: list[tuple[ImageDefectChecker, CheckItem]]) -> InspectionRequest:
	"""Merge every enabled checker's flags and thresholds into one request."""
	request = InspectionRequest()
	for checker, item in checkers:
		checker.configure(request, item)
	return request


def evaluate_image(
	checkers: list[tuple[ImageDefectChecker, CheckItem]],
	result: InspectionResult,
	image: ImageRef,
) -> tuple[list[Finding], FileStatistics]:
	"""Run every enabled checker over one inspection result."""
	findings: list[Finding] = []
	statistics = FileStatistics()
	for checker, item in checkers:
		findings.extend(checker.evaluate(result, image, item))
		statistics.merge(checker.image_statistics(result, item))
	return findings, statistics
