# (c) Copyright Datacraft, 2026
"""Per-image inspection request and result models."""
from dataclasses import dataclass, field
from typing import Any

Box = list[float]

UNAVAILABLE_MESSAGE = "AI inspection service unavailable, please check or restart the service"

DEFAULT_ALLOWED_FORMATS = ['.jpeg', '.tiff', '.pdf']


@dataclass
class InspectionRequest:
	"""Checks to run on one image, with their thresholds."""
	check_blank: bool = False
	check_skew: bool = False
	check_house_angle: bool = False
	check_edge: bool = False
	check_stain: bool = False
	check_hole: bool = False
	check_dpi: bool = False
	check_format: bool = False
	check_file_size: bool = False
	check_page_size: bool = False
	check_bit_depth: bool = False
	check_quality: bool = False

	skew_tolerance: float = 0.5
	edge_strict_mode: int = 0
	stain_threshold: int = 10
	hole_threshold: int = 1
	min_dpi: int = 300
	min_kb: int = 10
	max_kb: int = 10000
	min_quality: int = 80
	tolerance: int = 0
	min_bit_depth: int = 8
	sensitivity: int = 3
	allowed_formats: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_FORMATS))

	def has_checks(self) -> bool:
		return any((
			self.check_blank, self.check_skew, self.check_house_angle,
			self.check_edge, self.check_stain, self.check_hole,
			self.check_dpi, self.check_format, self.check_file_size,
			self.check_page_size, self.check_bit_depth, self.check_quality,
		))

	def to_config(self) -> dict[str, Any]:
		"""Flags and thresholds as the single-shot ``config`` object."""
		return {
			'blank': self.check_blank,
			'skew': self.check_skew,
			'house_angle': self.check_house_angle,
			'edge': self.check_edge,
			'stain': self.check_stain,
			'hole': self.check_hole,
			'dpi': self.check_dpi,
			'format': self.check_format,
			'kb': self.check_file_size,
			'page_size': self.check_page_size,
			'bit_depth': self.check_bit_depth,
			'quality': self.check_quality,
			'skew_tolerance': self.skew_tolerance,
			'edge_strict': self.edge_strict_mode,
			'stain_threshold': self.stain_threshold,
			'hole_threshold': self.hole_threshold,
			'min_dpi': self.min_dpi,
			'min_kb': self.min_kb,
			'max_kb': self.max_kb,
			'min_quality': self.min_quality,
			'tolerance': self.tolerance,
			'min_bit_depth': self.min_bit_depth,
			'sensitivity': self.sensitivity,
			'allowed_formats': list(self.allowed_formats),
		}


@dataclass
class InspectionResult:
	"""
	Outcome of inspecting one image.

	Every defect field is optional: ``None`` means the service did not report
	it. A result with nothing reported is "empty", which is distinct from a
	result that reports ``blank=False``. Connectivity failures are signalled
	by ``service_unavailable``, never by emptiness.
	"""
	blank: bool | None = None
	skew_angle: float | None = None
	house_angle: int | None = None
	dpi: int | None = None
	kb: float | None = None
	quality: float | None = None
	bit_depth: int | None = None
	page_size: str | None = None
	format: str | None = None
	stain: list[Box] = field(default_factory=list)
	hole: list[Box] = field(default_factory=list)
	edge: list[Box] = field(default_factory=list)

	service_unavailable: bool = False
	message: str | None = None

	def is_empty(self) -> bool:
		scalars = (
			self.blank, self.skew_angle, self.house_angle, self.dpi,
			self.kb, self.quality, self.bit_depth, self.page_size, self.format,
		)
		return (
			all(value is None for value in scalars)
			and not self.stain and not self.hole and not self.edge
		)

	@classmethod
	def empty(cls) -> "InspectionResult":
		return cls()

	@classmethod
	def unavailable(cls, message: str = UNAVAILABLE_MESSAGE) -> "InspectionResult":
		return cls(service_unavailable=True, message=message)

	@classmethod
	def from_fields(cls, fields: dict[str, Any]) -> "InspectionResult":
		"""Build a result from decoded response fields, ignoring bad values."""
		result = cls()

		blank = fields.get('blank', fields.get('is_blank'))
		if blank is not None:
			result.blank = _to_bool(blank)

		result.skew_angle = _to_number(fields.get('rectify'), float)
		result.house_angle = _to_number(fields.get('house_angle'), int)
		result.dpi = _to_number(fields.get('dpi'), int)
		result.kb = _to_number(fields.get('kb'), float)
		result.quality = _to_number(fields.get('quality'), float)
		result.bit_depth = _to_number(fields.get('bit_depth'), int)

		page_size = fields.get('page_size')
		if page_size not in (None, ''):
			result.page_size = str(page_size)
		fmt = fields.get('format')
		if fmt not in (None, ''):
			result.format = str(fmt)

		result.stain = _to_boxes(fields.get('stain'))
		result.hole = _to_boxes(fields.get('hole'))
		edge = fields.get('edge_remove')
		if edge is None:
			edge = fields.get('edge')
		result.edge = _to_boxes(edge)
		return result


def _to_bool(value: Any) -> bool:
	if isinstance(value, str):
		return value.strip().lower() in ('true', '1', 'yes')
	return bool(value)


def _to_number(value: Any, kind: type):
	if value is None or isinstance(value, bool):
		return None
	try:
		return kind(float(value))
	except (TypeError, ValueError):
		return None


def _to_boxes(value: Any) -> list[Box]:
	"""Keep only well-formed boxes with at least four coordinates."""
	if not isinstance(value, list):
		return []
	boxes = []
	for item in value:
		if isinstance(item, list) and len(item) >= 4:
			try:
				boxes.append([float(v) for v in item[:4]])
			except (TypeError, ValueError):
				continue
	return boxes
