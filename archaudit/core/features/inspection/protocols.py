# (c) Copyright Datacraft, 2026
"""Wire protocols for the external inspection service."""
import base64
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import urlsplit

import httpx

from archaudit.core.exceptions import InspectionResponseError
from archaudit.core.types import InspectionMode
from .parser import parse_inspection_text
from .schema import InspectionRequest, InspectionResult

logger = logging.getLogger(__name__)

TWO_STEP_PORT = 7999

CREATED_STATUSES = (200, 201, 202)


def detect_mode(endpoint: str, mode: InspectionMode | str | None = None) -> InspectionMode:
	"""
	Pick the wire protocol for an endpoint.

	An explicit mode wins unless it is ``auto``. Otherwise the two-step
	protocol is used for services listening on port 7999 and the single-shot
	protocol for everything else.
	"""
	if mode:
		mode = InspectionMode(mode)
		if mode != InspectionMode.AUTO:
			return mode
	try:
		port = urlsplit(endpoint).port
	except ValueError:
		port = None
	if port == TWO_STEP_PORT or f":{TWO_STEP_PORT}" in endpoint:
		return InspectionMode.TWO_STEP
	return InspectionMode.SINGLE_SHOT


def normalize_base_url(endpoint: str) -> str:
	"""Reduce an endpoint to ``scheme://host[:port]``."""
	parts = urlsplit(endpoint if '://' in endpoint else f"http://{endpoint}")
	return f"{parts.scheme}://{parts.netloc}"


def _flag(value: bool) -> str:
	return 'true' if value else 'false'


class WireProtocol(ABC):
	"""One way of asking the inspection service about an image."""

	mode: InspectionMode

	def __init__(self, endpoint: str):
		self.endpoint = endpoint

	@abstractmethod
	def inspect(
		self,
		http: httpx.Client,
		image_path: Path,
		request: InspectionRequest,
	) -> InspectionResult:
		"""
		Inspect one image.

		Raises:
			httpx.HTTPError: On transport failures
			InspectionResponseError: When the service answers with an error
		"""
		pass

	@property
	@abstractmethod
	def health_url(self) -> str:
		"""URL requested to decide whether the service is reachable."""
		pass

	def reset(self) -> None:
		"""Forget any per-run server-side state."""

	def __repr__(self):
		return f"{self.__class__.__name__}({self.endpoint})"


class SingleShotProtocol(WireProtocol):
	"""One JSON POST per image carrying the encoded image and check config."""

	mode = InspectionMode.SINGLE_SHOT

	@property
	def health_url(self) -> str:
		return f"{normalize_base_url(self.endpoint)}/health"

	def inspect(self, http, image_path, request):
		payload = {
			'data': base64.b64encode(image_path.read_bytes()).decode('ascii'),
			'config': request.to_config(),
		}
		response = http.post(self.endpoint, json=payload)
		response.raise_for_status()
		try:
			body = response.json()
		except ValueError as e:
			raise InspectionResponseError(f"Invalid JSON from inspection service: {e}") from e

		if not isinstance(body, dict):
			raise InspectionResponseError("Inspection response is not an object")
		if body.get('code') != 0:
			raise InspectionResponseError(
				f"Inspection service returned code {body.get('code')}: {body.get('msg') or body.get('message')}"
			)
		data = body.get('data') or {}
		if not isinstance(data, dict):
			raise InspectionResponseError("Inspection response 'data' is not an object")
		return InspectionResult.from_fields(data)


class TwoStepProtocol(WireProtocol):
	"""
	Create an inspection task once, then submit each image to it.

	The create call carries the enabled checks as ``flag_*`` query
	parameters; each inspect call uploads the image as multipart field
	``img`` with thresholds as ``set_*`` query parameters. Responses are
	free-form text handled by the tolerant parser.
	"""

	mode = InspectionMode.TWO_STEP

	def __init__(self, endpoint: str):
		super().__init__(endpoint)
		self.base_url = normalize_base_url(endpoint)
		self._task_created = False
		self._lock = threading.Lock()

	@property
	def health_url(self) -> str:
		return f"{self.base_url}/docs"

	@property
	def task_created(self) -> bool:
		return self._task_created

	def reset(self) -> None:
		with self._lock:
			self._task_created = False

	def create_params(self, request: InspectionRequest) -> dict[str, str]:
		return {
			'flag_blank': _flag(request.check_blank),
			'flag_house_angle': 'true',
			'flag_rectify': _flag(request.check_skew),
			'flag_edge_remove': _flag(request.check_edge),
			'flag_stain': _flag(request.check_stain),
			'flag_hole': _flag(request.check_hole),
			'flag_dpi': _flag(request.check_dpi),
			'flag_format': _flag(request.check_format),
			'flag_kb': _flag(request.check_file_size),
			'flag_page_size': _flag(request.check_page_size),
			'flag_bit_depth': _flag(request.check_bit_depth),
		}

	def inspect_params(self, request: InspectionRequest) -> list[tuple[str, str]]:
		params = [
			('set_sensitivity', str(request.sensitivity)),
			('set_angle', str(request.skew_tolerance)),
			('set_stain', str(request.stain_threshold)),
			('set_hole', str(request.hole_threshold)),
			('set_dpi', str(request.min_dpi if request.check_dpi else 0)),
		]
		params.extend(('set_format', fmt) for fmt in request.allowed_formats)
		params.extend([
			('set_kb', str(request.min_kb)),
			('max_kb', str(request.max_kb)),
			('set_quality', str(request.min_quality)),
			('set_bit_depth', str(request.min_bit_depth or 8)),
			('edge_strict', str(request.edge_strict_mode)),
			('tolerance', str(request.tolerance)),
		])
		return params

	def ensure_task(self, http: httpx.Client, request: InspectionRequest) -> None:
		with self._lock:
			if self._task_created:
				return
			response = http.post(
				f"{self.base_url}/alot/chek",
				params=self.create_params(request),
			)
			if response.status_code not in CREATED_STATUSES:
				raise InspectionResponseError(
					f"Creating inspection task failed with HTTP {response.status_code}"
				)
			self._task_created = True
			logger.info(f"Inspection task created on {self.base_url}")

	def inspect(self, http, image_path, request):
		self.ensure_task(http, request)
		with open(image_path, 'rb') as f:
			response = http.post(
				f"{self.base_url}/alot/chek/inspect",
				params=self.inspect_params(request),
				files={'img': (image_path.name, f, 'application/octet-stream')},
			)
		if response.status_code != 200:
			raise InspectionResponseError(
				f"Inspection failed with HTTP {response.status_code}"
			)
		return InspectionResult.from_fields(parse_inspection_text(response.text))


PROTOCOLS: dict[InspectionMode, type[WireProtocol]] = {
	InspectionMode.SINGLE_SHOT: SingleShotProtocol,
	InspectionMode.TWO_STEP: TwoStepProtocol,
}


def get_protocol(endpoint: str, mode: InspectionMode | str | None = None) -> WireProtocol:
	"""Instantiate the protocol matching ``endpoint`` and ``mode``."""
	return PROTOCOLS[detect_mode(endpoint, mode)](endpoint)
