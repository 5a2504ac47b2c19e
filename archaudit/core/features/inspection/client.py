# (c) Copyright Datacraft, 2026
"""HTTP client for the external image inspection service."""
import logging
import time
from pathlib import Path
from typing import Callable

import httpx

from archaudit.core.config import Settings, get_settings
from archaudit.core.features.monitoring.metrics import (
	IMAGES_INSPECTED,
	INSPECTION_RETRIES,
	SERVICE_UNAVAILABLE,
)
from archaudit.core.types import InspectionMode
from .protocols import WireProtocol, get_protocol
from .schema import InspectionRequest, InspectionResult, UNAVAILABLE_MESSAGE

logger = logging.getLogger(__name__)

DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_DELAY = 2.0

# Lowercased fragments of error messages raised when the service host
# cannot be reached at all.
UNREACHABLE_MARKERS = (
	'connection refused',
	'connection reset',
	'connect to host',
	'no route to host',
	'connection timed out',
	'timed out',
	'network is unreachable',
	'unknown host',
	'name or service not known',
	'temporary failure in name resolution',
	'nodename nor servname',
	'eof occurred',
	'eofexception',
	'socket exception',
)


def is_service_unreachable(error: BaseException | None) -> bool:
	"""True if ``error`` (or an error it wraps) says the host is unreachable."""
	seen = set()
	while error is not None and id(error) not in seen:
		seen.add(id(error))
		message = str(error).lower()
		if any(marker in message for marker in UNREACHABLE_MARKERS):
			return True
		error = error.__cause__ or error.__context__
	return False


class InspectionClient:
	"""
	Inspect images one at a time with retries.

	Every inspection is attempted up to ``retry_count`` times with
	``retry_delay`` seconds between attempts. When all attempts fail, an
	unreachable service yields a result flagged ``service_unavailable``;
	any other failure yields an empty result so a single bad image never
	stops a batch.
	"""

	def __init__(
		self,
		endpoint: str,
		mode: InspectionMode | str | None = None,
		retry_count: int = DEFAULT_RETRY_COUNT,
		retry_delay: float = DEFAULT_RETRY_DELAY,
		connect_timeout: float = 60.0,
		read_timeout: float = 120.0,
		transport: httpx.BaseTransport | None = None,
		sleep: Callable[[float], None] = time.sleep,
	):
		self.protocol: WireProtocol = get_protocol(endpoint, mode)
		self.retry_count = max(1, retry_count)
		self.retry_delay = retry_delay
		self._sleep = sleep
		self._http = httpx.Client(
			timeout=httpx.Timeout(read_timeout, connect=connect_timeout),
			transport=transport,
		)

	@classmethod
	def from_settings(
		cls,
		endpoint: str | None = None,
		settings: Settings | None = None,
		**kwargs,
	) -> "InspectionClient":
		settings = settings or get_settings()
		return cls(
			endpoint or settings.inspection_service_url,
			mode=kwargs.pop('mode', settings.inspection_mode),
			retry_count=settings.inspection_retry_count,
			retry_delay=settings.inspection_retry_delay,
			connect_timeout=settings.inspection_connect_timeout,
			read_timeout=settings.inspection_read_timeout,
			**kwargs,
		)

	@property
	def mode(self) -> InspectionMode:
		return self.protocol.mode

	def inspect(self, image_path: Path | str, request: InspectionRequest) -> InspectionResult:
		"""
		Inspect one image.

		Args:
			image_path: Image file on local disk
			request: Enabled checks and thresholds

		Returns:
			The typed inspection result; never raises for service errors
		"""
		image_path = Path(image_path)
		if not image_path.is_file():
			logger.warning(f"Image not found, skipping inspection: {image_path}")
			return InspectionResult.empty()

		last_error: Exception | None = None
		for attempt in range(1, self.retry_count + 1):
			try:
				result = self.protocol.inspect(self._http, image_path, request)
				IMAGES_INSPECTED.inc()
				return result
			except Exception as e:
				last_error = e
				logger.warning(
					f"Inspection attempt {attempt}/{self.retry_count} failed "
					f"for {image_path.name}: {e}"
				)
				if attempt < self.retry_count:
					INSPECTION_RETRIES.inc()
					self._sleep(self.retry_delay)

		if is_service_unreachable(last_error):
			SERVICE_UNAVAILABLE.inc()
			logger.error(f"Inspection service unreachable at {self.protocol.endpoint}: {last_error}")
			return InspectionResult.unavailable(UNAVAILABLE_MESSAGE)

		logger.error(
			f"Inspection of {image_path} failed after {self.retry_count} attempts: {last_error}"
		)
		return InspectionResult.empty()

	def check_health(self) -> bool:
		"""Return True if the service answers its health URL."""
		try:
			response = self._http.get(self.protocol.health_url)
		except httpx.HTTPError as e:
			logger.info(f"Inspection service health check failed: {e}")
			return False
		return response.is_success

	def close(self) -> None:
		self._http.close()

	def __enter__(self):
		return self

	def __exit__(self, exc_type, exc, tb):
		self.close()

	def __repr__(self):
		return f"InspectionClient({self.protocol!r})"
