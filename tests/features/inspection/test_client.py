# (c) Copyright Datacraft, 2026
"""Tests for the inspection client retry and availability handling."""
import httpx
import pytest

from archaudit.core.features.inspection import (
	InspectionClient,
	InspectionRequest,
	is_service_unreachable,
)
from archaudit.core.types import InspectionMode

SINGLE_SHOT_URL = "http://inspector.local:8089/api/inspect"


@pytest.fixture
def image(tmp_path):
	path = tmp_path / "page_001.jpg"
	path.write_bytes(b"\xff\xd8fake-jpeg")
	return path


def make_client(handler, sleeps, retry_count=3, endpoint=SINGLE_SHOT_URL):
	return InspectionClient(
		endpoint,
		retry_count=retry_count,
		retry_delay=2.0,
		transport=httpx.MockTransport(handler),
		sleep=sleeps.append,
	)


class TestRetry:
	"""Tests for the retry budget."""

	def test_three_attempts_two_sleeps(self, image):
		"""A persistently failing service is tried three times with two pauses."""
		attempts = []
		sleeps = []

		def handler(request):
			attempts.append(request)
			raise httpx.ReadError("unexpected payload")

		with make_client(handler, sleeps) as client:
			result = client.inspect(image, InspectionRequest(check_blank=True))

		assert len(attempts) == 3
		assert sleeps == [2.0, 2.0]
		assert result.is_empty()
		assert not result.service_unavailable

	def test_success_after_failure(self, image):
		"""A transient failure is retried and the later answer used."""
		attempts = []
		sleeps = []

		def handler(request):
			attempts.append(request)
			if len(attempts) == 1:
				return httpx.Response(500)
			return httpx.Response(200, json={"code": 0, "data": {"blank": True}})

		with make_client(handler, sleeps) as client:
			result = client.inspect(image, InspectionRequest(check_blank=True))

		assert len(attempts) == 2
		assert sleeps == [2.0]
		assert result.blank is True

	def test_connection_refused_marks_unavailable(self, image):
		"""An unreachable host yields a service_unavailable result."""
		sleeps = []

		def handler(request):
			raise httpx.ConnectError("[Errno 111] Connection refused")

		with make_client(handler, sleeps) as client:
			result = client.inspect(image, InspectionRequest(check_blank=True))

		assert result.service_unavailable
		assert result.message
		assert len(sleeps) == 2

	def test_missing_file_skips_request(self, tmp_path):
		"""A missing image returns an empty result without calling the service."""
		calls = []

		def handler(request):
			calls.append(request)
			return httpx.Response(200, json={"code": 0, "data": {}})

		with make_client(handler, []) as client:
			result = client.inspect(tmp_path / "missing.jpg", InspectionRequest())

		assert calls == []
		assert result.is_empty()


class TestServiceUnreachable:
	"""Tests for unreachable-service detection."""

	@pytest.mark.parametrize("message", [
		"Connection refused",
		"connection reset by peer",
		"Failed to connect to host inspector",
		"No route to host",
		"Read timed out",
		"Connection timed out",
		"Network is unreachable",
		"Unknown host: inspector",
		"Name or service not known",
		"Temporary failure in name resolution",
		"EOF occurred in violation of protocol",
	])
	def test_unreachable_messages(self, message):
		assert is_service_unreachable(RuntimeError(message))

	@pytest.mark.parametrize("message", [
		"HTTP 500 Internal Server Error",
		"Inspection service returned code 3: bad image",
		"invalid JSON",
	])
	def test_other_messages(self, message):
		assert not is_service_unreachable(RuntimeError(message))

	def test_wrapped_cause(self):
		"""The cause chain is searched too."""
		try:
			try:
				raise OSError("Connection refused")
			except OSError as e:
				raise RuntimeError("request failed") from e
		except RuntimeError as wrapped:
			assert is_service_unreachable(wrapped)

	def test_none(self):
		assert not is_service_unreachable(None)


class TestHealth:
	"""Tests for the health check."""

	def test_single_shot_health(self):
		seen = []

		def handler(request):
			seen.append(request.url.path)
			return httpx.Response(200)

		with make_client(handler, []) as client:
			assert client.check_health()
		assert seen == ["/health"]

	def test_two_step_health(self):
		seen = []

		def handler(request):
			seen.append(request.url.path)
			return httpx.Response(503)

		with make_client(handler, [], endpoint="http://inspector.local:7999") as client:
			assert client.mode == InspectionMode.TWO_STEP
			assert not client.check_health()
		assert seen == ["/docs"]

	def test_unreachable_health(self):
		def handler(request):
			raise httpx.ConnectError("Connection refused")

		with make_client(handler, []) as client:
			assert not client.check_health()
