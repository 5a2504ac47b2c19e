# (c) Copyright Datacraft, 2026
"""Shared fixtures for quality audit tests."""
from pathlib import Path

import pytest
from PIL import Image

from archaudit.core.config import Settings
from archaudit.core.db.engine import make_engine
from archaudit.core.features.audit import TaskManager, TaskStore
from archaudit.core.features.checks import RuleConfiguration
from archaudit.core.features.inspection import InspectionResult
from archaudit.core.types import InspectionMode

SERVICE_URL = "http://inspector.local:8089/api/inspect"


def make_image(path: Path, color=(255, 255, 255), size=(16, 16)) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	Image.new("RGB", size, color).save(path)
	return path


class StubInspectionClient:
	"""Stands in for InspectionClient; results are looked up by image path."""

	mode = InspectionMode.SINGLE_SHOT

	def __init__(self, results=None, default=None, on_inspect=None):
		self.results = results or {}
		self.default = default or InspectionResult(blank=False)
		self.on_inspect = on_inspect
		self.calls: list[Path] = []
		self.closed = False

	def inspect(self, image_path, request):
		image_path = Path(image_path)
		self.calls.append(image_path)
		if self.on_inspect is not None:
			self.on_inspect(image_path)
		result = self.results.get(image_path, self.default)
		if isinstance(result, Exception):
			raise result
		return result

	def check_health(self) -> bool:
		return True

	def close(self):
		self.closed = True

	def __enter__(self):
		return self

	def __exit__(self, exc_type, exc, tb):
		self.close()


@pytest.fixture
def settings():
	return Settings(
		_env_file=None,
		inspection_service_url=SERVICE_URL,
		inspection_retry_delay=0,
		pause_poll_interval=0.02,
		max_concurrent_runs=2,
	)


@pytest.fixture
def store(tmp_path):
	return TaskStore(make_engine(f"sqlite:///{tmp_path / 'tasks.db'}"))


@pytest.fixture
def stub_client():
	return StubInspectionClient()


@pytest.fixture
def manager(settings, store, stub_client):
	manager = TaskManager(
		store=store,
		client_factory=lambda endpoint: stub_client,
		settings=settings,
	)
	yield manager
	manager.shutdown(wait=True)


@pytest.fixture
def archive(tmp_path):
	"""
	Five rows, each with a resource folder holding two distinct pages.

	Returns:
		Tuple of (base folder, rows)
	"""
	base = tmp_path / "archive"
	rows = []
	for i in range(5):
		archive_no = f"A{i:03d}"
		for page in (1, 2):
			make_image(base / archive_no / f"page_{page:03d}.jpg", color=(i * 40, page * 60, 10))
		rows.append({"archive_no": archive_no, "title": f"Document {i}", "pages": "2"})
	return base, rows


def image_rules(base: Path, *codes: str, **extra) -> RuleConfiguration:
	return RuleConfiguration.model_validate({
		"id": "rule-1",
		"items": [{"code": code, "enabled": True} for code in codes],
		"resource": {"basePath": str(base), "pathFields": ["archive_no"], "separator": "/"},
		**extra,
	})


@pytest.fixture
def rules_for():
	return image_rules
