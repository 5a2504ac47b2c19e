# (c) Copyright Datacraft, 2026
"""
Run the enabled checks of one task, phase by phase and row by row.

Phases run in the order FORMAT, RESOURCE, IMAGES and each walks every row.
Cancel and pause requests are honoured at the top of each row; a paused
run saves a checkpoint and waits on the task's resume event.

An unreadable resource folder fails its row, never the run.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from archaudit.core.features import checks
from archaudit.core.features.checks import (
	CheckKind,
	ImageRef,
	RowChecker,
	RowFolder,
	RuleConfiguration,
	build_request,
	evaluate_image,
	resolve_resource_path,
)
from archaudit.core.features.checks.base import RESOURCE_COLUMN, Row
from archaudit.core.features.inspection import InspectionClient
from archaudit.core.features.monitoring.metrics import FINDINGS_TOTAL
from archaudit.core.features.results import (
	CheckCategory,
	CheckResult,
	ErrorType,
	Finding,
)
from archaudit.core.utils.files import list_images
from .task import ERROR_SERVICE_UNAVAILABLE, Checkpoint, CheckPhase, Task

logger = logging.getLogger(__name__)

ROW_CHECK_PHASES = {
	CheckKind.FORMAT_RULES: CheckPhase.FORMAT,
	CheckKind.RESOURCE_LINKS: CheckPhase.RESOURCE,
}


class _Stop(Exception):
	"""Raised inside a phase when the run must end early."""


@dataclass
class RowScan:
	"""A row's resource folder as seen before the images row loop."""
	folder: Path | None
	images: list[Path] | None = None
	error: OSError | None = None


class CheckOrchestrator:
	def __init__(
		self,
		poll_interval: float = 1.0,
		on_pause: Callable[[Task], None] | None = None,
		on_resume: Callable[[Task], None] | None = None,
	):
		self.poll_interval = poll_interval
		self.on_pause = on_pause
		self.on_resume = on_resume

	def plan(self, rules: RuleConfiguration) -> dict[CheckPhase, list]:
		"""Enabled checkers per phase; phases with nothing to run are left out."""
		planned: dict[CheckPhase, list] = {}
		for checker in checks.enabled_row_checkers(rules):
			planned.setdefault(ROW_CHECK_PHASES[checker.kind], []).append(checker)

		image_checkers = checks.enabled_image_checkers(rules)
		folder_checkers = checks.enabled_folder_checkers(rules)
		if image_checkers or folder_checkers:
			planned[CheckPhase.IMAGES] = [image_checkers, folder_checkers]

		return {phase: planned[phase] for phase in CheckPhase if phase in planned}

	def run(
		self,
		task: Task,
		rows: Sequence[Row],
		rules: RuleConfiguration,
		client: InspectionClient | None = None,
	) -> CheckResult:
		"""
		Execute every scheduled phase for ``task``.

		The task ends COMPLETED, CANCELLED, or FAILED when the inspection
		service is unreachable. Other exceptions propagate to the caller with
		the partial result already attached to the task.
		"""
		result = CheckResult(total_rows=len(rows))
		task.result = result
		task.total_rows = len(rows)

		plan = self.plan(rules)
		task.schedule(plan)
		logger.info(
			f"Task {task.id}: {len(rows)} rows, phases {[p.value for p in plan]}"
		)

		try:
			for phase, phase_checkers in plan.items():
				task.begin_phase(phase)
				if phase == CheckPhase.IMAGES:
					image_checkers, folder_checkers = phase_checkers
					self._run_images(task, result, rows, rules, client, image_checkers, folder_checkers)
				else:
					for checker in phase_checkers:
						self._run_rows(task, result, rows, rules, checker)
		except _Stop:
			if task.should_stop():
				task.mark_cancelled()
			return result

		result.complete(checked_rows=len(rows))
		task.mark_completed()
		return result

	def _safe_point(self, task: Task, phase: CheckPhase, row_index: int) -> None:
		if task.should_stop():
			raise _Stop()
		if not task.pause_requested:
			return

		if task.mark_paused(Checkpoint(phase=phase, last_processed_row=row_index - 1)):
			if self.on_pause is not None:
				self.on_pause(task)
			if not task.wait_if_paused(self.poll_interval):
				raise _Stop()
			task.mark_resumed()
			logger.info(f"Task {task.id} resumed at row {row_index}")
			if self.on_resume is not None:
				self.on_resume(task)
		if task.should_stop():
			raise _Stop()

	def _record(self, task: Task, result: CheckResult, findings: list[Finding]) -> None:
		if not findings:
			return
		result.add_findings(findings)
		task.record_findings(findings)
		for finding in findings:
			FINDINGS_TOTAL.labels(category=finding.category.value).inc()

	def _run_rows(
		self,
		task: Task,
		result: CheckResult,
		rows: Sequence[Row],
		rules: RuleConfiguration,
		checker: RowChecker,
	) -> None:
		iterator = checker.iter_rows(rows, rules)
		for row_index in range(len(rows)):
			self._safe_point(task, task.phase, row_index)
			_, findings = next(iterator)
			self._record(task, result, findings)
			task.advance()

	def _scan(self, rows: Sequence[Row], rules: RuleConfiguration) -> list[RowScan]:
		"""Resolve and list every row's folder before the images row loop."""
		scans = []
		for row in rows:
			folder = None
			try:
				folder = resolve_resource_path(row, rules.resource)
				if folder is None or not folder.is_dir():
					scans.append(RowScan(folder))
				else:
					scans.append(RowScan(folder, images=list_images(folder)))
			except OSError as e:
				scans.append(RowScan(folder, error=e))
		return scans

	def _run_images(
		self,
		task: Task,
		result: CheckResult,
		rows: Sequence[Row],
		rules: RuleConfiguration,
		client: InspectionClient | None,
		image_checkers: list,
		folder_checkers: list,
	) -> None:
		request = build_request(image_checkers) if image_checkers else None
		inspect = request is not None and client is not None
		scans = self._scan(rows, rules)
		if inspect:
			task.plan_images(sum(len(scan.images) for scan in scans if scan.images))
		folders: list[RowFolder] = []

		for row_index, scan in enumerate(scans):
			self._safe_point(task, CheckPhase.IMAGES, row_index)
			if scan.error is not None:
				logger.error(f"Row {row_index}: cannot read resource folder {scan.folder}: {scan.error}")
				self._record(task, result, [Finding(
					row_index=row_index,
					column=RESOURCE_COLUMN,
					value=str(scan.folder or ''),
					category=CheckCategory.CONTENT,
					error_type=ErrorType.PROCESSING_ERROR,
					message=f"Cannot read resource folder: {scan.error}",
				)])
			elif scan.images is None:
				logger.debug(f"Row {row_index}: no resource folder, skipping")
			else:
				folders.append(RowFolder(row_index, scan.folder))
				if inspect:
					for path in scan.images:
						self._inspect(task, result, client, request, image_checkers, ImageRef(row_index, path))
						task.advance_image()
			task.advance()

		for checker, item in folder_checkers:
			logger.debug(f"Running {checker!r} over {len(folders)} folders")
			try:
				findings = checker.check(folders, item)
				statistics = checker.statistics(folders, item)
			except OSError as e:
				logger.exception(f"{checker!r} failed")
				findings = [Finding(
					category=CheckCategory.CONTENT,
					error_type=ErrorType.PROCESSING_ERROR,
					message=f"{checker.name} failed: {e}",
				)]
				statistics = None
			self._record(task, result, findings)
			result.merge_statistics(statistics)

	def _inspect(self, task, result, client, request, image_checkers, image: ImageRef) -> None:
		try:
			inspection = client.inspect(image.path, request)
			if inspection.service_unavailable:
				logger.error(f"Task {task.id}: inspection service unavailable at {image.path}")
				result.mark_service_unavailable(inspection.message)
				task.mark_failed(inspection.message, error_key=ERROR_SERVICE_UNAVAILABLE)
				raise _Stop()
			findings, statistics = evaluate_image(image_checkers, inspection, image)
		except _Stop:
			raise
		except Exception as e:
			logger.exception(f"Failed to process image {image.path}")
			findings = [Finding(
				row_index=image.row_index,
				column=RESOURCE_COLUMN,
				value=str(image.folder),
				category=CheckCategory.CONTENT,
				error_type=ErrorType.PROCESSING_ERROR,
				message=f"Failed to process image {image.name}: {e}",
				file_name=image.name,
			)]
			statistics = None
		self._record(task, result, findings)
		result.merge_statistics(statistics)
