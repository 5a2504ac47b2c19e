# (c) Copyright Datacraft, 2026
"""Quality check task API endpoints."""
import logging

from fastapi import APIRouter, Depends, status

from archaudit.core.exceptions import ServiceNotConfiguredError
from . import schema
from .manager import TaskManager, get_task_manager

router = APIRouter(
	prefix="/quality-checks",
	tags=["quality-checks"],
)

logger = logging.getLogger(__name__)


@router.post("", status_code=status.HTTP_202_ACCEPTED)
def submit_quality_check(
	data: schema.QualityCheckSubmit,
	manager: TaskManager = Depends(get_task_manager),
) -> schema.TaskInfo:
	"""Start a quality check run for a collection."""
	task = manager.submit(
		collection_id=data.collection_id,
		rows=data.rows,
		rules=data.rules,
		service_url=data.service_url,
		rule_id=data.rule_id,
	)
	return schema.TaskInfo.from_task(task)


@router.get("")
def list_quality_checks(
	collection_id: str | None = None,
	manager: TaskManager = Depends(get_task_manager),
) -> schema.TaskListResponse:
	"""List runs, newest first."""
	tasks = manager.list_tasks(collection_id)
	return schema.TaskListResponse(
		items=[schema.TaskInfo.from_task(t) for t in tasks],
		total=len(tasks),
	)


@router.get("/service/health")
def inspection_service_health(
	url: str | None = None,
	manager: TaskManager = Depends(get_task_manager),
) -> schema.ServiceHealth:
	"""Check that the inspection service is reachable."""
	endpoint = url or manager.settings.inspection_service_url
	if not endpoint:
		raise ServiceNotConfiguredError()
	with manager.client_factory(endpoint) as client:
		available = client.check_health()
		mode = client.mode.value
	return schema.ServiceHealth(url=endpoint, mode=mode, available=available)


@router.get("/collections/{collection_id}/latest")
def get_latest_quality_check(
	collection_id: str,
	manager: TaskManager = Depends(get_task_manager),
) -> schema.TaskInfo:
	"""Active run of a collection, else its most recent one."""
	return schema.TaskInfo.from_task(manager.latest(collection_id))


@router.get("/{task_id}")
def get_quality_check(
	task_id: str,
	manager: TaskManager = Depends(get_task_manager),
) -> schema.TaskInfo:
	return schema.TaskInfo.from_task(manager.get(task_id))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quality_check(
	task_id: str,
	manager: TaskManager = Depends(get_task_manager),
):
	"""Delete a finished run and its result."""
	manager.delete(task_id)


@router.post("/{task_id}/pause")
def pause_quality_check(
	task_id: str,
	manager: TaskManager = Depends(get_task_manager),
) -> schema.TaskInfo:
	return schema.TaskInfo.from_task(manager.pause(task_id))


@router.post("/{task_id}/resume")
def resume_quality_check(
	task_id: str,
	manager: TaskManager = Depends(get_task_manager),
) -> schema.TaskInfo:
	return schema.TaskInfo.from_task(manager.resume(task_id))


@router.post("/{task_id}/cancel")
def cancel_quality_check(
	task_id: str,
	manager: TaskManager = Depends(get_task_manager),
) -> schema.TaskInfo:
	return schema.TaskInfo.from_task(manager.cancel(task_id))


@router.get("/{task_id}/result")
def get_quality_check_result(
	task_id: str,
	manager: TaskManager = Depends(get_task_manager),
) -> schema.TaskResultResponse:
	"""Final result with summary; 409 while the run is still active."""
	manager.get_result(task_id)
	return schema.TaskResultResponse.from_task(manager.get(task_id))
