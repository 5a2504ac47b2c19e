# (c) Copyright Datacraft, 2026
from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from archaudit.core.features.audit.manager import TaskManager, get_task_manager

router = APIRouter(
	prefix="/monitoring",
	tags=["monitoring"]
)


@router.get("/health")
def health_check(manager: TaskManager = Depends(get_task_manager)):
	db_status = manager.store.ping() if manager.store is not None else True
	active = sum(1 for task in manager.registry.all() if task.is_active)

	return {
		"status": "ok" if db_status else "error",
		"details": {
			"database": "up" if db_status else "down",
			"active_runs": active,
		}
	}


@router.get("/metrics")
def metrics():
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
