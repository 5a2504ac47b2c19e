# (c) Copyright Datacraft, 2026
from .manager import TaskManager, get_task_manager
from .orchestrator import CheckOrchestrator
from .registry import TaskRegistry
from .store import TaskStore
from .task import Checkpoint, CheckPhase, Task, TaskState, new_task_id

__all__ = [
	"TaskManager",
	"get_task_manager",
	"CheckOrchestrator",
	"TaskRegistry",
	"TaskStore",
	"Checkpoint",
	"CheckPhase",
	"Task",
	"TaskState",
	"new_task_id",
]
