# (c) Copyright Datacraft, 2026
"""Result model shared by checkers, the orchestrator and the task API."""
from .models import (
	NO_ROW,
	BoundingBox,
	CheckCategory,
	CheckResult,
	ErrorType,
	FileStatistics,
	Finding,
	FindingSeverity,
	ResultSummary,
)

__all__ = [
	'NO_ROW',
	'BoundingBox',
	'CheckCategory',
	'CheckResult',
	'ErrorType',
	'FileStatistics',
	'Finding',
	'FindingSeverity',
	'ResultSummary',
]
