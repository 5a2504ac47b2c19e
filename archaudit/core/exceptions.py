# (c) Copyright Datacraft, 2026
"""Exception hierarchy for the audit service.

Every error carries a stable ``error_key`` that callers can localize.
"""


class AuditError(Exception):
	"""Base class for audit service errors."""
	error_key: str = 'error-unknown'
	status_code: int = 500

	def __init__(self, message: str | None = None):
		super().__init__(message or self.__class__.__doc__)
		self.message = message or self.__class__.__doc__


class ConfigurationError(AuditError):
	"""Rule configuration is invalid."""
	error_key = 'error-invalid-config'
	status_code = 400


class NoRulesConfiguredError(ConfigurationError):
	"""No checks are enabled in the rule configuration."""
	error_key = 'error-no-rules-configured'


class ServiceNotConfiguredError(ConfigurationError):
	"""Image checks are enabled but no inspection service URL is configured."""
	error_key = 'error-no-service-url'


class TaskNotFoundError(AuditError):
	"""Task not found."""
	error_key = 'error-task-not-found'
	status_code = 404


class TaskConflictError(AuditError):
	"""A check is already running for this collection."""
	error_key = 'error-task-running'
	status_code = 409


class InvalidTransitionError(AuditError):
	"""The requested state change is not allowed for this task."""
	error_key = 'error-invalid-transition'
	status_code = 409

	def __init__(self, action: str, state: str):
		super().__init__(f"Cannot {action} a task in state '{state}'")
		self.action = action
		self.state = state


class ResultNotReadyError(AuditError):
	"""The task has not produced a final result yet."""
	error_key = 'error-result-not-ready'
	status_code = 409


class ResultFrozenError(AuditError):
	"""Findings cannot be added to a completed result."""


class InspectionError(AuditError):
	"""The inspection service request failed."""
	error_key = 'error-inspection'
	status_code = 502


class InspectionResponseError(InspectionError):
	"""The inspection service returned an unusable response."""
	error_key = 'error-inspection-response'
