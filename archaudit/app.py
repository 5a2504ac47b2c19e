# (c) Copyright Datacraft, 2026
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from archaudit.core.config import get_settings
from archaudit.core.exceptions import AuditError
from archaudit.core.features.audit.manager import get_task_manager
from archaudit.core.features.audit.router import router as audit_router
from archaudit.core.features.monitoring.router import router as monitoring_router
from archaudit.core.logging import configure_logging
from archaudit.core.version import __version__

config = get_settings()
prefix = config.api_prefix

configure_logging(config.log_config)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Application lifespan handler for startup/shutdown events."""
	logger.info("Starting archaudit API server...")
	manager = get_task_manager()
	interrupted = manager.restore()
	if interrupted:
		logger.warning(f"{interrupted} run(s) from a previous process were marked as interrupted")

	yield

	logger.info("Shutting down archaudit API server...")
	manager.shutdown(wait=False)


app = FastAPI(
	title="Archival Quality Audit REST API",
	version=__version__,
	lifespan=lifespan,
)


@app.exception_handler(AuditError)
async def audit_error_handler(request: Request, exc: AuditError) -> JSONResponse:
	if exc.status_code >= 500:
		logger.error(f"{request.method} {request.url.path}: {exc.message}")
	return JSONResponse(
		status_code=exc.status_code,
		content={
			"code": "error",
			"error_key": exc.error_key,
			"message": exc.message,
		},
	)


app.include_router(audit_router, prefix=prefix)
app.include_router(monitoring_router, prefix=prefix)
