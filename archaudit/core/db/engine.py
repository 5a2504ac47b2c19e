# (c) Copyright Datacraft, 2026
import logging
from functools import lru_cache

from sqlalchemy import Engine, create_engine

from archaudit.core.config import get_settings

logger = logging.getLogger(__name__)


def make_engine(db_url: str) -> Engine:
	connect_args = {}
	if db_url.startswith("sqlite"):
		# runs write from worker threads
		connect_args["check_same_thread"] = False
	return create_engine(db_url, connect_args=connect_args)


@lru_cache()
def get_engine() -> Engine:
	settings = get_settings()
	logger.info(f"Using task database {settings.db_url}")
	return make_engine(settings.db_url)
