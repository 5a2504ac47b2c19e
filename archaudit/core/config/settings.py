# (c) Copyright Datacraft, 2026
"""Application settings configuration."""
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from archaudit.core.types import InspectionMode


class Settings(BaseSettings):
	api_prefix: str = ''
	log_config: Path | None = Path("log_config.yaml")

	# Task persistence
	db_url: str = 'sqlite:///archaudit.db'

	# Inspection service
	inspection_service_url: str | None = None
	inspection_mode: InspectionMode = InspectionMode.AUTO
	inspection_connect_timeout: float = Field(gt=0, default=60.0)
	inspection_read_timeout: float = Field(gt=0, default=120.0)
	inspection_retry_count: int = Field(gt=0, default=3)
	inspection_retry_delay: float = Field(ge=0, default=2.0)

	# Runs
	max_concurrent_runs: int = Field(gt=0, default=4)
	pause_poll_interval: float = Field(gt=0, default=1.0)

	model_config = SettingsConfigDict(
		env_prefix='qc_',
		env_file='.env',
		env_file_encoding='utf-8',
		extra='ignore',
	)


_settings: Settings | None = None


def get_settings() -> Settings:
	global _settings
	if _settings is None:
		_settings = Settings()
	return _settings
