# (c) Copyright Datacraft, 2026
"""Logging setup from a YAML dictConfig file."""
import logging
from logging.config import dictConfig
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config_path: Path | str | None) -> bool:
	"""
	Configure logging from a YAML file.

	Args:
		config_path: Path to a logging dictConfig in YAML format

	Returns:
		True if the YAML config was applied, False if the basic fallback was used
	"""
	if config_path is not None:
		path = Path(config_path)
		if path.exists() and path.is_file():
			with open(path, "r") as stream:
				config = yaml.safe_load(stream)
			dictConfig(config)
			logger.debug(f"Logging configured from {path}")
			return True

	logging.basicConfig(level=logging.INFO, format=DEFAULT_FORMAT)
	return False
