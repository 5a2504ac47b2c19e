# (c) Copyright Datacraft, 2026
from enum import Enum


class InspectionMode(str, Enum):
	"""Wire protocol used to talk to the inspection service."""
	AUTO = 'auto'
	SINGLE_SHOT = 'single_shot'
	TWO_STEP = 'two_step'
