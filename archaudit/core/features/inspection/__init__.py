# (c) Copyright Datacraft, 2026
"""Client for the external image inspection service."""
from .client import InspectionClient, is_service_unreachable
from .parser import parse_inspection_text
from .protocols import (
	SingleShotProtocol,
	TwoStepProtocol,
	WireProtocol,
	detect_mode,
	get_protocol,
)
from .schema import InspectionRequest, InspectionResult

__all__ = [
	'InspectionClient',
	'InspectionRequest',
	'InspectionResult',
	'SingleShotProtocol',
	'TwoStepProtocol',
	'WireProtocol',
	'detect_mode',
	'get_protocol',
	'is_service_unreachable',
	'parse_inspection_text',
]
