# (c) Copyright Datacraft, 2026
"""Prometheus metrics for quality check runs."""
from prometheus_client import Counter

RUNS_TOTAL = Counter(
	'archaudit_runs_total',
	'Quality check runs by final state',
	['state'],
)
IMAGES_INSPECTED = Counter(
	'archaudit_images_inspected_total',
	'Images sent to the inspection service',
)
INSPECTION_RETRIES = Counter(
	'archaudit_inspection_retries_total',
	'Inspection attempts that failed and were retried',
)
SERVICE_UNAVAILABLE = Counter(
	'archaudit_service_unavailable_total',
	'Inspections that gave up because the service was unreachable',
)
FINDINGS_TOTAL = Counter(
	'archaudit_findings_total',
	'Findings recorded by category',
	['category'],
)
