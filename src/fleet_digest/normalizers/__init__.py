"""
Normalizers: total, pure mappings from raw Fleetio records to the fixed-shape
records in fleet_digest.models.
"""

from fleet_digest.normalizers.issue import normalize_issue, normalize_issues
from fleet_digest.normalizers.service_reminder import (
    normalize_service_reminder,
    normalize_service_reminders,
)
from fleet_digest.normalizers.vehicle import normalize_vehicle, normalize_vehicles

__all__: list[str] = [
    'normalize_issue',
    'normalize_issues',
    'normalize_service_reminder',
    'normalize_service_reminders',
    'normalize_vehicle',
    'normalize_vehicles',
]
