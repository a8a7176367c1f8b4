# fleet_digest/normalizers/service_reminder.py
"""Reduce raw Fleetio service reminder records to NormalizedServiceReminder."""

import logging
from typing import Any, Final

from fleet_digest.models import NormalizedServiceReminder
from fleet_digest.normalizers.coercion import (
    as_mapping,
    coerce_int,
    coerce_str,
)

__all__: list[str] = ['normalize_service_reminder', 'normalize_service_reminders']

logger: logging.Logger = logging.getLogger(__name__)

OVERDUE_STATUS: Final[str] = 'overdue'


def normalize_service_reminder(raw_reminder: Any) -> NormalizedServiceReminder:
    """
    Map one raw service reminder record to its canonical shape.

    Field mapping from the Fleetio payload:
        service_task_name            -> name
        service_reminder_status_name -> status
        next_due_at                  -> due_date
        next_due_meter_value         -> due_mileage

    is_overdue is True only when the raw status is exactly 'overdue'.

    Args:
        raw_reminder: Raw service reminder dictionary from the API.

    Returns:
        NormalizedServiceReminder with every field populated.
    """
    record = as_mapping(raw_reminder)
    raw_status: object = record.get('service_reminder_status_name')

    return NormalizedServiceReminder(
        id=coerce_int(record.get('id')),
        vehicle_id=coerce_int(record.get('vehicle_id')),
        name=coerce_str(record.get('service_task_name')),
        status=coerce_str(raw_status),
        due_date=coerce_str(record.get('next_due_at')),
        due_mileage=coerce_int(record.get('next_due_meter_value')),
        is_overdue=raw_status == OVERDUE_STATUS,
        created_at=coerce_str(record.get('created_at')),
        updated_at=coerce_str(record.get('updated_at')),
    )


def normalize_service_reminders(raw_reminders: Any) -> list[NormalizedServiceReminder]:
    """Normalize a collection of raw service reminders; [] for non-list input."""
    if not isinstance(raw_reminders, list):
        logger.debug(
            'Expected a list of service reminders, got %s; returning []',
            type(raw_reminders).__name__,
        )
        return []

    return [normalize_service_reminder(raw_reminder) for raw_reminder in raw_reminders]
