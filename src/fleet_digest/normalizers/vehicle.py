# fleet_digest/normalizers/vehicle.py
"""Reduce raw Fleetio vehicle records to NormalizedVehicle."""

import logging
from typing import Any

from fleet_digest.models import NormalizedVehicle
from fleet_digest.normalizers.coercion import (
    as_mapping,
    coerce_int,
    coerce_str,
)

__all__: list[str] = ['normalize_vehicle', 'normalize_vehicles']

logger: logging.Logger = logging.getLogger(__name__)


def normalize_vehicle(raw_vehicle: Any) -> NormalizedVehicle:
    """
    Map one raw vehicle record to its canonical shape.

    Fleetio calls the status field 'vehicle_status_name'; every other field
    keeps its API name. The input is never modified.

    Args:
        raw_vehicle: Raw vehicle dictionary from the API.

    Returns:
        NormalizedVehicle with every field populated.
    """
    record = as_mapping(raw_vehicle)

    return NormalizedVehicle(
        id=coerce_int(record.get('id')),
        name=coerce_str(record.get('name')),
        vin=coerce_str(record.get('vin')),
        status=coerce_str(record.get('vehicle_status_name')),
        group_name=coerce_str(record.get('group_name')),
        make=coerce_str(record.get('make')),
        model=coerce_str(record.get('model')),
        year=coerce_int(record.get('year')),
        vehicle_type_name=coerce_str(record.get('vehicle_type_name')),
        primary_meter_value=coerce_int(record.get('primary_meter_value')),
        issues_count=coerce_int(record.get('issues_count')),
        service_reminders_count=coerce_int(record.get('service_reminders_count')),
        updated_at=coerce_str(record.get('updated_at')),
    )


def normalize_vehicles(raw_vehicles: Any) -> list[NormalizedVehicle]:
    """
    Normalize a collection of raw vehicles.

    Returns:
        One NormalizedVehicle per input record, or [] when the input is not a list.
    """
    if not isinstance(raw_vehicles, list):
        logger.debug(
            'Expected a list of vehicles, got %s; returning []',
            type(raw_vehicles).__name__,
        )
        return []

    return [normalize_vehicle(raw_vehicle) for raw_vehicle in raw_vehicles]
