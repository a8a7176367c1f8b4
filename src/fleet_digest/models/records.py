# fleet_digest/models/records.py
"""
Canonical, fixed-shape records produced by the normalizers.

Everything past the normalizer boundary works with these models instead of
raw Fleetio dictionaries. Every field is always present: missing raw values
become '' / 0 / False, never None. Timestamps stay as the strings Fleetio
sent; only the serializer interprets them.
"""

from pydantic import BaseModel, ConfigDict

__all__: list[str] = [
    'NormalizedIssue',
    'NormalizedServiceReminder',
    'NormalizedVehicle',
]


class NormalizedVehicle(BaseModel):
    """A vehicle reduced to the fields the digest uses."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    id: int = 0
    name: str = ''
    vin: str = ''
    status: str = ''
    group_name: str = ''
    make: str = ''
    model: str = ''
    year: int = 0
    vehicle_type_name: str = ''
    primary_meter_value: int = 0
    issues_count: int = 0
    service_reminders_count: int = 0
    updated_at: str = ''


class NormalizedIssue(BaseModel):
    """A reported vehicle issue."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    id: int = 0
    vehicle_id: int = 0
    description: str = ''
    summary: str = ''
    state: str = ''
    due_date: str = ''
    is_overdue: bool = False
    reported_at: str = ''
    created_at: str = ''
    updated_at: str = ''
    resolved_at: str = ''

    @property
    def is_resolved(self) -> bool:
        """True when the state is 'resolved', compared case-insensitively."""
        return self.state.lower() == 'resolved'

    @property
    def display_text(self) -> str:
        """The summary when present, otherwise the description."""
        return self.summary or self.description


class NormalizedServiceReminder(BaseModel):
    """A scheduled service task for a vehicle.

    `is_overdue` is derived from the raw status name at normalization time.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    id: int = 0
    vehicle_id: int = 0
    name: str = ''
    status: str = ''
    due_date: str = ''
    due_mileage: int = 0
    is_overdue: bool = False
    created_at: str = ''
    updated_at: str = ''
