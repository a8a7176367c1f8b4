# fleet_digest/models/digest.py
"""
The digest document: vehicles grouped with their issues and reminders, plus
totals, for one reporting window.
"""

from pydantic import BaseModel, ConfigDict, Field

from fleet_digest.models.records import (
    NormalizedIssue,
    NormalizedServiceReminder,
    NormalizedVehicle,
)

__all__: list[str] = [
    'DigestDocument',
    'DigestPeriod',
    'DigestTotals',
    'VehicleEntry',
]


class DigestPeriod(BaseModel):
    """Reporting window as 'YYYY-MM-DD' strings, inclusive on both ends."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    start_date: str
    end_date: str


class VehicleEntry(BaseModel):
    """One vehicle with the issues and reminders attached to it."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    vehicle: NormalizedVehicle
    issues: list[NormalizedIssue] = Field(default_factory=list)
    service_reminders: list[NormalizedServiceReminder] = Field(default_factory=list)


class DigestTotals(BaseModel):
    """
    Aggregate counts over the flat input collections.

    Totals are computed before grouping, so issues and reminders for vehicles
    outside the fetched vehicle list are still counted here.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    vehicles: int = 0
    issues: int = 0
    open_issues: int = 0
    overdue_issues: int = 0
    resolved_issues: int = 0
    service_reminders: int = 0


class DigestDocument(BaseModel):
    """
    The composed digest for one reporting window.

    Attributes:
        period: The reporting window.
        vehicles: One entry per fetched vehicle, in fetch order.
        totals: Aggregate counts.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    period: DigestPeriod
    vehicles: list[VehicleEntry] = Field(default_factory=list)
    totals: DigestTotals = Field(default_factory=DigestTotals)
