# fleet_digest/digest/composer.py
"""
Group normalized issues and service reminders under their vehicles and
compute the digest totals.
"""

import logging
from collections.abc import Sequence
from datetime import date

from fleet_digest.common import to_iso_date
from fleet_digest.models import (
    DigestDocument,
    DigestPeriod,
    DigestTotals,
    NormalizedIssue,
    NormalizedServiceReminder,
    NormalizedVehicle,
    VehicleEntry,
)

__all__: list[str] = ['calculate_totals', 'compose_digest']

logger: logging.Logger = logging.getLogger(__name__)


def calculate_totals(
    vehicles: Sequence[NormalizedVehicle],
    issues: Sequence[NormalizedIssue],
    service_reminders: Sequence[NormalizedServiceReminder],
) -> DigestTotals:
    """
    Count over the flat collections.

    An issue is resolved when its state is 'resolved' (any case) and open
    otherwise, including when the state is empty.
    """
    resolved_issues: int = sum(1 for issue in issues if issue.is_resolved)

    return DigestTotals(
        vehicles=len(vehicles),
        issues=len(issues),
        open_issues=len(issues) - resolved_issues,
        overdue_issues=sum(1 for issue in issues if issue.is_overdue),
        resolved_issues=resolved_issues,
        service_reminders=len(service_reminders),
    )


def compose_digest(
    vehicles: Sequence[NormalizedVehicle],
    issues: Sequence[NormalizedIssue],
    service_reminders: Sequence[NormalizedServiceReminder],
    start_date: date | str,
    end_date: date | str,
) -> DigestDocument:
    """
    Assemble the digest document for one window.

    Vehicle entries follow the order of `vehicles`; within an entry, issues
    and reminders keep their input order. Issues and reminders whose
    vehicle_id matches no vehicle are left out of the entries but still
    count towards the totals.

    Args:
        vehicles: Normalized vehicles, in display order.
        issues: Normalized issues for the window.
        service_reminders: Normalized service reminders for the window.
        start_date: First day of the window.
        end_date: Last day of the window.

    Returns:
        The composed DigestDocument.
    """
    issues_by_vehicle: dict[int, list[NormalizedIssue]] = {}
    for issue in issues:
        issues_by_vehicle.setdefault(issue.vehicle_id, []).append(issue)

    reminders_by_vehicle: dict[int, list[NormalizedServiceReminder]] = {}
    for reminder in service_reminders:
        reminders_by_vehicle.setdefault(reminder.vehicle_id, []).append(reminder)

    entries: list[VehicleEntry] = [
        VehicleEntry(
            vehicle=vehicle,
            issues=issues_by_vehicle.get(vehicle.id, []),
            service_reminders=reminders_by_vehicle.get(vehicle.id, []),
        )
        for vehicle in vehicles
    ]

    vehicle_ids: set[int] = {vehicle.id for vehicle in vehicles}
    unmatched_issues: int = sum(
        len(grouped) for vid, grouped in issues_by_vehicle.items() if vid not in vehicle_ids
    )
    unmatched_reminders: int = sum(
        len(grouped)
        for vid, grouped in reminders_by_vehicle.items()
        if vid not in vehicle_ids
    )
    if unmatched_issues or unmatched_reminders:
        logger.info(
            'Not attached to any fetched vehicle: %d issues, %d service reminders',
            unmatched_issues,
            unmatched_reminders,
        )

    return DigestDocument(
        period=DigestPeriod(
            start_date=to_iso_date(start_date),
            end_date=to_iso_date(end_date),
        ),
        vehicles=entries,
        totals=calculate_totals(vehicles, issues, service_reminders),
    )
