# fleet_digest/digest/serializer.py
"""
Render a DigestDocument as the plain-text report handed to the LLM.

Output layout:

    Fleet Digest: 2024-01-01 to 2024-01-08

    Totals:
    - Vehicles: 2
    - Issues: 3 (Overdue: 1) (Resolved: 1)
    - Service Reminders: 1

    Vehicle: Truck A (ID 1)
    - Issues:
      - Brake noise (overdue)
    - Service Reminders:
      - Oil change due on 2024-01-15

    Vehicle: Van B (ID 2)

Rendering is pure and deterministic; vehicles appear in document order.
"""

from fleet_digest.common import parse_calendar_date
from fleet_digest.models import (
    DigestDocument,
    NormalizedIssue,
    NormalizedServiceReminder,
    VehicleEntry,
)

__all__: list[str] = ['InvalidDueDateError', 'serialize_digest']


class InvalidDueDateError(ValueError):
    """
    Raised when a service reminder's due date is not a parseable date.

    This indicates corrupt upstream data; there is no fallback rendering.

    Attributes:
        reminder_id: Id of the offending reminder.
        due_date: The stored value that failed to parse.
    """

    def __init__(self, reminder_id: int, due_date: str) -> None:
        super().__init__(
            f'Service reminder {reminder_id} has an unparsable due date: {due_date!r}'
        )
        self.reminder_id: int = reminder_id
        self.due_date: str = due_date


def _format_issue(issue: NormalizedIssue) -> str:
    status: str = ''
    if issue.is_overdue:
        status += ' (overdue)'
    if issue.is_resolved:
        status += ' (resolved)'
    return f'  - {issue.display_text}{status}'


def _format_reminder(reminder: NormalizedServiceReminder) -> str:
    if not reminder.due_date:
        return f'  - {reminder.name}'

    try:
        due_on: str = parse_calendar_date(reminder.due_date).isoformat()
    except ValueError as parse_error:
        raise InvalidDueDateError(reminder.id, reminder.due_date) from parse_error

    return f'  - {reminder.name} due on {due_on}'


def _format_vehicle(entry: VehicleEntry) -> list[str]:
    vehicle = entry.vehicle
    lines: list[str] = [f'Vehicle: {vehicle.name} (ID {vehicle.id})']

    if entry.issues:
        lines.append('- Issues:')
        lines.extend(_format_issue(issue) for issue in entry.issues)

    if entry.service_reminders:
        lines.append('- Service Reminders:')
        lines.extend(_format_reminder(reminder) for reminder in entry.service_reminders)

    lines.append('')
    return lines


def serialize_digest(digest: DigestDocument) -> str:
    """
    Render the digest as a multi-line report.

    Args:
        digest: The composed digest.

    Returns:
        Report text, lines joined with '\\n'.

    Raises:
        InvalidDueDateError: If a reminder's due date cannot be parsed.
    """
    totals = digest.totals

    lines: list[str] = [
        f'Fleet Digest: {digest.period.start_date} to {digest.period.end_date}',
        '',
        'Totals:',
        f'- Vehicles: {totals.vehicles}',
        (
            f'- Issues: {totals.issues} (Overdue: {totals.overdue_issues}) '
            f'(Resolved: {totals.resolved_issues})'
        ),
        f'- Service Reminders: {totals.service_reminders}',
        '',
    ]

    for entry in digest.vehicles:
        lines.extend(_format_vehicle(entry))

    return '\n'.join(lines)
