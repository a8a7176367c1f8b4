"""
Tests for fleet_digest.digest.serializer module.

Tests the exact text layout of the rendered digest.
"""

import pytest

from fleet_digest.digest import InvalidDueDateError, compose_digest, serialize_digest
from fleet_digest.models import (
    NormalizedIssue,
    NormalizedServiceReminder,
    NormalizedVehicle,
)
from fleet_digest.normalizers import normalize_issues, normalize_vehicles


def _render(
    vehicles: list[NormalizedVehicle],
    issues: list[NormalizedIssue] | None = None,
    reminders: list[NormalizedServiceReminder] | None = None,
) -> str:
    digest = compose_digest(vehicles, issues or [], reminders or [], '2024-01-01', '2024-01-08')
    return serialize_digest(digest)


class TestSerializeDigest:
    """Test serialize_digest()."""

    def test_brake_noise_scenario(self) -> None:
        """An overdue open issue renders under its vehicle with matching totals."""
        vehicles = normalize_vehicles([{'id': 1, 'name': 'Truck A'}])
        issues = normalize_issues(
            [
                {
                    'id': 10,
                    'vehicle_id': 1,
                    'summary': 'Brake noise',
                    'state': 'open',
                    'overdue': True,
                }
            ]
        )

        text = _render(vehicles, issues)
        lines = text.split('\n')

        assert '- Issues: 1 (Overdue: 1) (Resolved: 0)' in lines
        header_index = lines.index('Vehicle: Truck A (ID 1)')
        assert lines[header_index + 1] == '- Issues:'
        assert lines[header_index + 2] == '  - Brake noise (overdue)'

    def test_full_layout(self) -> None:
        """Should render the exact line layout."""
        vehicles = [
            NormalizedVehicle(id=1, name='Truck A'),
            NormalizedVehicle(id=2, name='Van B'),
        ]
        issues = [
            NormalizedIssue(id=10, vehicle_id=1, summary='Brake noise', state='open', is_overdue=True),
            NormalizedIssue(id=11, vehicle_id=1, description='Wipers streak', state='Resolved'),
        ]
        reminders = [
            NormalizedServiceReminder(id=20, vehicle_id=1, name='Oil change', due_date='2024-01-15T00:00:00-05:00'),
            NormalizedServiceReminder(id=21, vehicle_id=1, name='Tire rotation'),
        ]

        assert _render(vehicles, issues, reminders) == '\n'.join(
            [
                'Fleet Digest: 2024-01-01 to 2024-01-08',
                '',
                'Totals:',
                '- Vehicles: 2',
                '- Issues: 2 (Overdue: 1) (Resolved: 1)',
                '- Service Reminders: 2',
                '',
                'Vehicle: Truck A (ID 1)',
                '- Issues:',
                '  - Brake noise (overdue)',
                '  - Wipers streak (resolved)',
                '- Service Reminders:',
                '  - Oil change due on 2024-01-15',
                '  - Tire rotation',
                '',
                'Vehicle: Van B (ID 2)',
                '',
            ]
        )

    def test_overdue_and_resolved_suffixes_combine(self) -> None:
        vehicles = [NormalizedVehicle(id=1, name='A')]
        issues = [NormalizedIssue(vehicle_id=1, summary='Leak', state='RESOLVED', is_overdue=True)]

        assert '  - Leak (overdue) (resolved)' in _render(vehicles, issues).split('\n')

    def test_no_vehicles(self) -> None:
        text = _render([])

        assert text.startswith('Fleet Digest: 2024-01-01 to 2024-01-08\n')
        assert 'Vehicle:' not in text

    def test_is_deterministic(self) -> None:
        vehicles = [NormalizedVehicle(id=1, name='A')]

        assert _render(vehicles) == _render(vehicles)

    def test_unparsable_due_date_raises(self) -> None:
        """A reminder due date that is not ISO should be a hard error."""
        vehicles = [NormalizedVehicle(id=1, name='A')]
        reminders = [NormalizedServiceReminder(id=77, vehicle_id=1, name='Oil', due_date='next week')]

        with pytest.raises(InvalidDueDateError) as exc_info:
            _render(vehicles, reminders=reminders)

        assert exc_info.value.reminder_id == 77  # noqa: PLR2004
        assert exc_info.value.due_date == 'next week'
        assert isinstance(exc_info.value, ValueError)

    def test_unmatched_reminder_due_date_is_not_rendered(self) -> None:
        """Only grouped reminders are rendered, so orphans never fail parsing."""
        reminders = [NormalizedServiceReminder(id=1, vehicle_id=9, name='Oil', due_date='garbage')]

        text = _render([NormalizedVehicle(id=1, name='A')], reminders=reminders)

        assert '- Service Reminders: 1' in text
