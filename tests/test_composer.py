"""
Tests for fleet_digest.digest.composer module.

Tests vehicle grouping and totals calculation.
"""

from datetime import date

import pytest

from fleet_digest.digest import calculate_totals, compose_digest
from fleet_digest.models import (
    DigestTotals,
    NormalizedIssue,
    NormalizedServiceReminder,
    NormalizedVehicle,
)


@pytest.fixture
def vehicles() -> list[NormalizedVehicle]:
    return [
        NormalizedVehicle(id=1, name='Truck A'),
        NormalizedVehicle(id=2, name='Van B'),
    ]


@pytest.fixture
def issues() -> list[NormalizedIssue]:
    return [
        NormalizedIssue(id=10, vehicle_id=1, summary='Brake noise', state='open', is_overdue=True),
        NormalizedIssue(id=11, vehicle_id=2, summary='Flat tire', state='Resolved'),
        NormalizedIssue(id=12, vehicle_id=1, summary='Check engine', state=''),
        NormalizedIssue(id=13, vehicle_id=99, summary='Orphan', state='resolved'),
    ]


@pytest.fixture
def reminders() -> list[NormalizedServiceReminder]:
    return [
        NormalizedServiceReminder(id=20, vehicle_id=2, name='Oil change'),
        NormalizedServiceReminder(id=21, vehicle_id=42, name='Orphan rotation'),
    ]


class TestComposeDigest:
    """Test compose_digest()."""

    def test_groups_by_vehicle_in_input_order(
        self,
        vehicles: list[NormalizedVehicle],
        issues: list[NormalizedIssue],
        reminders: list[NormalizedServiceReminder],
    ) -> None:
        """Each entry should hold exactly the records with its vehicle_id."""
        digest = compose_digest(vehicles, issues, reminders, date(2024, 1, 1), date(2024, 1, 8))

        assert [entry.vehicle.id for entry in digest.vehicles] == [1, 2]
        assert [issue.id for issue in digest.vehicles[0].issues] == [10, 12]
        assert digest.vehicles[0].service_reminders == []
        assert [issue.id for issue in digest.vehicles[1].issues] == [11]
        assert [reminder.id for reminder in digest.vehicles[1].service_reminders] == [20]

    def test_unmatched_records_are_dropped_from_entries_but_counted(
        self,
        vehicles: list[NormalizedVehicle],
        issues: list[NormalizedIssue],
        reminders: list[NormalizedServiceReminder],
    ) -> None:
        """Records for unknown vehicles appear in no entry but still count."""
        digest = compose_digest(vehicles, issues, reminders, '2024-01-01', '2024-01-08')

        grouped_issue_ids = {issue.id for entry in digest.vehicles for issue in entry.issues}
        grouped_reminder_ids = {
            reminder.id for entry in digest.vehicles for reminder in entry.service_reminders
        }
        assert 13 not in grouped_issue_ids  # noqa: PLR2004
        assert 21 not in grouped_reminder_ids  # noqa: PLR2004
        assert digest.totals.issues == 4  # noqa: PLR2004
        assert digest.totals.service_reminders == 2  # noqa: PLR2004

    def test_each_record_appears_at_most_once(
        self,
        vehicles: list[NormalizedVehicle],
        issues: list[NormalizedIssue],
        reminders: list[NormalizedServiceReminder],
    ) -> None:
        digest = compose_digest(vehicles, issues, reminders, '2024-01-01', '2024-01-08')

        grouped = [issue.id for entry in digest.vehicles for issue in entry.issues]
        assert sorted(grouped) == [10, 11, 12]

    def test_period_dates_are_iso_strings(self) -> None:
        """Dates and date strings should both be stored as YYYY-MM-DD."""
        from_dates = compose_digest([], [], [], date(2024, 1, 1), date(2024, 1, 8))
        from_strings = compose_digest([], [], [], '2024-01-01', '2024-01-08T12:00:00Z')

        assert from_dates.period.start_date == '2024-01-01'
        assert from_dates.period.end_date == '2024-01-08'
        assert from_strings.period == from_dates.period

    def test_vehicle_without_activity_gets_empty_lists(self) -> None:
        digest = compose_digest([NormalizedVehicle(id=5)], [], [], '2024-01-01', '2024-01-08')

        assert digest.vehicles[0].issues == []
        assert digest.vehicles[0].service_reminders == []

    def test_model_dump_is_json_friendly(
        self,
        vehicles: list[NormalizedVehicle],
        issues: list[NormalizedIssue],
        reminders: list[NormalizedServiceReminder],
    ) -> None:
        dumped = compose_digest(vehicles, issues, reminders, '2024-01-01', '2024-01-08').model_dump()

        assert dumped['period'] == {'start_date': '2024-01-01', 'end_date': '2024-01-08'}
        assert dumped['vehicles'][0]['vehicle']['name'] == 'Truck A'
        assert dumped['totals']['vehicles'] == 2  # noqa: PLR2004


class TestCalculateTotals:
    """Test calculate_totals()."""

    def test_counts(
        self,
        vehicles: list[NormalizedVehicle],
        issues: list[NormalizedIssue],
        reminders: list[NormalizedServiceReminder],
    ) -> None:
        """Open counts every non-resolved state, empty included."""
        assert calculate_totals(vehicles, issues, reminders) == DigestTotals(
            vehicles=2,
            issues=4,
            open_issues=2,
            overdue_issues=1,
            resolved_issues=2,
            service_reminders=2,
        )

    @pytest.mark.parametrize(
        'states',
        [['open'], ['resolved', 'RESOLVED'], ['Open', 'closed', 'Resolved', '']],
    )
    def test_open_plus_resolved_equals_issues(self, states: list[str]) -> None:
        issues = [NormalizedIssue(id=index, state=state) for index, state in enumerate(states)]

        totals = calculate_totals([], issues, [])

        assert totals.issues == len(states)
        assert totals.open_issues + totals.resolved_issues == totals.issues

    def test_empty_inputs(self) -> None:
        assert calculate_totals([], [], []) == DigestTotals()
