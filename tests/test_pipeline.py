"""
Tests for fleet_digest.pipeline module.

Runs the whole Fleetio side against a MockTransport that serves the three
collections by path.
"""

from collections.abc import Callable
from datetime import date
from typing import Any

import httpx
import pytest
from conftest import Handler

from fleet_digest.client import FleetioClient, NotFoundError
from fleet_digest.config import DigestConfig, PipelineConfig
from fleet_digest.digest import InvalidDueDateError
from fleet_digest.pipeline import DigestPipeline, DigestRun

ClientFactory = Callable[[Handler], FleetioClient]


def _fleetio_api(
    vehicles: list[dict[str, Any]],
    issues: list[dict[str, Any]],
    reminders: list[dict[str, Any]],
) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        path: str = request.url.path
        if path.endswith('/vehicles'):
            return httpx.Response(200, json={'records': vehicles, 'next_cursor': None})
        if path.endswith('/issues'):
            return httpx.Response(200, json=issues)
        if path.endswith('/service_reminders'):
            return httpx.Response(200, json=reminders)
        return httpx.Response(404, json={'error': 'not found'})

    return handler


class TestDateRange:
    """Test DigestPipeline.date_range()."""

    def test_default_lookback_is_seven_days(
        self,
        digest_config: DigestConfig,
        make_fleetio_client: ClientFactory,
    ) -> None:
        pipeline = DigestPipeline(digest_config, fleetio_client=make_fleetio_client(_fleetio_api([], [], [])))

        assert pipeline.date_range(today=date(2024, 1, 8)) == (date(2024, 1, 1), date(2024, 1, 8))

    def test_configured_lookback(
        self,
        digest_config: DigestConfig,
        make_fleetio_client: ClientFactory,
    ) -> None:
        config = digest_config.model_copy(update={'pipeline': PipelineConfig(lookback_days=30)})
        pipeline = DigestPipeline(config, fleetio_client=make_fleetio_client(_fleetio_api([], [], [])))

        assert pipeline.date_range(today=date(2024, 3, 1)) == (date(2024, 1, 31), date(2024, 3, 1))

    def test_defaults_to_today(
        self,
        digest_config: DigestConfig,
        make_fleetio_client: ClientFactory,
    ) -> None:
        pipeline = DigestPipeline(digest_config, fleetio_client=make_fleetio_client(_fleetio_api([], [], [])))

        _start, end = pipeline.date_range()

        assert end == date.today()


class TestBuildDigest:
    """Test DigestPipeline.build_digest()."""

    def test_end_to_end(
        self,
        digest_config: DigestConfig,
        make_fleetio_client: ClientFactory,
        raw_vehicle: dict[str, Any],
        raw_issue: dict[str, Any],
        raw_service_reminder: dict[str, Any],
    ) -> None:
        """Fetched records are filtered, normalized, grouped and rendered."""
        stale_issue = {**raw_issue, 'id': 502, 'updated_at': '2023-06-01T00:00:00Z'}
        handler = _fleetio_api([raw_vehicle], [raw_issue, stale_issue], [raw_service_reminder])
        pipeline = DigestPipeline(digest_config, fleetio_client=make_fleetio_client(handler))

        run = pipeline.build_digest(date(2024, 1, 1), date(2024, 1, 8))

        assert isinstance(run, DigestRun)
        assert run.digest.totals.vehicles == 1
        assert run.digest.totals.issues == 1
        assert run.digest.totals.overdue_issues == 1
        assert run.digest.totals.service_reminders == 1
        entry = run.digest.vehicles[0]
        assert entry.vehicle.name == 'Truck 7'
        assert [issue.id for issue in entry.issues] == [501]

        lines = run.text.split('\n')
        assert lines[0] == 'Fleet Digest: 2024-01-01 to 2024-01-08'
        assert 'Vehicle: Truck 7 (ID 101)' in lines
        assert '  - Brake noise (overdue)' in lines
        assert '  - Oil change due on 2024-01-15' in lines

    def test_fetch_failure_propagates(
        self,
        digest_config: DigestConfig,
        make_fleetio_client: ClientFactory,
    ) -> None:
        """No partial digest is produced when a collection cannot be fetched."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith('/vehicles'):
                return httpx.Response(200, json={'records': [], 'next_cursor': None})
            return httpx.Response(404)

        pipeline = DigestPipeline(digest_config, fleetio_client=make_fleetio_client(handler))

        with pytest.raises(NotFoundError):
            pipeline.build_digest(date(2024, 1, 1), date(2024, 1, 8))

    def test_invalid_due_date_propagates(
        self,
        digest_config: DigestConfig,
        make_fleetio_client: ClientFactory,
        raw_vehicle: dict[str, Any],
        raw_service_reminder: dict[str, Any],
    ) -> None:
        bad_reminder = {**raw_service_reminder, 'next_due_at': 'soon'}
        handler = _fleetio_api([raw_vehicle], [], [bad_reminder])
        pipeline = DigestPipeline(digest_config, fleetio_client=make_fleetio_client(handler))

        with pytest.raises(InvalidDueDateError):
            pipeline.build_digest(date(2024, 1, 1), date(2024, 1, 8))


class TestClientOwnership:
    """Test which clients the pipeline closes."""

    def test_injected_client_is_left_open(
        self,
        digest_config: DigestConfig,
        make_fleetio_client: ClientFactory,
    ) -> None:
        client = make_fleetio_client(_fleetio_api([], [], []))

        with DigestPipeline(digest_config, fleetio_client=client) as pipeline:
            pipeline.build_digest(date(2024, 1, 1), date(2024, 1, 8))

        assert not client._http_client.is_closed  # noqa: SLF001

    def test_owned_client_is_closed(self, digest_config: DigestConfig) -> None:
        pipeline = DigestPipeline(digest_config)
        http_client: httpx.Client = pipeline._client._http_client  # noqa: SLF001

        pipeline.close()

        assert http_client.is_closed
