# fleet_digest/pipeline.py
"""
Digest pipeline: fetch, normalize, compose and serialize one reporting window.

Usage:
------
    from fleet_digest.config import load_config
    from fleet_digest.pipeline import DigestPipeline

    config = load_config()
    with DigestPipeline(config) as pipeline:
        start_date, end_date = pipeline.date_range()
        run = pipeline.build_digest(start_date, end_date)
    print(run.text)

Design Decisions:
-----------------
- All-or-nothing: the three resources are fetched in sequence and any
  FleetioError propagates. A digest missing one collection would silently
  understate the totals, so no partial digest is produced.

- No persistence: a run lives in memory only and is discarded at exit.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from types import TracebackType
from typing import Self

from fleet_digest.client import FleetioClient
from fleet_digest.config import DigestConfig
from fleet_digest.digest import compose_digest, serialize_digest
from fleet_digest.endpoints import FleetioEndpoints, RawRecord
from fleet_digest.models import (
    DigestDocument,
    NormalizedIssue,
    NormalizedServiceReminder,
    NormalizedVehicle,
    ResourceKind,
)
from fleet_digest.normalizers import (
    normalize_issues,
    normalize_service_reminders,
    normalize_vehicles,
)

__all__: list[str] = ['DigestPipeline', 'DigestRun']

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DigestRun:
    """
    Result of one pipeline run.

    Attributes:
        digest: The composed document.
        text: The document rendered by serialize_digest().
    """

    digest: DigestDocument
    text: str


class DigestPipeline:
    """
    Orchestrates the Fleetio side of a digest run.

    The pipeline owns its FleetioClient unless one is passed in, in which
    case the caller keeps ownership and close() leaves it open.

    Attributes:
        config: The run configuration (read-only).
    """

    def __init__(
        self,
        config: DigestConfig,
        fleetio_client: FleetioClient | None = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            config: Validated run configuration.
            fleetio_client: Optional pre-built client, mainly for tests.
        """
        self._config: DigestConfig = config
        self._owns_client: bool = fleetio_client is None
        self._client: FleetioClient = (
            fleetio_client if fleetio_client is not None else FleetioClient(config.fleetio)
        )
        self._endpoints: FleetioEndpoints = FleetioEndpoints(self._client)

    @property
    def config(self) -> DigestConfig:
        """The run configuration (read-only)."""
        return self._config

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def date_range(self, today: date | None = None) -> tuple[date, date]:
        """
        Trailing reporting window ending today.

        Args:
            today: Reference day, defaults to the local current date.

        Returns:
            (today - lookback_days, today), both inclusive.
        """
        if today is None:
            today = date.today()
        start_date: date = today - timedelta(days=self._config.pipeline.lookback_days)
        return start_date, today

    def build_digest(self, start_date: date, end_date: date) -> DigestRun:
        """
        Fetch the three collections for the window and render the digest.

        Args:
            start_date: First day of the window (inclusive).
            end_date: Last day of the window (inclusive).

        Returns:
            DigestRun with the document and its text.

        Raises:
            FleetioError: If any fetch fails.
            InvalidDueDateError: If a reminder carries an unparsable due date.
        """
        run_start_time: datetime = datetime.now(UTC)
        logger.info('Building digest for %s to %s', start_date, end_date)

        raw_vehicles: list[RawRecord] = self._endpoints.fetch(
            ResourceKind.VEHICLES, start_date, end_date
        )
        raw_issues: list[RawRecord] = self._endpoints.fetch(
            ResourceKind.ISSUES, start_date, end_date
        )
        raw_reminders: list[RawRecord] = self._endpoints.fetch(
            ResourceKind.SERVICE_REMINDERS, start_date, end_date
        )

        vehicles: list[NormalizedVehicle] = normalize_vehicles(raw_vehicles)
        issues: list[NormalizedIssue] = normalize_issues(raw_issues)
        reminders: list[NormalizedServiceReminder] = normalize_service_reminders(
            raw_reminders
        )

        digest: DigestDocument = compose_digest(
            vehicles, issues, reminders, start_date, end_date
        )
        text: str = serialize_digest(digest)

        logger.info(
            'Digest built: %d vehicles, %d issues, %d service reminders. Duration: %s',
            digest.totals.vehicles,
            digest.totals.issues,
            digest.totals.service_reminders,
            datetime.now(UTC) - run_start_time,
        )
        return DigestRun(digest=digest, text=text)
