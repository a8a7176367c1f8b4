# fleet_digest/endpoints.py
"""
Resource-level fetching for the three Fleetio collections the digest uses.

Vehicles:
    Filtered server-side with `filter[updated_at][gte]=<start_date>` and
    paginated with Fleetio cursors: each page is `{records, next_cursor}`
    and the next page is requested with `start_cursor=<next_cursor>` until
    the cursor is null.

    Only the lower bound is sent, and vehicles are not filtered client-side
    by end_date either, so vehicles updated after end_date are included.
    Issues and service reminders are bounded on both ends.

Issues and service reminders:
    The API offers no date filter for these, so the whole collection is
    fetched in one unpaginated request (a bare JSON list) and filtered here
    on the calendar date of `updated_at`, inclusive on both ends.
"""

import logging
from collections.abc import Iterator
from datetime import date, datetime
from typing import Any, Final

from fleet_digest.client import FleetioClient
from fleet_digest.common import parse_calendar_date
from fleet_digest.models import PaginationState, RequestSpec, ResourceKind

__all__: list[str] = ['FleetioEndpoints', 'filter_by_date_range']

logger: logging.Logger = logging.getLogger(__name__)

RawRecord = dict[str, Any]

UPDATED_AT_GTE_PARAM: Final[str] = 'filter[updated_at][gte]'


def _as_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_calendar_date(value)


def filter_by_date_range(
    records: Any,
    start_date: date,
    end_date: date,
) -> list[RawRecord]:
    """
    Keep records whose `updated_at` calendar date lies in [start_date, end_date].

    Records without `updated_at` are dropped. Records whose `updated_at`
    cannot be parsed are dropped with a warning. Input order is preserved.

    Args:
        records: Decoded API response; anything other than a list yields [].
        start_date: First day of the window (inclusive).
        end_date: Last day of the window (inclusive).

    Returns:
        Matching raw records in their original relative order.
    """
    if not isinstance(records, list):
        logger.warning(
            'Expected a JSON list, got %s; treating as empty', type(records).__name__
        )
        return []

    kept: list[RawRecord] = []

    for record in records:
        if not isinstance(record, dict):
            continue

        raw_updated_at: Any = record.get('updated_at')
        if not raw_updated_at:
            continue

        try:
            updated_on: date = parse_calendar_date(str(raw_updated_at))
        except ValueError:
            logger.warning(
                'Skipping record id=%r with unparsable updated_at=%r',
                record.get('id'),
                raw_updated_at,
            )
            continue

        if start_date <= updated_on <= end_date:
            kept.append(record)

    return kept


class FleetioEndpoints:
    """
    Fetches vehicles, issues and service reminders for a date window.

    Example:
        >>> with FleetioClient(config.fleetio) as client:
        ...     endpoints = FleetioEndpoints(client)
        ...     issues = endpoints.fetch('issues', date(2024, 1, 1), date(2024, 1, 8))
    """

    def __init__(self, client: FleetioClient) -> None:
        self._client: FleetioClient = client

    def fetch(
        self,
        resource_kind: ResourceKind | str,
        start_date: date | str,
        end_date: date | str,
    ) -> list[RawRecord]:
        """
        Fetch raw records of one kind for the window.

        Args:
            resource_kind: 'vehicles', 'issues' or 'service_reminders'.
            start_date: First day of the window (date or 'YYYY-MM-DD').
            end_date: Last day of the window (date or 'YYYY-MM-DD').

        Returns:
            Raw records in API order.

        Raises:
            ValueError: If resource_kind is not one of the three kinds.
            FleetioError: If any request fails (see fleet_digest.client).
        """
        kind: ResourceKind = ResourceKind(resource_kind)
        start: date = _as_date(start_date)
        end: date = _as_date(end_date)

        if kind is ResourceKind.VEHICLES:
            return self.fetch_vehicles(start, end)
        if kind is ResourceKind.ISSUES:
            return self.fetch_issues(start, end)
        return self.fetch_service_reminders(start, end)

    # -------------------------------------------------------------------------
    # Vehicles (server-side filter, cursor pagination)
    # -------------------------------------------------------------------------

    def fetch_vehicles(self, start_date: date, end_date: date) -> list[RawRecord]:
        """
        Fetch vehicles updated on or after start_date, across all pages.

        end_date is not applied; see the module docstring.
        """
        logger.debug(
            'Fetching vehicles updated since %s (no upper bound; window ends %s)',
            start_date,
            end_date,
        )

        base_spec = RequestSpec(
            path=ResourceKind.VEHICLES.value,
            query_params={
                UPDATED_AT_GTE_PARAM: start_date.isoformat(),
                'per_page': str(self._client.per_page),
            },
        )

        records: list[RawRecord] = []
        page_count: int = 0

        for page_records in self._paginate(base_spec):
            page_count += 1
            records.extend(page_records)
            logger.debug(
                'Vehicles page %d: %d records (running total: %d)',
                page_count,
                len(page_records),
                len(records),
            )

        logger.info(
            'Pagination complete for vehicles: %d records across %d pages',
            len(records),
            page_count,
        )
        return records

    def _paginate(self, base_spec: RequestSpec) -> Iterator[list[RawRecord]]:
        """Yield each page's records, following next_cursor until it is null."""
        pagination_state: PaginationState = PaginationState.initial_cursor()

        while pagination_state.has_next_page:
            request_spec: RequestSpec = base_spec.with_params(
                **pagination_state.next_page_params
            )
            response_json: Any = self._client.get(request_spec)

            yield self._extract_records(response_json)

            pagination_state = self._compute_pagination_state(response_json)

    def _extract_records(self, response_json: Any) -> list[RawRecord]:
        if not isinstance(response_json, dict):
            logger.warning(
                'Expected a paginated JSON object, got %s', type(response_json).__name__
            )
            return []

        records: Any = response_json.get('records') or []
        if not isinstance(records, list):
            return []
        return records

    def _compute_pagination_state(self, response_json: Any) -> PaginationState:
        if not isinstance(response_json, dict):
            return PaginationState.finished()

        next_cursor: Any = response_json.get('next_cursor')
        if next_cursor is None or next_cursor == '':
            return PaginationState.finished()

        return PaginationState.next_cursor(str(next_cursor))

    # -------------------------------------------------------------------------
    # Issues and Service Reminders (unpaginated, client-side filter)
    # -------------------------------------------------------------------------

    def fetch_issues(self, start_date: date, end_date: date) -> list[RawRecord]:
        """Fetch all issues and keep those updated within the window."""
        return self._fetch_filtered(ResourceKind.ISSUES, start_date, end_date)

    def fetch_service_reminders(
        self, start_date: date, end_date: date
    ) -> list[RawRecord]:
        """Fetch all service reminders and keep those updated within the window."""
        return self._fetch_filtered(ResourceKind.SERVICE_REMINDERS, start_date, end_date)

    def _fetch_filtered(
        self,
        kind: ResourceKind,
        start_date: date,
        end_date: date,
    ) -> list[RawRecord]:
        response_json: Any = self._client.get(RequestSpec(path=kind.value))
        records: list[RawRecord] = filter_by_date_range(response_json, start_date, end_date)

        logger.info(
            'Fetched %s: %d of %d records updated between %s and %s',
            kind.value,
            len(records),
            len(response_json) if isinstance(response_json, list) else 0,
            start_date,
            end_date,
        )
        return records
