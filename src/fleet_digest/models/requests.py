# fleet_digest/models/requests.py
"""
Request-side models for the Fleetio API.

RequestSpec is the contract between FleetioEndpoints (which decides paths,
query parameters and pagination) and FleetioClient (which injects auth,
executes, retries and maps errors). PaginationState carries the Fleetio
cursor between pages.
"""

from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field

__all__: list[str] = [
    'PaginationState',
    'RateLimitInfo',
    'RequestSpec',
    'ResourceKind',
]


class ResourceKind(str, Enum):
    """The three Fleetio collections the digest is built from.

    The value doubles as the resource path below the API base URL.
    """

    VEHICLES = 'vehicles'
    ISSUES = 'issues'
    SERVICE_REMINDERS = 'service_reminders'


class RequestSpec(BaseModel):
    """
    Specification for one GET against the Fleetio API.

    Attributes:
        path: Resource path relative to the base URL (no leading slash needed).
        query_params: Query parameters, all values serialized as strings.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    path: str
    query_params: dict[str, str] = Field(default_factory=dict)

    def with_params(self, **extra_params: str) -> Self:
        """Return a copy with additional query parameters merged in."""
        return self.model_copy(
            update={'query_params': {**self.query_params, **extra_params}}
        )


class RateLimitInfo(BaseModel):
    """
    Rate limit metadata extracted from a 429 response.

    Attributes:
        retry_after_seconds: Server-suggested delay, None when not sent.
        limit: Maximum requests allowed in the current window.
        remaining: Requests remaining in the current window.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    retry_after_seconds: float | None = None
    limit: int | None = None
    remaining: int | None = None

    @classmethod
    def from_response_headers(cls, headers: dict[str, str]) -> 'RateLimitInfo':
        """
        Extract rate limit information from HTTP response headers.

        Header lookup is case-insensitive. Values that are not numeric (such
        as an HTTP-date Retry-After) are ignored rather than raised on.

        Args:
            headers: HTTP response headers.

        Returns:
            RateLimitInfo with whatever values could be parsed.
        """
        normalized_headers: dict[str, str] = {
            key.lower(): value for key, value in headers.items()
        }

        return cls(
            retry_after_seconds=_parse_float(normalized_headers.get('retry-after')),
            limit=_parse_int(normalized_headers.get('x-ratelimit-limit')),
            remaining=_parse_int(normalized_headers.get('x-ratelimit-remaining')),
        )


def _parse_float(raw_value: str | None) -> float | None:
    if raw_value is None:
        return None
    try:
        return max(float(raw_value), 0.0)
    except ValueError:
        return None


def _parse_int(raw_value: str | None) -> int | None:
    if raw_value is None:
        return None
    try:
        return int(raw_value)
    except ValueError:
        return None


class PaginationState(BaseModel):
    """
    Cursor pagination state for the Fleetio vehicles endpoint.

    Fleetio responses carry `next_cursor`; the next page is requested by
    sending it back as `start_cursor`. The first page sends no cursor.

    Attributes:
        has_next_page: Whether another page should be requested.
        next_page_params: Query parameters to add for the next request.
        current_cursor: Cursor used for the next request, if any.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    has_next_page: bool
    next_page_params: dict[str, str] = Field(default_factory=dict)
    current_cursor: str | None = None

    @classmethod
    def finished(cls) -> Self:
        """Factory for terminal pagination state (no more pages)."""
        return cls(has_next_page=False)

    @classmethod
    def initial_cursor(cls) -> Self:
        """Factory for the first page, which carries no cursor."""
        return cls(has_next_page=True, next_page_params={}, current_cursor=None)

    @classmethod
    def next_cursor(cls, cursor_token: str) -> Self:
        """Factory for subsequent pages."""
        return cls(
            has_next_page=True,
            next_page_params={'start_cursor': cursor_token},
            current_cursor=cursor_token,
        )
