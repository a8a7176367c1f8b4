# fleet_digest/client.py
"""
Authenticated HTTP client for the Fleetio REST API.

The client executes RequestSpec objects built by FleetioEndpoints. It owns
authentication, retries and the mapping of HTTP failures onto the error
hierarchy below; it knows nothing about pagination or date filtering.

Authentication:
---------------
Every request carries two static headers taken from FleetioConfig:
- Authorization: the API key, sent verbatim
- Account-Token: the account token

Retry Behavior:
---------------
Only GET requests are issued, so every request is safe to repeat. Transient
failures are retried, three attempts in total:
- Rate limits (429): Respects a numeric Retry-After header, otherwise
  exponential backoff
- Server errors (500, 502, 503, 504): Exponential backoff
- Timeouts and connection errors: Exponential backoff

Backoff starts at 0.5 seconds and doubles per attempt. Any other non-2xx
response fails immediately.

Error Hierarchy:
----------------
FleetioError
├── AuthenticationError    401 / 403
├── NotFoundError          404
└── RequestError           any other failure
    └── TransientAPIError  retryable failure, raised once retries run out
        └── RateLimitError 429
"""

import logging
from ssl import SSLContext
from types import TracebackType
from typing import Any, Final, Self

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
)

from fleet_digest.common import resolve_ssl_verify
from fleet_digest.config import FleetioConfig
from fleet_digest.models import RateLimitInfo, RequestSpec

__all__: list[str] = [
    'AuthenticationError',
    'FleetioClient',
    'FleetioError',
    'NotFoundError',
    'RateLimitError',
    'RequestError',
    'TransientAPIError',
]

logger: logging.Logger = logging.getLogger(__name__)

# HTTP status codes
HTTP_STATUS_UNAUTHORIZED: Final[int] = 401
HTTP_STATUS_FORBIDDEN: Final[int] = 403
HTTP_STATUS_NOT_FOUND: Final[int] = 404
HTTP_STATUS_RATE_LIMITED: Final[int] = 429
RETRYABLE_SERVER_STATUSES: Final[frozenset[int]] = frozenset({500, 502, 503, 504})

# Retry configuration
MAX_RETRY_ATTEMPTS: Final[int] = 3
RETRY_BACKOFF_BASE_SECONDS: Final[float] = 0.5
RETRY_BACKOFF_MAX_SECONDS: Final[float] = 60.0

# Truncation for response bodies kept on exceptions and in logs
RESPONSE_BODY_PREVIEW_CHARS: Final[int] = 500


# =============================================================================
# Exception Hierarchy
# =============================================================================


class FleetioError(Exception):
    """
    Base exception for Fleetio API errors.

    Attributes:
        status_code: HTTP status code if available, None for transport errors.
        response_body: Truncated response body for debugging, if available.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code: int | None = status_code
        self.response_body: str | None = response_body


class AuthenticationError(FleetioError):
    """Raised on HTTP 401 or 403: the API key or account token was rejected."""


class NotFoundError(FleetioError):
    """Raised on HTTP 404."""


class RequestError(FleetioError):
    """Raised for any other non-2xx response, invalid JSON, or transport failure."""


class TransientAPIError(RequestError):
    """
    Raised for failures worth retrying: timeouts, connection errors, and
    server errors 500/502/503/504. Surfaces to callers once retries run out.
    """


class RateLimitError(TransientAPIError):
    """
    Raised when the API rate limit is exceeded (HTTP 429).

    Attributes:
        rate_limit_info: Parsed rate limit headers, including Retry-After.
    """

    def __init__(
        self,
        rate_limit_info: RateLimitInfo,
        response_body: str | None = None,
    ) -> None:
        super().__init__(
            'Rate limit exceeded',
            status_code=HTTP_STATUS_RATE_LIMITED,
            response_body=response_body,
        )
        self.rate_limit_info: RateLimitInfo = rate_limit_info


# =============================================================================
# Wait Strategy
# =============================================================================


def _wait_for_rate_limit_or_exponential(retry_state: RetryCallState) -> float:
    """
    Tenacity wait strategy: Retry-After for rate limits, else exponential.

    Args:
        retry_state: Tenacity retry state containing exception info.

    Returns:
        Seconds to wait before the next attempt.
    """
    exception: BaseException | None = (
        retry_state.outcome.exception() if retry_state.outcome else None
    )

    if isinstance(exception, RateLimitError):
        retry_after: float | None = exception.rate_limit_info.retry_after_seconds
        if retry_after is not None:
            return min(retry_after, RETRY_BACKOFF_MAX_SECONDS)

    attempt_number: int = retry_state.attempt_number
    exponential_wait: float = RETRY_BACKOFF_BASE_SECONDS * (2 ** (attempt_number - 1))
    return min(exponential_wait, RETRY_BACKOFF_MAX_SECONDS)


# =============================================================================
# HTTP Client
# =============================================================================


class FleetioClient:
    """
    HTTP client for the Fleetio API.

    Designed for single-threaded, sequential use: one instance per run.

    Example:
        >>> with FleetioClient(config.fleetio) as client:
        ...     vehicles = client.get(RequestSpec(path='vehicles'))
    """

    def __init__(
        self,
        config: FleetioConfig,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the Fleetio client.

        Args:
            config: Validated Fleetio settings (base URL, credentials,
                timeouts, SSL mode).
            http_client: Optional pre-built httpx.Client, mainly for tests
                (e.g. one backed by httpx.MockTransport). When omitted a
                client is built from the configuration.

        Raises:
            RuntimeError: If use_truststore is set but truststore is missing.
        """
        self._config: FleetioConfig = config

        if http_client is None:
            ssl_verify: SSLContext | bool | str = resolve_ssl_verify(
                config.verify_ssl, config.use_truststore
            )
            connect_timeout, read_timeout = config.request_timeout
            http_client = httpx.Client(
                timeout=httpx.Timeout(
                    connect=connect_timeout,
                    read=read_timeout,
                    write=connect_timeout,
                    pool=connect_timeout,
                ),
                verify=ssl_verify,
            )

        self._http_client: httpx.Client = http_client

        logger.info('Initialized FleetioClient: base_url=%r', config.base_url)

    @property
    def per_page(self) -> int:
        """Configured page size for paginated endpoints."""
        return self._config.per_page

    def _build_headers(self) -> dict[str, str]:
        return {
            'Authorization': self._config.api_key.get_secret_value(),
            'Account-Token': self._config.account_token.get_secret_value(),
            'Accept': 'application/json',
        }

    def _build_url(self, path: str) -> str:
        return f'{self._config.base_url}/{path.lstrip("/")}'

    # -------------------------------------------------------------------------
    # Context Manager Protocol
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying HTTP client. Safe to call more than once."""
        self._http_client.close()
        logger.debug('FleetioClient closed')

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Request Execution
    # -------------------------------------------------------------------------

    def get(self, request_spec: RequestSpec) -> Any:
        """
        Execute a GET request and return the decoded JSON body.

        Args:
            request_spec: Resource path and query parameters.

        Returns:
            Decoded JSON: a dict for enveloped responses, a list for bare
            collections.

        Raises:
            AuthenticationError: On 401/403.
            NotFoundError: On 404.
            RateLimitError: On 429 after exhausting retries.
            TransientAPIError: On 5xx/transport failures after exhausting retries.
            RequestError: On any other non-2xx response or invalid JSON.
        """
        return self._execute_with_retry(request_spec)

    @retry(
        retry=retry_if_exception_type(TransientAPIError),
        wait=_wait_for_rate_limit_or_exponential,
        stop=stop_after_attempt(MAX_RETRY_ATTEMPTS),
        reraise=True,
    )
    def _execute_with_retry(self, request_spec: RequestSpec) -> Any:
        """Send one attempt; tenacity repeats it on TransientAPIError."""
        response: httpx.Response = self._send_http_request(request_spec)
        return self._handle_response(response)

    def _send_http_request(self, request_spec: RequestSpec) -> httpx.Response:
        """
        Send the request, converting transport errors to TransientAPIError.

        Raises:
            TransientAPIError: On timeout or connection errors (retryable).
        """
        url: str = self._build_url(request_spec.path)

        logger.debug('GET %s params=%r', url, request_spec.query_params)

        try:
            return self._http_client.request(
                method='GET',
                url=url,
                params=request_spec.query_params,
                headers=self._build_headers(),
            )
        except httpx.TimeoutException as error:
            logger.warning('Request timeout (will retry): %s', url)
            raise TransientAPIError(f'Request timeout: {error}') from error
        except httpx.RequestError as error:
            logger.warning('Connection error (will retry): %s - %s', url, error)
            raise TransientAPIError(f'Connection error: {error}') from error

    def _handle_response(self, response: httpx.Response) -> Any:
        """
        Map the response onto a decoded body or an exception.

        Raises:
            RateLimitError: On 429 (retryable).
            TransientAPIError: On 500/502/503/504 (retryable).
            AuthenticationError: On 401/403.
            NotFoundError: On 404.
            RequestError: On other non-2xx statuses or invalid JSON.
        """
        status_code: int = response.status_code

        if response.is_success:
            try:
                return response.json()
            except ValueError as parse_error:
                raise RequestError(
                    f'Invalid JSON in response: {parse_error}',
                    status_code=status_code,
                    response_body=response.text[:RESPONSE_BODY_PREVIEW_CHARS],
                ) from parse_error

        body_preview: str = response.text[:RESPONSE_BODY_PREVIEW_CHARS]

        if status_code == HTTP_STATUS_RATE_LIMITED:
            rate_limit_info: RateLimitInfo = RateLimitInfo.from_response_headers(
                dict(response.headers)
            )
            logger.warning(
                'Rate limited (will retry): retry_after=%r remaining=%r',
                rate_limit_info.retry_after_seconds,
                rate_limit_info.remaining,
            )
            raise RateLimitError(rate_limit_info, response_body=body_preview)

        if status_code in RETRYABLE_SERVER_STATUSES:
            logger.warning('Server error %d (will retry): %s', status_code, body_preview[:200])
            raise TransientAPIError(
                f'Server error: HTTP {status_code}',
                status_code=status_code,
                response_body=body_preview,
            )

        if status_code in (HTTP_STATUS_UNAUTHORIZED, HTTP_STATUS_FORBIDDEN):
            logger.error('Authentication failed: HTTP %d', status_code)
            raise AuthenticationError(
                f'Authentication failed: HTTP {status_code}',
                status_code=status_code,
                response_body=body_preview,
            )

        if status_code == HTTP_STATUS_NOT_FOUND:
            logger.error('Resource not found: %s', response.request.url)
            raise NotFoundError(
                'Resource not found',
                status_code=status_code,
                response_body=body_preview,
            )

        logger.error('Request failed with status %d: %s', status_code, body_preview)
        raise RequestError(
            f'Request failed with status {status_code}',
            status_code=status_code,
            response_body=body_preview,
        )
