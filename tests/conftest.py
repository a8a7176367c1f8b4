"""
Shared pytest fixtures for fleet_digest tests.

HTTP traffic is faked with httpx.MockTransport: a handler function receives
each httpx.Request and returns an httpx.Response, so the real client code
(headers, params, retries, streaming) runs unchanged.
"""

import json
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from fleet_digest.client import FleetioClient
from fleet_digest.config import DigestConfig, FleetioConfig, LLMConfig
from fleet_digest.llm import LLMClient

Handler = Callable[[httpx.Request], httpx.Response]

FLEETIO_BASE_URL: str = 'https://secure.fleetio.test/api/v1'
LLM_BASE_URL: str = 'http://llm.test:1234'


# =============================================================================
# Retry Sleeps
# =============================================================================


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make tenacity retries instant in every test."""
    monkeypatch.setattr(FleetioClient._execute_with_retry.retry, 'sleep', lambda _: None)  # type: ignore[attr-defined]
    monkeypatch.setattr(LLMClient._open_stream.retry, 'sleep', lambda _: None)  # type: ignore[attr-defined]


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def environ() -> dict[str, str]:
    """A complete set of required environment variables."""
    return {
        'FLEETIO_API_KEY': 'Token test-api-key',
        'FLEETIO_ACCOUNT_TOKEN': 'test-account',
        'FLEETIO_BASE_URL': FLEETIO_BASE_URL,
        'LM_STUDIO_BASE_URL': LLM_BASE_URL,
        'LM_STUDIO_MODEL': 'test-model',
    }


@pytest.fixture
def fleetio_config() -> FleetioConfig:
    return FleetioConfig(
        base_url=FLEETIO_BASE_URL,
        api_key='Token test-api-key',
        account_token='test-account',
    )


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(base_url=LLM_BASE_URL, model='test-model')


@pytest.fixture
def digest_config(fleetio_config: FleetioConfig, llm_config: LLMConfig) -> DigestConfig:
    return DigestConfig(fleetio=fleetio_config, llm=llm_config)


# =============================================================================
# HTTP Fakes
# =============================================================================


class RecordingHandler:
    """
    MockTransport handler that replays canned responses and records requests.

    Responses are consumed in order; the last one repeats once the list is
    exhausted. Each reply is a fresh copy, since httpx binds a response to
    the request it answers.
    """

    def __init__(self, responses: list[httpx.Response]) -> None:
        self._responses: list[httpx.Response] = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index: int = min(len(self.requests), len(self._responses)) - 1
        template: httpx.Response = self._responses[index]
        return httpx.Response(
            template.status_code,
            headers=template.headers,
            content=template.content,
        )


@pytest.fixture
def make_fleetio_client(
    fleetio_config: FleetioConfig,
) -> Iterator[Callable[[Handler], FleetioClient]]:
    """Factory building a FleetioClient whose HTTP layer is the given handler."""
    clients: list[FleetioClient] = []

    def factory(handler: Handler) -> FleetioClient:
        client = FleetioClient(
            fleetio_config,
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


def json_response(payload: Any, status_code: int = 200, **kwargs: Any) -> httpx.Response:
    return httpx.Response(status_code, json=payload, **kwargs)


def sse_body(events: list[dict[str, Any] | str]) -> str:
    """Render events as `data:` lines; strings are emitted verbatim as payloads."""
    lines: list[str] = []
    for event in events:
        payload: str = event if isinstance(event, str) else json.dumps(event)
        lines.append(f'data: {payload}')
        lines.append('')
    return '\n'.join(lines) + '\n'


# =============================================================================
# Raw Fleetio Records
# =============================================================================


@pytest.fixture
def raw_vehicle() -> dict[str, Any]:
    return {
        'id': 101,
        'name': 'Truck 7',
        'vin': '1FTFW1E50PFA00001',
        'vehicle_status_name': 'Active',
        'group_name': 'North',
        'make': 'Ford',
        'model': 'F-150',
        'year': 2023,
        'vehicle_type_name': 'Pickup',
        'primary_meter_value': '48211.6',
        'issues_count': 2,
        'service_reminders_count': 1,
        'updated_at': '2024-01-05T10:00:00-05:00',
    }


@pytest.fixture
def raw_issue() -> dict[str, Any]:
    return {
        'id': 501,
        'vehicle_id': 101,
        'description': 'Squealing when braking downhill',
        'summary': 'Brake noise',
        'state': 'Open',
        'due_date': '2024-01-10',
        'overdue': True,
        'reported_at': '2024-01-03T08:00:00Z',
        'created_at': '2024-01-03T08:00:00Z',
        'updated_at': '2024-01-04T09:30:00Z',
        'resolved_at': None,
    }


@pytest.fixture
def raw_service_reminder() -> dict[str, Any]:
    return {
        'id': 901,
        'vehicle_id': 101,
        'service_task_name': 'Oil change',
        'service_reminder_status_name': 'overdue',
        'next_due_at': '2024-01-15T00:00:00-05:00',
        'next_due_meter_value': '50000',
        'created_at': '2023-10-01T00:00:00Z',
        'updated_at': '2024-01-06T12:00:00Z',
    }
