# fleet_digest/llm/client.py
"""
Streaming conversation client for a `/v1/responses` LLM endpoint.

One LLMClient holds one conversation. Each call to complete() is one turn:

1. The user text is appended to the transcript.
2. A single streaming POST is sent carrying the instructions, the full
   transcript, the reasoning effort hint and, after the first turn, the
   id of the previous response so the server can chain context.
3. The server-sent-event stream is parsed incrementally. Only
   `response.output_text.delta` fragments contribute to the answer;
   reasoning fragments and progress events go to the StreamObserver.
   `response.completed` supplies the id used on the next turn.
4. The concatenated answer is appended to the transcript and returned.

If a stream ends without `response.completed`, the previous response id is
left as it was; the turn still succeeds.

Retry Behavior:
---------------
Establishing the connection (connect errors, timeouts before any response)
is retried, three attempts in total with exponential backoff from 0.5 s. A
non-2xx status or a failure in the middle of the stream raises LLMError
straight away; the caller may retry the whole turn.
"""

import logging
from collections.abc import Iterator
from ssl import SSLContext
from types import TracebackType
from typing import Any, Final, Literal, Self

import httpx
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fleet_digest.common import resolve_ssl_verify
from fleet_digest.config import LLMConfig
from fleet_digest.llm.observers import NullObserver, StreamObserver
from fleet_digest.llm.sse import SSEEvent, SSEParser

__all__: list[str] = [
    'ConversationSession',
    'ConversationTurn',
    'LLMClient',
    'LLMConnectionError',
    'LLMError',
]

logger: logging.Logger = logging.getLogger(__name__)

RESPONSES_PATH: Final[str] = '/v1/responses'

MAX_CONNECT_ATTEMPTS: Final[int] = 3
CONNECT_BACKOFF_BASE_SECONDS: Final[float] = 0.5
CONNECT_BACKOFF_MAX_SECONDS: Final[float] = 10.0

RESPONSE_BODY_PREVIEW_CHARS: Final[int] = 500

# Event types of the responses streaming API
EVENT_IN_PROGRESS: Final[str] = 'response.in_progress'
EVENT_REASONING_DELTA: Final[str] = 'response.reasoning_text.delta'
EVENT_REASONING_DONE: Final[str] = 'response.reasoning_text.done'
EVENT_OUTPUT_DELTA: Final[str] = 'response.output_text.delta'
EVENT_COMPLETED: Final[str] = 'response.completed'


# =============================================================================
# Exceptions
# =============================================================================


class LLMError(Exception):
    """
    Raised when a turn cannot be completed.

    Covers non-2xx responses, broken streams, and malformed non-streamed
    response bodies.

    Attributes:
        status_code: HTTP status code if available.
        response_body: Truncated response body, if available.
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


class LLMConnectionError(LLMError):
    """Raised when the connection cannot be established (retryable)."""


# =============================================================================
# Conversation State
# =============================================================================


class ConversationTurn(BaseModel):
    """One transcript entry, sent to the server as `{role, content}`."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    role: Literal['user', 'assistant']
    content: str


class ConversationSession(BaseModel):
    """
    Mutable state of one conversation.

    Attributes:
        transcript: Append-only list of turns in conversation order.
        previous_response_id: Id of the last completed response, None until
            the first response.completed event.
    """

    model_config = ConfigDict(extra='forbid', validate_assignment=True)

    transcript: list[ConversationTurn] = Field(default_factory=list)
    previous_response_id: str | None = None

    def append(self, role: Literal['user', 'assistant'], content: str) -> None:
        self.transcript.append(ConversationTurn(role=role, content=content))

    def input_items(self) -> list[dict[str, str]]:
        """Transcript in request-body form."""
        return [turn.model_dump() for turn in self.transcript]


class _TurnAccumulator:
    """Applies stream events for one turn, in order."""

    def __init__(self, observer: StreamObserver) -> None:
        self._observer: StreamObserver = observer
        self._answer_parts: list[str] = []
        self.response_id: str | None = None
        self.completed: bool = False

    @property
    def answer(self) -> str:
        return ''.join(self._answer_parts)

    def handle(self, event: SSEEvent) -> None:
        event_type: Any = event.get('type')

        if event_type == EVENT_IN_PROGRESS:
            self._observer.on_progress()
        elif event_type == EVENT_REASONING_DELTA:
            self._observer.on_reasoning_delta(str(event.get('delta') or ''))
        elif event_type == EVENT_REASONING_DONE:
            self._observer.on_reasoning_done(str(event.get('text') or ''))
        elif event_type == EVENT_OUTPUT_DELTA:
            delta: str = str(event.get('delta') or '')
            self._answer_parts.append(delta)
            self._observer.on_output_delta(delta)
        elif event_type == EVENT_COMPLETED:
            response: Any = event.get('response')
            if isinstance(response, dict) and response.get('id'):
                self.response_id = str(response['id'])
            else:
                logger.warning('response.completed event carried no response id')
            self.completed = True


# =============================================================================
# Client
# =============================================================================


class LLMClient:
    """
    Conversation client for the streaming responses API.

    Not safe for concurrent use: each instance owns one conversation and
    mutates it on every complete() call.

    Example:
        >>> with LLMClient(config.llm, observer=ConsoleStreamObserver()) as llm:
        ...     summary = llm.complete(build_summary_prompt(report_text))
        ...     follow_up = llm.complete('Which vehicle should go in first?')
    """

    def __init__(
        self,
        config: LLMConfig,
        observer: StreamObserver | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the client with an empty conversation.

        Args:
            config: LLM endpoint settings.
            observer: Receives progress/reasoning/output callbacks. Defaults
                to NullObserver.
            http_client: Optional pre-built httpx.Client, mainly for tests.
        """
        self._config: LLMConfig = config
        self._observer: StreamObserver = observer if observer is not None else NullObserver()
        self._session: ConversationSession = ConversationSession()

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

        logger.info(
            'Initialized LLMClient: base_url=%r, model=%r',
            config.base_url,
            config.model,
        )

    @property
    def session(self) -> ConversationSession:
        """The conversation state owned by this client."""
        return self._session

    # -------------------------------------------------------------------------
    # Context Manager Protocol
    # -------------------------------------------------------------------------

    def close(self) -> None:
        self._http_client.close()
        logger.debug('LLMClient closed')

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
    # Turns
    # -------------------------------------------------------------------------

    def complete(self, user_text: str) -> str:
        """
        Run one conversational turn.

        Args:
            user_text: The user's message for this turn.

        Returns:
            The assistant's answer: the concatenated output_text deltas.

        Raises:
            LLMConnectionError: If the connection fails after retries.
            LLMError: On a non-2xx response, a broken stream, or a malformed
                non-streamed body. The user turn stays in the transcript.
        """
        self._session.append('user', user_text)
        payload: dict[str, Any] = self._build_payload()

        logger.debug(
            'Sending turn %d (previous_response_id=%r)',
            len(self._session.transcript),
            self._session.previous_response_id,
        )

        response: httpx.Response = self._open_stream(payload)
        accumulator = _TurnAccumulator(self._observer)

        try:
            if self._is_event_stream(response):
                self._consume_stream(response, accumulator)
            else:
                self._consume_json_body(response, accumulator)
        finally:
            response.close()

        if accumulator.response_id is not None:
            self._session.previous_response_id = accumulator.response_id
        elif not accumulator.completed:
            logger.warning(
                'Stream ended without response.completed; keeping previous_response_id=%r',
                self._session.previous_response_id,
            )

        answer: str = accumulator.answer
        self._session.append('assistant', answer)
        return answer

    def _build_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            'model': self._config.model,
            'instructions': self._config.instructions,
            'input': self._session.input_items(),
            'stream': True,
            'reasoning': {'effort': self._config.reasoning_effort},
        }
        if self._session.previous_response_id is not None:
            payload['previous_response_id'] = self._session.previous_response_id
        return payload

    @retry(
        retry=retry_if_exception_type(LLMConnectionError),
        wait=wait_exponential(
            multiplier=CONNECT_BACKOFF_BASE_SECONDS,
            max=CONNECT_BACKOFF_MAX_SECONDS,
        ),
        stop=stop_after_attempt(MAX_CONNECT_ATTEMPTS),
        reraise=True,
    )
    def _open_stream(self, payload: dict[str, Any]) -> httpx.Response:
        """
        Send the POST and return the response with its body still unread.

        Raises:
            LLMConnectionError: On connect errors or timeouts (retryable).
            LLMError: On a non-2xx status.
        """
        url: str = f'{self._config.base_url}{RESPONSES_PATH}'
        request: httpx.Request = self._http_client.build_request(
            'POST',
            url,
            json=payload,
            headers={'Accept': 'text/event-stream'},
        )

        try:
            response: httpx.Response = self._http_client.send(request, stream=True)
        except httpx.TimeoutException as error:
            logger.warning('LLM request timeout (will retry): %s', url)
            raise LLMConnectionError(f'Request timeout: {error}') from error
        except httpx.RequestError as error:
            logger.warning('LLM connection error (will retry): %s - %s', url, error)
            raise LLMConnectionError(f'Connection error: {error}') from error

        if not response.is_success:
            response.read()
            body_preview: str = response.text[:RESPONSE_BODY_PREVIEW_CHARS]
            response.close()
            logger.error('LLM request failed: HTTP %d', response.status_code)
            raise LLMError(
                f'LLM request failed with status {response.status_code}',
                status_code=response.status_code,
                response_body=body_preview,
            )

        return response

    @staticmethod
    def _is_event_stream(response: httpx.Response) -> bool:
        content_type: str = response.headers.get('content-type', '')
        # Some servers omit the header on streams; only JSON is treated differently
        return 'application/json' not in content_type.lower()

    def _consume_stream(
        self,
        response: httpx.Response,
        accumulator: _TurnAccumulator,
    ) -> None:
        """Feed the body through SSEParser until response.completed or EOF."""
        parser = SSEParser()

        try:
            for event in self._iter_events(response, parser):
                accumulator.handle(event)
                if accumulator.completed:
                    break
        except httpx.HTTPError as error:
            raise LLMError(f'Stream interrupted: {error}') from error

        if parser.skipped_frames:
            logger.debug('Skipped %d malformed SSE frames', parser.skipped_frames)

    @staticmethod
    def _iter_events(response: httpx.Response, parser: SSEParser) -> Iterator[SSEEvent]:
        for chunk in response.iter_text():
            yield from parser.feed(chunk)
        yield from parser.flush()

    def _consume_json_body(
        self,
        response: httpx.Response,
        accumulator: _TurnAccumulator,
    ) -> None:
        """
        Handle a server that ignored `stream: true` and answered with one
        JSON response object.

        Raises:
            LLMError: If the body is not JSON or lacks the expected shape.
        """
        response.read()
        try:
            body: Any = response.json()
        except ValueError as parse_error:
            raise LLMError(
                f'Invalid JSON in LLM response: {parse_error}',
                status_code=response.status_code,
                response_body=response.text[:RESPONSE_BODY_PREVIEW_CHARS],
            ) from parse_error

        output_text: str = _extract_output_text(body)
        accumulator.handle({'type': EVENT_OUTPUT_DELTA, 'delta': output_text})
        accumulator.handle({'type': EVENT_COMPLETED, 'response': body})


def _extract_output_text(body: Any) -> str:
    """
    Pull the answer out of a non-streamed response object.

    Expected shape: `{id, output: [{type: 'message', content: [{type:
    'output_text', text}]}]}`. Reasoning items are ignored.

    Raises:
        LLMError: If the shape does not match.
    """
    if not isinstance(body, dict) or not isinstance(body.get('output'), list):
        raise LLMError('Malformed LLM response: missing output list')

    texts: list[str] = []
    for item in body['output']:
        if not isinstance(item, dict) or item.get('type') != 'message':
            continue
        content: Any = item.get('content')
        if not isinstance(content, list):
            raise LLMError('Malformed LLM response: message without content list')
        texts.extend(
            str(part.get('text', ''))
            for part in content
            if isinstance(part, dict) and part.get('type') == 'output_text'
        )

    return ''.join(texts)
