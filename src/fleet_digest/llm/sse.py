# fleet_digest/llm/sse.py
"""
Incremental parser for the server-sent-event stream of the responses API.

Each event arrives as one line of the form `data: {json}`. Network reads do
not respect line boundaries, so the parser keeps whatever follows the last
newline in a buffer and completes it with the next chunk. Lines that are not
`data:` fields (blank separators, `event:` names, `:` comments) are ignored,
as is the `[DONE]` sentinel some servers send. A frame whose payload is not
a JSON object is skipped without interrupting the stream.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from typing import Any, Final

__all__: list[str] = ['SSEParser', 'iter_sse_events']

logger: logging.Logger = logging.getLogger(__name__)

DATA_FIELD_PREFIX: Final[str] = 'data:'
DONE_SENTINEL: Final[str] = '[DONE]'

SSEEvent = dict[str, Any]


class SSEParser:
    """
    Stateful, resumable SSE line parser.

    Example:
        >>> parser = SSEParser()
        >>> parser.feed('data: {"type": "a"}\\ndata: {"ty')
        [{'type': 'a'}]
        >>> parser.feed('pe": "b"}\\n')
        [{'type': 'b'}]
    """

    def __init__(self) -> None:
        self._buffer: str = ''
        self.skipped_frames: int = 0

    def feed(self, chunk: str) -> list[SSEEvent]:
        """
        Consume one chunk of text and return the events it completes.

        Args:
            chunk: Decoded text as read from the network, any length.

        Returns:
            Parsed event objects, in stream order.
        """
        self._buffer += chunk
        *complete_lines, self._buffer = self._buffer.split('\n')
        return self._parse_lines(complete_lines)

    def flush(self) -> list[SSEEvent]:
        """Parse whatever remains in the buffer once the stream has ended."""
        remaining: str = self._buffer
        self._buffer = ''
        return self._parse_lines([remaining])

    def _parse_lines(self, lines: list[str]) -> list[SSEEvent]:
        events: list[SSEEvent] = []
        for line in lines:
            event: SSEEvent | None = self._parse_line(line)
            if event is not None:
                events.append(event)
        return events

    def _parse_line(self, line: str) -> SSEEvent | None:
        line = line.rstrip('\r')
        if not line.startswith(DATA_FIELD_PREFIX):
            return None

        payload: str = line[len(DATA_FIELD_PREFIX) :].strip()
        if not payload or payload == DONE_SENTINEL:
            return None

        try:
            event: Any = json.loads(payload)
        except json.JSONDecodeError:
            self.skipped_frames += 1
            logger.debug('Skipping malformed SSE frame: %.100s', payload)
            return None

        if not isinstance(event, dict):
            self.skipped_frames += 1
            logger.debug('Skipping non-object SSE frame: %.100s', payload)
            return None

        return event


def iter_sse_events(chunks: Iterable[str]) -> Iterator[SSEEvent]:
    """Parse an iterable of text chunks into a stream of event objects."""
    parser = SSEParser()
    for chunk in chunks:
        yield from parser.feed(chunk)
    yield from parser.flush()
