"""LLM conversation client, stream parsing and prompt construction."""

from fleet_digest.llm.client import (
    ConversationSession,
    ConversationTurn,
    LLMClient,
    LLMConnectionError,
    LLMError,
)
from fleet_digest.llm.observers import (
    ConsoleStreamObserver,
    NullObserver,
    StreamObserver,
)
from fleet_digest.llm.prompt import build_summary_prompt
from fleet_digest.llm.sse import SSEParser, iter_sse_events

__all__: list[str] = [
    'ConsoleStreamObserver',
    'ConversationSession',
    'ConversationTurn',
    'LLMClient',
    'LLMConnectionError',
    'LLMError',
    'NullObserver',
    'SSEParser',
    'StreamObserver',
    'build_summary_prompt',
    'iter_sse_events',
]
