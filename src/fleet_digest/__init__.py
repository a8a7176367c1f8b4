# fleet_digest/__init__.py
"""
Fleet Digest - Weekly Fleetio activity digest with an LLM summary.

This package pulls vehicles, issues and service reminders for a trailing
window from the Fleetio API, composes them into a digest, and discusses the
digest with a local LLM server over the streaming responses API.

1. **Digest Pipeline**: Fleetio data to report text
   - Cursor-paginated vehicle fetch, client-side date filtering for issues
     and service reminders
   - Total, pure normalization into fixed-shape records
   - Vehicle-grouped digest with totals, rendered as plain text

2. **LLM Conversation**: Report text to recommendations
   - Streaming `/v1/responses` client with an incremental SSE parser
   - Conversation chaining through previous_response_id
   - Live reasoning display that is erased once the answer starts

Quick Start:
    >>> from fleet_digest import DigestPipeline, LLMClient, load_config
    >>> from fleet_digest.llm import build_summary_prompt
    >>>
    >>> config = load_config()
    >>> with DigestPipeline(config) as pipeline:
    ...     run = pipeline.build_digest(*pipeline.date_range())
    >>> with LLMClient(config.llm) as llm:
    ...     print(llm.complete(build_summary_prompt(run.text)))

Command line:
    $ fleet-digest [MODEL] [LLM_BASE_URL]
"""

__version__ = '0.1.0'

from fleet_digest.client import (
    AuthenticationError,
    FleetioClient,
    FleetioError,
    NotFoundError,
    RateLimitError,
    RequestError,
    TransientAPIError,
)
from fleet_digest.common import setup_logger
from fleet_digest.config import ConfigurationError, DigestConfig, load_config
from fleet_digest.digest import InvalidDueDateError, compose_digest, serialize_digest
from fleet_digest.endpoints import FleetioEndpoints
from fleet_digest.llm import LLMClient, LLMError
from fleet_digest.pipeline import DigestPipeline, DigestRun

__all__: list[str] = [
    'AuthenticationError',
    'ConfigurationError',
    'DigestConfig',
    'DigestPipeline',
    'DigestRun',
    'FleetioClient',
    'FleetioEndpoints',
    'FleetioError',
    'InvalidDueDateError',
    'LLMClient',
    'LLMError',
    'NotFoundError',
    'RateLimitError',
    'RequestError',
    'TransientAPIError',
    '__version__',
    'compose_digest',
    'load_config',
    'serialize_digest',
    'setup_logger',
]
