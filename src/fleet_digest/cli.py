# fleet_digest/cli.py
"""
Console entry point: build the weekly digest, stream an LLM summary of it,
then answer follow-up questions in the same conversation.

Usage:
------
    fleet-digest [MODEL] [LLM_BASE_URL] [--config PATH] [--days N]
                 [--log-level LEVEL]

MODEL and LLM_BASE_URL override LM_STUDIO_MODEL and LM_STUDIO_BASE_URL.
The Fleetio credentials always come from the environment.

Exit codes: 0 on success, 1 on any error, 130 when interrupted.
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import Final

from pydantic import ValidationError

from fleet_digest.client import FleetioError
from fleet_digest.common import setup_logger
from fleet_digest.config import (
    ConfigurationError,
    DigestConfig,
    LoggingConfig,
    PipelineConfig,
    load_config,
)
from fleet_digest.digest import InvalidDueDateError
from fleet_digest.llm import (
    ConsoleStreamObserver,
    LLMClient,
    LLMError,
    build_summary_prompt,
)
from fleet_digest.models import DigestTotals
from fleet_digest.pipeline import DigestPipeline, DigestRun

__all__: list[str] = ['build_parser', 'main']

logger: logging.Logger = logging.getLogger(__name__)

EXIT_OK: Final[int] = 0
EXIT_FAILURE: Final[int] = 1
EXIT_INTERRUPTED: Final[int] = 130

EXIT_COMMAND: Final[str] = 'exit'
RULE: Final[str] = '=' * 80
FIRST_QUESTION_PROMPT: Final[str] = '\nDo you have any questions? > '
NEXT_QUESTION_PROMPT: Final[str] = '\nDo you have any other questions? > '


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='fleet-digest',
        description='Summarize the last week of Fleetio activity with a local LLM.',
    )
    parser.add_argument(
        'model',
        nargs='?',
        help='LLM model identifier (default: $LM_STUDIO_MODEL)',
    )
    parser.add_argument(
        'llm_base_url',
        nargs='?',
        help='LLM server root URL (default: $LM_STUDIO_BASE_URL)',
    )
    parser.add_argument(
        '--config',
        help='YAML settings file (default: $FLEET_DIGEST_CONFIG)',
    )
    parser.add_argument(
        '--days',
        type=int,
        help='Length of the reporting window in days (default: 7)',
    )
    parser.add_argument(
        '--log-level',
        help='Console log level, e.g. INFO or DEBUG (default: WARNING)',
    )
    return parser


def _apply_overrides(config: DigestConfig, args: argparse.Namespace) -> DigestConfig:
    """
    Apply --days and --log-level, re-validating the touched sections.

    Raises:
        ConfigurationError: If an override is out of range or unknown.
    """
    updates: dict[str, object] = {}

    try:
        if args.days is not None:
            updates['pipeline'] = PipelineConfig(lookback_days=args.days)

        if args.log_level is not None:
            logging_settings: dict[str, object] = config.logging.model_dump()
            logging_settings['console_level'] = args.log_level.upper()
            updates['logging'] = LoggingConfig.model_validate(logging_settings)
    except ValidationError as error:
        raise ConfigurationError(f'Invalid command-line override: {error}') from error

    if not updates:
        return config
    return config.model_copy(update=updates)


def print_totals(totals: DigestTotals) -> None:
    print(RULE)
    print('FLEET WEEKLY DIGEST')
    print('This week you have:')
    print(f'- {totals.open_issues} open issues')
    print(f'- {totals.overdue_issues} overdue issues')
    print(f'- {totals.resolved_issues} resolved issues')
    print(f'- {totals.service_reminders} service reminders')
    print(RULE)


def _converse(llm_client: LLMClient, observer: ConsoleStreamObserver, run: DigestRun) -> None:
    """First turn from the digest, then questions until 'exit' or end of input."""
    llm_client.complete(build_summary_prompt(run.text))
    observer.finish_turn()
    print(RULE)

    question_prompt: str = FIRST_QUESTION_PROMPT
    while True:
        try:
            question: str = input(question_prompt).strip()
        except EOFError:
            print()
            return

        if question == EXIT_COMMAND:
            return
        if not question:
            continue

        llm_client.complete(question)
        observer.finish_turn()
        question_prompt = NEXT_QUESTION_PROMPT


def run(args: argparse.Namespace) -> int:
    """
    Execute one digest session.

    Raises:
        ConfigurationError, FleetioError, LLMError, InvalidDueDateError:
            Propagated to main() for reporting.
    """
    config: DigestConfig = load_config(
        config_path=args.config,
        model=args.model,
        llm_base_url=args.llm_base_url,
    )
    config = _apply_overrides(config, args)
    setup_logger(config=config.logging)

    with DigestPipeline(config) as pipeline:
        start_date, end_date = pipeline.date_range()
        logger.info('Reporting window: %s to %s', start_date, end_date)
        digest_run: DigestRun = pipeline.build_digest(start_date, end_date)

    print_totals(digest_run.digest.totals)

    observer = ConsoleStreamObserver(stream=sys.stdout)
    with LLMClient(config.llm, observer=observer) as llm_client:
        _converse(llm_client, observer, digest_run)

    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """
    Parse arguments, run the session, and map failures to exit codes.

    Returns:
        Process exit code.
    """
    args: argparse.Namespace = build_parser().parse_args(argv)

    try:
        return run(args)
    except KeyboardInterrupt:
        print('\nInterrupted.', file=sys.stderr)
        return EXIT_INTERRUPTED
    except ConfigurationError as error:
        print(f'Configuration error: {error}', file=sys.stderr)
        for name in error.missing:
            print(f'  - {name}', file=sys.stderr)
    except FleetioError as error:
        print(f'Fleetio API error: {error}', file=sys.stderr)
    except LLMError as error:
        print(f'LLM error: {error}', file=sys.stderr)
    except InvalidDueDateError as error:
        print(f'Invalid digest data: {error}', file=sys.stderr)
    except Exception as error:
        logger.exception('Unexpected error')
        print(f'Unexpected error: {error}', file=sys.stderr)

    return EXIT_FAILURE
