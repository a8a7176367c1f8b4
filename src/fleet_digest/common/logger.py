# fleet_digest/common/logger.py
"""
Logging configuration for the fleet_digest package.

Provides centralized logging setup so every module logging through
logging.getLogger(__name__) shares one format and destination.
"""

import logging
import sys
from pathlib import Path

from fleet_digest.config import LoggingConfig

__all__: list[str] = ['PACKAGE_LOGGER_NAME', 'setup_logger']

PACKAGE_LOGGER_NAME: str = 'fleet_digest'


def setup_logger(
    logging_level: int | None = None,
    config: LoggingConfig | None = None,
) -> logging.Logger:
    """
    Set up logging for the fleet_digest package.

    Configures the package-level logger so all modules inherit the same level
    and handlers. Calling it again fully resets the handlers.

    Console output goes to stderr: stdout carries the digest report and the
    streamed LLM answer, and log lines must not interleave with them.

    Args:
        logging_level: Console level used when no config object is given.
            Defaults to logging.WARNING.
        config: Optional validated LoggingConfig. When provided:
                - Console logging uses config.console_level
                - File logging is enabled if config.file_path is set
                - The 'logging_level' argument is ignored.

    Returns:
        The package-level logger ('fleet_digest').

    Example:
        >>> setup_logger(logging_level=logging.DEBUG)
        >>> setup_logger(config=load_config().logging)
    """
    package_logger: logging.Logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    # Clear existing handlers so repeated calls don't duplicate output
    package_logger.handlers.clear()

    log_format: logging.Formatter = logging.Formatter(
        fmt='%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    # --- 1. Console handler ---
    if logging_level is None:
        logging_level = logging.WARNING
    if config:
        console_level: int = config.get_console_level_int()
    else:
        console_level = logging_level

    console_handler: logging.Handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(log_format)
    console_handler.setLevel(console_level)
    package_logger.addHandler(console_handler)

    # --- 2. File handler (config only) ---
    file_level: int | None = None

    if config and config.file_path:
        file_level = config.get_file_level_int()
        log_file_path: Path = config.file_path
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler: logging.FileHandler = logging.FileHandler(
            filename=str(log_file_path),
            mode='a',
            encoding='utf-8',
        )
        file_handler.setFormatter(log_format)
        if file_level is not None:
            file_handler.setLevel(file_level)

        package_logger.addHandler(file_handler)

    # --- 3. Package logger level ---
    # Must be the most verbose of the handler levels or DEBUG never reaches the file
    effective_level: int = console_level
    if file_level is not None:
        effective_level = min(console_level, file_level)

    package_logger.setLevel(effective_level)

    return package_logger
