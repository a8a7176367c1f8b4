# fleet_digest/config/loader.py
"""
Configuration Loading Logic.

Builds the validated DigestConfig from its two sources:

    1.  An optional YAML settings file with non-secret tuning (timeouts,
        page size, lookback window, logging). Its path comes from the
        `config_path` argument or the FLEET_DIGEST_CONFIG variable.
    2.  The process environment, which must provide the five required
        values listed in REQUIRED_ENVIRONMENT_VARIABLES. The model name and
        LLM base URL can instead be supplied as explicit overrides (the
        positional command-line arguments).

Every missing required value is reported at once, before any network call.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

import yaml
from pydantic import ValidationError

from fleet_digest.config.config_models import DigestConfig

__all__: list[str] = [
    'CONFIG_PATH_ENV_VAR',
    'REQUIRED_ENVIRONMENT_VARIABLES',
    'ConfigurationError',
    'load_config',
]

logger: logging.Logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR: Final[str] = 'FLEET_DIGEST_CONFIG'

ENV_FLEETIO_API_KEY: Final[str] = 'FLEETIO_API_KEY'
ENV_FLEETIO_ACCOUNT_TOKEN: Final[str] = 'FLEETIO_ACCOUNT_TOKEN'
ENV_FLEETIO_BASE_URL: Final[str] = 'FLEETIO_BASE_URL'
ENV_LLM_BASE_URL: Final[str] = 'LM_STUDIO_BASE_URL'
ENV_LLM_MODEL: Final[str] = 'LM_STUDIO_MODEL'

REQUIRED_ENVIRONMENT_VARIABLES: Final[tuple[str, ...]] = (
    ENV_FLEETIO_API_KEY,
    ENV_FLEETIO_ACCOUNT_TOKEN,
    ENV_FLEETIO_BASE_URL,
    ENV_LLM_BASE_URL,
    ENV_LLM_MODEL,
)


class ConfigurationError(ValueError):
    """
    Raised when required configuration is missing or invalid.

    Attributes:
        missing: Names of required environment variables that were absent or
            blank, in declaration order. Empty for validation failures.
    """

    def __init__(self, message: str, missing: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.missing: tuple[str, ...] = missing


def _read_settings_file(config_path: Path) -> dict[str, Any]:
    """
    Read the optional YAML settings file.

    Raises:
        ConfigurationError: If the file is missing, malformed, or not a mapping.
    """
    if not config_path.exists():
        error_message: str = f'Configuration file not found: {config_path}'
        logger.error(error_message)
        raise ConfigurationError(error_message)

    try:
        with Path.open(config_path, encoding='utf-8') as config_file:
            raw_settings: Any = yaml.safe_load(config_file)
    except yaml.YAMLError as error:
        error_message = f'Failed to parse YAML configuration: {error}'
        logger.error(error_message)
        raise ConfigurationError(error_message) from error

    if raw_settings is None:
        return {}

    if not isinstance(raw_settings, dict):
        raise ConfigurationError(
            f'Configuration file must contain a mapping, got {type(raw_settings).__name__}'
        )

    return dict(raw_settings)


def _clean(value: str | None) -> str | None:
    """Treat unset and blank values the same way."""
    if value is None or not value.strip():
        return None
    return value.strip()


def _section(settings: dict[str, Any], name: str) -> dict[str, Any]:
    section: Any = settings.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return dict(section)


def load_config(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
    model: str | None = None,
    llm_base_url: str | None = None,
) -> DigestConfig:
    """Assemble and validate the run configuration.

    Args:
        config_path: Optional YAML settings file. Falls back to the
            FLEET_DIGEST_CONFIG variable; no file is read when neither is set.
        environ: Environment mapping to read from. Defaults to os.environ.
        model: Optional LLM model override (takes precedence over
            LM_STUDIO_MODEL).
        llm_base_url: Optional LLM base URL override (takes precedence over
            LM_STUDIO_BASE_URL).

    Returns:
        Validated DigestConfig.

    Raises:
        ConfigurationError: If any required value is missing (all missing
            names are listed in `.missing`), the settings file cannot be read,
            or validation fails.

    Example:
        >>> config = load_config(model='qwen3-8b')
        >>> config.llm.model
        'qwen3-8b'
    """
    env: Mapping[str, str] = os.environ if environ is None else environ

    if config_path is None:
        config_path = _clean(env.get(CONFIG_PATH_ENV_VAR))

    settings: dict[str, Any] = {}
    if config_path is not None:
        config_path = Path(config_path)
        logger.info('Loading digest settings from: %s', config_path)
        settings = _read_settings_file(config_path)

    values: dict[str, str | None] = {
        name: _clean(env.get(name)) for name in REQUIRED_ENVIRONMENT_VARIABLES
    }
    if _clean(model) is not None:
        values[ENV_LLM_MODEL] = _clean(model)
    if _clean(llm_base_url) is not None:
        values[ENV_LLM_BASE_URL] = _clean(llm_base_url)

    missing: tuple[str, ...] = tuple(
        name for name in REQUIRED_ENVIRONMENT_VARIABLES if values[name] is None
    )
    if missing:
        error_message = 'Missing required environment variables: ' + ', '.join(missing)
        logger.error(error_message)
        raise ConfigurationError(error_message, missing=missing)

    fleetio_section: dict[str, Any] = _section(settings, 'fleetio')
    fleetio_section.update(
        base_url=values[ENV_FLEETIO_BASE_URL],
        api_key=values[ENV_FLEETIO_API_KEY],
        account_token=values[ENV_FLEETIO_ACCOUNT_TOKEN],
    )

    llm_section: dict[str, Any] = _section(settings, 'llm')
    llm_section.update(
        base_url=values[ENV_LLM_BASE_URL],
        model=values[ENV_LLM_MODEL],
    )

    raw_config: dict[str, Any] = {
        **settings,
        'fleetio': fleetio_section,
        'llm': llm_section,
    }

    try:
        validated_config: DigestConfig = DigestConfig.model_validate(raw_config)
    except ValidationError as error:
        error_message = f'Configuration validation failed: {error}'
        logger.error(error_message)
        raise ConfigurationError(error_message) from error

    logger.info('Configuration loaded and validated successfully')
    return validated_config
