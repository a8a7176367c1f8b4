# fleet_digest/config/config_models.py
"""
Configuration models for the Fleet Digest pipeline.

The configuration is assembled once at startup from two sources: an optional
YAML settings file for non-secret tuning (timeouts, page size, logging) and
the process environment for credentials and endpoints. The result is a single
validated DigestConfig that is passed explicitly into the Fleetio client, the
LLM client, and the pipeline. Nothing below the entry point reads the
environment.

Design Decisions:
-----------------
- All models use `extra='forbid'` so typos in the YAML file are rejected at
  load time rather than silently ignored.

- No logging occurs within this module because the logging configuration
  itself is defined here.

- SecretStr is used for the Fleetio API key and account token so they never
  show up in repr() or log output. Access via `.get_secret_value()`.

Usage:
------
    from fleet_digest.config import load_config

    config = load_config('config/fleet_digest.yaml')
    config.fleetio.api_key.get_secret_value()
"""

from pathlib import Path
from typing import Literal, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

__all__: list[str] = [
    'DEFAULT_INSTRUCTIONS',
    'DigestConfig',
    'FleetioConfig',
    'LLMConfig',
    'LogLevelName',
    'LoggingConfig',
    'PipelineConfig',
    'ReasoningEffort',
]

# =============================================================================
# Type Aliases and Constants
# =============================================================================

LogLevelName = Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

ReasoningEffort = Literal['low', 'medium', 'high']

LOG_LEVEL_VALUES: frozenset[int] = frozenset({10, 20, 30, 40, 50})

LOG_LEVEL_NAME_TO_INT: dict[LogLevelName, int] = {
    'DEBUG': 10,
    'INFO': 20,
    'WARNING': 30,
    'ERROR': 40,
    'CRITICAL': 50,
}

DEFAULT_INSTRUCTIONS: str = (
    'You are a fleet operations assistant. Your job is to help recommend '
    'actions to improve fleet operations and management.'
)


# =============================================================================
# Shared Validators
# =============================================================================


def _normalize_base_url(base_url: str) -> str:
    """Require an http(s) scheme and strip any trailing slash."""
    if not base_url or not base_url.strip():
        raise ValueError('base_url cannot be empty')

    base_url = base_url.strip()
    if not base_url.startswith(('http://', 'https://')):
        raise ValueError(
            f"base_url must start with 'http://' or 'https://', got: {base_url!r}"
        )

    return base_url.rstrip('/')


def _validate_timeout(timeout: tuple[int, int]) -> tuple[int, int]:
    """Ensure both (connect, read) timeout values are positive."""
    connect_timeout, read_timeout = timeout

    if connect_timeout <= 0:
        raise ValueError(f'connect_timeout must be positive, got: {connect_timeout}')
    if read_timeout <= 0:
        raise ValueError(f'read_timeout must be positive, got: {read_timeout}')

    return timeout


def _validate_ssl_path(verify_ssl: bool | str) -> bool | str:
    """When a CA bundle path is given, ensure it points at a file."""
    if isinstance(verify_ssl, str):
        cert_path = Path(verify_ssl)

        if not cert_path.exists():
            raise ValueError(f'SSL certificate bundle file not found: {verify_ssl}')
        if not cert_path.is_file():
            raise ValueError(
                f'SSL certificate path must be a file, not directory: {verify_ssl}'
            )

    return verify_ssl


# =============================================================================
# Fleetio Configuration
# =============================================================================


class FleetioConfig(BaseModel):
    """Connection settings for the Fleetio REST API.

    Fleetio authenticates every request with two static headers: the API key
    (sent verbatim as `Authorization`) and the account token (sent as
    `Account-Token`). Both are required and must not be blank.

    Attributes:
        base_url: API root, e.g. 'https://secure.fleetio.com/api/v1'.
            Normalized without a trailing slash.
        api_key: API key (masked in repr and logs).
        account_token: Account/tenant token (masked in repr and logs).
        per_page: Page size for the paginated vehicles endpoint (1-100).
        request_timeout: (connect, read) timeout in seconds.
        verify_ssl: False to disable verification, True for the default CA
            bundle, or a path to a custom CA bundle.
        use_truststore: Use the system trust store instead of verify_ssl.
    """

    model_config = ConfigDict(extra='forbid')

    base_url: str = Field(
        description='Fleetio API root URL with scheme, without trailing slash',
    )
    api_key: SecretStr = Field(
        description='Fleetio API key, sent as the Authorization header',
    )
    account_token: SecretStr = Field(
        description='Fleetio account token, sent as the Account-Token header',
    )
    per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description='Page size for paginated endpoints (1-100)',
    )
    request_timeout: tuple[int, int] = Field(
        default=(10, 60),
        description='[connect_timeout, read_timeout] in seconds',
    )
    verify_ssl: bool | str = Field(
        default=True,
        description='False to disable SSL, True for system CA, or path to CA bundle',
    )
    use_truststore: bool = Field(
        default=False,
        description='Use the system trust store for certificate validation',
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, base_url: str) -> str:
        """Validate scheme and drop the trailing slash."""
        return _normalize_base_url(base_url)

    @field_validator('api_key', 'account_token')
    @classmethod
    def validate_secret_not_blank(cls, secret: SecretStr) -> SecretStr:
        """Reject empty or whitespace-only credentials.

        Raises:
            ValueError: If the secret is blank.
        """
        if not secret.get_secret_value().strip():
            raise ValueError('credential cannot be empty or whitespace-only')
        return secret

    @field_validator('request_timeout')
    @classmethod
    def validate_timeout_values_positive(
        cls, timeout: tuple[int, int]
    ) -> tuple[int, int]:
        return _validate_timeout(timeout)

    @field_validator('verify_ssl')
    @classmethod
    def validate_ssl_configuration(cls, verify_ssl: bool | str) -> bool | str:
        return _validate_ssl_path(verify_ssl)


# =============================================================================
# LLM Configuration
# =============================================================================


class LLMConfig(BaseModel):
    """Settings for the streaming LLM completion endpoint.

    The endpoint is any server implementing the `/v1/responses` streaming
    API (LM Studio locally, for instance). No API key is sent.

    The default read timeout covers a reasoning model thinking for several
    minutes before its first output token.

    Attributes:
        base_url: Server root, e.g. 'http://localhost:1234'.
        model: Model identifier passed in every request.
        instructions: System-level instructions sent with every turn.
        reasoning_effort: Reasoning effort hint ('low', 'medium', 'high').
        request_timeout: (connect, read) timeout in seconds.
        verify_ssl: SSL verification mode, as for FleetioConfig.
        use_truststore: Use the system trust store.
    """

    model_config = ConfigDict(extra='forbid')

    base_url: str = Field(description='LLM server root URL')
    model: str = Field(min_length=1, description='Model identifier')
    instructions: str = Field(
        default=DEFAULT_INSTRUCTIONS,
        min_length=1,
        description='Instructions string sent with every request',
    )
    reasoning_effort: ReasoningEffort = Field(
        default='medium',
        description="Reasoning effort hint: 'low', 'medium', or 'high'",
    )
    request_timeout: tuple[int, int] = Field(
        default=(10, 1000),
        description='[connect_timeout, read_timeout] in seconds',
    )
    verify_ssl: bool | str = Field(default=True)
    use_truststore: bool = Field(default=False)

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, base_url: str) -> str:
        return _normalize_base_url(base_url)

    @field_validator('model')
    @classmethod
    def validate_model_not_blank(cls, model: str) -> str:
        if not model.strip():
            raise ValueError('model cannot be empty or whitespace-only')
        return model.strip()

    @field_validator('request_timeout')
    @classmethod
    def validate_timeout_values_positive(
        cls, timeout: tuple[int, int]
    ) -> tuple[int, int]:
        return _validate_timeout(timeout)

    @field_validator('verify_ssl')
    @classmethod
    def validate_ssl_configuration(cls, verify_ssl: bool | str) -> bool | str:
        return _validate_ssl_path(verify_ssl)


# =============================================================================
# Pipeline Configuration
# =============================================================================


class PipelineConfig(BaseModel):
    """Controls the trailing window the digest covers.

    Attributes:
        lookback_days: Window length in days. The digest covers
            [today - lookback_days, today], inclusive on both ends.
    """

    model_config = ConfigDict(extra='forbid')

    lookback_days: int = Field(
        default=7,
        ge=1,
        le=366,
        description='Days covered by the digest, ending today (1-366)',
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Configuration for application logging output.

    Console logging is always on (stderr). File logging is enabled by
    providing file_path; file_level then defaults to DEBUG.

    Attributes:
        file_path: Log file path, '.log' appended when missing. None disables
            file logging.
        console_level: Minimum console level, by name or numeric value.
        file_level: Minimum file level. Requires file_path.
    """

    model_config = ConfigDict(extra='forbid')

    file_path: Path | None = Field(
        default=None,
        description='Log file path (.log extension auto-added). None disables file logging.',
    )
    console_level: LogLevelName | int = Field(
        default='WARNING',
        description="Console log level: 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL', or int",
    )
    file_level: LogLevelName | int | None = Field(
        default=None,
        description='File log level. None disables file logging.',
    )

    @field_validator('file_path', mode='before')
    @classmethod
    def normalize_log_file_path(cls, path_value: str | Path | None) -> Path | None:
        """Normalize path and ensure .log extension."""
        if path_value is None:
            return None

        path_string: str = str(path_value)

        if not path_string.lower().endswith('.log'):
            path_string = f'{path_string}.log'

        return Path(path_string)

    @field_validator('console_level', 'file_level', mode='after')
    @classmethod
    def validate_numeric_log_level(
        cls, level_value: LogLevelName | int | None
    ) -> LogLevelName | int | None:
        """Ensure numeric levels match the standard logging constants.

        Raises:
            ValueError: If a numeric level is not 10, 20, 30, 40 or 50.
        """
        if level_value is None or isinstance(level_value, str):
            return level_value

        if level_value not in LOG_LEVEL_VALUES:
            raise ValueError(
                f'Numeric log level must be one of {sorted(LOG_LEVEL_VALUES)}, '
                f'got: {level_value}'
            )

        return level_value

    @model_validator(mode='after')
    def ensure_file_logging_configuration_consistency(self) -> Self:
        """Default file_level to DEBUG, and reject file_level without a path.

        Raises:
            ValueError: If file_level is set but file_path is missing.
        """
        has_file_path: bool = self.file_path is not None
        has_file_level: bool = self.file_level is not None

        if has_file_path and not has_file_level:
            self.file_level = 'DEBUG'

        if has_file_level and not has_file_path:
            raise ValueError(
                'file_level is specified but file_path is missing. '
                'Provide file_path to enable file logging, or remove file_level.'
            )

        return self

    def get_console_level_int(self) -> int:
        """Return console_level as a numeric logging level."""
        if isinstance(self.console_level, int):
            return self.console_level
        return LOG_LEVEL_NAME_TO_INT[self.console_level]

    def get_file_level_int(self) -> int | None:
        """Return file_level as a numeric logging level, or None."""
        if self.file_level is None:
            return None
        if isinstance(self.file_level, int):
            return self.file_level
        return LOG_LEVEL_NAME_TO_INT[self.file_level]


# =============================================================================
# Root Configuration
# =============================================================================


class DigestConfig(BaseModel):
    """Root configuration for one Fleet Digest run.

    Attributes:
        fleetio: Fleetio API connection settings.
        llm: LLM endpoint settings.
        pipeline: Digest window settings.
        logging: Logging settings.
    """

    model_config = ConfigDict(extra='forbid')

    fleetio: FleetioConfig
    llm: LLMConfig
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
