"""
Configuration Package for Fleet Digest.

Exposes the configuration models and the loader function.
"""

from fleet_digest.config.config_models import (
    DEFAULT_INSTRUCTIONS,
    DigestConfig,
    FleetioConfig,
    LLMConfig,
    LoggingConfig,
    PipelineConfig,
)
from fleet_digest.config.loader import (
    REQUIRED_ENVIRONMENT_VARIABLES,
    ConfigurationError,
    load_config,
)

__all__: list[str] = [
    'DEFAULT_INSTRUCTIONS',
    'REQUIRED_ENVIRONMENT_VARIABLES',
    'ConfigurationError',
    'DigestConfig',
    'FleetioConfig',
    'LLMConfig',
    'LoggingConfig',
    'PipelineConfig',
    'load_config',
]
