# fleet_digest/common/__init__.py

from fleet_digest.common.dates import parse_calendar_date, to_iso_date
from fleet_digest.common.logger import setup_logger
from fleet_digest.common.truststore_context import (
    build_truststore_ssl_context,
    resolve_ssl_verify,
)

__all__: list[str] = [
    'build_truststore_ssl_context',
    'parse_calendar_date',
    'resolve_ssl_verify',
    'setup_logger',
    'to_iso_date',
]
