"""Digest composition and text rendering."""

from fleet_digest.digest.composer import calculate_totals, compose_digest
from fleet_digest.digest.serializer import InvalidDueDateError, serialize_digest

__all__: list[str] = [
    'InvalidDueDateError',
    'calculate_totals',
    'compose_digest',
    'serialize_digest',
]
