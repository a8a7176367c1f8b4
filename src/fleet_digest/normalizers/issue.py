# fleet_digest/normalizers/issue.py
"""Reduce raw Fleetio issue records to NormalizedIssue."""

import logging
from typing import Any

from fleet_digest.models import NormalizedIssue
from fleet_digest.normalizers.coercion import (
    as_mapping,
    coerce_bool,
    coerce_int,
    coerce_str,
)

__all__: list[str] = ['normalize_issue', 'normalize_issues']

logger: logging.Logger = logging.getLogger(__name__)


def normalize_issue(raw_issue: Any) -> NormalizedIssue:
    """
    Map one raw issue record to its canonical shape.

    The API reports overdue status as 'overdue'; it is stored as is_overdue.

    Args:
        raw_issue: Raw issue dictionary from the API.

    Returns:
        NormalizedIssue with every field populated.
    """
    record = as_mapping(raw_issue)

    return NormalizedIssue(
        id=coerce_int(record.get('id')),
        vehicle_id=coerce_int(record.get('vehicle_id')),
        description=coerce_str(record.get('description')),
        summary=coerce_str(record.get('summary')),
        state=coerce_str(record.get('state')),
        due_date=coerce_str(record.get('due_date')),
        is_overdue=coerce_bool(record.get('overdue')),
        reported_at=coerce_str(record.get('reported_at')),
        created_at=coerce_str(record.get('created_at')),
        updated_at=coerce_str(record.get('updated_at')),
        resolved_at=coerce_str(record.get('resolved_at')),
    )


def normalize_issues(raw_issues: Any) -> list[NormalizedIssue]:
    """Normalize a collection of raw issues; [] for non-list input."""
    if not isinstance(raw_issues, list):
        logger.debug(
            'Expected a list of issues, got %s; returning []',
            type(raw_issues).__name__,
        )
        return []

    return [normalize_issue(raw_issue) for raw_issue in raw_issues]
