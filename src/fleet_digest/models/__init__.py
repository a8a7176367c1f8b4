# fleet_digest/models/__init__.py

from fleet_digest.models.digest import (
    DigestDocument,
    DigestPeriod,
    DigestTotals,
    VehicleEntry,
)
from fleet_digest.models.records import (
    NormalizedIssue,
    NormalizedServiceReminder,
    NormalizedVehicle,
)
from fleet_digest.models.requests import (
    PaginationState,
    RateLimitInfo,
    RequestSpec,
    ResourceKind,
)

__all__: list[str] = [
    'DigestDocument',
    'DigestPeriod',
    'DigestTotals',
    'NormalizedIssue',
    'NormalizedServiceReminder',
    'NormalizedVehicle',
    'PaginationState',
    'RateLimitInfo',
    'RequestSpec',
    'ResourceKind',
    'VehicleEntry',
]
