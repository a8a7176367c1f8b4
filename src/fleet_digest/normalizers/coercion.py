# fleet_digest/normalizers/coercion.py
"""
Total scalar coercions used by the normalizers.

None of these functions raise. Anything that cannot be read as the target
type becomes the type's default: 0 for integers (the "not available"
sentinel for ids and counters), '' for strings, False for booleans.
"""

import math
from collections.abc import Mapping
from typing import Any, Final

__all__: list[str] = ['as_mapping', 'coerce_bool', 'coerce_int', 'coerce_str']

MISSING_INT: Final[int] = 0

TRUTHY_STRINGS: Final[frozenset[str]] = frozenset({'true', 't', 'yes', 'y', '1'})


def as_mapping(raw_record: Any) -> Mapping[str, Any]:
    """Return the record itself when it is a mapping, else an empty one."""
    if isinstance(raw_record, Mapping):
        return raw_record
    return {}


def coerce_int(value: Any) -> int:
    """
    Coerce a raw value to int.

    Examples:
        >>> coerce_int('42'), coerce_int(' 7.9 '), coerce_int('n/a'), coerce_int(None)
        (42, 7, 0, 0)
    """
    if value is None:
        return MISSING_INT
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else MISSING_INT
    if isinstance(value, str):
        text: str = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed: float = float(text)
        except ValueError:
            return MISSING_INT
        return int(parsed) if math.isfinite(parsed) else MISSING_INT
    return MISSING_INT


def coerce_str(value: Any) -> str:
    """Coerce a raw value to str; None becomes ''."""
    if value is None:
        return ''
    return str(value)


def coerce_bool(value: Any) -> bool:
    """
    Coerce a raw value to bool.

    Strings are matched against TRUTHY_STRINGS case-insensitively; any other
    string (including 'false' and '') is False.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return False
