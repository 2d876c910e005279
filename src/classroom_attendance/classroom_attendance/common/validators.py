from __future__ import annotations

import re
from typing import Any, Optional

from ..core.enums import ErrorKind
from ..core.exceptions import AttendanceError

_INT_RE = re.compile(r"-?[0-9]+")


def _as_int(value: Any) -> Optional[int]:
    """int for ints and ASCII decimal strings, None for everything else (bools and floats included)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    return None


def require_bounded_int(value: Any, field_name: str, *, min_value: int, max_value: int) -> int:
    """Coerce form/JSON input into an int within [min_value, max_value].

    Accepts ints and decimal strings ("15", " 15 "). Rejects bools, floats,
    and anything non-numeric.
    """

    parsed = _as_int(value)
    if parsed is None:
        raise AttendanceError(ErrorKind.VALIDATION, f"{field_name} must be an integer", field=field_name)

    if parsed < min_value or parsed > max_value:
        raise AttendanceError(
            ErrorKind.VALIDATION,
            f"{field_name} must be between {min_value} and {max_value}",
            field=field_name,
            value=parsed,
        )
    return parsed


def require_id(value: Any, field_name: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise AttendanceError(ErrorKind.VALIDATION, f"{field_name} is required", field=field_name)

    parsed = _as_int(value)
    if parsed is None or parsed <= 0:
        raise AttendanceError(ErrorKind.VALIDATION, f"{field_name} is invalid", field=field_name)
    return parsed
