"""Pure input validators shared by the lifecycle services.

Every validator returns None on success and raises ValidationError on failure.
Values are never coerced or truncated.
"""

import math
import re
from collections.abc import Iterable
from enum import Enum

from opsdesk.core.errors import ErrorCode, ValidationError


UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def validate_id(value: object, field: str) -> None:
    """Validate that value is a canonical UUID string.

    Args:
        value: Candidate identifier
        field: Field name used to build the error code (e.g. "assignee" -> INVALID_ASSIGNEE_ID)
    """
    if not isinstance(value, str) or not UUID_PATTERN.match(value):
        raise ValidationError(f"Invalid {field} format", ErrorCode.invalid_id(field))


def validate_enum(value: object, allowed: type[Enum] | Iterable[object], code: str, field: str) -> None:
    """Validate that value is a member of a closed set.

    Args:
        value: Candidate value (enum member or its raw value)
        allowed: Enum class or iterable of allowed values
        code: Error code raised on failure
        field: Human-readable field name for the error message
    """
    if isinstance(allowed, type) and issubclass(allowed, Enum):
        allowed_values = {member.value for member in allowed}
    else:
        allowed_values = {getattr(item, "value", item) for item in allowed}

    candidate = value.value if isinstance(value, Enum) else value
    try:
        is_member = candidate in allowed_values
    except TypeError:
        is_member = False
    if not is_member:
        raise ValidationError(f"Invalid {field}: {value}", code)


def validate_required_text(value: object, code: str, field: str, *, min_length: int = 1) -> None:
    """Validate that value is text with at least min_length characters after trimming."""
    if not isinstance(value, str) or len(value.strip()) < max(min_length, 1):
        if min_length > 1:
            raise ValidationError(f"{field} must be at least {min_length} characters", code)
        raise ValidationError(f"{field} is required", code)


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def validate_non_negative_number(value: object, code: str, field: str) -> None:
    """Validate hours and monetary amounts: finite numbers >= 0."""
    if not _is_number(value):
        raise ValidationError(f"{field} must be a non-negative number", code)
    try:
        # Amounts are stored as REAL, so ints beyond float range are rejected too
        number = float(value)  # type: ignore[arg-type]
    except OverflowError as e:
        raise ValidationError(f"{field} is too large", code) from e
    if not math.isfinite(number) or number < 0:
        raise ValidationError(f"{field} must be a non-negative number", code)


def validate_positive_integer(value: object, code: str, field: str) -> None:
    """Validate quantities that must be whole and at least 1."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValidationError(f"{field} must be a positive integer", code)


def validate_non_negative_integer(value: object, code: str, field: str) -> None:
    """Validate floors and stock levels: whole numbers >= 0."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValidationError(f"{field} must be a non-negative integer", code)
