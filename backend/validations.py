"""
Input validation helpers shared by the request handlers.

These are plain functions rather than pydantic constraints so handlers can
run them after existence and membership checks.
"""

import re
from typing import Any, Iterable, List, Mapping, Optional

from errors import ValidationError

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MIN_PASSWORD_LENGTH = 6


def validate_email(email: Any) -> bool:
    """Return True if email looks like local@domain.tld."""
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email) is not None


def validate_password(password: Any) -> bool:
    """Return True if password is a string of at least MIN_PASSWORD_LENGTH characters."""
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def validate_required(fields: Iterable[str], body: Mapping[str, Any]) -> List[str]:
    """
    Check that every field in `fields` is present and non-blank in `body`.

    Args:
        fields: Names of the required fields
        body: Request payload as a mapping

    Returns:
        One "<field> is required" message per missing field, in field order

    Example:
        >>> validate_required(["name", "email"], {"name": "  "})
        ['name is required', 'email is required']
    """
    return [f"{field} is required" for field in fields if is_blank(body.get(field))]


def validate_strings(fields: Iterable[str], body: Mapping[str, Any]) -> List[str]:
    """Return one "<field> must be a string" message per non-null, non-string field."""
    return [
        f"{field} must be a string"
        for field in fields
        if body.get(field) is not None and not isinstance(body[field], str)
    ]


def parse_positive_int(name: str, value: Optional[str], default: int) -> int:
    """
    Parse a query-string integer that must be at least 1.

    Returns default when the parameter is absent or blank.

    Raises:
        ValidationError: 400 if the value is not an integer >= 1
    """
    if is_blank(value):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a positive integer")
    if number < 1:
        raise ValidationError(f"{name} must be a positive integer")
    return number
