"""Input checks shared by the service layer. Each raises ValidationError."""

import math

from email_validator import EmailNotValidError, validate_email

from loadcal.errors import ValidationError


def require_email(value: str | None, field: str = "email") -> str:
    """Stripped address, if it is a syntactically valid email."""
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"{field} {value!r} is not a valid email: {e}") from None
    return value


def require_amount(value: float | None, field: str) -> float:
    """A finite, non-negative number (capacities and weights)."""
    if value is None or not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number, got {value}")
    if value < 0:
        raise ValidationError(f"{field} must be >= 0, got {value}")
    return float(value)
