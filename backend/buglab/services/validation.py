"""
BugLab Backend — Input Validation Helpers
==========================================

Presence and shape checks shared by the services. Every failure raises
ValidationError (→ 400).
"""

from typing import Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from buglab.exceptions import ValidationError
from buglab.schemas.common import MAX_ID

_email_adapter = TypeAdapter(EmailStr)


def require_text(value: Optional[str], field: str) -> str:
    """Return `value` stripped, or raise if it is missing or blank."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return str(value).strip()


def require_email(value: Optional[str]) -> str:
    """Return the normalized address (domain lowercased)."""
    email = require_text(value, "email")
    try:
        return _email_adapter.validate_python(email)
    except SchemaValidationError as e:
        raise ValidationError("Invalid email format", field="email", details=str(e)) from e


def require_password(value: Optional[str], min_length: int) -> str:
    # Passwords are never stripped: surrounding spaces are part of the secret
    if value is None or value == "":
        raise ValidationError("password is required", field="password")
    if len(value) < min_length:
        raise ValidationError(
            f"Password must be at least {min_length} characters long",
            field="password",
        )
    return value


def require_id(value: Optional[int], field: str) -> int:
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    if not 1 <= value <= MAX_ID:
        raise ValidationError(f"{field} must be between 1 and {MAX_ID}", field=field)
    return value
