# apps/common/validators.py
"""
Input helpers shared by the service layer.

Every helper raises apps.common.exceptions.InvalidInputError on bad input so
callers can let the error propagate to the API layer untouched.
"""

import re

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from .exceptions import InvalidInputError

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6

USERNAME_PATTERN = re.compile(r"^[a-z0-9_]{%d,%d}$" % (USERNAME_MIN_LENGTH, USERNAME_MAX_LENGTH))


def require_fields(data, fields):
    """Raise if any of ``fields`` is missing or blank in ``data``."""
    missing = []
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    if missing:
        raise InvalidInputError(
            f"Missing required fields: {', '.join(missing)}",
            details={"missing": missing},
        )


def parse_id(value, field_name="ID"):
    """Coerce an opaque identifier to a primary key value."""
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid {field_name}")
    try:
        pk = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid {field_name}")
    if pk <= 0:
        raise InvalidInputError(f"Invalid {field_name}")
    return pk


def normalize_email(email):
    """Lowercase and trim; emails are unique regardless of case."""
    if email is None:
        return None
    return email.strip().lower()


def clean_email(email):
    email = normalize_email(email)
    try:
        validate_email(email)
    except DjangoValidationError:
        raise InvalidInputError("Please provide a valid email", details={"field": "email"})
    return email


def clean_username(username):
    username = (username or "").strip().lower()
    if not USERNAME_PATTERN.match(username):
        raise InvalidInputError(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters "
            "of lowercase letters, digits or underscores",
            details={"field": "username"},
        )
    return username


def clean_password(password, field="password"):
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise InvalidInputError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
            details={"field": field},
        )
    return password


def clean_page(page, limit, max_limit=100):
    """Return sane ``(page, limit)`` for list helpers."""
    try:
        page = int(page)
        limit = int(limit)
    except (TypeError, ValueError):
        raise InvalidInputError("Page and limit must be integers")
    if page < 1:
        page = 1
    if limit < 1:
        limit = 1
    return page, min(limit, max_limit)
