"""Request field validation: identifiers, account fields and free text."""

import re
from typing import Optional, Tuple
from uuid import UUID

from fastapi import status

from clipnest.utils.api_error import ApiError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
USERNAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]{2,49}$")

MAX_TEXT_LENGTH = 10000
TITLE_MAX_LENGTH = 255
FULL_NAME_MAX_LENGTH = 100


def validate_email(email: str) -> Tuple[bool, str]:
    """
    Check an email address.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or len(email) > 255:
        return False, "Email address is required and must be less than 255 characters"
    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email address format"
    return True, ""


def validate_username(username: str) -> Tuple[bool, str]:
    """
    Check an already lowercased username: 3-50 characters of a-z, 0-9 and
    underscore, starting with a letter.
    """
    if not username:
        return False, "Username is required"
    if not 3 <= len(username) <= 50:
        return False, "Username must be between 3 and 50 characters"
    if not USERNAME_PATTERN.match(username):
        return False, "Username must start with a letter and contain only letters, numbers and underscores"
    return True, ""


def is_valid_object_id(value: Optional[str]) -> bool:
    """True when value parses as a UUID reference."""
    if not value:
        return False
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


def parse_object_id(value: str, kind: str) -> UUID:
    """
    Parse a path identifier, failing with 400 when it is malformed.

    Only the shape is checked; existence is left to the query.

    Args:
        value: Raw identifier from the request
        kind: Entity name used in the error message ("video", "tweet", ...)
    """
    if not is_valid_object_id(value):
        raise ApiError(status.HTTP_400_BAD_REQUEST, f"Invalid {kind} ID")
    return UUID(str(value))


def clean_text(text: Optional[str]) -> str:
    """Drop NUL bytes and trim whitespace."""
    return (text or "").replace("\x00", "").strip()


def check_length(value: str, field: str, max_length: int) -> str:
    """400 "{Field} is too long" instead of letting the column truncate or fail."""
    if len(value) > max_length:
        raise ApiError(status.HTTP_400_BAD_REQUEST, f"{field} is too long")
    return value


def require_text(value: Optional[str], field: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    """
    Reject missing, whitespace-only or over-long text.

    Returns:
        The cleaned text
    """
    cleaned = clean_text(value)
    if not cleaned:
        raise ApiError(status.HTTP_400_BAD_REQUEST, f"{field} is required")
    return check_length(cleaned, field, max_length)
