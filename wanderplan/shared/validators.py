"""Shared validation utilities"""

import re
import uuid
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def require_uuid(value: str) -> str:
    """Field validator variant of validate_uuid"""
    if not validate_uuid(value):
        raise ValueError("Invalid UUID format")
    return value


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate an international phone number loosely.

    Digits, spaces, dashes, dots, parentheses and a leading + are accepted,
    up to 20 characters.
    """
    if not phone:
        return phone

    phone = phone.strip()
    if len(phone) > 20:
        raise ValueError("Phone number must be at most 20 characters")
    if not re.match(r"^\+?[0-9\s().-]+$", phone):
        raise ValueError("Invalid phone number format")
    return phone


def validate_hex_color(color: Optional[str]) -> Optional[str]:
    if color is None:
        return color
    if not HEX_COLOR_PATTERN.match(color):
        raise ValueError("Color must be a valid hex color (e.g., #FF5733)")
    return color


def validate_slug(slug: str) -> str:
    """
    Validate landing page slug format.

    Raises:
        ValueError: If slug is too short/long or has characters outside [a-z0-9-]
    """
    if len(slug) < 3:
        raise ValueError("Slug must be at least 3 characters")
    if len(slug) > 100:
        raise ValueError("Slug must be at most 100 characters")
    if not SLUG_PATTERN.match(slug):
        raise ValueError("Slug can only contain lowercase letters, numbers, and hyphens")
    return slug


def validate_currency(currency: str) -> str:
    currency = currency.upper()
    if not CURRENCY_PATTERN.match(currency):
        raise ValueError("Currency must be a 3-letter ISO code")
    return currency


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize aware datetimes to naive UTC; naive input is assumed UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_csv(value: Optional[str]) -> list[str]:
    """Split a comma separated query parameter, dropping blanks"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


# Datetime accepted from clients in any offset, stored as naive UTC
UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]
