"""Shared validation utilities"""

import re
from typing import Optional

# Same rule the booking form applies: optional country code, optional area code
PHONE_PATTERN = re.compile(r"^(\+\d{1,2}\s?)?(\(?\d{3}\)?)?[\s.-]?\d{3}[\s.-]?\d{4}$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

# Slugs must not look like static files served next to the blog
RESERVED_SLUG_EXTENSIONS = (".xml", ".txt", ".html", ".htm", ".json", ".js", ".css", ".ico", ".png", ".jpg")


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and PHONE_PATTERN.match(phone.strip()) is not None


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a phone number and strip its separators.

    "+1 (555) 123-4567" -> "+15551234567", "555.123.4567" -> "+15551234567".

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    phone = phone.strip()
    if not PHONE_PATTERN.match(phone):
        raise ValueError("Invalid phone number")

    digits = re.sub(r"\D", "", phone)
    if phone.startswith("+"):
        return f"+{digits}"
    if len(digits) == 10:
        return f"+1{digits}"
    return digits


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email


def validate_slug(slug: Optional[str]) -> str:
    """Lowercase and check a blog slug; raises ValueError with a user-facing message"""
    if not slug or not slug.strip():
        raise ValueError("Blog slug is required")

    slug = slug.strip().lower()
    if slug.endswith(RESERVED_SLUG_EXTENSIONS):
        raise ValueError("Blog slug cannot end with a file extension")
    if not SLUG_PATTERN.match(slug):
        raise ValueError("Blog slug may only contain letters, numbers and single hyphens")
    return slug


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (title or "").lower()).strip("-")
    return slug
