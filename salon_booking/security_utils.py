"""
Security Utilities
Input sanitization, random tokens and constant-time comparison
"""

import hashlib
import logging
import re
import secrets
import string
from typing import Optional

import bleach
from bleach.css_sanitizer import CSSSanitizer

logger = logging.getLogger(__name__)

# Tags a blog post body may keep
BLOG_ALLOWED_TAGS = [
    "p",
    "br",
    "strong",
    "em",
    "u",
    "a",
    "ul",
    "ol",
    "li",
    "h1",
    "h2",
    "h3",
    "h4",
    "blockquote",
    "code",
    "pre",
    "img",
    "span",
]
BLOG_ALLOWED_ATTRIBUTES = {
    "a": ["href", "title", "target", "rel"],
    "img": ["src", "alt", "title"],
    "*": ["class", "style"],
}


# ============================================================================
# INPUT SANITIZATION
# ============================================================================


def sanitize_text(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """
    Strip every HTML tag from a plain-text field and trim whitespace.

    Args:
        value: Raw user input
        max_length: Optional cap on the returned length

    Returns:
        Cleaned text, or the input unchanged when it is None
    """
    if value is None:
        return None

    cleaned = bleach.clean(str(value), tags=[], attributes={}, strip=True).strip()
    # bleach escapes bare ampersands; plain-text fields store them as typed
    cleaned = cleaned.replace("&amp;", "&")
    cleaned = re.sub(r"javascript:", "", cleaned, flags=re.IGNORECASE)

    if max_length and len(cleaned) > max_length:
        cleaned = cleaned[:max_length]
    return cleaned


def sanitize_html(html_content: str, allowed_tags: Optional[list] = None) -> str:
    """
    Sanitize HTML content to prevent XSS attacks

    Args:
        html_content: Raw HTML content
        allowed_tags: List of allowed HTML tags (default: blog subset)

    Returns:
        Sanitized HTML
    """
    if allowed_tags is None:
        allowed_tags = BLOG_ALLOWED_TAGS

    css_sanitizer = CSSSanitizer(
        allowed_css_properties=["color", "background-color", "font-weight", "text-align"]
    )

    return bleach.clean(
        html_content,
        tags=allowed_tags,
        attributes=BLOG_ALLOWED_ATTRIBUTES,
        protocols=["http", "https", "mailto"],
        css_sanitizer=css_sanitizer,
        strip=True,
    )


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def random_alphanumeric(length: int) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks

    Returns:
        True if strings are equal, False otherwise (including when either is missing)
    """
    if a is None or b is None:
        return False
    return secrets.compare_digest(a.encode(), b.encode())
