"""
Input validation utilities for customer data, uploads and gallery URLs.
"""

import re
from typing import Optional

from utils.constants import ALLOWED_UPLOAD_TYPES

_IMAGE_URL_PATTERN = re.compile(
    r"^https?://.+\.(jpg|jpeg|png|gif|webp)(\?.*)?$", re.IGNORECASE
)


def validate_email(email: str) -> bool:
    """
    Validate email address format.

    Args:
        email: Email address string

    Returns:
        True if valid format, False otherwise
    """
    if not email or not isinstance(email, str):
        return False

    # Basic email regex (RFC 5322 simplified)
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_phone(phone: str) -> bool:
    """
    Validate phone number format.
    Accepts local (09123456789) and international (+639123456789) forms.

    Args:
        phone: Phone number string

    Returns:
        True if valid format, False otherwise
    """
    if not phone or not isinstance(phone, str):
        return False

    cleaned = re.sub(r'[\s\-\(\)]', '', phone)

    pattern = r'^\+?\d{7,15}$'
    return bool(re.match(pattern, cleaned))


def validate_image_url(url: str) -> bool:
    """Check a gallery URL points at a jpg/jpeg/png/gif/webp over http(s)."""
    if not url or not isinstance(url, str):
        return False
    return bool(_IMAGE_URL_PATTERN.match(url.strip()))


def validate_upload(
    kind: str, content_type: str, size: int, max_bytes: int
) -> Optional[str]:
    """
    Check an attachment before it is sent to storage.

    Returns:
        None when acceptable, otherwise a user-facing error message
    """
    allowed = ALLOWED_UPLOAD_TYPES.get(kind)
    if allowed is None:
        return f"Unknown attachment kind: {kind}"
    if content_type not in allowed:
        return f"Please upload a valid {kind} file."
    if size > max_bytes:
        return f"Please upload a file smaller than {max_bytes // (1024 * 1024)}MB."
    return None


def sanitize_text(text: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize user input text.

    Args:
        text: Input text
        max_length: Optional maximum length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Remove control characters except newlines and tabs
    sanitized = re.sub(r'[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]', '', str(text))

    sanitized = sanitized.strip()

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
