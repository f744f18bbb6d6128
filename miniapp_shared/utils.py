"""Shared utilities."""

import re
import uuid
from datetime import datetime, timezone
from urllib.parse import urlparse

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
EMAIL_PATTERN = re.compile(r"^[\w.+-]+@([\w-]+\.)+[\w-]{2,}$")


def generate_run_id() -> str:
    return uuid.uuid4().hex


def generate_response_id() -> str:
    return uuid.uuid4().hex


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_address(value) -> bool:
    return isinstance(value, str) and bool(ADDRESS_PATTERN.match(value))


def is_email(value) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value))


def is_url(value) -> bool:
    """Absolute http(s) URL with a host"""
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_datetime(value) -> bool:
    """ISO 8601 date or datetime; a trailing Z is read as UTC"""
    if not isinstance(value, str) or not value:
        return False
    try:
        datetime.fromisoformat(value[:-1] + "+00:00" if value.endswith("Z") else value)
    except ValueError:
        return False
    return True
