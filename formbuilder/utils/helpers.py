from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode
import re

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

def validate_email(email: str) -> bool:
    """Validate email format"""
    return bool(EMAIL_PATTERN.fullmatch(email))

def normalize_email(email: str) -> str:
    """Strip surrounding whitespace and lower-case an address"""
    return email.strip().lower()

def get_utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)

def format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime to ISO format with timezone"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        # SQLite hands back naive datetimes; they are stored as UTC
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()

def build_link(base_url: str, path: str, **params) -> str:
    """
    Build an absolute link below the public base URL

    Args:
        base_url: Public base URL of the client application
        path: Path below the base URL
        params: Query string parameters

    Returns:
        The absolute URL
    """
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return url
