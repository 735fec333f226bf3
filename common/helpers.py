"""
Storefront - Shared Helpers
=============================
Pure utility functions with NO database or module dependencies.
"""

import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from common.exceptions import InvalidInputError

_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a record identifier (32 lowercase hex chars)."""
    return uuid.uuid4().hex


def parse_id(value: Optional[str], label: str = "ID") -> str:
    """Validate an identifier from a path or body. Raises InvalidInputError on bad format."""
    candidate = (value or "").strip().lower()
    if not _ID_PATTERN.match(candidate):
        raise InvalidInputError(f"Invalid {label}")
    return candidate


def money(value) -> float:
    """Render a Numeric column value for JSON output."""
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.01")))


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        # SQLite drops tzinfo; every stored timestamp is UTC
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user search text matches literally (escape char: backslash)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
