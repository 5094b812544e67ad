"""ULID generation helper utilities."""

from typing import Any, Optional

import ulid


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ulid.ULID())


def parse_ulid(ulid_str: Any) -> Optional[ulid.ULID]:
    """Parse and validate a ULID string."""
    if not isinstance(ulid_str, str):
        return None
    try:
        return ulid.ULID.from_str(ulid_str)
    except (ValueError, TypeError):
        return None


def is_valid_ulid(ulid_str: Any) -> bool:
    """Check if a value is a valid ULID string."""
    return parse_ulid(ulid_str) is not None
