"""
Utility functions and helpers
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union

logger = logging.getLogger(__name__)

def utc_now() -> datetime:
    """Current UTC time, timezone-naive for database storage"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def parse_timestamp(value: Union[str, int, float, None]) -> Optional[datetime]:
    """Parse a stored timestamp handling timezone properly

    Accepts ISO strings (with or without 'Z') and epoch milliseconds.
    Returns None when the value cannot be parsed.
    """
    if value is None:
        return None
    try:
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        else:
            timestamp_str = value
            # Handle ISO format with 'Z' (UTC)
            if timestamp_str.endswith('Z'):
                timestamp_str = timestamp_str.replace('Z', '+00:00')
            parsed = datetime.fromisoformat(timestamp_str)

        # Convert to UTC and make timezone-naive
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)

        return parsed

    except (TypeError, ValueError, OverflowError, OSError) as e:
        logger.warning(f"Failed to parse timestamp '{value}': {e}")
        return None
