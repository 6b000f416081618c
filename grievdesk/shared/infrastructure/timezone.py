"""
Timezone Normalization
======================

The SLA engine compares clock times of day directly, so every timestamp
must be expressed in one reference zone before it reaches the engine.
These helpers perform that conversion.

Aware timestamps are converted to the reference zone and stripped of tzinfo.
Naive timestamps are assumed to already be in the reference zone.
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from grievdesk.config import settings
from grievdesk.core import ConfigurationException


@lru_cache(maxsize=32)
def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA zone name, failing loudly on unknown zones."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationException(
            f"Unknown timezone '{name}'",
            {"timezone": name, "error": str(e)}
        ) from e


def normalize_timestamp(
    value: Optional[datetime],
    zone_name: Optional[str] = None
) -> Optional[datetime]:
    """
    Convert a timestamp to naive reference-zone time.

    Args:
        value: Timestamp to normalize (None passes through)
        zone_name: IANA zone name, defaults to settings.reference_timezone

    Returns:
        Naive datetime in the reference zone, or None
    """
    if value is None:
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    zone = get_zone(zone_name or settings.reference_timezone)
    return value.astimezone(zone).replace(tzinfo=None)


def current_reference_time(zone_name: Optional[str] = None) -> datetime:
    """Current wall-clock time in the reference zone, naive."""
    return normalize_timestamp(datetime.now(timezone.utc), zone_name)
