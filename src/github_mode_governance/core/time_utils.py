from datetime import datetime, timezone
from typing import Optional


def utc_timestamp_ms(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-01-02T03:04:05.678Z``."""
    value = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


__all__ = ["utc_timestamp_ms"]
