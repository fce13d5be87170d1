"""
Duration Formatting
Compact human-readable rendering of voice time, e.g. "1d 2h 3m 4s"
"""

from datetime import timedelta
from typing import Union

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR

_UNITS = (
    ("d", SECONDS_PER_DAY),
    ("h", SECONDS_PER_HOUR),
    ("m", SECONDS_PER_MINUTE),
    ("s", 1),
)


def format_duration(duration: Union[timedelta, int, float]) -> str:
    """
    Format a duration as space-separated day/hour/minute/second parts.

    Units with a zero value are left out. Sub-second remainders are truncated
    and negative durations are treated as zero.

    Args:
        duration: A timedelta or a number of seconds

    Returns:
        The formatted string, "0s" when nothing is left to show
    """
    if isinstance(duration, timedelta):
        # Integer arithmetic on the timedelta fields avoids float rounding
        remaining = duration.days * SECONDS_PER_DAY + duration.seconds
    else:
        remaining = int(duration)
    remaining = max(remaining, 0)

    parts = []
    for suffix, size in _UNITS:
        value, remaining = divmod(remaining, size)
        if value:
            parts.append(f"{value}{suffix}")

    return " ".join(parts) if parts else "0s"
