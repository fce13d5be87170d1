"""
Clock helpers
All timestamps are stored as naive UTC so SQLite round-trips them unchanged
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
