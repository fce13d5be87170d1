"""
Duration Aggregator
Sums time spent in voice per user for leaderboards and point queries
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from models.leaderboard import LeaderboardEntry
from models.user_session import UserSession
from services.session_store import SessionStore
from utils.clock import utcnow

logger = logging.getLogger("seraglio")


def session_elapsed(session: UserSession, now: datetime) -> timedelta:
    """Time covered by a session; open sessions run until ``now``"""
    end = session.end_time if session.end_time is not None else now
    return max(end - session.start_time, timedelta(0))


def sum_by_user(sessions: Iterable[UserSession], now: datetime) -> Dict[str, timedelta]:
    """Per-user totals, keyed in first-seen order"""
    totals: Dict[str, timedelta] = {}
    for session in sessions:
        totals[session.user_id] = totals.get(session.user_id, timedelta(0)) + session_elapsed(session, now)
    return totals


class DurationAggregator:
    """Read side of the tracker: leaderboard and per-user totals"""

    def __init__(self, store: SessionStore, clock: Callable[[], datetime] = utcnow):
        """
        Initialize the aggregator.

        Args:
            store: Session store to read from
            clock: Returns the current naive UTC time
        """
        self.store = store
        self.clock = clock

    async def leaderboard(self, guild_id: str, channel_id: Optional[str] = None) -> List[LeaderboardEntry]:
        """
        Rank users by total voice time.

        Args:
            guild_id: Guild to rank
            channel_id: Only count time spent in this channel

        Returns:
            Entries sorted by total, largest first; ties keep first-seen order

        Raises:
            StorageError: If the sessions cannot be read
        """
        sessions = await asyncio.to_thread(self.store.find_by_scope, guild_id, channel_id)
        totals = sum_by_user(sessions, self.clock())

        entries = [LeaderboardEntry(user_id=user_id, total=total) for user_id, total in totals.items()]
        entries.sort(key=lambda entry: entry.total, reverse=True)

        logger.debug(f"Leaderboard for guild {guild_id} (channel={channel_id}): {len(entries)} users")
        return entries

    async def user_total(self, user_id: str, guild_id: str, channel_id: Optional[str] = None) -> timedelta:
        """
        Total voice time of one user.

        Raises:
            StorageError: If the sessions cannot be read
        """
        sessions = await asyncio.to_thread(self.store.find_by_scope, guild_id, channel_id, user_id)
        now = self.clock()
        return sum((session_elapsed(session, now) for session in sessions), timedelta(0))
