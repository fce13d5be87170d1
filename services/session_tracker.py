"""
Session Tracker
Turns presence events into open/close transitions on the session store
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Dict, Union

from models.events import SnapshotEvent, EnteredEvent, LeftEvent
from services.errors import StorageError
from services.session_store import SessionStore
from utils.clock import utcnow

logger = logging.getLogger("seraglio")

PresenceEvent = Union[SnapshotEvent, EnteredEvent, LeftEvent]


class SessionTracker:
    """
    Keeps at most one open session per user.

    Each user is either absent (no open session) or present (one open
    session). Handling for one user is serialized with a per-user lock, so a
    duplicate "entered" racing the first cannot open a second session. Storage
    failures are logged and the event is dropped; the next guild snapshot
    brings state back in line.
    """

    def __init__(self,
                 store: SessionStore,
                 clock: Callable[[], datetime] = utcnow,
                 drain_timeout: float = 10.0):
        """
        Initialize the session tracker.

        Args:
            store: Session store to read and write
            clock: Returns the current naive UTC time
            drain_timeout: Seconds stop() waits for in-flight events
        """
        self.store = store
        self.clock = clock
        self.drain_timeout = drain_timeout
        self._user_locks: Dict[str, asyncio.Lock] = {}
        self._lock_refs: Dict[str, int] = {}
        self._accepting = True
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()

        # Statistics
        self._events_handled = 0
        self._sessions_opened = 0
        self._sessions_closed = 0
        self._events_dropped = 0

    @property
    def accepting(self) -> bool:
        """Whether new events are still processed"""
        return self._accepting

    async def stop(self):
        """
        Stop accepting events and wait for the ones already running.

        Handlers still in flight re-check the flag under their user lock and
        skip any write, so nothing is created once this returns.
        """
        if self._accepting:
            self._accepting = False
            logger.info("Session tracker stopped accepting events")

        try:
            await asyncio.wait_for(self._idle.wait(), timeout=self.drain_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{self._in_flight} presence events still running after {self.drain_timeout}s")

    async def handle_event(self, event: PresenceEvent):
        """Single intake for presence events"""
        if not self._accepting:
            logger.debug(f"Ignoring event after stop: {event}")
            return

        self._in_flight += 1
        self._idle.clear()
        try:
            if isinstance(event, SnapshotEvent):
                await self.handle_snapshot(event)
            elif isinstance(event, EnteredEvent):
                await self.handle_entered(event)
            elif isinstance(event, LeftEvent):
                await self.handle_left(event)
            else:
                self._events_dropped += 1
                logger.warning(f"Dropping unsupported presence event: {type(event).__name__}")
                return
            self._events_handled += 1
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.set()

    async def handle_snapshot(self, event: SnapshotEvent):
        """Open a session for everyone in voice who doesn't already have one"""
        logger.info(f"Reconciling {len(event.entries)} voice states for guild {event.guild_id}")
        for entry in event.entries:
            await self._open_if_absent(entry.user_id, event.guild_id, entry.channel_id)

    async def handle_entered(self, event: EnteredEvent):
        """User joined a voice channel"""
        await self._open_if_absent(event.user_id, event.guild_id, event.channel_id)

    async def handle_left(self, event: LeftEvent):
        """User left voice; closing nothing is fine"""
        async with self._user_lock(event.user_id):
            # Shutdown closes everything itself
            if not self._accepting:
                return
            try:
                closed = await asyncio.to_thread(self.store.close_open_by_user, event.user_id, self.clock())
            except StorageError as e:
                self._events_dropped += 1
                logger.error(f"Error updating user session: {e}")
                return

        if closed:
            self._sessions_closed += closed
            logger.info(f"User {event.user_id} left voice in guild {event.guild_id}")
        else:
            logger.debug(f"No open session to close for user {event.user_id}")

    async def _open_if_absent(self, user_id: str, guild_id: str, channel_id: str):
        async with self._user_lock(user_id):
            try:
                existing = await asyncio.to_thread(self.store.find_open_by_user, user_id)
                if existing is not None:
                    logger.debug(f"User {user_id} already has open session {existing.session_id}")
                    return
                if not self._accepting:
                    logger.debug(f"Not opening session for user {user_id} during shutdown")
                    return
                record = await asyncio.to_thread(
                    self.store.create, user_id, guild_id, channel_id, self.clock()
                )
            except StorageError as e:
                self._events_dropped += 1
                logger.error(f"Error creating user session: {e}")
                return

        self._sessions_opened += 1
        logger.info(f"Opened session {record.session_id} for user {user_id} in channel {channel_id}")

    @asynccontextmanager
    async def _user_lock(self, user_id: str):
        """Per-user lock, dropped once no handler holds or waits on it"""
        lock = self._user_locks.setdefault(user_id, asyncio.Lock())
        self._lock_refs[user_id] = self._lock_refs.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_refs[user_id] -= 1
            if self._lock_refs[user_id] == 0:
                del self._lock_refs[user_id]
                del self._user_locks[user_id]

    @property
    def stats(self) -> dict:
        """Get session tracker statistics"""
        return {
            "accepting": self._accepting,
            "events_handled": self._events_handled,
            "sessions_opened": self._sessions_opened,
            "sessions_closed": self._sessions_closed,
            "events_dropped": self._events_dropped,
            "in_flight": self._in_flight
        }
