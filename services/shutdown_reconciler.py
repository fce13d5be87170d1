"""
Shutdown Reconciler
Closes every open session when the process terminates so no time is lost
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable

from services.errors import StorageError
from services.session_store import SessionStore
from services.session_tracker import SessionTracker
from utils.clock import utcnow

logger = logging.getLogger("seraglio")


class ShutdownReconciler:
    """Best-effort, one-shot finalization of open sessions"""

    def __init__(self,
                 store: SessionStore,
                 tracker: SessionTracker,
                 clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.tracker = tracker
        self.clock = clock
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    async def reconcile(self) -> int:
        """
        Stop event intake, wait for in-flight events, then close all open
        sessions at the current time.

        Only the first call touches the store. A storage failure is logged and
        does not block shutdown.

        Returns:
            Number of sessions closed
        """
        await self.tracker.stop()
        if self._done:
            return 0
        self._done = True

        try:
            closed = await asyncio.to_thread(self.store.close_all_open, self.clock())
        except StorageError as e:
            logger.error(f"Error updating user sessions: {e}")
            return 0

        logger.info(f"Closed {closed} open sessions on shutdown")
        return closed
