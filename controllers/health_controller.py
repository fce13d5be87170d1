"""
Health Controller
Health, readiness and tracker statistics over HTTP
"""

import logging
from typing import Optional

from fastapi import APIRouter

from services.errors import StorageError
from services.session_store import SessionStore
from services.session_tracker import SessionTracker

logger = logging.getLogger("seraglio")


class HealthController:
    """Controller reporting bot and tracker state"""

    def __init__(self, tracker: SessionTracker, store: SessionStore):
        self.tracker = tracker
        self.store = store
        self.bot = None

    def set_bot(self, bot):
        """Set the reference to the running bot (None while it is down)"""
        self.bot = bot

    def bot_ready(self) -> bool:
        if self.bot is None or self.bot.is_closed():
            return False
        return self.bot.is_ready()

    def open_sessions(self) -> Optional[int]:
        """Open session count, or None if the store can't be read"""
        try:
            return self.store.count_open()
        except StorageError as e:
            logger.error(f"Health check could not count open sessions: {e}")
            return None

    def get_health_info(self) -> dict:
        """Get health check information"""
        open_sessions = self.open_sessions()
        return {
            "status": "healthy" if open_sessions is not None else "degraded",
            "service": "seraglio",
            "bot_ready": self.bot_ready(),
            "tracker": self.tracker.stats,
            "open_sessions": open_sessions
        }

    def create_router(self) -> APIRouter:
        """Build the router exposing this controller"""
        router = APIRouter(tags=["Health"])

        @router.get("/health")
        async def health_check():
            """Health check endpoint"""
            return self.get_health_info()

        @router.get("/ready")
        async def readiness_check():
            """Readiness check endpoint"""
            return {
                "status": "ready" if self.bot_ready() else "starting",
                "bot_ready": self.bot_ready(),
                "accepting_events": self.tracker.accepting
            }

        @router.get("/api/stats")
        async def tracker_stats():
            """Session tracker counters"""
            return {
                "tracker": self.tracker.stats,
                "open_sessions": self.open_sessions()
            }

        return router
