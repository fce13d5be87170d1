"""
Models package for Seraglio
"""

from models.base import Base
from models.user_session import UserSession
from models.events import VoiceEntry, SnapshotEvent, EnteredEvent, LeftEvent
from models.leaderboard import (
    LeaderboardEntry,
    LeaderboardRequest,
    UserTotalRequest,
    CommandReply
)

__all__ = [
    "Base",
    "UserSession",
    "VoiceEntry",
    "SnapshotEvent",
    "EnteredEvent",
    "LeftEvent",
    "LeaderboardEntry",
    "LeaderboardRequest",
    "UserTotalRequest",
    "CommandReply"
]
