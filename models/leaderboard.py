"""
Leaderboard Models
Requests coming from the command surface and the replies rendered for them
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass
class LeaderboardEntry:
    """A user's accumulated voice time within a scope"""
    user_id: str
    total: timedelta


@dataclass
class LeaderboardRequest:
    guild_id: str
    channel_id: Optional[str] = None
    ephemeral: bool = False


@dataclass
class UserTotalRequest:
    guild_id: str
    user_id: Optional[str] = None
    channel_id: Optional[str] = None
    ephemeral: bool = False


@dataclass
class CommandReply:
    """Rendered reply handed back to the command surface"""
    title: str
    content: str
    ephemeral: bool = False
    is_error: bool = False
    field_name: Optional[str] = None
