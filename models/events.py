"""
Presence Events
Typed values delivered by the presence source to the session tracker
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class VoiceEntry:
    """A user found in a voice channel when a guild snapshot was taken"""
    user_id: str
    channel_id: str


@dataclass(frozen=True)
class SnapshotEvent:
    """Everyone currently in voice in a guild, sent when the guild becomes available"""
    guild_id: str
    entries: List[VoiceEntry] = field(default_factory=list)


@dataclass(frozen=True)
class EnteredEvent:
    """A user joined (or moved into) a voice channel"""
    user_id: str
    guild_id: str
    channel_id: str


@dataclass(frozen=True)
class LeftEvent:
    """A user disconnected from voice"""
    user_id: str
    guild_id: str
