"""
Voice Controller
Translates Discord voice-state and guild events into presence events
"""

import logging
from typing import Optional, Union

import discord
from discord.ext import commands

from models.events import SnapshotEvent, EnteredEvent, LeftEvent, VoiceEntry
from services.session_tracker import SessionTracker

logger = logging.getLogger("seraglio")


def voice_state_to_event(member: discord.Member,
                         before: discord.VoiceState,
                         after: discord.VoiceState) -> Optional[Union[EnteredEvent, LeftEvent]]:
    """
    Map a voice state update to a presence event.

    Returns None for updates that don't change the channel (mute, deafen,
    streaming) and for bot accounts.
    """
    if member.bot:
        return None

    user_id = str(member.id)
    guild_id = str(member.guild.id)

    if after.channel is None:
        if before.channel is None:
            return None
        return LeftEvent(user_id=user_id, guild_id=guild_id)

    if before.channel is not None and before.channel.id == after.channel.id:
        return None

    return EnteredEvent(user_id=user_id, guild_id=guild_id, channel_id=str(after.channel.id))


def guild_snapshot(guild: discord.Guild) -> SnapshotEvent:
    """Everyone currently connected to a voice or stage channel in the guild"""
    entries = []
    for channel in [*guild.voice_channels, *guild.stage_channels]:
        for member_id, state in channel.voice_states.items():
            if state.channel is None:
                continue
            member = guild.get_member(member_id)
            if member is not None and member.bot:
                continue
            entries.append(VoiceEntry(user_id=str(member_id), channel_id=str(state.channel.id)))
    return SnapshotEvent(guild_id=str(guild.id), entries=entries)


class VoiceController:
    """Controller for Discord presence events"""

    def __init__(self, bot: commands.Bot, tracker: SessionTracker):
        """
        Initialize the voice controller.

        Args:
            bot: Discord bot instance
            tracker: Session tracker receiving presence events
        """
        self.bot = bot
        self.tracker = tracker

        # Register event handlers
        bot.add_listener(self.on_voice_state_update)
        bot.add_listener(self.on_guild_available)
        bot.add_listener(self.on_guild_join)

    async def on_voice_state_update(self,
                                    member: discord.Member,
                                    before: discord.VoiceState,
                                    after: discord.VoiceState):
        """Handle a member joining, moving or leaving voice"""
        event = voice_state_to_event(member, before, after)
        if event is None:
            return
        await self.tracker.handle_event(event)

    async def on_guild_available(self, guild: discord.Guild):
        """Reconcile sessions with who is in voice when a guild comes online"""
        await self.tracker.handle_event(guild_snapshot(guild))

    async def on_guild_join(self, guild: discord.Guild):
        """Start tracking a guild the bot was just added to"""
        logger.info(f"Joined guild {guild.name} ({guild.id})")
        await self.tracker.handle_event(guild_snapshot(guild))
