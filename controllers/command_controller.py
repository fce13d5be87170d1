"""
Command Controller
Handles the /leaderboard and /time application commands
"""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from models.leaderboard import CommandReply, LeaderboardRequest, UserTotalRequest
from services.stats_service import StatsService

logger = logging.getLogger("seraglio")


def reply_to_embed(reply: CommandReply) -> discord.Embed:
    """Build the embed shown for a successful reply"""
    embed = discord.Embed(title=reply.title)
    if reply.field_name:
        embed.add_field(name=reply.field_name, value=reply.content, inline=False)
    else:
        embed.description = reply.content
    return embed


class CommandController:
    """Controller for the voice-time slash commands"""

    def __init__(self, bot: commands.Bot, stats_service: StatsService):
        """
        Initialize the command controller.

        Args:
            bot: Discord bot instance
            stats_service: Service answering leaderboard and voice-time requests
        """
        self.bot = bot
        self.stats_service = stats_service

        # Register commands
        self._register_commands()

    def _register_commands(self):
        """Register all application commands on the bot's command tree"""
        @self.bot.tree.command(name="leaderboard", description="VC activity leaderboard")
        @app_commands.describe(
            channel="Name of the channel",
            ephemeral="The message is only visible to you"
        )
        @app_commands.guild_only()
        async def leaderboard(interaction: discord.Interaction,
                              channel: Optional[discord.VoiceChannel] = None,
                              ephemeral: bool = False):
            await self.leaderboard(interaction, channel, ephemeral)

        @self.bot.tree.command(name="time", description="Time a user has spent in VC")
        @app_commands.describe(
            user="User to look up",
            channel="Only count time in this channel",
            ephemeral="The message is only visible to you"
        )
        @app_commands.guild_only()
        async def voice_time(interaction: discord.Interaction,
                             user: Optional[discord.Member] = None,
                             channel: Optional[discord.VoiceChannel] = None,
                             ephemeral: bool = False):
            await self.voice_time(interaction, user, channel, ephemeral)

        @self.bot.tree.error
        async def on_app_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError):
            await self.on_command_error(interaction, error)

    async def leaderboard(self, interaction: discord.Interaction, channel=None, ephemeral: bool = False):
        """Show who spent the most time in voice"""
        request = LeaderboardRequest(
            guild_id=str(interaction.guild_id),
            channel_id=str(channel.id) if channel else None,
            ephemeral=ephemeral
        )
        reply = await self.stats_service.leaderboard(request)
        await self.send_reply(interaction, reply)
        logger.info(f"User {interaction.user} ({interaction.user.id}): /leaderboard channel={request.channel_id}")

    async def voice_time(self, interaction: discord.Interaction, user=None, channel=None, ephemeral: bool = False):
        """Show how long one user spent in voice"""
        request = UserTotalRequest(
            guild_id=str(interaction.guild_id),
            user_id=str(user.id) if user else None,
            channel_id=str(channel.id) if channel else None,
            ephemeral=ephemeral
        )
        reply = await self.stats_service.user_total(request)
        await self.send_reply(interaction, reply)
        logger.info(f"User {interaction.user} ({interaction.user.id}): /time user={request.user_id}")

    async def send_reply(self, interaction: discord.Interaction, reply: CommandReply):
        """Respond to the interaction; errors go out as plain content"""
        if reply.is_error:
            await interaction.response.send_message(reply.content, ephemeral=reply.ephemeral)
        else:
            await interaction.response.send_message(embed=reply_to_embed(reply), ephemeral=reply.ephemeral)

    async def on_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Handle command errors"""
        logger.error(f"Command error: {error}")
        if interaction.response.is_done():
            await interaction.followup.send(f"An error occurred: {error}", ephemeral=True)
        else:
            await interaction.response.send_message(f"An error occurred: {error}", ephemeral=True)
