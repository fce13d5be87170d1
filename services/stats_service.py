"""
Stats Service
Answers leaderboard and voice-time requests with rendered replies
"""

import logging

from models.leaderboard import CommandReply, LeaderboardRequest, UserTotalRequest
from services.duration_aggregator import DurationAggregator
from services.errors import StorageError, ValidationError
from utils.duration_format import format_duration

logger = logging.getLogger("seraglio")

LEADERBOARD_TITLE = "Leaderboard"
LEADERBOARD_FIELD = "Time Spent in VC"
USER_TOTAL_TITLE = "Voice Time"
EMPTY_LEADERBOARD = "No voice activity recorded yet."


class StatsService:
    """Service behind the /leaderboard and /time commands"""

    def __init__(self, aggregator: DurationAggregator, max_entries: int = 15):
        """
        Initialize the stats service.

        Args:
            aggregator: Duration aggregator to query
            max_entries: Maximum number of leaderboard rows to render
        """
        self.aggregator = aggregator
        self.max_entries = max_entries

    async def leaderboard(self, request: LeaderboardRequest) -> CommandReply:
        """Render the guild (or channel) leaderboard"""
        try:
            entries = await self.aggregator.leaderboard(request.guild_id, request.channel_id)
        except StorageError as e:
            logger.error(f"Error fetching leaderboard for guild {request.guild_id}: {e}")
            return CommandReply(
                title=LEADERBOARD_TITLE,
                content=f"Error fetching leaderboard: {e}",
                ephemeral=request.ephemeral,
                is_error=True
            )

        lines = [
            f"**{rank}.** <@{entry.user_id}>: {format_duration(entry.total)}"
            for rank, entry in enumerate(entries[:self.max_entries], start=1)
        ]
        return CommandReply(
            title=LEADERBOARD_TITLE,
            content="\n".join(lines) if lines else EMPTY_LEADERBOARD,
            ephemeral=request.ephemeral,
            field_name=LEADERBOARD_FIELD
        )

    async def user_total(self, request: UserTotalRequest) -> CommandReply:
        """Render one user's voice time"""
        try:
            if not request.user_id:
                raise ValidationError("Please specify a user.")
            total = await self.aggregator.user_total(request.user_id, request.guild_id, request.channel_id)
        except ValidationError as e:
            logger.info(f"Rejected /time request in guild {request.guild_id}: {e}")
            return CommandReply(
                title=USER_TOTAL_TITLE,
                content=str(e),
                ephemeral=request.ephemeral,
                is_error=True
            )
        except StorageError as e:
            logger.error(f"Error fetching voice time for user {request.user_id}: {e}")
            return CommandReply(
                title=USER_TOTAL_TITLE,
                content=f"Error fetching voice time: {e}",
                ephemeral=request.ephemeral,
                is_error=True
            )

        content = f"<@{request.user_id}> spent {format_duration(total)} in voice"
        if request.channel_id:
            content += f" in <#{request.channel_id}>"
        return CommandReply(
            title=USER_TOTAL_TITLE,
            content=content,
            ephemeral=request.ephemeral
        )
