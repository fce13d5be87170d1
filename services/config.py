"""
Bot Configuration
Runtime settings read from the environment (optionally via a .env file)
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_DATABASE_URL = "sqlite:///seraglio.db"


@dataclass
class BotConfig:
    """Configuration for the Seraglio bot"""
    discord_token: Optional[str] = None
    application_id: Optional[int] = None
    database_url: str = DEFAULT_DATABASE_URL
    port: int = 8004  # Health check server
    log_level: str = "INFO"
    leaderboard_size: int = 15  # Max rows rendered in /leaderboard

    @classmethod
    def from_env(cls) -> 'BotConfig':
        """Build configuration from environment variables"""
        app_id = os.getenv("APP_ID")
        return cls(
            discord_token=os.getenv("DISCORD_BOT_TOKEN") or os.getenv("DISCORD_TOKEN"),
            application_id=int(app_id) if app_id else None,
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            port=int(os.getenv("PORT", "8004")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            leaderboard_size=int(os.getenv("LEADERBOARD_SIZE", "15"))
        )
