"""
User Session Model
One row per continuous stay of a user in a voice channel
"""

from sqlalchemy import Column, String, DateTime, Index

from models.base import Base


class UserSession(Base):
    """A user's stay in a voice channel. ``end_time`` is NULL while the user is still there."""
    __tablename__ = "user_sessions"

    session_id = Column(String(32), primary_key=True)
    user_id = Column(String(32), nullable=False, index=True)
    guild_id = Column(String(32), nullable=False, index=True)
    channel_id = Column(String(32), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_user_sessions_open", "user_id", "end_time"),
    )

    def is_open(self) -> bool:
        """Check if the user is still in the channel"""
        return self.end_time is None

    def __repr__(self):
        return (
            f"<UserSession(session_id={self.session_id}, user={self.user_id}, "
            f"guild={self.guild_id}, channel={self.channel_id}, "
            f"start={self.start_time}, end={self.end_time})>"
        )
