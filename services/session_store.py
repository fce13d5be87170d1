"""
Session Store
Persistence of voice sessions on top of SQLAlchemy

Every operation opens its own ORM session, so the store can be called from
several worker threads at once. Storage failures surface as StorageError.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from models.user_session import UserSession
from services.errors import StorageError

logger = logging.getLogger("seraglio")


class SessionStore:
    """Keyed record store for UserSession rows"""

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize the session store.

        Args:
            session_factory: SQLAlchemy sessionmaker bound to the database
        """
        self._session_factory = session_factory

    def create(self, user_id: str, guild_id: str, channel_id: str, start_time: datetime) -> UserSession:
        """Persist a new open session"""
        session = self._session_factory()
        try:
            record = UserSession(
                session_id=uuid.uuid4().hex,
                user_id=user_id,
                guild_id=guild_id,
                channel_id=channel_id,
                start_time=start_time,
                end_time=None
            )
            session.add(record)
            session.commit()
            logger.debug(f"Stored session {record.session_id} for user {user_id} in channel {channel_id}")
            return record
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to create session for user {user_id}: {e}") from e
        finally:
            session.close()

    def find_open_by_user(self, user_id: str) -> Optional[UserSession]:
        """Get the open session for a user, if any"""
        session = self._session_factory()
        try:
            return (
                session.query(UserSession)
                .filter(UserSession.user_id == user_id, UserSession.end_time.is_(None))
                .order_by(UserSession.start_time)
                .first()
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to look up open session for user {user_id}: {e}") from e
        finally:
            session.close()

    def find_by_scope(self,
                      guild_id: str,
                      channel_id: Optional[str] = None,
                      user_id: Optional[str] = None) -> List[UserSession]:
        """
        Get every session in a guild, optionally narrowed to a channel and/or a user.

        Args:
            guild_id: Guild to search
            channel_id: Only sessions in this channel
            user_id: Only sessions of this user

        Returns:
            Sessions ordered by start time
        """
        session = self._session_factory()
        try:
            query = session.query(UserSession).filter(UserSession.guild_id == guild_id)
            if channel_id is not None:
                query = query.filter(UserSession.channel_id == channel_id)
            if user_id is not None:
                query = query.filter(UserSession.user_id == user_id)
            return query.order_by(UserSession.start_time, UserSession.session_id).all()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to fetch sessions for guild {guild_id}: {e}") from e
        finally:
            session.close()

    def close_open_by_user(self, user_id: str, end_time: datetime) -> int:
        """
        Close every open session of a user.

        Returns:
            Number of sessions closed (normally 0 or 1)
        """
        closed = self._close_open(end_time, UserSession.user_id == user_id)
        if closed > 1:
            logger.warning(f"Closed {closed} open sessions for user {user_id}, expected at most one")
        return closed

    def close_all_open(self, end_time: datetime) -> int:
        """
        Close every open session system-wide.

        Returns:
            Number of sessions closed
        """
        return self._close_open(end_time)

    def count_open(self) -> int:
        """Number of sessions currently open"""
        session = self._session_factory()
        try:
            return (
                session.query(func.count(UserSession.session_id))
                .filter(UserSession.end_time.is_(None))
                .scalar()
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to count open sessions: {e}") from e
        finally:
            session.close()

    def _close_open(self, end_time: datetime, *criteria) -> int:
        session = self._session_factory()
        try:
            # end_time never precedes start_time, even if the clock stepped back
            clamped_end = case(
                (UserSession.start_time > end_time, UserSession.start_time),
                else_=end_time
            )
            closed = (
                session.query(UserSession)
                .filter(UserSession.end_time.is_(None), *criteria)
                .update({UserSession.end_time: clamped_end}, synchronize_session=False)
            )
            session.commit()
            return closed
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to close open sessions: {e}") from e
        finally:
            session.close()
