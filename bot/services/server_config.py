"""
Per-server configuration for the Connections leaderboard.

Acts as the community registry the monthly rotation enumerates, and holds
each server's announcement channel.
"""

import logging
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from bot.services.base import BaseService
from bot.database.models import ServerConfig
from bot.utils.leaderboard_exceptions import StoreError

logger = logging.getLogger(__name__)

class ServerConfigService(BaseService):
    """Manages registered servers and their announcement channels."""

    async def register_server(self, server_id: int, channel_id: Optional[int] = None) -> bool:
        """
        Register a server if it is not known yet.

        Args:
            server_id: Discord guild ID
            channel_id: Optional initial announcement channel

        Returns:
            True when a new registration was created
        """
        try:
            async with self.get_session() as session:
                existing = await session.scalar(
                    select(ServerConfig.id).where(ServerConfig.server_id == server_id)
                )
                if existing is not None:
                    return False
                session.add(ServerConfig(server_id=server_id, announcement_channel_id=channel_id))
        except IntegrityError:
            # Registered concurrently by another handler
            return False
        except SQLAlchemyError as e:
            logger.error(f"Failed to register server {server_id}: {e}")
            raise StoreError("server registration", str(e))

        logger.info(f"Registered server {server_id}")
        return True

    async def get_all_server_ids(self) -> List[int]:
        """All registered server IDs."""
        try:
            async with self.get_session() as session:
                result = await session.execute(select(ServerConfig.server_id).order_by(ServerConfig.id))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list servers: {e}")
            raise StoreError("server listing", str(e))

    async def get_announcement_channel(self, server_id: int) -> Optional[int]:
        try:
            async with self.get_session() as session:
                return await session.scalar(
                    select(ServerConfig.announcement_channel_id).where(ServerConfig.server_id == server_id)
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to read announcement channel for server {server_id}: {e}")
            raise StoreError("announcement channel lookup", str(e))

    async def set_announcement_channel(self, server_id: int, channel_id: int):
        """Set the announcement channel, registering the server if needed."""
        try:
            async with self.get_session() as session:
                config = await session.scalar(
                    select(ServerConfig).where(ServerConfig.server_id == server_id)
                )
                if config:
                    config.announcement_channel_id = channel_id
                else:
                    session.add(ServerConfig(server_id=server_id, announcement_channel_id=channel_id))
        except SQLAlchemyError as e:
            logger.error(f"Failed to set announcement channel for server {server_id}: {e}")
            raise StoreError("announcement channel update", str(e))

        logger.info(f"Announcement channel for server {server_id} set to {channel_id}")
