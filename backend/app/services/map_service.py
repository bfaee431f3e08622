"""
SchoolMap Backend - Map & Comment Service
=========================================

What:  Maps and the comments users leave on them.
Who:   Called by the /api/maps and /api/comments routes.

Comments are deleted by id alone; there is no ownership check.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError
from app.models.map import Map, MapComment
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class MapService:

    async def create_map(self, db: AsyncSession, name: str) -> Map:
        new_map = Map(name=name)
        db.add(new_map)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to create map: %s", str(e))
            raise DatabaseError() from e
        logger.info("Map created: id=%d", new_map.id)
        return new_map

    async def list_maps(self, db: AsyncSession) -> List[Map]:
        result = await db.execute(select(Map).order_by(Map.id))
        return list(result.scalars().all())

    async def get_map(self, db: AsyncSession, map_id: int) -> Optional[Map]:
        return await db.get(Map, map_id)

    async def require_map(self, db: AsyncSession, map_id: int) -> Map:
        found = await self.get_map(db, map_id)
        if found is None:
            raise NotFoundError(resource="map", resource_id=map_id)
        return found

    async def add_comment(
        self, db: AsyncSession, map_id: int, user_id: int, content: Optional[str] = None
    ) -> MapComment:
        """
        Raises:
            NotFoundError: the map or the user does not exist
        """
        await self.require_map(db, map_id)
        await user_service.require_user(db, user_id)

        comment = MapComment(map_id=map_id, user_id=user_id, content=content)
        db.add(comment)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to add comment to map %d: %s", map_id, str(e))
            raise DatabaseError(context={"map_id": map_id}) from e

        logger.info("Comment %d added to map %d by user %d", comment.id, map_id, user_id)
        return comment

    async def list_comments(self, db: AsyncSession, map_id: int) -> List[MapComment]:
        await self.require_map(db, map_id)
        result = await db.execute(
            select(MapComment).where(MapComment.map_id == map_id).order_by(MapComment.id)
        )
        return list(result.scalars().all())

    async def delete_comment(self, db: AsyncSession, comment_id: int) -> None:
        """
        Raises:
            NotFoundError: no comment with this id
        """
        try:
            result = await db.execute(delete(MapComment).where(MapComment.id == comment_id))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to delete comment %d: %s", comment_id, str(e))
            raise DatabaseError(context={"comment_id": comment_id}) from e

        if result.rowcount == 0:
            raise NotFoundError(resource="comment", resource_id=comment_id)
        logger.info("Comment %d deleted", comment_id)


map_service = MapService()
