"""
SchoolMap Backend - Keyword Service
===================================

What:  Keyword vocabulary and per-user keyword sets.
How:   A user's set is replaced, never patched:

           BEGIN
           DELETE FROM keyword_users WHERE user_id = :uid
           INSERT INTO keyword_users (user_id, keyword_id)
                VALUES (:uid, :k1), (:uid, :k2), ...      -- skipped for []
           COMMIT                                         -- ROLLBACK on error

       Both statements run in the session's single transaction, so either
       the whole new set is stored or the previous set stays untouched.
Who:   Called by the /api/keywords and /api/users/{id}/keywords routes.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import upsert_statement
from app.exceptions import DatabaseError, NotFoundError, SchoolMapError
from app.models.keyword import Keyword, keyword_users
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class KeywordService:

    async def list_keywords(self, db: AsyncSession) -> List[Keyword]:
        result = await db.execute(select(Keyword).order_by(Keyword.id))
        return list(result.scalars().all())

    async def get_keyword_by_word(self, db: AsyncSession, word: str) -> Optional[Keyword]:
        result = await db.execute(select(Keyword).where(Keyword.word == word))
        return result.scalar_one_or_none()

    async def add_keyword(self, db: AsyncSession, word: str) -> Tuple[Keyword, bool]:
        """Find-or-create a keyword. Returns (keyword, created)."""
        table = Keyword.__table__
        stmt = (
            upsert_statement(db, table)
            .values(word=word)
            .on_conflict_do_nothing(index_elements=["word"])
            .returning(table.c.id)
        )
        try:
            new_id = (await db.execute(stmt)).scalar_one_or_none()
            await db.commit()
            if new_id is not None:
                logger.info("Keyword created: id=%d", new_id)
                return await db.get(Keyword, new_id), True
            existing = await self.get_keyword_by_word(db, word)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to add keyword: %s", str(e))
            raise DatabaseError() from e
        return existing, False

    async def get_user_keywords(self, db: AsyncSession, user_id: int) -> List[Keyword]:
        await user_service.require_user(db, user_id)
        result = await db.execute(
            select(Keyword)
            .join(keyword_users, keyword_users.c.keyword_id == Keyword.id)
            .where(keyword_users.c.user_id == user_id)
            .order_by(Keyword.id)
        )
        return list(result.scalars().all())

    async def set_user_keywords(
        self, db: AsyncSession, user_id: int, keyword_ids: Sequence[int]
    ) -> List[int]:
        """
        Replace the user's keyword set with `keyword_ids`.

        Duplicate ids are collapsed (first appearance wins); an empty list
        clears the set.

        Returns:
            The distinct ids now associated with the user.

        Raises:
            NotFoundError: unknown user or keyword id (nothing is changed)
            DatabaseError: the delete or insert failed (rolled back)
        """
        await user_service.require_user(db, user_id)

        target = list(dict.fromkeys(keyword_ids))
        if target:
            result = await db.execute(select(Keyword.id).where(Keyword.id.in_(target)))
            known = set(result.scalars().all())
            missing = [k for k in target if k not in known]
            if missing:
                raise NotFoundError(resource="keyword", resource_id=missing[0])

        try:
            await db.execute(delete(keyword_users).where(keyword_users.c.user_id == user_id))
            if target:
                await db.execute(
                    insert(keyword_users).values(
                        [{"user_id": user_id, "keyword_id": k} for k in target]
                    )
                )
            await db.commit()
        except SchoolMapError:
            await db.rollback()
            raise
        except Exception as e:
            await db.rollback()
            logger.error(
                "Keyword update for user %d rolled back: %s", user_id, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not update keywords. Please try again.",
                context={"user_id": user_id},
            ) from e

        logger.info("User %d keywords set: %s", user_id, target)
        return target


keyword_service = KeywordService()
