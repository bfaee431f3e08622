"""
SchoolMap Backend - User Service
================================

What:  Registration, lookup, login and partial update of users.
How:   Passwords are bcrypt-hashed in a worker thread (run_in_threadpool) so
       the event loop keeps serving while a hash is computed. The plaintext
       is never stored or logged.
Who:   Called by the /api/users and /api/schools/{id}/users routes.

Login failure policy:
    Unknown handle and wrong password raise the same AuthenticationError,
    so both produce an identical 401 body.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.models.school import Department
from app.models.user import User
from app.schemas.user import UserRegister, UserUpdate
from app.security import check_password, hash_password
from app.services.school_service import school_service

logger = logging.getLogger(__name__)


class UserService:

    async def _require_department(
        self, db: AsyncSession, department_id: int, school_id: Optional[int] = None
    ) -> Department:
        department = await db.get(Department, department_id)
        if department is None:
            raise NotFoundError(resource="department", resource_id=department_id)
        if school_id is not None and department.school_id != school_id:
            raise ValidationError(
                message=f"Department {department_id} does not belong to school {school_id}",
                field="departmentId",
            )
        return department

    async def register_user(self, db: AsyncSession, data: UserRegister) -> int:
        """
        Create a user and return its id.

        Raises:
            NotFoundError:   school or department does not exist
            ValidationError: department belongs to another school
            ConflictError:   idname already taken (unique constraint)
        """
        await school_service.require_school(db, data.school_id)
        if data.department_id is not None:
            await self._require_department(db, data.department_id, data.school_id)

        hashed = await run_in_threadpool(hash_password, data.password)
        user = User(**data.model_dump(exclude={"password"}), password=hashed)
        db.add(user)

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.info("Registration rejected, idname taken: %s", data.idname)
            raise ConflictError(
                message=f"Login ID '{data.idname}' is already taken",
                context={"field": "idname"},
            ) from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to register user %s: %s", data.idname, str(e))
            raise DatabaseError() from e

        logger.info("User registered: id=%d idname=%s", user.id, user.idname)
        return user.id

    async def get_user_by_idname(self, db: AsyncSession, idname: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.idname == idname))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        return await db.get(User, user_id)

    async def require_user(self, db: AsyncSession, user_id: int) -> User:
        user = await self.get_user_by_id(db, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    async def list_users_by_school(self, db: AsyncSession, school_id: int) -> List[User]:
        result = await db.execute(
            select(User).where(User.school_id == school_id).order_by(User.id)
        )
        return list(result.scalars().all())

    async def is_idname_available(self, db: AsyncSession, idname: str) -> bool:
        result = await db.execute(select(User.id).where(User.idname == idname))
        return result.first() is None

    async def authenticate(self, db: AsyncSession, idname: str, password: str) -> User:
        """
        Verify a login handle and password.

        Returns:
            The matching User.

        Raises:
            AuthenticationError: unknown handle or wrong password
        """
        user = await self.get_user_by_idname(db, idname)
        if user is None:
            logger.info("Login failed: unknown idname")
            raise AuthenticationError()

        if not await run_in_threadpool(check_password, password, user.password):
            logger.info("Login failed: wrong password for user %d", user.id)
            raise AuthenticationError()

        logger.info("Login succeeded for user %d", user.id)
        return user

    async def update_user(self, db: AsyncSession, user_id: int, changes: UserUpdate) -> bool:
        """
        Write the fields set in `changes` to one user row.

        Returns:
            True when nothing was set (no statement is issued), otherwise
            whether a row was affected.

        Raises:
            NotFoundError:   new department does not exist
            ValidationError: new department belongs to another school
        """
        values = changes.changed_fields()
        if not values:
            return True

        if "department_id" in values:
            user = await self.get_user_by_id(db, user_id)
            if user is None:
                return False
            await self._require_department(db, values["department_id"], user.school_id)
        if "password" in values:
            values["password"] = await run_in_threadpool(hash_password, values["password"])

        try:
            result = await db.execute(
                update(User).where(User.id == user_id).values(**values)
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to update user %d: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id}) from e

        updated = result.rowcount > 0
        if updated:
            logger.info("User %d updated: %s", user_id, sorted(values))
        return updated


user_service = UserService()
