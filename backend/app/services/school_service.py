"""
SchoolMap Backend - School & Department Services
================================================

What:  Persistence operations for schools and their departments.
How:   Registration is an upsert against the database's unique constraints:

           INSERT INTO schools (name, external_id) VALUES (:name, :code)
           ON CONFLICT (external_id) DO NOTHING
           RETURNING id

       A returned id means the row was created; no id means it already
       existed and is read back by its key. Two concurrent registrations of
       the same code therefore end with one row and both callers see it.
Who:   Called by the /api/schools and /api/departments routes.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import upsert_statement
from app.exceptions import DatabaseError, NotFoundError
from app.models.school import Department, School

logger = logging.getLogger(__name__)


class SchoolService:
    """Local school registry."""

    async def add_school(
        self, db: AsyncSession, name: str, external_id: Optional[str] = None
    ) -> Tuple[School, bool]:
        """
        Insert a school unless one with the same external code exists.

        Returns:
            (school, created). Without an external code the insert always
            creates a new row.
        """
        table = School.__table__
        stmt = (
            upsert_statement(db, table)
            .values(name=name, external_id=external_id)
            .on_conflict_do_nothing(index_elements=["external_id"])
            .returning(table.c.id)
        )
        try:
            new_id = (await db.execute(stmt)).scalar_one_or_none()
            await db.commit()

            if new_id is not None:
                logger.info("School registered: id=%d external_id=%s", new_id, external_id)
                return await db.get(School, new_id), True

            existing = await self.get_school_by_external_id(db, external_id)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to register school %s: %s", external_id, str(e))
            raise DatabaseError(context={"external_id": external_id}) from e

        if existing is None:
            # Conflict reported but row gone: deleted between the two statements
            raise DatabaseError(
                message="Could not register the school. Please try again.",
                context={"external_id": external_id},
            )
        return existing, False

    async def register_school(
        self, db: AsyncSession, name: str, external_id: str
    ) -> Tuple[School, bool]:
        """
        Idempotent registration keyed on the NEIS code.

        Repeat calls with the same code return the first row unchanged, even
        when the name differs.
        """
        return await self.add_school(db, name=name, external_id=external_id)

    async def get_school_by_external_id(
        self, db: AsyncSession, external_id: str
    ) -> Optional[School]:
        result = await db.execute(select(School).where(School.external_id == external_id))
        return result.scalar_one_or_none()

    async def get_school_by_id(self, db: AsyncSession, school_id: int) -> Optional[School]:
        return await db.get(School, school_id)

    async def find_schools_by_name(self, db: AsyncSession, fragment: str) -> List[School]:
        """Substring match on the school name, ordered by id."""
        # contains() binds the fragment; LIKE wildcards in it are escaped
        result = await db.execute(
            select(School)
            .where(School.name.contains(fragment, autoescape=True))
            .order_by(School.id)
        )
        return list(result.scalars().all())

    async def require_school(self, db: AsyncSession, school_id: int) -> School:
        school = await self.get_school_by_id(db, school_id)
        if school is None:
            raise NotFoundError(resource="school", resource_id=school_id)
        return school


class DepartmentService:
    """Departments (majors) of local schools."""

    async def add_department(
        self,
        db: AsyncSession,
        school_id: int,
        name: str,
        external_id: Optional[str] = None,
    ) -> Tuple[Department, bool]:
        """
        Insert a department unless the school already has one with this name.

        Raises:
            NotFoundError: the school does not exist
        """
        await school_service.require_school(db, school_id)

        table = Department.__table__
        stmt = (
            upsert_statement(db, table)
            .values(school_id=school_id, name=name, external_id=external_id)
            .on_conflict_do_nothing(index_elements=["school_id", "name"])
            .returning(table.c.id)
        )
        try:
            new_id = (await db.execute(stmt)).scalar_one_or_none()
            await db.commit()

            if new_id is not None:
                logger.info("Department registered: id=%d school_id=%d", new_id, school_id)
                return await db.get(Department, new_id), True

            result = await db.execute(
                select(Department).where(
                    Department.school_id == school_id,
                    Department.name == name,
                )
            )
            existing = result.scalar_one()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to register department for school %d: %s", school_id, str(e))
            raise DatabaseError(context={"school_id": school_id}) from e

        return existing, False

    async def add_departments_bulk(
        self, db: AsyncSession, school_id: int, names: List[str]
    ) -> List[Department]:
        """
        Insert several departments in one multi-row statement.

        Names the school already has are skipped. Returns every department
        of the school afterwards.
        """
        await school_service.require_school(db, school_id)

        distinct_names = list(dict.fromkeys(names))
        if distinct_names:
            stmt = (
                upsert_statement(db, Department.__table__)
                .values([{"school_id": school_id, "name": n} for n in distinct_names])
                .on_conflict_do_nothing(index_elements=["school_id", "name"])
            )
            try:
                await db.execute(stmt)
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error("Bulk department insert failed for school %d: %s", school_id, str(e))
                raise DatabaseError(context={"school_id": school_id}) from e

            logger.info(
                "Bulk department insert for school %d: %d names", school_id, len(distinct_names)
            )

        return await self.list_departments(db, school_id)

    async def get_department_by_id(
        self, db: AsyncSession, department_id: int
    ) -> Optional[Department]:
        return await db.get(Department, department_id)

    async def list_departments(self, db: AsyncSession, school_id: int) -> List[Department]:
        result = await db.execute(
            select(Department)
            .where(Department.school_id == school_id)
            .order_by(Department.id)
        )
        return list(result.scalars().all())


# ── Singleton Instances ───────────────────────────────────────────────────
school_service = SchoolService()
department_service = DepartmentService()
