"""
SchoolMap Backend - School & Department Models
==============================================

What:  ORM models for the `schools` and `school_departments` tables.
How:   Uniqueness that registration relies on is enforced by the database:
       `schools.external_id` and `(school_departments.school_id, name)`.
       Services insert with ON CONFLICT DO NOTHING against these constraints.

External code format:
    "<office code>-<school code>" as issued by NEIS, e.g. "B10-7010123".
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class School(Base):
    """
    A school known to the platform.

    Rows are created on demand (registration) and never updated or deleted
    through the API.
    """

    __tablename__ = "schools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Display name",
    )

    # NULLs never collide, so schools registered without a code may repeat
    external_id: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        unique=True,
        comment="NEIS office code + school code",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<School(id={self.id}, name='{self.name}', external_id='{self.external_id}')>"


class Department(Base):
    """A department (major) offered by a school."""

    __tablename__ = "school_departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    school_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("schools.id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    external_id: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("school_id", "name", name="uq_school_departments_school_name"),
    )

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, school_id={self.school_id}, name='{self.name}')>"
