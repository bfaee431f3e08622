"""
SchoolMap Backend - User Model
==============================

What:  ORM model for the `users` table.

Security:
    `password` holds a bcrypt hash, never plaintext. The API schemas have no
    password field at all, so a User row cannot be serialized with it.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """
    A registered student.

    Lifecycle:
        1. Created at registration (POST /api/users/register)
        2. Changed through the typed partial update (PUT /api/users/{id})
        3. Never deleted through the API
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Login handle
    idname: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Login handle",
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False, comment="Display name")

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash",
    )

    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    grade: Mapped[int | None] = mapped_column(Integer, nullable=True)
    class_num: Mapped[int | None] = mapped_column(Integer, nullable=True)

    profile_photo: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Path or URL of the profile picture",
    )

    school_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("schools.id"),
        nullable=False,
        index=True,
    )

    department_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("school_departments.id"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        # password intentionally left out
        return f"<User(id={self.id}, idname='{self.idname}', school_id={self.school_id})>"
