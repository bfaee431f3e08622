"""
SchoolMap Backend - Keyword Model & User Association
====================================================

What:  `keywords` (unique words) and the `keyword_users` join table.
How:   The join table is a plain Core Table with a composite primary key, so
       a (user, keyword) pair can exist at most once. It is written only by
       KeywordService.set_user_keywords, which replaces a user's whole set.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Keyword(Base):
    __tablename__ = "keywords"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Keyword(id={self.id}, word='{self.word}')>"


keyword_users = Table(
    "keyword_users",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    Column("keyword_id", Integer, ForeignKey("keywords.id"), primary_key=True),
)
