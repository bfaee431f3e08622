"""
SchoolMap Backend - ORM Models
==============================

Importing this package registers every table with `Base.metadata`, which is
what Alembic autogenerate and the test schema setup read.
"""

from app.models.school import Department, School
from app.models.user import User
from app.models.map import Map, MapComment
from app.models.keyword import Keyword, keyword_users

__all__ = [
    "School",
    "Department",
    "User",
    "Map",
    "MapComment",
    "Keyword",
    "keyword_users",
]
