"""SchoolMap Backend - Map & Comment Schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import APIModel


class MapCreate(APIModel):
    name: str = Field(min_length=1, max_length=100)


class MapResponse(APIModel):
    id: int
    name: str
    created_at: Optional[datetime] = None


class CommentCreate(APIModel):
    user_id: int = Field(gt=0)
    content: Optional[str] = Field(default=None, max_length=2000)


class CommentResponse(APIModel):
    id: int
    user_id: int
    map_id: int
    content: Optional[str] = None
    created_at: Optional[datetime] = None
