"""SchoolMap Backend - Keyword Schemas."""

from typing import Annotated, List

from pydantic import Field

from app.schemas.common import APIModel


class KeywordCreate(APIModel):
    word: str = Field(min_length=1, max_length=50)


class KeywordResponse(APIModel):
    id: int
    word: str


class UserKeywordsUpdate(APIModel):
    """
    POST /api/users/{id}/keywords body.

    The list is the user's complete new keyword set; an empty list clears it.
    """

    keyword_ids: List[Annotated[int, Field(gt=0)]] = Field(default_factory=list, max_length=100)
