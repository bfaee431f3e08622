"""SchoolMap Backend - Keyword vocabulary routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import SuccessResponse
from app.schemas.keyword import KeywordCreate, KeywordResponse
from app.services.keyword_service import keyword_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/keywords", tags=["Keywords"])


@router.get(
    "",
    response_model=SuccessResponse[List[KeywordResponse]],
    summary="List all keywords",
)
async def list_keywords(
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[List[KeywordResponse]]:
    keywords = await keyword_service.list_keywords(db)
    return SuccessResponse(data=[KeywordResponse.model_validate(k) for k in keywords])


@router.post(
    "",
    status_code=201,
    response_model=SuccessResponse[KeywordResponse],
    responses={200: {"description": "Keyword already existed"}},
    summary="Find or create a keyword",
)
async def add_keyword(
    body: KeywordCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[KeywordResponse]:
    keyword, created = await keyword_service.add_keyword(db, body.word)
    if not created:
        response.status_code = 200
    return SuccessResponse(data=KeywordResponse.model_validate(keyword))
