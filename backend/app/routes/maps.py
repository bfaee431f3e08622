"""
SchoolMap Backend - Map & Comment Route Handlers
================================================

What:  Maps and their comment threads.
How:   Comments are listed per map and deleted by their own id through
       DELETE /api/comments/{id}; deletion checks no ownership.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.map import CommentCreate, CommentResponse, MapCreate, MapResponse
from app.services.map_service import map_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Maps"])


@router.get(
    "/maps",
    response_model=SuccessResponse[List[MapResponse]],
    summary="List maps",
)
async def list_maps(
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[List[MapResponse]]:
    maps = await map_service.list_maps(db)
    return SuccessResponse(data=[MapResponse.model_validate(m) for m in maps])


@router.post(
    "/maps",
    status_code=201,
    response_model=SuccessResponse[MapResponse],
    summary="Create a map",
)
async def create_map(
    body: MapCreate,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[MapResponse]:
    new_map = await map_service.create_map(db, body.name)
    return SuccessResponse(data=MapResponse.model_validate(new_map))


@router.get(
    "/maps/{map_id}",
    response_model=SuccessResponse[MapResponse],
    responses={404: {"description": "Unknown map", "model": ErrorResponse}},
    summary="Get a single map",
)
async def get_map(
    map_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[MapResponse]:
    found = await map_service.require_map(db, map_id)
    return SuccessResponse(data=MapResponse.model_validate(found))


@router.get(
    "/maps/{map_id}/comments",
    response_model=SuccessResponse[List[CommentResponse]],
    responses={404: {"description": "Unknown map", "model": ErrorResponse}},
    summary="Comments on a map, oldest first",
)
async def list_comments(
    map_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[List[CommentResponse]]:
    comments = await map_service.list_comments(db, map_id)
    return SuccessResponse(data=[CommentResponse.model_validate(c) for c in comments])


@router.post(
    "/maps/{map_id}/comments",
    status_code=201,
    response_model=SuccessResponse[CommentResponse],
    responses={404: {"description": "Unknown map or user", "model": ErrorResponse}},
    summary="Comment on a map",
)
async def add_comment(
    map_id: int,
    body: CommentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[CommentResponse]:
    comment = await map_service.add_comment(db, map_id, body.user_id, body.content)
    return SuccessResponse(data=CommentResponse.model_validate(comment))


@router.delete(
    "/comments/{comment_id}",
    response_model=SuccessResponse[None],
    responses={404: {"description": "Unknown comment", "model": ErrorResponse}},
    summary="Delete a comment",
)
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[None]:
    await map_service.delete_comment(db, comment_id)
    return SuccessResponse(data=None, message="Comment deleted")
