"""
SchoolMap Backend - User Route Handlers
=======================================

What:  Registration, login, profile read/update and per-user keyword sets.
How:   Every user in a response is built through UserResponse, which has no
       password field.
Who:   Called by the signup, login and profile pages.

Login:
    POST /api/users/login {"idname": "minji", "password": "..."}
        → 200 {"success": true, "data": {"id": 3, "idname": "minji", ...}}
    Unknown idname and wrong password both answer the same 401 body.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import NotFoundError
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.keyword import KeywordResponse, UserKeywordsUpdate
from app.schemas.user import (
    IdnameAvailability,
    RegisterResult,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from app.services.keyword_service import keyword_service
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "/idname/{idname}",
    response_model=SuccessResponse[IdnameAvailability],
    summary="Check whether a login ID is still free",
)
async def check_idname(
    idname: str,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[IdnameAvailability]:
    available = await user_service.is_idname_available(db, idname)
    return SuccessResponse(data=IdnameAvailability(idname=idname, available=available))


@router.post(
    "/register",
    status_code=201,
    response_model=SuccessResponse[RegisterResult],
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        404: {"description": "Unknown school or department", "model": ErrorResponse},
        409: {"description": "Login ID already taken", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    body: UserRegister,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[RegisterResult]:
    user_id = await user_service.register_user(db, body)
    return SuccessResponse(data=RegisterResult(user_id=user_id), message="Registration complete")


@router.post(
    "/login",
    response_model=SuccessResponse[UserResponse],
    responses={401: {"description": "Invalid login ID or password", "model": ErrorResponse}},
    summary="Log in with login ID and password",
)
async def login(
    body: UserLogin,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[UserResponse]:
    user = await user_service.authenticate(db, body.idname, body.password)
    return SuccessResponse(data=UserResponse.model_validate(user), message="Login successful")


@router.get(
    "/{user_id}",
    response_model=SuccessResponse[UserResponse],
    responses={404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Get a user profile",
)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[UserResponse]:
    user = await user_service.require_user(db, user_id)
    return SuccessResponse(data=UserResponse.model_validate(user))


@router.put(
    "/{user_id}",
    response_model=SuccessResponse[UserResponse],
    responses={
        400: {"description": "Unknown or invalid field", "model": ErrorResponse},
        404: {"description": "Unknown user", "model": ErrorResponse},
    },
    summary="Partially update a user profile",
)
async def update_user(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[UserResponse]:
    """Only fields present with a non-null value are written."""
    updated = await user_service.update_user(db, user_id, body)
    if not updated:
        raise NotFoundError(resource="user", resource_id=user_id)
    user = await user_service.require_user(db, user_id)
    return SuccessResponse(data=UserResponse.model_validate(user), message="Profile updated")


@router.get(
    "/{user_id}/keywords",
    response_model=SuccessResponse[List[KeywordResponse]],
    responses={404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Keywords of a user",
)
async def get_user_keywords(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[List[KeywordResponse]]:
    keywords = await keyword_service.get_user_keywords(db, user_id)
    return SuccessResponse(data=[KeywordResponse.model_validate(k) for k in keywords])


@router.post(
    "/{user_id}/keywords",
    response_model=SuccessResponse[List[KeywordResponse]],
    responses={
        404: {"description": "Unknown user or keyword", "model": ErrorResponse},
        500: {"description": "Update rolled back", "model": ErrorResponse},
    },
    summary="Replace the keyword set of a user",
)
async def set_user_keywords(
    user_id: int,
    body: UserKeywordsUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[List[KeywordResponse]]:
    """The body is the complete new set; `{"keywordIds": []}` clears it."""
    await keyword_service.set_user_keywords(db, user_id, body.keyword_ids)
    keywords = await keyword_service.get_user_keywords(db, user_id)
    return SuccessResponse(
        data=[KeywordResponse.model_validate(k) for k in keywords],
        message="Keywords updated",
    )
