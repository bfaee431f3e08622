"""
SchoolMap Backend - School Route Handlers
=========================================

What:  Directory proxy endpoints (NEIS search, detail, departments, meals,
       schedules) and the local school registry.
How:   Directory calls go straight to `directory_service`; local lookups
       and registration go through `school_service`.
Who:   Called by the signup flow (search, then register the chosen school)
       and by school pages.

Registration idempotency:
    POST /api/schools {"name": "Seoul High", "externalId": "B10-7010123"}
        → 201 {"success": true, "data": {"id": 7, ...}, "message": "School registered"}
    same body again
        → 200 {"success": true, "data": {"id": 7, ...}, "message": "already registered"}
"""

import logging
from typing import List, Union

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import NotFoundError, ValidationError
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.school import (
    DirectoryDepartment,
    DirectorySchool,
    DirectorySchoolDetail,
    MealEntry,
    ScheduleEntry,
    SchoolCreate,
    SchoolResponse,
)
from app.schemas.user import UserResponse
from app.services.neis_service import directory_service
from app.services.school_service import school_service
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/schools", tags=["Schools"])

# NEIS dates are YYYYMMDD
_NEIS_DATE = r"^\d{8}$"


# ══════════════════════════════════════════════════════════════════════════
# NEIS directory proxy
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/search",
    response_model=SuccessResponse[List[DirectorySchool]],
    responses={
        400: {"description": "Blank name", "model": ErrorResponse},
        500: {"description": "Directory unavailable", "model": ErrorResponse},
    },
    summary="Search schools in the NEIS directory",
)
async def search_schools(
    name: str | None = Query(default=None, description="School name or part of it"),
    page_index: int = Query(default=1, ge=1, alias="pageIndex"),
    page_size: int | None = Query(default=None, ge=1, le=1000, alias="pageSize"),
) -> SuccessResponse[List[DirectorySchool]]:
    if not name or not name.strip():
        raise ValidationError(message="A school name is required", field="name")

    schools = await directory_service.search_schools(
        name, page_index=page_index, page_size=page_size
    )
    return SuccessResponse(data=schools)


@router.get(
    "/detail",
    response_model=SuccessResponse[DirectorySchoolDetail],
    responses={
        404: {"description": "No such school in the directory", "model": ErrorResponse},
        500: {"description": "Directory unavailable", "model": ErrorResponse},
    },
    summary="School detail from the NEIS directory",
)
async def get_school_detail(
    office_code: str = Query(..., min_length=1, alias="officeCode"),
    school_code: str = Query(..., min_length=1, alias="schoolCode"),
) -> SuccessResponse[DirectorySchoolDetail]:
    detail = await directory_service.get_school_detail(office_code, school_code)
    if detail is None:
        raise NotFoundError(resource="school", resource_id=f"{office_code}-{school_code}")
    return SuccessResponse(data=detail)


@router.get(
    "/departments",
    response_model=SuccessResponse[List[DirectoryDepartment]],
    summary="Department names of a school from the NEIS directory",
)
async def list_directory_departments(
    office_code: str = Query(..., min_length=1, alias="officeCode"),
    school_code: str = Query(..., min_length=1, alias="schoolCode"),
) -> SuccessResponse[List[DirectoryDepartment]]:
    departments = await directory_service.list_departments(office_code, school_code)
    return SuccessResponse(data=departments)


@router.get(
    "/meals",
    response_model=SuccessResponse[List[MealEntry]],
    summary="School meal plan for a date range",
)
async def get_meals(
    office_code: str = Query(..., min_length=1, alias="officeCode"),
    school_code: str = Query(..., min_length=1, alias="schoolCode"),
    from_date: str = Query(..., pattern=_NEIS_DATE, alias="fromDate"),
    to_date: str | None = Query(default=None, pattern=_NEIS_DATE, alias="toDate"),
) -> SuccessResponse[List[MealEntry]]:
    meals = await directory_service.get_meals(office_code, school_code, from_date, to_date)
    return SuccessResponse(data=meals)


@router.get(
    "/schedules",
    response_model=SuccessResponse[List[ScheduleEntry]],
    summary="Academic schedule for a date range",
)
async def get_schedules(
    office_code: str = Query(..., min_length=1, alias="officeCode"),
    school_code: str = Query(..., min_length=1, alias="schoolCode"),
    from_date: str = Query(..., pattern=_NEIS_DATE, alias="fromDate"),
    to_date: str | None = Query(default=None, pattern=_NEIS_DATE, alias="toDate"),
) -> SuccessResponse[List[ScheduleEntry]]:
    events = await directory_service.get_schedule(office_code, school_code, from_date, to_date)
    return SuccessResponse(data=events)


# ══════════════════════════════════════════════════════════════════════════
# Local registry
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "",
    response_model=SuccessResponse[Union[SchoolResponse, List[SchoolResponse]]],
    responses={
        400: {"description": "Neither schoolId nor name given", "model": ErrorResponse},
        404: {"description": "Unknown schoolId", "model": ErrorResponse},
    },
    summary="Look up a registered school by id, or search by name",
)
async def get_schools(
    school_id: int | None = Query(default=None, gt=0, alias="schoolId"),
    name: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    if school_id is not None:
        school = await school_service.get_school_by_id(db, school_id)
        if school is None:
            raise NotFoundError(resource="school", resource_id=school_id)
        return SuccessResponse(data=SchoolResponse.model_validate(school))

    if name and name.strip():
        schools = await school_service.find_schools_by_name(db, name.strip())
        return SuccessResponse(data=[SchoolResponse.model_validate(s) for s in schools])

    raise ValidationError(message="Either schoolId or name is required", field="schoolId")


@router.post(
    "",
    status_code=201,
    response_model=SuccessResponse[SchoolResponse],
    responses={
        200: {"description": "School was already registered", "model": SuccessResponse[SchoolResponse]},
        400: {"description": "Missing name or externalId", "model": ErrorResponse},
    },
    summary="Register a school (idempotent on externalId)",
)
async def register_school(
    body: SchoolCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[SchoolResponse]:
    school, created = await school_service.register_school(
        db, name=body.name, external_id=body.external_id
    )
    if not created:
        response.status_code = 200
        return SuccessResponse(
            data=SchoolResponse.model_validate(school),
            message="already registered",
        )
    return SuccessResponse(data=SchoolResponse.model_validate(school), message="School registered")


@router.get(
    "/{school_id}/users",
    response_model=SuccessResponse[List[UserResponse]],
    responses={404: {"description": "Unknown school", "model": ErrorResponse}},
    summary="Users registered at a school",
)
async def list_school_users(
    school_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[List[UserResponse]]:
    await school_service.require_school(db, school_id)
    users = await user_service.list_users_by_school(db, school_id)
    return SuccessResponse(data=[UserResponse.model_validate(u) for u in users])
