"""
SchoolMap Backend - Department Route Handlers
=============================================

What:  Local department registry: list by school, fetch one, register one,
       bulk register.
Who:   Called after a school is registered, to mirror its departments.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import NotFoundError
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.school import DepartmentBulkCreate, DepartmentCreate, DepartmentResponse
from app.services.school_service import department_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/departments", tags=["Departments"])


@router.get(
    "",
    response_model=SuccessResponse[List[DepartmentResponse]],
    summary="Departments of a school",
)
async def list_departments(
    school_id: int = Query(..., gt=0, alias="schoolId"),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[List[DepartmentResponse]]:
    departments = await department_service.list_departments(db, school_id)
    return SuccessResponse(data=[DepartmentResponse.model_validate(d) for d in departments])


@router.get(
    "/{department_id}",
    response_model=SuccessResponse[DepartmentResponse],
    responses={404: {"description": "Unknown department", "model": ErrorResponse}},
    summary="Get a single department",
)
async def get_department(
    department_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[DepartmentResponse]:
    department = await department_service.get_department_by_id(db, department_id)
    if department is None:
        raise NotFoundError(resource="department", resource_id=department_id)
    return SuccessResponse(data=DepartmentResponse.model_validate(department))


@router.post(
    "",
    status_code=201,
    response_model=SuccessResponse[DepartmentResponse],
    responses={
        200: {"description": "Department was already registered"},
        404: {"description": "Unknown school", "model": ErrorResponse},
    },
    summary="Register a department (idempotent on schoolId + name)",
)
async def add_department(
    body: DepartmentCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[DepartmentResponse]:
    department, created = await department_service.add_department(
        db, school_id=body.school_id, name=body.name, external_id=body.external_id
    )
    if not created:
        response.status_code = 200
        return SuccessResponse(
            data=DepartmentResponse.model_validate(department),
            message="already registered",
        )
    return SuccessResponse(data=DepartmentResponse.model_validate(department))


@router.post(
    "/bulk",
    status_code=201,
    response_model=SuccessResponse[List[DepartmentResponse]],
    responses={404: {"description": "Unknown school", "model": ErrorResponse}},
    summary="Register several departments at once",
)
async def add_departments_bulk(
    body: DepartmentBulkCreate,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse[List[DepartmentResponse]]:
    """Names the school already has are skipped; the response lists all of its departments."""
    departments = await department_service.add_departments_bulk(db, body.school_id, body.names)
    return SuccessResponse(data=[DepartmentResponse.model_validate(d) for d in departments])
