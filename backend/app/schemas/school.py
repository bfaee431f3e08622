"""
SchoolMap Backend - School, Department & Directory Schemas
==========================================================

What:  Request/response bodies for local schools and departments, plus the
       flat records the NEIS directory adapter produces.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.schemas.common import APIModel


# ══════════════════════════════════════════════════════════════════════════
# Local schools and departments
# ══════════════════════════════════════════════════════════════════════════


class SchoolCreate(APIModel):
    """POST /api/schools body. Registration is idempotent on external_id."""

    name: str = Field(min_length=1, max_length=100)
    external_id: str = Field(
        min_length=1,
        max_length=50,
        description="NEIS office code + school code, e.g. B10-7010123",
    )


class SchoolResponse(APIModel):
    id: int
    name: str
    external_id: Optional[str] = None
    created_at: Optional[datetime] = None


class DepartmentCreate(APIModel):
    """POST /api/departments body. Idempotent on (school_id, name)."""

    school_id: int = Field(gt=0)
    name: str = Field(min_length=1, max_length=100)
    external_id: Optional[str] = Field(default=None, max_length=50)


class DepartmentBulkCreate(APIModel):
    """POST /api/departments/bulk body."""

    school_id: int = Field(gt=0)
    names: List[str] = Field(min_length=1, max_length=200)

    @field_validator("names")
    @classmethod
    def drop_blank_names(cls, v: List[str]) -> List[str]:
        """Strips names and drops blank entries; at least one must remain."""
        names = [n.strip() for n in v if n and n.strip()]
        if not names:
            raise ValueError("names must contain at least one non-empty department name")
        return names


class DepartmentResponse(APIModel):
    id: int
    school_id: int
    name: str
    external_id: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# NEIS directory records (output of DirectoryService)
# ══════════════════════════════════════════════════════════════════════════


class DirectorySchool(APIModel):
    """One row of a school search."""

    school_code: Optional[str] = None
    school_name: Optional[str] = None
    office_code: Optional[str] = None
    office_name: Optional[str] = None
    school_type: Optional[str] = None
    address: Optional[str] = None
    found_date: Optional[str] = None
    zip_code: Optional[str] = None


class DirectorySchoolDetail(DirectorySchool):
    """Detail lookup adds contact and anniversary fields."""

    english_name: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    school_anniversary: Optional[str] = None


class DirectoryDepartment(APIModel):
    name: str


class MealEntry(APIModel):
    """
    One meal of the school meal plan.

    `dishes` is a comma-joined list, e.g. "현미밥, 미역국, 김치".
    """

    date: Optional[str] = None
    meal_type: Optional[str] = None
    dishes: str = ""
    calories: Optional[str] = None


class ScheduleEntry(APIModel):
    date: Optional[str] = None
    event_name: Optional[str] = None
    event_description: Optional[str] = None
