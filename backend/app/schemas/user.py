"""
SchoolMap Backend - User Schemas
================================

What:  Registration, login and partial-update bodies plus the public user
       representation.

Security:
    UserResponse declares no password field. Every route that returns a user
    goes through it, so the hash cannot reach a response body.
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from app.schemas.common import APIModel

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8")
    return v


class UserRegister(APIModel):
    """
    POST /api/users/register body.

    Required: idname, password, name, schoolId.
    """

    idname: str = Field(min_length=1, max_length=50, description="Login handle")
    password: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=50)
    school_id: int = Field(gt=0)
    comment: Optional[str] = None
    grade: Optional[int] = Field(default=None, ge=1, le=12)
    class_num: Optional[int] = Field(default=None, ge=1)
    profile_photo: Optional[str] = Field(default=None, max_length=255)
    department_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return _check_password_bytes(v)


class UserLogin(APIModel):
    idname: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserUpdate(APIModel):
    """
    PUT /api/users/{id} body.

    One named optional per updatable column. Unknown keys are rejected, so
    the set of writable columns is fixed here. Only fields that are present
    and non-null are written.
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    password: Optional[str] = Field(default=None, min_length=1)
    comment: Optional[str] = None
    grade: Optional[int] = Field(default=None, ge=1, le=12)
    class_num: Optional[int] = Field(default=None, ge=1)
    profile_photo: Optional[str] = Field(default=None, max_length=255)
    department_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: Optional[str]) -> Optional[str]:
        return _check_password_bytes(v)

    def changed_fields(self) -> dict:
        """Column name → value for every field explicitly set to a value."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class UserResponse(APIModel):
    id: int
    idname: str
    name: str
    comment: Optional[str] = None
    grade: Optional[int] = None
    class_num: Optional[int] = None
    profile_photo: Optional[str] = None
    school_id: int
    department_id: Optional[int] = None
    created_at: Optional[datetime] = None


class RegisterResult(APIModel):
    user_id: int


class IdnameAvailability(APIModel):
    idname: str
    available: bool
