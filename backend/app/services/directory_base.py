"""
SchoolMap Backend - Abstract School Directory Interface
=======================================================

What:  Contract for the external school-information provider.
How:   NeisDirectoryService implements it against the Open NEIS API; tests
       drive the same implementation through httpx.MockTransport.
Who:   Called by the /api/schools proxy routes and the health check.

Every method returns flat schema records, never the provider's raw payload,
and raises DirectoryServiceError for transport or provider failures.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.schemas.school import (
    DirectoryDepartment,
    DirectorySchool,
    DirectorySchoolDetail,
    MealEntry,
    ScheduleEntry,
)


class SchoolDirectory(ABC):
    """Read-only lookup of schools in an external directory."""

    @abstractmethod
    async def search_schools(
        self, name: str, page_index: int = 1, page_size: Optional[int] = None
    ) -> List[DirectorySchool]:
        """
        Search schools by (partial) name within the configured category.

        Returns an empty list for a blank name or when nothing matches.
        """
        ...

    @abstractmethod
    async def get_school_detail(
        self, office_code: str, school_code: str
    ) -> Optional[DirectorySchoolDetail]:
        """At most one school for the (office, school) code pair, or None."""
        ...

    @abstractmethod
    async def list_departments(
        self, office_code: str, school_code: str
    ) -> List[DirectoryDepartment]:
        ...

    @abstractmethod
    async def get_meals(
        self, office_code: str, school_code: str, date_from: str, date_to: Optional[str] = None
    ) -> List[MealEntry]:
        ...

    @abstractmethod
    async def get_schedule(
        self, office_code: str, school_code: str, date_from: str, date_to: Optional[str] = None
    ) -> List[ScheduleEntry]:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True if the provider answered a minimal request."""
        ...
