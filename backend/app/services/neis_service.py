"""
SchoolMap Backend - NEIS School Directory Adapter
=================================================

What:  SchoolDirectory implementation backed by the Open NEIS API
       (https://open.neis.go.kr/hub).
How:   One async httpx GET per call; the JSON answer is reshaped into flat
       records. No retries, no caching.
Who:   Singleton `directory_service`, used by the school routes.

NEIS response shape:
    {
        "schoolInfo": [
            {"head": [{"list_total_count": 2},
                      {"RESULT": {"CODE": "INFO-000", "MESSAGE": "정상 처리되었습니다."}}]},
            {"row": [{"SD_SCHUL_CODE": "7010123", "SCHUL_NM": "서울고등학교", ...}, ...]}
        ]
    }

    Element 0 carries the count header, element 1 the rows. When nothing
    matches, the service key is missing and a top-level
    {"RESULT": {"CODE": "INFO-200", ...}} is returned instead; ERROR-* codes
    in that position are provider failures.
"""

import logging
import re
import time
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.exceptions import DirectoryServiceError
from app.schemas.school import (
    DirectoryDepartment,
    DirectorySchool,
    DirectorySchoolDetail,
    MealEntry,
    ScheduleEntry,
)
from app.services.directory_base import SchoolDirectory

logger = logging.getLogger(__name__)

# Dish names in DDISH_NM are separated by HTML line breaks
_DISH_SEPARATOR = re.compile(r"<br\s*/?>", re.IGNORECASE)


def extract_rows(payload: Any, service: str) -> List[Dict[str, Any]]:
    """
    Pull the row list out of a NEIS payload.

    Returns [] when the payload has no usable row list (including the
    INFO-200 "no data" answer). Raises DirectoryServiceError for ERROR-*
    result codes.
    """
    if not isinstance(payload, dict):
        return []

    result = payload.get("RESULT")
    if isinstance(result, dict):
        code = str(result.get("CODE", ""))
        if code.startswith("ERROR"):
            raise DirectoryServiceError(
                message=f"School directory returned an error: {result.get('MESSAGE') or code}",
                context={"service": service, "code": code},
            )
        return []

    block = payload.get(service)
    if not isinstance(block, list) or len(block) < 2:
        return []

    body = block[1]
    rows = body.get("row") if isinstance(body, dict) else None
    if not isinstance(rows, list):
        return []
    return [row for row in rows if isinstance(row, dict)]


def normalize_dishes(raw: Optional[str]) -> str:
    """'밥<br/>국 <br/>김치' → '밥, 국, 김치'"""
    if not raw:
        return ""
    return ", ".join(part.strip() for part in _DISH_SEPARATOR.split(raw) if part.strip())


def _to_school(row: Dict[str, Any]) -> DirectorySchool:
    return DirectorySchool(
        school_code=row.get("SD_SCHUL_CODE"),
        school_name=row.get("SCHUL_NM"),
        office_code=row.get("ATPT_OFCDC_SC_CODE"),
        office_name=row.get("ATPT_OFCDC_SC_NM"),
        school_type=row.get("SCHUL_KND_SC_NM"),
        address=row.get("ORG_RDNMA"),
        found_date=row.get("FOND_YMD"),
        zip_code=row.get("ORG_RDNZC"),
    )


def _to_school_detail(row: Dict[str, Any]) -> DirectorySchoolDetail:
    return DirectorySchoolDetail(
        **_to_school(row).model_dump(),
        english_name=row.get("ENG_SCHUL_NM"),
        phone=row.get("ORG_TELNO"),
        website=row.get("HMPG_ADRES"),
        school_anniversary=row.get("FOAS_MEMRD"),
    )


class NeisDirectoryService(SchoolDirectory):
    """
    Open NEIS API client.

    Args:
        api_url:   Override settings.neis_api_url.
        api_key:   Override settings.neis_api_key.
        transport: httpx transport override (tests pass httpx.MockTransport).
    """

    SCHOOL_INFO = "schoolInfo"
    MAJOR_INFO = "schoolMajorinfo"
    MEAL_INFO = "mealServiceDietInfo"
    SCHEDULE_INFO = "SchoolSchedule"

    # one Seoul school, enough to prove the upstream answers
    HEALTH_CHECK_PARAMS = {"ATPT_OFCDC_SC_CODE": "B10", "pSize": 1}

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url or settings.neis_api_url).rstrip("/")
        self.api_key = settings.neis_api_key if api_key is None else api_key
        self._transport = transport

    async def _fetch(self, service: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        GET <api_url>/<service> and return its rows.

        Raises:
            DirectoryServiceError: network failure, non-2xx status, a body
            that is not JSON, or an ERROR-* result code.
        """
        query: Dict[str, Any] = {
            "Type": "json",
            "pIndex": 1,
            "pSize": settings.neis_page_size,
        }
        if self.api_key:
            query["KEY"] = self.api_key
        query.update(params)

        start_time = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                base_url=self.api_url,
                timeout=settings.neis_timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(f"/{service}", params=query)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "NEIS %s answered HTTP %d", service, e.response.status_code
            )
            raise DirectoryServiceError(
                message=f"School directory request failed (HTTP {e.response.status_code})",
                context={"service": service, "status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.warning("NEIS %s request failed: %s", service, str(e))
            raise DirectoryServiceError(
                message=f"Could not reach the school directory service: {e}",
                context={"service": service, "error_type": type(e).__name__},
            ) from e
        except ValueError as e:
            logger.warning("NEIS %s returned a non-JSON body", service)
            raise DirectoryServiceError(
                message="School directory returned an unreadable response",
                context={"service": service},
            ) from e

        rows = extract_rows(payload, service)
        logger.info(
            "NEIS %s completed in %.0fms, %d rows",
            service,
            (time.perf_counter() - start_time) * 1000,
            len(rows),
        )
        return rows

    async def search_schools(
        self, name: str, page_index: int = 1, page_size: Optional[int] = None
    ) -> List[DirectorySchool]:
        if not name or not name.strip():
            return []

        rows = await self._fetch(
            self.SCHOOL_INFO,
            {
                "SCHUL_NM": name.strip(),
                "SCHUL_KND_SC_NM": settings.neis_school_kind,
                "pIndex": page_index,
                "pSize": page_size or settings.neis_page_size,
            },
        )
        return [_to_school(row) for row in rows]

    async def get_school_detail(
        self, office_code: str, school_code: str
    ) -> Optional[DirectorySchoolDetail]:
        if not office_code or not school_code:
            return None

        rows = await self._fetch(
            self.SCHOOL_INFO,
            {"ATPT_OFCDC_SC_CODE": office_code, "SD_SCHUL_CODE": school_code},
        )
        if not rows:
            return None
        return _to_school_detail(rows[0])

    async def list_departments(
        self, office_code: str, school_code: str
    ) -> List[DirectoryDepartment]:
        """
        Department names of a school.

        NEIS lists a department once per course (day/night), so names are
        de-duplicated in first-seen order.
        """
        rows = await self._fetch(
            self.MAJOR_INFO,
            {"ATPT_OFCDC_SC_CODE": office_code, "SD_SCHUL_CODE": school_code},
        )
        seen = set()
        departments = []
        for row in rows:
            name = (row.get("DDDEP_NM") or "").strip()
            if name and name not in seen:
                seen.add(name)
                departments.append(DirectoryDepartment(name=name))
        return departments

    async def get_meals(
        self, office_code: str, school_code: str, date_from: str, date_to: Optional[str] = None
    ) -> List[MealEntry]:
        rows = await self._fetch(
            self.MEAL_INFO,
            {
                "ATPT_OFCDC_SC_CODE": office_code,
                "SD_SCHUL_CODE": school_code,
                "MLSV_FROM_YMD": date_from,
                "MLSV_TO_YMD": date_to or date_from,
            },
        )
        return [
            MealEntry(
                date=row.get("MLSV_YMD"),
                meal_type=row.get("MMEAL_SC_NM"),
                dishes=normalize_dishes(row.get("DDISH_NM")),
                calories=row.get("CAL_INFO"),
            )
            for row in rows
        ]

    async def get_schedule(
        self, office_code: str, school_code: str, date_from: str, date_to: Optional[str] = None
    ) -> List[ScheduleEntry]:
        rows = await self._fetch(
            self.SCHEDULE_INFO,
            {
                "ATPT_OFCDC_SC_CODE": office_code,
                "SD_SCHUL_CODE": school_code,
                "AA_FROM_YMD": date_from,
                "AA_TO_YMD": date_to or date_from,
            },
        )
        return [
            ScheduleEntry(
                date=row.get("AA_YMD"),
                event_name=row.get("EVENT_NM"),
                event_description=row.get("EVENT_CNTNT"),
            )
            for row in rows
        ]

    async def health_check(self) -> bool:
        try:
            await self._fetch(self.SCHOOL_INFO, self.HEALTH_CHECK_PARAMS)
            return True
        except DirectoryServiceError as e:
            logger.warning("NEIS health check failed: %s", e.message)
            return False


directory_service = NeisDirectoryService()
