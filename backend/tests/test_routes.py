"""
SchoolMap Backend - API Endpoint Tests
======================================

Exercise the HTTP surface end to end through httpx's ASGITransport: request
validation, the response envelope, status codes and camelCase field names.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.exceptions import NotFoundError, ValidationError
from app.routes.static import serve_static
from app.services.neis_service import NeisDirectoryService


def assert_no_password(payload):
    """Fails if any key named password appears anywhere in a JSON body."""
    if isinstance(payload, dict):
        assert "password" not in payload
        for value in payload.values():
            assert_no_password(value)
    elif isinstance(payload, list):
        for item in payload:
            assert_no_password(item)


async def register(client, school_id, idname="minji", password="pw-1234", **extra):
    body = {"idname": idname, "password": password, "name": "Kim Minji", "schoolId": school_id}
    body.update(extra)
    return await client.post("/api/users/register", json=body)


class TestSchoolRegistry:

    @pytest.mark.asyncio
    async def test_registration_is_idempotent(self, test_client):
        body = {"name": "Seoul High", "externalId": "B10-7010123"}

        first = await test_client.post("/api/schools", json=body)
        second = await test_client.post("/api/schools", json=body)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["success"] is True
        assert second.json()["data"]["id"] == first.json()["data"]["id"]
        assert second.json()["data"]["externalId"] == "B10-7010123"
        assert second.json()["message"] == "already registered"

    @pytest.mark.asyncio
    async def test_registration_requires_external_id(self, test_client):
        response = await test_client.post("/api/schools", json={"name": "Seoul High"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert "request_id" in body

    @pytest.mark.asyncio
    async def test_lookup_by_id_and_name(self, test_client, school):
        by_id = await test_client.get("/api/schools", params={"schoolId": school.id})
        assert by_id.status_code == 200
        assert by_id.json()["data"]["name"] == "Seoul High"

        by_name = await test_client.get("/api/schools", params={"name": "Seoul"})
        assert [s["id"] for s in by_name.json()["data"]] == [school.id]

        missing = await test_client.get("/api/schools", params={"schoolId": 404})
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

        neither = await test_client.get("/api/schools")
        assert neither.status_code == 400

    @pytest.mark.asyncio
    async def test_departments(self, test_client, school):
        created = await test_client.post(
            "/api/departments", json={"schoolId": school.id, "name": "Science"}
        )
        assert created.status_code == 201

        bulk = await test_client.post(
            "/api/departments/bulk",
            json={"schoolId": school.id, "names": ["Science", "Arts", "  "]},
        )
        assert bulk.status_code == 201
        assert [d["name"] for d in bulk.json()["data"]] == ["Science", "Arts"]

        listed = await test_client.get("/api/departments", params={"schoolId": school.id})
        assert len(listed.json()["data"]) == 2

        dep_id = created.json()["data"]["id"]
        single = await test_client.get(f"/api/departments/{dep_id}")
        assert single.json()["data"]["schoolId"] == school.id

        unknown_school = await test_client.post(
            "/api/departments", json={"schoolId": 404, "name": "Science"}
        )
        assert unknown_school.status_code == 404


class TestDirectoryProxy:

    @pytest.mark.asyncio
    async def test_blank_search_is_rejected(self, test_client):
        response = await test_client.get("/api/schools/search", params={"name": "  "})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_search_returns_camel_case_records(self, test_client, neis_payload):
        row = {"SD_SCHUL_CODE": "7010123", "SCHUL_NM": "서울고등학교", "ATPT_OFCDC_SC_CODE": "B10"}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=neis_payload("schoolInfo", [row]))

        service = NeisDirectoryService(transport=httpx.MockTransport(handler))
        with patch("app.routes.schools.directory_service", service):
            response = await test_client.get("/api/schools/search", params={"name": "서울"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data[0]["schoolCode"] == "7010123"
        assert data[0]["officeCode"] == "B10"

    @pytest.mark.asyncio
    async def test_upstream_failure_is_500(self, test_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        service = NeisDirectoryService(transport=httpx.MockTransport(handler))
        with patch("app.routes.schools.directory_service", service):
            response = await test_client.get("/api/schools/search", params={"name": "서울"})

        assert response.status_code == 500
        assert response.json()["error"] == "upstream_error"

    @pytest.mark.asyncio
    async def test_detail_not_found(self, test_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"RESULT": {"CODE": "INFO-200", "MESSAGE": "no data"}})

        service = NeisDirectoryService(transport=httpx.MockTransport(handler))
        with patch("app.routes.schools.directory_service", service):
            response = await test_client.get(
                "/api/schools/detail", params={"officeCode": "B10", "schoolCode": "0"}
            )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_meals_require_neis_date(self, test_client):
        response = await test_client.get(
            "/api/schools/meals",
            params={"officeCode": "B10", "schoolCode": "7010123", "fromDate": "2024-03-04"},
        )
        assert response.status_code == 400


class TestUsers:

    @pytest.mark.asyncio
    async def test_register_and_login(self, test_client, school):
        registered = await register(test_client, school.id, grade=2, classNum=3)
        assert registered.status_code == 201
        user_id = registered.json()["data"]["userId"]

        login = await test_client.post(
            "/api/users/login", json={"idname": "minji", "password": "pw-1234"}
        )
        assert login.status_code == 200
        data = login.json()["data"]
        assert data["id"] == user_id
        assert data["classNum"] == 3
        assert_no_password(login.json())

    @pytest.mark.asyncio
    async def test_duplicate_idname_is_409(self, test_client, school):
        await register(test_client, school.id)
        duplicate = await register(test_client, school.id)

        assert duplicate.status_code == 409
        assert duplicate.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_missing_required_field_is_400(self, test_client, school):
        response = await test_client.post(
            "/api/users/register", json={"idname": "minji", "schoolId": school.id, "name": "x"}
        )
        assert response.status_code == 400
        assert_no_password(response.json())

    @pytest.mark.asyncio
    async def test_login_failures_are_indistinguishable(self, test_client, school):
        await register(test_client, school.id)
        headers = {"X-Request-ID": "login-test"}

        wrong_password = await test_client.post(
            "/api/users/login", json={"idname": "minji", "password": "nope"}, headers=headers
        )
        unknown_user = await test_client.post(
            "/api/users/login", json={"idname": "ghost", "password": "pw-1234"}, headers=headers
        )

        assert wrong_password.status_code == 401
        assert unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json()
        assert wrong_password.json()["error"] == "authentication_failed"

    @pytest.mark.asyncio
    async def test_idname_availability(self, test_client, school):
        await register(test_client, school.id)

        taken = await test_client.get("/api/users/idname/minji")
        free = await test_client.get("/api/users/idname/someone")

        assert taken.json()["data"] == {"idname": "minji", "available": False}
        assert free.json()["data"]["available"] is True

    @pytest.mark.asyncio
    async def test_profile_read_and_update(self, test_client, school):
        user_id = (await register(test_client, school.id)).json()["data"]["userId"]

        fetched = await test_client.get(f"/api/users/{user_id}")
        assert fetched.json()["data"]["name"] == "Kim Minji"
        assert_no_password(fetched.json())

        updated = await test_client.put(
            f"/api/users/{user_id}",
            json={"comment": "hi there", "grade": 3, "password": "changed-pw"},
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["comment"] == "hi there"
        assert updated.json()["data"]["grade"] == 3
        assert_no_password(updated.json())

        relogin = await test_client.post(
            "/api/users/login", json={"idname": "minji", "password": "changed-pw"}
        )
        assert relogin.status_code == 200

        school_users = await test_client.get(f"/api/schools/{school.id}/users")
        assert [u["id"] for u in school_users.json()["data"]] == [user_id]
        assert_no_password(school_users.json())

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_fields(self, test_client, school):
        user_id = (await register(test_client, school.id)).json()["data"]["userId"]

        response = await test_client.put(f"/api/users/{user_id}", json={"idname": "root"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_korean_password_within_bcrypt_limit(self, test_client, school):
        # 24 Hangul syllables are exactly 72 UTF-8 bytes
        password = "비밀번호" * 6
        assert (await register(test_client, school.id, password=password)).status_code == 201

        login = await test_client.post(
            "/api/users/login", json={"idname": "minji", "password": password}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_password_over_72_bytes_is_400(self, test_client, school):
        too_long = "비밀번호" * 7

        registered = await register(test_client, school.id, password=too_long)
        assert registered.status_code == 400
        assert registered.json()["error"] == "validation_error"

        user_id = (await register(test_client, school.id)).json()["data"]["userId"]
        updated = await test_client.put(f"/api/users/{user_id}", json={"password": too_long})
        assert updated.status_code == 400
        assert updated.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_update_rejects_department_of_other_school(self, test_client, school):
        user_id = (await register(test_client, school.id)).json()["data"]["userId"]
        other = await test_client.post(
            "/api/schools", json={"name": "Busan High", "externalId": "C10-7150123"}
        )
        art = await test_client.post(
            "/api/departments", json={"schoolId": other.json()["data"]["id"], "name": "Art"}
        )

        response = await test_client.put(
            f"/api/users/{user_id}", json={"departmentId": art.json()["data"]["id"]}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        fetched = await test_client.get(f"/api/users/{user_id}")
        assert fetched.json()["data"]["departmentId"] is None

    @pytest.mark.asyncio
    async def test_update_unknown_user(self, test_client):
        response = await test_client.put("/api/users/404", json={"name": "x"})
        assert response.status_code == 404


class TestKeywords:

    @pytest.mark.asyncio
    async def test_reconcile_then_clear(self, test_client, school):
        user_id = (await register(test_client, school.id)).json()["data"]["userId"]
        ids = []
        for word in ("music", "soccer", "coding"):
            created = await test_client.post("/api/keywords", json={"word": word})
            assert created.status_code == 201
            ids.append(created.json()["data"]["id"])

        again = await test_client.post("/api/keywords", json={"word": "music"})
        assert again.status_code == 200
        assert again.json()["data"]["id"] == ids[0]

        set_response = await test_client.post(
            f"/api/users/{user_id}/keywords", json={"keywordIds": [ids[2], ids[0], ids[2]]}
        )
        assert set_response.status_code == 200
        assert [k["id"] for k in set_response.json()["data"]] == [ids[0], ids[2]]

        cleared = await test_client.post(f"/api/users/{user_id}/keywords", json={"keywordIds": []})
        assert cleared.json()["data"] == []

        read = await test_client.get(f"/api/users/{user_id}/keywords")
        assert read.json()["data"] == []

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client):
        response = await test_client.get("/api/users/404/keywords")
        assert response.status_code == 404


class TestMaps:

    @pytest.mark.asyncio
    async def test_map_comment_lifecycle(self, test_client, school):
        user_id = (await register(test_client, school.id)).json()["data"]["userId"]

        created = await test_client.post("/api/maps", json={"name": "Campus"})
        assert created.status_code == 201
        map_id = created.json()["data"]["id"]

        comment = await test_client.post(
            f"/api/maps/{map_id}/comments", json={"userId": user_id, "content": "Nice"}
        )
        assert comment.status_code == 201
        comment_id = comment.json()["data"]["id"]

        listed = await test_client.get(f"/api/maps/{map_id}/comments")
        assert [c["content"] for c in listed.json()["data"]] == ["Nice"]

        deleted = await test_client.delete(f"/api/comments/{comment_id}")
        assert deleted.status_code == 200
        assert deleted.json()["success"] is True

        missing = await test_client.delete(f"/api/comments/{comment_id}")
        assert missing.status_code == 404

        maps = await test_client.get("/api/maps")
        assert [m["name"] for m in maps.json()["data"]] == ["Campus"]
        assert (await test_client.get(f"/api/maps/{map_id}")).status_code == 200
        assert (await test_client.get("/api/maps/404")).status_code == 404


class TestHealthAndStatic:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        with patch(
            "app.routes.health.directory_service.health_check",
            new=AsyncMock(return_value=False),
        ):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["database"] == "connected"
        assert body["directory"] == "unavailable"
        assert body["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/api/maps", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_static_files(self, test_client, static_root):
        index = await test_client.get("/")
        assert index.status_code == 200
        assert "SchoolMap" in index.text

        script = await test_client.get("/app.js")
        assert script.status_code == 200

        missing = await test_client.get("/nope.js")
        assert missing.status_code == 404
        assert missing.json()["success"] is False

    @pytest.mark.asyncio
    async def test_static_path_cannot_escape_root(self, static_root):
        (static_root.parent / "secret.txt").write_text("top secret", encoding="utf-8")

        with pytest.raises(ValidationError):
            await serve_static("../secret.txt")
        with pytest.raises(NotFoundError):
            await serve_static("missing/../nothing.html")
