"""SchoolMap Backend - Map & Comment Service Tests."""

import pytest

from app.exceptions import NotFoundError
from app.services.map_service import map_service


class TestMaps:

    @pytest.mark.asyncio
    async def test_create_list_get(self, db_session):
        campus = await map_service.create_map(db_session, "Campus")
        await map_service.create_map(db_session, "Cafeteria")

        listed = await map_service.list_maps(db_session)
        assert [m.name for m in listed] == ["Campus", "Cafeteria"]
        assert (await map_service.get_map(db_session, campus.id)).name == "Campus"
        assert await map_service.get_map(db_session, 404) is None


class TestComments:

    @pytest.mark.asyncio
    async def test_add_and_list_in_order(self, db_session, user):
        campus = await map_service.create_map(db_session, "Campus")

        first = await map_service.add_comment(db_session, campus.id, user.id, "Nice view")
        second = await map_service.add_comment(db_session, campus.id, user.id, None)

        comments = await map_service.list_comments(db_session, campus.id)
        assert [c.id for c in comments] == [first.id, second.id]
        assert comments[0].content == "Nice view"
        assert comments[0].user_id == user.id

    @pytest.mark.asyncio
    async def test_comment_requires_map_and_user(self, db_session, user):
        campus = await map_service.create_map(db_session, "Campus")

        with pytest.raises(NotFoundError):
            await map_service.add_comment(db_session, 404, user.id, "no map")
        with pytest.raises(NotFoundError):
            await map_service.add_comment(db_session, campus.id, 404, "no user")

    @pytest.mark.asyncio
    async def test_delete(self, db_session, user):
        campus = await map_service.create_map(db_session, "Campus")
        comment = await map_service.add_comment(db_session, campus.id, user.id, "bye")

        await map_service.delete_comment(db_session, comment.id)

        assert await map_service.list_comments(db_session, campus.id) == []
        with pytest.raises(NotFoundError):
            await map_service.delete_comment(db_session, comment.id)
