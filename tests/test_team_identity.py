"""Tests for courtside.adapters.team_identity: captain rights."""

import pytest
from unittest.mock import AsyncMock

from courtside.adapters.team_identity import TeamCaptainIdentity


class TestCanEditTeam:
    @pytest.mark.asyncio
    async def test_captain_and_co_captain(self, seeded_store):
        assert await TeamCaptainIdentity(seeded_store, "u-cap").can_edit_team("t1") is True
        assert await TeamCaptainIdentity(seeded_store, "u-co").can_edit_team("t1") is True

    @pytest.mark.asyncio
    async def test_player_is_not_privileged(self, seeded_store):
        assert await TeamCaptainIdentity(seeded_store, "u1").can_edit_team("t1") is False

    @pytest.mark.asyncio
    async def test_anonymous_and_unknown_team(self, seeded_store):
        assert await TeamCaptainIdentity(seeded_store, None).can_edit_team("t1") is False
        assert await TeamCaptainIdentity(seeded_store, "u-cap").can_edit_team("nope") is False

    @pytest.mark.asyncio
    async def test_result_cached_until_refresh(self):
        store = AsyncMock()
        store.select_one = AsyncMock(return_value={"id": "t1", "captain_id": "u-cap"})
        identity = TeamCaptainIdentity(store, "u-cap")

        assert await identity.can_edit_team("t1") is True
        assert await identity.can_edit_team("t1") is True
        assert store.select_one.await_count == 1

        store.select_one = AsyncMock(return_value={"id": "t1", "captain_id": "someone-else"})
        identity.refresh("t1")
        assert await identity.can_edit_team("t1") is False

    def test_acting_user_id(self, store):
        assert TeamCaptainIdentity(store, "u7").acting_user_id == "u7"
