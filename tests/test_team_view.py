"""Tests for courtside.core.team_view: loading a team's view from the store."""

from datetime import date

import pytest

from courtside.core.errors import NotFoundError
from courtside.core.preferences import ViewPreferences
from courtside.core.team_view import load_team_view
from courtside.data.models import UNSET


class TestLoadTeamView:
    @pytest.mark.asyncio
    async def test_builds_matrix_from_store(self, seeded_store):
        await seeded_store.insert("availability", {
            "roster_member_id": "m1", "match_id": "match1", "status": "available",
        })
        await seeded_store.insert("availability", {
            "roster_member_id": "m2", "event_id": "ev1", "status": "maybe",
        })

        view = await load_team_view(seeded_store, "t1")

        assert view.team_id == "t1"
        assert [m.full_name for m in view.members] == ["Ana", "Ben", "Cara", "Dev"]
        assert [o.id for o in view.occurrences] == ["match1", "ev1"]
        assert view.status("m1", "match:match1") == "available"
        assert view.status("m2", "event:ev1") == "maybe"
        assert view.status("m3", "match:match1") == UNSET

        match_counts = view.per_occurrence_counts["match:match1"]
        assert (match_counts.available, match_counts.unavailable, match_counts.total) == (1, 3, 4)
        # singles + doubles + doubles
        assert match_counts.required == 5
        assert view.per_occurrence_counts["event:ev1"].required == 4

    @pytest.mark.asyncio
    async def test_inactive_member_not_loaded(self, seeded_store):
        view = await load_team_view(seeded_store, "t1")
        assert "m9" not in view.matrix

    @pytest.mark.asyncio
    async def test_since_filters_past_occurrences(self, seeded_store):
        view = await load_team_view(seeded_store, "t1", since=date(2030, 5, 5))
        assert [o.id for o in view.occurrences] == ["ev1"]

    @pytest.mark.asyncio
    async def test_preferences_filter_event_types(self, seeded_store):
        prefs = ViewPreferences(team_id="t1", event_types=frozenset({"match"}))
        view = await load_team_view(seeded_store, "t1", preferences=prefs)
        assert [o.id for o in view.occurrences] == ["match1"]

    @pytest.mark.asyncio
    async def test_malformed_rows_skipped(self, seeded_store):
        await seeded_store.insert("matches", {
            "id": "bad", "team_id": "t1", "date": "2030-13-40", "time": "18:00",
        })
        view = await load_team_view(seeded_store, "t1")
        assert "bad" not in [o.id for o in view.occurrences]

    @pytest.mark.asyncio
    async def test_unknown_team(self, seeded_store):
        with pytest.raises(NotFoundError):
            await load_team_view(seeded_store, "nope")

    @pytest.mark.asyncio
    async def test_team_without_schedule(self, store):
        await store.insert("teams", {"id": "t2", "name": "Empty"})
        await store.insert("roster_members", {"id": "x1", "team_id": "t2", "full_name": "X"})
        view = await load_team_view(store, "t2")
        assert view.occurrences == []
        assert view.per_member_history["x1"].total == 0
