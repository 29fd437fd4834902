"""Tests for courtside.data.db: SqliteRecordStore (RecordStore port on SQLite)."""

import pytest

from courtside.ports.record_store import (
    ConflictError,
    Eq,
    In,
    Or,
    OrderBy,
    Range,
    StoreError,
)


class TestInsertAndSelect:
    @pytest.mark.asyncio
    async def test_insert_generates_id(self, store):
        row = await store.insert("teams", {"name": "Lobsters"})
        assert row["id"]
        assert row["name"] == "Lobsters"

    @pytest.mark.asyncio
    async def test_list_stored_as_comma_string(self, store):
        row = await store.insert("teams", {
            "id": "t1", "name": "T", "line_match_types": ["singles", "doubles"],
        })
        assert row["line_match_types"] == "singles,doubles"

    @pytest.mark.asyncio
    async def test_select_eq_and_order(self, seeded_store):
        rows = await seeded_store.select(
            "roster_members", [Eq("team_id", "t1"), Eq("is_active", True)],
            [OrderBy("full_name", descending=True)],
        )
        assert [r["full_name"] for r in rows] == ["Dev", "Cara", "Ben", "Ana"]

    @pytest.mark.asyncio
    async def test_select_in_and_limit(self, seeded_store):
        rows = await seeded_store.select(
            "roster_members", [In("id", ["m1", "m2", "m3"])], [OrderBy("id")], limit=2,
        )
        assert [r["id"] for r in rows] == ["m1", "m2"]

    @pytest.mark.asyncio
    async def test_empty_in_matches_nothing(self, seeded_store):
        assert await seeded_store.select("roster_members", [In("id", [])]) == []

    @pytest.mark.asyncio
    async def test_range_on_dates(self, seeded_store):
        from datetime import date
        rows = await seeded_store.select("events", [Range("date", low=date(2030, 5, 5))])
        assert [r["id"] for r in rows] == ["ev1"]
        rows = await seeded_store.select("events", [Range("date", high="2030-05-04")])
        assert rows == []

    @pytest.mark.asyncio
    async def test_or_predicate(self, seeded_store):
        await seeded_store.insert("availability", {
            "id": "a1", "roster_member_id": "m1", "match_id": "match1", "status": "available",
        })
        await seeded_store.insert("availability", {
            "id": "a2", "roster_member_id": "m1", "event_id": "ev1", "status": "maybe",
        })
        rows = await seeded_store.select(
            "availability", [Or(In("match_id", ["match1"]), In("event_id", ["ev1"]))],
            [OrderBy("id")],
        )
        assert [r["id"] for r in rows] == ["a1", "a2"]

    @pytest.mark.asyncio
    async def test_unknown_column_rejected(self, store):
        with pytest.raises(StoreError):
            await store.select("teams", [Eq("name; DROP TABLE teams", "x")])

    @pytest.mark.asyncio
    async def test_unknown_table_rejected(self, store):
        with pytest.raises(StoreError):
            await store.select("sqlite_sequence_x")


class TestSelectOne:
    @pytest.mark.asyncio
    async def test_zero_or_one(self, seeded_store):
        assert await seeded_store.select_one("teams", [Eq("id", "nope")]) is None
        team = await seeded_store.select_one("teams", [Eq("id", "t1")])
        assert team["captain_id"] == "u-cap"

    @pytest.mark.asyncio
    async def test_several_rows_is_an_error(self, seeded_store):
        with pytest.raises(StoreError):
            await seeded_store.select_one("roster_members", [Eq("team_id", "t1")])


class TestAvailabilityConstraints:
    @pytest.mark.asyncio
    async def test_duplicate_pair_raises_conflict(self, seeded_store):
        values = {"roster_member_id": "m1", "match_id": "match1", "status": "available"}
        await seeded_store.insert("availability", values)
        with pytest.raises(ConflictError):
            await seeded_store.insert("availability", dict(values, status="maybe"))

    @pytest.mark.asyncio
    async def test_both_foreign_keys_rejected(self, seeded_store):
        with pytest.raises(StoreError) as excinfo:
            await seeded_store.insert("availability", {
                "roster_member_id": "m1", "match_id": "match1", "event_id": "ev1",
                "status": "available",
            })
        assert not isinstance(excinfo.value, ConflictError)

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, seeded_store):
        with pytest.raises(StoreError):
            await seeded_store.insert("availability", {
                "roster_member_id": "m1", "match_id": "match1", "status": "late",
            })


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_update_returns_row(self, seeded_store):
        row = await seeded_store.update("roster_members", "m1", {"full_name": "Ana B."})
        assert row["full_name"] == "Ana B."

    @pytest.mark.asyncio
    async def test_update_missing_row(self, seeded_store):
        with pytest.raises(StoreError):
            await seeded_store.update("roster_members", "ghost", {"full_name": "x"})

    @pytest.mark.asyncio
    async def test_update_check_violation_is_not_a_conflict(self, seeded_store):
        await seeded_store.insert("availability", {
            "id": "a1", "roster_member_id": "m1", "match_id": "match1", "status": "maybe",
        })
        with pytest.raises(StoreError) as excinfo:
            await seeded_store.update("availability", "a1", {"status": "late"})
        assert not isinstance(excinfo.value, ConflictError)

    @pytest.mark.asyncio
    async def test_update_into_duplicate_pair_is_a_conflict(self, seeded_store):
        await seeded_store.insert("availability", {
            "id": "a1", "roster_member_id": "m1", "match_id": "match1", "status": "maybe",
        })
        await seeded_store.insert("availability", {
            "id": "a2", "roster_member_id": "m2", "match_id": "match1", "status": "maybe",
        })
        with pytest.raises(ConflictError):
            await seeded_store.update("availability", "a2", {"roster_member_id": "m1"})

    @pytest.mark.asyncio
    async def test_delete_by_predicate(self, seeded_store):
        await seeded_store.insert("availability", {
            "roster_member_id": "m2", "event_id": "ev1", "status": "maybe",
        })
        where = [Eq("roster_member_id", "m2"), Eq("event_id", "ev1")]
        assert await seeded_store.delete("availability", where) == 1
        assert await seeded_store.delete("availability", where) == 0

    @pytest.mark.asyncio
    async def test_delete_requires_predicate(self, seeded_store):
        with pytest.raises(StoreError):
            await seeded_store.delete("availability", [])
