"""Shared test fixtures and configuration.

Sets up environment variables before any courtside imports, and provides
a temp SQLite record store seeded with a small team.
"""

import os

# Patch env vars BEFORE any courtside imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("COMMIT_CONCURRENCY", "4")
os.environ.setdefault("DEFAULT_LINE_COUNT", "3")
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("DEFAULT_EVENT_TYPES", "match,practice,warmup,other")

import pytest
import pytest_asyncio


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_courtside.db")


@pytest.fixture
def store(tmp_db_path):
    """Return a SqliteRecordStore backed by a temp file."""
    from courtside.data.db import SqliteRecordStore
    return SqliteRecordStore(db_path=tmp_db_path)


@pytest_asyncio.fixture
async def seeded_store(store):
    """Team t1 (captain u-cap), four active players, one inactive,
    one match and one practice on 2030-05-04/05."""
    await store.insert("teams", {
        "id": "t1", "name": "Net Gains", "captain_id": "u-cap",
        "co_captain_id": "u-co", "total_lines": 3,
        "line_match_types": ["singles", "doubles", "doubles"],
    })
    for i, name in enumerate(["Ana", "Ben", "Cara", "Dev"], start=1):
        await store.insert("roster_members", {
            "id": f"m{i}", "team_id": "t1", "full_name": name, "user_id": f"u{i}",
        })
    await store.insert("roster_members", {
        "id": "m9", "team_id": "t1", "full_name": "Zed", "is_active": False,
    })
    await store.insert("matches", {
        "id": "match1", "team_id": "t1", "date": "2030-05-04", "time": "18:30",
        "opponent_name": "Baseline Bandits", "is_home": True,
    })
    await store.insert("events", {
        "id": "ev1", "team_id": "t1", "kind": "event", "date": "2030-05-05",
        "time": "09:00", "title": "Drills", "event_type": "practice",
    })
    return store
