"""Identity adapter: implements IdentityPort from the teams table.

A user may edit a team's availability when they are its captain or
co-captain. Captain status rarely changes during a season, so results are
cached per team until refresh() is called.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from courtside.ports.record_store import Eq

if TYPE_CHECKING:
    from courtside.ports.record_store import RecordStore

logger = logging.getLogger(__name__)


class TeamCaptainIdentity:
    """Session identity backed by the record store."""

    def __init__(self, store: RecordStore, user_id: str | None) -> None:
        self._store = store
        self._user_id = user_id
        self._cache: dict[str, bool] = {}

    @property
    def acting_user_id(self) -> str | None:
        return self._user_id

    async def can_edit_team(self, team_id: str) -> bool:
        if not self._user_id or not team_id:
            return False
        if team_id in self._cache:
            return self._cache[team_id]

        team = await self._store.select_one("teams", [Eq("id", team_id)])
        allowed = bool(
            team
            and self._user_id in (team.get("captain_id"), team.get("co_captain_id"))
        )
        self._cache[team_id] = allowed
        logger.debug(
            "User %s %s edit team %s",
            self._user_id, "may" if allowed else "may not", team_id,
        )
        return allowed

    def refresh(self, team_id: str | None = None) -> None:
        """Forget cached captain status (after roster/captain changes)."""
        if team_id is None:
            self._cache.clear()
        else:
            self._cache.pop(team_id, None)
