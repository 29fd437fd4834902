"""Identity port: who is acting, and may they edit a team's availability."""

from __future__ import annotations

from typing import Protocol


class IdentityPort(Protocol):
    """Abstract identity/session provider used by the coordinator."""

    @property
    def acting_user_id(self) -> str | None: ...

    async def can_edit_team(self, team_id: str) -> bool: ...
