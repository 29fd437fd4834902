"""View preferences passed explicitly in and out of view-building calls."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field

from courtside.data.models import Occurrence, OccurrenceKind


def _default_event_types() -> frozenset[str]:
    from courtside.config import settings
    return frozenset(settings.DEFAULT_EVENT_TYPES)


@dataclass(frozen=True)
class ViewPreferences:
    """Last-viewed team, display mode and event-type filter.

    `event_types` holds "match" plus event categories (practice, warmup,
    social, other). Personal activities are shown when
    `include_personal` is set.
    """

    team_id: str | None = None
    view_mode: str = "grid"            # grid | list
    event_types: frozenset[str] = field(default_factory=_default_event_types)
    include_personal: bool = True


def with_team(preferences: ViewPreferences, team_id: str) -> ViewPreferences:
    return dataclasses.replace(preferences, team_id=team_id)


def with_event_types(
    preferences: ViewPreferences, event_types: set[str] | frozenset[str]
) -> ViewPreferences:
    return dataclasses.replace(
        preferences, event_types=frozenset(t.lower() for t in event_types)
    )


def filter_occurrences(
    occurrences: list[Occurrence], preferences: ViewPreferences
) -> list[Occurrence]:
    """Keep the occurrences the preferences ask to see; order is preserved."""
    kept: list[Occurrence] = []
    for o in occurrences:
        if o.kind is OccurrenceKind.PERSONAL_ACTIVITY:
            if preferences.include_personal:
                kept.append(o)
        elif o.category in preferences.event_types:
            kept.append(o)
    return kept
