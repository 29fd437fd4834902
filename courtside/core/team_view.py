"""
Courtside — Team availability loader.

Reads a team's roster, upcoming matches and events, and the availability
records between them through the RecordStore port, validates the rows once
at the boundary, and hands everything to the AvailabilityAggregator.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from courtside.core.aggregator import AvailabilityAggregator, AvailabilityView
from courtside.core.errors import NotFoundError, ValidationError
from courtside.core.preferences import ViewPreferences, filter_occurrences
from courtside.data.models import LineConfig, Occurrence, OccurrenceKind
from courtside.data.records import (
    EVENT_FK,
    MATCH_FK,
    parse_availability_rows,
    parse_occurrence,
    parse_roster_member,
    parse_team,
)
from courtside.ports.record_store import Eq, In, Or, OrderBy, Range

if TYPE_CHECKING:
    from courtside.ports.record_store import RecordStore

logger = logging.getLogger(__name__)


async def _load_occurrences(
    store: RecordStore, team_id: str, since: date | None, limit: int | None
) -> list[Occurrence]:
    where = [Eq("team_id", team_id)]
    if since is not None:
        where.append(Range("date", low=since))
    order = [OrderBy("date"), OrderBy("time")]

    match_rows = await store.select("matches", where, order, limit)
    event_rows = await store.select("events", where, order, limit)

    occurrences: list[Occurrence] = []
    for row in match_rows:
        try:
            occurrences.append(parse_occurrence(row, kind=OccurrenceKind.MATCH.value))
        except ValidationError as exc:
            logger.warning("Skipping match row: %s", exc)
    for row in event_rows:
        try:
            occurrences.append(parse_occurrence(row))
        except ValidationError as exc:
            logger.warning("Skipping event row: %s", exc)
    return occurrences


async def load_team_view(
    store: RecordStore,
    team_id: str,
    preferences: ViewPreferences | None = None,
    since: date | None = None,
    limit: int | None = None,
    aggregator: AvailabilityAggregator | None = None,
) -> AvailabilityView:
    """Build the availability view for one team.

    Args:
        store: Record store to read from.
        team_id: Team whose roster and schedule are shown.
        preferences: Event-type filter; defaults to ViewPreferences().
        since: Only occurrences on or after this date (callers usually pass
            today). None loads the whole schedule.
        limit: Max rows per occurrence table.

    Raises:
        NotFoundError: No such team.
    """
    preferences = preferences or ViewPreferences(team_id=team_id)
    aggregator = aggregator or AvailabilityAggregator()

    team_row = await store.select_one("teams", [Eq("id", team_id)])
    if team_row is None:
        raise NotFoundError(f"Team {team_id} not found")
    team = parse_team(team_row)

    roster_rows = await store.select(
        "roster_members",
        [Eq("team_id", team_id), Eq("is_active", True)],
        [OrderBy("full_name")],
    )
    members = [parse_roster_member(r) for r in roster_rows]

    occurrences = filter_occurrences(
        await _load_occurrences(store, team_id, since, limit), preferences
    )

    match_ids = [o.id for o in occurrences if o.kind is OccurrenceKind.MATCH]
    event_ids = [o.id for o in occurrences if o.kind is not OccurrenceKind.MATCH]
    records = []
    if members and occurrences:
        rows = await store.select(
            "availability",
            [
                In("roster_member_id", [m.id for m in members]),
                Or(In(MATCH_FK, match_ids), In(EVENT_FK, event_ids)),
            ],
        )
        records = parse_availability_rows(rows)

    view = aggregator.build(
        members,
        occurrences,
        records,
        line_config=LineConfig.from_team(team),
        team_id=team.id,
    )
    logger.info(
        "Loaded availability for team %s: %d member(s), %d occurrence(s), %d record(s)",
        team.name, len(view.members), len(view.occurrences), len(view.records),
    )
    return view
