"""
Courtside — Availability Aggregator.

The one place that turns roster members, occurrences and raw availability
records into what every screen shows: a member × occurrence status matrix,
per-occurrence tallies and per-member participation.

Non-responses have two projections that must not be confused:
the matrix shows them as "unset", the tallies count them as unavailable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from courtside.core.capacity import required_responders
from courtside.data.models import (
    UNSET,
    AvailabilityRecord,
    AvailabilityStatus,
    LineConfig,
    Occurrence,
    RosterMember,
    occurrence_sort_key,
)

logger = logging.getLogger(__name__)


@dataclass
class OccurrenceCounts:
    """Tally for one occurrence across the active roster."""

    available: int = 0
    maybe: int = 0
    last_resort: int = 0
    unavailable: int = 0
    total: int = 0
    required: int = 0

    @property
    def maybe_or_last_resort(self) -> int:
        return self.maybe + self.last_resort

    @property
    def responded(self) -> int:
        return self.available + self.maybe + self.last_resort + self.unavailable

    @property
    def is_filled(self) -> bool:
        return self.available >= self.required


@dataclass
class MemberHistory:
    available: int = 0
    total: int = 0

    @property
    def ratio(self) -> float:
        return self.available / self.total if self.total else 0.0


@dataclass
class AvailabilityView:
    """Result of AvailabilityAggregator.build()."""

    members: list[RosterMember] = field(default_factory=list)
    occurrences: list[Occurrence] = field(default_factory=list)
    # member_id -> occurrence key ("match:<id>" or "event:<id>") -> status
    matrix: dict[str, dict[str, str]] = field(default_factory=dict)
    per_occurrence_counts: dict[str, OccurrenceCounts] = field(default_factory=dict)
    per_member_history: dict[str, MemberHistory] = field(default_factory=dict)
    # (member_id, occurrence key) -> record actually used in the matrix
    records: dict[tuple[str, str], AvailabilityRecord] = field(default_factory=dict)
    team_id: str | None = None

    def status(self, member_id: str, occurrence_key: str) -> str:
        return self.matrix.get(member_id, {}).get(occurrence_key, UNSET)

    def member(self, member_id: str) -> RosterMember | None:
        return next((m for m in self.members if m.id == member_id), None)

    def occurrence(self, occurrence_key: str) -> Occurrence | None:
        return next((o for o in self.occurrences if o.key == occurrence_key), None)

    def record_for(self, member_id: str, occurrence_key: str) -> AvailabilityRecord | None:
        return self.records.get((member_id, occurrence_key))


class AvailabilityAggregator:
    """Builds AvailabilityView objects. Stateless; one instance can be shared."""

    def build(
        self,
        members: list[RosterMember],
        occurrences: list[Occurrence],
        records: list[AvailabilityRecord],
        line_config: LineConfig | None = None,
        team_id: str | None = None,
    ) -> AvailabilityView:
        active = [m for m in members if m.is_active]
        ordered = sorted(occurrences, key=occurrence_sort_key)
        member_ids = {m.id for m in active}
        occurrence_keys = {o.key for o in ordered}

        # A record only matches an occurrence stored under the same foreign
        # key. First record seen for a pair wins.
        chosen: dict[tuple[str, str], AvailabilityRecord] = {}
        for record in records:
            key = (record.roster_member_id, record.occurrence_key)
            if key[0] not in member_ids or key[1] not in occurrence_keys:
                continue
            if key in chosen:
                logger.debug(
                    "Ignoring duplicate availability %s for member %s / %s",
                    record.id, key[0], key[1],
                )
                continue
            chosen[key] = record

        matrix: dict[str, dict[str, str]] = {}
        history: dict[str, MemberHistory] = {}
        for m in active:
            row = {}
            available = 0
            for o in ordered:
                record = chosen.get((m.id, o.key))
                if record is None:
                    row[o.key] = UNSET
                    continue
                row[o.key] = record.status.value
                if record.status is AvailabilityStatus.AVAILABLE:
                    available += 1
            matrix[m.id] = row
            history[m.id] = MemberHistory(available=available, total=len(ordered))

        counts: dict[str, OccurrenceCounts] = {}
        for o in ordered:
            tally = OccurrenceCounts(
                total=len(active),
                required=required_responders(o, line_config, len(active)),
            )
            for m in active:
                record = chosen.get((m.id, o.key))
                status = record.status if record else AvailabilityStatus.UNAVAILABLE
                if status is AvailabilityStatus.AVAILABLE:
                    tally.available += 1
                elif status is AvailabilityStatus.MAYBE:
                    tally.maybe += 1
                elif status is AvailabilityStatus.LAST_RESORT:
                    tally.last_resort += 1
                else:
                    tally.unavailable += 1
            counts[o.key] = tally

        return AvailabilityView(
            members=active,
            occurrences=ordered,
            matrix=matrix,
            per_occurrence_counts=counts,
            per_member_history=history,
            records=chosen,
            team_id=team_id,
        )
