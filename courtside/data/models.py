"""
Courtside — Data Models.

Plain dataclasses for everything the availability engine reasons about.
Rows coming from the record store are validated into these types once,
at the boundary (courtside.data.records), and are never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Final, Union


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    MAYBE = "maybe"
    LAST_RESORT = "last_resort"


class OccurrenceKind(str, Enum):
    MATCH = "match"
    EVENT = "event"
    PERSONAL_ACTIVITY = "personal_activity"


# Matrix value for a (member, occurrence) pair with no record.
UNSET: Final = "unset"


@dataclass
class Team:
    """A team and its match format."""

    id: str
    name: str
    captain_id: str | None = None
    co_captain_id: str | None = None
    total_lines: int | None = None
    line_match_types: list[str] | None = None


@dataclass(frozen=True)
class LineConfig:
    """Line/court configuration used for capacity targets."""

    line_count: int | None = None
    line_match_types: tuple[str, ...] = ()

    @classmethod
    def from_team(cls, team: Team) -> LineConfig:
        return cls(
            line_count=team.total_lines,
            line_match_types=tuple(team.line_match_types or ()),
        )


@dataclass
class RosterMember:
    """A person eligible to respond for a team."""

    id: str
    team_id: str
    full_name: str = ""
    user_id: str | None = None
    role: str = "player"
    is_active: bool = True


# ---------------------------------------------------------------------------
# Occurrences: tagged variant Match | Event | PersonalActivity
# ---------------------------------------------------------------------------


def occurrence_key(table: str, occurrence_id: str) -> str:
    """Grid column key: "match:<id>" or "event:<id>".

    Matches and events live in separate tables, so a bare id is not unique
    across kinds.
    """
    return f"{table}:{occurrence_id}"


@dataclass(frozen=True)
class Match:
    id: str
    date: date
    time: str                          # HH:MM
    team_id: str | None = None
    opponent_name: str = ""
    venue: str | None = None
    is_home: bool | None = None
    kind: OccurrenceKind = field(default=OccurrenceKind.MATCH, init=False)

    @property
    def category(self) -> str:
        return "match"

    @property
    def key(self) -> str:
        return occurrence_key("match", self.id)


@dataclass(frozen=True)
class Event:
    id: str
    date: date
    time: str
    team_id: str | None = None
    event_name: str = ""
    event_type: str | None = None      # practice | warmup | social | other
    location: str | None = None
    recurrence_series_id: str | None = None
    kind: OccurrenceKind = field(default=OccurrenceKind.EVENT, init=False)

    @property
    def category(self) -> str:
        return self.event_type or "other"

    @property
    def key(self) -> str:
        return occurrence_key("event", self.id)


@dataclass(frozen=True)
class PersonalActivity:
    id: str
    date: date
    time: str
    team_id: str | None = None
    title: str = ""
    activity_type: str = "other"       # scrimmage | lesson | class | ...
    creator_id: str | None = None
    max_attendees: int | None = None
    recurrence_series_id: str | None = None
    kind: OccurrenceKind = field(
        default=OccurrenceKind.PERSONAL_ACTIVITY, init=False
    )

    @property
    def category(self) -> str:
        return self.activity_type

    @property
    def key(self) -> str:
        return occurrence_key("event", self.id)


Occurrence = Union[Match, Event, PersonalActivity]


def occurrence_sort_key(occurrence: Occurrence) -> tuple[date, str, str]:
    """Chronological order; ties broken by id so the order is stable."""
    return (occurrence.date, occurrence.time, occurrence.id)


@dataclass(frozen=True)
class AvailabilityRecord:
    """One persisted response, with the dual foreign key normalized.

    `foreign_key` names the column the row was stored under
    ("match_id" or "event_id").
    """

    id: str
    roster_member_id: str
    occurrence_id: str
    foreign_key: str
    status: AvailabilityStatus

    @property
    def occurrence_key(self) -> str:
        return occurrence_key(self.foreign_key.removesuffix("_id"), self.occurrence_id)


# ---------------------------------------------------------------------------
# Recurrence
# ---------------------------------------------------------------------------


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"


class RecurrenceEndType(str, Enum):
    DATE = "date"
    OCCURRENCES = "occurrences"
    NEVER = "never"


class TimeUnit(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class CustomRecurrence:
    """Every `interval` `time_unit`s.

    `weekdays` uses Python numbering (Monday=0 ... Sunday=6). It is recorded
    with the series but does not change how dates are generated.
    """

    interval: int = 1
    time_unit: TimeUnit = TimeUnit.WEEK
    weekdays: frozenset[int] = frozenset()


@dataclass(frozen=True)
class RecurrenceSeries:
    id: str
    origin: date
    pattern: RecurrencePattern
    end_type: RecurrenceEndType
    end_date: date | None = None
    occurrences: int | None = None
    custom: CustomRecurrence | None = None
