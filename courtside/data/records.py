"""
Courtside — Store boundary.

Rows fetched from the record store are loosely typed dicts. They are
validated here, once, into the dataclasses of courtside.data.models.
Occurrence rows are a discriminated union on `kind`.
"""

from __future__ import annotations

import datetime
import logging
from typing import Annotated, Literal, Union

import pydantic
from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from courtside.core.errors import ValidationError
from courtside.data.models import (
    AvailabilityRecord,
    AvailabilityStatus,
    Event,
    Match,
    Occurrence,
    OccurrenceKind,
    PersonalActivity,
    RosterMember,
    Team,
)

logger = logging.getLogger(__name__)

MATCH_FK = "match_id"
EVENT_FK = "event_id"


def foreign_key_for(kind: OccurrenceKind | str) -> str:
    """Availability column that references an occurrence of this kind.

    Matches live in their own table; team events and personal activities
    share the events table.
    """
    if OccurrenceKind(kind) is OccurrenceKind.MATCH:
        return MATCH_FK
    return EVENT_FK


def _normalize_time(v: str) -> str:
    # "18:30:00" -> "18:30"
    parts = str(v).strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time: {v!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time: {v!r}")
    return f"{hour:02d}:{minute:02d}"


# ---------------------------------------------------------------------------
# Occurrence rows
# ---------------------------------------------------------------------------


class _OccurrenceRow(BaseModel):
    id: str
    team_id: str | None = None
    date: datetime.date
    time: str = "00:00"
    recurrence_series_id: str | None = None

    @field_validator("time", mode="before")
    @classmethod
    def parse_time(cls, v: str | None) -> str:
        if v is None or v == "":
            return "00:00"
        return _normalize_time(v)


class MatchRow(_OccurrenceRow):
    kind: Literal["match"] = "match"
    opponent_name: str | None = None
    venue: str | None = None
    is_home: bool | None = None

    def to_occurrence(self) -> Match:
        return Match(
            id=self.id,
            date=self.date,
            time=self.time,
            team_id=self.team_id,
            opponent_name=self.opponent_name or "",
            venue=self.venue,
            is_home=self.is_home,
        )


class EventRow(_OccurrenceRow):
    kind: Literal["event"] = "event"
    title: str | None = None
    event_type: str | None = None
    location: str | None = None

    def to_occurrence(self) -> Event:
        return Event(
            id=self.id,
            date=self.date,
            time=self.time,
            team_id=self.team_id,
            event_name=self.title or "",
            event_type=self.event_type.lower() if self.event_type else None,
            location=self.location,
            recurrence_series_id=self.recurrence_series_id,
        )


class PersonalActivityRow(_OccurrenceRow):
    kind: Literal["personal_activity"] = "personal_activity"
    title: str | None = None
    activity_type: str | None = None
    creator_id: str | None = None
    max_attendees: int | None = None

    def to_occurrence(self) -> PersonalActivity:
        return PersonalActivity(
            id=self.id,
            date=self.date,
            time=self.time,
            team_id=self.team_id,
            title=self.title or "",
            activity_type=self.activity_type or "other",
            creator_id=self.creator_id,
            max_attendees=self.max_attendees,
            recurrence_series_id=self.recurrence_series_id,
        )


OccurrenceRow = Annotated[
    Union[MatchRow, EventRow, PersonalActivityRow], Field(discriminator="kind")
]
_occurrence_adapter: TypeAdapter = TypeAdapter(OccurrenceRow)


def parse_occurrence(row: dict, kind: str | None = None) -> Occurrence:
    """Validate a store row into Match | Event | PersonalActivity.

    Args:
        row: Raw row from the matches or events table.
        kind: Overrides the row's own `kind` column (rows from the matches
            table carry none).

    Raises:
        ValidationError: The row does not describe a valid occurrence.
    """
    data = dict(row)
    if kind is not None:
        data["kind"] = kind
    try:
        parsed = _occurrence_adapter.validate_python(data)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            f"Invalid occurrence row {row.get('id')!r}: {exc}"
        ) from exc
    return parsed.to_occurrence()


# ---------------------------------------------------------------------------
# Availability rows
# ---------------------------------------------------------------------------


class AvailabilityRow(BaseModel):
    id: str
    roster_member_id: str
    match_id: str | None = None
    event_id: str | None = None
    status: AvailabilityStatus

    @model_validator(mode="after")
    def check_single_reference(self) -> AvailabilityRow:
        if (self.match_id is None) == (self.event_id is None):
            raise ValueError("exactly one of match_id / event_id must be set")
        return self

    def to_record(self) -> AvailabilityRecord:
        if self.match_id is not None:
            occurrence_id, fk = self.match_id, MATCH_FK
        else:
            occurrence_id, fk = self.event_id, EVENT_FK
        return AvailabilityRecord(
            id=self.id,
            roster_member_id=self.roster_member_id,
            occurrence_id=occurrence_id,
            foreign_key=fk,
            status=self.status,
        )


def parse_availability(row: dict) -> AvailabilityRecord:
    """Validate an availability row, normalizing its dual foreign key."""
    try:
        return AvailabilityRow.model_validate(row).to_record()
    except pydantic.ValidationError as exc:
        raise ValidationError(
            f"Invalid availability row {row.get('id')!r}: {exc}"
        ) from exc


def parse_availability_rows(rows: list[dict]) -> list[AvailabilityRecord]:
    """Parse many rows, dropping (and logging) the ones that fail validation."""
    records: list[AvailabilityRecord] = []
    for row in rows:
        try:
            records.append(parse_availability(row))
        except ValidationError as exc:
            logger.warning("Skipping availability row: %s", exc)
    return records


# ---------------------------------------------------------------------------
# Teams and roster
# ---------------------------------------------------------------------------


class TeamRow(BaseModel):
    id: str
    name: str
    captain_id: str | None = None
    co_captain_id: str | None = None
    total_lines: int | None = None
    line_match_types: list[str] | None = None

    @field_validator("line_match_types", mode="before")
    @classmethod
    def parse_line_types(cls, v: str | list[str] | None) -> list[str] | None:
        # SQLite stores the list as a comma-separated string
        if isinstance(v, str):
            return [t.strip().lower() for t in v.split(",") if t.strip()]
        return v


def parse_team(row: dict) -> Team:
    try:
        parsed = TeamRow.model_validate(row)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid team row {row.get('id')!r}: {exc}") from exc
    return Team(**parsed.model_dump())


class RosterMemberRow(BaseModel):
    id: str
    team_id: str
    full_name: str = ""
    user_id: str | None = None
    role: str = "player"
    is_active: bool = True


def parse_roster_member(row: dict) -> RosterMember:
    try:
        parsed = RosterMemberRow.model_validate(row)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            f"Invalid roster row {row.get('id')!r}: {exc}"
        ) from exc
    return RosterMember(**parsed.model_dump())
