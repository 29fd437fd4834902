"""
Courtside — Default weekly availability.

Members may keep a weekly template of 30-minute slots they are usually free
("Monday" -> ["18:00", "18:30", ...]). A new occurrence with no explicit
response can be pre-filled from it.
"""

from __future__ import annotations

from courtside.data.models import AvailabilityStatus, Occurrence

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def time_slots(start_hour: int, end_hour: int) -> list[str]:
    """Half-hour slots from start_hour:00 through end_hour:00 inclusive."""
    slots: list[str] = []
    for hour in range(start_hour, end_hour + 1):
        slots.append(f"{hour:02d}:00")
        if hour < end_hour:
            slots.append(f"{hour:02d}:30")
    return slots


def all_day_defaults() -> dict[str, list[str]]:
    """Template meaning "available anytime" (06:00–22:00 every day)."""
    slots = time_slots(6, 22)
    return {day: list(slots) for day in DAY_NAMES}


def default_status(
    occurrence: Occurrence, weekly_defaults: dict[str, list[str]] | None
) -> AvailabilityStatus:
    """Status implied by a weekly template for one occurrence.

    No template at all means the member is available anytime. Otherwise the
    occurrence's start time must be one of the slots listed for its weekday.
    """
    if not weekly_defaults:
        return AvailabilityStatus.AVAILABLE
    day = DAY_NAMES[occurrence.date.weekday()]
    if occurrence.time in weekly_defaults.get(day, []):
        return AvailabilityStatus.AVAILABLE
    return AvailabilityStatus.UNAVAILABLE
