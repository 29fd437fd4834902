"""
Courtside — Capacity Calculator.

How many responders an occurrence needs:
    match            -> sum over line slots (singles 1, doubles/mixed 2)
    practice event   -> the whole active roster
    anything else    -> 1 (a presence signal, not a capacity target)
"""

from __future__ import annotations

import logging

from courtside.core.errors import ValidationError
from courtside.data.models import LineConfig, Occurrence, OccurrenceKind

logger = logging.getLogger(__name__)

SLOT_SIZES = {"singles": 1, "doubles": 2, "mixed": 2}
PAD_TYPE = "doubles"


def _line_count(line_config: LineConfig) -> int:
    if line_config.line_count is None:
        from courtside.config import settings
        return settings.DEFAULT_LINE_COUNT
    if line_config.line_count < 0:
        raise ValidationError(f"Line count cannot be negative: {line_config.line_count}")
    return line_config.line_count


def line_slots(line_config: LineConfig) -> list[str]:
    """Match type per line, padded with doubles / truncated to the line count.

    Unknown types are read as doubles.
    """
    count = _line_count(line_config)
    slots: list[str] = []
    for raw in line_config.line_match_types[:count]:
        kind = str(raw).strip().lower()
        if kind not in SLOT_SIZES:
            logger.debug("Unknown line match type %r, treating as doubles", raw)
            kind = PAD_TYPE
        slots.append(kind)
    slots.extend([PAD_TYPE] * (count - len(slots)))
    return slots


def required_responders(
    occurrence: Occurrence,
    line_config: LineConfig | None = None,
    active_roster_size: int = 0,
) -> int:
    """Number of members needed to fill the occurrence."""
    if occurrence.kind is OccurrenceKind.MATCH:
        config = line_config or LineConfig()
        if not config.line_match_types:
            return _line_count(config) * 2
        return sum(SLOT_SIZES[slot] for slot in line_slots(config))

    if occurrence.kind is OccurrenceKind.EVENT and occurrence.category == "practice":
        return max(active_roster_size, 0)

    return 1
