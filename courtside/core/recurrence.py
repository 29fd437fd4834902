"""
Courtside — Recurrence Date Generator.

Expands a recurrence rule into the ordered list of dates it covers.
Pure: no I/O and no clock reads; the origin date is the only anchor.

Stepping rules:
    daily   -> +1 day
    weekly  -> +7 days
    custom  -> +interval × time_unit (day, week, month or year)

The k-th date is computed as ``origin + k × step`` with
``dateutil.relativedelta``, which clamps to the last valid day of the
target month: Jan 31 + 1 month is Feb 29 in 2024 (Feb 28 otherwise), and the
following date is Mar 31 again rather than drifting to Mar 29.

Every branch stops after MAX_ITERATIONS steps. Hitting the ceiling
truncates the series; it is not an error.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date

from dateutil.relativedelta import relativedelta

from courtside.core.errors import ValidationError
from courtside.data.models import (
    CustomRecurrence,
    Occurrence,
    RecurrenceEndType,
    RecurrencePattern,
    RecurrenceSeries,
    TimeUnit,
)

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000
UNBOUNDED_HORIZON = relativedelta(years=2)


def validate_recurrence(
    origin: date,
    pattern: RecurrencePattern | str,
    end_type: RecurrenceEndType | str,
    end_date: date | None = None,
    occurrences: int | None = None,
    custom: CustomRecurrence | None = None,
) -> None:
    """Reject malformed recurrence configuration.

    Raises:
        ValidationError: With a message naming the first problem found.
    """
    try:
        pattern = RecurrencePattern(pattern)
    except ValueError:
        raise ValidationError(f"Unknown recurrence pattern: {pattern!r}") from None
    try:
        end_type = RecurrenceEndType(end_type)
    except ValueError:
        raise ValidationError(f"Unknown recurrence end type: {end_type!r}") from None

    if pattern is RecurrencePattern.CUSTOM:
        if custom is None:
            raise ValidationError("Custom recurrence pattern requires custom data")
        try:
            TimeUnit(custom.time_unit)
        except ValueError:
            raise ValidationError(f"Unknown time unit: {custom.time_unit!r}") from None
        if not isinstance(custom.interval, int) or custom.interval < 1:
            raise ValidationError("Interval must be at least 1")
        bad_days = [d for d in custom.weekdays if not 0 <= d <= 6]
        if bad_days:
            raise ValidationError(f"Weekdays must be 0-6, got {sorted(bad_days)}")

    if end_type is RecurrenceEndType.DATE:
        if end_date is None:
            raise ValidationError("End date is required when ending on a specific date")
        if end_date < origin:
            raise ValidationError("End date cannot be before the start date")

    if end_type is RecurrenceEndType.OCCURRENCES:
        if occurrences is None or occurrences < 1:
            raise ValidationError("Number of occurrences must be at least 1")


def _step(pattern: RecurrencePattern, custom: CustomRecurrence | None) -> relativedelta:
    if pattern is RecurrencePattern.DAILY:
        return relativedelta(days=1)
    if pattern is RecurrencePattern.WEEKLY:
        return relativedelta(weeks=1)

    interval = custom.interval
    unit = TimeUnit(custom.time_unit)
    if unit is TimeUnit.DAY:
        return relativedelta(days=interval)
    if unit is TimeUnit.WEEK:
        return relativedelta(weeks=interval)
    if unit is TimeUnit.MONTH:
        return relativedelta(months=interval)
    return relativedelta(years=interval)


def generate_dates(
    origin: date,
    pattern: RecurrencePattern | str,
    end_type: RecurrenceEndType | str,
    end_date: date | None = None,
    occurrences: int | None = None,
    custom: CustomRecurrence | None = None,
) -> list[date]:
    """Return the dates covered by a recurrence rule, origin first.

    Args:
        origin: First date of the series; always the first element.
        pattern: daily, weekly or custom.
        end_type: date (stop after end_date), occurrences (exactly N dates)
            or never (two years from origin).
        end_date: Inclusive last date for end_type=date.
        occurrences: Total number of dates for end_type=occurrences.
        custom: Interval and unit for pattern=custom. Its weekday set is
            kept with the series but does not add or filter dates.

    Returns:
        Strictly increasing, duplicate-free list of dates.

    Raises:
        ValidationError: The configuration is malformed (see
            validate_recurrence).
    """
    validate_recurrence(origin, pattern, end_type, end_date, occurrences, custom)
    pattern = RecurrencePattern(pattern)
    end_type = RecurrenceEndType(end_type)

    if custom is not None and custom.weekdays and pattern is RecurrencePattern.CUSTOM:
        logger.debug(
            "Weekday set %s recorded but not applied to date generation",
            sorted(custom.weekdays),
        )

    step = _step(pattern, custom)
    if end_type is RecurrenceEndType.DATE:
        limit = end_date
    elif end_type is RecurrenceEndType.NEVER:
        limit = origin + UNBOUNDED_HORIZON
    else:
        limit = None

    dates = [origin]
    k = 0
    while k < MAX_ITERATIONS:
        if limit is None and len(dates) >= occurrences:
            break
        k += 1
        current = origin + step * k
        if limit is not None and current > limit:
            break
        dates.append(current)
    else:
        if limit is None:
            truncated = len(dates) < occurrences
        else:
            truncated = origin + step * (k + 1) <= limit
        if truncated:
            logger.debug(
                "Recurrence from %s truncated at %d steps", origin, MAX_ITERATIONS
            )

    return dates


def generate_series_dates(series: RecurrenceSeries) -> list[date]:
    """generate_dates() for a stored RecurrenceSeries."""
    return generate_dates(
        series.origin,
        series.pattern,
        series.end_type,
        end_date=series.end_date,
        occurrences=series.occurrences,
        custom=series.custom,
    )


def expand_series(series: RecurrenceSeries, template: Occurrence) -> list[Occurrence]:
    """Materialize one occurrence per date of the series.

    The first occurrence keeps the template's id; later ones get
    "<template id>:<iso date>". Matches carry no series link, so only
    events and personal activities get `recurrence_series_id` set.
    """
    expanded: list[Occurrence] = []
    for i, day in enumerate(generate_series_dates(series)):
        changes: dict = {
            "date": day,
            "id": template.id if i == 0 else f"{template.id}:{day.isoformat()}",
        }
        if hasattr(template, "recurrence_series_id"):
            changes["recurrence_series_id"] = series.id
        expanded.append(dataclasses.replace(template, **changes))
    return expanded
