"""Infer weekly service days for trips whose feed only lists explicit dates.

NJ Transit and Metro-North publish `calendar_dates.txt` without `calendar.txt`, so
their trips arrive with added dates (`also`) but no day-of-week pattern. We tally
the weekdays of those dates and keep the ones that recur often enough.

The estimate is a heuristic: it assumes roughly five service dates per week and
accepts a weekday seen in at least 30% of the estimated weeks. Irregular
schedules can gain or lose a day.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import replace
from datetime import date
from fractions import Fraction

from commuter_data.data_processing.trips import Trip

DATES_PER_WEEK = 5
MIN_WEEK_SHARE = Fraction(3, 10)


def iso_weekday(yyyymmdd: str) -> int:
    """Day of week for a YYYYMMDD date, Monday=1 .. Sunday=7."""
    return date(int(yyyymmdd[0:4]), int(yyyymmdd[4:6]), int(yyyymmdd[6:8])).isoweekday()


def infer_days(dates: Iterable[str]) -> tuple[int, ...]:
    """Return the weekdays that recur in `dates` (empty if there are no dates)."""
    dates = list(dates)
    if not dates:
        return ()
    counts = Counter(iso_weekday(d) for d in dates)
    weeks = max(Fraction(1), Fraction(len(dates), DATES_PER_WEEK))
    threshold = weeks * MIN_WEEK_SHARE
    return tuple(day for day in range(1, 8) if counts[day] >= threshold)


def infer_service_days(trips: list[Trip]) -> list[Trip]:
    """Fill `days` for trips that have added dates but no weekly pattern.

    `also` is left as-is; it is collapsed into a validity window after merging.
    """
    out: list[Trip] = []
    for trip in trips:
        if trip.days or not trip.also:
            out.append(trip)
            continue
        days = infer_days(trip.also)
        out.append(replace(trip, days=days) if days else trip)
    return out
