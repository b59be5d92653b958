"""Service calendars: weekly day patterns plus added/removed dates per service id."""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

from commuter_data.models.schemas import WEEKDAY_COLUMNS

EXCEPTION_ADDED = "1"
EXCEPTION_REMOVED = "2"


@dataclass(frozen=True)
class ServiceCalendar:
    days: tuple[int, ...] = ()  # ISO weekdays, Monday=1
    except_dates: tuple[str, ...] = ()  # YYYYMMDD, service removed
    also: tuple[str, ...] = ()  # YYYYMMDD, service added


@dataclass
class _CalendarBuilder:
    days: tuple[int, ...] = ()
    except_dates: list[str] = field(default_factory=list)
    also: list[str] = field(default_factory=list)

    def freeze(self) -> ServiceCalendar:
        return ServiceCalendar(
            days=self.days,
            except_dates=tuple(self.except_dates),
            also=tuple(self.also),
        )


def _days_from_flags(row: dict[str, str]) -> tuple[int, ...]:
    return tuple(i + 1 for i, col in enumerate(WEEKDAY_COLUMNS) if row.get(col, "").strip() == "1")


def build_service_calendars(
    calendar: pd.DataFrame,
    calendar_dates: pd.DataFrame,
) -> dict[str, ServiceCalendar]:
    """Resolve `calendar.txt` and `calendar_dates.txt` into one calendar per service id.

    Agencies that publish only `calendar_dates.txt` (NJ Transit, Metro-North) get
    calendars with no `days`, driven entirely by added/removed dates.
    """
    builders: dict[str, _CalendarBuilder] = {}

    for row in calendar.to_dict("records"):
        builders[row["service_id"]] = _CalendarBuilder(days=_days_from_flags(row))

    for row in calendar_dates.to_dict("records"):
        cal = builders.setdefault(row["service_id"], _CalendarBuilder())
        exception_type = row["exception_type"].strip()
        if exception_type == EXCEPTION_REMOVED:
            cal.except_dates.append(row["date"].strip())
        elif exception_type == EXCEPTION_ADDED:
            cal.also.append(row["date"].strip())

    return {sid: b.freeze() for sid, b in builders.items()}
