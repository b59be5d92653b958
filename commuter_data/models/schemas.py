"""Schema definitions for the GTFS tables the builder reads.

This module contains only:
- `TableSchema` (schema metadata container)
- concrete GTFS table schemas (`TRIPS`, `STOP_TIMES`, `CALENDAR`, `CALENDAR_DATES`)

Every column is read as a string; GTFS ids such as `"011958"` must keep their
leading zeros and times such as `"25:10:00"` are never parsed.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, Field

WEEKDAY_COLUMNS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class TableSchema(BaseModel):
    """A simple schema for a GTFS table loaded as a pandas DataFrame."""

    name: str
    filename: str
    required_columns: tuple[str, ...] = Field(default_factory=tuple)
    optional_columns: tuple[str, ...] = Field(default_factory=tuple)
    # pandas dtype strings; GTFS tables are kept as "string" throughout
    dtypes: Mapping[str, str] = Field(default_factory=dict)

    def columns(self) -> list[str]:
        """Required then optional columns, in declaration order."""
        return [*self.required_columns, *self.optional_columns]


def _string_dtypes(*columns: str) -> dict[str, str]:
    return {c: "string" for c in columns}


TRIPS = TableSchema(
    name="trips",
    filename="trips.txt",
    required_columns=("route_id", "service_id", "trip_id"),
    optional_columns=("trip_headsign", "trip_short_name", "direction_id"),
    dtypes=_string_dtypes(
        "route_id", "service_id", "trip_id", "trip_headsign", "trip_short_name", "direction_id"
    ),
)

STOP_TIMES = TableSchema(
    name="stop_times",
    filename="stop_times.txt",
    required_columns=("trip_id", "stop_id", "stop_sequence"),
    optional_columns=("arrival_time", "departure_time"),
    dtypes=_string_dtypes(
        "trip_id", "stop_id", "stop_sequence", "arrival_time", "departure_time"
    ),
)

CALENDAR = TableSchema(
    name="calendar",
    filename="calendar.txt",
    required_columns=("service_id",),
    # a missing day flag reads as "" (service does not run that day)
    optional_columns=WEEKDAY_COLUMNS,
    dtypes=_string_dtypes("service_id", *WEEKDAY_COLUMNS),
)

CALENDAR_DATES = TableSchema(
    name="calendar_dates",
    filename="calendar_dates.txt",
    required_columns=("service_id", "date", "exception_type"),
    dtypes=_string_dtypes("service_id", "date", "exception_type"),
)

FEED_TABLES: tuple[TableSchema, ...] = (TRIPS, STOP_TIMES, CALENDAR, CALENDAR_DATES)
