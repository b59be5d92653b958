"""Pydantic models and dataframe schema validators.

These are contracts at the pipeline boundaries:
- GTFS tables are validated as they are decoded from a feed archive.
- The corridor configuration and fare table are validated as they are loaded.
- Transform logic lives in `commuter_data/data_processing/` as pure functions.
"""

from __future__ import annotations

from commuter_data.models.corridor import (
    AgencyConfig,
    CorridorConfig,
    DirectionalStop,
    FareEntry,
    FareTable,
    SupplementaryDirection,
    SupplementaryRun,
    SupplementarySchedule,
)
from commuter_data.models.schemas import (
    CALENDAR,
    CALENDAR_DATES,
    FEED_TABLES,
    STOP_TIMES,
    TRIPS,
    TableSchema,
)
from commuter_data.models.validate import empty_frame, validate_df

__all__ = [
    "TableSchema",
    "validate_df",
    "empty_frame",
    "TRIPS",
    "STOP_TIMES",
    "CALENDAR",
    "CALENDAR_DATES",
    "FEED_TABLES",
    "AgencyConfig",
    "CorridorConfig",
    "DirectionalStop",
    "FareEntry",
    "FareTable",
    "SupplementaryDirection",
    "SupplementaryRun",
    "SupplementarySchedule",
]
