"""End-to-end transform: decoded feeds in, consolidated dataset out.

Stages run as a chain of pure functions in a fixed order:
extract -> infer days -> merge duplicates -> compact calendars -> assemble.
No I/O happens here; `commuter_data.core.data_loaders` supplies the decoded feeds.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from commuter_data.data_processing.calendar import build_service_calendars
from commuter_data.data_processing.dataset import assemble_dataset, summarize_dataset
from commuter_data.data_processing.day_inference import infer_service_days
from commuter_data.data_processing.merge import compact_calendars, merge_duplicate_trips
from commuter_data.data_processing.stops import build_stop_lookup
from commuter_data.data_processing.trips import Trip, extract_trips
from commuter_data.io.compressed import FeedTables
from commuter_data.models.corridor import CorridorConfig, FareTable

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildSummary:
    trips_by_agency: dict[str, int] = field(default_factory=dict)
    extracted: int = 0
    unique: int = 0
    compacted: int = 0
    dataset: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            **{f"extracted_{a}": n for a, n in self.trips_by_agency.items()},
            "extracted": self.extracted,
            "unique": self.unique,
            "compacted": self.compacted,
            **self.dataset,
        }


def process_agency(
    agency: str,
    tables: FeedTables,
    config: CorridorConfig,
    stop_lookup: Mapping[str, dict[str, str]],
) -> list[Trip]:
    """Extract one agency's corridor trips and infer missing weekly patterns."""
    LOGGER.info("Processing %s...", agency)
    calendars = build_service_calendars(tables.calendar, tables.calendar_dates)
    trips = extract_trips(agency, tables, stop_lookup.get(agency, {}), calendars, config)
    return infer_service_days(trips)


def build_corridor_trips(
    feeds: Mapping[str, FeedTables],
    config: CorridorConfig,
) -> tuple[list[Trip], BuildSummary]:
    """Run extract/infer per agency (configuration order), then merge and compact."""
    stop_lookup = build_stop_lookup(config)

    all_trips: list[Trip] = []
    by_agency: dict[str, int] = {}
    for agency in config.feed_agencies():
        tables = feeds.get(agency)
        if tables is None:
            raise KeyError(f"No decoded feed supplied for agency {agency!r}")
        trips = process_agency(agency, tables, config, stop_lookup)
        by_agency[agency] = len(trips)
        all_trips.extend(trips)

    unique = merge_duplicate_trips(all_trips)
    compacted, n_compacted = compact_calendars(unique)
    summary = BuildSummary(
        trips_by_agency=by_agency,
        extracted=len(all_trips),
        unique=len(unique),
        compacted=n_compacted,
    )
    return compacted, summary


def build_commuter_dataset(
    feeds: Mapping[str, FeedTables],
    config: CorridorConfig,
    fare_table: FareTable,
    *,
    generated_at: datetime,
) -> tuple[dict[str, Any], BuildSummary]:
    """Build the full dataset from decoded feeds. Deterministic given its inputs."""
    trips, summary = build_corridor_trips(feeds, config)
    dataset = assemble_dataset(trips, config, fare_table, generated_at=generated_at)
    counts = summarize_dataset(dataset)
    LOGGER.info(
        "%d total trips across %d agencies; %d fare pairs",
        counts["total_trips"],
        counts["agencies"],
        counts["fare_pairs"],
    )
    return dataset, replace(summary, dataset=counts)
