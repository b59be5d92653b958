"""Assemble the final commuter dataset: trips, hardcoded schedules, fares, labels, notes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from commuter_data.data_processing.trips import StopEvent, Trip
from commuter_data.models.corridor import CorridorConfig, FareTable

LOGGER = logging.getLogger(__name__)

LAST_UPDATED_KEY = "lastUpdated"

DEFAULT_NOTES: dict[str, str] = {
    "times": (
        "Times past 24:00 (e.g., 25:30) mean next calendar day (1:30 AM). "
        "Keep raw for computation."
    ),
    "fares": "Fares last verified {last_updated}. Check agency websites for current prices.",
}


def build_supplementary_trips(config: CorridorConfig) -> list[Trip]:
    """Trips for agencies with no downloadable feed (e.g. Shore Line East).

    Ids are `<agency>_<direction>_<n>`, numbered from 1 within each direction.
    """
    result: list[Trip] = []
    for agency in config.hardcoded:
        schedule = config.supplementary[agency]
        route_name = config.route_name(agency)
        for direction, leg in schedule.directions.items():
            for i, run in enumerate(leg.trips, start=1):
                result.append(
                    Trip(
                        id=f"{agency}_{direction}_{i}",
                        agency=agency,
                        route=route_name,
                        stops=(
                            StopEvent(station=leg.origin, departure=run.departure, sequence=1),
                            StopEvent(station=leg.destination, arrival=run.arrival, sequence=2),
                        ),
                        days=schedule.days,
                    )
                )
    return result


def build_fares(fare_table: FareTable) -> dict[str, Any]:
    """`{"ORIG->DEST": {...}, ..., "lastUpdated": "..."}`."""
    fares: dict[str, Any] = {pair: entry.to_dict() for pair, entry in fare_table.pairs.items()}
    fares[LAST_UPDATED_KEY] = fare_table.last_updated
    return fares


def build_notes(config: CorridorConfig, fare_table: FareTable) -> dict[str, str]:
    notes = {**config.notes}
    for key, text in DEFAULT_NOTES.items():
        notes.setdefault(key, text)
    return {k: v.format(last_updated=fare_table.last_updated) for k, v in notes.items()}


def format_generated_at(ts: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a `Z` suffix."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def assemble_dataset(
    trips: list[Trip],
    config: CorridorConfig,
    fare_table: FareTable,
    *,
    generated_at: datetime,
) -> dict[str, Any]:
    """Combine corridor trips with the hardcoded schedules and the static tables."""
    supplementary = build_supplementary_trips(config)
    LOGGER.info("%d hardcoded trips added (%s)", len(supplementary), ", ".join(config.hardcoded))

    return {
        "generatedAt": format_generated_at(generated_at),
        "trips": [t.to_dict() for t in [*trips, *supplementary]],
        "fares": build_fares(fare_table),
        "agencies": config.agency_labels(),
        "notes": build_notes(config, fare_table),
    }


def summarize_dataset(dataset: dict[str, Any]) -> dict[str, int]:
    """Headline counts for logging and checkpoints."""
    trips = dataset.get("trips", [])
    by_agency: dict[str, int] = {}
    for t in trips:
        by_agency[t["agency"]] = by_agency.get(t["agency"], 0) + 1
    return {
        "total_trips": len(trips),
        "agencies": len(dataset.get("agencies", {})),
        "fare_pairs": len([k for k in dataset.get("fares", {}) if k != LAST_UPDATED_KEY]),
        **{f"trips_{a}": n for a, n in by_agency.items()},
    }
