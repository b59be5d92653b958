from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from commuter_data.data_processing.dataset import (
    assemble_dataset,
    build_fares,
    build_notes,
    build_supplementary_trips,
    format_generated_at,
    summarize_dataset,
)
from commuter_data.data_processing.trips import StopEvent, Trip
from commuter_data.models.corridor import FareEntry, FareTable


@pytest.fixture
def fare_table() -> FareTable:
    return FareTable.model_validate(
        {
            "last_updated": "2026-02",
            "pairs": {
                "WAS->BAL": {"fare": 9, "agency": "marc"},
                "NWK->NYP": {"peak": 7.5, "offPeak": 5.5, "agency": "njt"},
            },
        }
    )


def test_supplementary_ids_and_stops(corridor_config) -> None:
    trips = build_supplementary_trips(corridor_config)

    assert [t.id for t in trips] == ["sle_wb_1", "sle_wb_2", "sle_eb_1"]
    assert all(t.days == (1, 2, 3, 4, 5) for t in trips)
    assert trips[0].to_dict() == {
        "id": "sle_wb_1",
        "agency": "sle",
        "route": "Shore Line East",
        "stops": [{"s": "NLC", "d": "05:26"}, {"s": "NHV", "a": "06:16"}],
        "days": [1, 2, 3, 4, 5],
    }


def test_fares_keep_shape_and_last_updated(fare_table) -> None:
    fares = build_fares(fare_table)

    assert fares == {
        "WAS->BAL": {"fare": 9, "agency": "marc"},
        "NWK->NYP": {"peak": 7.5, "offPeak": 5.5, "agency": "njt"},
        "lastUpdated": "2026-02",
    }


@pytest.mark.parametrize(
    "entry",
    [
        {"agency": "marc"},
        {"fare": 5, "peak": 6, "offPeak": 4, "agency": "marc"},
        {"peak": 6, "agency": "njt"},
    ],
)
def test_fare_entry_needs_exactly_one_shape(entry) -> None:
    with pytest.raises(ValidationError):
        FareEntry.model_validate(entry)


def test_fare_keys_must_be_station_pairs() -> None:
    with pytest.raises(ValidationError):
        FareTable.model_validate(
            {"last_updated": "2026-02", "pairs": {"was-bal": {"fare": 9, "agency": "marc"}}}
        )


def test_notes_fill_defaults_and_last_updated(corridor_config, fare_table) -> None:
    notes = build_notes(corridor_config, fare_table)

    assert notes["sle"].startswith("Shore Line East")
    assert "next calendar day" in notes["times"]
    assert "2026-02" in notes["fares"]


def test_generated_at_is_utc_with_millis() -> None:
    ts = datetime(2026, 2, 3, 9, 30, 15, 123456, tzinfo=timezone(timedelta(hours=-5)))
    assert format_generated_at(ts) == "2026-02-03T14:30:15.123Z"


def test_assembled_dataset_layout(corridor_config, fare_table) -> None:
    trip = Trip(
        id="marc_T1",
        agency="marc",
        route="Penn Line",
        stops=(StopEvent("WAS", departure="06:05"), StopEvent("BAL", arrival="06:45")),
        days=(1, 2, 3, 4, 5),
    )
    dataset = assemble_dataset(
        [trip], corridor_config, fare_table, generated_at=datetime(2026, 2, 3, tzinfo=timezone.utc)
    )

    assert list(dataset) == ["generatedAt", "trips", "fares", "agencies", "notes"]
    assert dataset["generatedAt"] == "2026-02-03T00:00:00.000Z"
    assert [t["id"] for t in dataset["trips"]] == ["marc_T1", "sle_wb_1", "sle_wb_2", "sle_eb_1"]
    assert dataset["agencies"] == {
        "marc": "MARC Penn Line",
        "njt": "NJ Transit NEC",
        "sle": "Shore Line East",
    }
    assert summarize_dataset(dataset) == {
        "total_trips": 4,
        "agencies": 3,
        "fare_pairs": 2,
        "trips_marc": 1,
        "trips_sle": 3,
    }
