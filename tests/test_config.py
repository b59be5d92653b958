from __future__ import annotations

import pytest
from pydantic import ValidationError

from commuter_data.core.config import get_paths
from commuter_data.data_processing.stops import build_stop_lookup
from commuter_data.io import load_corridor_config, load_fare_table
from commuter_data.models.corridor import CorridorConfig


@pytest.fixture(scope="module")
def shipped():
    paths = get_paths()
    return load_corridor_config(paths.corridor_config), load_fare_table(paths.fares_config)


def test_shipped_corridor_config(shipped) -> None:
    config, _ = shipped

    assert config.feed_agencies() == ["marc", "septa", "njt", "mnr"]
    assert config.agencies["septa"].nested_archive == "google_rail.zip"
    assert config.route_ids("septa") == frozenset({"WIL", "TRE"})
    sle = config.supplementary["sle"]
    assert len(sle.directions["wb"].trips) == 11
    assert len(sle.directions["eb"].trips) == 11


def test_shipped_stop_ids_are_strings(shipped) -> None:
    config, _ = shipped
    lookup = build_stop_lookup(config)

    assert lookup["marc"]["11988"] == "NCR"
    assert lookup["marc"]["11989"] == "NCR"
    assert lookup["njt"]["148"] == "TRE"
    assert lookup["septa"]["90701"] == "TRE"
    assert lookup["mnr"]["1"] == "GCT"


def test_fare_pairs_name_known_stations(shipped) -> None:
    config, fares = shipped
    known = set(config.stations)
    for schedule in config.supplementary.values():
        for direction in schedule.directions.values():
            known |= {direction.origin, direction.destination}

    for pair, entry in fares.pairs.items():
        origin, dest = pair.split("->")
        assert {origin, dest} <= known, pair
        assert entry.agency in config.agencies
    assert len(fares.pairs) == 33


def test_unknown_agency_in_station_table_rejected() -> None:
    with pytest.raises(ValidationError, match="unknown agencies"):
        CorridorConfig.model_validate(
            {
                "stations": {"WAS": {"amtrak": "1"}},
                "agencies": {"marc": {"label": "MARC", "route_name": "Penn Line"}},
            }
        )


def test_hardcoded_agency_needs_schedule() -> None:
    with pytest.raises(ValidationError, match="supplementary"):
        CorridorConfig.model_validate(
            {
                "stations": {},
                "agencies": {"sle": {"label": "SLE", "route_name": "Shore Line East"}},
                "hardcoded": ["sle"],
            }
        )


def test_feed_urls_skip_hardcoded_and_feedless_agencies(corridor_config) -> None:
    assert corridor_config.feed_urls() == {
        "marc": "https://example.test/marc.zip",
        "njt": "https://example.test/njt.zip",
    }
    assert corridor_config.feed_agencies() == ["marc", "njt"]
