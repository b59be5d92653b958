from __future__ import annotations

import io
import zipfile
from collections.abc import Callable, Mapping

import pytest

from commuter_data.io.compressed import FeedTables, open_feed_archive, read_feed_tables
from commuter_data.models.corridor import CorridorConfig


def make_zip(members: Mapping[str, str | bytes]) -> bytes:
    """Build an in-memory zip from {member name: text or bytes}."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, contents in members.items():
            zf.writestr(name, contents)
    return buf.getvalue()


def tables_from_csv(**tables: str) -> FeedTables:
    """Decode GTFS tables given as CSV text, e.g. `trips="route_id,...\\n..."`."""
    payload = make_zip({f"{name}.txt": text for name, text in tables.items()})
    with open_feed_archive(payload) as zf:
        return read_feed_tables(zf)


@pytest.fixture
def gtfs_zip() -> Callable[[Mapping[str, str | bytes]], bytes]:
    return make_zip


@pytest.fixture
def decode_tables() -> Callable[..., FeedTables]:
    return tables_from_csv


@pytest.fixture
def corridor_config() -> CorridorConfig:
    """A trimmed corridor: two feed agencies plus one hardcoded agency."""
    return CorridorConfig.model_validate(
        {
            "stations": {
                "WAS": {"marc": {"sb": "100", "nb": "100"}},
                "BAL": {"marc": {"sb": "110", "nb": "111"}},
                "PVL": {"marc": {"sb": "120", "nb": "121"}},
                "TRE": {"njt": "148"},
                "NWK": {"njt": "107"},
                "NYP": {"njt": "105"},
            },
            "agencies": {
                "marc": {
                    "label": "MARC Penn Line",
                    "route_name": "Penn Line",
                    "feed_url": "https://example.test/marc.zip",
                    "routes": ["11705"],
                },
                "njt": {
                    "label": "NJ Transit NEC",
                    "route_name": "Northeast Corridor",
                    "feed_url": "https://example.test/njt.zip",
                    "routes": ["9"],
                },
                "sle": {"label": "Shore Line East", "route_name": "Shore Line East"},
            },
            "hardcoded": ["sle"],
            "supplementary": {
                "sle": {
                    "days": [1, 2, 3, 4, 5],
                    "directions": {
                        "wb": {
                            "origin": "NLC",
                            "destination": "NHV",
                            "trips": [
                                {"departure": "05:26", "arrival": "06:16"},
                                {"departure": "06:05", "arrival": "06:55"},
                            ],
                        },
                        "eb": {
                            "origin": "NHV",
                            "destination": "NLC",
                            "trips": [{"departure": "06:20", "arrival": "07:10"}],
                        },
                    },
                }
            },
            "notes": {"sle": "Shore Line East schedules are hardcoded approximations."},
        }
    )
