"""Extract corridor trips from one agency's GTFS tables.

Design goals:
- Keep only trips on the agency's corridor routes that touch >= 2 corridor stations.
- Times stay opaque `HH:MM` strings; values past 24:00 (next service day) are kept as-is.
- Output order follows each trip's first appearance in `stop_times.txt`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

import pandas as pd

from commuter_data.data_processing.calendar import ServiceCalendar
from commuter_data.data_processing.stops import StopMapping
from commuter_data.io.compressed import FeedTables
from commuter_data.models.corridor import CorridorConfig

LOGGER = logging.getLogger(__name__)

MIN_CORRIDOR_STOPS = 2


@dataclass(frozen=True)
class StopEvent:
    station: str
    arrival: str | None = None
    departure: str | None = None
    sequence: int = 0

    def to_dict(self) -> dict[str, str]:
        out = {"s": self.station}
        if self.arrival:
            out["a"] = self.arrival
        if self.departure:
            out["d"] = self.departure
        return out


@dataclass(frozen=True)
class Trip:
    """One scheduled train. Empty tuples / None mean the field is absent."""

    id: str
    agency: str
    route: str
    stops: tuple[StopEvent, ...]
    train_num: str | None = None
    days: tuple[int, ...] = ()
    except_dates: tuple[str, ...] = ()
    also: tuple[str, ...] = ()
    valid_from: str | None = None
    valid_until: str | None = None

    def content_key(self) -> str:
        """Agency plus the station/arrival/departure sequence; equal keys mean the same train."""
        legs = ",".join(f"{s.station}:{s.arrival or ''}:{s.departure or ''}" for s in self.stops)
        return f"{self.agency}|{legs}"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "agency": self.agency, "route": self.route}
        if self.train_num:
            out["trainNum"] = self.train_num
        out["stops"] = [s.to_dict() for s in self.stops]
        if self.days:
            out["days"] = list(self.days)
        if self.except_dates:
            out["except"] = list(self.except_dates)
        if self.also:
            out["also"] = list(self.also)
        if self.valid_from:
            out["validFrom"] = self.valid_from
        if self.valid_until:
            out["validUntil"] = self.valid_until
        return out


def format_time(value: Any) -> str | None:
    """Truncate a GTFS time to `HH:MM`, never wrapping hours >= 24.

    >>> format_time("25:07:00")
    '25:07'
    >>> format_time("6:05:00")
    '06:05'
    """
    if value is None or pd.isna(value):
        return None
    v = str(value).strip()
    if not v:
        return None
    hours, _, rest = v.partition(":")
    if not hours.isdigit() or not rest:
        return v[:5]
    return f"{int(hours):02d}:{rest[:2]}"


def _corridor_trip_meta(
    trips: pd.DataFrame, route_ids: frozenset[str]
) -> dict[str, dict[str, str]]:
    corridor = trips[trips["route_id"].isin(route_ids)]
    # a repeated trip_id keeps its last row
    return {row["trip_id"]: row for row in corridor.to_dict("records")}


def _corridor_stop_times(
    stop_times: pd.DataFrame, trip_ids: set[str], stop_lookup: StopMapping
) -> pd.DataFrame:
    st = stop_times[stop_times["trip_id"].isin(trip_ids)].copy()
    st["station"] = st["stop_id"].map(stop_lookup)
    st["seq"] = pd.to_numeric(st["stop_sequence"], errors="coerce")
    bad_seq = st["station"].notna() & st["seq"].isna()
    if bad_seq.any():
        LOGGER.warning(
            "Dropping %d stop_times rows with a non-numeric stop_sequence", int(bad_seq.sum())
        )
    st = st[st["station"].notna() & st["seq"].notna()]
    return st.drop_duplicates(["trip_id", "seq"], keep="first")


def _stop_events(group: pd.DataFrame) -> tuple[StopEvent, ...]:
    ordered = group.sort_values("seq", kind="mergesort")
    stops = [
        StopEvent(
            station=str(r.station),
            arrival=format_time(r.arrival_time),
            departure=format_time(r.departure_time),
            sequence=int(r.seq),
        )
        for r in ordered.itertuples(index=False)
    ]
    # boarding-only origin, alighting-only destination
    stops[0] = replace(stops[0], arrival=None)
    stops[-1] = replace(stops[-1], departure=None)
    return tuple(stops)


def extract_trips(
    agency: str,
    tables: FeedTables,
    stop_lookup: StopMapping,
    calendars: dict[str, ServiceCalendar],
    config: CorridorConfig,
) -> list[Trip]:
    """Filter one agency's feed down to corridor trips with calendar data attached.

    A trip whose service id has no calendar is still emitted, without calendar fields.
    """
    meta = _corridor_trip_meta(tables.trips, config.route_ids(agency))
    LOGGER.info("%s: %d NEC trips found", agency, len(meta))

    st = _corridor_stop_times(tables.stop_times, set(meta), stop_lookup)
    route_name = config.route_name(agency)

    result: list[Trip] = []
    for trip_id, group in st.groupby("trip_id", sort=False):
        if len(group) < MIN_CORRIDOR_STOPS:
            continue
        row = meta[trip_id]
        cal = calendars.get(row["service_id"])
        result.append(
            Trip(
                id=f"{agency}_{trip_id}",
                agency=agency,
                route=route_name,
                stops=_stop_events(group),
                train_num=(row.get("trip_short_name") or "").strip() or None,
                days=cal.days if cal else (),
                except_dates=cal.except_dates if cal else (),
                also=cal.also if cal else (),
            )
        )

    LOGGER.info("%s: %d trips with 2+ NEC stops", agency, len(result))
    return result
