from __future__ import annotations

import logging

import pytest

from commuter_data.data_processing.calendar import build_service_calendars
from commuter_data.data_processing.stops import build_stop_lookup
from commuter_data.data_processing.trips import StopEvent, Trip, extract_trips, format_time

TRIPS_CSV = (
    "route_id,service_id,trip_id,trip_short_name\n"
    "11705,WKDY,T1,401\n"
    "11705,WKDY,T2,402\n"
    "99,WKDY,T3,999\n"
    "11705,NOCAL,T4,\n"
)

STOP_TIMES_CSV = (
    "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
    "T4,7:05:00,7:05:00,100,1\n"
    "T4,07:50:00,07:51:00,111,2\n"
    "T1,06:45:00,06:46:00,110,3\n"
    "T1,06:00:00,06:05:00,100,1\n"
    "T1,06:20:00,06:21:00,999,2\n"
    "T1,25:10:00,25:12:00,120,5\n"
    "T2,08:00:00,08:01:00,100,1\n"
    "T2,08:20:00,08:21:00,999,2\n"
    "T3,09:00:00,09:01:00,100,1\n"
    "T3,09:40:00,09:41:00,110,2\n"
)

CALENDAR_CSV = (
    "service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday\n"
    "WKDY,1,1,1,1,1,0,0\n"
)


def _extract(corridor_config, tables):
    return extract_trips(
        "marc",
        tables,
        build_stop_lookup(corridor_config)["marc"],
        build_service_calendars(tables.calendar, tables.calendar_dates),
        corridor_config,
    )


@pytest.fixture
def marc_trips(corridor_config, decode_tables) -> list[Trip]:
    tables = decode_tables(trips=TRIPS_CSV, stop_times=STOP_TIMES_CSV, calendar=CALENDAR_CSV)
    return _extract(corridor_config, tables)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("06:05:00", "06:05"),
        ("6:05:00", "06:05"),
        ("25:30:00", "25:30"),
        ("", None),
        (None, None),
    ],
)
def test_format_time(raw, expected) -> None:
    assert format_time(raw) == expected


def test_only_corridor_trips_with_two_stops_in_first_seen_order(marc_trips) -> None:
    assert [t.id for t in marc_trips] == ["marc_T4", "marc_T1"]


def test_stops_sorted_by_sequence_with_endpoints_stripped(marc_trips) -> None:
    t1 = next(t for t in marc_trips if t.id == "marc_T1")

    assert t1.stops == (
        StopEvent(station="WAS", departure="06:05", sequence=1),
        StopEvent(station="BAL", arrival="06:45", departure="06:46", sequence=3),
        StopEvent(station="PVL", arrival="25:10", sequence=5),
    )
    assert t1.to_dict()["stops"] == [
        {"s": "WAS", "d": "06:05"},
        {"s": "BAL", "a": "06:45", "d": "06:46"},
        {"s": "PVL", "a": "25:10"},
    ]


def test_trip_fields_from_feed_and_calendar(marc_trips) -> None:
    t1 = next(t for t in marc_trips if t.id == "marc_T1")

    assert t1.agency == "marc"
    assert t1.route == "Penn Line"
    assert t1.train_num == "401"
    assert t1.days == (1, 2, 3, 4, 5)


def test_trip_without_calendar_is_kept_without_calendar_fields(marc_trips) -> None:
    t4 = next(t for t in marc_trips if t.id == "marc_T4")

    assert t4.days == () and t4.except_dates == () and t4.also == ()
    assert t4.train_num is None
    assert t4.stops[0] == StopEvent(station="WAS", departure="07:05", sequence=1)
    assert set(t4.to_dict()) == {"id", "agency", "route", "stops"}


def test_non_numeric_stop_sequence_rows_are_dropped(corridor_config, decode_tables, caplog) -> None:
    tables = decode_tables(
        trips="route_id,service_id,trip_id\n11705,WKDY,T1\n",
        stop_times=(
            "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
            "T1,06:00:00,06:05:00,100,1\n"
            "T1,06:45:00,06:46:00,110,x\n"
            "T1,07:10:00,07:11:00,120,3\n"
        ),
    )
    with caplog.at_level(logging.WARNING):
        trips = _extract(corridor_config, tables)

    assert [s.station for s in trips[0].stops] == ["WAS", "PVL"]
    assert "non-numeric stop_sequence" in caplog.text


def test_stop_sequence_sorts_numerically(corridor_config, decode_tables) -> None:
    tables = decode_tables(
        trips="route_id,service_id,trip_id\n11705,WKDY,T1\n",
        stop_times=(
            "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
            "T1,07:10:00,07:11:00,120,10\n"
            "T1,06:00:00,06:05:00,100,9\n"
        ),
    )
    trips = _extract(corridor_config, tables)

    assert [s.station for s in trips[0].stops] == ["WAS", "PVL"]


def test_content_key_ignores_ids_and_calendars() -> None:
    stops = (StopEvent("WAS", departure="06:05"), StopEvent("BAL", arrival="06:45"))
    a = Trip(id="marc_A", agency="marc", route="Penn Line", stops=stops, days=(1,))
    b = Trip(id="marc_B", agency="marc", route="Penn Line", stops=stops, also=("20260105",))
    c = Trip(id="njt_C", agency="njt", route="Penn Line", stops=stops)

    assert a.content_key() == b.content_key() == "marc|WAS::06:05,BAL:06:45:"
    assert a.content_key() != c.content_key()


def test_repeated_stop_sequence_keeps_first_row(corridor_config, decode_tables) -> None:
    tables = decode_tables(
        trips="route_id,service_id,trip_id\n11705,WKDY,T1\n",
        stop_times=(
            "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
            "T1,06:00:00,06:05:00,100,1\n"
            "T1,06:45:00,06:46:00,110,2\n"
            "T1,06:47:00,06:48:00,110,2\n"
            "T1,07:10:00,07:11:00,120,3\n"
        ),
    )
    trips = _extract(corridor_config, tables)

    assert [(s.station, s.arrival) for s in trips[0].stops] == [
        ("WAS", None),
        ("BAL", "06:45"),
        ("PVL", "07:10"),
    ]
