"""Deduplicate trips published under several service ids, then compact their calendars."""

from __future__ import annotations

import logging
from dataclasses import replace

from commuter_data.data_processing.trips import Trip

LOGGER = logging.getLogger(__name__)


def _union_ordered(first: tuple[str, ...], second: tuple[str, ...]) -> tuple[str, ...]:
    seen = set(first)
    extra = []
    for d in second:
        if d not in seen:
            seen.add(d)
            extra.append(d)
    return first + tuple(extra)


def merge_pair(acc: Trip, other: Trip) -> Trip:
    """Fold `other` into `acc`; non-calendar fields of `acc` win.

    days:   union, ascending
    also:   union, first-seen order
    except: intersection; absent if either side has none
    """
    days = tuple(sorted(set(acc.days) | set(other.days)))
    also = _union_ordered(acc.also, other.also)
    if acc.except_dates and other.except_dates:
        keep = set(other.except_dates)
        except_dates = tuple(d for d in acc.except_dates if d in keep)
    else:
        except_dates = ()
    return replace(acc, days=days, also=also, except_dates=except_dates)


def merge_duplicate_trips(trips: list[Trip]) -> list[Trip]:
    """Collapse trips with identical content keys into one, in first-encounter order."""
    merged: dict[str, Trip] = {}
    for trip in trips:
        key = trip.content_key()
        existing = merged.get(key)
        merged[key] = trip if existing is None else merge_pair(existing, trip)
    LOGGER.info("Deduplicated to %d unique trips", len(merged))
    return list(merged.values())


def compact_calendars(trips: list[Trip]) -> tuple[list[Trip], int]:
    """Replace `also` with a validFrom/validUntil window on trips that have weekly days.

    Returns (trips, number_compacted).
    """
    out: list[Trip] = []
    compacted = 0
    for trip in trips:
        if trip.days and trip.also:
            ordered = sorted(trip.also)
            out.append(replace(trip, also=(), valid_from=ordered[0], valid_until=ordered[-1]))
            compacted += 1
        else:
            out.append(trip)
    if compacted:
        LOGGER.info("Optimized %d trips (replaced date arrays with ranges)", compacted)
    return out, compacted
