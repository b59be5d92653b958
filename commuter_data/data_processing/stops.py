"""Resolve feed-native GTFS stop ids to corridor station codes, per agency."""

from __future__ import annotations

import logging

from commuter_data.models.corridor import CorridorConfig, DirectionalStop

LOGGER = logging.getLogger(__name__)

StopMapping = dict[str, str]


def build_stop_lookup(config: CorridorConfig) -> dict[str, StopMapping]:
    """Build `{agency: {gtfs_stop_id: station_code}}` from the station table.

    A directional pair registers both platform ids for the same station. When two
    stations claim the same stop id for one agency the later station wins; the
    collision is logged but the mapping shape is unchanged.
    """
    lookup: dict[str, StopMapping] = {}
    for code, by_agency in config.stations.items():
        for agency, ref in by_agency.items():
            stops = lookup.setdefault(agency, {})
            ids = (ref.sb, ref.nb) if isinstance(ref, DirectionalStop) else (ref,)
            for stop_id in ids:
                previous = stops.get(stop_id)
                if previous is not None and previous != code:
                    LOGGER.warning(
                        "%s: stop id %s claimed by both %s and %s; using %s",
                        agency,
                        stop_id,
                        previous,
                        code,
                        code,
                    )
                stops[stop_id] = code
    return lookup
