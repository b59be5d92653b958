from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from commuter_data.core.config import CACHE_MAX_AGE, Paths, get_paths
from commuter_data.io import (
    FeedTables,
    download_feed,
    open_feed_archive,
    read_feed_tables,
)
from commuter_data.models.corridor import AgencyConfig, CorridorConfig

LOGGER = logging.getLogger(__name__)


def fetch_feeds(
    config: CorridorConfig,
    paths: Paths | None = None,
    *,
    force: bool = False,
) -> dict[str, Path]:
    """Download (or reuse cached) feed archives for every downloadable agency, in order."""
    if paths is None:
        paths = get_paths()
    paths.gtfs_cache.mkdir(parents=True, exist_ok=True)

    out: dict[str, Path] = {}
    for agency, url in config.feed_urls().items():
        out[agency] = download_feed(
            agency, url, paths.gtfs_cache, max_age=CACHE_MAX_AGE, force=force
        )
    return out


def load_feed(path: Path, agency: AgencyConfig) -> FeedTables:
    """Decode one cached archive into its GTFS tables (unwrapping a nested zip if configured).

    Raises `NestedArchiveMissingError` if a required inner archive is absent.
    """
    with open_feed_archive(path, nested_member=agency.nested_archive) as zf:
        return read_feed_tables(zf)


def load_feeds(config: CorridorConfig, feed_paths: Mapping[str, Path]) -> dict[str, FeedTables]:
    """Decode every fetched feed, in configuration order."""
    feeds: dict[str, FeedTables] = {}
    for agency in config.feed_agencies():
        path = feed_paths.get(agency)
        if path is None:
            raise FileNotFoundError(f"No cached feed for agency {agency!r}")
        feeds[agency] = load_feed(path, config.agencies[agency])
        LOGGER.info(
            "%s: decoded trips=%d stop_times=%d calendar=%d calendar_dates=%d",
            agency,
            len(feeds[agency].trips),
            len(feeds[agency].stop_times),
            len(feeds[agency].calendar),
            len(feeds[agency].calendar_dates),
        )
    return feeds
