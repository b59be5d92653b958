"""Project configuration (paths, constants, logging setup)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

# Feed cache
CACHE_MAX_AGE: timedelta = timedelta(days=7)
DOWNLOAD_TIMEOUT_S: float = 120.0

# Config + output file names
CORRIDOR_CONFIG_FILE: str = "corridor.yaml"
FARES_CONFIG_FILE: str = "fares.yaml"
OUTPUT_FILE: str = "commuter-data.json"
INGEST_SUMMARY_FILE: str = "ingest_summary.csv"


def project_root() -> Path:
    """Return repository root assuming this file lives in `<root>/commuter_data/core/config.py`."""
    return Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class Paths:
    root: Path
    config: Path
    data_raw: Path
    data_processed: Path

    gtfs_cache: Path  # one `<agency>.zip` per downloadable feed
    processed_meta: Path

    corridor_config: Path
    fares_config: Path
    output: Path
    ingest_summary: Path


def get_paths(root: Path | None = None) -> Paths:
    r = project_root() if root is None else Path(root).resolve()
    config = r / "config"
    data_raw = r / "data" / "raw"
    data_processed = r / "data" / "processed"
    processed_meta = data_processed / "_meta"
    return Paths(
        root=r,
        config=config,
        data_raw=data_raw,
        data_processed=data_processed,
        gtfs_cache=data_raw / "gtfs-cache",
        processed_meta=processed_meta,
        corridor_config=config / CORRIDOR_CONFIG_FILE,
        fares_config=config / FARES_CONFIG_FILE,
        output=data_processed / OUTPUT_FILE,
        ingest_summary=processed_meta / INGEST_SUMMARY_FILE,
    )


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
