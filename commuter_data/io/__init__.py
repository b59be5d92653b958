"""Lightweight I/O helpers.

This module centralises:
- feed retrieval with an on-disk cache (`download_feed`, `is_fresh`)
- YAML config loading (`load_corridor_config`, `load_fare_table`)
- `write_json` for the build output
- feed inventory metadata (`IngestRecord`, `upsert_ingest_summary`)
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

import pandas as pd
import requests
import yaml
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from commuter_data.core.config import CACHE_MAX_AGE, DOWNLOAD_TIMEOUT_S
from commuter_data.io.compressed import (
    FeedTables,
    NestedArchiveMissingError,
    open_feed_archive,
    read_feed_tables,
    read_table,
)
from commuter_data.models.corridor import CorridorConfig, FareTable

LOGGER = logging.getLogger(__name__)

USER_AGENT = "nec-commuter-data/0.1 (gtfs feed builder)"
RETRYABLE_STATUS = {429, 500, 502, 503, 504}

_SESSION: requests.Session | None = None

__all__ = [
    "FeedTables",
    "NestedArchiveMissingError",
    "open_feed_archive",
    "read_feed_tables",
    "read_table",
    "IngestRecord",
    "download_feed",
    "ensure_parent_dir",
    "fetch_bytes",
    "is_fresh",
    "load_corridor_config",
    "load_fare_table",
    "load_yaml",
    "sha256_file",
    "upsert_ingest_summary",
    "write_json",
]


def ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_json(obj: Any, path: Path) -> None:
    ensure_parent_dir(path)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML mapping (an empty file loads as `{}`)."""
    return yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}


def load_corridor_config(path: Path) -> CorridorConfig:
    """Load and validate the corridor configuration (`config/corridor.yaml`)."""
    return CorridorConfig.model_validate(load_yaml(path))


def load_fare_table(path: Path) -> FareTable:
    """Load and validate the static fare table (`config/fares.yaml`)."""
    return FareTable.model_validate(load_yaml(path))


def _session() -> requests.Session:
    global _SESSION  # noqa: PLW0603
    if _SESSION is None:
        _SESSION = requests.Session()
        _SESSION.headers.update({"User-Agent": USER_AGENT})
    return _SESSION


def _retryable(exc: BaseException) -> bool:
    if isinstance(exc, requests.exceptions.HTTPError):
        resp = getattr(exc, "response", None)
        code = getattr(resp, "status_code", None)
        return code in RETRYABLE_STATUS
    return isinstance(exc, requests.exceptions.RequestException)


@retry(
    retry=retry_if_exception(_retryable),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=10.0),
    stop=stop_after_attempt(5),
    reraise=True,
)
def fetch_bytes(url: str, *, timeout: float = DOWNLOAD_TIMEOUT_S) -> bytes:
    """HTTP GET a binary payload, retrying transient failures."""
    r = _session().get(url, timeout=timeout)
    r.raise_for_status()
    return r.content


def is_fresh(path: Path, max_age: timedelta, *, now: float | None = None) -> bool:
    """True if `path` exists, is non-empty and was modified within `max_age`."""
    if not path.exists() or path.stat().st_size <= 0:
        return False
    now = time.time() if now is None else now
    return (now - path.stat().st_mtime) < max_age.total_seconds()


def download_feed(
    agency: str,
    url: str,
    cache_dir: Path,
    *,
    max_age: timedelta = CACHE_MAX_AGE,
    force: bool = False,
) -> Path:
    """Return the cached `<cache_dir>/<agency>.zip`, downloading it if stale or missing."""
    dest = cache_dir / f"{agency}.zip"
    if not force and is_fresh(dest, max_age):
        LOGGER.info("%s: using cached feed", agency)
        return dest

    LOGGER.info("%s: downloading from %s...", agency, url)
    payload = fetch_bytes(url)
    ensure_parent_dir(dest)
    dest.write_bytes(payload)
    LOGGER.info("%s: saved (%d KB)", agency, round(len(payload) / 1024))
    return dest


def sha256_file(path: Path) -> str:
    """Return SHA256 hex digest for a file."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


@dataclass(frozen=True)
class IngestRecord:
    """Row-level feed metadata for the ingest inventory CSV (default: `data/processed/_meta/ingest_summary.csv`)."""

    dataset: str  # agency id
    stage: str  # "raw" for cached feeds, "processed" for the built dataset
    path: str
    rows: int | None  # trips extracted (processed) or None (raw)
    bytes: int | None
    source: str
    notes: str = ""


def upsert_ingest_summary(records: list[IngestRecord], summary_csv: Path) -> None:
    """Upsert ingest records into a summary CSV keyed by (`dataset`, `stage`)."""
    ensure_parent_dir(summary_csv)
    new_df = pd.DataFrame(
        [
            {
                "dataset": r.dataset,
                "stage": r.stage,
                "path": r.path,
                "rows": r.rows,
                "bytes": r.bytes,
                "source": r.source,
                "notes": r.notes,
            }
            for r in records
        ],
        columns=["dataset", "stage", "path", "rows", "bytes", "source", "notes"],
    )
    new_df["dataset"] = new_df["dataset"].astype(str)
    new_df["stage"] = new_df["stage"].astype(str)

    if summary_csv.exists():
        old = pd.read_csv(summary_csv, dtype={"dataset": "string", "stage": "string"})
        old["dataset"] = old["dataset"].astype(str)
        old["stage"] = old["stage"].astype(str)
        new_keys = set(zip(new_df["dataset"], new_df["stage"]))
        keep = [k not in new_keys for k in zip(old["dataset"], old["stage"])]
        df = pd.concat([old.loc[keep], new_df], ignore_index=True)
    else:
        df = new_df

    df = df.sort_values(["dataset", "stage"], kind="mergesort").reset_index(drop=True)
    df.to_csv(summary_csv, index=False)
