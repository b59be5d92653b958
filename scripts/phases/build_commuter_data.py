"""Build commuter-data.json: NEC-relevant commuter rail trips and fares.

Downloads (or reuses cached) GTFS feeds, extracts corridor trips per agency,
merges duplicate trains, appends the hardcoded Shore Line East schedule and the
static fare table, and writes the consolidated dataset.

Run from repo root:
  uv run python scripts/phases/build_commuter_data.py [--force] [--output PATH]

Outputs:
- data/processed/commuter-data.json
- data/processed/_meta/ingest_summary.csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Ensure repo root is on sys.path so `import commuter_data...` works when executing this file directly.
REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from commuter_data.core.cli_utils import BuildStats, add_build_flags, create_base_parser
from commuter_data.core.config import configure_logging, get_paths
from commuter_data.core.data_loaders import load_feeds
from commuter_data.data_processing.pipeline import build_commuter_dataset
from commuter_data.io import (
    IngestRecord,
    load_corridor_config,
    load_fare_table,
    sha256_file,
    upsert_ingest_summary,
    write_json,
)
from scripts.data_ingestion.ingest_feeds import run as run_ingest

LOGGER = logging.getLogger("build_commuter_data")


def _parse_args() -> argparse.Namespace:
    parser = create_base_parser("Build commuter-data.json from NEC commuter rail GTFS feeds.")
    add_build_flags(parser)
    return parser.parse_args()


def run(
    *,
    force: bool = False,
    checkpoint: bool = False,
    config_path: Path | None = None,
    fares_path: Path | None = None,
    output: Path | None = None,
) -> dict[str, Any]:
    """Run ingest + build. Returns the collected run statistics."""
    paths = get_paths()
    stats = BuildStats()

    config = load_corridor_config(config_path or paths.corridor_config)
    fare_table = load_fare_table(fares_path or paths.fares_config)

    feed_paths, ingest_stats = run_ingest(
        force=force, checkpoint=checkpoint, config_path=config_path
    )
    stats.record("ingest", ingest_stats)

    LOGGER.info("Parsing GTFS data...")
    feeds = load_feeds(config, feed_paths)
    dataset, summary = build_commuter_dataset(
        feeds, config, fare_table, generated_at=datetime.now(timezone.utc)
    )
    stats.record("build", summary.as_dict())

    out_path = output or paths.output
    write_json(dataset, out_path)
    LOGGER.info("Wrote %s", out_path)

    records = []
    for agency, cfg in config.agencies.items():
        extracted = summary.trips_by_agency.get(agency)
        records.append(
            IngestRecord(
                dataset=agency,
                stage="processed",
                path=str(out_path),
                rows=int(summary.dataset.get(f"trips_{agency}", 0)),
                bytes=None,
                source=cfg.feed_url or "hardcoded",
                notes=f"{extracted} trips before merging" if extracted is not None else "",
            )
        )
    upsert_ingest_summary(records, paths.ingest_summary)

    if checkpoint:
        LOGGER.info("Checkpoint %s: sha256=%s", out_path, sha256_file(out_path))

    return stats.get_summary()


def main() -> None:
    configure_logging()
    args = _parse_args()
    try:
        summary = run(
            force=args.force,
            checkpoint=args.checkpoint,
            config_path=args.config,
            fares_path=args.fares,
            output=args.output,
        )
    except Exception as e:
        LOGGER.error("Build failed: %s", e)
        raise
    LOGGER.info(
        "Build complete. Steps: %s; %s total trips, %s fare pairs",
        ", ".join(summary["completed_steps"]),
        summary.get("total_trips", 0),
        summary.get("fare_pairs", 0),
    )


if __name__ == "__main__":
    main()
