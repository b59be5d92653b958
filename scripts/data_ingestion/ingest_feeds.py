"""Step 1: Download GTFS feeds for the NEC commuter rail agencies.

Feeds are cached under `data/raw/gtfs-cache/<agency>.zip` and reused for 7 days
unless `--force` is given. Agencies listed under `hardcoded` in the corridor
config have no feed and are skipped.

Run:
  uv run python scripts/data_ingestion/ingest_feeds.py [--force]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure repo root is on sys.path so `import commuter_data...` works when executing this file directly.
REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from commuter_data.core.cli_utils import create_base_parser
from commuter_data.core.config import configure_logging, get_paths
from commuter_data.core.data_loaders import fetch_feeds
from commuter_data.io import (
    IngestRecord,
    load_corridor_config,
    sha256_file,
    upsert_ingest_summary,
)

LOGGER = logging.getLogger("ingest_feeds")


def _parse_args() -> argparse.Namespace:
    return create_base_parser("Download GTFS feeds for NEC commuter rail agencies.").parse_args()


def _display_path(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def run(
    *,
    force: bool = False,
    checkpoint: bool = False,
    config_path: Path | None = None,
) -> tuple[dict[str, Path], dict[str, int | str]]:
    """Fetch every feed. Returns (agency -> cached archive path, key counts)."""
    paths = get_paths()
    config = load_corridor_config(config_path or paths.corridor_config)

    LOGGER.info("Downloading GTFS feeds for: %s", ", ".join(config.feed_agencies()))
    feed_paths = fetch_feeds(config, paths, force=force)

    records = []
    for agency, path in feed_paths.items():
        cfg = config.agencies[agency]
        records.append(
            IngestRecord(
                dataset=agency,
                stage="raw",
                path=_display_path(path, paths.root),
                rows=None,
                bytes=path.stat().st_size if path.exists() else None,
                source=cfg.feed_url or "",
                notes=f"tables nested in {cfg.nested_archive}" if cfg.nested_archive else "",
            )
        )
        if checkpoint:
            LOGGER.info("Checkpoint %s: sha256=%s", agency, sha256_file(path))
    upsert_ingest_summary(records, paths.ingest_summary)
    LOGGER.info("Wrote/updated %s", paths.ingest_summary)

    return feed_paths, {
        "feeds": len(feed_paths),
        "feed_bytes": sum(p.stat().st_size for p in feed_paths.values() if p.exists()),
    }


def main() -> None:
    configure_logging()
    args = _parse_args()
    run(force=args.force, checkpoint=args.checkpoint, config_path=args.config)


if __name__ == "__main__":
    main()
