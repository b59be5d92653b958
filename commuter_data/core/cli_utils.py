"""Common CLI utilities for the build scripts."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def create_base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--force",
        action="store_true",
        help="Re-download feeds even if cached archives are younger than 7 days.",
    )
    parser.add_argument(
        "--checkpoint",
        action="store_true",
        help="Log checkpoint summary including output hashes.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Corridor configuration YAML (default: config/corridor.yaml).",
    )
    return parser


def add_build_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--fares",
        type=Path,
        default=None,
        help="Fare table YAML (default: config/fares.yaml).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the dataset (default: data/processed/commuter-data.json).",
    )


@dataclass
class BuildStats:
    """Counts collected across build steps, reported once at the end of a run."""

    stats: dict[str, Any] = field(default_factory=dict)
    completed_steps: list[str] = field(default_factory=list)

    def record(self, step_name: str, step_stats: dict[str, Any]) -> None:
        self.stats.update(step_stats)
        self.completed_steps.append(step_name)

    def get_summary(self) -> dict[str, Any]:
        return {"completed_steps": list(self.completed_steps), **self.stats}
