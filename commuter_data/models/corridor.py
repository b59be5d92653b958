"""Pydantic models for the static corridor configuration and fare table.

Both are loaded once from YAML (`config/corridor.yaml`, `config/fares.yaml`),
validated here, and passed explicitly into every pipeline stage. The models are
frozen so no stage can alter the shared configuration.
"""

from __future__ import annotations

import re
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FARE_PAIR_RE = re.compile(r"^[A-Z]{2,4}->[A-Z]{2,4}$")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True, extra="forbid")


class DirectionalStop(_Frozen):
    """A station served by separate southbound/northbound platform stop ids."""

    sb: str
    nb: str


StopRef = Union[DirectionalStop, str]


class AgencyConfig(_Frozen):
    label: str
    route_name: str
    feed_url: str | None = None
    routes: tuple[str, ...] = ()
    # member name of an inner zip that holds the GTFS tables (e.g. SEPTA's google_rail.zip)
    nested_archive: str | None = None


class SupplementaryRun(_Frozen):
    departure: str
    arrival: str


class SupplementaryDirection(_Frozen):
    origin: str
    destination: str
    trips: tuple[SupplementaryRun, ...] = ()


class SupplementarySchedule(_Frozen):
    """Hand-authored schedule for an agency with no downloadable feed."""

    days: tuple[int, ...] = (1, 2, 3, 4, 5)
    directions: dict[str, SupplementaryDirection] = Field(default_factory=dict)

    @field_validator("days")
    @classmethod
    def _valid_days(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        bad = [d for d in v if d < 1 or d > 7]
        if bad:
            raise ValueError(f"days must be 1-7 (Monday=1); got {bad}")
        return tuple(sorted(set(v)))


class CorridorConfig(_Frozen):
    """Stations, agencies and static schedule data for one rail corridor.

    `stations` maps StationCode -> agency -> feed stop id (or a directional pair).
    `agencies` is ordered; that order is the processing order of the pipeline.
    """

    stations: dict[str, dict[str, StopRef]]
    agencies: dict[str, AgencyConfig]
    hardcoded: tuple[str, ...] = ()
    supplementary: dict[str, SupplementarySchedule] = Field(default_factory=dict)
    notes: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_references(self) -> CorridorConfig:
        unknown = sorted(
            {a for by_agency in self.stations.values() for a in by_agency} - set(self.agencies)
        )
        if unknown:
            raise ValueError(f"stations reference unknown agencies: {unknown}")
        missing = [a for a in self.hardcoded if a not in self.supplementary]
        if missing:
            raise ValueError(f"hardcoded agencies without a supplementary schedule: {missing}")
        return self

    def feed_urls(self) -> dict[str, str]:
        """`{agency: feed_url}` for agencies with a downloadable feed, in configuration order."""
        hardcoded = set(self.hardcoded)
        return {
            a: cfg.feed_url
            for a, cfg in self.agencies.items()
            if cfg.feed_url and a not in hardcoded
        }

    def feed_agencies(self) -> list[str]:
        return list(self.feed_urls())

    def route_ids(self, agency: str) -> frozenset[str]:
        cfg = self.agencies.get(agency)
        return frozenset(cfg.routes) if cfg is not None else frozenset()

    def route_name(self, agency: str) -> str:
        cfg = self.agencies.get(agency)
        return cfg.route_name if cfg is not None else agency

    def agency_labels(self) -> dict[str, str]:
        return {a: cfg.label for a, cfg in self.agencies.items()}


class FareEntry(_Frozen):
    """A flat fare or a peak/off-peak pair for one ordered station pair."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    fare: int | float | None = None
    peak: int | float | None = None
    off_peak: int | float | None = Field(default=None, alias="offPeak")
    agency: str

    @model_validator(mode="after")
    def _one_shape(self) -> FareEntry:
        tiered = self.peak is not None or self.off_peak is not None
        if self.fare is not None and tiered:
            raise ValueError("fare entry must be flat (fare) or tiered (peak/offPeak), not both")
        if self.fare is None and (self.peak is None or self.off_peak is None):
            raise ValueError("fare entry needs either fare or both peak and offPeak")
        return self

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)


class FareTable(_Frozen):
    last_updated: str
    pairs: dict[str, FareEntry] = Field(default_factory=dict)

    @field_validator("pairs")
    @classmethod
    def _pair_keys(cls, v: dict[str, FareEntry]) -> dict[str, FareEntry]:
        bad = [k for k in v if not FARE_PAIR_RE.match(k)]
        if bad:
            raise ValueError(f"fare keys must look like 'ORIG->DEST'; got {bad}")
        return v
