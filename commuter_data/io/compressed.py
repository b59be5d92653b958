"""GTFS archive decoding: zip containers (optionally nested) to string DataFrames."""

from __future__ import annotations

import csv
import io
import logging
import warnings
from dataclasses import dataclass
from pathlib import Path
from zipfile import ZipFile

import pandas as pd

from commuter_data.models.schemas import FEED_TABLES, TableSchema
from commuter_data.models.validate import empty_frame, validate_df

LOGGER = logging.getLogger(__name__)

TEXT_ENCODING = "utf-8-sig"  # strips a leading byte-order mark if present


class NestedArchiveMissingError(FileNotFoundError):
    """A feed that must wrap its tables in an inner zip does not contain it."""


@dataclass(frozen=True)
class FeedTables:
    """The four GTFS tables the builder consumes, for one agency."""

    trips: pd.DataFrame
    stop_times: pd.DataFrame
    calendar: pd.DataFrame
    calendar_dates: pd.DataFrame


def open_feed_archive(source: Path | bytes, *, nested_member: str | None = None) -> ZipFile:
    """Open a GTFS zip from a path or raw bytes.

    If `nested_member` is given, the outer zip must contain that inner zip; the
    returned archive is the inner one.
    """
    outer = ZipFile(io.BytesIO(source) if isinstance(source, bytes) else Path(source))
    if nested_member is None:
        return outer

    with outer:
        names = set(outer.namelist())
        if nested_member not in names:
            raise NestedArchiveMissingError(
                f"{nested_member} not found inside {getattr(outer, 'filename', None) or 'archive'}"
            )
        inner_bytes = outer.read(nested_member)
    return ZipFile(io.BytesIO(inner_bytes))


def _find_member(archive: ZipFile, filename: str) -> str | None:
    """Locate `filename` at the archive root or inside a single top-level folder."""
    target = filename.lower()
    for name in archive.namelist():
        lo = name.lower()
        if lo == target or lo.endswith("/" + target):
            return name
    return None


def _decode_csv(raw: bytes, name: str) -> pd.DataFrame:
    try:
        text = raw.decode(TEXT_ENCODING)
    except UnicodeDecodeError as exc:
        LOGGER.warning("%s: not valid UTF-8 (%s); undecodable bytes replaced", name, exc.reason)
        text = raw.decode(TEXT_ENCODING, errors="replace")
    header = next(csv.reader(io.StringIO(text)), None)
    if not header:
        return pd.DataFrame()
    width = len(header)

    with warnings.catch_warnings():
        # ragged rows are tolerated below; pandas would warn about each one
        warnings.simplefilter("ignore", pd.errors.ParserWarning)
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            index_col=False,
            # rows with more fields than the header are truncated, not dropped
            on_bad_lines=lambda fields: fields[:width],
        )
    df.columns = [str(c).strip() for c in df.columns]
    # rows with fewer fields than the header come back as NaN
    return df.fillna("")


def read_table(archive: ZipFile, schema: TableSchema) -> pd.DataFrame:
    """Read one GTFS table as an all-string DataFrame.

    An absent member is not an error: it reads as an empty table carrying the
    schema's columns, so later stages simply find no rows.
    """
    member = _find_member(archive, schema.filename)
    if member is None:
        LOGGER.debug("%s not present in archive", schema.filename)
        return empty_frame(schema)

    df = _decode_csv(archive.read(member), member)
    if df.empty and not len(df.columns):
        return empty_frame(schema)
    df = validate_df(df, schema)
    return df.fillna("")


def read_feed_tables(archive: ZipFile) -> FeedTables:
    return FeedTables(**{schema.name: read_table(archive, schema) for schema in FEED_TABLES})
