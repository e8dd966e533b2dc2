"""Readers for the platform export and the group roster.

The export is downloaded from the meeting's attendance tab: a tab-delimited
UTF-16 file with a short summary block before the participant rows.
"""
import csv
import io
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from teams_attendance.log import get_logger
from teams_attendance.logic import PREAMBLE_ROWS, FatalInputError
from teams_attendance.models import RawExport, Roster, RosterEntry

logger = get_logger(__name__)

EXPORT_ENCODING = "utf-16"
EXPORT_SUFFIX = ".csv"

# -------------------- export --------------------

def find_latest_export(folder: Union[str, Path]) -> Path:
    """Most recently modified ``.csv`` file in ``folder``."""
    folder = Path(folder).expanduser()
    try:
        candidates = [p for p in folder.iterdir() if p.is_file() and p.suffix.lower() == EXPORT_SUFFIX]
    except OSError as e:
        raise FatalInputError(f"Cannot open download folder {folder}: {e}") from e
    if not candidates:
        raise FatalInputError(f"No {EXPORT_SUFFIX} files in {folder}; check the download folder setting")
    latest = max(candidates, key=lambda p: p.stat().st_mtime)
    logger.info("Using export %s (%d candidates)", latest, len(candidates))
    return latest


def _where(source: Optional[str]) -> str:
    return f" {source}" if source else ""


def parse_export_text(text: str, source: Optional[str] = None) -> RawExport:
    rows = [row for row in csv.reader(io.StringIO(text), delimiter="\t") if row]
    if len(rows) < PREAMBLE_ROWS:
        raise FatalInputError(f"Export{_where(source)} has {len(rows)} rows, expected a {PREAMBLE_ROWS}-row summary block")
    return RawExport(preamble=rows[:PREAMBLE_ROWS], rows=rows[PREAMBLE_ROWS:], source=source)


def parse_export_bytes(data: bytes, source: Optional[str] = None) -> RawExport:
    try:
        text = data.decode(EXPORT_ENCODING)
    except UnicodeDecodeError as e:
        raise FatalInputError(f"Export{_where(source)} is not UTF-16 encoded: {e}") from e
    return parse_export_text(text, source)


def read_export(path: Union[str, Path]) -> RawExport:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise FatalInputError(f"Cannot read export {path}: {e}") from e
    return parse_export_bytes(data, str(path))

# -------------------- roster --------------------

def _roster_from_csv(source, label: str) -> Roster:
    try:
        df = pd.read_csv(
            source, header=None, usecols=[0, 1], dtype=str,
            keep_default_na=False, encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        logger.warning("Roster %s is empty", label)
        return Roster()
    except (OSError, ValueError) as e:
        raise FatalInputError(f"Cannot read roster {label}: {e}") from e

    df = df.fillna("").astype(str)
    df.columns = ["FullName", "Group"]
    df["FullName"] = df["FullName"].str.strip()
    df["Group"] = df["Group"].str.strip()
    df = df[df["FullName"] != ""]

    roster = Roster(tuple(RosterEntry(full_name=n, group=g) for n, g in zip(df["FullName"], df["Group"])))
    logger.info("Loaded %d roster entries from %s", len(roster), label)
    return roster


def load_roster(path: Union[str, Path]) -> Roster:
    """Roster CSV: one ``full name,group`` pair per line, no header."""
    return _roster_from_csv(str(path), str(path))


def load_roster_bytes(data: bytes, label: str = "upload") -> Roster:
    return _roster_from_csv(io.BytesIO(data), label)
