"""Data models for the attendance report."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

GUEST = "Guest"
CONSULTATION = "Consultation"


class Lateness(str, Enum):
    ON_TIME = "OnTime"
    LATE = "Late"


class DurationCategory(str, Enum):
    MINIMAL = "Minimal"
    PARTIAL = "Partial"
    FULL = "Full"


class Presence(str, Enum):
    PRESENT = "Present"
    PARTIALLY_PRESENT = "PartiallyPresent"
    ABSENT = "Absent"


@dataclass
class AttendanceRecord:
    """One participant line of the report.

    Observed records carry lateness and duration; absentees injected from
    the roster leave both unset.
    """

    group: str
    full_name: str
    presence: Presence
    lateness: Optional[Lateness] = None
    duration: Optional[DurationCategory] = None


@dataclass
class ReportHeader:
    """Title block of the report."""

    title: str
    date: str
    time_slot: str

    @property
    def is_consultation(self) -> bool:
        return self.time_slot == CONSULTATION


@dataclass(frozen=True)
class RosterEntry:
    full_name: str
    group: str


@dataclass(frozen=True)
class Roster:
    """Read-only table of expected participants and their groups."""

    entries: tuple[RosterEntry, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.entries)

    def lookup_group(self, full_name: str) -> str:
        for entry in self.entries:
            if entry.full_name == full_name:
                return entry.group
        return GUEST

    def in_groups(self, groups) -> list[RosterEntry]:
        return [e for e in self.entries if e.group in groups]


@dataclass
class RawExport:
    """Rows of a platform export split into the preamble and participant rows."""

    preamble: list[list[str]]
    rows: list[list[str]]
    source: Optional[str] = None
