from dataclasses import dataclass, field
from operator import attrgetter
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from teams_attendance.labels import DEFAULT_TITLE
from teams_attendance.log import get_logger
from teams_attendance.models import (
    CONSULTATION,
    AttendanceRecord,
    DurationCategory,
    Lateness,
    Presence,
    RawExport,
    ReportHeader,
    Roster,
)

logger = get_logger(__name__)


class FatalInputError(ValueError):
    """The export, roster or configuration cannot be processed at all."""


# (lower, upper, label), both bounds inclusive. Adjacent windows overlap, so
# the order of evaluation decides ties.
PERIOD_WINDOWS: List[Tuple[int, int, str]] = [
    (27800, 35100, "Period 1"),
    (33900, 41100, "Period 2"),
    (39900, 47100, "Period 3"),
    (46700, 53300, "Period 4"),
    (53100, 60300, "Period 5"),
    (59100, 66300, "Period 6"),
    (65100, 72300, "Period 7"),
    (70700, 77900, "Period 8"),
]

# Joining inside one of these counts as late. Shared endpoints belong to the
# later window.
LATE_WINDOWS: List[Tuple[int, int, str]] = [
    (29000, 35100, "Period 1"),
    (35100, 41100, "Period 2"),
    (41100, 47100, "Period 3"),
    (47900, 53300, "Period 4"),
    (54300, 60300, "Period 5"),
    (60300, 66300, "Period 6"),
    (66300, 72300, "Period 7"),
    (71900, 77900, "Period 8"),
]

FULL_PRESENCE_SECONDS = 1800

DEFAULT_GROUP_PREFIXES: FrozenSet[str] = frozenset({"мп", "мт", "мк", "мн"})
GUEST_MARKERS: FrozenSet[str] = frozenset({"(guest)", "(гость)"})
ORGANIZER_MARKERS: FrozenSet[str] = frozenset({"Organizer", "Инициатор"})
PLATFORM_DEFAULT_TITLES: FrozenSet[str] = frozenset({"General"})

# Export layout
PREAMBLE_ROWS = 8
TITLE_ROW = 2
START_ROW = 3
NAME_FIELD, JOIN_FIELD, DURATION_FIELD, ROLE_FIELD = 0, 1, 3, 5

# -------------------- time helpers --------------------

def parse_clock(tokens: Sequence[str]) -> int:
    """Seconds from ``[hours, minutes, seconds]`` or ``[minutes, seconds]``."""
    if len(tokens) not in (2, 3):
        raise FatalInputError(f"Expected 2 or 3 time components, got {len(tokens)}: {':'.join(tokens)!r}")
    try:
        values = [int(t) for t in tokens]
    except ValueError:
        raise FatalInputError(f"Non-numeric time component in {':'.join(tokens)!r}") from None
    if len(values) == 3:
        hours, minutes, seconds = values
        return hours * 3600 + minutes * 60 + seconds
    minutes, seconds = values
    return minutes * 60 + seconds


def split_timestamp(text: str) -> Tuple[str, int]:
    """Split a ``"date, time"`` field into the date and seconds since midnight."""
    if "," not in text:
        raise FatalInputError(f"Expected 'date, time', got {text!r}")
    date, _, clock = text.partition(",")
    clock = "".join(clock.split())
    meridiem = clock[-2:].upper()
    if meridiem in ("AM", "PM"):
        clock = clock[:-2]
    seconds = parse_clock(clock.split(":"))
    if meridiem == "PM" and seconds < 12 * 3600:
        seconds += 12 * 3600
    elif meridiem == "AM" and seconds >= 12 * 3600:
        seconds -= 12 * 3600
    return date.strip(), seconds


def _first_window(table: Iterable[Tuple[int, int, str]], seconds: int) -> Optional[str]:
    for lower, upper, label in table:
        if lower <= seconds <= upper:
            return label
    return None


def classify_slot(seconds: int) -> str:
    return _first_window(PERIOD_WINDOWS, seconds) or CONSULTATION


def late_window(seconds: int) -> Optional[str]:
    """Label of the lateness window containing ``seconds``, if any."""
    return _first_window(reversed(LATE_WINDOWS), seconds)


def classify_lateness(seconds: int) -> Lateness:
    return Lateness.LATE if late_window(seconds) is not None else Lateness.ON_TIME

# -------------------- name normalization --------------------

def parse_display_name(
    raw: str,
    group_prefixes: FrozenSet[str] = DEFAULT_GROUP_PREFIXES,
    guest_markers: FrozenSet[str] = GUEST_MARKERS,
) -> Optional[Tuple[str, str]]:
    """Turn a "First Middle Last" display name into ``(canonical, group)``.

    The first three tokens are rotated to "Last First Middle"; anything past
    the third token keeps its place. Guest markers are removed. A token that
    starts with a known group prefix (``МП-21``, ``(мт-12)``) is reported as
    the embedded group with any ")" removed, or ``""`` when there is none.

    Returns None for names with fewer than two tokens; such rows cannot be
    attributed to anybody.
    """
    tokens = raw.split()
    if len(tokens) < 2:
        return None

    head = tokens[:3]
    tokens = head[-1:] + head[:-1] + tokens[3:]

    group = ""
    for i, token in enumerate(tokens):
        if token.lower() in guest_markers:
            tokens[i] = ""
            continue
        candidate = token.split("-")[0].lower().lstrip("(")
        if candidate in group_prefixes:
            tokens[i] = token.replace(")", "")
            group = tokens[i]

    return " ".join(t for t in tokens if t), group

# -------------------- presence --------------------

def classify_duration(text: str) -> DurationCategory:
    """Bucket a platform duration such as ``"12 minutes 30 seconds"``."""
    tokens = text.split()
    if len(tokens) == 2:
        return DurationCategory.MINIMAL
    if len(tokens) == 4:
        seconds = parse_clock([tokens[0], tokens[2]])
        return DurationCategory.FULL if seconds > FULL_PRESENCE_SECONDS else DurationCategory.PARTIAL
    if len(tokens) >= 6:
        return DurationCategory.FULL
    raise FatalInputError(f"Unrecognised duration {text!r}")


def presence_for(duration: DurationCategory) -> Presence:
    return Presence.PRESENT if duration is DurationCategory.FULL else Presence.PARTIALLY_PRESENT

# -------------------- roster reconciliation --------------------

def reconcile(observed: List[AttendanceRecord], roster: Roster) -> List[AttendanceRecord]:
    """Append an Absent record for every roster member of an attending group
    who does not appear in ``observed``. ``observed`` itself is not modified.
    """
    groups = {m.group for m in observed}
    seen: Dict[str, bool] = {}
    for entry in roster.in_groups(groups):
        seen.setdefault(entry.full_name, False)
    for m in observed:
        if m.full_name in seen:
            seen[m.full_name] = True

    absentees = [
        AttendanceRecord(group=roster.lookup_group(name), full_name=name, presence=Presence.ABSENT)
        for name, was_seen in seen.items() if not was_seen
    ]
    if absentees:
        logger.info("Added %d absent roster members across %d groups", len(absentees), len(groups))
    return list(observed) + absentees

# -------------------- report assembly --------------------

def sort_members(members: Iterable[AttendanceRecord]) -> List[AttendanceRecord]:
    """Order by group, then by name."""
    by_name = sorted(members, key=attrgetter("full_name"))
    return sorted(by_name, key=attrgetter("group"))


def assemble(members: Iterable[AttendanceRecord]) -> List[AttendanceRecord]:
    return sort_members(m for m in members if m.full_name)


def summarize(header: ReportHeader, members: List[AttendanceRecord]) -> Dict:
    counts = {p.value: 0 for p in Presence}
    for m in members:
        counts[m.presence.value] += 1
    return {
        "title": header.title,
        "date": header.date,
        "time_slot": header.time_slot,
        "members": len(members),
        "groups": sorted({m.group for m in members}),
        **counts,
    }

# -------------------- main engine --------------------

@dataclass(frozen=True)
class RunContext:
    """Everything a run needs besides the export itself."""

    roster: Roster = field(default_factory=Roster)
    group_prefixes: FrozenSet[str] = DEFAULT_GROUP_PREFIXES
    guest_markers: FrozenSet[str] = GUEST_MARKERS
    organizer_markers: FrozenSet[str] = ORGANIZER_MARKERS
    default_titles: FrozenSet[str] = PLATFORM_DEFAULT_TITLES

    @classmethod
    def from_settings(cls, settings, roster: Roster) -> "RunContext":
        return cls(roster=roster, group_prefixes=frozenset(settings.GROUP_PREFIXES))


def read_header(preamble: List[List[str]], ctx: RunContext) -> ReportHeader:
    if len(preamble) < PREAMBLE_ROWS:
        raise FatalInputError(f"Export preamble has {len(preamble)} rows, expected {PREAMBLE_ROWS}")

    title_row = preamble[TITLE_ROW]
    title = title_row[1].strip() if len(title_row) > 1 else ""
    if not title or title in ctx.default_titles:
        title = DEFAULT_TITLE

    start_row = preamble[START_ROW]
    if len(start_row) < 2:
        raise FatalInputError("Export preamble has no meeting start time")
    date, seconds = split_timestamp(start_row[1])
    return ReportHeader(title=title, date=date, time_slot=classify_slot(seconds))


def classify_row(row: List[str], ctx: RunContext) -> Optional[AttendanceRecord]:
    """Build the record for one participant row, or None if the row is skipped."""
    if len(row) <= ROLE_FIELD:
        raise FatalInputError(f"Participant row has {len(row)} fields, expected at least {ROLE_FIELD + 1}")
    if row[ROLE_FIELD].strip() in ctx.organizer_markers:
        return None

    parsed = parse_display_name(row[NAME_FIELD], ctx.group_prefixes, ctx.guest_markers)
    if parsed is None:
        logger.debug("Dropping participant with unusable name %r", row[NAME_FIELD])
        return None
    full_name, group = parsed
    if not group:
        group = ctx.roster.lookup_group(full_name)

    _, joined = split_timestamp(row[JOIN_FIELD])
    duration = classify_duration(row[DURATION_FIELD])
    return AttendanceRecord(
        group=group,
        full_name=full_name,
        presence=presence_for(duration),
        lateness=classify_lateness(joined),
        duration=duration,
    )


def classify_rows(rows: List[List[str]], ctx: RunContext) -> List[AttendanceRecord]:
    members = []
    for row in rows:
        record = classify_row(row, ctx)
        if record is not None:
            members.append(record)
    logger.info("Classified %d of %d participant rows", len(members), len(rows))
    return members


def build_report(
    export: RawExport, ctx: RunContext, reconcile_roster: bool = True
) -> Tuple[ReportHeader, List[AttendanceRecord]]:
    """Header plus the sorted member list for one export."""
    header = read_header(export.preamble, ctx)
    logger.info("Meeting %r on %s: %s", header.title, header.date, header.time_slot)

    members = classify_rows(export.rows, ctx)
    if reconcile_roster and not header.is_consultation:
        members = reconcile(members, ctx.roster)
    return header, assemble(members)
