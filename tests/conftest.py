"""Shared fixtures: an in-memory roster and a factory for UTF-16 export files."""

import logging
import os

import pytest

from teams_attendance.config import get_settings
from teams_attendance.logic import RunContext
from teams_attendance.models import Roster, RosterEntry

MEETING_DATE = "16.10.2022"
EXPORT_COLUMNS = ["Full Name", "Join Time", "Leave Time", "Duration", "Email", "Role"]

ROSTER_ROWS = [
    ("Ivanov Ivan Ivanovich", "МП-21"),
    ("Petrov Petr Petrovich", "МП-21"),
    ("Sidorov Sidor Sidorovich", "МП-21"),
    ("Smirnova Anna Sergeevna", "МТ-11"),
    ("Kuznetsov Oleg Igorevich", "МТ-11"),
    ("Volkova Maria Pavlovna", "МК-31"),
]


def participant(name, join="7:55:00", duration="1 hour 25 minutes 3 seconds", role="Attendee"):
    return [
        name,
        f"{MEETING_DATE}, {join}",
        f"{MEETING_DATE}, 9:20:00",
        duration,
        "someone@example.com",
        role,
    ]


def export_text(participants=(), title="Algebra", start="7:50:00"):
    title_row = "Meeting Title" if title is None else f"Meeting Title\t{title}"
    lines = [
        "Meeting Summary",
        f"Total Number of Participants\t{len(participants)}",
        title_row,
        f"Meeting Start Time\t{MEETING_DATE}, {start}",
        f"Meeting End Time\t{MEETING_DATE}, 9:20:00",
        "Meeting Duration\t1h 30m",
        "Meeting Id\t19:meeting_abc123",
        "",
        "\t".join(EXPORT_COLUMNS),
    ]
    lines.extend("\t".join(p) for p in participants)
    return "\r\n".join(lines) + "\r\n"


def default_participants():
    return [
        participant("Lecturer Main Person", join="7:49:00", role="Organizer"),
        participant("Ivan Ivanovich Ivanov", join="7:55:00"),
        participant("Petr Petrovich Petrov", join="8:10:00", duration="20 minutes 5 seconds"),
        participant("Anna Sergeevna Smirnova", join="7:51:10", duration="45 minutes 0 seconds"),
        participant("misterx", join="7:52:00"),
    ]


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch, tmp_path):
    """Keep host environment, .env files and logging changes out of each test."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("ATTENDANCE_"):
            monkeypatch.delenv(name)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def roster():
    return Roster(tuple(RosterEntry(full_name=n, group=g) for n, g in ROSTER_ROWS))


@pytest.fixture
def ctx(roster):
    return RunContext(roster=roster)


@pytest.fixture
def roster_file(tmp_path):
    path = tmp_path / "GroupsBase.csv"
    path.write_text("".join(f"{n},{g}\n" for n, g in ROSTER_ROWS), encoding="utf-8")
    return path


@pytest.fixture
def make_export(tmp_path):
    """Write an export file and return its path."""

    def _make(participants=None, name="meeting.csv", **kwargs):
        if participants is None:
            participants = default_participants()
        path = tmp_path / name
        path.write_bytes(export_text(participants, **kwargs).encode("utf-16"))
        return path

    return _make
