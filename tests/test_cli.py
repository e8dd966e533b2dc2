"""Tests for the command-line entry point."""

import json

from teams_attendance.cli import main


def _payload(capsys):
    return json.loads(capsys.readouterr().out)


def test_process_writes_report(make_export, roster_file, tmp_path, capsys):
    export = make_export()
    out = tmp_path / "reports"

    code = main(["process", "--export", str(export), "--roster", str(roster_file), "--output-dir", str(out)])

    payload = _payload(capsys)
    assert code == 0
    assert payload["ok"] is True
    assert payload["meta"]["members"] == 5
    assert payload["meta"]["Absent"] == 2
    assert payload["meta"]["groups"] == ["МП-21", "МТ-11"]
    assert (out / "Attendance report_Algebra_16.10.2022.csv").exists()


def test_process_uses_settings(make_export, roster_file, tmp_path, monkeypatch, capsys):
    (tmp_path / "dl").mkdir()
    make_export(name="dl/meeting.csv")
    monkeypatch.setenv("ATTENDANCE_DOWNLOAD_FOLDER", str(tmp_path / "dl"))
    monkeypatch.setenv("ATTENDANCE_REPORT_FOLDER", str(tmp_path / "desk"))
    monkeypatch.setenv("ATTENDANCE_LANGUAGE", "ru")

    code = main(["process", "--format", "xlsx"])

    payload = _payload(capsys)
    assert code == 0
    assert payload["report"].endswith("Отчёт о проведении собрания_Algebra_16.10.2022.xlsx")
    assert (tmp_path / "desk").is_dir()


def test_process_without_roster(make_export, tmp_path, capsys):
    code = main(["process", "--export", str(make_export()), "--no-roster", "--output-dir", str(tmp_path)])

    payload = _payload(capsys)
    assert code == 0
    assert payload["meta"]["members"] == 3
    assert payload["meta"]["groups"] == ["Guest"]


def test_failure_writes_nothing(make_export, tmp_path, capsys):
    from conftest import participant

    export = make_export([participant("Ivan Ivanovich Ivanov", duration="1 2 3")])
    out = tmp_path / "reports"

    code = main(["process", "--export", str(export), "--no-roster", "--output-dir", str(out)])

    payload = _payload(capsys)
    assert code == 1
    assert payload["ok"] is False
    assert "duration" in payload["error"].lower()
    assert not out.exists()


def test_missing_roster_fails(make_export, tmp_path, capsys):
    code = main(["process", "--export", str(make_export()), "--roster", str(tmp_path / "none.csv")])

    assert code == 1
    assert "roster" in _payload(capsys)["error"].lower()


def test_header_command(make_export, capsys):
    code = main(["header", "--export", str(make_export(start="6:30:00"))])

    payload = _payload(capsys)
    assert code == 0
    assert payload["header"] == {"title": "Algebra", "date": "16.10.2022", "time_slot": "Consultation"}
