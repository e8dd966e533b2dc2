#!/usr/bin/env python3
"""Command-line interface for building attendance reports from meeting exports."""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from teams_attendance.config import Settings, get_settings
from teams_attendance.log import configure_logging, get_logger
from teams_attendance.logic import RunContext, build_report, read_header, summarize
from teams_attendance.models import Roster
from teams_attendance.readers import find_latest_export, load_roster, read_export
from teams_attendance.writers import write_report

logger = get_logger(__name__)


def _export_path(args: argparse.Namespace, settings: Settings) -> Path:
    if args.export:
        return Path(args.export)
    return find_latest_export(settings.download_folder())


def handle_process(args: argparse.Namespace, settings: Settings) -> Dict[str, Any]:
    export = read_export(_export_path(args, settings))
    roster = Roster() if args.no_roster else load_roster(args.roster or settings.ROSTER_PATH)
    ctx = RunContext.from_settings(settings, roster)

    header, members = build_report(export, ctx, reconcile_roster=not args.no_roster)
    path = write_report(
        header,
        members,
        args.output_dir or settings.report_folder(),
        fmt=args.format or settings.REPORT_FORMAT,
        language=args.language or settings.LANGUAGE,
    )
    return {"ok": True, "report": str(path), "meta": summarize(header, members)}


def handle_header(args: argparse.Namespace, settings: Settings) -> Dict[str, Any]:
    export = read_export(_export_path(args, settings))
    header = read_header(export.preamble, RunContext.from_settings(settings, Roster()))
    return {"ok": True, "source": export.source, "header": asdict(header)}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Meeting attendance report builder")
    parser.add_argument("--log-level", help="Override ATTENDANCE_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_process = subparsers.add_parser("process", help="Build the attendance report")
    p_process.add_argument("--export", help="Export file (default: newest .csv in the download folder)")
    p_process.add_argument("--roster", help="Roster CSV of 'full name,group' pairs")
    p_process.add_argument("--no-roster", action="store_true",
                           help="Skip group lookup and absentee reconciliation")
    p_process.add_argument("--output-dir", help="Folder for the report")
    p_process.add_argument("--format", choices=["csv", "xlsx"], help="Report format")
    p_process.add_argument("--language", choices=["en", "ru"], help="Report language")

    p_header = subparsers.add_parser("header", help="Show the meeting header of an export")
    p_header.add_argument("--export", help="Export file (default: newest .csv in the download folder)")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = get_settings()
        if args.command == "process":
            payload = handle_process(args, settings)
        elif args.command == "header":
            payload = handle_header(args, settings)
        else:
            raise ValueError(f"Unsupported command: {args.command}")
        print(json.dumps(payload, ensure_ascii=False))
        return 0
    except Exception as exc:
        logger.error("%s", exc, exc_info=not isinstance(exc, ValueError))
        print(json.dumps({"ok": False, "error": str(exc)}, ensure_ascii=False))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
