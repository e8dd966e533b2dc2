import io
import re
from pathlib import Path
from typing import List, Tuple, Union

import pandas as pd
from openpyxl.styles import Font

from teams_attendance.labels import Labels, get_labels
from teams_attendance.log import get_logger
from teams_attendance.models import AttendanceRecord, ReportHeader

logger = get_logger(__name__)

# Rosters are comma-delimited, so reports use a different separator.
CSV_SEPARATOR = ";"
CSV_ENCODING = "utf-8-sig"
SHEET_NAME = "Report"

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

# -------------------- table building --------------------

def header_rows(header: ReportHeader, labels: Labels) -> List[List[str]]:
    return [
        [labels.title_caption, labels.title(header.title)],
        [labels.date_caption, header.date],
        [labels.slot_caption, labels.slot(header.time_slot)],
    ]


def members_frame(members: List[AttendanceRecord], labels: Labels) -> pd.DataFrame:
    rows = [
        [
            labels.group(m.group),
            m.full_name,
            labels.presence_of(m.presence),
            labels.lateness_of(m.lateness),
            labels.duration_of(m.duration),
        ]
        for m in members
    ]
    return pd.DataFrame(rows, columns=list(labels.columns))


def report_filename(header: ReportHeader, labels: Labels, fmt: str) -> str:
    title = re.sub(r"[\\/:*?\"<>|]", "-", labels.title(header.title))
    date = re.sub(r"[\\/:*?\"<>|]", "-", header.date)
    return f"{labels.report_name}_{title}_{date}.{fmt}"

# -------------------- rendering --------------------

def _render_csv(header: ReportHeader, members: List[AttendanceRecord], labels: Labels) -> bytes:
    out = io.StringIO()
    pd.DataFrame(header_rows(header, labels)).to_csv(
        out, sep=CSV_SEPARATOR, header=False, index=False, lineterminator="\n"
    )
    out.write("\n")
    members_frame(members, labels).to_csv(out, sep=CSV_SEPARATOR, index=False, lineterminator="\n")
    return out.getvalue().encode(CSV_ENCODING)


def _render_xlsx(header: ReportHeader, members: List[AttendanceRecord], labels: Labels) -> bytes:
    table = members_frame(members, labels)
    top = header_rows(header, labels)
    first_table_row = len(top) + 1  # zero-based, after one blank row

    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as w:
        pd.DataFrame(top).to_excel(w, index=False, header=False, sheet_name=SHEET_NAME)
        table.to_excel(w, index=False, sheet_name=SHEET_NAME, startrow=first_table_row)

        ws = w.sheets[SHEET_NAME]
        bold = Font(bold=True)
        for row in range(1, len(top) + 1):
            ws.cell(row=row, column=1).font = bold
        for col in range(1, len(table.columns) + 1):
            ws.cell(row=first_table_row + 1, column=col).font = bold
        for letter, width in zip("ABCDE", (14, 36, 26, 16, 30)):
            ws.column_dimensions[letter].width = width
    return buf.getvalue()


def render_report(
    header: ReportHeader, members: List[AttendanceRecord], fmt: str = "csv", language: str = "en"
) -> bytes:
    labels = get_labels(language)
    if fmt == "csv":
        return _render_csv(header, members, labels)
    if fmt == "xlsx":
        return _render_xlsx(header, members, labels)
    raise ValueError(f"Unsupported report format: {fmt!r}")


def write_report(
    header: ReportHeader,
    members: List[AttendanceRecord],
    folder: Union[str, Path],
    fmt: str = "csv",
    language: str = "en",
) -> Path:
    """Render the report and write it into ``folder``; returns the file path."""
    data = render_report(header, members, fmt, language)
    folder = Path(folder).expanduser()
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / report_filename(header, get_labels(language), fmt)
    path.write_bytes(data)
    logger.info("Wrote %d members to %s", len(members), path)
    return path


def report_download(
    header: ReportHeader, members: List[AttendanceRecord], fmt: str = "csv", language: str = "en"
) -> Tuple[bytes, str, str]:
    """Report bytes with its file name and media type, for HTTP responses."""
    data = render_report(header, members, fmt, language)
    return data, report_filename(header, get_labels(language), fmt), MEDIA_TYPES[fmt]
