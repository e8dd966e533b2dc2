import json
from dataclasses import asdict
from urllib.parse import quote

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response
from mangum import Mangum

from teams_attendance.config import get_settings
from teams_attendance.log import get_logger
from teams_attendance.logic import RunContext, build_report, read_header, summarize
from teams_attendance.models import Roster
from teams_attendance.readers import load_roster_bytes, parse_export_bytes
from teams_attendance.writers import report_download

logger = get_logger(__name__)

app = FastAPI()


@app.get("/api/health")
def health():
    return {"ok": True}


@app.post("/api/process")
async def process(
    export: UploadFile = File(...),
    roster: UploadFile | None = File(None),
    params: str = Form("{}"),
):
    try:
        params_obj = json.loads(params or "{}")
    except ValueError:
        params_obj = {}
    if not isinstance(params_obj, dict):
        params_obj = {}
    settings = get_settings()
    fmt = str(params_obj.get("format") or settings.REPORT_FORMAT)
    language = str(params_obj.get("language") or settings.LANGUAGE)

    export_bytes = await export.read()
    roster_bytes = await roster.read() if roster is not None else None

    try:
        raw = parse_export_bytes(export_bytes, export.filename)
        roster_obj = load_roster_bytes(roster_bytes, roster.filename) if roster_bytes else Roster()
        ctx = RunContext.from_settings(settings, roster_obj)
        header, members = build_report(raw, ctx, reconcile_roster=bool(roster_bytes))
        data, filename, media_type = report_download(header, members, fmt, language)
    except ValueError as e:
        logger.warning("Rejected export %s: %s", export.filename, e)
        return JSONResponse(status_code=400, content={"error": str(e)})

    headers = {
        "Content-Disposition": f"attachment; filename=attendance_report.{fmt}; filename*=UTF-8''{quote(filename)}",
        "X-Attendance-Meta": json.dumps(summarize(header, members)),
    }
    return Response(content=data, media_type=media_type, headers=headers)


@app.post("/api/header")
async def header(export: UploadFile = File(...)):
    export_bytes = await export.read()
    try:
        raw = parse_export_bytes(export_bytes, export.filename)
        parsed = read_header(raw.preamble, RunContext.from_settings(get_settings(), Roster()))
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return asdict(parsed)

handler = Mangum(app)
