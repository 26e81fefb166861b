"""Spreadsheet import plus the xlsx, PDF and APA export endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse

from psychocalc.core.config import settings
from psychocalc.schemas.aiken import AikenComputeRequest
from psychocalc.schemas.baremos import BaremoRequest
from psychocalc.schemas.cronbach import CronbachComputeRequest
from psychocalc.schemas.recode import RecodeRequest
from psychocalc.schemas.survey import SurveySummaryRequest
from psychocalc.schemas.tables import ApaTableIn, ExportTableIn, ImportedTableOut
from psychocalc.services import tables
from psychocalc.services.calculations import (
    run_aiken,
    run_baremos,
    run_cronbach,
    run_recode,
    run_survey_summary,
)
from psychocalc.services.exports import PDF_MEDIA_TYPE, apa_table_html, build_pdf_report
from psychocalc.services.spreadsheet import XLSX_MEDIA_TYPE, read_table, write_table

imports_router = APIRouter(prefix="/imports", tags=["imports"])
exports_router = APIRouter(prefix="/exports", tags=["exports"])


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _xlsx(table: tables.ExportTable) -> Response:
    return _attachment(write_table(table.headers, table.rows, table.sheet_name), XLSX_MEDIA_TYPE, table.filename)


def _pdf(table: tables.ExportTable) -> Response:
    return _attachment(build_pdf_report(table.title, table.headers, table.rows), PDF_MEDIA_TYPE, table.filename)


def _apa(table: tables.ExportTable, *, note: bool = True) -> HTMLResponse:
    caption, note_label = tables.apa_labels(settings.locale)
    fragment = apa_table_html(table.title, table.headers, table.rows, caption=caption, note=note_label if note else None)
    return HTMLResponse(content=fragment)


@imports_router.post("/table", response_model=ImportedTableOut)
async def import_table(request: Request, filename: str = Query(..., min_length=1)) -> ImportedTableOut:
    """Parse the raw request body as the file named ``filename``."""
    rows = await run_in_threadpool(read_table, await request.body(), filename)
    return ImportedTableOut(
        filename=filename,
        row_count=len(rows),
        column_count=max(len(row) for row in rows),
        rows=rows,
    )


@exports_router.post("/xlsx")
def export_xlsx(payload: ExportTableIn) -> Response:
    content = write_table(payload.headers, payload.rows, payload.sheet_name)
    return _attachment(content, XLSX_MEDIA_TYPE, payload.filename or "export.xlsx")


@exports_router.post("/pdf")
def export_pdf(payload: ExportTableIn) -> Response:
    content = build_pdf_report(payload.title, payload.headers, payload.rows)
    return _attachment(content, PDF_MEDIA_TYPE, payload.filename or "export.pdf")


@exports_router.post("/apa", response_class=HTMLResponse)
def export_apa(payload: ApaTableIn) -> HTMLResponse:
    caption, note = tables.apa_labels(settings.locale)
    fragment = apa_table_html(
        payload.title,
        payload.headers,
        payload.rows,
        caption=payload.caption if payload.caption is not None else caption,
        note=payload.note if payload.note is not None else note,
    )
    return HTMLResponse(content=fragment)


@exports_router.post("/aiken/pdf")
def export_aiken_pdf(payload: AikenComputeRequest) -> Response:
    return _pdf(tables.aiken_table(run_aiken(payload), settings.locale))


@exports_router.post("/aiken/apa", response_class=HTMLResponse)
def export_aiken_apa(payload: AikenComputeRequest) -> HTMLResponse:
    return _apa(tables.aiken_table(run_aiken(payload), settings.locale))


@exports_router.post("/cronbach/pdf")
def export_cronbach_pdf(payload: CronbachComputeRequest) -> Response:
    return _pdf(tables.cronbach_table(run_cronbach(payload), settings.locale))


@exports_router.post("/cronbach/apa", response_class=HTMLResponse)
def export_cronbach_apa(payload: CronbachComputeRequest) -> HTMLResponse:
    return _apa(tables.cronbach_table(run_cronbach(payload), settings.locale))


@exports_router.post("/baremos/xlsx")
def export_baremos_xlsx(payload: BaremoRequest) -> Response:
    return _xlsx(tables.baremo_table(run_baremos(payload), settings.locale))


@exports_router.post("/baremos/apa", response_class=HTMLResponse)
def export_baremos_apa(payload: BaremoRequest) -> HTMLResponse:
    return _apa(tables.baremo_table(run_baremos(payload), settings.locale), note=False)


@exports_router.post("/survey/xlsx")
def export_survey_xlsx(payload: SurveySummaryRequest) -> Response:
    return _xlsx(tables.survey_table(run_survey_summary(payload), settings.locale))


@exports_router.post("/recode/xlsx")
def export_recode_xlsx(payload: RecodeRequest) -> Response:
    _, recoded = run_recode(payload)
    return _xlsx(tables.recode_table(recoded, settings.locale))
