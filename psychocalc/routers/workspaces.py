"""Stateful tool workspaces.

Each workspace keeps its inputs between requests; every edit discards the
last computed result. Imports take the raw file as the request body and a
``filename`` query parameter, parse it on a worker thread, then swap it
into the workspace.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request, status
from fastapi.concurrency import run_in_threadpool

from psychocalc.calculators.enums import SummaryMode
from psychocalc.core.config import settings
from psychocalc.schemas.aiken import AikenReportOut
from psychocalc.schemas.recode import LikertBoundsIn
from psychocalc.schemas.survey import SchemaIn, SurveySummaryOut
from psychocalc.schemas.workspaces import (
    AikenWorkspaceOut,
    CellIn,
    ColumnSelectionIn,
    ConfidenceIn,
    RecodeWorkspaceOut,
    ScaleOptionCreate,
    ScaleOptionUpdate,
    ShapeIn,
    SurveyWorkspaceOut,
)
from psychocalc.services.calculations import (
    aiken_report_out,
    compiled_schema_out,
    schema_from_in,
    scale_out,
    survey_summary_out,
)
from psychocalc.services.spreadsheet import read_table
from psychocalc.services.workspaces import (
    AikenWorkspace,
    RecodeWorkspace,
    SurveyWorkspace,
    workspace_registry,
)

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


def _aiken_out(workspace: AikenWorkspace) -> AikenWorkspaceOut:
    items, judges = workspace.matrix.shape
    return AikenWorkspaceOut(
        id=workspace.id,
        items=items,
        judges=judges,
        matrix=workspace.matrix.as_lists(),
        scale=scale_out(workspace.scale),
        scale_usable=workspace.scale.is_usable,
        confidence=workspace.confidence,
        result=aiken_report_out(workspace.result, settings.locale) if workspace.result is not None else None,
    )


def _survey_out(workspace: SurveyWorkspace) -> SurveyWorkspaceOut:
    return SurveyWorkspaceOut(
        id=workspace.id,
        structure=compiled_schema_out(workspace.compiled),
        subject_count=len(workspace.subjects),
    )


def _recode_out(workspace: RecodeWorkspace) -> RecodeWorkspaceOut:
    return RecodeWorkspaceOut(
        id=workspace.id,
        headers=list(workspace.table.headers),
        row_count=len(workspace.table.rows),
        selected_columns=sorted(workspace.selected),
        bounds=LikertBoundsIn(min=workspace.bounds.min, max=workspace.bounds.max),
        preview=[list(row) for row in workspace.table.preview(settings.preview_row_limit)],
    )


def _aiken(workspace_id: str) -> AikenWorkspace:
    return workspace_registry.get(workspace_id, AikenWorkspace)


def _survey(workspace_id: str) -> SurveyWorkspace:
    return workspace_registry.get(workspace_id, SurveyWorkspace)


def _recode(workspace_id: str) -> RecodeWorkspace:
    return workspace_registry.get(workspace_id, RecodeWorkspace)


# -- Aiken ------------------------------------------------------------------


@router.post("/aiken", response_model=AikenWorkspaceOut, status_code=status.HTTP_201_CREATED)
def create_aiken() -> AikenWorkspaceOut:
    return _aiken_out(workspace_registry.add(AikenWorkspace()))


@router.get("/aiken/{workspace_id}", response_model=AikenWorkspaceOut)
def get_aiken(workspace_id: str) -> AikenWorkspaceOut:
    return _aiken_out(_aiken(workspace_id))


@router.put("/aiken/{workspace_id}/shape", response_model=AikenWorkspaceOut)
def resize_aiken(workspace_id: str, payload: ShapeIn) -> AikenWorkspaceOut:
    workspace = _aiken(workspace_id)
    workspace.resize(payload.items, payload.judges)
    return _aiken_out(workspace)


@router.put("/aiken/{workspace_id}/cells/{row}/{column}", response_model=AikenWorkspaceOut)
def set_aiken_cell(workspace_id: str, row: int, column: int, payload: CellIn) -> AikenWorkspaceOut:
    workspace = _aiken(workspace_id)
    workspace.set_cell(row, column, payload.value)
    return _aiken_out(workspace)


@router.post("/aiken/{workspace_id}/clear", response_model=AikenWorkspaceOut)
def clear_aiken(workspace_id: str) -> AikenWorkspaceOut:
    workspace = _aiken(workspace_id)
    workspace.clear()
    return _aiken_out(workspace)


@router.post("/aiken/{workspace_id}/scale/options", response_model=AikenWorkspaceOut)
def add_scale_option(workspace_id: str, payload: ScaleOptionCreate) -> AikenWorkspaceOut:
    workspace = _aiken(workspace_id)
    workspace.add_option(payload.label, payload.value)
    return _aiken_out(workspace)


@router.patch("/aiken/{workspace_id}/scale/options/{index}", response_model=AikenWorkspaceOut)
def edit_scale_option(workspace_id: str, index: int, payload: ScaleOptionUpdate) -> AikenWorkspaceOut:
    workspace = _aiken(workspace_id)
    workspace.edit_option(index, label=payload.label, value=payload.value)
    return _aiken_out(workspace)


@router.delete("/aiken/{workspace_id}/scale/options/{index}", response_model=AikenWorkspaceOut)
def remove_scale_option(workspace_id: str, index: int) -> AikenWorkspaceOut:
    """409 ``scale_too_small`` when only two options remain."""
    workspace = _aiken(workspace_id)
    workspace.remove_option(index)
    return _aiken_out(workspace)


@router.put("/aiken/{workspace_id}/confidence", response_model=AikenWorkspaceOut)
def set_confidence(workspace_id: str, payload: ConfidenceIn) -> AikenWorkspaceOut:
    workspace = _aiken(workspace_id)
    workspace.set_confidence(payload.confidence)
    return _aiken_out(workspace)


@router.post("/aiken/{workspace_id}/import", response_model=AikenWorkspaceOut)
async def import_aiken(workspace_id: str, request: Request, filename: str = Query(..., min_length=1)) -> AikenWorkspaceOut:
    workspace = _aiken(workspace_id)
    rows = await run_in_threadpool(read_table, await request.body(), filename)
    await run_in_threadpool(workspace.import_table, rows)
    return _aiken_out(workspace)


@router.post("/aiken/{workspace_id}/compute", response_model=AikenReportOut)
def compute_aiken_workspace(workspace_id: str) -> AikenReportOut:
    return aiken_report_out(_aiken(workspace_id).compute(), settings.locale)


# -- Survey -----------------------------------------------------------------


@router.post("/survey", response_model=SurveyWorkspaceOut, status_code=status.HTTP_201_CREATED)
def create_survey() -> SurveyWorkspaceOut:
    return _survey_out(workspace_registry.add(SurveyWorkspace()))


@router.get("/survey/{workspace_id}", response_model=SurveyWorkspaceOut)
def get_survey(workspace_id: str) -> SurveyWorkspaceOut:
    return _survey_out(_survey(workspace_id))


@router.put("/survey/{workspace_id}/schema", response_model=SurveyWorkspaceOut)
def set_survey_schema(workspace_id: str, payload: SchemaIn) -> SurveyWorkspaceOut:
    workspace = _survey(workspace_id)
    workspace.set_schema(schema_from_in(payload))
    return _survey_out(workspace)


@router.post("/survey/{workspace_id}/import", response_model=SurveyWorkspaceOut)
async def import_survey(
    workspace_id: str,
    request: Request,
    filename: str = Query(..., min_length=1),
    confirm: bool = Query(False),
) -> SurveyWorkspaceOut:
    """409 ``schema_mismatch`` (with both column counts) unless ``confirm`` is true."""
    workspace = _survey(workspace_id)
    rows = await run_in_threadpool(read_table, await request.body(), filename)
    await run_in_threadpool(workspace.import_table, rows, confirm=confirm)
    return _survey_out(workspace)


@router.get("/survey/{workspace_id}/summary", response_model=SurveySummaryOut)
def survey_summary(workspace_id: str, mode: SummaryMode = Query(SummaryMode.AVERAGE)) -> SurveySummaryOut:
    return survey_summary_out(_survey(workspace_id).summary(mode))


# -- Recode -----------------------------------------------------------------


@router.post("/recode", response_model=RecodeWorkspaceOut, status_code=status.HTTP_201_CREATED)
def create_recode() -> RecodeWorkspaceOut:
    return _recode_out(workspace_registry.add(RecodeWorkspace()))


@router.get("/recode/{workspace_id}", response_model=RecodeWorkspaceOut)
def get_recode(workspace_id: str) -> RecodeWorkspaceOut:
    return _recode_out(_recode(workspace_id))


@router.post("/recode/{workspace_id}/import", response_model=RecodeWorkspaceOut)
async def import_recode(workspace_id: str, request: Request, filename: str = Query(..., min_length=1)) -> RecodeWorkspaceOut:
    workspace = _recode(workspace_id)
    rows = await run_in_threadpool(read_table, await request.body(), filename)
    await run_in_threadpool(workspace.import_table, rows)
    return _recode_out(workspace)


@router.post("/recode/{workspace_id}/columns/{column}/toggle", response_model=RecodeWorkspaceOut)
def toggle_recode_column(workspace_id: str, column: int) -> RecodeWorkspaceOut:
    workspace = _recode(workspace_id)
    workspace.toggle(column)
    return _recode_out(workspace)


@router.put("/recode/{workspace_id}/columns", response_model=RecodeWorkspaceOut)
def select_recode_columns(workspace_id: str, payload: ColumnSelectionIn) -> RecodeWorkspaceOut:
    workspace = _recode(workspace_id)
    workspace.select(payload.columns)
    return _recode_out(workspace)


@router.put("/recode/{workspace_id}/bounds", response_model=RecodeWorkspaceOut)
def set_recode_bounds(workspace_id: str, payload: LikertBoundsIn) -> RecodeWorkspaceOut:
    workspace = _recode(workspace_id)
    workspace.set_bounds(payload.min, payload.max)
    return _recode_out(workspace)


@router.get("/recode/{workspace_id}/result", response_model=RecodeWorkspaceOut)
def recode_result(workspace_id: str) -> RecodeWorkspaceOut:
    """Same shape as the workspace view, with the recoded rows as preview."""
    workspace = _recode(workspace_id)
    out = _recode_out(workspace)
    out.preview = [list(row) for row in workspace.recoded().preview(settings.preview_row_limit)]
    return out
