"""Request/response adapters around the pure calculators.

Routers hand validated request models to the ``run_*`` functions here;
these build the engine inputs, call the engine and shape the result into
response models. Non-finite floats become ``None`` so responses stay valid
JSON.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from psychocalc.calculators.aiken import AikenReport, compute_aiken
from psychocalc.calculators.baremos import BaremoTable, ItemScale, generate_baremos
from psychocalc.calculators.cronbach import (
    CronbachResult,
    CronbachRow,
    VariableRange,
    cronbach_by_variables,
    cronbach_global,
    load_subject_table,
)
from psychocalc.calculators.enums import CronbachMode
from psychocalc.calculators.matrix import ResponseMatrix
from psychocalc.calculators.recode import LikertBounds, RawTable, recode
from psychocalc.calculators.scale import RatingScale
from psychocalc.calculators.survey import (
    CompiledSchema,
    Dimension,
    SurveySummary,
    Variable,
    VariableSchema,
    aggregate,
    compile_schema,
    detect_mismatch,
    load_subjects,
    uniform_schema,
)
from psychocalc.core.config import settings
from psychocalc.core.errors import ImportFormatError, InvalidScaleError, SchemaMismatchError
from psychocalc.core.formatting import format_fixed
from psychocalc.core.logging import get_logger
from psychocalc.i18n import translate
from psychocalc.schemas.aiken import AikenComputeRequest, AikenItemOut, AikenReportOut, ScaleOptionOut
from psychocalc.schemas.baremos import BaremoRequest, BaremoRowOut, BaremoTableOut, RangeLevelOut
from psychocalc.schemas.cronbach import CronbachComputeRequest, CronbachResponse, CronbachRowOut
from psychocalc.schemas.recode import RecodeRequest, RecodeResponse
from psychocalc.schemas.survey import (
    CompiledDimensionOut,
    CompiledSchemaOut,
    CompiledVariableOut,
    SchemaIn,
    SurveySummaryOut,
    SurveySummaryRequest,
    VariableIn,
)
from psychocalc.services.tables import level_labels

logger = get_logger("psychocalc.services.calculations", component="api")


def _finite(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


# -- Aiken ------------------------------------------------------------------


def scale_out(scale: RatingScale) -> list[ScaleOptionOut]:
    return [ScaleOptionOut(label=option.label, value=option.value) for option in scale]


def aiken_report_out(report: AikenReport, locale: str) -> AikenReportOut:
    return AikenReportOut(
        items=[
            AikenItemOut(
                item_index=item.item_index,
                mean=_finite(item.mean),
                v=_finite(item.v),
                v_display=item.v_display,
                verdict=item.verdict.value,
                verdict_label=translate("verdicts", item.verdict.value, locale),
            )
            for item in report.items
        ],
        lo=report.lo,
        hi=report.hi,
        threshold=report.threshold,
        confidence=report.confidence,
        valid_count=report.valid_count,
    )


def run_aiken(payload: AikenComputeRequest) -> AikenReport:
    scale = RatingScale.from_pairs((option.label, option.value) for option in payload.scale)
    if not scale.is_usable:
        raise InvalidScaleError(detail={"lo": scale.lo, "hi": scale.hi})
    matrix = ResponseMatrix.from_raw(payload.matrix)
    report = compute_aiken(matrix, scale, payload.confidence)
    logger.info(
        "aiken_computed",
        extra={"structured_data": {"items": len(report.items), "valid": report.valid_count}},
    )
    return report


# -- Cronbach ---------------------------------------------------------------


def cronbach_row_out(row: CronbachRow, locale: str) -> CronbachRowOut:
    if isinstance(row, CronbachResult):
        return CronbachRowOut(
            label=row.label,
            start=row.start,
            end=row.end,
            n_items=row.n_items,
            n_subjects=row.n_subjects,
            sum_item_variances=_finite(row.sum_item_variances),
            total_variance=_finite(row.total_variance),
            alpha=_finite(row.alpha),
            alpha_display=format_fixed(row.alpha, decimals=3),
            interpretation=row.interpretation,
            interpretation_label=translate("alpha_bands", row.interpretation, locale),
        )
    return CronbachRowOut(label=row.label, start=row.start, end=row.end, error=row.error)


def run_cronbach(payload: CronbachComputeRequest) -> tuple[CronbachRow, ...]:
    rows = load_subject_table(payload.table)
    if payload.mode is CronbachMode.GLOBAL:
        return (cronbach_global(rows),)
    ranges = [
        VariableRange(name=declared.name or f"{declared.start}-{declared.end}", start=declared.start, end=declared.end)
        for declared in payload.variables
    ]
    return cronbach_by_variables(rows, ranges)


def cronbach_response(payload: CronbachComputeRequest, locale: str) -> CronbachResponse:
    results = run_cronbach(payload)
    return CronbachResponse(mode=payload.mode, rows=[cronbach_row_out(row, locale) for row in results])


# -- Survey structure -------------------------------------------------------


def _variable_from_in(variable: VariableIn) -> Variable:
    return Variable(
        name=variable.name,
        dimensions=tuple(Dimension(name=dim.name, item_count=dim.item_count) for dim in variable.dimensions),
    )


def schema_from_in(payload: SchemaIn) -> VariableSchema:
    if payload.dimension_count is not None and payload.items_per_dimension is not None:
        return uniform_schema(payload.dimension_count, payload.items_per_dimension, payload.variable_name)
    return VariableSchema(variables=tuple(_variable_from_in(variable) for variable in payload.variables))


def compiled_schema_out(compiled: CompiledSchema) -> CompiledSchemaOut:
    return CompiledSchemaOut(
        total_columns=compiled.total_columns,
        variables=[
            CompiledVariableOut(
                name=variable.name,
                start_index=variable.start_index,
                item_count=variable.item_count,
                dimensions=[
                    CompiledDimensionOut(
                        variable=dim.variable,
                        name=dim.name,
                        start_index=dim.start_index,
                        item_count=dim.item_count,
                        question_labels=list(dim.question_labels),
                        question_span=dim.question_span,
                    )
                    for dim in variable.dimensions
                ],
            )
            for variable in compiled.variables
        ],
    )


def survey_summary_out(summary: SurveySummary) -> SurveySummaryOut:
    return SurveySummaryOut(
        mode=summary.mode,
        headers=list(summary.headers),
        rows=summary.as_rows(),
        subject_count=len(summary.rows),
    )


def run_survey_summary(payload: SurveySummaryRequest) -> SurveySummary:
    """One-shot load and aggregate; a column mismatch needs ``confirm``."""

    compiled = compile_schema(schema_from_in(payload.schema_))
    mismatch = detect_mismatch(payload.table, compiled)
    if mismatch is not None and not payload.confirm:
        raise SchemaMismatchError(mismatch.detected_columns, mismatch.expected_columns)
    subjects = load_subjects(payload.table, compiled)
    return aggregate(subjects, compiled, payload.mode)


# -- Baremos ----------------------------------------------------------------


def run_baremos(payload: BaremoRequest) -> BaremoTable:
    variables: Sequence[Variable] = [_variable_from_in(variable) for variable in payload.variables]
    return generate_baremos(
        ItemScale(min=payload.item_scale.min, max=payload.item_scale.max),
        variables,
        payload.level_count,
        payload.level_names,
    )


def baremo_table_out(table: BaremoTable, locale: str) -> BaremoTableOut:
    level_names = list(level_labels(table, locale))
    return BaremoTableOut(
        level_names=level_names,
        headers=[translate("headers", "Component", locale), *level_names],
        rows=[
            BaremoRowOut(
                variable=row.variable,
                component=row.component,
                item_count=row.item_count,
                min_raw=row.min_raw,
                max_raw=row.max_raw,
                is_total=row.is_total,
                levels=[
                    RangeLevelOut(
                        label=level_names[index],
                        lower_bound=level.lower_bound,
                        upper_bound=level.upper_bound,
                        display=level.display,
                    )
                    for index, level in enumerate(row.levels)
                ],
            )
            for row in table.rows
        ],
    )


# -- Recode -----------------------------------------------------------------


def run_recode(payload: RecodeRequest) -> tuple[RawTable, RawTable]:
    """Return ``(original, recoded)``; the original is never modified."""

    original = RawTable.from_cells(payload.table)
    if not original.headers:
        raise ImportFormatError("The table has no header row")
    bounds = LikertBounds(min=payload.bounds.min, max=payload.bounds.max)
    return original, recode(original, frozenset(payload.columns), bounds)


def recode_response(payload: RecodeRequest) -> RecodeResponse:
    original, recoded = run_recode(payload)
    limit = settings.preview_row_limit
    return RecodeResponse(
        headers=list(recoded.headers),
        rows=[list(row) for row in recoded.rows],
        selected_columns=sorted(set(payload.columns)),
        preview_original=[list(row) for row in original.preview(limit)],
        preview_recoded=[list(row) for row in recoded.preview(limit)],
    )
