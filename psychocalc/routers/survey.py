from fastapi import APIRouter

from psychocalc.calculators.survey import compile_schema
from psychocalc.schemas.survey import CompiledSchemaOut, SchemaIn, SurveySummaryOut, SurveySummaryRequest
from psychocalc.services.calculations import (
    compiled_schema_out,
    run_survey_summary,
    schema_from_in,
    survey_summary_out,
)

router = APIRouter(prefix="/survey", tags=["survey"])


@router.post("/compile", response_model=CompiledSchemaOut)
def compile_structure(payload: SchemaIn) -> CompiledSchemaOut:
    return compiled_schema_out(compile_schema(schema_from_in(payload)))


@router.post("/summary", response_model=SurveySummaryOut)
def summary(payload: SurveySummaryRequest) -> SurveySummaryOut:
    """409 ``schema_mismatch`` when the column count differs and ``confirm`` is false."""
    return survey_summary_out(run_survey_summary(payload))
