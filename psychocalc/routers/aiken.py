from fastapi import APIRouter

from psychocalc.core.config import settings
from psychocalc.schemas.aiken import AikenComputeRequest, AikenReportOut
from psychocalc.services.calculations import aiken_report_out, run_aiken

router = APIRouter(prefix="/aiken", tags=["aiken"])


@router.post("/compute", response_model=AikenReportOut)
def compute(payload: AikenComputeRequest) -> AikenReportOut:
    return aiken_report_out(run_aiken(payload), settings.locale)
