from fastapi import APIRouter

from psychocalc.core.config import settings
from psychocalc.schemas.cronbach import CronbachComputeRequest, CronbachResponse
from psychocalc.services.calculations import cronbach_response

router = APIRouter(prefix="/cronbach", tags=["cronbach"])


@router.post("/compute", response_model=CronbachResponse)
def compute(payload: CronbachComputeRequest) -> CronbachResponse:
    """Global mode covers every column; variables mode reports one row per range."""
    return cronbach_response(payload, settings.locale)
