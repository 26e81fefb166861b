from fastapi import APIRouter

from psychocalc.schemas.recode import RecodeRequest, RecodeResponse
from psychocalc.services.calculations import recode_response

router = APIRouter(prefix="/recode", tags=["recode"])


@router.post("/apply", response_model=RecodeResponse)
def apply(payload: RecodeRequest) -> RecodeResponse:
    return recode_response(payload)
