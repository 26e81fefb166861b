from fastapi import APIRouter

from psychocalc.core.config import settings
from psychocalc.schemas.baremos import BaremoRequest, BaremoTableOut
from psychocalc.services.calculations import baremo_table_out, run_baremos

router = APIRouter(prefix="/baremos", tags=["baremos"])


@router.post("/generate", response_model=BaremoTableOut)
def generate(payload: BaremoRequest) -> BaremoTableOut:
    return baremo_table_out(run_baremos(payload), settings.locale)
