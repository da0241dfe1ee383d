from fastapi import APIRouter, Depends

from household_finance.core.config import Settings
from household_finance.services.household_context import get_app_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
async def health(settings: Settings = Depends(get_app_settings)):
    return {"status": "ok", "version": settings.version}
