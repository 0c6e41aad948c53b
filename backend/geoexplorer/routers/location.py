from typing import Optional

from fastapi import APIRouter, Depends

from ..config import Settings, get_settings
from ..dependencies import get_target_provider
from ..models.game import LocationResponse
from ..services.targets import TargetProvider, gather_targets

router = APIRouter(prefix="/location", tags=["Location"])


@router.get("/random", response_model=LocationResponse)
async def random_location(
    provider: Optional[TargetProvider] = Depends(get_target_provider),
    settings: Settings = Depends(get_settings),
):
    """One random location, from imagery if available, else the curated list."""
    [target] = await gather_targets(provider, 1, timeout_sec=settings.IMAGERY_TIMEOUT_SEC)
    return LocationResponse(
        provider=target.provider,
        image_reference=target.image_reference,
        latitude=target.coordinate.lat,
        longitude=target.coordinate.lon,
        difficulty=target.difficulty,
        name=target.name,
    )
