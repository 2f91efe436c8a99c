# Third-party imports
from fastapi import APIRouter, Depends

# Local application imports
from registry.dependancies.common import get_resident_service
from registry.schemas.residents import RecomputedAggregates, ResidentBreakdown
from registry.services.residents import ResidentService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/stats", response_model=RecomputedAggregates)
async def get_analytics_stats(service: ResidentService = Depends(get_resident_service)):
    """Population and voter breakdown recomputed from every live record"""
    return await service.read_aggregates_recomputed()


@router.get("/residents", response_model=ResidentBreakdown)
async def get_resident_breakdown(service: ResidentService = Depends(get_resident_service)):
    return await service.read_resident_breakdown()
