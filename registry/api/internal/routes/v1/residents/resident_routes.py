# Third-party imports
from fastapi import APIRouter, Depends, HTTPException

# Local application imports
from registry.core.exceptions import ResidentNotFound
from registry.dependancies.common import get_resident_service
from registry.schemas.residents import (
    IncrementalAggregates,
    ReconciliationReport,
    ResidentCreate,
    ResidentDeleteResponse,
    ResidentResponse,
    ResidentUpdate,
)
from registry.services.residents import ResidentService

router = APIRouter(prefix="/residents", tags=["Residents"])


@router.post("", response_model=ResidentResponse, status_code=201)
async def create_resident(
    resident_data: ResidentCreate,
    service: ResidentService = Depends(get_resident_service),
):
    """Add a resident and count it in the aggregates"""
    resident = await service.create_resident(resident_data.to_store())
    return ResidentResponse.from_record(resident.id, resident.fields)


@router.get("", response_model=list[ResidentResponse])
async def list_residents(service: ResidentService = Depends(get_resident_service)):
    """List every live resident"""
    residents = await service.list_residents()
    return [ResidentResponse.from_record(resident.id, resident.fields) for resident in residents]


# Registered before /{resident_id} so "stats" is not taken for an id
@router.get("/stats", response_model=IncrementalAggregates)
async def get_resident_stats(service: ResidentService = Depends(get_resident_service)):
    """Maintained counters: fast, may lag behind the records"""
    return await service.read_aggregates_incremental()


@router.post("/stats/reconcile", response_model=ReconciliationReport)
async def reconcile_resident_stats(service: ResidentService = Depends(get_resident_service)):
    """Rebuild the counters row from the live records"""
    return await service.reconcile_aggregates()


@router.get("/{resident_id}", response_model=ResidentResponse)
async def get_resident(
    resident_id: str,
    service: ResidentService = Depends(get_resident_service),
):
    try:
        resident = await service.get_resident(resident_id)
    except ResidentNotFound:
        raise HTTPException(status_code=404, detail="Resident not found")
    return ResidentResponse.from_record(resident.id, resident.fields)


@router.put("/{resident_id}", response_model=ResidentResponse)
async def update_resident(
    resident_id: str,
    resident_data: ResidentUpdate,
    service: ResidentService = Depends(get_resident_service),
):
    """Partially update a resident; omitted fields keep their values"""
    try:
        resident = await service.update_resident(resident_id, resident_data.to_store())
    except ResidentNotFound:
        raise HTTPException(status_code=404, detail="Resident not found")
    return ResidentResponse.from_record(resident.id, resident.fields)


@router.delete("/{resident_id}", response_model=ResidentDeleteResponse)
async def delete_resident(
    resident_id: str,
    service: ResidentService = Depends(get_resident_service),
):
    try:
        await service.delete_resident(resident_id)
    except ResidentNotFound:
        raise HTTPException(status_code=404, detail="Resident not found")
    return ResidentDeleteResponse(id=resident_id)
