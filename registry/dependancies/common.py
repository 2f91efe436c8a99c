# Local application imports
from registry.core.store import get_store
from registry.services.residents import ResidentService


def get_resident_service() -> ResidentService:
    """Resident service bound to the shared Redis connection pool"""
    return ResidentService(get_store())
