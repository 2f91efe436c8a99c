# Third-party imports
from fastapi import APIRouter

# Local application imports
from registry.api.internal.main import router as internal_router

router = APIRouter()

router.include_router(internal_router)
