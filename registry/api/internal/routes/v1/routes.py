# Third-party imports
from fastapi import APIRouter

# Local application imports
from registry.api.internal.routes.v1.residents import analytics_router, resident_router

router = APIRouter()

# Include all internal v1 routers
router.include_router(resident_router)
router.include_router(analytics_router)
