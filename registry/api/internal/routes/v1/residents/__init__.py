from .analytics_routes import router as analytics_router
from .resident_routes import router as resident_router

__all__ = ["analytics_router", "resident_router"]
