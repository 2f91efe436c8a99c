# Local application imports
from registry.core.celery.celery import celery_app

__all__ = ["celery_app"]
