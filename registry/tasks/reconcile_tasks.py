"""
Periodic repair of the resident store: prune orphan hashes and dangling
membership entries, then rebuild the counters row from live records.
"""

# Standard library imports
from typing import Any

# Third-party imports
import redis.asyncio as redis

# Local application imports
from registry.core.celery import celery_app
from registry.core.exceptions import StoreUnavailable
from registry.core.monitoring.logging import get_contextual_logger
from registry.core.store import RedisHashStore
from registry.services.residents import ResidentService
from registry.settings import settings
from registry.utils.celery_utils import celery_async_task

logger = get_contextual_logger(__name__)


async def reconcile_store(service: ResidentService, grace_seconds: float = 2.0) -> dict[str, Any]:
    orphans = await service.prune_orphans(grace_seconds=grace_seconds)
    report = await service.reconcile_aggregates()
    return {
        "pruned_orphan_hashes": orphans.orphan_hashes,
        "pruned_dangling_members": orphans.dangling_members,
        "drift": report.drift,
        "stale_subdivisions": report.stale_fields,
    }


async def _reconcile_with_new_client() -> dict[str, Any]:
    # Each task run gets its own event loop, so it needs its own connections.
    client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        return await reconcile_store(ResidentService(RedisHashStore(client)))
    finally:
        await client.aclose()


@celery_app.task(
    bind=True,
    autoretry_for=(StoreUnavailable,),
    retry_backoff=True,
    max_retries=3,
)
@celery_async_task
async def reconcile_counters_task(self: Any) -> dict[str, Any]:
    """Prune orphans and rebuild the counters row"""
    result = await _reconcile_with_new_client()
    if result["drift"] or result["pruned_orphan_hashes"] or result["pruned_dangling_members"]:
        logger.warning(f"Reconciliation repaired the resident store: {result}")
    return result
