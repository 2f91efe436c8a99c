"""
Pre-start script that waits for Redis before the API or worker boots.
"""

# Standard library imports
import asyncio
import sys

# Third-party imports
import redis.asyncio as redis

# Local application imports
from registry.core.exceptions import StoreUnavailable
from registry.core.monitoring.logging import get_logger
from registry.core.store import RedisHashStore
from registry.settings import settings

logger = get_logger(__name__)


async def check_redis(store: RedisHashStore) -> bool:
    """Check if Redis answers PING."""
    try:
        await store.ping()
        logger.info("Redis is ready")
        return True
    except StoreUnavailable as e:
        logger.error(f"Redis connection failed: {e}")
        return False


async def wait_for_redis(store: RedisHashStore, max_retries: int = 30, retry_interval: float = 2) -> bool:
    """
    Wait for Redis to be ready.

    Args:
        store: Store wrapping the client to ping
        max_retries: Maximum number of connection attempts
        retry_interval: Seconds between retries

    Returns:
        True if Redis is ready, False otherwise
    """
    logger.info("Waiting for Redis to be ready...")

    for attempt in range(1, max_retries + 1):
        logger.info(f"Redis connection attempt {attempt}/{max_retries}")

        if await check_redis(store):
            return True

        if attempt < max_retries:
            logger.info(f"Retrying in {retry_interval} seconds...")
            await asyncio.sleep(retry_interval)

    logger.error(f"Failed to connect to Redis after {max_retries} attempts")
    return False


async def main() -> None:
    """Main pre-start routine."""
    logger.info("Starting pre-start checks...")

    client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        ready = await wait_for_redis(RedisHashStore(client))
    finally:
        await client.aclose()

    if not ready:
        logger.error("Pre-start checks failed: Redis is not available")
        sys.exit(1)

    logger.info("All pre-start checks passed")


if __name__ == "__main__":
    asyncio.run(main())
