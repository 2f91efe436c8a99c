# Standard library imports
from collections.abc import Mapping

# Third-party imports
import redis.asyncio as redis
from redis.exceptions import RedisError

# Local application imports
from registry.core.exceptions import StoreUnavailable
from registry.core.monitoring.logging import get_contextual_logger
from registry.settings import settings

logger = get_contextual_logger(__name__)

connection_pool: redis.ConnectionPool = redis.ConnectionPool.from_url(
    settings.REDIS_URL,
    decode_responses=True,
    socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
)

redis_client: redis.Redis = redis.Redis(connection_pool=connection_pool)


class RedisHashStore:
    """
    Hash, set and counter primitives over a single Redis connection.

    Every method issues exactly one Redis command, so each call is atomic
    on its own and nothing groups calls together. Any ``RedisError`` is
    re-raised as ``StoreUnavailable``.
    """

    def __init__(self, client: redis.Redis):
        self.client = client

    async def _run(self, operation: str, awaitable):
        try:
            return await awaitable
        except RedisError as e:
            logger.warning(f"Redis {operation} failed: {e}")
            raise StoreUnavailable(operation, str(e)) from e

    # Hashes
    async def hash_set(self, key: str, field: str, value: str) -> None:
        await self._run("HSET", self.client.hset(key, field, value))

    async def hash_set_many(self, key: str, mapping: Mapping[str, str | int]) -> None:
        if mapping:
            await self._run("HSET", self.client.hset(key, mapping=dict(mapping)))

    async def hash_get_all(self, key: str) -> dict[str, str]:
        return await self._run("HGETALL", self.client.hgetall(key))

    async def hash_delete(self, key: str) -> int:
        return await self._run("DEL", self.client.delete(key))

    async def hash_delete_fields(self, key: str, *fields: str) -> int:
        if not fields:
            return 0
        return await self._run("HDEL", self.client.hdel(key, *fields))

    # Sets
    async def set_add(self, key: str, member: str) -> int:
        return await self._run("SADD", self.client.sadd(key, member))

    async def set_remove(self, key: str, member: str) -> int:
        return await self._run("SREM", self.client.srem(key, member))

    async def set_members(self, key: str) -> set[str]:
        return await self._run("SMEMBERS", self.client.smembers(key))

    async def set_cardinality(self, key: str) -> int:
        return await self._run("SCARD", self.client.scard(key))

    async def set_is_member(self, key: str, member: str) -> bool:
        return bool(await self._run("SISMEMBER", self.client.sismember(key, member)))

    # Counters
    async def increment_by(self, key: str, field: str, delta: int) -> int:
        return await self._run("HINCRBY", self.client.hincrby(key, field, delta))

    # Maintenance
    async def scan_keys(self, pattern: str) -> list[str]:
        try:
            return [key async for key in self.client.scan_iter(match=pattern, count=500)]
        except RedisError as e:
            raise StoreUnavailable("SCAN", str(e)) from e

    async def ping(self) -> bool:
        return bool(await self._run("PING", self.client.ping()))


def get_store() -> RedisHashStore:
    return RedisHashStore(redis_client)
