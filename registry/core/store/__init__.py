# Local application imports
from registry.core.store.redis import RedisHashStore, get_store, redis_client

__all__ = ["RedisHashStore", "get_store", "redis_client"]
