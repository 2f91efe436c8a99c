# Local application imports
from registry.pre_start import check_redis, wait_for_redis
from tests.conftest import FlakyStore


async def test_check_redis_reports_ready(store):
    assert await check_redis(store)


async def test_wait_for_redis_retries_until_ready(redis_client):
    store = FlakyStore(redis_client, fail_on="PING", times=2)

    assert await wait_for_redis(store, max_retries=3, retry_interval=0)
    assert store.failures == 2


async def test_wait_for_redis_gives_up(redis_client):
    store = FlakyStore(redis_client, fail_on="PING", times=5)

    assert not await wait_for_redis(store, max_retries=2, retry_interval=0)
