# Third-party imports
import fakeredis
import pytest

# Local application imports
from registry.core.exceptions import StoreUnavailable
from registry.core.store import RedisHashStore
from registry.services.residents import ResidentService


class FlakyStore(RedisHashStore):
    """
    Store that fails one Redis command on demand.

    After ``skip`` successful calls of ``fail_on`` the next ``times`` calls
    of that command raise ``StoreUnavailable``; everything else goes through.
    """

    def __init__(self, client, fail_on: str | None = None, skip: int = 0, times: int = 1):
        super().__init__(client)
        self.arm(fail_on, skip=skip, times=times)

    def arm(self, fail_on: str | None, skip: int = 0, times: int = 1) -> None:
        self.fail_on = fail_on
        self.skip = skip
        self.times = times
        self.failures = 0

    async def _run(self, operation, awaitable):
        if operation == self.fail_on and self.times > 0:
            if self.skip > 0:
                self.skip -= 1
            else:
                self.times -= 1
                self.failures += 1
                awaitable.close()
                raise StoreUnavailable(operation, "injected failure")
        return await super()._run(operation, awaitable)


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
async def redis_client(redis_server):
    client = fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def store(redis_client):
    return RedisHashStore(redis_client)


@pytest.fixture
def flaky_store(redis_client):
    return FlakyStore(redis_client)


@pytest.fixture
def service(store):
    return ResidentService(store, reconcile_on_counter_failure=False)


@pytest.fixture
def juan():
    return {"firstName": "Juan", "gender": "Male", "votersStatus": "registered", "purok": "1"}
