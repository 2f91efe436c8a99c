# Local application imports
from registry.tasks import reconcile_tasks
from registry.tasks.reconcile_tasks import reconcile_store


async def test_reconcile_store_prunes_and_rebuilds(service, redis_client, juan):
    await service.create_resident(juan)
    await redis_client.hset("resident:orphan", "firstName", "Ghost")
    await redis_client.sadd("residents", "dangling")
    await redis_client.hincrby("stats", "totalResidents", 1)

    result = await reconcile_store(service, grace_seconds=0)

    assert result["pruned_orphan_hashes"] == ["orphan"]
    assert result["pruned_dangling_members"] == ["dangling"]
    assert result["drift"] == {"totalResidents": -1}
    assert await redis_client.hgetall("stats") == {"totalResidents": "1", "totalVoters": "1", "residents:1": "1"}


async def test_reconcile_store_on_clean_store(service, juan):
    await service.create_resident(juan)

    result = await reconcile_store(service, grace_seconds=0)

    assert result == {
        "pruned_orphan_hashes": [],
        "pruned_dangling_members": [],
        "drift": {},
        "stale_subdivisions": [],
    }


def test_reconcile_counters_task_runs_async_body(monkeypatch):
    expected = {
        "pruned_orphan_hashes": [],
        "pruned_dangling_members": [],
        "drift": {"totalResidents": -1},
        "stale_subdivisions": [],
    }

    async def fake_reconcile():
        return expected

    monkeypatch.setattr(reconcile_tasks, "_reconcile_with_new_client", fake_reconcile)

    result = reconcile_tasks.reconcile_counters_task.apply()

    assert result.successful()
    assert result.get() == expected
