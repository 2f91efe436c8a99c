# Standard library imports
import asyncio
import random

# Third-party imports
import pytest

# Local application imports
from registry.core.exceptions import ResidentNotFound, StoreUnavailable
from registry.services.residents import ResidentService


async def test_example_scenario(service, juan):
    await service.create_resident(juan)

    incremental = await service.read_aggregates_incremental()
    recomputed = await service.read_aggregates_recomputed()

    assert incremental.total_residents == 1
    assert incremental.total_voters == 1
    assert incremental.per_subdivision == {"1": 1}
    assert recomputed.model_dump(by_alias=True) == {
        "population": {"total": 1, "male": 1, "female": 0},
        "voters": {"voters": 1, "nonVoters": 0},
        "distinctSubdivisionCount": 1,
    }


async def test_counters_row_layout(service, redis_client, juan):
    await service.create_resident(juan)

    assert await redis_client.hgetall("stats") == {"totalResidents": "1", "totalVoters": "1", "residents:1": "1"}


async def test_registered_resident_counts_as_voter(service):
    await service.create_resident({"firstName": "Ana", "votersStatus": "Registered"})

    recomputed = await service.read_aggregates_recomputed()

    assert recomputed.voters.voters == 1
    assert recomputed.voters.non_voters == 0


async def test_create_delete_sequence_keeps_totals_consistent(service):
    rng = random.Random(7)
    live: list[str] = []
    for _ in range(40):
        if live and rng.random() < 0.4:
            await service.delete_resident(live.pop(rng.randrange(len(live))))
        else:
            resident = await service.create_resident(
                {
                    "votersStatus": rng.choice(["registered", "Not-Registered", "REGISTERED"]),
                    "purok": rng.choice(["1", "2", "3", ""]),
                    "gender": rng.choice(["Male", "Female"]),
                }
            )
            live.append(resident.id)

        incremental = await service.read_aggregates_incremental()
        recomputed = await service.read_aggregates_recomputed()
        assert incremental.total_residents == recomputed.population.total == len(live)
        assert incremental.total_voters == recomputed.voters.voters

    report = await service.reconcile_aggregates()
    assert not report.drift


async def test_delete_decrements_voters_once_regardless_of_case(service, redis_client):
    resident = await service.create_resident({"votersStatus": "Registered", "purok": "1"})
    # Legacy record written with a different case than the canonical one
    await redis_client.hset(f"resident:{resident.id}", "votersStatus", "REGISTERED")

    await service.delete_resident(resident.id)

    incremental = await service.read_aggregates_incremental()
    assert incremental.total_voters == 0
    assert incremental.total_residents == 0
    assert incremental.per_subdivision == {"1": 0}


async def test_concurrent_deletes_apply_deltas_once(service, juan):
    resident = await service.create_resident(juan)

    results = await asyncio.gather(
        service.delete_resident(resident.id),
        service.delete_resident(resident.id),
        service.delete_resident(resident.id),
        return_exceptions=True,
    )

    assert sum(1 for r in results if isinstance(r, ResidentNotFound)) == 2
    incremental = await service.read_aggregates_incremental()
    assert incremental.total_residents == 0
    assert incremental.total_voters == 0


async def test_update_moves_purok_contribution(service):
    resident = await service.create_resident({"purok": "A"})

    await service.update_resident(resident.id, {"purok": "B"})

    incremental = await service.read_aggregates_incremental()
    assert incremental.per_subdivision == {"A": 0, "B": 1}
    assert incremental.total_residents == 1


async def test_update_voter_transitions(service):
    resident = await service.create_resident({"votersStatus": "not-registered"})

    await service.update_resident(resident.id, {"votersStatus": "Registered"})
    assert (await service.read_aggregates_incremental()).total_voters == 1

    await service.update_resident(resident.id, {"votersStatus": "registered"})
    assert (await service.read_aggregates_incremental()).total_voters == 1

    await service.update_resident(resident.id, {"votersStatus": "Not-Registered"})
    assert (await service.read_aggregates_incremental()).total_voters == 0


async def test_update_without_status_leaves_counters(service, juan):
    resident = await service.create_resident(juan)

    updated = await service.update_resident(resident.id, {"occupation": "Teacher"})

    assert updated.fields["occupation"] == "Teacher"
    assert updated.fields["votersStatus"] == "registered"
    incremental = await service.read_aggregates_incremental()
    assert (incremental.total_residents, incremental.total_voters) == (1, 1)


async def test_get_after_delete_is_not_found(service, juan):
    resident = await service.create_resident(juan)
    await service.delete_resident(resident.id)

    with pytest.raises(ResidentNotFound):
        await service.get_resident(resident.id)


async def test_update_missing_resident_is_not_found(service):
    with pytest.raises(ResidentNotFound):
        await service.update_resident("missing", {"purok": "B"})
    assert (await service.read_aggregates_incremental()).per_subdivision == {}


async def test_list_matches_membership_set(service, redis_client):
    ids = {(await service.create_resident({"firstName": f"R{i}"})).id for i in range(5)}

    listed = {resident.id for resident in await service.list_residents()}

    assert listed == ids == await redis_client.smembers("residents")


async def test_concurrent_creates_each_count_once(service):
    residents = await asyncio.gather(
        *(service.create_resident({"firstName": f"R{i}", "votersStatus": "registered"}) for i in range(25))
    )

    assert len({resident.id for resident in residents}) == 25
    incremental = await service.read_aggregates_incremental()
    assert incremental.total_residents == 25
    assert incremental.total_voters == 25


async def test_counter_failure_keeps_record_and_leaves_drift(flaky_store, juan):
    service = ResidentService(flaky_store, reconcile_on_counter_failure=False)
    flaky_store.arm("HINCRBY", skip=1)

    resident = await service.create_resident(juan)

    assert (await service.get_resident(resident.id)).fields["firstName"] == "Juan"
    incremental = await service.read_aggregates_incremental()
    assert incremental.total_residents == 1
    assert incremental.total_voters == 0

    report = await service.reconcile_aggregates()
    assert report.drift == {"totalVoters": 1, "residents:1": 1}


async def test_counter_failure_triggers_inline_reconcile(flaky_store, juan):
    service = ResidentService(flaky_store, reconcile_on_counter_failure=True)
    flaky_store.arm("HINCRBY")

    await service.create_resident(juan)

    incremental = await service.read_aggregates_incremental()
    assert incremental.total_residents == 1
    assert incremental.total_voters == 1
    assert incremental.per_subdivision == {"1": 1}


async def test_inline_reconcile_failure_is_not_raised(flaky_store, juan):
    service = ResidentService(flaky_store, reconcile_on_counter_failure=True)
    resident = await service.create_resident(juan)
    flaky_store.arm("HINCRBY")
    original_run = flaky_store._run

    async def fail_stats_reads(operation, awaitable):
        if operation == "HGETALL" and flaky_store.failures:
            awaitable.close()
            raise StoreUnavailable(operation, "injected failure")
        return await original_run(operation, awaitable)

    flaky_store._run = fail_stats_reads

    snapshot = await service.delete_resident(resident.id)

    assert snapshot.id == resident.id
    flaky_store._run = original_run
    with pytest.raises(ResidentNotFound):
        await service.get_resident(resident.id)


async def test_store_unavailable_on_read_propagates(flaky_store):
    service = ResidentService(flaky_store)
    flaky_store.arm("SMEMBERS")

    with pytest.raises(StoreUnavailable):
        await service.list_residents()


async def test_reconcile_repairs_concurrent_purok_moves(service):
    resident = await service.create_resident({"purok": "A"})

    await asyncio.gather(
        service.update_resident(resident.id, {"purok": "B"}),
        service.update_resident(resident.id, {"purok": "C"}),
    )
    await service.reconcile_aggregates()

    final_purok = (await service.get_resident(resident.id)).fields["purok"]
    incremental = await service.read_aggregates_incremental()
    assert incremental.per_subdivision == {final_purok: 1}
    assert incremental.total_residents == 1
