# Standard library imports
from collections import Counter

# Local application imports
from registry.core.monitoring.logging import get_contextual_logger
from registry.core.store import RedisHashStore
from registry.schemas.residents.stats_schemas import (
    IncrementalAggregates,
    PopulationStats,
    ReconciliationReport,
    RecomputedAggregates,
    ResidentBreakdown,
    VoterStats,
)
from registry.services.residents.counter_services import (
    SUBDIVISION_PREFIX,
    TOTAL_RESIDENTS,
    TOTAL_VOTERS,
    create_deltas,
)
from registry.services.residents.fields import is_not_registered, is_registered
from registry.services.residents.repository import ResidentRepository
from registry.settings import settings

logger = get_contextual_logger(__name__)


def _to_int(value: str | None) -> int:
    try:
        return int(value or 0)
    except ValueError:
        return 0


def parse_counters_row(row: dict[str, str]) -> IncrementalAggregates:
    per_subdivision = {
        name.removeprefix(SUBDIVISION_PREFIX): _to_int(value)
        for name, value in sorted(row.items())
        if name.startswith(SUBDIVISION_PREFIX)
    }
    return IncrementalAggregates(
        total_residents=_to_int(row.get(TOTAL_RESIDENTS)),
        total_voters=_to_int(row.get(TOTAL_VOTERS)),
        per_subdivision=per_subdivision,
    )


class StatisticsReader:
    """
    Two ways to answer "how many residents/voters are there".

    ``read_incremental`` returns the maintained counters row in one call and
    may drift if a delta step was skipped. ``recompute`` scans every live
    record and ignores the counters row entirely. ``reconcile`` uses the
    scan to overwrite the counters row.
    """

    def __init__(
        self,
        store: RedisHashStore,
        repository: ResidentRepository,
        stats_key: str | None = None,
    ):
        self.store = store
        self.repository = repository
        self.stats_key = stats_key or settings.STATS_KEY

    async def read_incremental(self) -> IncrementalAggregates:
        row = await self.store.hash_get_all(self.stats_key)
        return parse_counters_row(row)

    async def recompute(self) -> RecomputedAggregates:
        population = PopulationStats()
        voters = VoterStats()
        subdivisions: set[str] = set()

        async for resident in self.repository.iter_residents():
            fields = resident.fields
            population.total += 1

            gender = fields.get("gender", "").strip().lower()
            if gender == "male":
                population.male += 1
            elif gender == "female":
                population.female += 1

            if is_registered(fields.get("votersStatus")):
                voters.voters += 1
            else:
                voters.non_voters += 1

            purok = fields.get("purok", "").strip()
            if purok:
                subdivisions.add(purok)

        return RecomputedAggregates(
            population=population,
            voters=voters,
            distinct_subdivision_count=len(subdivisions),
        )

    async def breakdown(self) -> ResidentBreakdown:
        """
        Gender and voter counts for the analytics dashboard.

        The total is the membership set cardinality, so it can include a
        member whose hash is missing. Only an explicit ``not-registered``
        status counts as a non-voter; records with an empty status are in
        neither voter count.
        """
        result = ResidentBreakdown(total_residents=await self.store.set_cardinality(self.repository.set_key))

        async for resident in self.repository.iter_residents():
            gender = resident.fields.get("gender", "").strip().lower()
            if gender == "male":
                result.male_count += 1
            elif gender == "female":
                result.female_count += 1

            status = resident.fields.get("votersStatus")
            if is_registered(status):
                result.voters_count += 1
            elif is_not_registered(status):
                result.non_voters_count += 1

        return result

    async def expected_counters(self) -> dict[str, int]:
        """Counters row contents implied by the live records."""
        expected: Counter[str] = Counter({TOTAL_RESIDENTS: 0, TOTAL_VOTERS: 0})
        async for resident in self.repository.iter_residents():
            expected.update(create_deltas(resident.fields))
        return dict(expected)

    async def reconcile(self) -> ReconciliationReport:
        """
        Overwrite the counters row with values recomputed from live records.

        Fresh values are written in a single HSET, then subdivision fields
        with no live residents are removed. Deltas applied by mutations that
        finish between the scan and the write are lost until the next run
        corrects them.
        """
        previous_row = await self.store.hash_get_all(self.stats_key)
        expected = await self.expected_counters()

        drift = {
            name: value - _to_int(previous_row.get(name))
            for name, value in expected.items()
            if value != _to_int(previous_row.get(name))
        }
        stale_fields = sorted(
            name for name in previous_row if name.startswith(SUBDIVISION_PREFIX) and name not in expected
        )
        for name in stale_fields:
            if _to_int(previous_row[name]) != 0:
                drift[name] = -_to_int(previous_row[name])

        await self.store.hash_set_many(self.stats_key, expected)
        await self.store.hash_delete_fields(self.stats_key, *stale_fields)

        report = ReconciliationReport(
            previous=parse_counters_row(previous_row),
            current=parse_counters_row({name: str(value) for name, value in expected.items()}),
            drift=drift,
            stale_fields=[name.removeprefix(SUBDIVISION_PREFIX) for name in stale_fields],
        )
        if report.drifted:
            logger.warning(f"Counters row drifted and was rebuilt: drift={drift} stale={report.stale_fields}")
        else:
            logger.info("Counters row matches live records")
        return report
