# Standard library imports
from collections.abc import Awaitable, Mapping
from typing import Any

# Local application imports
from registry.core.exceptions import PartialMutationFailure, StoreUnavailable
from registry.core.monitoring.logging import get_contextual_logger
from registry.core.store import RedisHashStore
from registry.schemas.residents.stats_schemas import (
    IncrementalAggregates,
    ReconciliationReport,
    RecomputedAggregates,
    ResidentBreakdown,
)
from registry.services.residents.counter_services import CounterMaintainer
from registry.services.residents.repository import OrphanReport, ResidentRecord, ResidentRepository
from registry.services.residents.statistics_services import StatisticsReader
from registry.settings import settings

logger = get_contextual_logger(__name__)


class ResidentService:
    """
    Resident CRUD with counter maintenance.

    The record mutation (hash plus membership set) decides whether a call
    succeeded. Counter deltas are applied afterwards; if that step fails the
    record change stands, the failure is logged at ERROR and, when
    ``RECONCILE_ON_COUNTER_FAILURE`` is enabled, the counters row is rebuilt
    from the live records.
    """

    def __init__(self, store: RedisHashStore, reconcile_on_counter_failure: bool | None = None):
        self.repository = ResidentRepository(store)
        self.counters = CounterMaintainer(store)
        self.statistics = StatisticsReader(store, self.repository)
        if reconcile_on_counter_failure is None:
            reconcile_on_counter_failure = settings.RECONCILE_ON_COUNTER_FAILURE
        self.reconcile_on_counter_failure = reconcile_on_counter_failure

    async def create_resident(self, fields: Mapping[str, Any]) -> ResidentRecord:
        resident = await self.repository.create(fields)
        await self._apply_counters(self.counters.on_create(resident.id, resident.fields))
        return resident

    async def get_resident(self, resident_id: str) -> ResidentRecord:
        return await self.repository.get(resident_id)

    async def list_residents(self) -> list[ResidentRecord]:
        return await self.repository.list_all()

    async def update_resident(self, resident_id: str, fields: Mapping[str, Any]) -> ResidentRecord:
        change = await self.repository.update(resident_id, fields)
        await self._apply_counters(self.counters.on_update(resident_id, change.before.fields, change.after.fields))
        return change.current

    async def delete_resident(self, resident_id: str) -> ResidentRecord:
        snapshot = await self.repository.delete(resident_id)
        await self._apply_counters(self.counters.on_delete(resident_id, snapshot.fields))
        return snapshot

    async def read_aggregates_incremental(self) -> IncrementalAggregates:
        return await self.statistics.read_incremental()

    async def read_aggregates_recomputed(self) -> RecomputedAggregates:
        return await self.statistics.recompute()

    async def read_resident_breakdown(self) -> ResidentBreakdown:
        return await self.statistics.breakdown()

    async def reconcile_aggregates(self) -> ReconciliationReport:
        return await self.statistics.reconcile()

    async def prune_orphans(self, grace_seconds: float = 2.0) -> OrphanReport:
        return await self.repository.prune_orphans(grace_seconds=grace_seconds)

    async def _apply_counters(self, update: Awaitable[dict[str, int]]) -> None:
        try:
            await update
        except PartialMutationFailure as e:
            logger.error(f"Counter deltas not fully applied, counters row has drifted: {e}")
            if not self.reconcile_on_counter_failure:
                return
            try:
                await self.statistics.reconcile()
            except StoreUnavailable as reconcile_error:
                logger.error(f"Inline reconciliation failed, waiting for scheduled run: {reconcile_error}")
