# Standard library imports
from collections import Counter
from collections.abc import Mapping

# Local application imports
from registry.core.exceptions import PartialMutationFailure, StoreUnavailable
from registry.core.monitoring.logging import get_contextual_logger
from registry.core.store import RedisHashStore
from registry.services.residents.fields import is_registered
from registry.settings import settings

logger = get_contextual_logger(__name__)

TOTAL_RESIDENTS = "totalResidents"
TOTAL_VOTERS = "totalVoters"
SUBDIVISION_PREFIX = "residents:"


def subdivision_field(purok: str) -> str:
    return f"{SUBDIVISION_PREFIX}{purok}"


def create_deltas(record: Mapping[str, str]) -> dict[str, int]:
    """Counter increments contributed by one live resident."""
    deltas = {TOTAL_RESIDENTS: 1}
    if is_registered(record.get("votersStatus")):
        deltas[TOTAL_VOTERS] = 1
    purok = (record.get("purok") or "").strip()
    if purok:
        deltas[subdivision_field(purok)] = 1
    return deltas


def delete_deltas(snapshot: Mapping[str, str]) -> dict[str, int]:
    """Exact negation of ``create_deltas`` for the pre-deletion snapshot."""
    return {name: -delta for name, delta in create_deltas(snapshot).items()}


def update_deltas(before: Mapping[str, str], after: Mapping[str, str]) -> dict[str, int]:
    """
    Deltas for a resident changing from ``before`` to ``after``.

    ``totalResidents`` never moves. ``totalVoters`` moves only on a
    registered/not-registered transition, and a purok change moves one
    from the old subdivision counter to the new one.
    """
    deltas: Counter[str] = Counter()
    deltas.update(delete_deltas(before))
    deltas.update(create_deltas(after))
    return {name: delta for name, delta in deltas.items() if delta != 0}


class CounterMaintainer:
    """
    Applies deltas to the shared counters row with one HINCRBY per field.

    The increments for one mutation are independent commands, so concurrent
    mutations never lose each other's updates, but a failure part-way leaves
    the earlier increments in place.
    """

    def __init__(self, store: RedisHashStore, stats_key: str | None = None):
        self.store = store
        self.stats_key = stats_key or settings.STATS_KEY

    async def apply(self, deltas: Mapping[str, int], resident_id: str | None = None) -> dict[str, int]:
        applied: dict[str, int] = {}
        for name, delta in deltas.items():
            if delta == 0:
                continue
            try:
                applied[name] = await self.store.increment_by(self.stats_key, name, delta)
            except StoreUnavailable as exc:
                raise PartialMutationFailure(
                    "counter update",
                    resident_id,
                    applied,
                    rolled_back=False,
                ) from exc
        logger.debug(f"Applied counter deltas {dict(deltas)} for resident {resident_id}")
        return applied

    async def on_create(self, resident_id: str, record: Mapping[str, str]) -> dict[str, int]:
        return await self.apply(create_deltas(record), resident_id)

    async def on_update(self, resident_id: str, before: Mapping[str, str], after: Mapping[str, str]) -> dict[str, int]:
        return await self.apply(update_deltas(before, after), resident_id)

    async def on_delete(self, resident_id: str, snapshot: Mapping[str, str]) -> dict[str, int]:
        return await self.apply(delete_deltas(snapshot), resident_id)
