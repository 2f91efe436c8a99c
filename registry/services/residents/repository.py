"""
Resident records stored as one Redis hash per resident plus a membership
set of live ids.

A record is visible only when its id is in the membership set and its hash
is non-empty. Creates write the hash first and add the id last, deletes
remove the id first and the hash last, so an interrupted call leaves at
worst an orphan hash that no reader can see and ``prune_orphans`` removes.
"""

# Standard library imports
import asyncio
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

# Local application imports
from registry.core.exceptions import PartialMutationFailure, ResidentNotFound, StoreUnavailable
from registry.core.monitoring.logging import get_contextual_logger
from registry.core.store import RedisHashStore
from registry.services.residents.fields import normalize_fields, with_defaults
from registry.settings import settings

logger = get_contextual_logger(__name__)


@dataclass(frozen=True)
class ResidentRecord:
    id: str
    fields: dict[str, str]

    def as_dict(self) -> dict[str, str]:
        return {"id": self.id, **self.fields}


@dataclass(frozen=True)
class ResidentChange:
    """
    Outcome of an update.

    ``before`` and ``after`` describe what this call changed and feed the
    counter deltas. ``current`` is the hash as read back afterwards, which
    may also contain concurrent writes to other fields.
    """

    before: ResidentRecord
    after: ResidentRecord
    current: ResidentRecord


@dataclass
class OrphanReport:
    orphan_hashes: list[str] = field(default_factory=list)
    dangling_members: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.orphan_hashes and not self.dangling_members


class ResidentRepository:
    def __init__(
        self,
        store: RedisHashStore,
        key_prefix: str | None = None,
        set_key: str | None = None,
    ):
        self.store = store
        self.key_prefix = key_prefix or settings.RESIDENT_KEY_PREFIX
        self.set_key = set_key or settings.RESIDENTS_SET_KEY

    def key_for(self, resident_id: str) -> str:
        return f"{self.key_prefix}:{resident_id}"

    async def create(self, fields: Mapping[str, Any]) -> ResidentRecord:
        """
        Store a new resident under a fresh UUID.

        Every resident field is written (missing ones as ``""``) with one
        HSET per field in caller order, then the id joins the membership
        set. If a write fails after the first one succeeded, the partial
        hash and any set entry are removed and ``PartialMutationFailure``
        is raised.
        """
        resident_id = str(uuid4())
        key = self.key_for(resident_id)
        record = with_defaults(normalize_fields(fields))
        log = logger.bind(resident_id=resident_id)

        written: list[str] = []
        try:
            for name, value in record.items():
                await self.store.hash_set(key, name, value)
                written.append(name)
            await self.store.set_add(self.set_key, resident_id)
        except StoreUnavailable as exc:
            if not written:
                raise
            log.error(f"Create failed after writing {len(written)} fields, rolling back: {exc}")
            rolled_back = await self._rollback_create(resident_id)
            raise PartialMutationFailure(
                "create",
                resident_id,
                {name: record[name] for name in written},
                rolled_back=rolled_back,
            ) from exc

        log.info("Resident created")
        return ResidentRecord(resident_id, record)

    async def _rollback_create(self, resident_id: str) -> bool:
        log = logger.bind(resident_id=resident_id)
        rolled_back = True
        try:
            await self.store.set_remove(self.set_key, resident_id)
        except StoreUnavailable as e:
            log.error(f"Rollback could not remove membership entry: {e}")
            rolled_back = False
        try:
            await self.store.hash_delete(self.key_for(resident_id))
        except StoreUnavailable as e:
            log.error(f"Rollback could not remove partial hash: {e}")
            rolled_back = False
        return rolled_back

    async def get(self, resident_id: str) -> ResidentRecord:
        if not await self.store.set_is_member(self.set_key, resident_id):
            raise ResidentNotFound(resident_id)

        stored = await self.store.hash_get_all(self.key_for(resident_id))
        if not stored:
            logger.warning(f"Membership entry without hash for resident {resident_id}")
            raise ResidentNotFound(resident_id)

        return ResidentRecord(resident_id, with_defaults(stored))

    async def iter_residents(self) -> AsyncIterator[ResidentRecord]:
        """
        Yield every live resident, one HGETALL per member.

        Members whose hash is empty are skipped with a warning. The member
        list is read once up front, so residents created mid-iteration are
        not included.
        """
        members = await self.store.set_members(self.set_key)
        for resident_id in sorted(members):
            stored = await self.store.hash_get_all(self.key_for(resident_id))
            if not stored:
                logger.warning(f"Skipping resident {resident_id}: hash is empty")
                continue
            yield ResidentRecord(resident_id, with_defaults(stored))

    async def list_all(self) -> list[ResidentRecord]:
        return [record async for record in self.iter_residents()]

    async def update(self, resident_id: str, fields: Mapping[str, Any]) -> ResidentChange:
        """
        Merge ``fields`` into an existing resident.

        Only the listed, non-null keys are written; everything else keeps
        its stored value. Writes to different fields from concurrent callers
        do not clobber each other.
        """
        log = logger.bind(resident_id=resident_id)
        if not await self.store.set_is_member(self.set_key, resident_id):
            raise ResidentNotFound(resident_id)

        key = self.key_for(resident_id)
        before = await self.store.hash_get_all(key)
        if not before:
            log.warning("Membership entry without hash on update")
            raise ResidentNotFound(resident_id)

        changes = normalize_fields(fields)
        written: list[str] = []
        try:
            for name, value in changes.items():
                await self.store.hash_set(key, name, value)
                written.append(name)
        except StoreUnavailable as exc:
            if not written:
                raise
            log.error(f"Update failed after writing {written}, restoring previous values: {exc}")
            rolled_back = await self._restore_fields(key, before, written)
            raise PartialMutationFailure(
                "update",
                resident_id,
                {name: changes[name] for name in written},
                rolled_back=rolled_back,
            ) from exc

        if written and not await self.store.set_is_member(self.set_key, resident_id):
            # Deleted concurrently; the writes above re-created the hash.
            log.warning("Resident deleted during update, discarding re-created hash")
            await self.store.hash_delete(key)
            raise ResidentNotFound(resident_id)

        current = await self.store.hash_get_all(key)
        log.info(f"Resident updated: {sorted(written)}")
        return ResidentChange(
            before=ResidentRecord(resident_id, with_defaults(before)),
            after=ResidentRecord(resident_id, with_defaults({**before, **changes})),
            current=ResidentRecord(resident_id, with_defaults(current)),
        )

    async def _restore_fields(self, key: str, before: Mapping[str, str], written: list[str]) -> bool:
        try:
            for name in written:
                if name in before:
                    await self.store.hash_set(key, name, before[name])
                else:
                    await self.store.hash_delete_fields(key, name)
        except StoreUnavailable as e:
            logger.error(f"Could not restore fields on {key}: {e}")
            return False
        return True

    async def delete(self, resident_id: str) -> ResidentRecord:
        """
        Remove a resident and return its pre-deletion snapshot.

        The SREM reply decides the winner between concurrent deletes of the
        same id: only the caller that actually removed the member gets the
        snapshot back, everyone else gets ``ResidentNotFound``.
        """
        log = logger.bind(resident_id=resident_id)
        key = self.key_for(resident_id)

        snapshot = await self.store.hash_get_all(key)
        removed = await self.store.set_remove(self.set_key, resident_id)
        if not removed:
            raise ResidentNotFound(resident_id)
        if not snapshot:
            log.warning("Removed membership entry that had no hash")
            raise ResidentNotFound(resident_id)

        try:
            await self.store.hash_delete(key)
        except StoreUnavailable as e:
            # No longer a member, so readers cannot see it.
            log.error(f"Resident unlisted but hash delete failed, orphan left for pruning: {e}")

        log.info("Resident deleted")
        return ResidentRecord(resident_id, with_defaults(snapshot))

    async def find_orphans(self) -> OrphanReport:
        members = await self.store.set_members(self.set_key)
        prefix = f"{self.key_prefix}:"
        hash_ids = {key.removeprefix(prefix) for key in await self.store.scan_keys(f"{prefix}*")}
        return OrphanReport(
            orphan_hashes=sorted(hash_ids - members),
            dangling_members=sorted(members - hash_ids),
        )

    async def prune_orphans(self, grace_seconds: float = 2.0) -> OrphanReport:
        """
        Delete hashes that have no membership entry and membership entries
        that have no hash.

        A create in flight briefly owns a hash without a membership entry,
        so only ids reported by two scans ``grace_seconds`` apart are
        removed, and each one is re-checked just before deletion.
        """
        first = await self.find_orphans()
        if first.empty:
            return first
        if grace_seconds > 0:
            await asyncio.sleep(grace_seconds)
        second = await self.find_orphans()

        pruned = OrphanReport()
        for resident_id in sorted(set(first.orphan_hashes) & set(second.orphan_hashes)):
            if await self.store.set_is_member(self.set_key, resident_id):
                continue
            await self.store.hash_delete(self.key_for(resident_id))
            pruned.orphan_hashes.append(resident_id)
        for resident_id in sorted(set(first.dangling_members) & set(second.dangling_members)):
            if await self.store.hash_get_all(self.key_for(resident_id)):
                continue
            await self.store.set_remove(self.set_key, resident_id)
            pruned.dangling_members.append(resident_id)

        if not pruned.empty:
            logger.warning(
                f"Pruned {len(pruned.orphan_hashes)} orphan hashes and "
                f"{len(pruned.dangling_members)} dangling membership entries"
            )
        return pruned
