"""
Error kinds raised by the record store and counter layer.
"""

# Standard library imports
from collections.abc import Mapping


class RegistryError(Exception):
    """Base class for every error raised by the registry core."""


class ResidentNotFound(RegistryError):
    """The id is not in the membership set or its hash is empty."""

    def __init__(self, resident_id: str):
        self.resident_id = resident_id
        super().__init__(f"Resident {resident_id} not found")


class ValidationFailure(RegistryError, ValueError):
    """Caller supplied fields that cannot be stored."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class StoreUnavailable(RegistryError):
    """The backing store rejected or could not serve a command."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store operation {operation} failed: {reason}")


class PartialMutationFailure(RegistryError):
    """
    A multi-command logical operation failed after at least one command
    succeeded.

    ``applied`` records what had already been written (field names for
    record mutations, counter deltas for counter updates) so callers and
    logs can tell how much state was left behind. ``rolled_back`` is False
    when the compensating actions themselves failed.
    """

    def __init__(
        self,
        operation: str,
        resident_id: str | None,
        applied: Mapping[str, object] | None = None,
        rolled_back: bool = True,
    ):
        self.operation = operation
        self.resident_id = resident_id
        self.applied = dict(applied or {})
        self.rolled_back = rolled_back
        super().__init__(
            f"{operation} of resident {resident_id} failed part-way "
            f"(applied={sorted(self.applied)}, rolled_back={rolled_back})"
        )
