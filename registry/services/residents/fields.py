# Standard library imports
from collections.abc import Mapping
from typing import Any

# Local application imports
from registry.core.exceptions import ValidationFailure

RESIDENT_FIELDS: tuple[str, ...] = (
    "firstName",
    "middleName",
    "lastName",
    "alias",
    "birthplace",
    "birthdate",
    "age",
    "civilStatus",
    "gender",
    "purok",
    "votersStatus",
    "identifiedAs",
    "email",
    "contactNumber",
    "occupation",
    "citizenship",
    "address",
    "householdNo",
    "precinctNo",
    "profileImage",
)

REGISTERED = "registered"
NOT_REGISTERED = "not-registered"
VOTER_STATUSES = (REGISTERED, NOT_REGISTERED)


def _fold(value: str) -> str:
    return "-".join(value.strip().lower().replace("_", " ").replace("-", " ").split())


def normalize_voter_status(value: Any) -> str:
    """
    Canonical form of a voter status.

    ``Registered``, ``REGISTERED`` and `` registered `` all map to
    ``registered``; ``Not Registered`` and ``not_registered`` map to
    ``not-registered``. An empty value stays empty.
    """
    if value is None:
        return ""
    folded = _fold(str(value))
    if folded == "":
        return ""
    if folded not in VOTER_STATUSES:
        raise ValidationFailure(f"Invalid votersStatus: {value!r}", field="votersStatus")
    return folded


def is_registered(value: str | None) -> bool:
    if not value:
        return False
    return _fold(value) == REGISTERED


def is_not_registered(value: str | None) -> bool:
    if not value:
        return False
    return _fold(value) == NOT_REGISTERED


def normalize_fields(fields: Mapping[str, Any]) -> dict[str, str]:
    """
    Prepare caller fields for storage.

    Drops ``None`` values, keeps only known resident fields (in caller
    order), stringifies values and canonicalizes ``votersStatus`` and
    ``purok``.
    """
    normalized: dict[str, str] = {}
    for name, value in fields.items():
        if value is None or name not in RESIDENT_FIELDS:
            continue
        if name == "votersStatus":
            normalized[name] = normalize_voter_status(value)
        elif name == "purok":
            normalized[name] = str(value).strip()
        else:
            normalized[name] = str(value)
    return normalized


def with_defaults(fields: Mapping[str, str]) -> dict[str, str]:
    """Caller fields first, then every missing resident field as ``""``."""
    record = dict(fields)
    for name in RESIDENT_FIELDS:
        record.setdefault(name, "")
    return record
