# Third-party imports
import pytest

# Local application imports
from registry.core.exceptions import ValidationFailure
from registry.services.residents.fields import (
    RESIDENT_FIELDS,
    is_not_registered,
    is_registered,
    normalize_fields,
    normalize_voter_status,
    with_defaults,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("registered", "registered"),
        ("Registered", "registered"),
        (" REGISTERED ", "registered"),
        ("not-registered", "not-registered"),
        ("Not Registered", "not-registered"),
        ("NOT_REGISTERED", "not-registered"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_voter_status(raw, expected):
    assert normalize_voter_status(raw) == expected


def test_unknown_voter_status_is_rejected():
    with pytest.raises(ValidationFailure) as exc_info:
        normalize_voter_status("maybe")
    assert exc_info.value.field == "votersStatus"


def test_is_registered_ignores_case():
    assert is_registered("Registered")
    assert is_registered("registered")
    assert not is_registered("Not-Registered")
    assert not is_registered("")
    assert not is_registered(None)


def test_is_not_registered_requires_explicit_status():
    assert is_not_registered("Not-Registered")
    assert is_not_registered("not registered")
    assert not is_not_registered("registered")
    assert not is_not_registered("")


def test_normalize_fields_drops_none_and_unknown_keys():
    normalized = normalize_fields(
        {"firstName": "Juan", "middleName": None, "favouriteColor": "blue", "age": 34, "purok": " 3 "}
    )
    assert normalized == {"firstName": "Juan", "age": "34", "purok": "3"}


def test_normalize_fields_keeps_caller_order():
    normalized = normalize_fields({"purok": "2", "firstName": "Ana", "votersStatus": "Registered"})
    assert list(normalized) == ["purok", "firstName", "votersStatus"]
    assert normalized["votersStatus"] == "registered"


def test_with_defaults_fills_every_field_with_empty_string():
    record = with_defaults({"firstName": "Juan"})
    assert set(record) == set(RESIDENT_FIELDS)
    assert record["firstName"] == "Juan"
    assert record["lastName"] == ""
