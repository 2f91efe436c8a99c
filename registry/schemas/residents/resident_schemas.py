# Standard library imports
from enum import Enum
from typing import Any, Literal

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Local application imports
from registry.services.residents.fields import normalize_voter_status


class VotersStatus(str, Enum):
    REGISTERED = "registered"
    NOT_REGISTERED = "not-registered"


class ResidentFields(BaseModel):
    """
    Resident attributes as sent by clients, in camelCase on the wire.

    Every attribute is optional. On create a missing attribute is stored as
    an empty string; on update it keeps its stored value.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    first_name: str | None = Field(None, max_length=100)
    middle_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    alias: str | None = Field(None, max_length=100)
    birthplace: str | None = None
    birthdate: str | None = None
    age: str | None = None
    civil_status: str | None = None
    gender: str | None = None
    purok: str | None = Field(None, max_length=50)
    voters_status: VotersStatus | Literal[""] | None = None
    identified_as: str | None = None
    email: str | None = None
    contact_number: str | None = None
    occupation: str | None = None
    citizenship: str | None = None
    address: str | None = None
    household_no: str | None = None
    precinct_no: str | None = None
    profile_image: str | None = None

    @field_validator("voters_status", mode="before")
    @classmethod
    def canonical_voters_status(cls, v: Any) -> Any:
        if v is None:
            return None
        # An empty status clears the stored value on update
        return normalize_voter_status(v)

    def to_store(self) -> dict[str, str]:
        """Explicitly sent attributes keyed by their stored (camelCase) names."""
        data = self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True, mode="json")
        return {name: str(value) for name, value in data.items()}


class ResidentCreate(ResidentFields):
    pass


class ResidentUpdate(ResidentFields):
    pass


class ResidentResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    alias: str = ""
    birthplace: str = ""
    birthdate: str = ""
    age: str = ""
    civil_status: str = ""
    gender: str = ""
    purok: str = ""
    voters_status: str = ""
    identified_as: str = ""
    email: str = ""
    contact_number: str = ""
    occupation: str = ""
    citizenship: str = ""
    address: str = ""
    household_no: str = ""
    precinct_no: str = ""
    profile_image: str = ""

    @classmethod
    def from_record(cls, resident_id: str, fields: dict[str, str]) -> "ResidentResponse":
        return cls.model_validate({"id": resident_id, **fields})


class ResidentDeleteResponse(BaseModel):
    message: str = "Resident deleted successfully"
    id: str
