# Third-party imports
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IncrementalAggregates(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_residents: int = Field(0, alias="totalResidents")
    total_voters: int = Field(0, alias="totalVoters")
    per_subdivision: dict[str, int] = Field(default_factory=dict, alias="perSubdivision")


class PopulationStats(BaseModel):
    total: int = 0
    male: int = 0
    female: int = 0


class VoterStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    voters: int = 0
    non_voters: int = Field(0, alias="nonVoters")


class RecomputedAggregates(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    population: PopulationStats = Field(default_factory=PopulationStats)
    voters: VoterStats = Field(default_factory=VoterStats)
    distinct_subdivision_count: int = Field(0, alias="distinctSubdivisionCount")


class ReconciliationReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    previous: IncrementalAggregates
    current: IncrementalAggregates
    drift: dict[str, int] = Field(default_factory=dict)
    stale_fields: list[str] = Field(default_factory=list, alias="staleFields")

    @property
    def drifted(self) -> bool:
        return bool(self.drift)


class ResidentBreakdown(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_residents: int = 0
    male_count: int = 0
    female_count: int = 0
    voters_count: int = 0
    non_voters_count: int = 0
