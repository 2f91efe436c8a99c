# Local application imports
from registry.schemas.residents.resident_schemas import (
    ResidentCreate,
    ResidentDeleteResponse,
    ResidentResponse,
    ResidentUpdate,
    VotersStatus,
)
from registry.schemas.residents.stats_schemas import (
    IncrementalAggregates,
    PopulationStats,
    ReconciliationReport,
    ResidentBreakdown,
    RecomputedAggregates,
    VoterStats,
)

__all__ = [
    "IncrementalAggregates",
    "PopulationStats",
    "ReconciliationReport",
    "ResidentBreakdown",
    "RecomputedAggregates",
    "ResidentCreate",
    "ResidentDeleteResponse",
    "ResidentResponse",
    "ResidentUpdate",
    "VoterStats",
    "VotersStatus",
]
