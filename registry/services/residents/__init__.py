# Local application imports
from registry.services.residents.counter_services import CounterMaintainer, create_deltas, delete_deltas, update_deltas
from registry.services.residents.repository import OrphanReport, ResidentChange, ResidentRecord, ResidentRepository
from registry.services.residents.resident_services import ResidentService
from registry.services.residents.statistics_services import StatisticsReader

__all__ = [
    "CounterMaintainer",
    "OrphanReport",
    "ResidentChange",
    "ResidentRecord",
    "ResidentRepository",
    "ResidentService",
    "StatisticsReader",
    "create_deltas",
    "delete_deltas",
    "update_deltas",
]
