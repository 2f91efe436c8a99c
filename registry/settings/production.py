# Local application imports
from registry.settings.common import CommonSettings


class ProductionSettings(CommonSettings):
    DEBUG_MODE: bool = False
    RECONCILE_INTERVAL_MINUTES: int = 5
