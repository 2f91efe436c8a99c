# Local application imports
from registry.settings.common import CommonSettings


class DevSettings(CommonSettings):
    DEBUG_MODE: bool = True
