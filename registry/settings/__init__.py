# Standard library imports
import os

# Local application imports
from registry.settings.dev import DevSettings
from registry.settings.production import ProductionSettings


def get_settings() -> DevSettings | ProductionSettings:
    """
    Return an instance of the appropriate settings class
    based on the ENV environment variable.
    """
    env = os.environ.get("ENVIRONMENT", "dev").lower()
    if env == "production":
        return ProductionSettings()
    return DevSettings()


settings = get_settings()
