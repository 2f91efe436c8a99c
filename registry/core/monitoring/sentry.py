# Standard library imports
import logging

# Third-party imports
import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

# Local application imports
from registry.settings import settings


def _setup_sentry_logging() -> None:
    """
    Route WARNING logs to Sentry as breadcrumbs and ERROR logs as events.

    Only active in production with a DSN configured. Counter drift and
    rollback failures are logged at ERROR, so they surface here.
    """
    if settings.ENVIRONMENT == "production" and settings.SENTRY_DSN:
        sentry_logging = LoggingIntegration(
            level=logging.WARNING,
            event_level=logging.ERROR,
        )

        if not sentry_sdk.get_client().is_active():
            sentry_sdk.init(
                dsn=settings.SENTRY_DSN,
                integrations=[sentry_logging],
                environment=settings.ENVIRONMENT,
                traces_sample_rate=1.0,
            )


_setup_sentry_logging()
