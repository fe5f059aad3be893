import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration


def init_sentry(dsn: str, environment: str = "dev",
                release: str | None = None) -> bool:
    """Включить Sentry, если задан DSN. Возвращает True, если включён."""
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        integrations=[
            # ERROR уходит событием, INFO и выше идут в breadcrumbs
            LoggingIntegration(level=logging.INFO,
                               event_level=logging.ERROR),
            FastApiIntegration(),
        ],
        traces_sample_rate=0.2,
        send_default_pii=False,
    )
    return True
