"""Observability configuration using Logfire.

Usage:
    import logfire

    # Structured logging
    logfire.info("Comment created", comment_id=comment_id, post_id=post_id)

    # Manual spans for critical operations
    with logfire.span("like_service.toggle_like", comment_id=comment_id):
        ...
"""

import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from clubhouse.config import ObservabilitySettings, Settings
from clubhouse.util.error import ConfigurationError

SERVICE_NAME = "clubhouse-comments"


def should_send_to_logfire(observability: ObservabilitySettings) -> bool:
    """Decide whether telemetry leaves the process.

    An explicit ``send_to_logfire`` wins; otherwise a token turns it on.

    Raises:
        ConfigurationError: If sending is forced on without a token
    """
    if observability.send_to_logfire is None:
        return bool(observability.logfire_token)
    if observability.send_to_logfire and not observability.logfire_token:
        raise ConfigurationError(
            "OBSERVABILITY__SEND_TO_LOGFIRE", "sending is enabled but no token is set"
        )
    return observability.send_to_logfire


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the comment engine.

    Console output is always on; verbose when ``settings.debug`` is set.
    """
    observability = settings.observability
    send_to_logfire = should_send_to_logfire(observability)

    logfire.configure(
        service_name=SERVICE_NAME,
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=observability.logfire_token,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace every statement the document store runs."""
    logfire.instrument_sqlalchemy(
        engine=engine.sync_engine,
        enable_commenter=True,  # Add SQL comments with span context
    )
    logfire.info("SQLAlchemy instrumented", url=engine.url.render_as_string())
