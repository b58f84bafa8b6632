"""Route stdlib logging into logfire."""

import logging

import logfire

from clubhouse.config import Settings

# Libraries whose INFO output drowns out the comment engine's own events
NOISY_LOGGERS = ("asyncio", "asyncpg", "alembic.runtime.migration")


def setup_logging(settings: Settings) -> None:
    """Send stdlib log records through logfire.

    Application events are emitted with ``logfire.info`` and friends; this
    captures everything else (SQLAlchemy, asyncpg, alembic) so it shows up
    in the same console and trace. Call ``configure_logfire`` as well.
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        handlers=[logfire.LogfireLoggingHandler()],
        force=True,  # Override any existing configuration
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.debug else logging.WARNING
    )

    logging.getLogger("clubhouse").setLevel(level)

    logfire.debug(
        "Logging configured",
        environment=settings.environment,
        level=logging.getLevelName(level),
    )
