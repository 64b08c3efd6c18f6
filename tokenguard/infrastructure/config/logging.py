"""Logging setup applied once at application startup."""

import logging

from tokenguard.infrastructure.config.settings import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Route tokenguard loggers to stderr at the configured level."""
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("tokenguard").setLevel(settings.log_level)

    if settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
