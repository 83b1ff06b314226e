import logging

from .config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure application-wide logging based on settings.

    The format includes timestamp, log level, logger name, and message.
    Used by the API entrypoint and both CLIs so audit events look the same
    whichever surface produced them.
    """
    log_level_name = settings.log_level.upper()
    level = getattr(logging, log_level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    # SQLAlchemy engine chatter stays at WARNING unless explicitly debugging.
    if level > logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(level)
