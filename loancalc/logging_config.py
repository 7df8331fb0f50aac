import logging
import sys

from loancalc.config import settings


def setup_logging(log_level: str | None = None) -> None:
    """Configure the root logger with a single stdout handler."""
    if log_level is None:
        log_level = "DEBUG" if settings.debug else settings.log_level
    level = getattr(logging, log_level.upper())

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Uvicorn access lines are noise at DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured at %s", log_level.upper())
