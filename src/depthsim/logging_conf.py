import logging, sys
from logging.handlers import RotatingFileHandler

from pythonjsonlogger import jsonlogger

from .config import settings

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str | None = None) -> list[logging.Handler]:
    """Configure the root logger from settings; ``level`` overrides ``LOG_LEVEL``."""
    name = (level or settings.log_level).upper()
    lvl = getattr(logging, name, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if settings.log_file:
        handlers.append(
            RotatingFileHandler(
                settings.log_file,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
            )
        )

    if settings.log_json:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(_JSON_FORMAT)
    else:
        formatter = logging.Formatter(_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=lvl, handlers=handlers, force=True)

    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(max(lvl, logging.INFO))
    return handlers
