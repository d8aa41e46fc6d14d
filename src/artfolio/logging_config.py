import logging
from logging import config as logging_config

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
APP_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
ACCESS_FORMAT = "%(asctime)s %(levelname)-5s %(message)s"

NOISY_LOGGERS = ("botocore", "boto3", "aiobotocore", "urllib3", "httpx", "httpcore", "PIL", "sqladmin")
UVICORN_LOGGERS = {"uvicorn": "app", "uvicorn.error": "app", "uvicorn.access": "access"}


class LevelColorFormatter(logging.Formatter):
    """Colors the level name of each record for terminal output."""

    LEVEL_COLORS = {
        logging.DEBUG: "\x1b[36m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[41m",
    }
    RESET = "\x1b[0m"

    def format(self, record: logging.LogRecord) -> str:
        plain = record.levelname
        color = self.LEVEL_COLORS.get(record.levelno)
        if color:
            record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def _formatter(fmt: str, colors: bool) -> dict:
    spec = {"format": fmt, "datefmt": DATE_FORMAT}
    if colors:
        spec["()"] = "artfolio.logging_config.LevelColorFormatter"
    return spec


def configure_logging(level: str = "INFO", colors: bool = True) -> None:
    """Send application, uvicorn and upload-request logs to stdout.

    ``artfolio.*`` loggers (including ``artfolio.request``, used for the
    per-request upload events) propagate to the root handler.
    """
    level = level.upper()
    cfg = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "app": _formatter(APP_FORMAT, colors),
            "access": _formatter(ACCESS_FORMAT, colors),
        },
        "handlers": {
            name: {"class": "logging.StreamHandler", "formatter": name, "stream": "ext://sys.stdout"}
            for name in ("app", "access")
        },
        "loggers": {
            name: {"handlers": [handler], "level": level, "propagate": False}
            for name, handler in UVICORN_LOGGERS.items()
        },
        "root": {"handlers": ["app"], "level": level},
    }
    cfg["loggers"]["artfolio"] = {"level": level, "propagate": True}

    logging_config.dictConfig(cfg)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging", "LevelColorFormatter"]
