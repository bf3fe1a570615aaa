import sys
from logging.config import dictConfig

from careerhub.core.config import get_settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d - %(message)s"


def setup_logging() -> None:
    """Central logging configuration for the careerhub package."""
    settings = get_settings()
    level = settings.log_level.upper()

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "standard",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            "careerhub": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
    })

