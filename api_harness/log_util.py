import logging
from logging import config
from pathlib import Path


def init(log_level: str = "INFO", log_dir: str = "logs"):
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s | %(levelname)s | %(message)s (%(filename)s:%(lineno)s)",
            },
            "console": {
                "format": "%(levelname)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "default",
                "filename": str(Path(log_dir) / "api_harness.log"),
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5,
                "encoding": "utf8",
            },
        },
        "loggers": {
            "api_harness": {
                "handlers": ["console", "file"],
                "level": str(log_level).upper(),
                "propagate": False,
            },
        },
    }

    config.dictConfig(log_config)
