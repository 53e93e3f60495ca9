# Overview: One-time logging setup for the Flask app logger.

from logging.config import dictConfig

from flask import Flask


def configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            app.name: {"level": level, "handlers": ["console"], "propagate": False},
        },
    })
    app.logger.setLevel(level)
