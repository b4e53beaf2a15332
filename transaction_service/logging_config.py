"""logging module config."""
import logging
import logging.config

LOG_FORMAT = "[%(name)s:%(levelname)s] [%(asctime)s] %(message)s"


def get_log_config(level="INFO"):
    """get log_config."""
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": LOG_FORMAT,
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            },
        },
        "handlers": {
            "standard": {"class": "logging.StreamHandler", "formatter": "standard"}
        },
        "loggers": {
            "": {"handlers": ["standard"], "level": log_level},
            # heartbeat chatter
            "pymongo": {"level": logging.WARNING},
            "uvicorn.access": {"level": log_level},
        },
    }


def configure_logging(level="INFO"):
    logging.config.dictConfig(get_log_config(level))
