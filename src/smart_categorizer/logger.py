import logging
import logging.config
import os

LOG_FILENAME = "smart_categorizer.log"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
# batch workers run in child processes
FILE_FORMAT = "%(asctime)s %(levelname)s [%(processName)s] %(name)s: %(message)s"


class ColourizedFormatter(logging.Formatter):
    """
    Formatter that colours the level name when writing to a terminal.
    """
    GREY = "\x1b[90m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    RED = "\x1b[31m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        orig_levelname = record.levelname
        if record.levelno in self.LEVEL_COLORS:
            record.levelname = f"{self.LEVEL_COLORS[record.levelno]}{record.levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # other handlers share the record
            record.levelname = orig_levelname


def get_logging_config() -> dict:
    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_dir = os.getenv("LOG_DIR")
    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "colour",
        },
    }
    root_handlers = ["console"]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers["logfile"] = {
            "class": "logging.FileHandler",
            "filename": os.path.join(log_dir, LOG_FILENAME),
            "formatter": "file",
            "encoding": "utf-8",
        }
        root_handlers.append("logfile")

    server_logger = {"handlers": root_handlers, "level": "INFO", "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "colour": {
                "()": "smart_categorizer.logger.ColourizedFormatter",
                "format": CONSOLE_FORMAT,
            },
            "file": {
                "format": FILE_FORMAT,
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": root_handlers,
                "level": log_level_name,
            },
            "uvicorn": server_logger,
            "uvicorn.error": server_logger,
            "uvicorn.access": server_logger,
        },
    }


def setup_logging() -> None:
    logging.config.dictConfig(get_logging_config())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
