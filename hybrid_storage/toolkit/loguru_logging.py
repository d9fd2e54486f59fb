"""
Logging for `hybrid_storage`: `loguru` sinks driven by the settings, plus a `logging` interceptor.

`uvicorn`, `tortoise` and `botocore` log through the standard `logging` module; the interceptor routes them into
the same `loguru` sinks so one format (JSON unless `DEBUG`) covers the whole process.
"""

import logging
import sys

from loguru import logger

from ..settings import Settings, settings


class InterceptHandler(logging.Handler):
    """The `logging` logs interceptor."""

    def emit(self, record):
        """Intercept the `logging` logs and redirect them to `loguru`."""
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip the frames of the `logging` module itself
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(logger_name=record.name).log(
            level, record.getMessage()
        )


def configure_logging(config: Settings) -> None:
    """(Re)build the `loguru` sinks from the settings and hook the `logging` module into them."""
    logger.remove()

    logger.add(sys.stderr, level=config.LOG_LEVEL, serialize=not config.DEBUG, backtrace=True, diagnose=False)

    if config.DO_USE_FILE_LOGS:
        logger.add(
            config.LOG_FILE_PATH,
            level=config.LOG_LEVEL,
            encoding="utf-8",
            rotation=config.LOG_FILE_ROTATION,
            retention=config.LOG_FILE_RETENTION,
            serialize=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name, level in config.NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


configure_logging(settings)

__all__ = ["logger", "configure_logging", "InterceptHandler"]
