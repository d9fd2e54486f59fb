import logging

from hybrid_storage.settings import Settings
from hybrid_storage.toolkit.loguru_logging import InterceptHandler, configure_logging, logger


def test_file_sink_follows_the_settings(tmp_path):
    log_file = tmp_path / "storage.log"
    settings = Settings(DO_USE_FILE_LOGS=True, LOG_FILE_PATH=str(log_file), DEBUG=True, _env_file=None)

    configure_logging(settings)
    logger.info("placed file in r2")
    logging.getLogger("uvicorn.error").warning("intercepted from logging")
    logger.complete()

    content = log_file.read_text(encoding="utf-8")
    assert "placed file in r2" in content
    assert "intercepted from logging" in content

    configure_logging(Settings(_env_file=None))


def test_noisy_loggers_are_quieted():
    configure_logging(Settings(NOISY_LOGGERS={"botocore": "ERROR"}, _env_file=None))

    assert logging.getLogger("botocore").level == logging.ERROR
    assert any(isinstance(handler, InterceptHandler) for handler in logging.getLogger().handlers)

    configure_logging(Settings(_env_file=None))
