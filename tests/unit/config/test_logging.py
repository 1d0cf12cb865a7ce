"""Tests for logging setup, the TRACE level and metadata rendering."""

import logging

import pytest

from demobot.config.logging import (
    TRACE,
    ColoredFormatter,
    MetadataFormatter,
    get_logger,
    resolve_level,
    setup_logging,
)
from demobot.config.settings import BotSettings, Settings


@pytest.fixture
def restore_demobot_logger():
    logger = logging.getLogger("demobot")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def _record(message="hello", metadata=None, level=logging.INFO):
    record = logging.LogRecord("demobot.test", level, __file__, 1, message, None, None)
    if metadata is not None:
        record.metadata = metadata
    return record


class TestLevels:
    def test_trace_is_below_debug(self):
        assert TRACE < logging.DEBUG
        assert logging.getLevelName(TRACE) == "TRACE"

    @pytest.mark.parametrize("name, level", [("TRACE", TRACE), ("info", logging.INFO)])
    def test_resolve_level(self, name, level):
        assert resolve_level(name) == level


class TestFormatters:
    def test_metadata_is_appended(self):
        formatter = MetadataFormatter("%(message)s")
        text = formatter.format(_record("Logged in!", {"user.id": 1, "user.name": "bot"}))
        assert text == "Logged in! [user.id=1 user.name=bot]"

    def test_no_metadata(self):
        assert MetadataFormatter("%(message)s").format(_record("plain")) == "plain"

    def test_colored_formatter_restores_levelname(self):
        record = _record()
        text = ColoredFormatter("%(levelname)s %(message)s").format(record)
        assert "\033[32m" in text
        assert record.levelname == "INFO"


class TestSetup:
    def test_configures_level_and_file(self, tmp_path, restore_demobot_logger):
        log_file = tmp_path / "logs" / "bot.log"
        settings = Settings(_env_file=None, bot=BotSettings(_env_file=None),
                            log_level="TRACE", log_file=log_file)

        setup_logging(settings)

        logger = restore_demobot_logger
        assert logger.level == TRACE
        assert logger.propagate is False
        assert len(logger.handlers) == 2
        get_logger("demobot.test").log(TRACE, "tracing")
        for handler in logger.handlers:
            handler.flush()
        assert "tracing" in log_file.read_text()

    def test_get_logger_namespaces(self):
        assert get_logger("bot.client").name == "demobot.bot.client"
        assert get_logger("demobot.bot.client").name == "demobot.bot.client"
