import logging

import pytest
from rich.logging import RichHandler

from orbital_guardian.logging_config import CHANNEL_KEYWORDS, configure_service_logging
from orbital_guardian.settings import ServiceConfig
from orbital_guardian.structured_logging import StructuredFormatter


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if isinstance(handler, RichHandler) or isinstance(handler.formatter, StructuredFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


def test_json_format_installs_structured_formatter(restore_root_logger):
    configure_service_logging(ServiceConfig(log_format="json", log_level="WARNING", _env_file=None))
    (handler,) = restore_root_logger.handlers
    assert isinstance(handler.formatter, StructuredFormatter)
    assert restore_root_logger.level == logging.WARNING


def test_text_format_installs_rich_handler_with_channel_keywords(restore_root_logger):
    configure_service_logging(ServiceConfig(log_format="text", log_level="DEBUG", _env_file=None))
    (handler,) = restore_root_logger.handlers
    assert isinstance(handler, RichHandler)
    assert handler.keywords == CHANNEL_KEYWORDS
    assert "alerts" in CHANNEL_KEYWORDS
    assert restore_root_logger.level == logging.DEBUG
