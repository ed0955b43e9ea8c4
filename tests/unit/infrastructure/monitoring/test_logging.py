"""
Unit tests for logging setup and sensitive data masking.
"""

import json
import logging
import sys

import pytest

from querykit.infrastructure.monitoring.logging import (
    JSONFormatter,
    MaskingFormatter,
    SensitiveDataConfig,
    SensitiveDataMasker,
    setup_logging,
)


@pytest.fixture
def masker():
    return SensitiveDataMasker(SensitiveDataConfig())


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def make_record(message, exc_info=None):
    return logging.LogRecord("querykit.test", logging.INFO, __file__, 10, message, None, exc_info)


class TestSensitiveDataMasker:
    """Test masking of credentials in messages."""

    def test_masks_key_value_pairs(self, masker):
        masked = masker.mask_message("connect password=hunter2 user=app")

        assert masked == "connect password=***MASKED*** user=app"

    def test_masks_colon_pairs(self, masker):
        assert "abc123" not in masker.mask_message("api_key: abc123")

    def test_masks_url_credentials(self, masker):
        masked = masker.mask_message("dsn postgresql://app:hunter2@db:5432/shop")

        assert masked == "dsn postgresql://app:***MASKED***@db:5432/shop"

    def test_leaves_plain_messages(self, masker):
        message = "Assembled SQL: SELECT * FROM users WHERE email = :email"

        assert masker.mask_message(message) == message

    def test_custom_replacement(self):
        masker = SensitiveDataMasker(SensitiveDataConfig(patterns=["token"], mask_replacement="[x]"))

        assert masker.mask_message("token=abc") == "token=[x]"


class TestFormatters:
    """Test text and JSON formatters."""

    def test_masking_formatter(self, masker):
        formatter = MaskingFormatter("%(levelname)s %(message)s", masker)

        assert formatter.format(make_record("secret=s3")) == "INFO secret=***MASKED***"

    def test_json_formatter(self, masker):
        entry = json.loads(JSONFormatter(masker).format(make_record("password=x")))

        assert entry["message"] == "password=***MASKED***"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "querykit.test"
        assert entry["line"] == 10
        assert "exception" not in entry

    def test_json_formatter_exception(self, masker):
        try:
            raise ValueError("passwd=topsecret")
        except ValueError:
            record = make_record("failed", exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter(masker).format(record))

        assert "topsecret" not in entry["exception"]
        assert "ValueError" in entry["exception"]


class TestSetupLogging:
    """Test root logger configuration."""

    def test_text_setup(self, restore_root_logger):
        setup_logging(level="debug")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, MaskingFormatter)

    def test_json_setup_with_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "querykit.log"

        setup_logging(level="WARNING", format_type="json", log_file=str(log_file))
        logging.getLogger("querykit.test").warning("password=hunter2")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert len(restore_root_logger.handlers) == 2
        entry = json.loads(log_file.read_text().strip())
        assert entry["message"] == "password=***MASKED***"
        for handler in restore_root_logger.handlers:
            handler.close()
