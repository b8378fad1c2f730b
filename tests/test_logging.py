"""
Tests for log masking and error formatting
"""
import logging

from rich.logging import RichHandler

from inkpost.utils.errors import DeliveryError, ErrorHandler, format_error_message
from inkpost.utils.logging import LogManager, SensitiveDataFilter, SensitiveDataMasker, get_logger


class TestSensitiveDataMasker:
    """Tests for SensitiveDataMasker"""

    def test_masks_password_and_email(self):
        """Test passwords and addresses are hidden"""
        masked = SensitiveDataMasker().mask_string("login password=hunter2 for ada@example.com")

        assert "hunter2" not in masked
        assert "password=[REDACTED]" in masked
        assert "a***@e***" in masked

    def test_masks_query_secret(self):
        """Test worker secrets in URLs are hidden"""
        masked = SensitiveDataMasker().mask_string("GET /api/logs?secret=s3cret&x=1")

        assert masked == "GET /api/logs?secret=[REDACTED]&x=1"

    def test_mask_dict_fields(self):
        """Test sensitive keys are masked recursively"""
        masked = SensitiveDataMasker().mask_dict(
            {"api_secret": "s3cret", "nested": {"smtp_app_password": "pw"}, "count": 3}
        )

        assert masked == {
            "api_secret": "[REDACTED]",
            "nested": {"smtp_app_password": "[REDACTED]"},
            "count": 3,
        }


class TestLogManager:
    """Tests for the console log level"""

    @staticmethod
    def _console_levels(manager):
        return [h.level for h in manager.root_logger.handlers if isinstance(h, RichHandler)]

    def test_console_uses_configured_level(self):
        """Test the console handler follows the requested level"""
        manager = LogManager("ERROR")
        try:
            assert self._console_levels(manager) == [logging.ERROR]

            manager.set_level("debug")
            assert self._console_levels(manager) == [logging.DEBUG]
        finally:
            manager.set_level("WARNING")

    def test_loggers_live_under_inkpost(self):
        """Test module loggers are children of the inkpost logger"""
        assert get_logger("inkpost.core.tasks").name == "inkpost.core.tasks"
        assert get_logger("tests").name == "inkpost.tests"


class TestSensitiveDataFilter:
    """Tests for SensitiveDataFilter"""

    def test_filter_rewrites_record(self):
        """Test the filter masks the message and sensitive extras"""
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "token=abc123", None, None)
        record.password = "pw"

        assert SensitiveDataFilter().filter(record)
        assert record.msg == "token=[REDACTED]"
        assert record.password == "[REDACTED]"


class TestErrorFormatting:
    """Tests for error helpers"""

    def test_domain_error_message(self):
        """Test domain errors show their own message"""
        assert format_error_message(DeliveryError("Recipient refused")) == "Recipient refused"

    def test_unexpected_error_message(self):
        """Test other errors get a generic message"""
        assert "unexpected" in format_error_message(RuntimeError("boom"))

    def test_handle_returns_details(self):
        """Test ErrorHandler.handle describes the error"""
        result = ErrorHandler.handle(RuntimeError("boom"), "Send email", log_traceback=False)

        assert result["error_type"] == "UnknownError"
        assert result["details"] == {"context": "Send email"}
