"""Unit tests for settings, exceptions, logging and request tracking."""

import io
import json
import logging

import pytest
from pydantic import ValidationError as PydanticValidationError

from smartreports.core.config import Settings
from smartreports.core.exceptions import (
    ExportError,
    RequestInProgressError,
    TemplateNotFoundError,
    ValidationError,
)
from smartreports.core.logging import ConsoleFormatter, JSONFormatter, setup_logging
from smartreports.services import RequestKind, RequestStatus, RequestTracker


class TestSettings:
    """Tests for environment driven settings."""

    def test_export_formats_from_env(self, monkeypatch):
        """Test comma-separated export formats are parsed."""
        monkeypatch.setenv("DEFAULT_EXPORT_FORMATS", "pdf, csv")
        assert Settings().default_export_formats == ["pdf", "csv"]

    def test_unknown_export_format(self):
        """Test unknown export formats are rejected."""
        with pytest.raises(PydanticValidationError):
            Settings(default_export_formats="pdf,docx")

    def test_unknown_default_data_source(self):
        """Test the default data source must be known."""
        with pytest.raises(PydanticValidationError):
            Settings(default_data_source="payroll")

    def test_api_url(self):
        """Test base URL and prefix are normalized."""
        settings = Settings(api_base_url="http://erp/api/", api_prefix="reports/smart")
        assert settings.api_url == "http://erp/api/reports/smart"


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_validation_error_dict(self):
        """Test validation errors expose their individual errors."""
        errors = [{"loc": ["fields"], "msg": "missing", "type": "no_visible_fields"}]
        exc = ValidationError("Report configuration is invalid", errors)

        assert exc.status_code == 400
        assert exc.errors == errors
        assert exc.to_dict()["error"]["code"] == "VALIDATION_ERROR"

    def test_request_in_progress_is_validation_error(self):
        """Test a pending request blocks like a validation error."""
        exc = RequestInProgressError("execute")
        assert isinstance(exc, ValidationError)
        assert exc.code == "REQUEST_IN_PROGRESS"

    def test_export_and_template_details(self):
        """Test remote errors carry their context."""
        assert ExportError("down", "pdf").details == {"format": "pdf"}

        missing = TemplateNotFoundError("t9")
        assert missing.status_code == 404
        assert missing.code == "TEMPLATE_NOT_FOUND"
        assert missing.details["template_id"] == "t9"


class TestLogging:
    """Tests for log formatting."""

    def test_json_formatter_includes_extra(self):
        """Test extra fields end up under the extra key."""
        record = logging.LogRecord(
            "smartreports.test", logging.INFO, __file__, 10, "Report executed", None, None
        )
        record.data_source = "debts"

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Report executed"
        assert data["level"] == "INFO"
        assert data["extra"] == {"data_source": "debts"}

    @pytest.fixture
    def package_logger(self):
        logger = logging.getLogger("smartreports")
        handlers, level = logger.handlers[:], logger.level
        yield logger
        logger.handlers[:] = handlers
        logger.setLevel(level)

    def test_setup_logging_leaves_root_alone(self, package_logger):
        """Test setup only configures the package logger."""
        root = logging.getLogger()
        sentinel = logging.NullHandler()
        root.addHandler(sentinel)
        try:
            setup_logging(Settings(log_level="DEBUG", json_logs=True), stream=io.StringIO())
            assert sentinel in root.handlers
        finally:
            root.removeHandler(sentinel)

        assert package_logger.level == logging.DEBUG
        formatters = [h.formatter for h in package_logger.handlers if h.formatter]
        assert len(formatters) == 1
        assert isinstance(formatters[0], JSONFormatter)

    def test_setup_logging_is_idempotent(self, package_logger):
        """Test calling setup again replaces its handler and honors overrides."""
        stream = io.StringIO()
        setup_logging(Settings(json_logs=False), stream=io.StringIO())
        setup_logging(Settings(json_logs=False), json_logs=True, log_level="info", stream=stream)

        installed = [h for h in package_logger.handlers if h.formatter]
        assert len(installed) == 1

        logging.getLogger("smartreports.services.executor").info(
            "Report executed", extra={"rows": 3}
        )
        line = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert line["message"] == "Report executed"
        assert line["extra"] == {"rows": 3}

    def test_console_formatter_appends_extra(self):
        """Test console lines carry extra context."""
        record = logging.makeLogRecord(
            {"name": "smartreports", "levelname": "WARNING", "msg": "Fallback", "reason": "down"}
        )
        line = ConsoleFormatter(colors=False).format(record)
        assert "WARNING" in line
        assert line.endswith('{"reason":"down"}')


class TestRequestTracker:
    """Tests for request tokens and states."""

    def test_lifecycle(self):
        """Test a request moves from pending to success."""
        tracker = RequestTracker()
        assert tracker.state("execute").status == RequestStatus.IDLE

        token = tracker.begin(RequestKind.EXECUTE)
        assert tracker.state("execute").is_pending
        assert tracker.succeed("execute", token)
        assert tracker.state("execute").status == RequestStatus.SUCCESS

    def test_exclusive_kinds(self):
        """Test execute and export cannot overlap themselves."""
        tracker = RequestTracker()
        tracker.begin("export")
        with pytest.raises(RequestInProgressError):
            tracker.begin("export")
        tracker.begin("execute")

    def test_metadata_superseded(self):
        """Test a newer metadata request makes the older token stale."""
        tracker = RequestTracker()
        first = tracker.begin("metadata")
        second = tracker.begin("metadata")

        assert not tracker.is_current("metadata", first)
        assert not tracker.fail("metadata", first, ValidationError())
        assert tracker.succeed("metadata", second)

    def test_reset_invalidates_token(self):
        """Test reset returns to idle and drops the pending token."""
        tracker = RequestTracker()
        token = tracker.begin("execute")
        tracker.reset("execute")

        assert tracker.state("execute").status == RequestStatus.IDLE
        assert not tracker.succeed("execute", token)
        tracker.begin("execute")

    def test_release_returns_unsettled_request_to_idle(self):
        """Test an abandoned request no longer blocks its kind."""
        tracker = RequestTracker()
        token = tracker.begin("export")

        assert tracker.release("export", token)
        assert tracker.state("export").status == RequestStatus.IDLE
        tracker.begin("export")

    def test_release_keeps_settled_state(self):
        """Test releasing a settled request keeps its outcome."""
        tracker = RequestTracker()
        token = tracker.begin("execute")
        tracker.succeed("execute", token)

        assert not tracker.release("execute", token)
        assert tracker.state("execute").status == RequestStatus.SUCCESS
