"""
Unit tests for the errors module.
"""

import pytest

from src.ingestion.errors import (
    ConfigValidationError,
    IngestionError,
    InvalidFieldNameError,
    MalformedEventError,
    RemoteApiError,
    SchemaConflictError,
    StreamExhaustedError,
    ValidationFailure,
)


class TestHierarchy:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "error_type",
        [ConfigValidationError, RemoteApiError, SchemaConflictError, MalformedEventError, StreamExhaustedError],
    )
    def test_all_are_ingestion_errors(self, error_type):
        """Should derive every error from IngestionError."""
        assert issubclass(error_type, IngestionError)

    def test_invalid_field_name_is_conflict(self):
        """Should catch empty-name failures as schema conflicts."""
        assert issubclass(InvalidFieldNameError, SchemaConflictError)


class TestRemoteApiError:
    """Tests for RemoteApiError."""

    def test_message(self):
        """Should include status code and body."""
        error = RemoteApiError("Export failed", 500, "boom")
        assert str(error) == "Export failed, code: 500, output: boom"
        assert error.status_code == 500
        assert error.body == "boom"


class TestConfigValidationError:
    """Tests for ConfigValidationError."""

    def test_keeps_failures(self):
        """Should expose each failure and its property."""
        failures = [
            ValidationFailure("Invalid date 'x'.", "Change date to YYYY-MM-DD format.", "fromDate"),
            ValidationFailure("No events specified.", "Specify event names.", "events"),
        ]
        error = ConfigValidationError(failures)

        assert error.failures == failures
        assert error.config_properties == ["fromDate", "events"]
        assert "fromDate: Invalid date 'x'." in str(error)
