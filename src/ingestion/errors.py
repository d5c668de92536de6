"""
Ingestion error hierarchy.

Every failure raised by the export ingestion core derives from
IngestionError so callers can catch the whole family at once.
"""

from dataclasses import dataclass


class IngestionError(Exception):
    """Base exception for all ingestion failures."""


@dataclass(frozen=True)
class ValidationFailure:
    """A single configuration problem, attributed to the property that caused it."""

    message: str
    corrective_action: str
    config_property: str

    def __str__(self) -> str:
        return f"{self.config_property}: {self.message} {self.corrective_action}"


class ConfigValidationError(IngestionError):
    """Raised when the ingestion config is invalid. Reported before any network call."""

    def __init__(self, failures: list[ValidationFailure]):
        self.failures = list(failures)
        details = "; ".join(str(failure) for failure in self.failures)
        super().__init__(f"Invalid ingestion config: {details}")

    @property
    def config_properties(self) -> list[str]:
        """Names of the properties that failed validation."""
        return [failure.config_property for failure in self.failures]


class RemoteApiError(IngestionError):
    """Raised when the remote API answers with a non-success status or an unusable body."""

    def __init__(self, message: str, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{message}, code: {status_code}, output: {body}")


class SchemaConflictError(IngestionError):
    """Raised when two distinct remote property names escape to the same field."""


class InvalidFieldNameError(SchemaConflictError):
    """Raised when a remote property name escapes to an empty field name."""


class MalformedEventError(IngestionError):
    """Raised when an export line does not parse as an event."""


class StreamExhaustedError(IngestionError):
    """Raised when a line is requested from a stream that has none left."""
