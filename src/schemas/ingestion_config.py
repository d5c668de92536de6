"""
Ingestion configuration for Mixpanel event export.

IngestionConfig is the only view of configuration the ingestion core has.
It is immutable once built; the hosting layer builds it either directly or
from plugin-style string properties via IngestionConfig.from_properties().
"""

import re
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from src.ingestion.errors import ConfigValidationError, ValidationFailure

DEFAULT_DATA_URL = "https://data.mixpanel.com/api/2.0/export"
DEFAULT_REST_API_URL = "https://mixpanel.com"

PROPERTY_REFERENCE_NAME = "referenceName"
PROPERTY_API_SECRET = "apiSecret"
PROPERTY_FROM_DATE = "fromDate"
PROPERTY_TO_DATE = "toDate"
PROPERTY_EVENTS = "events"
PROPERTY_FILTER = "filter"
PROPERTY_URL = "mixPanelDataUrl"
PROPERTY_REST_URL = "mixPanelRestApiUrl"
PROPERTY_SCHEMA_BY_EVENTS = "schemaByEvents"

_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_REFERENCE_NAME_PATTERN = re.compile(r"[A-Za-z0-9_.\-]+")
_URL_SCHEMES = ("http", "https")


def _is_valid_url(url: str) -> bool:
    """Check that url is absolute with an http(s) scheme and a host."""
    try:
        parts = urlsplit(url)
        # Accessing port validates it
        parts.port
    except ValueError:
        return False
    return parts.scheme in _URL_SCHEMES and bool(parts.hostname)


def parse_switch(value: Any) -> bool:
    """
    Read an on/off property.

    YAML loads an unquoted `on` as True, so booleans are accepted as well
    as the strings "on" and "true".
    """
    if isinstance(value, bool):
        return value
    return str(value or "off").strip().lower() in ("on", "true")


def parse_events(value: str | None) -> tuple[str, ...]:
    """Split a comma separated event list, dropping blanks."""
    if not value:
        return ()
    return tuple(name.strip() for name in value.split(",") if name.strip())


class IngestionConfig(BaseModel):
    """
    Immutable configuration for one export ingestion run.

    Attributes:
        reference_name: Name identifying the source in logs and lineage
        api_secret: Mixpanel API secret, sent as the basic auth username
        from_date: First export day, YYYY-MM-DD, inclusive
        to_date: Last export day, YYYY-MM-DD, inclusive
        events: Event names to export; all events when empty
        filter: Optional Mixpanel "where" expression, passed through verbatim
        data_url: Raw export endpoint
        rest_api_url: Base URL of the REST API used for top properties
        schema_by_events: Infer the output schema from the events' top properties
    """

    model_config = ConfigDict(frozen=True)

    reference_name: str = "mixpanel"
    api_secret: SecretStr = SecretStr("")
    from_date: str
    to_date: str
    events: tuple[str, ...] = Field(default_factory=tuple)
    filter: str | None = None
    data_url: str = DEFAULT_DATA_URL
    rest_api_url: str = DEFAULT_REST_API_URL
    schema_by_events: bool = False

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> "IngestionConfig":
        """
        Build a config from plugin-style string properties.

        Args:
            properties: Dict keyed by property name, e.g.
                {"apiSecret": "...", "fromDate": "2024-01-01",
                 "events": "Signup,Purchase", "schemaByEvents": "on"}

        Returns:
            IngestionConfig. Not validated; call ensure_valid() before use.
        """
        return cls(
            reference_name=properties.get(PROPERTY_REFERENCE_NAME) or "mixpanel",
            api_secret=SecretStr(properties.get(PROPERTY_API_SECRET) or ""),
            from_date=str(properties.get(PROPERTY_FROM_DATE) or ""),
            to_date=str(properties.get(PROPERTY_TO_DATE) or ""),
            events=parse_events(properties.get(PROPERTY_EVENTS)),
            filter=properties.get(PROPERTY_FILTER) or None,
            data_url=properties.get(PROPERTY_URL) or DEFAULT_DATA_URL,
            rest_api_url=properties.get(PROPERTY_REST_URL) or DEFAULT_REST_API_URL,
            schema_by_events=parse_switch(properties.get(PROPERTY_SCHEMA_BY_EVENTS)),
        )

    def validation_failures(self) -> list[ValidationFailure]:
        """Collect every configuration problem without raising."""
        failures = []

        if not _REFERENCE_NAME_PATTERN.fullmatch(self.reference_name):
            failures.append(
                ValidationFailure(
                    f"Invalid reference name '{self.reference_name}'.",
                    "Use only letters, digits, '_', '-' and '.'.",
                    PROPERTY_REFERENCE_NAME,
                )
            )
        if not _is_valid_url(self.data_url):
            failures.append(
                ValidationFailure(
                    f"Invalid data URL '{self.data_url}'.",
                    "Change MixPanel data url to valid.",
                    PROPERTY_URL,
                )
            )
        if not _is_valid_url(self.rest_api_url):
            failures.append(
                ValidationFailure(
                    f"Invalid rest api URL '{self.rest_api_url}'.",
                    "Change MixPanel rest api url to valid.",
                    PROPERTY_REST_URL,
                )
            )
        for prop, value in ((PROPERTY_FROM_DATE, self.from_date), (PROPERTY_TO_DATE, self.to_date)):
            if not _DATE_PATTERN.fullmatch(value):
                failures.append(
                    ValidationFailure(
                        f"Invalid date '{value}'.",
                        "Change date to YYYY-MM-DD format.",
                        prop,
                    )
                )
        if self.schema_by_events and not self.events:
            failures.append(
                ValidationFailure(
                    "No events specified.",
                    "Specify event names or turn off schemaByEvents.",
                    PROPERTY_SCHEMA_BY_EVENTS,
                )
            )

        return failures

    def ensure_valid(self) -> None:
        """
        Validate the config.

        Raises:
            ConfigValidationError: With every failure found, if any
        """
        failures = self.validation_failures()
        if failures:
            raise ConfigValidationError(failures)
