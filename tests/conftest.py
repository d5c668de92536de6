"""
Shared pytest fixtures for the Mixpanel ingestion test suite.

Provides config factories and a fake Mixpanel server built on
httpx.MockTransport, so no test touches the network.
"""

import json
from collections.abc import Callable
from urllib.parse import parse_qsl

import httpx
import pytest

from src.ingestion.adapters.mixpanel_adapter import MixpanelAPIAdapter
from src.schemas.ingestion_config import IngestionConfig

REST_API_URL = "http://mixpanel.test"
DATA_URL = "http://data.mixpanel.test/api/2.0/export"
TOP_FIELDS_URL = f"{REST_API_URL}/api/2.0/events/properties/top/"
API_SECRET = "secret"


class FakeMixpanel:
    """
    Minimal stand-in for the Mixpanel REST and export endpoints.

    Attributes:
        top_fields: Event name -> JSON body returned by the top properties endpoint
        export_lines: Lines returned by the export endpoint
        export_status: Status returned by the export endpoint
        requests: Every request received, in order
    """

    rest_api_url = REST_API_URL
    data_url = DATA_URL
    top_fields_url = TOP_FIELDS_URL
    api_secret = API_SECRET

    def __init__(self):
        self.top_fields: dict[str, dict] = {}
        self.top_fields_status = 200
        self.export_lines: list[str] = []
        self.export_status = 200
        self.export_body: str | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        form = dict(parse_qsl(request.content.decode("utf-8")))

        if str(request.url) == TOP_FIELDS_URL:
            if self.top_fields_status >= 300:
                return httpx.Response(self.top_fields_status, text="top fields failure")
            body = self.top_fields.get(form.get("event"), {})
            return httpx.Response(200, json=body)

        if str(request.url) == DATA_URL:
            if self.export_status >= 300:
                return httpx.Response(self.export_status, text="export failure")
            body = self.export_body
            if body is None:
                body = "".join(f"{line}\n" for line in self.export_lines)
            return httpx.Response(200, text=body)

        return httpx.Response(404, text=f"unknown url {request.url}")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def form_of(self, request: httpx.Request) -> list[tuple[str, str]]:
        """Decode a recorded request body as ordered form fields."""
        return parse_qsl(request.content.decode("utf-8"))


@pytest.fixture
def fake_mixpanel():
    """Return a fresh FakeMixpanel."""
    return FakeMixpanel()


@pytest.fixture
def make_config() -> Callable[..., IngestionConfig]:
    """
    Return a function that creates IngestionConfig objects with test defaults.

    Example:
        config = make_config(schema_by_events=True, events=("event1",))
    """

    def _make_config(**kwargs) -> IngestionConfig:
        defaults = {
            "reference_name": "testReference",
            "api_secret": API_SECRET,
            "from_date": "2024-01-01",
            "to_date": "2024-01-31",
            "data_url": DATA_URL,
            "rest_api_url": REST_API_URL,
        }
        defaults.update(kwargs)
        return IngestionConfig(**defaults)

    return _make_config


@pytest.fixture
def make_adapter(fake_mixpanel) -> Callable[[IngestionConfig], MixpanelAPIAdapter]:
    """Return a function building an adapter wired to fake_mixpanel."""

    def _make_adapter(config: IngestionConfig) -> MixpanelAPIAdapter:
        return MixpanelAPIAdapter.from_ingestion_config(config, transport=fake_mixpanel.transport)

    return _make_adapter


@pytest.fixture
def event_line() -> Callable[..., str]:
    """Return a function rendering one export line."""

    def _event_line(event: str, **properties) -> str:
        return json.dumps({"event": event, "properties": properties})

    return _event_line
