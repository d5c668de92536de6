"""
Mixpanel API Source Adapter.

Adapter for the two Mixpanel endpoints the ingestion needs:
- the REST API "top properties" lookup, used for schema inference
- the raw export endpoint, streamed back as newline-delimited JSON

Mixpanel authenticates with HTTP basic auth, the API secret as username
and an empty password. The data and REST endpoints may live on different
hosts, so credentials are kept per host and only attached to requests
going to a host they were registered for.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from src.ingestion.errors import RemoteApiError
from src.schemas.ingestion_config import (
    DEFAULT_DATA_URL,
    DEFAULT_REST_API_URL,
    IngestionConfig,
)

from .base_adapter import AdapterConfig, BaseSourceAdapter
from .line_stream import EventLineStream

logger = logging.getLogger(__name__)

TOP_FIELDS_PATH = "/api/2.0/events/properties/top/"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass
class MixpanelAdapterConfig(AdapterConfig):
    """Configuration for the Mixpanel adapter."""

    api_secret: str = ""
    data_url: str = DEFAULT_DATA_URL
    rest_api_url: str = DEFAULT_REST_API_URL

    def __post_init__(self):
        """Drop trailing slashes so paths can be appended."""
        self.data_url = self.data_url.rstrip("/")
        self.rest_api_url = self.rest_api_url.rstrip("/")


def host_key(url: str | httpx.URL) -> tuple[str, str, int]:
    """
    Identify the target host of a URL.

    Returns:
        (scheme, host, port) with the scheme's default port filled in
    """
    parsed = httpx.URL(url)
    port = parsed.port or _DEFAULT_PORTS.get(parsed.scheme, 0)
    return parsed.scheme, parsed.host, port


def encode_form(params: list[tuple[str, str]]) -> bytes:
    """Form-encode parameters keeping their order."""
    return urlencode(params).encode("utf-8")


class MixpanelAPIAdapter(BaseSourceAdapter):
    """
    Adapter for the Mixpanel export and REST APIs.

    Every call builds its own httpx.Client and releases it when done;
    nothing is shared between requests.
    """

    def __init__(
        self,
        config: MixpanelAdapterConfig,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the adapter.

        Args:
            config: MixpanelAdapterConfig with secret and endpoints
            transport: Optional httpx transport used by every client
                (e.g. httpx.MockTransport in tests)
        """
        self._transport = transport
        super().__init__(config)
        self._credentials = self._build_credentials()

    @classmethod
    def from_ingestion_config(
        cls,
        config: IngestionConfig,
        request_timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "MixpanelAPIAdapter":
        """Create an adapter for the endpoints and secret of an IngestionConfig."""
        adapter_config = MixpanelAdapterConfig(
            source_id=config.reference_name,
            request_timeout=request_timeout,
            api_secret=config.api_secret.get_secret_value(),
            data_url=config.data_url,
            rest_api_url=config.rest_api_url,
        )
        return cls(adapter_config, transport=transport)

    @property
    def mixpanel_config(self) -> MixpanelAdapterConfig:
        """Get typed config."""
        return self.config  # type: ignore[return-value]

    def _validate_config(self) -> None:
        """Validate both endpoint URLs."""
        for url in (self.mixpanel_config.data_url, self.mixpanel_config.rest_api_url):
            try:
                parsed = httpx.URL(url)
            except httpx.InvalidURL as e:
                raise ValueError(f"Mixpanel adapter got an invalid URL '{url}': {e}") from e
            if not parsed.is_absolute_url or not parsed.host:
                raise ValueError(f"Mixpanel adapter requires absolute URLs, got '{url}'")

    def _build_credentials(self) -> dict[tuple[str, str, int], httpx.BasicAuth]:
        """Register the secret for the REST and data hosts."""
        auth = httpx.BasicAuth(self.mixpanel_config.api_secret, "")
        return {
            host_key(url): auth
            for url in (self.mixpanel_config.rest_api_url, self.mixpanel_config.data_url)
        }

    def auth_for(self, url: str | httpx.URL) -> httpx.BasicAuth | None:
        """Return the credentials registered for the host of url, if any."""
        return self._credentials.get(host_key(url))

    def _create_client(self) -> httpx.Client:
        """Create a fresh HTTP client for a single call."""
        kwargs = {
            "headers": {"Accept": "application/json"},
            "transport": self._transport,
        }
        # No timeout given means the client default, not "no timeout"
        if self.mixpanel_config.request_timeout is not None:
            kwargs["timeout"] = self.mixpanel_config.request_timeout
        return httpx.Client(**kwargs)

    def _build_request(
        self,
        client: httpx.Client,
        url: str,
        params: list[tuple[str, str]],
    ) -> httpx.Request:
        return client.build_request(
            "POST",
            url,
            content=encode_form(params),
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )

    @staticmethod
    def _check_response_status(response: httpx.Response, error_message: str) -> None:
        """
        Raise RemoteApiError for any status of 300 and above.

        Reads the body so it can be reported; works for streamed responses.
        """
        if response.status_code >= 300:
            response.read()
            raise RemoteApiError(error_message, response.status_code, response.text)

    def fetch_top_fields(self, event_name: str) -> set[str]:
        """
        Fetch the names of the most common properties of an event.

        Args:
            event_name: Mixpanel event name

        Returns:
            Set of raw property names

        Raises:
            RemoteApiError: On a non-success status or a body that is not a JSON object
        """
        url = self.mixpanel_config.rest_api_url + TOP_FIELDS_PATH
        logger.debug(f"Fetching top fields for event '{event_name}' from {url}")

        with self._create_client() as client:
            request = self._build_request(client, url, [("event", event_name)])
            response = client.send(request, auth=self.auth_for(url))
            self._check_response_status(response, f"Failed to fetch fields event: '{event_name}'")

            try:
                payload = response.json()
            except ValueError as e:
                raise RemoteApiError(
                    f"Top fields response for event '{event_name}' is not JSON",
                    response.status_code,
                    response.text,
                ) from e

        if not isinstance(payload, dict):
            raise RemoteApiError(
                f"Top fields response for event '{event_name}' is not a JSON object",
                response.status_code,
                response.text,
            )
        return set(payload)

    def open_event_stream(self, params: list[tuple[str, str]]) -> EventLineStream:
        """
        Start a raw event export and return its body as a line stream.

        The status is checked before the stream is returned, so a failing
        export never yields a line.

        Args:
            params: Ordered form fields (from_date, to_date, event, where)

        Returns:
            EventLineStream owning the response and its client

        Raises:
            RemoteApiError: On a non-success status
        """
        url = self.mixpanel_config.data_url
        logger.debug(f"Opening event export stream from {url} with {[key for key, _ in params]}")

        client = self._create_client()
        response = None
        try:
            request = self._build_request(client, url, params)
            response = client.send(request, auth=self.auth_for(url), stream=True)
            self._check_response_status(response, "Failed to fetch raw events")
        except BaseException:
            if response is not None:
                response.close()
            client.close()
            raise

        return EventLineStream(client, response)
