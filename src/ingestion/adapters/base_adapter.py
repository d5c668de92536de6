"""
Base Source Adapter.

Abstract base class defining the interface for all source adapters.
An adapter knows how to talk to one remote service and hands raw data
back as a line stream; pipelines decide what to do with the lines.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .line_stream import EventLineStream


@dataclass
class AdapterConfig:
    """
    Base configuration for source adapters.

    Extended by specific adapter types.
    """

    source_id: str
    request_timeout: float | None = None


class BaseSourceAdapter(ABC):
    """
    Abstract base class for source adapters.

    Subclasses must implement:
        - open_event_stream(): Start a raw data download
        - _validate_config(): Validate adapter-specific configuration
    """

    def __init__(self, config: AdapterConfig):
        """
        Initialize the adapter.

        Args:
            config: AdapterConfig with source-specific settings
        """
        self.config = config
        self._validate_config()

    @property
    def source_id(self) -> str:
        """Get the source identifier."""
        return self.config.source_id

    @abstractmethod
    def open_event_stream(self, params: list[tuple[str, str]]) -> EventLineStream:
        """
        Open a lazily read stream of raw data lines.

        Args:
            params: Ordered request parameters

        Returns:
            EventLineStream owned by the caller
        """
        pass

    @abstractmethod
    def _validate_config(self) -> None:
        """
        Validate adapter-specific configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        pass

    def close(self) -> None:
        """
        Release any resources held by the adapter.

        Override in subclasses that hold long-lived resources.
        """
        pass

    def __enter__(self) -> "BaseSourceAdapter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
