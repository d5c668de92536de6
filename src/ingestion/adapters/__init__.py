"""
Source Adapters for Event Ingestion.

Adapters provide a unified interface for pulling raw data from remote sources.

Usage:
    from src.ingestion.adapters import MixpanelAPIAdapter

    adapter = MixpanelAPIAdapter.from_ingestion_config(config)
    with adapter.open_event_stream(params) as stream:
        for line in stream:
            ...
"""

from .base_adapter import AdapterConfig, BaseSourceAdapter
from .line_stream import EventLineStream
from .mixpanel_adapter import MixpanelAdapterConfig, MixpanelAPIAdapter

__all__ = [
    "AdapterConfig",
    "BaseSourceAdapter",
    "EventLineStream",
    "MixpanelAdapterConfig",
    "MixpanelAPIAdapter",
]
