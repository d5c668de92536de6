"""
Pipeline Factory for config-driven pipeline creation.

Builds ExportPipeline instances from the YAML ingestion configuration.

Usage:
    from src.ingestion.factory import create_pipeline, PipelineFactory

    # Create a single pipeline
    pipeline = create_pipeline("mixpanel")
    result = pipeline.execute(ListSink())

    # Create all enabled pipelines
    factory = PipelineFactory()
    pipelines = factory.create_all_enabled_pipelines()
"""

import logging
from pathlib import Path

import httpx

from src.configs.config import Config, load_yaml_config
from src.configs.logging_config import configure_logging
from src.configs.settings import get_settings
from src.ingestion.adapters.mixpanel_adapter import MixpanelAPIAdapter
from src.ingestion.errors import ConfigValidationError
from src.ingestion.pipelines.export_pipeline import ExportPipeline
from src.schemas.ingestion_config import IngestionConfig

logger = logging.getLogger(__name__)

EXPORT_PIPELINE_TYPE = "mixpanel_export"


class PipelineFactory:
    """
    Factory for creating pipelines from YAML configuration.

    Reads source configurations from ingestion.yaml and creates one
    ExportPipeline per source.
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the factory.

        Args:
            config_path: Path to ingestion.yaml. If not provided, uses default.
            transport: Optional httpx transport handed to every adapter
        """
        self.config_path = Path(config_path) if config_path else Config.INGESTION_CONFIG_PATH
        self.transport = transport
        self._config: dict | None = None

    @property
    def config(self) -> dict:
        """Load and cache configuration."""
        if self._config is None:
            self._config = load_yaml_config(self.config_path)
        return self._config

    def get_source_config(self, source_name: str) -> dict | None:
        """Get configuration for a specific source."""
        return self.config.get("sources", {}).get(source_name)

    def list_sources(self) -> dict[str, dict]:
        """
        List all configured sources with their status.

        Returns:
            Dict mapping source_name -> {enabled: bool, type: str}
        """
        sources = self.config.get("sources", {})
        return {
            name: {
                "enabled": cfg.get("enabled", True),
                "type": cfg.get("pipeline_type", EXPORT_PIPELINE_TYPE),
            }
            for name, cfg in sources.items()
        }

    def list_enabled_sources(self) -> list[str]:
        """List names of all enabled sources."""
        return [name for name, info in self.list_sources().items() if info["enabled"]]

    def build_ingestion_config(self, source_name: str) -> IngestionConfig:
        """
        Build the IngestionConfig of a source.

        Raises:
            ValueError: If the source is not configured
        """
        source_config = self.get_source_config(source_name)
        if not source_config:
            raise ValueError(f"Source '{source_name}' not found in configuration")

        properties = {"referenceName": source_name, **source_config.get("properties", {})}
        return IngestionConfig.from_properties(properties)

    def create_pipeline(self, source_name: str) -> ExportPipeline:
        """
        Create a pipeline for the specified source.

        Args:
            source_name: Name of the source (e.g., "mixpanel")

        Returns:
            Validated ExportPipeline

        Raises:
            ValueError: If source not found, not enabled, or of an unknown type
            ConfigValidationError: If the source properties are invalid
        """
        source_config = self.get_source_config(source_name)
        if not source_config:
            raise ValueError(f"Source '{source_name}' not found in configuration")

        if not source_config.get("enabled", True):
            raise ValueError(f"Source '{source_name}' is not enabled")

        pipeline_type = source_config.get("pipeline_type", EXPORT_PIPELINE_TYPE)
        if pipeline_type != EXPORT_PIPELINE_TYPE:
            raise ValueError(f"Unknown pipeline type: {pipeline_type}")

        ingestion_config = self.build_ingestion_config(source_name)
        ingestion_config.ensure_valid()

        adapter = MixpanelAPIAdapter.from_ingestion_config(
            ingestion_config,
            request_timeout=self.request_timeout,
            transport=self.transport,
        )
        return ExportPipeline(ingestion_config, adapter)

    @property
    def request_timeout(self) -> float | None:
        """HTTP timeout in seconds: global.request_timeout, else the REQUEST_TIMEOUT setting."""
        timeout = (self.config.get("global") or {}).get("request_timeout")
        if timeout is None:
            timeout = get_settings().REQUEST_TIMEOUT
        return timeout

    def create_all_enabled_pipelines(self) -> dict[str, ExportPipeline]:
        """
        Create all enabled pipelines.

        Sources whose configuration is invalid are logged and skipped.
        """
        pipelines = {}

        for source_name in self.list_enabled_sources():
            try:
                pipelines[source_name] = self.create_pipeline(source_name)
                logger.info(f"Created pipeline: {source_name}")
            except (ValueError, ConfigValidationError) as e:
                logger.warning(f"Failed to create pipeline '{source_name}': {e}")

        return pipelines

    def reload_config(self) -> None:
        """Reload configuration from disk."""
        self._config = None


def create_pipeline(source_name: str, config_path: str | Path | None = None) -> ExportPipeline:
    """
    Convenience function to create a pipeline by source name.

    Example:
        >>> from src.ingestion.factory import create_pipeline
        >>> pipeline = create_pipeline("mixpanel")
        >>> result = pipeline.execute(ListSink())
    """
    factory = PipelineFactory(config_path)
    configure_logging(factory.config.get("global", {}).get("log_level") or "INFO")
    return factory.create_pipeline(source_name)
