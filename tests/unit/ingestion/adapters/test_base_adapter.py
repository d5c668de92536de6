"""
Unit tests for the base_adapter module.

Tests for BaseSourceAdapter and AdapterConfig.
"""

import pytest

from src.ingestion.adapters.base_adapter import AdapterConfig, BaseSourceAdapter

# =============================================================================
# TEST HELPERS
# =============================================================================


class ConcreteAdapter(BaseSourceAdapter):
    """Concrete implementation for testing."""

    def __init__(self, config, fail_validation=False):
        self.fail_validation = fail_validation
        self.closed = False
        super().__init__(config)

    def open_event_stream(self, params):
        raise NotImplementedError

    def _validate_config(self):
        if self.fail_validation:
            raise ValueError("Invalid config")

    def close(self):
        self.closed = True


# =============================================================================
# TEST CLASSES
# =============================================================================


class TestAdapterConfig:
    """Tests for AdapterConfig dataclass."""

    def test_defaults(self):
        """Should have sensible defaults."""
        config = AdapterConfig(source_id="test")
        assert config.request_timeout is None


class TestBaseSourceAdapter:
    """Tests for BaseSourceAdapter."""

    def test_cannot_instantiate_abstract(self):
        """Should not allow direct instantiation."""
        with pytest.raises(TypeError):
            BaseSourceAdapter(AdapterConfig(source_id="test"))

    def test_source_id(self):
        """Should expose the configured source id."""
        adapter = ConcreteAdapter(AdapterConfig(source_id="my_source"))
        assert adapter.source_id == "my_source"

    def test_validation_runs_on_init(self):
        """Should validate config during construction."""
        with pytest.raises(ValueError, match="Invalid config"):
            ConcreteAdapter(AdapterConfig(source_id="test"), fail_validation=True)

    def test_context_manager_closes(self):
        """Should close when leaving a with block."""
        with ConcreteAdapter(AdapterConfig(source_id="test")) as adapter:
            assert adapter.closed is False
        assert adapter.closed is True
