"""
Mixpanel Export Pipeline.

Runs one export ingestion end to end:

    IngestionConfig -> validate -> infer schema (once) -> open export stream
        -> map each line to an EventRecord -> RecordSink

The run is strictly sequential. The schema is computed once per pipeline
and reused for every record; the export stream is always closed, whether
the run finishes, fails, or the consumer stops early.
"""

import json
import logging
import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from functools import cached_property
from typing import Any

from src.ingestion.adapters.mixpanel_adapter import MixpanelAPIAdapter
from src.ingestion.normalization.record_mapper import map_line
from src.ingestion.normalization.schema_inference import infer_schema
from src.ingestion.sinks import RecordSink
from src.schemas.ingestion_config import IngestionConfig
from src.schemas.output_schema import EventRecord, OutputSchema


class PipelineStatus(str, Enum):
    """Status of a pipeline execution."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class PipelineExecutionResult:
    """Result of a pipeline execution."""

    status: PipelineStatus
    source_name: str
    execution_id: str
    started_at: datetime
    ended_at: datetime
    schema: OutputSchema
    records_emitted: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        """Calculate execution duration."""
        return (self.ended_at - self.started_at).total_seconds()


class ExportPipeline:
    """
    Pipeline reading Mixpanel raw exports into structured records.

    Example:
        pipeline = ExportPipeline(config)
        sink = ListSink()
        result = pipeline.execute(sink)
    """

    def __init__(self, config: IngestionConfig, adapter: MixpanelAPIAdapter | None = None):
        """
        Initialize the pipeline.

        Args:
            config: Ingestion configuration, never modified
            adapter: Mixpanel adapter; built from config when not given
        """
        self.config = config
        self._adapter = adapter
        self.logger = logging.getLogger(f"pipeline.{config.reference_name}")
        self.execution_id: str | None = None

    @property
    def adapter(self) -> MixpanelAPIAdapter:
        """Get or create the Mixpanel adapter."""
        if self._adapter is None:
            self._adapter = MixpanelAPIAdapter.from_ingestion_config(self.config)
        return self._adapter

    def validate(self) -> None:
        """
        Validate the configuration before any network activity.

        Raises:
            ConfigValidationError: If the configuration is invalid
        """
        self.config.ensure_valid()

    @cached_property
    def schema(self) -> OutputSchema:
        """
        Output schema of this pipeline, inferred on first access.

        Raises:
            ConfigValidationError: If the configuration is invalid
        """
        self.validate()
        return infer_schema(self.config, self.adapter)

    def build_export_params(self) -> list[tuple[str, str]]:
        """
        Build the export request fields, in request order.

        Returns:
            [("from_date", ...), ("to_date", ...), ("event", '["a","b"]')?, ("where", ...)?]
        """
        params = [
            ("from_date", self.config.from_date),
            ("to_date", self.config.to_date),
        ]
        if self.config.events:
            params.append(("event", json.dumps(list(self.config.events))))
        if self.config.filter:
            params.append(("where", self.config.filter))
        return params

    def iter_records(self) -> Iterator[EventRecord]:
        """
        Yield one record per export line, in stream order.

        The export stream is closed when iteration ends, when mapping a line
        fails, and when the generator is closed before exhaustion.

        Raises:
            ConfigValidationError: On the first next(), before any request
        """
        self.validate()
        schema = self.schema
        with self.adapter.open_event_stream(self.build_export_params()) as stream:
            for line in stream:
                yield map_line(line, schema)

    def execute(self, sink: RecordSink) -> PipelineExecutionResult:
        """
        Run the export and emit every record to sink.

        Args:
            sink: Receives records in stream order

        Returns:
            PipelineExecutionResult summarizing the run

        Raises:
            IngestionError: Any configuration, remote, schema or parsing failure
        """
        self.execution_id = self._generate_execution_id()
        started_at = datetime.now(UTC)
        self.logger.info(f"Starting pipeline execution: {self.execution_id}")

        self.validate()

        emitted = 0
        records = self.iter_records()
        try:
            for record in records:
                sink.emit(record)
                emitted += 1
        except Exception as e:
            self.logger.error(
                f"Pipeline execution {self.execution_id} failed after {emitted} records: {e}"
            )
            raise
        finally:
            records.close()

        result = PipelineExecutionResult(
            status=PipelineStatus.SUCCESS,
            source_name=self.config.reference_name,
            execution_id=self.execution_id,
            started_at=started_at,
            ended_at=datetime.now(UTC),
            schema=self.schema,
            records_emitted=emitted,
            metadata={
                "from_date": self.config.from_date,
                "to_date": self.config.to_date,
                "events": list(self.config.events),
                "schema_fields": list(self.schema.field_names),
            },
        )
        self.logger.info(
            f"Pipeline completed: {emitted} records in {result.duration_seconds:.1f}s"
        )
        return result

    def _generate_execution_id(self) -> str:
        """Generate unique execution identifier."""
        timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
        unique_id = str(uuid.uuid4())[:8]
        return f"{self.config.reference_name}_{timestamp}_{unique_id}"
