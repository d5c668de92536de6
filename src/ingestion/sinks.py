"""Record sinks: where a pipeline hands its records."""

from typing import Protocol

from src.schemas.output_schema import EventRecord


class RecordSink(Protocol):
    """Receives records one at a time, in stream order."""

    def emit(self, record: EventRecord) -> None: ...


class ListSink:
    """Sink that keeps every record in memory. Handy for tests and small exports."""

    def __init__(self):
        self.records: list[EventRecord] = []

    def emit(self, record: EventRecord) -> None:
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)
