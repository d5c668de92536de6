"""
Mapping of export lines to structured records.

The schema variant decides how a line is read: against the fixed raw
schema the line is stored as-is, against an inferred schema it is parsed
as a Mixpanel event and its properties are spread over the schema fields.
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from src.ingestion.errors import MalformedEventError
from src.ingestion.normalization.field_names import EVENT_NAME_FIELD, escape_field_name
from src.schemas.output_schema import (
    RAW_EVENT_FIELD,
    DynamicSchema,
    EventRecord,
    FixedRawSchema,
    OutputSchema,
)


@dataclass(frozen=True)
class JsonNumber:
    """A JSON number kept as the literal text of the export line."""

    text: str


class RawEvent(BaseModel):
    """One export line: {"event": ..., "properties": {...}}."""

    model_config = ConfigDict(extra="forbid")

    event: str
    properties: dict[str, Any]


def _render_json(value: Any) -> str:
    """Compact JSON text of a parsed value, numbers as originally written."""
    if isinstance(value, JsonNumber):
        return value.text
    if isinstance(value, dict):
        members = (f"{json.dumps(key, ensure_ascii=False)}:{_render_json(item)}" for key, item in value.items())
        return "{" + ",".join(members) + "}"
    if isinstance(value, list):
        return "[" + ",".join(_render_json(item) for item in value) + "]"
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def coerce_value(value: Any) -> str | None:
    """Render a property value as a string, the way it appears in JSON."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return _render_json(value)


def parse_event(raw_line: str) -> RawEvent:
    """
    Parse an export line.

    Numbers are kept as JsonNumber so `1e20` stays `1e20` once coerced.

    Raises:
        MalformedEventError: If the line is not JSON or not shaped like an event
    """
    try:
        data = json.loads(raw_line, parse_int=JsonNumber, parse_float=JsonNumber)
        return RawEvent.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise MalformedEventError(f"Malformed event line {raw_line[:200]!r}: {e}") from e


def map_line(raw_line: str, schema: OutputSchema) -> EventRecord:
    """
    Convert one export line into a record of the given schema.

    Properties without a matching schema field are dropped; schema fields
    the event does not carry are left None.

    Args:
        raw_line: One line of the export stream
        schema: Schema the record must conform to

    Returns:
        EventRecord bound to schema

    Raises:
        MalformedEventError: If schema is inferred and the line does not parse
    """
    if isinstance(schema, FixedRawSchema):
        return EventRecord(schema, {RAW_EVENT_FIELD: raw_line})

    if isinstance(schema, DynamicSchema):
        event = parse_event(raw_line)
        values: dict[str, str | None] = {EVENT_NAME_FIELD: event.event}
        for name, value in event.properties.items():
            field_name = escape_field_name(name)
            if schema.has_field(field_name):
                values[field_name] = coerce_value(value)
        return EventRecord(schema, values)

    raise TypeError(f"Unsupported schema type: {type(schema).__name__}")
