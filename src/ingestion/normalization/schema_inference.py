"""
Output schema inference from Mixpanel top properties.

In schema-by-events mode the output schema is built from the top
properties of every configured event. Property names are escaped into
field names; two different properties escaping to the same field would
silently merge unrelated data, so that is treated as a fatal error.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

from src.ingestion.errors import InvalidFieldNameError, SchemaConflictError
from src.ingestion.normalization.field_names import escape_field_name, is_valid_field_name
from src.schemas.ingestion_config import IngestionConfig
from src.schemas.output_schema import (
    MANDATORY_FIELDS,
    RAW_EVENT_SCHEMA,
    DynamicSchema,
    OutputSchema,
)

logger = logging.getLogger(__name__)


class TopFieldsSource(Protocol):
    """Anything that can list the top property names of an event."""

    def fetch_top_fields(self, event_name: str) -> set[str]: ...


def escape_all(raw_names: Iterable[str], mapping: dict[str, str]) -> list[str]:
    """
    Escape raw property names, recording escaped -> raw in mapping.

    Args:
        raw_names: Raw property names, processed in the given order
        mapping: Escaped -> raw names seen so far; updated in place

    Returns:
        Escaped names, one per raw name

    Raises:
        SchemaConflictError: If a name escapes to a field already taken by a different name
        InvalidFieldNameError: If a name escapes to an empty field name
    """
    escaped_names = []
    for raw_name in raw_names:
        escaped = escape_field_name(raw_name)
        if not is_valid_field_name(escaped):
            raise InvalidFieldNameError(
                f"'{raw_name}' escaped to '{escaped}', which is not a valid field name"
            )

        previous = mapping.get(escaped)
        if previous is None:
            mapping[escaped] = raw_name
        elif previous != raw_name:
            raise SchemaConflictError(
                f"'{raw_name}' escaped to '{escaped}', but '{previous}' was previously escaped to same value"
            )
        escaped_names.append(escaped)
    return escaped_names


def infer_schema(config: IngestionConfig, api: TopFieldsSource | None = None) -> OutputSchema:
    """
    Build the output schema for a run.

    Without schema_by_events the fixed raw event schema is returned and no
    request is made. Otherwise the top fields of each configured event are
    fetched, in configured order, and merged with event_name, distinct_id
    and time.

    Args:
        config: Ingestion configuration
        api: Source of top fields; a MixpanelAPIAdapter for the config if not given

    Returns:
        FixedRawSchema or DynamicSchema

    Raises:
        SchemaConflictError: On an escaping collision
        RemoteApiError: If a top fields lookup fails
    """
    if not config.schema_by_events:
        return RAW_EVENT_SCHEMA

    if api is None:
        from src.ingestion.adapters.mixpanel_adapter import MixpanelAPIAdapter

        api = MixpanelAPIAdapter.from_ingestion_config(config)

    mapping: dict[str, str] = {}
    field_names = set(MANDATORY_FIELDS)
    for event_name in config.events:
        top_fields = api.fetch_top_fields(event_name)
        logger.debug(f"Event '{event_name}' has {len(top_fields)} top fields")
        field_names.update(escape_all(sorted(top_fields), mapping))

    schema = DynamicSchema.from_names(field_names)
    logger.info(
        f"Inferred schema with {len(schema.field_names)} fields from {len(config.events)} events"
    )
    return schema
