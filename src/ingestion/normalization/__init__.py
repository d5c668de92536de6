"""
Normalization module for Mixpanel export data.

This package provides:
- escape_field_name: Remote property name -> schema field name
- infer_schema: Output schema from the configured events' top properties
- map_line: Export line -> EventRecord
"""

from .field_names import escape_field_name, is_valid_field_name
from .record_mapper import JsonNumber, RawEvent, map_line
from .schema_inference import infer_schema

__all__ = [
    "escape_field_name",
    "is_valid_field_name",
    "infer_schema",
    "JsonNumber",
    "map_line",
    "RawEvent",
]
