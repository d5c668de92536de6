"""
Output schemas and records for Mixpanel export ingestion.

A run produces records against exactly one of two schema shapes:

- FixedRawSchema: a single "raw_event" string field holding the export line
  verbatim.
- DynamicSchema: nullable string fields inferred from Mixpanel's top
  properties for the configured events, plus event_name, distinct_id and time.

OutputSchema is the union of the two. Code that needs to behave differently
per shape dispatches on the variant type, never on a separate flag.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import ClassVar

RECORD_NAME = "mixPanelRecord"
RAW_EVENT_FIELD = "raw_event"
MANDATORY_FIELDS = ("event_name", "distinct_id", "time")


@dataclass(frozen=True)
class SchemaField:
    """A named string field of an output schema."""

    name: str
    nullable: bool = True
    type: str = "string"


@dataclass(frozen=True)
class FixedRawSchema:
    """Schema with a single non-nullable "raw_event" field."""

    name: ClassVar[str] = RECORD_NAME

    @property
    def fields(self) -> tuple[SchemaField, ...]:
        return (SchemaField(RAW_EVENT_FIELD, nullable=False),)

    @property
    def field_names(self) -> tuple[str, ...]:
        return (RAW_EVENT_FIELD,)

    def has_field(self, name: str) -> bool:
        return name == RAW_EVENT_FIELD


@dataclass(frozen=True)
class DynamicSchema:
    """
    Schema inferred from event properties.

    Field names are unique and kept in the order given; every field is a
    nullable string.
    """

    field_names: tuple[str, ...]
    name: ClassVar[str] = RECORD_NAME
    _name_set: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        names = frozenset(self.field_names)
        if len(names) != len(self.field_names):
            raise ValueError(f"Duplicate field names in schema: {self.field_names}")
        object.__setattr__(self, "_name_set", names)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "DynamicSchema":
        """Build a schema from any iterable of names, sorted for stable output."""
        return cls(field_names=tuple(sorted(set(names))))

    @property
    def fields(self) -> tuple[SchemaField, ...]:
        return tuple(SchemaField(name) for name in self.field_names)

    def has_field(self, name: str) -> bool:
        return name in self._name_set


OutputSchema = FixedRawSchema | DynamicSchema

RAW_EVENT_SCHEMA = FixedRawSchema()


@dataclass(frozen=True)
class EventRecord(Mapping):
    """
    One structured record bound to its schema.

    Every schema field is present; fields without a value are None.
    Looking up a name that is not part of the schema raises KeyError.
    """

    schema: OutputSchema
    values: Mapping[str, str | None] = field(default_factory=dict)

    def __post_init__(self):
        unknown = [name for name in self.values if not self.schema.has_field(name)]
        if unknown:
            raise KeyError(f"Fields not in schema: {unknown}")
        complete = {name: self.values.get(name) for name in self.schema.field_names}
        object.__setattr__(self, "values", complete)

    def __getitem__(self, name: str) -> str | None:
        return self.values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def to_dict(self) -> dict[str, str | None]:
        """Return a plain dict copy of the record values."""
        return dict(self.values)
