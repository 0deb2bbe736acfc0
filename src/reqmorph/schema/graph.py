"""The linked, in-memory schema graph consumed by the engine.

:func:`~reqmorph.schema.resolver.link_api` turns an
:class:`~reqmorph.models.ApiDescriptor` into these objects. Unlike the
descriptor models, references here are direct object references: a
:class:`FieldSchema` points at its :class:`MessageSchema`, which may in turn
point back at the message owning the field. Graphs are therefore allowed to
be cyclic, and every class uses identity equality (``eq=False``) so that
instances can key dicts and sets without walking the graph.

Tests and callers that bypass the descriptor document can build graphs
directly from these dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from reqmorph.models import FieldBehavior, FieldType


@dataclass(eq=False)
class EnumValue:
    """A named enum constant."""

    name: str
    number: int = 0


@dataclass(eq=False)
class EnumSchema:
    """An enum type. ``parent`` is the enclosing message for nested enums."""

    id: str
    name: str
    values: list[EnumValue] = field(default_factory=list)
    parent: Optional[MessageSchema] = None
    documentation: str = ""

    def value_by_number(self, number: int) -> Optional[EnumValue]:
        for value in self.values:
            if value.number == number:
                return value
        return None


@dataclass(eq=False)
class OneofGroup:
    """A set of mutually exclusive fields on one message."""

    name: str
    fields: list[FieldSchema] = field(default_factory=list)


@dataclass(eq=False)
class FieldSchema:
    """A field of a :class:`MessageSchema`.

    For map fields ``message_type`` is the synthetic entry message holding a
    ``key`` and a ``value`` field.
    """

    name: str
    type: FieldType = FieldType.STRING
    json_name: str = ""
    repeated: bool = False
    map: bool = False
    behavior: frozenset[FieldBehavior] = frozenset()
    message_type: Optional[MessageSchema] = None
    enum_type: Optional[EnumSchema] = None
    oneof: Optional[OneofGroup] = None
    documentation: str = ""
    parent: Optional[MessageSchema] = None

    @property
    def json_key(self) -> str:
        """The key used for this field in JSON documents."""
        return self.json_name or self.name

    @property
    def is_required(self) -> bool:
        return FieldBehavior.REQUIRED in self.behavior

    @property
    def is_output_only(self) -> bool:
        return FieldBehavior.OUTPUT_ONLY in self.behavior

    def map_value_field(self) -> Optional[FieldSchema]:
        """Return the entry message's ``value`` field for map fields, else ``None``."""
        if not self.map or self.message_type is None:
            return None
        for entry_field in self.message_type.fields:
            if entry_field.name == "value":
                return entry_field
        return None


@dataclass(eq=False)
class MessageSchema:
    """A message type.

    ``parent`` is the enclosing message for nested types; a parent flagged
    ``service_placeholder`` stands in for a service and is not part of the
    qualified type name. ``messages`` lists the nested types declared
    directly inside this message.
    """

    id: str
    name: str
    fields: list[FieldSchema] = field(default_factory=list)
    parent: Optional[MessageSchema] = None
    messages: list[MessageSchema] = field(default_factory=list)
    oneofs: list[OneofGroup] = field(default_factory=list)
    service_placeholder: bool = False
    documentation: str = ""

    def field_by_name(self, name: str) -> Optional[FieldSchema]:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None

    def field_by_key(self, key: str) -> Optional[FieldSchema]:
        """Find a field by declared name first, then by JSON name."""
        found = self.field_by_name(key)
        if found is not None:
            return found
        for candidate in self.fields:
            if candidate.json_name and candidate.json_name == key:
                return candidate
        return None


@dataclass(eq=False)
class PathVariable:
    """A capturing template segment bound to a request field."""

    field_path: list[str]
    segments: list[str] = field(default_factory=lambda: ["*"])

    @property
    def dotted_path(self) -> str:
        """The field path joined with dots (``"book.name"``)."""
        return ".".join(self.field_path)


@dataclass(eq=False)
class PathSegment:
    """Either a literal token or a :class:`PathVariable`."""

    literal: Optional[str] = None
    variable: Optional[PathVariable] = None


@dataclass(eq=False)
class PathTemplate:
    """Ordered template segments plus an optional custom-method verb (``:cancel``)."""

    segments: list[PathSegment] = field(default_factory=list)
    verb: Optional[str] = None

    def variables(self) -> list[PathVariable]:
        return [s.variable for s in self.segments if s.variable is not None]


@dataclass(eq=False)
class PathBinding:
    """An HTTP verb plus path template, with the query parameters it accepts."""

    verb: str
    template: PathTemplate
    query_parameters: list[str] = field(default_factory=list)


@dataclass(eq=False)
class ServiceSchema:
    id: str
    name: str
    default_host: str = ""
    documentation: str = ""


@dataclass(eq=False)
class MethodSchema:
    """An RPC method linked to its service and input message."""

    id: str
    name: str
    input_type: MessageSchema
    service: Optional[ServiceSchema] = None
    output_type: Optional[MessageSchema] = None
    bindings: list[PathBinding] = field(default_factory=list)
    body: str = "*"
    documentation: str = ""


@dataclass(eq=False)
class ApiSchema:
    """Lookup tables over a linked API, keyed by ID."""

    name: str = ""
    services: dict[str, ServiceSchema] = field(default_factory=dict)
    messages: dict[str, MessageSchema] = field(default_factory=dict)
    enums: dict[str, EnumSchema] = field(default_factory=dict)
    methods: dict[str, MethodSchema] = field(default_factory=dict)
