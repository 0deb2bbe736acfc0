"""Export a message type as a JSON Schema document.

The exported schema is what the external flag mapper reads to learn which
request fields exist. The root message becomes the top-level object schema;
every other message reachable through a field is emitted once into
``definitions`` (keyed by message ID) and referenced with ``$ref``.

Message graphs may be cyclic. :class:`_SchemaWalker` records a reference
for a message *before* walking its fields, so a message that refers to
itself or to an ancestor gets a ``$ref`` instead of another walk. The root
message is always referenced as ``#``.

Example::

    schema = to_json_schema(method.input_type)
    schema["properties"]["secret"]
    {'$ref': '#/definitions/.google.cloud.secretmanager.v1.Secret'}
"""

from __future__ import annotations

from typing import Any, Optional

from reqmorph.models import FieldType
from reqmorph.schema.graph import FieldSchema, MessageSchema

_INTEGER_TYPES = frozenset(
    {
        FieldType.INT32,
        FieldType.INT64,
        FieldType.UINT32,
        FieldType.UINT64,
        FieldType.SINT32,
        FieldType.SINT64,
        FieldType.FIXED32,
        FieldType.FIXED64,
        FieldType.SFIXED32,
        FieldType.SFIXED64,
    }
)


def to_json_schema(message: Optional[MessageSchema]) -> dict[str, Any]:
    """Build the JSON Schema for *message*.

    Args:
        message: The root message. ``None`` yields the empty schema ``{}``.

    Returns:
        A JSON-serialisable dict. The root always carries a ``definitions``
        table, which is empty when no other message is referenced.
    """
    if message is None:
        return {}
    walker = _SchemaWalker()
    walker.ref_map[message.id] = "#"
    root = walker.build_object(message)
    root["definitions"] = walker.definitions
    return root


class _SchemaWalker:
    """Owns the reference table and definitions for a single export."""

    def __init__(self) -> None:
        self.ref_map: dict[str, str] = {}
        self.definitions: dict[str, dict[str, Any]] = {}

    def ref(self, message: Optional[MessageSchema]) -> dict[str, Any]:
        if message is None:
            return {}
        existing = self.ref_map.get(message.id)
        if existing is not None:
            return {"$ref": existing}

        ref = "#/definitions/" + message.id
        # Registered before the walk so cycles end at this entry.
        self.ref_map[message.id] = ref
        self.definitions[message.id] = self.build_object(message)
        return {"$ref": ref}

    def build_object(self, message: MessageSchema) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "object", "properties": {}}
        if message.documentation:
            schema["description"] = message.documentation

        required: list[str] = []
        for field in message.fields:
            if field.is_output_only:
                continue
            schema["properties"][field.json_key] = self.build_field(field)
            if field.is_required:
                required.append(field.json_key)
        if required:
            schema["required"] = required
        return schema

    def build_field(self, field: FieldSchema) -> dict[str, Any]:
        if field.map:
            value_schema: dict[str, Any] = {}
            value_field = field.map_value_field()
            if value_field is not None:
                value_schema = self.build_field_type(value_field)
                if value_field.documentation:
                    value_schema["description"] = value_field.documentation
            schema: dict[str, Any] = {"type": "object", "additionalProperties": value_schema}
            if field.documentation:
                schema["description"] = field.documentation
            return schema

        item = self.build_field_type(field)
        if field.documentation:
            item["description"] = field.documentation

        if field.repeated:
            schema = {"type": "array", "items": item}
            if field.documentation:
                schema["description"] = field.documentation
            return schema
        return item

    def build_field_type(self, field: FieldSchema) -> dict[str, Any]:
        kind = field.type
        if kind in (FieldType.DOUBLE, FieldType.FLOAT):
            return {"type": "number"}
        if kind in _INTEGER_TYPES:
            return {"type": "integer"}
        if kind == FieldType.BOOL:
            return {"type": "boolean"}
        if kind == FieldType.BYTES:
            return {"type": "string", "contentEncoding": "base64"}
        if kind.is_message:
            return self.ref(field.message_type)
        if kind == FieldType.ENUM and field.enum_type is not None:
            return {"enum": [value.name for value in field.enum_type.values]}
        return {"type": "string"}
