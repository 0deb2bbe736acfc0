"""The Typed Value Tree Builder.

:class:`ValueTreeBuilder` walks a decoded JSON request together with a
:class:`~reqmorph.schema.graph.MessageSchema` and produces a
:class:`~reqmorph.engine.nodes.MessageNode` tree. The schema drives the
walk: JSON keys that match no field are ignored, and each matched value is
converted according to its field's declared type.

Field matching tries the declared name first and then the JSON name, so
both ``{"secret_id": ...}`` and ``{"secretId": ...}`` populate
``secret_id``. JSON ``null`` counts as absent, except inside a map: every
map key is kept, and a null or unusable value becomes the zero value of
the map's value type.

Values whose shape contradicts the schema (an object where a list is
expected, a string for an integer that does not parse) are skipped with a
warning on the context logger rather than aborting the build. Absent
REQUIRED fields are skipped too, unless the context's missing-field policy
is :attr:`~reqmorph.models.MissingFieldPolicy.ERROR`.

Example::

    builder = ValueTreeBuilder(MorphContext())
    tree = builder.build(method.input_type, {"parent": "projects/p1"})
    tree.children[0].node.value   # 'projects/p1'
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

from reqmorph.engine.context import MorphContext
from reqmorph.engine.nodes import (
    FieldValue,
    MapNode,
    MessageNode,
    PrimitiveNode,
    RepeatedNode,
    ValueNode,
)
from reqmorph.engine.primitives import qualified_go_name, scalar_text, to_pascal_case
from reqmorph.exceptions import MissingFieldError, SchemaResolutionError
from reqmorph.models import FieldType, MissingFieldPolicy
from reqmorph.schema.graph import FieldSchema, MessageSchema

_INT_WIDTHS: dict[FieldType, tuple[int, bool]] = {
    FieldType.INT32: (32, True),
    FieldType.SINT32: (32, True),
    FieldType.SFIXED32: (32, True),
    FieldType.INT64: (64, True),
    FieldType.SINT64: (64, True),
    FieldType.SFIXED64: (64, True),
    FieldType.UINT32: (32, False),
    FieldType.FIXED32: (32, False),
    FieldType.UINT64: (64, False),
    FieldType.FIXED64: (64, False),
}

_INT_TEXT_RE = re.compile(r"^[+-]?\d+$")


class ValueTreeBuilder:
    """Builds value trees for one invocation.

    The builder caches qualified type names per message object; a builder
    is cheap to create and should not be shared between invocations.

    Args:
        context: Policy and logger for this invocation. A default
            :class:`~reqmorph.engine.context.MorphContext` is used when
            omitted.
    """

    def __init__(self, context: Optional[MorphContext] = None):
        self.context = context or MorphContext()
        self._type_names: dict[MessageSchema, str] = {}

    def build(self, message: MessageSchema, data: dict[str, Any]) -> MessageNode:
        """Build the tree for *data* interpreted as *message*.

        Args:
            message: The message type of *data*.
            data: A decoded JSON object.

        Returns:
            A message node whose children are the populated fields, in
            schema declaration order.

        Raises:
            MissingFieldError: If a REQUIRED field is absent and the policy
                is ``error``.
            SchemaResolutionError: If a map field's entry type has no
                ``value`` field, or a message field has no message type.
        """
        log = self.context.logger
        node = MessageNode(type_name=self.type_name(message))

        for key in data:
            if message.field_by_key(key) is None:
                log.debug("Ignoring key %r not declared on %s", key, message.name)

        for field in message.fields:
            value = _field_value(field, data)
            if value is None:
                if field.is_required and self.context.missing_fields == MissingFieldPolicy.ERROR:
                    raise MissingFieldError(
                        f"Required field '{field.name}' is missing from "
                        f"{message.id or message.name}",
                        message_id=message.id,
                        field_name=field.name,
                    )
                continue

            child = self._build_field(field, value)
            if child is None:
                continue
            log.debug("Built %s.%s as %s", message.name, field.name, type(child).__name__)

            entry = FieldValue(name=field.name, json_name=field.json_key, node=child)
            if field.oneof is not None:
                wrapper = MessageNode(
                    type_name=self._oneof_type_name(message, field),
                    children=[entry],
                    oneof_group=field.oneof.name,
                )
                entry = FieldValue(
                    name=field.oneof.name, json_name=field.oneof.name, node=wrapper
                )
            node.children.append(entry)

        return node

    def type_name(self, message: MessageSchema) -> str:
        """Qualified nested-type name of *message*, without a package."""
        name = self._type_names.get(message)
        if name is None:
            name = qualified_go_name(message)
            self._type_names[message] = name
        return name

    def _oneof_type_name(self, message: MessageSchema, field: FieldSchema) -> str:
        member = to_pascal_case(field.name)
        # protoc-gen-go appends "_" when a nested type already uses the name.
        if any(nested.name == member for nested in message.messages):
            member += "_"
        return f"{self.type_name(message)}_{member}"

    def _build_field(self, field: FieldSchema, value: Any) -> Optional[ValueNode]:
        if field.map:
            return self._build_map(field, value)
        if field.repeated:
            return self._build_repeated(field, value)
        return self._build_single(field, value)

    def _build_map(self, field: FieldSchema, value: Any) -> Optional[MapNode]:
        value_field = field.map_value_field()
        if value_field is None:
            owner = field.parent.name if field.parent is not None else "?"
            raise SchemaResolutionError(
                f"Map field '{owner}.{field.name}' has no 'value' field in its entry type"
            )
        if not isinstance(value, dict):
            self._mismatch(field, "object", value)
            return None

        key_field = field.message_type.field_by_name("key") if field.message_type else None
        node = MapNode(
            value_type=value_field.type,
            value_type_name=self._element_type_name(value_field),
            enum=value_field.enum_type,
            key_type=key_field.type if key_field is not None else FieldType.STRING,
        )
        # Every request key is kept; null or unusable values become zero values.
        for key, item in value.items():
            built = None
            if item is not None:
                built = self._build_single(value_field, item, owner=field, key=str(key))
            if built is None:
                built = self._zero_value(value_field)
            node.entries[str(key)] = built
        return node

    def _build_repeated(self, field: FieldSchema, value: Any) -> Optional[RepeatedNode]:
        if not isinstance(value, list):
            self._mismatch(field, "array", value)
            return None

        node = RepeatedNode(
            element_type=field.type,
            element_type_name=self._element_type_name(field),
            enum=field.enum_type,
        )
        for item in value:
            if item is None:
                continue
            built = self._build_single(field, item)
            if built is not None:
                node.items.append(built)
        return node

    def _build_single(
        self,
        field: FieldSchema,
        value: Any,
        owner: Optional[FieldSchema] = None,
        key: Optional[str] = None,
    ) -> Optional[ValueNode]:
        if field.type.is_message:
            if field.message_type is None:
                raise SchemaResolutionError(
                    f"Field '{(owner or field).name}' has no message type"
                )
            if not isinstance(value, dict):
                self._mismatch(owner or field, "object", value, key)
                return None
            return self.build(field.message_type, value)

        coerced = self._coerce(field, value, owner or field, key)
        if coerced is None:
            return None
        return PrimitiveNode(value=coerced, field_type=field.type, enum=field.enum_type)

    def _element_type_name(self, field: FieldSchema) -> str:
        if field.type.is_message and field.message_type is not None:
            return self.type_name(field.message_type)
        return ""

    def _coerce(
        self, field: FieldSchema, value: Any, owner: FieldSchema, key: Optional[str] = None
    ) -> Any:
        """Convert a JSON scalar to the Python value for *field*'s type, or ``None``."""
        kind = field.type
        if isinstance(value, (dict, list)):
            self._mismatch(owner, kind.value, value, key)
            return None

        if kind in _INT_WIDTHS:
            number = _to_int(value)
            if number is None:
                self._mismatch(owner, kind.value, value, key)
                return None
            bits, signed = _INT_WIDTHS[kind]
            return _wrap(number, bits, signed)

        if kind in (FieldType.FLOAT, FieldType.DOUBLE):
            if isinstance(value, bool):
                self._mismatch(owner, kind.value, value, key)
                return None
            try:
                return float(value)
            except (ValueError, OverflowError):
                self._mismatch(owner, kind.value, value, key)
                return None

        if kind == FieldType.BOOL:
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.lower() in ("true", "false"):
                return value.lower() == "true"
            self._mismatch(owner, "bool", value, key)
            return None

        if kind == FieldType.ENUM:
            if isinstance(value, bool):
                self._mismatch(owner, "enum", value, key)
                return None
            if isinstance(value, float) and math.isfinite(value):
                return int(value)
            return value

        # string, bytes
        return scalar_text(value)

    def _zero_value(self, field: FieldSchema) -> PrimitiveNode:
        """The declared type's zero value; ``None`` stands for a nil message."""
        kind = field.type
        if kind.is_message:
            value: Any = None
        elif kind == FieldType.ENUM:
            zero = field.enum_type.value_by_number(0) if field.enum_type else None
            value = zero.name if zero is not None else 0
        elif kind == FieldType.BOOL:
            value = False
        elif kind in (FieldType.FLOAT, FieldType.DOUBLE):
            value = 0.0
        elif kind in _INT_WIDTHS:
            value = 0
        else:
            value = ""
        return PrimitiveNode(value=value, field_type=kind, enum=field.enum_type)

    def _mismatch(
        self, field: FieldSchema, expected: str, value: Any, key: Optional[str] = None
    ) -> None:
        owner = field.parent.name if field.parent is not None else ""
        if key is not None:
            self.context.logger.warning(
                "Using the zero value for %s.%s[%r]: expected %s, got %s",
                owner,
                field.name,
                key,
                expected,
                type(value).__name__,
            )
            return
        self.context.logger.warning(
            "Skipping %s.%s: expected %s, got %s",
            owner,
            field.name,
            expected,
            type(value).__name__,
        )


def _field_value(field: FieldSchema, data: dict[str, Any]) -> Any:
    """Value under the declared name, else under the JSON name; ``None`` if absent."""
    if field.name in data:
        return data[field.name]
    if field.json_name and field.json_name in data:
        return data[field.json_name]
    return None


def _to_int(value: Any) -> Optional[int]:
    """JSON numbers arrive as int or float; 64-bit integers often as strings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if _INT_TEXT_RE.match(text):
            return int(text)
        try:
            return int(float(text))
        except (ValueError, OverflowError):
            return None
    return None


def _wrap(number: int, bits: int, signed: bool) -> int:
    """Truncate *number* to a two's-complement integer of the given width."""
    modulus = 1 << bits
    number %= modulus
    if signed and number >= modulus >> 1:
        number -= modulus
    return number
