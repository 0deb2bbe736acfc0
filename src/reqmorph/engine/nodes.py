"""Typed value-tree nodes produced by :class:`~reqmorph.engine.builder.ValueTreeBuilder`.

A value tree is the engine's emitter-agnostic view of one JSON request
scoped to one message type. It has four node kinds:

* :class:`PrimitiveNode` -- a scalar already coerced to its declared type.
* :class:`MessageNode` -- an ordered list of :class:`FieldValue` children.
  A node with ``oneof_group`` set is the synthetic wrapper for a member
  of a oneof group; its single child is the populated field.
* :class:`RepeatedNode` -- an ordered list of element nodes.
* :class:`MapNode` -- string keys to value nodes, in request order.

Trees are built once and then read by exactly one emitter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from reqmorph.models import FieldType
from reqmorph.schema.graph import EnumSchema


@dataclass
class PrimitiveNode:
    """A scalar value.

    ``value`` is a Python ``str``, ``int``, ``float``, or ``bool`` matching
    ``field_type``. Enum values keep their JSON form (a value name or a
    number) together with the enum type in ``enum``. A map entry whose
    message value is missing is a message-typed node holding ``None``.
    """

    value: Any
    field_type: FieldType
    enum: Optional[EnumSchema] = None


@dataclass
class FieldValue:
    """One populated field of a :class:`MessageNode`."""

    name: str
    json_name: str
    node: ValueNode


@dataclass
class MessageNode:
    """A message value. ``children`` follow schema declaration order.

    Child lookups see through oneof wrappers, so a member field is found by
    its own name on the owning message.
    """

    type_name: str
    children: list[FieldValue] = field(default_factory=list)
    oneof_group: Optional[str] = None

    def child(self, name: str) -> Optional[FieldValue]:
        for candidate in self.children:
            inner = candidate.node
            if isinstance(inner, MessageNode) and inner.oneof_group is not None:
                found = inner.child(name)
                if found is not None:
                    return found
            elif candidate.name == name:
                return candidate
        return None

    def remove_child(self, name: str) -> Optional[FieldValue]:
        """Detach the child called *name* (dropping an emptied oneof wrapper)."""
        for index, candidate in enumerate(self.children):
            inner = candidate.node
            if isinstance(inner, MessageNode) and inner.oneof_group is not None:
                removed = inner.remove_child(name)
                if removed is not None:
                    if not inner.children:
                        del self.children[index]
                    return removed
            elif candidate.name == name:
                return self.children.pop(index)
        return None


@dataclass
class RepeatedNode:
    """``element_type_name`` is the qualified message type for message
    elements and empty for scalar elements."""

    element_type: FieldType
    element_type_name: str = ""
    items: list[ValueNode] = field(default_factory=list)
    enum: Optional[EnumSchema] = None


@dataclass
class MapNode:
    """``value_type_name`` is set for message values only. Keys keep their
    JSON (string) form; ``key_type`` is the declared key type."""

    value_type: FieldType
    value_type_name: str = ""
    entries: dict[str, ValueNode] = field(default_factory=dict)
    enum: Optional[EnumSchema] = None
    key_type: FieldType = FieldType.STRING


ValueNode = Union[PrimitiveNode, MessageNode, RepeatedNode, MapNode]


def to_json_value(node: ValueNode) -> Any:
    """Convert a value tree back to plain JSON data, keyed by JSON name.

    Oneof wrappers are flattened into their owning message, since the JSON
    mapping of a oneof member is just the member field.
    """
    if isinstance(node, PrimitiveNode):
        return node.value
    if isinstance(node, RepeatedNode):
        return [to_json_value(item) for item in node.items]
    if isinstance(node, MapNode):
        return {key: to_json_value(value) for key, value in node.entries.items()}
    result: dict[str, Any] = {}
    for child in node.children:
        inner = child.node
        if isinstance(inner, MessageNode) and inner.oneof_group is not None:
            result.update(to_json_value(inner))
        else:
            result[child.json_name] = to_json_value(inner)
    return result
