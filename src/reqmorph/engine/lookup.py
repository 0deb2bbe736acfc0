"""Dotted field-path lookups over raw request JSON.

The gcloud emitter and the path-template matcher address request fields by
dotted paths such as ``secret.replication.userManaged.replicas``. A lookup
inspects the JSON value once and returns a :class:`JsonValue` tagged with
its :class:`JsonKind`, so callers branch on the tag instead of on Python
types scattered through the emitters.

Path components are matched as object keys; a component made of digits
indexes into an array (``replicas.0.location``).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Sequence, Union


class JsonKind(str, enum.Enum):
    MISSING = "missing"
    NULL = "null"
    SCALAR = "scalar"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class JsonValue:
    """A located JSON fragment. ``value`` is ``None`` for MISSING and NULL."""

    kind: JsonKind
    value: Any = None

    @property
    def exists(self) -> bool:
        return self.kind != JsonKind.MISSING


MISSING = JsonValue(JsonKind.MISSING)


def classify(value: Any) -> JsonValue:
    """Tag a decoded JSON value."""
    if value is None:
        return JsonValue(JsonKind.NULL)
    if isinstance(value, dict):
        return JsonValue(JsonKind.OBJECT, value)
    if isinstance(value, list):
        return JsonValue(JsonKind.ARRAY, value)
    return JsonValue(JsonKind.SCALAR, value)


def lookup(data: Any, path: Union[str, Sequence[str]]) -> JsonValue:
    """Follow *path* through *data*.

    Args:
        data: Decoded JSON (usually the request object).
        path: A dotted string or a sequence of components.

    Returns:
        The tagged value, or :data:`MISSING` when any component is absent.

    Example::

        >>> lookup({"secret": {"labels": {"env": "prod"}}}, "secret.labels").kind
        <JsonKind.OBJECT: 'object'>
        >>> lookup({"a": 1}, "a.b").exists
        False
    """
    parts = path.split(".") if isinstance(path, str) else list(path)
    current = data
    for part in parts:
        if isinstance(current, dict):
            if part not in current:
                return MISSING
            current = current[part]
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return classify(current)
