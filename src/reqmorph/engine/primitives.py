"""Scalar formatting and naming helpers shared by the emitters.

Three families live here:

* **Go literals** -- :func:`go_literal` renders a
  :class:`~reqmorph.engine.nodes.PrimitiveNode` as Go source, and
  :func:`go_scalar_type` names the Go type of a scalar field.
* **Go identifiers** -- :func:`qualified_go_name`, :func:`to_pascal_case`,
  and :func:`reduce_service_name` follow the naming rules of the
  generated Go client libraries.
* **Shell text** -- :func:`shell_single_quote`, :func:`scalar_text`,
  :func:`singularize`, and :func:`normalize_choice` serve the curl and
  gcloud emitters.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
import re
from typing import Any, Union

from reqmorph.engine.nodes import PrimitiveNode
from reqmorph.models import FieldType
from reqmorph.schema.graph import EnumSchema, MessageSchema

_GO_SCALAR_TYPES: dict[FieldType, str] = {
    FieldType.STRING: "string",
    FieldType.BYTES: "[]byte",
    FieldType.BOOL: "bool",
    FieldType.INT32: "int32",
    FieldType.SINT32: "int32",
    FieldType.SFIXED32: "int32",
    FieldType.INT64: "int64",
    FieldType.SINT64: "int64",
    FieldType.SFIXED64: "int64",
    FieldType.UINT32: "uint32",
    FieldType.FIXED32: "uint32",
    FieldType.UINT64: "uint64",
    FieldType.FIXED64: "uint64",
    FieldType.FLOAT: "float32",
    FieldType.DOUBLE: "float64",
}

_VERSION_SUFFIX_RE = re.compile(r"V\d+$")


def go_scalar_type(field_type: FieldType) -> str:
    """Go type of a non-message, non-enum field (``"string"`` when unknown)."""
    return _GO_SCALAR_TYPES.get(field_type, "string")


def qualified_go_name(entity: Union[MessageSchema, EnumSchema]) -> str:
    """Nested-type name as generated by protoc-gen-go, without the package.

    Each enclosing message is prefixed with an underscore separator
    (``Secret_Replication``). The walk stops at a top-level service
    placeholder, which is not a real message.
    """
    name = entity.name
    parent = entity.parent
    while parent is not None:
        if parent.parent is None and parent.service_placeholder:
            break
        name = f"{parent.name}_{name}"
        parent = parent.parent
    return name


def go_type_name(entity: Union[MessageSchema, EnumSchema], package: str) -> str:
    """``package.Qualified_Name``; the package is omitted when empty."""
    qualified = qualified_go_name(entity)
    return f"{package}.{qualified}" if package else qualified


def go_literal(node: PrimitiveNode, package: str = "") -> str:
    """Render a scalar as a Go literal.

    Strings are double-quoted with Go escapes, integers are printed in
    decimal, floats print without a fraction when integral, and bools are
    ``true``/``false``. Enum names become the generated constant
    (``pkg.Secret_ENABLED``, prefixed by the enclosing message for nested
    enums); enum numbers become a conversion (``pkg.State(2)``). Bytes are
    decoded from base64 into a ``[]byte("...")`` conversion. A message-typed
    node holding ``None`` is ``nil``.
    """
    value = node.value
    kind = node.field_type

    if kind.is_message:
        return "nil"
    if kind == FieldType.ENUM:
        return _go_enum_literal(value, node, package)
    if kind == FieldType.BOOL:
        return "true" if value else "false"
    if kind == FieldType.STRING:
        return go_quote(str(value))
    if kind == FieldType.BYTES:
        return f"[]byte({_go_quote_bytes(_decode_bytes(value))})"
    if kind in (FieldType.FLOAT, FieldType.DOUBLE):
        number = float(value)
        if math.isfinite(number) and number.is_integer():
            return str(int(number))
        return repr(number)
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _go_enum_literal(value: Any, node: PrimitiveNode, package: str) -> str:
    enum = node.enum
    if enum is None:
        return go_quote(str(value)) if isinstance(value, str) else str(value)

    prefix = f"{package}." if package else ""
    if isinstance(value, str):
        # Constants of nested enums are scoped by the parent message, not the enum.
        parent = enum.parent
        if parent is None or (parent.parent is None and parent.service_placeholder):
            owner = enum.name
        else:
            owner = qualified_go_name(parent)
        return f"{prefix}{owner}_{value}"
    return f"{prefix}{qualified_go_name(enum)}({int(value)})"


def go_quote(text: str) -> str:
    """Double-quote *text* as a Go interpreted string literal."""
    return json.dumps(text, ensure_ascii=False)


def _go_quote_bytes(data: bytes) -> str:
    out = ['"']
    for byte in data:
        char = chr(byte)
        if char == '"' or char == "\\":
            out.append("\\" + char)
        elif 0x20 <= byte < 0x7F:
            out.append(char)
        else:
            out.append(f"\\x{byte:02x}")
    out.append('"')
    return "".join(out)


def _decode_bytes(value: Any) -> bytes:
    """JSON carries bytes as base64; undecodable text is taken verbatim."""
    text = str(value)
    padded = text + "=" * (-len(text) % 4)
    try:
        if "-" in text or "_" in text:
            return base64.urlsafe_b64decode(padded)
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        return text.encode("utf-8")


def to_pascal_case(name: str) -> str:
    """``secret_id`` -> ``SecretId``. Only underscores separate words."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


def reduce_service_name(service: str, package: str) -> str:
    """Shorten a service name to the stem used in ``New<Stem>Client``.

    A trailing version (``V2``) and a ``Service`` suffix are removed. If
    what is left equals the package name (case-insensitively) the stem is
    empty, giving ``pkg.NewClient``. ``IAM`` is rewritten to ``Iam`` to
    match the casing of the published IAM clients.

    >>> reduce_service_name("SecretManagerServiceV1", "secretmanager")
    ''
    >>> reduce_service_name("IAMPolicyService", "iam")
    'IamPolicy'
    """
    stem = _VERSION_SUFFIX_RE.sub("", service)
    stem = stem.removesuffix("Service")
    if stem.lower() == package.lower():
        return ""
    return stem.replace("IAM", "Iam")


def dedupe(items: list[str]) -> list[str]:
    """Drop empty and repeated entries, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def singularize(word: str) -> str:
    """Strip one trailing ``s`` (``projects`` -> ``project``)."""
    return word.removesuffix("s")


def normalize_choice(text: str) -> str:
    """Lower-case and drop ``-``/``_`` so ``user-managed`` == ``userManaged``."""
    return text.lower().replace("-", "").replace("_", "")


def shell_single_quote(text: str) -> str:
    """Wrap *text* in single quotes, escaping embedded single quotes."""
    return "'" + text.replace("'", "'\"'\"'") + "'"


def compact_json(value: Any) -> str:
    """Serialise without insignificant whitespace, keeping key order."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def scalar_text(value: Any) -> str:
    """String form of a JSON value as it appears on a command line.

    Strings are returned unchanged, ``null`` becomes the empty string,
    booleans and numbers use their JSON spelling, and containers are
    compacted JSON. An integral float prints without its fraction
    (``1.0`` -> ``1``), as it does in Go output.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return compact_json(value)
