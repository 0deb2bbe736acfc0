"""The curl emitter.

Turns a request into a single ``curl`` invocation against the method's
first HTTP binding:

1. Path variables are filled from the request in template order, and the
   fields they read are removed from the request.
2. Declared query parameters present in the request are moved to the
   query string, keyed by JSON name.
3. What remains becomes the JSON body, following the method's body rule:
   ``*`` sends every remaining field, a field name sends only that field,
   and an empty rule sends no body.

The request is first converted to a value tree, so only fields declared
on the input message reach the body, with values coerced to their types.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence
from urllib.parse import quote, urlencode

from reqmorph.emitters.rendering import render_template, write_output
from reqmorph.engine.builder import ValueTreeBuilder
from reqmorph.engine.context import MorphContext
from reqmorph.engine.lookup import JsonKind, lookup
from reqmorph.engine.nodes import FieldValue, MessageNode, to_json_value
from reqmorph.engine.primitives import compact_json, scalar_text, shell_single_quote
from reqmorph.exceptions import InvalidUsageError, MissingFieldError
from reqmorph.models import lower_camel
from reqmorph.schema.graph import MethodSchema, PathTemplate

CURL_FILENAME = "curl.sh"


def curl_arguments(
    method: MethodSchema, request: dict[str, Any], context: MorphContext
) -> list[str]:
    """Build the shell-quoted arguments of the curl invocation.

    Raises:
        InvalidUsageError: If the method has no HTTP binding or its service
            has no default host.
        MissingFieldError: If a path variable's field is absent from the
            request.
    """
    if not method.bindings:
        raise InvalidUsageError(f"Method '{method.id}' has no HTTP bindings")
    if method.service is None or not method.service.default_host:
        raise InvalidUsageError(f"Method '{method.id}' has no service default host")

    binding = method.bindings[0]
    tree = ValueTreeBuilder(context).build(method.input_type, request)

    path = _expand_path(binding.template, method, request)
    for variable in binding.template.variables():
        _detach(tree, variable.field_path)

    params: list[tuple[str, str]] = []
    for name in binding.query_parameters:
        components = name.split(".")
        found = _detach(tree, components)
        if found is None:
            continue
        key = ".".join(lower_camel(part) for part in components)
        params.extend((key, text) for text in _query_values(to_json_value(found.node)))

    body = _select_body(tree, method.body)

    url = f"https://{method.service.default_host}{path}"
    if params:
        url += "?" + urlencode(params)

    arguments = [f"-X {binding.verb}"]
    if context.curl_auth_header:
        header = context.curl_auth_header.replace('"', '\\"')
        # Double quotes let the shell expand $(...) in the configured header.
        arguments.append(f'-H "{header}"')
    if body is not None:
        arguments.append("-H 'Content-Type: application/json'")
    arguments.append(shell_single_quote(url))
    if body is not None:
        arguments.append(f"-d {shell_single_quote(compact_json(body))}")

    context.logger.debug("curl arguments: %s", arguments)
    return arguments


def render_curl(method: MethodSchema, request: dict[str, Any], context: MorphContext) -> str:
    """Render the ``curl.sh`` script text."""
    return render_template("curl.sh.j2", {"arguments": curl_arguments(method, request, context)})


def emit_curl(
    method: MethodSchema,
    request: dict[str, Any],
    out_dir: str | Path,
    context: MorphContext,
) -> Path:
    """Render and write ``curl.sh`` (mode 0755)."""
    path = write_output(out_dir, CURL_FILENAME, render_curl(method, request, context), executable=True)
    context.logger.info("Wrote %s", path)
    return path


def _expand_path(template: PathTemplate, method: MethodSchema, request: dict[str, Any]) -> str:
    path = ""
    for segment in template.segments:
        if segment.literal is not None:
            path += "/" + segment.literal
        elif segment.variable is not None:
            field_path = segment.variable.field_path
            located = lookup(request, field_path)
            if not located.exists:
                located = lookup(request, [lower_camel(part) for part in field_path])
            if located.kind != JsonKind.SCALAR:
                dotted = segment.variable.dotted_path
                raise MissingFieldError(
                    f"Path variable '{dotted}' of method '{method.id}' is missing "
                    "from the request",
                    message_id=method.input_type.id,
                    field_name=dotted,
                )
            path += "/" + quote(scalar_text(located.value), safe="/")
    if template.verb:
        path += ":" + template.verb
    return path


def _detach(tree: MessageNode, components: Sequence[str]) -> Optional[FieldValue]:
    """Remove and return the field at *components* (proto or JSON names)."""
    node = tree
    for part in components[:-1]:
        child = _child(node, part)
        if child is None or not isinstance(child.node, MessageNode):
            return None
        node = child.node
    last = _child(node, components[-1])
    if last is None:
        return None
    return node.remove_child(last.name)


def _child(node: MessageNode, name: str) -> Optional[FieldValue]:
    found = node.child(name)
    if found is not None:
        return found
    for candidate in _members(node):
        if candidate.json_name == name:
            return candidate
    return None


def _members(node: MessageNode) -> list[FieldValue]:
    members: list[FieldValue] = []
    for child in node.children:
        inner = child.node
        if isinstance(inner, MessageNode) and inner.oneof_group is not None:
            members.extend(inner.children)
        else:
            members.append(child)
    return members


def _query_values(value: Any) -> list[str]:
    if isinstance(value, list):
        return [scalar_text(item) for item in value if item is not None]
    if value is None:
        return []
    return [scalar_text(value)]


def _select_body(tree: MessageNode, rule: str) -> Any:
    """JSON body for *rule*, or ``None`` when nothing is sent."""
    if not rule:
        return None
    if rule == "*":
        remaining = to_json_value(tree)
        return remaining or None
    found = _child(tree, rule)
    if found is None:
        return None
    return to_json_value(found.node)
