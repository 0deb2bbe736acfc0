"""The Go-literal emitter.

Renders a value tree as a Go composite literal and wraps it in a runnable
``main.go`` that creates the service client and calls the method::

    req := &secretmanagerpb.CreateSecretRequest{
        Parent: "projects/my-project",
        SecretId: "my-secret",
        Secret: &secretmanagerpb.Secret{
            Labels: map[string]string{
                "env": "prod",
            },
        },
    }

Package names and import paths come from the Go build metadata
(:class:`~reqmorph.models.GoBuildConfig`). The rendered file is passed
through :func:`~reqmorph.emitters.gofmt.format_go_source`; when formatting
fails the unformatted text is still written, so it can be inspected, and
:class:`~reqmorph.exceptions.FormattingError` names the file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from reqmorph.emitters.gofmt import format_go_source
from reqmorph.emitters.rendering import render_template, write_output
from reqmorph.engine.builder import ValueTreeBuilder
from reqmorph.engine.context import MorphContext
from reqmorph.engine.nodes import MapNode, MessageNode, PrimitiveNode, RepeatedNode, ValueNode
from reqmorph.engine.primitives import (
    dedupe,
    go_literal,
    go_quote,
    go_scalar_type,
    go_type_name,
    reduce_service_name,
    to_pascal_case,
)
from reqmorph.exceptions import FormattingError, InvalidUsageError
from reqmorph.models import FieldType, GoBuildConfig
from reqmorph.schema.graph import EnumSchema, MethodSchema

GO_FILENAME = "main.go"


class GoLiteralRenderer:
    """Renders value-tree nodes as Go expressions qualified by *package*."""

    def __init__(self, package: str):
        self.package = package

    def render(self, node: ValueNode) -> str:
        if isinstance(node, MessageNode):
            return self._render_message(node)
        if isinstance(node, RepeatedNode):
            return self._render_repeated(node)
        if isinstance(node, MapNode):
            return self._render_map(node)
        return go_literal(node, self.package)

    def _qualify(self, type_name: str) -> str:
        return f"{self.package}.{type_name}" if self.package else type_name

    def _render_message(self, node: MessageNode) -> str:
        lines = [f"&{self._qualify(node.type_name)}{{"]
        for child in node.children:
            lines.append(f"{to_pascal_case(child.name)}: {self.render(child.node)},")
        lines.append("}")
        return "\n".join(lines)

    def _render_repeated(self, node: RepeatedNode) -> str:
        elem = self._element_type(node.element_type, node.element_type_name, node.enum)
        lines = [f"[]{elem}{{"]
        for item in node.items:
            lines.append(f"{self.render(item)},")
        lines.append("}")
        return "\n".join(lines)

    def _render_map(self, node: MapNode) -> str:
        key_type = go_scalar_type(node.key_type)
        value_type = self._element_type(node.value_type, node.value_type_name, node.enum)
        lines = [f"map[{key_type}]{value_type}{{"]
        for key, value in node.entries.items():
            lines.append(f"{_map_key(key, node.key_type)}: {self.render(value)},")
        lines.append("}")
        return "\n".join(lines)

    def _element_type(self, field_type: FieldType, type_name: str, enum: EnumSchema | None) -> str:
        if field_type.is_message:
            return "*" + self._qualify(type_name)
        if field_type == FieldType.ENUM and enum is not None:
            return go_type_name(enum, self.package)
        return go_scalar_type(field_type)


def _map_key(key: str, key_type: FieldType) -> str:
    if key_type == FieldType.STRING:
        return go_quote(key)
    if key_type == FieldType.BOOL:
        return "true" if key.lower() == "true" else "false"
    return go_literal(PrimitiveNode(value=key, field_type=key_type))


def render_go_program(
    method: MethodSchema,
    request: dict[str, Any],
    build: GoBuildConfig,
    context: MorphContext,
) -> str:
    """Render the unformatted ``main.go`` for calling *method* with *request*.

    Raises:
        InvalidUsageError: If the build metadata lacks the client library
            import path.
    """
    if not build.gapic_import_path:
        raise InvalidUsageError(
            "Build metadata has no client library import path (gapic_import_path)"
        )

    tree = ValueTreeBuilder(context).build(method.input_type, request)
    renderer = GoLiteralRenderer(build.proto_package)
    package = build.gapic_package
    service = method.service.name if method.service is not None else ""

    data = {
        "imports": dedupe(build.imports()),
        "package_name": package,
        "service_name": reduce_service_name(service, package),
        "method_name": method.name,
        "request_init": renderer.render(tree),
    }
    context.logger.debug("Go template data: %s", data)
    return render_template("main.go.j2", data)


def emit_go(
    method: MethodSchema,
    request: dict[str, Any],
    build: GoBuildConfig,
    out_dir: str | Path,
    context: MorphContext,
) -> Path:
    """Render, format, and write ``main.go``.

    Returns:
        The path of the written file.

    Raises:
        FormattingError: If the source fails to format. The unformatted
            source has been written to the returned path before raising.
    """
    source = render_go_program(method, request, build, context)
    try:
        formatted = format_go_source(source, context.gofmt)
    except FormattingError as exc:
        path = write_output(out_dir, GO_FILENAME, source)
        context.logger.error("Failed to format generated Go code: %s", exc)
        raise FormattingError(
            f"Formatting {path} failed: {exc}", output_path=str(path)
        ) from exc
    path = write_output(out_dir, GO_FILENAME, formatted)
    context.logger.info("Wrote %s", path)
    return path
