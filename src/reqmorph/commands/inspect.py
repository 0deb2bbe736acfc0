"""Inspect commands -- examine an API descriptor and its Go build metadata.

Provides the ``reqmorph inspect`` sub-command group with read-only views
of a linked descriptor (its methods, its messages, and the HTTP bindings
of one method) and of the settings read from a ``BUILD.bazel`` file.
Output follows the global format flags (Rich table, JSON
records, or tab-separated plain text).
"""

from __future__ import annotations

import typer

from reqmorph.exceptions import ReqmorphError
from reqmorph.output import error, get_output, info

inspect_app = typer.Typer(no_args_is_help=True)

_API_HELP = "API descriptor (JSON/YAML file, URL, or '-' for stdin)."


def _load(api_source: str):  # noqa: ANN202
    """Load and link the descriptor, exiting with the error's code on failure."""
    from reqmorph.schema import link_api, load_api

    try:
        return link_api(load_api(api_source))
    except ReqmorphError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@inspect_app.command("methods")
def inspect_methods(
    api_source: str = typer.Argument(help=_API_HELP),
) -> None:
    """List every method with its service, request type, and first binding.

    Example::

        reqmorph inspect methods api.json
    """
    from reqmorph.schema.http_rule import format_path_template

    api = _load(api_source)
    if not api.methods:
        info("No methods defined in this descriptor.")
        return

    headers = ["Method", "Service", "Request", "Verb", "Path"]
    rows: list[list[str]] = []
    for method in sorted(api.methods.values(), key=lambda m: m.id):
        verb, path = "-", "-"
        if method.bindings:
            verb = method.bindings[0].verb
            path = format_path_template(method.bindings[0].template)
        rows.append([
            method.id,
            method.service.name if method.service is not None else "-",
            method.input_type.id,
            verb,
            path,
        ])

    get_output().print_table(headers, rows, title=f"Methods ({len(rows)})")


@inspect_app.command("messages")
def inspect_messages(
    api_source: str = typer.Argument(help=_API_HELP),
) -> None:
    """List every message with its field count and required fields.

    Example::

        reqmorph inspect messages api.json --plain
    """
    api = _load(api_source)
    if not api.messages:
        info("No messages defined in this descriptor.")
        return

    headers = ["Message", "Fields", "Required"]
    rows: list[list[str]] = []
    for message in sorted(api.messages.values(), key=lambda m: m.id):
        required = [f.name for f in message.fields if f.is_required]
        rows.append([message.id, str(len(message.fields)), ", ".join(required) or "-"])

    get_output().print_table(headers, rows, title=f"Messages ({len(rows)})")


@inspect_app.command("bindings")
def inspect_bindings(
    api_source: str = typer.Argument(help=_API_HELP),
    method_ref: str = typer.Argument(help="Method ID or unique method name."),
) -> None:
    """Show the HTTP bindings of one method and the variables each captures.

    Example::

        reqmorph inspect bindings api.json CreateSecret
    """
    from reqmorph.schema import find_method
    from reqmorph.schema.http_rule import format_path_template

    api = _load(api_source)
    try:
        method = find_method(api, method_ref)
    except ReqmorphError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not method.bindings:
        info(f"Method {method.id} has no HTTP bindings.")
        return

    headers = ["Verb", "Path", "Variables", "Query", "Body"]
    rows: list[list[str]] = []
    for binding in method.bindings:
        variables = [v.dotted_path for v in binding.template.variables()]
        rows.append([
            binding.verb,
            format_path_template(binding.template),
            ", ".join(variables) or "-",
            ", ".join(binding.query_parameters) or "-",
            method.body or "-",
        ])

    get_output().print_table(headers, rows, title=f"{method.id} -- Bindings")


@inspect_app.command("build")
def inspect_build(
    build_source: str = typer.Argument(
        help="BUILD.bazel file, a directory holding one, or a JSON/YAML key/value file."
    ),
) -> None:
    """Show the Go build metadata read from a build file.

    Example::

        reqmorph inspect build googleapis/google/cloud/secretmanager/v1
    """
    from reqmorph.schema.build_config import load_build_config

    try:
        config = load_build_config(build_source)
    except ReqmorphError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    rows: list[list[str]] = []
    for name, value in config.model_dump().items():
        if isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = value or "-"
        rows.append([name, text])
    rows.append(["gapic_package", config.gapic_package or "-"])
    rows.append(["proto_package", config.proto_package or "-"])

    get_output().print_table(["Setting", "Value"], rows, title="Go build metadata")
