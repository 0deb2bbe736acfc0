"""Render commands -- turn a sample request into code or a command line.

Provides the ``reqmorph render`` sub-command group. Every command takes
the API descriptor, a method reference (ID or unique name) and a JSON
request file, and writes its artefact into the output directory:

* ``render go`` -- ``main.go`` (needs Go build metadata, ``--build``).
* ``render curl`` -- ``curl.sh``.
* ``render gcloud`` -- ``gcloud.sh`` (needs a flag-mapping file,
  ``--mapping``).
* ``render decompose`` -- prints the path variables that the best HTTP
  binding captures from the request; writes nothing.

``--stdout`` prints the artefact instead of writing it.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from reqmorph.exceptions import ReqmorphError
from reqmorph.output import error, get_output, print_json, success

render_app = typer.Typer(no_args_is_help=True)

_API_HELP = "API descriptor (JSON/YAML file, URL, or '-' for stdin)."
_METHOD_HELP = "Method ID or unique method name."
_REQUEST_HELP = "Request JSON file ('-' for stdin)."


def _prepare(
    ctx: typer.Context,
    api_source: str,
    method_ref: str,
    request_path: str,
    out_dir: Optional[str] = None,
    missing_fields: Optional[str] = None,
    gofmt: Optional[str] = None,
):  # noqa: ANN202
    """Resolve config and load the method and request shared by every render command.

    Returns:
        A ``(config, context, method, request)`` tuple.
    """
    from reqmorph.config import make_context, resolve_config
    from reqmorph.schema import find_method, link_api, load_api
    from reqmorph.schema.loader import load_request

    obj = ctx.obj or {}
    config = resolve_config(
        cli_format=obj.get("format"),
        cli_out_dir=out_dir,
        cli_missing_fields=missing_fields,
        cli_gofmt=gofmt,
    )
    context = make_context(config)
    api = link_api(load_api(api_source))
    method = find_method(api, method_ref)
    request = load_request(request_path)
    get_output().debug(f"Rendering {method.id} with {len(request)} top-level request keys")
    return config, context, method, request


def _fail(exc: ReqmorphError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


@render_app.command("go")
def render_go(
    ctx: typer.Context,
    api_source: str = typer.Argument(help=_API_HELP),
    method_ref: str = typer.Argument(help=_METHOD_HELP),
    request_path: str = typer.Argument(help=_REQUEST_HELP),
    build: str = typer.Option(
        ..., "--build", "-b", help="BUILD.bazel file or directory, or a JSON/YAML build file."
    ),
    out_dir: Optional[str] = typer.Option(None, "--out-dir", "-o", help="Output directory."),
    missing_fields: Optional[str] = typer.Option(
        None, "--missing-fields", help="Absent REQUIRED fields: ignore or error."
    ),
    gofmt: Optional[str] = typer.Option(
        None, "--gofmt", help="auto, builtin, or the path of a gofmt binary."
    ),
    stdout: bool = typer.Option(False, "--stdout", help="Print instead of writing main.go."),
) -> None:
    """Render a Go program that sends the request.

    Example::

        reqmorph render go api.json CreateSecret request.json --build BUILD.bazel
    """
    from reqmorph.emitters.gofmt import format_go_source
    from reqmorph.emitters.golang import emit_go, render_go_program
    from reqmorph.schema.build_config import load_build_config

    try:
        config, context, method, request = _prepare(
            ctx, api_source, method_ref, request_path, out_dir, missing_fields, gofmt
        )
        build_config = load_build_config(build)
        if stdout:
            source = render_go_program(method, request, build_config, context)
            get_output().print_source(format_go_source(source, context.gofmt), "go")
            return
        path = emit_go(method, request, build_config, config.render.out_dir, context)
    except ReqmorphError as exc:
        raise _fail(exc) from None
    success(f"Wrote {path}")


@render_app.command("curl")
def render_curl_command(
    ctx: typer.Context,
    api_source: str = typer.Argument(help=_API_HELP),
    method_ref: str = typer.Argument(help=_METHOD_HELP),
    request_path: str = typer.Argument(help=_REQUEST_HELP),
    out_dir: Optional[str] = typer.Option(None, "--out-dir", "-o", help="Output directory."),
    missing_fields: Optional[str] = typer.Option(
        None, "--missing-fields", help="Absent REQUIRED fields: ignore or error."
    ),
    stdout: bool = typer.Option(False, "--stdout", help="Print instead of writing curl.sh."),
) -> None:
    """Render a curl command for the method's first HTTP binding.

    Example::

        reqmorph render curl api.json GetSecret request.json --stdout
    """
    from reqmorph.emitters.curl import emit_curl, render_curl

    try:
        config, context, method, request = _prepare(
            ctx, api_source, method_ref, request_path, out_dir, missing_fields
        )
        if stdout:
            get_output().print_source(render_curl(method, request, context), "bash")
            return
        path = emit_curl(method, request, config.render.out_dir, context)
    except ReqmorphError as exc:
        raise _fail(exc) from None
    success(f"Wrote {path}")


@render_app.command("gcloud")
def render_gcloud_command(
    ctx: typer.Context,
    api_source: str = typer.Argument(help=_API_HELP),
    method_ref: str = typer.Argument(help=_METHOD_HELP),
    request_path: str = typer.Argument(help=_REQUEST_HELP),
    mapping_path: str = typer.Option(
        ..., "--mapping", "-m", help="gcloud flag-mapping JSON file."
    ),
    out_dir: Optional[str] = typer.Option(None, "--out-dir", "-o", help="Output directory."),
    stdout: bool = typer.Option(False, "--stdout", help="Print instead of writing gcloud.sh."),
) -> None:
    """Render a gcloud command from a flag-mapping file.

    Example::

        reqmorph render gcloud api.json CreateSecret request.json -m mapping.json
    """
    from reqmorph.emitters.gcloud import emit_gcloud, render_gcloud
    from reqmorph.schema.loader import load_mapping

    try:
        config, context, method, request = _prepare(
            ctx, api_source, method_ref, request_path, out_dir
        )
        mapping = load_mapping(mapping_path)
        if mapping.message_id and mapping.message_id != method.input_type.id:
            get_output().warning(
                f"Mapping is for {mapping.message_id}, but {method.id} takes "
                f"{method.input_type.id}"
            )
        if stdout:
            get_output().print_source(render_gcloud(mapping, request, method, context), "bash")
            return
        path = emit_gcloud(mapping, request, method, config.render.out_dir, context)
    except ReqmorphError as exc:
        raise _fail(exc) from None
    success(f"Wrote {path}")


@render_app.command("decompose")
def render_decompose(
    ctx: typer.Context,
    api_source: str = typer.Argument(help=_API_HELP),
    method_ref: str = typer.Argument(help=_METHOD_HELP),
    request_path: str = typer.Argument(help=_REQUEST_HELP),
) -> None:
    """Show the path variables the best HTTP binding captures from the request.

    Prints a JSON object with the winning binding (or ``null``), the
    captured variables, and the request fields they were read from.

    Example::

        reqmorph render decompose api.json CreateSecret request.json
    """
    from reqmorph.engine import decompose_path_params
    from reqmorph.schema.http_rule import format_path_template

    try:
        _, context, method, request = _prepare(ctx, api_source, method_ref, request_path)
    except ReqmorphError as exc:
        raise _fail(exc) from None

    result = decompose_path_params(request, method.bindings, context.logger)
    binding: Optional[dict[str, Any]] = None
    if result.binding is not None:
        binding = {
            "verb": result.binding.verb,
            "path": format_path_template(result.binding.template),
        }
    print_json(
        {
            "binding": binding,
            "variables": result.variables,
            "used_fields": sorted(result.used_fields),
        }
    )
