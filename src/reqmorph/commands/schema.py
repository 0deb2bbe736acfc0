"""Schema commands -- export request messages as JSON Schema.

The exported document is what the external flag mapper reads to propose
gcloud flag mappings, so it describes the fields a user can set: output-only
fields are left out, and nested or recursive messages appear under
``definitions`` and are referenced with ``$ref``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from reqmorph.exceptions import ReqmorphError
from reqmorph.output import error, print_json, success

schema_app = typer.Typer(no_args_is_help=True)


@schema_app.command("export")
def schema_export(
    api_source: str = typer.Argument(
        help="API descriptor (JSON/YAML file, URL, or '-' for stdin)."
    ),
    ref: str = typer.Argument(help="Method ID or name (or a message with --message)."),
    message: bool = typer.Option(
        False, "--message", help="Treat REF as a message instead of a method."
    ),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the schema to this file."
    ),
) -> None:
    """Export the JSON Schema of a method's request message.

    Example::

        reqmorph schema export api.json CreateSecret
        reqmorph schema export api.json google.cloud.secretmanager.v1.Secret --message
    """
    from reqmorph.schema import find_message, find_method, link_api, load_api, to_json_schema

    try:
        api = link_api(load_api(api_source))
        target = find_message(api, ref) if message else find_method(api, ref).input_type
    except ReqmorphError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    document = to_json_schema(target)
    if output_file is None:
        print_json(document)
        return

    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    success(f"Wrote {path}")
