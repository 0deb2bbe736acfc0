"""The gcloud emitter.

Produces a ``gcloud`` invocation from a request and a flag-mapping file
(:class:`~reqmorph.models.GcloudMapping`). Each mapping entry names a
request field and either a positional slot or a ``--flag``.

Resource-name fields such as ``parent`` are decomposed first with the
method's HTTP bindings; the decomposed variables (``project``,
``location``) become flags of their own and the fields they came from are
not rendered again.

Values are turned into argument text as follows:

* arrays join their items with ``,``, taking the single value of
  one-key objects (``[{"location": "a"}, {"location": "b"}]`` -> ``a,b``);
* entries with ``choices`` collapse to the first matching choice, comparing
  object keys or the scalar value after :func:`normalize_choice`;
* objects and arrays left unresolved are passed as compact JSON.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any, Optional

from reqmorph.emitters.rendering import render_template, write_output
from reqmorph.engine.context import MorphContext
from reqmorph.engine.lookup import JsonKind, JsonValue, lookup
from reqmorph.engine.pathmatch import decompose_path_params
from reqmorph.engine.primitives import (
    compact_json,
    normalize_choice,
    scalar_text,
    shell_single_quote,
)
from reqmorph.models import FlagMapping, GcloudMapping
from reqmorph.schema.graph import MethodSchema

GCLOUD_FILENAME = "gcloud.sh"


def gcloud_arguments(
    mapping: GcloudMapping,
    request: dict[str, Any],
    method: Optional[MethodSchema],
    context: MorphContext,
) -> list[str]:
    """Build the positional arguments and flags, in output order.

    Positionals come first, ordered by slot. Flags follow, sorted by name.
    Entries whose value is empty or ``null`` are omitted.
    """
    log = context.logger
    used_fields: set[str] = set()
    variables: dict[str, str] = {}
    if method is not None and method.bindings:
        decomposition = decompose_path_params(request, method.bindings, log)
        used_fields = decomposition.used_fields
        variables = decomposition.variables
        if decomposition.binding is not None:
            log.debug("Decomposed path parameters: %s", variables)

    positionals: dict[int, str] = {}
    flags: dict[str, str] = {}

    for prop in mapping.properties:
        if prop.field_path in used_fields:
            log.debug("Skipping %s: consumed by path decomposition", prop.field_path)
            continue

        value = flag_value(prop, lookup(request, prop.field_path))
        if value in ("", "null"):
            continue

        if prop.is_positional:
            positionals[prop.pos] = value
        elif prop.flag:
            flags.setdefault(prop.flag, value)

    for key, value in variables.items():
        if value:
            flags.setdefault(f"--{key}", value)

    arguments = [shlex.quote(positionals[pos]) for pos in sorted(positionals)]
    arguments.extend(
        f"{name} {shell_single_quote(flags[name])}" for name in sorted(flags)
    )
    return arguments


def flag_value(prop: FlagMapping, located: JsonValue) -> str:
    """Command-line text for one mapped field; empty when the field is absent.

    With ``choices=["automatic", "user-managed"]``, ``{"userManaged": {...}}``
    yields ``user-managed``.
    """
    if located.kind in (JsonKind.MISSING, JsonKind.NULL):
        return ""

    raw = scalar_text(located.value)
    value = raw

    if located.kind == JsonKind.ARRAY:
        items = [_item_text(item) for item in located.value]
        if items:
            value = ",".join(items)

    if prop.choices:
        if located.kind == JsonKind.OBJECT:
            value = _match_object_choice(located.value, prop.choices) or value
        else:
            value = _match_choice(raw, prop.choices) or value

    if located.kind in (JsonKind.OBJECT, JsonKind.ARRAY) and value == raw:
        value = compact_json(located.value)
    return value


def render_gcloud(
    mapping: GcloudMapping,
    request: dict[str, Any],
    method: Optional[MethodSchema],
    context: MorphContext,
) -> str:
    """Render the ``gcloud.sh`` script text."""
    arguments = gcloud_arguments(mapping, request, method, context)
    return render_template(
        "gcloud.sh.j2", {"command": mapping.command, "arguments": arguments}
    )


def emit_gcloud(
    mapping: GcloudMapping,
    request: dict[str, Any],
    method: Optional[MethodSchema],
    out_dir: str | Path,
    context: MorphContext,
) -> Path:
    """Render and write ``gcloud.sh`` (mode 0755)."""
    context.logger.info("Loaded gcloud mapping for '%s'", mapping.command)
    script = render_gcloud(mapping, request, method, context)
    path = write_output(out_dir, GCLOUD_FILENAME, script, executable=True)
    context.logger.info("Wrote %s", path)
    return path


def _item_text(item: Any) -> str:
    if isinstance(item, dict) and len(item) == 1:
        return scalar_text(next(iter(item.values())))
    return scalar_text(item)


def _match_choice(text: str, choices: list[str]) -> Optional[str]:
    wanted = normalize_choice(text)
    for choice in choices:
        if normalize_choice(choice) == wanted:
            return choice
    return None


def _match_object_choice(obj: dict[str, Any], choices: list[str]) -> Optional[str]:
    for key in obj:
        choice = _match_choice(key, choices)
        if choice is not None:
            return choice
    return None
