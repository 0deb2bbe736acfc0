"""Parse ``google.api.http`` path templates into :class:`~reqmorph.schema.graph.PathTemplate`.

The compact template syntax accepted here is::

    Template = [ "/" ] Segments [ ":" Verb ]
    Segments = Segment { "/" Segment }
    Segment  = LITERAL | "*" | "**" | Variable
    Variable = "{" FieldPath [ "=" Segments ] "}"

A variable without an explicit pattern (``{book_id}``) matches exactly one
path segment, i.e. its pattern is ``["*"]``. Wildcards outside a variable
are kept as literal tokens; they never capture anything.

Example::

    >>> t = parse_path_template("v1/{parent=projects/*/locations/*}/secrets")
    >>> [s.literal for s in t.segments]
    ['v1', None, 'secrets']
    >>> t.segments[1].variable.segments
    ['projects', '*', 'locations', '*']
"""

from __future__ import annotations

from reqmorph.exceptions import InputFormatError
from reqmorph.schema.graph import PathSegment, PathTemplate, PathVariable


def parse_path_template(path: str) -> PathTemplate:
    """Parse a compact path template string.

    Args:
        path: The template, with or without a leading ``/``.

    Returns:
        The parsed :class:`~reqmorph.schema.graph.PathTemplate`.

    Raises:
        InputFormatError: If braces are unbalanced, a variable is empty, or
            the template has an empty segment.
    """
    text = path.strip()
    if text.startswith("/"):
        text = text[1:]
    if not text:
        raise InputFormatError(f"Invalid path template {path!r}: template is empty")

    tokens = _split_top_level(text, path)

    verb = None
    last = tokens[-1]
    colon = last.rfind(":")
    if colon > last.rfind("}"):
        verb = last[colon + 1 :]
        tokens[-1] = last[:colon]
        if not verb:
            raise InputFormatError(f"Invalid path template {path!r}: empty verb")

    segments: list[PathSegment] = []
    for token in tokens:
        if not token:
            raise InputFormatError(f"Invalid path template {path!r}: empty segment")
        if token.startswith("{"):
            segments.append(PathSegment(variable=_parse_variable(token, path)))
        else:
            segments.append(PathSegment(literal=token))

    return PathTemplate(segments=segments, verb=verb)


def _split_top_level(text: str, original: str) -> list[str]:
    """Split on ``/`` outside braces."""
    tokens: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char == "{":
            depth += 1
            if depth > 1:
                raise InputFormatError(
                    f"Invalid path template {original!r}: nested variables"
                )
        elif char == "}":
            depth -= 1
            if depth < 0:
                raise InputFormatError(
                    f"Invalid path template {original!r}: unbalanced '}}'"
                )
        if char == "/" and depth == 0:
            tokens.append("".join(current))
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise InputFormatError(f"Invalid path template {original!r}: unclosed '{{'")
    tokens.append("".join(current))
    return tokens


def _parse_variable(token: str, original: str) -> PathVariable:
    """Parse ``{field.path=pattern/*}`` into a :class:`PathVariable`."""
    if not token.endswith("}"):
        raise InputFormatError(
            f"Invalid path template {original!r}: text after variable {token!r}"
        )
    inner = token[1:-1].strip()
    if "=" in inner:
        field, pattern = inner.split("=", 1)
        segments = pattern.split("/")
    else:
        field, segments = inner, ["*"]
    field = field.strip()
    if not field or any(not s for s in segments):
        raise InputFormatError(
            f"Invalid path template {original!r}: malformed variable {token!r}"
        )
    return PathVariable(field_path=field.split("."), segments=segments)


def format_path_template(template: PathTemplate) -> str:
    """Render a template back to compact form (used by ``inspect bindings``)."""
    parts: list[str] = []
    for segment in template.segments:
        if segment.variable is not None:
            variable = segment.variable
            if variable.segments == ["*"]:
                parts.append("{" + variable.dotted_path + "}")
            else:
                parts.append(
                    "{" + variable.dotted_path + "=" + "/".join(variable.segments) + "}"
                )
        elif segment.literal is not None:
            parts.append(segment.literal)
    rendered = "/" + "/".join(parts)
    if template.verb:
        rendered += ":" + template.verb
    return rendered
