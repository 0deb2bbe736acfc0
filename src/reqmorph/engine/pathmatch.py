"""The Path Template Matcher.

Resource names such as ``projects/p1/locations/us-east1`` carry several
logical parameters in one string field. Given a method's HTTP bindings,
:func:`decompose_path_params` finds the binding whose variable patterns
capture the most named values from the request, and returns them keyed by
the singular form of the literal preceding each wildcard::

    {"project": "p1", "location": "us-east1"}

Matching never raises. A binding that references a missing field, or whose
pattern disagrees with the value, is skipped; if no binding matches the
result is an empty :class:`Decomposition`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from reqmorph.engine.lookup import JsonKind, lookup
from reqmorph.engine.primitives import scalar_text, singularize
from reqmorph.models import lower_camel
from reqmorph.schema.graph import PathBinding

_WILDCARDS = frozenset({"*", "**"})


@dataclass
class Decomposition:
    """Variables captured by the winning binding.

    Attributes:
        variables: Captured values in capture order.
        used_fields: Request field paths read by the winning binding, both
            the dotted variable path (``secret.name``) and its top-level
            field (``secret``); emitters must not render these fields again.
        binding: The winning binding, or ``None`` when nothing matched.
    """

    variables: dict[str, str] = field(default_factory=dict)
    used_fields: set[str] = field(default_factory=set)
    binding: Optional[PathBinding] = None


def match_path(value: str, segments: Sequence[str]) -> Optional[dict[str, str]]:
    """Match a slash-delimited *value* against a variable pattern.

    Parts and pattern tokens are scanned left to right together. A literal
    token must equal its part exactly. A wildcard captures its part under
    the singularised preceding literal (a wildcard with no preceding literal
    matches without capturing). Parts left over after the pattern is
    exhausted are ignored; running out of parts first is a mismatch.

    Returns:
        The captured variables, or ``None`` if the value does not match.

    >>> match_path("projects/p1/locations/l1", ["projects", "*", "locations", "*"])
    {'project': 'p1', 'location': 'l1'}
    >>> match_path("folders/f1", ["projects", "*"]) is None
    True
    """
    parts = value.split("/")
    captured: dict[str, str] = {}
    last_literal = ""
    index = 0

    for token in segments:
        if index >= len(parts):
            return None
        part = parts[index]
        if token in _WILDCARDS:
            if last_literal:
                captured[singularize(last_literal)] = part
        elif token == part:
            last_literal = token
        else:
            return None
        index += 1

    return captured


def decompose_path_params(
    data: dict[str, Any],
    bindings: Sequence[PathBinding],
    logger: Optional[logging.Logger] = None,
) -> Decomposition:
    """Pick the binding that captures the most variables from *data*.

    Args:
        data: The decoded request JSON.
        bindings: Candidate bindings, in declaration order. Ties go to the
            earliest binding.
        logger: Receives a debug line per rejected binding.

    Returns:
        The best :class:`Decomposition`; empty when no binding matches.
    """
    best = Decomposition()

    for position, binding in enumerate(bindings):
        candidate = _try_binding(data, binding)
        if candidate is None:
            if logger is not None:
                logger.debug("Binding %d does not match the request", position)
            continue
        # A binding that captures nothing never wins.
        if len(candidate.variables) > len(best.variables):
            best = candidate

    return best


def _try_binding(data: dict[str, Any], binding: PathBinding) -> Optional[Decomposition]:
    result = Decomposition(binding=binding)
    for variable in binding.template.variables():
        if not variable.field_path:
            continue
        # The variable's own path and its top-level field are both consumed.
        result.used_fields.update((variable.dotted_path, variable.field_path[0]))
        located = lookup(data, variable.field_path)
        if not located.exists:
            # Request JSON may use JSON names (secretId) for proto names (secret_id).
            json_path = [lower_camel(part) for part in variable.field_path]
            result.used_fields.update((".".join(json_path), json_path[0]))
            located = lookup(data, json_path)
        if located.kind in (JsonKind.MISSING, JsonKind.NULL):
            return None
        captured = match_path(scalar_text(located.value), variable.segments)
        if captured is None:
            return None
        result.variables.update(captured)
    return result
