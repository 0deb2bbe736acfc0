"""The Request Materialization Engine.

Turns a decoded JSON request plus its message schema into a typed value
tree, and decomposes resource-name fields against a method's path
templates. Everything here is a pure transform over in-memory input:
settings and the logger arrive through an explicit
:class:`~reqmorph.engine.context.MorphContext`.

Typical usage::

    from reqmorph.engine import MorphContext, ValueTreeBuilder, decompose_path_params

    ctx = MorphContext()
    tree = ValueTreeBuilder(ctx).build(method.input_type, request)
    parts = decompose_path_params(request, method.bindings, ctx.logger)

Sub-modules:

* :mod:`~reqmorph.engine.context` -- Per-invocation settings and logger.
* :mod:`~reqmorph.engine.nodes` -- Value-tree node types.
* :mod:`~reqmorph.engine.builder` -- The schema-directed tree builder.
* :mod:`~reqmorph.engine.pathmatch` -- Best-binding path decomposition.
* :mod:`~reqmorph.engine.lookup` -- Tagged dotted-path JSON lookups.
* :mod:`~reqmorph.engine.primitives` -- Scalar formatting and naming.
"""

from reqmorph.engine.builder import ValueTreeBuilder
from reqmorph.engine.context import MorphContext
from reqmorph.engine.pathmatch import Decomposition, decompose_path_params, match_path

__all__ = [
    "MorphContext",
    "ValueTreeBuilder",
    "Decomposition",
    "decompose_path_params",
    "match_path",
]
