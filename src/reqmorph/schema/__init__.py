"""Schema provider boundary -- load API descriptors and link them into a graph.

The upstream parser that understands ``.proto`` files is external; this
sub-package accepts its output (a JSON or YAML descriptor document) and
turns it into the linked, possibly cyclic message graph the engine walks.

Typical usage::

    from reqmorph.schema import load_api, link_api, find_method, to_json_schema

    api = link_api(load_api("secretmanager.json"))
    method = find_method(api, "CreateSecret")
    schema = to_json_schema(method.input_type)

Sub-modules:

* :mod:`~reqmorph.schema.loader` -- I/O layer (URL, file, stdin) for
  descriptors, request values, and gcloud mapping files.
* :mod:`~reqmorph.schema.graph` -- Dataclasses of the linked graph.
* :mod:`~reqmorph.schema.resolver` -- Two-pass ID linking.
* :mod:`~reqmorph.schema.http_rule` -- Path template parsing.
* :mod:`~reqmorph.schema.jsonschema` -- Cycle-safe JSON Schema export.
* :mod:`~reqmorph.schema.build_config` -- Go build metadata from
  ``BUILD.bazel`` or a key/value file.
"""

from reqmorph.schema.jsonschema import to_json_schema
from reqmorph.schema.loader import load_api
from reqmorph.schema.resolver import find_message, find_method, link_api

__all__ = ["load_api", "link_api", "find_method", "find_message", "to_json_schema"]
