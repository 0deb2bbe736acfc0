"""reqmorph -- materialise sample API requests as Go code, curl, and gcloud commands.

Given an API descriptor (messages, enums, services, methods with HTTP
bindings) and a sample JSON request for one method, reqmorph produces:

* ``main.go`` -- a Go program that builds the request as a composite
  literal and calls the method through its generated client;
* ``curl.sh`` -- the equivalent HTTP call;
* ``gcloud.sh`` -- the equivalent ``gcloud`` command, driven by a
  flag-mapping file.

Typical workflow::

    reqmorph schema export api.json CreateSecret > request.schema.json
    reqmorph render go api.json CreateSecret request.json --build BUILD.bazel
    reqmorph render gcloud api.json CreateSecret request.json --mapping mapping.json

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for configuration and input documents.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
    schema: Descriptor loading, linking, and JSON Schema export.
    engine: Value-tree building and path-template matching.
    emitters: Go, curl, and gcloud output.
"""

__version__ = "0.1.0"
