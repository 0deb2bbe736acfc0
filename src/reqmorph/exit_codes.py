"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~reqmorph.exceptions.ReqmorphError` subclass.
Shell wrappers and CI jobs can inspect the exit code to tell a bad schema
from a bad request file without parsing stderr.

Example::

    $ reqmorph render gcloud api.json CreateSecret req.json -m mapping.json
    $ echo $?
    8   # EXIT_INPUT_FORMAT -- the request JSON could not be parsed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required inputs."""

EXIT_SCHEMA_RESOLUTION = 7
"""A method, message, enum, or map value-field referenced by the schema could not be found."""

EXIT_INPUT_FORMAT = 8
"""A descriptor, request, mapping, or build-metadata file could not be parsed."""

EXIT_MISSING_FIELD = 9
"""A field required to materialise the request was absent."""

EXIT_FORMATTING = 11
"""Generated source failed to format; the unformatted output was still written."""
