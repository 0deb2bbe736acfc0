"""Exception hierarchy for reqmorph.

All exceptions inherit from :class:`ReqmorphError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`reqmorph.exit_codes`.
The top-level error handler in :func:`reqmorph.app.main` catches
``ReqmorphError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ReqmorphError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- SchemaResolutionError   (exit 7)
    +-- InputFormatError        (exit 8)
    +-- MissingFieldError       (exit 9)
    +-- FormattingError         (exit 11)
    +-- ConfigError             (exit 1)

Path-template decomposition failures have no exception class: a template
that does not match is skipped.
"""

from __future__ import annotations

from typing import Optional

from reqmorph.exit_codes import (
    EXIT_FORMATTING,
    EXIT_GENERIC_FAILURE,
    EXIT_INPUT_FORMAT,
    EXIT_INVALID_USAGE,
    EXIT_MISSING_FIELD,
    EXIT_SCHEMA_RESOLUTION,
)


class ReqmorphError(Exception):
    """Base exception for all reqmorph errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`reqmorph.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ReqmorphError):
    """Raised for invalid CLI arguments or inputs missing for the chosen output type."""

    exit_code = EXIT_INVALID_USAGE


class SchemaResolutionError(ReqmorphError):
    """Raised when a method, message, enum, service, or map value-field cannot be found."""

    exit_code = EXIT_SCHEMA_RESOLUTION


class InputFormatError(ReqmorphError):
    """Raised when an input document cannot be read or parsed.

    Args:
        message: Description of the failure.
        source: The offending file path, URL, or ``"stdin"``. Prefixed to
            the message so the user knows which input to fix.
    """

    exit_code = EXIT_INPUT_FORMAT

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class MissingFieldError(ReqmorphError):
    """Raised when a field needed to materialise the request is absent.

    Args:
        message: Description of the failure.
        message_id: ID of the message that owns the missing field.
        field_name: Name of the missing field.
    """

    exit_code = EXIT_MISSING_FIELD

    def __init__(
        self,
        message: str,
        message_id: Optional[str] = None,
        field_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.message_id = message_id
        self.field_name = field_name


class FormattingError(ReqmorphError):
    """Raised when generated source fails to format.

    The unformatted text has already been written to ``output_path`` so it
    can be inspected.
    """

    exit_code = EXIT_FORMATTING

    def __init__(self, message: str, output_path: Optional[str] = None):
        super().__init__(message)
        self.output_path = output_path


class ConfigError(ReqmorphError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
