"""Load descriptor, request, and mapping documents from a URL, local file, or stdin.

This module handles all I/O for the engine's inputs and converts them into
Python objects. Every input is fully materialised in memory before the
engine starts; nothing here is consulted during traversal.

The public functions are:

* :func:`load_document` -- Load and parse a JSON or YAML document from any
  supported source, with automatic format detection.
* :func:`load_api` -- Load and validate an
  :class:`~reqmorph.models.ApiDescriptor`.
* :func:`load_request` -- Load a JSON request value (must be an object).
* :func:`load_mapping` -- Load a gcloud flag-mapping file into a
  :class:`~reqmorph.models.GcloudMapping`.

Every failure raises :class:`~reqmorph.exceptions.InputFormatError` naming
the offending source.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from reqmorph.exceptions import InputFormatError
from reqmorph.models import ApiDescriptor, GcloudMapping


def load_document(source: str) -> dict[str, Any]:
    """Load a JSON/YAML object from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        InputFormatError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def load_api(source: str) -> ApiDescriptor:
    """Load and validate an API descriptor document.

    Args:
        source: A URL, file path, or '-' for stdin.

    Returns:
        The validated :class:`~reqmorph.models.ApiDescriptor`.

    Raises:
        InputFormatError: If the document cannot be parsed or does not
            match the descriptor schema.
    """
    raw = load_document(source)
    try:
        return ApiDescriptor.model_validate(raw)
    except ValidationError as exc:
        raise InputFormatError(f"Invalid API descriptor: {exc}", source) from exc


def load_request(path: str) -> dict[str, Any]:
    """Load a request value from a JSON file (or stdin when *path* is '-').

    Requests are strictly JSON: YAML would silently coerce values such as
    ``no`` or ``1.0`` and change the request being rendered.

    Raises:
        InputFormatError: If the file is missing, is not valid JSON, or does
            not hold a JSON object.
    """
    if path == "-":
        content = sys.stdin.read()
        source = "stdin"
    else:
        content = _read_file(path)
        source = path
    return parse_request(content, source)


def parse_request(content: str | bytes, source: str = "request") -> dict[str, Any]:
    """Parse an in-memory JSON request value.

    Args:
        content: The raw JSON text or bytes.
        source: Label used in error messages.

    Returns:
        The decoded JSON object.

    Raises:
        InputFormatError: If *content* is not a JSON object.
    """
    try:
        result = json.loads(content)
    except json.JSONDecodeError as exc:
        raise InputFormatError(f"Invalid JSON request: {exc}", source) from exc
    if not isinstance(result, dict):
        raise InputFormatError(
            f"Request must be a JSON object (got {type(result).__name__})", source
        )
    return result


def load_mapping(path: str) -> GcloudMapping:
    """Load a gcloud flag-mapping file.

    Raises:
        InputFormatError: If the file cannot be read, is not JSON, or does
            not match :class:`~reqmorph.models.GcloudMapping`.
    """
    content = _read_file(path)
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as exc:
        raise InputFormatError(f"Invalid JSON mapping file: {exc}", path) from exc
    try:
        return GcloudMapping.model_validate(raw)
    except ValidationError as exc:
        raise InputFormatError(f"Invalid mapping file: {exc}", path) from exc


def _read_file(path: str) -> str:
    file_path = Path(path)
    if not file_path.is_file():
        raise InputFormatError("File not found", path)
    try:
        return file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputFormatError(f"Failed to read file: {exc}", path) from exc


def _load_from_stdin() -> dict[str, Any]:
    """Read a document from stdin.

    Raises:
        InputFormatError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise InputFormatError(f"Failed to read: {exc}", "stdin") from exc

    if not content.strip():
        raise InputFormatError("No input received", "stdin")

    return _parse_content(content, source="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document from a URL. Supports JSON and YAML responses.

    Raises:
        InputFormatError: If the URL cannot be fetched or content cannot be parsed.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise InputFormatError(f"HTTP {exc.response.status_code}", url) from exc
    except httpx.RequestError as exc:
        raise InputFormatError(f"Failed to fetch: {exc}", url) from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, source=url, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from a local file, using the extension as a format hint."""
    content = _read_file(path)
    if not content.strip():
        raise InputFormatError("File is empty", path)

    suffix = Path(path).suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, source=path, hint=hint)


def _parse_content(content: str, source: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content.
        source: Label used in error messages.
        hint: Optional format hint ('json' or 'yaml').

    Raises:
        InputFormatError: If the content cannot be parsed as either format,
            or does not hold an object.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise InputFormatError(f"Invalid JSON: {exc}", source) from exc
        else:
            return _require_object(result, source)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise InputFormatError(msg, source) from exc
    return _require_object(result, source)


def _require_object(result: Any, source: str) -> dict[str, Any]:
    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise InputFormatError(f"Document must be a JSON/YAML object (got {got})", source)
    return result
