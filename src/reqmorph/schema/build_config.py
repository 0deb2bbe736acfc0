"""Read Go build metadata for the Go-literal emitter.

The Go emitter needs two import paths: the client library package and the
generated proto package. They come either from the Go rules of a googleapis
``BUILD.bazel`` file, or from a small JSON/YAML key/value document::

    {"gapic_import_path": "cloud.google.com/go/secretmanager/apiv1;secretmanager",
     "proto_import_path": "cloud.google.com/go/secretmanager/apiv1/secretmanagerpb"}

``BUILD.bazel`` files are scanned with regular expressions rather than a
Starlark parser: only the first ``go_gapic_library(...)``,
``go_grpc_library(...)``, and ``go_proto_library(...)`` blocks are read.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import ValidationError

from reqmorph.exceptions import InputFormatError
from reqmorph.models import GoBuildConfig
from reqmorph.schema.loader import load_document

logger = logging.getLogger(__name__)

_GAPIC_BLOCK_RE = re.compile(r"go_gapic_library\(.*?\)", re.DOTALL)
_GRPC_BLOCK_RE = re.compile(r"go_grpc_library\(.*?\)", re.DOTALL)
_PROTO_BLOCK_RE = re.compile(r"go_proto_library\(.*?\)", re.DOTALL)

_LEGACY_GRPC_PLUGIN = "@io_bazel_rules_go//proto:go_grpc"

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def load_build_config(path: str) -> GoBuildConfig:
    """Load build metadata from a ``BUILD.bazel`` file, a directory holding one,
    or a JSON/YAML key/value file.

    Raises:
        InputFormatError: If the file is missing, malformed, or the Bazel
            rules are misconfigured.
    """
    file_path = Path(path)
    if file_path.is_dir():
        file_path = file_path / "BUILD.bazel"
    if file_path.name in ("BUILD.bazel", "BUILD"):
        if not file_path.is_file():
            raise InputFormatError("File not found", str(file_path))
        try:
            content = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise InputFormatError(f"Failed to read file: {exc}", str(file_path)) from exc
        return parse_bazel_build(content, source=str(file_path))

    raw = load_document(path)
    try:
        return GoBuildConfig.model_validate(raw)
    except ValidationError as exc:
        raise InputFormatError(f"Invalid build metadata: {exc}", path) from exc


def parse_bazel_build(content: str, source: str = "BUILD.bazel") -> GoBuildConfig:
    """Extract Go rule attributes from ``BUILD.bazel`` text.

    Args:
        content: The file content.
        source: Path used in error messages.

    Returns:
        The populated :class:`~reqmorph.models.GoBuildConfig`.

    Raises:
        InputFormatError: If both ``go_grpc_library`` and
            ``go_proto_library`` are present, if ``go_proto_library`` uses
            the legacy gRPC plugin, or if a boolean attribute is not a
            boolean literal.
    """
    config = GoBuildConfig()

    gapic = _GAPIC_BLOCK_RE.search(content)
    if gapic:
        block = gapic.group(0)
        config.has_gapic = True
        config.grpc_service_config = _find_string(block, "grpc_service_config")
        config.gapic_import_path = _find_string(block, "importpath")
        config.release_level = _find_string(block, "release_level")
        # A target label (":foo.yaml") stands for the file of the same name.
        config.service_yaml = _find_string(block, "service_yaml").removeprefix(":")
        config.transport = _find_string(block, "transport")
        config.metadata = _find_bool(block, "metadata", source)
        config.rest_numeric_enums = _find_bool(block, "rest_numeric_enums", source)
        config.diregapic = _find_bool(block, "diregapic", source)

    grpc = _GRPC_BLOCK_RE.search(content)
    if grpc:
        config.has_go_grpc = True
        config.proto_import_path = _find_string(grpc.group(0), "importpath")

    proto = _PROTO_BLOCK_RE.search(content)
    if proto:
        block = proto.group(0)
        if config.has_go_grpc:
            raise InputFormatError(
                "Misconfigured BUILD.bazel: only one of go_grpc_library and "
                "go_proto_library should be present",
                source,
            )
        if _LEGACY_GRPC_PLUGIN in block:
            raise InputFormatError(
                f"BUILD.bazel uses the legacy gRPC plugin ({_LEGACY_GRPC_PLUGIN}), "
                "which is no longer supported",
                source,
            )
        config.proto_import_path = _find_string(block, "importpath")

    logger.debug("Loaded build metadata from %s: %s", source, config)
    return config


def _find_string(block: str, name: str) -> str:
    match = re.search(rf'{name}\s*=\s*"([^"]+)"', block)
    if match:
        return match.group(1)
    logger.debug("String attribute %r not found in BUILD.bazel block", name)
    return ""


def _find_bool(block: str, name: str, source: str) -> bool:
    match = re.search(rf"{name}\s*=\s*(\w+)", block)
    if not match:
        return False
    word = match.group(1)
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise InputFormatError(
        f"Failed to parse bool attribute {name!r} in BUILD.bazel, got {word!r}", source
    )
