"""Shared test fixtures for reqmorph.

Provides the Secret Manager descriptor used across the suite (raw, validated
and linked), hand-built schema graphs for cases the descriptor does not
cover, isolated config environments, output state management, and a CLI
runner. These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from reqmorph.engine.context import MorphContext
from reqmorph.models import ApiDescriptor, FieldBehavior, FieldType, GoBuildConfig
from reqmorph.output import OutputFormat, OutputManager, reset_output, set_output
from reqmorph.schema.graph import (
    ApiSchema,
    FieldSchema,
    MessageSchema,
    MethodSchema,
    OneofGroup,
    ServiceSchema,
)
from reqmorph.schema.resolver import link_api

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SM = ".google.cloud.secretmanager.v1"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test, the cached references go stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Descriptor fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def descriptor_path() -> Path:
    return FIXTURES_DIR / "secretmanager.json"


@pytest.fixture
def descriptor_raw(descriptor_path: Path) -> dict[str, Any]:
    """Raw Secret Manager descriptor dict."""
    with open(descriptor_path) as f:
        return json.load(f)


@pytest.fixture
def descriptor(descriptor_raw: dict[str, Any]) -> ApiDescriptor:
    return ApiDescriptor.model_validate(descriptor_raw)


@pytest.fixture
def api(descriptor: ApiDescriptor) -> ApiSchema:
    """The linked Secret Manager API."""
    return link_api(descriptor)


@pytest.fixture
def create_secret(api: ApiSchema) -> MethodSchema:
    return api.methods[f"{SM}.SecretManagerService.CreateSecret"]


@pytest.fixture
def get_secret(api: ApiSchema) -> MethodSchema:
    return api.methods[f"{SM}.SecretManagerService.GetSecret"]


@pytest.fixture
def list_secrets(api: ApiSchema) -> MethodSchema:
    return api.methods[f"{SM}.SecretManagerService.ListSecrets"]


@pytest.fixture
def access_version(api: ApiSchema) -> MethodSchema:
    return api.methods[f"{SM}.SecretManagerService.AccessSecretVersion"]


@pytest.fixture
def build_config() -> GoBuildConfig:
    return GoBuildConfig(
        gapic_import_path="cloud.google.com/go/secretmanager/apiv1;secretmanager",
        proto_import_path="cloud.google.com/go/secretmanager/apiv1/secretmanagerpb",
    )


@pytest.fixture
def context() -> MorphContext:
    """Default engine context: ignore missing fields, builtin Go formatter."""
    return MorphContext(gofmt="builtin")


# ---------------------------------------------------------------------------
# Hand-built graphs
# ---------------------------------------------------------------------------


@pytest.fixture
def tree_node() -> MessageSchema:
    """A message that refers to itself through a field and a repeated field."""
    node = MessageSchema(id=".test.TreeNode", name="TreeNode")
    node.fields = [
        FieldSchema(
            name="label",
            json_name="label",
            behavior=frozenset({FieldBehavior.REQUIRED}),
            parent=node,
        ),
        FieldSchema(
            name="parent_node",
            json_name="parentNode",
            type=FieldType.MESSAGE,
            message_type=node,
            parent=node,
        ),
        FieldSchema(
            name="children",
            json_name="children",
            type=FieldType.MESSAGE,
            repeated=True,
            message_type=node,
            parent=node,
        ),
    ]
    return node


@pytest.fixture
def library_method() -> MethodSchema:
    """A small library API exercising nesting, oneofs, maps and repeated fields."""
    child = MessageSchema(id=".library.ChildMsg", name="ChildMsg")
    child.fields = [FieldSchema(name="foo", json_name="foo", parent=child)]

    empty = MessageSchema(id=".library.EmptyMsg", name="EmptyMsg")

    labels_entry = MessageSchema(id=".library.Request.LabelsEntry", name="LabelsEntry")
    labels_entry.fields = [
        FieldSchema(name="key", json_name="key", parent=labels_entry),
        FieldSchema(name="value", json_name="value", parent=labels_entry),
    ]

    request = MessageSchema(id=".library.Request", name="Request", messages=[labels_entry])
    labels_entry.parent = request

    nested = MessageSchema(id=".library.Request.Nested", name="Nested", parent=request)
    nested.fields = [FieldSchema(name="foo", json_name="foo", parent=nested)]
    request.messages.append(nested)

    choice = OneofGroup(name="choice")
    str_val = FieldSchema(name="str_val", json_name="strVal", oneof=choice, parent=request)
    empty_msg = FieldSchema(
        name="empty_msg",
        json_name="emptyMsg",
        type=FieldType.MESSAGE,
        message_type=empty,
        oneof=choice,
        parent=request,
    )
    choice.fields = [str_val, empty_msg]
    request.oneofs = [choice]

    request.fields = [
        FieldSchema(name="foo", json_name="foo", parent=request),
        FieldSchema(name="id", json_name="id", type=FieldType.INT64, parent=request),
        FieldSchema(
            name="child",
            json_name="child",
            type=FieldType.MESSAGE,
            message_type=child,
            parent=request,
        ),
        FieldSchema(
            name="nested",
            json_name="nested",
            type=FieldType.MESSAGE,
            message_type=nested,
            parent=request,
        ),
        FieldSchema(name="items", json_name="items", repeated=True, parent=request),
        FieldSchema(
            name="labels",
            json_name="labels",
            type=FieldType.MESSAGE,
            map=True,
            message_type=labels_entry,
            parent=request,
        ),
        str_val,
        empty_msg,
    ]

    service = ServiceSchema(id=".library.LibraryService", name="LibraryService")
    return MethodSchema(id=".library.LibraryService.Get", name="Get", input_type=request, service=service)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears the REQMORPH_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("reqmorph.config._is_xdg_platform", lambda: True)

    for var in ["REQMORPH_OUT_DIR", "REQMORPH_MISSING_FIELDS", "REQMORPH_GOFMT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
