"""Tests for reqmorph.schema.build_config -- Go build metadata."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from reqmorph.exceptions import InputFormatError
from reqmorph.models import GoBuildConfig
from reqmorph.schema.build_config import load_build_config, parse_bazel_build

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class TestParseBazelBuild:
    def test_fixture(self) -> None:
        config = load_build_config(str(FIXTURES_DIR / "BUILD.bazel"))
        assert config.has_gapic is True
        assert config.has_go_grpc is True
        assert config.gapic_import_path == "cloud.google.com/go/secretmanager/apiv1;secretmanager"
        assert config.proto_import_path == "cloud.google.com/go/secretmanager/apiv1/secretmanagerpb"
        assert config.grpc_service_config == "secretmanager_grpc_service_config.json"
        assert config.release_level == "ga"
        assert config.service_yaml == "secretmanager_v1.yaml"
        assert config.transport == "grpc+rest"
        assert config.metadata is True
        assert config.rest_numeric_enums is True
        assert config.diregapic is False

    def test_directory_resolves_build_file(self) -> None:
        config = load_build_config(str(FIXTURES_DIR))
        assert config.gapic_package == "secretmanager"
        assert config.proto_package == "secretmanagerpb"

    def test_go_proto_library(self) -> None:
        content = textwrap.dedent("""\
            go_proto_library(
                name = "library_go_proto",
                importpath = "cloud.google.com/go/library/apiv1/librarypb",
            )
        """)
        config = parse_bazel_build(content)
        assert config.has_go_grpc is False
        assert config.proto_import_path == "cloud.google.com/go/library/apiv1/librarypb"

    def test_grpc_and_proto_conflict(self) -> None:
        content = textwrap.dedent("""\
            go_grpc_library(
                importpath = "example.com/a",
            )
            go_proto_library(
                importpath = "example.com/b",
            )
        """)
        with pytest.raises(InputFormatError, match="only one of go_grpc_library"):
            parse_bazel_build(content)

    def test_legacy_grpc_plugin(self) -> None:
        content = textwrap.dedent("""\
            go_proto_library(
                compilers = ["@io_bazel_rules_go//proto:go_grpc"],
                importpath = "example.com/b",
            )
        """)
        with pytest.raises(InputFormatError, match="legacy gRPC plugin"):
            parse_bazel_build(content)

    def test_bad_bool(self) -> None:
        content = 'go_gapic_library(\n    importpath = "example.com/a;a",\n    metadata = maybe,\n)\n'
        with pytest.raises(InputFormatError, match="Failed to parse bool attribute 'metadata'"):
            parse_bazel_build(content, source="x/BUILD.bazel")

    def test_numeric_bools(self) -> None:
        content = 'go_gapic_library(\n    rest_numeric_enums = 1,\n    diregapic = 0,\n)\n'
        config = parse_bazel_build(content)
        assert config.rest_numeric_enums is True
        assert config.diregapic is False

    def test_empty_build(self) -> None:
        config = parse_bazel_build("")
        assert config == GoBuildConfig()


class TestLoadBuildConfig:
    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "build.json"
        path.write_text(
            json.dumps(
                {
                    "gapic_import_path": "cloud.google.com/go/library/apiv1;library",
                    "proto_import_path": "cloud.google.com/go/library/apiv1/librarypb",
                }
            ),
            encoding="utf-8",
        )
        config = load_build_config(str(path))
        assert config.gapic_package == "library"
        assert config.imports() == [
            "cloud.google.com/go/library/apiv1",
            "cloud.google.com/go/library/apiv1/librarypb",
        ]

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "build.yaml"
        path.write_text("gapic_import_path: example.com/go/thing/apiv2\n", encoding="utf-8")
        config = load_build_config(str(path))
        assert config.gapic_package == "apiv2"
        assert config.proto_package == ""
        assert config.imports() == ["example.com/go/thing/apiv2"]

    def test_missing_build_in_directory(self, tmp_path: Path) -> None:
        with pytest.raises(InputFormatError, match="File not found"):
            load_build_config(str(tmp_path))

    def test_invalid_metadata(self, tmp_path: Path) -> None:
        path = tmp_path / "build.json"
        path.write_text(json.dumps({"metadata": "sometimes"}), encoding="utf-8")
        with pytest.raises(InputFormatError, match="Invalid build metadata"):
            load_build_config(str(path))
