"""Tests for reqmorph.engine.primitives and reqmorph.engine.lookup."""

from __future__ import annotations

import pytest

from reqmorph.engine.lookup import JsonKind, classify, lookup
from reqmorph.engine.nodes import PrimitiveNode
from reqmorph.engine.primitives import (
    dedupe,
    go_literal,
    go_scalar_type,
    go_type_name,
    normalize_choice,
    qualified_go_name,
    reduce_service_name,
    scalar_text,
    shell_single_quote,
    singularize,
    to_pascal_case,
)
from reqmorph.models import FieldType
from reqmorph.schema.graph import ApiSchema, EnumSchema, EnumValue

SM = ".google.cloud.secretmanager.v1"


class TestGoLiteral:
    @pytest.mark.parametrize(
        "value, kind, expected",
        [
            ("hello", FieldType.STRING, '"hello"'),
            ('say "hi"\n', FieldType.STRING, '"say \\"hi\\"\\n"'),
            (True, FieldType.BOOL, "true"),
            (False, FieldType.BOOL, "false"),
            (-5, FieldType.INT64, "-5"),
            (42, FieldType.UINT32, "42"),
            (3.0, FieldType.DOUBLE, "3"),
            (1.5, FieldType.FLOAT, "1.5"),
            ("aGVsbG8=", FieldType.BYTES, '[]byte("hello")'),
            ("AAE=", FieldType.BYTES, '[]byte("\\x00\\x01")'),
        ],
    )
    def test_scalars(self, value: object, kind: FieldType, expected: str) -> None:
        assert go_literal(PrimitiveNode(value=value, field_type=kind)) == expected

    def test_nested_enum_name(self, api: ApiSchema) -> None:
        state = api.enums[f"{SM}.SecretVersion.State"]
        node = PrimitiveNode(value="ENABLED", field_type=FieldType.ENUM, enum=state)
        assert go_literal(node, "secretmanagerpb") == "secretmanagerpb.SecretVersion_ENABLED"

    def test_nested_enum_number(self, api: ApiSchema) -> None:
        state = api.enums[f"{SM}.SecretVersion.State"]
        node = PrimitiveNode(value=2, field_type=FieldType.ENUM, enum=state)
        assert go_literal(node, "secretmanagerpb") == "secretmanagerpb.SecretVersion_State(2)"

    def test_top_level_enum(self) -> None:
        color = EnumSchema(id=".t.Color", name="Color", values=[EnumValue("RED", 1)])
        node = PrimitiveNode(value="RED", field_type=FieldType.ENUM, enum=color)
        assert go_literal(node, "pb") == "pb.Color_RED"
        assert go_literal(node) == "Color_RED"

    def test_enum_without_schema(self) -> None:
        assert go_literal(PrimitiveNode(value="RED", field_type=FieldType.ENUM)) == '"RED"'
        assert go_literal(PrimitiveNode(value=3, field_type=FieldType.ENUM)) == "3"


class TestGoNames:
    def test_qualified_name(self, api: ApiSchema) -> None:
        replica = api.messages[f"{SM}.Replication.UserManaged.Replica"]
        assert qualified_go_name(replica) == "Replication_UserManaged_Replica"
        assert go_type_name(replica, "secretmanagerpb") == (
            "secretmanagerpb.Replication_UserManaged_Replica"
        )
        assert go_type_name(replica, "") == "Replication_UserManaged_Replica"

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("secret_id", "SecretId"),
            ("version_aliases", "VersionAliases"),
            ("name", "Name"),
            ("ipv4_address", "Ipv4Address"),
        ],
    )
    def test_pascal_case(self, name: str, expected: str) -> None:
        assert to_pascal_case(name) == expected

    @pytest.mark.parametrize(
        "service, package, expected",
        [
            ("SecretManagerService", "secretmanager", ""),
            ("SecretManagerServiceV1", "secretmanager", ""),
            ("LibraryService", "library", ""),
            ("IAMPolicyService", "iam", "IamPolicy"),
            ("DatabaseAdmin", "spanner", "DatabaseAdmin"),
            ("InstanceAdminV", "spanner", "InstanceAdminV"),
        ],
    )
    def test_reduce_service_name(self, service: str, package: str, expected: str) -> None:
        assert reduce_service_name(service, package) == expected

    def test_scalar_types(self) -> None:
        assert go_scalar_type(FieldType.SINT64) == "int64"
        assert go_scalar_type(FieldType.FIXED32) == "uint32"
        assert go_scalar_type(FieldType.BYTES) == "[]byte"
        assert go_scalar_type(FieldType.MESSAGE) == "string"


class TestShellText:
    def test_single_quote(self) -> None:
        assert shell_single_quote("us-east1") == "'us-east1'"
        assert shell_single_quote("it's") == "'it'\"'\"'s'"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, ""),
            ("text", "text"),
            (True, "true"),
            (10, "10"),
            (1.5, "1.5"),
            (1.0, "1"),
            (-3.0, "-3"),
            (1e20, "100000000000000000000"),
            ({"a": 1, "b": [1, 2]}, '{"a":1,"b":[1,2]}'),
        ],
    )
    def test_scalar_text(self, value: object, expected: str) -> None:
        assert scalar_text(value) == expected

    def test_singularize(self) -> None:
        assert singularize("projects") == "project"
        assert singularize("locations") == "location"
        assert singularize("data") == "data"

    def test_normalize_choice(self) -> None:
        assert normalize_choice("user-managed") == normalize_choice("userManaged")
        assert normalize_choice("USER_MANAGED") == "usermanaged"

    def test_dedupe(self) -> None:
        assert dedupe(["a", "", "b", "a", "c", "b"]) == ["a", "b", "c"]


class TestLookup:
    def test_dotted_path(self) -> None:
        data = {"secret": {"labels": {"env": "prod"}}}
        located = lookup(data, "secret.labels")
        assert located.kind == JsonKind.OBJECT
        assert located.value == {"env": "prod"}
        assert lookup(data, "secret.labels.env").value == "prod"

    def test_array_index(self) -> None:
        data = {"replicas": [{"location": "a"}, {"location": "b"}]}
        assert lookup(data, "replicas.1.location").value == "b"
        assert not lookup(data, "replicas.2.location").exists

    def test_sequence_path(self) -> None:
        assert lookup({"a": {"b": 1}}, ["a", "b"]).kind == JsonKind.SCALAR

    def test_missing_and_null(self) -> None:
        assert lookup({"a": 1}, "a.b").kind == JsonKind.MISSING
        assert lookup({"a": None}, "a").kind == JsonKind.NULL
        assert lookup({"a": None}, "a").exists

    def test_classify(self) -> None:
        assert classify([1]).kind == JsonKind.ARRAY
        assert classify(False).kind == JsonKind.SCALAR
