"""Tests for reqmorph.schema.jsonschema -- JSON Schema export."""

from __future__ import annotations

import json

from reqmorph.models import FieldBehavior, FieldType
from reqmorph.schema.graph import (
    ApiSchema,
    EnumSchema,
    EnumValue,
    FieldSchema,
    MessageSchema,
    MethodSchema,
)
from reqmorph.schema.jsonschema import to_json_schema

SM = ".google.cloud.secretmanager.v1"


class TestRequestSchema:
    def test_root_object(self, create_secret: MethodSchema) -> None:
        schema = to_json_schema(create_secret.input_type)
        assert schema["type"] == "object"
        assert schema["properties"]["parent"] == {"type": "string"}
        assert schema["properties"]["secretId"] == {"type": "string"}
        assert schema["properties"]["secret"] == {"$ref": f"#/definitions/{SM}.Secret"}
        assert schema["required"] == ["parent", "secretId", "secret"]

    def test_definitions_cover_reachable_messages(self, create_secret: MethodSchema) -> None:
        definitions = to_json_schema(create_secret.input_type)["definitions"]
        assert set(definitions) == {
            f"{SM}.Secret",
            f"{SM}.Replication",
            f"{SM}.Replication.Automatic",
            f"{SM}.Replication.UserManaged",
            f"{SM}.Replication.UserManaged.Replica",
        }

    def test_output_only_fields_skipped(self, create_secret: MethodSchema) -> None:
        secret = to_json_schema(create_secret.input_type)["definitions"][f"{SM}.Secret"]
        assert "name" not in secret["properties"]
        assert "required" not in secret

    def test_descriptions(self, create_secret: MethodSchema) -> None:
        secret = to_json_schema(create_secret.input_type)["definitions"][f"{SM}.Secret"]
        assert secret["description"].startswith("A Secret is a logical secret")
        assert secret["properties"]["replication"] == {
            "$ref": f"#/definitions/{SM}.Replication",
            "description": "Immutable. The replication policy of the secret data.",
        }

    def test_maps_use_additional_properties(self, create_secret: MethodSchema) -> None:
        secret = to_json_schema(create_secret.input_type)["definitions"][f"{SM}.Secret"]
        assert secret["properties"]["labels"] == {
            "type": "object",
            "additionalProperties": {"type": "string"},
            "description": "The labels assigned to this Secret.",
        }
        assert secret["properties"]["versionAliases"] == {
            "type": "object",
            "additionalProperties": {"type": "integer"},
        }

    def test_repeated_message_and_required(self, create_secret: MethodSchema) -> None:
        definitions = to_json_schema(create_secret.input_type)["definitions"]
        user_managed = definitions[f"{SM}.Replication.UserManaged"]
        assert user_managed["properties"]["replicas"] == {
            "type": "array",
            "items": {"$ref": f"#/definitions/{SM}.Replication.UserManaged.Replica"},
        }
        assert user_managed["required"] == ["replicas"]

    def test_no_references_gives_empty_definitions(self, get_secret: MethodSchema) -> None:
        schema = to_json_schema(get_secret.input_type)
        assert schema["definitions"] == {}
        assert schema["required"] == ["name"]

    def test_serialisable(self, api: ApiSchema) -> None:
        for message in api.messages.values():
            json.dumps(to_json_schema(message))


class TestCycles:
    def test_self_reference_points_at_root(self, tree_node: MessageSchema) -> None:
        schema = to_json_schema(tree_node)
        assert schema["properties"]["parentNode"] == {"$ref": "#"}
        assert schema["properties"]["children"] == {"type": "array", "items": {"$ref": "#"}}
        assert schema["required"] == ["label"]
        assert schema["definitions"] == {}

    def test_mutual_recursion(self) -> None:
        a = MessageSchema(id=".t.A", name="A")
        b = MessageSchema(id=".t.B", name="B")
        a.fields = [FieldSchema(name="b", type=FieldType.MESSAGE, message_type=b, parent=a)]
        b.fields = [FieldSchema(name="a", type=FieldType.MESSAGE, message_type=a, parent=b)]

        schema = to_json_schema(a)
        assert schema["properties"]["b"] == {"$ref": "#/definitions/.t.B"}
        assert schema["definitions"][".t.B"]["properties"]["a"] == {"$ref": "#"}

    def test_none_gives_empty_schema(self) -> None:
        assert to_json_schema(None) == {}


class TestScalarTypes:
    def test_type_mapping(self) -> None:
        color = EnumSchema(
            id=".t.Color",
            name="Color",
            values=[EnumValue("COLOR_UNSPECIFIED", 0), EnumValue("RED", 1)],
        )
        msg = MessageSchema(id=".t.Scalars", name="Scalars")
        msg.fields = [
            FieldSchema(name="ratio", type=FieldType.DOUBLE, parent=msg),
            FieldSchema(name="count", type=FieldType.UINT64, parent=msg),
            FieldSchema(name="enabled", type=FieldType.BOOL, parent=msg),
            FieldSchema(name="payload", type=FieldType.BYTES, parent=msg),
            FieldSchema(name="color", type=FieldType.ENUM, enum_type=color, parent=msg),
            FieldSchema(
                name="secret",
                behavior=frozenset({FieldBehavior.INPUT_ONLY}),
                parent=msg,
            ),
        ]
        props = to_json_schema(msg)["properties"]
        assert props["ratio"] == {"type": "number"}
        assert props["count"] == {"type": "integer"}
        assert props["enabled"] == {"type": "boolean"}
        assert props["payload"] == {"type": "string", "contentEncoding": "base64"}
        assert props["color"] == {"enum": ["COLOR_UNSPECIFIED", "RED"]}
        assert props["secret"] == {"type": "string"}
