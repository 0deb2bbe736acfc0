"""Tests for reqmorph.emitters.curl."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from reqmorph.emitters.curl import CURL_FILENAME, curl_arguments, emit_curl, render_curl
from reqmorph.engine.context import MorphContext
from reqmorph.exceptions import InvalidUsageError, MissingFieldError
from reqmorph.schema.graph import (
    FieldSchema,
    MessageSchema,
    MethodSchema,
    PathBinding,
    ServiceSchema,
)
from reqmorph.schema.http_rule import parse_path_template

HOST = "https://secretmanager.googleapis.com"


class TestCurlArguments:
    def test_get_without_body(self, get_secret: MethodSchema, context: MorphContext) -> None:
        args = curl_arguments(get_secret, {"name": "projects/my-project/secrets/my-secret"}, context)
        assert args == [
            "-X GET",
            f"'{HOST}/v1/projects/my-project/secrets/my-secret'",
        ]

    def test_body_field_and_query_parameter(
        self, create_secret: MethodSchema, context: MorphContext
    ) -> None:
        request = {
            "parent": "projects/my-project",
            "secretId": "my-secret",
            "secret": {"labels": {"env": "prod"}},
        }
        assert curl_arguments(create_secret, request, context) == [
            "-X POST",
            "-H 'Content-Type: application/json'",
            f"'{HOST}/v1/projects/my-project/secrets?secretId=my-secret'",
            """-d '{"labels":{"env":"prod"}}'""",
        ]

    def test_uses_first_binding(self, create_secret: MethodSchema, context: MorphContext) -> None:
        request = {"parent": "projects/p/locations/l", "secretId": "s"}
        args = curl_arguments(create_secret, request, context)
        assert args[-1] == f"'{HOST}/v1/projects/p/locations/l/secrets?secretId=s'"

    def test_query_parameters_in_declared_order(
        self, list_secrets: MethodSchema, context: MorphContext
    ) -> None:
        request = {"filter": "labels.env=prod", "pageSize": 10, "parent": "projects/p"}
        args = curl_arguments(list_secrets, request, context)
        assert args[-1] == f"'{HOST}/v1/projects/p/secrets?pageSize=10&filter=labels.env%3Dprod'"

    def test_custom_verb(self, access_version: MethodSchema, context: MorphContext) -> None:
        request = {"name": "projects/p/secrets/s/versions/latest"}
        args = curl_arguments(access_version, request, context)
        assert args[-1] == f"'{HOST}/v1/projects/p/secrets/s/versions/latest:access'"

    def test_path_values_are_quoted(self, get_secret: MethodSchema, context: MorphContext) -> None:
        args = curl_arguments(get_secret, {"name": "projects/p/secrets/a b"}, context)
        assert args[-1] == f"'{HOST}/v1/projects/p/secrets/a%20b'"

    def test_auth_header(self, get_secret: MethodSchema) -> None:
        context = MorphContext(
            curl_auth_header="Authorization: Bearer $(gcloud auth print-access-token)"
        )
        args = curl_arguments(get_secret, {"name": "projects/p/secrets/s"}, context)
        assert args[1] == '-H "Authorization: Bearer $(gcloud auth print-access-token)"'

    def test_star_body_sends_remaining_fields(self) -> None:
        request_type = MessageSchema(id=".t.UpdateThingRequest", name="UpdateThingRequest")
        request_type.fields = [
            FieldSchema(name="name", json_name="name", parent=request_type),
            FieldSchema(name="display_name", json_name="displayName", parent=request_type),
        ]
        method = MethodSchema(
            id=".t.Things.UpdateThing",
            name="UpdateThing",
            input_type=request_type,
            service=ServiceSchema(id=".t.Things", name="Things", default_host="things.example.com"),
            bindings=[PathBinding(verb="PATCH", template=parse_path_template("/v1/{name=things/*}"))],
        )
        args = curl_arguments(
            method, {"name": "things/t1", "displayName": "Thing", "junk": 1}, MorphContext()
        )
        assert args == [
            "-X PATCH",
            "-H 'Content-Type: application/json'",
            "'https://things.example.com/v1/things/t1'",
            """-d '{"displayName":"Thing"}'""",
        ]

    def test_single_quotes_in_body_escaped(
        self, create_secret: MethodSchema, context: MorphContext
    ) -> None:
        request = {"parent": "projects/p", "secret": {"labels": {"owner": "o'neil"}}}
        args = curl_arguments(create_secret, request, context)
        assert args[-1] == """-d '{"labels":{"owner":"o'"'"'neil"}}'"""


class TestCurlErrors:
    def test_missing_path_field(self, get_secret: MethodSchema, context: MorphContext) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            curl_arguments(get_secret, {}, context)
        assert exc_info.value.field_name == "name"
        assert exc_info.value.message_id == get_secret.input_type.id

    def test_no_bindings(self, context: MorphContext) -> None:
        method = MethodSchema(
            id=".t.S.M",
            name="M",
            input_type=MessageSchema(id=".t.Req", name="Req"),
            service=ServiceSchema(id=".t.S", name="S", default_host="s.example.com"),
        )
        with pytest.raises(InvalidUsageError, match="no HTTP bindings"):
            curl_arguments(method, {}, context)

    def test_no_default_host(self, get_secret: MethodSchema, context: MorphContext) -> None:
        get_secret.service = ServiceSchema(id=".t.S", name="S")
        with pytest.raises(InvalidUsageError, match="no service default host"):
            curl_arguments(get_secret, {"name": "projects/p/secrets/s"}, context)


class TestEmitCurl:
    def test_render(self, get_secret: MethodSchema, context: MorphContext) -> None:
        script = render_curl(get_secret, {"name": "projects/my-project/secrets/my-secret"}, context)
        assert script == (
            "#!/bin/bash\n"
            "# Auto-generated curl command\n"
            "\n"
            "curl \\\n"
            "  -X GET \\\n"
            f"  '{HOST}/v1/projects/my-project/secrets/my-secret'\n"
        )

    def test_writes_executable(
        self, get_secret: MethodSchema, context: MorphContext, tmp_path: Path
    ) -> None:
        path = emit_curl(get_secret, {"name": "projects/p/secrets/s"}, tmp_path, context)
        assert path == tmp_path / CURL_FILENAME
        assert os.access(path, os.X_OK)
        assert path.read_text(encoding="utf-8").startswith("#!/bin/bash\n")
