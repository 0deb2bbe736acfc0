"""Canonical Pydantic models shared across all reqmorph modules.

This is the single source of truth for serialisable data shapes in the
project. The models fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`RenderConfig`, and :class:`GlobalConfig`.

**Descriptor models** -- the API descriptor document handed over by the
upstream schema provider, before cross references are linked:
    :class:`FieldType`, :class:`FieldBehavior`, :class:`FieldDescriptor`,
    :class:`MessageDescriptor`, :class:`EnumDescriptor`,
    :class:`ServiceDescriptor`, :class:`PathBindingDescriptor`,
    :class:`MethodDescriptor`, and :class:`ApiDescriptor`.

**Emitter inputs** -- external artefacts consumed by the emitters:
    :class:`FlagMapping`, :class:`GcloudMapping`, and :class:`GoBuildConfig`.

The linked, possibly cyclic, in-memory schema graph is *not* modelled here:
see :mod:`reqmorph.schema.graph`. Pydantic models serialise by walking
their fields, which a self-referencing message graph would never finish.
"""

from __future__ import annotations

import enum
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Config ---


class MissingFieldPolicy(str, enum.Enum):
    """What the value-tree builder does with a REQUIRED field absent from the request.

    ``IGNORE`` skips it like any other absent field (best effort);
    ``ERROR`` raises :class:`~reqmorph.exceptions.MissingFieldError`.
    """

    IGNORE = "ignore"
    ERROR = "error"


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class RenderConfig(BaseModel):
    """Defaults applied to every ``reqmorph render`` invocation."""

    out_dir: str = Field(
        default="out", description="Directory that receives generated files"
    )
    missing_fields: MissingFieldPolicy = Field(
        default=MissingFieldPolicy.IGNORE,
        description="Policy for REQUIRED fields absent from the request: ignore, error",
    )
    gofmt: str = Field(
        default="auto",
        description="Go formatter: auto (gofmt on PATH, else builtin), builtin, "
        "or a path to a gofmt binary",
    )
    curl_auth_header: str = Field(
        default="Authorization: Bearer $(gcloud auth print-access-token)",
        description="Header line added to generated curl commands (empty to omit)",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/reqmorph/config.json``.

    Loaded and saved by :func:`~reqmorph.config.load_global_config` and
    :func:`~reqmorph.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~reqmorph.config.resolve_config`
    for the full precedence chain.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)


# --- Descriptor document ---


class FieldType(str, enum.Enum):
    """Protobuf scalar and composite field types recognised by the engine."""

    STRING = "string"
    BYTES = "bytes"
    BOOL = "bool"
    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    SINT32 = "sint32"
    SINT64 = "sint64"
    FIXED32 = "fixed32"
    FIXED64 = "fixed64"
    SFIXED32 = "sfixed32"
    SFIXED64 = "sfixed64"
    FLOAT = "float"
    DOUBLE = "double"
    ENUM = "enum"
    MESSAGE = "message"
    GROUP = "group"

    @property
    def is_message(self) -> bool:
        """``True`` for types whose values are nested messages."""
        return self in (FieldType.MESSAGE, FieldType.GROUP)


class FieldBehavior(str, enum.Enum):
    """``google.api.field_behavior`` annotations relevant to request building."""

    REQUIRED = "REQUIRED"
    OUTPUT_ONLY = "OUTPUT_ONLY"
    OPTIONAL = "OPTIONAL"
    INPUT_ONLY = "INPUT_ONLY"
    IMMUTABLE = "IMMUTABLE"
    IDENTIFIER = "IDENTIFIER"


def lower_camel(name: str) -> str:
    """``secret_id`` -> ``secretId``, the protobuf default JSON name."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class FieldDescriptor(BaseModel):
    """A single field of a :class:`MessageDescriptor`.

    ``message_type_id`` is set for ``message``/``group`` fields and for map
    fields (pointing at the synthetic ``key``/``value`` entry message);
    ``enum_type_id`` is set for ``enum`` fields. ``oneof`` names the
    mutually exclusive group the field belongs to, if any.
    """

    name: str
    json_name: Optional[str] = None
    type: FieldType = FieldType.STRING
    repeated: bool = False
    map: bool = False
    behavior: list[FieldBehavior] = Field(default_factory=list)
    message_type_id: Optional[str] = None
    enum_type_id: Optional[str] = None
    oneof: Optional[str] = None
    documentation: str = ""

    @model_validator(mode="after")
    def _default_json_name(self) -> "FieldDescriptor":
        if not self.json_name:
            self.json_name = lower_camel(self.name)
        return self


class MessageDescriptor(BaseModel):
    """A message type. ``parent_id`` links nested types to their enclosing message."""

    id: str
    name: str
    parent_id: Optional[str] = None
    service_placeholder: bool = Field(
        default=False,
        description="Synthetic parent standing in for a service; stops type-name qualification",
    )
    documentation: str = ""
    fields: list[FieldDescriptor] = Field(default_factory=list)
    oneofs: list[str] = Field(
        default_factory=list, description="Names of oneof groups declared on this message"
    )


class EnumValueDescriptor(BaseModel):
    """One named value of an :class:`EnumDescriptor`."""

    name: str
    number: int = 0


class EnumDescriptor(BaseModel):
    """An enum type; ``parent_id`` is the enclosing message for nested enums."""

    id: str
    name: str
    parent_id: Optional[str] = None
    documentation: str = ""
    values: list[EnumValueDescriptor] = Field(default_factory=list)


class ServiceDescriptor(BaseModel):
    """A service grouping methods and the host they are served from."""

    id: str
    name: str
    default_host: str = ""
    documentation: str = ""


class PathVariableDescriptor(BaseModel):
    """A capturing segment of a path template.

    ``field_path`` is the path of the request field (one component per
    nesting level) whose value fills the variable; ``segments`` is the
    pattern that value follows, e.g. ``["projects", "*", "locations", "*"]``.
    """

    field_path: list[str]
    segments: list[str] = Field(default_factory=lambda: ["*"])


class PathSegmentDescriptor(BaseModel):
    """Either a literal path token or a :class:`PathVariableDescriptor`."""

    literal: Optional[str] = None
    variable: Optional[PathVariableDescriptor] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "PathSegmentDescriptor":
        if (self.literal is None) == (self.variable is None):
            raise ValueError("path segment needs exactly one of 'literal' or 'variable'")
        return self


class PathBindingDescriptor(BaseModel):
    """One HTTP binding of a method.

    The template is given either in compact form (``path``, e.g.
    ``"v1/{parent=projects/*/locations/*}/secrets"``) or as an explicit
    ``segments`` list. ``path`` wins when both are present.
    """

    verb: str = "GET"
    path: Optional[str] = None
    segments: list[PathSegmentDescriptor] = Field(default_factory=list)
    query_parameters: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _has_template(self) -> "PathBindingDescriptor":
        if self.path is None and not self.segments:
            raise ValueError("binding needs a 'path' or a 'segments' list")
        return self


class MethodDescriptor(BaseModel):
    """An RPC method together with its HTTP bindings."""

    id: str
    name: str
    service_id: Optional[str] = None
    input_type_id: str
    output_type_id: Optional[str] = None
    documentation: str = ""
    body: str = Field(
        default="*",
        description="Body rule: '*' for all remaining fields, a field name, or '' for none",
    )
    bindings: list[PathBindingDescriptor] = Field(default_factory=list)


class ApiDescriptor(BaseModel):
    """The complete descriptor document produced by the upstream schema provider.

    See Also:
        :func:`reqmorph.schema.resolver.link_api`: Turns this document into
        a linked :class:`~reqmorph.schema.graph.ApiSchema`.
    """

    model_config = ConfigDict(extra="allow")

    name: str = ""
    services: list[ServiceDescriptor] = Field(default_factory=list)
    messages: list[MessageDescriptor] = Field(default_factory=list)
    enums: list[EnumDescriptor] = Field(default_factory=list)
    methods: list[MethodDescriptor] = Field(default_factory=list)


# --- Emitter inputs ---


class FlagMapping(BaseModel):
    """Maps one gcloud positional argument or flag to a request field path.

    ``field_path`` is dot-separated (``"secret.labels"``). ``choices`` lists
    the literal values the flag accepts; it is used to collapse union-shaped
    JSON (``{"automatic": {}}``) into a single choice.
    """

    model_config = ConfigDict(populate_by_name=True)

    flag: Optional[str] = None
    pos: Optional[int] = Field(default=None, ge=0)
    field_path: str
    choices: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _flag_or_pos(self) -> "FlagMapping":
        if self.flag is None and self.pos is None:
            raise ValueError(
                f"mapping for '{self.field_path}' needs either 'flag' or 'pos'"
            )
        return self

    @property
    def is_positional(self) -> bool:
        """Positional bindings win over a flag name when both are given."""
        return self.pos is not None


class GcloudMapping(BaseModel):
    """The gcloud flag-mapping file produced by the external AI mapper."""

    command: str
    message_id: str = ""
    properties: list[FlagMapping] = Field(default_factory=list)


class GoBuildConfig(BaseModel):
    """Go build metadata scraped from a ``BUILD.bazel`` file (or supplied directly).

    ``gapic_import_path`` uses the Bazel ``path;name`` form, e.g.
    ``"cloud.google.com/go/secretmanager/apiv1;secretmanager"``.
    """

    gapic_import_path: str = ""
    proto_import_path: str = ""
    grpc_service_config: str = ""
    release_level: str = ""
    service_yaml: str = ""
    transport: str = ""
    metadata: bool = False
    rest_numeric_enums: bool = False
    diregapic: bool = False
    has_gapic: bool = False
    has_go_grpc: bool = False

    @property
    def gapic_package(self) -> str:
        """The Go package name of the client library (``secretmanager``)."""
        return _split_import_path(self.gapic_import_path)[1]

    @property
    def proto_package(self) -> str:
        """The Go package name of the generated protos (``secretmanagerpb``)."""
        return _split_import_path(self.proto_import_path)[1]

    def imports(self) -> list[str]:
        """Plain import paths of the client and proto packages, empty ones dropped."""
        paths = [
            _split_import_path(self.gapic_import_path)[0],
            _split_import_path(self.proto_import_path)[0],
        ]
        return [p for p in paths if p]


_NON_IDENT_RE = re.compile(r"[^A-Za-z0-9_]")


def _split_import_path(import_path: str) -> tuple[str, str]:
    """Split ``path;name`` into ``(path, name)``; the name defaults to the last segment."""
    if ";" in import_path:
        path, name = import_path.split(";", 1)
        return path, name
    name = import_path.rsplit("/", 1)[-1]
    return import_path, _NON_IDENT_RE.sub("", name)
