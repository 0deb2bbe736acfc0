"""Link an :class:`~reqmorph.models.ApiDescriptor` into an in-memory schema graph.

Descriptor documents refer to messages, enums, and services by ID. This
module replaces every ID with a direct object reference, producing the
:mod:`reqmorph.schema.graph` objects the engine walks.

Linking happens in two passes over flat lists: the first creates one node
per descriptor entry, the second wires references between the nodes. No
pass ever follows a reference, so self-referencing and mutually recursive
message types link without recursion.

Any reference that names an ID absent from the document raises
:class:`~reqmorph.exceptions.SchemaResolutionError` naming the entity that
holds the dangling reference.
"""

from __future__ import annotations

from reqmorph.exceptions import SchemaResolutionError
from reqmorph.models import (
    ApiDescriptor,
    MethodDescriptor,
    PathBindingDescriptor,
)
from reqmorph.schema.graph import (
    ApiSchema,
    EnumSchema,
    EnumValue,
    FieldSchema,
    MessageSchema,
    MethodSchema,
    OneofGroup,
    PathBinding,
    PathSegment,
    PathTemplate,
    PathVariable,
    ServiceSchema,
)
from reqmorph.schema.http_rule import parse_path_template


def link_api(descriptor: ApiDescriptor) -> ApiSchema:
    """Resolve every ID reference in *descriptor*.

    Args:
        descriptor: A validated descriptor document, as returned by
            :func:`~reqmorph.schema.loader.load_api`.

    Returns:
        An :class:`~reqmorph.schema.graph.ApiSchema` whose lookup tables are
        keyed by ID.

    Raises:
        SchemaResolutionError: On duplicate IDs or dangling references.

    Example::

        api = link_api(load_api("secretmanager.json"))
        method = find_method(api, "CreateSecret")
        method.input_type.field_by_key("secretId")
    """
    api = ApiSchema(name=descriptor.name)

    # Pass 1: nodes
    for svc in descriptor.services:
        _check_unique(api.services, svc.id, "service")
        api.services[svc.id] = ServiceSchema(
            id=svc.id,
            name=svc.name,
            default_host=svc.default_host,
            documentation=svc.documentation,
        )
    for enum_desc in descriptor.enums:
        _check_unique(api.enums, enum_desc.id, "enum")
        api.enums[enum_desc.id] = EnumSchema(
            id=enum_desc.id,
            name=enum_desc.name,
            values=[EnumValue(name=v.name, number=v.number) for v in enum_desc.values],
            documentation=enum_desc.documentation,
        )
    for msg_desc in descriptor.messages:
        _check_unique(api.messages, msg_desc.id, "message")
        message = MessageSchema(
            id=msg_desc.id,
            name=msg_desc.name,
            service_placeholder=msg_desc.service_placeholder,
            documentation=msg_desc.documentation,
        )
        message.oneofs = [OneofGroup(name=name) for name in msg_desc.oneofs]
        api.messages[msg_desc.id] = message

    # Pass 2: references
    for enum_desc in descriptor.enums:
        if enum_desc.parent_id:
            api.enums[enum_desc.id].parent = _lookup_message(
                api, enum_desc.parent_id, f"enum '{enum_desc.id}'"
            )

    for msg_desc in descriptor.messages:
        message = api.messages[msg_desc.id]
        if msg_desc.parent_id:
            parent = _lookup_message(api, msg_desc.parent_id, f"message '{msg_desc.id}'")
            message.parent = parent
            parent.messages.append(message)

        groups = {group.name: group for group in message.oneofs}
        for field_desc in msg_desc.fields:
            owner = f"field '{msg_desc.id}.{field_desc.name}'"
            field = FieldSchema(
                name=field_desc.name,
                type=field_desc.type,
                json_name=field_desc.json_name or "",
                repeated=field_desc.repeated,
                map=field_desc.map,
                behavior=frozenset(field_desc.behavior),
                documentation=field_desc.documentation,
                parent=message,
            )
            if field_desc.type.is_message or field_desc.map:
                if not field_desc.message_type_id:
                    raise SchemaResolutionError(f"{owner} has no message_type_id")
                field.message_type = _lookup_message(api, field_desc.message_type_id, owner)
            if field_desc.enum_type_id:
                field.enum_type = _lookup_enum(api, field_desc.enum_type_id, owner)
            if field_desc.oneof:
                group = groups.get(field_desc.oneof)
                if group is None:
                    group = OneofGroup(name=field_desc.oneof)
                    groups[group.name] = group
                    message.oneofs.append(group)
                group.fields.append(field)
                field.oneof = group
            message.fields.append(field)

    for method_desc in descriptor.methods:
        _check_unique(api.methods, method_desc.id, "method")
        api.methods[method_desc.id] = _link_method(api, method_desc)

    return api


def _link_method(api: ApiSchema, desc: MethodDescriptor) -> MethodSchema:
    owner = f"method '{desc.id}'"
    method = MethodSchema(
        id=desc.id,
        name=desc.name,
        input_type=_lookup_message(api, desc.input_type_id, owner),
        body=desc.body,
        documentation=desc.documentation,
    )
    if desc.output_type_id:
        method.output_type = _lookup_message(api, desc.output_type_id, owner)
    if desc.service_id:
        service = api.services.get(desc.service_id)
        if service is None:
            raise SchemaResolutionError(
                f"{owner} references unknown service '{desc.service_id}'"
            )
        method.service = service
    method.bindings = [_link_binding(b) for b in desc.bindings]
    return method


def _link_binding(desc: PathBindingDescriptor) -> PathBinding:
    if desc.path is not None:
        template = parse_path_template(desc.path)
    else:
        template = PathTemplate(
            segments=[
                PathSegment(
                    literal=seg.literal,
                    variable=PathVariable(
                        field_path=list(seg.variable.field_path),
                        segments=list(seg.variable.segments),
                    )
                    if seg.variable is not None
                    else None,
                )
                for seg in desc.segments
            ]
        )
    return PathBinding(
        verb=desc.verb.upper(),
        template=template,
        query_parameters=list(desc.query_parameters),
    )


def _check_unique(table: dict, key: str, kind: str) -> None:
    if key in table:
        raise SchemaResolutionError(f"Duplicate {kind} id '{key}'")


def _lookup_message(api: ApiSchema, message_id: str, owner: str) -> MessageSchema:
    message = api.messages.get(message_id)
    if message is None:
        raise SchemaResolutionError(f"{owner} references unknown message '{message_id}'")
    return message


def _lookup_enum(api: ApiSchema, enum_id: str, owner: str) -> EnumSchema:
    enum_schema = api.enums.get(enum_id)
    if enum_schema is None:
        raise SchemaResolutionError(f"{owner} references unknown enum '{enum_id}'")
    return enum_schema


def find_method(api: ApiSchema, ref: str) -> MethodSchema:
    """Find a method by ID, then by (unique) name.

    Raises:
        SchemaResolutionError: If no method matches, or the name is ambiguous.
    """
    if ref in api.methods:
        return api.methods[ref]
    matches = [m for m in api.methods.values() if m.name == ref]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        ids = ", ".join(sorted(m.id for m in matches))
        raise SchemaResolutionError(f"Method name '{ref}' is ambiguous: {ids}")
    raise SchemaResolutionError(f"Method '{ref}' not found")


def find_message(api: ApiSchema, ref: str) -> MessageSchema:
    """Find a message by ID, then by (unique) name.

    Raises:
        SchemaResolutionError: If no message matches, or the name is ambiguous.
    """
    if ref in api.messages:
        return api.messages[ref]
    matches = [m for m in api.messages.values() if m.name == ref]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        ids = ", ".join(sorted(m.id for m in matches))
        raise SchemaResolutionError(f"Message name '{ref}' is ambiguous: {ids}")
    raise SchemaResolutionError(f"Message '{ref}' not found")
