"""Scope stack assembler tests."""

from __future__ import annotations

import pytest

from schema_designer.compiler.assembler import ScopeStackAssembler, assemble
from schema_designer.compiler.errors import Rule
from schema_designer.exceptions import EventContractError, NotationError
from schema_designer.middleware import resolution
from schema_designer.models.declarations import CloseEvent, non_null
from schema_designer.models.definitions import (
    DirectiveDefinition,
    EnumTypeDefinition,
    InputObjectTypeDefinition,
    ObjectTypeDefinition,
    ScalarTypeDefinition,
    UnionTypeDefinition,
)


def resolve_name(parent, args):
    return parent["name"]


def test_object_fields_keep_declaration_order(events) -> None:
    events.object("user", "id", "name", "email")

    schema, errors = assemble(events.events, "accounts")

    user = schema.get("user")
    assert isinstance(user, ObjectTypeDefinition)
    assert [f.identifier for f in user.fields] == ["id", "name", "email"]
    assert errors == []


def test_default_names(events) -> None:
    with events.scope("object", "user_profile"):
        events.field("display_name")

    schema, _ = assemble(events.events)

    profile = schema.get("user_profile")
    assert profile.name == "UserProfile"
    assert profile.fields[0].name == "display_name"


def test_explicit_name_wins(events) -> None:
    events.open("object", "user", name="Account").close()

    schema, _ = assemble(events.events)

    assert schema.get("user").name == "Account"


def test_schema_roots_are_objects_named_after_the_root(events) -> None:
    with events.scope("subscription"):
        events.field("user_updated", "user")

    schema, _ = assemble(events.events)

    root = schema.get("subscription")
    assert isinstance(root, ObjectTypeDefinition)
    assert root.name == "Subscription"


def test_field_attributes(events) -> None:
    with events.scope("object", "user"):
        with events.scope("field", "name", type=non_null("string")):
            events.attr("description", "  Full name.  ")
            events.attr("resolve", resolve_name)
            events.attr("deprecate", "Use display_name")
            events.attr("complexity", 3)
            events.attr("meta", {"cache": True})
            events.attr("meta", {"owner": "accounts"})

    schema, _ = assemble(events.events)

    name = schema.get("user").fields[0]
    assert name.type_ref == non_null("string")
    assert name.description == "Full name."
    assert name.middleware == [(resolution, {"function": resolve_name})]
    assert name.deprecation == "Use display_name"
    assert name.complexity == 3
    assert name.meta == {"cache": True, "owner": "accounts"}


def test_interfaces_accumulate_without_repeats(events) -> None:
    with events.scope("object", "user"):
        events.attr("interfaces", ["node", "timestamped"])
        events.attr("interface_attribute", "node")
        events.attr("interface_attribute", "named")

    schema, _ = assemble(events.events)

    assert schema.get("user").interfaces == ["node", "timestamped", "named"]


def test_enum_values_from_attribute_and_declarations(events) -> None:
    with events.scope("enum", "color"):
        events.attr("values", ["red", "green"])
        with events.scope("value", "blue", **{"as": 3}):
            events.attr("deprecate", "No longer shipped")

    schema, _ = assemble(events.events)

    color = schema.get("color")
    assert isinstance(color, EnumTypeDefinition)
    assert [(v.identifier, v.value) for v in color.values] == [("red", "red"), ("green", "green"), ("blue", 3)]
    assert color.values[2].deprecation == "No longer shipped"


def test_scalar_union_directive_and_input_object(events) -> None:
    with events.scope("scalar", "datetime"):
        events.attr("parse", "parse_datetime")
        events.attr("serialize", "serialize_datetime")
    with events.scope("union", "search_result"):
        events.attr("types", ["user", "post"])
        events.attr("types", ["post", "comment"])
        events.attr("resolve_type", "resolve_search_result")
    with events.scope("directive", "feature"):
        events.attr("on", ["field", "fragment_spread"])
        events.attr("on", "field")
        events.attr("expand", "expand_feature")
    with events.scope("input_object", "user_filter"):
        events.field("name")

    schema, _ = assemble(events.events)

    scalar = schema.get("datetime")
    assert isinstance(scalar, ScalarTypeDefinition)
    assert (scalar.parse, scalar.serialize) == ("parse_datetime", "serialize_datetime")

    union = schema.get("search_result")
    assert isinstance(union, UnionTypeDefinition)
    assert union.member_types == ["user", "post", "comment"]
    assert union.resolve_type == "resolve_search_result"

    directive = schema.get("feature")
    assert isinstance(directive, DirectiveDefinition)
    assert directive.locations == ["field", "fragment_spread"]
    assert directive.expand == "expand_feature"

    assert isinstance(schema.get("user_filter"), InputObjectTypeDefinition)


def test_desc_describes_the_next_declaration(events) -> None:
    events.attr("desc", "A registered user.")
    with events.scope("object", "user"):
        events.attr("desc", "Primary key.")
        events.field("id")
        events.field("name")

    schema, _ = assemble(events.events)

    user = schema.get("user")
    assert user.description == "A registered user."
    assert user.fields[0].description == "Primary key."
    assert user.fields[1].description is None


def test_description_attribute_wins_over_desc(events) -> None:
    events.attr("desc", "From desc")
    with events.scope("object", "user"):
        events.attr("description", "From block")

    schema, _ = assemble(events.events)

    assert schema.get("user").description == "From block"


def test_raw_attributes_are_merged_like_attribute_events(events) -> None:
    events.open("object", "user", description="Raw description", interfaces=["node"]).close()

    schema, _ = assemble(events.events)

    user = schema.get("user")
    assert user.description == "Raw description"
    assert user.interfaces == ["node"]


def test_raw_attributes_follow_placement_rules(events) -> None:
    events.open("object", "user", resolve=resolve_name).close()

    with pytest.raises(NotationError) as exc_info:
        assemble(events.events)

    assert str(exc_info.value) == "Invalid schema notation: `resolve` must only be used within `field`"
    assert exc_info.value.location.line == 1


def test_every_definition_has_a_source_reference(events) -> None:
    with events.scope("object", "user"):
        with events.scope("field", "name"):
            events.open("arg", "locale").close()

    schema, _ = assemble(events.events, "accounts")

    user = schema.get("user")
    field = user.fields[0]
    assert user.source_reference.module == "accounts"
    assert user.source_reference.location.line == 1
    assert field.source_reference.location.line == 2
    assert field.args[0].source_reference.location.line == 3


def test_duplicate_fields_keep_the_later_one_and_report(events) -> None:
    with events.scope("object", "user"):
        events.field("name", "string")
        events.field("email")
        events.field("name", "id")

    schema, errors = assemble(events.events)

    fields = schema.get("user").fields
    assert [(f.identifier, f.type_ref) for f in fields] == [("name", "id"), ("email", "string")]
    assert [e.rule for e in errors] == [Rule.UNIQUE_IDENTIFIERS]
    assert errors[0].data.value == "name"


def test_duplicate_toplevel_types_are_reported_on_the_kept_type(events) -> None:
    events.object("user", "id")
    events.object("user", "name")

    schema, errors = assemble(events.events)

    assert len(schema.types) == 1
    assert [f.identifier for f in schema.get("user").fields] == ["name"]
    assert schema.get("user").errors == errors


def test_import_directives_are_recorded(events) -> None:
    events.import_types("common", only=["node"])
    events.import_types("common", only=["node"])
    with events.scope("object", "user"):
        events.import_fields("timestamps", **{"except": ["deleted_at"]})

    schema, _ = assemble(events.events)

    assert [(i.module_ref, dict(i.options)) for i in schema.type_imports] == [("common", {"only": ["node"]})]
    field_import = schema.get("user").field_imports[0]
    assert field_import.source == "timestamps"
    assert field_import.options == {"except": ["deleted_at"]}


def test_unclosed_scope_is_an_event_contract_error(events) -> None:
    events.open("object", "user")

    with pytest.raises(EventContractError, match="was never closed"):
        assemble(events.events)


def test_close_without_open_is_an_event_contract_error() -> None:
    with pytest.raises(EventContractError):
        assemble([CloseEvent()])


def test_unknown_attribute_kind_is_an_event_contract_error(events) -> None:
    events.open("object", "user").attr("colour", "blue")

    with pytest.raises(EventContractError, match="Unknown attribute kind"):
        assemble(events.events)


def test_assembler_can_be_reused(events) -> None:
    events.object("user", "id")
    assembler = ScopeStackAssembler("accounts")

    first, _ = assembler.assemble(events.events)
    second, _ = assembler.assemble(events.events)

    assert first == second
