"""Placement rule and reserved identifier tests."""

from __future__ import annotations

import pytest

from schema_designer.compiler.assembler import assemble
from schema_designer.compiler.placement import (
    PLACEMENT_RULES,
    placement_docs,
    validate_identifier,
    validate_placement,
)
from schema_designer.exceptions import NotationError
from schema_designer.models.declarations import AttributeKind, DeclarationKind, IMPORT_FIELDS, IMPORT_TYPES


def test_every_declaration_and_attribute_has_a_rule() -> None:
    for usage in DeclarationKind.get_all_kinds() + AttributeKind.get_all_kinds():
        assert usage in PLACEMENT_RULES
    assert IMPORT_TYPES in PLACEMENT_RULES
    assert IMPORT_FIELDS in PLACEMENT_RULES


def test_arg_outside_field_or_directive_is_rejected(events) -> None:
    events.open("object", "foo").open("arg", "bar")

    with pytest.raises(NotationError) as exc_info:
        assemble(events.events)

    assert str(exc_info.value) == "Invalid schema notation: `arg` must only be used within `directive`, `field`"
    assert exc_info.value.location.line == 2


def test_arg_inside_field_and_directive_is_accepted(events) -> None:
    with events.scope("object", "foo"):
        with events.scope("field", "bar", type="string"):
            events.open("arg", "id", type="id").close()
    with events.scope("directive", "feature"):
        events.attr("on", ["field"])
        events.open("arg", "name", type="string").close()

    schema, errors = assemble(events.events)

    assert errors == []
    assert schema.get("foo").fields[0].args[0].identifier == "id"
    assert schema.get("feature").args[0].identifier == "name"


def test_directive_must_be_toplevel(events) -> None:
    events.open("object", "foo").open("directive", "bar")

    with pytest.raises(NotationError, match=r"`directive` must only be used toplevel"):
        assemble(events.events)


@pytest.mark.parametrize("kind", ["object", "interface", "input_object", "scalar", "enum", "union", "query"])
def test_type_declarations_must_be_toplevel(events, kind: str) -> None:
    events.open("object", "outer").open(kind, "inner")

    with pytest.raises(NotationError) as exc_info:
        assemble(events.events)

    assert str(exc_info.value) == f"Invalid schema notation: `{kind}` must only be used toplevel"


def test_field_placement(events) -> None:
    events.open("enum", "color").open("field", "red")

    with pytest.raises(NotationError) as exc_info:
        assemble(events.events)

    assert str(exc_info.value) == (
        "Invalid schema notation: `field` must only be used within `input_object`, `interface`, `object`"
    )


def test_field_inside_schema_root_counts_as_object(events) -> None:
    with events.scope("query"):
        events.field("health")

    schema, _ = assemble(events.events)

    assert schema.get("query").fields[0].identifier == "health"


def test_value_outside_enum_is_rejected(events) -> None:
    events.open("object", "foo").open("value", "red")

    with pytest.raises(NotationError, match=r"`value` must only be used within `enum`"):
        assemble(events.events)


def test_description_must_not_be_toplevel(events) -> None:
    events.attr("description", "top")

    with pytest.raises(NotationError) as exc_info:
        assemble(events.events)

    assert str(exc_info.value) == "Invalid schema notation: `description` must not be used toplevel"


def test_interface_attribute_uses_alias_in_message(events) -> None:
    events.open("input_object", "filter").attr("interface_attribute", "node")

    with pytest.raises(NotationError) as exc_info:
        assemble(events.events)

    assert str(exc_info.value) == (
        "Invalid schema notation: `interface` (as an attribute) must only be used within `object`"
    )


def test_import_fields_outside_field_owner_is_rejected(events) -> None:
    events.open("enum", "color").import_fields("other")

    with pytest.raises(NotationError, match=r"`import_fields` must only be used within"):
        assemble(events.events)


def test_import_types_must_be_toplevel(events) -> None:
    events.open("object", "foo").import_types("common")

    with pytest.raises(NotationError, match=r"`import_types` must only be used toplevel"):
        assemble(events.events)


def test_desc_is_allowed_anywhere() -> None:
    for parent in (None, "object", "field", "enum", "directive"):
        validate_placement("desc", parent)


@pytest.mark.parametrize(
    "usage, parent",
    [
        ("resolve", "field"),
        ("middleware", "field"),
        ("parse", "scalar"),
        ("serialize", "scalar"),
        ("resolve_type", "interface"),
        ("resolve_type", "union"),
        ("types", "union"),
        ("on", "directive"),
        ("is_type_of", "object"),
        ("is_type_of", "mutation"),
        ("deprecate", "arg"),
        ("deprecate", "value"),
        ("meta", "enum"),
        ("private", "field"),
        ("values", "enum"),
    ],
)
def test_attribute_allowed_placements(usage: str, parent: str) -> None:
    validate_placement(usage, parent)


@pytest.mark.parametrize(
    "usage, parent",
    [
        ("resolve", "object"),
        ("parse", "enum"),
        ("types", "interface"),
        ("on", "field"),
        ("is_type_of", "interface"),
        ("deprecate", "object"),
        ("meta", "directive"),
        ("values", "union"),
        ("complexity", None),
    ],
)
def test_attribute_rejected_placements(usage: str, parent) -> None:
    with pytest.raises(NotationError):
        validate_placement(usage, parent)


def test_unknown_usage_is_a_notation_error() -> None:
    with pytest.raises(NotationError, match="unknown declaration `subscriptions`"):
        validate_placement("subscriptions", None)


@pytest.mark.parametrize("identifier", ["query", "mutation", "subscription"])
def test_object_with_reserved_identifier_is_rejected(events, identifier: str) -> None:
    events.open("object", identifier)

    with pytest.raises(NotationError) as exc_info:
        assemble(events.events)

    assert str(exc_info.value) == (
        f"Invalid schema notation: cannot create an `object` with reserved identifier `{identifier}`"
    )


def test_reserved_identifiers_only_apply_to_objects() -> None:
    validate_identifier("interface", "query")
    validate_identifier("enum", "subscription")


def test_placement_docs_reads_like_a_sentence() -> None:
    assert placement_docs("value") == "`value` must only be used within `enum`"
    assert placement_docs("desc") == "`desc` may be used anywhere"
