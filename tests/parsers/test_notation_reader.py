"""YAML notation reader tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from schema_designer.compiler.compiler_config import CompilerConfig
from schema_designer.compiler.pipeline import compile_schema
from schema_designer.exceptions import FormatVersionError, NotationError, ValidationError
from schema_designer.models.declarations import (
    AttributeEvent,
    AttributeKind,
    CloseEvent,
    ImportFieldsEvent,
    ImportTypesEvent,
    OpenEvent,
    list_of,
    non_null,
)
from schema_designer.parsers.notation_reader import NotationReader, to_type_ref
from schema_designer.parsers.yaml_parser import YamlParser


def reader(strict: bool = False) -> NotationReader:
    return NotationReader(parser=YamlParser(cache_enabled=False), config=CompilerConfig(strict_format_version=strict))


ACCOUNTS = """\
schema_notation_format: 0.1.0
module: accounts
import_types:
  - common
  - module: media
    only: [image]
types:
  - desc: A registered user.
  - object: user
    interface: node
    import_fields:
      - source: timestamps
        except: [deleted_at]
    fields:
      - field: id
        type: {non_null: id}
      - field: avatars
        type: {list_of: image}
        args:
          - arg: size
            type: integer
            default_value: 64
  - enum: color
    values:
      - red
      - value: blue
        as: 3
"""


def test_events_follow_document_order() -> None:
    document = reader().read_string(ACCOUNTS, "accounts.schema.yaml")

    kinds = [type(e).__name__ for e in document.events]
    assert kinds == [
        "ImportTypesEvent", "ImportTypesEvent",
        "AttributeEvent",
        "OpenEvent", "AttributeEvent", "ImportFieldsEvent",
        "OpenEvent", "CloseEvent",
        "OpenEvent", "OpenEvent", "CloseEvent", "CloseEvent",
        "CloseEvent",
        "OpenEvent", "AttributeEvent", "OpenEvent", "CloseEvent", "CloseEvent",
    ]
    assert document.module_ref == "accounts"
    assert document.imports == ["common", "media"]
    assert document.format_version == "0.1.0"


def test_event_payloads() -> None:
    events = reader().read_string(ACCOUNTS, "accounts.schema.yaml").events

    assert events[1] == ImportTypesEvent("media", {"only": ["image"]}, events[1].location)
    assert events[2] == AttributeEvent(AttributeKind.DESC, "A registered user.", events[2].location)
    assert events[4].kind == AttributeKind.INTERFACE_ATTRIBUTE
    assert events[5] == ImportFieldsEvent("timestamps", {"except": ["deleted_at"]}, events[5].location)
    assert events[6] == OpenEvent("field", "id", {"type": non_null("id")}, events[6].location)
    assert events[9].raw_attrs == {"type": "integer", "default_value": 64}
    assert events[14] == AttributeEvent(AttributeKind.VALUES, ["red"], events[14].location)
    assert events[15].raw_attrs == {"as": 3}
    assert isinstance(events[-1], CloseEvent)


def test_events_carry_source_lines() -> None:
    events = reader().read_string(ACCOUNTS, "accounts.schema.yaml").events

    user = events[3]
    assert user.location.file_path == Path("accounts.schema.yaml")
    assert user.location.line == 9
    assert user.location.yaml_path == "/types/1"
    assert events[6].location.line == 15


def test_compiles_to_the_expected_graph() -> None:
    document = reader().read_string(ACCOUNTS.replace("import_types:\n  - common\n  - module: media\n    only: [image]\n", ""))

    compiled = compile_schema(document.events, document.module_ref)

    user = compiled.lookup_type("user")
    assert user.description == "A registered user."
    assert user.interfaces == ["node"]
    assert user.fields[1].type_ref == list_of("image")
    assert user.fields[1].args[0].default_value == 64
    assert [v.value for v in compiled.lookup_type("color").values] == ["red", 3]
    assert [e.data.value for e in compiled.errors] == ["timestamps"]


def test_placement_is_left_to_the_compiler() -> None:
    document = reader().read_string(
        """\
module: accounts
types:
  - object: user
    fields:
      - arg: size
"""
    )

    with pytest.raises(NotationError) as exc_info:
        compile_schema(document.events, document.module_ref)

    assert str(exc_info.value) == "Invalid schema notation: `arg` must only be used within `directive`, `field`"
    assert exc_info.value.location.line == 5


def test_schema_roots_need_no_identifier() -> None:
    document = reader().read_string(
        """\
module: api
types:
  - query:
    fields:
      - field: me
        type: user
"""
    )

    assert document.events[0] == OpenEvent("query", "query", {}, document.events[0].location)


def test_document_shape_is_validated() -> None:
    with pytest.raises(ValidationError, match="Schema validation failed") as exc_info:
        reader().read_string("module: accounts\ntypes: {user: {}}\n", "accounts.schema.yaml")

    assert "yaml_path=/types" in str(exc_info.value)


def test_missing_module_is_rejected() -> None:
    with pytest.raises(ValidationError, match="'module' is a required property"):
        reader().read_string("types: []\n")


def test_unknown_entry_key_is_rejected() -> None:
    with pytest.raises(ValidationError, match="Unknown notation key 'colour'"):
        reader().read_string("module: a\ntypes:\n  - object: user\n    colour: blue\n")


def test_object_keyword_opens_the_entry_before_interface_attribute() -> None:
    events = reader().read_string("module: a\ntypes:\n  - interface: node\n    object: user\n").events

    assert events[0] == OpenEvent("object", "user", {}, events[0].location)
    assert events[1] == AttributeEvent(AttributeKind.INTERFACE_ATTRIBUTE, "node", events[1].location)
    assert isinstance(events[2], CloseEvent)


def test_entry_with_two_declaration_keywords_is_rejected() -> None:
    with pytest.raises(ValidationError, match="found extra 'enum' next to 'object'"):
        reader().read_string("module: a\ntypes:\n  - object: user\n    enum: color\n")


def test_incompatible_major_version() -> None:
    with pytest.raises(FormatVersionError, match="Incompatible format version"):
        reader().read_string("schema_notation_format: 1.0.0\nmodule: a\n")


def test_newer_minor_version_is_a_warning_unless_strict() -> None:
    content = "schema_notation_format: 0.9.0\nmodule: a\n"

    assert reader().read_string(content).module_ref == "a"
    with pytest.raises(FormatVersionError):
        reader(strict=True).read_string(content)


def test_type_refs() -> None:
    assert to_type_ref({"non_null": {"list_of": "user"}}) == non_null(list_of("user"))
    assert to_type_ref("user") == "user"
    with pytest.raises(ValidationError):
        to_type_ref({"maybe": "user"})


def test_read_file(tmp_path: Path) -> None:
    path = tmp_path / "accounts.schema.yaml"
    path.write_text(ACCOUNTS, encoding="utf-8")

    document = reader().read_file(path)

    assert document.file_path == path
    assert document.events[3].location.file_path == path
