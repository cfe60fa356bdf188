"""Function and middleware table tests."""

from __future__ import annotations

from schema_designer.compiler.function_table import FunctionCategory, FunctionTable, build_function_table
from schema_designer.compiler.pipeline import SchemaCompiler, compile_schema
from schema_designer.middleware import map_get, pass_parent, resolution


def resolve_name(parent, args):
    return parent["first"] + " " + parent["last"]


def authenticated(parent, args, options):
    return parent


def test_fields_without_middleware_read_their_key(events) -> None:
    events.object("user", "email")

    compiled = compile_schema(events.events)

    chain = compiled.lookup_function(FunctionCategory.FIELD, "user", "email")
    assert chain == [(map_get, {"key": "email"})]
    assert compiled.lookup_type("user").fields[0].middleware == []


def test_subscription_fields_pass_the_parent(events) -> None:
    with events.scope("subscription"):
        events.field("user_updated", "user")
    with events.scope("query"):
        events.field("me", "user")

    compiled = compile_schema(events.events)

    assert compiled.function_table.middleware("subscription", "user_updated") == [(pass_parent, {})]
    assert compiled.function_table.middleware("query", "me") == [(map_get, {"key": "me"})]


def test_subscription_importing_fields_from_another_module_passes_the_parent(make_events) -> None:
    compiler = SchemaCompiler()
    common = make_events("common.schema.yaml")
    common.object("events", "user_created")
    compiled_common = compiler.compile("common", common.events)

    app = make_events("app.schema.yaml")
    app.import_types("common")
    with app.scope("subscription"):
        app.import_fields("events")
    compiled = compiler.compile("app", app.events)

    assert compiled.errors == ()
    assert compiled_common.function_table.middleware("events", "user_created") == [(map_get, {"key": "user_created"})]
    assert compiled.function_table.middleware("subscription", "user_created") == [(pass_parent, {})]
    assert compiled.function_table.middleware("events", "user_created") == [(map_get, {"key": "user_created"})]
    assert compiled.lookup_type("subscription").fields[0].middleware == []


def test_explicit_middleware_is_kept_in_order(events) -> None:
    with events.scope("object", "user"):
        with events.scope("field", "name"):
            events.attr("middleware", (authenticated, {"role": "admin"}))
            events.attr("resolve", resolve_name)

    compiled = compile_schema(events.events)

    chain = compiled.function_table.middleware("user", "name")
    assert chain == [(authenticated, {"role": "admin"}), (resolution, {"function": resolve_name})]


def test_type_level_functions(events) -> None:
    with events.scope("scalar", "datetime"):
        events.attr("parse", "parse_datetime")
    with events.scope("object", "user"):
        events.attr("is_type_of", "is_user")
    with events.scope("interface", "node"):
        events.attr("resolve_type", "resolve_node")
    with events.scope("union", "search_result"):
        events.attr("types", ["user"])

    compiled = compile_schema(events.events)
    table = compiled.function_table

    assert table.lookup(FunctionCategory.SCALAR, "datetime", "parse") == "parse_datetime"
    assert (FunctionCategory.SCALAR, "datetime", "serialize") not in table
    assert table.lookup(FunctionCategory.OBJECT, "user", "is_type_of") == "is_user"
    assert table.lookup(FunctionCategory.INTERFACE, "node", "resolve_type") == "resolve_node"
    assert table.lookup(FunctionCategory.UNION, "search_result", "resolve_type") is None


def test_middleware_runs_against_parent_values() -> None:
    assert map_get({"email": "a@example.com"}, {}, {"key": "email"}) == "a@example.com"
    assert map_get(None, {}, {"key": "email"}) is None
    assert pass_parent("event", {}) == "event"
    assert resolution({"first": "Ada", "last": "Lovelace"}, {}, {"function": resolve_name}) == "Ada Lovelace"


def test_table_is_read_only() -> None:
    table = build_function_table([])

    assert isinstance(table, FunctionTable)
    assert len(table) == 0
    assert table.lookup("field", "user", "email", default="fallback") == "fallback"
