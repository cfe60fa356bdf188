"""Declaration events, definition tree and compiled schema graph."""

from .declarations import (
    AttributeEvent,
    AttributeKind,
    CloseEvent,
    DeclarationKind,
    ImportFieldsEvent,
    ImportTypesEvent,
    OpenEvent,
    decode_event,
    list_of,
    non_null,
)
from .schema_graph import CompiledSchema

__all__ = [
    "AttributeEvent",
    "AttributeKind",
    "CloseEvent",
    "CompiledSchema",
    "DeclarationKind",
    "ImportFieldsEvent",
    "ImportTypesEvent",
    "OpenEvent",
    "decode_event",
    "list_of",
    "non_null",
]
