# Copyright 2026 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Declaration events: the linear stream a front end hands to the compiler.

Each event is immutable. The stream contract form of an event is
``{kind, payload, location: {file, line}}``; :func:`decode_event` converts that
form into the typed records below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from ..exceptions import EventContractError
from ..file_io.source_location import SourceLocation, UNKNOWN_LOCATION


class DeclarationKind:
    """Kinds of scoped declarations (the ones that are opened and closed)."""

    OBJECT = "object"
    INTERFACE = "interface"
    INPUT_OBJECT = "input_object"
    SCALAR = "scalar"
    ENUM = "enum"
    UNION = "union"
    DIRECTIVE = "directive"
    FIELD = "field"
    ARG = "arg"
    VALUE = "value"
    # Schema roots; they build objects named after the root.
    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"

    ROOTS = (QUERY, MUTATION, SUBSCRIPTION)

    @classmethod
    def get_all_kinds(cls) -> List[str]:
        return [
            cls.OBJECT, cls.INTERFACE, cls.INPUT_OBJECT, cls.SCALAR, cls.ENUM,
            cls.UNION, cls.DIRECTIVE, cls.FIELD, cls.ARG, cls.VALUE,
            cls.QUERY, cls.MUTATION, cls.SUBSCRIPTION,
        ]

    @classmethod
    def scope_kind(cls, kind: str) -> str:
        """Kind a scope counts as when it is the parent of another declaration."""
        if kind in cls.ROOTS:
            return cls.OBJECT
        return kind


class AttributeKind:
    """Kinds of attributes attached to the enclosing scope."""

    DESCRIPTION = "description"
    DESC = "desc"
    INTERFACES = "interfaces"
    INTERFACE_ATTRIBUTE = "interface_attribute"
    MIDDLEWARE = "middleware"
    RESOLVE = "resolve"
    PARSE = "parse"
    SERIALIZE = "serialize"
    IS_TYPE_OF = "is_type_of"
    RESOLVE_TYPE = "resolve_type"
    DEPRECATE = "deprecate"
    COMPLEXITY = "complexity"
    PRIVATE = "private"
    META = "meta"
    ON = "on"
    INSTRUCTION = "instruction"
    EXPAND = "expand"
    CONFIG = "config"
    TRIGGER = "trigger"
    TYPES = "types"
    VALUES = "values"

    @classmethod
    def get_all_kinds(cls) -> List[str]:
        return [
            cls.DESCRIPTION, cls.DESC, cls.INTERFACES, cls.INTERFACE_ATTRIBUTE,
            cls.MIDDLEWARE, cls.RESOLVE, cls.PARSE, cls.SERIALIZE, cls.IS_TYPE_OF,
            cls.RESOLVE_TYPE, cls.DEPRECATE, cls.COMPLEXITY, cls.PRIVATE, cls.META,
            cls.ON, cls.INSTRUCTION, cls.EXPAND, cls.CONFIG, cls.TRIGGER,
            cls.TYPES, cls.VALUES,
        ]


# Usage names of the two import directives, for placement checks.
IMPORT_TYPES = "import_types"
IMPORT_FIELDS = "import_fields"

# Wire names of attribute events in the stream contract.
_ATTRIBUTE_WIRE_NAMES: Dict[str, str] = {
    kind: f"set_{kind}" for kind in AttributeKind.get_all_kinds()
}
_ATTRIBUTE_WIRE_NAMES[AttributeKind.INTERFACE_ATTRIBUTE] = "set_interface"
_ATTRIBUTE_WIRE_NAMES[AttributeKind.ON] = "set_on"
_WIRE_TO_ATTRIBUTE = {wire: kind for kind, wire in _ATTRIBUTE_WIRE_NAMES.items()}


# ---- type references ---------------------------------------------------------


@dataclass(frozen=True)
class NonNull:
    of_type: "TypeRef"


@dataclass(frozen=True)
class ListOf:
    of_type: "TypeRef"


TypeRef = Union[str, NonNull, ListOf]


def non_null(type_ref: TypeRef) -> NonNull:
    """Mark a type reference as non null."""
    return NonNull(type_ref)


def list_of(type_ref: TypeRef) -> ListOf:
    """Mark a type reference as a list of the given type."""
    return ListOf(type_ref)


def unwrap_type(type_ref: Optional[TypeRef]) -> Optional[str]:
    """Return the identifier inside any NonNull/ListOf wrappers."""
    while isinstance(type_ref, (NonNull, ListOf)):
        type_ref = type_ref.of_type
    return type_ref


# ---- events ------------------------------------------------------------------


@dataclass(frozen=True)
class OpenEvent:
    kind: str
    identifier: str
    raw_attrs: Mapping[str, Any] = field(default_factory=dict)
    location: SourceLocation = UNKNOWN_LOCATION
    # Keyword used at the declaration site when it differs from ``kind``.
    usage: Optional[str] = None

    @property
    def event_kind(self) -> str:
        return f"open_{self.kind}"

    @property
    def usage_name(self) -> str:
        return self.usage or self.kind


@dataclass(frozen=True)
class AttributeEvent:
    kind: str
    payload: Any = None
    location: SourceLocation = UNKNOWN_LOCATION

    @property
    def event_kind(self) -> str:
        return _ATTRIBUTE_WIRE_NAMES.get(self.kind, f"set_{self.kind}")

    @property
    def usage_name(self) -> str:
        return self.kind


@dataclass(frozen=True)
class CloseEvent:
    location: SourceLocation = UNKNOWN_LOCATION

    @property
    def event_kind(self) -> str:
        return "close"


@dataclass(frozen=True)
class ImportTypesEvent:
    module_ref: str
    options: Mapping[str, Any] = field(default_factory=dict)
    location: SourceLocation = UNKNOWN_LOCATION

    @property
    def event_kind(self) -> str:
        return "set_import_types"

    @property
    def usage_name(self) -> str:
        return IMPORT_TYPES


@dataclass(frozen=True)
class ImportFieldsEvent:
    source_ref: str
    options: Mapping[str, Any] = field(default_factory=dict)
    location: SourceLocation = UNKNOWN_LOCATION

    @property
    def event_kind(self) -> str:
        return "set_import_fields"

    @property
    def usage_name(self) -> str:
        return IMPORT_FIELDS


DeclarationEvent = Union[OpenEvent, AttributeEvent, CloseEvent, ImportTypesEvent, ImportFieldsEvent]


def decode_event(data: Mapping[str, Any]) -> DeclarationEvent:
    """Decode one event from its stream contract form.

    ``open_*`` payloads are ``{identifier, attrs?, usage?}``, ``set_import_types``
    is ``{module, options?}``, ``set_import_fields`` is ``{source, options?}``,
    every other ``set_*`` carries its value as the payload.
    """
    wire_kind = data.get("kind")
    payload = data.get("payload")
    location = SourceLocation.from_dict(data.get("location"))

    if not isinstance(wire_kind, str):
        raise EventContractError(f"Declaration event kind must be a string, got: {wire_kind!r}", location)

    if wire_kind == "close":
        return CloseEvent(location=location)

    if wire_kind.startswith("open_"):
        kind = wire_kind[len("open_"):]
        if kind not in DeclarationKind.get_all_kinds():
            raise EventContractError(f"Unknown declaration event kind: '{wire_kind}'", location)
        payload = payload or {}
        if "identifier" not in payload:
            raise EventContractError(f"Event '{wire_kind}' requires an identifier", location)
        return OpenEvent(
            kind=kind,
            identifier=payload["identifier"],
            raw_attrs=dict(payload.get("attrs") or {}),
            location=location,
            usage=payload.get("usage"),
        )

    if wire_kind == "set_import_types":
        payload = payload or {}
        return ImportTypesEvent(
            module_ref=payload.get("module"),
            options=dict(payload.get("options") or {}),
            location=location,
        )

    if wire_kind == "set_import_fields":
        payload = payload or {}
        return ImportFieldsEvent(
            source_ref=payload.get("source"),
            options=dict(payload.get("options") or {}),
            location=location,
        )

    if wire_kind in _WIRE_TO_ATTRIBUTE:
        return AttributeEvent(kind=_WIRE_TO_ATTRIBUTE[wire_kind], payload=payload, location=location)

    raise EventContractError(f"Unknown declaration event kind: '{wire_kind}'", location)
