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

"""Scope stack assembler: declaration events -> raw definition tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..exceptions import EventContractError, NotationError
from ..file_io.source_location import SourceLocation, UNKNOWN_LOCATION, format_source
from ..middleware import resolution
from ..models.declarations import (
    AttributeEvent,
    AttributeKind,
    CloseEvent,
    DeclarationEvent,
    DeclarationKind,
    ImportFieldsEvent,
    ImportTypesEvent,
    OpenEvent,
)
from ..models.definitions import (
    ArgDefinition,
    DirectiveDefinition,
    EnumTypeDefinition,
    EnumValueDefinition,
    FieldDefinition,
    FieldImport,
    InputObjectTypeDefinition,
    InterfaceTypeDefinition,
    ObjectTypeDefinition,
    ScalarTypeDefinition,
    SchemaDefinition,
    SourceReference,
    TypeDefinition,
    TypeImport,
    UnionTypeDefinition,
)
from ..utils.naming import camelize, format_identifier
from .errors import DuplicateIdentifierError, SchemaError
from .placement import validate_identifier, validate_placement

logger = logging.getLogger(__name__)

# Raw declaration attributes that are arguments of the declaration itself
# rather than attributes merged like attribute events.
_DECLARATION_ARGUMENTS = ("name", "type", "default_value", "as")

# Attributes whose values accumulate (in order, without repeats).
_SET_VALUED = {
    AttributeKind.INTERFACES: "interfaces",
    AttributeKind.INTERFACE_ATTRIBUTE: "interfaces",
    AttributeKind.ON: "locations",
    AttributeKind.TYPES: "types",
}

_CHILD_KINDS = {
    FieldDefinition: "field",
    ArgDefinition: "arg",
    EnumValueDefinition: "value",
}


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _description_text(text: Any) -> Optional[str]:
    if text is None:
        return None
    return str(text).strip()


@dataclass
class ScopeFrame:
    """One in-progress declaration on the assembler stack."""

    kind: str
    identifier: str
    location: SourceLocation
    raw_attrs: Mapping[str, Any] = field(default_factory=dict)
    attributes: Dict[str, Any] = field(default_factory=dict)
    children: List[Any] = field(default_factory=list)
    field_imports: List[FieldImport] = field(default_factory=list)
    # Description recorded with ``desc`` for the next declaration in this scope.
    pending_desc: Optional[str] = None
    # ``desc`` captured from the enclosing scope when this frame was opened.
    inherited_desc: Optional[str] = None


class ScopeStackAssembler:
    """Single-pass builder of a module's definition tree.

    Placement violations and reserved identifiers raise ``NotationError``
    immediately; duplicate identifiers are collected as deferred errors.
    """

    def __init__(self, module_ref: Optional[str] = None):
        self.module_ref = module_ref
        self._reset()

    def _reset(self) -> None:
        self._stack: List[ScopeFrame] = []
        self._types: List[Any] = []
        self._type_imports: List[TypeImport] = []
        self._toplevel_desc: Optional[str] = None
        self._errors: List[SchemaError] = []

    def assemble(self, events: Iterable[DeclarationEvent]) -> Tuple[SchemaDefinition, List[SchemaError]]:
        """Consume ``events`` and return the module root plus deferred errors."""
        self._reset()

        for event in events:
            if isinstance(event, OpenEvent):
                self._open(event)
            elif isinstance(event, AttributeEvent):
                self._attribute(event)
            elif isinstance(event, CloseEvent):
                self._close(event)
            elif isinstance(event, ImportFieldsEvent):
                self._import_fields(event)
            elif isinstance(event, ImportTypesEvent):
                self._import_types(event)
            else:
                raise EventContractError(f"Unsupported declaration event: {event!r}")

        if self._stack:
            frame = self._stack[-1]
            raise EventContractError(
                f"Declaration `{frame.kind}` {format_identifier(frame.identifier)} was never closed",
                frame.location,
            )

        if self._toplevel_desc is not None:
            logger.warning(f"Dropping description with no following declaration: {self._toplevel_desc!r}")

        types = self._dedupe(self._types, f"Module {self.module_ref}", "type")
        schema = SchemaDefinition(module_ref=self.module_ref, type_imports=list(self._type_imports), types=types)
        logger.debug(f"Assembled {len(types)} toplevel definition(s) for module {self.module_ref}")
        return schema, list(self._errors)

    # ---- stack handling ------------------------------------------------------

    @property
    def _parent_kind(self) -> Optional[str]:
        return self._stack[-1].kind if self._stack else None

    def _validate(self, usage: str, location: SourceLocation, parent_kind: Optional[str] = None) -> None:
        try:
            validate_placement(usage, parent_kind or self._parent_kind, location)
        except NotationError as e:
            logger.error(f"{e}{format_source(location)}")
            raise

    def _take_pending_desc(self) -> Optional[str]:
        if self._stack:
            desc, self._stack[-1].pending_desc = self._stack[-1].pending_desc, None
        else:
            desc, self._toplevel_desc = self._toplevel_desc, None
        return desc

    def _open(self, event: OpenEvent) -> None:
        identifier = event.kind if event.kind in DeclarationKind.ROOTS else event.identifier
        if identifier is None:
            raise EventContractError(f"Declaration `{event.kind}` requires an identifier", event.location)
        try:
            validate_identifier(event.kind, identifier, event.location)
        except NotationError as e:
            logger.error(f"{e}{format_source(event.location)}")
            raise

        self._validate(event.usage_name, event.location)

        frame = ScopeFrame(
            kind=event.kind,
            identifier=identifier,
            location=event.location,
            raw_attrs=dict(event.raw_attrs or {}),
            inherited_desc=self._take_pending_desc(),
        )
        for key, value in frame.raw_attrs.items():
            if key in _DECLARATION_ARGUMENTS:
                continue
            if key in AttributeKind.get_all_kinds() and key != AttributeKind.DESC:
                self._validate(key, event.location, parent_kind=event.kind)
                self._merge_attribute(frame, key, value, event.location)
            else:
                logger.debug(f"Ignoring unknown attribute '{key}' on `{event.kind}` {identifier}")
        self._stack.append(frame)

    def _attribute(self, event: AttributeEvent) -> None:
        if event.kind not in AttributeKind.get_all_kinds():
            raise EventContractError(f"Unknown attribute kind: '{event.kind}'", event.location)
        self._validate(event.usage_name, event.location)

        if event.kind == AttributeKind.DESC:
            text = _description_text(event.payload)
            if self._stack:
                self._stack[-1].pending_desc = text
            else:
                self._toplevel_desc = text
            return

        self._merge_attribute(self._stack[-1], event.kind, event.payload, event.location)

    def _close(self, event: CloseEvent) -> None:
        if not self._stack:
            raise EventContractError("Close event without a matching open", event.location)

        frame = self._stack.pop()
        if frame.pending_desc is not None:
            logger.warning(
                f"Dropping description with no following declaration in `{frame.kind}` "
                f"{format_identifier(frame.identifier)}{format_source(frame.location)}"
            )

        definition = self._finalize(frame)
        if self._stack:
            self._stack[-1].children.append(definition)
        else:
            self._types.append(definition)

    def _import_types(self, event: ImportTypesEvent) -> None:
        self._validate(event.usage_name, event.location)
        if not event.module_ref:
            raise EventContractError("import_types requires a module reference", event.location)

        type_import = TypeImport(module_ref=event.module_ref, options=dict(event.options or {}), location=event.location)
        for existing in self._type_imports:
            if existing.module_ref == type_import.module_ref and existing.options == type_import.options:
                logger.debug(f"Skipping repeated import_types of {event.module_ref}")
                return
        self._type_imports.append(type_import)

    def _import_fields(self, event: ImportFieldsEvent) -> None:
        self._validate(event.usage_name, event.location)
        if not event.source_ref:
            raise EventContractError("import_fields requires a source type", event.location)

        self._stack[-1].field_imports.append(
            FieldImport(source=event.source_ref, options=dict(event.options or {}), location=event.location)
        )

    # ---- attribute merging ---------------------------------------------------

    def _merge_attribute(self, frame: ScopeFrame, kind: str, payload: Any, location: SourceLocation) -> None:
        attributes = frame.attributes

        if kind in _SET_VALUED:
            target = attributes.setdefault(_SET_VALUED[kind], [])
            for item in _as_list(payload):
                if item not in target:
                    target.append(item)
        elif kind == AttributeKind.RESOLVE:
            attributes.setdefault("middleware", []).append((resolution, {"function": payload}))
        elif kind == AttributeKind.MIDDLEWARE:
            attributes.setdefault("middleware", []).append(self._middleware_entry(payload))
        elif kind == AttributeKind.TRIGGER:
            attributes.setdefault("triggers", []).extend(self._trigger_entries(payload))
        elif kind in (AttributeKind.META, AttributeKind.PRIVATE):
            if not isinstance(payload, Mapping):
                raise EventContractError(f"`{kind}` expects a mapping, got: {payload!r}", location)
            attributes.setdefault(kind, {}).update(payload)
        elif kind == AttributeKind.VALUES:
            for item in _as_list(payload):
                frame.children.append(self._enum_value_from_item(item, location))
        elif kind == AttributeKind.DESCRIPTION:
            attributes["description"] = _description_text(payload)
        elif kind == AttributeKind.DEPRECATE:
            attributes["deprecation"] = payload
        else:
            attributes[kind] = payload

    @staticmethod
    def _middleware_entry(payload: Any) -> Tuple[Callable[..., Any], Any]:
        if isinstance(payload, tuple) and len(payload) == 2:
            return payload
        return (payload, {})

    @staticmethod
    def _trigger_entries(payload: Any) -> List[Tuple[Any, Any]]:
        if isinstance(payload, tuple) and len(payload) == 2:
            mutations, options = payload
        elif isinstance(payload, Mapping):
            options = {k: v for k, v in payload.items() if k != "mutations"}
            mutations = payload.get("mutations")
        else:
            mutations, options = payload, {}
        return [(mutation, options) for mutation in _as_list(mutations)]

    def _enum_value_from_item(self, item: Any, location: SourceLocation) -> EnumValueDefinition:
        if isinstance(item, Mapping):
            identifier = item.get("identifier", item.get("value"))
            attrs = item
        else:
            identifier, attrs = item, {}
        if identifier is None:
            raise EventContractError(f"Enum value requires an identifier: {item!r}", location)
        return EnumValueDefinition(
            identifier=identifier,
            name=attrs.get("name", str(identifier)),
            value=attrs.get("as", identifier),
            description=_description_text(attrs.get("description")),
            deprecation=attrs.get("deprecate"),
            source_reference=SourceReference(self.module_ref, identifier, location),
        )

    # ---- finalization --------------------------------------------------------

    def _children(self, frame: ScopeFrame, child_type: type) -> List[Any]:
        children = [child for child in frame.children if isinstance(child, child_type)]
        return self._dedupe(children, f"`{frame.kind}` {format_identifier(frame.identifier)}", _CHILD_KINDS[child_type])

    def _dedupe(self, items: List[Any], owner: str, child_kind: str) -> List[Any]:
        """Keep one entry per identifier; a later entry replaces the earlier one in place."""
        result: List[Any] = []
        index: Dict[Any, int] = {}
        for item in items:
            if item.identifier in index:
                location = item.source_reference.location if item.source_reference else UNKNOWN_LOCATION
                error = DuplicateIdentifierError.for_child(owner, child_kind, item.identifier, location)
                self._errors.append(error)
                if isinstance(item, TypeDefinition):
                    item.errors.append(error)
                result[index[item.identifier]] = item
            else:
                index[item.identifier] = len(result)
                result.append(item)
        return result

    def _finalize(self, frame: ScopeFrame) -> Any:
        attributes = frame.attributes
        raw = frame.raw_attrs
        kind = frame.kind

        common = dict(
            identifier=frame.identifier,
            description=attributes.get("description") or frame.inherited_desc,
            source_reference=SourceReference(self.module_ref, frame.identifier, frame.location),
        )

        if kind in (DeclarationKind.FIELD, DeclarationKind.ARG, DeclarationKind.VALUE):
            common["name"] = raw.get("name") or str(frame.identifier)
        else:
            common["name"] = raw.get("name") or camelize(frame.identifier)

        if kind == DeclarationKind.FIELD:
            return FieldDefinition(
                type_ref=raw.get("type"),
                args=self._children(frame, ArgDefinition),
                middleware=list(attributes.get("middleware", [])),
                deprecation=attributes.get("deprecation"),
                complexity=attributes.get(AttributeKind.COMPLEXITY),
                config=attributes.get(AttributeKind.CONFIG),
                triggers=list(attributes.get("triggers", [])),
                meta=dict(attributes.get(AttributeKind.META, {})),
                **common,
            )

        if kind == DeclarationKind.ARG:
            return ArgDefinition(
                type_ref=raw.get("type"),
                default_value=raw.get("default_value"),
                deprecation=attributes.get("deprecation"),
                **common,
            )

        if kind == DeclarationKind.VALUE:
            return EnumValueDefinition(
                value=raw.get("as", frame.identifier),
                deprecation=attributes.get("deprecation"),
                **common,
            )

        common["meta"] = dict(attributes.get(AttributeKind.META, {}))
        if attributes.get(AttributeKind.PRIVATE):
            common["flags"] = {"private": dict(attributes[AttributeKind.PRIVATE])}

        if kind == DeclarationKind.OBJECT or kind in DeclarationKind.ROOTS:
            return ObjectTypeDefinition(
                fields=self._children(frame, FieldDefinition),
                field_imports=list(frame.field_imports),
                interfaces=list(attributes.get("interfaces", [])),
                is_type_of=attributes.get(AttributeKind.IS_TYPE_OF),
                **common,
            )

        if kind == DeclarationKind.INTERFACE:
            return InterfaceTypeDefinition(
                fields=self._children(frame, FieldDefinition),
                field_imports=list(frame.field_imports),
                resolve_type=attributes.get(AttributeKind.RESOLVE_TYPE),
                **common,
            )

        if kind == DeclarationKind.INPUT_OBJECT:
            return InputObjectTypeDefinition(
                fields=self._children(frame, FieldDefinition),
                field_imports=list(frame.field_imports),
                **common,
            )

        if kind == DeclarationKind.SCALAR:
            return ScalarTypeDefinition(
                parse=attributes.get(AttributeKind.PARSE),
                serialize=attributes.get(AttributeKind.SERIALIZE),
                **common,
            )

        if kind == DeclarationKind.ENUM:
            return EnumTypeDefinition(values=self._children(frame, EnumValueDefinition), **common)

        if kind == DeclarationKind.UNION:
            return UnionTypeDefinition(
                member_types=list(attributes.get("types", [])),
                resolve_type=attributes.get(AttributeKind.RESOLVE_TYPE),
                **common,
            )

        if kind == DeclarationKind.DIRECTIVE:
            return DirectiveDefinition(
                locations=list(attributes.get("locations", [])),
                args=self._children(frame, ArgDefinition),
                instruction=attributes.get(AttributeKind.INSTRUCTION),
                expand=attributes.get(AttributeKind.EXPAND),
                **common,
            )

        raise EventContractError(f"Unknown declaration kind: '{kind}'", frame.location)


def assemble(events: Iterable[DeclarationEvent], module_ref: Optional[str] = None) -> Tuple[SchemaDefinition, List[SchemaError]]:
    """Assemble ``events`` into a :class:`SchemaDefinition` plus deferred errors."""
    return ScopeStackAssembler(module_ref).assemble(events)
