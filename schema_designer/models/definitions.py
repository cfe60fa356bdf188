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

"""Schema definition tree built by the assembler and refined by later phases."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..file_io.source_location import SourceLocation, UNKNOWN_LOCATION
from .declarations import DeclarationKind, TypeRef

# (handler, options) pairs consulted by the query executor, in order.
MiddlewareEntry = Tuple[Callable[..., Any], Any]


@dataclass(frozen=True)
class SourceReference:
    module: Optional[str]
    identifier: str
    location: SourceLocation = UNKNOWN_LOCATION


@dataclass(frozen=True)
class FieldImport:
    source: str
    options: Mapping[str, Any] = field(default_factory=dict)
    location: SourceLocation = UNKNOWN_LOCATION


@dataclass(frozen=True)
class TypeImport:
    module_ref: str
    options: Mapping[str, Any] = field(default_factory=dict)
    location: SourceLocation = UNKNOWN_LOCATION


@dataclass
class ArgDefinition:
    identifier: str
    name: str = ""
    type_ref: Optional[TypeRef] = None
    default_value: Any = None
    description: Optional[str] = None
    deprecation: Optional[str] = None
    directives: List[Any] = field(default_factory=list)
    source_reference: Optional[SourceReference] = None


@dataclass
class EnumValueDefinition:
    identifier: str
    name: str = ""
    value: Any = None
    description: Optional[str] = None
    deprecation: Optional[str] = None
    directives: List[Any] = field(default_factory=list)
    source_reference: Optional[SourceReference] = None


@dataclass
class FieldDefinition:
    identifier: str
    name: str = ""
    type_ref: Optional[TypeRef] = None
    args: List[ArgDefinition] = field(default_factory=list)
    middleware: List[MiddlewareEntry] = field(default_factory=list)
    deprecation: Optional[str] = None
    description: Optional[str] = None
    directives: List[Any] = field(default_factory=list)
    complexity: Any = None
    config: Any = None
    triggers: List[Tuple[Any, Any]] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)
    source_reference: Optional[SourceReference] = None


@dataclass
class TypeDefinition:
    """Common shape of every toplevel definition."""

    KIND = ""
    LABEL = ""

    identifier: str
    name: str = ""
    description: Optional[str] = None
    directives: List[Any] = field(default_factory=list)
    source_reference: Optional[SourceReference] = None
    flags: Dict[str, Any] = field(default_factory=dict)
    errors: List[Any] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def module(self) -> Optional[str]:
        return self.source_reference.module if self.source_reference else None

    @property
    def is_imported(self) -> bool:
        return bool(self.flags.get("imported"))


@dataclass
class ObjectTypeDefinition(TypeDefinition):
    KIND = DeclarationKind.OBJECT
    LABEL = "Object"

    fields: List[FieldDefinition] = field(default_factory=list)
    field_imports: List[FieldImport] = field(default_factory=list)
    interfaces: List[str] = field(default_factory=list)
    is_type_of: Optional[Callable[..., Any]] = None


@dataclass
class InterfaceTypeDefinition(TypeDefinition):
    KIND = DeclarationKind.INTERFACE
    LABEL = "Interface"

    fields: List[FieldDefinition] = field(default_factory=list)
    field_imports: List[FieldImport] = field(default_factory=list)
    resolve_type: Optional[Callable[..., Any]] = None


@dataclass
class InputObjectTypeDefinition(TypeDefinition):
    KIND = DeclarationKind.INPUT_OBJECT
    LABEL = "InputObject"

    fields: List[FieldDefinition] = field(default_factory=list)
    field_imports: List[FieldImport] = field(default_factory=list)


@dataclass
class ScalarTypeDefinition(TypeDefinition):
    KIND = DeclarationKind.SCALAR
    LABEL = "Scalar"

    parse: Optional[Callable[..., Any]] = None
    serialize: Optional[Callable[..., Any]] = None


@dataclass
class EnumTypeDefinition(TypeDefinition):
    KIND = DeclarationKind.ENUM
    LABEL = "Enum"

    values: List[EnumValueDefinition] = field(default_factory=list)


@dataclass
class UnionTypeDefinition(TypeDefinition):
    KIND = DeclarationKind.UNION
    LABEL = "Union"

    member_types: List[str] = field(default_factory=list)
    resolve_type: Optional[Callable[..., Any]] = None


@dataclass
class DirectiveDefinition(TypeDefinition):
    KIND = DeclarationKind.DIRECTIVE
    LABEL = "Directive"

    locations: List[Any] = field(default_factory=list)
    args: List[ArgDefinition] = field(default_factory=list)
    instruction: Optional[Callable[..., Any]] = None
    expand: Optional[Callable[..., Any]] = None


# Definitions that own a field list and may import fields.
FIELD_CONTAINERS = (ObjectTypeDefinition, InterfaceTypeDefinition, InputObjectTypeDefinition)


def has_fields(definition: Any) -> bool:
    return isinstance(definition, FIELD_CONTAINERS)


@dataclass
class SchemaDefinition:
    """Implicit root of one compiled module's declaration tree."""

    module_ref: Optional[str] = None
    type_imports: List[TypeImport] = field(default_factory=list)
    types: List[TypeDefinition] = field(default_factory=list)

    def get(self, identifier: str) -> Optional[TypeDefinition]:
        for definition in self.types:
            if definition.identifier == identifier:
                return definition
        return None
