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

"""Compiled schema graph handed to the query executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from .declarations import ListOf, NonNull, TypeRef
from .definitions import (
    ArgDefinition,
    DirectiveDefinition,
    EnumTypeDefinition,
    FieldDefinition,
    ObjectTypeDefinition,
    ScalarTypeDefinition,
    TypeDefinition,
    TypeImport,
    UnionTypeDefinition,
    has_fields,
)

if TYPE_CHECKING:
    from ..compiler.errors import SchemaError
    from ..compiler.function_table import FunctionTable


def type_ref_to_str(type_ref: Optional[TypeRef]) -> Optional[str]:
    """Render a type reference in SDL notation, e.g. ``[User!]!``."""
    if isinstance(type_ref, NonNull):
        return f"{type_ref_to_str(type_ref.of_type)}!"
    if isinstance(type_ref, ListOf):
        return f"[{type_ref_to_str(type_ref.of_type)}]"
    return None if type_ref is None else str(type_ref)


def _function_name(function: Any) -> Optional[str]:
    if function is None:
        return None
    if isinstance(function, str):
        return function
    module = getattr(function, "__module__", None)
    name = getattr(function, "__qualname__", None) or repr(function)
    return f"{module}.{name}" if module else name


def _arg_to_dict(arg: ArgDefinition) -> Dict[str, Any]:
    return {
        "identifier": arg.identifier,
        "name": arg.name,
        "type": type_ref_to_str(arg.type_ref),
        "default_value": arg.default_value,
        "description": arg.description,
        "deprecation": arg.deprecation,
    }


def _field_to_dict(field_def: FieldDefinition) -> Dict[str, Any]:
    return {
        "identifier": field_def.identifier,
        "name": field_def.name,
        "type": type_ref_to_str(field_def.type_ref),
        "description": field_def.description,
        "deprecation": field_def.deprecation,
        "args": [_arg_to_dict(arg) for arg in field_def.args],
        "middleware": [_function_name(handler) for handler, _ in field_def.middleware],
    }


def type_to_dict(definition: TypeDefinition) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "kind": definition.KIND,
        "identifier": definition.identifier,
        "name": definition.name,
        "description": definition.description,
        "module": definition.module,
        "imported": definition.is_imported,
    }
    if has_fields(definition):
        data["fields"] = [_field_to_dict(f) for f in definition.fields]
    if isinstance(definition, ObjectTypeDefinition):
        data["interfaces"] = list(definition.interfaces)
    if isinstance(definition, EnumTypeDefinition):
        data["values"] = [
            {"identifier": v.identifier, "name": v.name, "value": v.value, "deprecation": v.deprecation}
            for v in definition.values
        ]
    if isinstance(definition, UnionTypeDefinition):
        data["types"] = list(definition.member_types)
    if isinstance(definition, ScalarTypeDefinition):
        data["parse"] = _function_name(definition.parse)
        data["serialize"] = _function_name(definition.serialize)
    if isinstance(definition, DirectiveDefinition):
        data["locations"] = list(definition.locations)
        data["args"] = [_arg_to_dict(arg) for arg in definition.args]
    return data


@dataclass
class CompiledSchema:
    """Finalized result of compiling one schema module.

    ``toplevel_types`` is keyed by identifier and read-only. Deferred errors
    are carried in ``errors``; a schema with errors is not executable.
    """

    module_ref: Optional[str]
    toplevel_types: Mapping[str, TypeDefinition] = field(default_factory=dict)
    errors: Tuple["SchemaError", ...] = ()
    function_table: Optional["FunctionTable"] = None
    type_imports: List[TypeImport] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.toplevel_types, MappingProxyType):
            self.toplevel_types = MappingProxyType(dict(self.toplevel_types))
        self.errors = tuple(self.errors)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def lookup_type(self, identifier: str) -> Optional[TypeDefinition]:
        return self.toplevel_types.get(identifier)

    def lookup_function(self, category: str, type_identifier: str, attribute: str, default: Any = None) -> Any:
        if self.function_table is None:
            return default
        return self.function_table.lookup(category, type_identifier, attribute, default)

    def own_types(self) -> List[TypeDefinition]:
        """Types declared by this module, excluding imported ones."""
        return [d for d in self.toplevel_types.values() if not d.is_imported]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module": self.module_ref,
            "valid": self.is_valid,
            "imports": [
                {"module": imp.module_ref, "options": dict(imp.options)} for imp in self.type_imports
            ],
            "types": [type_to_dict(d) for d in self.toplevel_types.values()],
            "errors": [error.to_dict() for error in self.errors],
        }
