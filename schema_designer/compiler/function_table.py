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

"""Function and middleware table consulted by the query executor.

Keys are ``(category, type_identifier, attribute)``. Field middleware uses the
``field`` category with the field identifier as attribute.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Tuple

from ..middleware import map_get, pass_parent
from ..models.declarations import DeclarationKind
from ..models.definitions import (
    FieldDefinition,
    InterfaceTypeDefinition,
    MiddlewareEntry,
    ObjectTypeDefinition,
    ScalarTypeDefinition,
    TypeDefinition,
    UnionTypeDefinition,
)

logger = logging.getLogger(__name__)

FunctionKey = Tuple[str, str, str]


class FunctionCategory:
    SCALAR = "scalar"
    OBJECT = "object"
    FIELD = "field"
    INTERFACE = "interface"
    UNION = "union"


class FunctionTable(Mapping):
    """Read-only mapping from ``(category, type, attribute)`` to functions."""

    def __init__(self, entries: Mapping[FunctionKey, Any] = None):
        self._entries = MappingProxyType(dict(entries or {}))

    def lookup(self, category: str, type_identifier: str, attribute: str, default: Any = None) -> Any:
        return self._entries.get((category, type_identifier, attribute), default)

    def middleware(self, type_identifier: str, field_identifier: str) -> List[MiddlewareEntry]:
        return self.lookup(FunctionCategory.FIELD, type_identifier, field_identifier, [])

    def __getitem__(self, key: FunctionKey) -> Any:
        return self._entries[key]

    def __iter__(self) -> Iterator[FunctionKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FunctionTable):
            return dict(self._entries) == dict(other._entries)
        return NotImplemented

    def __repr__(self) -> str:
        return f"FunctionTable({len(self._entries)} entries)"


def default_middleware(field: FieldDefinition, owner_identifier: str) -> List[MiddlewareEntry]:
    if owner_identifier == DeclarationKind.SUBSCRIPTION:
        return [(pass_parent, {})]
    return [(map_get, {"key": field.identifier})]


class FunctionTableBuilder:
    """Builds the function table for finalized types."""

    def build_function_table(self, types: Iterable[TypeDefinition]) -> FunctionTable:
        entries: Dict[FunctionKey, Any] = {}
        for definition in types:
            entries.update(self._functions_for_type(definition))
        logger.debug(f"Built function table with {len(entries)} entries")
        return FunctionTable(entries)

    @staticmethod
    def _grab(definition: TypeDefinition, category: str, attributes: Iterable[str]) -> Dict[FunctionKey, Any]:
        entries = {}
        for attribute in attributes:
            value = getattr(definition, attribute)
            if value is not None:
                entries[(category, definition.identifier, attribute)] = value
        return entries

    def _functions_for_type(self, definition: TypeDefinition) -> Dict[FunctionKey, Any]:
        if isinstance(definition, ScalarTypeDefinition):
            return self._grab(definition, FunctionCategory.SCALAR, ("parse", "serialize"))

        if isinstance(definition, ObjectTypeDefinition):
            entries = self._grab(definition, FunctionCategory.OBJECT, ("is_type_of",))
            for field in definition.fields:
                chain = field.middleware or default_middleware(field, definition.identifier)
                entries[(FunctionCategory.FIELD, definition.identifier, field.identifier)] = list(chain)
            return entries

        if isinstance(definition, InterfaceTypeDefinition):
            return self._grab(definition, FunctionCategory.INTERFACE, ("resolve_type",))

        if isinstance(definition, UnionTypeDefinition):
            return self._grab(definition, FunctionCategory.UNION, ("resolve_type",))

        return {}


def build_function_table(types: Iterable[TypeDefinition]) -> FunctionTable:
    return FunctionTableBuilder().build_function_table(types)
