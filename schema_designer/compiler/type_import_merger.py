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

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Tuple

from ..exceptions import SchemaDesignerError, TypeImportError
from ..file_io.source_location import format_source
from ..models.definitions import SchemaDefinition, TypeDefinition, TypeImport

if TYPE_CHECKING:
    from ..models.schema_graph import CompiledSchema

logger = logging.getLogger(__name__)

PoolKey = Tuple[Optional[str], str]


class ModuleRegistry:
    """Read-only view of already compiled schema modules, keyed by module reference.

    A module is registered once, when its compilation has finished; a module
    that is still being compiled can therefore never be imported.
    """

    def __init__(self, modules: Iterable["CompiledSchema"] = ()):
        self._modules: Dict[str, "CompiledSchema"] = {}
        for compiled in modules:
            self.register(compiled)

    def register(self, compiled: "CompiledSchema") -> None:
        if compiled.module_ref in self._modules:
            raise SchemaDesignerError(f"Module {compiled.module_ref} is already registered")
        logger.debug(f"Registering compiled module {compiled.module_ref}")
        self._modules[compiled.module_ref] = compiled

    def get(self, module_ref: str) -> "CompiledSchema":
        compiled = self._modules.get(module_ref)
        if compiled is None:
            available = sorted(self._modules)
            raise TypeImportError(f"Module {module_ref} is not available. Available modules: {available}")
        return compiled

    def __contains__(self, module_ref: object) -> bool:
        return module_ref in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    @property
    def module_refs(self) -> List[str]:
        return list(self._modules)


class TypePool:
    """Candidate types of one compiling module, keyed by ``(module, identifier)``.

    Lookups by identifier prefer the compiling module's own types, then the
    modules in the order their types entered the pool.
    """

    def __init__(self, module_ref: Optional[str] = None):
        self.module_ref = module_ref
        self._entries: Dict[PoolKey, TypeDefinition] = {}
        self._module_order: List[Optional[str]] = [module_ref]

    @classmethod
    def from_schema(cls, schema: SchemaDefinition) -> "TypePool":
        pool = cls(schema.module_ref)
        for definition in schema.types:
            pool.add(definition, schema.module_ref)
        return pool

    def add(self, definition: TypeDefinition, module: Optional[str] = None) -> bool:
        """Add ``definition`` unless the same module already contributed it."""
        key = (module, definition.identifier)
        if key in self._entries:
            return False
        if module not in self._module_order:
            self._module_order.append(module)
        self._entries[key] = definition
        return True

    def lookup(self, identifier: str) -> Optional[TypeDefinition]:
        for module in self._module_order:
            definition = self._entries.get((module, identifier))
            if definition is not None:
                return definition
        return None

    def identifiers(self) -> List[str]:
        seen: Dict[str, None] = {}
        for module in self._module_order:
            for entry_module, identifier in self._entries:
                if entry_module == module:
                    seen.setdefault(identifier)
        return list(seen)

    def resolved_types(self) -> List[TypeDefinition]:
        """One definition per identifier, in lookup precedence."""
        return [self.lookup(identifier) for identifier in self.identifiers()]

    def items(self) -> Iterator[Tuple[PoolKey, TypeDefinition]]:
        return iter(self._entries.items())

    def __contains__(self, identifier: object) -> bool:
        return self.lookup(identifier) is not None

    def __len__(self) -> int:
        return len(self._entries)


class TypeImportMerger:
    """Merges toplevel types of already compiled modules into a type pool."""

    def __init__(self, registry: ModuleRegistry):
        self.registry = registry

    def merge_imports(self, current_pool: TypePool, import_directives: Iterable[TypeImport]) -> TypePool:
        """Add the types named by ``import_directives`` to ``current_pool``.

        Raises:
            TypeImportError: If a referenced module has not been compiled
        """
        for directive in import_directives:
            try:
                compiled = self.registry.get(directive.module_ref)
            except TypeImportError as e:
                e.location = directive.location
                logger.error(f"{e}{format_source(directive.location)}")
                raise

            added = 0
            for definition in self._select(compiled, directive):
                imported = copy.deepcopy(definition)
                imported.flags["imported"] = True
                module = definition.module or compiled.module_ref
                if current_pool.add(imported, module):
                    added += 1
            logger.debug(f"Imported {added} type(s) from {directive.module_ref} into {current_pool.module_ref}")

        return current_pool

    @staticmethod
    def _select(compiled: "CompiledSchema", directive: TypeImport) -> List[TypeDefinition]:
        only = directive.options.get("only")
        excluded = set(directive.options.get("except") or [])
        definitions = list(compiled.toplevel_types.values())

        if only is not None:
            wanted = list(only)
            missing = [identifier for identifier in wanted if identifier not in compiled.toplevel_types]
            if missing:
                logger.warning(
                    f"import_types {directive.module_ref} names unknown type(s) {missing}{format_source(directive.location)}"
                )
            definitions = [d for d in definitions if d.identifier in wanted]

        return [d for d in definitions if d.identifier not in excluded]
