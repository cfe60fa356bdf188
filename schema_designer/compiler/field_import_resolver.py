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

import copy
import logging
from typing import Dict, List, Set, Tuple

from ..file_io.source_location import SourceLocation, UNKNOWN_LOCATION
from ..models.definitions import FieldDefinition, FieldImport, TypeDefinition, has_fields
from .errors import FieldImportCycleError, FieldImportError, SchemaError
from .type_import_merger import TypePool

logger = logging.getLogger(__name__)

_WHITE, _GREY, _BLACK = 0, 1, 2

Edge = Tuple[FieldImport, TypeDefinition]


class FieldImportResolver:
    """Resolves ``import_fields`` directives across a type pool.

    The resolved field list of a type is the keyed merge of the resolved
    fields of every type it imports from (in directive order) followed by its
    own fields. A later entry replaces an earlier one with the same identifier
    in place, so own fields always win and later imports win over earlier ones.
    """

    def _merge_fields(self, base: List[FieldDefinition], override: List[FieldDefinition]) -> List[FieldDefinition]:
        """Merge ``override`` into ``base`` keyed by field identifier."""
        if not override:
            return list(base)

        merged = list(base)
        index = {item.identifier: i for i, item in enumerate(merged)}
        for item in override:
            if item.identifier in index:
                merged[index[item.identifier]] = item
            else:
                index[item.identifier] = len(merged)
                merged.append(item)
        return merged

    @staticmethod
    def _select_fields(fields: List[FieldDefinition], field_import: FieldImport) -> List[FieldDefinition]:
        only = field_import.options.get("only")
        excluded = set(field_import.options.get("except") or [])
        selected = [f for f in fields if only is None or f.identifier in only]
        return [copy.deepcopy(f) for f in selected if f.identifier not in excluded]

    @staticmethod
    def _record(errors: List[SchemaError], definition: TypeDefinition, error: SchemaError) -> None:
        errors.append(error)
        if error not in definition.errors:
            definition.errors.append(error)

    def _build_edges(self, pool: TypePool, importers: List[TypeDefinition],
                     errors: List[SchemaError]) -> Dict[str, List[Edge]]:
        edges: Dict[str, List[Edge]] = {}
        for definition in importers:
            for field_import in definition.field_imports:
                source = pool.lookup(field_import.source)
                if source is None:
                    self._record(errors, definition, FieldImportError.missing_source(
                        definition.LABEL, definition.identifier, field_import.source, field_import.location))
                    continue
                if not has_fields(source):
                    self._record(errors, definition, FieldImportError.source_without_fields(
                        definition.LABEL, definition.identifier, field_import.source, field_import.location))
                    continue
                edges.setdefault(definition.identifier, []).append((field_import, source))
        return edges

    @staticmethod
    def _edge_location(edges: Dict[str, List[Edge]], importer: str, source: str) -> SourceLocation:
        for field_import, target in edges.get(importer, []):
            if target.identifier == source:
                return field_import.location
        return UNKNOWN_LOCATION

    def _walk(self, pool: TypePool, roots: List[str], edges: Dict[str, List[Edge]],
              errors: List[SchemaError]) -> Tuple[List[str], Set[str]]:
        """Depth-first walk with explicit on-stack marks.

        Returns the post-order of visited types and the set of types that
        sit on an import cycle.
        """
        state: Dict[str, int] = {}
        postorder: List[str] = []
        on_cycle: Set[str] = set()
        reported: Set[Tuple[str, ...]] = set()

        for root in roots:
            if state.get(root, _WHITE) != _WHITE:
                continue

            state[root] = _GREY
            path = [root]
            stack = [(root, iter(edges.get(root, [])))]
            while stack:
                node, pending = stack[-1]
                descended = False
                for _, source in pending:
                    target = source.identifier
                    target_state = state.get(target, _WHITE)
                    if target_state == _WHITE:
                        state[target] = _GREY
                        path.append(target)
                        stack.append((target, iter(edges.get(target, []))))
                        descended = True
                        break
                    if target_state == _GREY:
                        cycle = path[path.index(target):] + [target]
                        on_cycle.update(cycle)
                        if tuple(cycle) in reported:
                            continue
                        reported.add(tuple(cycle))
                        location = self._edge_location(edges, cycle[0], cycle[1])
                        self._record(errors, pool.lookup(cycle[0]),
                                     FieldImportCycleError.from_path(cycle, node, location))
                if not descended:
                    stack.pop()
                    path.pop()
                    state[node] = _BLACK
                    postorder.append(node)

        return postorder, on_cycle

    def resolve_field_imports(self, pool: TypePool) -> Tuple[TypePool, List[SchemaError]]:
        """Replace each importing type's fields with its resolved field set.

        Types imported from other modules were resolved when their own module
        was compiled; they serve as sources only.

        Returns:
            The same pool (mutated in place) and the deferred errors found
        """
        errors: List[SchemaError] = []
        importers = [d for d in pool.resolved_types() if has_fields(d) and not d.is_imported]

        edges = self._build_edges(pool, importers, errors)
        postorder, on_cycle = self._walk(pool, [d.identifier for d in importers], edges, errors)

        resolved: Dict[str, List[FieldDefinition]] = {}
        for identifier in postorder:
            definition = pool.lookup(identifier)
            if identifier in on_cycle or identifier not in edges:
                resolved[identifier] = list(definition.fields)
                continue

            merged: List[FieldDefinition] = []
            for field_import, source in edges[identifier]:
                source_fields = resolved.get(source.identifier, source.fields)
                merged = self._merge_fields(merged, self._select_fields(source_fields, field_import))
            resolved[identifier] = self._merge_fields(merged, definition.fields)

        for identifier, fields in resolved.items():
            definition = pool.lookup(identifier)
            if not definition.is_imported:
                definition.fields = fields

        logger.debug(f"Resolved field imports for {len(edges)} type(s) in {pool.module_ref}; {len(errors)} error(s)")
        return pool, errors


def resolve_field_imports(pool: TypePool) -> Tuple[TypePool, List[SchemaError]]:
    return FieldImportResolver().resolve_field_imports(pool)
