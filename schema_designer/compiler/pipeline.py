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

"""Compilation pipeline for schema modules.

One module is compiled in a single pass followed by fix-ups::

    events -> assemble -> merge type imports -> resolve field imports
           -> build function table -> CompiledSchema

Placement, reserved identifier and module import failures abort the module
by raising; everything else is collected on ``CompiledSchema.errors``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..exceptions import TypeImportError
from ..file_io.source_location import format_source
from ..models.declarations import DeclarationEvent
from ..models.schema_graph import CompiledSchema
from ..parsers.notation_reader import NotationDocument, NotationReader
from .assembler import ScopeStackAssembler
from .compiler_config import CompilerConfig, compiler_config
from .errors import ErrorCollector
from .field_import_resolver import FieldImportResolver
from .function_table import FunctionTableBuilder
from .type_import_merger import ModuleRegistry, TypeImportMerger, TypePool

logger = logging.getLogger(__name__)


class SchemaCompiler:
    """Compiles schema modules against a shared registry of compiled modules."""

    def __init__(self, registry: ModuleRegistry = None, config: CompilerConfig = None):
        self.registry = registry if registry is not None else ModuleRegistry()
        self.config = config if config is not None else compiler_config
        self.resolver = FieldImportResolver()
        self.function_table_builder = FunctionTableBuilder()

    def compile(self, module_ref: Optional[str], events: Iterable[DeclarationEvent],
                register: bool = True) -> CompiledSchema:
        """Compile one module's declaration events.

        Args:
            module_ref: Reference other modules use to import this one
            events: Declaration events in source order
            register: Make the result importable by later compilations

        Returns:
            The compiled schema, carrying any deferred errors

        Raises:
            NotationError: On misplaced declarations or reserved identifiers
            TypeImportError: When an imported module has not been compiled
            EventContractError: When the event stream is malformed
        """
        logger.debug(f"Compiling module {module_ref}")
        collector = ErrorCollector()

        schema, assembly_errors = ScopeStackAssembler(module_ref).assemble(events)
        collector.extend(assembly_errors)

        pool = TypePool.from_schema(schema)
        TypeImportMerger(self.registry).merge_imports(pool, schema.type_imports)

        pool, resolution_errors = self.resolver.resolve_field_imports(pool)
        collector.extend(resolution_errors)

        types = pool.resolved_types()
        function_table = self.function_table_builder.build_function_table(types)

        compiled = CompiledSchema(
            module_ref=module_ref,
            toplevel_types={definition.identifier: definition for definition in types},
            errors=collector.errors,
            function_table=function_table,
            type_imports=list(schema.type_imports),
        )

        if register and module_ref is not None:
            self.registry.register(compiled)

        status = "valid" if compiled.is_valid else f"{len(compiled.errors)} error(s)"
        logger.info(f"Compiled module {module_ref}: {len(types)} type(s), {status}")
        return compiled

    def compile_document(self, document: NotationDocument, register: bool = True) -> CompiledSchema:
        return self.compile(document.module_ref, document.events, register=register)


def compile_schema(events: Iterable[DeclarationEvent], module_ref: Optional[str] = None,
                   registry: ModuleRegistry = None, config: CompilerConfig = None) -> CompiledSchema:
    """Compile one module; the result is registered when ``registry`` is given."""
    compiler = SchemaCompiler(registry, config)
    return compiler.compile(module_ref, events, register=registry is not None)


@dataclass
class DocumentPlan:
    """Compile order for a set of documents.

    ``rejected`` holds the documents that cannot be compiled (duplicate
    modules, members of an import cycle) with the error explaining why.
    """

    ordered: List[NotationDocument] = field(default_factory=list)
    rejected: List[Tuple[NotationDocument, TypeImportError]] = field(default_factory=list)


def plan_documents(documents: Iterable[NotationDocument]) -> DocumentPlan:
    """Order documents so every module comes after the modules it imports.

    Imports of modules outside ``documents`` are left to the registry. Input
    order is kept where imports do not force otherwise. Modules on an import
    cycle are rejected; modules importing them stay in the order and fail
    when they are compiled.
    """
    plan = DocumentPlan()
    by_module: Dict[str, NotationDocument] = {}
    for document in documents:
        if document.module_ref in by_module:
            message = (
                f"Module {document.module_ref} is defined more than once "
                f"({by_module[document.module_ref].file_path} and {document.file_path})"
            )
            logger.error(f"{message}{format_source(document.location)}")
            plan.rejected.append((document, TypeImportError(message, document.location)))
            continue
        by_module[document.module_ref] = document

    done = set()
    cyclic = set()
    visiting: List[str] = []

    def _visit(module_ref: str) -> None:
        if module_ref in done:
            return
        if module_ref in visiting:
            cycle = visiting[visiting.index(module_ref):] + [module_ref]
            document = by_module[module_ref]
            message = (
                f"Module {module_ref} cannot be imported while it is being compiled; "
                f"import_types forms a cycle via: ({' => '.join(cycle)})"
            )
            logger.error(f"{message}{format_source(document.location)}")
            for member in cycle[:-1]:
                if member not in cyclic:
                    cyclic.add(member)
                    member_document = by_module[member]
                    plan.rejected.append((member_document, TypeImportError(message, member_document.location)))
            return

        visiting.append(module_ref)
        for imported in by_module[module_ref].imports:
            if imported in by_module:
                _visit(imported)
        visiting.pop()
        done.add(module_ref)
        if module_ref not in cyclic:
            plan.ordered.append(by_module[module_ref])

    for module_ref in by_module:
        _visit(module_ref)
    return plan


def order_documents(documents: Iterable[NotationDocument]) -> List[NotationDocument]:
    """Like :func:`plan_documents`, but every rejection is fatal.

    Raises:
        TypeImportError: On duplicate module references or a module import cycle
    """
    plan = plan_documents(documents)
    if plan.rejected:
        raise plan.rejected[0][1]
    return plan.ordered


def compile_files(paths: Iterable[Union[str, Path]], registry: ModuleRegistry = None,
                  config: CompilerConfig = None) -> Dict[str, CompiledSchema]:
    """Read notation files and compile them in import order.

    Returns:
        Compiled schemas keyed by module reference, in compilation order
    """
    config = config if config is not None else compiler_config
    reader = NotationReader(config=config)
    documents = [reader.read_file(path) for path in paths]

    compiler = SchemaCompiler(registry, config)
    compiled: Dict[str, CompiledSchema] = {}
    for document in order_documents(documents):
        compiled[document.module_ref] = compiler.compile_document(document)
    return compiled
