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

"""Checker package: compiles notation files and reports their errors."""

import logging
from pathlib import Path
from typing import Dict, List

from ..compiler.compiler_config import CompilerConfig
from ..compiler.pipeline import SchemaCompiler, plan_documents
from ..exceptions import SchemaDesignerError
from ..parsers.notation_reader import NotationDocument, NotationReader
from ..parsers.yaml_parser import YamlParser
from .report import CheckResult

__all__ = ['check_files', 'CheckResult']

logger = logging.getLogger(__name__)


def check_files(file_paths: List[Path], config: CompilerConfig = None) -> List[CheckResult]:
    """Compile a list of notation files and collect their errors.

    Modules are compiled in import order with one shared registry, so a
    file may import types from any other file in the list.

    Args:
        file_paths: List of file paths to check

    Returns:
        List of CheckResult objects, one per file, in the given order
    """
    reader = NotationReader(parser=YamlParser(cache_enabled=False), config=config)
    results: Dict[Path, CheckResult] = {}
    documents: List[NotationDocument] = []

    for file_path in file_paths:
        result = CheckResult(file_path)
        results[Path(file_path)] = result
        try:
            document = reader.read_file(file_path)
        except SchemaDesignerError as e:
            result.add_exception(e)
            continue
        result.module_ref = document.module_ref
        documents.append(document)

    plan = plan_documents(documents)
    for document, error in plan.rejected:
        results[document.file_path].add_exception(error)

    compiler = SchemaCompiler(config=config)
    for document in plan.ordered:
        result = results[document.file_path]
        try:
            compiled = compiler.compile_document(document)
        except SchemaDesignerError as e:
            result.add_exception(e)
            continue
        for error in compiled.errors:
            result.add_schema_error(error)

    logger.debug(f"Checked {len(results)} file(s)")
    return list(results.values())
