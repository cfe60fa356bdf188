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

"""Deferred schema errors and their collector.

These are records, not exceptions: they are attached to the compiled schema
and never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Tuple

from ..file_io.source_location import SourceLocation, UNKNOWN_LOCATION, format_source
from ..utils.naming import format_identifier, quote_identifier

logger = logging.getLogger(__name__)


class Rule:
    """Identifiers of the checks that produce deferred errors."""

    FIELD_IMPORTS_EXIST = "field-imports-exist"
    NO_CIRCULAR_FIELD_IMPORTS = "no-circular-field-imports"
    UNIQUE_IDENTIFIERS = "unique-identifiers"

    DESCRIPTIONS = {
        FIELD_IMPORTS_EXIST: "field imports must reference an existing type",
        NO_CIRCULAR_FIELD_IMPORTS: "field imports must not form a cycle",
        UNIQUE_IDENTIFIERS: "identifiers must be unique within their scope",
    }

    @classmethod
    def describe(cls, rule: str) -> str:
        return cls.DESCRIPTIONS.get(rule, rule)


@dataclass(frozen=True)
class ErrorData:
    artifact: str
    value: Any = None


@dataclass(frozen=True)
class SchemaError:
    data: ErrorData
    location: SourceLocation = UNKNOWN_LOCATION
    rule: str = ""

    @property
    def message(self) -> str:
        return self.data.artifact

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": {"artifact": self.data.artifact, "value": self.data.value},
            "location": self.location.to_dict(),
            "rule": self.rule,
        }


class FieldImportError(SchemaError):
    """A type imports fields from a type that is not in the schema."""

    @classmethod
    def missing_source(cls, importer_label: str, importer: str, source: str,
                       location: SourceLocation) -> "FieldImportError":
        artifact = (
            "Field Import Error\n\n"
            f"{importer_label} {format_identifier(importer)} imports fields from {format_identifier(source)} but\n"
            f"{format_identifier(source)} does not exist in the schema!"
        )
        return cls(ErrorData(artifact, source), location, Rule.FIELD_IMPORTS_EXIST)

    @classmethod
    def source_without_fields(cls, importer_label: str, importer: str, source: str,
                              location: SourceLocation) -> "FieldImportError":
        artifact = (
            "Field Import Error\n\n"
            f"{importer_label} {format_identifier(importer)} imports fields from {format_identifier(source)} but\n"
            f"{format_identifier(source)} is not a type with fields!"
        )
        return cls(ErrorData(artifact, source), location, Rule.FIELD_IMPORTS_EXIST)


class FieldImportCycleError(SchemaError):
    """Field imports that lead back to the importing type."""

    @classmethod
    def from_path(cls, path: List[str], closed_by: str, location: SourceLocation) -> "FieldImportCycleError":
        """Build the error for ``path`` (first element repeated at the end)."""
        cycle = " => ".join(quote_identifier(node) for node in path)
        artifact = (
            "Field Import Cycle Error\n\n"
            f"Field Import in object {quote_identifier(path[0])} "
            f"`import_fields({format_identifier(path[1])}) forms a cycle via: ({cycle})"
        )
        return cls(ErrorData(artifact, closed_by), location, Rule.NO_CIRCULAR_FIELD_IMPORTS)


class DuplicateIdentifierError(SchemaError):
    """Two sibling declarations share one identifier; the later one is kept."""

    @classmethod
    def for_child(cls, owner: str, child_kind: str, identifier: str,
                  location: SourceLocation) -> "DuplicateIdentifierError":
        artifact = (
            "Duplicate Identifier Error\n\n"
            f"{owner} declares {child_kind} {format_identifier(identifier)} more than once; "
            "the last declaration is used."
        )
        return cls(ErrorData(artifact, identifier), location, Rule.UNIQUE_IDENTIFIERS)


class ErrorCollector:
    """Ordered accumulator of deferred schema errors."""

    def __init__(self, errors: Iterable[SchemaError] = ()):
        self._errors: List[SchemaError] = list(errors)

    def add(self, error: SchemaError) -> None:
        """Record an error.

        Args:
            error: Deferred error record; it is logged at warning level with its source
        """
        logger.warning(f"{Rule.describe(error.rule)}: {error.data.artifact}{format_source(error.location)}")
        self._errors.append(error)

    def extend(self, errors: Iterable[SchemaError]) -> None:
        for error in errors:
            self.add(error)

    @property
    def errors(self) -> Tuple[SchemaError, ...]:
        return tuple(self._errors)

    def by_rule(self, rule: str) -> List[SchemaError]:
        return [error for error in self._errors if error.rule == rule]

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self) -> Iterator[SchemaError]:
        return iter(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)
