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

"""Reader that turns YAML notation documents into declaration events.

A notation document looks like::

    schema_notation_format: 0.1.0
    module: accounts
    import_types:
      - module: common
        only: [node]
    types:
      - desc: A registered user.
      - object: user
        interface: node
        import_fields: [timestamps]
        fields:
          - field: id
            type: {non_null: id}
          - field: name
            type: string
            resolve: accounts.resolvers.user_name

Each entry of ``types``, ``fields``, ``args`` and ``values`` is a mapping whose
first declaration keyword (``object``, ``field``, ...) opens a scope. The other
keys become attributes of that scope, in document order. Entries without a
declaration keyword only carry attributes (``desc`` for the next entry).
Placement is not checked here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..compiler.compiler_config import CompilerConfig, compiler_config
from ..exceptions import FormatVersionError, ValidationError
from ..file_io.source_location import SourceLocation, format_source, lookup_source
from ..models.declarations import (
    AttributeEvent,
    AttributeKind,
    CloseEvent,
    DeclarationEvent,
    DeclarationKind,
    ImportFieldsEvent,
    ImportTypesEvent,
    ListOf,
    NonNull,
    OpenEvent,
    TypeRef,
)
from ..utils.format_version import FORMAT_VERSION_FIELD, check_format_version
from .notation_schema import format_schema_issues, validate_against_schema
from .yaml_parser import SourceMap, YamlParser, yaml_parser

logger = logging.getLogger(__name__)

# Keys passed to the open event as raw declaration arguments.
RAW_ARGUMENT_KEYS = ("name", "type", "default_value", "as")

# Keys holding nested declaration entries.
CHILD_LIST_KEYS = ("fields", "args", "values")

IMPORT_FIELDS_KEY = "import_fields"

_IMPORT_OPTION_KEYS = ("only", "except")


@dataclass
class NotationDocument:
    """Declaration events read from one notation document."""

    module_ref: str
    events: List[DeclarationEvent] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)
    file_path: Optional[Path] = None
    format_version: Optional[str] = None
    location: Optional[SourceLocation] = None


def to_type_ref(value: Any) -> Optional[TypeRef]:
    """Convert the YAML form of a type reference (``{non_null: {list_of: id}}``)."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        if "non_null" in value:
            return NonNull(to_type_ref(value["non_null"]))
        if "list_of" in value:
            return ListOf(to_type_ref(value["list_of"]))
    raise ValidationError(f"Invalid type reference: {value!r}")


def _declaration_head(entry: Mapping[str, Any]) -> Optional[str]:
    """Pick the declaration keyword that opens ``entry``.

    ``interface`` is also the attribute form on objects, so any other
    declaration keyword takes precedence over it regardless of key order.
    """
    keywords = [key for key in entry if key in DeclarationKind.get_all_kinds()]
    if not keywords:
        return None
    others = [key for key in keywords if key != DeclarationKind.INTERFACE]
    return others[0] if others else keywords[0]


class _EventEmitter:
    """Walks one document and emits its declaration events in order."""

    def __init__(self, source_map: Optional[SourceMap], file_path: Optional[Path]):
        self.source_map = source_map
        self.file_path = file_path
        self.events: List[DeclarationEvent] = []

    def location(self, yaml_path: str) -> SourceLocation:
        return lookup_source(self.source_map, yaml_path, self.file_path)

    def emit_type_imports(self, items: List[Any]) -> List[str]:
        modules = []
        for idx, item in enumerate(items):
            if isinstance(item, str):
                module_ref, options = item, {}
            else:
                module_ref = item["module"]
                options = {key: list(item[key]) for key in _IMPORT_OPTION_KEYS if key in item}
            modules.append(module_ref)
            self.events.append(ImportTypesEvent(module_ref, options, self.location(f"/import_types/{idx}")))
        return modules

    def emit_entry(self, entry: Any, path: str) -> None:
        if not isinstance(entry, Mapping):
            raise ValidationError(f"Notation entry must be a mapping, got: {entry!r}", self.location(path))

        head = _declaration_head(entry)
        if head is None:
            for key, value in entry.items():
                self._emit_key(key, value, f"{path}/{key}")
            return

        identifier = entry[head]
        if identifier is None and head in DeclarationKind.ROOTS:
            identifier = head
        raw_attrs = {key: entry[key] for key in RAW_ARGUMENT_KEYS if key in entry}
        if "type" in raw_attrs:
            raw_attrs["type"] = to_type_ref(raw_attrs["type"])

        self.events.append(OpenEvent(head, identifier, raw_attrs, self.location(path)))
        for key, value in entry.items():
            if key == head or key in RAW_ARGUMENT_KEYS:
                continue
            self._emit_key(key, value, f"{path}/{key}", head)
        self.events.append(CloseEvent(self.location(path)))

    def _emit_key(self, key: str, value: Any, path: str, head: Optional[str] = None) -> None:
        location = self.location(path)

        if key in CHILD_LIST_KEYS:
            for idx, item in enumerate(value or []):
                if isinstance(item, Mapping):
                    self.emit_entry(item, f"{path}/{idx}")
                elif key == "values":
                    self.events.append(AttributeEvent(AttributeKind.VALUES, [item], self.location(f"{path}/{idx}")))
                else:
                    raise ValidationError(f"`{key}` entries must be mappings, got: {item!r}", location)
            return

        if key == IMPORT_FIELDS_KEY:
            items = value if isinstance(value, list) else [value]
            for idx, item in enumerate(items):
                item_location = self.location(f"{path}/{idx}") if isinstance(value, list) else location
                if isinstance(item, str):
                    source, options = item, {}
                else:
                    source = item["source"]
                    options = {k: list(item[k]) for k in _IMPORT_OPTION_KEYS if k in item}
                self.events.append(ImportFieldsEvent(source, options, item_location))
            return

        if key == DeclarationKind.INTERFACE:
            self.events.append(AttributeEvent(AttributeKind.INTERFACE_ATTRIBUTE, value, location))
            return

        if key == AttributeKind.MIDDLEWARE and isinstance(value, list):
            for item in value:
                self.events.append(AttributeEvent(AttributeKind.MIDDLEWARE, item, location))
            return

        if key in AttributeKind.get_all_kinds():
            self.events.append(AttributeEvent(key, value, location))
            return

        if key in DeclarationKind.get_all_kinds():
            raise ValidationError(
                f"Entry declares more than one of the keywords, found extra '{key}' next to '{head}'", location
            )

        raise ValidationError(f"Unknown notation key '{key}'", location)


class NotationReader:
    """Reads notation files into :class:`NotationDocument` event streams."""

    def __init__(self, parser: YamlParser = None, config: CompilerConfig = None):
        self.parser = parser if parser is not None else yaml_parser
        self.config = config if config is not None else compiler_config

    def read_file(self, file_path: Union[str, Path]) -> NotationDocument:
        path = Path(file_path)
        data, source_map = self.parser.load_with_source(path)
        return self.read_data(data, source_map, path)

    def read_string(self, content: str, file_path: Union[str, Path, None] = None) -> NotationDocument:
        data, source_map = self.parser.load_string_with_source(content)
        return self.read_data(data, source_map, Path(file_path) if file_path is not None else None)

    def _check_format_version(self, data: Dict[str, Any], location: SourceLocation) -> str:
        raw = data.get(FORMAT_VERSION_FIELD)
        result = check_format_version(None if raw is None else str(raw), strict=self.config.strict_format_version)

        if not result.compatible:
            logger.error(f"{result.message}{format_source(location)}")
            raise FormatVersionError(result.message, location)
        if result.needs_warning:
            logger.warning(f"{result.message}{format_source(location)}")

        return str(result.effective_version)

    def read_data(self, data: Any, source_map: Optional[SourceMap] = None,
                  file_path: Optional[Path] = None) -> NotationDocument:
        """Validate a parsed document and emit its declaration events.

        Raises:
            FormatVersionError: If the declared format version is incompatible
            ValidationError: If the document does not match the notation schema
        """
        emitter = _EventEmitter(source_map, file_path)
        document_location = emitter.location("")
        source_name = file_path if file_path is not None else "<string>"

        if not isinstance(data, dict):
            raise ValidationError(f"Notation document must be a mapping: {source_name}", document_location)

        version = self._check_format_version(data, emitter.location(f"/{FORMAT_VERSION_FIELD}"))

        issues = validate_against_schema(data, format_version=version)
        if issues:
            details = format_schema_issues(issues)
            location = emitter.location(issues[0].yaml_path)
            logger.error(f"Schema validation failed for {source_name}{format_source(location)}")
            raise ValidationError(f"Schema validation failed for {source_name}:\n{details}", location)

        module_ref = data["module"]
        imports = emitter.emit_type_imports(data.get("import_types") or [])
        for idx, entry in enumerate(data.get("types") or []):
            emitter.emit_entry(entry, f"/types/{idx}")

        logger.debug(f"Read {len(emitter.events)} declaration event(s) for module {module_ref} from {source_name}")
        return NotationDocument(
            module_ref=module_ref,
            events=emitter.events,
            imports=imports,
            file_path=file_path,
            format_version=version,
            location=document_location,
        )


def read_notation_file(file_path: Union[str, Path]) -> NotationDocument:
    return NotationReader().read_file(file_path)
