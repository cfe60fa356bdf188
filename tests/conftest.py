"""Shared fixtures: an event builder that mimics a notation front end."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional

import pytest

from schema_designer.file_io.source_location import SourceLocation
from schema_designer.models.declarations import (
    AttributeEvent,
    CloseEvent,
    DeclarationEvent,
    ImportFieldsEvent,
    ImportTypesEvent,
    OpenEvent,
)


class EventBuilder:
    """Builds declaration events with one source line per event."""

    def __init__(self, file_name: str = "accounts.schema.yaml") -> None:
        self.file_path = Path(file_name)
        self.events: List[DeclarationEvent] = []
        self._line = 0

    def _location(self) -> SourceLocation:
        self._line += 1
        return SourceLocation(file_path=self.file_path, line=self._line)

    def open(self, kind: str, identifier: Optional[str] = None, usage: Optional[str] = None,
             **raw_attrs: Any) -> "EventBuilder":
        self.events.append(OpenEvent(kind, identifier, raw_attrs, self._location(), usage))
        return self

    def close(self) -> "EventBuilder":
        self.events.append(CloseEvent(self._location()))
        return self

    def attr(self, kind: str, payload: Any = None) -> "EventBuilder":
        self.events.append(AttributeEvent(kind, payload, self._location()))
        return self

    def import_types(self, module_ref: str, **options: Any) -> "EventBuilder":
        self.events.append(ImportTypesEvent(module_ref, options, self._location()))
        return self

    def import_fields(self, source: str, **options: Any) -> "EventBuilder":
        self.events.append(ImportFieldsEvent(source, options, self._location()))
        return self

    @contextmanager
    def scope(self, kind: str, identifier: Optional[str] = None, **raw_attrs: Any) -> Iterator["EventBuilder"]:
        self.open(kind, identifier, **raw_attrs)
        yield self
        self.close()

    def field(self, identifier: str, type_ref: Any = "string", **raw_attrs: Any) -> "EventBuilder":
        """Open and close a field with no attributes."""
        return self.open("field", identifier, type=type_ref, **raw_attrs).close()

    def object(self, identifier: str, *field_identifiers: str, imports: tuple = ()) -> "EventBuilder":
        """Declare an object with plain fields and field imports."""
        with self.scope("object", identifier):
            for source in imports:
                self.import_fields(source)
            for field_identifier in field_identifiers:
                self.field(field_identifier)
        return self


@pytest.fixture
def events() -> EventBuilder:
    return EventBuilder()


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    yield
    package_logger = logging.getLogger("schema_designer")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_events():
    return EventBuilder
