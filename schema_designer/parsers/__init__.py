"""YAML notation front end.

This package only turns documents into declaration events; placement and
resolution belong to the compiler.
"""

from .notation_reader import NotationDocument, NotationReader, read_notation_file
from .notation_schema import SchemaIssue, validate_against_schema

__all__ = [
    "NotationDocument",
    "NotationReader",
    "SchemaIssue",
    "read_notation_file",
    "validate_against_schema",
]
