from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

import jsonschema

from .json_schema_loader import NOTATION_DOCUMENT, load_schema


JsonPointer = str


@dataclass(frozen=True)
class SchemaIssue:
    message: str
    yaml_path: Optional[JsonPointer] = None


def _jp_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _pointer(path) -> JsonPointer:
    if not path:
        return ""
    return "/" + "/".join(_jp_escape(str(p)) for p in path)


def validate_against_schema(data: Any, *, format_version: str = None, json_schema_dict: dict = None) -> List[SchemaIssue]:
    """Validate a notation document against its JSON Schema.

    Args:
        data: Parsed YAML document
        format_version: Format version used to pick the bundled schema
        json_schema_dict: Explicit JSON Schema; takes precedence over ``format_version``

    Returns:
        List of SchemaIssue objects, ordered by document position
    """
    if not isinstance(data, dict):
        return [SchemaIssue(message="Root must be a mapping/object", yaml_path="")]

    schema = json_schema_dict
    if schema is None:
        try:
            schema = load_schema(NOTATION_DOCUMENT, format_version)
        except FileNotFoundError as e:
            return [SchemaIssue(message=str(e), yaml_path="")]

    validator_cls = jsonschema.validators.validator_for(schema)
    validator = validator_cls(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    return [SchemaIssue(message=e.message, yaml_path=_pointer(e.absolute_path)) for e in errors]


def format_schema_issues(issues: List[SchemaIssue]) -> str:
    return "\n".join(
        f"  - {i.message}" + (f" (yaml_path={i.yaml_path})" if i.yaml_path else "")
        for i in issues
    )
