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

"""JSON Schema loader for schema_notation_format validation."""

import json
from pathlib import Path
from typing import Dict, List

from ..exceptions import FormatVersionError
from ..utils.format_version import SemanticVersion, parse_format_version


NOTATION_DOCUMENT = "notation"

# Schema cache to avoid reloading files
_SCHEMA_CACHE: Dict[str, dict] = {}


def get_schema_dir() -> Path:
    return Path(__file__).parent.parent / "schema"


def get_schema_path(document_type: str, version: str) -> Path:
    """Get the path to a JSON Schema file for the given document type and version.

    Args:
        document_type: Document type (notation)
        version: Format version string (e.g., "0.1.0")

    Returns:
        Path to the schema file
    """
    return get_schema_dir() / version / f"{document_type}.json"


def _available_versions(document_type: str, major: int) -> List[SemanticVersion]:
    versions = []
    for version_dir in get_schema_dir().iterdir():
        if not version_dir.is_dir():
            continue
        try:
            dir_version = parse_format_version(version_dir.name)
        except FormatVersionError:
            # Skip directories that don't match the version pattern
            continue
        if dir_version.major == major and (version_dir / f"{document_type}.json").exists():
            versions.append(dir_version)
    return versions


def resolve_schema_version(document_type: str, version: str) -> str:
    """Resolve the schema version to the closest available one within the same major version.

    Version resolution rules:
    - Major version must match exactly
    - If exact version exists, use it
    - Otherwise prefer the same minor version (largest patch), then the closest
      larger minor version, then the largest available version

    Returns:
        Resolved version string that exists, or the original version if none found
    """
    try:
        parsed_version = parse_format_version(version)
    except FormatVersionError:
        return version

    if get_schema_path(document_type, version).exists():
        return version

    available_versions = _available_versions(document_type, parsed_version.major)
    if not available_versions:
        # No schemas found for this major version, return original (will cause error)
        return version

    same_minor_versions = [v for v in available_versions if v.minor == parsed_version.minor]
    if same_minor_versions:
        return str(max(same_minor_versions, key=lambda v: v.patch))

    larger_minor_versions = [v for v in available_versions if v.minor > parsed_version.minor]
    if larger_minor_versions:
        min_larger_minor = min(v.minor for v in larger_minor_versions)
        closest = [v for v in larger_minor_versions if v.minor == min_larger_minor]
        return str(max(closest, key=lambda v: v.patch))

    return str(max(available_versions, key=lambda v: (v.minor, v.patch)))


def load_schema(document_type: str, version: str) -> dict:
    """Load a JSON Schema file for the given document type and version.

    Raises:
        FileNotFoundError: If the schema file doesn't exist
        json.JSONDecodeError: If the schema file is invalid JSON
    """
    resolved_version = resolve_schema_version(document_type, version)

    cache_key = f"{document_type}-v{resolved_version}"
    if cache_key in _SCHEMA_CACHE:
        return _SCHEMA_CACHE[cache_key]

    schema_path = get_schema_path(document_type, resolved_version)
    if not schema_path.exists():
        raise FileNotFoundError(
            f"Schema file not found for {document_type} version {version} "
            f"(resolved to {resolved_version}): {schema_path}"
        )

    try:
        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)
    except json.JSONDecodeError as e:
        raise json.JSONDecodeError(
            f"Invalid JSON in schema file {schema_path}: {e.msg}",
            e.doc,
            e.pos,
        ) from e

    _SCHEMA_CACHE[cache_key] = schema
    return schema


def clear_cache() -> None:
    """Clear the schema cache. Useful for testing."""
    _SCHEMA_CACHE.clear()
