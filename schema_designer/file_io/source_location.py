from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class SourceLocation:
    file_path: Optional[Path] = None
    line: Optional[int] = None  # 1-based
    column: Optional[int] = None  # 1-based
    yaml_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": str(self.file_path) if self.file_path is not None else None,
            "line": self.line,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SourceLocation":
        """Build a location from the ``{file, line}`` form of the event stream contract."""
        if not data:
            return cls()
        file_path = data.get("file")
        return cls(
            file_path=Path(file_path) if file_path is not None else None,
            line=data.get("line"),
            column=data.get("column"),
        )


UNKNOWN_LOCATION = SourceLocation()


def lookup_source(
    source_map: Optional[Dict[str, Dict[str, int]]],
    yaml_path: Optional[str],
    file_path: Optional[Path] = None,
) -> SourceLocation:
    if not source_map or yaml_path is None:
        return SourceLocation(file_path=file_path, yaml_path=yaml_path)

    entry = source_map.get(yaml_path)
    if not entry:
        return SourceLocation(file_path=file_path, yaml_path=yaml_path)

    return SourceLocation(
        file_path=file_path,
        line=entry.get("line"),
        column=entry.get("column"),
        yaml_path=yaml_path,
    )


def _infer_workspace_root(path: Path) -> Optional[Path]:
    """Infer a reasonable workspace root to make paths relative."""

    env_root = os.environ.get("SCHEMA_DESIGNER_SOURCE_ROOT")
    if env_root:
        return Path(env_root)

    parts = path.parts
    for marker in ("src", "schemas"):
        try:
            idx = parts.index(marker)
        except ValueError:
            continue
        if idx <= 0:
            return None
        return Path(*parts[:idx])

    return None


def _format_file_path(path: Path) -> str:
    root = _infer_workspace_root(path)
    if not root:
        return str(path)

    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def format_source(loc: Optional[SourceLocation]) -> str:
    if not loc:
        return ""

    parts = []
    if loc.file_path is not None:
        file_path = _format_file_path(loc.file_path)
        if loc.line is not None and loc.column is not None:
            parts.append(f"source= {file_path}:{loc.line}:{loc.column} ")
        elif loc.line is not None:
            parts.append(f"source= {file_path}:{loc.line} ")
        else:
            parts.append(f"source= {file_path} ")

    if loc.yaml_path:
        parts.append(f"yaml_path={loc.yaml_path}")

    if not parts:
        return ""

    return " (" + " ".join(parts) + ")"
