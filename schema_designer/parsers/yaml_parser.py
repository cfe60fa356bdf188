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

"""YAML notation parser with caching and source maps."""

import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Union, Tuple

from ..compiler.compiler_config import compiler_config
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

SourceMap = Dict[str, Dict[str, int]]


class YamlParser:
    """YAML parser with caching."""

    def __init__(self, cache_enabled: bool = None):
        """Initialize YAML parser.

        Args:
            cache_enabled: Whether to enable caching. If None, uses global config.
        """
        self.cache_enabled = cache_enabled if cache_enabled is not None else compiler_config.cache_enabled
        self._cache: Dict[Path, Dict[str, Any]] = {}
        self._source_cache: Dict[Path, SourceMap] = {}

    @staticmethod
    def _json_pointer_escape(token: str) -> str:
        # JSON Pointer escaping: "~" -> "~0", "/" -> "~1"
        return token.replace("~", "~0").replace("/", "~1")

    @classmethod
    def _build_source_map_from_yaml(cls, content: str) -> SourceMap:
        """Build a mapping from YAML JSON-pointer-like paths to 1-based line/column.

        This uses PyYAML's node tree (yaml.compose) so we can track locations without
        changing the parsed data shapes returned by safe_load.
        """
        source_map: SourceMap = {}

        try:
            root = yaml.compose(content, Loader=yaml.SafeLoader)
        except yaml.YAMLError:
            # Parsing errors are reported by safe_load.
            return source_map

        if root is None:
            return source_map

        def _record(path: str, node) -> None:
            mark = getattr(node, "start_mark", None)
            if mark is None:
                return
            # PyYAML uses 0-based line/column
            source_map[path] = {"line": int(mark.line) + 1, "column": int(mark.column) + 1}

        def _walk(node, path: str) -> None:
            _record(path, node)

            if isinstance(node, yaml.nodes.MappingNode):
                for key_node, value_node in node.value:
                    key = getattr(key_node, "value", None)
                    if key is None:
                        continue
                    child_path = f"{path}/{cls._json_pointer_escape(str(key))}"
                    _walk(value_node, child_path)
            elif isinstance(node, yaml.nodes.SequenceNode):
                for idx, item_node in enumerate(node.value):
                    _walk(item_node, f"{path}/{idx}")

        _walk(root, "")
        return source_map

    def load_with_source(self, file_path: Union[str, Path]) -> Tuple[Dict[str, Any], SourceMap]:
        """Load a YAML notation file and return (data, source_map).

        source_map keys are JSON-pointer-like YAML paths (e.g. "/types/0/fields/1").
        Values contain 1-based line/column.

        Raises:
            ValidationError: If the file cannot be read or parsed
        """
        path = Path(file_path)

        if not path.exists():
            raise ValidationError(f"Notation file not found: {path}")

        if not path.is_file():
            raise ValidationError(f"Path is not a file: {path}")

        if self.cache_enabled and path in self._cache and path in self._source_cache:
            logger.debug(f"Loading notation (with source) from cache: {path}")
            return self._cache[path], self._source_cache[path]

        logger.debug(f"Loading notation file (with source): {path}")
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ValidationError(f"Failed to read notation file {path}: {exc}")

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ValidationError(f"Failed to parse YAML file {path}: {exc}")

        if data is None:
            data = {}
        source_map = self._build_source_map_from_yaml(content)

        if self.cache_enabled:
            self._cache[path] = data
            self._source_cache[path] = source_map

        return data, source_map

    def load_string_with_source(self, content: str) -> Tuple[Dict[str, Any], SourceMap]:
        """Load YAML notation from string content and return (data, source_map)."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ValidationError(f"Failed to parse YAML content: {exc}")

        if data is None:
            data = {}
        return data, self._build_source_map_from_yaml(content)

    def clear_cache(self):
        """Clear the notation cache."""
        self._cache.clear()
        self._source_cache.clear()
        logger.debug("Notation cache cleared")


# Global parser instance
yaml_parser = YamlParser()
