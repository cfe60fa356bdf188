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

"""Error reporting for the schema checker."""

from pathlib import Path
from typing import List, Dict, Any, Optional

from ..compiler.errors import SchemaError
from ..exceptions import SchemaDesignerError
from ..file_io.source_location import SourceLocation


class CheckResult:
    """Container for check results for a single notation file."""

    def __init__(self, file_path: Path, module_ref: Optional[str] = None):
        """Initialize check result.

        Args:
            file_path: Path to the file being checked
            module_ref: Module declared by the file, once known
        """
        self.file_path = file_path
        self.module_ref = module_ref
        self.errors: List[Dict[str, Any]] = []
        self.warnings: List[Dict[str, Any]] = []

    @staticmethod
    def _entry(
        message: str,
        line: Optional[int],
        column: Optional[int],
        yaml_path: Optional[str],
        rule: Optional[str],
    ) -> Dict[str, Any]:
        entry: Dict[str, Any] = {'message': message}
        if line is not None:
            entry['line'] = line
        if column is not None:
            entry['column'] = column
        if yaml_path is not None:
            entry['yaml_path'] = yaml_path
        if rule:
            entry['rule'] = rule
        return entry

    def add_error(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        yaml_path: Optional[str] = None,
        rule: Optional[str] = None,
    ):
        """Add an error message.

        Args:
            message: Error message
            line: Optional line number where error occurred
            rule: Optional name of the check that failed
        """
        self.errors.append(self._entry(message, line, column, yaml_path, rule))

    def add_warning(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        yaml_path: Optional[str] = None,
    ):
        """Add a warning message."""
        self.warnings.append(self._entry(message, line, column, yaml_path, None))

    def add_located_error(self, message: str, location: Optional[SourceLocation], rule: Optional[str] = None):
        if location is None:
            self.add_error(message, rule=rule)
            return
        self.add_error(message, line=location.line, column=location.column, yaml_path=location.yaml_path, rule=rule)

    def add_schema_error(self, error: SchemaError):
        """Add a deferred error collected on a compiled schema."""
        self.add_located_error(error.message, error.location, rule=error.rule)

    def add_exception(self, exc: SchemaDesignerError):
        """Add an immediate failure raised while reading or compiling."""
        self.add_located_error(exc.message, exc.location, rule=type(exc).__name__)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file': str(self.file_path),
            'module': self.module_ref,
            'errors': self.errors,
            'warnings': self.warnings,
        }
