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

"""Custom exceptions for the schema designer compiler.

Only fail-fast conditions are exceptions. Deferred schema errors (missing
field-import sources, import cycles) are records collected on the compiled
schema, see :mod:`schema_designer.compiler.errors`.
"""


class SchemaDesignerError(Exception):
    """Base exception for schema-designer related errors."""

    def __init__(self, message: str, location=None):
        super().__init__(message)
        self.message = message
        self.location = location


class NotationError(SchemaDesignerError):
    """Exception raised for misplaced declarations and reserved identifiers."""
    pass


class TypeImportError(SchemaDesignerError):
    """Exception raised when an imported schema module cannot be resolved."""
    pass


class EventContractError(SchemaDesignerError):
    """Exception raised when the declaration event stream is malformed."""
    pass


class ValidationError(SchemaDesignerError):
    """Exception raised for notation document validation errors."""
    pass


class FormatVersionError(ValidationError):
    """Exception raised when a notation file's format version is incompatible."""
    pass
