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

"""Notation format versions.

Notation files declare ``schema_notation_format: MAJOR.MINOR.PATCH``. A file
is readable when its major version equals the compiler's. A newer minor
version is read with a warning, or rejected in strict mode. Patch versions
never matter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .. import NOTATION_FORMAT_VERSION
from ..exceptions import FormatVersionError


FORMAT_VERSION_FIELD = "schema_notation_format"

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True, order=True)
class SemanticVersion:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def reads(self, other: "SemanticVersion") -> bool:
        """Whether a compiler at this version can read files at ``other``."""
        return self.major == other.major


def parse_format_version(raw: str) -> SemanticVersion:
    """Parse ``0.1.0`` or ``v0.1.0``.

    Raises:
        FormatVersionError: If the string is not MAJOR.MINOR.PATCH
    """
    if not isinstance(raw, str):
        raise FormatVersionError(f"Format version must be a string, got {type(raw).__name__}: {raw!r}")

    m = _VERSION_RE.match(raw.strip())
    if m is None:
        raise FormatVersionError(f"Invalid format version string: '{raw}'. Expected 'MAJOR.MINOR.PATCH' (e.g. '0.1.0').")
    return SemanticVersion(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def get_supported_format_version() -> SemanticVersion:
    return parse_format_version(NOTATION_FORMAT_VERSION)


@dataclass(frozen=True)
class VersionCheckResult:
    compatible: bool
    message: str
    file_version: Optional[SemanticVersion] = None
    supported_version: Optional[SemanticVersion] = None
    minor_newer: bool = False
    missing: bool = False

    @property
    def needs_warning(self) -> bool:
        return self.compatible and (self.minor_newer or self.missing)

    @property
    def effective_version(self) -> SemanticVersion:
        """Version used to pick the bundled notation schema."""
        return self.file_version or self.supported_version


def check_format_version(raw_version: Optional[str], strict: bool = False) -> VersionCheckResult:
    """Check a declared format version against the compiler's.

    Args:
        raw_version: Value of ``schema_notation_format``, None when absent
        strict: Treat a newer minor version as incompatible
    """
    supported = get_supported_format_version()

    if raw_version is None:
        return VersionCheckResult(
            compatible=True,
            missing=True,
            message=f"Missing '{FORMAT_VERSION_FIELD}' field. Consider adding '{FORMAT_VERSION_FIELD}: {supported}'.",
            supported_version=supported,
        )

    try:
        declared = parse_format_version(raw_version)
    except FormatVersionError as exc:
        return VersionCheckResult(compatible=False, message=str(exc), supported_version=supported)

    if not supported.reads(declared):
        return VersionCheckResult(
            compatible=False,
            message=(
                f"Incompatible format version: file declares {declared} "
                f"but this compiler supports major version {supported.major} (supported: {supported})."
            ),
            file_version=declared,
            supported_version=supported,
        )

    if declared.minor > supported.minor:
        message = f"Format version {declared} is newer than the supported {supported}."
        if strict:
            message += " Strict format version checking is enabled."
        else:
            message += " Some notation may not be understood."
        return VersionCheckResult(
            compatible=not strict,
            minor_newer=True,
            message=message,
            file_version=declared,
            supported_version=supported,
        )

    return VersionCheckResult(
        compatible=True,
        message=f"Format version {declared} is compatible (supported: {supported}).",
        file_version=declared,
        supported_version=supported,
    )
