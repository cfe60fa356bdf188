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

"""Placement rules: which declarations may appear in which scopes.

Rules are keyed by *usage*, the keyword used at the declaration site, not by
the resulting definition kind. ``interface`` declares a toplevel interface
while ``interface_attribute`` (the one-argument form inside an object)
declares that the object implements one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from ..exceptions import NotationError
from ..file_io.source_location import SourceLocation
from ..models.declarations import AttributeKind, DeclarationKind, IMPORT_FIELDS, IMPORT_TYPES

NOTATION_ERROR_PREFIX = "Invalid schema notation: "


@dataclass(frozen=True)
class PlacementRule:
    """Either ``toplevel`` is set (True: only toplevel, False: never toplevel)
    or ``under`` lists the parent kinds the usage must be directly inside.
    Neither set means the usage is allowed anywhere."""

    toplevel: Optional[bool] = None
    under: FrozenSet[str] = frozenset()

    def allows(self, parent_kind: Optional[str]) -> bool:
        if self.toplevel is True:
            return parent_kind is None
        if self.toplevel is False:
            return parent_kind is not None
        if self.under:
            return parent_kind in self.under
        return True

    def describe(self) -> str:
        if self.toplevel is True:
            return "must only be used toplevel"
        if self.toplevel is False:
            return "must not be used toplevel"
        if self.under:
            return "must only be used within " + ", ".join(f"`{kind}`" for kind in sorted(self.under))
        return "may be used anywhere"


def _toplevel() -> PlacementRule:
    return PlacementRule(toplevel=True)


def _under(*parents: str) -> PlacementRule:
    return PlacementRule(under=frozenset(parents))


_FIELD_OWNERS = (DeclarationKind.INPUT_OBJECT, DeclarationKind.INTERFACE, DeclarationKind.OBJECT)
_META_OWNERS = (
    DeclarationKind.ENUM,
    DeclarationKind.FIELD,
    DeclarationKind.INPUT_OBJECT,
    DeclarationKind.INTERFACE,
    DeclarationKind.OBJECT,
    DeclarationKind.SCALAR,
    DeclarationKind.UNION,
)

PLACEMENT_RULES: Dict[str, PlacementRule] = {
    # scoped declarations
    DeclarationKind.OBJECT: _toplevel(),
    DeclarationKind.INTERFACE: _toplevel(),
    DeclarationKind.INPUT_OBJECT: _toplevel(),
    DeclarationKind.SCALAR: _toplevel(),
    DeclarationKind.ENUM: _toplevel(),
    DeclarationKind.UNION: _toplevel(),
    DeclarationKind.DIRECTIVE: _toplevel(),
    DeclarationKind.QUERY: _toplevel(),
    DeclarationKind.MUTATION: _toplevel(),
    DeclarationKind.SUBSCRIPTION: _toplevel(),
    DeclarationKind.FIELD: _under(*_FIELD_OWNERS),
    DeclarationKind.ARG: _under(DeclarationKind.DIRECTIVE, DeclarationKind.FIELD),
    DeclarationKind.VALUE: _under(DeclarationKind.ENUM),
    # imports
    IMPORT_TYPES: _toplevel(),
    IMPORT_FIELDS: _under(*_FIELD_OWNERS),
    # attributes
    AttributeKind.DESCRIPTION: PlacementRule(toplevel=False),
    AttributeKind.DESC: PlacementRule(),
    AttributeKind.INTERFACES: _under(DeclarationKind.OBJECT),
    AttributeKind.INTERFACE_ATTRIBUTE: _under(DeclarationKind.OBJECT),
    AttributeKind.IS_TYPE_OF: _under(DeclarationKind.OBJECT),
    AttributeKind.RESOLVE: _under(DeclarationKind.FIELD),
    AttributeKind.MIDDLEWARE: _under(DeclarationKind.FIELD),
    AttributeKind.COMPLEXITY: _under(DeclarationKind.FIELD),
    AttributeKind.CONFIG: _under(DeclarationKind.FIELD),
    AttributeKind.TRIGGER: _under(DeclarationKind.FIELD),
    AttributeKind.DEPRECATE: _under(DeclarationKind.ARG, DeclarationKind.FIELD, DeclarationKind.VALUE),
    AttributeKind.RESOLVE_TYPE: _under(DeclarationKind.INTERFACE, DeclarationKind.UNION),
    AttributeKind.PARSE: _under(DeclarationKind.SCALAR),
    AttributeKind.SERIALIZE: _under(DeclarationKind.SCALAR),
    AttributeKind.TYPES: _under(DeclarationKind.UNION),
    AttributeKind.VALUES: _under(DeclarationKind.ENUM),
    AttributeKind.ON: _under(DeclarationKind.DIRECTIVE),
    AttributeKind.INSTRUCTION: _under(DeclarationKind.DIRECTIVE),
    AttributeKind.EXPAND: _under(DeclarationKind.DIRECTIVE),
    AttributeKind.META: _under(*_META_OWNERS),
    AttributeKind.PRIVATE: _under(*_META_OWNERS),
}

# Names shown in error messages when they differ from the usage key.
USAGE_ALIASES: Dict[str, str] = {
    AttributeKind.INTERFACE_ATTRIBUTE: "`interface` (as an attribute)",
}

RESERVED_IDENTIFIERS = frozenset(DeclarationKind.ROOTS)


def display_usage(usage: str) -> str:
    return USAGE_ALIASES.get(usage, f"`{usage}`")


def placement_docs(usage: str) -> str:
    """Human readable placement sentence, e.g. for generated notation docs."""
    rule = get_rule(usage)
    return f"{display_usage(usage)} {rule.describe()}"


def get_rule(usage: str) -> PlacementRule:
    rule = PLACEMENT_RULES.get(usage)
    if rule is None:
        raise NotationError(f"{NOTATION_ERROR_PREFIX}unknown declaration `{usage}`")
    return rule


def placement_message(usage: str) -> str:
    return f"{NOTATION_ERROR_PREFIX}{placement_docs(usage)}"


def validate_placement(usage: str, parent_kind: Optional[str],
                       location: Optional[SourceLocation] = None) -> None:
    """Ensure ``usage`` may appear directly under ``parent_kind``.

    Args:
        usage: Keyword used at the declaration site
        parent_kind: Kind of the enclosing scope, None at toplevel

    Raises:
        NotationError: If the rule for ``usage`` does not allow the context
    """
    if parent_kind is not None:
        parent_kind = DeclarationKind.scope_kind(parent_kind)
    if not get_rule(usage).allows(parent_kind):
        raise NotationError(placement_message(usage), location)


def validate_identifier(kind: str, identifier: str, location: Optional[SourceLocation] = None) -> None:
    """Reject ``object`` declarations that claim a schema root identifier."""
    if kind == DeclarationKind.OBJECT and identifier in RESERVED_IDENTIFIERS:
        raise NotationError(
            f"{NOTATION_ERROR_PREFIX}cannot create an `object` with reserved identifier `{identifier}`",
            location,
        )
