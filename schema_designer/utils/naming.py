"""Identifier naming helpers shared by the compiler and its error messages."""

from __future__ import annotations

from typing import Any


def camelize(identifier: Any) -> str:
    """Return the display name for a type identifier.

    ``user_profile`` -> ``UserProfile``. Leading underscores are kept so that
    introspection-style identifiers (``__type``) survive unchanged.
    """
    text = str(identifier)
    stripped = text.lstrip("_")
    prefix = text[: len(text) - len(stripped)]
    return prefix + "".join(part[:1].upper() + part[1:] for part in stripped.split("_"))


def format_identifier(identifier: Any) -> str:
    """Render an identifier the way notation keywords spell it (``:foo``)."""
    return f":{identifier}"


def quote_identifier(identifier: Any) -> str:
    """Render an identifier inside a cycle path (```foo'``)."""
    return f"`{identifier}'"
