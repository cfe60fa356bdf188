"""Built-in field middleware referenced by compiled function tables.

Every middleware is called by the query executor as
``handler(parent, args, options)``; ``options`` is the second element of the
``(handler, options)`` pair stored on the field.
"""

from collections.abc import Mapping
from typing import Any, Dict


def resolution(parent: Any, args: Dict[str, Any], options: Dict[str, Any]) -> Any:
    """Call the resolver function attached with ``resolve``."""
    return options["function"](parent, args)


def pass_parent(parent: Any, args: Dict[str, Any], options: Any = None) -> Any:
    """Return the resolved parent unchanged (subscription root fields)."""
    return parent


def map_get(parent: Any, args: Dict[str, Any], options: Dict[str, Any]) -> Any:
    """Read the field identifier as a key off the parent value."""
    key = options["key"]
    if parent is None:
        return None
    if isinstance(parent, Mapping):
        return parent.get(key)
    return getattr(parent, key, None)
