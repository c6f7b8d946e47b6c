"""
Global-object profiles.

A profile lists the language's built-in globals. Parsers use it to skip
builtin base classes; the view model uses it to point links at external
reference docs (``doc_path``) instead of the generated output.
"""

from __future__ import annotations

import builtins

from docspine.errors import UnknownProfileError

JAVASCRIPT_GLOBALS = frozenset(
    {
        "Array",
        "ArrayBuffer",
        "Boolean",
        "DataView",
        "Date",
        "Error",
        "EvalError",
        "Float32Array",
        "Float64Array",
        "Function",
        "Infinity",
        "Int8Array",
        "Int16Array",
        "Int32Array",
        "Intl",
        "JSON",
        "Map",
        "Math",
        "NaN",
        "Number",
        "Object",
        "Promise",
        "Proxy",
        "RangeError",
        "ReferenceError",
        "Reflect",
        "RegExp",
        "Set",
        "String",
        "Symbol",
        "SyntaxError",
        "TypeError",
        "Uint8Array",
        "Uint16Array",
        "Uint32Array",
        "URIError",
        "WeakMap",
        "WeakSet",
        "undefined",
        "null",
    }
)

PYTHON_GLOBALS = frozenset(name for name in dir(builtins) if not name.startswith("_"))

PROFILES: dict[str, frozenset[str]] = {
    "javascript": JAVASCRIPT_GLOBALS,
    "python": PYTHON_GLOBALS,
}

PROFILE_ALIASES = {
    "js": "javascript",
    "py": "python",
}


def canonical_profile(name: str) -> str:
    """Resolve a profile alias.

    Raises:
        UnknownProfileError: The name is neither a profile nor an alias
    """
    key = PROFILE_ALIASES.get(name.lower(), name.lower())
    if key not in PROFILES:
        raise UnknownProfileError(name, list(PROFILES) + list(PROFILE_ALIASES))
    return key


def get_profile(name: str) -> frozenset[str]:
    """Global object names for a profile."""
    return PROFILES[canonical_profile(name)]


__all__ = [
    "JAVASCRIPT_GLOBALS",
    "PYTHON_GLOBALS",
    "PROFILES",
    "PROFILE_ALIASES",
    "canonical_profile",
    "get_profile",
]
