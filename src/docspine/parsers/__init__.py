"""Built-in parsers.

- ``.json`` / ``.yaml`` (``.yml`` alias): pre-extracted symbol records
- ``.py``: module AST walker
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docspine.parsers.python import ASTWalker, parse_python
from docspine.parsers.records import parse_records

if TYPE_CHECKING:
    from docspine.registry import PluginRegistry


def register(registry: PluginRegistry) -> None:
    """Plugin registering the built-in parsers."""
    registry.register_parser(".json", parse_records)
    registry.register_parser(".yaml", parse_records)
    registry.extension_alias(".yml", ".yaml")
    registry.register_parser(".py", parse_python)


__all__ = ["ASTWalker", "parse_python", "parse_records", "register"]
