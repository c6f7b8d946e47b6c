"""
Option templates (``title``, ``link_format``) rendered with Jinja2.

Templates use single braces, ``{package.name} {package.version} API``, so
the delimiters are reconfigured: ``{ }`` for variables, ``<% %>`` for
blocks and ``<# #>`` for comments. Unknown variables render empty.

Package metadata comes from the ``[project]`` table of ``pyproject.toml``.
"""

from __future__ import annotations

import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

import jinja2

from docspine.errors import ConfigurationError, InvalidOptionError
from docspine.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PACKAGE_FILE = "pyproject.toml"


@lru_cache(maxsize=1)
def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        variable_start_string="{",
        variable_end_string="}",
        block_start_string="<%",
        block_end_string="%>",
        comment_start_string="<#",
        comment_end_string="#>",
        undefined=jinja2.ChainableUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )


def render_template(template: str, **context: Any) -> str:
    """Render one option template.

    Raises:
        InvalidOptionError: The template does not compile
    """
    try:
        return _environment().from_string(template).render(**context)
    except jinja2.TemplateSyntaxError as e:
        raise InvalidOptionError("template", template, f"Invalid template {template!r}: {e.message}") from e


def load_package_metadata(path: Path | str | None = None) -> dict[str, Any]:
    """Read the ``[project]`` table of a pyproject file.

    Args:
        path: Explicit file; defaults to ``pyproject.toml`` in the working
            directory, which may be absent

    Raises:
        ConfigurationError: An explicit file is missing, or any file is not valid TOML
    """
    explicit = path is not None
    path = Path(path) if path is not None else Path(DEFAULT_PACKAGE_FILE)
    if not path.is_file():
        if explicit:
            raise ConfigurationError(f"Package file not found: {path}").with_context(file=str(path))
        return {}

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Cannot read package file {path}: {e}", cause=e).with_context(
            file=str(path)
        )
    project = dict(data.get("project", {}))
    logger.debug("package_metadata_loaded", file=str(path), name=project.get("name"))
    return project


def render_title(template: str, package: dict[str, Any]) -> str:
    return render_template(template, package=package)


def format_link(template: str, file: str, line: int, package: dict[str, Any] | None = None) -> str:
    """Source link for a record: ``{file}``, ``{line}`` and ``{package.*}``."""
    return render_template(template, file=file, line=line, package=package or {})


__all__ = [
    "DEFAULT_PACKAGE_FILE",
    "render_template",
    "load_package_metadata",
    "render_title",
    "format_link",
]
