"""
File discovery.

Expands the configured paths into the ordered list of files to parse:
directories are walked recursively, files are kept only when a parser (or
an alias) handles their extension, and exclude patterns are applied. The
result is sorted so parsing order never depends on the filesystem.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from docspine.errors import ConfigurationError
from docspine.logging import get_logger
from docspine.registry import normalize_extension

if TYPE_CHECKING:
    from docspine.config import DocSpineConfig
    from docspine.registry import PluginRegistry

logger = get_logger(__name__)


def find_files(config: DocSpineConfig, registry: PluginRegistry) -> list[Path]:
    """Files to parse for a run.

    Raises:
        ConfigurationError: No paths given, or a path does not exist
    """
    if not config.paths:
        raise ConfigurationError("No input paths given")

    handled = registry.handled_extensions()
    if config.extensions:
        handled &= {normalize_extension(ext) for ext in config.extensions}

    found: set[Path] = set()
    for raw in config.paths:
        path = Path(raw)
        if not path.exists():
            raise ConfigurationError(f"Path not found: {raw}").with_context(file=str(raw))

        candidates = [path] if path.is_file() else [p for p in path.rglob("*") if p.is_file()]
        for candidate in candidates:
            if candidate.suffix.lower() not in handled:
                continue
            if config.should_skip(candidate):
                logger.debug("file_skipped", file=str(candidate))
                continue
            found.add(candidate)

    files = sorted(found, key=lambda p: p.as_posix())
    logger.info("files_found", count=len(files), paths=list(config.paths))
    return files


__all__ = ["find_files"]
