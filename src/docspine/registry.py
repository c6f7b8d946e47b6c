"""Plugin registry for parsers and renderers.

Manifesto:
    Parsers are looked up by file extension and renderers by name. The
    registry is an explicit value built once per run and passed into the
    pipeline, so two runs in one process never see each other's plugins.

    - **Aliases:** a plain ``alias → canonical`` map resolved before lookup
    - **Plugins:** a callable receiving the registry and registering into it;
      ``load_plugin("module[:attr]")`` resolves one from the command line

Examples:
    >>> registry = PluginRegistry.default()
    >>> registry.extension_alias(".jsm", ".json")
    >>> registry.parser_for("api.jsm").extension
    '.json'

Tags:
    registry, plugins, parsers, renderers, extension-dispatch

Doc-Types:
    api-reference
"""

from __future__ import annotations

import importlib
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import TYPE_CHECKING, Any

from docspine.errors import ConfigurationError, UnknownRendererError
from docspine.logging import get_logger
from docspine.model.records import SymbolRecord
from docspine.resolver.diagnostics import Diagnostic

if TYPE_CHECKING:
    from docspine.config import DocSpineConfig
    from docspine.resolver.tree import DocTree

logger = get_logger(__name__)


@dataclass
class ParseResult:
    """Records and diagnostics produced from one file."""

    records: list[SymbolRecord] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


ParseFn = Callable[[PurePath, "DocSpineConfig"], ParseResult]
RenderFn = Callable[["DocTree", "DocSpineConfig"], None]
Plugin = Callable[["PluginRegistry"], Any]


@dataclass(frozen=True)
class ParserEntry:
    extension: str
    parse: ParseFn


@dataclass(frozen=True)
class RendererEntry:
    name: str
    render: RenderFn


def normalize_extension(extension: str) -> str:
    """``"js"``, ``".js"`` and ``".JS"`` all become ``".js"``."""
    extension = extension.strip().lower()
    if not extension:
        raise ConfigurationError("Empty file extension")
    return extension if extension.startswith(".") else "." + extension


class PluginRegistry:
    """Parsers by extension, renderers by name, extension aliases."""

    def __init__(self) -> None:
        self._parsers: dict[str, ParserEntry] = {}
        self._renderers: dict[str, RendererEntry] = {}
        self._aliases: dict[str, str] = {}

    @classmethod
    def default(cls) -> PluginRegistry:
        """Registry with the built-in parsers and renderers."""
        from docspine import parsers, renderers

        registry = cls()
        registry.use(parsers.register)
        registry.use(renderers.register)
        return registry

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_parser(self, extension: str, parse: ParseFn) -> None:
        extension = normalize_extension(extension)
        if extension in self._parsers:
            logger.debug("parser_replaced", extension=extension)
        self._parsers[extension] = ParserEntry(extension, parse)
        logger.debug("parser_registered", extension=extension, fn=getattr(parse, "__name__", repr(parse)))

    def register_renderer(self, name: str, render: RenderFn) -> None:
        if name in self._renderers:
            logger.debug("renderer_replaced", name=name)
        self._renderers[name] = RendererEntry(name, render)
        logger.debug("renderer_registered", name=name)

    def extension_alias(self, alias: str, canonical: str) -> None:
        """Dispatch files with ``alias`` to the parser for ``canonical``."""
        alias = normalize_extension(alias)
        canonical = normalize_extension(canonical)
        if alias == canonical:
            raise ConfigurationError(f"Extension alias {alias} points to itself")
        self._aliases[alias] = canonical
        logger.debug("extension_aliased", alias=alias, canonical=canonical)

    def use(self, plugin: Plugin) -> None:
        """Run a plugin against this registry."""
        plugin(self)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def canonical_extension(self, extension: str) -> str:
        extension = normalize_extension(extension)
        return self._aliases.get(extension, extension)

    def parser_for(self, path: PurePath | str) -> ParserEntry | None:
        """Parser for a file, or None when its extension is not registered."""
        suffix = PurePath(path).suffix
        if not suffix:
            return None
        return self._parsers.get(self.canonical_extension(suffix))

    def renderer(self, name: str) -> RendererEntry:
        """Renderer by name.

        Raises:
            UnknownRendererError: Not registered
        """
        if name not in self._renderers:
            raise UnknownRendererError(name, self.renderer_names())
        return self._renderers[name]

    def has_renderer(self, name: str) -> bool:
        return name in self._renderers

    def parser_extensions(self) -> list[str]:
        return sorted(self._parsers)

    def renderer_names(self) -> list[str]:
        return sorted(self._renderers)

    def aliases(self) -> dict[str, str]:
        return dict(sorted(self._aliases.items()))

    def handled_extensions(self) -> set[str]:
        """Registered extensions plus aliases pointing at registered ones."""
        result = set(self._parsers)
        result.update(alias for alias, target in self._aliases.items() if target in self._parsers)
        return result


def load_plugin(reference: str) -> Plugin:
    """Resolve ``"package.module[:attr]"`` to a plugin callable.

    Without ``:attr`` the module's ``register`` function is used.

    Raises:
        ConfigurationError: Module or attribute missing, or not callable
    """
    module_name, _, attr = reference.partition(":")
    attr = attr or "register"
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import plugin module '{module_name}': {e}", cause=e).with_context(
            plugin=reference
        )

    plugin = getattr(module, attr, None)
    if not callable(plugin):
        raise ConfigurationError(f"Plugin '{reference}' has no callable '{attr}'").with_context(plugin=reference)
    return plugin


__all__ = [
    "ParseResult",
    "ParserEntry",
    "RendererEntry",
    "PluginRegistry",
    "normalize_extension",
    "load_plugin",
]
