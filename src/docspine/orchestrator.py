"""
Documentation orchestrator.

Coordinates one run: registry setup, configuration checks, file discovery,
ordered parsing into a record collection, tree resolution and rendering.

Example:
    >>> config = DocSpineConfig(paths=["src"], renderer="json", output=Path("docs/api"))
    >>> result = DocumentationOrchestrator(config).run()
    >>> result.rendered
    True
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from docspine.config import DocSpineConfig
from docspine.discovery import find_files
from docspine.errors import ParseError
from docspine.logging import LogContext, get_logger, log_stage
from docspine.registry import PluginRegistry, load_plugin
from docspine.reporter import print_report
from docspine.resolver.collection import RecordCollection
from docspine.resolver.diagnostics import DiagnosticReport
from docspine.resolver.tree import DocTree, TreeResolver
from docspine.templating import format_link, load_package_metadata

logger = get_logger(__name__)


def build_registry(config: DocSpineConfig) -> PluginRegistry:
    """Default registry plus configured plugins and extension aliases.

    Raises:
        ConfigurationError: A plugin cannot be loaded or an alias is malformed
    """
    registry = PluginRegistry.default()
    for reference in config.plugins:
        registry.use(load_plugin(reference))
        logger.info("plugin_loaded", plugin=reference)
    for alias in config.aliases:
        registry.extension_alias(*DocSpineConfig.parse_alias(alias))
    return registry


@dataclass
class RunResult:
    """Outcome of one run.

    Attributes:
        files: Files parsed, in order
        diagnostics: Everything reported
        tree: Resolved tree, None in report-only mode
        rendered: Whether a renderer ran
    """

    files: list[Path] = field(default_factory=list)
    diagnostics: DiagnosticReport = field(default_factory=DiagnosticReport)
    tree: DocTree | None = None
    rendered: bool = False


class DocumentationOrchestrator:
    """Orchestrate parse → resolve → render.

    Manifesto:
        One command turns source files into a documentation tree. Fatal
        problems (configuration, parse errors) stop the run before any
        output is written; everything else is reported and the affected
        nodes degrade.

    Architecture:
        ```
        DocumentationOrchestrator.run()
              │
              ├──► config.validate(registry)      ConfigurationError → stop
              ├──► find_files()
              ├──► collect()  file by file         ParseError → stop
              │         └──► RecordCollection.merge()
              ├──► report_only? ──► print_report() ──► done
              ├──► TreeResolver.resolve()
              └──► registry.renderer(name).render(tree, config)
        ```

    Guardrails:
        - Do NOT parse files concurrently
          ✅ Each file is parsed and merged before the next begins
        - Do NOT render after a ParseError
          ✅ The error propagates; no partial output is written
    """

    def __init__(
        self,
        config: DocSpineConfig,
        registry: PluginRegistry | None = None,
        console: Console | None = None,
    ):
        self.config = config
        self.registry = registry if registry is not None else build_registry(config)
        self.console = console or Console()
        self._package: dict | None = None

    @property
    def package(self) -> dict:
        if self._package is None:
            self._package = load_package_metadata(self.config.package_file)
        return self._package

    def run(self) -> RunResult:
        """Run the whole pipeline.

        Raises:
            ConfigurationError: Before any work, on invalid configuration
            ParseError: On the first malformed input file
            ResolutionError: In strict mode
            RenderError: When the renderer fails
        """
        self.config.validate(self.registry)

        files = find_files(self.config, self.registry)
        collection = self.collect(files)
        result = RunResult(files=files, diagnostics=collection.diagnostics)

        if self.config.report_only:
            print_report(collection.diagnostics, self.console)
            return result

        result.tree = self.resolve(collection)
        if self.config.report:
            print_report(collection.diagnostics, self.console)

        renderer = self.registry.renderer(self.config.renderer)
        with log_stage("render", renderer=self.config.renderer):
            renderer.render(result.tree, self.config)
        result.rendered = True
        return result

    def collect(self, files: list[Path]) -> RecordCollection:
        """Parse files in order into one collection."""
        collection = RecordCollection()
        with log_stage("parse", files=len(files)) as timer:
            for file in files:
                collection.merge(self.parse_file(file, collection.diagnostics))
            timer.add_metric("records", len(collection) - 1)
        return collection

    def parse_file(self, file: Path, report: DiagnosticReport) -> list:
        """Parse one file; its diagnostics go to ``report``.

        Raises:
            ParseError: Malformed input, with file and parser context
        """
        entry = self.registry.parser_for(file)
        if entry is None:
            logger.debug("file_without_parser", file=str(file))
            return []

        with LogContext(file=str(file), parser=entry.extension):
            logger.info("parsing_file")
            try:
                parsed = entry.parse(file, self.config)
            except ParseError as e:
                if e.context.file is None:
                    e.context.file = str(file)
                raise e.with_context(parser=entry.extension)
            except (OSError, UnicodeDecodeError, ValueError) as e:
                raise ParseError(str(e), file=str(file), cause=e).with_context(parser=entry.extension)

            if self.config.link_format:
                for record in parsed.records:
                    record.href = format_link(self.config.link_format, record.file, record.line, self.package)

            report.extend(parsed.diagnostics)
            logger.debug("file_parsed", records=len(parsed.records), diagnostics=len(parsed.diagnostics))
        return parsed.records

    def resolve(self, collection: RecordCollection) -> DocTree:
        return TreeResolver(self.config).resolve(collection)


__all__ = ["DocumentationOrchestrator", "RunResult", "build_registry"]
