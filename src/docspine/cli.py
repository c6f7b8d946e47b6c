"""
CLI for docspine.

Usage:
    docspine build src/ -o docs/api --renderer json --format-json
    docspine build lib/ --split-by-class --suffix _api --use myplugins.html
    docspine report src/
    docspine tree records.yaml --split-from-ns
    docspine plugins --alias .yml5:.yaml
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docspine import __version__
from docspine.config import BROKEN_LINK_MODES, DocSpineConfig
from docspine.errors import DocSpineError
from docspine.logging import configure_logging
from docspine.orchestrator import DocumentationOrchestrator, build_registry

console = Console()
err_console = Console(stderr=True)


def _fail(error: DocSpineError) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise SystemExit(1)


def _load_config(config_file: str | None, paths: tuple[str, ...], overrides: dict[str, Any]) -> DocSpineConfig:
    config = DocSpineConfig.from_yaml(config_file) if config_file else DocSpineConfig()
    if paths:
        overrides["paths"] = list(paths)
    return config.merge(overrides)


def _flag(value: bool) -> bool | None:
    """Only a flag that was given overrides the config file."""
    return True if value else None


def _apply(options: list[Callable], f: Callable) -> Callable:
    for option in reversed(options):
        f = option(f)
    return f


_PLUGIN_OPTIONS = [
    click.option(
        "--config", "config_file",
        type=click.Path(exists=True, dir_okay=False),
        help="YAML configuration file.",
    ),
    click.option(
        "--use", "plugins",
        multiple=True,
        help="Plugin to load, as module[:attr]. Repeatable.",
    ),
    click.option(
        "--alias", "aliases",
        multiple=True,
        help="Extension alias, as alias:canonical (e.g. .jsm:.json). Repeatable.",
    ),
]

_INPUT_OPTIONS = [
    click.argument("paths", nargs=-1, type=click.Path(exists=True)),
    click.option(
        "--exclude", "-e",
        multiple=True,
        help="Glob pattern of paths to skip. Repeatable.",
    ),
    click.option(
        "--extension", "extensions",
        multiple=True,
        help="Only parse files with this extension. Repeatable.",
    ),
    click.option("--link-format", help="Source link template, e.g. https://host/{file}#L{line}."),
    click.option("--package-file", type=click.Path(dir_okay=False), help="pyproject.toml for {package.*}."),
    click.option("--strict", is_flag=True, help="Fail on the first error diagnostic."),
]

_GROUPING_OPTIONS = [
    click.option("--split-by-class", is_flag=True, help="One output partition per class."),
    click.option("--split-from-ns", is_flag=True, help="Hoist namespace classes to the top level."),
    click.option("--prefix", help="Output partition prefix."),
    click.option("--suffix", help="Output partition suffix."),
    click.option("--global-profile", "-g", help="Global-object profile (javascript, python)."),
    click.option("--doc-path", help="External doc URL for global objects, %s is the name."),
]


def plugin_options(f: Callable) -> Callable:
    """Options shared by every command that builds a registry."""
    return _apply(_PLUGIN_OPTIONS, f)


def input_options(f: Callable) -> Callable:
    """Options shared by every command that parses files."""
    return _apply(_INPUT_OPTIONS, f)


def grouping_options(f: Callable) -> Callable:
    return _apply(_GROUPING_OPTIONS, f)


def _common_overrides(kwargs: dict[str, Any]) -> dict[str, Any]:
    overrides: dict[str, Any] = {
        "plugins": list(kwargs.pop("plugins", ())) or None,
        "aliases": list(kwargs.pop("aliases", ())) or None,
        "exclude": list(kwargs.pop("exclude", ())) or None,
        "extensions": list(kwargs.pop("extensions", ())) or None,
        "link_format": kwargs.pop("link_format", None),
        "package_file": kwargs.pop("package_file", None),
        "strict": _flag(kwargs.pop("strict", False)),
        "split_by_class": _flag(kwargs.pop("split_by_class", False)),
        "split_from_ns": _flag(kwargs.pop("split_from_ns", False)),
        "prefix": kwargs.pop("prefix", None),
        "suffix": kwargs.pop("suffix", None),
        "global_profile": kwargs.pop("global_profile", None),
        "doc_path": kwargs.pop("doc_path", None),
    }
    overrides.update(kwargs)
    return overrides


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR).")
@click.option("--json-logs/--console-logs", default=None, help="Log format; auto-detected by default.")
def cli(log_level: str | None, json_logs: bool | None):
    """docspine: resolve documentation records into one cross-linked tree."""
    configure_logging(level=log_level, json_format=json_logs)


@cli.command()
@plugin_options
@input_options
@grouping_options
@click.option("--output", "-o", type=click.Path(file_okay=False), help="Output directory.")
@click.option("--renderer", "-r", help="Renderer name (default: json).")
@click.option("--title", "-t", help="Title template, e.g. '{package.name} {package.version}'.")
@click.option("--format-json", is_flag=True, help="Indent JSON output.")
@click.option("--keep-out-dir", is_flag=True, help="Do not clear the output directory first.")
@click.option("--report", is_flag=True, help="Print the diagnostics report too.")
@click.option(
    "--broken-links",
    type=click.Choice(BROKEN_LINK_MODES),
    help="Broken link handling (validated only).",
)
def build(config_file: str | None, paths: tuple[str, ...], **kwargs):
    """Parse, resolve and render documentation.

    Examples:
        docspine build src/ -o docs/api --format-json
        docspine build lib/ --split-by-class --renderer console
    """
    overrides = _common_overrides(kwargs)
    for name in ("format_json", "keep_out_dir", "report"):
        overrides[name] = _flag(overrides[name])

    try:
        config = _load_config(config_file, paths, overrides)
        result = DocumentationOrchestrator(config, console=console).run()
    except DocSpineError as e:
        _fail(e)
        return

    counts = result.diagnostics.counts()
    console.print(
        f"[bold green]✅ Rendered[/bold green] {len(result.tree)} records from "
        f"{len(result.files)} files with '{config.renderer}' "
        f"({counts['error']} errors, {counts['warning']} warnings)"
    )


@cli.command()
@plugin_options
@input_options
def report(config_file: str | None, paths: tuple[str, ...], **kwargs):
    """Parse only and print the diagnostics report.

    Examples:
        docspine report src/
    """
    overrides = _common_overrides(kwargs)
    overrides["report_only"] = True
    try:
        config = _load_config(config_file, paths, overrides)
        result = DocumentationOrchestrator(config, console=console).run()
    except DocSpineError as e:
        _fail(e)
        return

    if result.diagnostics.has_errors:
        raise SystemExit(1)


@cli.command()
@plugin_options
@input_options
@grouping_options
@click.option("--title", "-t", help="Title template.")
def tree(config_file: str | None, paths: tuple[str, ...], **kwargs):
    """Resolve and print the documentation tree.

    Examples:
        docspine tree src/
        docspine tree records.yaml --split-from-ns
    """
    overrides = _common_overrides(kwargs)
    overrides["renderer"] = "console"
    try:
        config = _load_config(config_file, paths, overrides)
        DocumentationOrchestrator(config, console=console).run()
    except DocSpineError as e:
        _fail(e)


@cli.command()
@plugin_options
def plugins(config_file: str | None, **kwargs):
    """List registered parsers, extension aliases and renderers."""
    overrides = {
        "plugins": list(kwargs["plugins"]) or None,
        "aliases": list(kwargs["aliases"]) or None,
    }
    try:
        config = _load_config(config_file, (), overrides)
        registry = build_registry(config)
    except DocSpineError as e:
        _fail(e)
        return

    table = Table(title="Plugins")
    table.add_column("Kind", style="cyan")
    table.add_column("Key")
    table.add_column("Target")
    for extension in registry.parser_extensions():
        table.add_row("parser", extension, "")
    for alias, canonical in registry.aliases().items():
        table.add_row("alias", alias, canonical)
    for name in registry.renderer_names():
        table.add_row("renderer", name, "")
    console.print(table)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
