"""
Configuration for docspine runs.

Manages the settings consumed by discovery, parsers, the tree resolver and
renderers. Loadable from YAML or a dict and overridable from the CLI.
"""

from __future__ import annotations

import dataclasses
import fnmatch
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any

import yaml

from docspine.errors import (
    ConfigurationError,
    InvalidOptionError,
    UnknownRendererError,
)
from docspine.profiles import canonical_profile
from docspine.resolver.grouping import GroupingOptions

if TYPE_CHECKING:
    from docspine.registry import PluginRegistry

BROKEN_LINK_MODES = ("throw", "show", "hide")

DEFAULT_TITLE = "{package.name} {package.version} API documentation"


@dataclass
class DocSpineConfig:
    """Configuration for one docspine run.

    Attributes:
        paths: Files or directories to scan
        exclude: Glob patterns of paths to skip
        extensions: Only parse files with these extensions (all registered if empty)
        aliases: Extension aliases, ``"alias:canonical"``
        plugins: Plugin references, ``"module[:attr]"``
        renderer: Renderer name
        output: Output directory
        title: Title template (``{package.*}`` variables)
        package_file: pyproject file providing ``{package.*}``
        split_by_class: One output partition per class
        split_from_ns: Hoist namespace classes to the top level
        prefix: Output partition prefix
        suffix: Output partition suffix
        report: Print the diagnostics report, then render
        report_only: Print the diagnostics report and stop after parsing
        broken_links: ``throw``, ``show`` or ``hide`` (validated, not acted on)
        format_json: Indent JSON output
        keep_out_dir: Do not clear the output directory before rendering
        link_format: Source link template (``{file}``, ``{line}``, ``{package.*}``)
        global_profile: Global-object profile for external links
        doc_path: External doc URL for global objects, ``%s`` is the name
        strict: Raise the first error-severity diagnostic
    """

    paths: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=lambda: [
        "*/__pycache__/*", "*/.git/*", "*/node_modules/*", "*/.venv/*",
    ])
    extensions: list[str] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)
    plugins: list[str] = field(default_factory=list)

    renderer: str = "json"
    output: Path = field(default_factory=lambda: Path("docs"))
    title: str = DEFAULT_TITLE
    package_file: Path | None = None

    # Output grouping
    split_by_class: bool = False
    split_from_ns: bool = False
    prefix: str = ""
    suffix: str = ""

    # Reporting
    report: bool = False
    report_only: bool = False
    broken_links: str = "show"

    # Rendering
    format_json: bool = False
    keep_out_dir: bool = False
    link_format: str | None = None
    global_profile: str = "python"
    doc_path: str | None = None

    strict: bool = False

    def __post_init__(self):
        """Convert paths to Path objects if strings."""
        if isinstance(self.output, str):
            self.output = Path(self.output)
        if isinstance(self.package_file, str):
            self.package_file = Path(self.package_file)
        for name in ("paths", "exclude", "extensions", "aliases", "plugins"):
            value = getattr(self, name)
            if isinstance(value, str):
                setattr(self, name, [value])
            elif not isinstance(value, list):
                setattr(self, name, list(value))

    @classmethod
    def from_yaml(cls, yaml_path: Path | str) -> DocSpineConfig:
        """Load configuration from a YAML file.

        Raises:
            ConfigurationError: The file is missing or not a YAML mapping
        """
        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {yaml_path}: {e}", cause=e).with_context(
                file=str(yaml_path)
            )
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {yaml_path}: {e}", cause=e).with_context(
                file=str(yaml_path)
            )

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidOptionError("config", data, f"Config file {yaml_path} must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocSpineConfig:
        """Create config from a dictionary; unknown keys are rejected.

        Raises:
            InvalidOptionError: Unknown key
        """
        known = {f.name for f in dataclasses.fields(cls)}
        for key in data:
            if key not in known:
                raise InvalidOptionError(key, data[key], f"Unknown configuration key: {key}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a plain dictionary."""
        result = dataclasses.asdict(self)
        result["output"] = str(self.output)
        result["package_file"] = str(self.package_file) if self.package_file else None
        return result

    def merge(self, overrides: dict[str, Any]) -> DocSpineConfig:
        """Copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        known = {f.name for f in dataclasses.fields(self)}
        for key in changes:
            if key not in known:
                raise InvalidOptionError(key, changes[key], f"Unknown configuration key: {key}")
        return dataclasses.replace(self, **changes)

    def validate(self, registry: PluginRegistry | None = None) -> None:
        """Check the configuration before any work begins.

        Raises:
            ConfigurationError: Unknown renderer or profile, both split
                policies, malformed alias or unknown ``broken_links`` mode
        """
        self.grouping_options()
        canonical_profile(self.global_profile)

        for alias in self.aliases:
            self.parse_alias(alias)

        if self.broken_links not in BROKEN_LINK_MODES:
            raise InvalidOptionError(
                "broken_links",
                self.broken_links,
                f"broken_links must be one of {', '.join(BROKEN_LINK_MODES)}, got {self.broken_links!r}",
            )

        if self.report_only:
            return
        if registry is not None and not registry.has_renderer(self.renderer):
            raise UnknownRendererError(self.renderer, registry.renderer_names())

    def grouping_options(self) -> GroupingOptions:
        return GroupingOptions.from_options(
            split_by_class=self.split_by_class,
            split_from_ns=self.split_from_ns,
            prefix=self.prefix,
            suffix=self.suffix,
        )

    @staticmethod
    def parse_alias(alias: str) -> tuple[str, str]:
        """Split ``"alias:canonical"``.

        Raises:
            InvalidOptionError: Not exactly two non-empty parts
        """
        parts = alias.split(":")
        if len(parts) != 2 or not all(part.strip() for part in parts):
            raise InvalidOptionError("aliases", alias, f"Malformed extension alias {alias!r}, expected 'alias:canonical'")
        return parts[0].strip(), parts[1].strip()

    def should_skip(self, file_path: Path | str) -> bool:
        """Check if a path matches one of the exclude patterns."""
        path_str = PurePath(file_path).as_posix()
        return any(
            fnmatch.fnmatch(path_str, pattern) or fnmatch.fnmatch(PurePath(path_str).name, pattern)
            for pattern in self.exclude
        )


__all__ = ["BROKEN_LINK_MODES", "DEFAULT_TITLE", "DocSpineConfig"]
