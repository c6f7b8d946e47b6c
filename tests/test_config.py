"""Tests for configuration, profiles and option templates."""

from pathlib import Path

import pytest

from docspine.config import DocSpineConfig
from docspine.errors import (
    ConfigurationError,
    InvalidOptionError,
    UnknownProfileError,
    UnknownRendererError,
)
from docspine.profiles import canonical_profile, get_profile
from docspine.registry import PluginRegistry
from docspine.templating import format_link, load_package_metadata, render_title


# =============================================================================
# DocSpineConfig
# =============================================================================


class TestDocSpineConfig:
    """Tests for DocSpineConfig."""

    def test_defaults(self):
        """Test default values."""
        config = DocSpineConfig()

        assert config.renderer == "json"
        assert config.output == Path("docs")
        assert config.broken_links == "show"
        assert config.global_profile == "python"
        assert not config.strict

    def test_coercion(self):
        """Test that strings become paths and lists."""
        config = DocSpineConfig(paths="src", output="out", package_file="pyproject.toml")

        assert config.paths == ["src"]
        assert config.output == Path("out")
        assert config.package_file == Path("pyproject.toml")

    def test_from_yaml(self, tmp_path):
        """Test loading from YAML."""
        path = tmp_path / "docspine.yaml"
        path.write_text("paths: [lib]\nsplit_by_class: true\nsuffix: _api\n")

        config = DocSpineConfig.from_yaml(path)

        assert config.paths == ["lib"]
        assert config.split_by_class
        assert config.suffix == "_api"

    def test_from_yaml_empty(self, tmp_path):
        """Test that an empty file gives defaults."""
        path = tmp_path / "docspine.yaml"
        path.write_text("")

        assert DocSpineConfig.from_yaml(path) == DocSpineConfig()

    def test_from_yaml_not_mapping(self, tmp_path):
        """Test that a non-mapping document is rejected."""
        path = tmp_path / "docspine.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(InvalidOptionError):
            DocSpineConfig.from_yaml(path)

    def test_from_yaml_missing_file(self, tmp_path):
        """Test that a missing file is a configuration error."""
        with pytest.raises(ConfigurationError):
            DocSpineConfig.from_yaml(tmp_path / "nope.yaml")

    def test_unknown_key(self):
        """Test that unknown keys are rejected."""
        with pytest.raises(InvalidOptionError, match="Unknown configuration key: colour"):
            DocSpineConfig.from_dict({"colour": "red"})

    def test_merge_skips_none(self):
        """Test that None overrides keep the existing value."""
        config = DocSpineConfig(renderer="console")

        merged = config.merge({"renderer": None, "title": "T"})

        assert merged.renderer == "console"
        assert merged.title == "T"
        assert config.title != "T"

    def test_to_dict(self):
        """Test plain-dict conversion."""
        data = DocSpineConfig(output="out").to_dict()

        assert data["output"] == "out"
        assert data["package_file"] is None

    def test_should_skip(self):
        """Test exclude patterns against paths and names."""
        config = DocSpineConfig(exclude=["*/vendor/*", "*_test.py"])

        assert config.should_skip("lib/vendor/x.js")
        assert config.should_skip("pkg/mod_test.py")
        assert not config.should_skip("lib/ui.js")

    def test_parse_alias(self):
        """Test alias parsing."""
        assert DocSpineConfig.parse_alias(".jsm:.js") == (".jsm", ".js")
        with pytest.raises(InvalidOptionError):
            DocSpineConfig.parse_alias(".jsm")


class TestValidate:
    """Tests for DocSpineConfig.validate."""

    def test_valid(self):
        """Test that defaults validate against the default registry."""
        DocSpineConfig().validate(PluginRegistry.default())

    def test_unknown_renderer(self):
        """Test that an unregistered renderer fails before any work."""
        with pytest.raises(UnknownRendererError):
            DocSpineConfig(renderer="pdf").validate(PluginRegistry.default())

    def test_report_only_skips_renderer(self):
        """Test that report-only runs do not need a renderer."""
        DocSpineConfig(renderer="pdf", report_only=True).validate(PluginRegistry.default())

    def test_exclusive_grouping(self):
        """Test that both split flags are rejected."""
        with pytest.raises(ConfigurationError):
            DocSpineConfig(split_by_class=True, split_from_ns=True).validate()

    def test_unknown_profile(self):
        """Test the unknown global profile message."""
        with pytest.raises(UnknownProfileError, match="I don't know any global objects for the type 'cobol'"):
            DocSpineConfig(global_profile="cobol").validate()

    def test_broken_links_mode(self):
        """Test that broken_links accepts only known modes."""
        DocSpineConfig(broken_links="hide").validate()
        with pytest.raises(InvalidOptionError):
            DocSpineConfig(broken_links="ignore").validate()

    def test_malformed_alias(self):
        """Test that aliases are checked up front."""
        with pytest.raises(InvalidOptionError):
            DocSpineConfig(aliases=["a:b:c"]).validate()


# =============================================================================
# Profiles
# =============================================================================


class TestProfiles:
    """Tests for global-object profiles."""

    def test_aliases(self):
        """Test short profile names."""
        assert canonical_profile("js") == "javascript"
        assert canonical_profile("PY") == "python"

    def test_contents(self):
        """Test that each profile holds its language's globals."""
        assert "Array" in get_profile("javascript")
        assert "dict" in get_profile("python")


# =============================================================================
# Templates
# =============================================================================


class TestTemplating:
    """Tests for option templates."""

    def test_render_title(self):
        """Test package variables in the title."""
        package = {"name": "docspine", "version": "1.2"}

        assert render_title("{package.name} {package.version} API", package) == "docspine 1.2 API"

    def test_unknown_variables_render_empty(self):
        """Test that missing package metadata does not fail."""
        assert render_title("{package.name} API", {}).strip() == "API"

    def test_format_link(self):
        """Test source link templates."""
        link = format_link("https://example.org/{package.name}/{file}#L{line}", "lib/ui.js", 12, {"name": "ui"})

        assert link == "https://example.org/ui/lib/ui.js#L12"

    def test_invalid_template(self):
        """Test that an uncompilable template is an option error."""
        with pytest.raises(InvalidOptionError):
            render_title("{package.name", {})

    def test_package_metadata(self, tmp_path):
        """Test reading the [project] table."""
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "demo"\nversion = "0.3"\n')

        assert load_package_metadata(path) == {"name": "demo", "version": "0.3"}

    def test_explicit_missing_package_file(self, tmp_path):
        """Test that a named package file must exist."""
        with pytest.raises(ConfigurationError):
            load_package_metadata(tmp_path / "missing.toml")

    def test_default_package_file_optional(self, tmp_path, monkeypatch):
        """Test that no pyproject.toml in the working directory is fine."""
        monkeypatch.chdir(tmp_path)

        assert load_package_metadata() == {}
