"""Tests for the built-in parsers."""

import json

import pytest

from docspine.errors import ParseError
from docspine.parsers.python import ASTWalker, parse_python, short_description
from docspine.parsers.records import parse_records


# =============================================================================
# Records parser
# =============================================================================


class TestParseRecords:
    """Tests for JSON/YAML records files."""

    def test_yaml_list(self, fixtures_path):
        """Test parsing the YAML fixture."""
        result = parse_records(fixtures_path / "ui.yaml")

        ids = [record.id for record in result.records]
        assert ids == ["UI", "Button", "Button#render", "Button.create", "Button@click"]
        assert result.records[1].location.line == 4
        assert result.records[1].file.endswith("ui.yaml")
        assert result.records[3].bound is True

    def test_json_records_key(self, fixtures_path):
        """Test the {"records": [...]} shape."""
        result = parse_records(fixtures_path / "ajax.json")

        assert len(result.records) == 7
        assert result.records[5].superclass == "Ajax.Request"

    def test_missing_description_is_info(self, fixtures_path):
        """Test that undocumented records are reported at info level."""
        result = parse_records(fixtures_path / "ajax.json")

        [diagnostic] = result.diagnostics
        assert diagnostic.code == "missing_description"
        assert diagnostic.record_id == "Ajax.Updater#update"
        assert diagnostic.severity.value == "info"

    def test_mapping_shape(self, tmp_path):
        """Test that an id → record mapping supplies ids."""
        path = tmp_path / "api.yaml"
        path.write_text("Button:\n  type: class\n  description: x\n")

        [record] = parse_records(path).records

        assert record.id == "Button"
        assert record.type == "class"

    def test_empty_file(self, tmp_path):
        """Test that an empty file yields no records."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert parse_records(path).records == []

    def test_invalid_json_has_line(self, tmp_path):
        """Test that a JSON syntax error carries file and line."""
        path = tmp_path / "bad.json"
        path.write_text('[\n  {"id": "a",}\n]')

        with pytest.raises(ParseError) as exc_info:
            parse_records(path)

        assert exc_info.value.context.file == str(path)
        assert exc_info.value.context.line == 2

    def test_invalid_yaml_has_line(self, tmp_path):
        """Test that a YAML syntax error carries the line."""
        path = tmp_path / "bad.yaml"
        path.write_text("- id: a\n- id: [unclosed\n")

        with pytest.raises(ParseError) as exc_info:
            parse_records(path)

        assert exc_info.value.context.line is not None

    def test_unknown_type(self, tmp_path):
        """Test that an unknown record type is fatal."""
        path = tmp_path / "api.json"
        path.write_text(json.dumps([{"id": "a", "type": "widget", "line": 3}]))

        with pytest.raises(ParseError, match="unknown type 'widget'") as exc_info:
            parse_records(path)

        assert str(exc_info.value).endswith(":3: Record 'a' has unknown type 'widget'")

    def test_wrong_shape(self, tmp_path):
        """Test that a scalar document is rejected."""
        path = tmp_path / "api.json"
        path.write_text("42")

        with pytest.raises(ParseError):
            parse_records(path)

    def test_record_without_id(self, tmp_path):
        """Test that a record without an id is a parse error."""
        path = tmp_path / "api.json"
        path.write_text(json.dumps([{"type": "class"}]))

        with pytest.raises(ParseError, match="Record #0"):
            parse_records(path)


# =============================================================================
# Python parser
# =============================================================================


class TestASTWalker:
    """Tests for the Python AST walker."""

    @pytest.fixture
    def records(self, fixtures_path):
        result = parse_python(fixtures_path / "widgets.py")
        return {record.id: record for record in result.records}

    def test_module_section(self, records):
        """Test that the module becomes a section named after its stem."""
        section = records["widgets"]
        assert section.type == "section"
        assert section.description == "Sample widgets module."

    def test_method_qualifiers(self, records):
        """Test instance, class-level, property and constructor ids."""
        assert records["Widget#render"].type == "method"
        assert records["Widget.create"].type == "method"
        assert records["Widget#label"].type == "property"
        assert records["Widget.new"].type == "constructor"
        assert records["helper"].type == "method"

    def test_private_and_setters_skipped(self, records):
        """Test that private members and property setters emit nothing."""
        assert "Widget#_private" not in records
        assert list(records).count("Widget#label") == 1

    def test_bases(self, records):
        """Test superclass and mixin inherits."""
        panel = records["Panel"]
        assert panel.superclass == "Widget"
        assert panel.inherits == ["Widget", "Draggable"]
        assert records["Widget"].superclass is None
        assert records["Widget"].inherits == []

    def test_signature_and_extra(self, records):
        """Test the signature payload."""
        extra = records["Widget#render"].extra
        assert extra["signature"] == "render(self, indent: int = 0) -> str"
        assert extra["params"] == ["indent"]
        assert extra["returns"] == "str"
        assert records["Panel#load"].extra["async"] is True

    def test_sections_on_members(self, records):
        """Test that members carry the module section."""
        assert records["Widget#render"].section == "widgets"

    def test_missing_docstrings(self, fixtures_path):
        """Test that undocumented members are reported, constructors excepted."""
        result = parse_python(fixtures_path / "widgets.py")

        assert [d.record_id for d in result.diagnostics] == ["Panel#load"]

    def test_syntax_error(self, tmp_path):
        """Test that invalid Python is a ParseError with a line."""
        path = tmp_path / "broken.py"
        path.write_text("def broken(:\n    pass\n")

        with pytest.raises(ParseError) as exc_info:
            parse_python(path)

        assert exc_info.value.context.line == 1

    def test_builtin_bases_dropped(self, tmp_path):
        """Test that builtins are never ancestors."""
        path = tmp_path / "errors.py"
        path.write_text("class Boom(ValueError):\n    '''Boom.'''\n")

        [_, boom] = parse_python(path).records

        assert boom.superclass is None


class TestSectionNames:
    """Tests for ASTWalker.derive_section_name."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("src/pkg/sub/mod.py", "pkg/sub/mod"),
            ("src/pkg/__init__.py", "pkg"),
            ("lib/mod.py", "mod"),
            ("lib/pkg/__init__.py", "pkg"),
        ],
    )
    def test_derive(self, path, expected):
        """Test module section naming."""
        from pathlib import PurePath

        assert ASTWalker().derive_section_name(PurePath(path)) == expected


def test_short_description():
    """Test that the first paragraph is joined onto one line."""
    assert short_description("First line\ncontinues.\n\nMore.") == "First line continues."
    assert short_description(None) == ""
