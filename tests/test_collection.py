"""Tests for the record collection and section guessing."""

import pytest

from docspine.errors import NameClashError, ResolutionStateError
from docspine.model import SymbolRecord
from docspine.resolver.collection import RecordCollection, choose_survivor, compose_key
from docspine.resolver.sections import guess_sections


# =============================================================================
# Keys
# =============================================================================


class TestComposeKey:
    """Tests for compose_key."""

    def test_section_keyed_by_id(self, make_record):
        """Test that sections use their own id."""
        assert compose_key(make_record("UI", type="section")) == "UI"

    def test_member_keyed_by_section(self, make_record):
        """Test that members are prefixed with their section."""
        assert compose_key(make_record("Button#render", section="UI")) == "UI.Button#render"

    def test_unsectioned_member(self, make_record):
        """Test that a missing section leaves an empty first segment."""
        assert compose_key(make_record("Button.disable")) == ".Button.disable"


# =============================================================================
# Collection
# =============================================================================


class TestRecordCollection:
    """Tests for RecordCollection."""

    def test_starts_with_root(self):
        """Test that the root section is stored under the empty key."""
        collection = RecordCollection()

        assert collection.root.root
        assert collection.root.href == "#"
        assert collection.keys() == [""]

    def test_bound_method_adds_sibling(self, make_record):
        """Test that a bound static method also stores its instance twin."""
        collection = RecordCollection()
        collection.add(make_record("Element.foo", section="dom", bound=True))

        assert collection["dom.Element#foo"].bound == "Element.foo"
        assert collection["dom.Element.foo"].bound == "Element#foo"

    def test_bound_flag_ignored_on_non_methods(self, make_record):
        """Test that only methods get a bound sibling."""
        collection = RecordCollection()
        collection.add(make_record("Element.foo", type="property", section="dom", bound=True))

        assert "dom.Element#foo" not in collection

    def test_merge_returns_count(self, make_record):
        """Test merging one file's records."""
        collection = RecordCollection()

        count = collection.merge([make_record("A", type="class"), make_record("A#b")])

        assert count == 2
        assert len(collection) == 3

    def test_sorted_keys(self, collect, make_record):
        """Test canonical key order without the root."""
        collection = collect(
            make_record("Button#render", section="UI"),
            make_record("UI", type="section"),
            make_record("Button", type="class", section="UI"),
        )

        assert collection.sorted_keys() == ["UI", "UI.Button", "UI.Button#render"]
        assert collection.sorted_keys(include_root=True)[0] == ""

    def test_sealed_collection_rejects_writes(self, make_record):
        """Test that records cannot be added after sealing."""
        collection = RecordCollection()
        collection.seal()

        with pytest.raises(ResolutionStateError):
            collection.add(make_record("A", type="class"))

    def test_seal_twice(self):
        """Test that a collection can only be handed to resolution once."""
        collection = RecordCollection()
        collection.seal()

        with pytest.raises(ResolutionStateError):
            collection.seal()


# =============================================================================
# Name clashes
# =============================================================================


class TestNameClash:
    """Tests for the clash survivor policy."""

    def test_earlier_location_survives(self, make_record):
        """Test that the record declared first (file, line) is kept."""
        first = make_record("Button", type="class", file="a.js", line=10)
        second = make_record("Button", type="class", file="a.js", line=2)

        kept, dropped = choose_survivor(first, second)

        assert kept is second
        assert dropped is first

    def test_clash_is_reported_not_overwritten(self, make_record):
        """Test that a second record on a key is a reported clash."""
        collection = RecordCollection()
        early = make_record("Button", type="class", file="a.js", line=1)
        late = make_record("Button", type="class", file="b.js", line=1)

        collection.add(late)
        stored = collection.add(early)

        assert stored is early
        assert collection[".Button"] is early
        clashes = collection.diagnostics.by_code("name_clash")
        assert len(clashes) == 1
        assert isinstance(clashes[0].error, NameClashError)
        assert [str(loc) for loc in clashes[0].locations] == ["a.js:1", "b.js:1"]

    def test_outcome_independent_of_order(self, make_record):
        """Test that the survivor does not depend on insertion order."""
        def survivor(order):
            collection = RecordCollection()
            records = {
                "x": make_record("Button", type="class", file="x.js", description="x"),
                "y": make_record("Button", type="class", file="y.js", description="y"),
            }
            for name in order:
                collection.add(records[name])
            return collection[".Button"].description

        assert survivor("xy") == survivor("yx") == "x"


# =============================================================================
# Section guessing
# =============================================================================


class TestGuessSections:
    """Tests for guess_sections."""

    def test_relocates_under_matching_section(self, collect, ui_records):
        """Test that .Button.disable moves under UI."""
        collection = collect(*ui_records())

        relocated = guess_sections(collection)

        assert relocated == 1
        assert ".Button.disable" not in collection
        record = collection["UI.Button.disable"]
        assert record.section == "UI"

    def test_no_match_stays(self, collect, make_record):
        """Test that a record with no matching section is left alone."""
        collection = collect(make_record("Lonely.thing"))

        assert guess_sections(collection) == 0
        assert ".Lonely.thing" in collection

    def test_ambiguous_match_warns(self, collect, make_record):
        """Test that several candidate sections pick the first and warn."""
        collection = collect(
            make_record("Button", type="class", section="b"),
            make_record("Button", type="class", section="a"),
            make_record("Button.disable"),
        )

        guess_sections(collection)

        assert "a.Button.disable" in collection
        warnings = collection.diagnostics.by_code("ambiguous_section")
        assert len(warnings) == 1
        assert "a, b" in warnings[0].message

    def test_relocation_onto_existing_key_is_a_clash(self, collect, make_record):
        """Test that a guessed key already taken goes through the clash policy."""
        collection = collect(
            make_record("Button", type="class", section="UI", file="a.js", line=1),
            make_record("Button.disable", section="UI", file="a.js", line=2),
            make_record("Button.disable", file="b.js", line=1),
        )

        guess_sections(collection)

        assert collection["UI.Button.disable"].file == "a.js"
        assert len(collection.diagnostics.by_code("name_clash")) == 1
