"""Tests for output grouping."""

import pytest

from docspine.errors import ConfigurationError
from docspine.resolver.grouping import GroupingOptions, GroupingPolicy


class TestGroupingOptions:
    """Tests for GroupingOptions."""

    def test_policy_from_flags(self):
        """Test that each flag selects its policy."""
        assert GroupingOptions.from_options().policy is GroupingPolicy.DEFAULT
        assert GroupingOptions.from_options(split_by_class=True).policy is GroupingPolicy.SPLIT_BY_CLASS
        assert GroupingOptions.from_options(split_from_ns=True).policy is GroupingPolicy.SPLIT_FROM_NS

    def test_flags_are_exclusive(self):
        """Test that both flags together are a configuration error."""
        with pytest.raises(ConfigurationError):
            GroupingOptions.from_options(split_by_class=True, split_from_ns=True)

    def test_name(self):
        """Test prefix and suffix."""
        assert GroupingOptions(prefix="api_", suffix="_v1").name("button") == "api_button_v1"


class TestDefaultPolicy:
    """Tests for file-based partitions."""

    def test_partition_is_lowercased_file_stem(self, resolve, make_record):
        """Test that records land in their source file's partition."""
        tree = resolve(
            make_record("Ajax", type="class", file="lib/Ajax.js"),
            make_record("Ajax#send", file="lib/Ajax.js"),
        )

        assert tree.get("Ajax").out_file == "ajax"
        assert tree.get("Ajax#send").out_file == "ajax"

    def test_prefix_suffix_applied(self, resolve, make_record):
        """Test that partition names carry prefix and suffix."""
        tree = resolve(make_record("Ajax", type="class", file="lib/ajax.js"), prefix="p_", suffix="_s")

        assert tree.get("Ajax").out_file == "p_ajax_s"

    def test_extension_follows_owner(self, resolve, make_record):
        """Test that an extension record uses its owner's partition."""
        tree = resolve(
            make_record("Element", type="class", file="lib/dom.js"),
            make_record("Element#fade", file="lib/effects.js", extension=True),
        )

        fade = tree.get("Element#fade")
        assert fade.out_file == "dom"
        assert fade.original_file == "lib/effects.js"


class TestSplitByClass:
    """Tests for per-class partitions."""

    def test_classes_in_one_file_get_own_partitions(self, resolve, make_record):
        """Test that A and B from one file are split, and A's members stay with A."""
        tree = resolve(
            make_record("A", type="class", file="lib/widgets.js", line=1),
            make_record("A#go", file="lib/widgets.js", line=2),
            make_record("B", type="class", file="lib/widgets.js", line=10),
            make_record("B#stop", file="lib/widgets.js", line=11),
            split_by_class=True,
            suffix="_api",
        )

        assert tree.get("A").out_file == "A_api"
        assert tree.get("B").out_file == "B_api"
        assert tree.get("A#go").out_file == "A_api"
        assert tree.get("B#stop").out_file == "B_api"

    def test_ownerless_member_uses_file(self, resolve, make_record):
        """Test that a member without an owner falls back to its file."""
        tree = resolve(make_record("helper", file="lib/util.js"), split_by_class=True)

        assert tree.get("helper").out_file == "util"

    def test_inherited_copies_take_owner_partition(self, resolve, make_record):
        """Test that merged members are output with the class they were merged into."""
        tree = resolve(
            make_record("Draggable", type="class", file="lib/drag.js"),
            make_record("Draggable#drag", file="lib/drag.js"),
            make_record("Panel", type="class", file="lib/panel.js", inherits=["Draggable"]),
            split_by_class=True,
        )

        [copy] = tree.get("Panel").children
        assert copy.out_file == "Panel"
        assert tree.get("Draggable#drag").out_file == "Draggable"


class TestSplitFromNamespace:
    """Tests for hoisting namespace classes."""

    def test_static_classes_hoisted(self, resolve, make_record):
        """Test that classes nested in a namespace move to the top level."""
        tree = resolve(
            make_record("Ajax", type="namespace", file="lib/ajax.js"),
            make_record("Ajax.Request", type="class", file="lib/ajax.js"),
            make_record("Ajax.VERSION", type="property", file="lib/ajax.js"),
            split_from_ns=True,
        )

        assert [node.id for node in tree.children] == ["Ajax", "Ajax.Request"]
        assert [child.id for child in tree.get("Ajax").children] == ["Ajax.VERSION"]

    def test_namespace_inside_section_hoisted_into_section(self, resolve, make_record):
        """Test that classes of a namespace nested in a section move up to that section."""
        tree = resolve(
            make_record("UI", type="section", line=1),
            make_record("Widgets", type="namespace", section="UI", line=2),
            make_record("Widgets.Label", type="class", section="UI", line=3),
            make_record("Widgets.VERSION", type="property", section="UI", line=4),
            split_from_ns=True,
        )

        [section] = tree.children
        assert [child.id for child in section.children] == ["Widgets", "Widgets.Label"]
        assert [child.id for child in tree.get("Widgets").children] == ["Widgets.VERSION"]
        assert tree.get("Widgets.Label").out_file == "ui"
