"""Tests for discovery, inventory and matcher."""

import logging
from pathlib import Path

import pytest

from scanner.discovery import (
    descriptor_unit,
    iter_descriptors,
    iter_files,
    source_name,
    unit_from_path,
)
from scanner.errors import ArtifactCollisionError, DescriptorError
from scanner.inventory import build_inventory, parse_descriptor
from scanner.matcher import ReferenceMatcher, build_pattern, build_reverse_index


class TestUnitDerivation:
    """Tests for mapping file paths to units."""

    def test_unit_two_levels_above_src(self):
        """Test the unit is the directory two levels above src."""
        path = Path("/repo/CarA/CarA-config/src/main/synapse-config/proxy/P.xml")
        assert unit_from_path(path) == "CarA"

    def test_deepest_src_wins(self):
        """Test that the deepest src segment below the root is used."""
        root = Path("/repo")
        path = root / "src/x/CarB/CarB-config/src/main/S.xml"
        assert unit_from_path(path, root) == "CarB"

    def test_src_above_root_is_ignored(self):
        """Test directories above the scan root never make a file attributable."""
        root = Path("/home/dev/src/ws")
        assert unit_from_path(root / "CarA/CarA-config/main/P.xml", root) is None
        assert descriptor_unit(root / "CarA/CarA-config/artifact.xml", "src", root) is None
        assert unit_from_path(root / "CarA/CarA-config/src/P.xml", root) == "CarA"

    def test_unit_directly_below_root(self):
        """Test a unit may be the first directory below the root."""
        root = Path("/repo")
        assert unit_from_path(root / "CarA/CarA-config/src/P.xml", root) == "CarA"
        assert descriptor_unit(root / "CarA/CarA-config/artifact.xml", "module", root) == "CarA"
        assert descriptor_unit(root / "CarA/artifact.xml", "module", root) is None

    def test_no_src_segment(self):
        """Test paths without src are not attributable."""
        assert unit_from_path(Path("/repo/CarA/CarA-config/main/P.xml")) is None

    def test_src_too_close_to_anchor(self):
        """Test the filesystem anchor is never a unit."""
        assert unit_from_path(Path("/x/src/P.xml")) is None

    def test_file_named_src_is_not_a_directory(self):
        """Test a file literally named src is not a src segment."""
        assert unit_from_path(Path("/repo/CarA/module/src")) is None

    def test_descriptor_module_layout(self):
        """Test the module layout takes the grandparent directory."""
        path = Path("/repo/CarA/CarA-config/artifact.xml")
        assert descriptor_unit(path, "module") == "CarA"
        assert descriptor_unit(path, "src") is None

    def test_source_name(self):
        """Test files are named without extension."""
        assert source_name(Path("/a/b/OrderProxy.xml")) == "OrderProxy"


class TestWalkPolicy:
    """Tests for which files the scans visit."""

    def test_target_dirs_are_pruned(self, tree):
        """Test that nothing under target/ is yielded."""
        kept = tree.config_file("CarA", "Kept.xml", "<sequence/>")
        tree.config_file("CarA", "Built.xml", "<sequence/>", sub="src/main/target")
        tree.descriptor("CarA", ["SeqA"], sub="target/src")

        files = list(iter_files(tree.root))
        descriptors = list(iter_descriptors(tree.root))

        assert files == [kept]
        assert descriptors == []

    def test_skip_files_and_extensions(self, tree):
        """Test pom.xml, artifact.xml and non-xml files are excluded."""
        kept = tree.config_file("CarA", "Seq.xml", "<sequence/>")
        tree.config_file("CarA", "pom.xml", "<project/>")
        tree.config_file("CarA", "notes.txt", "SeqA")
        tree.config_file("CarA", "Seq.XML.bak", "<sequence/>")
        tree.descriptor("CarA", ["SeqA"])

        assert list(iter_files(tree.root)) == [kept]

    def test_walk_is_sorted(self, tree):
        """Test files are yielded in a stable order."""
        b = tree.config_file("CarB", "B.xml", "<sequence/>")
        a = tree.config_file("CarA", "A.xml", "<sequence/>")

        assert list(iter_files(tree.root)) == [a, b]

    def test_custom_skip_dirs(self, tree):
        """Test configured skip directories replace the defaults."""
        tree.config_file("CarA", "A.xml", "<sequence/>", sub="src/main/generated")
        built = tree.config_file("CarA", "B.xml", "<sequence/>", sub="src/main/target")

        assert list(iter_files(tree.root, skip_dirs={"generated"})) == [built]


class TestInventory:
    """Tests for the inventory builder."""

    def test_parse_descriptor(self, tree):
        """Test artifact entries are read with their item."""
        path = tree.descriptor("CarA", ["SeqA", "ProxyA"])

        artifacts = parse_descriptor(path)

        assert [a.name for a in artifacts] == ["SeqA", "ProxyA"]
        assert artifacts[0].type == "synapse/sequence"
        assert artifacts[0].item_file == "SeqA.xml"
        assert artifacts[0].item_path == "src/main/synapse-config"

    def test_descriptor_without_item(self, tree):
        """Test the item element is optional."""
        path = tree.config_file("CarA", "artifact.xml", '<artifacts><artifact name="E" type="t"/></artifacts>')

        artifacts = parse_descriptor(path)

        assert artifacts[0].name == "E"
        assert artifacts[0].item_file is None

    def test_build_inventory(self, tree):
        """Test artifacts are grouped by owning unit."""
        tree.descriptor("CarA", ["SeqA", "ProxyA"])
        tree.descriptor("CarB", ["SeqB"])

        inventory = build_inventory(tree.root)

        assert inventory == {"CarA": ["SeqA", "ProxyA"], "CarB": ["SeqB"]}

    def test_descriptors_of_one_unit_are_concatenated(self, tree):
        """Test lists merge in walk order and keep duplicates."""
        tree.descriptor("CarA", ["SeqA", "Shared"])
        second = tree.root / "CarA" / "CarA-extra" / "src" / "artifact.xml"
        second.parent.mkdir(parents=True)
        second.write_text('<artifacts><artifact name="Shared" type="t"/></artifacts>', encoding="utf-8")

        inventory = build_inventory(tree.root, workers=3)

        assert inventory == {"CarA": ["SeqA", "Shared", "Shared"]}

    def test_unit_without_artifacts_is_listed(self, tree):
        """Test a descriptor declaring nothing still registers its unit."""
        tree.descriptor("CarA", [])

        assert build_inventory(tree.root) == {"CarA": []}

    def test_unattributable_descriptor_is_skipped(self, tree):
        """Test descriptors without a src segment contribute nothing."""
        stray = tree.root / "CarA" / "artifact.xml"
        stray.parent.mkdir(parents=True)
        stray.write_text('<artifacts><artifact name="X" type="t"/></artifacts>', encoding="utf-8")

        assert build_inventory(tree.root) == {}

    def test_module_layout(self, tree):
        """Test descriptors beside src/ are attributed with the module layout."""
        descriptor = tree.module_dir("CarA") / "artifact.xml"
        descriptor.parent.mkdir(parents=True)
        descriptor.write_text('<artifacts><artifact name="SeqA" type="t"/></artifacts>', encoding="utf-8")

        assert build_inventory(tree.root, layout="module") == {"CarA": ["SeqA"]}

    def test_malformed_descriptor_is_fatal(self, tree):
        """Test a malformed descriptor aborts the inventory."""
        tree.descriptor("CarA", ["SeqA"])
        broken = tree.descriptor("CarB", ["SeqB"])
        broken.write_text("<artifacts><artifact name=", encoding="utf-8")

        with pytest.raises(DescriptorError) as excinfo:
            build_inventory(tree.root)

        assert excinfo.value.path == broken
        assert str(broken) in str(excinfo.value)


class TestReverseIndex:
    """Tests for inverting the inventory."""

    def test_inversion(self):
        """Test each artifact maps to its unit."""
        index = build_reverse_index({"CarA": ["SeqA", "ProxyA"], "CarB": ["SeqB"]})

        assert index == {"SeqA": "CarA", "ProxyA": "CarA", "SeqB": "CarB"}

    def test_collision_last_unit_wins(self, caplog):
        """Test collisions go to the alphabetically last unit, with a warning."""
        caplog.set_level(logging.WARNING, logger="scanner.matcher")

        index = build_reverse_index({"CarB": ["Shared"], "CarA": ["Shared"]})

        assert index["Shared"] == "CarB"
        assert "Shared" in caplog.text

    def test_duplicates_within_unit_are_not_collisions(self):
        """Test a unit declaring an artifact twice is fine in strict mode."""
        index = build_reverse_index({"CarA": ["SeqA", "SeqA"]}, strict=True)

        assert index == {"SeqA": "CarA"}

    def test_strict_collision(self):
        """Test strict mode rejects collisions."""
        with pytest.raises(ArtifactCollisionError) as excinfo:
            build_reverse_index({"CarA": ["Shared"], "CarB": ["Shared"]}, strict=True)

        assert excinfo.value.units == ("CarA", "CarB")


class TestReferenceMatcher:
    """Tests for the raw text matcher."""

    def test_find_references(self):
        """Test every occurrence is found, anywhere in the text."""
        matcher = ReferenceMatcher.from_inventory({"CarA": ["SeqA"], "CarB": ["SeqB"]})

        text = '<sequence key="SeqB"/><!-- SeqA --> <log value="SeqB"/>'

        assert matcher.find_references(text) == ["SeqB", "SeqA", "SeqB"]

    def test_longer_names_are_not_shadowed(self):
        """Test a name that prefixes another does not hide it."""
        matcher = ReferenceMatcher.from_inventory({"CarA": ["Seq"], "CarB": ["SeqLong"]})

        assert matcher.find_references("SeqLong Seq") == ["SeqLong", "Seq"]

    def test_names_are_escaped(self):
        """Test regex metacharacters in names are literal."""
        matcher = ReferenceMatcher.from_inventory({"CarA": ["a.b"]})

        assert matcher.find_references("axb a.b") == ["a.b"]

    def test_empty_inventory_matches_nothing(self):
        """Test an empty inventory never matches."""
        matcher = ReferenceMatcher.from_inventory({})

        assert matcher.find_references("anything") == []
        assert build_pattern([]).search("") is None

    def test_resolve(self):
        """Test resolution through the reverse index."""
        matcher = ReferenceMatcher.from_inventory({"CarA": ["SeqA"]})

        assert matcher.resolve("SeqA") == "CarA"
        assert matcher.resolve("Unknown") is None
        assert len(matcher) == 1
