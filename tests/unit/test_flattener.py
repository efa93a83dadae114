"""
Tests for TreeFlattener: standards collection and family grouping.
"""

from crexplorer_core.adapters.memory_tree import InMemoryTreeSource
from crexplorer_core.domain.models import Document, Link
from crexplorer_core.services.graph_builder import GraphBuilder
from crexplorer_core.services.flattener import (
    TreeFlattener, base_name, grouped_id, base_from_grouped, is_grouped_id,
)

from conftest import build_sample_roots


class TestNaming:
    """Base-name and group-id helpers."""

    def test_base_name_keeps_prefix(self):
        assert base_name("ISO 27001:2013") == "ISO 27001"
        assert base_name("ASVS:V1:1.2") == "ASVS"
        assert base_name("NoDelimiter") == "NoDelimiter"

    def test_grouped_id_round_trip(self):
        gid = grouped_id("ISO")
        assert gid == "grouped_ISO"
        assert is_grouped_id(gid)
        assert base_from_grouped(gid) == "ISO"
        assert not is_grouped_id("ISO:1")


class TestCollectStandards:
    """Raw standards walk."""

    def test_path_multiplicity_is_kept(self):
        """ISO:1 is reachable via C1 and via C1 -> C2, so it is collected twice."""
        result = TreeFlattener().flatten(build_sample_roots())
        ids = [d.id for d in result.raw_standards]
        assert ids == ["ISO:1", "ISO:2", "NIST:A", "ISO:1"]
        assert result.path_multiplicity("ISO") == 3

    def test_cycles_terminate(self):
        a = Document("STD:a", "A", "Standard")
        b = Document("STD:b", "B", "Standard")
        a.links = [Link("Related", b)]
        b.links = [Link("Related", a)]
        result = TreeFlattener().flatten([a])
        # a counts as the root and again through the link back from b
        assert [d.id for d in result.raw_standards] == ["STD:a", "STD:b", "STD:a"]
        assert [d.id for d in result.groups["STD"]] == ["STD:a", "STD:b"]

    def test_root_without_links_is_skipped(self):
        lone = Document("ISO:9", "Lone", "Standard")
        result = TreeFlattener().flatten(build_sample_roots() + [lone])
        assert "ISO:9" not in {d.id for d in result.raw_standards}
        assert "ISO:9" not in result.group_map

    def test_missing_link_targets_are_ignored(self):
        root = Document("C1", "Root", "CRE", links=[Link("Contains", None)])
        result = TreeFlattener().flatten([root])
        assert result.raw_standards == []


class TestGrouping:
    """Family groups, identity mapping and dropdown entries."""

    def test_groups_hold_distinct_members(self):
        result = TreeFlattener().flatten(build_sample_roots())
        assert [d.id for d in result.groups["ISO"]] == ["ISO:1", "ISO:2"]
        assert [d.id for d in result.groups["NIST"]] == ["NIST:A"]

    def test_group_map(self):
        result = TreeFlattener().flatten(build_sample_roots())
        assert result.group_map == {
            "ISO:1": "grouped_ISO",
            "ISO:2": "grouped_ISO",
            "NIST:A": "grouped_NIST",
        }

    def test_group_options_label_member_count(self):
        result = TreeFlattener().flatten(build_sample_roots())
        texts = [(o.key, o.text, o.value) for o in result.group_options]
        assert texts == [
            ("grouped_ISO", "ISO (2)", "grouped_ISO"),
            ("grouped_NIST", "NIST (1)", "grouped_NIST"),
        ]

    def test_members_lookup_by_grouped_id(self):
        result = TreeFlattener().flatten(build_sample_roots())
        assert len(result.members("grouped_ISO")) == 2
        assert result.members("grouped_MISSING") == []


def build_clique(size: int):
    """size CREs all linked to each other, each also linking to ISO:1."""
    standard = Document("ISO:1", "ISO 1", "Standard")
    cres = [Document(f"C{i}", f"CRE {i}", "CRE") for i in range(size)]
    for cre in cres:
        cre.links = [Link("Related", other) for other in cres if other is not cre]
        cre.links.append(Link("Linked To", standard))
    return cres


class TestDenseGraphs:
    """Densely cyclic stores are walked once per document."""

    def test_clique_is_flattened_once_per_document(self):
        cres = build_clique(14)
        result = TreeFlattener().flatten([cres[0]])
        # One Linked To link per CRE, each CRE expanded once
        assert len(result.raw_standards) == 14
        assert [d.id for d in result.groups["ISO"]] == ["ISO:1"]
        assert result.path_multiplicity("ISO") == 14

    def test_every_root_is_walked_independently(self):
        cres = build_clique(12)
        result = TreeFlattener().flatten(cres[:3])
        assert len(result.raw_standards) == 36

    def test_store_key_controls_revisits(self):
        """Documents sharing a store key are expanded only once."""
        std = Document("STD:x", "X", "Standard")
        first = Document("C1", "Copy", "CRE", links=[Link("Linked To", std)])
        second = Document("C1", "Copy", "CRE", links=[Link("Linked To", std)])
        root = Document("R", "Root", "CRE", links=[Link("Related", first), Link("Related", second)])

        by_identity = TreeFlattener(store_key=lambda d: str(id(d))).flatten([root])
        by_id = TreeFlattener().flatten([root])
        assert len(by_identity.raw_standards) == 2
        assert len(by_id.raw_standards) == 1

    def test_clique_graph(self):
        cres = build_clique(12)
        result = GraphBuilder(InMemoryTreeSource([cres[0]])).build()
        # 66 CRE pairs plus one edge per CRE to the ISO group
        assert result.edge_count == 78
        assert result.node_count == 13
        group = next(n for n in result.payload.nodes if n.id == "grouped_ISO")
        assert group.member_count == 1
