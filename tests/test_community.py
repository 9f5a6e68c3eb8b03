import unittest

import pytest

from tidynet import UnknownColumnError, construct, group_louvain, modularity

HAS_IG = True
try:
    import igraph as ig  # noqa: F401
except Exception:
    HAS_IG = False


class TestLouvain:
    def test_recovers_bridged_triangles(self, keyed_graph):
        labels = group_louvain(keyed_graph, seed=1)
        assert sorted(set(labels)) == [1, 2]
        assert labels[0] == labels[1] == labels[2]
        assert labels[3] == labels[4] == labels[5]
        assert labels[0] != labels[3]

    def test_labels_ordered_by_size(self):
        # a 4-clique and a separate pair
        edges = {
            "from": ["a", "a", "a", "b", "b", "c", "x"],
            "to": ["b", "c", "d", "c", "d", "d", "y"],
        }
        G = construct({"node_key": ["x", "y", "a", "b", "c", "d"]}, edges)
        assert group_louvain(G, seed=0) == [2, 2, 1, 1, 1, 1]

    def test_isolated_nodes_are_singletons(self):
        labels = group_louvain(construct(3), seed=0)
        assert sorted(labels) == [1, 2, 3]

    def test_directed_warns(self, directed_graph):
        with pytest.warns(RuntimeWarning):
            labels = group_louvain(directed_graph, seed=0)
        assert len(labels) == 3

    def test_deterministic_with_seed(self, keyed_graph):
        assert group_louvain(keyed_graph, weights="weight", seed=7) == group_louvain(
            keyed_graph, weights="weight", seed=7
        )

    def test_bad_backend(self, keyed_graph):
        with pytest.raises(ValueError):
            group_louvain(keyed_graph, backend="graph-tool")


class TestModularity:
    def test_louvain_beats_trivial(self, keyed_graph):
        G = keyed_graph.activate("nodes").mutate("group", lambda g: group_louvain(g, seed=1))
        q = modularity(G, "group")
        assert q > modularity(G, [1] * 6)
        # two triangles joined by one edge: 2 * (3/7 - (7/14) ** 2)
        assert q == pytest.approx(2 * (3 / 7 - 0.25))

    def test_trivial_partition_is_zero(self, keyed_graph):
        assert modularity(keyed_graph, [1] * 6) == pytest.approx(0.0)

    def test_unknown_column(self, keyed_graph):
        with pytest.raises(UnknownColumnError):
            modularity(keyed_graph, "group")

    def test_misaligned_labels(self, keyed_graph):
        with pytest.raises(ValueError):
            modularity(keyed_graph, [1, 2])


class TestIgraphBackend(unittest.TestCase):
    @unittest.skipUnless(HAS_IG, "python-igraph not installed")
    def test_louvain_igraph(self):
        G = construct(
            {"node_key": list("ABCDEF")},
            {"from": list("AABCDDE"), "to": list("BCCDEFF")},
        )
        labels = group_louvain(G, seed=3, backend="igraph")
        self.assertEqual(labels, [1, 1, 1, 2, 2, 2])

    @unittest.skipUnless(HAS_IG, "python-igraph not installed")
    def test_betweenness_matches_networkx(self):
        from tidynet import centrality_betweenness

        G = construct(5, {"from": [1, 1, 1, 1], "to": [2, 3, 4, 5]})
        for normalized in (False, True):
            self.assertEqual(
                pytest.approx(centrality_betweenness(G, normalized=normalized)),
                centrality_betweenness(G, normalized=normalized, backend="igraph"),
            )
