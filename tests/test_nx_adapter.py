import unittest
import warnings

import networkx as nx
import polars as pl

from tidynet import construct
from tidynet.adapters.networkx import from_networkx, to_networkx
from tidynet.core.structure import NODE_ID


class TestNetworkXAdapter(unittest.TestCase):

    def setUp(self):
        self.G = construct(
            pl.DataFrame({"node_key": ["A", "B", "C"], "kind": ["x", "y", None]}),
            pl.DataFrame({"from": ["A", "B", "A"], "to": ["B", "C", "B"], "weight": [2.0, 3.0, 1.0]}),
            directed=True,
        )

    def test_multigraph_export(self):
        nxG = to_networkx(self.G)
        self.assertIsInstance(nxG, nx.MultiDiGraph)
        self.assertEqual(list(nxG.nodes), ["A", "B", "C"])
        self.assertEqual(nxG.number_of_edges(), 3)
        self.assertEqual(nxG["A"]["B"][2]["weight"], 1.0)
        self.assertEqual(nxG.nodes["A"]["kind"], "x")
        # nulls are omitted
        self.assertNotIn("kind", nxG.nodes["C"])
        self.assertEqual(nxG.graph["identity"], "keyed")

    def test_roundtrip(self):
        G2 = from_networkx(to_networkx(self.G))
        self.assertEqual(G2, self.G)

    def test_simple_collapses_with_warning(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            nxG = to_networkx(self.G, simple=True)
        self.assertIsInstance(nxG, nx.DiGraph)
        self.assertEqual(nxG["A"]["B"]["weight"], 1.0)  # min by default
        self.assertTrue(any(issubclass(w.category, RuntimeWarning) for w in caught))

    def test_simple_custom_aggregation(self):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            nxG = to_networkx(self.G, simple=True, edge_aggs={"weight": "sum"})
        self.assertEqual(nxG["A"]["B"]["weight"], 3.0)

    def test_edge_attrs_subset(self):
        nxG = to_networkx(self.G, edge_attrs=[])
        self.assertEqual(dict(nxG["B"]["C"][1]), {})

    def test_undirected_as_directed_mirrors(self):
        U = self.G.to_undirected()
        nxG = to_networkx(U, directed=True)
        self.assertEqual(nxG.number_of_edges(), 6)
        self.assertTrue(nxG.has_edge("C", "B"))

    def test_ordinal_roundtrip(self):
        G = construct(4, {"from": [1, 2, 3], "to": [2, 3, 4]})
        nxG = to_networkx(G)
        self.assertEqual(list(nxG.nodes), [1, 2, 3, 4])
        self.assertEqual(nxG.graph["identity"], "ordinal")
        G2 = from_networkx(nxG)
        self.assertEqual(G2.identity_column, NODE_ID)
        self.assertEqual(G2, G)

    def test_foreign_graph_is_keyed(self):
        G = from_networkx(nx.path_graph(["p", "q", "r"]))
        self.assertTrue(G.keyed)
        self.assertEqual(G.node_ids(), ["p", "q", "r"])
        self.assertEqual(G.ne, 2)
        self.assertFalse(G.directed)


class TestLazyProxy(unittest.TestCase):

    def setUp(self):
        self.G = construct(
            {"node_key": ["a", "b", "c", "d"]},
            {"from": ["a", "b", "c"], "to": ["b", "c", "d"], "weight": [1.0, 1.0, 5.0]},
        )

    def test_function_call(self):
        self.assertEqual(self.G.nx.shortest_path_length("a", "d"), 3)
        self.assertEqual(self.G.nx.shortest_path_length("a", "d", weight="weight"), 7.0)

    def test_conversion_is_cached_per_graph(self):
        first = self.G.nx.graph
        self.assertIs(self.G.nx.graph, first)
        G2 = self.G.activate("nodes").filter(lambda row: row.node_key != "d")
        self.assertIsNot(G2.nx.graph, first)
        self.assertEqual(G2.nx.number_of_nodes(), 3)

    def test_graph_method_fallback(self):
        self.assertTrue(self.G.nx.has_node("a"))

    def test_unknown_name(self):
        with self.assertRaises(AttributeError):
            self.G.nx.no_such_algorithm_here


class TestRegistry(unittest.TestCase):

    def test_available_backends(self):
        from tidynet.adapters import available_backends

        backends = available_backends()
        self.assertTrue(backends["networkx"])
        self.assertIn("igraph", backends)

    def test_load_adapter(self):
        from tidynet.adapters import load_adapter

        module = load_adapter("NetworkX")
        self.assertIs(module.to_networkx, to_networkx)
        with self.assertRaises(ValueError):
            load_adapter("graph-tool")

    def test_get_adapter_round_trip(self):
        from tidynet.adapters import get_adapter

        adapter = get_adapter("networkx")
        G = construct({"node_key": ["a", "b"]}, {"from": ["a"], "to": ["b"]})
        self.assertEqual(adapter.load(adapter.export(G)), G)
