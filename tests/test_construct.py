import polars as pl
import pytest

from tidynet import (
    DuplicateKeyError,
    Graph,
    GraphTableError,
    IncompleteKeyError,
    Identity,
    InvalidActivationError,
    ReferentialIntegrityError,
    UnknownColumnError,
    construct,
)
from tidynet.core.structure import NODE_ID

from .helpers import assert_integrity


class TestConstruct:
    def test_keyed_graph(self, keyed_graph):
        G = keyed_graph
        assert G.identity is Identity.KEYED
        assert G.keyed
        assert G.shape == (6, 7)
        assert G.node_ids() == ["A", "B", "C", "D", "E", "F"]
        assert not G.directed
        assert_integrity(G)

    def test_ordinal_graph_numbers_nodes_from_one(self, example_graph):
        G = example_graph
        assert G.identity is Identity.ORDINAL
        assert G.node_ids() == [1, 2, 3, 4, 5, 6]
        assert G.identity_column == NODE_ID
        # identity column is visible even though it is private
        assert G.nodes.columns == [NODE_ID, "labels"]
        assert_integrity(G)

    def test_int_builds_bare_nodes(self):
        G = construct(3)
        assert G.nv == 3 and G.ne == 0
        assert G.edges.columns == ["from", "to"]

    def test_from_edges_derives_keys_in_order(self):
        G = Graph.from_edges({"from": ["x", "y"], "to": ["z", "x"]})
        assert G.node_ids() == ["x", "z", "y"]
        assert G.keyed

    def test_rows_as_dicts(self):
        G = construct(
            [{"node_key": "a", "n": 1}, {"node_key": "b", "n": 2}],
            [{"from": "a", "to": "b"}],
            directed=True,
        )
        assert G.directed
        assert G.nodes.get_column("n").to_list() == [1, 2]

    def test_dangling_keyed_endpoint(self):
        with pytest.raises(ReferentialIntegrityError) as exc:
            construct({"node_key": ["a", "b"]}, {"from": ["a"], "to": ["zz"]})
        assert "zz" in str(exc.value)
        assert isinstance(exc.value, ValueError)
        assert isinstance(exc.value, GraphTableError)

    @pytest.mark.parametrize("bad", [0, 4, -1])
    def test_ordinal_out_of_range(self, bad):
        with pytest.raises(ReferentialIntegrityError):
            construct(3, {"from": [1], "to": [bad]})

    def test_duplicate_keys(self):
        with pytest.raises(DuplicateKeyError) as exc:
            construct({"node_key": ["a", "b", "a"]})
        assert exc.value.keys == ["a"]

    def test_null_key(self):
        with pytest.raises(IncompleteKeyError):
            construct(pl.DataFrame({"node_key": ["a", None]}))

    def test_missing_endpoint_column(self):
        with pytest.raises(UnknownColumnError) as exc:
            construct({"node_key": ["a"]}, {"from": ["a"]})
        assert isinstance(exc.value, KeyError)
        assert "to" in str(exc.value)

    def test_verbs_on_graph_need_activation(self, keyed_graph):
        for verb in ("filter", "select", "mutate", "arrange", "pull"):
            with pytest.raises(InvalidActivationError):
                getattr(keyed_graph, verb)("x")

    def test_unknown_target(self, keyed_graph):
        with pytest.raises(InvalidActivationError):
            keyed_graph.activate("vertices")


class TestConveniences:
    def test_equality_is_by_value(self, keyed_graph):
        other = construct(keyed_graph.nodes, keyed_graph.edges)
        assert other == keyed_graph
        assert other.mark("history is not compared") == keyed_graph
        assert other != keyed_graph.activate("edges").filter(lambda r: r.weight < 3)
        assert construct(keyed_graph.nodes, keyed_graph.edges, directed=True) != keyed_graph

    def test_reverse_swaps_endpoints(self, directed_graph):
        R = directed_graph.reverse()
        assert R.edge_list()[0] == ("b", "a")
        assert R.reverse() == directed_graph

    def test_to_undirected(self, directed_graph):
        U = directed_graph.to_undirected()
        assert not U.directed
        assert U.edge_list() == directed_graph.edge_list()

    def test_pipe(self, keyed_graph):
        assert keyed_graph.pipe(lambda g, k: g.nv * k, 2) == 12

    def test_private_columns_hidden(self):
        G = construct({"node_key": ["a"], "__secret": [1]}, {"from": ["a"], "to": ["a"], "__w": [1]})
        assert G.nodes.columns == ["node_key"]
        assert G.edges.columns == ["from", "to"]
        assert "__secret" in G.nodes_view(public_only=False).columns

    def test_repr(self, keyed_graph):
        r = repr(keyed_graph)
        assert "nodes=6" in r and "edges=7" in r and "keyed" in r

    def test_reimport_private_ordinal_view(self, example_graph):
        G = example_graph.activate("nodes").filter(lambda r: r.labels != "B")
        again = construct(G.nodes_view(public_only=False), G.edges_view(public_only=False))
        assert again.node_ids() == [1, 3, 4, 5, 6]
        assert again == G
