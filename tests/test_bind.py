import polars as pl
import pytest

from tidynet import (
    DuplicateKeyError,
    IncompleteKeyError,
    ReferentialIntegrityError,
    UnknownColumnError,
    bind_edges,
    bind_nodes,
    construct,
)

from .helpers import assert_graphs_equal, assert_integrity


class TestBindNodes:
    def test_keyed_append(self, keyed_graph):
        G = bind_nodes(keyed_graph, {"node_key": ["G"], "labels": ["G"], "extra": [1]})
        assert G.node_ids()[-1] == "G"
        # missing columns are filled with nulls
        assert G.nodes.get_column("extra").to_list() == [None] * 6 + [1]

    def test_keyed_needs_keys(self, keyed_graph):
        with pytest.raises(IncompleteKeyError):
            bind_nodes(keyed_graph, {"labels": ["G"]})
        with pytest.raises(IncompleteKeyError):
            bind_nodes(keyed_graph, 2)

    def test_keyed_collision(self, keyed_graph):
        with pytest.raises(DuplicateKeyError):
            bind_nodes(keyed_graph, {"node_key": ["A"]})

    def test_ordinal_issues_fresh_ids(self, example_graph):
        G = example_graph.bind_nodes({"labels": ["G", "H"]})
        assert G.node_ids() == [1, 2, 3, 4, 5, 6, 7, 8]
        G = G.bind_nodes(1)
        assert G.node_ids()[-1] == 9

    def test_ordinal_ids_never_reused(self, example_graph):
        G = example_graph.activate("nodes").filter(lambda row: row.labels != "F")
        G = G.bind_nodes({"labels": ["G"]})
        assert G.node_ids() == [1, 2, 3, 4, 5, 7]

    def test_ordinal_rejects_identity_columns(self, example_graph):
        with pytest.raises(IncompleteKeyError):
            example_graph.bind_nodes({"node_key": ["G"]})


class TestBindEdges:
    def test_append(self, keyed_graph):
        G = bind_edges(keyed_graph, [{"from": "A", "to": "F", "weight": 9.0}])
        assert G.ne == 8
        assert G.edge_list()[-1] == ("A", "F")
        assert_integrity(G)

    def test_unknown_endpoint(self, keyed_graph):
        with pytest.raises(ReferentialIntegrityError):
            bind_edges(keyed_graph, {"from": ["A"], "to": ["G"]})

    def test_missing_endpoint_column(self, keyed_graph):
        with pytest.raises(UnknownColumnError):
            bind_edges(keyed_graph, {"from": ["A"]})

    def test_int_weights_relax_to_float(self, keyed_graph):
        G = keyed_graph.bind_edges({"from": ["A"], "to": ["D"], "weight": [5]})
        assert G.edges.schema["weight"] == pl.Float64


@pytest.mark.parametrize("fixture, g_id", [("keyed_graph", "G"), ("example_graph", 7)])
def test_round_trip_add_then_remove(request, fixture, g_id):
    """Adding node G with edges (A,G) and (C,G), then filtering G out, restores the graph."""
    G0 = request.getfixturevalue(fixture)
    a, c = G0.node_ids()[0], G0.node_ids()[2]

    new_node = {"labels": ["G"]}
    if G0.keyed:
        new_node["node_key"] = ["G"]
    G1 = G0.bind_nodes(new_node)
    G2 = G1.bind_edges({"from": [a, c], "to": [g_id, g_id], "weight": [0.5, 1.0]})
    assert G2.shape == (7, 9)
    assert_integrity(G2)

    G3 = G2.activate("nodes").filter(lambda row: row.labels != "G")
    assert G3.shape == (6, 7)
    assert_graphs_equal(G3, G0)
    assert G3 == G0


@pytest.mark.parametrize("fixture, g_id", [("keyed_graph", "G"), ("example_graph", 7)])
def test_round_trip_remove_edges_then_node(request, fixture, g_id):
    """Same round trip, dropping the new edges explicitly before node G."""
    G0 = request.getfixturevalue(fixture)
    a, c = G0.node_ids()[0], G0.node_ids()[2]

    new_node = {"labels": ["G"]}
    if G0.keyed:
        new_node["node_key"] = ["G"]
    G2 = G0.bind_nodes(new_node).bind_edges({"from": [a, c], "to": [g_id, g_id], "weight": [0.5, 1.0]})

    G3 = G2.activate("edges").filter(lambda row: row["to"] != g_id)
    assert G3.shape == (7, 7)
    assert_integrity(G3)

    G4 = G3.activate("nodes").filter(lambda row: row.labels != "G")
    assert G4.shape == (6, 7)
    assert_graphs_equal(G4, G0)
    assert G4 == G0


class TestBindKeyDtypes:
    def test_int_key_colliding_with_string_key(self):
        G = construct({"node_key": ["1", "2"]}, {"from": ["1"], "to": ["2"]})
        with pytest.raises(DuplicateKeyError):
            G.bind_nodes({"node_key": [1]})

    def test_int_key_takes_graph_dtype(self):
        G = construct({"node_key": ["1", "2"]}, {"from": ["1"], "to": ["2"]})
        G2 = G.bind_nodes({"node_key": [3]})
        assert G2.node_ids() == ["1", "2", "3"]
        assert G2.nodes.schema["node_key"] == pl.String
        assert_integrity(G2.bind_edges({"from": ["1"], "to": ["3"]}))

    def test_uncastable_keys(self):
        G = construct({"node_key": [1, 2]})
        with pytest.raises(IncompleteKeyError):
            G.bind_nodes({"node_key": ["x"]})

    def test_dtype_change_breaks_equality(self):
        G0 = construct({"node_key": ["a", "b"]}, {"from": ["a"], "to": ["b"], "weight": [1]})
        G1 = G0.bind_edges({"from": ["b"], "to": ["a"], "weight": [0.5]})
        G2 = G1.activate("edges").filter(lambda row: row.weight >= 1)
        assert G2.edge_list() == G0.edge_list()
        assert G2.edges.schema["weight"] == pl.Float64
        assert G2 != G0
