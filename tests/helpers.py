from polars.testing import assert_frame_equal

from tidynet import Graph
from tidynet.core.structure import FROM, TO


def assert_integrity(G: Graph):
    """Every edge endpoint names a live node identity."""
    ids = set(G.node_ids())
    for u, v in G.edge_list():
        assert u in ids, f"dangling from={u!r}"
        assert v in ids, f"dangling to={v!r}"
    assert len(ids) == G.number_of_nodes(), "duplicate node identities"


def assert_graphs_equal(G1: Graph, G2: Graph, check_dtypes: bool = True):
    assert G1.directed == G2.directed
    assert G1.identity is G2.identity
    assert_frame_equal(G1.nodes_view(public_only=False), G2.nodes_view(public_only=False), check_dtypes=check_dtypes)
    assert_frame_equal(G1.edges_view(public_only=False), G2.edges_view(public_only=False), check_dtypes=check_dtypes)


def edge_pairs(G: Graph, undirected: bool = None) -> list:
    """Edge endpoints as tuples; order-free pairs for undirected graphs."""
    undirected = (not G.directed) if undirected is None else undirected
    edges = G.edges_view()
    pairs = list(zip(edges.get_column(FROM).to_list(), edges.get_column(TO).to_list()))
    if undirected:
        return sorted(tuple(sorted(p, key=str)) for p in pairs)
    return sorted(pairs, key=str)
