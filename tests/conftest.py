import polars as pl
import pytest

from tidynet import Graph, construct

EXAMPLE_NODES = {
    "node_key": ["A", "B", "C", "D", "E", "F"],
    "labels": ["A", "B", "C", "D", "E", "F"],
}
EXAMPLE_EDGES = {
    "from": ["A", "A", "B", "C", "D", "D", "E"],
    "to": ["B", "C", "C", "D", "E", "F", "F"],
    "weight": [1.0, 2.0, 1.0, 3.0, 1.0, 2.0, 1.0],
}


@pytest.fixture
def keyed_graph() -> Graph:
    """Two triangles (A, B, C) and (D, E, F) bridged by C - D; keyed by letter."""
    return construct(pl.DataFrame(EXAMPLE_NODES), pl.DataFrame(EXAMPLE_EDGES))


@pytest.fixture
def example_graph() -> Graph:
    """The same topology with ordinal identity: A..F are nodes 1..6."""
    idx = {k: i for i, k in enumerate(EXAMPLE_NODES["node_key"], start=1)}
    nodes = pl.DataFrame({"labels": EXAMPLE_NODES["labels"]})
    edges = pl.DataFrame({
        "from": [idx[k] for k in EXAMPLE_EDGES["from"]],
        "to": [idx[k] for k in EXAMPLE_EDGES["to"]],
        "weight": EXAMPLE_EDGES["weight"],
    })
    return construct(nodes, edges)


@pytest.fixture
def directed_graph() -> Graph:
    """a -> b -> c, a -> c, plus a self-loop on c and a parallel a -> b."""
    nodes = pl.DataFrame({"node_key": ["a", "b", "c"]})
    edges = pl.DataFrame({
        "from": ["a", "b", "a", "c", "a"],
        "to": ["b", "c", "c", "c", "b"],
        "w": [1.0, 2.0, 5.0, 0.5, 3.0],
    })
    return construct(nodes, edges, directed=True)


@pytest.fixture
def star_graph() -> Graph:
    """Ordinal star: hub 1 joined to leaves 2..5 with weights 1..4."""
    return construct(
        5,
        pl.DataFrame({"from": [1, 1, 1, 1], "to": [2, 3, 4, 5], "weight": [1.0, 2.0, 3.0, 4.0]}),
    )


@pytest.fixture
def tmpdir_fixture(tmp_path):
    return tmp_path
