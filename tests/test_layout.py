import math

import polars as pl
import pytest

from tidynet import UnknownColumnError, construct, create_layout
from tidynet.utils.layout import LAYOUTS


@pytest.mark.parametrize("name", [n for n in LAYOUTS if n != "manual"])
def test_every_layout_positions_every_node(keyed_graph, name):
    xy = create_layout(keyed_graph, name, seed=1)
    assert xy.columns == ["node_key", "labels", "x", "y"]
    assert xy.height == 6
    assert xy.schema["x"] == pl.Float64
    assert all(math.isfinite(v) for v in xy.get_column("x").to_list() + xy.get_column("y").to_list())


def test_circle_is_on_the_unit_circle(keyed_graph):
    xy = create_layout(keyed_graph, "circle")
    for x, y in zip(xy.get_column("x").to_list(), xy.get_column("y").to_list()):
        assert math.hypot(x, y) == pytest.approx(1.0, abs=1e-5)


def test_seeded_layouts_repeat(keyed_graph):
    a = create_layout(keyed_graph, "fr", seed=3)
    b = create_layout(keyed_graph, "fr", seed=3)
    assert a.equals(b)


def test_manual(keyed_graph):
    G = keyed_graph.activate("nodes").mutate("x", [0, 1, 2, 3, 4, 5]).activate("nodes").mutate("y", [0] * 6)
    xy = create_layout(G, "manual")
    assert xy.get_column("x").to_list() == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]
    with pytest.raises(UnknownColumnError):
        create_layout(keyed_graph, "manual")


def test_unknown_layout(keyed_graph):
    with pytest.raises(ValueError):
        create_layout(keyed_graph, "hyperbolic")


def test_empty_graph():
    G = construct({"node_key": pl.Series([], dtype=pl.String)})
    assert create_layout(G).height == 0
