import polars as pl
import pytest

from tidynet import ReferentialIntegrityError, UnknownColumnError
from tidynet.io.csv import from_dataframe, load_csv_to_graph


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestLoadCSV:
    def test_edges_only(self, tmpdir_fixture):
        edges = _write(tmpdir_fixture / "edges.csv", "Source,Target,weight\nA,B,1.5\nB,C,2.0\nC,A,0.5\n")
        G = load_csv_to_graph(edges)
        assert G.keyed
        assert G.node_ids() == ["A", "B", "C"]
        assert G.edges.columns == ["from", "to", "weight"]
        assert G.edges.get_column("weight").to_list() == [1.5, 2.0, 0.5]

    def test_with_node_file(self, tmpdir_fixture):
        edges = _write(tmpdir_fixture / "e.csv", "src,dst\n1,2\n2,3\n")
        nodes = _write(tmpdir_fixture / "n.csv", "id,name\n1,one\n2,two\n3,three\n")
        G = load_csv_to_graph(edges, nodes, directed=True)
        assert G.directed
        assert G.node_ids() == [1, 2, 3]
        assert G.nodes.columns == ["node_key", "name"]
        assert G.edge_list() == [(1, 2), (2, 3)]

    def test_explicit_columns_and_options(self, tmpdir_fixture):
        edges = _write(tmpdir_fixture / "e.csv", "a;b;kind\nx;y;k1\ny;z;k2\n")
        nodes = _write(tmpdir_fixture / "n.csv", "label;size\nx;1\ny;2\nz;3\n")
        G = load_csv_to_graph(edges, nodes, source="a", target="b", node_key="label", separator=";")
        assert G.node_ids() == ["x", "y", "z"]
        assert G.edges.get_column("kind").to_list() == ["k1", "k2"]

    def test_undetectable_columns(self, tmpdir_fixture):
        edges = _write(tmpdir_fixture / "e.csv", "left,right\nA,B\n")
        with pytest.raises(ValueError):
            load_csv_to_graph(edges)

    def test_dangling_edge(self, tmpdir_fixture):
        edges = _write(tmpdir_fixture / "e.csv", "from,to\nA,Q\n")
        nodes = _write(tmpdir_fixture / "n.csv", "node_key\nA\nB\n")
        with pytest.raises(ReferentialIntegrityError):
            load_csv_to_graph(edges, nodes)


class TestFromDataFrame:
    def test_in_memory(self):
        G = from_dataframe(pl.DataFrame({"u": ["p"], "v": ["q"]}))
        assert G.edge_list() == [("p", "q")]

    def test_missing_explicit_column(self):
        with pytest.raises(UnknownColumnError):
            from_dataframe(pl.DataFrame({"from": ["p"], "to": ["q"]}), source="origin")
