from __future__ import annotations

from collections.abc import Mapping
from typing import Dict

import polars as pl

from ..core.graph import Graph
from ..core.structure import Identity

__all__ = [
    "to_dataframes",
    "from_dataframes",
]


def to_dataframes(graph: "Graph", *, public_only: bool = True) -> Dict[str, pl.DataFrame]:
    """
    Export graph to Polars DataFrames.

    Returns a dictionary of DataFrames:
    - 'nodes': node identities and attributes, in node-table order
    - 'edges': ``from``/``to`` and edge attributes, in edge-table order
    - 'graph': one row with the graph-level flags (``directed``, ``identity``)

    Args:
        graph: Graph instance to export
        public_only: If True, filter out attributes starting with '__'
            (the ordinal identity column is always kept)

    Returns:
        Dictionary mapping table names to Polars DataFrames
    """
    return {
        "nodes": graph.nodes_view(public_only=public_only),
        "edges": graph.edges_view(public_only=public_only),
        "graph": pl.DataFrame({"directed": [graph.directed], "identity": [graph.identity.value]}),
    }


def from_dataframes(nodes=None, edges=None, *, directed: bool | None = None) -> "Graph":
    """
    Build a Graph from Polars DataFrames.

    Args:
        nodes: node table, or the dict produced by :func:`to_dataframes`
        edges: edge table (ignored when ``nodes`` is a dict of tables)
        directed: directedness; defaults to the 'graph' table's flag when
            present, else False

    Returns:
        Graph instance

    Raises:
        IncompleteKeyError: if the 'graph' table says keyed but the node
            table has no ``node_key`` column
    """
    meta = None
    if isinstance(nodes, Mapping) and "nodes" in nodes:
        tables = nodes
        nodes, edges, meta = tables["nodes"], tables.get("edges"), tables.get("graph")

    if directed is None:
        directed = bool(meta.get_column("directed")[0]) if meta is not None and meta.height else False

    g = Graph(nodes, edges, directed=directed)
    if meta is not None and meta.height and "identity" in meta.columns:
        expected = Identity(meta.get_column("identity")[0])
        if expected is not g.identity:
            from ..core.errors import IncompleteKeyError

            raise IncompleteKeyError(
                f"tables were exported from a {expected.value} graph but rebuild as {g.identity.value}"
            )
    return g
