"""
CSV ingestion of node and edge tables.

This module purposefully avoids importing stdlib `csv` and uses Polars for IO.

The edge file is an edge list. Endpoint columns are auto-detected among
common names (``from``/``source``/``src``/``u`` and ``to``/``target``/
``dst``/``v``, case-insensitive) unless given explicitly; every other column
becomes an edge attribute. The optional node file supplies node attributes;
its key column (``node_key`` or the one passed as ``node_key=``, else the
first of ``node``/``node_id``/``id``/``name``) becomes ``node_key``.

Public entry points:
- load_csv_to_graph(edges_path, nodes_path=None, ...) -> Graph
- from_dataframe(edges, nodes=None, ...) -> Graph
"""
from __future__ import annotations

from typing import Any, List, Optional

import polars as pl

from ..core.errors import UnknownColumnError
from ..core.graph import Graph
from ..core.structure import DST_COLS, FROM, KEY_COLS, NODE_KEY, SRC_COLS, TO

__all__ = [
    "load_csv_to_graph",
    "from_dataframe",
]


def _pick_first(df: pl.DataFrame, candidates: List[str]) -> Optional[str]:
    cols_lower = {c.lower(): c for c in df.columns}
    for k in candidates:
        if k in cols_lower:
            return cols_lower[k]
    return None


def _resolve(df: pl.DataFrame, given: Optional[str], candidates: List[str], role: str, table: str) -> str:
    if given is not None:
        if given not in df.columns:
            raise UnknownColumnError(given, table=table, available=df.columns)
        return given
    found = _pick_first(df, candidates)
    if found is None:
        raise ValueError(
            f"Could not detect the {role} column of the {table} table; "
            f"tried {candidates}, have {df.columns}. Pass {role}=... explicitly."
        )
    return found


def _rename(df: pl.DataFrame, mapping: dict) -> pl.DataFrame:
    mapping = {old: new for old, new in mapping.items() if old != new}
    clash = [new for old, new in mapping.items() if new in df.columns and new not in mapping]
    if clash:
        raise ValueError(f"Cannot rename to {clash}: column(s) already exist")
    return df.rename(mapping) if mapping else df


def load_csv_to_graph(
    edges_path: str,
    nodes_path: Optional[str] = None,
    *,
    directed: bool = False,
    node_key: Optional[str] = None,
    source: Optional[str] = None,
    target: Optional[str] = None,
    infer_schema_length: int = 10000,
    encoding: str = "utf8",
    null_values: Optional[List[str]] = None,
    **read_options: Any,
) -> Graph:
    """
    Load edge (and optionally node) CSV files into a Graph.

    Parameters
    ----------
    edges_path : str
        Path to the edge-list CSV.
    nodes_path : str, optional
        Path to the node CSV. Without it nodes are derived from the edge
        endpoints in order of first appearance (keyed graph).
    directed : bool, default False
    node_key : str, optional
        Key column of the node file. Default: auto-detected.
    source, target : str, optional
        Endpoint columns of the edge file. Default: auto-detected.
    infer_schema_length : int, default 10000
        Row count Polars uses to infer column types.
    encoding : str, default "utf8"
    null_values : list[str], optional
        Additional strings to interpret as nulls.
    **read_options : Any
        Forwarded to :func:`polars.read_csv` (e.g. ``separator=";"``).

    Returns
    -------
    Graph

    Raises
    ------
    ValueError
        If endpoint or key columns cannot be detected.
    ReferentialIntegrityError
        If an edge endpoint is not a key of the node file.
    """
    def _read(path):
        return pl.read_csv(
            path,
            infer_schema_length=infer_schema_length,
            encoding=encoding,
            null_values=null_values,
            **read_options,
        )

    edges = _read(edges_path)
    nodes = _read(nodes_path) if nodes_path is not None else None
    return from_dataframe(edges, nodes, directed=directed, node_key=node_key, source=source, target=target)


def from_dataframe(
    edges: pl.DataFrame,
    nodes: Optional[pl.DataFrame] = None,
    *,
    directed: bool = False,
    node_key: Optional[str] = None,
    source: Optional[str] = None,
    target: Optional[str] = None,
) -> Graph:
    """
    Build a keyed Graph from in-memory edge (and node) tables.

    Parameters are as for :func:`load_csv_to_graph`. Endpoint values are cast
    to the node key dtype when a node table is given, so integer ids read
    from one file still match string ids from the other where possible.
    """
    src = _resolve(edges, source, SRC_COLS, "source", "edges")
    dst = _resolve(edges, target, DST_COLS, "target", "edges")
    if src == dst:
        raise ValueError(f"source and target resolve to the same column {src!r}")
    edges = _rename(edges, {src: FROM, dst: TO})

    if nodes is None:
        return Graph.from_edges(edges, directed=directed)

    key = _resolve(nodes, node_key, KEY_COLS, "node_key", "nodes")
    nodes = _rename(nodes, {key: NODE_KEY})
    key_dtype = nodes.schema[NODE_KEY]
    if edges.schema[FROM] != key_dtype or edges.schema[TO] != key_dtype:
        edges = edges.with_columns(pl.col(FROM).cast(key_dtype), pl.col(TO).cast(key_dtype))
    return Graph(nodes, edges, directed=directed)
