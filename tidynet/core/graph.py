from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import polars as pl

from ._state import _State
from .errors import InvalidActivationError
from .integrity import (
    as_frame,
    assign_ordinals,
    check_endpoint_columns,
    check_keys,
    check_references,
    normalize_endpoints,
)
from .structure import FROM, NODE_ID, NODE_KEY, TO, Identity, is_private

if TYPE_CHECKING:
    from .view import ActiveView

__all__ = [
    "Graph",
    "construct",
]


class Graph:
    """
    Relational graph: an ordered node table and an ordered edge table.

    Both tables are Polars DF (DataFrame). Nodes are identified either by a
    user-supplied ``node_key`` column (*keyed* graph) or by their 1-based
    position at construction time, stored in the hidden ``__node_id`` column
    (*ordinal* graph). Edges reference node identities through the reserved
    ``from`` and ``to`` columns.

    Parameters
    ----------
    nodes : polars.DataFrame | dict | list[dict] | int
        Node records. An ``int`` builds that many attribute-less nodes.
    edges : polars.DataFrame | dict | list[dict], optional
        Edge records with ``from`` and ``to`` columns. Defaults to no edges.
    directed : bool, optional
        Whether ``(from, to)`` is ordered.

    Raises
    ------
    ReferentialIntegrityError
        If an edge endpoint does not resolve to a node identity.
    DuplicateKeyError
        If two nodes share a ``node_key``.
    IncompleteKeyError
        If the ``node_key`` column contains nulls.
    UnknownColumnError
        If the edge table lacks ``from`` or ``to``.

    Notes
    -----
    - Graphs are immutable values. Every verb (``filter``, ``select``,
      ``mutate``, ``bind_nodes``...) returns a **new** Graph.
    - Table-scoped verbs require an :class:`~tidynet.core.view.ActiveView`,
      obtained with :meth:`activate`.

    See Also
    --------
    activate, bind_nodes, bind_edges, from_edges
    """

    def __init__(self, nodes=None, edges=None, *, directed: bool = False):
        if isinstance(nodes, int) and not isinstance(nodes, bool):
            node_df = pl.DataFrame({NODE_ID: pl.Series(NODE_ID, range(1, nodes + 1), dtype=pl.Int64)})
        else:
            node_df = as_frame(nodes, table="nodes")

        if NODE_KEY in node_df.columns:
            identity = Identity.KEYED
            check_keys(node_df, NODE_KEY)
        else:
            identity = Identity.ORDINAL
            if NODE_ID in node_df.columns:
                # re-import of a private view: keep the issued ordinals
                check_keys(node_df, NODE_ID)
                node_df = node_df.with_columns(pl.col(NODE_ID).cast(pl.Int64))
            else:
                node_df = assign_ordinals(node_df)

        id_dtype = node_df.schema[identity.column]
        edge_df = as_frame(edges, table="edges")
        if edge_df.width == 0:
            edge_df = pl.DataFrame(schema={FROM: id_dtype, TO: id_dtype})
        check_endpoint_columns(edge_df)
        edge_df = normalize_endpoints(edge_df, id_dtype)
        check_references(set(node_df.get_column(identity.column).to_list()), edge_df, identity)

        self._nodes = node_df
        self._edges = edge_df
        self.directed = bool(directed)
        self.identity = identity
        self._next_ordinal = self._max_ordinal(node_df, identity, 0)
        self._state = _State().derive(
            "construct",
            nodes=node_df.height,
            edges=edge_df.height,
            directed=self.directed,
            identity=identity,
        )

    # Construction helpers

    @classmethod
    def from_edges(cls, edges, *, directed: bool = False) -> "Graph":
        """
        Build a keyed graph from an edge table alone.

        Node keys are the distinct endpoint values in order of first
        appearance (row by row, ``from`` before ``to``).

        Parameters
        ----------
        edges : polars.DataFrame | dict | list[dict]
            Edge records with ``from`` and ``to`` columns.
        directed : bool, optional

        Returns
        -------
        Graph
        """
        edge_df = as_frame(edges, table="edges")
        check_endpoint_columns(edge_df)
        seen = dict.fromkeys(
            v
            for pair in zip(edge_df.get_column(FROM).to_list(), edge_df.get_column(TO).to_list())
            for v in pair
            if v is not None
        )
        nodes = pl.DataFrame({NODE_KEY: pl.Series(NODE_KEY, list(seen), dtype=edge_df.schema[FROM])})
        return cls(nodes, edge_df, directed=directed)

    @classmethod
    def _from_parts(cls, *, nodes, edges, directed, identity, next_ordinal, state) -> "Graph":
        g = cls.__new__(cls)
        g._nodes = nodes
        g._edges = edges
        g.directed = directed
        g.identity = identity
        g._next_ordinal = next_ordinal
        g._state = state
        return g

    @staticmethod
    def _max_ordinal(nodes: pl.DataFrame, identity: Identity, floor: int) -> int:
        if identity is not Identity.ORDINAL or nodes.height == 0:
            return floor
        return max(floor, int(nodes.get_column(NODE_ID).max()))

    def _derive(self, *, op: str, nodes=None, edges=None, directed=None, **fields) -> "Graph":
        """INTERNAL: new Graph sharing unchanged tables, with one history event appended."""
        nodes = self._nodes if nodes is None else nodes
        return Graph._from_parts(
            nodes=nodes,
            edges=self._edges if edges is None else edges,
            directed=self.directed if directed is None else directed,
            identity=self.identity,
            next_ordinal=self._max_ordinal(nodes, self.identity, self._next_ordinal),
            state=self._state.derive(op, **fields),
        )

    # Tables

    @property
    def nodes(self) -> pl.DataFrame:
        """Node table without private (``__``-prefixed) attribute columns."""
        return self.nodes_view()

    @property
    def edges(self) -> pl.DataFrame:
        """Edge table without private (``__``-prefixed) attribute columns."""
        return self.edges_view()

    def nodes_view(self, public_only: bool = True) -> pl.DataFrame:
        """
        Node table.

        Parameters
        ----------
        public_only : bool, optional
            Drop ``__``-prefixed attribute columns. The identity column is
            always kept, including the ordinal ``__node_id``.

        Returns
        -------
        polars.DataFrame
        """
        if not public_only:
            return self._nodes
        keep = [c for c in self._nodes.columns if c == self.identity.column or not is_private(c)]
        return self._nodes.select(keep)

    def edges_view(self, public_only: bool = True) -> pl.DataFrame:
        """
        Edge table.

        Parameters
        ----------
        public_only : bool, optional
            Drop ``__``-prefixed attribute columns.

        Returns
        -------
        polars.DataFrame
        """
        if not public_only:
            return self._edges
        return self._edges.select([c for c in self._edges.columns if not is_private(c)])

    @property
    def identity_column(self) -> str:
        return self.identity.column

    @property
    def keyed(self) -> bool:
        return self.identity is Identity.KEYED

    def node_ids(self) -> list:
        """Node identities in node-table order."""
        return self._nodes.get_column(self.identity.column).to_list()

    def edge_list(self) -> list[tuple]:
        """``(from, to)`` pairs in edge-table order."""
        return list(zip(self._edges.get_column(FROM).to_list(), self._edges.get_column(TO).to_list()))

    def number_of_nodes(self) -> int:
        return self._nodes.height

    def number_of_edges(self) -> int:
        return self._edges.height

    @property
    def nv(self) -> int:
        return self._nodes.height

    @property
    def ne(self) -> int:
        return self._edges.height

    @property
    def shape(self) -> tuple[int, int]:
        return (self._nodes.height, self._edges.height)

    # Pipeline entry points

    def activate(self, target) -> "ActiveView":
        """
        Select the table (``"nodes"`` or ``"edges"``) the next verb operates on.

        Raises
        ------
        InvalidActivationError
            If ``target`` is not a known table name.
        """
        from .verbs import activate

        return activate(self, target)

    def bind_nodes(self, new_nodes) -> "Graph":
        """Append node records. See :func:`tidynet.core.verbs.bind_nodes`."""
        from .verbs import bind_nodes

        return bind_nodes(self, new_nodes)

    def bind_edges(self, new_edges) -> "Graph":
        """Append edge records. See :func:`tidynet.core.verbs.bind_edges`."""
        from .verbs import bind_edges

        return bind_edges(self, new_edges)

    def _needs_view(self, verb: str):
        raise InvalidActivationError(
            f"'{verb}' operates on one table; call .activate('nodes') or "
            f".activate('edges') on the graph first"
        )

    def filter(self, *args, **kwargs):
        self._needs_view("filter")

    def select(self, *args, **kwargs):
        self._needs_view("select")

    def mutate(self, *args, **kwargs):
        self._needs_view("mutate")

    def arrange(self, *args, **kwargs):
        self._needs_view("arrange")

    def pull(self, *args, **kwargs):
        self._needs_view("pull")

    def pipe(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Call ``fn(self, *args, **kwargs)``; keeps pipelines readable top to bottom."""
        return fn(self, *args, **kwargs)

    # Whole-graph transforms

    def reverse(self) -> "Graph":
        """
        Return a new graph with every edge's ``from`` and ``to`` swapped.

        Notes
        -----
        Undirected graphs are returned unchanged in content (a new value).
        """
        if not self.directed:
            return self._derive(op="reverse", changed=False)
        edges = self._edges.with_columns(pl.col(TO).alias(FROM), pl.col(FROM).alias(TO))
        return self._derive(op="reverse", edges=edges, changed=True)

    def to_undirected(self) -> "Graph":
        """Return the same tables with the ``directed`` flag cleared."""
        return self._derive(op="to_undirected", directed=False)

    # Equality

    def __eq__(self, other) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return (
            self.directed == other.directed
            and self.identity is other.identity
            and _frames_equal(self._nodes, other._nodes)
            and _frames_equal(self._edges, other._edges)
        )

    def __repr__(self) -> str:
        return (
            f"<Graph | nodes={self._nodes.height} · edges={self._edges.height} · "
            f"directed={self.directed} · {self.identity.value}>"
        )

    # History

    def history(self, as_df: bool = False):
        """
        Return the append-only operation history leading to this graph.

        Parameters
        ----------
        as_df : bool, default False
            If True, return a Polars DF [DataFrame]; otherwise return a list of dicts.

        Returns
        -------
        list[dict] or polars.DataFrame
            Each event includes: 'version', 'ts_utc' (UTC ISO-8601), 'mono_ns'
            (monotonic nanoseconds since the lineage was constructed), 'op',
            and operation-specific fields (row counts, columns...).

        Notes
        -----
        History is inherited: a graph derived by a verb carries its
        predecessor's events followed by its own.
        """
        events = [dict(e) for e in self._state.history]
        if not as_df:
            return events
        return pl.DataFrame(events, strict=False, infer_schema_length=None) if events else pl.DataFrame()

    def mark(self, label: str) -> "Graph":
        """Return this graph with a manual marker event appended to its history."""
        return self._derive(op="mark", label=label)

    def export_history(self, path: str) -> int:
        """
        Write the operation history to disk.

        Parameters
        ----------
        path : str
            Output path. Supported extensions: '.parquet', '.ndjson' (a.k.a. '.jsonl'),
            '.json', '.csv'. Unknown extensions default to Parquet by appending '.parquet'.

        Returns
        -------
        int
            Number of events written. Returns 0 if the history is empty.
        """
        import json

        events = self.history()
        if not events:
            return 0
        path = str(path)
        p = path.lower()
        if p.endswith(".ndjson") or p.endswith(".jsonl"):
            with open(path, "w", encoding="utf-8") as f:
                for r in events:
                    f.write(json.dumps(r, ensure_ascii=False) + "\n")
            return len(events)
        if p.endswith(".json"):
            with open(path, "w", encoding="utf-8") as f:
                json.dump(events, f, ensure_ascii=False)
            return len(events)
        # tabular formats need flat, string-safe columns
        df = pl.DataFrame(
            [{k: (v if isinstance(v, (int, float, str, bool)) or v is None else json.dumps(v)) for k, v in r.items()}
             for r in events],
            strict=False,
            infer_schema_length=None,
        )
        if p.endswith(".csv"):
            df.write_csv(path)
            return df.height
        if not p.endswith(".parquet"):
            path += ".parquet"
        df.write_parquet(path)
        return df.height

    # Backends

    @property
    def nx(self):
        """
        Lazy NX (NetworkX) proxy.
        Usage: G.nx.algorithm(...); e.g. G.nx.pagerank(), G.nx.shortest_path_length(source="A")
        """
        from ..adapters.manager import get_proxy

        return get_proxy("networkx", self)

    @property
    def ig(self):
        """
        Lazy igraph proxy.
        Usage: G.ig.method(...); e.g. G.ig.pagerank(), G.ig.community_multilevel()
        """
        from ..adapters.manager import get_proxy

        return get_proxy("igraph", self)

    def to_networkx(self, **kwargs):
        """Export to NetworkX. See :func:`tidynet.adapters.networkx.to_networkx`."""
        from ..adapters.networkx import to_networkx

        return to_networkx(self, **kwargs)

    def to_igraph(self, **kwargs):
        """Export to igraph. See :func:`tidynet.adapters.igraph.to_igraph`."""
        from ..adapters.igraph import to_igraph

        return to_igraph(self, **kwargs)

    def plot(self, **kwargs):
        """Build a renderable graph object. See :func:`tidynet.utils.plotting.plot`."""
        from ..utils.plotting import plot

        return plot(self, **kwargs)


def _frames_equal(a: pl.DataFrame, b: pl.DataFrame) -> bool:
    if a.columns != b.columns or a.schema != b.schema or a.height != b.height:
        return False
    return all(a.get_column(c).to_list() == b.get_column(c).to_list() for c in a.columns)


def construct(nodes, edges=None, directed: bool = False) -> Graph:
    """Validate a node table and an edge table and build a :class:`Graph`."""
    return Graph(nodes, edges, directed=directed)
