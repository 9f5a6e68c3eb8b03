"""
Pipeline verbs over a graph's node and edge tables.

Every verb is a pure function: it takes a Graph (or an ActiveView scoping one
of its tables) and returns a **new** Graph. Table-scoped verbs (``filter``,
``select``, ``mutate``, ``arrange``, ``pull``) need an ActiveView; ``bind_*``
work on the graph directly.

Examples
--------
>>> g2 = filter(activate(g, "nodes"), lambda row: row.labels != "G")
>>> g3 = mutate(activate(g2, "nodes"), "degree", centrality_degree)
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

import numpy as np
import polars as pl

from .errors import (
    ColumnLengthMismatchError,
    IncompleteKeyError,
    InvalidActivationError,
    ReferentialIntegrityError,
    UnknownColumnError,
)
from .graph import Graph
from .integrity import (
    as_frame,
    assign_ordinals,
    check_endpoint_columns,
    check_key_collisions,
    check_keys,
    check_references,
)
from .structure import FROM, NODE_ID, NODE_KEY, TO, Identity, Target
from .view import ActiveView, Row
from ..utils.validation import flatten_names, unique_iter

__all__ = [
    "activate",
    "filter",
    "select",
    "mutate",
    "arrange",
    "pull",
    "bind_nodes",
    "bind_edges",
]


# Helpers

def _require_view(view, verb: str) -> ActiveView:
    if isinstance(view, ActiveView):
        return view
    if isinstance(view, Graph):
        view._needs_view(verb)
    raise InvalidActivationError(
        f"'{verb}' expects an ActiveView, got {type(view).__name__}"
    )


def _reserved(graph: Graph, target: Target) -> list[str]:
    if target is Target.NODES:
        return [graph.identity.column]
    return [FROM, TO]


def _missing_from_error(err: Exception) -> str:
    m = re.search(r'"([^"]+)"', str(err))
    return m.group(1) if m else str(err).splitlines()[0].strip()


def _check_expr_columns(expr: pl.Expr, table: pl.DataFrame, target: Target) -> None:
    for name in expr.meta.root_names():
        if name not in table.columns:
            raise UnknownColumnError(name, table=target.value, available=table.columns)


def _eval_expr(table: pl.DataFrame, expr: pl.Expr, target: Target, name: str) -> pl.Series:
    _check_expr_columns(expr, table, target)
    try:
        return table.select(expr.alias(name)).to_series()
    except pl.exceptions.ColumnNotFoundError as e:
        raise UnknownColumnError(_missing_from_error(e), table=target.value, available=table.columns) from e


def _predicate_mask(table: pl.DataFrame, predicate, target: Target) -> pl.Series:
    if isinstance(predicate, pl.Expr):
        mask = _eval_expr(table, predicate, target, "__mask")
        if mask.dtype != pl.Boolean:
            raise TypeError(f"filter expression must be boolean, got {mask.dtype}")
        if mask.len() == 1 and table.height != 1:
            mask = pl.Series("__mask", [mask[0]] * table.height, dtype=pl.Boolean)
        return mask.fill_null(False)
    if callable(predicate):
        keep = [bool(predicate(Row(r, target.value))) for r in table.iter_rows(named=True)]
        return pl.Series("__mask", keep, dtype=pl.Boolean)
    raise TypeError(f"filter predicate must be callable or a polars expression, got {type(predicate).__name__}")


def _as_column(values, name: str, graph: Graph, target: Target, height: int) -> pl.Series:
    if isinstance(values, pl.Series):
        col = values.alias(name)
    elif isinstance(values, np.ndarray):
        col = pl.Series(name, values)
    elif isinstance(values, Mapping):
        if target is not Target.NODES:
            raise TypeError("mappings are only accepted for the nodes table (keyed by node identity)")
        ids = graph.node_ids()
        covered = [i for i in ids if i in values]
        if len(covered) != len(ids):
            raise ColumnLengthMismatchError(name, table=target.value, expected=height, got=len(covered))
        col = pl.Series(name, [values[i] for i in ids], strict=False)
    elif isinstance(values, (str, bytes)) or not (isinstance(values, Sequence) or hasattr(values, "__iter__")):
        col = pl.Series(name, [values], strict=False)
    else:
        col = pl.Series(name, list(values), strict=False)
    if col.len() != height:
        raise ColumnLengthMismatchError(name, table=target.value, expected=height, got=col.len())
    return col


def _cast_keys(new: pl.DataFrame, existing: pl.DataFrame) -> pl.DataFrame:
    """New keys take the dtype of the existing key column, or fail."""
    dtype = existing.schema[NODE_KEY]
    if existing.height == 0 or dtype == pl.Null or new.schema[NODE_KEY] == dtype:
        return new
    try:
        return new.with_columns(pl.col(NODE_KEY).cast(dtype, strict=True))
    except (pl.exceptions.InvalidOperationError, pl.exceptions.ComputeError) as e:
        raise IncompleteKeyError(
            f"New {NODE_KEY!r} values of dtype {new.schema[NODE_KEY]} cannot be used as "
            f"keys of dtype {dtype}"
        ) from e


def _ordinal_column(col: pl.Series, name: str) -> pl.Series:
    if not (col.dtype.is_integer() or col.dtype == pl.Null):
        raise ReferentialIntegrityError(
            f"Column {name!r} holds 1-based node positions and must be integer, got {col.dtype}",
            table="nodes",
            column=name,
        )
    return col.cast(pl.Int64)


# Verbs

def activate(graph, target) -> ActiveView:
    """
    Select the table the next verb operates on.

    Parameters
    ----------
    graph : Graph | ActiveView
        Re-activating a view replaces its selection; selections never stack.
    target : {"nodes", "edges"} | Target

    Returns
    -------
    ActiveView

    Raises
    ------
    InvalidActivationError
        If ``target`` is not a known table name.
    """
    if isinstance(graph, ActiveView):
        graph = graph.graph
    if not isinstance(graph, Graph):
        raise TypeError(f"activate expects a Graph, got {type(graph).__name__}")
    return ActiveView(graph, Target.parse(target))


def filter(view: ActiveView, predicate) -> Graph:
    """
    Keep the active table's records for which ``predicate`` holds.

    Parameters
    ----------
    view : ActiveView
    predicate : Callable[[Row], bool] | polars.Expr
        Called once per record, in table order; or a boolean expression
        evaluated on the active table (nulls count as False).

    Returns
    -------
    Graph

    Notes
    -----
    - Filtering nodes removes every edge whose ``from`` or ``to`` references
      a removed node, and no other edge.
    - Surviving node identities are not renumbered.
    """
    view = _require_view(view, "filter")
    graph, target, table = view.graph, view.target, view.table
    kept = table.filter(_predicate_mask(table, predicate, target))

    if target is Target.EDGES:
        return graph._derive(
            op="filter", edges=kept, target=target, removed_edges=table.height - kept.height
        )

    ids = set(kept.get_column(graph.identity.column).to_list())
    edges = graph.edges_view(public_only=False)
    incident = [
        f in ids and t in ids
        for f, t in zip(edges.get_column(FROM).to_list(), edges.get_column(TO).to_list())
    ]
    new_edges = edges.filter(pl.Series("__mask", incident, dtype=pl.Boolean))
    return graph._derive(
        op="filter",
        nodes=kept,
        edges=new_edges,
        target=target,
        removed_nodes=table.height - kept.height,
        cascaded_edges=edges.height - new_edges.height,
    )


def select(view: ActiveView, *columns) -> Graph:
    """
    Project the active table onto ``columns``.

    Identity columns are always kept and come first: ``node_key`` (or the
    ordinal ``__node_id``) for nodes, ``from``/``to`` for edges.

    Raises
    ------
    UnknownColumnError
        If a requested column does not exist on the active table.
    """
    view = _require_view(view, "select")
    graph, target, table = view.graph, view.target, view.table
    names = flatten_names(columns)
    for c in names:
        if c not in table.columns:
            raise UnknownColumnError(c, table=target.value, available=table.columns)
    keep = list(unique_iter(_reserved(graph, target) + names))
    projected = table.select(keep)
    dropped = [c for c in table.columns if c not in keep]
    if target is Target.NODES:
        return graph._derive(op="select", nodes=projected, target=target, columns=keep, dropped=dropped)
    return graph._derive(op="select", edges=projected, target=target, columns=keep, dropped=dropped)


def mutate(view: ActiveView, name: str, compute) -> Graph:
    """
    Add or overwrite column ``name`` on the active table.

    Parameters
    ----------
    view : ActiveView
    name : str
        Column to create or replace.
    compute : Callable[[Graph], column] | polars.Expr
        Receives the **whole** graph (metrics need full topology even when
        nodes are active) and returns a column: sequence, numpy array, polars
        Series, polars expression (evaluated on the active table), or, for
        nodes, a mapping from node identity to value.

    Returns
    -------
    Graph

    Raises
    ------
    ColumnLengthMismatchError
        If the column length differs from the active table's row count.
    UnknownColumnError
        If an expression references a missing column.
    ReferentialIntegrityError, DuplicateKeyError, IncompleteKeyError
        If overwriting a reserved column would break integrity.
    """
    view = _require_view(view, "mutate")
    graph, target, table = view.graph, view.target, view.table

    values = compute(graph) if callable(compute) and not isinstance(compute, pl.Expr) else compute
    if isinstance(values, pl.Expr):
        col = _eval_expr(table, values, target, name)
        if col.len() == 1 and table.height != 1:
            # scalar expressions broadcast
            col = pl.Series(name, [col[0]] * table.height, dtype=col.dtype)
        if col.len() != table.height:
            raise ColumnLengthMismatchError(name, table=target.value, expected=table.height, got=col.len())
    else:
        col = _as_column(values, name, graph, target, table.height)
    if target is Target.NODES and name == NODE_ID and graph.identity is Identity.ORDINAL:
        col = _ordinal_column(col, name)

    updated = table.with_columns(col)
    replaced = name in table.columns

    if target is Target.NODES:
        other_scheme = NODE_ID if graph.identity is Identity.KEYED else NODE_KEY
        if name == other_scheme:
            raise IncompleteKeyError(
                f"Column {name!r} is reserved for {'ordinal' if name == NODE_ID else 'keyed'} graphs; "
                f"this graph is {graph.identity.value}"
            )
        if name == graph.identity.column:
            check_keys(updated, name)
            check_references(set(updated.get_column(name).to_list()), graph.edges_view(public_only=False),
                             graph.identity, where="mutate")
        return graph._derive(op="mutate", nodes=updated, target=target, column=name, replaced=replaced)

    if name in (FROM, TO):
        check_references(set(graph.node_ids()), updated, graph.identity, where="mutate")
    return graph._derive(op="mutate", edges=updated, target=target, column=name, replaced=replaced)


def arrange(view: ActiveView, *by, descending: bool = False, nulls_last: bool = True) -> Graph:
    """
    Reorder the active table's records by one or more columns (stable).

    Node identities are unaffected, so edges keep resolving after reordering.
    """
    view = _require_view(view, "arrange")
    graph, target, table = view.graph, view.target, view.table
    keys = flatten_names(by)
    if not keys:
        raise ValueError("arrange needs at least one column or expression")
    for k in keys:
        if isinstance(k, pl.Expr):
            _check_expr_columns(k, table, target)
        elif k not in table.columns:
            raise UnknownColumnError(k, table=target.value, available=table.columns)
    ordered = table.sort(keys, descending=descending, nulls_last=nulls_last, maintain_order=True)
    by_names = [k if isinstance(k, str) else str(k) for k in keys]
    if target is Target.NODES:
        return graph._derive(op="arrange", nodes=ordered, target=target, by=by_names)
    return graph._derive(op="arrange", edges=ordered, target=target, by=by_names)


def pull(view: ActiveView, column: str) -> pl.Series:
    """Extract one column of the active table as a polars Series."""
    view = _require_view(view, "pull")
    table = view.table
    if column not in table.columns:
        raise UnknownColumnError(column, table=view.target.value, available=table.columns)
    return table.get_column(column)


def bind_nodes(graph: Graph, new_nodes) -> Graph:
    """
    Append node records.

    Parameters
    ----------
    graph : Graph
    new_nodes : polars.DataFrame | dict | list[dict] | int
        Keyed graphs need a complete ``node_key`` column; ordinal graphs
        issue fresh ordinals (an ``int`` appends that many bare nodes).

    Returns
    -------
    Graph

    Raises
    ------
    DuplicateKeyError
        If a new key repeats, or collides with an existing one.
    IncompleteKeyError
        If the key column is missing or partially null, or if an ordinal graph
        receives ``node_key`` / ``__node_id`` values, or if new keys cannot be
        cast to the dtype of the existing keys.

    Notes
    -----
    Columns missing on either side are filled with nulls; dtypes are relaxed
    to a common supertype.
    """
    if isinstance(graph, ActiveView):
        graph = graph.graph
    if isinstance(new_nodes, int) and not isinstance(new_nodes, bool):
        if graph.identity is Identity.KEYED:
            raise IncompleteKeyError("keyed graphs need explicit node_key values for new nodes")
        start = graph._next_ordinal + 1
        new = pl.Series(NODE_ID, range(start, start + new_nodes), dtype=pl.Int64).to_frame()
    else:
        new = as_frame(new_nodes, table="nodes")
        if graph.identity is Identity.KEYED:
            if NODE_KEY not in new.columns:
                raise IncompleteKeyError(f"keyed graphs need a {NODE_KEY!r} column on new nodes")
            new = _cast_keys(new, graph.nodes_view(public_only=False))
            check_keys(new, NODE_KEY)
            check_key_collisions(graph.node_ids(), new.get_column(NODE_KEY).to_list())
        else:
            clash = [c for c in (NODE_KEY, NODE_ID) if c in new.columns]
            if clash:
                raise IncompleteKeyError(
                    f"graph is ordinal; new nodes must not carry {clash} (identities are issued by the graph)"
                )
            new = assign_ordinals(new, start=graph._next_ordinal + 1)

    nodes = pl.concat([graph.nodes_view(public_only=False), new], how="diagonal_relaxed")
    check_keys(nodes, graph.identity.column)
    return graph._derive(op="bind_nodes", nodes=nodes, added=new.height)


def bind_edges(graph: Graph, new_edges) -> Graph:
    """
    Append edge records.

    Every new ``from``/``to`` must resolve against the graph's node
    identities (bind nodes first when adding edges to new nodes).

    Raises
    ------
    ReferentialIntegrityError
        If an endpoint does not resolve.
    UnknownColumnError
        If ``from`` or ``to`` is missing.
    """
    if isinstance(graph, ActiveView):
        graph = graph.graph
    new = as_frame(new_edges, table="edges")
    check_endpoint_columns(new)
    check_references(set(graph.node_ids()), new, graph.identity, where="bind_edges")
    edges = pl.concat([graph.edges_view(public_only=False), new], how="diagonal_relaxed")
    return graph._derive(op="bind_edges", edges=edges, added=new.height)
