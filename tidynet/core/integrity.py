"""
Referential-integrity and key checks shared by construction and the verbs.

All helpers raise the typed errors from :mod:`tidynet.core.errors` and never
modify their inputs.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping

import polars as pl

from .errors import (
    DuplicateKeyError,
    IncompleteKeyError,
    ReferentialIntegrityError,
    UnknownColumnError,
)
from .structure import FROM, NODE_ID, NODE_KEY, TO, Identity

_MAX_REPORTED = 5


def _preview(values) -> str:
    values = list(values)
    shown = ", ".join(repr(v) for v in values[:_MAX_REPORTED])
    if len(values) > _MAX_REPORTED:
        shown += f", ... ({len(values) - _MAX_REPORTED} more)"
    return f"[{shown}]"


def as_frame(data, *, table: str) -> pl.DataFrame:
    """Coerce tabular input (DataFrame, LazyFrame, dict of columns, list of rows) to a DataFrame."""
    if data is None:
        return pl.DataFrame()
    if isinstance(data, pl.DataFrame):
        return data
    if isinstance(data, pl.LazyFrame):
        return data.collect()
    if isinstance(data, Mapping):
        return pl.DataFrame(dict(data), strict=False)
    if isinstance(data, Iterable) and not isinstance(data, (str, bytes)):
        rows = list(data)
        if rows and not all(isinstance(r, Mapping) for r in rows):
            raise TypeError(f"{table} rows must be mappings of column -> value")
        return pl.DataFrame(rows, strict=False) if rows else pl.DataFrame()
    raise TypeError(f"Cannot build the {table} table from {type(data).__name__}")


def assign_ordinals(nodes: pl.DataFrame, start: int = 1) -> pl.DataFrame:
    """Prepend the hidden ordinal identity column, numbering rows from ``start``."""
    ids = pl.Series(NODE_ID, range(start, start + nodes.height), dtype=pl.Int64)
    if nodes.width == 0:
        return ids.to_frame()
    return nodes.select(ids, pl.all())


def check_endpoint_columns(edges: pl.DataFrame) -> None:
    for col in (FROM, TO):
        if col not in edges.columns:
            raise UnknownColumnError(col, table="edges", available=edges.columns)


def check_keys(nodes: pl.DataFrame, column: str = NODE_KEY) -> None:
    """Key column must be fully populated and unique."""
    if column not in nodes.columns:
        raise UnknownColumnError(column, table="nodes", available=nodes.columns)
    keys = nodes.get_column(column)
    n_null = keys.null_count()
    if n_null:
        raise IncompleteKeyError(
            f"Column {column!r} is all-or-nothing: {n_null} of {nodes.height} node(s) have no key"
        )
    dup = keys.filter(keys.is_duplicated()).unique(maintain_order=True).to_list()
    if dup:
        raise DuplicateKeyError(
            f"Duplicate node identities in column {column!r}: {_preview(dup)}", keys=dup
        )


def check_key_collisions(existing: Iterable, incoming: Iterable, column: str = NODE_KEY) -> None:
    seen = set(existing)
    clash = [k for k in incoming if k in seen]
    if clash:
        raise DuplicateKeyError(
            f"New node identities collide with existing ones in column {column!r}: {_preview(clash)}",
            keys=clash,
        )


def check_references(ids: set, edges: pl.DataFrame, identity: Identity, *, where: str = "construction") -> None:
    """Every ``from``/``to`` value must name a node identity in ``ids``."""
    check_endpoint_columns(edges)
    if edges.height == 0:
        return
    for col in (FROM, TO):
        dtype = edges.schema[col]
        if identity is Identity.ORDINAL and not (dtype.is_integer() or dtype == pl.Null):
            raise ReferentialIntegrityError(
                f"Graph without {NODE_KEY!r} references nodes by 1-based position, "
                f"but edge column {col!r} has dtype {dtype} ({where})",
                column=col,
            )
        values = edges.get_column(col).to_list()
        bad = [v for v in values if v is None or v not in ids]
        if bad:
            kind = "node_key" if identity is Identity.KEYED else "ordinal position"
            raise ReferentialIntegrityError(
                f"{len(bad)} edge(s) reference unknown {kind} in column {col!r} ({where}): {_preview(bad)}",
                column=col,
                values=bad,
            )


def normalize_endpoints(edges: pl.DataFrame, dtype) -> pl.DataFrame:
    """Give untyped (all-null) endpoint columns the node identity dtype."""
    casts = [pl.col(c).cast(dtype) for c in (FROM, TO) if edges.schema[c] == pl.Null]
    return edges.with_columns(casts) if casts else edges
