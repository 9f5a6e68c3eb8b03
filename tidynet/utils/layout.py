"""
Node positions for rendering.

:func:`create_layout` returns the public node table with float ``x``/``y``
columns appended; the renderer pins nodes at those coordinates.
"""
from __future__ import annotations

import numpy as np
import polars as pl

from ..core.errors import UnknownColumnError

__all__ = [
    "LAYOUTS",
    "AUTO_KK_LIMIT",
    "create_layout",
]

LAYOUTS = ("auto", "circle", "fr", "kk", "random", "shell", "spectral", "manual")

# above this many nodes "auto" switches from Kamada-Kawai to Fruchterman-Reingold
AUTO_KK_LIMIT = 1000


def _manual_positions(graph) -> tuple[np.ndarray, np.ndarray]:
    nodes = graph.nodes_view(public_only=False)
    out = []
    for c in ("x", "y"):
        if c not in nodes.columns:
            raise UnknownColumnError(c, table="nodes", available=nodes.columns)
        col = nodes.get_column(c)
        if col.null_count():
            raise ValueError(f"manual layout: column {c!r} has {col.null_count()} null value(s)")
        out.append(col.cast(pl.Float64).to_numpy())
    return out[0], out[1]


def create_layout(
    graph,
    layout: str = "auto",
    *,
    seed: int | None = None,
    weights: str | None = None,
    scale: float = 1.0,
    **kwargs,
) -> pl.DataFrame:
    """
    Compute node coordinates.

    Parameters
    ----------
    graph : Graph
    layout : str, default "auto"
        One of :data:`LAYOUTS`:

        - ``"auto"``: ``"kk"`` up to :data:`AUTO_KK_LIMIT` nodes, else ``"fr"``
        - ``"circle"``: nodes on a circle, in table order
        - ``"fr"``: Fruchterman-Reingold force-directed
        - ``"kk"``: Kamada-Kawai (weights read as distances)
        - ``"random"``: uniform in the unit square
        - ``"shell"``: concentric circles
        - ``"spectral"``: Laplacian eigenvectors
        - ``"manual"``: existing ``x``/``y`` node columns
    seed : int, optional
        Seed for ``"fr"`` and ``"random"``.
    weights : str, optional
        Edge column handed to the networkx layout as ``weight``.
    scale : float, default 1.0
    **kwargs
        Forwarded to the networkx layout function.

    Returns
    -------
    polars.DataFrame
        Public node table (identity column first) plus ``x`` and ``y``.

    Raises
    ------
    ValueError
        Unknown layout name.
    UnknownColumnError
        ``"manual"`` without ``x``/``y`` columns, or unknown ``weights``.
    """
    if layout not in LAYOUTS:
        raise ValueError(f"Unknown layout {layout!r}; expected one of {LAYOUTS}")
    nodes = graph.nodes_view(public_only=True)

    if layout == "manual":
        xs, ys = _manual_positions(graph)
    else:
        import networkx as nx

        from ..algorithms._common import simple_projection

        G = simple_projection(graph, weights, directed=False, combine="min")
        w = "weight" if weights is not None else None
        if layout == "auto":
            layout = "kk" if G.number_of_nodes() <= AUTO_KK_LIMIT else "fr"

        if G.number_of_nodes() == 0:
            pos = {}
        elif layout == "circle":
            pos = nx.circular_layout(G, scale=scale, **kwargs)
        elif layout == "fr":
            pos = nx.spring_layout(G, weight=w, seed=seed, scale=scale, **kwargs)
        elif layout == "kk":
            pos = nx.kamada_kawai_layout(G, weight=w, scale=scale, **kwargs)
        elif layout == "random":
            pos = nx.random_layout(G, seed=seed, **kwargs)
        elif layout == "shell":
            pos = nx.shell_layout(G, scale=scale, **kwargs)
        else:
            pos = nx.spectral_layout(G, weight=w, scale=scale, **kwargs)

        ids = graph.node_ids()
        xy = np.array([pos[n] for n in ids], dtype=float).reshape(len(ids), 2)
        xs, ys = xy[:, 0], xy[:, 1]

    return nodes.with_columns(
        pl.Series("x", xs, dtype=pl.Float64),
        pl.Series("y", ys, dtype=pl.Float64),
    )
