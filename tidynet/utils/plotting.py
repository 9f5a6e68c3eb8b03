import contextlib
import io
from typing import Any, Dict, List, Literal, Optional, Tuple

import numpy as np
import polars as pl

from ..core.errors import UnknownColumnError
from .layout import LAYOUTS, create_layout

# graphviz engines passed straight through as `layout=`
ENGINES = ("dot", "neato", "fdp", "sfdp", "circo", "twopi")

NODE_CHANNELS = ("size", "color", "label")
EDGE_CHANNELS = ("width", "color", "label")

# categorical colors, cycled in order of first appearance
PALETTE = ["#1b9e77", "#d95f02", "#7570b3", "#e7298a", "#66a61e", "#e6ab02", "#a6761d", "#666666"]
NA_COLOR = "#d9d9d9"


# tiny colormap & normalize utilities
def _normalize(values, lo=None, hi=None, eps=1e-12):
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return arr
    if np.all(np.isnan(arr)):
        return np.zeros_like(arr)
    if lo is None: lo = np.nanmin(arr)
    if hi is None: hi = np.nanmax(arr)
    if not np.isfinite(lo): lo = 0.0
    if not np.isfinite(hi): hi = 1.0
    denom = max(hi - lo, eps)
    return (arr - lo) / denom

def _greyscale(v):
    # v in [0,1] -> hex grey
    v = float(np.clip(v, 0.0, 1.0))
    c = int(round(v * 255))
    return f"#{c:02x}{c:02x}{c:02x}"


def suppress_repr_warnings(g):
    """Monkey-patch the _repr_* methods of an object instance (e.g. a graphviz.Digraph)
    so that any output written to stderr during their execution is suppressed.

    Parameters:
        g : object
            The instance whose _repr_* methods should have their warnings suppressed.
    """
    repr_methods = [m for m in dir(g) if m.startswith("_repr_") and callable(getattr(g, m))]
    for method_name in repr_methods:
        original = getattr(g, method_name)

        def make_wrapper(orig_func):
            def wrapper(*args, **kwargs):
                with contextlib.redirect_stderr(io.StringIO()):
                    return orig_func(*args, **kwargs)

            return wrapper

        setattr(g, method_name, make_wrapper(original))


def _is_numeric(s: pl.Series) -> bool:
    return s.dtype.is_numeric() and s.dtype != pl.Boolean


def _check_aes(aes: Optional[Dict[str, str]], channels, table: pl.DataFrame, table_name: str) -> Dict[str, str]:
    aes = dict(aes or {})
    for channel, column in aes.items():
        if channel not in channels:
            raise ValueError(f"Unknown {table_name} channel {channel!r}; expected one of {channels}")
        if column not in table.columns:
            raise UnknownColumnError(column, table=table_name, available=table.columns)
    return aes


def _scaled(s: pl.Series, lo: float, hi: float, channel: str) -> List[Optional[str]]:
    if not _is_numeric(s):
        raise TypeError(f"{channel!r} needs a numeric column, got {s.name!r} ({s.dtype})")
    x = _normalize(s.cast(pl.Float64).fill_null(float("nan")).to_numpy())
    return [None if np.isnan(v) else f"{lo + v * (hi - lo):.3f}" for v in x]


def _colors(s: pl.Series) -> List[str]:
    if _is_numeric(s):
        x = _normalize(s.cast(pl.Float64).fill_null(float("nan")).to_numpy())
        # higher => darker
        return [NA_COLOR if np.isnan(v) else _greyscale(1.0 - v) for v in x]
    levels = {}
    for v in s.to_list():
        if v is not None and v not in levels:
            levels[v] = PALETTE[len(levels) % len(PALETTE)]
    return [NA_COLOR if v is None else levels[v] for v in s.to_list()]


def _labels(s: pl.Series) -> List[str]:
    return ["" if v is None else (f"{v:.3g}" if isinstance(v, float) else str(v)) for v in s.to_list()]


def node_styles(
    graph,
    node_aes: Optional[Dict[str, str]] = None,
    size_range: Tuple[float, float] = (0.25, 0.75),
) -> List[Dict[str, str]]:
    """
    Per-node graphviz attributes, aligned with the node table.

    ``size`` maps to ``width``/``height`` (inches) within ``size_range``;
    ``color`` to ``fillcolor`` (numeric → grey ramp, else palette);
    ``label`` to ``label``. Nodes are labelled with their identity by default.
    """
    nodes = graph.nodes_view(public_only=False)
    aes = _check_aes(node_aes, NODE_CHANNELS, nodes, "nodes")
    styles = [{"label": str(nid)} for nid in graph.node_ids()]
    if "size" in aes:
        for st, w in zip(styles, _scaled(nodes.get_column(aes["size"]), *size_range, channel="size")):
            if w is not None:
                st.update(width=w, height=w, fixedsize="true")
    if "color" in aes:
        for st, c in zip(styles, _colors(nodes.get_column(aes["color"]))):
            st.update(style="filled", fillcolor=c)
    if "label" in aes:
        for st, lab in zip(styles, _labels(nodes.get_column(aes["label"]))):
            st["label"] = lab
    return styles


def edge_styles(
    graph,
    edge_aes: Optional[Dict[str, str]] = None,
    width_range: Tuple[float, float] = (0.5, 4.0),
) -> List[Dict[str, str]]:
    """Per-edge graphviz attributes (``penwidth``, ``color``, ``label``), aligned with the edge table."""
    edges = graph.edges_view(public_only=False)
    aes = _check_aes(edge_aes, EDGE_CHANNELS, edges, "edges")
    styles = [{} for _ in range(edges.height)]
    if not graph.directed:
        for st in styles:
            st["dir"] = "none"
    if "width" in aes:
        for st, w in zip(styles, _scaled(edges.get_column(aes["width"]), *width_range, channel="width")):
            if w is not None:
                st["penwidth"] = w
    if "color" in aes:
        for st, c in zip(styles, _colors(edges.get_column(aes["color"]))):
            st["color"] = c
    if "label" in aes:
        for st, lab in zip(styles, _labels(edges.get_column(aes["label"]))):
            st["label"] = lab
    return styles


def _nudges(graph, node_nudge) -> Optional[List[Tuple[float, float]]]:
    if node_nudge is None:
        return None
    dx, dy = node_nudge
    n = graph.number_of_nodes()
    if isinstance(dx, str) or isinstance(dy, str):
        nodes = graph.nodes_view(public_only=False)
        cols = []
        for c in (dx, dy):
            if c not in nodes.columns:
                raise UnknownColumnError(c, table="nodes", available=nodes.columns)
            cols.append(nodes.get_column(c).cast(pl.Float64).fill_null(0.0).to_list())
        return list(zip(*cols))
    return [(float(dx), float(dy))] * n


def _positions(graph, layout: str, seed, scale: float) -> Tuple[str, Optional[List[Tuple[float, float]]]]:
    if layout in ENGINES:
        return layout, None
    if layout in LAYOUTS:
        xy = create_layout(graph, layout, seed=seed)
        pts = list(zip(xy.get_column("x").to_list(), xy.get_column("y").to_list()))
        return "neato", [(x * scale, y * scale) for x, y in pts]
    raise ValueError(f"Unknown layout {layout!r}; expected a layout {LAYOUTS} or a graphviz engine {ENGINES}")


def _drawing(graph, layout, node_aes, edge_aes, node_nudge, seed, scale, size_range, width_range):
    """Backend-neutral drawing: (engine, [(name, attrs)], [(u, v, attrs)])."""
    engine, pos = _positions(graph, layout, seed, scale)
    n_styles = node_styles(graph, node_aes, size_range=size_range)
    e_styles = edge_styles(graph, edge_aes, width_range=width_range)
    nudges = _nudges(graph, node_nudge)
    names = [str(nid) for nid in graph.node_ids()]

    nodes, extra = [], []
    for i, (name, st) in enumerate(zip(names, n_styles)):
        st = dict(st)
        if pos is not None:
            st["pos"] = f"{pos[i][0]:.4f},{pos[i][1]:.4f}!"
        if nudges is not None:
            label = st.get("label", "")
            if pos is not None:
                # pinned layouts: the label becomes its own plaintext node
                x, y = pos[i][0] + nudges[i][0], pos[i][1] + nudges[i][1]
                extra.append((f"{name}__label", {"shape": "plaintext", "label": label, "pos": f"{x:.4f},{y:.4f}!"}))
                st["label"] = ""
            else:
                st["xlabel"] = label
                st["label"] = ""
        nodes.append((name, st))

    edges = [
        (str(u), str(v), st)
        for (u, v), st in zip(graph.edge_list(), e_styles)
    ]
    return engine, nodes + extra, edges


def to_python_graphviz(
    engine: str,
    nodes,
    edges,
    graph_attr: Optional[Dict[str, str]] = None,
    node_attr: Optional[Dict[str, str]] = None,
    edge_attr: Optional[Dict[str, str]] = None,
    supress_warnings: bool = True,
) -> Any:
    import graphviz  # type: ignore

    if node_attr is None:
        node_attr = dict(shape="circle")
    g = graphviz.Digraph(engine=engine, graph_attr=graph_attr, node_attr=node_attr, edge_attr=edge_attr)
    for name, attrs in nodes:
        g.node(name, **attrs)
    for u, v, attrs in edges:
        g.edge(u, v, **attrs)
    if supress_warnings:
        suppress_repr_warnings(g)
    return g


def to_pydot(
    engine: str,
    nodes,
    edges,
    graph_attr: Optional[Dict[str, str]] = None,
    node_attr: Optional[Dict[str, str]] = None,
    edge_attr: Optional[Dict[str, str]] = None,
) -> Any:
    import pydot

    # Create a pydot.Dot graph
    g = pydot.Dot(graph_type="digraph", layout=engine, **(graph_attr if graph_attr else {}))
    g.set_node_defaults(**(node_attr if node_attr is not None else dict(shape="circle")))
    if edge_attr is not None:
        g.set_edge_defaults(**edge_attr)
    for name, attrs in nodes:
        g.add_node(pydot.Node(name, **attrs))
    for u, v, attrs in edges:
        g.add_edge(pydot.Edge(u, v, **attrs))
    return g


# one-call plotting API
def plot(graph,
         layout: str = "auto",
         node_aes: Optional[Dict[str, str]] = None,
         edge_aes: Optional[Dict[str, str]] = None,
         *,
         node_nudge: Optional[Tuple[Any, Any]] = None,
         backend: Literal["graphviz", "pydot"] = "graphviz",
         seed: Optional[int] = None,
         scale: float = 3.0,
         size_range: Tuple[float, float] = (0.25, 0.75),
         width_range: Tuple[float, float] = (0.5, 4.0),
         suppress_warnings: bool = True,
         **kwargs):
    """
    Return a graph object (graphviz.Digraph or pydot.Dot) ready to render().

    Parameters
    ----------
    graph : Graph
    layout : str, default "auto"
        A :func:`~tidynet.utils.layout.create_layout` name (coordinates are
        pinned and drawn with ``neato``) or a graphviz engine name
        (``dot``, ``neato``, ``fdp``, ``sfdp``, ``circo``, ``twopi``).
    node_aes : dict, optional
        Channel -> node column, channels ``size``, ``color``, ``label``.
    edge_aes : dict, optional
        Channel -> edge column, channels ``width``, ``color``, ``label``.
    node_nudge : tuple, optional
        ``(dx, dy)`` label offset in layout units times ``scale``, or a pair of
        node column names holding per-node offsets. With engine layouts the
        label is moved outside the node (``xlabel``) instead.
    backend : {"graphviz", "pydot"}
    seed : int, optional
        Seed for stochastic layouts.
    scale : float, default 3.0
        Inches per layout unit.
    size_range, width_range : tuple
        Output ranges for numeric ``size`` (inches) and ``width`` (points).
    **kwargs
        ``graph_attr``, ``node_attr``, ``edge_attr`` forwarded to the backend.

    Raises
    ------
    UnknownColumnError
        If a style mapping names a missing column.
    ValueError
        Unknown layout, channel or backend.
    """
    if backend not in ("graphviz", "pydot"):
        raise ValueError("backend must be 'graphviz' or 'pydot'")
    engine, nodes, edges = _drawing(
        graph, layout, node_aes, edge_aes, node_nudge, seed, scale, size_range, width_range
    )
    graph_attr = kwargs.get("graph_attr")
    if graph_attr is None:
        graph_attr = {"overlap": "false", "outputorder": "edgesfirst"}

    if backend == "graphviz":
        return to_python_graphviz(
            engine,
            nodes,
            edges,
            graph_attr=graph_attr,
            node_attr=kwargs.get("node_attr"),
            edge_attr=kwargs.get("edge_attr"),
            supress_warnings=suppress_warnings,
        )
    return to_pydot(
        engine,
        nodes,
        edges,
        graph_attr=graph_attr,
        node_attr=kwargs.get("node_attr"),
        edge_attr=kwargs.get("edge_attr"),
    )

# convenience renderer
def render(obj, path: str, format: str = "svg"):
    """
    Render a graphviz.Digraph or pydot.Dot to disk.
    Returns the output path.
    """
    path = str(path)
    kind = obj.__class__.__module__
    if "graphviz" in kind:
        # graphviz.Digraph
        return obj.render(path, format=format, cleanup=True)
    elif "pydot" in kind:
        fmt = format.lower()
        out = path if path.lower().endswith(f".{fmt}") else f"{path}.{fmt}"
        obj.write(out, format=fmt)
        return out
    else:
        raise TypeError("Unknown graph object; expected graphviz.Digraph or pydot.Dot")
