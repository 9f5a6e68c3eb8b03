"""tidynet: graphs as two related tables, with a tidy pipeline of verbs."""
from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Any

# Eager: the table model and its error taxonomy
from .core.errors import (
    ColumnLengthMismatchError,
    DuplicateKeyError,
    GraphTableError,
    IncompleteKeyError,
    InvalidActivationError,
    ReferentialIntegrityError,
    UnknownColumnError,
)
from .core.graph import Graph, construct
from .core.structure import FROM, NODE_ID, NODE_KEY, TO, Identity, Target
from .core.verbs import activate, arrange, bind_edges, bind_nodes, filter, mutate, pull, select

# Lazily exposed submodules (imported on first attribute access)
_lazy_submodules = {
    # namespaces
    "adapters": "tidynet.adapters",
    "algorithms": "tidynet.algorithms",
    "core": "tidynet.core",
    "io": "tidynet.io",
    "utils": "tidynet.utils",
    # direct convenience
    "networkx": "tidynet.adapters.networkx",
    "igraph": "tidynet.adapters.igraph",
    "dataframe": "tidynet.adapters.dataframe_adapter",
    "csvio": "tidynet.io.csv",
    "plotting": "tidynet.utils.plotting",
    "layout": "tidynet.utils.layout",
}

# Curated top-level symbols (lazy). name -> (module, attribute)
_lazy_symbols: dict[str, tuple[str, str]] = {
    # Metric providers
    "centrality_degree": ("tidynet.algorithms.centrality", "centrality_degree"),
    "centrality_strength": ("tidynet.algorithms.centrality", "centrality_strength"),
    "centrality_betweenness": ("tidynet.algorithms.centrality", "centrality_betweenness"),
    "centrality_edge_betweenness": ("tidynet.algorithms.centrality", "centrality_edge_betweenness"),
    "group_louvain": ("tidynet.algorithms.community", "group_louvain"),
    "modularity": ("tidynet.algorithms.community", "modularity"),

    # Rendering
    "create_layout": ("tidynet.utils.layout", "create_layout"),
    "plot": ("tidynet.utils.plotting", "plot"),
    "render": ("tidynet.utils.plotting", "render"),

    # NetworkX / igraph adapters (optional dependencies)
    "to_networkx": ("tidynet.adapters.networkx", "to_networkx"),
    "from_networkx": ("tidynet.adapters.networkx", "from_networkx"),
    "to_igraph": ("tidynet.adapters.igraph", "to_igraph"),
    "from_igraph": ("tidynet.adapters.igraph", "from_igraph"),

    # DataFrames / CSV
    "to_dataframes": ("tidynet.adapters.dataframe_adapter", "to_dataframes"),
    "from_dataframes": ("tidynet.adapters.dataframe_adapter", "from_dataframes"),
    "load_csv_to_graph": ("tidynet.io.csv", "load_csv_to_graph"),
}

_eager = [
    "Graph", "construct", "Identity", "Target", "NODE_KEY", "NODE_ID", "FROM", "TO",
    "activate", "filter", "select", "mutate", "arrange", "pull", "bind_nodes", "bind_edges",
    "GraphTableError", "ReferentialIntegrityError", "DuplicateKeyError", "IncompleteKeyError",
    "UnknownColumnError", "ColumnLengthMismatchError", "InvalidActivationError",
]

__all__ = sorted(set(_eager + list(_lazy_submodules) + list(_lazy_symbols)))


def __getattr__(name: str) -> Any:  # PEP 562: lazy attribute resolution
    if name in _lazy_submodules:
        return import_module(_lazy_submodules[name])
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))


try:
    __version__ = _pkg_version("tidynet")
except PackageNotFoundError:
    __version__ = "0.0.0"
