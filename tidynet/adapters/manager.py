from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Callable

from ._base import GraphAdapter
from ._proxy import BackendProxy

if TYPE_CHECKING:
    from ..core.graph import Graph

__all__ = [
    "ensure_materialized",
    "get_adapter",
    "get_proxy",
    "registered_backends",
]

# ---------------------------------------------------------------------------
# 1. Central registry --------------------------------------------------------
# ---------------------------------------------------------------------------
# backend name -> (adapter module, module imported for the proxy, call style)
_REGISTRY: dict[str, tuple[str, str, str]] = {
    "networkx": ("tidynet.adapters.networkx", "networkx", "function"),
    "igraph": ("tidynet.adapters.igraph", "igraph", "method"),
}


def registered_backends() -> list[str]:
    return list(_REGISTRY)


def _adapter_module(name: str):
    try:
        module_path, _, _ = _REGISTRY[name.lower()]
    except KeyError:
        raise ValueError(f"No backend '{name}' registered; known: {registered_backends()}") from None
    return importlib.import_module(module_path)


def _converter(name: str) -> Callable[["Graph"], object]:
    return _adapter_module(name).to_backend


# ---------------------------------------------------------------------------
# 2. Public helpers ----------------------------------------------------------
# ---------------------------------------------------------------------------
def get_adapter(name: str) -> GraphAdapter:
    """Return a *new* adapter instance of the requested backend."""
    module = _adapter_module(name)
    return module.ADAPTER_CLASS()


def get_proxy(backend_name: str, graph: "Graph") -> BackendProxy:
    """Return a lazy proxy so users can write `G.nx.<algo>()`."""
    if backend_name not in _REGISTRY:
        raise ValueError(f"No backend '{backend_name}' registered")
    return BackendProxy(graph, backend_name)


def ensure_materialized(backend_name: str, graph: "Graph") -> dict:
    """
    Convert *graph* into the requested backend object and cache the result on
    the graph's private state object. Returns the cache entry:
    {"module": nx, "graph": nx.MultiGraph, "version": int, "call_style": str}

    Graphs are immutable, so an entry is only rebuilt if the state version
    it was built from differs.
    """
    cache = graph._state._backend_cache               # per-instance cache
    entry = cache.get(backend_name)

    if entry is None or entry["version"] != graph._state.version:
        _, module_name, call_style = _REGISTRY[backend_name]
        # 1. convert Graph -> backend graph (imports the optional dependency)
        converted = _converter(backend_name)(graph)

        # 2. stash result together with current version counter
        entry = cache[backend_name] = {
            "module": importlib.import_module(module_name),
            "graph": converted,
            "version": graph._state.version,
            "call_style": call_style,
        }

    return entry
