"""
Backend adapters: NetworkX, igraph and plain DataFrames.

NetworkX ships with tidynet; igraph is optional. Importing an adapter whose
library is missing raises ``ModuleNotFoundError`` with an install hint.
"""
from __future__ import annotations

import importlib.util

from .dataframe_adapter import from_dataframes, to_dataframes
from .manager import _REGISTRY, _adapter_module, get_adapter

__all__ = [
    "available_backends",
    "load_adapter",
    "get_adapter",
    "to_dataframes",
    "from_dataframes",
]


def available_backends() -> dict[str, bool]:
    """Map each backend name to whether its library can be imported."""
    return {name: importlib.util.find_spec(module) is not None for name, (_, module, _) in _REGISTRY.items()}


def load_adapter(name: str):
    """
    Import and return the adapter module for ``name``.

    Raises
    ------
    ValueError
        Unknown backend name.
    ModuleNotFoundError
        The backend library is not installed.
    """
    return _adapter_module(name)
