from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

import polars as pl

from .errors import UnknownColumnError
from .structure import Target

if TYPE_CHECKING:
    from .graph import Graph

__all__ = [
    "ActiveView",
    "Row",
]


class ActiveView:
    """
    A Graph paired with the table (nodes or edges) the next verb targets.

    Views are transient: they are not part of the Graph's identity and every
    verb called on a view returns a plain :class:`~tidynet.core.graph.Graph`.
    Call :meth:`Graph.activate` again to scope the following verb.
    """

    __slots__ = ("graph", "target")

    def __init__(self, graph: "Graph", target: Target):
        self.graph = graph
        self.target = target

    def __repr__(self) -> str:
        return f"<ActiveView {self.target.value} | {self.graph!r}>"

    @property
    def table(self) -> pl.DataFrame:
        """The active table, private columns included."""
        if self.target is Target.NODES:
            return self.graph.nodes_view(public_only=False)
        return self.graph.edges_view(public_only=False)

    @property
    def columns(self) -> list[str]:
        return self.table.columns

    @property
    def height(self) -> int:
        return self.table.height

    def to_frame(self, public_only: bool = True) -> pl.DataFrame:
        if self.target is Target.NODES:
            return self.graph.nodes_view(public_only=public_only)
        return self.graph.edges_view(public_only=public_only)

    # verbs

    def activate(self, target) -> "ActiveView":
        from . import verbs

        return verbs.activate(self.graph, target)

    def filter(self, predicate) -> "Graph":
        from . import verbs

        return verbs.filter(self, predicate)

    def select(self, *columns) -> "Graph":
        from . import verbs

        return verbs.select(self, *columns)

    def mutate(self, name: str, compute) -> "Graph":
        from . import verbs

        return verbs.mutate(self, name, compute)

    def arrange(self, *by, descending: bool = False, nulls_last: bool = True) -> "Graph":
        from . import verbs

        return verbs.arrange(self, *by, descending=descending, nulls_last=nulls_last)

    def pull(self, column: str) -> pl.Series:
        from . import verbs

        return verbs.pull(self, column)

    def bind_nodes(self, new_nodes) -> "Graph":
        from . import verbs

        return verbs.bind_nodes(self.graph, new_nodes)

    def bind_edges(self, new_edges) -> "Graph":
        from . import verbs

        return verbs.bind_edges(self.graph, new_edges)


class Row(Mapping):
    """Read-only record handed to filter predicates.

    Supports ``row["weight"]`` and ``row.weight``; unknown columns raise
    :class:`~tidynet.core.errors.UnknownColumnError`.
    """

    __slots__ = ("_data", "_table")

    def __init__(self, data: dict, table: str):
        self._data = data
        self._table = table

    def __getitem__(self, key):
        try:
            return self._data[key]
        except KeyError:
            raise UnknownColumnError(key, table=self._table, available=list(self._data)) from None

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Row({self._data!r})"
