from abc import ABC, abstractmethod
from typing import Any


class GraphAdapter(ABC):
    """Converts a :class:`~tidynet.core.graph.Graph` into a backend graph object."""

    name: str = ""

    @abstractmethod
    def export(self, graph, **kwargs) -> Any:
        pass

    @abstractmethod
    def load(self, obj, **kwargs):
        """Rebuild a Graph from a backend object."""
