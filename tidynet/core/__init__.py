from .structure import FROM, NODE_ID, NODE_KEY, TO, Identity, Target
from .errors import *
from .graph import Graph, construct
from .view import ActiveView, Row
from .verbs import activate, arrange, bind_edges, bind_nodes, filter, mutate, pull, select

__all__ = [
    "structure", "errors", "verbs",
    "Graph", "ActiveView", "Row", "Identity", "Target",
    "construct", "activate", "filter", "select", "mutate", "arrange", "pull",
    "bind_nodes", "bind_edges",
    "NODE_KEY", "NODE_ID", "FROM", "TO",
    "GraphTableError", "ReferentialIntegrityError", "DuplicateKeyError", "IncompleteKeyError",
    "UnknownColumnError", "ColumnLengthMismatchError", "InvalidActivationError",
]
