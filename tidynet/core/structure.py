from enum import Enum

# Reserved columns
NODE_KEY = "node_key"
NODE_ID = "__node_id"
FROM = "from"
TO = "to"

PRIVATE_PREFIX = "__"

# Column-name candidates for tabular ingestion (lower-case, in priority order)
SRC_COLS = ["from", "source", "src", "u"]
DST_COLS = ["to", "target", "dst", "v"]
KEY_COLS = ["node_key", "node", "node_id", "id", "name"]


class Target(str, Enum):
    """Table targeted by the next pipeline verb (NODES, EDGES).

    Attributes:
        NODES: The node table
        EDGES: The edge table
    """

    NODES = "nodes"
    EDGES = "edges"

    @classmethod
    def parse(cls, value) -> "Target":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            from .errors import InvalidActivationError

            raise InvalidActivationError(
                f"Unknown target {value!r}; expected one of {[t.value for t in cls]}"
            ) from None


class Identity(str, Enum):
    """Node identity scheme (KEYED, ORDINAL).

    Attributes:
        KEYED: Nodes are identified by the user-supplied ``node_key`` column
        ORDINAL: Nodes are identified by their 1-based position at construction
    """

    KEYED = "keyed"
    ORDINAL = "ordinal"

    @property
    def column(self) -> str:
        return NODE_KEY if self is Identity.KEYED else NODE_ID


def is_private(column: str) -> bool:
    return str(column).startswith(PRIVATE_PREFIX)
