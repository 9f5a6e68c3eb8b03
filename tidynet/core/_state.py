from __future__ import annotations

import time
from datetime import datetime, timezone


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _jsonify(x):
    # Make args/return JSON-safe & compact.
    import numpy as np
    if x is None or isinstance(x, (bool, int, float, str)):
        return x
    if hasattr(x, "value") and x.__class__.__module__.startswith("tidynet"):
        return x.value  # Target / Identity enums
    if isinstance(x, (set, frozenset)):
        return sorted((_jsonify(v) for v in x), key=str)
    if isinstance(x, (list, tuple)):
        return [_jsonify(v) for v in x]
    if isinstance(x, dict):
        return {str(k): _jsonify(v) for k, v in x.items()}
    # NumPy scalars
    if isinstance(x, (np.generic,)):
        return x.item()
    # Polars expressions, callables, or other heavy objects -> just a tag
    t = type(x).__name__
    return f"<<{t}>>"


class _State:
    """Per-graph bookkeeping: history lineage and backend conversion cache.

    Graphs are immutable, so a cached backend conversion never goes stale;
    the cache lives and dies with the Graph instance that owns it.
    """

    def __init__(self, *, history=(), version=0, clock0=None):
        self.version = version
        self.history = tuple(history)
        self.clock0 = time.perf_counter_ns() if clock0 is None else clock0
        self._backend_cache = {}

    def derive(self, op: str, **fields) -> "_State":
        """Return a new state whose history is this one's plus one event."""
        version = self.version + 1
        evt = {
            "version": version,
            "ts_utc": _utcnow_iso(),                         # ISO-8601 with Z
            "mono_ns": time.perf_counter_ns() - self.clock0,
            "op": op,
        }
        # sanitize
        for k, v in fields.items():
            evt[k] = _jsonify(v)
        return _State(history=self.history + (evt,), version=version, clock0=self.clock0)
