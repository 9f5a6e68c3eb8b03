class BackendProxy:
    """
    Attribute forwarder behind ``graph.nx`` and ``graph.ig``.

    NetworkX exposes algorithms as module-level functions taking the graph
    first; igraph exposes them as methods. Module functions win, then the
    backend graph's own attributes.
    """

    def __init__(self, graph, backend_name):
        from .manager import ensure_materialized

        self._name = backend_name
        self._backend = ensure_materialized(backend_name, graph)

    def __repr__(self):
        return f"<BackendProxy {self._name} | {self._backend['graph']!r}>"

    @property
    def graph(self):
        """The cached backend graph object."""
        return self._backend["graph"]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        # Try backend-level function (e.g., networkx.shortest_path)
        if self._backend["call_style"] == "function":
            fn = getattr(self._backend["module"], name, None)
            if callable(fn):

                def wrapped(*args, **kwargs):
                    return fn(self._backend["graph"], *args, **kwargs)

                wrapped.__name__ = name
                wrapped.__doc__ = fn.__doc__
                return wrapped

        # Otherwise forward attribute to the backend graph itself
        try:
            return getattr(self._backend["graph"], name)
        except AttributeError:
            raise AttributeError(
                f"{self._name} has no function or graph attribute {name!r}"
            ) from None
