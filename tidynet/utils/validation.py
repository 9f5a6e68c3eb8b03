from collections.abc import Callable, Iterable
from itertools import filterfalse
from typing import Any, TypeVar

T = TypeVar("T")


def unique_iter(iterable: Iterable[T], key: Callable[[T], Any] | None = None) -> Iterable[T]:
    # Based on https://iteration-utilities.readthedocs.io/en/latest/generated/unique_everseen.html
    seen: set[Any] = set()
    seen_add = seen.add
    if key is None:
        for element in filterfalse(seen.__contains__, iterable):
            seen_add(element)
            yield element
    else:
        for element in iterable:
            k = key(element)
            if k not in seen:
                seen_add(k)
                yield element


def flatten_names(names) -> list:
    """Accept ``f("a", "b")`` as well as ``f(["a", "b"])``."""
    out = []
    for n in names:
        if isinstance(n, (list, tuple, set, frozenset)):
            out.extend(n)
        else:
            out.append(n)
    return out
