from __future__ import annotations

from typing import Callable, Protocol


class FlagSource(Protocol):
    """Anything that can answer "is this flag set?" (see ``storage.flag_store.FlagStore``)"""

    def get(self, name: str, default: bool = False) -> bool: ...


def flag_condition(store: FlagSource, name: str, default: bool = False) -> Callable[[], bool]:
    """Condition that is met while ``name`` is set in ``store``.

    The flag is read on every call, so flag changes show up on the next
    readiness check without rebuilding the graph.
    """
    def check() -> bool:
        return store.get(name, default)

    check.__name__ = f"flag_{name}"
    return check


def constant_condition(value: bool) -> Callable[[], bool]:
    def check() -> bool:
        return value

    check.__name__ = f"always_{str(value).lower()}"
    return check
