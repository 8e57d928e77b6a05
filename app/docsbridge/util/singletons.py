"""Registry of module-level singletons so tests can rebuild them."""

from __future__ import annotations

from collections.abc import Callable

_reset_fns: dict[str, Callable[[], None]] = {}


def register_singleton(name: str, reset_fn: Callable[[], None]) -> None:
    """Register *reset_fn* under *name*; re-registering a name replaces it."""
    _reset_fns[name] = reset_fn


def reset_all_singletons() -> list[str]:
    """Call every registered reset function and return the names reset."""
    names = list(_reset_fns)
    for name in names:
        _reset_fns[name]()
    return names
