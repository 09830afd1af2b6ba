"""
Swappable logger indirection.
"""

from __future__ import annotations

from typing import Any


class DelegateLogger:
    """Stable handle for the logger of one root category.

    Callers keep a reference to the delegate; when the root's configuration
    changes the service replaces ``delegate`` and every held reference starts
    logging to the new target.
    """

    def __init__(self, delegate: Any) -> None:
        self._delegate = delegate

    @property
    def delegate(self) -> Any:
        return self._delegate

    @delegate.setter
    def delegate(self, value: Any) -> None:
        self._delegate = value

    # Proxy the logging API (and anything else) to the current target
    def __getattr__(self, name: str) -> Any:
        return getattr(self._delegate, name)

    def __repr__(self) -> str:
        return f"DelegateLogger({self._delegate!r})"
