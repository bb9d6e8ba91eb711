"""Thread-safe registry of cluster clients keyed by cloud name."""

from __future__ import annotations

import threading
from typing import Any, Iterator, Optional


class ClientRegistry:
    """Maps cloud names to the client used to talk to that cluster."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}
        self._lock = threading.RLock()

    def add(self, key: str, client: Any) -> None:
        """Register ``client`` under ``key``, replacing any earlier one."""
        with self._lock:
            self._items[key] = client

    def update(self, key: str, client: Any) -> None:
        """Replace the client registered under ``key``."""
        with self._lock:
            self._items[key] = client

    def delete(self, key: str) -> None:
        """Forget the client under ``key``; a missing key is ignored."""
        with self._lock:
            self._items.pop(key, None)

    def get(self, key: str) -> Optional[Any]:
        """Return the client under ``key``, or None if there is none."""
        with self._lock:
            return self._items.get(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._items))

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)