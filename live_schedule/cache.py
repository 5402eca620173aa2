"""Single-flight memoization of fetched resources."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Literal, Optional, TypeVar

T = TypeVar("T")

CacheStatus = Literal["pending", "ready", "failed"]


@dataclass
class CacheEntry:
    inflight: Future = field(default_factory=Future)
    status: CacheStatus = "pending"
    value: Any = None
    error: Optional[BaseException] = None


class ResourceCache:
    """Per-resource memoization with one in-flight load per name.

    The first caller for a name runs the loader; callers arriving while it
    runs wait on the same future. Both results and failures stay cached until
    :meth:`reload` drops the entry.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, name: str, loader: Callable[[], T]) -> T:
        with self._lock:
            entry = self._entries.get(name)
            owner = entry is None
            if entry is None:
                entry = CacheEntry()
                self._entries[name] = entry

        if owner:
            logging.debug("Loading resource %s", name)
            try:
                value = loader()
            except Exception as exc:
                entry.status = "failed"
                entry.error = exc
                entry.inflight.set_exception(exc)
                logging.warning("Loading %s failed: %s", name, exc)
            except BaseException as exc:
                # interrupted: release waiters, keep nothing cached
                with self._lock:
                    if self._entries.get(name) is entry:
                        del self._entries[name]
                entry.status = "failed"
                entry.error = exc
                entry.inflight.set_exception(exc)
                raise
            else:
                entry.status = "ready"
                entry.value = value
                entry.inflight.set_result(value)

        return entry.inflight.result()

    def status(self, name: str) -> Optional[CacheStatus]:
        with self._lock:
            entry = self._entries.get(name)
        return entry.status if entry else None

    def reload(self, name: Optional[str] = None) -> None:
        """Forget ``name`` (or everything) so the next ``get`` loads again."""
        with self._lock:
            if name is None:
                self._entries.clear()
            else:
                self._entries.pop(name, None)
