"""In-process TTL cache for property definition lookups."""

import threading
import time
from collections.abc import Callable

from dynprops.domain.entities import PropertyDefinition


class DefinitionCache:
    """Name -> definition cache with a fixed TTL.

    Per-process only; create/delete invalidate locally, other processes
    see the change once their entry expires. A TTL of 0 disables caching.
    Missing definitions are not cached.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._store: dict[str, tuple[float, PropertyDefinition]] = {}
        self._lock = threading.Lock()

    def get(
        self,
        name: str,
        loader: Callable[[str], PropertyDefinition | None],
    ) -> PropertyDefinition | None:
        """Return the cached definition or load (and cache) it."""
        now = self._clock()
        with self._lock:
            item = self._store.get(name)
            if item and now < item[0]:
                return item[1]
            self._store.pop(name, None)
        definition = loader(name)
        if definition is not None and self._ttl > 0:
            with self._lock:
                self._store[name] = (now + self._ttl, definition)
        return definition

    def invalidate(self, name: str | None = None) -> None:
        """Drop one name, or everything when name is None."""
        with self._lock:
            if name is None:
                self._store.clear()
            else:
                self._store.pop(name, None)
