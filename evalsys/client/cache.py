import logging
import threading
import time

log = logging.getLogger(__name__)


class CacheEntry:
    __slots__ = ("data", "fetched_at", "stale")

    def __init__(self, data=None, fetched_at=None, stale=True):
        self.data = data
        self.fetched_at = fetched_at
        self.stale = stale


class QueryCache:
    """Client-side store keyed by resource name.

    Each key is registered with a fetcher. ``read`` returns cached data and
    fetches on a miss or after ``invalidate``. ``write`` replaces data in
    place, which is how optimistic updates land. Listeners are told about
    every change to a key.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._fetchers = {}
        self._entries = {}
        self._listeners = []

    def register(self, key, fetcher):
        with self._lock:
            self._fetchers[key] = fetcher
            self._entries.setdefault(key, CacheEntry())

    def keys(self):
        with self._lock:
            return list(self._fetchers)

    def peek(self, key):
        with self._lock:
            entry = self._entries.get(key)
            return entry.data if entry else None

    def is_stale(self, key):
        with self._lock:
            entry = self._entries.get(key)
            return entry is None or entry.stale

    def read(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not entry.stale:
                return entry.data
        return self.refetch(key)

    def refetch(self, key):
        fetcher = self._fetchers.get(key)
        if fetcher is None:
            raise KeyError(f"no fetcher registered for {key!r}")
        data = fetcher()
        with self._lock:
            self._entries[key] = CacheEntry(data, time.time(), stale=False)
        self._notify(key)
        return data

    def write(self, key, value):
        """Replace cached data. ``value`` may be a function of the old data."""
        with self._lock:
            entry = self._entries.setdefault(key, CacheEntry())
            entry.data = value(entry.data) if callable(value) else value
            entry.stale = False
            entry.fetched_at = time.time()
            data = entry.data
        self._notify(key)
        return data

    def invalidate(self, key, refetch=True):
        with self._lock:
            entry = self._entries.setdefault(key, CacheEntry())
            entry.stale = True
        log.debug("cache invalidated: %s", key)
        if refetch and key in self._fetchers:
            return self.refetch(key)
        self._notify(key)
        return None

    def invalidate_all(self, refetch=True):
        for key in self.keys():
            self.invalidate(key, refetch=refetch)

    def subscribe(self, listener):
        """``listener(key)`` runs after each change; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def _notify(self, key):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(key)
