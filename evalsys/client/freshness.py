"""Keeping the client cache fresh.

Both strategies end in ``QueryCache.invalidate``; neither carries data of its
own, so a polled refresh and a pushed one cannot disagree about cache state.
"""
import json
import logging
import threading

from .api import ApiError

log = logging.getLogger(__name__)

# which cache keys to drop when a table changes
DEFAULT_TABLE_KEYS = {
    "candidates": ("candidates", "results"),
    "evaluators": ("evaluators", "results"),
    "evaluation_categories": ("categories", "items", "results"),
    "evaluation_items": ("items", "results"),
    "candidate_preset_scores": ("presets", "results"),
    "evaluation_submissions": ("submissions", "results"),
    "system_config": ("config",),
    "category_options": ("category_options",),
}


class FreshnessStrategy:
    def start(self, cache):
        raise NotImplementedError

    def stop(self):
        raise NotImplementedError


class IntervalPoll(FreshnessStrategy):
    """Invalidate (and re-fetch) the watched keys every ``interval`` seconds."""

    def __init__(self, interval=3.0, keys=None):
        self.interval = interval
        self.keys = keys
        self._stop = threading.Event()
        self._thread = None

    def tick(self, cache):
        for key in (self.keys or cache.keys()):
            try:
                cache.invalidate(key)
            except (ApiError, OSError) as e:
                log.warning("poll refresh of %s failed: %s", key, e)

    def start(self, cache):
        if self._thread is not None:
            return
        self._stop.clear()

        def loop():
            while not self._stop.wait(self.interval):
                self.tick(cache)

        self._thread = threading.Thread(target=loop, name="evalsys-poll", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval + 1)
            self._thread = None


def parse_sse(lines):
    """Yield decoded ``data`` payloads of ``change`` events from SSE lines."""
    event, data = None, []
    for raw in lines:
        line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        if line == "":
            if data and event in (None, "change"):
                yield "\n".join(data)
            event, data = None, []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        value = value[1:] if value.startswith(" ") else value
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)


class PushInvalidate(FreshnessStrategy):
    """Listen on /api/events and invalidate the keys mapped to each table.

    If the stream cannot be opened or drops, the ``fallback`` strategy
    (interval polling by default) takes over.
    """

    def __init__(self, api, table_keys=None, fallback=None, join_timeout=5.0):
        self.api = api
        self.table_keys = table_keys or DEFAULT_TABLE_KEYS
        self.fallback = fallback if fallback is not None else IntervalPoll()
        self._stop = threading.Event()
        self._thread = None
        self._response = None
        self.fell_back = False
        self.join_timeout = join_timeout

    def handle(self, cache, payload):
        try:
            event = json.loads(payload)
        except ValueError:
            log.debug("ignoring malformed change event %r", payload)
            return
        known = set(cache.keys())
        for key in self.table_keys.get(event.get("table"), ()):
            if key in known:
                try:
                    cache.invalidate(key)
                except (ApiError, OSError) as e:
                    log.warning("push refresh of %s failed: %s", key, e)

    def _run(self, cache):
        try:
            self._response = self.api.events()
            for payload in parse_sse(self._response.iter_lines(decode_unicode=True)):
                if self._stop.is_set():
                    break
                self.handle(cache, payload)
        except (ApiError, OSError) as e:
            if not self._stop.is_set():
                log.warning("realtime channel unavailable (%s), falling back to polling", e)
        finally:
            if self._response is not None:
                self._response.close()
        if not self._stop.is_set():
            self.fell_back = True
            self.fallback.start(cache)

    def start(self, cache):
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, args=(cache,), name="evalsys-push", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._response is not None:
            self._response.close()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.join_timeout)
        self._thread = None
        self.fallback.stop()
