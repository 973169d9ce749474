"""Optimistic activation toggles for the candidate list.

The cached list is rewritten before the request goes out. Success
reconciles the one record with the server's copy; any failure throws the
whole list away and reads it again instead of patching it back by hand.
If that read fails too, the entry stays marked stale for the next reader.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List

from .api import ApiError

log = logging.getLogger(__name__)

CANDIDATES_KEY = "candidates"


@dataclass
class BatchResult:
    succeeded: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def ok(self):
        return not self.failed


class CandidateActivation:
    def __init__(self, cache, api, key=CANDIDATES_KEY, max_workers=4):
        self.cache = cache
        self.api = api
        self.key = key
        self.max_workers = max_workers
        self.pending = set()
        self.failed = set()
        self.selection = set()
        self._lock = threading.Lock()
        if key not in cache.keys():
            cache.register(key, api.candidates)

    # selection for batch operations
    def select(self, *candidate_ids):
        self.selection.update(candidate_ids)

    def deselect(self, *candidate_ids):
        self.selection.difference_update(candidate_ids)

    def clear_selection(self):
        self.selection.clear()

    def _apply_local(self, ids, is_active):
        ids = set(ids)

        def rewrite(rows):
            return [dict(r, isActive=is_active) if r.get("id") in ids else r for r in (rows or [])]
        self.cache.write(self.key, rewrite)
        with self._lock:
            self.pending.update(ids)
            self.failed.difference_update(ids)

    def _reconcile(self, record):
        def replace(rows):
            return [record if r.get("id") == record.get("id") else r for r in (rows or [])]
        self.cache.write(self.key, replace)

    def _send(self, candidate_id, is_active):
        try:
            record = self.api.set_candidate_active(candidate_id, is_active)
        except (ApiError, OSError) as e:
            log.warning("activation toggle failed for candidate %s: %s", candidate_id, e)
            with self._lock:
                self.pending.discard(candidate_id)
                self.failed.add(candidate_id)
            return False
        with self._lock:
            self.pending.discard(candidate_id)
        if isinstance(record, dict):
            self._reconcile(record)
        return True

    def _refresh(self):
        try:
            self.cache.invalidate(self.key)
        except (ApiError, OSError) as e:
            log.warning("candidate list reload failed, keeping stale copy: %s", e)

    def toggle(self, candidate_id, is_active):
        """Flip one candidate. Returns True when the server accepted it."""
        self._apply_local([candidate_id], is_active)
        if self._send(candidate_id, is_active):
            return True
        self._refresh()
        return False

    def toggle_many(self, candidate_ids=None, is_active=True):
        """Flip several candidates, one request each, and wait for all of them.

        Defaults to the current selection. The selection is cleared only when
        every request succeeded, so a partial failure can be retried as is.
        """
        ids = list(self.selection if candidate_ids is None else candidate_ids)
        result = BatchResult()
        if not ids:
            return result
        self._apply_local(ids, is_active)
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(ids))) as pool:
            outcomes = list(pool.map(lambda cid: (cid, self._send(cid, is_active)), ids))
        for cid, ok in outcomes:
            (result.succeeded if ok else result.failed).append(cid)
        if result.failed:
            self._refresh()
        else:
            self.clear_selection()
        log.info("batch activation: %d succeeded, %d failed", len(result.succeeded), len(result.failed))
        return result
