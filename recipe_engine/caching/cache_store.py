"""Fingerprint-addressed cache of generated recipe payloads.

The store owns every cache record's lifetime. Reads and writes go
through one re-entrant lock, so concurrent hits on the same entry never
lose a hit-count update and a sweep cannot interleave with a put.

EVICTION:
1. TTL: entries whose last access is older than ``now - ttl`` are deleted.
   Expiry is lazy; it only happens when ``sweep`` runs.
2. Capacity: if more than ``max_entries`` remain, the excess is deleted
   ordered by (hit_count, last_accessed, insertion sequence) ascending,
   so the least popular, least recently used, oldest entries go first.

Caching is best-effort: a backend failure becomes a miss on read and is
dropped on write, with a warning in the log.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from recipe_engine.caching.backends import CacheBackend, CacheRecord
from recipe_engine.data_layer.errors import (
    CacheLookupResult,
    CacheUnavailableError,
    ErrorKind,
)
from recipe_engine.data_layer.models import Payload, payload_from_dict, payload_to_dict

log = logging.getLogger("recipe_engine.caching")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SweepReport:
    """Outcome of one sweep.

    Attributes:
        expired: Entries removed for exceeding the TTL
        evicted: Entries removed to get back under capacity
        remaining: Entries left after the sweep
        error_code: Set when the backend failed and nothing was swept
    """
    expired: int = 0
    evicted: int = 0
    remaining: int = 0
    error_code: Optional[ErrorKind] = None


class RecipeCache:
    """TTL- and capacity-bounded cache keyed by request fingerprint.

    Usage:
        cache = RecipeCache(InMemoryCacheBackend(), ttl_hours=24, max_entries=1000)

        cache.put(fp, recipe)
        recipe_copy = cache.get(fp)   # hit: hit_count becomes 2
        cache.sweep()
    """

    def __init__(
        self,
        backend: CacheBackend,
        ttl_hours: float = 24,
        max_entries: int = 1000,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """Initialize cache over a storage backend.

        Args:
            backend: Persistence collaborator holding the records
            ttl_hours: Entries idle longer than this are swept
            max_entries: Maximum entries kept after a sweep
            clock: Returns the current time (defaults to UTC now)

        Raises:
            ValueError: If ttl_hours or max_entries is not positive
        """
        if ttl_hours <= 0:
            raise ValueError(f"Invalid ttl_hours: {ttl_hours}. Must be positive.")
        if max_entries <= 0:
            raise ValueError(f"Invalid max_entries: {max_entries}. Must be positive.")

        self.backend = backend
        self.ttl = timedelta(hours=ttl_hours)
        self.max_entries = max_entries
        self._clock = clock or utc_now
        self._lock = threading.RLock()
        self._sequence = self._last_sequence()

    def _last_sequence(self) -> int:
        try:
            return max((record.sequence for record in self.backend.records()), default=0)
        except CacheUnavailableError as e:
            log.warning("Could not read cache sequence, starting at 0: %s", e)
            return 0

    def get(self, fingerprint: str) -> Optional[Payload]:
        """Return a fresh copy of the cached payload, or None on miss."""
        return self.lookup(fingerprint).payload

    def lookup(self, fingerprint: str) -> CacheLookupResult:
        """Look up a fingerprint and record the hit.

        Args:
            fingerprint: Request fingerprint

        Returns:
            CacheLookupResult; on a hit the payload is rebuilt from the
            stored record so the caller cannot mutate the cache
        """
        with self._lock:
            try:
                record = self.backend.load(fingerprint)
            except CacheUnavailableError as e:
                log.warning("Cache read failed, treating as miss: %s", e)
                return CacheLookupResult.degraded(e)

            if record is None:
                log.debug("Cache miss %s", fingerprint)
                return CacheLookupResult.miss()

            record.hit_count += 1
            record.last_accessed = self._clock()
            try:
                self.backend.save(record)
            except CacheUnavailableError as e:
                # The payload is still good; only the hit bookkeeping is lost
                log.warning("Cache hit update failed for %s: %s", fingerprint, e)

        try:
            payload = payload_from_dict(record.payload)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            error = CacheUnavailableError("decode", str(e), fingerprint)
            log.warning("Cached payload unreadable, treating as miss: %s", error)
            return CacheLookupResult.degraded(error)

        log.debug("Cache hit %s (hit_count=%d)", fingerprint, record.hit_count)
        return CacheLookupResult(hit=True, payload=payload)

    def put(self, fingerprint: str, payload: Payload) -> None:
        """Insert or replace an entry with hit_count 1.

        Never raises for storage failures; they are logged and dropped.

        Raises:
            TypeError: If payload is not a Recipe or a list of Recipes
        """
        data = payload_to_dict(payload)

        with self._lock:
            now = self._clock()
            self._sequence += 1
            record = CacheRecord(
                id=uuid.uuid4().hex,
                fingerprint=fingerprint,
                payload=data,
                hit_count=1,
                last_accessed=now,
                created_at=now,
                sequence=self._sequence,
            )
            try:
                self.backend.save(record)
            except CacheUnavailableError as e:
                log.warning("Cache write dropped for %s: %s", fingerprint, e)
                return

        log.debug("Cached %s", fingerprint)

    def sweep(self) -> SweepReport:
        """Delete expired entries, then evict down to capacity.

        Returns:
            SweepReport with the number of entries removed
        """
        with self._lock:
            try:
                report = self._sweep_locked()
            except CacheUnavailableError as e:
                log.error("Cache sweep failed: %s", e)
                return SweepReport(error_code=e.code)

        log.info(
            "Cache sweep removed %d expired and %d evicted entries, %d remaining",
            report.expired, report.evicted, report.remaining,
        )
        return report

    def _sweep_locked(self) -> SweepReport:
        cutoff = self._clock() - self.ttl
        records = self.backend.records()

        expired = [r for r in records if r.last_accessed < cutoff]
        live = [r for r in records if r.last_accessed >= cutoff]
        if expired:
            self.backend.delete(r.fingerprint for r in expired)

        evicted: List[CacheRecord] = []
        excess = len(live) - self.max_entries
        if excess > 0:
            live.sort(key=lambda r: (r.hit_count, r.last_accessed, r.sequence))
            evicted, live = live[:excess], live[excess:]
            self.backend.delete(r.fingerprint for r in evicted)

        return SweepReport(
            expired=len(expired),
            evicted=len(evicted),
            remaining=len(live),
        )

    def size(self) -> int:
        """Number of stored entries.

        Raises:
            CacheUnavailableError: If the backend cannot be read
        """
        with self._lock:
            return self.backend.count()

    def clear(self) -> None:
        """Delete every entry (best-effort)."""
        with self._lock:
            try:
                self.backend.delete([r.fingerprint for r in self.backend.records()])
            except CacheUnavailableError as e:
                log.warning("Cache clear failed: %s", e)


class PeriodicSweeper:
    """Runs ``cache.sweep()`` on a background thread every interval.

    Usage:
        with PeriodicSweeper(cache, interval_seconds=3600):
            serve_requests()
    """

    def __init__(self, cache: RecipeCache, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError(
                f"Invalid interval_seconds: {interval_seconds}. Must be positive."
            )
        self.cache = cache
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="recipe-cache-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.cache.sweep()
            except Exception:
                # Keep the thread alive; the next interval retries
                log.exception("Periodic cache sweep failed")

    def __enter__(self) -> "PeriodicSweeper":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
