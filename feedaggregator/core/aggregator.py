"""Main aggregator that drives a refresh cycle across all feed sources."""

import threading
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from feedaggregator.config.settings import (
    FEED_SOURCES, FETCH_TIMEOUT_MS, FETCH_GRACE_MS, MAX_CONCURRENT_FETCHES,
    STATUS_IDLE, STATUS_REFRESHING, STATUS_CACHED, STATUS_PROGRESS,
    STATUS_DONE, STATUS_STALE, STATUS_FAILED,
)
from feedaggregator.exceptions import SourceUnavailable
from feedaggregator.fetchers.rss_fetcher import SourceFetcher
from feedaggregator.models import FeedSource
from feedaggregator.selectors.item_filter import filter_items
from feedaggregator.storage.cache_store import FileCacheStore
from feedaggregator.utils.merge import merge_items


class AggregatorState(Enum):
    IDLE = 'idle'
    RUNNING = 'running'


class RefreshPhase(Enum):
    SEEDING = 'seeding'
    FETCHING = 'fetching'
    FINALIZING = 'finalizing'


@dataclass
class RefreshProgress:
    """Per-cycle settlement counters."""
    total: int
    succeeded: int = 0
    failed: int = 0

    @property
    def settled(self):
        return self.succeeded + self.failed


@dataclass(frozen=True)
class RefreshReport:
    """Outcome of one completed refresh cycle."""
    total: int
    succeeded: int
    failed: int
    item_count: int
    from_cache: bool
    total_failure: bool


# Published to subscribers after every state change visible to a UI
AggregatorUpdate = namedtuple('AggregatorUpdate', ['items', 'status', 'updated_at', 'progress'])


def load_sources(entries=None):
    """Build FeedSource objects from the configured registry.

    Raises:
        ValueError: If two sources share a name
    """
    entries = FEED_SOURCES if entries is None else entries
    sources = [
        entry if isinstance(entry, FeedSource) else FeedSource(name=entry['name'], url=entry['url'])
        for entry in entries
    ]
    names = [source.name for source in sources]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate feed source names: {', '.join(duplicates)}")
    return sources


class NewsAggregator:
    """Aggregator that merges all sources into one deduplicated, time-ordered list."""

    def __init__(self, sources=None, fetcher=None, cache_store=None,
                 timeout_ms=FETCH_TIMEOUT_MS, max_workers=MAX_CONCURRENT_FETCHES,
                 grace_ms=FETCH_GRACE_MS):
        """Initialize the aggregator.

        Args:
            sources: FeedSource objects or {'name', 'url'} dicts; defaults to FEED_SOURCES
            fetcher: Object with fetch(source, timeout_ms); defaults to SourceFetcher
            cache_store: CacheStore; defaults to the file cache
            timeout_ms: Per-source time budget
            max_workers: Size of the fetch thread pool
            grace_ms: Extra wait past the budget before a running fetch counts as failed
        """
        self.sources = load_sources(sources)
        self.fetcher = fetcher or SourceFetcher()
        self.cache_store = cache_store or FileCacheStore()
        self.timeout_ms = timeout_ms
        self.max_workers = max(1, max_workers or len(self.sources))
        self.grace_ms = grace_ms

        self.state = AggregatorState.IDLE
        self.phase = None
        self.items = []
        self.status = STATUS_IDLE
        self.updated_at = None
        self.progress = RefreshProgress(total=len(self.sources))

        self._state_lock = threading.Lock()
        self._listeners = []

    def subscribe(self, listener):
        """Register a callback receiving an AggregatorUpdate after every change.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def filtered_items(self, keyword=None, source=None, limit=None):
        """Current items narrowed by keyword and source."""
        return filter_items(self.items, keyword, source, limit)

    def refresh(self):
        """Run one refresh cycle.

        Returns:
            RefreshReport, or None if a cycle was already running
        """
        with self._state_lock:
            if self.state is AggregatorState.RUNNING:
                print("[INFO] Refresh already in progress, ignoring request")
                return None
            self.state = AggregatorState.RUNNING

        try:
            return self._run_cycle()
        finally:
            self.phase = None
            self.state = AggregatorState.IDLE

    def _run_cycle(self):
        print(f"Starting feed refresh at {datetime.now()} ({len(self.sources)} sources)")
        self.progress = RefreshProgress(total=len(self.sources))
        self._publish(status=STATUS_REFRESHING)

        # Seeding
        self.phase = RefreshPhase.SEEDING
        snapshot = self.cache_store.load()
        working = []
        if snapshot:
            working = list(snapshot.items)
            self.updated_at = snapshot.updated_at
            print(f"[INFO] Loaded {len(working)} cached items from {snapshot.updated_at.isoformat()}")
            self._publish(items=working,
                          status=STATUS_CACHED.format(updated_at=snapshot.updated_at.isoformat()))

        # Fetching
        self.phase = RefreshPhase.FETCHING
        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = {
                executor.submit(self.fetcher.fetch, source, self.timeout_ms): source
                for source in self.sources
            }
            pending = set(futures)
            try:
                for future in as_completed(futures, timeout=self._collection_timeout()):
                    pending.discard(future)
                    working = self._settle(future, futures[future], working)
            except FuturesTimeoutError:
                for future in pending:
                    if future.done():
                        working = self._settle(future, futures[future], working)
                    else:
                        working = self._settle(None, futures[future], working)
        finally:
            # Fetches still running past the deadline are abandoned, not awaited
            executor.shutdown(wait=False, cancel_futures=True)

        # Finalizing
        self.phase = RefreshPhase.FINALIZING
        return self._finalize(working, snapshot)

    def _collection_timeout(self):
        """Seconds to wait for every source, allowing for queued fetches."""
        rounds = -(-len(self.sources) // self.max_workers)
        return rounds * self.timeout_ms / 1000.0 + self.grace_ms / 1000.0

    def _settle(self, future, source, working):
        """Fold one settled fetch into the working set; None means it overran."""
        progress = self.progress
        if future is None:
            progress.failed += 1
            print(f"[WARNING] Source unavailable: {source.name}: no result after {self.timeout_ms} ms")
        else:
            try:
                fetched = future.result()
            except SourceUnavailable as e:
                progress.failed += 1
                print(f"[WARNING] Source unavailable: {e}")
            except Exception as e:
                progress.failed += 1
                print(f"[ERROR] Unexpected failure fetching {source.name}: {e}")
            else:
                progress.succeeded += 1
                working = merge_items(working, fetched or [])
                print(f"[INFO] {source.name}: {len(fetched or [])} items")
                self._publish(items=working)

        self._publish(status=STATUS_PROGRESS.format(
            settled=progress.settled, total=progress.total, failed=progress.failed))
        return working

    def _finalize(self, working, snapshot):
        progress = self.progress
        total_failure = False

        if progress.succeeded:
            self.updated_at = datetime.now(timezone.utc)
            self._publish(items=working,
                          status=STATUS_DONE.format(count=len(working), failed=progress.failed))
            try:
                self.cache_store.save(working, self.updated_at)
            except OSError as e:
                print(f"[WARNING] Failed to save news cache: {e}")
        elif snapshot:
            self._publish(items=working, status=STATUS_STALE)
        else:
            total_failure = True
            self.updated_at = None
            self._publish(items=[], status=STATUS_FAILED)
            print("[ERROR] All sources failed and no cache is available")

        print(f"Feed refresh completed: {progress.succeeded}/{progress.total} sources, "
              f"{progress.failed} failed, {len(self.items)} items")

        return RefreshReport(
            total=progress.total,
            succeeded=progress.succeeded,
            failed=progress.failed,
            item_count=len(self.items),
            from_cache=snapshot is not None,
            total_failure=total_failure,
        )

    def _publish(self, items=None, status=None):
        if items is not None:
            self.items = list(items)
        if status is not None:
            self.status = status

        update = AggregatorUpdate(
            items=list(self.items),
            status=self.status,
            updated_at=self.updated_at,
            progress=self.progress,
        )
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception as e:
                print(f"[ERROR] News listener failed: {e}")
