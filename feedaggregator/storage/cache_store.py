"""TTL-bounded single-slot cache for the aggregated news list."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

from feedaggregator.config.settings import CACHE_FILE, CACHE_TTL_MS
from feedaggregator.exceptions import CacheCorrupt, CacheError, CacheExpired
from feedaggregator.models import CacheSnapshot, NewsItem, parse_iso_datetime


def utc_now():
    return datetime.now(timezone.utc)


class CacheStore:
    """Base cache store.

    Subclasses only move raw JSON text in and out of their slot; decoding,
    validation and expiry are handled here so every store behaves the same.
    """

    def __init__(self, ttl_ms=CACHE_TTL_MS, clock=utc_now):
        self.ttl = timedelta(milliseconds=ttl_ms)
        self.clock = clock

    def _read(self) -> Optional[str]:
        raise NotImplementedError

    def _write(self, payload: str):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError

    def load(self) -> Optional[CacheSnapshot]:
        """Load the cached snapshot.

        Returns:
            CacheSnapshot, or None if the slot is empty, unreadable or expired
        """
        try:
            payload = self._read()
        except (OSError, UnicodeDecodeError) as e:
            print(f"[WARNING] Could not read news cache: {e}")
            return None
        if payload is None:
            return None

        try:
            return self._decode(payload)
        except CacheExpired as e:
            print(f"[INFO] Discarding news cache: {e}")
            return None
        except CacheError as e:
            print(f"[WARNING] Ignoring corrupt news cache: {e}")
            return None

    def save(self, items: Iterable[NewsItem], updated_at: datetime):
        """Overwrite the slot with a new snapshot.

        Args:
            items: Merged items, in display order
            updated_at: Time the snapshot was produced
        """
        items = list(items)
        payload = json.dumps({
            'updatedAt': updated_at.isoformat(),
            'items': [item.to_dict() for item in items],
        }, ensure_ascii=False, indent=2)
        self._write(payload)
        print(f"[INFO] Cached {len(items)} news items")

    def _decode(self, payload):
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise CacheCorrupt(f"invalid JSON ({e})") from e

        if not isinstance(data, dict) or not isinstance(data.get('items'), list):
            raise CacheCorrupt("missing 'items' list")

        try:
            updated_at = parse_iso_datetime(data.get('updatedAt'))
        except ValueError as e:
            raise CacheCorrupt(f"bad 'updatedAt' ({e})") from e

        age = self.clock() - updated_at
        if age > self.ttl:
            raise CacheExpired(f"snapshot is {int(age.total_seconds() * 1000)} ms old")

        try:
            items = tuple(NewsItem.from_dict(entry) for entry in data['items'])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CacheCorrupt(f"bad item ({e!r})") from e

        return CacheSnapshot(items=items, updated_at=updated_at)


class FileCacheStore(CacheStore):
    """Cache slot backed by a JSON file."""

    def __init__(self, path=CACHE_FILE, ttl_ms=CACHE_TTL_MS, clock=utc_now):
        super().__init__(ttl_ms=ttl_ms, clock=clock)
        self.path = Path(path)

    def _read(self):
        if not self.path.exists():
            return None
        with open(self.path, 'r', encoding='utf-8') as f:
            return f.read()

    def _write(self, payload):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(payload)
        tmp_path.replace(self.path)

    def clear(self):
        if self.path.exists():
            self.path.unlink()
            print(f"[INFO] Removed news cache {self.path}")


class MemoryCacheStore(CacheStore):
    """In-process cache slot."""

    def __init__(self, payload=None, ttl_ms=CACHE_TTL_MS, clock=utc_now):
        super().__init__(ttl_ms=ttl_ms, clock=clock)
        self.payload = payload

    def _read(self):
        return self.payload

    def _write(self, payload):
        self.payload = payload

    def clear(self):
        self.payload = None
