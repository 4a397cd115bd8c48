"""Item records and the item-catalog collaborator.

Items are owned by an external catalog (a web API, a bundled preset list,
a test fixture). This module defines the read-only record the core
consumes, the interface a catalog must offer, and an explicit,
injectable cache for category listings.
"""

import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol, Sequence

from loguru import logger

from sizecompare.config.manager import ConfigManager


DEFAULT_ASPECT_RATIO = 1 / 3
DEFAULT_CACHE_DURATION_SECONDS = 24 * 60 * 60
DEFAULT_CACHE_MIN_LIMIT = 50


@dataclass(frozen=True)
class Item:
    """A catalog entity that can be placed in a comparison."""

    id: str
    height_m: float
    display_name: str
    visual_aspect_ratio: float = DEFAULT_ASPECT_RATIO
    color: str | None = None
    category_ids: tuple[int, ...] = ()

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Item":
        """Build an item from a catalog record (``id``, ``name``, ``height``...).

        Raises KeyError/ValueError for records without an id or a numeric height.
        """
        item_id = str(record["id"])
        if not item_id:
            raise ValueError("Item record has an empty id")
        height = float(record["height"])
        aspect = record.get("aspect_ratio", record.get("visual_aspect_ratio"))
        return cls(
            id=item_id,
            height_m=height,
            display_name=str(record.get("name") or item_id),
            visual_aspect_ratio=float(aspect) if aspect is not None else DEFAULT_ASPECT_RATIO,
            color=record.get("color") or None,
            category_ids=tuple(int(c) for c in record.get("cat_ids", ())),
        )

    @property
    def has_valid_height(self) -> bool:
        return math.isfinite(self.height_m) and self.height_m > 0


@dataclass(frozen=True)
class ItemQuery:
    """Filter for a catalog listing."""

    category_id: int | None = None
    search: str = ""
    limit: int = 50
    offset: int = 0


@dataclass
class ItemPage:
    """One page of catalog results."""

    items: list[Item]
    total: int
    from_cache: bool = False


class ItemSource(Protocol):
    """What the core needs from an item catalog."""

    def fetch_items(self, query: ItemQuery) -> ItemPage: ...

    def fetch_by_ids(self, ids: Sequence[str]) -> list[Item]: ...


class InMemoryItemSource:
    """A catalog held in memory, e.g. bundled presets or test data."""

    def __init__(self, items: Iterable[Item] = ()):
        self._items: dict[str, Item] = {}
        for item in items:
            self.add(item)

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "InMemoryItemSource":
        """Build a catalog from raw records, skipping malformed ones."""
        source = cls()
        for record in records:
            try:
                source.add(Item.from_record(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed item record {record!r}: {e}")
        return source

    def add(self, item: Item):
        self._items[item.id] = item

    def __len__(self) -> int:
        return len(self._items)

    def fetch_items(self, query: ItemQuery) -> ItemPage:
        matches = [
            item
            for item in self._items.values()
            if (query.category_id is None or query.category_id in item.category_ids)
            and (not query.search or query.search.lower() in item.display_name.lower())
        ]
        return ItemPage(items=matches[query.offset:query.offset + query.limit], total=len(matches))

    def fetch_by_ids(self, ids: Sequence[str]) -> list[Item]:
        return [self._items[i] for i in dict.fromkeys(ids) if i in self._items]


@dataclass
class CacheEntry:
    items: list[Item]
    total: int
    timestamp: float


class ItemCache:
    """Time-limited cache of catalog listings.

    Created and cleared explicitly by its owner and handed to whatever
    needs it; there is no module-level instance.
    """

    def __init__(
        self,
        duration_seconds: float = DEFAULT_CACHE_DURATION_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.duration_seconds = duration_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.duration_seconds:
            logger.debug(f"Item cache entry expired: {key}")
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, items: list[Item], total: int):
        self._entries[key] = CacheEntry(items=list(items), total=total, timestamp=self._clock())
        logger.debug(f"Cached {len(items)} items under {key}")

    def invalidate(self, key: str):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class CachedItemSource:
    """Wraps an item source with a listing cache.

    Only unfiltered first pages (no search text, offset 0, a limit of at
    least ``min_limit``) are cached, keyed by category. Lookups by id are
    always passed through.
    """

    def __init__(self, source: ItemSource, cache: ItemCache, min_limit: int = DEFAULT_CACHE_MIN_LIMIT):
        self._source = source
        self._cache = cache
        self._min_limit = min_limit

    @classmethod
    def from_config(cls, source: ItemSource, config: ConfigManager) -> "CachedItemSource":
        """Wrap ``source`` with a fresh cache sized by the ``catalog`` config group."""
        hours = config.get("catalog", "cache_duration_hours", 24)
        cache = ItemCache(duration_seconds=hours * 60 * 60)
        return cls(source, cache, min_limit=config.get("catalog", "cache_min_limit", DEFAULT_CACHE_MIN_LIMIT))

    @property
    def cache(self) -> ItemCache:
        return self._cache

    @staticmethod
    def cache_key(query: ItemQuery) -> str:
        return f"category_{query.category_id}" if query.category_id else "all"

    def _cacheable(self, query: ItemQuery) -> bool:
        return query.offset == 0 and query.limit >= self._min_limit and not query.search

    def fetch_items(self, query: ItemQuery) -> ItemPage:
        cacheable = self._cacheable(query)
        key = self.cache_key(query)

        if cacheable:
            entry = self._cache.get(key)
            if entry is not None:
                return ItemPage(items=entry.items[:query.limit], total=entry.total, from_cache=True)

        page = self._source.fetch_items(query)
        if cacheable:
            self._cache.put(key, page.items, page.total)
        return page

    def fetch_by_ids(self, ids: Sequence[str]) -> list[Item]:
        if not ids:
            return []
        return self._source.fetch_by_ids(ids)
