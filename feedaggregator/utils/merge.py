"""Deduplicate and order news items from the cache and from fetched sources."""

from typing import Iterable, List

from feedaggregator.models import NewsItem


def merge_items(base: Iterable[NewsItem], incoming: Iterable[NewsItem]) -> List[NewsItem]:
    """Merge two item sequences keyed by URL.

    Items already present in `base` are never replaced by an incoming item
    with the same URL; the same first-seen-wins rule applies inside each
    sequence. Neither input is modified.

    Args:
        base: Items already held (cached or folded earlier)
        incoming: Newly fetched items

    Returns:
        New list sorted by publication time, most recent first
    """
    by_url = {}
    for item in list(base) + list(incoming):
        if item.url not in by_url:
            by_url[item.url] = item

    return sorted(by_url.values(), key=lambda item: item.published_at, reverse=True)
