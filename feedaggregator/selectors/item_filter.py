"""Keyword and source filtering for aggregated news items."""

from typing import Iterable, List, Optional

from feedaggregator.config.settings import ALL_FILTER
from feedaggregator.models import NewsItem
from feedaggregator.utils.text import contains_keyword


def _is_wildcard(value):
    return not value or value == ALL_FILTER


def matches_filter(item: NewsItem, keyword: Optional[str] = ALL_FILTER,
                   source: Optional[str] = ALL_FILTER) -> bool:
    """Check an item against a keyword and a source name.

    Args:
        item: Item to test
        keyword: Case-insensitive text looked up in title and description;
            "All" or empty matches everything
        source: Exact source name; "All" or empty matches everything

    Returns:
        True if the item satisfies both criteria
    """
    if not _is_wildcard(source) and item.source_name != source:
        return False
    if _is_wildcard(keyword):
        return True
    return contains_keyword(item.title, keyword) or contains_keyword(item.description, keyword)


def filter_items(items: Iterable[NewsItem], keyword: Optional[str] = ALL_FILTER,
                 source: Optional[str] = ALL_FILTER, limit: Optional[int] = None) -> List[NewsItem]:
    """Return the items matching `keyword` and `source`, keeping their order."""
    matched = [item for item in items if matches_filter(item, keyword, source)]
    if limit is not None and limit >= 0:
        return matched[:limit]
    return matched
