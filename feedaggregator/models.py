"""Data model shared by the fetchers, the cache and the aggregator."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Tuple

from feedaggregator.config.settings import EXCERPT_LENGTH
from feedaggregator.utils.text import make_excerpt

# Publication time used when a feed gives no usable date; sorts last.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware UTC datetime.

    Raises:
        ValueError: If the value is not a valid ISO-8601 string
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected ISO-8601 text, got {type(value).__name__}")
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class FeedSource:
    """A configured feed endpoint."""
    name: str
    url: str


@dataclass(frozen=True)
class NewsItem:
    """A normalized news item. `url` is the identity key."""
    title: str
    url: str
    description: str
    published_at: datetime
    source_name: str

    def excerpt(self, limit: int = EXCERPT_LENGTH) -> str:
        return make_excerpt(self.description, limit)

    def to_dict(self) -> Dict[str, str]:
        """Serialize using the persisted cache field names."""
        return {
            'title': self.title,
            'url': self.url,
            'description': self.description,
            'publishedAt': self.published_at.isoformat(),
            'sourceName': self.source_name,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'NewsItem':
        """Build an item from its persisted form.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong type or the date is invalid
        """
        title = data['title']
        url = data['url']
        description = data.get('description') or ''
        source_name = data['sourceName']
        for field_name, value in (('title', title), ('url', url),
                                  ('description', description), ('sourceName', source_name)):
            if not isinstance(value, str):
                raise ValueError(f"Field '{field_name}' must be text")
        if not url:
            raise ValueError("Field 'url' must not be empty")
        return cls(
            title=title,
            url=url,
            description=description,
            published_at=parse_iso_datetime(data['publishedAt']),
            source_name=source_name,
        )


@dataclass(frozen=True)
class CacheSnapshot:
    """The aggregate result persisted between refresh cycles."""
    items: Tuple[NewsItem, ...]
    updated_at: datetime
