"""Feed document parser turning RSS or Atom XML into NewsItem objects."""

import calendar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from urllib.parse import urlparse

import feedparser

from feedaggregator.config.settings import UNTITLED
from feedaggregator.exceptions import ParseFailure
from feedaggregator.models import EPOCH, NewsItem

# feedparser flags these but still returns a usable, well-formed document
_TOLERATED_BOZO = (feedparser.CharacterEncodingOverride, feedparser.NonXMLContentType)


@dataclass(frozen=True)
class FeedDialect:
    """Node selector and field fallback table for one XML feed dialect.

    feedparser exposes `item` and `entry` nodes alike as `entries`; the
    dialect decides which normalized keys are consulted, and in which order.
    dc:date is reported by feedparser as `updated`.
    """
    name: str
    node: str
    description_fields: Tuple[str, ...]
    date_fields: Tuple[str, ...]

    @staticmethod
    def detect(parsed) -> Optional['FeedDialect']:
        """Pick one dialect for the whole document from its root format.

        feedparser merges <item> and <entry> nodes into a single `entries`
        list without recording which element each came from, so a document
        mixing both is read entirely with the dialect of its root: an Atom
        <entry> inside an RSS channel is parsed with the RSS field order.

        Returns:
            ATOM for an Atom document, RSS for any other document with
            entries, or None if there are no entries
        """
        if not parsed.get('entries'):
            return None
        version = parsed.get('version') or ''
        if version.startswith('atom'):
            return ATOM
        return RSS

    def description(self, entry):
        for field in self.description_fields:
            text = _field_text(entry, field)
            if text:
                return text
        return ''

    def published_at(self, entry):
        """Timestamp from the first date field present; epoch if it does not parse."""
        for field in self.date_fields:
            if not _field_text(entry, field):
                continue
            return _to_datetime(entry.get(f'{field}_parsed'))
        return EPOCH


RSS = FeedDialect(
    name='rss',
    node='item',
    description_fields=('description', 'summary'),
    date_fields=('published', 'updated', 'created'),
)

ATOM = FeedDialect(
    name='atom',
    node='entry',
    description_fields=('summary', 'content'),
    date_fields=('updated', 'published', 'created'),
)


def _field_text(entry, field):
    value = entry.get(field)
    # Atom <content> arrives as a list of {'value': ..., 'type': ...}
    if isinstance(value, list):
        value = value[0].get('value') if value and isinstance(value[0], dict) else None
    if not isinstance(value, str):
        return ''
    return value.strip()


def _to_datetime(parsed_time):
    if parsed_time is None:
        return EPOCH
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed_time), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return EPOCH


def _is_web_url(value):
    return urlparse(value).scheme in ('http', 'https')


def _resolve_link(entry):
    """Prefer an href-style link reference, then the element text.

    feedparser copies a permalink <guid> into `link` when the item has no
    <link>, so only http(s) URLs are accepted; a bare guid such as
    "abc-123" leaves the item without a link.
    """
    links = entry.get('links') or []
    hrefs = [link['href'].strip() for link in links if isinstance(link, dict) and link.get('href')]
    alternates = [link['href'].strip() for link in links
                  if isinstance(link, dict) and link.get('href') and link.get('rel', 'alternate') == 'alternate']
    for candidate in alternates + hrefs + [_field_text(entry, 'link')]:
        if candidate and _is_web_url(candidate):
            return candidate
    return ''


def _load_document(raw_document):
    # feedparser treats str input as a possible URL or filename
    if isinstance(raw_document, str):
        raw_document = raw_document.encode('utf-8')
    parsed = feedparser.parse(raw_document)
    if parsed.get('bozo') and not isinstance(parsed.get('bozo_exception'), _TOLERATED_BOZO):
        raise ParseFailure(str(parsed.get('bozo_exception') or 'malformed feed document'))
    return parsed


def parse_feed(raw_document, source_name) -> List[NewsItem]:
    """Parse a raw RSS/Atom document into news items.

    Args:
        raw_document: Feed XML as bytes or text
        source_name: Name of the source, attached to every item

    Returns:
        List of NewsItem; empty for malformed documents or documents
        without item/entry nodes
    """
    try:
        parsed = _load_document(raw_document)
    except ParseFailure as e:
        print(f"[WARNING] Failed to parse feed from {source_name}: {e}")
        return []

    dialect = FeedDialect.detect(parsed)
    if dialect is None:
        return []

    items = []
    for entry in parsed.entries:
        url = _resolve_link(entry)
        if not url:
            continue

        items.append(NewsItem(
            title=_field_text(entry, 'title') or UNTITLED,
            url=url,
            description=dialect.description(entry),
            published_at=dialect.published_at(entry),
            source_name=source_name,
        ))

    return items
