import unittest
from datetime import datetime, timezone

from feedaggregator.fetchers.feed_parser import parse_feed, FeedDialect, RSS, ATOM
from feedaggregator.models import EPOCH

RSS_DOCUMENT = b"""<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0">
  <channel>
    <title>Example Feed</title>
    <link>https://example.com/</link>
    <description>Example channel</description>
    <item>
      <title>Cloud outage explained</title>
      <link>https://example.com/cloud-outage</link>
      <description>&lt;p&gt;What happened to the &lt;b&gt;Cloud&lt;/b&gt; region&lt;/p&gt;</description>
      <pubDate>Mon, 06 Sep 2021 16:45:00 GMT</pubDate>
    </item>
    <item>
      <title></title>
      <link>https://example.com/untitled</link>
      <pubDate>not a date</pubDate>
    </item>
    <item>
      <title>Item without a link</title>
      <description>Cannot be opened</description>
    </item>
    <item>
      <title>Item with only a guid</title>
      <guid>abc-123</guid>
      <description>The guid is not a link</description>
    </item>
    <item>
      <title>Item with a non-web link</title>
      <link>ftp://example.com/archive.txt</link>
    </item>
  </channel>
</rss>
"""

ATOM_DOCUMENT = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Feed</title>
  <id>urn:example:feed</id>
  <updated>2024-05-01T10:00:00Z</updated>
  <entry>
    <title>Atom story</title>
    <link rel="alternate" href="https://example.org/atom-story"/>
    <id>urn:example:1</id>
    <updated>2024-05-01T10:00:00Z</updated>
    <published>2024-04-30T08:00:00Z</published>
    <summary>Security patch released</summary>
  </entry>
  <entry>
    <title>Atom entry without link</title>
    <id>urn:example:2</id>
    <updated>2024-05-01T09:00:00Z</updated>
  </entry>
</feed>
"""


class TestParseFeed(unittest.TestCase):

    def test_rss_items_are_normalized(self):
        items = parse_feed(RSS_DOCUMENT, 'Example')

        self.assertEqual(len(items), 2)
        first = items[0]
        self.assertEqual(first.title, 'Cloud outage explained')
        self.assertEqual(first.url, 'https://example.com/cloud-outage')
        self.assertIn('Cloud', first.description)
        self.assertEqual(first.published_at, datetime(2021, 9, 6, 16, 45, tzinfo=timezone.utc))
        self.assertEqual(first.source_name, 'Example')

    def test_missing_title_and_bad_date_fall_back(self):
        items = parse_feed(RSS_DOCUMENT, 'Example')

        untitled = items[1]
        self.assertEqual(untitled.title, 'Untitled')
        self.assertEqual(untitled.published_at, EPOCH)
        self.assertEqual(untitled.description, '')

    def test_linkless_items_are_dropped(self):
        rss_items = parse_feed(RSS_DOCUMENT, 'Example')
        rss_urls = [item.url for item in rss_items]
        rss_titles = [item.title for item in rss_items]
        atom_titles = [item.title for item in parse_feed(ATOM_DOCUMENT, 'Atom')]

        self.assertNotIn('', rss_urls)
        self.assertNotIn('abc-123', rss_urls)
        self.assertNotIn('Item with only a guid', rss_titles)
        self.assertNotIn('Item with a non-web link', rss_titles)
        self.assertNotIn('Atom entry without link', atom_titles)

    def test_atom_entries_used_when_no_rss_items(self):
        items = parse_feed(ATOM_DOCUMENT, 'Atom')

        self.assertEqual(len(items), 1)
        story = items[0]
        self.assertEqual(story.url, 'https://example.org/atom-story')
        self.assertEqual(story.description, 'Security patch released')
        # Atom prefers <updated> over <published>
        self.assertEqual(story.published_at, datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc))

    def test_text_input_is_accepted(self):
        items = parse_feed(RSS_DOCUMENT.decode('utf-8'), 'Example')
        self.assertEqual(len(items), 2)

    def test_document_without_items_or_entries_is_empty(self):
        document = b'<?xml version="1.0" encoding="utf-8"?><html><body><p>Nothing here</p></body></html>'
        self.assertEqual(parse_feed(document, 'Example'), [])

    def test_malformed_document_is_empty(self):
        document = b'<rss version="2.0"><channel><item><title>Broken</title><link>https://example.com/x</link>'
        self.assertEqual(parse_feed(document, 'Example'), [])

    def test_empty_document_is_empty(self):
        self.assertEqual(parse_feed(b'', 'Example'), [])


class TestFeedDialect(unittest.TestCase):

    def test_detect(self):
        self.assertIs(FeedDialect.detect({'version': 'rss20', 'entries': [{}]}), RSS)
        self.assertIs(FeedDialect.detect({'version': 'atom10', 'entries': [{}]}), ATOM)
        self.assertIsNone(FeedDialect.detect({'version': 'rss20', 'entries': []}))

    def test_mixed_document_uses_root_dialect(self):
        # an Atom-style entry inside an RSS channel is read with RSS field order
        parsed = {
            'version': 'rss20',
            'entries': [
                {'description': 'rss text', 'published': 'Mon, 06 Sep 2021 16:45:00 GMT'},
                {'summary': 'atom summary', 'content': [{'value': 'atom content'}],
                 'updated': '2024-05-01T10:00:00Z', 'updated_parsed': (2024, 5, 1, 10, 0, 0, 2, 122, 0),
                 'published': '2024-04-30T08:00:00Z', 'published_parsed': (2024, 4, 30, 8, 0, 0, 1, 121, 0)},
            ],
        }

        dialect = FeedDialect.detect(parsed)

        self.assertIs(dialect, RSS)
        atom_entry = parsed['entries'][1]
        self.assertEqual(dialect.description(atom_entry), 'atom summary')
        self.assertEqual(dialect.published_at(atom_entry), datetime(2024, 4, 30, 8, 0, tzinfo=timezone.utc))

    def test_description_fallback_order(self):
        entry = {'summary': 'from summary', 'content': [{'value': 'from content'}]}
        self.assertEqual(RSS.description(entry), 'from summary')
        self.assertEqual(ATOM.description({'content': [{'value': 'from content'}]}), 'from content')
        self.assertEqual(ATOM.description({}), '')

    def test_first_present_date_field_wins(self):
        entry = {
            'updated': 'garbage',
            'updated_parsed': None,
            'published': 'Mon, 06 Sep 2021 16:45:00 GMT',
            'published_parsed': (2021, 9, 6, 16, 45, 0, 0, 249, 0),
        }
        # RSS reads pubDate first, Atom reads <updated> first
        self.assertEqual(RSS.published_at(entry), datetime(2021, 9, 6, 16, 45, tzinfo=timezone.utc))
        self.assertEqual(ATOM.published_at(entry), EPOCH)
        self.assertEqual(RSS.published_at({}), EPOCH)


if __name__ == '__main__':
    unittest.main()
