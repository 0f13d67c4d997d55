import unittest
from datetime import datetime, timezone

from feedaggregator.models import NewsItem
from feedaggregator.selectors.item_filter import matches_filter, filter_items

PUBLISHED = datetime(2024, 10, 1, tzinfo=timezone.utc)

AI_ITEM = NewsItem(title='New AI chips announced', url='https://example.com/ai',
                   description='', published_at=PUBLISHED, source_name='TechCrunch')
CLOUD_ITEM = NewsItem(title='Quarterly results', url='https://example.com/cloud',
                      description='<p>Growth driven by cloud revenue</p>',
                      published_at=PUBLISHED, source_name='The Verge')


class TestMatchesFilter(unittest.TestCase):

    def test_all_matches_everything(self):
        self.assertTrue(matches_filter(AI_ITEM, 'All', 'All'))
        self.assertTrue(matches_filter(CLOUD_ITEM))
        self.assertTrue(matches_filter(CLOUD_ITEM, None, ''))

    def test_keyword_is_case_insensitive_on_title_and_description(self):
        self.assertTrue(matches_filter(AI_ITEM, 'ai'))
        self.assertTrue(matches_filter(CLOUD_ITEM, 'Cloud'))
        self.assertFalse(matches_filter(AI_ITEM, 'Security'))

    def test_source_is_exact(self):
        self.assertTrue(matches_filter(AI_ITEM, 'All', 'TechCrunch'))
        self.assertFalse(matches_filter(AI_ITEM, 'All', 'The Verge'))
        self.assertFalse(matches_filter(AI_ITEM, 'AI', 'The Verge'))


class TestFilterItems(unittest.TestCase):

    def test_keeps_order_and_applies_limit(self):
        items = [AI_ITEM, CLOUD_ITEM]

        self.assertEqual(filter_items(items), items)
        self.assertEqual(filter_items(items, limit=1), [AI_ITEM])
        self.assertEqual(filter_items(items, keyword='cloud'), [CLOUD_ITEM])


if __name__ == '__main__':
    unittest.main()
