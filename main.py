#!/usr/bin/env python3
"""Main entry point for the feed aggregator: runs one refresh cycle."""

import argparse
import sys
import traceback
from datetime import datetime

from dotenv import load_dotenv

load_dotenv()

from feedaggregator.config.settings import ALL_FILTER, DISPLAY_LIMIT  # noqa: E402
from feedaggregator.core.aggregator import NewsAggregator  # noqa: E402


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Aggregate news from the configured RSS/Atom feeds.")
    parser.add_argument('--keyword', default=ALL_FILTER, help="Only show items mentioning this keyword")
    parser.add_argument('--source', default=ALL_FILTER, help="Only show items from this source")
    parser.add_argument('--limit', type=int, default=DISPLAY_LIMIT, help="Maximum number of items to print")
    parser.add_argument('--clear-cache', action='store_true', help="Discard the cached snapshot before refreshing")
    return parser.parse_args(argv)


def print_update(update):
    print(f"  {update.status}")


def print_items(items):
    for item in items:
        published = item.published_at.strftime('%Y-%m-%d %H:%M')
        print(f"\n[{item.source_name}] {item.title}")
        print(f"  {published}  {item.url}")
        excerpt = item.excerpt()
        if excerpt:
            print(f"  {excerpt}")


def main(argv=None):
    """Main function to run the feed aggregator."""
    args = parse_args(argv)
    start_time = datetime.now()
    print(f"====== Feed Aggregator Started: {start_time} ======")

    try:
        aggregator = NewsAggregator()
        if args.clear_cache:
            aggregator.cache_store.clear()

        aggregator.subscribe(print_update)
        report = aggregator.refresh()

        print_items(aggregator.filtered_items(args.keyword, args.source, args.limit))

        duration = datetime.now() - start_time
        print(f"\n====== Feed Aggregator Completed: {aggregator.status} ======")
        print(f"====== Total Duration: {duration} ======")
        return 1 if report is None or report.total_failure else 0
    except Exception as e:
        print(f"ERROR: Feed aggregator failed with exception: {str(e)}")
        print(traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
