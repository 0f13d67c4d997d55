"""
Configuration settings for the feed aggregator.
Values can be overridden through environment variables.
"""

import os
from pathlib import Path

# Base paths
BASE_DIR = Path(__file__).resolve().parent.parent.parent
DATA_DIR = BASE_DIR / "data"

# Feed source registry (name must be unique, it doubles as the display tag)
FEED_SOURCES = [
    {'name': 'TechCrunch', 'url': 'https://techcrunch.com/feed/'},
    {'name': 'The Verge', 'url': 'https://www.theverge.com/rss/index.xml'},
    {'name': 'Ars Technica', 'url': 'https://feeds.arstechnica.com/arstechnica/index'},
    {'name': 'Wired', 'url': 'https://www.wired.com/feed/rss'},
    {'name': 'ITmedia', 'url': 'https://rss.itmedia.co.jp/rss/2.0/news_bursts.xml'},
    {'name': 'Gigazine', 'url': 'https://gigazine.net/news/rss_2.0/'},
    {'name': 'Publickey', 'url': 'https://www.publickey1.jp/atom.xml'},
    {'name': 'ZDNet Japan', 'url': 'https://japan.zdnet.com/rss/'},
    {'name': 'Hacker News', 'url': 'https://hnrss.org/frontpage'},
]

# CORS-bypass proxy, called as PROXY_ENDPOINT?url=<encoded feed url>
PROXY_ENDPOINT = os.environ.get("FEED_PROXY_ENDPOINT", "https://api.allorigins.win/raw")

# Fetch configuration
FETCH_TIMEOUT_MS = int(os.environ.get("FEED_FETCH_TIMEOUT_MS", "6000"))
FETCH_GRACE_MS = 1000  # wait past the budget before abandoning a fetch
FETCH_CHUNK_SIZE = 8192  # bytes
MAX_CONCURRENT_FETCHES = int(os.environ.get("FEED_MAX_CONCURRENT_FETCHES", str(len(FEED_SOURCES))))
USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'

# Cache configuration
CACHE_TTL_MS = int(os.environ.get("FEED_CACHE_TTL_MS", "600000"))  # 10 minutes
CACHE_FILE = Path(os.environ.get("FEED_CACHE_FILE", str(DATA_DIR / 'news_cache.json')))

# Filtering / presentation
ALL_FILTER = 'All'
KEYWORDS = [ALL_FILTER, 'AI', 'Cloud', 'Security', 'DevOps', 'Web', 'Mobile', 'Data']
DISPLAY_LIMIT = 18
EXCERPT_LENGTH = 120
UNTITLED = 'Untitled'

# Status messages published by the aggregator
STATUS_IDLE = 'Idle'
STATUS_REFRESHING = 'Refreshing...'
STATUS_CACHED = 'Showing cached results from {updated_at}'
STATUS_PROGRESS = 'Fetching sources: {settled}/{total} done, {failed} failed'
STATUS_DONE = 'Retrieved {count} items ({failed} sources failed)'
STATUS_STALE = 'All sources failed; showing cached results'
STATUS_FAILED = 'Fetch failed: please try again later'
