"""HTTP helpers shared by the fetchers."""

from urllib.parse import quote

from feedaggregator.config.settings import USER_AGENT, PROXY_ENDPOINT


def get_headers():
    """Default request headers for feed retrieval."""
    return {
        'User-Agent': USER_AGENT,
        'Accept': 'application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.8',
    }


def build_proxy_url(feed_url, proxy_endpoint=PROXY_ENDPOINT):
    """Wrap a feed URL in the CORS-bypass proxy request.

    Args:
        feed_url: The source's real endpoint
        proxy_endpoint: Proxy base URL

    Returns:
        URL of the form ``<proxy>?url=<encoded feed url>``
    """
    separator = '&' if '?' in proxy_endpoint else '?'
    return f"{proxy_endpoint}{separator}url={quote(feed_url, safe='')}"
