"""Text utilities for feed descriptions and keyword matching."""

from bs4 import BeautifulSoup


def strip_html(text):
    """Remove markup from a feed description.

    Args:
        text: Description text, possibly containing HTML

    Returns:
        Plain text with whitespace collapsed
    """
    if not text:
        return ""
    if '<' not in text:
        return ' '.join(text.split())
    plain = BeautifulSoup(text, 'html.parser').get_text(' ')
    return ' '.join(plain.split())


def make_excerpt(text, limit):
    """Return at most `limit` characters of plain text from a description."""
    plain = strip_html(text)
    if limit <= 0 or len(plain) <= limit:
        return plain
    return plain[:limit]


def contains_keyword(text, keyword):
    """Case-insensitive substring check."""
    if not text or not keyword:
        return False
    return keyword.lower() in text.lower()
