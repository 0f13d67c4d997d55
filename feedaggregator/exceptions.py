"""Error types raised inside the aggregation pipeline.

None of these escape a refresh cycle: each is caught at the boundary of the
component that raises it and turned into an empty result, a failure count
or an absent cache.
"""


class FeedAggregatorError(Exception):
    """Base class for feed aggregator errors."""


class ParseFailure(FeedAggregatorError):
    """Raised when a feed document is not well-formed XML."""


class SourceUnavailable(FeedAggregatorError):
    """Raised when a source cannot be fetched (network error, bad status or timeout)."""

    def __init__(self, source_name, reason):
        super().__init__(f"{source_name}: {reason}")
        self.source_name = source_name
        self.reason = reason


class CacheError(FeedAggregatorError):
    """Base class for cache problems; callers treat the cache as absent."""


class CacheCorrupt(CacheError):
    """Raised when the persisted snapshot cannot be decoded."""


class CacheExpired(CacheError):
    """Raised when the persisted snapshot is older than the TTL."""
