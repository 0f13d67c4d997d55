"""RSS/Atom source fetcher retrieving feeds through the CORS-bypass proxy."""

import socket
import threading
import time

import requests

from feedaggregator.config.settings import FETCH_TIMEOUT_MS, FETCH_CHUNK_SIZE, PROXY_ENDPOINT
from feedaggregator.exceptions import SourceUnavailable
from feedaggregator.fetchers.feed_parser import parse_feed
from feedaggregator.utils.http import build_proxy_url, get_headers


class SourceFetcher:
    """Fetches one feed source under a fixed time budget."""

    def __init__(self, session=None, proxy_endpoint=PROXY_ENDPOINT):
        self.session = session or requests.Session()
        self.proxy_endpoint = proxy_endpoint

    def fetch(self, source, timeout_ms=FETCH_TIMEOUT_MS):
        """Fetch and parse a single source.

        The whole retrieval, body included, must finish within `timeout_ms`.
        Connect and read waits only get the budget that is left, and a timer
        shuts the connection down when the deadline passes so a slowly
        trickling body cannot hold the fetch open.

        Args:
            source: FeedSource to retrieve
            timeout_ms: Time budget in milliseconds

        Returns:
            List of NewsItem (possibly empty)

        Raises:
            SourceUnavailable: On network error, non-2xx status or timeout
        """
        deadline = time.monotonic() + timeout_ms / 1000.0
        url = build_proxy_url(source.url, self.proxy_endpoint)
        timed_out = SourceUnavailable(source.name, f"timed out after {timeout_ms} ms")

        remaining = deadline - time.monotonic()
        try:
            response = self.session.get(
                url,
                headers=get_headers(),
                timeout=(remaining, remaining),
                stream=True,
            )
        except requests.Timeout as e:
            raise timed_out from e
        except requests.RequestException as e:
            raise SourceUnavailable(source.name, f"request failed ({e})") from e

        cancelled = threading.Event()
        try:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise timed_out
            if not 200 <= response.status_code < 300:
                raise SourceUnavailable(source.name, f"HTTP {response.status_code}")

            timer = threading.Timer(remaining, self._cancel, args=(response, cancelled))
            timer.daemon = True
            timer.start()
            try:
                body = self._read_body(response, source, cancelled, timed_out)
            finally:
                timer.cancel()

            if cancelled.is_set() or time.monotonic() > deadline:
                raise timed_out
        finally:
            response.close()

        return parse_feed(body, source.name)

    @staticmethod
    def _cancel(response, cancelled):
        """Abort an in-flight body read once the deadline has passed."""
        cancelled.set()
        connection = getattr(response.raw, 'connection', None)
        sock = getattr(connection, 'sock', None)
        if sock is None:
            response.close()
            return
        try:
            # shutdown wakes a reader blocked in recv; close alone does not
            sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            print(f"[WARNING] Could not shut down connection after deadline: {e}")

    @staticmethod
    def _read_body(response, source, cancelled, timed_out):
        chunks = []
        try:
            for chunk in response.iter_content(chunk_size=FETCH_CHUNK_SIZE):
                if cancelled.is_set():
                    raise timed_out
                if chunk:
                    chunks.append(chunk)
        except requests.Timeout as e:
            raise timed_out from e
        except (requests.RequestException, OSError) as e:
            if cancelled.is_set():
                raise timed_out from e
            raise SourceUnavailable(source.name, f"read failed ({e})") from e
        return b''.join(chunks)
