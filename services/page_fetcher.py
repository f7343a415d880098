"""
Page Fetcher Module

This module acquires raw HTML for a URL over HTTP. Every failure (timeout,
connection error, non-200 status, oversized body, cancellation) is raised as
an ExtractionUnavailableError so callers never mistake a failed fetch for an
empty page.
"""

import threading
from typing import Dict, Optional

import requests
from bs4 import UnicodeDammit

from config import settings
from utils.exceptions import ExtractionUnavailableError, FetchCancelledError
from utils.logger import get_logger

logger = get_logger(__name__)


class PageFetcher:
    """Fetches page HTML with a timeout, a size cap and cooperative cancellation."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        max_bytes: Optional[int] = None,
        chunk_size: Optional[int] = None,
        proxy: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            timeout: Seconds allowed for connecting and for each read.
            headers: Request headers; defaults to the browser-like headers in settings.
            max_bytes: Bodies larger than this are rejected.
            chunk_size: Bytes read between cancellation checks.
            proxy: Optional proxy URL used for both HTTP and HTTPS.
            session: Injected requests session (for testing).
        """
        self.timeout = settings.FETCH_TIMEOUT if timeout is None else timeout
        self.headers = dict(settings.REQUEST_HEADERS if headers is None else headers)
        self.max_bytes = settings.MAX_PAGE_BYTES if max_bytes is None else max_bytes
        self.chunk_size = settings.FETCH_CHUNK_SIZE if chunk_size is None else chunk_size
        self.proxy = settings.FETCH_PROXY if proxy is None else proxy

        self.session = session or requests.Session()
        self.session.headers.update(self.headers)
        if self.proxy:
            self.session.proxies.update({"http": self.proxy, "https": self.proxy})

    def fetch(self, url: str, cancel_event: Optional[threading.Event] = None) -> str:
        """
        Fetch the HTML of a page.

        Args:
            url: Absolute URL of the page.
            cancel_event: When set by another thread, the fetch stops and raises.

        Returns:
            str: The decoded page HTML.

        Raises:
            FetchCancelledError: If ``cancel_event`` was set before the body was complete.
            ExtractionUnavailableError: If the page could not be acquired.
        """
        self._check_cancelled(cancel_event, url)

        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
        except requests.Timeout as e:
            logger.warning(f"Timed out fetching {url}: {e}")
            raise ExtractionUnavailableError(f"Timed out fetching {url}") from e
        except requests.RequestException as e:
            logger.warning(f"Error fetching {url}: {e}")
            raise ExtractionUnavailableError(f"Could not fetch {url}: {e}") from e

        try:
            if response.status_code != 200:
                logger.warning(f"Fetching {url} returned HTTP {response.status_code}")
                raise ExtractionUnavailableError(f"Fetching {url} returned HTTP {response.status_code}")

            body = self._read_body(response, url, cancel_event)
        finally:
            response.close()

        html = self._decode(body, response)

        logger.info(f"Fetched {len(body)} bytes from {url}")
        return html

    def _read_body(self, response, url: str, cancel_event: Optional[threading.Event]) -> bytes:
        chunks = []
        total = 0
        try:
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                self._check_cancelled(cancel_event, url)
                if not chunk:
                    continue
                total += len(chunk)
                if total > self.max_bytes:
                    raise ExtractionUnavailableError(
                        f"Page at {url} exceeds the {self.max_bytes} byte limit")
                chunks.append(chunk)
        except requests.RequestException as e:
            logger.warning(f"Error reading {url}: {e}")
            raise ExtractionUnavailableError(f"Could not read {url}: {e}") from e

        self._check_cancelled(cancel_event, url)
        return b"".join(chunks)

    @staticmethod
    def _decode(body: bytes, response) -> str:
        # response.encoding is trusted only when the Content-Type header names a
        # charset; requests otherwise guesses ISO-8859-1 for every text/* type
        content_type = response.headers.get('Content-Type') or ''
        declared = [response.encoding] if response.encoding and 'charset=' in content_type.lower() else []

        dammit = UnicodeDammit(body, known_definite_encodings=declared,
                               user_encodings=['utf-8'], is_html=True)
        if dammit.unicode_markup is None:
            return body.decode('utf-8', errors='replace')
        return dammit.unicode_markup

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event], url: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Fetch of {url} cancelled")
            raise FetchCancelledError(f"Fetch of {url} was cancelled")
