"""
Scraper Service Module

This module ties page acquisition, extraction and staging together: a URL is
fetched, its HTML is extracted, and only a successful extraction is staged in
the curator.
"""

import threading
from typing import Optional

from data.models import ExtractionRecord
from services.curator import ExtractionCurator
from services.extractor import HtmlContentExtractor
from services.page_fetcher import PageFetcher
from services.protocols import PageSource
from utils.exceptions import FetchCancelledError, ValidationError
from utils.helpers import is_valid_url
from utils.logger import get_logger

logger = get_logger(__name__)


class ScraperService:
    """Fetches a page, extracts its content and stages the result."""

    def __init__(
        self,
        fetcher: Optional[PageSource] = None,
        extractor: Optional[HtmlContentExtractor] = None,
        curator: Optional[ExtractionCurator] = None,
    ):
        self.fetcher = fetcher or PageFetcher()
        self.extractor = extractor or HtmlContentExtractor()
        self.curator = curator or ExtractionCurator()

    def scrape(self, url: str, cancel_event: Optional[threading.Event] = None) -> ExtractionRecord:
        """
        Scrape a page and stage the extracted content.

        Args:
            url: Absolute HTTP(S) URL of the page.
            cancel_event: Set by the caller to abandon the scrape.

        Returns:
            ExtractionRecord: The extracted record, also staged in the curator.

        Raises:
            ValidationError: If the URL is blank or not an absolute HTTP(S) URL.
            ExtractionUnavailableError: If the page could not be fetched; the curator is left untouched.
        """
        if not url or not url.strip():
            raise ValidationError("Please enter a URL")
        url = url.strip()
        if not is_valid_url(url):
            raise ValidationError(f"Not an absolute http(s) URL: {url}")

        logger.info(f"Scraping {url}")
        html = self.fetcher.fetch(url, cancel_event=cancel_event)
        record = self.extractor.extract(html, url)

        if cancel_event is not None and cancel_event.is_set():
            raise FetchCancelledError(f"Scrape of {url} was cancelled")

        self.curator.stage(record)
        logger.info(f"Scraped '{record.title}' from {url}: "
                    f"{len(record.body_text)} chars, {len(record.images)} images")
        return record
