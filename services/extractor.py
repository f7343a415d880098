"""
HTML Content Extractor Module

This module turns raw page HTML into a bounded ExtractionRecord: the page title,
the substantial paragraphs of body text, and a short list of absolute image URLs.
It applies simple heuristics rather than a full readability algorithm, performs no
network access and never raises on malformed markup.
"""

from typing import Iterable, List, Optional

from bs4 import BeautifulSoup

from config import settings
from data.models import ExtractionRecord
from utils.logger import get_logger

logger = get_logger(__name__)

IMAGE_URL_PREFIXES = ("http://", "https://")


class HtmlContentExtractor:
    """Extracts title, body text and images from page HTML."""

    def __init__(
        self,
        min_paragraph_length: Optional[int] = None,
        max_body_length: Optional[int] = None,
        max_images: Optional[int] = None,
        excluded_image_substrings: Optional[Iterable[str]] = None,
        paragraph_separator: Optional[str] = None,
    ):
        """
        Initialize the extractor. Every threshold defaults to the value in settings.

        Args:
            min_paragraph_length: Paragraphs must be strictly longer than this (after stripping).
            max_body_length: Hard character cut applied to the joined body text.
            max_images: Maximum number of image URLs kept.
            excluded_image_substrings: Case-sensitive substrings that disqualify an image URL.
            paragraph_separator: Separator placed between qualifying paragraphs.
        """
        self.min_paragraph_length = (settings.MIN_PARAGRAPH_LENGTH
                                     if min_paragraph_length is None else min_paragraph_length)
        self.max_body_length = settings.MAX_BODY_LENGTH if max_body_length is None else max_body_length
        self.max_images = settings.MAX_IMAGES if max_images is None else max_images
        self.excluded_image_substrings = tuple(
            settings.EXCLUDED_IMAGE_SUBSTRINGS if excluded_image_substrings is None
            else excluded_image_substrings)
        self.paragraph_separator = (settings.PARAGRAPH_SEPARATOR
                                    if paragraph_separator is None else paragraph_separator)

    def extract(self, html: Optional[str], source_url: str) -> ExtractionRecord:
        """
        Extract a structured record from page HTML.

        Args:
            html: Raw page HTML. None or empty input yields an empty record.
            source_url: The URL the HTML was fetched from.

        Returns:
            ExtractionRecord: The extracted title, body text and images.
        """
        if not html:
            return ExtractionRecord(source_url=source_url)

        try:
            soup = BeautifulSoup(html, 'html.parser')
            record = ExtractionRecord(
                source_url=source_url,
                title=self._extract_title(soup),
                body_text=self._extract_body(soup),
                images=tuple(self._extract_images(soup)),
            )
        except Exception as e:
            # Unparseable markup is a valid empty extraction, not a failure
            logger.warning(f"Could not parse HTML from {source_url}: {e}")
            return ExtractionRecord(source_url=source_url)

        logger.debug(f"Extracted {len(record.body_text)} chars and {len(record.images)} images from {source_url}")
        return record

    def _extract_title(self, soup: BeautifulSoup) -> str:
        title = soup.find('title')
        return title.get_text().strip() if title else ""

    def _extract_body(self, soup: BeautifulSoup) -> str:
        blocks = []
        for paragraph in soup.find_all('p'):
            text = paragraph.get_text().strip()
            if len(text) > self.min_paragraph_length:
                blocks.append(text)

        # Raw character cut; may split a word
        return self.paragraph_separator.join(blocks)[:self.max_body_length]

    def _extract_images(self, soup: BeautifulSoup) -> List[str]:
        images = []
        for img in soup.find_all('img'):
            if len(images) >= self.max_images:
                break
            src = img.get('src')
            if self.is_qualifying_image(src):
                images.append(src)
        return images

    def is_qualifying_image(self, src: Optional[str]) -> bool:
        """
        Check whether an image source is kept.

        Args:
            src: Value of the image's src attribute.

        Returns:
            bool: True if the source is an absolute HTTP(S) URL without an excluded substring.
        """
        if not src or not isinstance(src, str):
            return False
        if not src.startswith(IMAGE_URL_PREFIXES):
            return False
        return not any(token in src for token in self.excluded_image_substrings)


def extract(html: Optional[str], source_url: str) -> ExtractionRecord:
    """Extract a record using the thresholds from settings."""
    return HtmlContentExtractor().extract(html, source_url)
