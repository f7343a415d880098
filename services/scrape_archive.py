"""
Scrape Archive Module

This module stores extraction records the user wants to keep for later.
Saved scrapes are snapshots: they can be listed (newest first) and deleted,
but never partially updated.
"""

from typing import List

from data.models import ExtractionRecord, SavedScrape
from data.protocols import RecordStore
from services.curator import ExtractionCurator
from utils.exceptions import NotFoundError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)


class ScrapeArchive:
    """Persistence-backed repository of saved extraction records."""

    def __init__(self, store: RecordStore):
        """
        Initialize the archive.

        Args:
            store: Record store holding the saved scrapes.
        """
        self.store = store

    def save(self, record: ExtractionRecord) -> SavedScrape:
        """
        Save a snapshot of an extraction record.

        Args:
            record: The (possibly edited) extraction record.

        Returns:
            SavedScrape: The stored scrape with its assigned id and creation time.

        Raises:
            ValidationError: If the source URL is blank or there is no title and no body.
            PersistenceUnavailableError: If the store fails.
        """
        if not record.source_url or not record.source_url.strip():
            raise ValidationError("A saved scrape needs its source URL")
        if not record.title and not record.body_text:
            raise ValidationError("No content to save")

        stored = self.store.insert({
            "source_url": record.source_url,
            "title": record.title,
            "body_text": record.body_text,
            "images": list(record.images),
        })
        scrape = SavedScrape.from_record(stored)
        logger.info(f"Saved scrape {scrape.id} from {scrape.source_url}")
        return scrape

    def save_staged(self, curator: ExtractionCurator) -> SavedScrape:
        """
        Save the curator's staged content and clear it once the save succeeds.

        Raises:
            ValidationError: If nothing is staged or the staged content is empty.
        """
        scrape = self.save(curator.snapshot())
        curator.clear()
        return scrape

    def list_scrapes(self) -> List[SavedScrape]:
        """Return every saved scrape, newest first."""
        records = self.store.list_records("created_at", descending=True)
        scrapes = [SavedScrape.from_record(r) for r in records]
        return sorted(scrapes, key=lambda s: s.created_at, reverse=True)

    def delete(self, scrape_id: str) -> None:
        """
        Delete a saved scrape.

        Raises:
            NotFoundError: If no scrape has this id.
        """
        if not self.store.delete(scrape_id):
            raise NotFoundError(f"Saved scrape {scrape_id} not found")
        logger.info(f"Deleted scrape {scrape_id}")
