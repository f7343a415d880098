"""
Extraction Curator Module

This module holds the most recent extraction result in an editable staging form
so the user can correct the title, body and image list before saving or
scheduling it. No content validation happens here; the archive and the
scheduler validate what they receive.
"""

from typing import Iterable, Optional

from data.models import ExtractionRecord, StagedContent
from utils.exceptions import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)


class ExtractionCurator:
    """Keeps at most one staged, editable copy of an extraction record."""

    def __init__(self):
        self._staged: Optional[StagedContent] = None

    @property
    def staged(self) -> Optional[StagedContent]:
        """The current staged content, or None."""
        return self._staged

    @property
    def has_staged(self) -> bool:
        return self._staged is not None

    def stage(self, record: ExtractionRecord) -> StagedContent:
        """
        Replace the staged content with an editable copy of ``record``.

        Args:
            record: The extraction record to stage.

        Returns:
            StagedContent: The new staged copy.
        """
        self._staged = StagedContent.from_record(record)
        logger.info(f"Staged extraction from {record.source_url}")
        return self._staged

    def _require_staged(self) -> StagedContent:
        if self._staged is None:
            raise ValidationError("No extracted content is staged")
        return self._staged

    def edit_title(self, title: str) -> None:
        self._require_staged().title = title

    def edit_body(self, body_text: str) -> None:
        self._require_staged().body_text = body_text

    def edit_images(self, images: Iterable[str]) -> None:
        self._require_staged().images = list(images)

    def remove_image(self, index: int) -> str:
        """
        Remove one image from the staged list; later images shift left.

        Args:
            index: Position of the image to remove.

        Returns:
            str: The removed image URL.

        Raises:
            ValidationError: If nothing is staged or the index is out of range.
        """
        staged = self._require_staged()
        if not 0 <= index < len(staged.images):
            raise ValidationError(f"Image index {index} is out of range (have {len(staged.images)} images)")
        return staged.images.pop(index)

    def snapshot(self) -> ExtractionRecord:
        """Return the staged content as an immutable record."""
        return self._require_staged().to_record()

    def clear(self) -> None:
        """Discard the staged content."""
        self._staged = None
