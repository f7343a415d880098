"""
Data Layer Protocol Definitions

This module defines typing.Protocol interfaces for data layer operations.
These protocols enable dependency injection for persistence, making services
testable without real storage backends.

Protocols defined:
- RecordStore: Interface for inserting, listing, updating and deleting records
  of one collection (saved scrapes or scheduled posts)
"""

from typing import Any, Dict, List, Protocol


class RecordStore(Protocol):
    """Protocol defining the interface for a single-collection record store.

    Implementations should provide methods for:
    - Inserting a record, assigning its ``id`` and ``created_at``
    - Listing all records ordered by one field
    - Updating selected fields of one record
    - Deleting one record

    Every method may raise PersistenceUnavailableError when the backend
    cannot be reached; callers surface it unmodified.
    """

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a record.

        Args:
            record: Field values without ``id`` or ``created_at``.

        Returns:
            The stored record including the assigned ``id`` and ``created_at``.
        """
        ...

    def list_records(self, order_by: str, descending: bool = False) -> List[Dict[str, Any]]:
        """List every record ordered by one field.

        Args:
            order_by: Name of the field to sort on.
            descending: Sort newest/largest first when True.

        Returns:
            List of stored records.
        """
        ...

    def update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Update selected fields of a record.

        Args:
            record_id: The id assigned at insert time.
            fields: Field values to overwrite.

        Returns:
            The updated record.

        Raises:
            NotFoundError: If no record has this id.
        """
        ...

    def delete(self, record_id: str) -> bool:
        """Delete a record.

        Args:
            record_id: The id assigned at insert time.

        Returns:
            True if a record was deleted, False if none had this id.
        """
        ...
