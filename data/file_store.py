"""
JSON File Store Module

This module provides a RecordStore backed by a JSON file on local disk.
Each collection (saved scrapes, scheduled posts) lives in its own file.
Writes go to a temporary file that then replaces the original, so a reader
never sees a half-written collection.
"""

import json
import os
import tempfile
import threading
import uuid
from datetime import datetime
from typing import Any, Dict, List

from utils.exceptions import NotFoundError, PersistenceUnavailableError
from utils.helpers import to_iso, utc_now
from utils.logger import get_logger

logger = get_logger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, tuple):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonFileStore:
    """RecordStore implementation that keeps one collection in a JSON file."""

    def __init__(self, path: str):
        """
        Initialize the store.

        Args:
            path: Location of the JSON file. Missing parent directories are created on first write.
        """
        self.path = str(path)
        self._lock = threading.Lock()

    def _read(self) -> List[Dict[str, Any]]:
        """Read every record from disk."""
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                content = f.read()
            if not content.strip():
                return []
            records = json.loads(content)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading record file {self.path}: {e}")
            raise PersistenceUnavailableError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(records, list):
            raise PersistenceUnavailableError(f"Record file {self.path} does not contain a list")
        return records

    def _write(self, records: List[Dict[str, Any]]) -> None:
        """Replace the file contents with ``records``."""
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".records-", suffix=".json")
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(records, f, default=_json_default, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError) as e:
            logger.error(f"Error writing record file {self.path}: {e}")
            raise PersistenceUnavailableError(f"Cannot write {self.path}: {e}") from e

    @staticmethod
    def _normalise(record: Dict[str, Any]) -> Dict[str, Any]:
        """Round-trip a record through JSON so stored and returned values match."""
        return json.loads(json.dumps(record, default=_json_default))

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            records = self._read()
            stored = self._normalise(record)
            stored["id"] = uuid.uuid4().hex
            stored["created_at"] = to_iso(utc_now())
            records.append(stored)
            self._write(records)
            logger.debug(f"Inserted record {stored['id']} into {self.path}")
            return dict(stored)

    def list_records(self, order_by: str, descending: bool = False) -> List[Dict[str, Any]]:
        with self._lock:
            records = self._read()
        # ISO-8601 UTC strings sort chronologically as text
        return sorted(records, key=lambda r: (r.get(order_by) is None, r.get(order_by) or ""),
                      reverse=descending)

    def update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            records = self._read()
            for record in records:
                if record.get("id") == record_id:
                    record.update(self._normalise(fields))
                    record["id"] = record_id
                    self._write(records)
                    return dict(record)
            raise NotFoundError(f"No record with id {record_id} in {self.path}")

    def delete(self, record_id: str) -> bool:
        with self._lock:
            records = self._read()
            remaining = [r for r in records if r.get("id") != record_id]
            if len(remaining) == len(records):
                return False
            self._write(remaining)
            logger.debug(f"Deleted record {record_id} from {self.path}")
            return True
