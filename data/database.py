"""
Database Module for Scrape Scheduler Application

This module handles SQL Server connections and provides a RecordStore backed by
a database table. It is used when STORAGE_BACKEND is set to 'sqlserver'.
"""

import json
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd
import pyodbc

from config import settings
from utils.exceptions import NotFoundError, PersistenceUnavailableError
from utils.helpers import parse_timestamp, utc_now
from utils.logger import get_logger

logger = get_logger(__name__)

# Column definitions per table. Column names are only ever taken from here.
TABLE_SCHEMAS: Dict[str, Dict[str, str]] = {
    settings.SCRAPES_TABLE: {
        "id": "NVARCHAR(36) NOT NULL PRIMARY KEY",
        "source_url": "NVARCHAR(2048) NOT NULL",
        "title": "NVARCHAR(1024) NULL",
        "body_text": "NVARCHAR(MAX) NULL",
        "images": "NVARCHAR(MAX) NULL",
        "created_at": "DATETIME2 NOT NULL",
    },
    settings.SCHEDULED_POSTS_TABLE: {
        "id": "NVARCHAR(36) NOT NULL PRIMARY KEY",
        "content": "NVARCHAR(MAX) NOT NULL",
        "platform": "NVARCHAR(32) NOT NULL",
        "scheduled_time": "DATETIME2 NOT NULL",
        "media_urls": "NVARCHAR(MAX) NULL",
        "status": "NVARCHAR(16) NOT NULL",
        "created_at": "DATETIME2 NOT NULL",
    },
}

# Columns holding lists, stored as JSON text
JSON_COLUMNS = {"images", "media_urls"}

# Columns holding timestamps; DATETIME2 has no offset so values are stored as naive UTC
DATETIME_COLUMNS = {"scheduled_time", "created_at"}


class DatabaseConnection:
    """Database connection manager for the Scrape Scheduler application."""

    def __init__(self, connection_string: Optional[str] = None):
        """Initialize the database connection."""
        self.connection_string = connection_string or settings.DB_CONNECTION_STRING
        self.conn = None
        pyodbc.pooling = False

    def connect(self) -> bool:
        """
        Establish a connection to the database.

        Returns:
            bool: True if connection was successful, False otherwise.
        """
        try:
            self.conn = pyodbc.connect(self.connection_string)
            self.conn.setdecoding(pyodbc.SQL_CHAR, encoding='utf-8')
            logger.info("Successfully connected to database")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            self.conn = None
            return False

    def close(self) -> None:
        """Close the database connection."""
        try:
            if self.conn:
                self.conn.close()
                logger.info("Database connection closed")
        except Exception as e:
            logger.error(f"Error closing database connection: {e}")
        finally:
            self.conn = None

    def _require_connection(self):
        if not self.conn and not self.connect():
            raise PersistenceUnavailableError("Database is not reachable")
        return self.conn

    def execute(self, query: str, params: Optional[tuple] = None) -> int:
        """
        Execute a modifying SQL statement and commit it.

        Args:
            query: The SQL statement to execute.
            params: Statement parameters (optional).

        Returns:
            int: Number of affected rows.

        Raises:
            PersistenceUnavailableError: If the statement fails.
        """
        conn = self._require_connection()
        try:
            cursor = conn.cursor()
            if params:
                cursor.execute(query, params)
            else:
                cursor.execute(query)
            rowcount = cursor.rowcount
            conn.commit()
            return rowcount
        except Exception as e:
            logger.error(f"Error executing statement: {e}")
            try:
                conn.rollback()
            except Exception as rollback_error:
                logger.warning(f"Rollback failed: {rollback_error}")
            raise PersistenceUnavailableError(f"Database statement failed: {e}") from e

    def read_frame(self, query: str, params: Optional[tuple] = None) -> pd.DataFrame:
        """
        Run a SELECT query and return the result as a DataFrame.

        Raises:
            PersistenceUnavailableError: If the query fails.
        """
        conn = self._require_connection()
        try:
            return pd.read_sql(query, conn, params=params)
        except Exception as e:
            logger.error(f"Error executing query: {e}")
            raise PersistenceUnavailableError(f"Database query failed: {e}") from e


class SqlRecordStore:
    """RecordStore implementation backed by one SQL Server table."""

    def __init__(self, db: DatabaseConnection, table: str):
        if table not in TABLE_SCHEMAS:
            raise ValueError(f"Unknown table '{table}'")
        self.db = db
        self.table = table
        self.columns = list(TABLE_SCHEMAS[table])

    def ensure_table(self) -> None:
        """Create the table if it does not exist yet."""
        column_sql = ",\n            ".join(
            f"[{name}] {definition}" for name, definition in TABLE_SCHEMAS[self.table].items())
        query = f"""
        IF OBJECT_ID(N'[dbo].[{self.table}]', N'U') IS NULL
        CREATE TABLE [dbo].[{self.table}] (
            {column_sql}
        )
        """
        self.db.execute(query)
        logger.info(f"Ensured table {self.table} exists")

    def _check_columns(self, names) -> None:
        unknown = [n for n in names if n not in self.columns]
        if unknown:
            raise ValueError(f"Unknown column(s) for {self.table}: {', '.join(unknown)}")

    @staticmethod
    def _to_db(name: str, value: Any) -> Any:
        if name in JSON_COLUMNS:
            return json.dumps(list(value or []))
        if name in DATETIME_COLUMNS and value is not None:
            return parse_timestamp(value).replace(tzinfo=None)
        if isinstance(value, Enum):
            return value.value
        return value

    @staticmethod
    def _from_db(row: Dict[str, Any]) -> Dict[str, Any]:
        record = {}
        for name, value in row.items():
            if not isinstance(value, (list, tuple, dict)) and pd.isna(value):
                value = None
            if name in JSON_COLUMNS:
                value = json.loads(value) if value else []
            elif name in DATETIME_COLUMNS and value is not None:
                value = parse_timestamp(pd.Timestamp(value).to_pydatetime())
            record[name] = value
        return record

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(record)
        stored["id"] = uuid.uuid4().hex
        stored["created_at"] = utc_now()
        self._check_columns(stored)

        names = list(stored)
        placeholders = ", ".join("?" for _ in names)
        query = (f"INSERT INTO [dbo].[{self.table}] ({', '.join(f'[{n}]' for n in names)}) "
                 f"VALUES ({placeholders})")
        self.db.execute(query, tuple(self._to_db(n, stored[n]) for n in names))
        logger.info(f"Inserted record {stored['id']} into {self.table}")

        stored["created_at"] = parse_timestamp(stored["created_at"])
        return stored

    def list_records(self, order_by: str, descending: bool = False) -> List[Dict[str, Any]]:
        self._check_columns([order_by])
        direction = "DESC" if descending else "ASC"
        query = (f"SELECT {', '.join(f'[{c}]' for c in self.columns)} FROM [dbo].[{self.table}] "
                 f"ORDER BY [{order_by}] {direction}")
        frame = self.db.read_frame(query)
        return [self._from_db(row) for row in frame.to_dict("records")]

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        query = (f"SELECT {', '.join(f'[{c}]' for c in self.columns)} FROM [dbo].[{self.table}] "
                 f"WHERE [id] = ?")
        frame = self.db.read_frame(query, (record_id,))
        rows = frame.to_dict("records")
        return self._from_db(rows[0]) if rows else None

    def update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        self._check_columns(fields)
        assignments = ", ".join(f"[{name}] = ?" for name in fields)
        query = f"UPDATE [dbo].[{self.table}] SET {assignments} WHERE [id] = ?"
        params = tuple(self._to_db(n, v) for n, v in fields.items()) + (record_id,)

        if self.db.execute(query, params) == 0:
            raise NotFoundError(f"No record with id {record_id} in {self.table}")

        logger.info(f"Updated record {record_id} in {self.table}")
        updated = self.get(record_id)
        if updated is None:
            raise NotFoundError(f"No record with id {record_id} in {self.table}")
        return updated

    def delete(self, record_id: str) -> bool:
        query = f"DELETE FROM [dbo].[{self.table}] WHERE [id] = ?"
        deleted = self.db.execute(query, (record_id,)) > 0
        if deleted:
            logger.info(f"Deleted record {record_id} from {self.table}")
        return deleted
