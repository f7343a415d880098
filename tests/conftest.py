"""
Shared Test Fixtures for Scrape Scheduler Application

This module provides common fixtures used across all test modules.
Fixtures include mocks for settings, database connections, logging,
HTTP responses, an in-memory record store, and factories for test objects.
"""

import pytest
from unittest.mock import MagicMock, patch
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List
import itertools
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings  # noqa: F401  (patched by mock_settings)
from utils.exceptions import NotFoundError, PersistenceUnavailableError


FIXED_NOW = datetime(2030, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def mock_settings():
    """
    Mock the settings module with test configuration values.

    This fixture patches the config.settings module with safe test values,
    preventing tests from touching real storage or credentials.

    Returns:
        MagicMock: A mock settings object with default test values.
    """
    with patch('config.settings') as mock_settings_module:
        # Storage Settings
        mock_settings_module.STORAGE_BACKEND = "file"
        mock_settings_module.SUPPORTED_STORAGE_BACKENDS = ["file", "sqlserver"]
        mock_settings_module.DATA_DIR = "/tmp/test-scrape-scheduler"
        mock_settings_module.DB_SERVER = "test-server"
        mock_settings_module.DB_NAME = "test-db"
        mock_settings_module.DB_USER = "test-user"
        mock_settings_module.DB_PASSWORD = "test-password"
        mock_settings_module.DB_CONNECTION_STRING = "DRIVER={Test};SERVER=test-server;DATABASE=test-db;"
        mock_settings_module.SCRAPES_TABLE = "scrapes"
        mock_settings_module.SCHEDULED_POSTS_TABLE = "scheduled_posts"

        # Extraction Settings
        mock_settings_module.MIN_PARAGRAPH_LENGTH = 50
        mock_settings_module.MAX_BODY_LENGTH = 2000
        mock_settings_module.MAX_IMAGES = 10
        mock_settings_module.EXCLUDED_IMAGE_SUBSTRINGS = ["logo", "icon"]
        mock_settings_module.PARAGRAPH_SEPARATOR = "\n\n"

        # Fetch Settings
        mock_settings_module.FETCH_TIMEOUT = 15
        mock_settings_module.FETCH_CHUNK_SIZE = 8192
        mock_settings_module.MAX_PAGE_BYTES = 5 * 1024 * 1024
        mock_settings_module.FETCH_PROXY = None
        mock_settings_module.REQUEST_HEADERS = {'User-Agent': 'Test User Agent'}

        # Platform Settings
        mock_settings_module.DEFAULT_PLATFORM = "twitter"
        mock_settings_module.TWITTER_CHARACTER_LIMIT = 280
        mock_settings_module.DEFAULT_CHARACTER_LIMIT = 2000
        mock_settings_module.PLATFORM_CHARACTER_LIMITS = {
            "twitter": 280, "facebook": 2000, "instagram": 2000, "linkedin": 2000
        }
        mock_settings_module.TWITTER_API_KEY = "test-twitter-api-key"
        mock_settings_module.TWITTER_API_KEY_SECRET = "test-twitter-api-secret"
        mock_settings_module.TWITTER_ACCESS_TOKEN = "test-twitter-access-token"
        mock_settings_module.TWITTER_ACCESS_TOKEN_SECRET = "test-twitter-access-secret"
        mock_settings_module.TWITTER_IMAGE_TIMEOUT = 10

        # Dashboard Settings
        mock_settings_module.DASHBOARD_UPCOMING_LIMIT = 5
        mock_settings_module.DASHBOARD_RECENT_SCRAPES_LIMIT = 5

        yield mock_settings_module


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def mock_db_connection():
    """
    Mock pyodbc database connection and cursor.

    This fixture provides a mock database connection that simulates
    pyodbc behavior without requiring an actual database connection.

    Returns:
        tuple: A tuple of (mock_connection, mock_cursor).
    """
    mock_cursor = MagicMock()
    mock_cursor.description = [('column1',), ('column2',)]
    mock_cursor.fetchall.return_value = []
    mock_cursor.fetchone.return_value = None
    mock_cursor.rowcount = 1

    mock_conn = MagicMock()
    mock_conn.cursor.return_value = mock_cursor
    mock_conn.commit.return_value = None
    mock_conn.rollback.return_value = None
    mock_conn.close.return_value = None

    with patch('pyodbc.connect', return_value=mock_conn):
        yield mock_conn, mock_cursor


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def capture_logs():
    """
    Capture log messages for assertion in tests.

    Returns:
        list: A list that will contain captured log records.
    """
    import logging
    from utils.logger import APP_LOGGER_NAME

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    original_level = app_logger.level
    app_logger.setLevel(logging.DEBUG)
    app_logger.addHandler(handler)

    yield handler.records

    app_logger.removeHandler(handler)
    app_logger.setLevel(original_level)


# =============================================================================
# HTTP Response Fixtures
# =============================================================================

@pytest.fixture
def mock_http_response():
    """
    Factory fixture for creating mock streaming HTTP responses.

    Returns:
        callable: A factory function for creating mock responses.
    """
    def _create_response(
        status_code: int = 200,
        content: bytes = b'',
        encoding: Optional[str] = 'utf-8',
        content_type: Optional[str] = None,
        chunks: Optional[List[bytes]] = None,
        url: str = 'https://example.com',
    ) -> MagicMock:
        """
        Create a mock response object mimicking requests.Response with stream=True.

        Args:
            status_code: HTTP status code (default 200).
            content: Raw bytes content.
            encoding: Encoding reported by the response.
            content_type: Content-Type header; defaults to text/html with the encoding as charset.
            chunks: Explicit chunks returned by iter_content (defaults to [content]).
            url: The URL of the response.

        Returns:
            MagicMock: A mock response object.
        """
        mock_response = MagicMock()
        mock_response.status_code = status_code
        mock_response.content = content
        mock_response.url = url
        mock_response.encoding = encoding
        if content_type is None:
            content_type = f'text/html; charset={encoding}' if encoding else 'text/html'
        mock_response.headers = {'Content-Type': content_type}
        mock_response.ok = 200 <= status_code < 300
        mock_response.iter_content.return_value = iter(chunks if chunks is not None else [content])
        return mock_response

    return _create_response


# =============================================================================
# Clock Fixtures
# =============================================================================

@pytest.fixture
def fixed_now():
    """The fixed current time used by scheduler tests."""
    return FIXED_NOW


@pytest.fixture
def clock():
    """A controllable clock returning FIXED_NOW until advanced.

    Usage:
        def test_due(clock):
            clock.advance(hours=2)
    """
    class Clock:
        def __init__(self):
            self.now = FIXED_NOW

        def __call__(self):
            return self.now

        def advance(self, **kwargs):
            self.now = self.now + timedelta(**kwargs)

    return Clock()


# =============================================================================
# Dependency Injection Fixtures
# =============================================================================

class MockRecordStore:
    """Mock implementation of the RecordStore protocol for testing.

    Records live in a dict. Setting ``fail_on`` to an operation name
    ('insert', 'list', 'update', 'delete') makes that operation raise
    PersistenceUnavailableError.
    """

    def __init__(self):
        """Initialize the mock storage with empty tracking lists."""
        self.records: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_on: Optional[str] = None
        self._ids = itertools.count(1)
        self._created = itertools.count(0)

    def _maybe_fail(self, operation: str) -> None:
        if self.fail_on == operation:
            raise PersistenceUnavailableError(f"Simulated {operation} failure")

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(('insert', dict(record)))
        self._maybe_fail('insert')
        stored = dict(record)
        stored['id'] = f"rec-{next(self._ids)}"
        stored['created_at'] = FIXED_NOW - timedelta(days=1) + timedelta(seconds=next(self._created))
        self.records[stored['id']] = stored
        return dict(stored)

    def list_records(self, order_by: str, descending: bool = False) -> List[Dict[str, Any]]:
        self.calls.append(('list', order_by, descending))
        self._maybe_fail('list')
        return sorted((dict(r) for r in self.records.values()),
                      key=lambda r: r[order_by], reverse=descending)

    def update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(('update', record_id, dict(fields)))
        self._maybe_fail('update')
        if record_id not in self.records:
            raise NotFoundError(record_id)
        self.records[record_id].update(fields)
        return dict(self.records[record_id])

    def delete(self, record_id: str) -> bool:
        self.calls.append(('delete', record_id))
        self._maybe_fail('delete')
        return self.records.pop(record_id, None) is not None


@pytest.fixture
def mock_record_store():
    """Provide a MockRecordStore implementation for DI testing."""
    return MockRecordStore()


@pytest.fixture
def post_manager(mock_record_store, clock):
    """A PostLifecycleManager over an in-memory store and the fixed clock."""
    from services.post_scheduler import PostLifecycleManager
    return PostLifecycleManager(mock_record_store, clock=clock)


@pytest.fixture
def scrape_archive(mock_record_store):
    """A ScrapeArchive over an in-memory store."""
    from services.scrape_archive import ScrapeArchive
    return ScrapeArchive(mock_record_store)


# =============================================================================
# Data Factories
# =============================================================================

@pytest.fixture
def extraction_record_factory():
    """
    Factory fixture for creating ExtractionRecord test objects.

    Returns:
        callable: A factory function for creating ExtractionRecord objects.
    """
    from data.models import ExtractionRecord

    def _create_record(
        source_url: str = 'https://example.com/article',
        title: str = 'Test Article Title',
        body_text: str = 'A paragraph of body text that is long enough to count as real content.',
        images: Optional[List[str]] = None,
    ) -> ExtractionRecord:
        if images is None:
            images = ['https://example.com/img/one.jpg', 'https://example.com/img/two.jpg']
        return ExtractionRecord(source_url=source_url, title=title,
                                body_text=body_text, images=tuple(images))

    return _create_record


@pytest.fixture
def html_page_factory():
    """
    Factory fixture for building HTML pages from paragraphs and image sources.

    Returns:
        callable: A factory function returning an HTML string.
    """
    def _create_page(
        title: Optional[str] = 'Test Page',
        paragraphs: Optional[List[str]] = None,
        images: Optional[List[str]] = None,
    ) -> str:
        head = f"<title>{title}</title>" if title is not None else ""
        body = "".join(f"<p>{p}</p>" for p in (paragraphs or []))
        body += "".join(f'<img src="{src}">' for src in (images or []))
        return f"<html><head>{head}</head><body>{body}</body></html>"

    return _create_page


@pytest.fixture
def record_store_factory():
    """Factory fixture for creating independent MockRecordStore instances."""
    return MockRecordStore
