"""
Configuration Settings for Scrape Scheduler

This module centralizes all configuration settings for the Scrape Scheduler application,
including environment variables, storage credentials, and application constants.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))

# =============================================================================
# Storage Settings
# =============================================================================

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "file").lower()   # 'file' or 'sqlserver'
SUPPORTED_STORAGE_BACKENDS = ["file", "sqlserver"]

# JSON file store
DATA_DIR = os.getenv("DATA_DIR", os.path.join(APP_ROOT, "storage"))
SCRAPES_FILE = os.path.join(DATA_DIR, "scrapes.json")
SCHEDULED_POSTS_FILE = os.path.join(DATA_DIR, "scheduled_posts.json")

# SQL Server store
DB_SERVER = os.getenv("DB_SERVER", "")
DB_NAME = os.getenv("DB_NAME", "")
DB_USER = os.getenv("DB_USER", "")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")

# Build connection string safely (validation happens in validate_settings())
DB_CONNECTION_STRING = (
    f"DRIVER={{ODBC Driver 18 for SQL Server}}; "
    f"SERVER={DB_SERVER}; "
    f"DATABASE={DB_NAME}; "
    f"UID={DB_USER}; "
    f"PWD={DB_PASSWORD}; "
    f"TrustServerCertificate=yes; MARS_Connection=yes;"
) if all([DB_SERVER, DB_NAME, DB_USER, DB_PASSWORD]) else ""

SCRAPES_TABLE = "scrapes"
SCHEDULED_POSTS_TABLE = "scheduled_posts"

# =============================================================================
# Content Extraction Settings
# =============================================================================

MIN_PARAGRAPH_LENGTH = 50            # Paragraph kept only if stripped length is greater than this
MAX_BODY_LENGTH = 2000               # Hard character cut applied to the joined body text
MAX_IMAGES = 10                      # Maximum number of image URLs kept per page
EXCLUDED_IMAGE_SUBSTRINGS = ["logo", "icon"]   # Case-sensitive substrings that drop an image URL
PARAGRAPH_SEPARATOR = "\n\n"         # Separator between qualifying paragraphs

# =============================================================================
# Page Fetch Settings
# =============================================================================

FETCH_TIMEOUT = int(os.getenv("FETCH_TIMEOUT", "15"))   # Seconds before a page fetch is abandoned
FETCH_CHUNK_SIZE = 8192              # Bytes read between cancellation checks
MAX_PAGE_BYTES = 5 * 1024 * 1024     # Pages larger than this are rejected
FETCH_PROXY = os.getenv("FETCH_PROXY")   # Optional HTTP(S) proxy URL for page fetches

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36'
REQUEST_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Accept-Encoding': 'gzip, deflate',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1'
}

# =============================================================================
# Social Media Platform Settings
# =============================================================================

DEFAULT_PLATFORM = "twitter"
TWITTER_CHARACTER_LIMIT = 280        # Twitter's character limit
DEFAULT_CHARACTER_LIMIT = 2000       # Limit for every other platform
PLATFORM_CHARACTER_LIMITS = {
    "twitter": TWITTER_CHARACTER_LIMIT,
    "facebook": DEFAULT_CHARACTER_LIMIT,
    "instagram": DEFAULT_CHARACTER_LIMIT,
    "linkedin": DEFAULT_CHARACTER_LIMIT,
}

# Twitter API Authentication (used by the dispatch command only)
TWITTER_API_KEY = os.getenv("TWITTER_API_KEY")
TWITTER_API_KEY_SECRET = os.getenv("TWITTER_API_KEY_SECRET")
TWITTER_ACCESS_TOKEN = os.getenv("TWITTER_ACCESS_TOKEN")
TWITTER_ACCESS_TOKEN_SECRET = os.getenv("TWITTER_ACCESS_TOKEN_SECRET")
TWITTER_IMAGE_TIMEOUT = 10           # Seconds timeout for image download

# =============================================================================
# Dashboard & Logging Settings
# =============================================================================

DASHBOARD_UPCOMING_LIMIT = 5         # Pending posts shown on the dashboard
DASHBOARD_RECENT_SCRAPES_LIMIT = 5   # Saved scrapes shown on the dashboard
LOG_FILE = os.getenv("LOG_FILE", "scrape_scheduler.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# =============================================================================
# Configuration Validation
# =============================================================================

from config.validators import ConfigurationError, validate_settings, get_config_summary  # noqa: E402
