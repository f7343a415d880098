"""
Configuration Validation for Scrape Scheduler Application

This module contains configuration validation logic.
Extracted from settings.py for better separation of concerns.
"""

from utils.exceptions import ConfigurationError
from utils.logger import get_logger

logger = get_logger(__name__)


def validate_settings(require_publishers: bool = False):
    """
    Validate that all required settings are properly configured.

    Args:
        require_publishers: If True, missing Twitter credentials are an error
            rather than a debug message.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    # Import settings here to avoid circular imports
    from config import settings

    errors = []

    if settings.STORAGE_BACKEND not in settings.SUPPORTED_STORAGE_BACKENDS:
        errors.append(f"STORAGE_BACKEND must be one of {settings.SUPPORTED_STORAGE_BACKENDS}, "
                      f"got '{settings.STORAGE_BACKEND}'")

    if settings.STORAGE_BACKEND == "sqlserver":
        required_vars = [
            ("DB_SERVER", settings.DB_SERVER),
            ("DB_NAME", settings.DB_NAME),
            ("DB_USER", settings.DB_USER),
            ("DB_PASSWORD", settings.DB_PASSWORD)
        ]

        for var_name, var_value in required_vars:
            if not var_value:
                errors.append(f"Missing required environment variable: {var_name}")

        if not settings.DB_CONNECTION_STRING:
            errors.append("Database connection string could not be built. Check DB_SERVER, DB_NAME, DB_USER, DB_PASSWORD.")

    twitter_configured = all([
        settings.TWITTER_API_KEY,
        settings.TWITTER_API_KEY_SECRET,
        settings.TWITTER_ACCESS_TOKEN,
        settings.TWITTER_ACCESS_TOKEN_SECRET
    ])

    if not twitter_configured:
        if require_publishers:
            errors.append("Twitter credentials are not configured. "
                          "Please configure TWITTER_API_KEY, TWITTER_API_KEY_SECRET, "
                          "TWITTER_ACCESS_TOKEN and TWITTER_ACCESS_TOKEN_SECRET.")
        else:
            logger.debug("Twitter credentials not configured; dispatch will skip twitter posts")

    # Validate numeric settings are within reasonable bounds
    numeric_validations = [
        ("MIN_PARAGRAPH_LENGTH", settings.MIN_PARAGRAPH_LENGTH, 0, 1000),
        ("MAX_BODY_LENGTH", settings.MAX_BODY_LENGTH, 1, 100000),
        ("MAX_IMAGES", settings.MAX_IMAGES, 0, 100),
        ("TWITTER_CHARACTER_LIMIT", settings.TWITTER_CHARACTER_LIMIT, 1, 100000),
        ("DEFAULT_CHARACTER_LIMIT", settings.DEFAULT_CHARACTER_LIMIT, 1, 100000),
        ("DASHBOARD_UPCOMING_LIMIT", settings.DASHBOARD_UPCOMING_LIMIT, 0, 100),
    ]

    for name, value, min_val, max_val in numeric_validations:
        if value < min_val or value > max_val:
            errors.append(f"{name} must be between {min_val} and {max_val}, got {value}")

    for platform, limit in settings.PLATFORM_CHARACTER_LIMITS.items():
        if limit <= 0:
            errors.append(f"Character limit for {platform} must be positive, got {limit}")

    # Validate timeout and size values are positive
    positive_settings = [
        ("FETCH_TIMEOUT", settings.FETCH_TIMEOUT),
        ("FETCH_CHUNK_SIZE", settings.FETCH_CHUNK_SIZE),
        ("MAX_PAGE_BYTES", settings.MAX_PAGE_BYTES),
        ("TWITTER_IMAGE_TIMEOUT", settings.TWITTER_IMAGE_TIMEOUT),
    ]

    for name, value in positive_settings:
        if value <= 0:
            errors.append(f"{name} must be positive, got {value}")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    # Import settings here to avoid circular imports
    from config import settings

    return {
        "storage": {
            "backend": settings.STORAGE_BACKEND,
            "data_dir": str(settings.DATA_DIR) if settings.STORAGE_BACKEND == "file" else None,
            "server": settings.DB_SERVER[:20] + "..." if settings.DB_SERVER and len(settings.DB_SERVER) > 20 else settings.DB_SERVER,
            "database": settings.DB_NAME,
        },
        "extraction": {
            "min_paragraph_length": settings.MIN_PARAGRAPH_LENGTH,
            "max_body_length": settings.MAX_BODY_LENGTH,
            "max_images": settings.MAX_IMAGES,
            "excluded_image_substrings": list(settings.EXCLUDED_IMAGE_SUBSTRINGS),
            "fetch_timeout": settings.FETCH_TIMEOUT,
            "proxy_configured": bool(settings.FETCH_PROXY),
        },
        "platforms": {
            "character_limits": dict(settings.PLATFORM_CHARACTER_LIMITS),
            "twitter_publisher": bool(settings.TWITTER_API_KEY and settings.TWITTER_ACCESS_TOKEN),
        },
    }
