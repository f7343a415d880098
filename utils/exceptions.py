"""
Custom Exception Classes for the Scrape Scheduler Application

This module defines custom exceptions for better error handling and
categorization of failures across the application.
"""


class ScrapeSchedulerError(Exception):
    """Base exception for all Scrape Scheduler application errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(ScrapeSchedulerError):
    """Raised when configuration validation fails or required settings are missing."""
    pass


# =============================================================================
# Caller Errors
# =============================================================================

class ValidationError(ScrapeSchedulerError):
    """Raised when caller input is malformed (empty content, past time, over-limit text)."""
    pass


class NotFoundError(ScrapeSchedulerError):
    """Raised when an operation references an unknown id."""
    pass


class InvalidTransitionError(ScrapeSchedulerError):
    """Raised when a status change is not allowed from the post's current status."""
    pass


# =============================================================================
# Extraction Errors
# =============================================================================

class ExtractionUnavailableError(ScrapeSchedulerError):
    """Raised when page HTML cannot be acquired (timeout, blocked, non-200 status)."""
    pass


class FetchCancelledError(ExtractionUnavailableError):
    """Raised when the caller cancels an in-flight page fetch."""
    pass


# =============================================================================
# Persistence Errors
# =============================================================================

class PersistenceUnavailableError(ScrapeSchedulerError):
    """Raised when the storage backend cannot be reached or fails an operation."""
    pass


# =============================================================================
# Social Media Errors
# =============================================================================

class SocialMediaError(ScrapeSchedulerError):
    """Base exception for social media platform errors."""
    pass


class AuthenticationError(SocialMediaError):
    """Raised when authentication with a social media platform fails."""
    pass


class PublishingError(SocialMediaError):
    """Raised when publishing to a social media platform fails."""
    pass


class MediaUploadError(SocialMediaError):
    """Raised when media upload fails."""
    pass
