"""
Service Protocol Definitions

This module defines typing.Protocol interfaces for the collaborators the
scrape scheduler talks to. These protocols enable loose coupling, dependency
injection, and easier testing.

Protocols defined:
- PageSource: Interface for acquiring raw page HTML
- Publisher: Interface for publishing a scheduled post to a social platform
"""

import threading
from typing import Optional, Protocol

from data.models import ScheduledPost


class PageSource(Protocol):
    """Protocol defining the interface for HTML acquisition.

    Implementations return the full page HTML or raise
    ExtractionUnavailableError; they never return a partial page.
    """

    def fetch(self, url: str, cancel_event: Optional[threading.Event] = None) -> str:
        """Fetch the HTML of a page.

        Args:
            url: Absolute URL of the page.
            cancel_event: When set, the fetch is abandoned with FetchCancelledError.

        Returns:
            The page HTML.
        """
        ...


class Publisher(Protocol):
    """Protocol defining the interface for social platform publishers.

    A publisher is invoked by the dispatch trigger once a post's scheduled
    time has arrived. It reports the outcome; the dispatch trigger feeds it
    back into the post lifecycle manager.
    """

    def publish(self, post: ScheduledPost) -> bool:
        """Publish a post to the platform.

        Args:
            post: The due post.

        Returns:
            True if the platform accepted the post, False otherwise.
        """
        ...
