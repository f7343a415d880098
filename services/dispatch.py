"""
Dispatch Trigger Module

This module publishes posts whose scheduled time has arrived. It runs one pass
per invocation (the CLI `dispatch` command, typically driven by cron or a
systemd timer); there is no background loop. Outcomes are reported back
through the post lifecycle manager. Failed posts are terminal and are not
retried.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from data.models import Platform
from services.post_scheduler import PostLifecycleManager
from services.protocols import Publisher
from utils.exceptions import InvalidTransitionError, NotFoundError, SocialMediaError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class DispatchReport:
    """Ids of the posts handled in one dispatch pass."""
    published: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.published) + len(self.failed) + len(self.skipped)


class DispatchTrigger:
    """Publishes due posts and feeds the outcome into the lifecycle manager."""

    def __init__(
        self,
        manager: PostLifecycleManager,
        publishers: Dict[Platform, Publisher],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.manager = manager
        self.publishers = dict(publishers)
        self.clock = clock or manager.clock

    def run_once(self) -> DispatchReport:
        """
        Publish every pending post that is due now.

        Returns:
            DispatchReport: Which posts were published, failed or skipped.
        """
        report = DispatchReport()
        due = self.manager.due_posts(self.clock())
        logger.info(f"Dispatching {len(due)} due posts")

        for post in due:
            publisher = self.publishers.get(post.platform)
            if publisher is None:
                logger.warning(f"No publisher configured for {post.platform.value}; leaving {post.id} pending")
                report.skipped.append(post.id)
                continue

            try:
                published = publisher.publish(post)
            except SocialMediaError as e:
                logger.error(f"Publishing {post.id} to {post.platform.value} failed: {e}")
                published = False

            try:
                if published:
                    self.manager.mark_completed(post.id)
                    report.published.append(post.id)
                else:
                    self.manager.mark_failed(post.id)
                    report.failed.append(post.id)
            except (InvalidTransitionError, NotFoundError) as e:
                # Another caller reported or deleted the post first
                logger.warning(f"Could not record outcome for {post.id}: {e}")
                report.skipped.append(post.id)

        logger.info(f"Dispatch finished: {len(report.published)} published, "
                    f"{len(report.failed)} failed, {len(report.skipped)} skipped")
        return report
