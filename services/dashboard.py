"""
Dashboard Statistics Module

Summarises the archive and the post queue: totals per status, the next
pending posts, and the most recent saved scrapes.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from config import settings
from data.models import PostStatus, SavedScrape, ScheduledPost
from services.post_scheduler import PostLifecycleManager
from services.scrape_archive import ScrapeArchive


@dataclass
class DashboardStats:
    total_scrapes: int
    total_scheduled: int
    pending_posts: int
    completed_posts: int
    failed_posts: int
    upcoming: List[ScheduledPost] = field(default_factory=list)
    recent_scrapes: List[SavedScrape] = field(default_factory=list)


def get_dashboard_stats(
    archive: ScrapeArchive,
    manager: PostLifecycleManager,
    upcoming_limit: Optional[int] = None,
    recent_limit: Optional[int] = None,
) -> DashboardStats:
    """
    Collect dashboard statistics.

    Args:
        archive: The scrape archive.
        manager: The post lifecycle manager (already loaded).
        upcoming_limit: Number of pending posts to include; defaults to settings.
        recent_limit: Number of saved scrapes to include; defaults to settings.

    Returns:
        DashboardStats: Counts plus the upcoming posts and recent scrapes.
    """
    upcoming_limit = settings.DASHBOARD_UPCOMING_LIMIT if upcoming_limit is None else upcoming_limit
    recent_limit = settings.DASHBOARD_RECENT_SCRAPES_LIMIT if recent_limit is None else recent_limit

    scrapes = archive.list_scrapes()
    counts = manager.count_by_status()
    pending = manager.list_posts(PostStatus.PENDING)

    return DashboardStats(
        total_scrapes=len(scrapes),
        total_scheduled=sum(counts.values()),
        pending_posts=counts[PostStatus.PENDING],
        completed_posts=counts[PostStatus.COMPLETED],
        failed_posts=counts[PostStatus.FAILED],
        upcoming=list(pending[:upcoming_limit]),
        recent_scrapes=scrapes[:recent_limit],
    )
