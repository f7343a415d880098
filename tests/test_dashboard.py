"""
Tests for Dashboard Statistics
"""

import pytest
from datetime import timedelta
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.dashboard import DashboardStats, get_dashboard_stats


class TestDashboardStats:
    """Tests for get_dashboard_stats."""

    def test_empty(self, scrape_archive, post_manager):
        stats = get_dashboard_stats(scrape_archive, post_manager)
        assert stats == DashboardStats(total_scrapes=0, total_scheduled=0, pending_posts=0,
                                       completed_posts=0, failed_posts=0)

    def test_counts_and_upcoming(self, scrape_archive, post_manager, fixed_now, extraction_record_factory):
        """Test totals per status and that upcoming lists the earliest pending posts."""
        for i in range(3):
            scrape_archive.save(extraction_record_factory(title=f"scrape {i}"))

        posts = [post_manager.schedule(f"post {h}", "twitter", fixed_now + timedelta(hours=h))
                 for h in range(8, 0, -1)]
        post_manager.mark_completed(posts[-1].id)
        post_manager.mark_failed(posts[-2].id)

        stats = get_dashboard_stats(scrape_archive, post_manager, upcoming_limit=5, recent_limit=2)

        assert stats.total_scrapes == 3
        assert stats.total_scheduled == 8
        assert stats.pending_posts == 6
        assert stats.completed_posts == 1
        assert stats.failed_posts == 1
        assert [p.content for p in stats.upcoming] == ["post 3", "post 4", "post 5", "post 6", "post 7"]
        assert [s.title for s in stats.recent_scrapes] == ["scrape 2", "scrape 1"]

    def test_default_limits_from_settings(self, scrape_archive, post_manager, fixed_now):
        for h in range(1, 8):
            post_manager.schedule("p", "twitter", fixed_now + timedelta(hours=h))
        stats = get_dashboard_stats(scrape_archive, post_manager)
        assert len(stats.upcoming) == 5
