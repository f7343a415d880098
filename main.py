"""
Scrape Scheduler Application

This is the main entry point for the Scrape Scheduler application.
It scrapes web pages into editable content records, saves them for later,
schedules posts for social platforms, and dispatches posts that are due.
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from config import settings
from data.database import DatabaseConnection, SqlRecordStore
from data.file_store import JsonFileStore
from data.models import Platform, STATUS_FILTER_ALL, PostStatus
from data.protocols import RecordStore
from services.curator import ExtractionCurator
from services.dashboard import get_dashboard_stats
from services.dispatch import DispatchReport, DispatchTrigger
from services.post_scheduler import PostLifecycleManager
from services.protocols import Publisher
from services.scrape_archive import ScrapeArchive
from services.scraper_service import ScraperService
from services.twitter_publisher import TwitterPublisher
from utils.exceptions import (
    ScrapeSchedulerError, ConfigurationError, ValidationError, NotFoundError,
    InvalidTransitionError, ExtractionUnavailableError, PersistenceUnavailableError
)
from utils.helpers import truncate_text
from utils.logger import get_logger, setup_file_logging

# Set up logging
logger = get_logger(__name__)


def create_stores(backend: Optional[str] = None) -> Dict[str, RecordStore]:
    """
    Build the record stores for the configured storage backend.

    Returns:
        Dict[str, RecordStore]: Stores keyed by 'scrapes' and 'posts'.

    Raises:
        ConfigurationError: If the backend is not supported.
    """
    backend = (backend or settings.STORAGE_BACKEND).lower()

    if backend == "file":
        return {
            "scrapes": JsonFileStore(settings.SCRAPES_FILE),
            "posts": JsonFileStore(settings.SCHEDULED_POSTS_FILE),
        }

    if backend == "sqlserver":
        db = DatabaseConnection()
        scrapes = SqlRecordStore(db, settings.SCRAPES_TABLE)
        posts = SqlRecordStore(db, settings.SCHEDULED_POSTS_TABLE)
        scrapes.ensure_table()
        posts.ensure_table()
        return {"scrapes": scrapes, "posts": posts}

    raise ConfigurationError(f"Unsupported storage backend: {backend}")


class ScrapeSchedulerApp:
    """
    Main application class for the Scrape Scheduler.

    This class wires the scraper, curator, archive, post scheduler and
    dispatch trigger together.
    """

    def __init__(
        self,
        scrape_store: Optional[RecordStore] = None,
        post_store: Optional[RecordStore] = None,
        scraper: Optional[ScraperService] = None,
        publishers: Optional[Dict[Platform, Publisher]] = None,
        validate: bool = True,
    ):
        """
        Initialize the application.

        Args:
            scrape_store: Store for saved scrapes; built from settings if omitted.
            post_store: Store for scheduled posts; built from settings if omitted.
            scraper: Injected scraper service (for testing).
            publishers: Publishers per platform; built lazily for dispatch if omitted.
            validate: Whether to validate settings on startup.
        """
        if validate:
            settings.validate_settings()

        if scrape_store is None or post_store is None:
            stores = create_stores()
            scrape_store = scrape_store or stores["scrapes"]
            post_store = post_store or stores["posts"]

        self.curator = scraper.curator if scraper else ExtractionCurator()
        self.scraper = scraper or ScraperService(curator=self.curator)
        self.archive = ScrapeArchive(scrape_store)
        self.manager = PostLifecycleManager(post_store)
        self.manager.load()
        self._publishers = publishers

    @property
    def publishers(self) -> Dict[Platform, Publisher]:
        """Publishers per platform. Only Twitter has one, and only when credentials are set."""
        if self._publishers is None:
            self._publishers = {}
            try:
                self._publishers[Platform.TWITTER] = TwitterPublisher()
            except ScrapeSchedulerError as e:
                logger.warning(f"Twitter publisher unavailable: {e}")
        return self._publishers

    def scrape(self, url: str, title: Optional[str] = None, save: bool = False,
               platform: Optional[str] = None, scheduled_time: Optional[str] = None,
               content: Optional[str] = None):
        """
        Scrape a page, optionally override its title, then save and/or schedule it.

        Returns:
            dict: The extraction record and whatever was saved or scheduled.
        """
        record = self.scraper.scrape(url)
        if title is not None:
            self.curator.edit_title(title)

        result = {"record": self.curator.snapshot(), "scrape": None, "post": None}

        if scheduled_time:
            result["post"] = self.manager.schedule_staged(
                self.curator, platform or settings.DEFAULT_PLATFORM, scheduled_time, content=content)

        if save:
            result["scrape"] = self.archive.save_staged(self.curator)

        logger.info(f"Scrape of {record.source_url} finished")
        return result

    def dispatch(self) -> DispatchReport:
        """Run one dispatch pass over the due posts."""
        trigger = DispatchTrigger(self.manager, self.publishers)
        return trigger.run_once()


# =============================================================================
# Output helpers
# =============================================================================

def _print_record(record) -> None:
    print(f"URL:    {record.source_url}")
    print(f"Title:  {record.title}")
    print(f"Images: {len(record.images)}")
    for image in record.images:
        print(f"  - {image}")
    print("")
    print(record.body_text)


def _print_post(post) -> None:
    media = f" [{len(post.media_urls)} media]" if post.media_urls else ""
    print(f"{post.id}  {post.scheduled_time.isoformat()}  {post.platform.value:<9}  "
          f"{post.status.value:<9}  {truncate_text(post.content.replace(chr(10), ' '), 60)}{media}")


def _print_scrape(scrape) -> None:
    print(f"{scrape.id}  {scrape.created_at.isoformat()}  {truncate_text(scrape.title or '(untitled)', 50)}"
          f"  {scrape.source_url}")


# =============================================================================
# Command line
# =============================================================================

def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Scrape Scheduler Application')
    parser.add_argument('--log-file', type=str, default=settings.LOG_FILE, help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default=settings.LOG_LEVEL if settings.LOG_LEVEL in ('DEBUG', 'INFO', 'WARNING', 'ERROR') else 'INFO',
                        help='Logging level')

    subparsers = parser.add_subparsers(dest='command', required=True)
    platforms = [p.value for p in Platform]

    scrape = subparsers.add_parser('scrape', help='Extract content from a web page')
    scrape.add_argument('url', help='Page URL')
    scrape.add_argument('--title', type=str, default=None, help='Replace the extracted title')
    scrape.add_argument('--save', action='store_true', help='Save the extracted content')
    scrape.add_argument('--schedule', action='store_true', help='Schedule a post from the extracted content')
    scrape.add_argument('--platform', choices=platforms, default=settings.DEFAULT_PLATFORM)
    scrape.add_argument('--at', dest='scheduled_time', type=str, default=None,
                        help='Scheduled time (ISO-8601, naive values are UTC)')
    scrape.add_argument('--content', type=str, default=None,
                        help='Post text; defaults to the body cut to the platform limit')

    subparsers.add_parser('scrapes', help='List saved scrapes, newest first')

    delete_scrape = subparsers.add_parser('delete-scrape', help='Delete a saved scrape')
    delete_scrape.add_argument('scrape_id')

    schedule = subparsers.add_parser('schedule', help='Schedule a post')
    schedule.add_argument('--platform', choices=platforms, default=settings.DEFAULT_PLATFORM)
    schedule.add_argument('--at', dest='scheduled_time', type=str, required=True,
                          help='Scheduled time (ISO-8601, naive values are UTC)')
    schedule.add_argument('--content', type=str, required=True, help='Post text')
    schedule.add_argument('--media', type=str, nargs='*', default=[], help='Media URLs')

    posts = subparsers.add_parser('posts', help='List scheduled posts in time order')
    posts.add_argument('--status', choices=[STATUS_FILTER_ALL] + [s.value for s in PostStatus],
                       default=STATUS_FILTER_ALL)

    mark = subparsers.add_parser('mark', help='Mark a pending post completed or failed')
    mark.add_argument('post_id')
    mark.add_argument('status', choices=[PostStatus.COMPLETED.value, PostStatus.FAILED.value])

    delete = subparsers.add_parser('delete', help='Delete a scheduled post')
    delete.add_argument('post_id')

    subparsers.add_parser('dispatch', help='Publish posts whose scheduled time has arrived')
    subparsers.add_parser('stats', help='Show dashboard statistics')

    args = parser.parse_args(argv)
    if args.command == 'scrape' and args.schedule and not args.scheduled_time:
        parser.error("--schedule requires --at")
    return args


def run_command(app: ScrapeSchedulerApp, args) -> int:
    """Execute one parsed command against the application. Returns an exit code."""
    if args.command == 'scrape':
        result = app.scrape(
            args.url,
            title=args.title,
            save=args.save,
            platform=args.platform,
            scheduled_time=args.scheduled_time if args.schedule else None,
            content=args.content,
        )
        _print_record(result["record"])
        if result["post"]:
            print("\nScheduled:")
            _print_post(result["post"])
        if result["scrape"]:
            print(f"\nSaved as {result['scrape'].id}")

    elif args.command == 'scrapes':
        for scrape in app.archive.list_scrapes():
            _print_scrape(scrape)

    elif args.command == 'delete-scrape':
        app.archive.delete(args.scrape_id)
        print(f"Deleted scrape {args.scrape_id}")

    elif args.command == 'schedule':
        post = app.manager.schedule(args.content, args.platform, args.scheduled_time, args.media)
        _print_post(post)

    elif args.command == 'posts':
        for post in app.manager.list_posts(args.status):
            _print_post(post)

    elif args.command == 'mark':
        post = app.manager.update_status(args.post_id, args.status)
        _print_post(post)

    elif args.command == 'delete':
        app.manager.delete(args.post_id)
        print(f"Deleted post {args.post_id}")

    elif args.command == 'dispatch':
        report = app.dispatch()
        print(f"Published: {len(report.published)}  Failed: {len(report.failed)}  "
              f"Skipped: {len(report.skipped)}")

    elif args.command == 'stats':
        stats = get_dashboard_stats(app.archive, app.manager)
        print(f"Saved scrapes:   {stats.total_scrapes}")
        print(f"Scheduled posts: {stats.total_scheduled}")
        print(f"  pending:       {stats.pending_posts}")
        print(f"  completed:     {stats.completed_posts}")
        print(f"  failed:        {stats.failed_posts}")
        if stats.upcoming:
            print("\nUpcoming:")
            for post in stats.upcoming:
                _print_post(post)
        if stats.recent_scrapes:
            print("\nRecent scrapes:")
            for scrape in stats.recent_scrapes:
                _print_scrape(scrape)

    return 0


def main(argv: Optional[List[str]] = None, app: Optional[ScrapeSchedulerApp] = None) -> int:
    """Main entry point for the application."""
    # Parse command line arguments
    args = parse_arguments(argv)

    # Set up logging
    log_level = getattr(logging, args.log_level)
    setup_file_logging(args.log_file, log_level)

    logger.info(f"Starting Scrape Scheduler command: {args.command}")

    try:
        app = app or ScrapeSchedulerApp()
        exit_code = run_command(app, args)

    except (ValidationError, NotFoundError, InvalidTransitionError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        exit_code = 1
    except ExtractionUnavailableError as e:
        logger.error(f"Could not scrape page: {e}")
        exit_code = 1
    except PersistenceUnavailableError as e:
        logger.error(f"Storage unavailable: {e}", exc_info=True)
        exit_code = 1
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        exit_code = 1
    except ScrapeSchedulerError as e:
        logger.error(f"Scrape scheduler error: {e}", exc_info=True)
        exit_code = 1
    except Exception as e:
        logger.error(f"Unhandled exception in Scrape Scheduler: {e}", exc_info=True)
        exit_code = 2

    logger.info(f"Scrape Scheduler finished with exit code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
