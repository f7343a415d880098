"""
Post Scheduler Module

This module owns the queue of scheduled posts and the status state machine
governing each post (pending -> completed | failed). It validates new posts
against the platform character limits, keeps the queue in ascending
scheduled-time order for every read, and serialises all mutations so that
racing status updates resolve to exactly one winner.
"""

import threading
from collections import Counter
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

from data.models import (
    STATUS_FILTER_ALL, Platform, PostStatus, ScheduledPost
)
from data.protocols import RecordStore
from services.curator import ExtractionCurator
from utils.exceptions import NotFoundError, ValidationError
from utils.helpers import cut_to_length, parse_timestamp, text_length, to_iso, utc_now
from utils.logger import get_logger

logger = get_logger(__name__)


class PostLifecycleManager:
    """Manages scheduled posts and their status transitions."""

    def __init__(self, store: RecordStore, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the manager.

        Args:
            store: Record store holding the scheduled posts.
            clock: Returns the current aware UTC time; defaults to ``utc_now``.
        """
        self.store = store
        self.clock = clock or utc_now
        self._posts: Dict[str, ScheduledPost] = {}
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Loading & reads
    # -------------------------------------------------------------------------

    def load(self) -> Tuple[ScheduledPost, ...]:
        """
        Replace the in-memory queue with the posts held by the store.

        Returns:
            Tuple[ScheduledPost, ...]: All posts in ascending scheduled-time order.
        """
        records = self.store.list_records("scheduled_time")
        posts = [ScheduledPost.from_record(r) for r in records]
        with self._lock:
            self._posts = {post.id: post for post in self._sorted(posts)}
            logger.info(f"Loaded {len(self._posts)} scheduled posts")
            return self._sorted(self._posts.values())

    @staticmethod
    def _sorted(posts: Iterable[ScheduledPost]) -> Tuple[ScheduledPost, ...]:
        # sorted() is stable, so equal times keep insertion order
        return tuple(sorted(posts, key=lambda p: p.scheduled_time))

    def list_posts(self, status_filter: Union[str, PostStatus] = STATUS_FILTER_ALL) -> Tuple[ScheduledPost, ...]:
        """
        List posts matching a status filter in ascending scheduled-time order.

        Args:
            status_filter: 'all', 'pending', 'completed' or 'failed'.

        Returns:
            Tuple[ScheduledPost, ...]: A snapshot of the matching posts.

        Raises:
            ValidationError: If the filter is not recognised.
        """
        if isinstance(status_filter, str) and status_filter.strip().lower() == STATUS_FILTER_ALL:
            wanted = None
        else:
            wanted = PostStatus.parse(status_filter)

        with self._lock:
            snapshot = list(self._posts.values())

        return self._sorted(p for p in snapshot if wanted is None or p.status == wanted)

    def get(self, post_id: str) -> ScheduledPost:
        """
        Get one post by id.

        Raises:
            NotFoundError: If no post has this id.
        """
        with self._lock:
            post = self._posts.get(post_id)
        if post is None:
            raise NotFoundError(f"Scheduled post {post_id} not found")
        return post

    def due_posts(self, now: Optional[datetime] = None) -> Tuple[ScheduledPost, ...]:
        """Pending posts whose scheduled time is at or before ``now``."""
        cutoff = parse_timestamp(now) if now is not None else self.clock()
        return tuple(p for p in self.list_posts(PostStatus.PENDING) if p.scheduled_time <= cutoff)

    def count_by_status(self) -> Dict[PostStatus, int]:
        """Number of posts in each status."""
        with self._lock:
            counts = Counter(p.status for p in self._posts.values())
        return {status: counts.get(status, 0) for status in PostStatus}

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def schedule(
        self,
        content: str,
        platform: Union[str, Platform],
        scheduled_time: Union[str, datetime],
        media_urls: Optional[Iterable[str]] = None,
    ) -> ScheduledPost:
        """
        Schedule a new post in the pending state.

        Args:
            content: Text of the post; must fit the platform's character limit.
            platform: Target platform name.
            scheduled_time: Absolute time (datetime or ISO-8601 string); naive values are UTC.
            media_urls: Optional media URLs attached to the post.

        Returns:
            ScheduledPost: The stored post.

        Raises:
            ValidationError: If the content, platform or time is invalid. Content is never truncated.
            PersistenceUnavailableError: If the store fails; the queue is left unchanged.
        """
        if content is None or not str(content).strip():
            raise ValidationError("Please enter post content")

        target = Platform.parse(platform)
        limit = target.character_limit
        length = text_length(content)
        if length > limit:
            raise ValidationError(
                f"Content is {length} characters; {target.value} allows at most {limit}")

        if scheduled_time is None or (isinstance(scheduled_time, str) and not scheduled_time.strip()):
            raise ValidationError("Please select a scheduled time")
        try:
            when = parse_timestamp(scheduled_time)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid scheduled time {scheduled_time!r}: {e}") from e

        now = self.clock()
        if when < now:
            raise ValidationError(f"Scheduled time {when.isoformat()} is in the past")

        media = [str(u) for u in (media_urls or []) if u]

        with self._lock:
            stored = self.store.insert({
                "content": content,
                "platform": target.value,
                "scheduled_time": to_iso(when),
                "media_urls": media,
                "status": PostStatus.PENDING.value,
            })
            post = ScheduledPost.from_record(stored)
            self._posts[post.id] = post

        logger.info(f"Scheduled {target.value} post {post.id} for {when.isoformat()}")
        return post

    def schedule_staged(
        self,
        curator: ExtractionCurator,
        platform: Union[str, Platform],
        scheduled_time: Union[str, datetime],
        content: Optional[str] = None,
    ) -> ScheduledPost:
        """
        Schedule a post from the curator's staged content.

        The content defaults to the staged body cut to the platform's limit and
        the media to the first staged image.

        Raises:
            ValidationError: If nothing is staged or the resulting post is invalid.
        """
        staged = curator.snapshot()
        target = Platform.parse(platform)

        if content is None:
            if not staged.body_text:
                raise ValidationError("No content to schedule")
            content = cut_to_length(staged.body_text, target.character_limit)

        media_urls = list(staged.images[:1])
        return self.schedule(content, target, scheduled_time, media_urls)

    def update_status(self, post_id: str, status: Union[str, PostStatus]) -> ScheduledPost:
        """
        Move a pending post to a terminal status.

        Args:
            post_id: Id of the post.
            status: 'completed' or 'failed'.

        Returns:
            ScheduledPost: The updated post.

        Raises:
            ValidationError: If the status name is not recognised.
            NotFoundError: If no post has this id.
            InvalidTransitionError: If the post is already completed or failed.
            PersistenceUnavailableError: If the store fails; the post keeps its old status.
        """
        target = PostStatus.parse(status)

        with self._lock:
            post = self._posts.get(post_id)
            if post is None:
                raise NotFoundError(f"Scheduled post {post_id} not found")

            updated = post.with_status(target)
            self.store.update(post_id, {"status": updated.status.value})
            self._posts[post_id] = updated

        logger.info(f"Post {post_id} marked {target.value}")
        return updated

    def mark_completed(self, post_id: str) -> ScheduledPost:
        return self.update_status(post_id, PostStatus.COMPLETED)

    def mark_failed(self, post_id: str) -> ScheduledPost:
        return self.update_status(post_id, PostStatus.FAILED)

    def delete(self, post_id: str) -> None:
        """
        Delete a post regardless of its status.

        Raises:
            NotFoundError: If no post has this id.
            PersistenceUnavailableError: If the store fails; the post stays queued.
        """
        with self._lock:
            if post_id not in self._posts:
                raise NotFoundError(f"Scheduled post {post_id} not found")

            deleted = self.store.delete(post_id)
            self._posts.pop(post_id, None)

        if not deleted:
            logger.warning(f"Post {post_id} was already missing from the store")
            raise NotFoundError(f"Scheduled post {post_id} not found")

        logger.info(f"Deleted scheduled post {post_id}")
