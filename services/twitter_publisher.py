"""
Twitter Publisher Module

This module publishes due scheduled posts to Twitter/X using Tweepy.
Text is posted through the v2 API; the first media URL, if any, is downloaded
and uploaded through the v1.1 media endpoint first.
"""

import io
import os
from typing import Optional
from urllib.parse import urlparse

import requests
import tweepy

from config import settings
from data.models import Platform, ScheduledPost
from utils.exceptions import AuthenticationError, MediaUploadError, PublishingError
from utils.logger import get_logger

logger = get_logger(__name__)


class TwitterPublisher:
    """Publisher for Twitter/X."""

    platform = Platform.TWITTER

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_key_secret: Optional[str] = None,
        access_token: Optional[str] = None,
        access_token_secret: Optional[str] = None,
        client=None,
        api=None,
        image_timeout: Optional[int] = None,
    ):
        """
        Initialize the publisher with OAuth 1.0a user credentials.

        Args:
            api_key: Consumer key; defaults to settings.
            api_key_secret: Consumer secret; defaults to settings.
            access_token: User access token; defaults to settings.
            access_token_secret: User access token secret; defaults to settings.
            client: Injected tweepy.Client (for testing).
            api: Injected tweepy.API used for media upload (for testing).
            image_timeout: Seconds allowed for downloading an attached image.

        Raises:
            AuthenticationError: If no client is injected and credentials are incomplete.
        """
        self.api_key = api_key or settings.TWITTER_API_KEY
        self.api_key_secret = api_key_secret or settings.TWITTER_API_KEY_SECRET
        self.access_token = access_token or settings.TWITTER_ACCESS_TOKEN
        self.access_token_secret = access_token_secret or settings.TWITTER_ACCESS_TOKEN_SECRET
        self.image_timeout = settings.TWITTER_IMAGE_TIMEOUT if image_timeout is None else image_timeout

        self.client = client
        self.api = api
        if self.client is None:
            self._setup_twitter()

    def _setup_twitter(self) -> None:
        """Create the Tweepy client and media API from the configured credentials."""
        if not all([self.api_key, self.api_key_secret, self.access_token, self.access_token_secret]):
            raise AuthenticationError("Twitter OAuth 1.0a credentials are required for posting")

        self.client = tweepy.Client(
            consumer_key=self.api_key,
            consumer_secret=self.api_key_secret,
            access_token=self.access_token,
            access_token_secret=self.access_token_secret,
        )
        auth = tweepy.OAuth1UserHandler(
            self.api_key,
            self.api_key_secret,
            self.access_token,
            self.access_token_secret
        )
        self.api = tweepy.API(auth)
        logger.info("Twitter publisher configured with OAuth 1.0a credentials")

    def _upload_media(self, media_url: str) -> str:
        """
        Download an image and upload it to Twitter.

        Returns:
            str: The media id assigned by Twitter.

        Raises:
            MediaUploadError: If the download or upload fails.
        """
        if self.api is None:
            raise MediaUploadError("Media upload API is not configured")

        try:
            response = requests.get(media_url, timeout=self.image_timeout)
            if response.status_code != 200:
                raise MediaUploadError(f"Image download returned HTTP {response.status_code}")

            filename = os.path.basename(urlparse(media_url).path) or "image.jpg"
            media = self.api.media_upload(filename=filename, file=io.BytesIO(response.content))
            return str(media.media_id)
        except MediaUploadError:
            raise
        except Exception as e:
            raise MediaUploadError(f"Failed to upload media {media_url}: {e}") from e

    def publish(self, post: ScheduledPost) -> bool:
        """
        Post a scheduled post as a tweet.

        Args:
            post: The due post; its content already fits the character limit.

        Returns:
            bool: True if Twitter accepted the tweet, False otherwise.

        Raises:
            PublishingError: If the Twitter API call fails.
        """
        media_ids = []
        if post.media_urls:
            try:
                media_ids.append(self._upload_media(post.media_urls[0]))
            except MediaUploadError as e:
                logger.warning(f"Posting {post.id} without media: {e}")

        try:
            if media_ids:
                response = self.client.create_tweet(text=post.content, media_ids=media_ids)
            else:
                response = self.client.create_tweet(text=post.content)
        except Exception as e:
            logger.error(f"Error posting tweet for {post.id}: {e}")
            raise PublishingError(f"Twitter rejected post {post.id}: {e}") from e

        if response is not None and getattr(response, 'data', None):
            logger.info(f"Successfully posted tweet for scheduled post {post.id}")
            return True

        logger.error(f"Failed to post tweet for {post.id}: No valid response from Twitter API")
        return False
