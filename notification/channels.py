#!/usr/bin/env python3
"""
Notification Channels

Each channel delivers a serialized EvaluationNotification to one kind of
sink. Channels share a small interface so the service can fan out to any
configured combination of them.

Usage:
    from notification.channels import NotificationChannelFactory

    channel = NotificationChannelFactory.get_channel('redis')
    channel.send(recipient, subject, body, metadata)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any
import logging
import os
import urllib.parse

import requests
from redis import Redis

logger = logging.getLogger(__name__)


def _validate_webhook_url(url: str) -> bool:
    """Accept only absolute http(s) URLs with a hostname."""
    if not url:
        return False
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        logger.error(f"Invalid URL scheme: {parsed.scheme}")
        return False
    if not parsed.hostname:
        logger.error("URL missing hostname")
        return False
    return True


class NotificationChannel(ABC):
    """
    Abstract base class for all notification channels.

    ``recipient`` is channel specific: the delivery group for log and redis,
    the target URL for webhooks.
    """

    @property
    @abstractmethod
    def channel_type(self) -> str:
        """Return the channel type identifier."""
        pass

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        """
        Send a notification through this channel.

        Args:
            recipient: Target recipient (format depends on channel)
            subject: Notification type
            body: JSON-encoded notification
            metadata: Additional channel-specific metadata

        Returns:
            True if sent successfully, False otherwise
        """
        pass

    def validate_config(self) -> bool:
        return True


class LogChannel(NotificationChannel):
    """Writes notifications to the application log."""

    @property
    def channel_type(self) -> str:
        return 'log'

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        logger.info(f"[{recipient}] {subject}: {body}")
        return True


class RedisChannel(NotificationChannel):
    """Publishes notifications on a Redis pub/sub channel named after the group."""

    @property
    def channel_type(self) -> str:
        return 'redis'

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        redis_url = metadata.get('redis_url') or os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
        try:
            conn = Redis.from_url(redis_url)
            receivers = conn.publish(recipient, body)
            logger.debug(f"Published {subject} to {recipient} ({receivers} subscribers)")
            return True
        except Exception as e:
            logger.error(f"Failed to publish {subject} to Redis: {e}")
            return False


class WebhookChannel(NotificationChannel):
    """POSTs the JSON notification to a configured URL."""

    @property
    def channel_type(self) -> str:
        return 'webhook'

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        if not _validate_webhook_url(recipient):
            logger.error(f"Invalid webhook URL: {recipient}")
            return False

        headers = {
            'Content-Type': 'application/json',
            'User-Agent': 'FoodEval-Notification-Service/1.0',
            'X-Notification-Type': subject,
        }
        try:
            response = requests.post(recipient, data=body, headers=headers, timeout=30)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to send webhook: {e}")
            return False

        parsed = urllib.parse.urlparse(recipient)
        logger.info(f"Webhook sent to {parsed.scheme}://{parsed.hostname}{parsed.path}")
        return True


class NotificationChannelFactory:
    """Registry of channel types, instantiated on demand."""

    _channels = {
        'log': LogChannel,
        'redis': RedisChannel,
        'webhook': WebhookChannel,
    }

    @classmethod
    def get_channel(cls, channel_type: str) -> NotificationChannel:
        """
        Get a notification channel instance by type.

        Raises:
            ValueError: If channel type is not registered
        """
        channel_class = cls._channels.get(channel_type.lower())
        if not channel_class:
            raise ValueError(f"Unknown channel type: {channel_type}. "
                             f"Available: {', '.join(cls._channels.keys())}")
        return channel_class()

    @classmethod
    def register_channel(cls, channel_type: str, channel_class: type):
        if not issubclass(channel_class, NotificationChannel):
            raise ValueError("Channel class must extend NotificationChannel")

        cls._channels[channel_type.lower()] = channel_class
        logger.info(f"Registered new channel type: {channel_type}")

    @classmethod
    def list_channels(cls) -> list:
        return list(cls._channels.keys())
