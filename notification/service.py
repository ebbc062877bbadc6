#!/usr/bin/env python3
"""
Notification Service

Fans committed evaluation events out to the configured channels, either
inline or through a Redis Queue consumed by ``notification.worker``.

Usage:
    from notification.service import NotificationService

    service = NotificationService(config.notifications)
    service.publish(uow.events)

Delivery is best effort: the originating transaction has already
committed, so failures are logged and never raised to the caller.
"""

import json
import logging
import os
from typing import Optional, Dict, Any, Iterable

from redis import Redis
from rq import Queue, Retry

from core.config_loader import NotificationConfig
from notification.channels import NotificationChannelFactory
from notification.events import EvaluationNotification

logger = logging.getLogger(__name__)


class NotificationService:
    """Publishes EvaluationNotification events to every configured channel."""

    def __init__(self, config: Optional[NotificationConfig] = None):
        """
        Initialize notification service.

        Args:
            config: Notification settings; defaults to a disabled log-only setup
        """
        self.config = config or NotificationConfig()
        self.redis_url = self.config.redis_url or os.environ.get('REDIS_URL', 'redis://localhost:6379/0')

        if not self.config.use_async_queue:
            logger.info("Async queue disabled via config. Using sync mode.")
            self.redis_conn = None
            self.queue = None
            self.async_mode = False
        else:
            try:
                self.redis_conn = Redis.from_url(self.redis_url)
                self.redis_conn.ping()
                self.queue = Queue(self.config.queue_name, connection=self.redis_conn)
                self.async_mode = True
                logger.info("Notification service connected to Redis")
            except Exception as e:
                logger.error(f"Redis connection failed: {e}. Falling back to sync mode.")
                self.redis_conn = None
                self.queue = None
                self.async_mode = False

    def publish(self, events: Iterable[EvaluationNotification]) -> int:
        """
        Deliver events to all configured channels.

        Returns:
            Number of (event, channel) deliveries that were sent or queued
        """
        if not self.config.enabled:
            return 0

        delivered = 0
        for notification in events:
            for channel_type in self.config.channels:
                try:
                    data = self._build_task_data(notification, channel_type)
                    if data is None:
                        continue
                    if self._dispatch(data):
                        delivered += 1
                except Exception as e:
                    logger.error(f"Failed to deliver {notification.type} via {channel_type}: {e}")
        return delivered

    def _dispatch(self, data: Dict[str, Any]) -> bool:
        if self.async_mode:
            job = self.queue.enqueue(
                deliver_notification_task,
                data,
                job_timeout='5m',
                result_ttl=86400,
                retry=Retry(max=3, interval=[30, 60, 120])
            )
            logger.debug(f"Queued {data['subject']} as job {job.id}")
            return True
        return deliver_notification_task(data)

    def _build_task_data(self, notification: EvaluationNotification, channel_type: str) -> Optional[Dict[str, Any]]:
        recipient = self._get_recipient_for_channel(notification, channel_type)
        if recipient is None:
            return None
        return {
            'channel_type': channel_type,
            'recipient': recipient,
            'subject': notification.type,
            'body': json.dumps(notification.to_dict()),
            'metadata': {'group': notification.group, 'redis_url': self.redis_url},
        }

    def _get_recipient_for_channel(self, notification: EvaluationNotification, channel: str) -> Optional[str]:
        if channel in ('log', 'redis'):
            return notification.group
        if channel == 'webhook':
            if not self.config.webhook_url:
                logger.warning("Webhook channel enabled without notifications.webhook_url; skipping")
                return None
            return self.config.webhook_url
        raise ValueError(f"Unsupported channel type: {channel}")

    def get_queue_status(self) -> Dict[str, Any]:
        if not self.async_mode:
            return {'status': 'sync_mode', 'queue_length': 0}

        try:
            return {
                'status': 'active',
                'queue_length': len(self.queue),
                'redis_connected': self.redis_conn.ping()
            }
        except Exception as e:
            return {'status': 'error', 'error': str(e)}


# Worker task - must be at module level for RQ
def deliver_notification_task(notification_data: Dict[str, Any]) -> bool:
    """Send one serialized notification through its channel (called inline or by the RQ worker)."""
    channel = NotificationChannelFactory.get_channel(notification_data['channel_type'])
    success = channel.send(
        notification_data['recipient'],
        notification_data['subject'],
        notification_data['body'],
        notification_data.get('metadata', {}),
    )
    if not success:
        logger.error(f"Notification {notification_data['subject']} failed via {channel.channel_type}")
    return success
