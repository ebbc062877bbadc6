"""
Notification Module

Delivers evaluation events (status changes, new sessions, submitted
evaluations, calculated scores, generated protocols) to log, Redis pub/sub
or webhook channels, inline or via an RQ queue.

Usage:
    from notification import NotificationService

    service = NotificationService(config.notifications)
    service.publish(events)
"""

from notification.channels import (
    NotificationChannel,
    LogChannel,
    RedisChannel,
    WebhookChannel,
    NotificationChannelFactory,
)

from notification.events import (
    EvaluationNotification,
    EVENT_TYPES,
    group_for_event,
)

from notification.service import (
    NotificationService,
    deliver_notification_task,
)

__all__ = [
    # Channels
    'NotificationChannel',
    'LogChannel',
    'RedisChannel',
    'WebhookChannel',
    'NotificationChannelFactory',
    # Events
    'EvaluationNotification',
    'EVENT_TYPES',
    'group_for_event',
    # Service
    'NotificationService',
    'deliver_notification_task',
]
