"""
Notifications Module
Optional SNS topic, subscription and RDS event subscription
"""

from .functions import (
    notifications_enabled,
    create_sns_topic,
    create_topic_policy,
    create_email_subscription,
    create_event_subscription,
    create_notification_resources
)

__all__ = [
    "notifications_enabled",
    "create_sns_topic",
    "create_topic_policy",
    "create_email_subscription",
    "create_event_subscription",
    "create_notification_resources"
]
