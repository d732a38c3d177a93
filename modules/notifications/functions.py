"""
Notifications Module Functions
Optional SNS topic, email subscription and RDS event subscription for the cluster
"""

import json
import pulumi
import pulumi_aws as aws
from typing import Dict, List, Any


def notifications_enabled(email: str) -> bool:
    return bool((email or "").strip())


def create_sns_topic(name: str, tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create SNS topic receiving cluster events

    Args:
        name: Resource name prefix
        tags: Additional tags

    Returns:
        Dict with topic resource and outputs
    """
    tags = tags or {}

    topic = aws.sns.Topic(
        f"{name}-db-events",
        name=f"{name}-db-events",
        tags={
            **tags,
            "Name": f"{name}-db-events",
            "Module": "notifications"
        }
    )

    return {
        "topic": topic,
        "topic_arn": topic.arn
    }


def create_topic_policy(name: str, topic: aws.sns.Topic, account_id: str) -> Dict[str, Any]:
    """
    Allow RDS to publish to the topic on behalf of this account

    Args:
        name: Resource name prefix
        topic: Topic receiving events
        account_id: Account that owns the event source

    Returns:
        Dict with topic policy resource
    """
    policy = aws.sns.TopicPolicy(
        f"{name}-db-events-policy",
        arn=topic.arn,
        policy=topic.arn.apply(lambda arn: json.dumps({
            "Version": "2012-10-17",
            "Statement": [{
                "Sid": "AllowRdsEvents",
                "Effect": "Allow",
                "Principal": {"Service": "events.rds.amazonaws.com"},
                "Action": "sns:Publish",
                "Resource": arn,
                "Condition": {"StringEquals": {"aws:SourceAccount": account_id}},
            }],
        }))
    )

    return {
        "topic_policy": policy
    }


def create_email_subscription(name: str, topic_arn: pulumi.Output[str], email: str) -> Dict[str, Any]:
    """
    Subscribe an email address to the topic

    The subscription stays pending until the recipient confirms it.
    """
    subscription = aws.sns.TopicSubscription(
        f"{name}-db-events-email",
        topic=topic_arn,
        protocol="email",
        endpoint=email.strip()
    )

    return {
        "subscription": subscription,
        "subscription_arn": subscription.arn
    }


def create_event_subscription(name: str, topic_arn: pulumi.Output[str], cluster_id: pulumi.Output[str],
                              event_categories: List[str], tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Route cluster events to the topic

    Args:
        name: Resource name prefix
        topic_arn: Topic receiving events
        cluster_id: Cluster emitting events
        event_categories: RDS event categories to forward
        tags: Additional tags

    Returns:
        Dict with event subscription resource and outputs
    """
    tags = tags or {}

    event_subscription = aws.rds.EventSubscription(
        f"{name}-db-event-subscription",
        name=f"{name}-db-events",
        sns_topic=topic_arn,
        source_type="db-cluster",
        source_ids=[cluster_id],
        event_categories=list(event_categories),
        enabled=True,
        tags={
            **tags,
            "Name": f"{name}-db-events",
            "Module": "notifications"
        }
    )

    return {
        "event_subscription": event_subscription,
        "event_subscription_id": event_subscription.id
    }


def create_notification_resources(name: str, email: str, cluster_id: pulumi.Output[str],
                                  event_categories: List[str], tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create the notification branch when an email address is configured

    Args:
        name: Resource name prefix
        email: Notification email, blank disables notifications
        cluster_id: Cluster emitting events
        event_categories: RDS event categories to forward
        tags: Additional tags

    Returns:
        Dict with notification outputs; only {"enabled": False, "topic_arn": None} when disabled
    """
    if not notifications_enabled(email):
        pulumi.log.info(f"{name}: no notification_email set, skipping event notifications")
        return {
            "enabled": False,
            "topic_arn": None
        }

    tags = tags or {}

    caller = aws.get_caller_identity()

    topic_result = create_sns_topic(name, tags)
    policy_result = create_topic_policy(name, topic_result["topic"], caller.account_id)
    subscription_result = create_email_subscription(name, topic_result["topic_arn"], email)
    event_result = create_event_subscription(name, topic_result["topic_arn"], cluster_id, event_categories, tags)

    return {
        "enabled": True,
        "topic_arn": topic_result["topic_arn"],
        "subscription_arn": subscription_result["subscription_arn"],
        "event_subscription_id": event_result["event_subscription_id"],
        # Keep references to all resources for dependencies
        "_topic": topic_result["topic"],
        "_topic_policy": policy_result["topic_policy"],
        "_subscription": subscription_result["subscription"],
        "_event_subscription": event_result["event_subscription"]
    }
