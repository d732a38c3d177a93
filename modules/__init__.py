"""
Pulumi modules for the Aurora cluster stack
Simple function-based approach, one package per concern
"""

from .network import create_network_resources
from .monitoring import create_monitoring_role
from .database import create_database_resources
from .notifications import create_notification_resources

__all__ = [
    "create_network_resources",
    "create_monitoring_role",
    "create_database_resources",
    "create_notification_resources"
]
