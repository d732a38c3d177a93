"""
Database Module
Aurora cluster and cluster instances
"""

from .functions import instance_identifier, create_cluster, create_cluster_instances, create_database_resources

__all__ = [
    "instance_identifier",
    "create_cluster",
    "create_cluster_instances",
    "create_database_resources"
]
