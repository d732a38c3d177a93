"""
Network Module
Security group and subnet group for the Aurora cluster
"""

from .functions import create_security_group, create_subnet_group, create_network_resources

__all__ = [
    "create_security_group",
    "create_subnet_group",
    "create_network_resources"
]
