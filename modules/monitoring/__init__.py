"""
Monitoring Module
Enhanced monitoring IAM role
"""

from .functions import create_monitoring_role

__all__ = ["create_monitoring_role"]
