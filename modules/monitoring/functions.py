"""
Monitoring Module Functions
IAM role that lets RDS publish enhanced monitoring metrics
"""

import json
import pulumi_aws as aws
from typing import Dict, Any

ENHANCED_MONITORING_POLICY_ARN = "arn:aws:iam::aws:policy/service-role/AmazonRDSEnhancedMonitoringRole"


def create_monitoring_role(name: str, tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create IAM role for RDS enhanced monitoring

    Args:
        name: Role name prefix
        tags: Additional tags

    Returns:
        Dict with role resource and outputs
    """
    tags = tags or {}

    role = aws.iam.Role(
        f"{name}-monitoring-role",
        name=f"{name}-rds-monitoring",
        assume_role_policy=json.dumps({
            "Version": "2012-10-17",
            "Statement": [{
                "Action": "sts:AssumeRole",
                "Effect": "Allow",
                "Principal": {"Service": "monitoring.rds.amazonaws.com"},
            }],
        }),
        tags={
            **tags,
            "Name": f"{name}-rds-monitoring",
            "Module": "monitoring"
        }
    )

    policy_attachment = aws.iam.RolePolicyAttachment(
        f"{name}-monitoring-policy",
        policy_arn=ENHANCED_MONITORING_POLICY_ARN,
        role=role.name
    )

    return {
        "role": role,
        "policy_attachment": policy_attachment,
        "role_arn": role.arn,
        "role_name": role.name
    }
