"""
Network Module Functions
Creates the security group and subnet group that fence in the Aurora cluster
"""

import pulumi
import pulumi_aws as aws
from typing import Dict, List, Any


def create_security_group(name: str, vpc_id: str, port: int, allowed_cidr_blocks: List[str],
                          tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create security group allowing database traffic from a CIDR allow-list

    Args:
        name: Resource name prefix
        vpc_id: VPC ID
        port: Database port
        allowed_cidr_blocks: CIDR blocks allowed to reach the database port
        tags: Additional tags

    Returns:
        Dict with security group resource and outputs
    """
    tags = tags or {}

    security_group = aws.ec2.SecurityGroup(
        f"{name}-db-sg",
        name_prefix=f"{name}-db-",
        vpc_id=vpc_id,
        description=f"Aurora access for {name}",
        ingress=[aws.ec2.SecurityGroupIngressArgs(
            description="Database access",
            protocol="tcp",
            from_port=port,
            to_port=port,
            cidr_blocks=list(allowed_cidr_blocks),
        )],
        egress=[aws.ec2.SecurityGroupEgressArgs(
            protocol="-1",
            from_port=0,
            to_port=0,
            cidr_blocks=["0.0.0.0/0"],
        )],
        tags={
            **tags,
            "Name": f"{name}-db-sg",
            "Module": "network"
        }
    )

    return {
        "security_group": security_group,
        "security_group_id": security_group.id
    }


def create_subnet_group(name: str, subnet_ids: List[str], tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create DB subnet group spanning the given subnets

    Args:
        name: Resource name prefix
        subnet_ids: Subnets in distinct availability zones
        tags: Additional tags

    Returns:
        Dict with subnet group resource and outputs
    """
    tags = tags or {}

    subnet_group = aws.rds.SubnetGroup(
        f"{name}-subnet-group",
        name=f"{name}-subnet-group",
        subnet_ids=list(subnet_ids),
        description=f"Aurora subnet group for {name}",
        tags={
            **tags,
            "Name": f"{name}-subnet-group",
            "Module": "network"
        }
    )

    return {
        "subnet_group": subnet_group,
        "subnet_group_name": subnet_group.name
    }


def create_network_resources(name: str, vpc_id: str, subnet_ids: List[str], port: int,
                             allowed_cidr_blocks: List[str], tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create the network boundary for the Aurora cluster

    Returns:
        Dict with network outputs and resource handles
    """
    tags = tags or {}

    pulumi.log.info(f"Allowing port {port} from {len(allowed_cidr_blocks)} CIDR block(s)")

    sg_result = create_security_group(name, vpc_id, port, allowed_cidr_blocks, tags)
    subnet_group_result = create_subnet_group(name, subnet_ids, tags)

    return {
        "security_group_id": sg_result["security_group_id"],
        "subnet_group_name": subnet_group_result["subnet_group_name"],
        # Keep references to all resources for dependencies
        "_security_group": sg_result["security_group"],
        "_subnet_group": subnet_group_result["subnet_group"]
    }
