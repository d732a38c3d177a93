"""
Database Module Functions
Creates the Aurora cluster and its member instances
"""

import pulumi
import pulumi_aws as aws
from typing import Dict, List, Optional, Any


def instance_identifier(name: str, index: int) -> str:
    """Identifier for the instance at a zero-based position"""
    return f"{name}-instance-{index + 1}"


def create_cluster(name: str, engine: str, engine_version: str, database_name: str, port: int,
                   master_username: str, master_password: pulumi.Input[str],
                   subnet_group_name: pulumi.Output[str], security_group_id: pulumi.Output[str],
                   storage_encrypted: bool = True, kms_key_id: Optional[str] = None,
                   backup_retention_period: int = 7,
                   preferred_backup_window: str = "03:00-04:00",
                   preferred_maintenance_window: str = "mon:04:00-mon:05:00",
                   deletion_protection: bool = True, skip_final_snapshot: bool = False,
                   final_snapshot_identifier: Optional[str] = None,
                   enabled_cloudwatch_logs_exports: List[str] = None,
                   enable_http_endpoint: bool = False,
                   iam_database_authentication_enabled: bool = False,
                   apply_immediately: bool = False,
                   serverless_capacity: Optional[Dict[str, float]] = None,
                   tags: Dict[str, str] = None,
                   opts: pulumi.ResourceOptions = None) -> Dict[str, Any]:
    """
    Create Aurora cluster

    Args:
        name: Resource name prefix
        engine: aurora-postgresql or aurora-mysql
        engine_version: Engine version
        database_name: Initial database name
        port: Database port
        master_username: Master user name
        master_password: Master password (secret)
        subnet_group_name: DB subnet group name
        security_group_id: Security group ID
        storage_encrypted: Encrypt storage at rest
        kms_key_id: Customer managed key ARN, provider default key when unset
        backup_retention_period: Days to retain automated backups
        preferred_backup_window: Daily backup window (UTC)
        preferred_maintenance_window: Weekly maintenance window (UTC)
        deletion_protection: Block cluster deletion
        skip_final_snapshot: Skip the snapshot taken on deletion
        final_snapshot_identifier: Name of the snapshot taken on deletion
        enabled_cloudwatch_logs_exports: Log types exported to CloudWatch
        enable_http_endpoint: Enable the Data API
        iam_database_authentication_enabled: Enable IAM database authentication
        apply_immediately: Apply modifications outside the maintenance window
        serverless_capacity: {"min_capacity": ..., "max_capacity": ...} for db.serverless instances
        tags: Additional tags
        opts: Pulumi resource options

    Returns:
        Dict with cluster resource and outputs
    """
    tags = tags or {}

    if skip_final_snapshot:
        pulumi.log.warn(f"{name}: final snapshot will be skipped when the cluster is deleted")
        final_snapshot_identifier = None

    if kms_key_id and not storage_encrypted:
        pulumi.log.warn(f"{name}: kms_key_id ignored because storage encryption is disabled")
        kms_key_id = None

    scaling = None
    if serverless_capacity:
        scaling = aws.rds.ClusterServerlessv2ScalingConfigurationArgs(
            min_capacity=serverless_capacity["min_capacity"],
            max_capacity=serverless_capacity["max_capacity"],
        )

    cluster = aws.rds.Cluster(
        f"{name}-cluster",
        cluster_identifier=f"{name}-cluster",
        engine=engine,
        engine_mode="provisioned",
        engine_version=engine_version,
        database_name=database_name,
        port=port,
        master_username=master_username,
        master_password=master_password,
        db_subnet_group_name=subnet_group_name,
        vpc_security_group_ids=[security_group_id],
        storage_encrypted=storage_encrypted,
        kms_key_id=kms_key_id,
        backup_retention_period=backup_retention_period,
        preferred_backup_window=preferred_backup_window,
        preferred_maintenance_window=preferred_maintenance_window,
        deletion_protection=deletion_protection,
        skip_final_snapshot=skip_final_snapshot,
        final_snapshot_identifier=final_snapshot_identifier,
        copy_tags_to_snapshot=True,
        enabled_cloudwatch_logs_exports=enabled_cloudwatch_logs_exports or None,
        enable_http_endpoint=enable_http_endpoint,
        iam_database_authentication_enabled=iam_database_authentication_enabled,
        apply_immediately=apply_immediately,
        serverlessv2_scaling_configuration=scaling,
        tags={
            **tags,
            "Name": f"{name}-cluster",
            "Engine": engine,
            "Module": "database"
        },
        opts=opts
    )

    return {
        "cluster": cluster,
        "cluster_id": cluster.id,
        "cluster_arn": cluster.arn,
        "endpoint": cluster.endpoint,
        "reader_endpoint": cluster.reader_endpoint
    }


def create_cluster_instances(name: str, cluster: aws.rds.Cluster, instance_class: str, count: int,
                             performance_insights_enabled: bool = False,
                             performance_insights_retention_period: int = 7,
                             performance_insights_kms_key_id: Optional[str] = None,
                             monitoring_interval: int = 0,
                             monitoring_role_arn: Optional[pulumi.Output[str]] = None,
                             apply_immediately: bool = False,
                             tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create cluster member instances

    The first instance created becomes the writer; the rest join as readers.

    Args:
        name: Resource name prefix
        cluster: Cluster the instances join
        instance_class: Instance class, e.g. db.r6g.large or db.serverless
        count: Number of instances, at least one
        performance_insights_enabled: Enable Performance Insights
        performance_insights_retention_period: Performance Insights retention in days
        performance_insights_kms_key_id: Key for Performance Insights data
        monitoring_interval: Enhanced monitoring interval in seconds, 0 disables it
        monitoring_role_arn: Enhanced monitoring role, required when interval > 0
        apply_immediately: Apply modifications outside the maintenance window
        tags: Additional tags

    Returns:
        Dict with instance resources and outputs
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")
    if monitoring_interval > 0 and monitoring_role_arn is None:
        raise ValueError("monitoring_role_arn is required when monitoring_interval is greater than 0")

    tags = tags or {}

    instances = []
    for i in range(count):
        identifier = instance_identifier(name, i)
        instance = aws.rds.ClusterInstance(
            identifier,
            identifier=identifier,
            cluster_identifier=cluster.id,
            instance_class=instance_class,
            engine=cluster.engine,
            engine_version=cluster.engine_version,
            db_subnet_group_name=cluster.db_subnet_group_name,
            publicly_accessible=False,
            performance_insights_enabled=performance_insights_enabled,
            performance_insights_retention_period=(
                performance_insights_retention_period if performance_insights_enabled else None
            ),
            performance_insights_kms_key_id=(
                performance_insights_kms_key_id if performance_insights_enabled else None
            ),
            monitoring_interval=monitoring_interval,
            monitoring_role_arn=monitoring_role_arn if monitoring_interval > 0 else None,
            apply_immediately=apply_immediately,
            tags={
                **tags,
                "Name": identifier,
                "Module": "database"
            },
            opts=pulumi.ResourceOptions(depends_on=[cluster])
        )
        instances.append(instance)

    return {
        "instances": instances,
        "instance_identifiers": [instance_identifier(name, i) for i in range(count)],
        "instance_ids": [instance.id for instance in instances]
    }


def create_database_resources(name: str, engine: str, engine_version: str, database_name: str, port: int,
                              master_username: str, master_password: pulumi.Input[str],
                              subnet_group_name: pulumi.Output[str], security_group_id: pulumi.Output[str],
                              instance_class: str, instance_count: int,
                              cluster_options: Dict[str, Any] = None,
                              instance_options: Dict[str, Any] = None,
                              tags: Dict[str, str] = None,
                              depends_on: List[pulumi.Resource] = None) -> Dict[str, Any]:
    """
    Create the Aurora cluster and its instances

    Args:
        cluster_options: Extra keyword arguments for create_cluster
        instance_options: Extra keyword arguments for create_cluster_instances

    Returns:
        Dict with database outputs and resource handles
    """
    tags = tags or {}
    cluster_options = dict(cluster_options or {})
    instance_options = dict(instance_options or {})
    instance_options.setdefault("apply_immediately", cluster_options.get("apply_immediately", False))

    serverless_capacity = cluster_options.pop("serverless_capacity", None)
    if instance_class != "db.serverless":
        serverless_capacity = None

    cluster_result = create_cluster(
        name,
        engine=engine,
        engine_version=engine_version,
        database_name=database_name,
        port=port,
        master_username=master_username,
        master_password=master_password,
        subnet_group_name=subnet_group_name,
        security_group_id=security_group_id,
        serverless_capacity=serverless_capacity,
        tags=tags,
        opts=pulumi.ResourceOptions(depends_on=depends_on) if depends_on else None,
        **cluster_options
    )

    pulumi.log.info(f"Declaring {instance_count} {instance_class} instance(s) for {name}")

    instances_result = create_cluster_instances(
        name,
        cluster_result["cluster"],
        instance_class,
        instance_count,
        tags=tags,
        **instance_options
    )

    return {
        "cluster_id": cluster_result["cluster_id"],
        "cluster_arn": cluster_result["cluster_arn"],
        "writer_endpoint": cluster_result["endpoint"],
        "reader_endpoint": cluster_result["reader_endpoint"],
        "port": cluster_result["cluster"].port,
        "instance_identifiers": instances_result["instance_identifiers"],
        # Keep references to all resources for dependencies
        "_cluster": cluster_result["cluster"],
        "_instances": instances_result["instances"]
    }
