"""
Aurora Cluster Stack
Wires network, monitoring, database and notifications into one deployment
"""
import pulumi
from modules.network import create_network_resources
from modules.monitoring import create_monitoring_role
from modules.database import create_database_resources
from modules.notifications import create_notification_resources


def create_aurora(cfg):
    """Validate the configuration and declare every Aurora resource"""
    cfg.validate()

    name = cfg.project_name
    tags = cfg.common_tags

    pulumi.log.info(f"Declaring {cfg.engine} {cfg.engine_version} cluster {name} in {cfg.aws_region}")

    # 1. Network boundary
    network = create_network_resources(
        name,
        vpc_id=cfg.vpc_id,
        subnet_ids=cfg.subnet_ids,
        port=cfg.port,
        allowed_cidr_blocks=cfg.allowed_cidr_blocks,
        tags=tags)

    # 2. Enhanced monitoring role, only when metrics are collected
    monitoring = None
    if cfg.monitoring_interval > 0:
        monitoring = create_monitoring_role(name, tags)

    # 3. Cluster and instances
    database = create_database_resources(
        name,
        engine=cfg.engine,
        engine_version=cfg.engine_version,
        database_name=cfg.database_name,
        port=cfg.port,
        master_username=cfg.master_username,
        master_password=cfg.master_password,
        subnet_group_name=network["subnet_group_name"],
        security_group_id=network["security_group_id"],
        instance_class=cfg.instance_class,
        instance_count=cfg.instance_count,
        cluster_options={
            "storage_encrypted": cfg.storage_encrypted,
            "kms_key_id": cfg.kms_key_id,
            "backup_retention_period": cfg.backup_retention_period,
            "preferred_backup_window": cfg.preferred_backup_window,
            "preferred_maintenance_window": cfg.preferred_maintenance_window,
            "deletion_protection": cfg.deletion_protection,
            "skip_final_snapshot": cfg.skip_final_snapshot,
            "final_snapshot_identifier": cfg.final_snapshot_identifier,
            "enabled_cloudwatch_logs_exports": cfg.enabled_cloudwatch_logs_exports,
            "enable_http_endpoint": cfg.enable_http_endpoint,
            "iam_database_authentication_enabled": cfg.iam_database_authentication_enabled,
            "apply_immediately": cfg.apply_immediately,
            "serverless_capacity": {
                "min_capacity": cfg.serverless_min_capacity,
                "max_capacity": cfg.serverless_max_capacity,
            },
        },
        instance_options={
            "performance_insights_enabled": cfg.performance_insights_enabled,
            "performance_insights_retention_period": cfg.performance_insights_retention_period,
            "performance_insights_kms_key_id": cfg.performance_insights_kms_key_id,
            "monitoring_interval": cfg.monitoring_interval,
            "monitoring_role_arn": monitoring["role_arn"] if monitoring else None,
        },
        tags=tags,
        depends_on=[monitoring["policy_attachment"]] if monitoring else None)

    # 4. Optional event notifications
    notifications = create_notification_resources(
        name,
        email=cfg.notification_email,
        cluster_id=database["cluster_id"],
        event_categories=cfg.event_categories,
        tags=tags)

    return {
        "cluster_id": database["cluster_id"],
        "cluster_arn": database["cluster_arn"],
        "writer_endpoint": database["writer_endpoint"],
        "reader_endpoint": database["reader_endpoint"],
        "port": database["port"],
        "instance_identifiers": database["instance_identifiers"],
        "security_group_id": network["security_group_id"],
        "subnet_group_name": network["subnet_group_name"],
        "notifications_enabled": notifications["enabled"],
        "sns_topic_arn": notifications["topic_arn"],
        "_network": network,
        "_database": database,
        "_monitoring": monitoring,
        "_notifications": notifications,
    }
