"""
Aurora Cluster - managed database deployment
Security group, subnet group, cluster, instances and optional event notifications
"""
import pulumi
from config import get_config
from src.aurora import create_aurora

# Configuration
config = get_config()

# Everything is declared from one validated config
aurora = create_aurora(config)

# Exports
pulumi.export("cluster_id", pulumi.Output.secret(aurora["cluster_id"]))
pulumi.export("cluster_arn", pulumi.Output.secret(aurora["cluster_arn"]))
pulumi.export("writer_endpoint", aurora["writer_endpoint"])
pulumi.export("reader_endpoint", aurora["reader_endpoint"])
pulumi.export("port", aurora["port"])
pulumi.export("security_group_id", aurora["security_group_id"])
pulumi.export("subnet_group_name", pulumi.Output.secret(aurora["subnet_group_name"]))
pulumi.export("instance_identifiers", aurora["instance_identifiers"])
pulumi.export("sns_topic_arn", aurora["sns_topic_arn"])
pulumi.export("connection_command",
    pulumi.Output.concat(
        "psql -h " if config.engine == "aurora-postgresql" else "mysql -h ",
        aurora["writer_endpoint"],
        " -P " if config.engine == "aurora-mysql" else " -p ",
        str(config.port),
        " -U " if config.engine == "aurora-postgresql" else " -u ",
        config.master_username,
    ))
