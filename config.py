"""
Configuration management for the Aurora cluster stack
Reads stack config, applies defaults and validates inputs before any resource is declared
"""

import re
import pulumi
from typing import Dict, List, Optional
from modules.database.functions import instance_identifier

SUPPORTED_ENGINES = ("aurora-postgresql", "aurora-mysql")

DEFAULT_ENGINE_VERSIONS = {
    "aurora-postgresql": "16.4",
    "aurora-mysql": "8.0.mysql_aurora.3.05.2",
}

DEFAULT_PORTS = {
    "aurora-postgresql": 5432,
    "aurora-mysql": 3306,
}

MONITORING_INTERVALS = (0, 1, 5, 10, 15, 30, 60)

MAX_IDENTIFIER_LENGTH = 63

MAX_DATABASE_NAME_LENGTHS = {
    "aurora-postgresql": 63,
    "aurora-mysql": 64,
}

DEFAULT_EVENT_CATEGORIES = ["failover", "failure", "maintenance", "notification"]


class ConfigValidationError(Exception):
    """Raised when stack configuration fails validation"""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("Invalid stack configuration: " + "; ".join(errors))


def validate_engine(engine: str) -> Optional[str]:
    if engine not in SUPPORTED_ENGINES:
        return f"engine must be one of {', '.join(SUPPORTED_ENGINES)}, got '{engine}'"
    return None


def validate_final_snapshot(skip_final_snapshot: bool, final_snapshot_identifier: Optional[str]) -> Optional[str]:
    """A final snapshot needs a name unless it is skipped"""
    if not skip_final_snapshot and not (final_snapshot_identifier or "").strip():
        return "final_snapshot_identifier is required when skip_final_snapshot is false"
    return None


def validate_instance_count(instance_count: int) -> Optional[str]:
    if instance_count < 1:
        return f"instance_count must be at least 1, got {instance_count}"
    return None


def validate_backup_retention(days: int) -> Optional[str]:
    if not 1 <= days <= 35:
        return f"backup_retention_period must be between 1 and 35 days, got {days}"
    return None


def validate_monitoring_interval(interval: int) -> Optional[str]:
    if interval not in MONITORING_INTERVALS:
        return f"monitoring_interval must be one of {MONITORING_INTERVALS}, got {interval}"
    return None


def validate_performance_insights_retention(days: int) -> Optional[str]:
    # 7 days free tier, 731 days max, otherwise whole months
    if days in (7, 731) or (days % 31 == 0 and 31 <= days <= 713):
        return None
    return f"performance_insights_retention_period must be 7, 731 or a multiple of 31 up to 713, got {days}"


def validate_serverless_capacity(min_capacity: float, max_capacity: float) -> Optional[str]:
    if min_capacity < 0.5 or max_capacity > 128 or min_capacity > max_capacity:
        return (f"serverless capacity must satisfy 0.5 <= min <= max <= 128, "
                f"got min={min_capacity} max={max_capacity}")
    return None


def validate_cidr_blocks(cidr_blocks: List[str]) -> Optional[str]:
    if not cidr_blocks:
        return "allowed_cidr_blocks must contain at least one CIDR block"
    return None


def validate_identifier(identifier: str, label: str) -> Optional[str]:
    """RDS identifiers: lowercase letter first, then lowercase letters, digits and single hyphens"""
    if (len(identifier) > MAX_IDENTIFIER_LENGTH
            or not re.fullmatch(r"[a-z][a-z0-9-]*", identifier)
            or "--" in identifier
            or identifier.endswith("-")):
        return (f"{label} '{identifier}' must start with a lowercase letter, contain only lowercase letters, "
                f"digits and single hyphens, not end with a hyphen and be at most "
                f"{MAX_IDENTIFIER_LENGTH} characters")
    return None


def validate_database_name(database_name: str, engine: str) -> Optional[str]:
    max_length = MAX_DATABASE_NAME_LENGTHS.get(engine, 63)
    if len(database_name) > max_length or not re.fullmatch(r"[A-Za-z][A-Za-z0-9_]*", database_name):
        return (f"database_name '{database_name}' must start with a letter, contain only letters, digits "
                f"and underscores and be at most {max_length} characters")
    return None


def default_database_name(project_name: str) -> str:
    """Letter-led, length-capped database name derived from the project name"""
    name = re.sub(r"[^A-Za-z0-9]", "", project_name)
    if not name[:1].isalpha():
        name = "db" + name
    return name[:min(MAX_DATABASE_NAME_LENGTHS.values())]


class AuroraConfig:
    """Centralized configuration for the Aurora cluster stack"""

    def __init__(self):
        self.config = pulumi.Config()
        aws_config = pulumi.Config("aws")

        # Project and placement
        self.project_name = self.config.require("project_name")
        self.aws_region = aws_config.require("region")
        self.vpc_id = self.config.require("vpc_id")
        self.subnet_1_id = self.config.require("subnet_1_id")
        self.subnet_2_id = self.config.require("subnet_2_id")

        # Engine
        self.engine = self.config.get("engine") or "aurora-postgresql"
        self.engine_version = self.config.get("engine_version") or DEFAULT_ENGINE_VERSIONS.get(self.engine)
        self.database_name = self.config.get("database_name") or default_database_name(self.project_name)
        self.port = self._int("port", DEFAULT_PORTS.get(self.engine, 5432))

        # Credentials
        self.master_username = self.config.require("master_username")
        self.master_password = self.config.require_secret("master_password")

        # Instances
        self.instance_class = self.config.get("instance_class") or "db.r6g.large"
        self.instance_count = self._int("instance_count", 2)
        self.serverless_min_capacity = self._float("serverless_min_capacity", 0.5)
        self.serverless_max_capacity = self._float("serverless_max_capacity", 2.0)

        # Network access
        self.allowed_cidr_blocks = self.config.get_object("allowed_cidr_blocks") or ["10.0.0.0/16"]

        # Backups and maintenance
        self.backup_retention_period = self._int("backup_retention_period", 7)
        self.preferred_backup_window = self.config.get("preferred_backup_window") or "03:00-04:00"
        self.preferred_maintenance_window = self.config.get("preferred_maintenance_window") or "mon:04:00-mon:05:00"
        self.apply_immediately = self._bool("apply_immediately", False)

        # Protection and encryption
        self.storage_encrypted = self._bool("storage_encrypted", True)
        self.kms_key_id = self.config.get("kms_key_id") or None
        self.performance_insights_kms_key_id = self.config.get("performance_insights_kms_key_id") or None
        self.deletion_protection = self._bool("deletion_protection", True)
        self.skip_final_snapshot = self._bool("skip_final_snapshot", False)
        self.final_snapshot_identifier = self.config.get("final_snapshot_identifier") or ""

        # Telemetry
        self.performance_insights_enabled = self._bool("performance_insights_enabled", False)
        self.performance_insights_retention_period = self._int("performance_insights_retention_period", 7)
        self.monitoring_interval = self._int("monitoring_interval", 0)
        self.enabled_cloudwatch_logs_exports = self.config.get_object("enabled_cloudwatch_logs_exports") or []

        # Access features
        self.enable_http_endpoint = self._bool("enable_http_endpoint", False)
        self.iam_database_authentication_enabled = self._bool("iam_database_authentication_enabled", False)

        # Notifications
        self.notification_email = self.config.get("notification_email") or ""
        self.event_categories = self.config.get_object("event_categories") or list(DEFAULT_EVENT_CATEGORIES)

        # Additional tags
        self.additional_tags = self.config.get_object("tags") or {}

    def _bool(self, key: str, default: bool) -> bool:
        value = self.config.get_bool(key)
        return default if value is None else value

    def _int(self, key: str, default: int) -> int:
        value = self.config.get_int(key)
        return default if value is None else value

    def _float(self, key: str, default: float) -> float:
        value = self.config.get_float(key)
        return default if value is None else value

    @property
    def subnet_ids(self) -> List[str]:
        return [self.subnet_1_id, self.subnet_2_id]

    @property
    def serverless(self) -> bool:
        return self.instance_class == "db.serverless"

    @property
    def notifications_enabled(self) -> bool:
        return bool(self.notification_email.strip())

    @property
    def common_tags(self) -> Dict[str, str]:
        """Get common tags for all resources"""
        base_tags = {
            "Project": self.project_name,
            "ManagedBy": "pulumi",
            "Module": "aurora",
        }
        base_tags.update(self.additional_tags)
        return base_tags

    def validate(self) -> None:
        """
        Validate the whole configuration

        Raises:
            ConfigValidationError: listing every failed check
        """
        checks = [
            validate_engine(self.engine),
            validate_final_snapshot(self.skip_final_snapshot, self.final_snapshot_identifier),
            validate_instance_count(self.instance_count),
            validate_backup_retention(self.backup_retention_period),
            validate_monitoring_interval(self.monitoring_interval),
            validate_cidr_blocks(self.allowed_cidr_blocks),
            validate_database_name(self.database_name, self.engine),
            validate_identifier(f"{self.project_name}-cluster", "cluster identifier"),
        ]
        if self.instance_count >= 1:
            # the last instance carries the longest identifier
            checks.append(validate_identifier(
                instance_identifier(self.project_name, self.instance_count - 1), "instance identifier"))
        if not self.skip_final_snapshot and self.final_snapshot_identifier.strip():
            checks.append(validate_identifier(self.final_snapshot_identifier, "final_snapshot_identifier"))
        if self.performance_insights_enabled:
            checks.append(validate_performance_insights_retention(self.performance_insights_retention_period))
        if self.serverless:
            checks.append(validate_serverless_capacity(self.serverless_min_capacity, self.serverless_max_capacity))

        errors = [error for error in checks if error]
        if errors:
            for error in errors:
                pulumi.log.error(error)
            raise ConfigValidationError(errors)


def get_config() -> AuroraConfig:
    """Get the stack configuration instance"""
    return AuroraConfig()
