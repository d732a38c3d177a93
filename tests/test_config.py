"""
Unit tests for stack configuration
Tests defaults, derived values and input validation
"""

import unittest
from unittest.mock import patch
import sys
import os

import pulumi

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    AuroraConfig,
    ConfigValidationError,
    validate_engine,
    validate_final_snapshot,
    validate_instance_count,
    validate_backup_retention,
    validate_monitoring_interval,
    validate_performance_insights_retention,
    validate_serverless_capacity,
    validate_cidr_blocks,
    validate_identifier,
    validate_database_name,
    default_database_name,
)
from tests.fakes import config_factory


def load_config(overrides=None):
    with patch('config.pulumi') as mock_pulumi:
        mock_pulumi.Config.side_effect = config_factory(overrides)
        return AuroraConfig()


class TestValidators(unittest.TestCase):
    """Test the individual validation rules"""

    def test_engine_accepts_supported_values(self):
        self.assertIsNone(validate_engine("aurora-postgresql"))
        self.assertIsNone(validate_engine("aurora-mysql"))

    def test_engine_rejects_anything_else(self):
        for engine in ["postgres", "mysql", "aurora", "", "Aurora-PostgreSQL"]:
            with self.subTest(engine=engine):
                self.assertIsNotNone(validate_engine(engine))

    def test_final_snapshot_requires_identifier(self):
        self.assertIsNotNone(validate_final_snapshot(False, ""))
        self.assertIsNotNone(validate_final_snapshot(False, "   "))
        self.assertIsNotNone(validate_final_snapshot(False, None))
        self.assertIsNone(validate_final_snapshot(False, "orders-final"))

    def test_final_snapshot_identifier_optional_when_skipped(self):
        self.assertIsNone(validate_final_snapshot(True, ""))
        self.assertIsNone(validate_final_snapshot(True, None))

    def test_instance_count(self):
        self.assertIsNotNone(validate_instance_count(0))
        self.assertIsNotNone(validate_instance_count(-1))
        self.assertIsNone(validate_instance_count(1))
        self.assertIsNone(validate_instance_count(15))

    def test_backup_retention_range(self):
        self.assertIsNotNone(validate_backup_retention(0))
        self.assertIsNotNone(validate_backup_retention(36))
        self.assertIsNone(validate_backup_retention(1))
        self.assertIsNone(validate_backup_retention(35))

    def test_monitoring_interval(self):
        self.assertIsNone(validate_monitoring_interval(0))
        self.assertIsNone(validate_monitoring_interval(60))
        self.assertIsNotNone(validate_monitoring_interval(45))

    def test_performance_insights_retention(self):
        for days in [7, 31, 62, 713, 731]:
            with self.subTest(days=days):
                self.assertIsNone(validate_performance_insights_retention(days))
        for days in [0, 8, 30, 744]:
            with self.subTest(days=days):
                self.assertIsNotNone(validate_performance_insights_retention(days))

    def test_serverless_capacity(self):
        self.assertIsNone(validate_serverless_capacity(0.5, 2.0))
        self.assertIsNotNone(validate_serverless_capacity(0.25, 2.0))
        self.assertIsNotNone(validate_serverless_capacity(4.0, 2.0))
        self.assertIsNotNone(validate_serverless_capacity(1.0, 256.0))

    def test_cidr_blocks(self):
        self.assertIsNotNone(validate_cidr_blocks([]))
        self.assertIsNone(validate_cidr_blocks(["10.0.0.0/16"]))

    def test_identifier_rules(self):
        for identifier in ["orders-cluster", "a", "orders-db-instance-12", "a" * 63]:
            with self.subTest(identifier=identifier):
                self.assertIsNone(validate_identifier(identifier, "cluster identifier"))
        for identifier in ["2024-orders", "-orders", "orders-", "orders--db", "Orders", "orders_db", "", "a" * 64]:
            with self.subTest(identifier=identifier):
                self.assertIsNotNone(validate_identifier(identifier, "cluster identifier"))

    def test_database_name_rules(self):
        self.assertIsNone(validate_database_name("orders_v2", "aurora-postgresql"))
        self.assertIsNotNone(validate_database_name("2024orders", "aurora-postgresql"))
        self.assertIsNotNone(validate_database_name("", "aurora-postgresql"))
        self.assertIsNotNone(validate_database_name("order-db", "aurora-postgresql"))
        self.assertIsNotNone(validate_database_name("a" * 64, "aurora-postgresql"))
        self.assertIsNone(validate_database_name("a" * 64, "aurora-mysql"))
        self.assertIsNotNone(validate_database_name("a" * 65, "aurora-mysql"))

    def test_default_database_name_is_letter_led_and_capped(self):
        self.assertEqual(default_database_name("orders"), "orders")
        self.assertEqual(default_database_name("2024-orders"), "db2024orders")
        self.assertEqual(default_database_name("---"), "db")
        self.assertEqual(len(default_database_name("a" * 70)), 63)


class TestAuroraConfig(unittest.TestCase):
    """Test configuration loading"""

    def test_defaults(self):
        cfg = load_config()

        self.assertEqual(cfg.project_name, "orders")
        self.assertEqual(cfg.aws_region, "af-south-1")
        self.assertEqual(cfg.engine, "aurora-postgresql")
        self.assertEqual(cfg.engine_version, "16.4")
        self.assertEqual(cfg.port, 5432)
        self.assertEqual(cfg.instance_count, 2)
        self.assertEqual(cfg.allowed_cidr_blocks, ["10.0.0.0/16"])
        self.assertTrue(cfg.storage_encrypted)
        self.assertTrue(cfg.deletion_protection)
        self.assertFalse(cfg.skip_final_snapshot)
        self.assertFalse(cfg.enable_http_endpoint)
        self.assertFalse(cfg.notifications_enabled)
        self.assertEqual(cfg.subnet_ids, ["subnet-aaaa", "subnet-bbbb"])

    def test_mysql_engine_defaults(self):
        cfg = load_config({"engine": "aurora-mysql"})

        self.assertEqual(cfg.port, 3306)
        self.assertTrue(cfg.engine_version.startswith("8.0.mysql_aurora"))

    def test_database_name_derived_from_project(self):
        cfg = load_config({"project_name": "order-service_v2"})
        self.assertEqual(cfg.database_name, "orderservicev2")

    def test_false_booleans_are_respected(self):
        cfg = load_config({"storage_encrypted": False, "deletion_protection": False})

        self.assertFalse(cfg.storage_encrypted)
        self.assertFalse(cfg.deletion_protection)

    def test_missing_required_value(self):
        with self.assertRaises(pulumi.ConfigMissingError):
            load_config({"vpc_id": None})

    def test_notifications_enabled_trims_email(self):
        self.assertFalse(load_config({"notification_email": "   "}).notifications_enabled)
        self.assertTrue(load_config({"notification_email": " ops@example.com "}).notifications_enabled)

    def test_common_tags_merge_user_tags(self):
        cfg = load_config({"tags": {"Team": "payments", "ManagedBy": "platform"}})
        tags = cfg.common_tags

        self.assertEqual(tags["Project"], "orders")
        self.assertEqual(tags["Team"], "payments")
        self.assertEqual(tags["ManagedBy"], "platform")

    def test_validate_passes_for_defaults(self):
        cfg = load_config()
        with patch('config.pulumi'):
            cfg.validate()

    def test_validate_rejects_unknown_engine(self):
        cfg = load_config({"engine": "postgres"})
        with patch('config.pulumi'):
            with self.assertRaises(ConfigValidationError) as ctx:
                cfg.validate()
        self.assertEqual(len(ctx.exception.errors), 1)
        self.assertIn("engine", ctx.exception.errors[0])

    def test_validate_rejects_blank_snapshot_identifier(self):
        cfg = load_config({"final_snapshot_identifier": "  "})
        with patch('config.pulumi'):
            with self.assertRaises(ConfigValidationError):
                cfg.validate()

    def test_validate_allows_missing_snapshot_when_skipped(self):
        cfg = load_config({"final_snapshot_identifier": None, "skip_final_snapshot": True})
        with patch('config.pulumi'):
            cfg.validate()

    def test_validate_rejects_zero_instances(self):
        cfg = load_config({"instance_count": 0})
        with patch('config.pulumi'):
            with self.assertRaises(ConfigValidationError):
                cfg.validate()

    def test_validate_collects_all_errors(self):
        cfg = load_config({"engine": "oracle", "instance_count": 0, "final_snapshot_identifier": None})
        with patch('config.pulumi') as mock_pulumi:
            with self.assertRaises(ConfigValidationError) as ctx:
                cfg.validate()
        self.assertEqual(len(ctx.exception.errors), 3)
        self.assertEqual(mock_pulumi.log.error.call_count, 3)

    def assert_validation_fails(self, overrides, fragment):
        cfg = load_config(overrides)
        with patch('config.pulumi'):
            with self.assertRaises(ConfigValidationError) as ctx:
                cfg.validate()
        self.assertTrue(any(fragment in error for error in ctx.exception.errors), ctx.exception.errors)
        return cfg

    def test_digit_led_project_name_rejected(self):
        cfg = self.assert_validation_fails({"project_name": "2024-orders"}, "cluster identifier")
        self.assertEqual(cfg.database_name, "db2024orders")

    def test_symbols_only_project_name_rejected(self):
        cfg = self.assert_validation_fails({"project_name": "---"}, "cluster identifier")
        self.assertEqual(cfg.database_name, "db")

    def test_long_project_name_rejected(self):
        cfg = self.assert_validation_fails({"project_name": "a" * 70}, "cluster identifier")
        self.assertEqual(len(cfg.database_name), 63)

    def test_instance_identifier_length_checked(self):
        # "<name>-cluster" fits, "<name>-instance-2" does not
        self.assert_validation_fails({"project_name": "a" * 53}, "instance identifier")

    def test_explicit_database_name_rejected(self):
        self.assert_validation_fails({"database_name": "1orders"}, "database_name")

    def test_invalid_final_snapshot_identifier_rejected(self):
        self.assert_validation_fails({"final_snapshot_identifier": "Orders_Final"}, "final_snapshot_identifier")

    def test_performance_insights_key_is_separate(self):
        cfg = load_config({"kms_key_id": "1234abcd-12ab-34cd-56ef-1234567890ab"})
        self.assertIsNone(cfg.performance_insights_kms_key_id)

        cfg = load_config({"performance_insights_kms_key_id": "arn:aws:kms:af-south-1:123456789012:key/pi"})
        self.assertEqual(cfg.performance_insights_kms_key_id, "arn:aws:kms:af-south-1:123456789012:key/pi")

    def test_serverless_capacity_checked_only_for_serverless(self):
        bad_capacity = {"serverless_min_capacity": 8, "serverless_max_capacity": 2}
        with patch('config.pulumi'):
            load_config(bad_capacity).validate()
            with self.assertRaises(ConfigValidationError):
                load_config({**bad_capacity, "instance_class": "db.serverless"}).validate()


if __name__ == "__main__":
    unittest.main(verbosity=2)
