import unittest
from datetime import datetime, timedelta, timezone

from app.core.errors import StoreError
from app.database.base import Base
from app.database.engine import build_engine
from app.database.gateway import TableGateway
from app.models import import_all_models
from app.services.backup_history import BackupHistoryStore
from app.services.backup_scheduler import BackupController

T0 = datetime(2024, 6, 1, 2, 0, tzinfo=timezone.utc)


def make_engine():
    engine = build_engine("sqlite:///:memory:")
    import_all_models()
    Base.metadata.create_all(bind=engine)
    return engine


class BrokenReadGateway(TableGateway):
    def select(self, table_name, filters=None, **kwargs):
        if table_name == "users":
            raise StoreError("database is locked")
        return super().select(table_name, filters, **kwargs)


class BackupControllerTest(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()
        self.gateway = TableGateway(self.engine)
        self.controller = BackupController(self.gateway, clock=lambda: T0)

    def test_defaults_come_from_settings(self):
        self.assertEqual(
            self.controller.get_config(),
            {
                "auto_backup_enabled": True,
                "backup_frequency": "daily",
                "backup_retention_days": 30,
                "backup_retention_count": 30,
            },
        )

    def test_due_when_no_backup_exists(self):
        self.assertTrue(self.controller.is_backup_due())
        self.assertIsNone(self.controller.next_backup_at())

    def test_cycle_takes_auto_backup_then_waits_an_interval(self):
        result = self.controller.run_cycle()

        self.assertTrue(result["success"])
        self.assertEqual(result["status"], "completed")
        self.assertTrue(result["backupId"].startswith("auto_"))
        self.assertIn("users", result["recordCounts"])
        self.assertGreater(result["size"], 0)
        self.assertEqual(self.controller.next_backup_at(), T0 + timedelta(days=1))

        self.assertFalse(self.controller.is_backup_due(T0 + timedelta(hours=23)))
        self.assertTrue(self.controller.is_backup_due(T0 + timedelta(days=1)))

        skipped = self.controller.run_cycle(T0 + timedelta(hours=1))
        self.assertEqual(skipped["status"], "not_due")
        self.assertEqual(len(self.controller.history.list_recent()), 1)

    def test_frequency_change_moves_next_backup(self):
        self.controller.run_cycle()

        config = self.controller.update_config({"backup_frequency": "hourly"})

        self.assertEqual(config["backup_frequency"], "hourly")
        self.assertEqual(self.controller.next_backup_at(), T0 + timedelta(hours=1))
        self.assertEqual(self.controller.backup_state(T0 + timedelta(hours=1)), "DUE")

    def test_disabled_auto_backup_is_never_due(self):
        self.controller.update_config({"auto_backup_enabled": False})

        self.assertEqual(self.controller.backup_state(), "NOT_DUE")
        self.assertEqual(self.controller.run_cycle()["status"], "not_due")
        self.assertIsNone(self.controller.history.latest())

    def test_update_config_keeps_unpatched_values(self):
        self.controller.update_config({"backup_retention_days": 60})
        config = self.controller.update_config({"backup_frequency": "weekly", "backup_retention_count": None})

        self.assertEqual(config["backup_retention_days"], 60)
        self.assertEqual(config["backup_frequency"], "weekly")
        self.assertEqual(config["backup_retention_count"], 30)
        self.assertEqual(self.controller.interval(config), timedelta(days=7))

    def test_unknown_frequency(self):
        with self.assertRaises(ValueError):
            BackupController.interval({"backup_frequency": "monthly"})

    def test_failed_backup_reports_and_stays_due(self):
        controller = BackupController(BrokenReadGateway(self.engine), clock=lambda: T0)

        with self.assertLogs("app.services.backup_scheduler", level="ERROR"):
            result = controller.run_cycle()

        self.assertFalse(result["success"])
        self.assertEqual(result["status"], "failed")
        self.assertIn("users", result["error"])
        self.assertTrue(controller.is_backup_due())

    def test_cleanup_by_age_and_count(self):
        history = BackupHistoryStore(self.gateway)
        for index, age in enumerate((40, 35, 10, 5, 1)):
            history.record(
                backup_id="auto_{}".format(index),
                timestamp=T0 - timedelta(days=age),
                backup_type="auto",
                record_counts={"users": 0},
                size=100,
            )

        self.assertEqual(self.controller.cleanup_old_backups(), 2)
        self.assertEqual([row["backupId"] for row in history.list_recent()], ["auto_4", "auto_3", "auto_2"])

        self.controller.update_config({"backup_retention_count": 1})
        self.assertEqual(self.controller.cleanup_old_backups(), 2)
        self.assertEqual([row["backupId"] for row in history.list_recent()], ["auto_4"])

    def test_cycle_runs_cleanup(self):
        BackupHistoryStore(self.gateway).record(
            backup_id="auto_old",
            timestamp=T0 - timedelta(days=90),
            backup_type="auto",
            record_counts={},
            size=10,
        )

        result = self.controller.run_cycle()

        self.assertEqual(result["removedBackups"], 1)
        self.assertEqual(len(self.controller.history.list_recent()), 1)


if __name__ == "__main__":
    unittest.main()
