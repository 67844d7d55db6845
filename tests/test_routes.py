import os
import unittest
from unittest import mock

from fastapi.testclient import TestClient

from app.config import get_settings
from app.database.base import Base
from app.database.engine import build_engine
from app.database.gateway import TableGateway
from app.dependencies import get_gateway
from app.main import app
from app.models import import_all_models

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class RoutesTest(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.dict(
            os.environ,
            {"ADMIN_API_KEY": "", "API_KEYS": "", "JWT_SECRET": "", "JWT_REQUIRED": "false", "CRON_SECRET": "cron-secret"},
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        get_settings.cache_clear()
        self.addCleanup(get_settings.cache_clear)

        engine = build_engine("sqlite:///:memory:")
        import_all_models()
        Base.metadata.create_all(bind=engine)
        self.gateway = TableGateway(engine)
        self.gateway.insert("users", {"name": "Admin", "email": "admin@itmco.example", "role": "admin"})
        self.product = self.gateway.insert(
            "products",
            {"name": "Toner", "brand": "HP", "model": "85A", "category": "Supplies", "stock": 10, "min_stock": 2},
        )

        app.dependency_overrides[get_gateway] = lambda: self.gateway
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertEqual(response.json()["database"], "ok")

    def test_download_full_backup(self):
        response = self.client.get("/backup")

        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment; filename="itmco-backup-', response.headers["content-disposition"])
        body = response.json()
        self.assertEqual(body["metadata"]["type"], "full")
        self.assertEqual(body["metadata"]["recordCounts"]["products"], 1)

    def test_custom_backup(self):
        response = self.client.post("/backup", json={"type": "manual", "tables": ["products"]})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["backupId"], body["metadata"]["backupId"])
        self.assertEqual(list(body["data"]), ["products"])

    def test_custom_backup_rejects_disallowed_table(self):
        response = self.client.post("/backup", json={"tables": ["users", "backup_config"]})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["detail"]["code"], "TABLE_NOT_ALLOWED")
        events = self.gateway.select("security_logs")
        self.assertEqual([event["event_type"] for event in events], ["TABLE_NOT_ALLOWED"])

    def test_custom_backup_rejects_bad_body(self):
        response = self.client.post("/backup", json={"type": "nightly"})

        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()["detail"]["errors"][0].startswith("type:"))

    def test_history_and_config(self):
        self.client.post("/backup", json={"tables": ["users"]})

        history = self.client.get("/backup/history", params={"limit": 5}).json()["history"]
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["recordCounts"], {"users": 1})

        config = self.client.get("/backup/config").json()
        self.assertEqual(config["backup_frequency"], "daily")
        self.assertEqual(config["state"], "NOT_DUE")
        self.assertIsNotNone(config["next_backup_at"])

        updated = self.client.put("/backup/config", json={"backup_frequency": "weekly"})
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["backup_frequency"], "weekly")
        self.assertEqual(self.client.put("/backup/config", json={"backup_retention_days": 1}).status_code, 400)

    def test_restore(self):
        document = self.client.post("/backup", json={"tables": ["products"]}).json()
        document.pop("backupId")
        self.gateway.delete("products", self.product["id"])

        restored = self.client.post("/restore", json=document)
        self.assertEqual(restored.status_code, 200)
        self.assertTrue(restored.json()["success"])
        self.assertEqual(self.gateway.get("products", self.product["id"])["stock"], 10)

        again = self.client.post("/restore", json=document)
        self.assertEqual(again.status_code, 200)
        self.assertFalse(again.json()["success"])
        self.assertIn("products", again.json()["results"]["errors"])

        upserted = self.client.post("/restore", params={"mode": "upsert"}, json=document)
        self.assertTrue(upserted.json()["success"])

    def test_restore_rejects_bad_documents(self):
        self.assertEqual(self.client.post("/restore", json="not a backup").status_code, 400)
        self.assertEqual(self.client.post("/restore", json={"metadata": {}}).status_code, 400)
        forbidden = self.client.post("/restore", json={"metadata": {}, "data": {"backup_history": []}})
        self.assertEqual(forbidden.status_code, 403)

    def test_cron_backup(self):
        self.assertEqual(self.client.get("/cron/backup").status_code, 401)
        self.assertEqual(self.client.get("/cron/backup", params={"secret": "nope"}).status_code, 401)
        self.assertEqual(self.client.post("/cron/backup", params={"secret": "cron-secret"}).status_code, 405)

        first = self.client.get("/cron/backup", params={"secret": "cron-secret"})
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json()["status"], "completed")
        second = self.client.get("/cron/backup", params={"secret": "cron-secret"})
        self.assertEqual(second.json()["status"], "not_due")
        self.assertEqual(len(self.gateway.select("security_logs")), 2)

    def test_stock_entries(self):
        base = "/products/{}/stock-entries".format(self.product["id"])

        created = self.client.post(base, json={"quantity_added": 4, "entered_by": "Sara", "notes": "delivery"})
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["previous_stock"], 10)
        self.assertEqual(created.json()["new_stock"], 14)

        rejected = self.client.post(base, json={"quantity_added": 0, "entered_by": "Sara"})
        self.assertEqual(rejected.status_code, 400)

        entries = self.client.get(base).json()["entries"]
        self.assertEqual(len(entries), 1)

        summary = self.client.get(base + "/summary").json()
        self.assertEqual(summary["totalQuantityAdded"], 4)
        self.assertEqual(summary["entriesCount"], 1)

        export = self.client.get(base + "/export")
        self.assertEqual(export.status_code, 200)
        self.assertTrue(export.headers["content-type"].startswith(XLSX))
        self.assertTrue(export.content.startswith(b"PK"))

    def test_stock_entries_unknown_product(self):
        self.assertEqual(self.client.get("/products/999/stock-entries").status_code, 404)
        self.assertEqual(
            self.client.post("/products/999/stock-entries", json={"quantity_added": 1, "entered_by": "x"}).status_code,
            404,
        )

    def test_api_key_required_when_configured(self):
        with mock.patch.dict(os.environ, {"ADMIN_API_KEY": "admin-key"}):
            get_settings.cache_clear()
            self.assertEqual(self.client.get("/backup/history").status_code, 401)
            self.assertEqual(self.gateway.select("security_logs")[0]["event_type"], "NOT_AUTHENTICATED")
            ok = self.client.get("/backup/history", headers={"X-API-Key": "admin-key"})
            self.assertEqual(ok.status_code, 200)


if __name__ == "__main__":
    unittest.main()
