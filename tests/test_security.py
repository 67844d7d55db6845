import os
import unittest
from unittest import mock

import jwt

from app.config import get_settings
from app.core.errors import SecurityViolation
from app.core.security import authenticate_request, ensure_tables_allowed, verify_cron_secret


class SecurityTest(unittest.TestCase):
    def setUp(self):
        get_settings.cache_clear()
        self.addCleanup(get_settings.cache_clear)

    def patch_env(self, **values):
        patcher = mock.patch.dict(os.environ, values)
        patcher.start()
        self.addCleanup(patcher.stop)
        get_settings.cache_clear()

    def test_cron_secret_unset_rejects_everything(self):
        self.patch_env(CRON_SECRET="")

        for secret in (None, "", "anything"):
            with self.subTest(secret=secret):
                with self.assertRaises(SecurityViolation) as ctx:
                    verify_cron_secret(secret)
                self.assertEqual(ctx.exception.status_code, 401)

    def test_cron_secret_match(self):
        self.patch_env(CRON_SECRET="s3cret")

        verify_cron_secret("s3cret")
        with self.assertRaises(SecurityViolation):
            verify_cron_secret("s3cret-not")

    def test_tables_allow_list(self):
        self.assertEqual(ensure_tables_allowed(["users", "stock_entries"]), ["users", "stock_entries"])
        with self.assertRaises(SecurityViolation) as ctx:
            ensure_tables_allowed(["users", "backup_config", 7])
        self.assertEqual(ctx.exception.code, SecurityViolation.TABLE_NOT_ALLOWED)
        self.assertEqual(ctx.exception.details["tables"], ["backup_config", "7"])

    def test_api_key_auth(self):
        self.patch_env(ADMIN_API_KEY="admin-key", API_KEYS="k1,k2")

        self.assertEqual(authenticate_request("k2", None), {"auth_type": "api_key"})
        with self.assertRaises(SecurityViolation) as ctx:
            authenticate_request("wrong", None)
        self.assertEqual(ctx.exception.code, SecurityViolation.NOT_AUTHENTICATED)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_jwt_auth(self):
        self.patch_env(ADMIN_API_KEY="admin-key", JWT_SECRET="jwt-secret")
        token = jwt.encode({"sub": "admin"}, "jwt-secret", algorithm="HS256")

        result = authenticate_request(None, f"Bearer {token}")

        self.assertEqual(result["auth_type"], "jwt")
        self.assertEqual(result["payload"]["sub"], "admin")

    def test_invalid_jwt(self):
        self.patch_env(JWT_SECRET="jwt-secret")
        token = jwt.encode({"sub": "admin"}, "other-secret", algorithm="HS256")

        with self.assertRaises(SecurityViolation) as ctx:
            authenticate_request(None, f"Bearer {token}")
        self.assertEqual(ctx.exception.message, "Invalid JWT")

    def test_open_when_nothing_configured(self):
        self.patch_env(ADMIN_API_KEY="", API_KEYS="", JWT_SECRET="", JWT_REQUIRED="false")

        self.assertIsNone(authenticate_request(None, None))


if __name__ == "__main__":
    unittest.main()
