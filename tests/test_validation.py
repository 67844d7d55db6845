import unittest

from app.core.errors import ValidationFailed
from app.core.validation import require_valid, validate_data
from app.schemas import (
    BackupConfigUpdate,
    BackupRequest,
    IssuanceCreate,
    ProductCreate,
    SettingsUpdate,
    StockEntryCreate,
    UserCreate,
)

VALID_PRODUCT = {
    "name": "LaserJet Pro",
    "brand": "HP",
    "model": "M404",
    "category": "Printers",
    "stock": 4,
    "min_stock": 1,
}

VALID_SETTINGS = {
    "system_name": "ITMCO",
    "company_name": "ITMCO Trading",
    "company_email": "info@itmco.example",
    "company_phone": "+966 11 000 0000",
    "company_address": "Riyadh",
    "low_stock_threshold": 5,
    "session_timeout": 30,
    "password_expiry": 90,
    "max_login_attempts": 5,
    "backup_retention": 30,
}


class ValidateDataTest(unittest.TestCase):
    def test_valid_product(self):
        result = validate_data(ProductCreate, VALID_PRODUCT)

        self.assertTrue(result.success)
        self.assertEqual(result.data.stock, 4)
        self.assertEqual(result.errors, [])

    def test_negative_stock_is_reported_by_field(self):
        result = validate_data(ProductCreate, {**VALID_PRODUCT, "stock": -1})

        self.assertFalse(result.success)
        self.assertIsNone(result.data)
        self.assertEqual(len(result.errors), 1)
        self.assertTrue(result.errors[0].startswith("stock:"))

    def test_missing_fields_are_all_reported(self):
        result = validate_data(ProductCreate, {"name": "Toner"})

        self.assertFalse(result.success)
        fields = {error.split(":")[0] for error in result.errors}
        self.assertEqual(fields, {"brand", "model", "category", "stock", "min_stock"})

    def test_none_data(self):
        result = validate_data(ProductCreate, None)

        self.assertFalse(result.success)
        self.assertEqual(result.errors, ["Data is required"])

    def test_schema_must_be_a_model(self):
        with self.assertRaises(TypeError):
            validate_data(dict, VALID_PRODUCT)
        with self.assertRaises(TypeError):
            validate_data(None, VALID_PRODUCT)

    def test_user_email_and_role(self):
        user = {"name": "Sara", "email": "sara@itmco.example", "role": "engineer", "is_active": True}

        self.assertTrue(validate_data(UserCreate, user).success)
        bad_email = validate_data(UserCreate, {**user, "email": "sara-at-itmco"})
        self.assertFalse(bad_email.success)
        self.assertTrue(bad_email.errors[0].startswith("email:"))
        self.assertFalse(validate_data(UserCreate, {**user, "role": "owner"}).success)
        self.assertFalse(validate_data(UserCreate, {**user, "password": "short"}).success)

    def test_issuance_quantity_must_be_positive(self):
        issuance = {
            "product_id": 1,
            "quantity": 0,
            "customer_name": "Acme",
            "branch": "Riyadh HQ",
            "engineer": "Omar",
        }

        self.assertFalse(validate_data(IssuanceCreate, issuance).success)
        self.assertTrue(validate_data(IssuanceCreate, {**issuance, "quantity": 2}).success)

    def test_settings_bounds(self):
        self.assertTrue(validate_data(SettingsUpdate, VALID_SETTINGS).success)
        for field, value in (
            ("session_timeout", 4),
            ("session_timeout", 481),
            ("password_expiry", 29),
            ("max_login_attempts", 11),
            ("backup_retention", 6),
            ("low_stock_threshold", 0),
            ("company_email", "not-an-email"),
        ):
            with self.subTest(field=field, value=value):
                result = validate_data(SettingsUpdate, {**VALID_SETTINGS, field: value})
                self.assertFalse(result.success)

    def test_stock_entry_quantity(self):
        self.assertFalse(validate_data(StockEntryCreate, {"quantity_added": 0, "entered_by": "x"}).success)
        self.assertFalse(validate_data(StockEntryCreate, {"quantity_added": 3, "entered_by": "  "}).success)
        self.assertTrue(validate_data(StockEntryCreate, {"quantity_added": 3, "entered_by": "x"}).success)

    def test_backup_request_defaults(self):
        request = validate_data(BackupRequest, {}).data

        self.assertEqual(request.type, "full")
        self.assertIsNone(request.tables)
        self.assertFalse(validate_data(BackupRequest, {"type": "auto"}).success)
        self.assertFalse(validate_data(BackupConfigUpdate, {"backup_frequency": "monthly"}).success)


class RequireValidTest(unittest.TestCase):
    def test_raises_with_errors(self):
        with self.assertRaises(ValidationFailed) as ctx:
            require_valid(ProductCreate, {**VALID_PRODUCT, "min_stock": -2})

        self.assertEqual(ctx.exception.status_code, 400)
        self.assertTrue(ctx.exception.errors[0].startswith("min_stock:"))

    def test_returns_model(self):
        self.assertEqual(require_valid(ProductCreate, VALID_PRODUCT).name, "LaserJet Pro")


if __name__ == "__main__":
    unittest.main()
