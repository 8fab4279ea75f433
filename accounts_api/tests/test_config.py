import unittest
from unittest.mock import patch

from pydantic import ValidationError

from accounts_api.config import DEFAULT_LIST_LIMIT, DEFAULT_MAX_BODY_BYTES, Settings

SERVICE_JSON = '{"type": "service_account", "project_id": "demo"}'


class SettingsTests(unittest.TestCase):
    def test_reads_environment(self):
        env = {
            "DATABASE_URL": "postgres://user:pw@db.example.com/accounts",
            "FIREBASE_SERVICE_JSON": SERVICE_JSON,
            "FRONTEND_ORIGIN": "https://example.github.io",
            "PORT": "9000",
            "ACCOUNTS_LIST_LIMIT": "3000",
        }
        with patch.dict("os.environ", env, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(
            settings.database_url,
            "postgresql+psycopg2://user:pw@db.example.com/accounts",
        )
        self.assertEqual(settings.firebase_credentials["project_id"], "demo")
        self.assertEqual(settings.allowed_origins, ["https://example.github.io"])
        self.assertEqual(settings.port, 9000)
        self.assertEqual(settings.list_limit, 3000)
        self.assertEqual(settings.max_body_bytes, DEFAULT_MAX_BODY_BYTES)

    def test_defaults(self):
        settings = Settings(
            _env_file=None,
            database_url="sqlite+pysqlite:///:memory:",
            firebase_service_json=SERVICE_JSON,
        )
        self.assertEqual(settings.database_url, "sqlite+pysqlite:///:memory:")
        self.assertEqual(settings.list_limit, DEFAULT_LIST_LIMIT)
        self.assertEqual(settings.allowed_origins, ["*"])
        self.assertEqual(settings.port, 8080)

    def test_missing_firebase_credentials_fail_fast(self):
        with patch.dict("os.environ", {"DATABASE_URL": "sqlite://"}, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)

    def test_service_json_must_be_an_object(self):
        for bad in ["not json", "[1, 2]"]:
            with self.assertRaises(ValidationError):
                Settings(
                    _env_file=None,
                    database_url="sqlite://",
                    firebase_service_json=bad,
                )

    def test_database_url_required_unless_in_memory(self):
        with patch.dict("os.environ", {}, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None, firebase_service_json=SERVICE_JSON)
            settings = Settings(
                _env_file=None,
                firebase_service_json=SERVICE_JSON,
                use_in_memory_backends=True,
            )
        self.assertIsNone(settings.database_url)


if __name__ == "__main__":
    unittest.main()
