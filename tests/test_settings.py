import os
import unittest
from unittest.mock import patch

from sqlalchemy.engine import make_url

from config.settings import database_url, normalize_database_url


class TestDatabaseUrl(unittest.TestCase):
    def test_bare_postgres_urls_use_psycopg2(self):
        for raw in ("postgresql://u:p@db:5432/crowdfund", "postgres://u:p@db:5432/crowdfund"):
            with self.subTest(url=raw):
                url = normalize_database_url(raw)
                self.assertEqual(url, "postgresql+psycopg2://u:p@db:5432/crowdfund")
                self.assertEqual(make_url(url).get_dialect().driver, "psycopg2")

    def test_explicit_driver_and_other_backends_untouched(self):
        for raw in ("postgresql+psycopg://u@db/crowdfund", "sqlite://", None, ""):
            with self.subTest(url=raw):
                self.assertEqual(normalize_database_url(raw), raw)

    def test_reads_environment_at_call_time(self):
        with patch.dict(os.environ, {"DATABASE_URL": "postgresql://u@db/crowdfund"}):
            self.assertEqual(database_url(), "postgresql+psycopg2://u@db/crowdfund")

    def test_alembic_ini_placeholder_pins_driver(self):
        ini = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")
        with open(ini) as fh:
            lines = [line for line in fh if line.startswith("sqlalchemy.url")]
        self.assertEqual(len(lines), 1)
        self.assertIn("postgresql+psycopg2://", lines[0])


if __name__ == "__main__":
    unittest.main()
