"""
End-to-end runs of the migration chain against a real PostgreSQL database.

Set TEST_DATABASE_URL to a throwaway database; its public schema is dropped
and recreated around every test. CI must set it: these are the only tests
that run the remap's drop / rename / restore_constraints / finalize steps
and compare the models with the migrated schema. Without it they are skipped.
"""
import os
import unittest
import uuid
from decimal import Decimal
from unittest.mock import patch

import sqlalchemy as sa
from alembic import command
from alembic.autogenerate import compare_metadata
from alembic.config import Config
from alembic.migration import MigrationContext

import models  # noqa: F401
from config.settings import normalize_database_url
from database import Base
from utils.ulid import is_valid_ulid

TEST_DATABASE_URL = normalize_database_url(os.getenv("TEST_DATABASE_URL"))
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

U1, U2 = str(uuid.uuid4()), str(uuid.uuid4())
P1, P2 = str(uuid.uuid4()), str(uuid.uuid4())
D1, D2 = str(uuid.uuid4()), str(uuid.uuid4())


@unittest.skipUnless(TEST_DATABASE_URL, "TEST_DATABASE_URL not set")
class PostgresMigrationTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = sa.create_engine(TEST_DATABASE_URL)
        self._reset_schema()
        self.env = patch.dict(os.environ, {"DATABASE_URL": TEST_DATABASE_URL})
        self.env.start()
        self.cfg = Config(os.path.join(ROOT, "alembic.ini"))
        self.cfg.set_main_option("script_location", os.path.join(ROOT, "alembic"))

    def tearDown(self):
        self.env.stop()
        self._reset_schema()
        self.engine.dispose()

    def _reset_schema(self):
        with self.engine.begin() as conn:
            conn.execute(sa.text("DROP SCHEMA public CASCADE"))
            conn.execute(sa.text("CREATE SCHEMA public"))

    def _query(self, sql, **params):
        with self.engine.connect() as conn:
            return conn.execute(sa.text(sql), params).all()

    def _columns(self, table):
        with self.engine.connect() as conn:
            return {c["name"] for c in sa.inspect(conn).get_columns(table)}

    def _enum_exists(self, name):
        return bool(self._query("SELECT 1 FROM pg_type WHERE typname = :name", name=name))


class TestRoleMigration(PostgresMigrationTestCase):
    def test_upgrade_then_downgrade_removes_column_and_type(self):
        command.upgrade(self.cfg, "8a41c2e9d3f5")
        self.assertIn("role", self._columns("users"))
        self.assertTrue(self._enum_exists("enum_users_role"))

        command.downgrade(self.cfg, "3f0c9a1d2b7e")

        self.assertNotIn("role", self._columns("users"))
        self.assertFalse(self._enum_exists("enum_users_role"))


class TestDataMigrations(PostgresMigrationTestCase):
    def setUp(self):
        super().setUp()
        command.upgrade(self.cfg, "d19f6a3b8e02")
        with self.engine.begin() as conn:
            conn.execute(
                sa.text(
                    'INSERT INTO users (id, email, username, password, "firstName", "lastName", '
                    '"createdAt", "updatedAt") VALUES '
                    "(:u1, 'ana@example.com', 'ana', 'x', 'Ana', 'Lim', now() - interval '2 days', now()), "
                    "(:u2, 'budi@example.com', 'budi', 'x', 'Budi', 'Santoso', now() - interval '1 day', now())"
                ),
                {"u1": U1, "u2": U2},
            )
            conn.execute(
                sa.text(
                    'INSERT INTO projects (id, title, description, "targetAmount", "currentAmount", '
                    '"startDate", "endDate", "fundraiserId", "createdAt", "updatedAt") VALUES '
                    "(:p1, 'Clean water', 'Wells', 50000, 1200.50, now(), now() + interval '30 days', :u1, now(), now()), "
                    "(:p2, 'School roof', 'Roof', 200000000, 0, now(), now() + interval '30 days', :u2, now(), now())"
                ),
                {"p1": P1, "p2": P2, "u1": U1, "u2": U2},
            )
            conn.execute(
                sa.text(
                    'INSERT INTO donations (id, amount, "projectId", "userId", "createdAt", "updatedAt") VALUES '
                    "(:d1, 25.00, :p1, :u2, now(), now()), "
                    "(:d2, 500000, :p2, NULL, now(), now())"
                ),
                {"d1": D1, "d2": D2, "p1": P1, "p2": P2, "u2": U2},
            )

    def _snapshot(self):
        """Rows keyed by a non-identifier field, with references resolved to those fields."""
        users = self._query('SELECT email, username, "firstName" FROM users ORDER BY email')
        projects = self._query(
            'SELECT p.title, u.email, p."targetAmount", p."currentAmount" '
            'FROM projects p JOIN users u ON u.id = p."fundraiserId" ORDER BY p.title'
        )
        donations = self._query(
            'SELECT d.amount, p.title, u.email FROM donations d '
            'JOIN projects p ON p.id = d."projectId" '
            'LEFT JOIN users u ON u.id = d."userId" ORDER BY d.amount'
        )
        return users, projects, donations

    def test_currency_scaled_to_idr(self):
        command.upgrade(self.cfg, "e5b80c4d7a61")

        rows = dict(
            (title, (target, current))
            for title, target, current in self._query(
                'SELECT title, "targetAmount", "currentAmount" FROM projects'
            )
        )
        self.assertEqual(rows["Clean water"], (Decimal("750000000"), Decimal("18007500")))
        self.assertEqual(rows["School roof"], (Decimal("200000000"), Decimal("0")))

        amounts = sorted(a for (a,) in self._query("SELECT amount FROM donations"))
        self.assertEqual(amounts, [Decimal("375000"), Decimal("500000")])

    def test_ulid_remap_preserves_rows_and_references(self):
        command.upgrade(self.cfg, "e5b80c4d7a61")
        before = self._snapshot()

        command.upgrade(self.cfg, "f2a7d9e1c4b3")

        self.assertEqual(self._snapshot(), before)
        ids = [i for (i,) in self._query(
            "SELECT id FROM users UNION ALL SELECT id FROM projects UNION ALL SELECT id FROM donations"
        )]
        self.assertEqual(len(ids), 6)
        self.assertEqual(len(set(ids)), 6)
        self.assertTrue(all(is_valid_ulid(i) for i in ids))

        archived = dict(
            ((table, old), new)
            for table, old, new in self._query(
                "SELECT table_name, old_id, new_id FROM identifier_remap_archive"
            )
        )
        self.assertEqual(self._query('SELECT "fundraiserId" FROM projects WHERE title = :t', t="Clean water")[0][0],
                         archived[("users", U1)])
        self.assertEqual(self._query("SELECT id FROM donations WHERE amount = 500000")[0][0],
                         archived[("donations", D2)])

        orphans = self._query(
            'SELECT count(*) FROM donations d LEFT JOIN projects p ON p.id = d."projectId" WHERE p.id IS NULL'
        )
        self.assertEqual(orphans[0][0], 0)

        # older user, smaller identifier
        self.assertLess(archived[("users", U1)], archived[("users", U2)])

    def test_remap_restores_constraints(self):
        command.upgrade(self.cfg, "f2a7d9e1c4b3")

        with self.engine.connect() as conn:
            inspector = sa.inspect(conn)
            fks = {fk["name"]: fk for fk in inspector.get_foreign_keys("donations")}
            pk = inspector.get_pk_constraint("users")
            user_id = next(c for c in inspector.get_columns("donations") if c["name"] == "userId")

        self.assertEqual(pk["constrained_columns"], ["id"])
        self.assertEqual(fks["donations_userId_fkey"]["options"].get("ondelete"), "SET NULL")
        self.assertEqual(fks["donations_projectId_fkey"]["referred_table"], "projects")
        self.assertTrue(user_id["nullable"])
        self.assertFalse(self._query("SELECT to_regclass('identifier_remap_journal')")[0][0])

    def test_donation_defaults_to_pending(self):
        command.upgrade(self.cfg, "head")
        project_id = self._query("SELECT id FROM projects WHERE title = 'School roof'")[0][0]

        with self.engine.begin() as conn:
            conn.execute(
                sa.text(
                    'INSERT INTO donations (id, amount, "projectId", "createdAt", "updatedAt") '
                    "VALUES ('01K3XH5T7A0000000000000000', 100000, :p, now(), now())"
                ),
                {"p": project_id},
            )

        status = self._query(
            "SELECT payment_status FROM donations WHERE id = '01K3XH5T7A0000000000000000'"
        )[0][0]
        self.assertEqual(status, "PENDING")

    def test_downgrade_restores_original_uuids(self):
        command.upgrade(self.cfg, "head")
        command.downgrade(self.cfg, "e5b80c4d7a61")

        user_ids = {i for (i,) in self._query("SELECT CAST(id AS VARCHAR) FROM users")}
        self.assertEqual(user_ids, {U1, U2})
        donation = self._query(
            'SELECT CAST("projectId" AS VARCHAR), CAST("userId" AS VARCHAR) FROM donations '
            "WHERE CAST(id AS VARCHAR) = :d",
            d=D1,
        )
        self.assertEqual(donation, [(P1, U2)])
        self.assertFalse(self._query("SELECT to_regclass('identifier_remap_archive')")[0][0])
        self.assertFalse(self._enum_exists("enum_payments_status"))
        self.assertFalse(self._enum_exists("enum_withdrawals_status"))


class TestModelsMatchHead(PostgresMigrationTestCase):
    def test_no_autogenerate_drift_at_head(self):
        command.upgrade(self.cfg, "head")

        with self.engine.connect() as conn:
            context = MigrationContext.configure(conn, opts={"compare_type": True})
            diff = compare_metadata(context, Base.metadata)

        self.assertEqual(diff, [])


if __name__ == "__main__":
    unittest.main()
