import os
import sqlite3
import tempfile
import types
import unittest
from unittest import mock

from quicklaunch.exceptions import StoreError
from quicklaunch.models import WorkingApplication
from quicklaunch.reconciler import plan_reconciliation
from quicklaunch.store import (
    SCHEMA_VERSION,
    STATE_KEY_LAST_APPLICATION_SEARCH_TIME,
    ApplicationStore,
    Database,
    StateStore,
    open_stores,
)

NOW = 1_700_000_000


def _app(name: str) -> WorkingApplication:
    path = f"C:\\Apps\\{name}.exe"
    return WorkingApplication(app_id=path, name=name, path=path)


class DatabaseTests(unittest.TestCase):
    def test_new_database_is_migrated(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "nested", "apps.db")
            with Database(path) as database:
                self.assertEqual(database.version, SCHEMA_VERSION)
                tables = {
                    row[0]
                    for row in database.connection.execute(
                        "SELECT name FROM sqlite_master WHERE type = 'table'"
                    )
                }
            self.assertTrue(os.path.exists(path))
        self.assertIn("applications", tables)
        self.assertIn("app_state", tables)

    def test_reopen_keeps_data(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "apps.db")
            with Database(path) as database:
                ApplicationStore(database).reconcile([_app("Paint")], now=NOW)
            with Database(path) as database:
                self.assertEqual(database.version, SCHEMA_VERSION)
                self.assertEqual(ApplicationStore(database).count(), 1)

    def test_unopenable_path_raises_store_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(StoreError):
                # a directory cannot be opened as a database file
                Database(tmp)

    def test_failed_migration_closes_connection(self) -> None:
        connection = mock.Mock()
        with mock.patch("quicklaunch.store.database.sqlite3.connect", return_value=connection), \
                mock.patch.object(Database, "migrate", side_effect=StoreError("migrate database: locked")):
            with self.assertRaises(StoreError):
                Database(":memory:")
        connection.close.assert_called_once_with()


class ApplicationStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.database = Database(":memory:")
        self.store = ApplicationStore(self.database)

    def tearDown(self) -> None:
        self.database.close()

    def test_reconcile_inserts_with_zero_usage(self) -> None:
        new = self.store.reconcile([_app("Paint"), _app("Calculator")], now=NOW)
        self.assertEqual([record.name for record in new], ["Paint", "Calculator"])
        records = self.store.get_all()
        self.assertEqual([record.name for record in records], ["Calculator", "Paint"])
        for record in records:
            self.assertEqual(record.usage_count, 0)
            self.assertIsNone(record.last_used)
            self.assertEqual(record.added_date, NOW)

    def test_get_and_count(self) -> None:
        self.store.reconcile([_app("Paint")], now=NOW)
        self.assertEqual(self.store.count(), 1)
        self.assertEqual(self.store.get("C:\\Apps\\Paint.exe").name, "Paint")
        self.assertIsNone(self.store.get("missing"))

    def test_record_launch_increments_usage(self) -> None:
        self.store.reconcile([_app("Paint")], now=NOW)
        self.store.record_launch("C:\\Apps\\Paint.exe", now=NOW + 10)
        self.store.record_launch("C:\\Apps\\Paint.exe", now=NOW + 20)
        record = self.store.get("C:\\Apps\\Paint.exe")
        self.assertEqual(record.usage_count, 2)
        self.assertEqual(record.last_used, NOW + 20)

    def test_record_launch_of_unknown_or_empty_id_is_noop(self) -> None:
        self.store.reconcile([_app("Paint")], now=NOW)
        self.store.record_launch("")
        self.store.record_launch("missing", now=NOW)
        self.assertEqual(self.store.get("C:\\Apps\\Paint.exe").usage_count, 0)
        self.assertEqual(self.store.count(), 1)

    def test_many_deletions_are_chunked(self) -> None:
        apps = [_app(f"App{n}") for n in range(1200)]
        self.store.reconcile(apps, now=NOW)
        self.assertEqual(self.store.count(), 1200)
        self.store.reconcile([], now=NOW)
        self.assertEqual(self.store.count(), 0)

    def test_reconcile_streams_stored_identities(self) -> None:
        self.store.reconcile([_app("Paint"), _app("Calculator")], now=NOW)
        with mock.patch(
            "quicklaunch.store.applications.plan_reconciliation", wraps=plan_reconciliation
        ) as planner:
            new = self.store.reconcile([_app("Paint"), _app("Notepad")], now=NOW)
        persisted_ids = planner.call_args[0][1]
        self.assertIsInstance(persisted_ids, types.GeneratorType)
        self.assertEqual([record.name for record in new], ["Notepad"])
        self.assertEqual(sorted(record.name for record in self.store.get_all()), ["Notepad", "Paint"])

    def test_failures_raise_store_error(self) -> None:
        self.database.connection.execute("DROP TABLE applications")
        with self.assertRaises(StoreError):
            self.store.get_all()
        with self.assertRaises(StoreError):
            self.store.reconcile([_app("Paint")])
        with self.assertRaises(StoreError):
            self.store.record_launch("C:\\Apps\\Paint.exe")


class StateStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.database = Database(":memory:")
        self.state = StateStore(self.database)

    def tearDown(self) -> None:
        self.database.close()

    def test_missing_key_returns_none(self) -> None:
        self.assertIsNone(self.state.get_state("nothing"))

    def test_save_replaces_value(self) -> None:
        self.state.save_state("k", "1", now=NOW)
        self.state.save_state("k", "2", now=NOW)
        self.assertEqual(self.state.get_state("k"), "2")

    def test_last_scan_time(self) -> None:
        self.assertEqual(self.state.get_last_scan_time(), 0)
        self.assertEqual(self.state.set_last_scan_time(NOW), NOW)
        self.assertEqual(self.state.get_last_scan_time(), NOW)
        self.assertEqual(self.state.get_state(STATE_KEY_LAST_APPLICATION_SEARCH_TIME), str(NOW))

    def test_corrupt_last_scan_time_raises(self) -> None:
        self.state.save_state(STATE_KEY_LAST_APPLICATION_SEARCH_TIME, "yesterday")
        with self.assertRaises(StoreError):
            self.state.get_last_scan_time()


class OpenStoresTests(unittest.TestCase):
    def test_stores_share_one_database(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            app_store, state_store = open_stores(os.path.join(tmp, "apps.db"))
            try:
                self.assertIs(app_store.database, state_store.database)
                self.assertIsInstance(app_store.database.connection, sqlite3.Connection)
            finally:
                app_store.database.close()


if __name__ == "__main__":
    unittest.main()
