import unittest

from quicklaunch.models import ScanSource, WorkingApplication
from quicklaunch.reconciler import Reconciler, plan_reconciliation
from quicklaunch.store import ApplicationStore, Database

NOW = 1_700_000_000


def _app(name: str) -> WorkingApplication:
    path = f"C:\\Apps\\{name}.exe"
    return WorkingApplication(app_id=path, name=name, path=path)


class PlanReconciliationTests(unittest.TestCase):
    def test_diff(self) -> None:
        plan = plan_reconciliation(
            [_app("A"), _app("B"), _app("C")],
            ["C:\\Apps\\B.exe", "C:\\Apps\\Gone.exe"],
        )
        self.assertEqual([app.name for app in plan.new], ["A", "C"])
        self.assertEqual(plan.deleted, ["C:\\Apps\\Gone.exe"])
        self.assertFalse(plan.is_empty)

    def test_same_set_is_empty_plan(self) -> None:
        plan = plan_reconciliation([_app("A")], ["C:\\Apps\\A.exe"])
        self.assertTrue(plan.is_empty)

    def test_first_duplicate_wins(self) -> None:
        first = _app("A")
        duplicate = WorkingApplication(app_id=first.app_id, name="Other", path=first.path)
        plan = plan_reconciliation([first, duplicate], [])
        self.assertEqual(plan.new, [first])


class ReconcilerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.database = Database(":memory:")
        self.store = ApplicationStore(self.database)
        self.scanned = []
        self.reconciler = Reconciler(self.store, scanner=lambda sources: list(self.scanned))
        self.sources = [ScanSource.parse("C:\\Apps")]

    def tearDown(self) -> None:
        self.database.close()

    def _stored(self):
        return {record.app_id: record for record in self.store.get_all()}

    def test_reconcile_is_idempotent(self) -> None:
        self.scanned = [_app("A"), _app("B")]
        first = self.reconciler.run(self.sources, now=NOW)
        snapshot = self._stored()
        second = self.reconciler.run(self.sources, now=NOW + 100)
        self.assertEqual(len(first), 2)
        self.assertEqual(second, [])
        self.assertEqual(self._stored(), snapshot)

    def test_usage_survives_reconcile(self) -> None:
        self.scanned = [_app("A"), _app("B")]
        self.reconciler.run(self.sources, now=NOW)
        for _ in range(3):
            self.store.record_launch("C:\\Apps\\A.exe", now=NOW + 50)

        self.scanned = [_app("A"), _app("C")]
        new = self.reconciler.run(self.sources, now=NOW + 100)

        self.assertEqual([record.name for record in new], ["C"])
        stored = self._stored()
        self.assertEqual(set(stored), {"C:\\Apps\\A.exe", "C:\\Apps\\C.exe"})
        self.assertEqual(stored["C:\\Apps\\A.exe"].usage_count, 3)
        self.assertEqual(stored["C:\\Apps\\A.exe"].last_used, NOW + 50)
        self.assertEqual(stored["C:\\Apps\\A.exe"].added_date, NOW)
        self.assertEqual(stored["C:\\Apps\\C.exe"].usage_count, 0)
        self.assertEqual(stored["C:\\Apps\\C.exe"].added_date, NOW + 100)

    def test_empty_scan_deletes_everything(self) -> None:
        self.scanned = [_app("A"), _app("B")]
        self.reconciler.run(self.sources, now=NOW)
        self.scanned = []
        self.assertEqual(self.reconciler.run(self.sources, now=NOW), [])
        self.assertEqual(self.store.count(), 0)

    def test_duplicates_in_scan_are_stored_once(self) -> None:
        self.scanned = [_app("A"), _app("A")]
        new = self.reconciler.run(self.sources, now=NOW)
        self.assertEqual(len(new), 1)
        self.assertEqual(self.store.count(), 1)


if __name__ == "__main__":
    unittest.main()
