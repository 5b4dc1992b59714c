import os
import tempfile
import unittest

from quicklaunch.exceptions import HelperProcessError
from quicklaunch.icons import IconGenerator
from quicklaunch.identity import icon_key
from quicklaunch.models import ApplicationRecord


class RecordingExecutor:
    def __init__(self, error: Exception = None):
        self.error = error
        self.scripts = []

    def run(self, script: str) -> str:
        self.scripts.append(script)
        if self.error is not None:
            raise self.error
        return ""


RECORDS = [
    ApplicationRecord(app_id="C:\\Apps\\Paint.exe", name="Paint", path="C:\\Apps\\Paint.exe"),
    ApplicationRecord(
        app_id="Microsoft.WindowsCalculator_8wekyb3d8bbwe!App",
        name="Calculator",
        path="Microsoft.WindowsCalculator_11.2307.4.0_x64__8wekyb3d8bbwe",
    ),
]


class IconGeneratorTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.icon_dir = os.path.join(self._tmp.name, "icons")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_nothing_to_do(self) -> None:
        executor = RecordingExecutor()
        self.assertTrue(IconGenerator(self.icon_dir, executor).generate([]))
        self.assertEqual(executor.scripts, [])

    def test_script_lists_sources_and_targets(self) -> None:
        script = IconGenerator(self.icon_dir, RecordingExecutor()).build_script(RECORDS)
        self.assertIn('"C:\\Apps\\Paint.exe"', script)
        # store apps are looked up by package name
        self.assertIn('"Microsoft.WindowsCalculator"', script)
        self.assertNotIn("x64__8wekyb3d8bbwe", script)
        for record in RECORDS:
            self.assertIn(icon_key(record.app_id), script)
        self.assertNotIn("{SOURCE_ARR}", script)
        self.assertNotIn("{OUTPUT_ARR}", script)

    def test_generate_creates_icon_dir(self) -> None:
        executor = RecordingExecutor()
        self.assertTrue(IconGenerator(self.icon_dir, executor).generate(RECORDS))
        self.assertTrue(os.path.isdir(self.icon_dir))
        self.assertEqual(len(executor.scripts), 1)

    def test_helper_failure_is_not_fatal(self) -> None:
        executor = RecordingExecutor(error=HelperProcessError("boom"))
        self.assertFalse(IconGenerator(self.icon_dir, executor).generate(RECORDS))


if __name__ == "__main__":
    unittest.main()
