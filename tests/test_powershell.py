import os
import subprocess
import unittest
from unittest import mock

from quicklaunch.exceptions import HelperProcessError
from quicklaunch.utils import PowerShellExecutor, escape_powershell_string, powershell_array
from quicklaunch.utils.powershell import UTF8_BOM


def _completed(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class EscapingTests(unittest.TestCase):
    def test_escape(self) -> None:
        self.assertEqual(escape_powershell_string('say "hi" to $env:USER `now`'), 'say `"hi`" to `$env:USER ``now``')

    def test_array(self) -> None:
        self.assertEqual(powershell_array(["a", "b$"]), '"a","b`$"')
        self.assertEqual(powershell_array([]), "")


class PowerShellExecutorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.executor = PowerShellExecutor(executable="powershell-test", timeout=5)
        self.seen = {}

    def _fake_run(self, result):
        def run(args, **kwargs):
            script_path = args[-1]
            with open(script_path, "rb") as f:
                self.seen["content"] = f.read()
            self.seen["args"] = args
            self.seen["kwargs"] = kwargs
            self.seen["path"] = script_path
            if isinstance(result, Exception):
                raise result
            return result
        return run

    def test_execute_writes_bom_script_and_cleans_up(self) -> None:
        with mock.patch("subprocess.run", side_effect=self._fake_run(_completed(stdout=" out \n"))):
            success, stdout, stderr = self.executor.execute("Write-Output 'é'")
        self.assertTrue(success)
        self.assertEqual(stdout, "out")
        self.assertIsNone(stderr)
        self.assertTrue(self.seen["content"].startswith(UTF8_BOM))
        self.assertIn("é".encode("utf-8"), self.seen["content"])
        self.assertEqual(self.seen["args"][0], "powershell-test")
        self.assertIn("Bypass", self.seen["args"])
        self.assertEqual(self.seen["kwargs"]["timeout"], 5)
        self.assertFalse(os.path.exists(self.seen["path"]))

    def test_execute_reports_failure(self) -> None:
        with mock.patch("subprocess.run", side_effect=self._fake_run(_completed(1, "", "bad"))):
            self.assertEqual(self.executor.execute("x"), (False, None, "bad"))

    def test_execute_timeout_does_not_raise(self) -> None:
        timeout = subprocess.TimeoutExpired(cmd="powershell-test", timeout=5)
        with mock.patch("subprocess.run", side_effect=self._fake_run(timeout)):
            success, stdout, stderr = self.executor.execute("x")
        self.assertFalse(success)
        self.assertIn("timed out", stderr)
        self.assertFalse(os.path.exists(self.seen["path"]))

    def test_missing_interpreter_does_not_raise(self) -> None:
        with mock.patch("subprocess.run", side_effect=self._fake_run(FileNotFoundError("no powershell"))):
            success, _, stderr = self.executor.execute("x")
        self.assertFalse(success)
        self.assertIn("no powershell", stderr)

    def test_run_raises_on_failure(self) -> None:
        with mock.patch.object(self.executor, "execute", return_value=(False, None, "bad")):
            with self.assertRaises(HelperProcessError):
                self.executor.run("x")

    def test_run_json(self) -> None:
        with mock.patch.object(self.executor, "execute", return_value=(True, '[{"a": 1}]', None)):
            self.assertEqual(self.executor.run_json("x"), [{"a": 1}])

    def test_run_json_rejects_bad_output(self) -> None:
        with mock.patch.object(self.executor, "execute", return_value=(True, None, None)):
            with self.assertRaises(HelperProcessError):
                self.executor.run_json("x")
        with mock.patch.object(self.executor, "execute", return_value=(True, "{not json", None)):
            with self.assertRaises(HelperProcessError):
                self.executor.run_json("x")


if __name__ == "__main__":
    unittest.main()
