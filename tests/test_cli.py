"""
Tests for the command-line interface.

This module tests:
- The default run (no arguments) and its exit status
- Ignoring unknown arguments
- The failure path and exit status 1
- Report and ramp output options
- Configuration errors
"""

import unittest
import sys
import io
import json
import logging
import shutil
import tempfile
from pathlib import Path
from unittest import mock

from rich.console import Console

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from srgb_compose import cli
from srgb_compose.verifier import Failure, VerificationResult, CHECK_VECTORS, EVENT_PASS, EVENT_FAIL


def _capture_console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


def _failing_result() -> VerificationResult:
    result = VerificationResult(checks_run=25)
    result.add(Failure(CHECK_VECTORS, 254, 1, 254, 251, 255, "max non-overflow"))
    return result


class CliTestCase(unittest.TestCase):
    """Swaps the CLI consoles for in-memory ones."""

    def setUp(self):
        self.out = _capture_console()
        self.err = _capture_console()
        patcher_out = mock.patch.object(cli, "console", self.out)
        patcher_err = mock.patch.object(cli, "error_console", self.err)
        patcher_out.start()
        patcher_err.start()
        self.addCleanup(patcher_out.stop)
        self.addCleanup(patcher_err.stop)
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.tmp_dir, True)

    def output(self) -> str:
        return self.out.file.getvalue()

    def run_main(self, argv):
        with self.assertRaises(SystemExit) as cm:
            cli.main(argv)
        return cm.exception.code


class TestDefaultRun(CliTestCase):
    """The real verification with no arguments."""

    def test_no_arguments_succeeds(self):
        code = self.run_main([])
        self.assertEqual(code, 0)
        text = self.output()
        self.assertIn("PASS [1]: transparent black on white: background only", text)
        self.assertIn("Property 4: monotonic in background", text)
        self.assertIn("All formula properties verified.", text)
        self.assertIn("SUCCESS: All tests passed.", text)


class TestArguments(CliTestCase):
    """Argument handling, with the verification itself stubbed out."""

    def test_unknown_arguments_ignored(self):
        with mock.patch.object(cli, "run_verification", return_value=VerificationResult()):
            code = self.run_main(["--bogus", "value", "extra"])
        self.assertEqual(code, 0)

    def test_option_prefixes_are_not_expanded(self):
        """--ver and --sum are unknown, not abbreviations of --version/--verbose and --summary."""
        summary = self.tmp_dir / "x.md"
        with mock.patch.object(cli, "run_verification", return_value=VerificationResult()) as run:
            code = self.run_main(["--ver", "--sum", str(summary)])
        self.assertEqual(code, 0)
        run.assert_called_once()
        self.assertFalse(summary.exists())
        self.assertIn("SUCCESS: All tests passed.", self.output())

    def test_bad_option_value_exits_1(self):
        with mock.patch.object(cli, "run_verification", return_value=VerificationResult()) as run:
            code = self.run_main(["--max-violations", "abc"])
        self.assertEqual(code, 1)
        run.assert_not_called()
        self.assertIn("Invalid arguments", self.err.file.getvalue())

    def test_missing_option_value_exits_1(self):
        with mock.patch.object(cli, "run_verification", return_value=VerificationResult()):
            code = self.run_main(["--summary"])
        self.assertEqual(code, 1)

    def test_failure_exit_status(self):
        with mock.patch.object(cli, "run_verification", return_value=_failing_result()):
            code = self.run_main([])
        self.assertEqual(code, 1)
        self.assertIn("FAILURE: 1 test(s) failed.", self.output())

    def test_quiet_and_exhaustive_reach_config(self):
        with mock.patch.object(cli, "run_verification", return_value=VerificationResult()) as run:
            self.run_main(["--quiet", "--exhaustive", "--max-violations", "3"])
        config = run.call_args[0][0]
        self.assertFalse(config.show_passes)
        self.assertTrue(config.exhaustive)
        self.assertEqual(config.max_violation_lines, 3)

    def test_invalid_config_exits_1(self):
        code = self.run_main(["--max-violations", "-1"])
        self.assertEqual(code, 1)
        self.assertIn("Invalid configuration", self.err.file.getvalue())

    def test_summary_and_json_written(self):
        summary = self.tmp_dir / "verify.md"
        report = self.tmp_dir / "verify.json"
        with mock.patch.object(cli, "run_verification", return_value=_failing_result()):
            code = self.run_main(["--summary", str(summary), "--json", str(report)])
        self.assertEqual(code, 1)
        self.assertIn("- **Status:** FAIL", summary.read_text(encoding='utf-8'))
        self.assertEqual(json.loads(report.read_text(encoding='utf-8'))["failure_count"], 1)

    def test_ramp_written(self):
        ramp = self.tmp_dir / "ramp.png"
        with mock.patch.object(cli, "run_verification", return_value=VerificationResult()):
            code = self.run_main(["--ramp", str(ramp), "--ramp-foreground", "200"])
        self.assertEqual(code, 0)
        self.assertTrue(ramp.exists())

    def test_invalid_ramp_foreground_exits_1(self):
        ramp = self.tmp_dir / "ramp.png"
        with mock.patch.object(cli, "run_verification", return_value=VerificationResult()):
            code = self.run_main(["--ramp", str(ramp), "--ramp-foreground", "300"])
        self.assertEqual(code, 1)
        self.assertFalse(ramp.exists())


class TestVerboseLogging(CliTestCase):
    """--verbose wires a handler onto the package logger."""

    def test_verbose_adds_handler_once(self):
        package_logger = logging.getLogger("srgb_compose")
        saved = list(package_logger.handlers)
        package_logger.handlers = []
        self.addCleanup(setattr, package_logger, "handlers", saved)
        self.addCleanup(package_logger.setLevel, package_logger.level)
        with mock.patch.object(cli, "run_verification", return_value=VerificationResult()):
            self.run_main(["--verbose"])
            self.run_main(["--verbose"])
        self.assertEqual(len(package_logger.handlers), 1)
        self.assertEqual(package_logger.level, logging.DEBUG)


class TestPrintEvent(CliTestCase):
    """Event rendering."""

    def test_markup_in_messages_is_escaped(self):
        cli.print_event(EVENT_PASS, "PASS [1]: [bold]literal[/bold] text")
        self.assertIn("PASS [1]: [bold]literal[/bold] text", self.output())

    def test_empty_message_prints_blank_line(self):
        cli.print_event(EVENT_FAIL, "")
        self.assertEqual(self.output(), "\n")


if __name__ == '__main__':
    unittest.main()
