from __future__ import annotations

import io
import json
import logging
import tempfile
import unittest
from contextlib import redirect_stderr
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from dash_core.app import build_dashboard, main  # noqa: E402
from dash_core.errors import InitializationFailure  # noqa: E402
from dash_core.logsetup import ROOT_LOGGER, JsonFormatter, configure_logging  # noqa: E402
from dash_core.profiles import resolve_profile  # noqa: E402
from dash_core.settings import Settings, env_flag  # noqa: E402
from dash_core.styles import Theme  # noqa: E402
from dash_core.widgets.sysinfo import SystemInfoWidget  # noqa: E402
from dash_core.widgets.tasks import TaskListWidget  # noqa: E402


class BuildTests(unittest.TestCase):
    def test_core_profile_builds_two_widgets(self):
        dashboard = build_dashboard(resolve_profile("core"), Settings(), Theme(), logging.getLogger("test"))
        widgets = [entry.widget for entry in dashboard.container.entries]
        self.assertIsInstance(widgets[0], SystemInfoWidget)
        self.assertIsInstance(widgets[1], TaskListWidget)
        self.assertTrue(widgets[0].is_focused)
        self.assertEqual((dashboard.container.rows, dashboard.container.cols), (2, 2))


class MainTests(unittest.TestCase):
    def run_main(self, *argv: str) -> tuple[int, str]:
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = main(list(argv))
        return code, stderr.getvalue()

    def tearDown(self):
        logger = logging.getLogger(ROOT_LOGGER)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_unknown_profile_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            code, err = self.run_main("--profile", "bogus", "--log-file", str(Path(tmp) / "d.log"))
        self.assertEqual(code, 1)
        self.assertIn("unknown profile", err)

    def test_unwritable_log_path_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "file"
            blocker.write_text("x")
            code, err = self.run_main("--log-file", str(blocker / "d.log"))
        self.assertEqual(code, 1)
        self.assertIn("cannot open log file", err)

    def test_unknown_log_level_fails(self):
        code, err = self.run_main("--log-level", "chatty")
        self.assertEqual(code, 1)
        self.assertIn("unknown log level", err)


class LoggingTests(unittest.TestCase):
    def tearDown(self):
        logger = logging.getLogger(ROOT_LOGGER)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_json_formatter_merges_fields(self):
        record = logging.LogRecord("dash_core.container", logging.INFO, __file__, 10, "resize", None, None)
        record.fields = {"width": 80, "msg": "ignored"}
        payload = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["msg"], "resize")
        self.assertEqual(payload["width"], 80)
        self.assertEqual(payload["level"], "INFO")

    def test_configure_logging_writes_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "logs" / "d.log"
            logger = configure_logging(Settings(log_file=str(path), log_level="warn"))
            logger.getChild("widgets").info("hidden")
            logger.getChild("widgets").warning("shown", extra={"fields": {"widget": "tasks"}})
            for handler in logger.handlers:
                handler.flush()
            lines = path.read_text().splitlines()
        self.assertEqual(len(lines), 1)
        self.assertEqual(json.loads(lines[0])["widget"], "tasks")

    def test_bad_log_path_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "file"
            blocker.write_text("x")
            with self.assertRaises(InitializationFailure):
                configure_logging(Settings(log_file=str(blocker / "d.log")))


class SettingsTests(unittest.TestCase):
    def test_env_flag(self):
        self.assertTrue(env_flag("DASH_DEBUG", {"DASH_DEBUG": "yes"}))
        self.assertFalse(env_flag("DASH_DEBUG", {"DASH_DEBUG": "0"}))
        self.assertFalse(env_flag("DASH_DEBUG", {}))


if __name__ == "__main__":
    unittest.main()
