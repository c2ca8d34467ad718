from __future__ import annotations

import os
import queue
import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from dash_core.effects import QUIT, Batch, Tick, batch, flatten, keyed, run_sync, wants_quit  # noqa: E402
from dash_core.models import EffectFailed, KeyEvent, TickEvent  # noqa: E402
from dash_core.runtime import EffectRunner, TerminalKeys, drain, key_name, utf8_length  # noqa: E402


def boom():
    raise RuntimeError("kaput")


class EffectTests(unittest.TestCase):
    def test_batch_collapses(self):
        self.assertIsNone(batch(None, None))
        self.assertEqual(batch(None, QUIT), QUIT)
        self.assertIsInstance(batch(QUIT, QUIT), Batch)

    def test_flatten_nested(self):
        nested = Batch((Batch((1, 2)), 3))
        self.assertEqual(flatten(nested), [1, 2, 3])
        self.assertEqual(flatten(None), [])

    def test_wants_quit(self):
        self.assertTrue(wants_quit(batch(lambda: None, QUIT)))
        self.assertFalse(wants_quit(lambda: None))

    def test_run_sync_drops_ticks(self):
        effect = batch(lambda: "one", Tick(5, "later"), lambda: None, lambda: "two")
        self.assertEqual(run_sync(effect), ["one", "two"])

    def test_exception_becomes_failure_event(self):
        self.assertEqual(run_sync(boom), [EffectFailed("kaput")])

    def test_keyed_failure_carries_key(self):
        self.assertEqual(run_sync(keyed("tasks", boom)), [EffectFailed("kaput", key="tasks")])
        self.assertEqual(run_sync(keyed("tasks", str.upper, "ok")), ["OK"])


class EffectRunnerTests(unittest.TestCase):
    def setUp(self):
        self.runner = EffectRunner(max_workers=2)
        self.addCleanup(self.runner.shutdown)

    def test_callable_result_is_queued(self):
        self.runner.submit(lambda: "done")
        self.assertEqual(self.runner.events.get(timeout=2), "done")

    def test_tick_posts_event_after_delay(self):
        self.runner.submit(Tick(0.01, TickEvent("sysinfo")))
        self.assertEqual(self.runner.events.get(timeout=2), TickEvent("sysinfo"))

    def test_failure_is_queued(self):
        self.runner.submit(boom)
        self.assertIsInstance(self.runner.events.get(timeout=2), EffectFailed)

    def test_nothing_runs_after_shutdown(self):
        self.runner.shutdown()
        self.runner.submit(lambda: "late")
        with self.assertRaises(queue.Empty):
            self.runner.events.get(timeout=0.05)


class RecordingDashboard:
    def __init__(self, quit_on=None):
        self.seen = []
        self.quit_on = quit_on

    def handle_event(self, event):
        self.seen.append(event)
        if event == self.quit_on:
            return self, QUIT
        return self, None


class DrainTests(unittest.TestCase):
    def test_dispatches_in_arrival_order(self):
        events = queue.Queue()
        for key in ("a", "b", "c"):
            events.put(KeyEvent(key))
        dashboard = RecordingDashboard()
        runner = EffectRunner(events=events)
        self.addCleanup(runner.shutdown)
        self.assertEqual(drain(dashboard, events, runner), (True, False))
        self.assertEqual([e.key for e in dashboard.seen], ["a", "b", "c"])
        self.assertEqual(drain(dashboard, events, runner), (False, False))

    def test_stops_on_quit(self):
        events = queue.Queue()
        events.put(KeyEvent("q"))
        events.put(KeyEvent("x"))
        dashboard = RecordingDashboard(quit_on=KeyEvent("q"))
        runner = EffectRunner(events=events)
        self.addCleanup(runner.shutdown)
        self.assertEqual(drain(dashboard, events, runner), (True, True))
        self.assertEqual(dashboard.seen, [KeyEvent("q")])


class TerminalKeysTests(unittest.TestCase):
    def keys_for(self, payload: bytes) -> TerminalKeys:
        read_fd, write_fd = os.pipe()
        stream = os.fdopen(read_fd, "rb", buffering=0)
        self.addCleanup(stream.close)
        os.write(write_fd, payload)
        os.close(write_fd)
        return TerminalKeys(stream)

    def test_multibyte_key_decoded_once(self):
        keys = self.keys_for("é€".encode("utf-8"))
        self.assertEqual(keys.read(0.1), "é")
        self.assertEqual(keys.read(0.1), "€")

    def test_escape_sequence_and_plain_key(self):
        keys = self.keys_for(b"\x1b[Aq")
        self.assertEqual(keys.read(0.1), "up")
        self.assertEqual(keys.read(0.1), "q")

    def test_utf8_length(self):
        self.assertEqual(utf8_length(ord("a")), 1)
        self.assertEqual(utf8_length("é".encode("utf-8")[0]), 2)
        self.assertEqual(utf8_length("€".encode("utf-8")[0]), 3)
        self.assertEqual(utf8_length("😀".encode("utf-8")[0]), 4)


class KeyNameTests(unittest.TestCase):
    def test_names(self):
        self.assertEqual(key_name("\x1b[A"), "up")
        self.assertEqual(key_name("\x1b[Z"), "shift+tab")
        self.assertEqual(key_name("\t"), "tab")
        self.assertEqual(key_name(" "), "space")
        self.assertEqual(key_name("\x03"), "ctrl+c")
        self.assertEqual(key_name("q"), "q")


if __name__ == "__main__":
    unittest.main()
