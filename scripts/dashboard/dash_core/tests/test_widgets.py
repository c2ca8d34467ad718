from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from dash_core.effects import Batch, Tick, flatten, run_sync  # noqa: E402
from dash_core.errors import InvalidDimension, TaskServiceError  # noqa: E402
from dash_core.models import EffectFailed, KeyEvent, PanelData, ResizeEvent, Task, TickEvent  # noqa: E402
from dash_core.styles import StyleCache  # noqa: E402
from dash_core.widgets import BaseWidget, Widget  # noqa: E402
from dash_core.widgets.sysinfo import SystemInfoWidget  # noqa: E402
from dash_core.widgets.tasks import HELP_LINE, TaskListWidget  # noqa: E402


def sample(cpu=42.0, memory=50.0, disk=75.0, errors=None) -> PanelData:
    return PanelData(
        key="sysinfo",
        title="System Information",
        status="warn" if errors else "ok",
        meta={"cpu": cpu, "memory": memory, "disk": disk},
        errors=errors or [],
    )


class FakeTaskClient:
    def __init__(self, tasks=None, fail=None):
        self.tasks = list(tasks or [])
        self.fail = fail
        self.calls = []

    def list_tasks(self):
        self.calls.append(("list",))
        if self.fail:
            raise TaskServiceError(self.fail)
        return list(self.tasks)

    def create_task(self, title, description=""):
        self.calls.append(("create", title))
        task = Task(id=str(len(self.tasks) + 1), title=title)
        self.tasks.append(task)
        return task

    def update_task(self, task_id, title, description="", completed_at=None):
        self.calls.append(("update", task_id, completed_at))
        return Task(id=task_id, title=title, completed_at=completed_at)

    def delete_task(self, task_id):
        self.calls.append(("delete", task_id))
        self.tasks = [task for task in self.tasks if task.id != task_id]


class BaseWidgetTests(unittest.TestCase):
    def test_satisfies_widget_protocol(self):
        self.assertIsInstance(BaseWidget(), Widget)
        self.assertIsInstance(SystemInfoWidget(sampler=sample), Widget)

    def test_negative_size_rejected(self):
        widget = BaseWidget()
        with self.assertRaises(InvalidDimension):
            widget.set_size(-1, 5)
        self.assertEqual(widget.dimensions, (0, 0))

    def test_focus_is_idempotent(self):
        widget = BaseWidget()
        widget.focus()
        widget.focus()
        self.assertTrue(widget.is_focused)
        widget.blur()
        widget.blur()
        self.assertFalse(widget.is_focused)

    def test_resize_event_sets_size(self):
        widget = BaseWidget()
        widget.handle_event(ResizeEvent(30, 7))
        self.assertEqual(widget.dimensions, (30, 7))


class SystemInfoWidgetTests(unittest.TestCase):
    def test_init_samples_and_schedules_tick(self):
        widget = SystemInfoWidget(interval=3, sampler=sample)
        effects = flatten(widget.init())
        self.assertEqual(len(effects), 2)
        self.assertEqual(effects[1], Tick(3.0, TickEvent("sysinfo")))
        self.assertEqual(run_sync(widget.init()), [sample()])

    def test_sample_updates_gauges(self):
        widget = SystemInfoWidget(sampler=sample)
        widget.set_size(60, 12)
        _, effect = widget.handle_event(sample(cpu=42.0))
        self.assertIsNone(effect)
        output = widget.render()
        self.assertIn("CPU", output)
        self.assertIn("42.0%", output)
        self.assertEqual(widget.usage("disk"), 75.0)

    def test_tick_resamples(self):
        widget = SystemInfoWidget(sampler=sample)
        _, effect = widget.handle_event(TickEvent("sysinfo"))
        self.assertIsInstance(effect, Batch)
        self.assertEqual(run_sync(effect), [sample()])

    def test_ignores_other_keys(self):
        widget = SystemInfoWidget(sampler=sample)
        widget.handle_event(PanelData(key="tasks", title="Tasks"))
        _, effect = widget.handle_event(TickEvent("tasks"))
        self.assertIsNone(widget.data)
        self.assertIsNone(effect)

    def test_failed_sample_renders_error(self):
        widget = SystemInfoWidget(sampler=sample)
        widget.set_size(60, 14)
        widget.handle_event(sample(errors=["disk unavailable: gone"]))
        self.assertIn("disk unavailable", widget.render())
        widget.handle_event(EffectFailed("psutil exploded", key="sysinfo"))
        self.assertEqual(widget.data.status, "error")
        self.assertIn("psutil exploded", widget.render())

    def test_render_at_zero_size(self):
        widget = SystemInfoWidget(sampler=sample)
        widget.set_size(0, 0)
        widget.render()
        widget.handle_event(sample())
        widget.render()
        self.assertEqual(StyleCache().get_style(0, 0, False).render(widget.render()), "")


class TaskListWidgetTests(unittest.TestCase):
    def build(self, tasks=None, fail=None):
        client = FakeTaskClient(tasks, fail)
        widget = TaskListWidget(client)
        widget.set_size(60, 12)
        widget.focus()
        for event in run_sync(widget.init()):
            widget.handle_event(event)
        return widget, client

    def test_init_fetches_tasks(self):
        widget, client = self.build([Task(id="1", title="Write docs"), Task(id="2", title="Ship")])
        self.assertEqual(client.calls, [("list",)])
        self.assertEqual([task.title for task in widget.tasks], ["Write docs", "Ship"])
        self.assertEqual(widget.selected, 0)
        self.assertFalse(widget.loading)
        output = widget.render()
        self.assertIn("Write docs", output)
        self.assertIn(HELP_LINE[:10], output)

    def test_selection_moves_within_bounds(self):
        widget, _ = self.build([Task(id="1", title="a"), Task(id="2", title="b")])
        widget.handle_event(KeyEvent("up"))
        self.assertEqual(widget.selected, 0)
        widget.handle_event(KeyEvent("j"))
        widget.handle_event(KeyEvent("down"))
        self.assertEqual(widget.selected, 1)

    def test_space_toggles_selected_task(self):
        widget, client = self.build([Task(id="7", title="a")])
        _, effect = widget.handle_event(KeyEvent("space"))
        events = run_sync(effect)
        self.assertEqual(client.calls[1][0:2], ("update", "7"))
        self.assertIsNotNone(client.calls[1][2])
        self.assertEqual(events[0].key, "tasks")

    def test_delete_and_create(self):
        widget, client = self.build([Task(id="1", title="a")])
        _, effect = widget.handle_event(KeyEvent("d"))
        widget.handle_event(run_sync(effect)[0])
        self.assertEqual(widget.tasks, [])
        self.assertEqual(widget.selected, -1)
        _, effect = widget.handle_event(KeyEvent("n"))
        widget.handle_event(run_sync(effect)[0])
        self.assertEqual([task.title for task in widget.tasks], ["New Task"])

    def test_unfocused_widget_ignores_keys(self):
        widget, client = self.build([Task(id="1", title="a")])
        widget.blur()
        _, effect = widget.handle_event(KeyEvent("d"))
        self.assertIsNone(effect)
        self.assertNotIn(HELP_LINE[:10], widget.render())

    def test_service_failure_becomes_error_state(self):
        widget, _ = self.build(fail="task service unreachable: refused")
        self.assertEqual(widget.last_error, "task service unreachable: refused")
        self.assertIn("unreachable", widget.render())
        self.assertEqual(widget.to_dict()["status"], "error")

    def test_crashed_effect_clears_loading(self):
        widget, client = self.build([Task(id="1", title="a")])
        client.update_task = None
        _, effect = widget.handle_event(KeyEvent("space"))
        self.assertTrue(widget.loading)
        for event in run_sync(effect):
            widget.handle_event(event)
        self.assertFalse(widget.loading)
        self.assertIn("not callable", widget.last_error)

    def test_empty_state(self):
        widget, _ = self.build([])
        self.assertIn("No tasks", widget.render())

    def test_render_at_zero_size(self):
        widget, _ = self.build([Task(id="1", title="[bold]x")])
        widget.set_size(0, 0)
        self.assertIsInstance(widget.render(), str)


if __name__ == "__main__":
    unittest.main()
