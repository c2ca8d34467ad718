"""Task list widget backed by the remote task service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from rich.markup import escape

from dash_core.collectors import tasks as task_collector
from dash_core.collectors.tasks import TaskClient
from dash_core.effects import Effect, keyed
from dash_core.formatting import compact_relative_age, fit_line
from dash_core.models import EffectFailed, KeyEvent, PanelData, Task
from dash_core.widgets import BaseWidget, dim_line, error_lines, title_line

HELP_LINE = "↑/↓: select • space: toggle • n: new • d: delete • r: refresh"


class TaskListWidget(BaseWidget):
    key = "tasks"
    title = "Tasks"

    def __init__(self, client: TaskClient | None = None, key: str = "tasks", title: str = "Tasks"):
        super().__init__()
        self.key = key
        self.title = title
        self.client = client or TaskClient()
        self.tasks: list[Task] = []
        self.selected = -1
        self.loading = False
        self.last_error: str | None = None

    def init(self) -> Effect | None:
        return self._fetch()

    def _fetch(self) -> Effect:
        self.loading = True
        return keyed(self.key, task_collector.collect, self.client, self.key, self.title)

    @property
    def selected_task(self) -> Task | None:
        if 0 <= self.selected < len(self.tasks):
            return self.tasks[self.selected]
        return None

    def on_key(self, event: KeyEvent) -> tuple[BaseWidget, Effect | None]:
        key = event.key
        if key in ("up", "k"):
            if self.selected > 0:
                self.selected -= 1
        elif key in ("down", "j"):
            if self.selected < len(self.tasks) - 1:
                self.selected += 1
        elif key == "space":
            task = self.selected_task
            if task is not None:
                self.loading = True
                return self, keyed(self.key, task_collector.toggle, self.client, task, self.key, self.title)
        elif key == "d":
            task = self.selected_task
            if task is not None:
                self.loading = True
                return self, keyed(self.key, task_collector.delete, self.client, task.id, self.key, self.title)
        elif key == "n":
            self.loading = True
            return self, keyed(self.key, task_collector.create, self.client, "New Task", self.key, self.title)
        elif key == "r":
            return self, self._fetch()
        return self, None

    def on_message(self, event: Any) -> tuple[BaseWidget, Effect | None]:
        if not self.owns(event):
            return self, None
        self.loading = False
        if isinstance(event, EffectFailed):
            self.last_error = event.error
        elif isinstance(event, PanelData):
            if event.status == "error":
                self.last_error = "; ".join(event.errors) or "task service error"
                return self, None
            self.last_error = None
            self.tasks = [Task.from_dict(item) for item in event.items]
            if self.selected >= len(self.tasks):
                self.selected = len(self.tasks) - 1
            if self.selected < 0 and self.tasks:
                self.selected = 0
        return self, None

    def _task_line(self, task: Task, width: int, now: datetime) -> str:
        mark = "[✓]" if task.completed else "[ ]"
        text = f"{mark} {task.title}"
        if task.description:
            text += f" - {task.description}"
        if task.created_at is not None:
            text += f" ({compact_relative_age((now - task.created_at).total_seconds())})"
        return escape(fit_line(text, width))

    def render(self) -> str:
        width, height = self.content_size
        status = "error" if self.last_error else "ok"
        lines = [title_line(self.title, status, width), ""]

        if self.loading and not self.tasks:
            lines.append(dim_line("Loading...", width))
            return "\n".join(lines)

        if self.last_error:
            lines.extend(error_lines(PanelData(key=self.key, title=self.title, errors=[self.last_error]), width))
            lines.append("")

        if not self.tasks:
            lines.append(dim_line("No tasks", width))
            lines.append("")
            lines.append(dim_line("Press 'n' to create a new task", width))
        else:
            now = datetime.now(timezone.utc)
            for index, task in enumerate(self.tasks):
                line = self._task_line(task, width, now)
                if index == self.selected and self.focused:
                    line = f"[reverse]{line}[/reverse]"
                lines.append(line)

        if self.focused:
            lines.append("")
            lines.append(dim_line(HELP_LINE, width))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update(
            {
                "status": "error" if self.last_error else "ok",
                "selected": self.selected,
                "items": [task.to_dict() for task in self.tasks],
                "errors": [self.last_error] if self.last_error else [],
            }
        )
        return payload
