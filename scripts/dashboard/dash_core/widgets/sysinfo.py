"""System information widget: CPU, memory and disk gauges."""

from __future__ import annotations

from typing import Any, Callable

from dash_core.collectors.system import collect as collect_system
from dash_core.effects import Effect, Tick, batch, keyed
from dash_core.formatting import clamp_percent, usage_bar
from dash_core.models import EffectFailed, PanelData, TickEvent
from dash_core.widgets import BaseWidget, dim_line, error_lines, title_line

GAUGES = [
    ("cpu", "CPU"),
    ("memory", "Memory"),
    ("disk", "Disk"),
]

MIN_BAR_WIDTH = 10
DEFAULT_INTERVAL = 2.0


class SystemInfoWidget(BaseWidget):
    key = "sysinfo"
    title = "System Information"

    def __init__(
        self,
        interval: float = DEFAULT_INTERVAL,
        sampler: Callable[[], PanelData] | None = None,
        key: str = "sysinfo",
    ):
        super().__init__()
        self.key = key
        self.interval = max(0.1, float(interval))
        self._sampler = sampler or (lambda: collect_system(key=self.key))
        self.data: PanelData | None = None

    def init(self) -> Effect | None:
        return batch(keyed(self.key, self._sample), self._tick())

    def _sample(self) -> PanelData:
        return self._sampler()

    def _tick(self) -> Tick:
        return Tick(self.interval, TickEvent(self.key))

    def on_message(self, event: Any) -> tuple[BaseWidget, Effect | None]:
        if not self.owns(event):
            return self, None
        if isinstance(event, PanelData):
            self.data = event
            return self, None
        if isinstance(event, TickEvent):
            return self, self.init()
        if isinstance(event, EffectFailed):
            self.data = PanelData(key=self.key, title=self.title, status="error", errors=[event.error])
        return self, None

    def usage(self, metric: str) -> float:
        if self.data is None:
            return 0.0
        return clamp_percent(self.data.meta.get(metric))

    def render(self) -> str:
        width, height = self.content_size
        status = self.data.status if self.data else "ok"
        lines = [title_line(self.title, status, width), ""]

        if self.data is None:
            lines.append(dim_line("Sampling...", width))
            return "\n".join(lines)

        bar_width = max(MIN_BAR_WIDTH, width - 8)
        for metric, label in GAUGES:
            percent = self.usage(metric)
            filled, empty = usage_bar(percent, bar_width)
            lines.append(f"[bold]{label}[/bold]")
            lines.append(f"{percent:5.1f}% [cyan]{filled}[/cyan][dim]{empty}[/dim]")
        lines.extend(error_lines(self.data, width))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({metric: self.usage(metric) for metric, _ in GAUGES})
        payload["status"] = self.data.status if self.data else "pending"
        payload["errors"] = list(self.data.errors) if self.data else []
        return payload
