"""Top-level dashboard: global key bindings, help overlay, header and footer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from dash_core.container import Container
from dash_core.effects import QUIT, Effect
from dash_core.errors import check_dimensions
from dash_core.models import KeyEvent, ResizeEvent
from dash_core.styles import markup_text, render_text

HEADER_TEXT = "Dashboard"
FOOTER_TEXT = "Press ? for help"
# Header and footer lines around the container.
CHROME_HEIGHT = 2


@dataclass(frozen=True)
class Binding:
    keys: tuple[str, ...]
    label: str
    description: str

    def matches(self, event: KeyEvent) -> bool:
        return event.key in self.keys


@dataclass(frozen=True)
class KeyMap:
    quit: Binding = Binding(("q", "ctrl+c"), "q", "quit")
    help: Binding = Binding(("?",), "?", "toggle help")
    next: Binding = Binding(("tab",), "tab", "next widget")
    prev: Binding = Binding(("shift+tab",), "shift+tab", "previous widget")
    extra: tuple[Binding, ...] = field(
        default=(
            Binding(("up", "k"), "↑/k", "move up"),
            Binding(("down", "j"), "↓/j", "move down"),
            Binding(("space",), "space", "toggle task"),
            Binding(("n",), "n", "new task"),
            Binding(("d",), "d", "delete task"),
            Binding(("r",), "r", "refresh"),
        )
    )

    def short_help(self) -> list[Binding]:
        return [self.help, self.quit]

    def full_help(self) -> list[Binding]:
        return [self.help, self.quit, self.next, self.prev, *self.extra]


DEFAULT_KEYMAP = KeyMap()


class Dashboard:
    def __init__(
        self,
        container: Container,
        keys: KeyMap = DEFAULT_KEYMAP,
        logger: logging.Logger | None = None,
    ):
        self.container = container
        self.keys = keys
        self.width = 0
        self.height = 0
        self.show_help = False
        self._logger = logger or logging.getLogger(__name__)

    def init(self) -> Effect | None:
        return self.container.init()

    def handle_event(self, event: Any) -> tuple[Dashboard, Effect | None]:
        if isinstance(event, KeyEvent):
            return self, self._handle_key(event)
        if isinstance(event, ResizeEvent):
            return self, self._resize(event)
        _, effect = self.container.handle_event(event)
        return self, effect

    def _handle_key(self, event: KeyEvent) -> Effect | None:
        if self.keys.quit.matches(event):
            self._logger.info("quit requested")
            return QUIT
        if self.keys.help.matches(event):
            self.show_help = not self.show_help
            return None
        if self.show_help:
            return None
        _, effect = self.container.handle_event(event)
        return effect

    def _resize(self, event: ResizeEvent) -> Effect | None:
        self.set_size(event.width, event.height)
        body = ResizeEvent(self.container.width, self.container.height)
        _, effect = self.container.handle_event(body)
        return effect

    def set_size(self, width: int, height: int) -> None:
        """Size the shell; the container gets what the header and footer leave."""
        check_dimensions(width, height)
        self.width = width
        self.height = height
        self._logger.debug("resize", extra={"fields": {"width": width, "height": height}})
        self.container.set_size(width, max(0, height - CHROME_HEIGHT))

    def focus(self) -> None:
        self.container.focus()

    def blur(self) -> None:
        self.container.blur()

    @property
    def is_focused(self) -> bool:
        return self.container.is_focused

    def _line(self, markup: str) -> str:
        return render_text(markup_text(markup), self.width, 1, color=self.container.styles.theme.color)

    def _help_view(self) -> str:
        theme = self.container.styles.theme
        table = Table(box=None, show_header=False, expand=True, pad_edge=False)
        table.add_column("key", style="bold", no_wrap=True)
        table.add_column("action")
        for binding in self.keys.full_help():
            table.add_row(binding.label, binding.description)
        height = max(0, self.height - CHROME_HEIGHT)
        if self.width < 4 or height < 3:
            return ""
        panel = Panel(table, title="Help", border_style=theme.primary, width=self.width, height=height)
        return render_text(panel, self.width, height, color=theme.color)

    def _footer(self) -> str:
        if self.show_help:
            text = " • ".join(f"{binding.label} {binding.description}" for binding in self.keys.short_help())
        else:
            text = FOOTER_TEXT
        return self._line(f"[dim]{text}[/dim]")

    def render(self) -> str:
        header = self._line(f"[bold]{HEADER_TEXT}[/bold]")
        body = self._help_view() if self.show_help else self.container.render()
        return "\n".join([header, body, self._footer()])

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "state": self.container.state.value,
            "focused": self.container.ring.current,
            "widgets": [_widget_dict(entry.widget) for entry in self.container.entries],
        }


def _widget_dict(widget: Any) -> dict[str, Any]:
    to_dict = getattr(widget, "to_dict", None)
    if to_dict is None:
        return {"key": getattr(widget, "key", type(widget).__name__)}
    return to_dict()
