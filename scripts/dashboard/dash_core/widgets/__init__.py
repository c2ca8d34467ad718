"""Widget contract and the shared base implementation."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from rich.markup import escape

from dash_core.effects import Effect
from dash_core.errors import check_dimensions
from dash_core.formatting import fit_line
from dash_core.models import KeyEvent, PanelData, ResizeEvent
from dash_core.styles import content_size

STATUS_STYLE = {
    "ok": "bold cyan",
    "warn": "bold yellow",
    "error": "bold red",
}


@runtime_checkable
class Widget(Protocol):
    def init(self) -> Effect | None: ...

    def handle_event(self, event: Any) -> tuple[Widget, Effect | None]: ...

    def render(self) -> str: ...

    def set_size(self, width: int, height: int) -> None: ...

    def focus(self) -> None: ...

    def blur(self) -> None: ...

    @property
    def is_focused(self) -> bool: ...


def style_for(status: str) -> str:
    return STATUS_STYLE.get(status, "bold cyan")


def title_line(title: str, status: str, width: int) -> str:
    return f"[{style_for(status)}]{escape(fit_line(title, width))}[/]"


def dim_line(text: str, width: int) -> str:
    return f"[dim]{escape(fit_line(text, width))}[/dim]"


def error_lines(data: PanelData, width: int) -> list[str]:
    return [f"[red]{escape(fit_line(message, width))}[/red]" for message in data.errors[:2]]


class BaseWidget:
    """Size, focus and event plumbing shared by every concrete widget.

    Subclasses override ``on_key`` for keyboard input (only reached while
    focused) and ``on_message`` for everything else.
    """

    key = "widget"
    title = "Widget"

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.focused = False

    def init(self) -> Effect | None:
        return None

    def handle_event(self, event: Any) -> tuple[BaseWidget, Effect | None]:
        if isinstance(event, ResizeEvent):
            self.set_size(event.width, event.height)
            return self, None
        if isinstance(event, KeyEvent):
            if not self.focused:
                return self, None
            return self.on_key(event)
        return self.on_message(event)

    def on_key(self, event: KeyEvent) -> tuple[BaseWidget, Effect | None]:
        return self, None

    def on_message(self, event: Any) -> tuple[BaseWidget, Effect | None]:
        return self, None

    def render(self) -> str:
        return ""

    def set_size(self, width: int, height: int) -> None:
        check_dimensions(width, height)
        self.width = width
        self.height = height

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def content_size(self) -> tuple[int, int]:
        return content_size(self.width, self.height)

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    @property
    def is_focused(self) -> bool:
        return self.focused

    def owns(self, event: Any) -> bool:
        return getattr(event, "key", None) == self.key

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "width": self.width,
            "height": self.height,
            "focused": self.focused,
        }
