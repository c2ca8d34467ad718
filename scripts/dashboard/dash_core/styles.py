"""Theme constants, cell style transforms and the per-size style cache."""

from __future__ import annotations

import io
import threading
from collections import OrderedDict
from dataclasses import dataclass

from rich import box
from rich.console import Console, RenderableType
from rich.errors import MarkupError
from rich.panel import Panel
from rich.text import Text

# Smallest cell that can still hold a border; anything smaller is blank space.
BORDER_MIN_WIDTH = 4
BORDER_MIN_HEIGHT = 3

FRAME_WIDTH = 4
FRAME_HEIGHT = 2


@dataclass(frozen=True)
class Theme:
    primary: str = "#2196F3"
    secondary: str = "#FFB74D"
    subtle: str = "#4A4A4A"
    error: str = "#FF0000"
    border: box.Box = box.ROUNDED
    focused_border: box.Box = box.DOUBLE
    color: bool = False


DEFAULT_THEME = Theme()


def content_size(width: int, height: int) -> tuple[int, int]:
    """Space left for widget content inside a bordered, padded cell."""
    return max(0, width - FRAME_WIDTH), max(0, height - FRAME_HEIGHT)


def blank_block(width: int, height: int) -> str:
    if width <= 0 or height <= 0:
        return ""
    return "\n".join(" " * width for _ in range(height))


def render_text(renderable: RenderableType, width: int, height: int | None = None, color: bool = False) -> str:
    """Render ``renderable`` through an off-screen console of a fixed width."""
    if width <= 0 or (height is not None and height <= 0):
        return ""
    console = Console(
        file=io.StringIO(),
        width=width,
        height=height,
        color_system="truecolor" if color else None,
        force_terminal=color,
        legacy_windows=False,
        highlight=False,
        emoji=False,
    )
    with console.capture() as capture:
        console.print(renderable, crop=True)
    output = capture.get()
    if output.endswith("\n"):
        output = output[:-1]
    return output


def markup_text(content: str) -> Text:
    try:
        text = Text.from_markup(content, overflow="ellipsis", emoji=False)
    except MarkupError:
        text = Text(content, overflow="ellipsis")
    text.no_wrap = True
    return text


@dataclass(frozen=True)
class StyleTransform:
    width: int
    height: int
    focused: bool
    theme: Theme = DEFAULT_THEME

    def render(self, content: str) -> str:
        if self.width < BORDER_MIN_WIDTH or self.height < BORDER_MIN_HEIGHT:
            return blank_block(self.width, self.height)
        padding = (0, 1) if self.width >= BORDER_MIN_WIDTH + 2 else 0
        panel = Panel(
            markup_text(content),
            box=self.theme.focused_border if self.focused else self.theme.border,
            border_style=self.theme.secondary if self.focused else self.theme.primary,
            width=self.width,
            height=self.height,
            padding=padding,
        )
        return render_text(panel, self.width, self.height, color=self.theme.color)


class StyleCache:
    """Memoizes style transforms by ``(width, height, focused)``.

    Entries are kept for the whole session unless ``max_entries`` is given, in
    which case the least recently used transform is dropped first.
    """

    def __init__(self, theme: Theme = DEFAULT_THEME, max_entries: int | None = None):
        self._theme = theme
        self._max_entries = max_entries
        self._styles: OrderedDict[tuple[int, int, bool], StyleTransform] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def theme(self) -> Theme:
        return self._theme

    def get_style(self, width: int, height: int, focused: bool) -> StyleTransform:
        key = (width, height, bool(focused))
        with self._lock:
            style = self._styles.get(key)
            if style is not None:
                self._styles.move_to_end(key)
                return style
            style = StyleTransform(width, height, bool(focused), self._theme)
            self._styles[key] = style
            if self._max_entries is not None and len(self._styles) > self._max_entries:
                self._styles.popitem(last=False)
            return style

    def set_theme(self, theme: Theme) -> None:
        with self._lock:
            self._theme = theme
            self._styles.clear()

    def clear(self) -> None:
        with self._lock:
            self._styles.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._styles)
