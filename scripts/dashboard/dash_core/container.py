"""Grid container: composes widgets, owns focus and layout, renders one frame.

The container is itself a widget. It keeps an append-only list of
``WidgetEntry`` objects, resolves their sizes from the declared grid on every
resize, routes key events to the focused entry only and broadcasts everything
else, then renders each cell through the style cache and joins the cells
row-major into a single string.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.text import Text

from dash_core.effects import Effect, batch
from dash_core.errors import check_dimensions
from dash_core.focus import FocusRing
from dash_core.layout import (
    DEFAULT_LIMITS,
    CellSize,
    LayoutLimits,
    LayoutState,
    base_cell_size,
    covered_size,
    find_overlap,
    lookup,
    resolve,
    select_layout_state,
)
from dash_core.models import GridConfig, KeyEvent, ResizeEvent, WidgetEntry
from dash_core.styles import StyleCache

TOO_SMALL_MESSAGE = "Window too small"

FOCUS_NEXT_KEYS = frozenset({"tab"})
FOCUS_PREV_KEYS = frozenset({"shift+tab"})


def block_width(lines: list[str]) -> int:
    return max((Text.from_ansi(line).cell_len for line in lines), default=0)


def join_horizontal(blocks: list[list[str]], gap: int = 0) -> list[str]:
    """Place blocks side by side, top-aligned, padding short ones with blanks."""
    if not blocks:
        return []
    widths = [block_width(block) for block in blocks]
    height = max(len(block) for block in blocks)
    separator = " " * gap
    rows = []
    for index in range(height):
        parts = []
        for block, width in zip(blocks, widths):
            line = block[index] if index < len(block) else ""
            padding = width - Text.from_ansi(line).cell_len
            parts.append(line + " " * max(0, padding))
        rows.append(separator.join(parts))
    return rows


def blank_lines(width: int, count: int) -> list[str]:
    return [" " * max(0, width)] * max(0, count)


def join_vertical(rows: list[list[str]], separators: list[list[str]] | None = None) -> str:
    """Stack rows, placing ``separators[i]`` between row ``i`` and row ``i + 1``."""
    lines: list[str] = []
    for index, row in enumerate(rows):
        if index and separators:
            lines.extend(separators[index - 1])
        lines.extend(row)
    return "\n".join(lines)


class Container:
    key = "container"

    def __init__(
        self,
        rows: int,
        cols: int,
        limits: LayoutLimits = DEFAULT_LIMITS,
        style_cache: StyleCache | None = None,
        logger: logging.Logger | None = None,
    ):
        if rows < 0 or cols < 0:
            raise ValueError("grid rows and cols must be non-negative")
        self.rows = rows
        self.cols = cols
        self.limits = limits
        self.width = 0
        self.height = 0
        self.focused = False
        self.state = select_layout_state(0, 0, limits)
        self.styles = style_cache or StyleCache()
        self._logger = logger or logging.getLogger(__name__)
        self._entries: list[WidgetEntry] = []
        self._sizes: list[CellSize] = []
        self.ring = FocusRing(self._entries, logger=self._logger)

    @property
    def entries(self) -> list[WidgetEntry]:
        return list(self._entries)

    @property
    def configs(self) -> list[GridConfig]:
        return [entry.config for entry in self._entries]

    @property
    def sizes(self) -> list[CellSize]:
        return list(self._sizes)

    @property
    def base_cell(self) -> CellSize:
        return base_cell_size(self.width, self.height, self.rows, self.cols, self.limits)

    def add_widget(self, widget: Any, config: GridConfig | None = None) -> WidgetEntry:
        config = config or GridConfig()
        config.validate(self.rows, self.cols)
        clash = find_overlap(self.configs, config)
        if clash is not None:
            raise ValueError(f"grid config {config} overlaps entry {clash}")

        entry = WidgetEntry(widget=widget, config=config)
        self._entries.append(entry)
        size = resolve(self.width, self.height, self.rows, self.cols, [config], self.limits)[0]
        self._sizes.append(size)
        widget.set_size(size.width, size.height)
        self.ring.attach()
        return entry

    def widget_at(self, row: int, col: int) -> Any | None:
        index = lookup(self.configs, row, col)
        return None if index is None else self._entries[index].widget

    def focused_widget(self) -> Any | None:
        entry = self.ring.focused_entry()
        return None if entry is None else entry.widget

    def init(self) -> Effect | None:
        return batch(*(entry.widget.init() for entry in self._entries))

    def set_size(self, width: int, height: int) -> None:
        check_dimensions(width, height)
        self.width = width
        self.height = height
        self._relayout()

    def _relayout(self) -> None:
        self._sizes = resolve(self.width, self.height, self.rows, self.cols, self.configs, self.limits)
        for entry, size in zip(self._entries, self._sizes):
            entry.widget.set_size(size.width, size.height)

        state = select_layout_state(self.width, self.height, self.limits)
        if state is not self.state:
            self._logger.info(
                "layout state changed",
                extra={"fields": {"state": state.value, "width": self.width, "height": self.height}},
            )
        self.state = state

    def handle_event(self, event: Any) -> tuple[Container, Effect | None]:
        if isinstance(event, ResizeEvent):
            return self, self._resize(event)
        if isinstance(event, KeyEvent):
            if event.key in FOCUS_NEXT_KEYS:
                self.ring.advance_forward()
                return self, None
            if event.key in FOCUS_PREV_KEYS:
                self.ring.advance_backward()
                return self, None
            if self.ring.current < 0:
                return self, None
            return self, self._deliver(self.ring.current, event)
        return self, batch(*(self._deliver(index, event) for index in range(len(self._entries))))

    def _resize(self, event: ResizeEvent) -> Effect | None:
        self.set_size(event.width, event.height)
        effects = []
        for index, size in enumerate(self._sizes):
            effects.append(self._deliver(index, ResizeEvent(size.width, size.height)))
        return batch(*effects)

    def _deliver(self, index: int, event: Any) -> Effect | None:
        entry = self._entries[index]
        widget, effect = entry.widget.handle_event(event)
        if widget is not entry.widget:
            size = self._sizes[index]
            widget.set_size(size.width, size.height)
            if entry.focused:
                widget.focus()
            else:
                widget.blur()
            entry.widget = widget
        return effect

    def render(self) -> str:
        if self.state is LayoutState.TOO_SMALL:
            return TOO_SMALL_MESSAGE

        base = self.base_cell
        configs = self.configs
        rendered: dict[int, list[str]] = {}
        rows: list[list[str]] = []
        separators: list[list[str]] = []
        for row in range(self.rows):
            cells: list[list[str]] = []
            between: list[list[str]] = []
            for col in range(self.cols):
                index = lookup(configs, row, col)
                if index is None:
                    cells.append(self._placeholder(base))
                    between.append(blank_lines(base.width, self.limits.row_gap))
                    continue
                if col > 0 and lookup(configs, row, col - 1) == index:
                    continue
                if index not in rendered:
                    rendered[index] = self._render_entry(index, base)
                lines = rendered[index]
                cells.append(self._row_slice(lines, configs[index], row, base))
                between.append(self._gap_slice(lines, configs[index], row, base))
            rows.append(join_horizontal(cells, self.limits.col_gap))
            separators.append(join_horizontal(between, self.limits.col_gap))
        return join_vertical(rows, separators)

    def _render_entry(self, index: int, base: CellSize) -> list[str]:
        entry = self._entries[index]
        size = self._sizes[index]
        covered = covered_size(base, entry.config, self.limits)
        # The frame fills every cell and gap the entry spans.
        width = max(size.width, covered.width)
        height = max(size.height, covered.height)
        style = self.styles.get_style(width, height, entry.focused)
        return style.render(entry.widget.render()).split("\n")

    def _placeholder(self, base: CellSize) -> list[str]:
        return self.styles.get_style(base.width, base.height, False).render("").split("\n")

    def _row_slice(self, lines: list[str], config: GridConfig, row: int, base: CellSize) -> list[str]:
        if config.row_span <= 1:
            return lines
        offset = row - config.row
        start = offset * (base.height + self.limits.row_gap)
        if offset == config.row_span - 1:
            return lines[start:]
        return lines[start : start + base.height]

    def _gap_slice(self, lines: list[str], config: GridConfig, row: int, base: CellSize) -> list[str]:
        """Lines drawn in the gap below ``row`` for the entry's column band."""
        gap = self.limits.row_gap
        offset = row - config.row
        if gap <= 0 or offset >= config.row_span - 1:
            return blank_lines(block_width(lines), gap)
        start = offset * (base.height + gap) + base.height
        return lines[start : start + gap]

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    @property
    def is_focused(self) -> bool:
        return self.focused
