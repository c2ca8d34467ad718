"""Grid layout resolution: cell sizes, per-widget sizes and cell lookup."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from dash_core.models import GridConfig


class LayoutState(Enum):
    NORMAL = "normal"
    TOO_SMALL = "too_small"


@dataclass(frozen=True)
class LayoutLimits:
    min_width: int = 40
    min_height: int = 10
    min_cell_width: int = 20
    min_cell_height: int = 5
    horizontal_overhead: int = 0
    vertical_overhead: int = 0
    col_gap: int = 0
    row_gap: int = 0


DEFAULT_LIMITS = LayoutLimits()


@dataclass(frozen=True)
class CellSize:
    width: int
    height: int


def select_layout_state(width: int, height: int, limits: LayoutLimits = DEFAULT_LIMITS) -> LayoutState:
    if width < limits.min_width or height < limits.min_height:
        return LayoutState.TOO_SMALL
    return LayoutState.NORMAL


def base_cell_size(
    width: int,
    height: int,
    rows: int,
    cols: int,
    limits: LayoutLimits = DEFAULT_LIMITS,
) -> CellSize:
    cell_width = (width - limits.horizontal_overhead) // cols if cols > 0 else 0
    cell_height = (height - limits.vertical_overhead) // rows if rows > 0 else 0
    return CellSize(
        width=max(limits.min_cell_width, cell_width),
        height=max(limits.min_cell_height, cell_height),
    )


def widget_size(base: CellSize, config: GridConfig, limits: LayoutLimits = DEFAULT_LIMITS) -> CellSize:
    width = base.width * config.col_span - limits.col_gap * max(0, config.col_span - 1)
    height = base.height * config.row_span - limits.row_gap * max(0, config.row_span - 1)
    return CellSize(
        width=max(config.min_width, width, 0),
        height=max(config.min_height, height, 0),
    )


def covered_size(base: CellSize, config: GridConfig, limits: LayoutLimits = DEFAULT_LIMITS) -> CellSize:
    """Screen area a placement occupies, including the gaps between its cells."""
    width = base.width * config.col_span + limits.col_gap * max(0, config.col_span - 1)
    height = base.height * config.row_span + limits.row_gap * max(0, config.row_span - 1)
    return CellSize(width=max(0, width), height=max(0, height))


def resolve(
    width: int,
    height: int,
    rows: int,
    cols: int,
    configs: Sequence[GridConfig],
    limits: LayoutLimits = DEFAULT_LIMITS,
) -> list[CellSize]:
    base = base_cell_size(width, height, rows, cols, limits)
    return [widget_size(base, config, limits) for config in configs]


def lookup(configs: Sequence[GridConfig], row: int, col: int) -> int | None:
    """Index of the first config covering ``(row, col)``, in insertion order."""
    for index, config in enumerate(configs):
        if config.covers(row, col):
            return index
    return None


def find_overlap(configs: Sequence[GridConfig], candidate: GridConfig) -> int | None:
    for index, config in enumerate(configs):
        if config.overlaps(candidate):
            return index
    return None
