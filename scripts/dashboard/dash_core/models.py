"""Shared model contracts for widget placement and event data flow."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dash_core.formatting import format_iso_timestamp, parse_iso_timestamp


@dataclass
class PanelData:
    key: str
    title: str
    status: str = "ok"
    items: list[dict[str, Any]] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "status": self.status,
            "items": self.items,
            "meta": self.meta,
            "errors": self.errors,
        }


@dataclass(frozen=True)
class GridConfig:
    row: int = 0
    col: int = 0
    row_span: int = 1
    col_span: int = 1
    min_width: int = 0
    min_height: int = 0

    def validate(self, rows: int, cols: int) -> None:
        for name in ("row", "col", "row_span", "col_span", "min_width", "min_height"):
            if getattr(self, name) < 0:
                raise ValueError(f"grid config {name} must be non-negative")
        if self.row + self.row_span > rows:
            raise ValueError(f"row span {self.row}+{self.row_span} exceeds {rows} rows")
        if self.col + self.col_span > cols:
            raise ValueError(f"col span {self.col}+{self.col_span} exceeds {cols} cols")

    def covers(self, row: int, col: int) -> bool:
        return self.row <= row < self.row + self.row_span and self.col <= col < self.col + self.col_span

    def overlaps(self, other: GridConfig) -> bool:
        return (
            self.row < other.row + other.row_span
            and other.row < self.row + self.row_span
            and self.col < other.col + other.col_span
            and other.col < self.col + self.col_span
        )


@dataclass
class WidgetEntry:
    widget: Any
    config: GridConfig
    focused: bool = False


@dataclass(frozen=True)
class KeyEvent:
    key: str


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class TickEvent:
    key: str


@dataclass(frozen=True)
class EffectFailed:
    error: str
    key: str | None = None


@dataclass
class Task:
    id: str
    title: str
    description: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def completed(self) -> bool:
        return self.completed_at is not None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Task:
        return cls(
            id=str(payload.get("id", "")),
            title=str(payload.get("title") or ""),
            description=str(payload.get("description") or ""),
            created_at=parse_iso_timestamp(payload.get("created_at")),
            updated_at=parse_iso_timestamp(payload.get("updated_at")),
            completed_at=parse_iso_timestamp(payload.get("completed_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "created_at": format_iso_timestamp(self.created_at),
            "updated_at": format_iso_timestamp(self.updated_at),
        }
        if self.description:
            payload["description"] = self.description
        if self.completed_at is not None:
            payload["completed_at"] = format_iso_timestamp(self.completed_at)
        return payload
