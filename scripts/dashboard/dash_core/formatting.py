"""Shared text and time formatting helpers for widget content."""

from __future__ import annotations

from datetime import datetime, timezone

from rich.cells import cell_len, set_cell_size

BAR_FILLED = "█"
BAR_EMPTY = "░"
ELLIPSIS = "…"


def compact_relative_age(age_seconds: float | int | None) -> str:
    if age_seconds is None:
        return "n/a"

    seconds = max(0, int(age_seconds))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def parse_iso_timestamp(value: object) -> datetime | None:
    if not value:
        return None
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_iso_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def clamp_percent(value: float | int | None) -> float:
    if value is None:
        return 0.0
    return min(100.0, max(0.0, float(value)))


def usage_bar(percent: float | int | None, width: int) -> tuple[str, str]:
    """Split a bar of ``width`` cells into its filled and empty parts."""
    width = max(1, int(width))
    filled = min(width, int(width * clamp_percent(percent) / 100))
    return BAR_FILLED * filled, BAR_EMPTY * (width - filled)


def fit_line(text: str, width: int) -> str:
    """Crop ``text`` to ``width`` terminal cells, marking the cut with an ellipsis."""
    if width <= 0:
        return ""
    if cell_len(text) <= width:
        return text
    if width == 1:
        return ELLIPSIS
    return set_cell_size(text, width - 1) + ELLIPSIS
