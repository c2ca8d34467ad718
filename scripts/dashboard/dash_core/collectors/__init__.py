"""Collector helpers and package exports."""

from __future__ import annotations

import os
from typing import Any

from dash_core.models import PanelData

DEFAULT_API_URL = "http://localhost:8080"


def failed(key: str, title: str, message: str, meta: dict[str, Any] | None = None) -> PanelData:
    return PanelData(
        key=key,
        title=title,
        status="error",
        items=[],
        meta=meta or {},
        errors=[message],
    )


def first_line(text: str, fallback: str) -> str:
    lines = (text or "").strip().splitlines()
    return lines[0] if lines else fallback


def env_api_url() -> str:
    return os.environ.get("TASKS_API_URL") or DEFAULT_API_URL
