"""System resource collector (fail-soft)."""

from __future__ import annotations

import logging

import psutil

from dash_core.models import PanelData

logger = logging.getLogger(__name__)

SAMPLE_INTERVAL = 0.5


def _cpu_percent(interval: float) -> float:
    return float(psutil.cpu_percent(interval=interval))


def _memory_percent() -> float:
    return float(psutil.virtual_memory().percent)


def _disk_percent(path: str) -> float:
    return float(psutil.disk_usage(path).percent)


def collect(key: str = "sysinfo", disk_path: str = "/", interval: float = SAMPLE_INTERVAL) -> PanelData:
    samples = {
        "cpu": lambda: _cpu_percent(interval),
        "memory": _memory_percent,
        "disk": lambda: _disk_percent(disk_path),
    }

    meta: dict[str, float] = {}
    errors: list[str] = []
    for name, sample in samples.items():
        try:
            meta[name] = sample()
        except (OSError, psutil.Error) as exc:
            logger.warning("system sample failed", extra={"fields": {"metric": name, "error": str(exc)}})
            meta[name] = 0.0
            errors.append(f"{name} unavailable: {exc}")

    items = [{"metric": name, "percent": value} for name, value in meta.items()]
    return PanelData(
        key=key,
        title="System Information",
        status="warn" if errors else "ok",
        items=items,
        meta=meta,
        errors=errors,
    )
