"""Profile resolution and user config merging for the dashboard grid."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from dash_core.models import GridConfig

WIDGET_NAMES = ["sysinfo", "tasks"]

BUILTIN_PROFILES: dict[str, dict] = {
    "core": {
        "rows": 2,
        "cols": 2,
        "widgets": [
            {"name": "sysinfo", "row": 0, "col": 0, "row_span": 1, "col_span": 2, "min_width": 40},
            {"name": "tasks", "row": 1, "col": 0},
        ],
        "refresh_seconds": 2,
    },
    "system": {
        "rows": 1,
        "cols": 1,
        "widgets": [
            {"name": "sysinfo", "row": 0, "col": 0},
        ],
        "refresh_seconds": 2,
    },
}

PLACEMENT_FIELDS = ("row", "col", "row_span", "col_span", "min_width", "min_height")


def load_user_config(path: str | None) -> dict:
    if not path:
        return {}

    config_path = Path(path)
    if not config_path.exists():
        raise ValueError(f"config path not found: {config_path}")

    try:
        payload = json.loads(config_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON config: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError("config must be a JSON object")
    return payload


def _placement(raw: Any) -> dict:
    if not isinstance(raw, dict):
        raise ValueError(f"widget placement must be an object: {raw!r}")
    name = raw.get("name")
    if name not in WIDGET_NAMES:
        raise ValueError(f"unknown widget: {name}")
    placement = {"name": name}
    for key in PLACEMENT_FIELDS:
        if key in raw:
            placement[key] = int(raw[key])
    return placement


def resolve_profile(profile: str, config_path: str | None = None) -> dict:
    if profile not in BUILTIN_PROFILES:
        raise ValueError(f"unknown profile: {profile}")

    resolved = dict(BUILTIN_PROFILES[profile])
    user_config = load_user_config(config_path)

    selected_profile = user_config.get("profile")
    if selected_profile:
        if selected_profile not in BUILTIN_PROFILES:
            raise ValueError(f"unknown profile in config: {selected_profile}")
        resolved = dict(BUILTIN_PROFILES[selected_profile])
        profile = selected_profile

    if "refresh_seconds" in user_config:
        value = float(user_config["refresh_seconds"])
        resolved["refresh_seconds"] = max(1, value)

    grid = user_config.get("grid")
    if isinstance(grid, dict):
        resolved["rows"] = max(0, int(grid.get("rows", resolved["rows"])))
        resolved["cols"] = max(0, int(grid.get("cols", resolved["cols"])))

    widget_config = user_config.get("widgets")
    if isinstance(widget_config, dict):
        # disable map: {"tasks": false}
        resolved["widgets"] = [
            dict(placement) for placement in resolved["widgets"] if widget_config.get(placement["name"], True)
        ]
    elif isinstance(widget_config, list) and widget_config:
        # explicit placements
        resolved["widgets"] = [_placement(raw) for raw in widget_config]

    resolved["name"] = profile
    return resolved


def grid_configs(profile: dict) -> list[tuple[str, GridConfig]]:
    placements = []
    for placement in profile.get("widgets", []):
        fields = {key: placement[key] for key in PLACEMENT_FIELDS if key in placement}
        placements.append((placement["name"], GridConfig(**fields)))
    return placements
