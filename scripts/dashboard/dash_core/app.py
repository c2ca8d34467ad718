"""Dashboard application entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime, timezone

from rich.console import Console
from rich.text import Text

from dash_core.collectors import DEFAULT_API_URL
from dash_core.collectors.tasks import TaskClient
from dash_core.container import Container
from dash_core.dashboard import Dashboard
from dash_core.effects import run_sync
from dash_core.errors import InitializationFailure
from dash_core.logsetup import configure_logging
from dash_core.models import ResizeEvent
from dash_core.profiles import grid_configs, resolve_profile
from dash_core.runtime import EffectRunner, run_live
from dash_core.settings import Settings, env_flag
from dash_core.styles import StyleCache, Theme
from dash_core.widgets.sysinfo import SystemInfoWidget
from dash_core.widgets.tasks import TaskListWidget


def _sysinfo(profile: dict, settings: Settings):
    return SystemInfoWidget(interval=float(profile.get("refresh_seconds", 2)))


def _tasks(profile: dict, settings: Settings):
    return TaskListWidget(TaskClient(settings.api_url, timeout=settings.api_timeout))


WIDGET_FACTORIES = {
    "sysinfo": _sysinfo,
    "tasks": _tasks,
}


def build_dashboard(profile: dict, settings: Settings, theme: Theme, logger: logging.Logger) -> Dashboard:
    container = Container(
        profile.get("rows", 1),
        profile.get("cols", 1),
        style_cache=StyleCache(theme),
        logger=logger.getChild("container"),
    )
    for name, config in grid_configs(profile):
        factory = WIDGET_FACTORIES.get(name)
        if factory is None:
            continue
        container.add_widget(factory(profile, settings), config)
    return Dashboard(container, logger=logger.getChild("dashboard"))


def _settle(dashboard: Dashboard, width: int, height: int) -> None:
    """Size the dashboard and run its initial effects inline."""
    dashboard.handle_event(ResizeEvent(width, height))
    for event in run_sync(dashboard.init()):
        dashboard.handle_event(event)


def _json_output(profile: dict, dashboard: Dashboard) -> str:
    payload = {
        "profile": profile["name"],
        "collected_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "dashboard": dashboard.to_dict(),
    }
    return json.dumps(payload, indent=2)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Grid terminal dashboard")
    parser.add_argument("-l", "--live", action="store_true", help="Run interactive dashboard loop")
    parser.add_argument("--json", action="store_true", help="Emit JSON snapshot of widget state")
    parser.add_argument("--profile", default=os.environ.get("DASH_PROFILE", "core"), help="Profile name: core|system")
    parser.add_argument("--config", help="Optional JSON config file for grid/profile overrides")
    parser.add_argument("--refresh", type=float, help="System sample interval seconds override")
    parser.add_argument("--api-url", default=os.environ.get("TASKS_API_URL", DEFAULT_API_URL), help="Task service base URL")
    parser.add_argument("--api-timeout", type=float, default=10.0, help="Task service timeout seconds")
    parser.add_argument("--log-level", default=os.environ.get("DASH_LOG_LEVEL", "info"), help="debug|info|warn|error")
    parser.add_argument("--log-file", default=os.environ.get("DASH_LOG_FILE", "logs/dashboard.log"), help="Log file path")
    parser.add_argument("--log-max-mb", type=int, default=int(os.environ.get("DASH_LOG_MAX_MB", "10")), help="Rotate log after N megabytes")
    parser.add_argument("--debug", action="store_true", default=env_flag("DASH_DEBUG"), help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)

    try:
        settings = Settings.from_args(args)
        logger = configure_logging(settings)
        profile = resolve_profile(args.profile, args.config)
    except (InitializationFailure, ValueError) as exc:
        print(f"dashboard: {exc}", file=sys.stderr)
        return 1

    if args.refresh:
        profile["refresh_seconds"] = max(1.0, args.refresh)

    console = Console()
    theme = Theme(color=console.is_terminal)
    try:
        dashboard = build_dashboard(profile, settings, theme, logger)
    except ValueError as exc:
        print(f"dashboard: {exc}", file=sys.stderr)
        return 1
    logger.info("starting dashboard", extra={"fields": {"profile": profile["name"], "live": args.live}})

    if args.json:
        _settle(dashboard, console.size.width, console.size.height)
        print(_json_output(profile, dashboard))
        return 0

    if args.live:
        try:
            return run_live(dashboard, console, EffectRunner())
        except InitializationFailure as exc:
            print(f"dashboard: {exc}", file=sys.stderr)
            return 1

    _settle(dashboard, console.size.width, console.size.height)
    console.print(Text.from_ansi(dashboard.render()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
