"""Process-wide settings consumed once at startup."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass

from dash_core.collectors import DEFAULT_API_URL

LOG_LEVELS = ("debug", "info", "warn", "warning", "error")


def env_flag(name: str, environ: dict | None = None) -> bool:
    value = (environ if environ is not None else os.environ).get(name, "")
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    log_level: str = "info"
    log_file: str = "logs/dashboard.log"
    log_max_mb: int = 10
    log_backups: int = 3
    api_url: str = DEFAULT_API_URL
    api_timeout: float = 10.0
    debug: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> Settings:
        level = str(args.log_level).lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {args.log_level}")
        return cls(
            log_level=level,
            log_file=args.log_file,
            log_max_mb=max(1, int(args.log_max_mb)),
            api_url=args.api_url,
            api_timeout=max(0.1, float(args.api_timeout)),
            debug=bool(args.debug),
        )
