"""Configuration loading utilities for the issue search service."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from notifications import DEFAULT_ORGANIZATIONS
from search_scorer import SearchConfig


@dataclass(frozen=True)
class AppConfig:
    """Application configuration loaded from YAML."""

    issues_file: Path
    notifications_file: Path | None = None
    host: str = "127.0.0.1"
    port: int = 8000
    organizations: tuple[str, ...] = DEFAULT_ORGANIZATIONS
    search: SearchConfig = field(default_factory=SearchConfig)


def load_config(config_path: Path) -> AppConfig:
    """Load and validate configuration from a YAML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as file:
        raw: dict[str, Any] = yaml.safe_load(file) or {}

    issues_file = _resolve_path(config_path, raw.get("issues_file"), "issues_file")
    notifications_raw = raw.get("notifications_file")
    notifications_file = (
        _resolve_path(config_path, notifications_raw, "notifications_file")
        if notifications_raw is not None
        else None
    )

    host = raw.get("host", "127.0.0.1")
    port = raw.get("port", 8000)
    if not isinstance(host, str) or not host:
        raise ValueError("'host' must be a non-empty string")
    if not isinstance(port, int) or isinstance(port, bool) or not (1 <= port <= 65535):
        raise ValueError("'port' must be an integer between 1 and 65535")

    organizations_raw = raw.get("organizations", list(DEFAULT_ORGANIZATIONS))
    if not isinstance(organizations_raw, list) or not organizations_raw:
        raise ValueError("'organizations' must be a non-empty list")
    for value in organizations_raw:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Each entry in 'organizations' must be a non-empty string")

    return AppConfig(
        issues_file=issues_file,
        notifications_file=notifications_file,
        host=host,
        port=port,
        organizations=tuple(organizations_raw),
        search=_load_search_config(raw.get("search") or {}),
    )


def _resolve_path(config_path: Path, value: Any, key: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{key}' must be a non-empty string")

    path = Path(value)
    if not path.is_absolute():
        path = (config_path.parent / path).resolve()
    return path


def _load_search_config(raw: Any) -> SearchConfig:
    if not isinstance(raw, dict):
        raise ValueError("'search' must be a mapping")

    defaults = SearchConfig()
    values: dict[str, float] = {}
    for key in ("fuzzy_search_threshold", "exact_match_bonus", "fuzzy_match_weight"):
        value = raw.get(key, getattr(defaults, key))
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ValueError(f"'search.{key}' must be a non-negative number")
        values[key] = float(value)

    return SearchConfig(**values)
