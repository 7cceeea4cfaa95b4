"""Workspace root, settings, timezone and path helpers for EduMind."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from edumind.fileio import read_yaml

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_PLACES_MODEL = "gemini-2.5-flash"


def workspace_root() -> Path:
    """Get the workspace root directory (contains data/ and settings.yaml)."""
    return Path(
        os.environ.get("EDUMIND_ROOT", str(Path.home() / "edumind"))
    ).expanduser().resolve()


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    locale: str = "en"
    default_goal_minutes: int = 120
    model: str = DEFAULT_MODEL
    places_model: str = DEFAULT_PLACES_MODEL
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        lat = d.get("latitude")
        lng = d.get("longitude")
        try:
            goal = max(1, int(d.get("default_goal_minutes", 120)))
        except (TypeError, ValueError):
            goal = 120
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            locale=str(d.get("locale", "en")),
            default_goal_minutes=goal,
            model=str(d.get("model", DEFAULT_MODEL)),
            places_model=str(d.get("places_model", DEFAULT_PLACES_MODEL)),
            latitude=float(lat) if isinstance(lat, (int, float)) else None,
            longitude=float(lng) if isinstance(lng, (int, float)) else None,
        )


def load_settings(root: Path | None = None) -> Settings:
    """Load settings.yaml, falling back to defaults on any problem."""
    try:
        return Settings.from_dict(read_yaml(settings_path(root)))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable settings file: %s", e)
        return Settings()


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using UTC", name)
        return ZoneInfo("UTC")


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get user's timezone from settings.yaml, defaulting to UTC."""
    return resolve_timezone(load_settings(root).timezone)


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in user's timezone."""
    return datetime.now(get_user_timezone(root))


def today_local(root: Path | None = None) -> date:
    return now_local(root).date()


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in user's timezone."""
    return today_local(root).isoformat()


# ── Path helpers ──────────────────────────────────────────────

def data_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data"


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


def preferences_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "preferences.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "hooks.yaml"
