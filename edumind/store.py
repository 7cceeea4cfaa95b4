"""Persistent key-value store for EduMind records.

Each key maps to one file under the workspace root. Keys are saved
independently; a failed or corrupt read of one key never affects another.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

import yaml

from edumind.fileio import read_json, read_yaml, write_json_atomic, write_yaml_atomic
from edumind.models import DailyGoal, Preferences, ScheduleItem, StudySession, Task
from edumind.workspace import data_dir, preferences_path, workspace_root

logger = logging.getLogger(__name__)

T = TypeVar("T")

TASKS = "tasks"
SESSIONS = "sessions"
SCHEDULE = "schedule"
DAILY_GOAL = "daily_goal"
PREFERENCES = "preferences"

_JSON_KEYS = {TASKS, SESSIONS, SCHEDULE, DAILY_GOAL}
KEYS = _JSON_KEYS | {PREFERENCES}


class Store:
    """Load/save typed records by key. Reads never raise on bad data."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root if root is not None else workspace_root()

    def path_for(self, key: str) -> Path:
        if key not in KEYS:
            raise KeyError(f"Unknown store key: {key}")
        if key == PREFERENCES:
            return preferences_path(self.root)
        return data_dir(self.root) / f"{key}.json"

    def load(self, key: str) -> Any | None:
        """Return the stored value for *key*, or None if missing or unreadable."""
        path = self.path_for(key)
        try:
            if key == PREFERENCES:
                return read_yaml(path) or None
            return read_json(path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            logger.warning("Could not read %s (%s); using default", path.name, e)
            return None

    def save(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        if key == PREFERENCES:
            write_yaml_atomic(path, value)
        else:
            write_json_atomic(path, value)

    # ── Typed helpers ────────────────────────────────────────

    def _load_list(self, key: str, factory: Callable[[dict[str, Any]], T]) -> list[T]:
        data = self.load(key)
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("Expected a list in %s, got %s; using default", key, type(data).__name__)
            return []
        items = []
        for raw in data:
            if isinstance(raw, dict):
                items.append(factory(raw))
            else:
                logger.warning("Skipping malformed %s entry: %r", key, raw)
        return items

    def load_tasks(self) -> list[Task]:
        return self._load_list(TASKS, Task.from_dict)

    def save_tasks(self, tasks: list[Task]) -> None:
        self.save(TASKS, [t.to_dict() for t in tasks])

    def load_sessions(self) -> list[StudySession]:
        return self._load_list(SESSIONS, StudySession.from_dict)

    def save_sessions(self, sessions: list[StudySession]) -> None:
        self.save(SESSIONS, [s.to_dict() for s in sessions])

    def load_schedule(self) -> list[ScheduleItem]:
        return self._load_list(SCHEDULE, ScheduleItem.from_dict)

    def save_schedule(self, schedule: list[ScheduleItem]) -> None:
        self.save(SCHEDULE, [s.to_dict() for s in schedule])

    def load_goal(self, today: str, default_target: int = 120) -> DailyGoal:
        data = self.load(DAILY_GOAL)
        if isinstance(data, dict):
            return DailyGoal.from_dict(data)
        if data is not None:
            logger.warning("Expected an object in %s; using default", DAILY_GOAL)
        return DailyGoal(date=today, target_minutes=max(1, default_target))

    def save_goal(self, goal: DailyGoal) -> None:
        self.save(DAILY_GOAL, goal.to_dict())

    def load_preferences(self) -> Preferences:
        return Preferences.from_dict(self.load(PREFERENCES) or {})

    def save_preferences(self, prefs: Preferences) -> None:
        self.save(PREFERENCES, prefs.to_dict())
