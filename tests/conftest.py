"""Shared test fixtures for EduMind tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
import yaml

from edumind.app_state import AppState


class RecordingNotifier:
    """Notifier that remembers what the timer asked it to do."""

    def __init__(self) -> None:
        self.sounds = []
        self.messages = []

    def play(self, sound) -> None:
        self.sounds.append(sound)

    def show(self, title: str, body: str) -> None:
        self.messages.append((title, body))


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with settings and a little data."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    settings = {
        "timezone": "UTC",
        "locale": "en",
        "default_goal_minutes": 120,
    }
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    tasks = [
        {
            "id": "t-old",
            "title": "Read chapter 3",
            "completed": False,
            "priority": "low",
            "estimatedPomodoros": 2,
            "completedPomodoros": 0,
            "createdAt": 1_700_000_000_000,
        },
        {
            "id": "t-new",
            "title": "Problem set 5",
            "completed": True,
            "priority": "high",
            "estimatedPomodoros": 1,
            "completedPomodoros": 1,
            "createdAt": 1_700_000_100_000,
        },
    ]
    (root / "data" / "tasks.json").write_text(json.dumps(tasks, indent=2), encoding="utf-8")

    # Set env var
    os.environ["EDUMIND_ROOT"] = str(root)
    yield root
    # Cleanup
    if "EDUMIND_ROOT" in os.environ:
        del os.environ["EDUMIND_ROOT"]


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def state(workspace: Path, notifier: RecordingNotifier) -> AppState:
    return AppState(workspace, notifier=notifier)
