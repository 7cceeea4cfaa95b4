"""Typed dataclasses for the EduMind data model.

All models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Any


# ── Constants ─────────────────────────────────────────────────

PRIORITIES = ("low", "medium", "high")
PRIORITY_WEIGHT = {"high": 3, "medium": 2, "low": 1}

FOCUS = "focus"
SHORT_BREAK = "shortBreak"
LONG_BREAK = "longBreak"
TIMER_MODES = (FOCUS, SHORT_BREAK, LONG_BREAK)

DEFAULT_GOAL_ID = "goal-1"
DEFAULT_TARGET_MINUTES = 120

THEMES = ("light", "dark")


def new_id() -> str:
    """Short random record id."""
    return secrets.token_hex(5)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ── Tasks ─────────────────────────────────────────────────────


@dataclass
class Task:
    id: str = ""
    title: str = ""
    completed: bool = False
    priority: str = "medium"  # low, medium, high
    estimated_pomodoros: int = 1
    completed_pomodoros: int = 0
    created_at: int = 0  # epoch milliseconds

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        priority = str(d.get("priority", "medium"))
        if priority not in PRIORITIES:
            priority = "medium"
        return cls(
            id=str(d.get("id", "")),
            title=str(d.get("title", "")),
            completed=bool(d.get("completed", False)),
            priority=priority,
            estimated_pomodoros=_int(d.get("estimatedPomodoros"), 1),
            completed_pomodoros=_int(d.get("completedPomodoros"), 0),
            created_at=_int(d.get("createdAt"), 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "priority": self.priority,
            "estimatedPomodoros": self.estimated_pomodoros,
            "completedPomodoros": self.completed_pomodoros,
            "createdAt": self.created_at,
        }


# ── Schedule ──────────────────────────────────────────────────


@dataclass
class ScheduleItem:
    id: str = ""
    time: str = "08:00"  # zero-padded HH:MM
    subject: str = ""
    duration: int = 60  # minutes

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ScheduleItem:
        return cls(
            id=str(d.get("id", "")),
            time=str(d.get("time", "08:00")),
            subject=str(d.get("subject", "")),
            duration=_int(d.get("duration"), 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "time": self.time,
            "subject": self.subject,
            "duration": self.duration,
        }


# ── Sessions & Goal ───────────────────────────────────────────


@dataclass
class StudySession:
    id: str = ""
    date: str = ""  # YYYY-MM-DD
    duration: int = 0  # minutes
    mode: str = FOCUS
    subject: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StudySession:
        subject = d.get("subject")
        return cls(
            id=str(d.get("id", "")),
            date=str(d.get("date", "")),
            duration=_int(d.get("duration"), 0),
            mode=str(d.get("mode", FOCUS)),
            subject=str(subject) if subject else None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "duration": self.duration,
            "mode": self.mode,
        }
        if self.subject:
            d["subject"] = self.subject
        return d


@dataclass
class DailyGoal:
    id: str = DEFAULT_GOAL_ID
    date: str = ""
    target_minutes: int = DEFAULT_TARGET_MINUTES
    completed_minutes: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DailyGoal:
        if not d or not isinstance(d, dict):
            return cls()
        target = _int(d.get("targetMinutes"), DEFAULT_TARGET_MINUTES)
        if target < 1:
            target = DEFAULT_TARGET_MINUTES
        return cls(
            id=str(d.get("id", DEFAULT_GOAL_ID)),
            date=str(d.get("date", "")),
            target_minutes=target,
            completed_minutes=_int(d.get("completedMinutes"), 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "targetMinutes": self.target_minutes,
            "completedMinutes": self.completed_minutes,
        }


# ── Preferences ───────────────────────────────────────────────


@dataclass
class Sound:
    """Notification sound: a URL or data URI plus an optional display name."""

    url: str = ""
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "name": self.name}


BUILTIN_SOUNDS: dict[str, Sound] = {
    "chime": Sound("https://actions.google.com/sounds/v1/notifications/pizzicato.ogg", "Soft chime"),
    "digital": Sound("https://actions.google.com/sounds/v1/alarms/beep_short.ogg", "Digital"),
    "nature": Sound("https://actions.google.com/sounds/v1/foley/bird_chirp_short.ogg", "Birds"),
    "success": Sound("https://actions.google.com/sounds/v1/cartoon/clown_horn_accent.ogg", "Success"),
}


@dataclass
class Preferences:
    theme: str = "light"
    sound: Sound = field(default_factory=lambda: Sound(BUILTIN_SOUNDS["chime"].url, ""))

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Preferences:
        if not d or not isinstance(d, dict):
            return cls()
        theme = str(d.get("theme", "light"))
        if theme not in THEMES:
            theme = "light"
        sound = d.get("sound")
        prefs = cls(theme=theme)
        if isinstance(sound, dict) and sound.get("url"):
            prefs.sound = Sound(url=str(sound["url"]), name=str(sound.get("name", "") or ""))
        return prefs

    def to_dict(self) -> dict[str, Any]:
        return {"theme": self.theme, "sound": self.sound.to_dict()}


# ── AI results ────────────────────────────────────────────────


@dataclass
class Source:
    title: str = ""
    uri: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "uri": self.uri}


@dataclass
class TopicSummary:
    text: str = ""
    sources: list[Source] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "sources": [s.to_dict() for s in self.sources]}


@dataclass
class Place:
    title: str = ""
    uri: str = ""
    snippets: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "uri": self.uri, "snippets": list(self.snippets)}


@dataclass
class PlacesResult:
    text: str = ""
    places: list[Place] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "places": [p.to_dict() for p in self.places]}


# ── Metrics ───────────────────────────────────────────────────


@dataclass
class WeeklyPoint:
    date: str = ""
    label: str = ""
    minutes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "label": self.label, "minutes": self.minutes}


@dataclass
class ProgressSummary:
    today_minutes: int = 0
    total_minutes: int = 0
    weekly: list[WeeklyPoint] = field(default_factory=list)
    target_minutes: int = DEFAULT_TARGET_MINUTES
    percent: float = 0.0
    message: str = ""
    goal_drift: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "todayMinutes": self.today_minutes,
            "totalMinutes": self.total_minutes,
            "weekly": [p.to_dict() for p in self.weekly],
            "targetMinutes": self.target_minutes,
            "percent": round(self.percent, 2),
            "message": self.message,
            "goalDrift": self.goal_drift,
        }
