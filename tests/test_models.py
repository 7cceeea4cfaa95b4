"""Tests for edumind/models.py — dataclass serialization and load defaults."""

from edumind.models import (
    BUILTIN_SOUNDS,
    DailyGoal,
    Preferences,
    ProgressSummary,
    ScheduleItem,
    StudySession,
    Task,
    new_id,
)


def test_task_from_dict_camel_case():
    t = Task.from_dict({
        "id": "t1",
        "title": "Essay",
        "completed": True,
        "priority": "high",
        "estimatedPomodoros": 3,
        "completedPomodoros": 2,
        "createdAt": 1700000000000,
    })
    assert t.estimated_pomodoros == 3
    assert t.completed_pomodoros == 2
    assert t.created_at == 1700000000000
    d = t.to_dict()
    assert d["estimatedPomodoros"] == 3
    assert "estimated_pomodoros" not in d


def test_task_unknown_priority_defaults_to_medium():
    t = Task.from_dict({"id": "t1", "title": "X", "priority": "urgent"})
    assert t.priority == "medium"


def test_task_missing_keys_use_defaults():
    t = Task.from_dict({"id": "t1", "title": "X"})
    assert t.completed is False
    assert t.estimated_pomodoros == 1
    assert t.completed_pomodoros == 0


def test_schedule_item_to_dict():
    s = ScheduleItem(id="s1", time="09:00", subject="Math", duration=45)
    assert s.to_dict() == {"id": "s1", "time": "09:00", "subject": "Math", "duration": 45}


def test_session_subject_omitted_when_empty():
    s = StudySession(id="x", date="2026-02-11", duration=25, mode="focus")
    assert "subject" not in s.to_dict()
    s.subject = "Biology"
    assert s.to_dict()["subject"] == "Biology"


def test_daily_goal_defaults():
    g = DailyGoal.from_dict({})
    assert g.id == "goal-1"
    assert g.target_minutes == 120
    assert g.completed_minutes == 0


def test_daily_goal_rejects_non_positive_target():
    g = DailyGoal.from_dict({"targetMinutes": 0, "completedMinutes": 30})
    assert g.target_minutes == 120
    assert g.completed_minutes == 30


def test_preferences_default_sound_is_chime():
    p = Preferences()
    assert p.theme == "light"
    assert p.sound.url == BUILTIN_SOUNDS["chime"].url
    assert p.sound.name == ""


def test_preferences_from_dict_bad_theme():
    p = Preferences.from_dict({"theme": "solarized", "sound": {"url": "https://x/y.mp3", "name": "Y"}})
    assert p.theme == "light"
    assert p.sound.url == "https://x/y.mp3"
    assert p.sound.name == "Y"


def test_progress_summary_rounds_percent():
    d = ProgressSummary(today_minutes=25, percent=20.833333).to_dict()
    assert d["percent"] == 20.83
    assert d["todayMinutes"] == 25


def test_new_id_unique():
    assert len({new_id() for _ in range(100)}) == 100
