"""Tests for edumind/store.py — keyed persistence with safe defaults."""

import pytest

from edumind.models import DailyGoal, Preferences, ScheduleItem, Sound, StudySession, Task
from edumind.store import DAILY_GOAL, PREFERENCES, SESSIONS, Store


def test_load_tasks_from_workspace(workspace):
    tasks = Store(workspace).load_tasks()
    assert [t.id for t in tasks] == ["t-old", "t-new"]
    assert tasks[1].completed is True


def test_missing_keys_use_defaults(workspace):
    store = Store(workspace)
    assert store.load_sessions() == []
    assert store.load_schedule() == []
    goal = store.load_goal("2026-02-11")
    assert goal.target_minutes == 120
    assert goal.completed_minutes == 0
    assert goal.date == "2026-02-11"
    assert store.load_preferences() == Preferences()


def test_corrupt_json_falls_back_to_default(workspace):
    (workspace / "data" / "sessions.json").write_text("{not json", encoding="utf-8")
    store = Store(workspace)
    assert store.load(SESSIONS) is None
    assert store.load_sessions() == []
    # Other keys are unaffected
    assert len(store.load_tasks()) == 2


def test_wrong_shape_falls_back_to_default(workspace):
    (workspace / "data" / "schedule.json").write_text('{"a": 1}', encoding="utf-8")
    (workspace / "data" / "daily_goal.json").write_text("[1, 2]", encoding="utf-8")
    store = Store(workspace)
    assert store.load_schedule() == []
    assert store.load_goal("2026-02-11").target_minutes == 120


def test_malformed_entries_skipped(workspace):
    (workspace / "data" / "schedule.json").write_text(
        '[{"id": "s1", "time": "09:00", "subject": "Math", "duration": 30}, "junk"]',
        encoding="utf-8",
    )
    schedule = Store(workspace).load_schedule()
    assert [s.id for s in schedule] == ["s1"]


def test_corrupt_preferences_yaml(workspace):
    (workspace / "preferences.yaml").write_text("theme: [unclosed", encoding="utf-8")
    assert Store(workspace).load_preferences() == Preferences()


def test_save_then_load(workspace):
    store = Store(workspace)
    store.save_schedule([ScheduleItem(id="s1", time="10:00", subject="Physics", duration=50)])
    store.save_sessions([StudySession(id="x", date="2026-02-11", duration=25, mode="focus")])
    store.save_goal(DailyGoal(date="2026-02-11", target_minutes=90, completed_minutes=25))

    fresh = Store(workspace)
    assert fresh.load_schedule()[0].subject == "Physics"
    assert fresh.load_sessions()[0].duration == 25
    goal = fresh.load_goal("2026-02-12")
    assert goal.target_minutes == 90
    assert goal.completed_minutes == 25
    # Stored date wins over the caller's today
    assert goal.date == "2026-02-11"


def test_preferences_stored_as_yaml(workspace):
    store = Store(workspace)
    store.save_preferences(Preferences(theme="dark"))
    assert store.path_for(PREFERENCES).name == "preferences.yaml"
    assert "theme: dark" in (workspace / "preferences.yaml").read_text(encoding="utf-8")
    assert store.load_preferences().theme == "dark"


def test_goal_path(workspace):
    assert Store(workspace).path_for(DAILY_GOAL) == workspace / "data" / "daily_goal.json"


def test_unknown_key():
    with pytest.raises(KeyError):
        Store().path_for("streaks")


def test_save_leaves_no_temp_files(workspace):
    Store(workspace).save_tasks([])
    assert not list((workspace / "data").glob(".tmp_*"))


def test_every_key_round_trips_unchanged(workspace):
    tasks = [
        Task(id="a", title="Read ch. 3", priority="high", estimated_pomodoros=3,
             completed_pomodoros=1, created_at=1770000000000),
        Task(id="b", title="Flashcards", completed=True, priority="low", created_at=1770000001000),
    ]
    sessions = [
        StudySession(id="x", date="2026-02-10", duration=25, mode="focus", subject="Biology"),
        StudySession(id="y", date="2026-02-11", duration=5, mode="shortBreak"),
    ]
    schedule = [
        ScheduleItem(id="s2", time="14:30", subject="Chemistry", duration=45),
        ScheduleItem(id="s1", time="09:00", subject="Math", duration=30),
    ]
    goal = DailyGoal(date="2026-02-11", target_minutes=90, completed_minutes=50)
    prefs = Preferences(theme="dark", sound=Sound(url="data:audio/ogg;base64,AAAA", name="bell.ogg"))

    store = Store(workspace)
    store.save_tasks(tasks)
    store.save_sessions(sessions)
    store.save_schedule(schedule)
    store.save_goal(goal)
    store.save_preferences(prefs)

    fresh = Store(workspace)
    assert fresh.load_tasks() == tasks
    assert fresh.load_sessions() == sessions
    assert fresh.load_schedule() == schedule
    assert fresh.load_goal("2026-02-12") == goal
    assert fresh.load_preferences() == prefs
