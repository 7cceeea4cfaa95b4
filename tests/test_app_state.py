"""Tests for edumind/app_state.py — persistence wiring and timer integration."""

import json

import yaml

from edumind.ai import PlanItem
from edumind.app_state import AppState
from edumind.models import BUILTIN_SOUNDS
from edumind.store import Store


def test_loads_workspace_data(state):
    assert [t.id for t in state.tasks] == ["t-old", "t-new"]
    assert state.goal.target_minutes == 120
    assert state.preferences.theme == "light"


def test_add_task_persists(state, workspace):
    task = state.add_task("Flashcards", "high")
    assert task is not None
    saved = Store(workspace).load_tasks()
    assert saved[0].title == "Flashcards"
    assert len(saved) == 3


def test_invalid_task_not_saved(state, workspace):
    before = (workspace / "data" / "tasks.json").read_text(encoding="utf-8")
    assert state.add_task("  ") is None
    assert (workspace / "data" / "tasks.json").read_text(encoding="utf-8") == before


def test_toggle_and_delete_persist(state, workspace):
    state.toggle_task("t-old")
    assert Store(workspace).load_tasks()[0].completed is True
    assert state.delete_task("t-new") is True
    assert [t.id for t in Store(workspace).load_tasks()] == ["t-old"]


def test_timer_completion_records_focus_session(state, workspace, notifier):
    state.timer.start()
    for _ in range(1500):
        state.timer.tick()

    assert len(state.sessions) == 1
    session = state.sessions[0]
    assert session.mode == "focus"
    assert session.duration == 25
    assert session.date == state.today().isoformat()
    assert state.goal.completed_minutes == 25
    assert len(notifier.messages) == 1

    summary = state.progress()
    assert summary.today_minutes == 25
    assert summary.message == "95 minutes left to reach today's goal."

    fresh = Store(workspace)
    assert len(fresh.load_sessions()) == 1
    assert fresh.load_goal("").completed_minutes == 25


def test_break_completion_leaves_goal(state):
    state.timer.switch_mode("shortBreak")
    state.timer.skip()
    assert state.sessions[0].mode == "shortBreak"
    assert state.sessions[0].duration == 5
    assert state.goal.completed_minutes == 0


def test_goal_reached_hook(state, workspace):
    out = workspace / "goal.json"
    (workspace / "hooks.yaml").write_text(
        yaml.dump({"on_goal_reached": [f"cat > {out}"]}), encoding="utf-8"
    )
    state.update_goal_target(30)
    state.record_session(25, "focus")
    assert not out.exists()
    state.record_session(25, "focus")
    assert json.loads(out.read_text(encoding="utf-8")) == {"todayMinutes": 50, "targetMinutes": 30}


def test_update_goal_target_persists(state, workspace):
    assert state.update_goal_target(90) is True
    assert state.update_goal_target(0) is False
    assert Store(workspace).load_goal("").target_minutes == 90


def test_schedule_operations_persist(state, workspace):
    state.add_schedule_item("14:00", "Chemistry", 60)
    state.add_schedule_item("9:00", "Math", 45)
    assert [s.time for s in Store(workspace).load_schedule()] == ["09:00", "14:00"]

    state.ingest_plan([PlanItem(time="11:00", subject="Review", duration=30)])
    assert Store(workspace).load_schedule()[0].subject == "Review"
    assert [s.time for s in state.display_schedule()] == ["09:00", "11:00", "14:00"]

    state.clear_schedule()
    assert Store(workspace).load_schedule() == []


def test_empty_plan_not_saved(state, workspace):
    assert state.ingest_plan([]) == []
    assert not (workspace / "data" / "schedule.json").exists()


def test_theme_toggle_persists(state, workspace):
    assert state.toggle_theme() == "dark"
    assert AppState(workspace).preferences.theme == "dark"
    assert state.set_theme("neon") is False


def test_select_builtin_sound_updates_timer(state, notifier):
    assert state.select_builtin_sound("nature") is True
    assert state.preferences.sound.url == BUILTIN_SOUNDS["nature"].url
    assert state.select_builtin_sound("gong") is False
    state.timer.skip()
    assert notifier.sounds[-1].url == BUILTIN_SOUNDS["nature"].url


def test_set_sound_file(state, tmp_path):
    path = tmp_path / "bell.mp3"
    path.write_bytes(b"ID3fake")
    assert state.set_sound_file(path) is True
    assert state.preferences.sound.url.startswith("data:audio/mpeg;base64,")
    assert state.preferences.sound.name == "bell.mp3"


def test_set_sound_file_rejects_non_audio(state, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hi", encoding="utf-8")
    assert state.set_sound_file(path) is False
