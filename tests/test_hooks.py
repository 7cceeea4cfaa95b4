"""Tests for edumind/hooks.py — hook system."""

import json
from concurrent.futures import ThreadPoolExecutor

import yaml

from edumind.hooks import HookDispatcher, HookNotifier, load_hooks_config, run_hooks
from edumind.models import Sound


def _write_hooks(workspace, config):
    (workspace / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")


def test_run_hooks_no_config(workspace):
    """No hooks.yaml -> no hooks run."""
    results = run_hooks("on_session_complete", {"duration": 25}, workspace)
    assert results == []


def test_run_hooks_with_echo(workspace):
    """Test hook that echoes context via stdin."""
    _write_hooks(workspace, {"on_session_complete": ["cat"]})

    results = run_hooks("on_session_complete", {"duration": 25, "mode": "focus"}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == 0
    output = json.loads(results[0]["stdout"])
    assert output["duration"] == 25
    assert output["mode"] == "focus"


def test_run_hooks_invalid_hook_point(workspace):
    _write_hooks(workspace, {"post_finalize": ["cat"]})
    results = run_hooks("post_finalize", {}, workspace)
    assert results == []


def test_run_hooks_timeout(workspace):
    """Test hook timeout protection."""
    _write_hooks(workspace, {"on_goal_reached": [{"command": "sleep 10", "timeout": 1}]})

    results = run_hooks("on_goal_reached", {"todayMinutes": 120}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == -1
    assert "timed out" in results[0].get("error", "").lower()


def test_run_hooks_nonzero_exit(workspace):
    _write_hooks(workspace, {"on_task_complete": ["exit 3"]})
    results = run_hooks("on_task_complete", {"id": "t1"}, workspace)
    assert results[0]["exit_code"] == 3


def test_load_hooks_config_unreadable(workspace):
    (workspace / "hooks.yaml").write_text("on_task_complete: [oops", encoding="utf-8")
    assert load_hooks_config(workspace) == {}


def test_hook_notifier_sends_sound_and_message(workspace):
    out = workspace / "notified.json"
    _write_hooks(workspace, {"on_notification": [f"cat > {out}"]})

    notifier = HookNotifier(workspace)
    notifier.play(Sound("https://example.com/ding.ogg", "Ding"))
    notifier.show("Time's up!", "Your Focus session has ended.")

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["title"] == "Time's up!"
    assert payload["body"] == "Your Focus session has ended."
    assert payload["sound"] == {"url": "https://example.com/ding.ogg", "name": "Ding"}


def test_hook_notifier_without_sound(workspace):
    out = workspace / "notified.json"
    _write_hooks(workspace, {"on_notification": [f"cat > {out}"]})
    HookNotifier(workspace).show("Hi", "There")
    assert json.loads(out.read_text(encoding="utf-8"))["sound"] is None


def test_malformed_hook_entries_skipped(workspace):
    _write_hooks(workspace, {"on_task_complete": [{"command": 123}, 42, {"timeout": 5}, "cat"]})
    results = run_hooks("on_task_complete", {"id": "t1"}, workspace)
    assert [r["command"] for r in results] == ["cat"]
    assert results[0]["exit_code"] == 0


def test_invalid_timeout_uses_default(workspace):
    _write_hooks(workspace, {"on_task_complete": [{"command": "cat", "timeout": "x"}]})
    results = run_hooks("on_task_complete", {"id": "t1"}, workspace)
    assert results[0]["exit_code"] == 0
    assert json.loads(results[0]["stdout"]) == {"id": "t1"}


def test_toggle_task_with_broken_hook_config(state, workspace):
    _write_hooks(workspace, {"on_task_complete": [{"command": 123, "timeout": "x"}]})
    task = state.toggle_task("t-old")
    assert task.completed is True


def test_dispatcher_runs_on_executor(workspace):
    out = workspace / "dispatched.json"
    _write_hooks(workspace, {"on_plan_generated": [f"cat > {out}"]})
    with ThreadPoolExecutor(max_workers=1) as executor:
        HookDispatcher(workspace, executor).dispatch("on_plan_generated", {"items": []})
    assert json.loads(out.read_text(encoding="utf-8")) == {"items": []}


def test_dispatcher_inline_without_executor(workspace):
    out = workspace / "inline.json"
    _write_hooks(workspace, {"on_goal_reached": [f"cat > {out}"]})
    HookDispatcher(workspace).dispatch("on_goal_reached", {"todayMinutes": 120})
    assert out.exists()
