"""Plugin/hook system for EduMind.

Lifecycle hooks run shell commands at key points in the system.
Configured via hooks.yaml in the workspace root.

Hook points:
- on_session_complete
- on_notification (timer sound + message; this is how alerts reach the desktop)
- on_task_complete
- on_plan_generated
- on_goal_reached
"""

from __future__ import annotations

import json
import logging
import subprocess
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any

import yaml

from edumind.fileio import read_yaml
from edumind.models import Sound
from edumind.workspace import hooks_config_path, workspace_root

logger = logging.getLogger(__name__)


VALID_HOOK_POINTS = {
    "on_session_complete",
    "on_notification",
    "on_task_complete",
    "on_plan_generated",
    "on_goal_reached",
}

DEFAULT_TIMEOUT = 30


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    """Load hooks configuration from hooks.yaml."""
    if root is None:
        root = workspace_root()
    path = hooks_config_path(root)
    if not path.exists():
        return {}
    try:
        return read_yaml(path)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable hooks.yaml: %s", e)
        return {}


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run all hooks registered for a given hook point.

    Context is passed as JSON via stdin to each hook subprocess.
    Returns list of results with stdout/stderr and exit codes.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []

    if root is None:
        root = workspace_root()

    config = load_hooks_config(root)
    hooks = config.get(hook_point, [])

    if not hooks or not isinstance(hooks, list):
        return []

    results = []
    context_json = json.dumps(context, ensure_ascii=False)

    for hook in hooks:
        if isinstance(hook, str):
            command = hook
            timeout = DEFAULT_TIMEOUT
        elif isinstance(hook, dict):
            command = hook.get("command", "")
            timeout = hook.get("timeout", DEFAULT_TIMEOUT)
        else:
            logger.warning("Skipping malformed %s hook: %r", hook_point, hook)
            continue

        if not isinstance(command, str) or not command:
            logger.warning("Skipping %s hook without a command string: %r", hook_point, hook)
            continue
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            logger.warning("Invalid timeout %r for hook %s, using %ss", timeout, command, DEFAULT_TIMEOUT)
            timeout = DEFAULT_TIMEOUT

        result: dict[str, Any] = {"command": command, "hook_point": hook_point}
        try:
            proc = subprocess.run(
                command,
                shell=True,
                input=context_json,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(root),
            )
            result["exit_code"] = proc.returncode
            result["stdout"] = proc.stdout[:4096]  # Cap output
            result["stderr"] = proc.stderr[:4096]
            if proc.returncode != 0:
                logger.warning("Hook %s exited with %d", command, proc.returncode)
        except subprocess.TimeoutExpired:
            result["exit_code"] = -1
            result["error"] = f"Hook timed out after {timeout}s"
            logger.warning("Hook %s timed out after %ss", command, timeout)
        except (OSError, ValueError) as e:
            result["exit_code"] = -1
            result["error"] = str(e)
            logger.warning("Hook %s failed: %s", command, e)

        results.append(result)

    return results


def _log_hook_failure(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.error("Hook dispatch failed: %s", error, exc_info=error)


class HookDispatcher:
    """Runs hooks inline, or on *executor* so callers never wait on them.

    Front ends that own an event loop pass a single-worker executor: hooks
    then run one at a time, in the order they were dispatched.
    """

    def __init__(self, root: Path | None = None, executor: Executor | None = None) -> None:
        self.root = root
        self.executor = executor

    def dispatch(self, hook_point: str, context: dict[str, Any]) -> None:
        if self.executor is None:
            run_hooks(hook_point, context, self.root)
            return
        future = self.executor.submit(run_hooks, hook_point, context, self.root)
        future.add_done_callback(_log_hook_failure)


class HookNotifier:
    """Timer notifier that forwards sound and message to on_notification hooks.

    The sound is only remembered by ``play``; ``show`` sends both in one hook
    call so a single script can beep and pop a desktop notification.
    """

    def __init__(self, root: Path | None = None, dispatcher: HookDispatcher | None = None) -> None:
        self.dispatcher = dispatcher or HookDispatcher(root)
        self._pending_sound: Sound | None = None

    def play(self, sound: Sound) -> None:
        self._pending_sound = sound

    def show(self, title: str, body: str) -> None:
        sound = self._pending_sound
        self._pending_sound = None
        self.dispatcher.dispatch(
            "on_notification",
            {
                "title": title,
                "body": body,
                "sound": sound.to_dict() if sound else None,
            },
        )
