"""Application state: loaded collections plus the operations that persist them.

One ``AppState`` is created at startup and handed to the front end. Every
mutating method applies a domain operation and saves only the affected key.
Timer completions arrive as ``SessionCompleted`` events.
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable
from zoneinfo import ZoneInfo

from edumind import metrics, progress, schedule as schedule_ops, tasks as task_ops
from edumind.events import EventBus, SessionCompleted
from edumind.hooks import HookDispatcher, HookNotifier
from edumind.models import (
    BUILTIN_SOUNDS,
    THEMES,
    ProgressSummary,
    ScheduleItem,
    Sound,
    StudySession,
    Task,
)
from edumind.store import Store
from edumind.timer import Notifier, PomodoroTimer
from edumind.workspace import Settings, load_settings, resolve_timezone, workspace_root

logger = logging.getLogger(__name__)


class AppState:
    def __init__(
        self,
        root: Path | None = None,
        settings: Settings | None = None,
        bus: EventBus | None = None,
        notifier: Notifier | None = None,
        hooks: HookDispatcher | None = None,
    ) -> None:
        self.root = root if root is not None else workspace_root()
        self.settings = settings or load_settings(self.root)
        self.store = Store(self.root)
        self.bus = bus or EventBus()
        self.hooks = hooks or HookDispatcher(self.root)

        self.tasks: list[Task] = self.store.load_tasks()
        self.sessions: list[StudySession] = self.store.load_sessions()
        self.schedule: list[ScheduleItem] = self.store.load_schedule()
        self.goal = self.store.load_goal(self.today().isoformat(), self.settings.default_goal_minutes)
        self.preferences = self.store.load_preferences()

        self.timer = PomodoroTimer(
            self.bus,
            notifier if notifier is not None else HookNotifier(dispatcher=self.hooks),
            sound=self.preferences.sound,
        )
        self.bus.subscribe(SessionCompleted, self.on_session_completed)

    # ── Clock ────────────────────────────────────────────────

    def timezone(self) -> ZoneInfo:
        return resolve_timezone(self.settings.timezone)

    def today(self) -> date:
        return datetime.now(self.timezone()).date()

    # ── Tasks ────────────────────────────────────────────────

    def add_task(self, title: str, priority: str = "medium") -> Task | None:
        task = task_ops.add_task(self.tasks, title, priority)
        if task is not None:
            self.store.save_tasks(self.tasks)
        return task

    def toggle_task(self, task_id: str) -> Task | None:
        task = task_ops.toggle_task(self.tasks, task_id)
        if task is None:
            return None
        self.store.save_tasks(self.tasks)
        if task.completed:
            self.hooks.dispatch("on_task_complete", task.to_dict())
        return task

    def delete_task(self, task_id: str) -> bool:
        deleted = task_ops.delete_task(self.tasks, task_id)
        if deleted:
            self.store.save_tasks(self.tasks)
        return deleted

    # ── Schedule ─────────────────────────────────────────────

    def add_schedule_item(self, time: str, subject: str, duration: int) -> ScheduleItem | None:
        item = schedule_ops.add_schedule_item(self.schedule, time, subject, duration)
        if item is not None:
            self.store.save_schedule(self.schedule)
        return item

    def delete_schedule_item(self, item_id: str) -> bool:
        deleted = schedule_ops.delete_schedule_item(self.schedule, item_id)
        if deleted:
            self.store.save_schedule(self.schedule)
        return deleted

    def clear_schedule(self) -> None:
        schedule_ops.clear_schedule(self.schedule)
        self.store.save_schedule(self.schedule)

    def ingest_plan(self, items: Iterable[Any]) -> list[ScheduleItem]:
        batch = schedule_ops.ingest_plan_items(self.schedule, items)
        if batch:
            self.store.save_schedule(self.schedule)
            self.hooks.dispatch("on_plan_generated", {"items": [i.to_dict() for i in batch]})
        return batch

    def display_schedule(self) -> list[ScheduleItem]:
        return schedule_ops.schedule_for_display(self.schedule)

    # ── Sessions & goal ──────────────────────────────────────

    def record_session(self, duration: int, mode: str, subject: str | None = None) -> StudySession | None:
        today = self.today()
        before = metrics.today_focus_minutes(self.sessions, today)
        session = progress.record_session(
            self.sessions, self.goal, duration, mode, today.isoformat(), subject
        )
        if session is None:
            return None
        self.store.save_sessions(self.sessions)
        self.store.save_goal(self.goal)
        self.hooks.dispatch("on_session_complete", session.to_dict())

        after = metrics.today_focus_minutes(self.sessions, today)
        target = self.goal.target_minutes
        if before < target <= after:
            self.hooks.dispatch("on_goal_reached", {"todayMinutes": after, "targetMinutes": target})
        return session

    def on_session_completed(self, event: SessionCompleted) -> None:
        self.record_session(event.duration_minutes, event.mode, event.subject)

    def update_goal_target(self, target_minutes: int) -> bool:
        changed = progress.update_goal_target(self.goal, target_minutes)
        if changed:
            self.store.save_goal(self.goal)
        return changed

    def progress(self) -> ProgressSummary:
        summary = metrics.progress_summary(self.sessions, self.goal, self.today(), self.settings.locale)
        if summary.goal_drift:
            logger.debug("Goal counter differs from session log by %d min", summary.goal_drift)
        return summary

    # ── Preferences ──────────────────────────────────────────

    def set_theme(self, theme: str) -> bool:
        if theme not in THEMES:
            return False
        self.preferences.theme = theme
        self.store.save_preferences(self.preferences)
        return True

    def toggle_theme(self) -> str:
        self.set_theme("light" if self.preferences.theme == "dark" else "dark")
        return self.preferences.theme

    def set_sound(self, url: str, name: str = "") -> bool:
        """Select a notification sound by URL or data URI."""
        url = (url or "").strip()
        if not url:
            return False
        self.preferences.sound = Sound(url=url, name=name)
        self.timer.sound = self.preferences.sound
        self.store.save_preferences(self.preferences)
        return True

    def select_builtin_sound(self, sound_id: str) -> bool:
        sound = BUILTIN_SOUNDS.get(sound_id)
        if sound is None:
            return False
        return self.set_sound(sound.url)

    def set_sound_file(self, path: Path) -> bool:
        """Embed a local audio file as a data URI, named after the file."""
        mime, _ = mimetypes.guess_type(path.name)
        if not mime or not mime.startswith("audio/"):
            return False
        try:
            payload = base64.b64encode(path.read_bytes()).decode("ascii")
        except OSError as e:
            logger.warning("Could not read sound file %s: %s", path, e)
            return False
        return self.set_sound(f"data:{mime};base64,{payload}", path.name)
