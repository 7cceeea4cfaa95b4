#!/usr/bin/env python3
"""EduMind TUI — pomodoro timer, tasks, schedule and progress in the terminal."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.reactive import reactive
from textual.widgets import (
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Markdown,
    ProgressBar,
    Select,
    Static,
)

from edumind import AppState, filter_tasks, format_time, pending_count, sort_tasks
from edumind.ai import Gateway
from edumind.assistant import Assistant, AssistantBusy, fixed_location
from edumind.events import SessionCompleted
from edumind.hooks import HookDispatcher, HookNotifier
from edumind.models import PRIORITIES, Sound
from edumind.schedule import total_planned_minutes
from edumind.tasks import FILTER_OPTIONS, SORT_OPTIONS
from edumind.timer import MODE_LABELS
from edumind.workspace import workspace_root

logger = logging.getLogger(__name__)

PRIORITY_MARK = {"high": "!!!", "medium": "!!", "low": "!"}


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#left-pane {
    width: 1fr;
    min-width: 34;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#right-pane {
    width: 1fr;
    min-width: 34;
    padding: 0 1;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#timer-display {
    height: 3;
    content-align: center middle;
    text-style: bold;
    border: tall $primary-background-darken-2;
}

#timer-mode {
    height: 1;
    content-align: center middle;
    color: $text-muted;
}

.input-row {
    height: auto;
}

.input-row Input {
    width: 1fr;
}

#sched-time, #sched-duration {
    max-width: 12;
}

#task-priority {
    width: 16;
}

#tasks-table {
    height: 1fr;
    min-height: 6;
}

#schedule-table {
    height: 1fr;
    min-height: 6;
}

#progress-info, #weekly-chart, #quote {
    height: auto;
    padding: 0 1;
}

#quote {
    color: $text-muted;
    margin: 1 0 0 0;
}

#assistant-screen {
    padding: 1 2;
}

#assistant-output {
    height: 1fr;
    border: tall $primary-background-darken-2;
}
"""


# ── Notifications ──────────────────────────────────────────────


class TuiNotifier:
    """Timer notifier: terminal bell and toast, plus the notification hook."""

    def __init__(self, app: App, hooks: HookNotifier) -> None:
        self.app = app
        self.hooks = hooks

    def play(self, sound: Sound) -> None:
        self.app.bell()
        self.hooks.play(sound)

    def show(self, title: str, body: str) -> None:
        self.app.notify(body, title=title, severity="information")
        self.hooks.show(title, body)


# ── Screens ────────────────────────────────────────────────────


class AssistantScreen(Vertical):
    """AI assistant view: plan generation, topic search and study spots."""

    def compose(self) -> ComposeResult:
        yield Label("Study plan", classes="section-title")
        yield Horizontal(
            Input(placeholder="topics, e.g. calculus, organic chemistry", id="plan-topics"),
            Input(value="4", placeholder="hours", id="plan-hours", type="number"),
            classes="input-row",
        )
        yield Label("Topic search", classes="section-title")
        yield Input(placeholder="topic to research…", id="search-topic")
        yield Label("Study spots nearby", classes="section-title")
        yield Input(placeholder="quiet libraries and cafes to study", id="places-query")
        yield Markdown(id="assistant-output")


# ── Main app ───────────────────────────────────────────────────


class EduMindApp(App):
    """EduMind — study timer, tasks and schedule."""

    TITLE = "EduMind"
    CSS = CSS
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("space", "toggle_timer", "Start/Pause"),
        Binding("r", "reset_timer", "Reset"),
        Binding("n", "skip_timer", "Skip"),
        Binding("1", "mode('focus')", "Focus", show=False),
        Binding("2", "mode('shortBreak')", "Short", show=False),
        Binding("3", "mode('longBreak')", "Long", show=False),
        Binding("x", "toggle_task", "Done"),
        Binding("delete", "delete_row", "Delete"),
        Binding("o", "cycle_sort", "Sort"),
        Binding("p", "cycle_filter", "Filter"),
        Binding("f", "focus_task", "Focus task", show=False),
        Binding("c", "clear_schedule", "Clear plan", show=False),
        Binding("i", "show_assistant", "Assistant"),
        Binding("ctrl+t", "toggle_theme", "Theme"),
        Binding("escape", "blur_focus", "Back"),
        Binding("q", "quit_app", "Quit"),
    ]

    current_view: reactive[str] = reactive("dashboard")

    def __init__(self, root: Path | None = None) -> None:
        super().__init__()
        root = root if root is not None else workspace_root()
        self._hook_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="edumind-hooks")
        hooks = HookDispatcher(root, self._hook_executor)
        self.state = AppState(
            root,
            notifier=TuiNotifier(self, HookNotifier(dispatcher=hooks)),
            hooks=hooks,
        )
        settings = self.state.settings
        self.assistant = Assistant(
            Gateway(model=settings.model, places_model=settings.places_model),
            location_provider=fixed_location(settings.latitude, settings.longitude),
        )
        self._sort = "date"
        self._filter = "all"
        self.state.bus.subscribe(SessionCompleted, self._on_session_completed)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            VerticalScroll(
                Label("Timer", classes="section-title"),
                Static(id="timer-display"),
                Static(id="timer-mode"),
                ProgressBar(total=100, show_eta=False, id="timer-progress"),
                Label("Schedule", classes="section-title", id="schedule-title"),
                Horizontal(
                    Input(value="08:00", placeholder="HH:MM", id="sched-time"),
                    Input(placeholder="subject", id="sched-subject"),
                    Input(value="60", placeholder="min", id="sched-duration", type="integer"),
                    classes="input-row",
                ),
                DataTable(id="schedule-table", cursor_type="row"),
                Static(id="quote"),
                id="left-pane",
                can_focus=False,
            ),
            VerticalScroll(
                Label("Tasks", classes="section-title"),
                Horizontal(
                    Input(placeholder="new task…", id="task-input"),
                    Select(
                        [(p.title(), p) for p in PRIORITIES],
                        value="medium",
                        allow_blank=False,
                        id="task-priority",
                    ),
                    classes="input-row",
                ),
                DataTable(id="tasks-table", cursor_type="row"),
                Label("Progress", classes="section-title"),
                Static(id="progress-info"),
                ProgressBar(total=100, show_eta=False, id="goal-progress"),
                Static(id="weekly-chart"),
                id="right-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#tasks-table", DataTable).add_columns("", "Task", "Priority", "Pomodoros")
        self.query_one("#schedule-table", DataTable).add_columns("Time", "Subject", "Minutes")
        self._apply_theme()
        self._refresh_all()
        self.set_interval(1.0, self._tick)
        self._load_quote()

    def on_unmount(self) -> None:
        # Queued hooks still finish; no new ones are accepted.
        self._hook_executor.shutdown(wait=False)

    # ── Rendering ──────────────────────────────────────────────

    def _refresh_all(self) -> None:
        self._refresh_timer()
        self._refresh_tasks()
        self._refresh_schedule()
        self._refresh_progress()

    def _refresh_timer(self) -> None:
        timer = self.state.timer
        self.query_one("#timer-display", Static).update(format_time(timer.remaining))
        status = "running" if timer.running else "paused"
        subject = f" · {timer.subject}" if timer.subject else ""
        self.query_one("#timer-mode", Static).update(f"{MODE_LABELS[timer.mode]} ({status}){subject}")
        self.query_one("#timer-progress", ProgressBar).update(progress=timer.progress_percent)

    def _refresh_tasks(self) -> None:
        table = self.query_one("#tasks-table", DataTable)
        table.clear()
        for task in sort_tasks(filter_tasks(self.state.tasks, self._filter), self._sort):
            table.add_row(
                "✔" if task.completed else "·",
                task.title,
                PRIORITY_MARK.get(task.priority, task.priority),
                f"{task.completed_pomodoros}/{task.estimated_pomodoros}",
                key=task.id,
            )
        self.sub_title = (
            f"{pending_count(self.state.tasks)} pending  (sort: {self._sort}, filter: {self._filter})"
        )

    def _refresh_schedule(self) -> None:
        table = self.query_one("#schedule-table", DataTable)
        table.clear()
        for item in self.state.display_schedule():
            table.add_row(item.time, item.subject, str(item.duration), key=item.id)
        planned = total_planned_minutes(self.state.schedule)
        self.query_one("#schedule-title", Label).update(f"Schedule  ({planned} min planned)")

    def _refresh_progress(self) -> None:
        summary = self.state.progress()
        self.query_one("#progress-info", Static).update(
            f"Today: {summary.today_minutes} / {summary.target_minutes} min"
            f"  ·  Total: {summary.total_minutes} min\n{summary.message}"
        )
        self.query_one("#goal-progress", ProgressBar).update(progress=summary.percent)

        peak = max((p.minutes for p in summary.weekly), default=0) or 1
        lines = [
            f"{p.label:>4} {'█' * round(20 * p.minutes / peak):<20} {p.minutes}m"
            for p in summary.weekly
        ]
        self.query_one("#weekly-chart", Static).update("\n".join(lines))

    def _apply_theme(self) -> None:
        self.theme = "textual-dark" if self.state.preferences.theme == "dark" else "textual-light"

    # ── Timer ──────────────────────────────────────────────────

    def _tick(self) -> None:
        self.state.timer.tick()
        self._refresh_timer()

    def _on_session_completed(self, event: SessionCompleted) -> None:
        self._refresh_progress()

    def action_toggle_timer(self) -> None:
        self.state.timer.toggle()
        self._refresh_timer()

    def action_reset_timer(self) -> None:
        self.state.timer.reset()
        self._refresh_timer()

    def action_skip_timer(self) -> None:
        self.state.timer.skip()
        self._refresh_timer()

    def action_mode(self, mode: str) -> None:
        self.state.timer.switch_mode(mode)
        self._refresh_timer()

    def action_focus_task(self) -> None:
        """Attach the highlighted task's title to the next focus session."""
        task_id = self._selected_key("#tasks-table")
        task = next((t for t in self.state.tasks if t.id == task_id), None)
        self.state.timer.subject = task.title if task else None
        self._refresh_timer()

    # ── Tasks & schedule ───────────────────────────────────────

    def _selected_key(self, table_id: str) -> str | None:
        table = self.query_one(table_id, DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    @on(Input.Submitted, "#task-input")
    def _on_task_submit(self, event: Input.Submitted) -> None:
        priority = self.query_one("#task-priority", Select).value
        if self.state.add_task(event.value, str(priority)) is None:
            self.notify("Task title cannot be empty.", severity="warning")
            return
        event.input.value = ""
        self._refresh_tasks()

    @on(Input.Submitted, "#sched-time, #sched-subject, #sched-duration")
    def _on_schedule_submit(self, event: Input.Submitted) -> None:
        time_input = self.query_one("#sched-time", Input)
        subject_input = self.query_one("#sched-subject", Input)
        duration_input = self.query_one("#sched-duration", Input)
        try:
            duration = int(duration_input.value or 0)
        except ValueError:
            duration = 0
        if self.state.add_schedule_item(time_input.value, subject_input.value, duration) is None:
            self.notify("Need a subject, an HH:MM time and a positive duration.", severity="warning")
            return
        subject_input.value = ""
        self._refresh_schedule()

    def action_toggle_task(self) -> None:
        task_id = self._selected_key("#tasks-table")
        if task_id and self.state.toggle_task(task_id):
            self._refresh_tasks()

    def action_delete_row(self) -> None:
        """Delete the highlighted row of whichever table has focus."""
        focused = self.focused
        if isinstance(focused, DataTable) and focused.id == "schedule-table":
            item_id = self._selected_key("#schedule-table")
            if item_id and self.state.delete_schedule_item(item_id):
                self._refresh_schedule()
            return
        task_id = self._selected_key("#tasks-table")
        if task_id and self.state.delete_task(task_id):
            self._refresh_tasks()

    def action_cycle_sort(self) -> None:
        self._sort = SORT_OPTIONS[(SORT_OPTIONS.index(self._sort) + 1) % len(SORT_OPTIONS)]
        self._refresh_tasks()

    def action_cycle_filter(self) -> None:
        self._filter = FILTER_OPTIONS[(FILTER_OPTIONS.index(self._filter) + 1) % len(FILTER_OPTIONS)]
        self._refresh_tasks()

    def action_clear_schedule(self) -> None:
        self.state.clear_schedule()
        self._refresh_schedule()

    # ── Assistant ──────────────────────────────────────────────

    @work(exclusive=True, group="quote")
    async def _load_quote(self) -> None:
        try:
            quote = await self.assistant.motivational_quote()
        except AssistantBusy:
            return
        self.query_one("#quote", Static).update(f"“{quote}”")

    def _show_output(self, markdown: str) -> None:
        for output in self.query("#assistant-output"):
            output.update(markdown)

    @on(Input.Submitted, "#plan-topics, #plan-hours")
    def _on_plan_submit(self, event: Input.Submitted) -> None:
        topics = self.query_one("#plan-topics", Input).value
        try:
            hours = float(self.query_one("#plan-hours", Input).value or 0)
        except ValueError:
            hours = 0
        self._generate_plan(topics, hours)

    @work(exclusive=False)
    async def _generate_plan(self, topics: str, hours: float) -> None:
        self._show_output("*Generating plan…*")
        try:
            items = await self.assistant.generate_plan(topics, hours)
        except AssistantBusy as e:
            self.notify(str(e), severity="warning")
            return
        added = self.state.ingest_plan(items)
        if not added:
            self._show_output("*No plan could be generated.*")
            return
        self._refresh_schedule()
        self._show_output(
            "\n".join(f"- **{i.time}** {i.subject} ({i.duration} min)" for i in added)
        )
        self.notify(f"Added {len(added)} items to your schedule.", title="Plan ready")

    @on(Input.Submitted, "#search-topic")
    def _on_search_submit(self, event: Input.Submitted) -> None:
        self._search_topic(event.value)

    @work(exclusive=False)
    async def _search_topic(self, topic: str) -> None:
        self._show_output("*Searching…*")
        try:
            result = await self.assistant.search_topic(topic)
        except AssistantBusy as e:
            self.notify(str(e), severity="warning")
            return
        sources = "\n".join(f"- [{s.title}]({s.uri})" for s in result.sources)
        self._show_output(result.text + (f"\n\n**Sources**\n{sources}" if sources else ""))

    @on(Input.Submitted, "#places-query")
    def _on_places_submit(self, event: Input.Submitted) -> None:
        self._find_study_spots(event.value)

    @work(exclusive=False)
    async def _find_study_spots(self, query: str) -> None:
        self._show_output("*Looking for study spots…*")
        try:
            result = await self.assistant.find_study_spots(query)
        except AssistantBusy as e:
            self.notify(str(e), severity="warning")
            return
        lines = [result.text]
        for place in result.places:
            lines.append(f"- [{place.title}]({place.uri})" if place.uri else f"- {place.title}")
            lines.extend(f"  > {snippet}" for snippet in place.snippets)
        self._show_output("\n".join(lines))

    # ── View switching ─────────────────────────────────────────

    def action_show_assistant(self) -> None:
        self._switch_to("dashboard" if self.current_view == "assistant" else "assistant")

    def action_blur_focus(self) -> None:
        if self.focused is None and self.current_view != "dashboard":
            self._switch_to("dashboard")
        self.set_focus(None)

    def action_toggle_theme(self) -> None:
        self.state.toggle_theme()
        self._apply_theme()

    def action_quit_app(self) -> None:
        self.exit()

    def _switch_to(self, view: str) -> None:
        main = self.query_one("#main-layout", Horizontal)
        for old in self.query(".overlay-screen"):
            old.remove()

        dashboard = view == "dashboard"
        self.query_one("#left-pane").display = dashboard
        self.query_one("#right-pane").display = dashboard
        if view == "assistant":
            main.mount(AssistantScreen(id="assistant-screen", classes="overlay-screen"))
        self.current_view = view


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    logging.basicConfig(
        filename=os.environ.get("EDUMIND_LOG_FILE") or None,
        level=os.environ.get("EDUMIND_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    EduMindApp().run()


if __name__ == "__main__":
    main()
