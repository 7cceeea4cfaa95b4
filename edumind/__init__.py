"""EduMind core library — persistence, domain operations, metrics and timer.

Public API re-exports for convenient imports:
    from edumind import AppState, add_task, weekly_series, ...
"""

__version__ = "0.1.0"

# Workspace & paths
from edumind.workspace import (
    Settings,
    workspace_root,
    load_settings,
    get_user_timezone,
    today_str,
    now_local,
    data_dir,
    settings_path,
    preferences_path,
    hooks_config_path,
)

# File I/O
from edumind.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_json_atomic,
    write_yaml_atomic,
)

# Store
from edumind.store import Store

# Tasks
from edumind.tasks import (
    find_task,
    add_task,
    toggle_task,
    delete_task,
    sort_tasks,
    filter_tasks,
    pending_count,
)

# Schedule
from edumind.schedule import (
    normalize_time,
    add_schedule_item,
    delete_schedule_item,
    clear_schedule,
    ingest_plan_items,
    schedule_for_display,
)

# Sessions & goal
from edumind.progress import record_session, update_goal_target

# Metrics
from edumind.metrics import (
    today_focus_minutes,
    total_focus_minutes,
    weekly_series,
    goal_progress_percent,
    goal_message,
    goal_drift,
    progress_summary,
)

# Timer & events
from edumind.events import EventBus, SessionCompleted
from edumind.timer import PomodoroTimer, format_time

# Application state
from edumind.app_state import AppState

# Models
from edumind.models import (
    Task,
    ScheduleItem,
    StudySession,
    DailyGoal,
    Preferences,
    Sound,
    Source,
    TopicSummary,
    Place,
    PlacesResult,
    WeeklyPoint,
    ProgressSummary,
)
