"""Progress metrics derived from the study session log.

Everything here is pure and recomputed from the full log on every call.
"""

from __future__ import annotations

from datetime import date, timedelta

from edumind.models import (
    FOCUS,
    DailyGoal,
    ProgressSummary,
    StudySession,
    WeeklyPoint,
)


WEEKDAY_LABELS = {
    "en": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
    "pt-BR": ["seg.", "ter.", "qua.", "qui.", "sex.", "sáb.", "dom."],
}


def weekday_label(d: date, locale: str = "en") -> str:
    labels = WEEKDAY_LABELS.get(locale) or WEEKDAY_LABELS["en"]
    return labels[d.weekday()]


def _focus_minutes_on(sessions: list[StudySession], day: str) -> int:
    return sum(s.duration for s in sessions if s.mode == FOCUS and s.date == day)


def today_focus_minutes(sessions: list[StudySession], today: date) -> int:
    return _focus_minutes_on(sessions, today.isoformat())


def total_focus_minutes(sessions: list[StudySession]) -> int:
    return sum(s.duration for s in sessions if s.mode == FOCUS)


def weekly_series(
    sessions: list[StudySession], today: date, locale: str = "en"
) -> list[WeeklyPoint]:
    """Focus minutes for the last 7 days, oldest first, today last.

    Days without sessions are present with 0 minutes.
    """
    points = []
    for offset in range(6, -1, -1):
        d = today - timedelta(days=offset)
        points.append(WeeklyPoint(
            date=d.isoformat(),
            label=weekday_label(d, locale),
            minutes=_focus_minutes_on(sessions, d.isoformat()),
        ))
    return points


def goal_progress_percent(today_minutes: int, target_minutes: int) -> float:
    """Share of today's target reached, clamped to [0, 100].

    *target_minutes* must be >= 1; DailyGoal guarantees that on load.
    """
    pct = today_minutes / target_minutes * 100
    return max(0.0, min(100.0, pct))


def goal_message(today_minutes: int, target_minutes: int) -> str:
    if today_minutes >= target_minutes:
        return "Amazing! You reached your daily goal!"
    return f"{target_minutes - today_minutes} minutes left to reach today's goal."


def goal_drift(goal: DailyGoal, sessions: list[StudySession], today: date) -> int:
    """Stored counter minus the focus minutes logged today.

    Non-zero means the counter and the session log disagree (for example the
    counter carried over from an earlier day). Reported only.
    """
    return goal.completed_minutes - today_focus_minutes(sessions, today)


def progress_summary(
    sessions: list[StudySession], goal: DailyGoal, today: date, locale: str = "en"
) -> ProgressSummary:
    today_minutes = today_focus_minutes(sessions, today)
    return ProgressSummary(
        today_minutes=today_minutes,
        total_minutes=total_focus_minutes(sessions),
        weekly=weekly_series(sessions, today, locale),
        target_minutes=goal.target_minutes,
        percent=goal_progress_percent(today_minutes, goal.target_minutes),
        message=goal_message(today_minutes, goal.target_minutes),
        goal_drift=goal_drift(goal, sessions, today),
    )
