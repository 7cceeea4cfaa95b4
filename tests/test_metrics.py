"""Tests for edumind/metrics.py — today/total/weekly figures and goal text."""

from datetime import date

from edumind.metrics import (
    goal_drift,
    goal_message,
    goal_progress_percent,
    today_focus_minutes,
    total_focus_minutes,
    weekly_series,
)
from edumind.models import DailyGoal, StudySession


TODAY = date(2026, 2, 11)  # a Wednesday


def _sessions():
    return [
        StudySession(id="1", date="2026-02-11", duration=25, mode="focus"),
        StudySession(id="2", date="2026-02-11", duration=5, mode="shortBreak"),
        StudySession(id="3", date="2026-02-10", duration=50, mode="focus"),
        StudySession(id="4", date="2026-02-01", duration=25, mode="focus"),
    ]


def test_today_minutes_only_focus_today():
    assert today_focus_minutes(_sessions(), TODAY) == 25


def test_total_minutes_all_focus():
    assert total_focus_minutes(_sessions()) == 100


def test_weekly_series_shape():
    series = weekly_series(_sessions(), TODAY)
    assert len(series) == 7
    assert series[-1].date == "2026-02-11"
    assert series[0].date == "2026-02-05"
    assert series[-1].minutes == 25
    assert series[-2].minutes == 50
    assert series[-1].label == "Wed"
    assert sum(p.minutes for p in series) == 75


def test_weekly_series_empty_log():
    series = weekly_series([], TODAY)
    assert len(series) == 7
    assert all(p.minutes == 0 for p in series)


def test_weekly_series_locale_labels():
    assert weekly_series([], TODAY, "pt-BR")[-1].label == "qua."
    # Unknown locale falls back to English
    assert weekly_series([], TODAY, "xx")[-1].label == "Wed"


def test_percent_clamped():
    assert goal_progress_percent(0, 120) == 0.0
    assert goal_progress_percent(60, 120) == 50.0
    assert goal_progress_percent(300, 120) == 100.0


def test_goal_message():
    assert goal_message(120, 120) == "Amazing! You reached your daily goal!"
    assert goal_message(150, 120) == "Amazing! You reached your daily goal!"
    assert goal_message(100, 120) == "20 minutes left to reach today's goal."


def test_goal_drift_reports_stale_counter():
    goal = DailyGoal(completed_minutes=75)
    assert goal_drift(goal, _sessions(), TODAY) == 50
    goal.completed_minutes = 25
    assert goal_drift(goal, _sessions(), TODAY) == 0
