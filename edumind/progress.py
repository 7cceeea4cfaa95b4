"""Study session log and daily goal bookkeeping for EduMind."""

from __future__ import annotations

import logging

from edumind.models import FOCUS, TIMER_MODES, DailyGoal, StudySession, new_id

logger = logging.getLogger(__name__)


def record_session(
    sessions: list[StudySession],
    goal: DailyGoal,
    duration: int,
    mode: str,
    today: str,
    subject: str | None = None,
) -> StudySession | None:
    """Append a finished session dated *today*.

    Focus sessions also add *duration* to ``goal.completed_minutes``; breaks
    leave the goal alone. Non-positive durations and unknown modes are
    ignored.
    """
    if mode not in TIMER_MODES or duration <= 0:
        return None
    session = StudySession(
        id=new_id(),
        date=today,
        duration=int(duration),
        mode=mode,
        subject=subject or None,
    )
    sessions.append(session)
    if mode == FOCUS:
        goal.completed_minutes += session.duration
    logger.info("Recorded %s session: %d min on %s", mode, session.duration, today)
    return session


def update_goal_target(goal: DailyGoal, target_minutes: int) -> bool:
    """Replace the daily target. Only integers >= 1 are accepted."""
    if isinstance(target_minutes, bool) or not isinstance(target_minutes, int):
        return False
    if target_minutes < 1:
        return False
    goal.target_minutes = target_minutes
    return True
