"""Study schedule management for EduMind.

Manually added items keep the collection sorted by start time. Items
produced by plan generation are prepended as a batch in the order the
model returned them; ``schedule_for_display`` sorts either way.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable

from edumind.models import ScheduleItem, new_id

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_time(value: str) -> str | None:
    """Return *value* as zero-padded 24h ``HH:MM``, or None if invalid.

    '9:05' -> '09:05'. String order of the result equals time order.
    """
    m = _TIME_RE.match((value or "").strip())
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def _sort_key(item: ScheduleItem) -> str:
    return item.time


def add_schedule_item(
    schedule: list[ScheduleItem], time: str, subject: str, duration: int
) -> ScheduleItem | None:
    """Insert a manual item and re-sort the whole collection by time.

    No-op (returns None) if subject is blank, duration is not a positive int or
    time is not a valid ``HH:MM``.
    """
    subject = (subject or "").strip()
    hhmm = normalize_time(time)
    if isinstance(duration, bool) or not isinstance(duration, int):
        return None
    if not subject or hhmm is None or duration <= 0:
        return None
    item = ScheduleItem(id=new_id(), time=hhmm, subject=subject, duration=duration)
    schedule.append(item)
    schedule.sort(key=_sort_key)
    return item


def delete_schedule_item(schedule: list[ScheduleItem], item_id: str) -> bool:
    for i, s in enumerate(schedule):
        if s.id == item_id:
            schedule.pop(i)
            return True
    return False


def clear_schedule(schedule: list[ScheduleItem]) -> None:
    schedule.clear()


def ingest_plan_items(
    schedule: list[ScheduleItem], items: Iterable[Any]
) -> list[ScheduleItem]:
    """Merge a generated plan into the schedule.

    Each raw item (``PlanItem`` or dict with time/subject/duration) gets a
    fresh id; the batch is prepended in its own order, without sorting.
    """
    batch: list[ScheduleItem] = []
    for raw in items:
        data = raw if isinstance(raw, dict) else raw.model_dump()
        batch.append(ScheduleItem(
            id=new_id(),
            time=str(data["time"]),
            subject=str(data["subject"]),
            duration=int(data["duration"]),
        ))
    schedule[:0] = batch
    logger.info("Ingested %d generated schedule items", len(batch))
    return batch


def schedule_for_display(schedule: list[ScheduleItem]) -> list[ScheduleItem]:
    """Sorted copy by start time; equal times keep stored order."""
    return sorted(schedule, key=_sort_key)


def total_planned_minutes(schedule: list[ScheduleItem]) -> int:
    return sum(s.duration for s in schedule)
