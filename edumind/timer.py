"""Pomodoro timer state machine for EduMind.

The timer only counts; it never touches storage. On completion it publishes
``SessionCompleted`` and asks the notifier for a sound and a message. The
owner calls ``tick()`` once per elapsed second.
"""

from __future__ import annotations

import logging
from typing import Protocol

from edumind.events import EventBus, SessionCompleted
from edumind.models import FOCUS, LONG_BREAK, SHORT_BREAK, TIMER_MODES, Sound

logger = logging.getLogger(__name__)


MODE_SECONDS = {
    FOCUS: 25 * 60,
    SHORT_BREAK: 5 * 60,
    LONG_BREAK: 15 * 60,
}

MODE_LABELS = {
    FOCUS: "Focus",
    SHORT_BREAK: "Short break",
    LONG_BREAK: "Long break",
}


class Notifier(Protocol):
    def play(self, sound: Sound) -> None: ...

    def show(self, title: str, body: str) -> None: ...


def format_time(seconds: int) -> str:
    """Render seconds as MM:SS."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class PomodoroTimer:
    def __init__(
        self,
        bus: EventBus,
        notifier: Notifier | None = None,
        sound: Sound | None = None,
        mode: str = FOCUS,
    ) -> None:
        if mode not in TIMER_MODES:
            raise ValueError(f"Unknown timer mode: {mode}")
        self.bus = bus
        self.notifier = notifier
        self.sound = sound
        self.mode = mode
        self.remaining = MODE_SECONDS[mode]
        self.running = False
        self.subject: str | None = None

    @property
    def nominal_seconds(self) -> int:
        return MODE_SECONDS[self.mode]

    @property
    def progress_percent(self) -> float:
        return (self.nominal_seconds - self.remaining) / self.nominal_seconds * 100

    def start(self) -> None:
        if self.running or self.remaining == 0:
            return
        self.running = True

    def pause(self) -> None:
        self.running = False

    def toggle(self) -> None:
        if self.running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        self.running = False
        self.remaining = self.nominal_seconds

    def switch_mode(self, mode: str) -> None:
        if mode not in TIMER_MODES:
            raise ValueError(f"Unknown timer mode: {mode}")
        self.mode = mode
        self.remaining = MODE_SECONDS[mode]
        self.running = False

    def tick(self) -> None:
        """Advance one second. Completes when the countdown hits zero."""
        if not self.running:
            return
        if self.remaining > 0:
            self.remaining -= 1
        if self.remaining == 0:
            self._complete()

    def skip(self) -> None:
        """Count the current cycle as done, crediting the full duration."""
        self._complete()

    def _complete(self) -> None:
        self.running = False
        minutes = self.nominal_seconds // 60
        logger.info("Timer cycle complete: %s (%d min)", self.mode, minutes)
        self.bus.publish(SessionCompleted(duration_minutes=minutes, mode=self.mode, subject=self.subject))
        self._notify()

    def _notify(self) -> None:
        if self.notifier is None:
            return
        label = MODE_LABELS[self.mode]
        try:
            if self.sound is not None:
                self.notifier.play(self.sound)
            self.notifier.show("Time's up!", f"Your {label} session has ended.")
        except Exception as e:
            logger.warning("Notification failed: %s", e)

    def to_dict(self) -> dict[str, object]:
        return {
            "mode": self.mode,
            "label": MODE_LABELS[self.mode],
            "remaining": self.remaining,
            "display": format_time(self.remaining),
            "running": self.running,
            "progress": round(self.progress_percent, 1),
        }
