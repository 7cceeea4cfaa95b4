"""Call site for the AI gateway: one request at a time, soft failures.

Every method either returns usable content or a fallback; upstream errors
are logged and never reach the caller. A second request while one is in
flight raises ``AssistantBusy`` instead of cancelling the first.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from edumind.ai import FALLBACK_QUOTE, Gateway, PlanItem
from edumind.models import PlacesResult, TopicSummary

logger = logging.getLogger(__name__)


SEARCH_UNAVAILABLE = "Could not load information about this topic right now."
PLACES_UNAVAILABLE = "Could not find study spots right now. Try again."
DEFAULT_PLACES_QUERY = "quiet libraries and cafes to study"
LOCATION_TIMEOUT = 10.0

Coordinates = tuple[float, float]
LocationProvider = Callable[[], Awaitable[Coordinates | None]]


class AssistantBusy(RuntimeError):
    """Another assistant request is still running."""


def fixed_location(latitude: float | None, longitude: float | None) -> LocationProvider | None:
    """Location provider returning configured coordinates, or None if unset."""
    if latitude is None or longitude is None:
        return None

    async def _provider() -> Coordinates | None:
        return (latitude, longitude)

    return _provider


class Assistant:
    def __init__(
        self,
        gateway: Gateway,
        location_provider: LocationProvider | None = None,
        location_timeout: float = LOCATION_TIMEOUT,
    ) -> None:
        self.gateway = gateway
        self.location_provider = location_provider
        self.location_timeout = location_timeout
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @contextlib.asynccontextmanager
    async def _claim(self) -> AsyncIterator[None]:
        if self._busy:
            raise AssistantBusy("An assistant request is already in progress")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    async def generate_plan(self, topics: str, available_hours: float) -> list[PlanItem]:
        """Generated plan items, or [] on blank input or any failure."""
        if not (topics or "").strip():
            return []
        async with self._claim():
            try:
                return await self.gateway.generate_plan(topics.strip(), available_hours)
            except Exception as e:
                logger.warning("Plan generation failed: %s", e)
                return []

    async def motivational_quote(self) -> str:
        async with self._claim():
            try:
                return await self.gateway.get_motivational_quote()
            except Exception as e:
                logger.warning("Quote request failed: %s", e)
                return FALLBACK_QUOTE

    async def search_topic(self, topic: str) -> TopicSummary:
        if not (topic or "").strip():
            return TopicSummary(text=SEARCH_UNAVAILABLE)
        async with self._claim():
            try:
                return await self.gateway.search_topic(topic.strip())
            except Exception as e:
                logger.warning("Topic search failed: %s", e)
                return TopicSummary(text=SEARCH_UNAVAILABLE)

    async def locate(self) -> Coordinates | None:
        """Best-effort coordinates; None on timeout, denial or no provider."""
        if self.location_provider is None:
            return None
        try:
            return await asyncio.wait_for(self.location_provider(), self.location_timeout)
        except asyncio.TimeoutError:
            logger.warning("Location lookup timed out after %ss", self.location_timeout)
        except Exception as e:
            logger.warning("Location unavailable: %s", e)
        return None

    async def find_study_spots(self, query: str = "") -> PlacesResult:
        async with self._claim():
            coords = await self.locate()
            lat, lng = coords if coords else (None, None)
            try:
                return await self.gateway.find_study_spots(
                    (query or "").strip() or DEFAULT_PLACES_QUERY, lat, lng
                )
            except Exception as e:
                logger.warning("Study spot search failed: %s", e)
                return PlacesResult(text=PLACES_UNAVAILABLE)
