"""Gemini-backed AI gateway for EduMind.

Thin async wrappers around ``google-genai``. Plan output is decoded through
a pydantic schema; anything that does not fit raises ``GenerationError``.
Grounded calls (search, maps) return text plus the citations the model
attached.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from google import genai
from google.genai import types
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from edumind.models import Place, PlacesResult, Source, TopicSummary
from edumind.schedule import normalize_time
from edumind.workspace import DEFAULT_MODEL, DEFAULT_PLACES_MODEL

logger = logging.getLogger(__name__)


FALLBACK_QUOTE = "Success is the sum of small efforts, repeated day in and day out."
NO_SUMMARY_TEXT = "Could not generate a summary for this topic."
NO_PLACES_TEXT = "No specific places were found."
DEFAULT_SOURCE_TITLE = "External source"
DEFAULT_PLACE_TITLE = "Study spot"


class GenerationError(Exception):
    """The model call failed or returned something we cannot use."""


# ── Plan schema ───────────────────────────────────────────────


class PlanItem(BaseModel):
    time: str
    subject: str = Field(min_length=1)
    duration: int = Field(gt=0)

    @field_validator("time")
    @classmethod
    def _zero_padded(cls, v: str) -> str:
        hhmm = normalize_time(v)
        if hhmm is None:
            raise ValueError(f"time must be HH:MM, got {v!r}")
        return hhmm

    @field_validator("subject", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("duration", mode="before")
    @classmethod
    def _whole_minutes(cls, v: Any) -> Any:
        if isinstance(v, float):
            return round(v)
        return v


_PLAN_ADAPTER = TypeAdapter(list[PlanItem])

PLAN_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "time": types.Schema(type=types.Type.STRING),
            "subject": types.Schema(type=types.Type.STRING),
            "duration": types.Schema(type=types.Type.NUMBER),
        },
        required=["time", "subject", "duration"],
    ),
)


def parse_plan(text: str | None) -> list[PlanItem]:
    """Decode the model's JSON plan. Empty text means an empty plan."""
    if not text or not text.strip():
        return []
    try:
        return _PLAN_ADAPTER.validate_json(text)
    except ValidationError as e:
        logger.warning("Rejected generated plan: %s", e.error_count())
        raise GenerationError(f"Malformed plan response: {e}") from e


# ── Grounding metadata ────────────────────────────────────────


def _grounding_chunks(response: Any) -> list[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    return list(getattr(metadata, "grounding_chunks", None) or [])


def extract_sources(response: Any) -> list[Source]:
    """Web citations with a URI, in the order the model returned them."""
    sources = []
    for chunk in _grounding_chunks(response):
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None) if web else None
        if not uri:
            continue
        sources.append(Source(title=getattr(web, "title", None) or DEFAULT_SOURCE_TITLE, uri=uri))
    return sources


def _snippet_text(snippet: Any) -> str:
    if isinstance(snippet, str):
        return snippet
    for attr in ("review", "text", "title"):
        value = getattr(snippet, attr, None)
        if value:
            return str(value)
    return str(snippet)


def extract_places(response: Any) -> list[Place]:
    places = []
    for chunk in _grounding_chunks(response):
        maps = getattr(chunk, "maps", None)
        if not maps:
            continue
        answer_sources = getattr(maps, "place_answer_sources", None)
        snippets = getattr(answer_sources, "review_snippets", None) or []
        places.append(Place(
            title=getattr(maps, "title", None) or DEFAULT_PLACE_TITLE,
            uri=getattr(maps, "uri", None) or "",
            snippets=[_snippet_text(s) for s in snippets],
        ))
    return places


# ── Gateway ───────────────────────────────────────────────────


def _api_key_from_env() -> str | None:
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")


class Gateway:
    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        places_model: str = DEFAULT_PLACES_MODEL,
        client: Any = None,
    ) -> None:
        self.api_key = api_key or _api_key_from_env()
        self.model = model
        self.places_model = places_model
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise GenerationError("No Gemini API key configured (set GEMINI_API_KEY)")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate(self, model: str, contents: str, config: types.GenerateContentConfig | None = None) -> Any:
        return await self.client.aio.models.generate_content(
            model=model,
            contents=contents,
            config=config,
        )

    async def generate_plan(self, topics: str, available_hours: float) -> list[PlanItem]:
        """Ask for a time-blocked study plan and decode it."""
        prompt = (
            f'Create a detailed study schedule for these topics: "{topics}". '
            f"I have {available_hours} hours available. Return a JSON array of schedule items. "
            'Each item must have "time" (HH:MM), "subject" (string) and "duration" (number of minutes).'
        )
        response = await self._generate(
            self.model,
            prompt,
            types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=PLAN_RESPONSE_SCHEMA,
            ),
        )
        return parse_plan(response.text)

    async def get_motivational_quote(self) -> str:
        response = await self._generate(
            self.model,
            "Give one short, powerful motivational sentence for a tired student. At most 20 words.",
        )
        text = (response.text or "").strip()
        return text or FALLBACK_QUOTE

    async def search_topic(self, topic: str) -> TopicSummary:
        prompt = (
            f'Give an educational, up-to-date summary of the topic: "{topic}". '
            "Explain the main concepts in a didactic way for a student."
        )
        response = await self._generate(
            self.model,
            prompt,
            types.GenerateContentConfig(tools=[types.Tool(google_search=types.GoogleSearch())]),
        )
        return TopicSummary(
            text=response.text or NO_SUMMARY_TEXT,
            sources=extract_sources(response),
        )

    async def find_study_spots(
        self, query: str, lat: float | None = None, lng: float | None = None
    ) -> PlacesResult:
        tool_config = None
        if lat is not None and lng is not None:
            tool_config = types.ToolConfig(
                retrieval_config=types.RetrievalConfig(
                    lat_lng=types.LatLng(latitude=lat, longitude=lng),
                ),
            )
        response = await self._generate(
            self.places_model,
            f'Find the best places to study (libraries, cafes, coworking spaces) related to: "{query}".',
            types.GenerateContentConfig(
                tools=[types.Tool(google_maps=types.GoogleMaps())],
                tool_config=tool_config,
            ),
        )
        return PlacesResult(
            text=response.text or NO_PLACES_TEXT,
            places=extract_places(response),
        )
