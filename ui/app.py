"""EduMind HTTP API — JSON front end over the core library."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import secrets
from collections.abc import AsyncIterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from edumind import AppState, __version__, sort_tasks, filter_tasks, pending_count
from edumind.ai import Gateway
from edumind.assistant import Assistant, AssistantBusy, fixed_location
from edumind.models import BUILTIN_SOUNDS, THEMES, TIMER_MODES

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


# ── Auth ──────────────────────────────────────────────────────

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("EDUMIND_USERNAME", "")
    expected_password = os.environ.get("EDUMIND_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Dependencies ──────────────────────────────────────────────

def get_state(request: Request) -> AppState:
    return request.app.state.edumind


def get_assistant(request: Request) -> Assistant:
    return request.app.state.assistant


def _require(payload: dict[str, Any], key: str) -> Any:
    if key not in payload:
        raise HTTPException(status_code=400, detail=f"Missing {key}")
    return payload[key]


async def _ticker(state: AppState) -> None:
    while True:
        await asyncio.sleep(TICK_SECONDS)
        state.timer.tick()


def create_app(
    root: Path | None = None,
    state: AppState | None = None,
    assistant: Assistant | None = None,
    run_ticker: bool = True,
) -> FastAPI:
    """Build the API. State is loaded once at startup, not per request.

    Routes are coroutines so they run on the event loop with the ticker;
    state is only ever mutated from that one thread. Hooks run on a
    dedicated worker thread.
    """

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        hook_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="edumind-hooks")
        app_state = state or AppState(root)
        owns_hooks = app_state.hooks.executor is None
        if owns_hooks:
            app_state.hooks.executor = hook_executor
        app.state.edumind = app_state
        settings = app_state.settings
        app.state.assistant = assistant or Assistant(
            Gateway(model=settings.model, places_model=settings.places_model),
            location_provider=fixed_location(settings.latitude, settings.longitude),
        )
        ticker = asyncio.create_task(_ticker(app_state)) if run_ticker else None
        try:
            yield
        finally:
            if ticker is not None:
                ticker.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await ticker
            hook_executor.shutdown(wait=True)
            if owns_hooks:
                app_state.hooks.executor = None

    app = FastAPI(title="EduMind API", version=__version__, lifespan=lifespan)
    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:

    @app.get("/healthz")
    async def healthz() -> dict[str, bool]:
        return {"ok": True}

    # ── Tasks ────────────────────────────────────────────────

    @app.get("/api/tasks")
    async def api_list_tasks(
        sort: str = "date",
        priority: str = "all",
        state: AppState = Depends(get_state),
        username: str = Depends(get_current_user),
    ) -> dict[str, Any]:
        """List tasks, optionally filtered by priority and sorted."""
        view = sort_tasks(filter_tasks(state.tasks, priority), sort)
        return {"tasks": [t.to_dict() for t in view], "pending": pending_count(state.tasks)}

    @app.post("/api/tasks")
    async def api_add_task(
        payload: dict[str, Any] = Body(...),
        state: AppState = Depends(get_state),
        username: str = Depends(get_current_user),
    ) -> dict[str, Any]:
        task = state.add_task(str(payload.get("title", "")), str(payload.get("priority", "medium")))
        if task is None:
            raise HTTPException(status_code=400, detail="Title is required and priority must be low, medium or high")
        return {"ok": True, "task": task.to_dict()}

    @app.post("/api/tasks/{task_id}/toggle")
    async def api_toggle_task(
        task_id: str, state: AppState = Depends(get_state), username: str = Depends(get_current_user)
    ) -> dict[str, Any]:
        task = state.toggle_task(task_id)
        if task is None:
            raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
        return {"ok": True, "task": task.to_dict()}

    @app.delete("/api/tasks/{task_id}")
    async def api_delete_task(
        task_id: str, state: AppState = Depends(get_state), username: str = Depends(get_current_user)
    ) -> dict[str, Any]:
        if not state.delete_task(task_id):
            raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
        return {"ok": True, "task_id": task_id}

    # ── Schedule ─────────────────────────────────────────────

    @app.get("/api/schedule")
    async def api_get_schedule(state: AppState = Depends(get_state), username: str = Depends(get_current_user)) -> dict[str, Any]:
        return {"items": [s.to_dict() for s in state.display_schedule()]}

    @app.post("/api/schedule")
    async def api_add_schedule_item(
        payload: dict[str, Any] = Body(...),
        state: AppState = Depends(get_state),
        username: str = Depends(get_current_user),
    ) -> dict[str, Any]:
        item = state.add_schedule_item(
            str(payload.get("time", "08:00")),
            str(payload.get("subject", "")),
            payload.get("duration", 60),
        )
        if item is None:
            raise HTTPException(status_code=400, detail="Subject, HH:MM time and a positive duration are required")
        return {"ok": True, "item": item.to_dict()}

    @app.delete("/api/schedule/{item_id}")
    async def api_delete_schedule_item(
        item_id: str, state: AppState = Depends(get_state), username: str = Depends(get_current_user)
    ) -> dict[str, Any]:
        if not state.delete_schedule_item(item_id):
            raise HTTPException(status_code=404, detail=f"Schedule item not found: {item_id}")
        return {"ok": True, "item_id": item_id}

    @app.delete("/api/schedule")
    async def api_clear_schedule(state: AppState = Depends(get_state), username: str = Depends(get_current_user)) -> dict[str, Any]:
        state.clear_schedule()
        return {"ok": True}

    # ── Sessions, goal, progress ─────────────────────────────

    @app.get("/api/sessions")
    async def api_list_sessions(state: AppState = Depends(get_state), username: str = Depends(get_current_user)) -> dict[str, Any]:
        return {"sessions": [s.to_dict() for s in state.sessions]}

    @app.get("/api/progress")
    async def api_progress(state: AppState = Depends(get_state), username: str = Depends(get_current_user)) -> dict[str, Any]:
        return {"goal": state.goal.to_dict(), "progress": state.progress().to_dict()}

    @app.put("/api/goal")
    async def api_update_goal(
        payload: dict[str, Any] = Body(...),
        state: AppState = Depends(get_state),
        username: str = Depends(get_current_user),
    ) -> dict[str, Any]:
        if not state.update_goal_target(_require(payload, "targetMinutes")):
            raise HTTPException(status_code=400, detail="targetMinutes must be an integer >= 1")
        return {"ok": True, "goal": state.goal.to_dict()}

    # ── Timer ────────────────────────────────────────────────

    @app.get("/api/timer")
    async def api_timer(state: AppState = Depends(get_state), username: str = Depends(get_current_user)) -> dict[str, Any]:
        return state.timer.to_dict()

    @app.post("/api/timer/mode")
    async def api_timer_mode(
        payload: dict[str, Any] = Body(...),
        state: AppState = Depends(get_state),
        username: str = Depends(get_current_user),
    ) -> dict[str, Any]:
        mode = _require(payload, "mode")
        if mode not in TIMER_MODES:
            raise HTTPException(status_code=400, detail=f"Unknown timer mode: {mode}")
        state.timer.switch_mode(mode)
        return state.timer.to_dict()

    @app.post("/api/timer/{action}")
    async def api_timer_action(
        action: str, state: AppState = Depends(get_state), username: str = Depends(get_current_user)
    ) -> dict[str, Any]:
        handlers = {
            "start": state.timer.start,
            "pause": state.timer.pause,
            "reset": state.timer.reset,
            "skip": state.timer.skip,
        }
        if action not in handlers:
            raise HTTPException(status_code=404, detail=f"Unknown timer action: {action}")
        handlers[action]()
        return state.timer.to_dict()

    # ── Preferences ──────────────────────────────────────────

    @app.get("/api/preferences")
    async def api_get_preferences(state: AppState = Depends(get_state), username: str = Depends(get_current_user)) -> dict[str, Any]:
        return state.preferences.to_dict()

    @app.put("/api/preferences")
    async def api_update_preferences(
        payload: dict[str, Any] = Body(...),
        state: AppState = Depends(get_state),
        username: str = Depends(get_current_user),
    ) -> dict[str, Any]:
        """Update theme and/or sound. Nothing is applied unless every field is valid."""
        theme = payload.get("theme")
        if "theme" in payload and theme not in THEMES:
            raise HTTPException(status_code=400, detail="theme must be light or dark")
        sound_id = payload.get("soundId")
        if "soundId" in payload and (not isinstance(sound_id, str) or sound_id not in BUILTIN_SOUNDS):
            raise HTTPException(status_code=400, detail=f"Unknown sound: {sound_id}")
        sound = payload.get("sound")
        if "sound" in payload and not (
            isinstance(sound, dict) and isinstance(sound.get("url"), str) and sound["url"].strip()
        ):
            raise HTTPException(status_code=400, detail="sound.url is required")

        if theme is not None:
            state.set_theme(theme)
        if sound_id is not None:
            state.select_builtin_sound(sound_id)
        if sound is not None:
            state.set_sound(sound["url"], str(sound.get("name", "") or ""))
        return state.preferences.to_dict()

    @app.get("/api/sounds")
    async def api_sounds(username: str = Depends(get_current_user)) -> dict[str, Any]:
        return {"sounds": [{"id": sid, **s.to_dict()} for sid, s in BUILTIN_SOUNDS.items()]}

    # ── Assistant ────────────────────────────────────────────

    @app.post("/api/ai/plan")
    async def api_ai_plan(
        payload: dict[str, Any] = Body(...),
        state: AppState = Depends(get_state),
        assistant: Assistant = Depends(get_assistant),
        username: str = Depends(get_current_user),
    ) -> dict[str, Any]:
        """Generate a plan and merge it into the schedule."""
        try:
            hours = float(payload.get("hours", 4))
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail="hours must be a number")
        try:
            items = await assistant.generate_plan(str(payload.get("topics", "")), hours)
        except AssistantBusy as e:
            raise HTTPException(status_code=409, detail=str(e))
        added = state.ingest_plan(items)
        return {"ok": bool(added), "items": [i.to_dict() for i in added]}

    @app.get("/api/ai/quote")
    async def api_ai_quote(assistant: Assistant = Depends(get_assistant), username: str = Depends(get_current_user)) -> dict[str, Any]:
        try:
            return {"quote": await assistant.motivational_quote()}
        except AssistantBusy as e:
            raise HTTPException(status_code=409, detail=str(e))

    @app.post("/api/ai/search")
    async def api_ai_search(
        payload: dict[str, Any] = Body(...),
        assistant: Assistant = Depends(get_assistant),
        username: str = Depends(get_current_user),
    ) -> dict[str, Any]:
        try:
            result = await assistant.search_topic(str(payload.get("topic", "")))
        except AssistantBusy as e:
            raise HTTPException(status_code=409, detail=str(e))
        return result.to_dict()

    @app.post("/api/ai/places")
    async def api_ai_places(
        payload: dict[str, Any] = Body(default={}),
        assistant: Assistant = Depends(get_assistant),
        username: str = Depends(get_current_user),
    ) -> dict[str, Any]:
        try:
            result = await assistant.find_study_spots(str(payload.get("query", "")))
        except AssistantBusy as e:
            raise HTTPException(status_code=409, detail=str(e))
        return result.to_dict()


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=os.environ.get("EDUMIND_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=os.environ.get("EDUMIND_HOST", "127.0.0.1"), port=int(os.environ.get("EDUMIND_PORT", "8000")))


if __name__ == "__main__":
    main()
