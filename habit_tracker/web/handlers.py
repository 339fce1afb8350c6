"""HTTP handler implementations used by the routers."""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from habit_tracker.core.config import is_dev_login_enabled
from habit_tracker.core.errors import NotFoundError, StoreError, UndefinedRecurrenceError, ValidationError
from habit_tracker.models import HabitEntryRead, HabitRead
from habit_tracker.services.habit_engine import HabitEngine
from habit_tracker.web.dependencies import SESSION_USER_KEY

logger = logging.getLogger(__name__)

HABIT_NOT_FOUND_DETAIL = "This habit may have been deleted."


class HabitPayload(BaseModel):
    name: str = ""
    description: Optional[str] = None
    frequency: str = "daily"
    days: Optional[List[str]] = None


class SessionPayload(BaseModel):
    user_id: str = Field(min_length=1)


def _parse_date(date_str: str) -> datetime.date:
    try:
        return datetime.datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format")


def _due_on(engine: HabitEngine, habit: HabitRead, day: datetime.date) -> Optional[bool]:
    # 日本語: 旧 weekly 形式は判定不能のため None を返す / English: Legacy weekly schedules report None (undefined)
    try:
        return engine.is_due_on_date(habit, day)
    except UndefinedRecurrenceError:
        return None


def serialize_habit(engine: HabitEngine, habit: HabitRead, today: datetime.date) -> Dict[str, Any]:
    recurrence = habit.recurrence
    return {
        "id": habit.id,
        "name": habit.name,
        "description": habit.description,
        "frequency": recurrence.kind.value,
        "days": recurrence.designators(),
        "is_archived": habit.is_archived,
        "created_at": habit.created_at.isoformat(),
        "streak": engine.compute_streak(habit.id, today),
        "due_today": _due_on(engine, habit, today),
        "completed_today": engine.is_completed_on_date(habit.id, today),
    }


def serialize_entry(entry: HabitEntryRead) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "habit_id": entry.habit_id,
        "date": entry.date.isoformat(),
        "completed": entry.completed,
    }


def _require_habit(engine: HabitEngine, habit_id: int) -> HabitRead:
    habit = engine.get_habit(habit_id)
    if habit is None:
        raise NotFoundError(habit_id)
    return habit


def list_habits(engine: HabitEngine):
    today = engine.today_fn()
    habits = [serialize_habit(engine, habit, today) for habit in engine.habits]
    return {
        "habits": habits,
        "completed_today": sum(1 for habit in habits if habit["completed_today"]),
        "total": len(habits),
    }


def habit_detail(habit_id: int, engine: HabitEngine, *, history_days: int):
    habit = _require_habit(engine, habit_id)
    today = engine.today_fn()
    payload = serialize_habit(engine, habit, today)
    payload["history"] = [
        {"date": day.isoformat(), "completed": completed, "due": _due_on(engine, habit, day)}
        for day, completed in engine.recent_history(habit_id, history_days, today)
    ]
    return payload


async def create_habit(payload: HabitPayload, engine: HabitEngine):
    habit = await engine.create_habit(payload.name, payload.description, payload.frequency, payload.days)
    return JSONResponse(
        status_code=201, content=serialize_habit(engine, habit, engine.today_fn())
    )


async def update_habit(habit_id: int, payload: HabitPayload, engine: HabitEngine):
    habit = await engine.update_habit(
        habit_id, payload.name, payload.description, payload.frequency, payload.days
    )
    return serialize_habit(engine, habit, engine.today_fn())


async def delete_habit(habit_id: int, engine: HabitEngine):
    await engine.delete_habit(habit_id)
    return {"status": "deleted", "id": habit_id}


async def archive_habit(habit_id: int, engine: HabitEngine):
    habit = await engine.archive_habit(habit_id)
    return {"status": "archived", "id": habit.id}


async def toggle_entry(habit_id: int, date_str: str, engine: HabitEngine):
    day = _parse_date(date_str)
    _require_habit(engine, habit_id)
    entry = await engine.toggle_completion(habit_id, day)
    return {
        "entry": serialize_entry(entry),
        "streak": engine.compute_streak(habit_id),
    }


def start_session(request: Request, payload: SessionPayload):
    # 日本語: 外部認証の代替として user_id をセッションへ保存 / English: Stand-in for the auth provider, stores user_id in session
    if not is_dev_login_enabled():
        raise HTTPException(status_code=404, detail="Not Found")
    request.session[SESSION_USER_KEY] = payload.user_id
    return {"status": "ok", "user_id": payload.user_id}


def end_session(request: Request):
    request.session.pop(SESSION_USER_KEY, None)
    return {"status": "cleared"}


def validation_error_handler(_request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": "Invalid habit", "errors": exc.errors})


def not_found_error_handler(_request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": HABIT_NOT_FOUND_DETAIL, "id": exc.habit_id})


def store_error_handler(_request: Request, exc: StoreError):
    logger.warning("Store error surfaced to client: %s", exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})
