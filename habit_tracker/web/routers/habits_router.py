"""Habit CRUD routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from habit_tracker.core.config import get_history_days
from habit_tracker.services.habit_engine import HabitEngine
from habit_tracker.web import handlers as web_handlers
from habit_tracker.web.dependencies import get_engine

router = APIRouter()


@router.get("/api/habits", name="api_habits")
def api_habits(engine: HabitEngine = Depends(get_engine)):
    return web_handlers.list_habits(engine)


@router.post("/api/habits", name="create_habit")
async def create_habit(payload: web_handlers.HabitPayload, engine: HabitEngine = Depends(get_engine)):
    return await web_handlers.create_habit(payload, engine)


@router.get("/api/habits/{id}", name="habit_detail")
def habit_detail(id: int, engine: HabitEngine = Depends(get_engine)):
    return web_handlers.habit_detail(id, engine, history_days=get_history_days())


@router.put("/api/habits/{id}", name="update_habit")
async def update_habit(id: int, payload: web_handlers.HabitPayload, engine: HabitEngine = Depends(get_engine)):
    return await web_handlers.update_habit(id, payload, engine)


@router.delete("/api/habits/{id}", name="delete_habit")
async def delete_habit(id: int, engine: HabitEngine = Depends(get_engine)):
    return await web_handlers.delete_habit(id, engine)


@router.post("/api/habits/{id}/archive", name="archive_habit")
async def archive_habit(id: int, engine: HabitEngine = Depends(get_engine)):
    return await web_handlers.archive_habit(id, engine)
