"""Completion entry routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from habit_tracker.services.habit_engine import HabitEngine
from habit_tracker.web import handlers as web_handlers
from habit_tracker.web.dependencies import get_engine

router = APIRouter()


@router.post("/api/habits/{id}/entries/{date_str}/toggle", name="toggle_entry")
async def toggle_entry(id: int, date_str: str, engine: HabitEngine = Depends(get_engine)):
    return await web_handlers.toggle_entry(id, date_str, engine)
