"""Session routes."""

from __future__ import annotations

from fastapi import APIRouter, Request

from habit_tracker.web import handlers as web_handlers

router = APIRouter()


@router.post("/api/session", name="start_session")
def start_session(request: Request, payload: web_handlers.SessionPayload):
    return web_handlers.start_session(request, payload)


@router.delete("/api/session", name="end_session")
def end_session(request: Request):
    return web_handlers.end_session(request)
