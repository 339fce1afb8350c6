"""FastAPI dependency providers."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from habit_tracker.core.config import get_entry_window_days, get_history_days
from habit_tracker.core.context import UserContext
from habit_tracker.core.db import get_db
from habit_tracker.services.habit_engine import HabitEngine
from habit_tracker.services.store_service import HabitStore, SqlHabitStore

SESSION_USER_KEY = "user_id"


def get_user_context(request: Request) -> UserContext:
    # 日本語: 認証済みユーザーはセッションから解決 / English: Resolve the authenticated user from the signed session
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return UserContext(user_id=str(user_id))


def get_store(db: Session = Depends(get_db)) -> HabitStore:
    return SqlHabitStore(db)


async def get_engine(
    store: HabitStore = Depends(get_store),
    context: UserContext = Depends(get_user_context),
) -> HabitEngine:
    # 日本語: 履歴グリッドより短い窓では取りこぼすため長い方を読み込む / English: Load at least as many days as the history grid shows
    window_days = max(get_entry_window_days(), get_history_days())
    engine = HabitEngine(store, context, window_days=window_days)
    return await engine.load()
