"""Router exports."""

# 日本語: 各機能ルーターを集約して application.py から一括 import 可能にする / English: Re-export feature routers for centralized app wiring
from .entries_router import router as entries_router
from .habits_router import router as habits_router
from .session_router import router as session_router

__all__ = [
    "entries_router",
    "habits_router",
    "session_router",
]
