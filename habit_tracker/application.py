"""FastAPI application assembly."""

from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from habit_tracker.core.config import PROXY_PREFIX, SESSION_SECRET
from habit_tracker.core.db import _init_db
from habit_tracker.core.errors import NotFoundError, StoreError, ValidationError
from habit_tracker.web import handlers as web_handlers
from habit_tracker.web.routers import entries_router, habits_router, session_router


def create_app() -> FastAPI:
    # 日本語: 逆プロキシ配下運用を想定して root_path を環境変数から解決 / English: Resolve root_path from env for reverse-proxy deployments
    proxy_prefix = os.getenv("PROXY_PREFIX", PROXY_PREFIX)
    # 日本語: 実行時の SESSION_SECRET を優先 / English: Prefer runtime SESSION_SECRET override
    session_secret = os.getenv("SESSION_SECRET") or SESSION_SECRET

    app = FastAPI(title="Habit Tracker", root_path=proxy_prefix)
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

    if not session_secret:
        raise ValueError("SESSION_SECRET environment variable is not set. Please set it in secrets.env.")

    app.add_middleware(SessionMiddleware, secret_key=session_secret)

    # 日本語: ドメイン例外を HTTP ステータスへ変換 / English: Map domain errors onto HTTP status codes
    app.add_exception_handler(ValidationError, web_handlers.validation_error_handler)
    app.add_exception_handler(NotFoundError, web_handlers.not_found_error_handler)
    app.add_exception_handler(StoreError, web_handlers.store_error_handler)

    app.include_router(session_router)
    app.include_router(habits_router)
    app.include_router(entries_router)

    @app.on_event("startup")
    def _startup_init_db() -> None:
        # 日本語: 起動時にマイグレーション適用を保証 / English: Ensure migrations are applied on startup
        _init_db()

    return app
