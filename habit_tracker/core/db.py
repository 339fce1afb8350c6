"""Database engine, migrations and session dependency."""

from __future__ import annotations

import logging
import os
import threading
from typing import Iterator

from alembic import command
from alembic.config import Config
from sqlmodel import Session, create_engine

from habit_tracker.core.config import BASE_DIR, DATABASE_URL

logger = logging.getLogger(__name__)


def _normalize_database_url(database_url: str) -> str:
    # 日本語: 旧 postgres:// を SQLAlchemy 推奨形式へ正規化 / English: Normalize legacy postgres:// URL to SQLAlchemy-friendly form
    normalized_url = database_url or ""
    if normalized_url.startswith("postgres://"):
        normalized_url = normalized_url.replace("postgres://", "postgresql+psycopg2://", 1)
    if not normalized_url.startswith("postgresql"):
        raise ValueError("DATABASE_URL must be PostgreSQL (postgresql+psycopg2://...).")
    return normalized_url


def _alembic_config(database_url: str) -> Config:
    config = Config(str(BASE_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BASE_DIR / "migrations"))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


# 日本語: 実行時の DATABASE_URL を優先してエンジンを構築 / English: Build the engine from the runtime DATABASE_URL
_database_url = _normalize_database_url(os.getenv("DATABASE_URL", DATABASE_URL))
engine = create_engine(_database_url)
_db_initialized = False
_db_init_lock = threading.Lock()


def _ensure_db_initialized() -> None:
    global _db_initialized
    if _db_initialized:
        return
    # 日本語: マイグレーションはプロセス内で一度だけ実行 / English: Run migrations once per process with lock protection
    with _db_init_lock:
        if _db_initialized:
            return
        logger.info("Applying database migrations")
        command.upgrade(_alembic_config(_database_url), "head")
        _db_initialized = True


def _init_db() -> None:
    _ensure_db_initialized()


def get_db() -> Iterator[Session]:
    # 日本語: FastAPI Depends 用のセッション供給器 / English: Dependency provider for FastAPI routes
    _ensure_db_initialized()
    with Session(engine, expire_on_commit=False) as db:
        yield db
