"""Per-session user context."""

from __future__ import annotations

from dataclasses import dataclass


# 日本語: 認証済みユーザーを表す明示的なコンテキスト / English: Explicit authenticated-user context passed into the engine
@dataclass(frozen=True)
class UserContext:
    user_id: str

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValueError("user_id must be a non-empty string")
