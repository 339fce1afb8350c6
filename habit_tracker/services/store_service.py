"""Habit store contract and its SQLModel implementation."""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool

from habit_tracker.core.errors import StoreError
from habit_tracker.models import Habit, HabitEntry, HabitEntryRead, HabitRead

logger = logging.getLogger(__name__)

_WRITABLE_HABIT_FIELDS = {"name", "description", "frequency", "days", "is_archived"}


class HabitStore(Protocol):
    """Remote data service consumed by ``HabitEngine``.

    Every call is scoped to ``owner_id``; the store enforces ownership and the
    ``(habit_id, date)`` uniqueness of entries. Failures raise ``StoreError``.
    """

    async def list_habits(self, owner_id: str) -> List[HabitRead]: ...

    async def get_habit(self, owner_id: str, habit_id: int) -> Optional[HabitRead]: ...

    async def insert_habit(self, owner_id: str, values: Dict[str, Any]) -> HabitRead: ...

    async def update_habit(
        self, owner_id: str, habit_id: int, values: Dict[str, Any]
    ) -> Optional[HabitRead]: ...

    async def delete_habit(self, owner_id: str, habit_id: int) -> None: ...

    async def list_entries(
        self,
        owner_id: str,
        habit_ids: Iterable[int],
        date_from: datetime.date,
        date_to: datetime.date,
    ) -> List[HabitEntryRead]: ...

    async def insert_entry(
        self, owner_id: str, habit_id: int, date: datetime.date, completed: bool
    ) -> HabitEntryRead: ...

    async def update_entry(self, owner_id: str, entry_id: int, completed: bool) -> HabitEntryRead: ...


class SqlHabitStore:
    """``HabitStore`` backed by a SQLModel session.

    Blocking session work is pushed to the threadpool so callers only await.
    """

    def __init__(self, db: Session):
        self.db = db

    async def _run(self, operation: str, fn, *args):
        try:
            return await run_in_threadpool(fn, *args)
        except StoreError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            # 日本語: 失敗時はセッションを巻き戻し、呼び出し側へそのまま通知 / English: Roll back and surface the failure untouched
            self.db.rollback()
            logger.exception("Habit store %s failed", operation)
            raise StoreError(f"{operation} failed: {exc}") from exc

    def _owned_habit(self, owner_id: str, habit_id: int) -> Optional[Habit]:
        return self.db.exec(
            select(Habit).where(Habit.id == habit_id, Habit.owner_id == owner_id)
        ).first()

    async def list_habits(self, owner_id: str) -> List[HabitRead]:
        def _list():
            habits = self.db.exec(
                select(Habit)
                .where(Habit.owner_id == owner_id, Habit.is_archived == False)  # noqa: E712
                .order_by(Habit.created_at.desc(), Habit.id.desc())
            ).all()
            return [HabitRead.model_validate(habit) for habit in habits]

        return await self._run("list_habits", _list)

    async def get_habit(self, owner_id: str, habit_id: int) -> Optional[HabitRead]:
        def _get():
            habit = self._owned_habit(owner_id, habit_id)
            return HabitRead.model_validate(habit) if habit else None

        return await self._run("get_habit", _get)

    async def insert_habit(self, owner_id: str, values: Dict[str, Any]) -> HabitRead:
        def _insert():
            habit = Habit(owner_id=owner_id, **_writable(values))
            self.db.add(habit)
            self.db.commit()
            self.db.refresh(habit)
            return HabitRead.model_validate(habit)

        return await self._run("insert_habit", _insert)

    async def update_habit(
        self, owner_id: str, habit_id: int, values: Dict[str, Any]
    ) -> Optional[HabitRead]:
        def _update():
            habit = self._owned_habit(owner_id, habit_id)
            if habit is None:
                return None
            for key, value in _writable(values).items():
                setattr(habit, key, value)
            self.db.add(habit)
            self.db.commit()
            self.db.refresh(habit)
            return HabitRead.model_validate(habit)

        return await self._run("update_habit", _update)

    async def delete_habit(self, owner_id: str, habit_id: int) -> None:
        def _delete():
            habit = self._owned_habit(owner_id, habit_id)
            if habit is None:
                return
            # 日本語: entries は relationship の cascade で同時に削除 / English: Entries are removed through the relationship cascade
            self.db.delete(habit)
            self.db.commit()

        await self._run("delete_habit", _delete)

    async def list_entries(
        self,
        owner_id: str,
        habit_ids: Iterable[int],
        date_from: datetime.date,
        date_to: datetime.date,
    ) -> List[HabitEntryRead]:
        ids = list(habit_ids)
        if not ids:
            return []

        def _list():
            entries = self.db.exec(
                select(HabitEntry)
                .join(Habit, HabitEntry.habit_id == Habit.id)
                .where(
                    Habit.owner_id == owner_id,
                    HabitEntry.habit_id.in_(ids),
                    HabitEntry.date >= date_from,
                    HabitEntry.date <= date_to,
                )
            ).all()
            return [HabitEntryRead.model_validate(entry) for entry in entries]

        return await self._run("list_entries", _list)

    async def insert_entry(
        self, owner_id: str, habit_id: int, date: datetime.date, completed: bool
    ) -> HabitEntryRead:
        def _insert():
            if self._owned_habit(owner_id, habit_id) is None:
                raise StoreError(f"habit {habit_id} is not owned by the current user")
            entry = HabitEntry(habit_id=habit_id, date=date, completed=completed)
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
            return HabitEntryRead.model_validate(entry)

        return await self._run("insert_entry", _insert)

    async def update_entry(self, owner_id: str, entry_id: int, completed: bool) -> HabitEntryRead:
        def _update():
            entry = self.db.exec(
                select(HabitEntry)
                .join(Habit, HabitEntry.habit_id == Habit.id)
                .where(HabitEntry.id == entry_id, Habit.owner_id == owner_id)
            ).first()
            if entry is None:
                raise StoreError(f"entry {entry_id} is not owned by the current user")
            entry.completed = completed
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
            return HabitEntryRead.model_validate(entry)

        return await self._run("update_entry", _update)


def _writable(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if key in _WRITABLE_HABIT_FIELDS}
