"""Habit domain SQLModel models."""

import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from habit_tracker.models.recurrence import Recurrence, RecurrenceKind

FREQUENCY_VALUES = tuple(kind.value for kind in RecurrenceKind)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class HabitBase(SQLModel):
    name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    # 日本語: スケジュール種別タグ / English: Schedule kind tag
    frequency: str = Field(default=RecurrenceKind.DAILY.value, max_length=20)
    # 日本語: カンマ区切り曜日(0=月 ... 6=日)。旧スキーマ行は NULL / English: Comma-separated weekdays (0=Mon ... 6=Sun), NULL on legacy rows
    days: Optional[str] = Field(default=None, max_length=20)
    is_archived: bool = Field(default=False)

    @property
    def recurrence(self) -> Recurrence:
        return Recurrence.from_storage(self.frequency, self.days)


# 日本語: ユーザーが追跡する習慣 / English: Habit tracked by a single user
class Habit(HabitBase, table=True):
    __tablename__ = "habit"
    __table_args__ = (
        CheckConstraint(
            "frequency IN ({})".format(", ".join(f"'{value}'" for value in FREQUENCY_VALUES)),
            name="ck_habit_frequency",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(index=True, max_length=64)
    created_at: datetime.datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=True))

    entries: list["HabitEntry"] = Relationship(
        back_populates="habit", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )


# 日本語: 習慣ごとの日次完了記録 / English: Per-day completion record for a habit
class HabitEntry(SQLModel, table=True):
    __tablename__ = "habit_entry"
    __table_args__ = (UniqueConstraint("habit_id", "date", name="uq_habit_entry_habit_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(
        sa_column=Column(Integer, ForeignKey("habit.id", ondelete="CASCADE"), nullable=False)
    )
    date: datetime.date
    completed: bool = Field(default=False)
    created_at: datetime.datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=True))

    habit: Optional[Habit] = Relationship(back_populates="entries")


# 日本語: セッション外へ渡す読み取り専用スナップショット / English: Detached read models handed out by the store
class HabitRead(HabitBase):
    id: int
    owner_id: str
    created_at: datetime.datetime


class HabitEntryRead(SQLModel):
    id: int
    habit_id: int
    date: datetime.date
    completed: bool
