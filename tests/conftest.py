import datetime
import itertools
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from habit_tracker.core.context import UserContext  # noqa: E402
from habit_tracker.core.errors import StoreError  # noqa: E402
from habit_tracker.models import HabitEntryRead, HabitRead  # noqa: E402
from habit_tracker.services.habit_engine import HabitEngine  # noqa: E402

TODAY = datetime.date(2026, 2, 12)  # Thursday


class FakeHabitStore:
    """In-memory HabitStore with ownership checks and failure injection."""

    def __init__(self):
        self.habits = {}
        self.entries = {}
        self.fail_on = set()
        self.calls = []
        self._habit_ids = itertools.count(1)
        self._entry_ids = itertools.count(1)
        self._clock = itertools.count()

    def _check(self, operation):
        self.calls.append(operation)
        if operation in self.fail_on:
            raise StoreError(f"{operation} failed")

    def _owned(self, owner_id, habit_id):
        habit = self.habits.get(habit_id)
        if habit is None or habit.owner_id != owner_id:
            return None
        return habit

    async def list_habits(self, owner_id):
        self._check("list_habits")
        habits = [h for h in self.habits.values() if h.owner_id == owner_id and not h.is_archived]
        return sorted(habits, key=lambda h: h.created_at, reverse=True)

    async def get_habit(self, owner_id, habit_id):
        self._check("get_habit")
        return self._owned(owner_id, habit_id)

    async def insert_habit(self, owner_id, values):
        self._check("insert_habit")
        created_at = datetime.datetime(2026, 1, 1) + datetime.timedelta(minutes=next(self._clock))
        habit = HabitRead(id=next(self._habit_ids), owner_id=owner_id, created_at=created_at, **values)
        self.habits[habit.id] = habit
        return habit

    async def update_habit(self, owner_id, habit_id, values):
        self._check("update_habit")
        habit = self._owned(owner_id, habit_id)
        if habit is None:
            return None
        updated = habit.model_copy(update=values)
        self.habits[habit_id] = updated
        return updated

    async def delete_habit(self, owner_id, habit_id):
        self._check("delete_habit")
        if self._owned(owner_id, habit_id) is None:
            return
        del self.habits[habit_id]
        self.entries = {k: v for k, v in self.entries.items() if v.habit_id != habit_id}

    async def list_entries(self, owner_id, habit_ids, date_from, date_to):
        self._check("list_entries")
        ids = set(habit_ids)
        return [
            entry
            for entry in self.entries.values()
            if entry.habit_id in ids
            and self._owned(owner_id, entry.habit_id) is not None
            and date_from <= entry.date <= date_to
        ]

    async def insert_entry(self, owner_id, habit_id, date, completed):
        self._check("insert_entry")
        if self._owned(owner_id, habit_id) is None:
            raise StoreError("habit not owned")
        if any(e.habit_id == habit_id and e.date == date for e in self.entries.values()):
            raise StoreError("duplicate key value violates unique constraint")
        entry = HabitEntryRead(id=next(self._entry_ids), habit_id=habit_id, date=date, completed=completed)
        self.entries[entry.id] = entry
        return entry

    async def update_entry(self, owner_id, entry_id, completed):
        self._check("update_entry")
        entry = self.entries.get(entry_id)
        if entry is None or self._owned(owner_id, entry.habit_id) is None:
            raise StoreError("entry not owned")
        updated = entry.model_copy(update={"completed": completed})
        self.entries[entry_id] = updated
        return updated

    def seed_entry(self, habit_id, date, completed=True):
        entry = HabitEntryRead(id=next(self._entry_ids), habit_id=habit_id, date=date, completed=completed)
        self.entries[entry.id] = entry
        return entry


@pytest.fixture()
def store():
    return FakeHabitStore()


@pytest.fixture()
def user():
    return UserContext(user_id="user-1")


@pytest.fixture()
def engine(store, user):
    return HabitEngine(store, user, today_fn=lambda: TODAY)


@pytest.fixture()
def today():
    return TODAY
