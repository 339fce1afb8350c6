"""In-memory habit state and streak/completion queries for one user.

``HabitEngine`` mirrors the user's non-archived habits (newest first) and a
trailing window of completion entries. Mutations go to the store first and
only touch the in-memory view once the store has returned; a failed call
leaves the engine unchanged.

Concurrency: nothing serializes calls per ``(habit_id, date)``. Two toggles on
the same key dispatched before the first returns both read the same cached
entry; callers that can issue overlapping toggles must serialize them.
"""

from __future__ import annotations

import datetime
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from habit_tracker.core.context import UserContext
from habit_tracker.core.errors import NotFoundError
from habit_tracker.models import HabitEntryRead, HabitRead
from habit_tracker.services.store_service import HabitStore
from habit_tracker.services.validation_service import validate_habit_input

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
DEFAULT_HISTORY_DAYS = 14


class HabitEngine:
    def __init__(
        self,
        store: HabitStore,
        context: UserContext,
        *,
        window_days: int = DEFAULT_WINDOW_DAYS,
        today_fn: Callable[[], datetime.date] = datetime.date.today,
    ):
        self.store = store
        self.context = context
        self.window_days = window_days
        self.today_fn = today_fn
        self._habits: List[HabitRead] = []
        # 日本語: habit_id -> date -> entry の二段辞書で一意性を構造的に保証
        # English: habit_id -> date -> entry, so one entry per key by construction
        self._entries: Dict[int, Dict[datetime.date, HabitEntryRead]] = {}

    @property
    def habits(self) -> Tuple[HabitRead, ...]:
        return tuple(self._habits)

    def window(self) -> Tuple[datetime.date, datetime.date]:
        today = self.today_fn()
        return today - datetime.timedelta(days=self.window_days), today

    async def load(self) -> "HabitEngine":
        """Fetch habits and the trailing entry window from the store."""
        owner_id = self.context.user_id
        habits = await self.store.list_habits(owner_id)
        date_from, date_to = self.window()
        entries = await self.store.list_entries(
            owner_id, [habit.id for habit in habits], date_from, date_to
        )

        self._habits = list(habits)
        self._entries = {habit.id: {} for habit in habits}
        for entry in entries:
            self._entries.setdefault(entry.habit_id, {})[entry.date] = entry
        logger.debug("Loaded %d habits and %d entries for %s", len(habits), len(entries), owner_id)
        return self

    def get_habit(self, habit_id: int) -> Optional[HabitRead]:
        for habit in self._habits:
            if habit.id == habit_id:
                return habit
        return None

    async def create_habit(
        self,
        name: str,
        description: Optional[str] = None,
        recurrence="daily",
        days: Optional[Iterable[str]] = None,
    ) -> HabitRead:
        habit_input = validate_habit_input(name, description, recurrence, days)
        habit = await self.store.insert_habit(self.context.user_id, habit_input.to_store_values())
        self._habits.insert(0, habit)
        self._entries.setdefault(habit.id, {})
        logger.info("Created habit %s for %s", habit.id, self.context.user_id)
        return habit

    async def update_habit(
        self,
        habit_id: int,
        name: str,
        description: Optional[str] = None,
        recurrence="daily",
        days: Optional[Iterable[str]] = None,
    ) -> HabitRead:
        habit_input = validate_habit_input(name, description, recurrence, days)
        habit = await self.store.update_habit(
            self.context.user_id, habit_id, habit_input.to_store_values()
        )
        if habit is None:
            raise NotFoundError(habit_id)
        self._replace_habit(habit)
        return habit

    async def delete_habit(self, habit_id: int) -> None:
        await self.store.delete_habit(self.context.user_id, habit_id)
        self._drop_habit(habit_id)
        logger.info("Deleted habit %s for %s", habit_id, self.context.user_id)

    async def archive_habit(self, habit_id: int) -> HabitRead:
        habit = await self.store.update_habit(self.context.user_id, habit_id, {"is_archived": True})
        if habit is None:
            raise NotFoundError(habit_id)
        # 日本語: アーカイブ済みは既定の一覧から除外 / English: Archived habits leave the default view
        self._drop_habit(habit_id)
        return habit

    async def toggle_completion(self, habit_id: int, date: datetime.date) -> HabitEntryRead:
        existing = self._entries.get(habit_id, {}).get(date)
        owner_id = self.context.user_id
        if existing is None:
            entry = await self.store.insert_entry(owner_id, habit_id, date, True)
        else:
            # 日本語: false になっても行は残し「未達成」の明示記録とする
            # English: The row stays when flipped to false; it records an explicit "not done"
            entry = await self.store.update_entry(owner_id, existing.id, not existing.completed)
        self._entries.setdefault(entry.habit_id, {})[entry.date] = entry
        return entry

    def entries_for_habit(self, habit_id: int) -> List[HabitEntryRead]:
        entries = self._entries.get(habit_id, {})
        return [entries[day] for day in sorted(entries)]

    def is_completed_on_date(self, habit_id: int, date: datetime.date) -> bool:
        entry = self._entries.get(habit_id, {}).get(date)
        return bool(entry and entry.completed)

    def compute_streak(self, habit_id: int, as_of: Optional[datetime.date] = None) -> int:
        """Consecutive completed calendar days ending at ``as_of``.

        Recurrence is ignored: a day the habit was not due still breaks the
        streak. Entries older than the loaded window count as absent.
        """
        current = as_of or self.today_fn()
        streak = 0
        while self.is_completed_on_date(habit_id, current):
            streak += 1
            current -= datetime.timedelta(days=1)
        return streak

    def is_due_on_date(self, habit: HabitRead, date: datetime.date) -> bool:
        return habit.recurrence.is_due(date)

    def recent_history(
        self,
        habit_id: int,
        days: int = DEFAULT_HISTORY_DAYS,
        as_of: Optional[datetime.date] = None,
    ) -> List[Tuple[datetime.date, bool]]:
        end = as_of or self.today_fn()
        history = []
        for offset in range(days - 1, -1, -1):
            day = end - datetime.timedelta(days=offset)
            history.append((day, self.is_completed_on_date(habit_id, day)))
        return history

    def _replace_habit(self, habit: HabitRead) -> None:
        for index, current in enumerate(self._habits):
            if current.id == habit.id:
                self._habits[index] = habit
                return

    def _drop_habit(self, habit_id: int) -> None:
        self._habits = [habit for habit in self._habits if habit.id != habit_id]
        self._entries.pop(habit_id, None)


__all__ = ["HabitEngine", "DEFAULT_WINDOW_DAYS", "DEFAULT_HISTORY_DAYS"]
