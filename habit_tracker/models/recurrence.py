"""Recurrence schedules for habits.

Two storage generations coexist in the ``habit`` table:

* generation 1 wrote ``frequency`` as ``daily`` or ``weekly`` and had no
  ``days`` column;
* generation 2 writes ``daily``, ``weekdays``, ``weekends`` or ``custom``
  together with a comma-separated weekday list (``0`` = Monday ... ``6`` =
  Sunday).

``Recurrence.from_storage`` reads both into one tagged value.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import FrozenSet, Iterable, List, Optional, Tuple

from habit_tracker.core.errors import UndefinedRecurrenceError

logger = logging.getLogger(__name__)


class UnknownWeekdayError(ValueError):
    """Raised for a weekday designator outside mon..sun."""


class Weekday(IntEnum):
    MON = 0
    TUE = 1
    WED = 2
    THU = 3
    FRI = 4
    SAT = 5
    SUN = 6

    @property
    def designator(self) -> str:
        return self.name.lower()

    @classmethod
    def from_designator(cls, value: str) -> "Weekday":
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise UnknownWeekdayError(f"unknown weekday designator: {value!r}") from None


class RecurrenceKind(str, Enum):
    DAILY = "daily"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    CUSTOM = "custom"
    # 日本語: 旧スキーマ専用。新規入力では受け付けない / English: Legacy-only kind, never accepted from new input
    WEEKLY = "weekly"

    @property
    def is_legacy(self) -> bool:
        return self is RecurrenceKind.WEEKLY


ALL_DAYS: FrozenSet[Weekday] = frozenset(Weekday)
WORK_DAYS: FrozenSet[Weekday] = frozenset(
    {Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI}
)
WEEKEND_DAYS: FrozenSet[Weekday] = frozenset({Weekday.SAT, Weekday.SUN})

_FIXED_DAYS = {
    RecurrenceKind.DAILY: ALL_DAYS,
    RecurrenceKind.WEEKDAYS: WORK_DAYS,
    RecurrenceKind.WEEKENDS: WEEKEND_DAYS,
}


@dataclass(frozen=True)
class Recurrence:
    kind: RecurrenceKind
    days: FrozenSet[Weekday] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        # 日本語: 固定種別は曜日集合を正規化し、custom 以外で任意集合を持たせない
        # English: Fixed kinds carry their canonical day-set; only custom carries an arbitrary one
        if self.kind in _FIXED_DAYS:
            object.__setattr__(self, "days", _FIXED_DAYS[self.kind])
        elif self.kind is RecurrenceKind.WEEKLY:
            object.__setattr__(self, "days", frozenset())
        else:
            object.__setattr__(self, "days", frozenset(Weekday(int(day)) for day in self.days))

    @classmethod
    def daily(cls) -> "Recurrence":
        return cls(RecurrenceKind.DAILY)

    @classmethod
    def custom(cls, days: Iterable[Weekday]) -> "Recurrence":
        return cls(RecurrenceKind.CUSTOM, frozenset(days))

    @classmethod
    def parse(cls, kind: str, days: Optional[Iterable[str]] = None) -> "Recurrence":
        """Build a recurrence from user input; raises ``ValueError`` on bad input."""
        if isinstance(kind, RecurrenceKind):
            kind = kind.value
        try:
            parsed_kind = RecurrenceKind(str(kind).strip().lower())
        except ValueError:
            raise ValueError(f"unknown schedule kind: {kind!r}") from None
        if parsed_kind.is_legacy:
            raise ValueError("weekly schedules are no longer supported; choose daily, weekdays, weekends or custom")
        if parsed_kind is RecurrenceKind.CUSTOM:
            return cls.custom(Weekday.from_designator(day) for day in (days or []))
        return cls(parsed_kind)

    @classmethod
    def from_storage(cls, frequency: str, days: Optional[str]) -> "Recurrence":
        kind = RecurrenceKind(frequency)
        if kind is not RecurrenceKind.CUSTOM:
            return cls(kind)
        # 日本語: days が NULL の custom 行は「一度も該当しない」扱い / English: custom rows with NULL days are never due
        return cls.custom(_stored_weekdays(days))

    def to_storage(self) -> Tuple[str, Optional[str]]:
        if self.kind.is_legacy:
            return self.kind.value, None
        return self.kind.value, ",".join(str(int(day)) for day in sorted(self.days))

    def designators(self) -> List[str]:
        return [day.designator for day in sorted(self.days)]

    def is_due(self, day: datetime.date) -> bool:
        if self.kind.is_legacy:
            raise UndefinedRecurrenceError(
                "weekly schedules from the legacy schema have no defined due days"
            )
        return Weekday(day.weekday()) in self.days


def _stored_weekdays(days: Optional[str]) -> List[Weekday]:
    parsed = []
    for part in (days or "").split(","):
        if not part.strip():
            continue
        try:
            parsed.append(Weekday(int(part)))
        except ValueError:
            # 日本語: 不正な曜日インデックスは読み飛ばす / English: Skip malformed weekday indexes in stored rows
            logger.warning("Ignoring invalid stored weekday index %r in %r", part, days)
    return parsed
