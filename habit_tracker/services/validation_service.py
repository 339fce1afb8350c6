"""Habit input validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from habit_tracker.core.errors import ValidationError
from habit_tracker.models.recurrence import Recurrence, UnknownWeekdayError

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class _HabitFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        if len(value) > NAME_MAX_LENGTH:
            raise ValueError(f"Name must be less than {NAME_MAX_LENGTH} characters")
        return value

    @field_validator("description")
    @classmethod
    def _check_description(cls, value: Optional[str]) -> Optional[str]:
        # 日本語: 空文字は未入力として扱う / English: Treat empty description as absent
        if not value:
            return None
        if len(value) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters")
        return value


@dataclass(frozen=True)
class HabitInput:
    """Validated values ready to be written to the store."""

    name: str
    description: Optional[str]
    recurrence: Recurrence

    def to_store_values(self) -> Dict[str, Optional[str]]:
        frequency, days = self.recurrence.to_storage()
        return {
            "name": self.name,
            "description": self.description,
            "frequency": frequency,
            "days": days,
        }


def _message_from_error(error: dict) -> str:
    message = error.get("msg", "Invalid value")
    # 日本語: pydantic が付与する接頭辞を除去 / English: Strip the prefix pydantic adds to ValueError messages
    return message.removeprefix("Value error, ")


def validate_habit_input(
    name,
    description=None,
    recurrence: Union[Recurrence, str, None] = "daily",
    days: Optional[Iterable[str]] = None,
) -> HabitInput:
    """Validate raw habit fields, collecting every failure by field name."""
    errors: Dict[str, str] = {}
    fields = None
    try:
        fields = _HabitFields(name=name if name is not None else "", description=description)
    except PydanticValidationError as exc:
        for error in exc.errors():
            field = str(error["loc"][0]) if error.get("loc") else "name"
            errors.setdefault(field, _message_from_error(error))

    parsed_recurrence = None
    if isinstance(recurrence, Recurrence):
        if recurrence.kind.is_legacy:
            errors["recurrence"] = "Choose daily, weekdays, weekends or custom"
        else:
            parsed_recurrence = recurrence
    else:
        try:
            parsed_recurrence = Recurrence.parse(recurrence or "", days)
        except UnknownWeekdayError as exc:
            errors["days"] = str(exc)
        except ValueError as exc:
            errors["recurrence"] = str(exc)

    if errors:
        raise ValidationError(errors)
    return HabitInput(name=fields.name, description=fields.description, recurrence=parsed_recurrence)
