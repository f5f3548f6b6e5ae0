"""Task domain model."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils import new_id


class Task(BaseModel):
    """A single card on the board.

    Attribute names are snake_case; the remote service and the persisted
    snapshots use the camelCase aliases (``_id``, ``columnId``, ``order``...).
    Both spellings are accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    title: str
    description: str | None = None
    column_id: str = Field(default="", alias="columnId")
    position: int = Field(default=0, ge=0, alias="order")
    tags: list[str] = Field(default_factory=list)
    due_date: date | None = Field(default=None, alias="dueDate")
    completed: bool = False
    completed_at: datetime | None = Field(default=None, alias="completedAt")
    previous_column_id: str | None = Field(default=None, alias="previousColumnId")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            # Set-like, but first occurrence keeps its place
            return list(dict.fromkeys(value))
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _truncate_due_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value[:10] or None
        return value

    @model_validator(mode="after")
    def _clear_completion_fields(self) -> Task:
        if not self.completed:
            self.completed_at = None
            self.previous_column_id = None
        return self

    def mark_completed(self, when: datetime, previous_column_id: str) -> None:
        """Flag the task done, remembering where it came from."""
        self.completed = True
        self.completed_at = when
        self.previous_column_id = previous_column_id

    def mark_incomplete(self) -> None:
        """Clear all completion fields."""
        self.completed = False
        self.completed_at = None
        self.previous_column_id = None

    def to_wire(self) -> dict[str, Any]:
        """Convert to the JSON-ready dict used by storage and the remote service."""
        return self.model_dump(by_alias=True, mode="json")
