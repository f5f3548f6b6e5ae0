"""Completion statistics over recent days."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, date, timedelta

from ..models import Board, Task
from ..utils import day_key, now_utc


@dataclass
class ProgressSummary:
    """Completions per day over a trailing window."""

    days: list[str]  # YYYY-MM-DD, oldest first
    values: list[int]
    recent: int  # completions in the newer half of the window
    previous: int  # completions in the older half
    change: int  # percent change from previous to recent

    @property
    def total(self) -> int:
        return sum(self.values)


def _completion_day(task: Task) -> str | None:
    if task.completed_at is None:
        return None
    completed_at = task.completed_at
    if completed_at.tzinfo is not None:
        completed_at = completed_at.astimezone(UTC)
    return day_key(completed_at)


class ProgressService:
    """Derives completion counts from task completion timestamps."""

    def daily_completions(
        self, board: Board, days: int = 14, today: date | None = None
    ) -> list[tuple[str, int]]:
        """Completed-task counts for each of the last ``days`` days, oldest first."""
        today = today or now_utc().date()
        day_list = [day_key(today - timedelta(days=offset)) for offset in range(days - 1, -1, -1)]
        counts = dict.fromkeys(day_list, 0)

        for task in board.all_tasks():
            key = _completion_day(task)
            if key in counts:
                counts[key] += 1

        return [(day, counts[day]) for day in day_list]

    def summary(self, board: Board, days: int = 14, today: date | None = None) -> ProgressSummary:
        """Completions per day plus the recent-vs-previous trend."""
        daily = self.daily_completions(board, days, today)
        values = [count for _, count in daily]

        half = days // 2
        recent = sum(values[-half:]) if half else 0
        previous = sum(values[-half * 2 : -half]) if half else 0

        if previous == 0:
            change = 0 if recent == 0 else 100
        else:
            change = math.floor((recent - previous) / previous * 100 + 0.5)

        return ProgressSummary(
            days=[day for day, _ in daily],
            values=values,
            recent=recent,
            previous=previous,
            change=change,
        )

    def completed_on(self, board: Board, day: str) -> list[tuple[Task, str]]:
        """
        Tasks completed on a given day.

        Returns:
            (task, column title) pairs; the column is the one the task was
            completed from when it is still on the board.
        """
        result: list[tuple[Task, str]] = []
        for column in board.columns:
            for task in column.tasks:
                if _completion_day(task) != day:
                    continue
                origin = board.find_column(task.previous_column_id or "")
                result.append((task, origin.title if origin else column.title))
        return result
