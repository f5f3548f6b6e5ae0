"""Status lines for the headless --export/--import commands."""

import sys
from typing import TextIO

GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
DIM = "\033[2m"
RESET = "\033[0m"
CHECK = "\u2713"
BULLET = "\u2022"
CROSS = "\u2717"


def _paint(text: str, color: str, stream: TextIO) -> str:
    if hasattr(stream, "isatty") and stream.isatty():
        return f"{color}{text}{RESET}"
    return text


def _line(marker: str, color: str, message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(f"{_paint(marker, color, stream)} {message}", file=stream)


def success(message: str) -> None:
    _line(CHECK, GREEN, message)


def info(message: str) -> None:
    _line(BULLET, YELLOW, message)


def error(message: str) -> None:
    """Failures go to stderr so stdout stays clean for scripts."""
    _line(CROSS, RED, message, sys.stderr)


def board_summary(columns: int, tasks: int, history: int | None = None) -> None:
    """Indented counts under a success line, e.g. ``3 columns, 5 tasks``."""
    parts = [_plural(columns, "column"), _plural(tasks, "task")]
    if history is not None:
        parts.append(_plural(history, "history entry", "history entries"))
    print(_paint(f"  {', '.join(parts)}", DIM, sys.stdout))


def _plural(count: int, singular: str, plural: str | None = None) -> str:
    return f"{count} {singular if count == 1 else plural or singular + 's'}"
