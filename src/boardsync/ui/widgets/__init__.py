"""Widget components."""

from .column import EmptyColumnMessage, KanbanColumn
from .command_bar import CommandBar
from .confirm_modal import ConfirmModal
from .prompt_modal import PromptModal
from .task_card import TaskCard
from .task_form_modal import TaskForm, TaskFormModal

__all__ = [
    "CommandBar",
    "ConfirmModal",
    "EmptyColumnMessage",
    "KanbanColumn",
    "PromptModal",
    "TaskCard",
    "TaskForm",
    "TaskFormModal",
]
