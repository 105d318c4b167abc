# src/todo_sync/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.controller import ViewState
from ..core.dialog import DialogMode, DialogSession, ValidationResult
from ..core.state import AppState
from ..errors import InvalidKeyFormat, ListNotLoaded, NotFound
from ..tasks.projection import ListRow, PriorityColor
from ..tasks.task_models import Priority

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()

_PRIORITY_WORDS: dict[str, Priority] = {
    "h": Priority.HIGH,
    "high": Priority.HIGH,
    "1": Priority.HIGH,
    "m": Priority.MEDIUM,
    "medium": Priority.MEDIUM,
    "2": Priority.MEDIUM,
    "l": Priority.LOW,
    "low": Priority.LOW,
    "3": Priority.LOW,
}

_ANSI_COLORS = {
    PriorityColor.RED: "\033[31m",
    PriorityColor.BLUE: "\033[34m",
    PriorityColor.GREEN: "\033[32m",
}
_ANSI_STRIKE = "\033[9m"
_ANSI_RESET = "\033[0m"


def parse_priority(token: str) -> Priority | None:
    return _PRIORITY_WORDS.get(token.strip().lower())


def format_row(position: int, row: ListRow, *, ansi: bool = False) -> str:
    """One list line: "[x] 3. Buy milk (high)"; ticked rows are struck through."""
    box = "[x]" if row.selected else "[ ]"
    label = row.priority.name.lower() if row.priority is not Priority.NONE else "no priority"
    text = row.description
    if ansi:
        color = _ANSI_COLORS.get(row.color, "") if row.color else ""
        if row.selected:
            text = f"{_ANSI_STRIKE}{text}{_ANSI_RESET}"
        box = f"{color}{box}{_ANSI_RESET}" if color else box
    elif row.selected:
        text = f"~~{text}~~"
    return f"{box} {position}. {text} ({label})"


def render_list(state: AppState, *, ansi: bool = False) -> str:
    ctrl = state.controller
    if ctrl.view_state is ViewState.OFFLINE:
        return "No internet connection."
    if ctrl.view_state in (ViewState.IDLE, ViewState.LOADING):
        return "Loading tasks..."
    rows = ctrl.rows()
    if not rows:
        return "No tasks yet. Use /add to create one."
    lines = [format_row(i, row, ansi=ansi) for i, row in enumerate(rows, start=1)]
    if ctrl.can_delete:
        lines.append(f"{len(ctrl.selection)} ticked. Use /delete to remove them.")
    return "\n".join(lines)


def _describe_dialog(session: DialogSession) -> str:
    header = "Add task" if session.mode is DialogMode.ADD else f"Update task {session.key}"
    prio = session.priority.name.lower() if session.priority is not Priority.NONE else "-"
    title = session.description or "-"
    return f"{header}: title={title!r} priority={prio}"


def _validation_reply(result: ValidationResult) -> str:
    lines = [f"  ! {m}" for m in result.messages()]
    lines.append("Fix with /title <text> and /priority h|m|l, then /save (or /cancel).")
    return "\n".join(lines)


def _fill_and_maybe_save(state: AppState, session: DialogSession, args: list[str]) -> str:
    """Apply "[prio] [text...]" args to the dialog; submit when anything was given."""
    if not args:
        return (
            _describe_dialog(session)
            + "\nSet /title <text> and /priority h|m|l, then /save (or /cancel)."
        )

    prio = parse_priority(args[0])
    text_parts = args[1:] if prio is not None else args
    if prio is not None:
        session.set_checked(prio)
    if text_parts:
        session.set_description(" ".join(text_parts))
    return _save(state, session)


def _save(state: AppState, session: DialogSession) -> str:
    try:
        result = state.controller.submit_dialog(session)
    except ListNotLoaded:
        return "Loading tasks... Try /save again in a moment."
    except InvalidKeyFormat as e:
        state.dialog = None
        return f"Cannot add task: {e}"
    if not result.ok:
        state.dialog = session
        return _validation_reply(result)
    state.dialog = None
    if session.mode is DialogMode.ADD:
        return f"Task added: {session.committed.description if session.committed else ''}"
    return f"Task {session.key} updated."


def _open_dialog_guard(state: AppState) -> str | None:
    if state.dialog is not None and state.dialog.is_open:
        return "A dialog is already open. Finish it with /save or close it with /cancel."
    return None


def _require_dialog(state: AppState) -> DialogSession | None:
    if state.dialog is not None and state.dialog.is_open:
        return state.dialog
    return None


def _parse_position(state: AppState, raw: str) -> str:
    """1-based list position -> key. Raises NotFound."""
    try:
        pos = int(raw)
    except ValueError:
        raise NotFound(raw) from None
    return state.controller.key_at(pos - 1)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    ctrl = state.controller
    settings = state.settings
    backend = getattr(settings, "backend", "?")
    where = getattr(settings, "database_url", "") if backend == "firebase" else getattr(
        settings, "local_store_path", ""
    )
    dialog = _describe_dialog(state.dialog) if _require_dialog(state) else "none"
    lines = [
        "Status:",
        f"  Backend: {backend} ({where})" if where else f"  Backend: {backend}",
        f"  Online: {'yes' if state.online else 'no'}",
        f"  List: {ctrl.view_state} ({len(ctrl.store)} tasks, {len(ctrl.selection)} ticked)",
        f"  Open dialog: {dialog}",
    ]
    if ctrl.last_error is not None:
        lines.append(f"  Last sync error: {ctrl.last_error}")
    return "\n".join(lines)


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_list(state, ansi=state.ansi)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add                   -> open the add dialog
    /add h Buy milk        -> add with priority and title in one go
    """
    busy = _open_dialog_guard(state)
    if busy:
        return busy
    if state.controller.view_state is ViewState.OFFLINE:
        return "No internet connection."
    if not state.controller.loaded:
        return "Loading tasks..."
    session = state.controller.open_add_dialog()
    state.dialog = session
    return _fill_and_maybe_save(state, session, args)


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit N                -> open the update dialog for task #N (prefilled from the store)
    /edit N m New title    -> update in one go
    """
    busy = _open_dialog_guard(state)
    if busy:
        return busy
    if not args:
        return "Usage: /edit N [h|m|l] [title]"
    try:
        key = _parse_position(state, args[0])
        session = state.controller.open_edit_dialog(key)
    except NotFound:
        return f"No task #{args[0]}."
    state.dialog = session
    return _fill_and_maybe_save(state, session, args[1:])


def cmd_title(state: AppState, args: list[str]) -> str:
    session = _require_dialog(state)
    if session is None:
        return "No dialog open. Use /add or /edit N."
    session.set_description(" ".join(args))
    return _describe_dialog(session)


def cmd_priority(state: AppState, args: list[str]) -> str:
    session = _require_dialog(state)
    if session is None:
        return "No dialog open. Use /add or /edit N."
    prio = parse_priority(args[0]) if args else None
    if prio is None:
        return "Usage: /priority h|m|l"
    session.set_checked(prio)
    return _describe_dialog(session)


def cmd_save(state: AppState, args: list[str]) -> str:
    session = _require_dialog(state)
    if session is None:
        return "No dialog open. Use /add or /edit N."
    return _save(state, session)


def cmd_cancel(state: AppState, args: list[str]) -> str:
    session = _require_dialog(state)
    if session is None:
        return "No dialog open."
    state.controller.cancel_dialog(session)
    state.dialog = None
    return "Dialog closed."


def cmd_tick(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /tick N"
    try:
        key = _parse_position(state, args[0])
    except NotFound:
        return f"No task #{args[0]}."
    selected = state.controller.toggle_selection(key)
    verb = "ticked for delete" if selected else "unticked"
    return f"Task #{args[0]} {verb}. {len(state.controller.selection)} ticked."


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not state.controller.can_delete:
        return "Nothing ticked. Use /tick N first."
    keys = state.controller.delete_selected()
    return f"Deleting {len(keys)} task(s)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend, connection and list state.")
registry.register("list", cmd_list, help_text="Show the task list.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add [h|m|l] [title].", aliases=["new"])
registry.register("edit", cmd_edit, help_text="Update task #N: /edit N [h|m|l] [title].")
registry.register("title", cmd_title, help_text="Set the open dialog's title.")
registry.register("priority", cmd_priority, help_text="Set the open dialog's priority: h|m|l.")
registry.register("save", cmd_save, help_text="Validate and save the open dialog.")
registry.register("cancel", cmd_cancel, help_text="Close the open dialog without saving.")
registry.register("tick", cmd_tick, help_text="Tick/untick task #N for deletion.")
registry.register("delete", cmd_delete, help_text="Delete all ticked tasks.", aliases=["del"])
