"""
VIEW STATE MACHINE

ViewState holds everything the screen shows and reacts to two kinds of input:

  * handle_key(key)  - a decoded key name from the terminal
  * apply(message)   - the result of a background task

Both return a list of tasks. A task is a zero-argument callable that does the
slow work (disk reads, searches) and returns a message; the event loop runs it
off-thread and feeds the message back through apply(). All mutation of the
state happens on the loop thread.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

from . import calendar_grid
from .models import Entry, EntryKind
from .search import rank_entries
from .storage import StorageError

STREAM, TODOS, CALENDAR = "stream", "todos", "calendar"
MODES = (STREAM, TODOS, CALENDAR)

INPUT_PANE, ENTRIES_PANE, DATE_PICKER_PANE = "input", "entries", "date-picker"
PANES = (INPUT_PANE, ENTRIES_PANE, DATE_PICKER_PANE)

ERROR_TTL = timedelta(seconds=5)
INPUT_CHAR_LIMIT = 500

SLASH_COMMANDS = ("/todos", "/todo", "/cal", "/stak", "/search", "/links", "/help", "/quit")
TODO_USAGE = "Usage: /todo <text> or /t <text>"
SEARCH_USAGE = "Usage: /search <query> or /links <query>"

ARROW_DIRECTIONS = {
    "up": calendar_grid.UP,
    "down": calendar_grid.DOWN,
    "left": calendar_grid.LEFT,
    "right": calendar_grid.RIGHT,
}


# ---------------------------------------------------------------------
# MESSAGES
# ---------------------------------------------------------------------
@dataclass
class EntriesLoaded:
    entries: List[Entry]
    mode: str
    date: Optional[date] = None


@dataclass
class FilteredEntriesLoaded:
    entries: List[Entry]
    mode: str


@dataclass
class CalendarEntriesLoaded:
    calendar_entries: Dict[str, List[Entry]]
    selected_date: date
    mode: str = CALENDAR


@dataclass
class SearchResults:
    entries: List[Entry]
    query: str
    mode: str
    links_only: bool = False


@dataclass
class EntryAdded:
    pass


Task = Callable[[], object]


# ---------------------------------------------------------------------
# TEXT INPUT
# ---------------------------------------------------------------------
@dataclass
class TextInput:
    value: str = ""
    cursor: int = 0
    focused: bool = True
    char_limit: int = INPUT_CHAR_LIMIT
    suggestions: List[str] = field(default_factory=list)

    def focus(self):
        self.focused = True

    def blur(self):
        self.focused = False

    def set_value(self, value: str):
        self.value = value[:self.char_limit]
        self.cursor = len(self.value)
        self._update_suggestions()

    def clear(self):
        self.set_value("")

    def handle_key(self, key: str) -> bool:
        """Apply an editing key. Returns False when the key is not an editing key."""
        if key == "backspace":
            if self.cursor > 0:
                self.value = self.value[:self.cursor - 1] + self.value[self.cursor:]
                self.cursor -= 1
        elif key == "delete":
            self.value = self.value[:self.cursor] + self.value[self.cursor + 1:]
        elif key == "left":
            self.cursor = max(0, self.cursor - 1)
        elif key == "right":
            self.cursor = min(len(self.value), self.cursor + 1)
        elif key == "home":
            self.cursor = 0
        elif key == "end":
            self.cursor = len(self.value)
        elif len(key) == 1 and key.isprintable():
            if len(self.value) >= self.char_limit:
                return True
            self.value = self.value[:self.cursor] + key + self.value[self.cursor:]
            self.cursor += 1
        else:
            return False
        self._update_suggestions()
        return True

    def _update_suggestions(self):
        if self.value.startswith("/"):
            self.suggestions = [c for c in SLASH_COMMANDS if c.startswith(self.value)]
        else:
            self.suggestions = []

    def accept_suggestion(self) -> bool:
        if self.suggestions and self.suggestions[0] != self.value:
            self.set_value(self.suggestions[0])
            return True
        return False


# ---------------------------------------------------------------------
# VIEW STATE
# ---------------------------------------------------------------------
class ViewState:
    def __init__(self, service, clock: Callable[[], datetime] = datetime.now):
        self.service = service
        self.clock = clock
        self.mode = STREAM
        self.active_pane = INPUT_PANE
        self.entries: List[Entry] = []
        self.selected_idx = -1
        self.show_help = False
        self.selected_date: date = clock().date()
        self.calendar_entries: Dict[str, List[Entry]] = {}
        self.editing_todo_idx = -1
        self.editing_entry: Optional[Entry] = None
        self.original_content = ""
        self.error_message = ""
        self.error_time: Optional[datetime] = None
        self.search_query = ""
        self.input = TextInput()
        self.quit = False

    def init(self) -> List[Task]:
        return [self.load_filtered_task()]

    # -----------------------------------------------------------------
    # ERROR BANNER
    # -----------------------------------------------------------------
    def set_error(self, message: str):
        logging.info(f"Status error: {message}")
        self.error_message = message
        self.error_time = self.clock()

    def visible_error(self) -> str:
        if self.error_message and self.error_time is not None:
            if self.clock() - self.error_time < ERROR_TTL:
                return self.error_message
        return ""

    # -----------------------------------------------------------------
    # TASKS
    # -----------------------------------------------------------------
    def load_filtered_task(self) -> Task:
        mode = self.mode
        service = self.service

        def task():
            try:
                if mode == TODOS:
                    entries = service.load_filtered_entries(EntryKind.TODO)
                else:
                    entries = service.load_today_entries()
            except Exception as e:
                logging.error(f"Error loading entries for {mode}: {e}")
                entries = []
            return FilteredEntriesLoaded(entries=entries, mode=mode)
        return task

    def load_today_task(self) -> Task:
        mode = self.mode
        service = self.service

        def task():
            try:
                entries = service.load_today_entries()
            except Exception as e:
                logging.error(f"Error loading today's entries: {e}")
                entries = []
            return EntriesLoaded(entries=entries, mode=mode)
        return task

    def load_calendar_task(self) -> Task:
        selected_date = self.selected_date
        service = self.service

        def task():
            try:
                grouped = service.load_calendar_entries()
            except Exception as e:
                logging.error(f"Error loading calendar entries: {e}")
                grouped = {}
            return CalendarEntriesLoaded(calendar_entries=grouped, selected_date=selected_date)
        return task

    def load_for_date_task(self, day: date) -> Task:
        mode = self.mode
        service = self.service

        def task():
            try:
                entries = service.load_entries_for_date(day)
            except Exception as e:
                logging.error(f"Error loading entries for {day}: {e}")
                entries = []
            return EntriesLoaded(entries=entries, mode=mode, date=day)
        return task

    def search_task(self, query: str, links_only: bool = False) -> Task:
        mode = self.mode
        service = self.service

        def task():
            try:
                entries = service.search_entries(query, links_only)
            except Exception as e:
                logging.error(f"Error searching for '{query}': {e}")
                entries = []
            return SearchResults(entries=entries, query=query, mode=mode, links_only=links_only)
        return task

    def reload_tasks(self) -> List[Task]:
        if self.mode == CALENDAR:
            # The month grid marks days with entries, so refresh it too.
            return [self.load_for_date_task(self.selected_date), self.load_calendar_task()]
        return [self.load_filtered_task()]

    # -----------------------------------------------------------------
    # MESSAGES
    # -----------------------------------------------------------------
    def apply(self, msg) -> List[Task]:
        if isinstance(msg, EntryAdded):
            return self.reload_tasks()
        if getattr(msg, "mode", self.mode) != self.mode:
            logging.debug(f"Discarding stale {type(msg).__name__} for mode {msg.mode}")
            return []
        if isinstance(msg, FilteredEntriesLoaded):
            self.search_query = ""
            self._set_entries(msg.entries)
        elif isinstance(msg, EntriesLoaded):
            if msg.date is not None and msg.date != self.selected_date:
                return []
            self.search_query = ""
            self._set_entries(msg.entries)
        elif isinstance(msg, CalendarEntriesLoaded):
            self.calendar_entries = msg.calendar_entries
            self._set_entries(self.calendar_entries.get(self.selected_date.isoformat(), []))
        elif isinstance(msg, SearchResults):
            self.search_query = msg.query
            self.selected_idx = -1
            self._set_entries(rank_entries(msg.entries, msg.query))
        return []

    def _set_entries(self, entries: List[Entry]):
        self.entries = list(entries)
        if not self.entries:
            self.selected_idx = -1
        elif self.selected_idx < 0:
            self.selected_idx = len(self.entries) - 1
        elif self.selected_idx >= len(self.entries):
            self.selected_idx = len(self.entries) - 1

    # -----------------------------------------------------------------
    # KEYS
    # -----------------------------------------------------------------
    def handle_key(self, key: str) -> List[Task]:
        if key == "ctrl+c":
            self.quit = True
            return []
        if key == "resize":
            return []
        if key == "?" and self.editing_todo_idx < 0 and (not self.input.focused or not self.input.value):
            self.show_help = not self.show_help
            return []
        if key == "q" and not self.input.focused:
            self.quit = True
            return []
        if key == "esc":
            return self._handle_escape()
        if key == "shift+tab":
            return self.set_mode(MODES[(MODES.index(self.mode) + 1) % len(MODES)])
        if key == "enter":
            return self._handle_enter()
        if key == "tab":
            return self._handle_tab()
        if key in ("up", "down"):
            return self._handle_vertical(key)
        if key in ("left", "right") and self.mode == CALENDAR and self.active_pane == DATE_PICKER_PANE:
            return self.navigate_calendar(ARROW_DIRECTIONS[key])
        if key in ("e", "right") and self._can_start_editing():
            self.start_editing_todo()
            return []
        if self._input_active():
            self.input.handle_key(key)
        return []

    def _input_active(self) -> bool:
        if not self.input.focused:
            return False
        return self.mode != CALENDAR or self.active_pane == INPUT_PANE

    def _has_selection(self) -> bool:
        return 0 <= self.selected_idx < len(self.entries)

    def _can_start_editing(self) -> bool:
        return (self.mode == TODOS and not self.input.focused
                and self.editing_todo_idx < 0 and self._has_selection())

    def _handle_escape(self) -> List[Task]:
        if self.editing_todo_idx >= 0:
            self.cancel_editing_todo()
            return []
        if self.show_help:
            self.show_help = False
            return []
        if self.mode == CALENDAR:
            self.set_mode(STREAM)
            return [self.load_today_task()]
        return []

    def _handle_enter(self) -> List[Task]:
        if self.show_help:
            self.show_help = False
            return []
        if self.mode == CALENDAR:
            if self.active_pane == ENTRIES_PANE:
                if self._has_selection() and self.entries[self.selected_idx].is_todo:
                    return self.toggle_selected_todo()
                return []
            if self.active_pane == DATE_PICKER_PANE:
                self.active_pane = INPUT_PANE
                self.input.focus()
                return []
        if self.mode == TODOS:
            if self.editing_todo_idx >= 0:
                return self.save_editing_todo()
            if not self.input.focused and self._has_selection():
                return self.toggle_selected_todo()
        return self.submit()

    def _handle_tab(self) -> List[Task]:
        if self.mode == CALENDAR:
            if self.active_pane == INPUT_PANE:
                self.active_pane = ENTRIES_PANE
                self.input.blur()
                if self.entries and self.selected_idx < 0:
                    self.selected_idx = len(self.entries) - 1
            elif self.active_pane == ENTRIES_PANE:
                self.active_pane = DATE_PICKER_PANE
                self.selected_idx = -1
            else:
                self.active_pane = INPUT_PANE
                self.input.focus()
                self.selected_idx = -1
        elif self.mode == TODOS:
            if self.editing_todo_idx >= 0:
                return []
            if self.input.focused:
                self.input.blur()
                if self.entries and self.selected_idx < 0:
                    self.selected_idx = 0
            else:
                self.input.focus()
                self.selected_idx = -1
        else:
            self.input.accept_suggestion()
        return []

    def _handle_vertical(self, key: str) -> List[Task]:
        if self.mode == CALENDAR:
            if self.active_pane == DATE_PICKER_PANE:
                return self.navigate_calendar(ARROW_DIRECTIONS[key])
            if self.active_pane != ENTRIES_PANE:
                return []
        if key == "up" and self.selected_idx > 0:
            self.selected_idx -= 1
        elif key == "down" and self.selected_idx < len(self.entries) - 1:
            self.selected_idx += 1
        return []

    # -----------------------------------------------------------------
    # MODES / CALENDAR
    # -----------------------------------------------------------------
    def set_mode(self, mode: str) -> List[Task]:
        if self.editing_todo_idx >= 0:
            self.cancel_editing_todo()
        self.mode = mode
        self.selected_idx = -1
        self.show_help = False
        self.search_query = ""
        if mode in (STREAM, CALENDAR):
            self.active_pane = INPUT_PANE
            self.input.focus()
        if mode == CALENDAR:
            return [self.load_calendar_task()]
        return [self.load_filtered_task()]

    def navigate_calendar(self, direction: str) -> List[Task]:
        self.selected_date = calendar_grid.get_spatial_date(self.selected_date, direction)
        return [self.load_for_date_task(self.selected_date)]

    # -----------------------------------------------------------------
    # INPUT SUBMISSION / COMMANDS
    # -----------------------------------------------------------------
    def submit(self) -> List[Task]:
        text = self.input.value.strip()
        if not text:
            return []
        if text.startswith("/"):
            return self.handle_command(text)
        try:
            if text.startswith("tomorrow"):
                self.service.create_tomorrow_entry(text)
            elif self.mode == CALENDAR:
                self.service.create_entry_for_date(text, self._selected_datetime())
            elif self.mode == TODOS:
                self.service.create_entry(text, force_kind=EntryKind.TODO)
            else:
                self.service.create_entry(text)
        except StorageError as e:
            self.set_error(f"Save failed: {e}")
            return []
        self.input.clear()
        return [EntryAdded]

    def _selected_datetime(self) -> datetime:
        return datetime.combine(self.selected_date, self.clock().time())

    def handle_command(self, text: str) -> List[Task]:
        parts = text.split()
        command, args = parts[0], parts[1:]

        if command in ("/quit", "/q"):
            self.quit = True
            return []
        if command in ("/help", "/h"):
            self.show_help = not self.show_help
            self.input.clear()
            return []
        if command == "/stak":
            self.input.clear()
            return self.set_mode(STREAM)
        if command == "/cal":
            self.input.clear()
            return self.set_mode(CALENDAR)
        if command == "/todos":
            self.input.clear()
            return self.set_mode(TODOS)
        if command in ("/todo", "/t"):
            if not args:
                self.set_error(TODO_USAGE)
                return []
            todo_text = " ".join(args)
            try:
                if self.mode == CALENDAR:
                    self.service.create_entry_for_date(todo_text, self._selected_datetime(), force_kind=EntryKind.TODO)
                else:
                    self.service.create_entry(todo_text, force_kind=EntryKind.TODO)
            except StorageError as e:
                self.set_error(f"Save failed: {e}")
                return []
            self.input.clear()
            return self.reload_tasks()
        if command in ("/search", "/links"):
            if not args:
                self.set_error(SEARCH_USAGE)
                return []
            self.input.clear()
            return [self.search_task(" ".join(args), links_only=command == "/links")]

        self.set_error(f"Unknown command: {command}")
        self.input.clear()
        return []

    # -----------------------------------------------------------------
    # TODO EDITING / TOGGLING
    # -----------------------------------------------------------------
    def toggle_selected_todo(self) -> List[Task]:
        entry = self.entries[self.selected_idx]
        try:
            self.service.toggle_todo_status(entry.id, self.entries)
        except StorageError as e:
            self.set_error(f"Save failed: {e}")
            return []
        return self.reload_tasks()

    def start_editing_todo(self):
        entry = self.entries[self.selected_idx]
        if not entry.is_todo:
            return
        self.editing_todo_idx = self.selected_idx
        self.editing_entry = entry.copy()
        self.original_content = entry.content
        self.input.set_value(entry.content)
        self.input.focus()

    def save_editing_todo(self) -> List[Task]:
        content = self.input.value.strip()
        if not content or self.editing_entry is None:
            self.cancel_editing_todo()
            return []
        try:
            self.service.update_todo_content(self.editing_entry, content)
        except StorageError as e:
            self.set_error(f"Save failed: {e}")
            self.cancel_editing_todo()
            return []
        self._finish_editing()
        return [self.load_filtered_task()]

    def cancel_editing_todo(self):
        self._finish_editing()

    def _finish_editing(self):
        self.editing_todo_idx = -1
        self.editing_entry = None
        self.original_content = ""
        self.input.clear()
        self.input.blur()
