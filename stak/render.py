"""
RENDERER

Screen layout, top to bottom:

  content area   entries, help, or the calendar panes
  status bar     MODE | context or error | clock
  input line     "> " prompt with the text being typed
  key hints

The text helpers at the top are pure so they can be tested without a
terminal; draw() paints them with curses.
"""
import calendar
import curses
from datetime import datetime

from . import calendar_grid
from .models import Entry, EntryKind, TodoStatus
from .state import CALENDAR, DATE_PICKER_PANE, ENTRIES_PANE, INPUT_PANE, TODOS

MIN_HEIGHT, MIN_WIDTH = 10, 40
CALENDAR_MIN_HEIGHT, CALENDAR_MIN_WIDTH = 20, 80
CHROME_HEIGHT = 3  # status bar + input line + key hints

PROMPT = "> "
PLACEHOLDER = "Enter your thoughts, links, todos..."
TIME_FORMAT = "%H:%M"
CLOCK_FORMAT = "%H:%M %a %b"

MODE_LABELS = {"stream": "STAK", "todos": "TODO", "calendar": "CALENDAR"}

HELP_TEXT = [
    "Shift+Tab      - Cycle STAK / TODO / CALENDAR mode",
    "Tab            - Next pane (calendar) / toggle list focus (todos)",
    "Enter          - Add entry / toggle todo / save edit",
    "Up/Down        - Move selection",
    "Arrows         - Move the date (calendar date picker)",
    "e or Right     - Edit the selected todo",
    "Esc            - Cancel edit / close help / leave calendar",
    "?              - Toggle this help",
    "q or Ctrl+C    - Quit",
    "",
    "/todos         - Switch to TODO mode",
    "/todo <text>   - Add a todo (also /t)",
    "/cal           - Calendar view with date picker",
    "/stak          - Back to the stream",
    "/search <q>    - Search all entries",
    "/links <q>     - Search links only",
    "/help          - Show this help",
    "/quit          - Exit stak",
    "",
    "Start a line with 'tomorrow' to file it under tomorrow.",
]

KEY_HINTS = {
    "stream": "shift+tab mode • enter add • ↑/↓ select • ? help • ctrl+c quit",
    "todos": "shift+tab mode • tab focus • enter toggle • e edit • ? help • q quit",
    "calendar": "shift+tab mode • tab pane • arrows move • enter select • esc back • ? help",
}

# color pair numbers
PAIR_ACCENT = 1
PAIR_SELECTED = 2
PAIR_DONE = 3
PAIR_ERROR = 4
PAIR_HAS_ENTRIES = 5
PAIR_STATUS = 6
PAIR_LINK = 7


def init_colors(theme: str = "default"):
    if theme == "mono" or not curses.has_colors():
        return
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(PAIR_ACCENT, curses.COLOR_CYAN, -1)
    curses.init_pair(PAIR_SELECTED, -1, curses.COLOR_CYAN)
    curses.init_pair(PAIR_DONE, curses.COLOR_GREEN, -1)
    curses.init_pair(PAIR_ERROR, curses.COLOR_WHITE, curses.COLOR_RED)
    curses.init_pair(PAIR_HAS_ENTRIES, curses.COLOR_YELLOW, -1)
    curses.init_pair(PAIR_STATUS, curses.COLOR_WHITE, curses.COLOR_BLUE)
    curses.init_pair(PAIR_LINK, curses.COLOR_BLUE, -1)


# ---------------------------------------------------------------------
# TEXT HELPERS
# ---------------------------------------------------------------------
def entry_line(entry: Entry, nav_marker: bool = False) -> str:
    content = entry.content
    if entry.is_todo:
        box = "✓" if entry.todo_status == TodoStatus.COMPLETED else "□"
        content = f"{box} {content}"
    elif entry.kind == EntryKind.LINK and entry.url_title:
        content = f"{content} ({entry.url_title})"
    line = f"{entry.created_at.strftime(TIME_FORMAT)} {content}"
    if nav_marker:
        line = "› " + line
    return line


def context_text(state) -> str:
    if state.mode == TODOS:
        if state.editing_todo_idx >= 0:
            return "EDITING TODO"
        done = sum(1 for e in state.entries if e.is_todo and e.todo_status == TodoStatus.COMPLETED)
        return f"{done}/{len(state.entries)} done"
    if state.mode == CALENDAR:
        return f"{state.selected_date.strftime('%B %Y')} • {len(state.entries)} entries"
    if state.search_query:
        return f"{len(state.entries)} results for '{state.search_query}'"
    return f"{len(state.entries)} entries"


def status_segments(state, now: datetime = None):
    """(mode, context, is_error, clock) for the status bar."""
    now = now or state.clock()
    error = state.visible_error()
    context = error if error else context_text(state)
    return MODE_LABELS.get(state.mode, "STAK"), context, bool(error), f"{now.strftime(CLOCK_FORMAT)} {now.day}"


def long_date(day) -> str:
    return f"{day:%A, %B} {day.day}, {day.year}"


def empty_text(mode: str) -> str:
    if mode == TODOS:
        return "No todos yet. Start typing to add one."
    if mode == CALENDAR:
        return "No entries for this date"
    return "No entries yet. Start typing to add one."


def calendar_lines(year: int, month: int):
    lines = [f"{calendar.month_name[month]} {year}".center(20), "Su Mo Tu We Th Fr Sa"]
    for week in calendar_grid.month_grid(year, month):
        lines.append(" ".join(f"{d:2}" if d else "  " for d in week))
    return lines


def help_lines():
    return list(HELP_TEXT)


def visible_window(count: int, height: int, selected: int = -1):
    """Slice of a bottom-anchored list that fits height rows and shows selected."""
    if height <= 0 or count <= 0:
        return 0, 0
    start = max(0, count - height)
    if 0 <= selected < start:
        start = selected
    return start, min(count, start + height)


def fit(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    return text[:max(0, width - 1)] + "…"


# ---------------------------------------------------------------------
# CURSES DRAWING
# ---------------------------------------------------------------------
def _put(win, y, x, text, width, attr=curses.A_NORMAL):
    try:
        win.addnstr(y, x, text, max(0, width), attr)
    except curses.error:
        pass


def draw(stdscr, state):
    stdscr.erase()
    height, width = stdscr.getmaxyx()
    if height < MIN_HEIGHT or width < MIN_WIDTH:
        draw_size_warning(stdscr, height, width, "Terminal too small. Resize or press Ctrl+C to quit.")
        stdscr.refresh()
        return

    content_height = height - CHROME_HEIGHT
    if state.show_help:
        draw_help(stdscr, content_height, width)
    elif state.mode == CALENDAR:
        draw_calendar_view(stdscr, state, content_height, width)
    else:
        draw_entries(stdscr, state, 0, 0, content_height, width)

    draw_status_bar(stdscr, state, height - 3, width)
    draw_input(stdscr, state, height - 2, width)
    _put(stdscr, height - 1, 0, fit(KEY_HINTS.get(state.mode, ""), width - 1), width - 1, curses.A_DIM)
    stdscr.refresh()


def draw_size_warning(stdscr, height, width, warning):
    warning = fit(warning, width - 1)
    _put(stdscr, height // 2, max(0, (width - len(warning)) // 2), warning, len(warning), curses.A_BOLD)


def draw_help(stdscr, height, width):
    _put(stdscr, 0, 2, "Help", width - 2, curses.A_BOLD)
    for idx, line in enumerate(help_lines()[:max(0, height - 2)], start=2):
        _put(stdscr, idx, 2, line, width - 3)


def entry_attr(entry: Entry, selected: bool) -> int:
    if selected:
        return curses.color_pair(PAIR_SELECTED) | curses.A_BOLD
    if entry.is_completed:
        return curses.color_pair(PAIR_DONE)
    if entry.kind == EntryKind.LINK:
        return curses.color_pair(PAIR_LINK)
    return curses.A_NORMAL


def draw_entries(stdscr, state, top, left, height, width):
    if not state.entries:
        text = fit(empty_text(state.mode), width - 1)
        _put(stdscr, top + height // 2, left + max(0, (width - len(text)) // 2), text, len(text), curses.A_DIM)
        return
    start, end = visible_window(len(state.entries), height, state.selected_idx)
    # oldest at top, newest just above the status bar
    y = top + height - (end - start)
    for idx in range(start, end):
        entry = state.entries[idx]
        selected = idx == state.selected_idx
        nav = selected and state.mode == TODOS and not state.input.focused
        line = fit(entry_line(entry, nav_marker=nav), width - 1)
        _put(stdscr, y, left, line, width - 1, entry_attr(entry, selected))
        y += 1


def draw_calendar_view(stdscr, state, height, width):
    if width < CALENDAR_MIN_WIDTH or height + CHROME_HEIGHT < CALENDAR_MIN_HEIGHT:
        draw_size_warning(stdscr, height, width,
                          f"Terminal too small. Calendar mode needs at least "
                          f"{CALENDAR_MIN_WIDTH}x{CALENDAR_MIN_HEIGHT} characters.")
        return
    left_width = int(width * 0.4)
    right_x = left_width + 2

    header_attr = curses.A_BOLD
    if state.active_pane == ENTRIES_PANE:
        header_attr |= curses.color_pair(PAIR_ACCENT) | curses.A_UNDERLINE
    _put(stdscr, 0, 1, long_date(state.selected_date), left_width - 1, header_attr)
    if state.entries:
        start, end = visible_window(len(state.entries), height - 2, state.selected_idx)
        for row, idx in enumerate(range(start, end), start=2):
            entry = state.entries[idx]
            selected = idx == state.selected_idx and state.active_pane == ENTRIES_PANE
            _put(stdscr, row, 1, fit(entry_line(entry), left_width - 1), left_width - 1,
                 entry_attr(entry, selected))
    else:
        _put(stdscr, 2, 1, empty_text(CALENDAR), left_width - 1, curses.A_DIM)

    try:
        stdscr.vline(0, left_width, curses.ACS_VLINE, height)
    except curses.error:
        pass

    title_attr = curses.A_BOLD
    if state.active_pane == DATE_PICKER_PANE:
        title_attr |= curses.color_pair(PAIR_ACCENT) | curses.A_UNDERLINE
    _put(stdscr, 0, right_x, "Calendar", width - right_x - 1, title_attr)
    draw_single_month(stdscr, state.selected_date, state.calendar_entries, right_x, 2)


def draw_single_month(stdscr, selected_date, calendar_entries, start_x, start_y):
    year, month = selected_date.year, selected_date.month
    lines = calendar_lines(year, month)
    _put(stdscr, start_y, start_x, lines[0], 20, curses.A_BOLD)
    _put(stdscr, start_y + 1, start_x, lines[1], 20, curses.A_BOLD)
    for offset, week in enumerate(calendar_grid.month_grid(year, month), start=2):
        for idx, day in enumerate(week):
            if day == 0:
                continue
            attr = curses.A_NORMAL
            if calendar_entries.get(f"{year}-{month:02}-{day:02}"):
                attr = curses.color_pair(PAIR_HAS_ENTRIES) | curses.A_BOLD
            if day == selected_date.day:
                attr = curses.color_pair(PAIR_SELECTED) | curses.A_BOLD
            _put(stdscr, start_y + offset, start_x + idx * 3, f"{day:2}", 2, attr)


def draw_status_bar(stdscr, state, y, width):
    mode, context, is_error, clock = status_segments(state)
    _put(stdscr, y, 0, " " * (width - 1), width - 1, curses.color_pair(PAIR_STATUS))
    mode_text = f" {mode} "
    _put(stdscr, y, 0, mode_text, width - 1, curses.color_pair(PAIR_STATUS) | curses.A_BOLD | curses.A_REVERSE)
    context_attr = curses.color_pair(PAIR_ERROR) | curses.A_BOLD if is_error else curses.color_pair(PAIR_STATUS)
    x = len(mode_text) + 1
    clock_x = max(x, width - len(clock) - 2)
    _put(stdscr, y, x, f" {context} ", clock_x - x - 1, context_attr)
    _put(stdscr, y, clock_x, clock, width - clock_x - 1, curses.color_pair(PAIR_STATUS))


def draw_input(stdscr, state, y, width):
    text_input = state.input
    attr = curses.A_BOLD
    if state.mode == CALENDAR and state.active_pane == INPUT_PANE:
        attr |= curses.color_pair(PAIR_ACCENT)
    _put(stdscr, y, 0, PROMPT, width - 1, attr)
    room = width - len(PROMPT) - 1
    if not text_input.value:
        if text_input.focused:
            _put(stdscr, y, len(PROMPT), fit(PLACEHOLDER, room), room, curses.A_DIM)
        return
    # keep the cursor on screen for long lines
    offset = max(0, text_input.cursor - room + 1)
    _put(stdscr, y, len(PROMPT), text_input.value[offset:offset + room], room)
    if text_input.suggestions and text_input.suggestions[0] != text_input.value:
        rest = text_input.suggestions[0][len(text_input.value):]
        x = len(PROMPT) + len(text_input.value) - offset
        _put(stdscr, y, x, rest, width - x - 1, curses.A_DIM)
    if text_input.focused:
        try:
            stdscr.move(y, len(PROMPT) + text_input.cursor - offset)
        except curses.error:
            pass
