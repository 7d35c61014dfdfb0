"""
CURSES EVENT LOOP

StakTUI owns the terminal. Each turn of the loop it applies finished task
results, redraws, and waits up to POLL_MS for a key. Slow work requested by
the view state runs on a small thread pool; results come back through a
queue so the state is only ever touched from this thread.
"""
import curses
import logging
import queue
from concurrent.futures import ThreadPoolExecutor

from . import render
from .state import ViewState

POLL_MS = 100
ESC_DELAY_MS = 25
WORKERS = 2

SPECIAL_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_BTAB: "shift+tab",
    curses.KEY_ENTER: "enter",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    curses.KEY_RESIZE: "resize",
}

CHAR_KEYS = {
    "\t": "tab",
    "\n": "enter",
    "\r": "enter",
    "\x1b": "esc",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x03": "ctrl+c",
}


def decode_key(ch):
    """Map a get_wch() result to a key name, or None for keys we ignore."""
    if isinstance(ch, int):
        return SPECIAL_KEYS.get(ch)
    if ch in CHAR_KEYS:
        return CHAR_KEYS[ch]
    if len(ch) == 1 and ch.isprintable():
        return ch
    return None


class StakTUI:
    def __init__(self, stdscr, service, theme="default"):
        self.stdscr = stdscr
        self.state = ViewState(service)
        self.results = queue.Queue()
        self.executor = ThreadPoolExecutor(max_workers=WORKERS, thread_name_prefix="stak-task")
        stdscr.keypad(True)
        stdscr.timeout(POLL_MS)
        curses.set_escdelay(ESC_DELAY_MS)
        render.init_colors(theme)

    # -----------------------------------------------------------------
    # TASKS
    # -----------------------------------------------------------------
    def submit(self, tasks):
        for task in tasks:
            future = self.executor.submit(task)
            future.add_done_callback(self._post_result)

    def _post_result(self, future):
        try:
            message = future.result()
        except Exception as e:
            logging.error(f"Background task failed: {e}")
            return
        if message is not None:
            self.results.put(message)

    def drain_results(self):
        while True:
            try:
                message = self.results.get_nowait()
            except queue.Empty:
                return
            self.submit(self.state.apply(message))

    # -----------------------------------------------------------------
    # LOOP
    # -----------------------------------------------------------------
    def read_key(self):
        try:
            ch = self.stdscr.get_wch()
        except curses.error:
            return None
        except KeyboardInterrupt:
            return "ctrl+c"
        return decode_key(ch)

    def update_cursor(self):
        try:
            curses.curs_set(1 if self.state.input.focused else 0)
        except curses.error:
            pass

    def run(self):
        logging.info("Starting stak TUI")
        self.submit(self.state.init())
        try:
            while not self.state.quit:
                self.drain_results()
                self.update_cursor()
                render.draw(self.stdscr, self.state)
                key = self.read_key()
                if key:
                    self.submit(self.state.handle_key(key))
        finally:
            self.executor.shutdown(wait=False)
            logging.info("Stopped stak TUI")
