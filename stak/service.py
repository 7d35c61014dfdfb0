"""
ENTRY SERVICE

Glues the model, classifier and store together. Everything the UI does to
entries goes through here.
"""
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, List, Optional

from .classifier import classify
from .fetcher import fetch_url_title
from .models import Entry, EntryKind, TodoStatus, new_entry
from .storage import DayFileStore


def spawn_daemon(target: Callable[[], None]):
    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread


class EntryService:
    def __init__(self, store: DayFileStore, fetch_title: Callable[[str], str] = fetch_url_title,
                 spawn: Callable = spawn_daemon, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.fetch_title = fetch_title
        self.spawn = spawn
        self.clock = clock

    # -----------------------------------------------------------------
    # CREATION
    # -----------------------------------------------------------------
    def _build(self, content: str, when: datetime, force_kind: Optional[str]) -> Entry:
        entry = new_entry(content, when, taken=self.store.entry_ids(when.date()))
        if force_kind:
            entry.kind = force_kind
            if force_kind == EntryKind.TODO:
                entry.todo_status = TodoStatus.PENDING
                entry.tags = ["todo", "task"]
        else:
            classify(entry)
        return entry

    def _persist(self, entry: Entry, tomorrow: bool = False) -> Entry:
        if tomorrow:
            self.store.save_entry_for_tomorrow(entry, today=self.clock().date())
        else:
            self.store.save_entry(entry)
        snapshot = entry.copy()
        if entry.kind == EntryKind.LINK and entry.url:
            self.spawn(lambda: self._fill_url_title(snapshot.created_at.date(), snapshot.id, snapshot.url))
        return snapshot

    def create_entry(self, content: str, force_kind: Optional[str] = None) -> Entry:
        return self._persist(self._build(content, self.clock(), force_kind))

    def create_entry_for_date(self, content: str, when, force_kind: Optional[str] = None) -> Entry:
        if not isinstance(when, datetime):
            when = datetime.combine(when, time())
        return self._persist(self._build(content, when, force_kind))

    def create_tomorrow_entry(self, content: str) -> Entry:
        now = self.clock()
        return self._persist(self._build(content, now + timedelta(days=1), None), tomorrow=True)

    def _fill_url_title(self, day: date, entry_id: str, url: str):
        # Runs off the UI thread; only ever talks to the store.
        try:
            title = self.fetch_title(url)
            if not title:
                return

            def set_title(stored: Entry):
                stored.url_title = title

            self.store.update_entry(day, entry_id, set_title)
            logging.info(f"Stored title for {url}: {title}")
        except Exception as e:
            logging.debug(f"Could not store title for {url}: {e}")

    # -----------------------------------------------------------------
    # TODOS
    # -----------------------------------------------------------------
    def toggle_todo_status(self, entry_id: str, entries: List[Entry]) -> Optional[Entry]:
        """Flip pending <-> completed on the matching todo and persist it.

        entries is only updated once the save has succeeded.
        """
        for i, entry in enumerate(entries):
            if entry.id != entry_id:
                continue
            if entry.kind != EntryKind.TODO:
                return None
            updated = entry.copy()
            if updated.todo_status == TodoStatus.PENDING:
                updated.todo_status = TodoStatus.COMPLETED
            else:
                updated.todo_status = TodoStatus.PENDING
            updated.updated_at = max(self.clock(), entry.updated_at)
            self.store.save_entry(updated)
            entries[i] = updated
            return updated.copy()
        return None

    def update_todo_content(self, entry: Entry, content: str) -> Entry:
        updated = entry.copy()
        updated.content = content
        updated.updated_at = max(self.clock(), entry.updated_at)
        self.store.save_entry(updated)
        return updated

    # -----------------------------------------------------------------
    # QUERIES
    # -----------------------------------------------------------------
    def load_today_entries(self) -> List[Entry]:
        return self.store.load_entries_for_date(self.clock().date())

    def load_entries_for_date(self, day: date) -> List[Entry]:
        return self.store.load_entries_for_date(day)

    def load_filtered_entries(self, kind: str) -> List[Entry]:
        return self.store.load_filtered_entries(kind)

    def load_all_entries(self) -> List[Entry]:
        return self.store.load_all_entries()

    def load_calendar_entries(self) -> Dict[str, List[Entry]]:
        grouped = defaultdict(list)
        for entry in self.store.load_all_entries():
            grouped[entry.created_at.date().isoformat()].append(entry)
        return dict(grouped)

    def search_entries(self, query: str, links_only: bool = False) -> List[Entry]:
        query = query.strip().lower()
        if not query:
            return []
        return self.store.search_entries(query, links_only)

