"""
DAY-FILE STORE

One Markdown file per date under the data directory:

    ---
    <YAML front matter: date + entries>
    ---

    # January 2, 2006

    ## 15:04

    <entry body>

    ---

The front matter is the only source of truth. The Markdown body is rebuilt
from the entries on every save for human reading and is never parsed back.
"""
import logging
import os
import tempfile
import threading
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, Dict, List, Optional

import yaml

from .models import DayFile, Entry, EntryKind, TodoStatus
from .search import matches_query

ENTRY_HEADING_FORMAT = "%H:%M"


class StorageError(Exception):
    pass


# ---------------------------------------------------------------------
# FRONT MATTER / BODY FORMAT
# ---------------------------------------------------------------------
def split_front_matter(text: str) -> str:
    """Return the raw YAML between the leading '---' fence and the next one.

    Only an unindented fence closes the block; YAML continuation lines of a
    multi-line scalar are always indented, even when they read "---".
    """
    # Split on "\n" only: str.splitlines also breaks on form feeds and
    # unicode separators that may sit inside a scalar.
    lines = text.split("\n")
    if lines[0].rstrip("\r") != "---":
        raise ValueError("missing front matter fence")
    for i, line in enumerate(lines[1:], start=1):
        if line.rstrip("\r") == "---":
            return "\n".join(lines[1:i]) + "\n"
    raise ValueError("unterminated front matter")


def parse_day_file(text: str) -> DayFile:
    metadata = yaml.safe_load(split_front_matter(text))
    return DayFile.from_dict(metadata)


def format_day_heading(day: date) -> str:
    # %-d is not portable, so build the day number by hand.
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def render_entry_markdown(entry: Entry) -> str:
    parts = [f"## {entry.created_at.strftime(ENTRY_HEADING_FORMAT)}\n\n"]
    if entry.kind == EntryKind.TODO:
        checkbox = "[x]" if entry.todo_status == TodoStatus.COMPLETED else "[ ]"
        parts.append(f"- {checkbox} {entry.content}\n")
    else:
        parts.append(f"{entry.content}\n")
    if entry.url:
        if entry.url_title:
            parts.append(f"\n[{entry.url_title}]({entry.url})\n")
        else:
            parts.append(f"\n{entry.url}\n")
    if entry.tags:
        parts.append(f"\n*Tags: {', '.join(entry.tags)}*\n")
    parts.append("\n---\n\n")
    return "".join(parts)


def render_day_file(day_file: DayFile) -> str:
    front = yaml.safe_dump(day_file.to_dict(), sort_keys=False, allow_unicode=True)
    body = [f"---\n{front}---\n\n# {format_day_heading(day_file.date)}\n\n"]
    for entry in day_file.entries:
        body.append(render_entry_markdown(entry))
    return "".join(body)


# ---------------------------------------------------------------------
# STORE
# ---------------------------------------------------------------------
class DayFileStore:
    def __init__(self, data_dir, date_format: str = "%Y-%m-%d"):
        self.data_dir = Path(data_dir)
        self.date_format = date_format
        self._locks: Dict[Path, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        # path -> ((mtime_ns, size), DayFile)
        self._cache: Dict[Path, tuple] = {}

    def initialize(self):
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"cannot create data directory {self.data_dir}: {e}") from e

    def path_for(self, day: date) -> Path:
        return self.data_dir / f"{day.strftime(self.date_format)}.md"

    def _lock_for(self, path: Path) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = self._locks[path] = threading.RLock()
            return lock

    # -- reading -------------------------------------------------------
    def _read_day_file(self, path: Path) -> Optional[DayFile]:
        """Parse path, returning None if it does not exist. Raises on bad content."""
        with self._lock_for(path):
            try:
                stat = path.stat()
            except FileNotFoundError:
                self._cache.pop(path, None)
                return None
            stamp = (stat.st_mtime_ns, stat.st_size)
            cached = self._cache.get(path)
            if cached and cached[0] == stamp:
                return _clone(cached[1])
            text = path.read_text(encoding="utf-8")
            day_file = parse_day_file(text)
            self._cache[path] = (stamp, day_file)
            return _clone(day_file)

    def load_day_file(self, day: date) -> Optional[DayFile]:
        return self._read_day_file(self.path_for(day))

    def load_entries_for_date(self, day: date) -> List[Entry]:
        try:
            day_file = self.load_day_file(day)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logging.error(f"Error loading day file for {day}: {e}")
            return []
        return day_file.entries if day_file else []

    def load_today_entries(self) -> List[Entry]:
        return self.load_entries_for_date(date.today())

    def entry_ids(self, day: date) -> set:
        return {e.id for e in self.load_entries_for_date(day)}

    def day_file_paths(self) -> List[Path]:
        if not self.data_dir.exists():
            return []
        return sorted(self.data_dir.glob("*.md"))

    def load_all_entries(self) -> List[Entry]:
        entries = []
        for path in self.day_file_paths():
            try:
                day_file = self._read_day_file(path)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logging.error(f"Skipping unreadable day file {path}: {e}")
                continue
            if day_file:
                entries.extend(day_file.entries)
        return entries

    def load_filtered_entries(self, kind: str) -> List[Entry]:
        entries = [e for e in self.load_all_entries() if e.kind == kind]
        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries

    def search_entries(self, query: str, links_only: bool = False) -> List[Entry]:
        query = query.strip().lower()
        if not query:
            return []
        results = []
        for entry in self.load_all_entries():
            if links_only and entry.kind != EntryKind.LINK:
                continue
            if matches_query(entry, query):
                results.append(entry)
        return results

    # -- writing -------------------------------------------------------
    def _write_day_file(self, path: Path, day_file: DayFile):
        content = render_day_file(day_file)
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
        stat = path.stat()
        self._cache[path] = ((stat.st_mtime_ns, stat.st_size), _clone(day_file))

    def save_entry_to(self, day: date, entry: Entry) -> Entry:
        path = self.path_for(day)
        with self._lock_for(path):
            try:
                day_file = self._read_day_file(path)
            except (ValueError, yaml.YAMLError) as e:
                # Refuse to overwrite a file we cannot understand.
                raise StorageError(f"cannot parse existing day file {path}: {e}") from e
            except OSError as e:
                raise StorageError(f"cannot read day file {path}: {e}") from e
            if day_file is None:
                day_file = DayFile(date=day)
            day_file.upsert(entry.copy())
            day_file.sort()
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                self._write_day_file(path, day_file)
            except OSError as e:
                logging.error(f"Error saving entry {entry.id} to {path}: {e}")
                raise StorageError(f"cannot write day file {path}: {e}") from e
        logging.debug(f"Saved entry {entry.id} to {path}")
        return entry

    def save_entry(self, entry: Entry) -> Entry:
        return self.save_entry_to(entry.created_at.date(), entry)

    def save_entry_for_tomorrow(self, entry: Entry, today: Optional[date] = None) -> Entry:
        tomorrow = (today or date.today()) + timedelta(days=1)
        shift = tomorrow - entry.created_at.date()
        entry.created_at += shift
        entry.updated_at = max(entry.updated_at + shift, entry.created_at)
        return self.save_entry_to(tomorrow, entry)

    def update_entry(self, day: date, entry_id: str, update: Callable[[Entry], None]) -> Optional[Entry]:
        """Apply update to the stored entry under the file lock and save it.

        Returns the updated entry, or None when the entry is not in that day file.
        """
        path = self.path_for(day)
        with self._lock_for(path):
            try:
                day_file = self._read_day_file(path)
            except (OSError, ValueError, yaml.YAMLError) as e:
                raise StorageError(f"cannot read day file {path}: {e}") from e
            stored = day_file.find(entry_id) if day_file else None
            if stored is None:
                return None
            update(stored)
            return self.save_entry_to(day, stored)


def _clone(day_file: DayFile) -> DayFile:
    return DayFile(date=day_file.date, entries=[e.copy() for e in day_file.entries])
