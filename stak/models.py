"""
ENTRY MODEL

An Entry is one line of user text, stamped with an id and timestamps and
later classified into a kind. A DayFile groups the entries created on a
single civil date; it is what the store reads and writes.
"""
import random
import string
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional


class EntryKind:
    NOTE = "note"
    TODO = "todo"
    LINK = "link"
    CODE = "code"
    QUESTION = "question"
    MEETING = "meeting"
    IDEA = "idea"

    ALL = (NOTE, TODO, LINK, CODE, QUESTION, MEETING, IDEA)


class TodoStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL = (PENDING, COMPLETED, CANCELLED)


ID_TIME_FORMAT = "%Y%m%d%H%M%S"
ID_SUFFIX_CHARS = string.ascii_lowercase + string.digits
ID_SUFFIX_LENGTH = 6


def generate_id(when: Optional[datetime] = None, taken=()) -> str:
    """Return "YYYYMMDDhhmmss-xxxxxx", re-rolling the suffix until it is not in taken."""
    prefix = (when or datetime.now()).strftime(ID_TIME_FORMAT)
    while True:
        suffix = ''.join(random.choices(ID_SUFFIX_CHARS, k=ID_SUFFIX_LENGTH))
        entry_id = f"{prefix}-{suffix}"
        if entry_id not in taken:
            return entry_id


# ---------------------------------------------------------------------
# TIMESTAMP HELPERS
# ---------------------------------------------------------------------
def parse_timestamp(value) -> datetime:
    # YAML may hand back a datetime, a date, or the ISO string we wrote.
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def parse_date(value) -> date:
    if isinstance(value, datetime):
        return parse_timestamp(value).date()
    if isinstance(value, date):
        return value
    return parse_timestamp(value).date()


# ---------------------------------------------------------------------
# ENTRY / DAYFILE
# ---------------------------------------------------------------------
@dataclass
class Entry:
    id: str
    content: str
    created_at: datetime
    updated_at: datetime
    kind: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    url: str = ""
    url_title: str = ""
    todo_status: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_todo(self) -> bool:
        return self.kind == EntryKind.TODO

    @property
    def is_completed(self) -> bool:
        return self.is_todo and self.todo_status == TodoStatus.COMPLETED

    def add_tags(self, *tags):
        """Append tags that are non-empty and not already present."""
        for tag in tags:
            if tag and tag not in self.tags:
                self.tags.append(tag)

    def copy(self) -> "Entry":
        return Entry(
            id=self.id,
            content=self.content,
            created_at=self.created_at,
            updated_at=self.updated_at,
            kind=self.kind,
            tags=list(self.tags),
            url=self.url,
            url_title=self.url_title,
            todo_status=self.todo_status,
            metadata=dict(self.metadata),
        )

    def to_dict(self) -> dict:
        # Key order mirrors the day-file front matter.
        d = {
            "id": self.id,
            "content": self.content,
            "type": self.kind or EntryKind.NOTE,
        }
        if self.tags:
            d["tags"] = list(self.tags)
        if self.url:
            d["url"] = self.url
        if self.url_title:
            d["url_title"] = self.url_title
        if self.todo_status:
            d["todo_status"] = self.todo_status
        d["created_at"] = self.created_at.isoformat()
        d["updated_at"] = self.updated_at.isoformat()
        if self.metadata:
            d["metadata"] = dict(self.metadata)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Entry":
        if not isinstance(d, dict):
            raise ValueError(f"Entry must be a mapping, got {type(d).__name__}")
        if not d.get("id"):
            raise ValueError("Entry is missing an id")
        created_at = parse_timestamp(d.get("created_at"))
        updated = d.get("updated_at")
        updated_at = parse_timestamp(updated) if updated else created_at
        tags = []
        for tag in d.get("tags") or []:
            tag = str(tag).strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        kind = d.get("type") or d.get("kind") or EntryKind.NOTE
        return cls(
            id=str(d["id"]),
            content=str(d.get("content") or ""),
            created_at=created_at,
            updated_at=updated_at,
            kind=str(kind),
            tags=tags,
            url=str(d.get("url") or ""),
            url_title=str(d.get("url_title") or ""),
            todo_status=str(d.get("todo_status") or ""),
            metadata={str(k): str(v) for k, v in (d.get("metadata") or {}).items()},
        )


@dataclass
class DayFile:
    date: date
    entries: List[Entry] = field(default_factory=list)

    def find(self, entry_id: str) -> Optional[Entry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def upsert(self, entry: Entry):
        """Replace the entry with the same id in place, else append it."""
        for i, existing in enumerate(self.entries):
            if existing.id == entry.id:
                self.entries[i] = entry
                return
        self.entries.append(entry)

    def sort(self):
        # Stable, so entries sharing a timestamp keep insertion order.
        self.entries.sort(key=lambda e: e.created_at)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DayFile":
        if not isinstance(d, dict):
            raise ValueError("Day file front matter is not a mapping")
        entries = [Entry.from_dict(e) for e in (d.get("entries") or [])]
        if d.get("date") is not None:
            day = parse_date(d["date"])
        elif entries:
            day = entries[0].created_at.date()
        else:
            raise ValueError("Day file has neither a date nor entries")
        return cls(date=day, entries=entries)


def new_entry(content: str, created_at: Optional[datetime] = None, taken=()) -> Entry:
    """Stamp a fresh, unclassified Entry. created_at defaults to now."""
    when = created_at or datetime.now()
    return Entry(
        id=generate_id(when, taken),
        content=content,
        created_at=when,
        updated_at=when,
    )
