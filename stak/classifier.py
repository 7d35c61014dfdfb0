"""
ENTRY CLASSIFIER

classify() assigns a kind and tags to a freshly stamped entry. Rules run in a
fixed order and the first one that matches picks the kind:

    link > code > question > meeting > todo > note

Domain tags are applied afterwards regardless of kind. All keyword sets live
in the tables below so they can be inspected and tested directly.
"""
import re

from .models import Entry, EntryKind, TodoStatus

# ---------------------------------------------------------------------
# RULE TABLES
# ---------------------------------------------------------------------
LINK_RE = re.compile(r"https?://[^\s]+")

CODE_KEYWORDS = ("import", "function", "class", "def", "const", "let", "var")
CODE_PATTERNS = (
    re.compile(r"```"),
    re.compile(r"`[^`]+`"),
    re.compile(r"\$\s+[a-zA-Z]"),
    re.compile(r"\b(?:" + "|".join(CODE_KEYWORDS) + r")\s+"),
)

QUESTION_RE = re.compile(r"\?(\s|$)")

MEETING_KEYWORDS = ("meeting", "standup", "sync", "1:1", "one-on-one", "zoom", "conference")
CALL_CONTEXT_WORDS = ("meeting", "scheduled", "today", "tomorrow")

TODO_PREFIX_RE = re.compile(r"^(\s*-\s*\[\s*\]|todo:|\[\s*\]|\*\s+|•\s+)", re.IGNORECASE)

IMPERATIVE_PHRASES = (
    "need to", "should", "must", "have to", "remember to", "don't forget",
)

ACTION_VERBS = (
    "fix", "update", "implement", "create", "build", "add", "remove", "refactor",
    "test", "deploy", "setup", "install", "configure", "write", "read", "check",
    "review", "merge", "commit", "push", "debug", "investigate", "research",
    "learn", "practice", "buy", "call", "email", "schedule", "book", "contact",
    "finish", "complete", "start", "begin", "continue", "prepare", "plan",
    "organize", "clean", "backup", "sync", "send", "reply", "respond", "follow",
    "track", "monitor",
)
ACTION_VERB_RE = re.compile(r"^(?:" + "|".join(ACTION_VERBS) + r")(?:\s|:|$)", re.IGNORECASE)

TODO_INDICATORS = (
    "need to", "should", "must", "have to", "remember to", "don't forget",
    "todo:", "task:", "action:", "next:", "tomorrow", "later", "work on",
    "get done", "todo", "task", "action", "handle", "later today", "this week",
    "before", "after",
)

# keyword -> tag, scanned in this order
LANGUAGE_TAGS = (
    ("go", "golang"),
    ("golang", "golang"),
    ("javascript", "js"),
    ("typescript", "ts"),
    ("python", "python"),
    ("rust", "rust"),
    ("java", "java"),
    ("docker", "docker"),
    ("sql", "database"),
    ("bash", "shell"),
    ("yaml", "config"),
    ("json", "config"),
)

GENERAL_TAGS = (
    ("idea", "idea"),
    ("brainstorm", "brainstorm"),
    ("thought", "reflection"),
    ("reminder", "reminder"),
    ("important", "important"),
    ("urgent", "urgent"),
    ("bug", "bug"),
    ("feature", "feature"),
    ("fix", "fix"),
)

DOMAIN_TAGS = (
    ("work", "work"),
    ("personal", "personal"),
    ("project", "project"),
    ("learning", "learning"),
    ("research", "research"),
    ("client", "client"),
    ("team", "team"),
)

LINK_TAGS = ("link", "web", "reference")
CODE_TAGS = ("code",)
QUESTION_TAGS = ("question", "inquiry")
MEETING_TAGS = ("meeting", "discussion")
TODO_TAGS = ("todo", "task")
NOTE_TAGS = ("note",)


# ---------------------------------------------------------------------
# PREDICATES
# ---------------------------------------------------------------------
def find_url(content: str) -> str:
    match = LINK_RE.search(content)
    return match.group(0) if match else ""


def is_code(content: str) -> bool:
    return any(p.search(content) for p in CODE_PATTERNS)


def is_question(content: str) -> bool:
    return QUESTION_RE.search(content) is not None


def is_meeting(content: str) -> bool:
    lowered = content.lower()
    if any(k in lowered for k in MEETING_KEYWORDS):
        return True
    return "call" in lowered and any(w in lowered for w in CALL_CONTEXT_WORDS)


def is_todo(content: str) -> bool:
    if TODO_PREFIX_RE.search(content):
        return True
    lowered = content.lower()
    if any(p in lowered for p in IMPERATIVE_PHRASES):
        return True
    if ACTION_VERB_RE.search(content.strip()):
        return True
    return any(i in lowered for i in TODO_INDICATORS)


def keyword_tags(content: str, table) -> list:
    lowered = content.lower()
    return [tag for keyword, tag in table if keyword in lowered]


# ---------------------------------------------------------------------
# CLASSIFY
# ---------------------------------------------------------------------
def classify(entry: Entry) -> Entry:
    """Set kind, url, todo_status and tags on entry (in place) and return it."""
    content = entry.content
    url = find_url(content)

    if url:
        entry.kind = EntryKind.LINK
        entry.url = url
        entry.add_tags(*LINK_TAGS)
        entry.add_tags(*keyword_tags(content, LANGUAGE_TAGS))
    elif is_code(content):
        entry.kind = EntryKind.CODE
        entry.add_tags(*CODE_TAGS)
        entry.add_tags(*keyword_tags(content, LANGUAGE_TAGS))
    elif is_question(content):
        entry.kind = EntryKind.QUESTION
        entry.add_tags(*QUESTION_TAGS)
        entry.add_tags(*keyword_tags(content, LANGUAGE_TAGS))
    elif is_meeting(content):
        entry.kind = EntryKind.MEETING
        entry.add_tags(*MEETING_TAGS)
    elif is_todo(content):
        entry.kind = EntryKind.TODO
        entry.todo_status = TodoStatus.PENDING
        entry.add_tags(*TODO_TAGS)
        entry.add_tags(*keyword_tags(content, GENERAL_TAGS))
    else:
        entry.kind = EntryKind.NOTE
        entry.add_tags(*NOTE_TAGS)
        entry.add_tags(*keyword_tags(content, GENERAL_TAGS))
        entry.add_tags(*keyword_tags(content, LANGUAGE_TAGS))

    entry.add_tags(*keyword_tags(content, DOMAIN_TAGS))
    return entry
