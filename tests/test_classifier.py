"""
Tests for entry classification and tagging.
"""
from datetime import datetime

import pytest

from stak.classifier import classify, is_meeting, is_todo, keyword_tags, LANGUAGE_TAGS
from stak.models import EntryKind, TodoStatus, new_entry


def classified(content):
    return classify(new_entry(content, datetime(2024, 3, 15, 9, 30)))


def test_link_with_language_tag():
    entry = classified("Check out https://go.dev for Go documentation")
    assert entry.kind == EntryKind.LINK
    assert entry.url == "https://go.dev"
    assert {"link", "web", "reference", "golang"} <= set(entry.tags)
    assert entry.todo_status == ""


def test_checkbox_todo_gets_keyword_tags():
    entry = classified("- [ ] Fix authentication bug")
    assert entry.kind == EntryKind.TODO
    assert entry.todo_status == TodoStatus.PENDING
    assert {"todo", "task", "bug", "fix"} <= set(entry.tags)


def test_fenced_code():
    entry = classified("```go\nfunc main(){}\n```")
    assert entry.kind == EntryKind.CODE
    assert {"code", "golang"} <= set(entry.tags)


def test_question_with_language_tag():
    entry = classified("How do I implement middleware in Go?")
    assert entry.kind == EntryKind.QUESTION
    assert {"question", "inquiry", "golang"} <= set(entry.tags)


def test_meeting():
    entry = classified("Standup meeting at 9am tomorrow")
    assert entry.kind == EntryKind.MEETING
    assert {"meeting", "discussion"} <= set(entry.tags)


def test_plain_note_has_only_note_tag():
    entry = classified("This is just a regular note")
    assert entry.kind == EntryKind.NOTE
    assert entry.tags == ["note"]


def test_link_beats_question():
    entry = classified("Seen https://example.com/faq? ")
    assert entry.kind == EntryKind.LINK
    assert entry.url == "https://example.com/faq?"


def test_code_beats_question():
    assert classified("what does `git rebase` do?").kind == EntryKind.CODE


def test_question_beats_meeting():
    assert classified("Is the standup meeting moved?").kind == EntryKind.QUESTION


def test_meeting_beats_todo():
    assert classified("Remember to join the zoom").kind == EntryKind.MEETING


@pytest.mark.parametrize("content", [
    "$ ls -la",
    "inline `code` here",
    "import os",
])
def test_code_patterns(content):
    assert classified(content).kind == EntryKind.CODE


def test_question_mark_needs_trailing_space_or_end():
    assert classified("a?b").kind != EntryKind.QUESTION


@pytest.mark.parametrize("content", [
    "todo: water plants",
    "[ ] water plants",
    "* water plants",
    "• water plants",
    "We need to water plants",
    "buy milk",
    "Deploy: staging",
    "email",
    "pick this up later",
])
def test_todo_detection(content):
    assert is_todo(content)


def test_action_verb_must_be_whole_word():
    # "building" starts with "build" but is not the verb on its own
    assert not is_todo("building blocks are fun")


def test_call_needs_context_for_meeting():
    assert is_meeting("call with Sam today")
    assert not is_meeting("callback hell")


def test_domain_tags_apply_to_every_kind():
    entry = classified("Standup meeting with the team about the project")
    assert entry.kind == EntryKind.MEETING
    assert {"team", "project"} <= set(entry.tags)


def test_note_general_and_language_tags():
    entry = classified("An important thought about python")
    assert entry.kind == EntryKind.NOTE
    assert {"note", "important", "reflection", "python"} <= set(entry.tags)


def test_no_duplicate_tags():
    entry = classified("Go go golang https://go.dev golang")
    assert len(entry.tags) == len(set(entry.tags))


def test_classification_is_deterministic():
    content = "- [ ] Fix the urgent bug in the work project"
    first = classified(content)
    second = classified(content)
    assert (first.kind, first.tags, first.todo_status) == (second.kind, second.tags, second.todo_status)


def test_keyword_tags_follow_table_order():
    assert keyword_tags("rust and python", LANGUAGE_TAGS) == ["python", "rust"]
