"""
Tests for truncated / malformed response repair.

Covers:
- Closing unterminated strings, arrays and objects
- Trailing and dangling comma removal
- Code fences and leading prose
- Idempotence on balanced and repaired text
"""

import json

import pytest

from adaptive_planner.repair import ResponseRepairer, repair_json, strip_wrapping


@pytest.fixture
def repairer():
    return ResponseRepairer()


def test_truncated_nested_structure_is_closed(repairer):
    """Test that a response cut off inside a string becomes parseable."""
    repaired = repairer.repair('{"a": [1, 2, {"b": "unterminated')
    data = json.loads(repaired)
    assert len(data["a"]) == 3
    assert data["a"][:2] == [1, 2]
    assert isinstance(data["a"][2]["b"], str)
    assert data["a"][2]["b"] == "unterminated"


def test_truncation_after_comma(repairer):
    """Test that a trailing comma before end of input is dropped."""
    data = json.loads(repairer.repair('{"workouts": [{"name": "Easy"},'))
    assert data == {"workouts": [{"name": "Easy"}]}


def test_closes_in_reverse_opening_order(repairer):
    """Test that the most recently opened structure is closed first."""
    data = json.loads(repairer.repair('{"weeks": [{"workouts": [{"tips": ["a", "b"'))
    assert data == {"weeks": [{"workouts": [{"tips": ["a", "b"]}]}]}


def test_dangling_commas_are_removed(repairer):
    """Test that commas directly before a closer are removed."""
    data = json.loads(repairer.repair('{"a": [1, 2, ], "b": {"c": 3, },}'))
    assert data == {"a": [1, 2], "b": {"c": 3}}


def test_commas_inside_strings_are_kept(repairer):
    """Test that string contents are never edited."""
    text = '{"description": "easy, then ]fast, }", "tips": ["a, ]"]}'
    assert json.loads(repairer.repair(text)) == json.loads(text)


def test_escaped_quotes_do_not_end_strings(repairer):
    """Test that an escaped quote keeps the scanner inside the string."""
    data = json.loads(repairer.repair('{"name": "The \\"Big\\" Run", "list": [1'))
    assert data == {"name": 'The "Big" Run', "list": [1]}


def test_dangling_backslash_is_dropped(repairer):
    """Test truncation right after an escape character."""
    data = json.loads(repairer.repair('{"description": "line one\\'))
    assert data == {"description": "line one"}


def test_code_fence_is_stripped(repairer):
    """Test removal of a fenced block with a language tag."""
    text = '```json\n{"workouts": []}\n```'
    assert repairer.repair(text) == '{"workouts": []}'


def test_backticks_inside_strings_are_not_a_fence(repairer):
    """Test that ``` within a string value does not cut the payload short."""
    payload = {
        "workouts": [
            {"dayOfWeek": "Monday", "description": "Use ``` to mark code"},
            {"dayOfWeek": "Tuesday"},
            {"dayOfWeek": "Wednesday"},
        ]
    }
    text = "```json\n" + json.dumps(payload) + "\n```"
    assert json.loads(repairer.repair(text)) == payload


def test_leading_prose_is_discarded():
    """Test that explanation text before the first brace is dropped."""
    text = 'Here is your plan:\n```json\n{"weekNumber": 2}\n```\nEnjoy!'
    assert strip_wrapping(text) == '{"weekNumber": 2}'
    assert json.loads(repair_json(text)) == {"weekNumber": 2}


@pytest.mark.parametrize(
    "text",
    [
        '{"a": 1, "b": [true, false, null]}',
        '{"a": [1, 2, {"b": "unterminated',
        '{"weeks": [{"workouts": [{"tips": ["a", "b",',
        '```json\n{"a": "x\\"y", "b": [1,]}\n```',
        'Sure! {"a": {"b": {"c": [',
    ],
)
def test_repair_is_idempotent(repairer, text):
    """Test that repairing repaired text changes nothing."""
    once = repairer.repair(text)
    assert repairer.repair(once) == once


def test_balanced_json_is_unchanged(repairer):
    """Test that well-formed text passes through untouched."""
    text = '{"a": {"b": [1, 2, 3]}, "c": "d"}'
    assert repairer.repair(text) == text


def test_unrepairable_text_still_fails_strict_parsing(repairer):
    """Test that the repairer does not hide structural garbage."""
    with pytest.raises(json.JSONDecodeError):
        json.loads(repairer.repair('{"a": 1 "b": 2}'))
