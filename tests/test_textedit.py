import pytest

from repotools.base import ToolError
from repotools.textedit import (
    apply_edit,
    build_context_window,
    count_fuzzy_matches,
    find_changed_lines,
    fuzzy_normalize,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("\u201chello\u201d", '"hello"'),
        ("a\u2014b", "a-b"),
        ("hello  \nworld  ", "hello\nworld"),
        ("\u2160", "I"),
        ("it\u2019s", "it's"),
        ("a\u00a0b", "a b"),
        ("x\r\ny\r\n", "x\ny"),
    ],
)
def test_fuzzy_normalize(text, expected):
    assert fuzzy_normalize(text) == expected


def test_apply_edit_exact():
    assert apply_edit("hello world", "hello", "goodbye", 0) == "goodbye world"


def test_apply_edit_exact_first_occurrence_only():
    assert apply_edit("a a a", "a", "b", 0) == "b a a"


def test_apply_edit_fuzzy():
    assert apply_edit("hello\u2014world", "hello-world", "hi-world", 0) == "hi-world"


def test_apply_edit_fuzzy_smart_quotes():
    result = apply_edit("say(\u201chi\u201d);\n", 'say("hi");', 'say("yo");', 0)
    assert result == 'say("yo");\n'


def test_apply_edit_not_found():
    with pytest.raises(ToolError, match="Edit #1: oldText not found"):
        apply_edit("hello", "xyz", "abc", 0)


def test_apply_edit_not_found_reports_index():
    with pytest.raises(ToolError, match="Edit #3"):
        apply_edit("hello", "xyz", "abc", 2)


def test_count_fuzzy_matches():
    content = "a\n\u201cB\u201d\n\"B\"\n"
    assert count_fuzzy_matches(content, '"B"') == 2


def test_count_no_match():
    assert count_fuzzy_matches("hello world", "xyz") == 0


def test_count_non_overlapping():
    assert count_fuzzy_matches("aaaa", "aa") == 2


def test_context_window_single_edit():
    content = "line1\nline2\nLINE3\nline4\nline5\n"
    result = build_context_window("test.rs", content, {3}, 1, 1)
    assert result.startswith("edit_id: 1\n1 edit(s) applied to test.rs\n")
    assert "     1 | line1\n" in result
    assert "     3~| LINE3\n" in result
    assert "     5 | line5\n" in result
    assert "..." not in result


def test_context_window_two_disjoint():
    content = "a\nB\nc\nd\ne\nf\ng\nh\ni\nj\nk\nl\nm\nN\no\n"
    result = build_context_window("test.rs", content, {2, 14}, 2, 1)
    assert "     1 | a\n" in result
    assert "     5 | e\n" in result
    assert "...\n" in result
    assert "    11 | k\n" in result
    assert "    15 | o\n" in result
    assert "     6 | f\n" not in result


def test_context_window_nearby_merge():
    content = "a\nB\nc\nD\ne\nf\ng\n"
    result = build_context_window("test.rs", content, {2, 4}, 2, 1)
    assert "     1 | a\n" in result
    assert "     7 | g\n" in result
    assert "..." not in result


def test_context_window_clamp_start():
    content = "A\nb\nc\nd\ne\n"
    result = build_context_window("test.rs", content, {1}, 1, 1)
    assert "     1~| A\n" in result
    assert "     4 | d\n" in result
    assert "...\n" in result
    assert "     5 |" not in result


def test_context_window_clamp_end():
    content = "a\nb\nc\nd\nE\n"
    result = build_context_window("test.rs", content, {5}, 1, 1)
    assert "...\n" in result
    assert "     2 | b\n" in result
    assert "     5~| E\n" in result
    assert "     1 |" not in result


def test_context_window_no_changes():
    result = build_context_window("f.txt", "x\n", set(), 2, 7)
    assert result == "edit_id: 7\n2 edit(s) applied to f.txt\n"


def test_find_changed_lines_basic():
    content = "line1\nline2\nline3\n"
    assert find_changed_lines(content, ["line3"]) == {3}


def test_find_changed_lines_multi():
    content = "a\nB\nc\nD\ne\nf\ng\n"
    changed = find_changed_lines(content, ["B", "D"])
    assert 2 in changed
    assert 4 in changed


def test_find_changed_lines_duplicates_claim_distinct_spans():
    content = "x\nsame\ny\nsame\n"
    assert find_changed_lines(content, ["same", "same"]) == {2, 4}


def test_find_changed_lines_multiline_text():
    content = "a\nb\nc\nd\n"
    assert find_changed_lines(content, ["b\nc\n"]) == {2, 3}


def test_find_changed_lines_missing_text():
    assert find_changed_lines("abc\n", ["zzz"]) == set()