"""Unit tests for text processing helpers."""

import pytest

from coverbuild.utils.text_processing import extract_balanced_delimiters, strip_latex_comments


@pytest.mark.unit
def test_extract_simple():
    content, end = extract_balanced_delimiters("{abc} rest", 1)
    assert content == "abc"
    assert end == 5


@pytest.mark.unit
def test_extract_nested():
    text = "foo {bar {nested} baz} qux"
    content, end = extract_balanced_delimiters(text, 5)
    assert content == "bar {nested} baz"
    assert text[end:] == " qux"


@pytest.mark.unit
def test_extract_skips_escaped_braces():
    content, _ = extract_balanced_delimiters(r"{a \} b}", 1)
    assert content == r"a \} b"


@pytest.mark.unit
def test_extract_custom_delimiters():
    content, _ = extract_balanced_delimiters("[list [1, 2] more] end", 1, "[", "]")
    assert content == "list [1, 2] more"


@pytest.mark.unit
def test_extract_unbalanced_raises():
    with pytest.raises(ValueError):
        extract_balanced_delimiters("{never closed", 1)


@pytest.mark.unit
def test_strip_comments():
    text = "keep % drop\n% whole line\nalso keep\n"
    assert strip_latex_comments(text) == "keep \n\nalso keep\n"


@pytest.mark.unit
def test_strip_comments_keeps_escaped_percent():
    assert strip_latex_comments(r"50\% off % note") == r"50\% off "


@pytest.mark.unit
def test_strip_comments_after_line_break():
    # \\ is a line break, so the % that follows starts a comment
    assert strip_latex_comments("a\\\\% \\Key{x}\nb") == "a\\\\\nb"


@pytest.mark.unit
def test_strip_comments_odd_backslash_run_is_literal():
    assert strip_latex_comments(r"a\\\% kept") == r"a\\\% kept"
