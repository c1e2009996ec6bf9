"""Tests for identifier escaping and placeholder translation."""

import pytest

from sqlwrap.utils.escaping import (
    column_list,
    escape_identifier,
    placeholders,
    quote_identifier,
    survives_escaping,
    to_driver_paramstyle,
)


class TestEscapeIdentifier:
    def test_plain_name_unchanged(self):
        assert escape_identifier("orders") == "orders"

    def test_backtick_is_doubled(self):
        assert escape_identifier("a`b") == "a``b"

    def test_backtick_cannot_terminate_quoted_identifier(self):
        quoted = quote_identifier("users`; DROP TABLE users; --")
        inner = quoted[1:-1]
        # every backtick inside the identifier comes in pairs
        assert inner.replace("``", "").count("`") == 0
        assert quoted == "`users``; DROP TABLE users; --`"

    def test_quotes_use_driver_escaping(self):
        assert escape_identifier("O'Brien") == "O\\'Brien"
        assert escape_identifier('say "hi"') == 'say \\"hi\\"'

    def test_control_characters_escaped(self):
        assert escape_identifier("a\nb\x00") == "a\\nb\\0"

    def test_backslash_escaped(self):
        assert escape_identifier("a\\b") == "a\\\\b"

    @pytest.mark.parametrize("bad", ["", None, 42])
    def test_rejects_empty_or_non_string(self, bad):
        with pytest.raises(ValueError):
            escape_identifier(bad)


@pytest.mark.parametrize("name, expected", [
    ("orders", True),
    ("a`b", True),
    ("o'brien", False),
    ('say "hi"', False),
    ("back\\slash", False),
    ("line\nbreak", False),
])
def test_survives_escaping(name, expected):
    assert survives_escaping(name) is expected


def test_column_list_quotes_every_name():
    assert column_list(["id", "full name", "x`y"]) == "`id`, `full name`, `x``y`"


def test_placeholders():
    assert placeholders(3) == "?, ?, ?"
    assert placeholders(1) == "?"
    assert placeholders(0) == ""


class TestDriverParamstyle:
    def test_question_marks_become_format_markers(self):
        assert to_driver_paramstyle("SELECT * FROM t WHERE a = ? AND b = ?") == (
            "SELECT * FROM t WHERE a = %s AND b = %s"
        )

    def test_question_mark_inside_string_literal_kept(self):
        assert to_driver_paramstyle("SELECT '?' , ?") == "SELECT '?' , %s"

    def test_question_mark_inside_identifier_kept(self):
        assert to_driver_paramstyle("SELECT `why?` FROM t WHERE id = ?") == (
            "SELECT `why?` FROM t WHERE id = %s"
        )

    def test_percent_is_doubled_everywhere(self):
        assert to_driver_paramstyle("SELECT * FROM t WHERE name LIKE '50%' AND x = ?") == (
            "SELECT * FROM t WHERE name LIKE '50%%' AND x = %s"
        )

    def test_escaped_quote_does_not_end_literal(self):
        assert to_driver_paramstyle(r"SELECT 'it\'s ?' , ?") == r"SELECT 'it\'s ?' , %s"

    def test_doubled_quote_does_not_end_literal(self):
        assert to_driver_paramstyle("SELECT 'it''s ?', ?") == "SELECT 'it''s ?', %s"

    def test_double_quoted_literal(self):
        assert to_driver_paramstyle('SELECT "a?b", ?') == 'SELECT "a?b", %s'

    def test_apostrophe_in_line_comment_does_not_open_literal(self):
        assert to_driver_paramstyle("SELECT a -- don't\nFROM t WHERE id = ?") == (
            "SELECT a -- don't\nFROM t WHERE id = %s"
        )

    def test_hash_comment_copied_verbatim(self):
        assert to_driver_paramstyle("SELECT a # why? it's fine\nFROM t WHERE id = ?") == (
            "SELECT a # why? it's fine\nFROM t WHERE id = %s"
        )

    def test_question_mark_in_block_comment_kept(self):
        assert to_driver_paramstyle("SELECT /* why? */ a FROM t WHERE id = ?") == (
            "SELECT /* why? */ a FROM t WHERE id = %s"
        )

    def test_multiline_block_comment_with_quote(self):
        assert to_driver_paramstyle("SELECT /* it's\n ? */ a, ? FROM t") == (
            "SELECT /* it's\n ? */ a, %s FROM t"
        )

    def test_percent_in_comment_still_doubled(self):
        assert to_driver_paramstyle("SELECT a -- 100%\nFROM t WHERE id = ?") == (
            "SELECT a -- 100%%\nFROM t WHERE id = %s"
        )

    def test_double_dash_without_space_is_not_a_comment(self):
        assert to_driver_paramstyle("SELECT 5--? FROM t") == "SELECT 5--%s FROM t"

    def test_comment_markers_inside_literal_ignored(self):
        assert to_driver_paramstyle("SELECT '-- #' , ?") == "SELECT '-- #' , %s"
