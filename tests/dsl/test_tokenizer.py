"""
Tests for the dialogue tokenizer.

Covers comment stripping (including '#' inside quotes), blank line removal,
line numbering and indentation depth.
"""

from narrative_engine.dsl.tokenizer import Token, strip_comment, tokenize


class TestStripComment:
    """Tests for strip_comment()."""

    def test_strips_trailing_comment(self):
        assert strip_comment("SET flag met # remember this") == "SET flag met "

    def test_keeps_hash_inside_quotes(self):
        line = 'NOTIFY "Room #4 is ready"'
        assert strip_comment(line) == line

    def test_strips_hash_after_closing_quote(self):
        line = 'NOTIFY "Room #4" # note'
        assert strip_comment(line) == 'NOTIFY "Room #4" '

    def test_unclosed_quote_does_not_hide_comment(self):
        assert strip_comment('BARTENDER: 6" tall # note') == 'BARTENDER: 6" tall '

    def test_stray_quote_after_closed_pair(self):
        line = 'NOTIFY "Room #4" and 6" # note'
        assert strip_comment(line) == 'NOTIFY "Room #4" and 6" '

    def test_whole_line_comment(self):
        assert strip_comment("# just a comment") == ""

    def test_no_comment(self):
        assert strip_comment("GOTO start") == "GOTO start"


class TestTokenize:
    """Tests for tokenize()."""

    def test_blank_and_comment_lines_removed(self):
        source = "\n# header\n\nNODE start\n\n  NARRATOR: Hello\n"
        tokens = tokenize(source)
        assert [t.line for t in tokens] == ["NODE start", "NARRATOR: Hello"]

    def test_line_numbers_are_source_lines(self):
        source = "# comment\nNODE start\n\n  NARRATOR: Hi"
        tokens = tokenize(source)
        assert [t.line_number for t in tokens] == [2, 4]

    def test_indent_counts_leading_whitespace(self):
        source = "NODE a\n  CHOICE Go\n    GOTO b\n  END\n\tEND"
        tokens = tokenize(source)
        assert [t.indent for t in tokens] == [0, 2, 4, 2, 1]

    def test_lines_are_trimmed(self):
        tokens = tokenize("   SET flag met   # trailing")
        assert tokens[0].line == "SET flag met"
        assert tokens[0].indent == 3

    def test_quoted_hash_survives_tokenizing(self):
        tokens = tokenize('  NARRATOR: "Gate #2" # which gate')
        assert tokens[0].line == 'NARRATOR: "Gate #2"'

    def test_empty_source(self):
        assert tokenize("") == []


class TestToken:
    """Tests for Token helpers."""

    def test_keyword_and_rest(self):
        token = Token(line="CHOICE  Buy a drink", line_number=1, indent=0)
        assert token.keyword == "CHOICE"
        assert token.rest == "Buy a drink"

    def test_rest_empty_for_single_word(self):
        token = Token(line="END", line_number=1, indent=0)
        assert token.keyword == "END"
        assert token.rest == ""
