"""
Toy C Lexer Tests
=================

Tests for comment removal, token classification and the token listing
format.
"""

import pytest

from minicc.toyc.lexer import (
    EOF_TOKEN,
    Token,
    TokenKind,
    format_tokens,
    remove_comments,
    tokenize,
)


def kinds(source):
    return [token.kind for token in tokenize(source)]


def texts(source):
    return [token.text for token in tokenize(source)]


# =============================================================================
# Comment Removal
# =============================================================================

class TestCommentRemoval:
    """Tests for the comment-stripping pass."""

    def test_line_comment_keeps_newline(self):
        """A // comment is removed but its terminating newline survives."""
        assert remove_comments("a // note\nb") == "a \nb"

    def test_line_comment_at_end_of_input(self):
        assert remove_comments("a // trailing") == "a "

    def test_block_comment(self):
        assert remove_comments("a /* one\ntwo */ b") == "a  b"

    def test_unterminated_block_comment_swallows_rest(self):
        assert remove_comments("int a; /* never closed\nint b;") == "int a; "

    def test_comments_produce_no_tokens(self):
        source = "int a; // first\n/* second */ int b;"
        assert texts(source) == ["int", "a", ";", "int", "b", ";"]


# =============================================================================
# Tokenization
# =============================================================================

class TestTokenize:
    """Tests for the lexical scan and classification."""

    def test_empty_source(self):
        """Empty source produces no tokens (no EOF is appended)."""
        assert tokenize("") == []

    def test_whitespace_only(self):
        assert tokenize("  \n\t \n") == []

    def test_declaration(self):
        assert tokenize("int x = 1 + 2;") == [
            Token(TokenKind.KEYWORD, "int"),
            Token(TokenKind.IDENTIFIER, "x"),
            Token(TokenKind.SYMBOL, "="),
            Token(TokenKind.INTEGER, "1"),
            Token(TokenKind.SYMBOL, "+"),
            Token(TokenKind.INTEGER, "2"),
            Token(TokenKind.SYMBOL, ";"),
        ]

    @pytest.mark.parametrize("word", ["int", "return", "if", "else"])
    def test_keywords(self, word):
        assert kinds(word) == [TokenKind.KEYWORD]

    @pytest.mark.parametrize("word", ["main", "printf", "scanf", "_tmp", "x1"])
    def test_identifiers(self, word):
        """printf and scanf are ordinary identifiers."""
        assert kinds(word) == [TokenKind.IDENTIFIER]

    def test_two_character_operators(self):
        """Two-character operators win over their one-character prefixes."""
        assert texts("a == b != c <= d >= e") == [
            "a", "==", "b", "!=", "c", "<=", "d", ">=", "e",
        ]

    def test_punctuation(self):
        assert texts("(){};,") == ["(", ")", "{", "}", ";", ","]
        assert all(kind == TokenKind.SYMBOL for kind in kinds("(){};,"))

    def test_string_literal(self):
        """String literals are single SYMBOL tokens with their quotes."""
        tokens = tokenize('printf("%d", x);')
        assert tokens[2] == Token(TokenKind.SYMBOL, '"%d"')
        assert tokens[2].is_string()
        assert not tokens[0].is_string()

    def test_unrecognized_characters_dropped(self):
        assert texts("a & b # c") == ["a", "b", "c"]

    def test_percent_outside_string_dropped(self):
        assert texts("7 % 2") == ["7", "2"]

    def test_integer_then_identifier(self):
        assert kinds("12ab") == [TokenKind.INTEGER, TokenKind.IDENTIFIER]

    def test_eof_token(self):
        assert EOF_TOKEN.kind == TokenKind.EOF
        assert EOF_TOKEN.text == ""


# =============================================================================
# Token Listing
# =============================================================================

class TestFormatTokens:
    """Tests for the TOKEN(KIND, "text") listing."""

    def test_listing(self):
        assert format_tokens(tokenize("return 7;")) == (
            'TOKEN(KEYWORD, "return")\n'
            'TOKEN(INTEGER, "7")\n'
            'TOKEN(SYMBOL, ";")\n'
        )

    def test_empty_listing(self):
        assert format_tokens([]) == ""

    def test_repr(self):
        assert repr(Token(TokenKind.IDENTIFIER, "x")) == "Token(IDENTIFIER, 'x')"
