"""
Toy C Lexer (Tokenizer)
=======================

This module converts toy C source text into a list of tokens for the
parser. Tokenizing happens in two passes:

1. Comment removal: ``// ...`` up to the newline (the newline itself is
   kept) and ``/* ... */`` are deleted. An unterminated ``/*`` swallows
   the rest of the input.
2. Lexical scan: an ordered regular-expression alternation picks out
   whitespace, two-character comparison operators, string literals,
   single-character operators and punctuation, integers and identifiers.

Token Kinds
-----------
| Kind       | Examples                                |
|------------|-----------------------------------------|
| KEYWORD    | int, return, if, else                   |
| IDENTIFIER | main, x, printf, scanf                  |
| INTEGER    | 0, 42                                   |
| SYMBOL     | + - * / = < > ( ) { } ; , == != <= >= "%d" |
| EOF        | produced by the parser past the end     |

The lexer never fails. Characters that match no alternative (``&``, ``%``
outside a string, ``#`` ...) are silently dropped.

Example Usage
-------------
>>> from minicc.toyc.lexer import tokenize
>>> tokenize("int x = 1 + 2;")
[Token(KEYWORD, 'int'), Token(IDENTIFIER, 'x'), Token(SYMBOL, '='), ...]
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


# =============================================================================
# Token Kinds
# =============================================================================

class TokenKind(Enum):
    """Lexical category of a token."""
    KEYWORD = "KEYWORD"
    IDENTIFIER = "IDENTIFIER"
    INTEGER = "INTEGER"
    SYMBOL = "SYMBOL"
    EOF = "EOF"


KEYWORDS = frozenset({"int", "return", "if", "else"})


@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    Attributes:
        kind: The TokenKind classification
        text: The exact source text of the token
    """
    kind: TokenKind
    text: str

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r})"

    def is_string(self) -> bool:
        """Return True if this token is a double-quoted string literal."""
        return self.kind == TokenKind.SYMBOL and len(self.text) >= 2 and self.text[0] == '"'


EOF_TOKEN = Token(TokenKind.EOF, "")


# =============================================================================
# Comment Removal
# =============================================================================

def remove_comments(source: str) -> str:
    """
    Strip ``//`` and ``/* */`` comments in a single left-to-right scan.

    The newline ending a line comment is preserved so that line structure
    survives. Comment markers inside string literals are not special-cased.
    """
    result = []
    pos = 0
    length = len(source)

    while pos < length:
        char = source[pos]
        nxt = source[pos + 1] if pos + 1 < length else ""

        if char == "/" and nxt == "/":
            end = source.find("\n", pos + 2)
            if end == -1:
                break
            pos = end
            continue

        if char == "/" and nxt == "*":
            end = source.find("*/", pos + 2)
            if end == -1:
                break
            pos = end + 2
            continue

        result.append(char)
        pos += 1

    return "".join(result)


# =============================================================================
# Lexical Scan
# =============================================================================

# Order matters: two-character operators before their one-character prefixes.
_TOKEN_PATTERN = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<op2>==|!=|<=|>=)
    | (?P<string>"[^"\n]*")
    | (?P<op1>[+\-*/=<>(){};,])
    | (?P<integer>[0-9]+)
    | (?P<ident>[a-zA-Z_][a-zA-Z0-9_]*)
    """,
    re.VERBOSE,
)


def _classify(text: str, group: str) -> TokenKind:
    if text in KEYWORDS:
        return TokenKind.KEYWORD
    if group == "integer":
        return TokenKind.INTEGER
    if group == "ident":
        return TokenKind.IDENTIFIER
    return TokenKind.SYMBOL


def tokenize(source: str) -> list[Token]:
    """
    Tokenize toy C source text.

    Args:
        source: The source code to tokenize

    Returns:
        Tokens in order of appearance. No EOF token is appended; the
        parser synthesizes one when it reads past the end.
    """
    clean = remove_comments(source)
    tokens = []

    for match in _TOKEN_PATTERN.finditer(clean):
        group = match.lastgroup
        if group == "ws":
            continue
        text = match.group()
        tokens.append(Token(_classify(text, group), text))

    logger.debug(f"Tokenized {len(source)} characters into {len(tokens)} tokens")
    return tokens


def format_tokens(tokens: list[Token]) -> str:
    """Serialize tokens as ``TOKEN(KIND, "text")`` lines."""
    return "".join(f'TOKEN({token.kind.name}, "{token.text}")\n' for token in tokens)
