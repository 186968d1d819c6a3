"""
Toy C Recursive Descent Parser
==============================

This module implements a recursive descent parser for the toy C language.
It consumes the token list produced by the lexer and builds a tree of
SyntaxNode objects rooted at a ROOT node.

Grammar (Simplified EBNF)
-------------------------
program     ::= (function | statement)*
function    ::= 'int' IDENTIFIER '(' params? ')' block
params      ::= ('int' IDENTIFIER ','?)*
block       ::= '{' statement* '}'
statement   ::= var_decl | assignment | call ';' | return
var_decl    ::= 'int' IDENTIFIER ('=' expression)? ';'
assignment  ::= IDENTIFIER '=' expression ';'
return      ::= 'return' expression? ';'
call        ::= IDENTIFIER '(' (expression (',' expression)*)? ')'
expression  ::= term (('+' | '-') term)*
term        ::= primary (('*' | '/') primary)*
primary     ::= INTEGER | STRING | call | IDENTIFIER | '(' expression ')'

With ``CompilerOptions.flat_expressions`` the two precedence levels
collapse into one flat left-to-right chain, so ``2 + 3 * 4`` parses as
``(2 + 3) * 4``.

Error Recovery
--------------
The parser never raises. A missing token is recorded in the session's
diagnostics as ``Expected '<tok>' but got '<got>'`` and parsing carries
on as if the token had been present. A token that cannot start any
construct is skipped silently, which guarantees forward progress.

Example Usage
-------------
>>> from minicc.toyc.parser import parse_source
>>> root, session = parse_source('int main() { return 42; }')
>>> root.children[0]
Function(main)
"""

import logging
from typing import Callable, Optional

from minicc.toyc.ast import NodeKind, SyntaxNode
from minicc.toyc.lexer import EOF_TOKEN, Token, TokenKind, tokenize
from minicc.toyc.session import CompilationSession

logger = logging.getLogger(__name__)


ADDITIVE_OPERATORS = ("+", "-")
MULTIPLICATIVE_OPERATORS = ("*", "/")


class ToyCParser:
    """
    Recursive descent parser for toy C.

    Parsing has two side effects on the session: every function definition
    is recorded in ``session.functions`` (name → parameter count), and
    every syntax problem is appended to ``session.diagnostics``.

    Attributes:
        tokens: Tokens to parse
        session: The compilation session receiving side effects
    """

    def __init__(self, tokens: list[Token], session: CompilationSession):
        self.tokens = tokens
        self.session = session
        self.flat_expressions = session.options.flat_expressions

        # Single cursor into the token list; only ever moves forward
        self._pos = 0

    def parse(self) -> SyntaxNode:
        """
        Parse the whole token list.

        Top-level dispatch tries a function definition first, then a
        statement. When neither consumes anything, one token is skipped.

        Returns:
            The ROOT node
        """
        root = SyntaxNode(NodeKind.ROOT)

        while not self._at_end():
            start = self._pos
            node = self._parse_function()
            if node is None:
                node = self._parse_statement()

            if node is not None:
                root.add(node)
            elif self._pos == start:
                self._skip()

        logger.debug(
            f"Parsed {len(root.children)} top-level nodes, "
            f"{len(self.session.diagnostics)} diagnostics"
        )
        return root

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.tokens)

    def _peek(self, offset: int = 0) -> Token:
        """Look at the token at current position + offset (EOF past the end)."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return EOF_TOKEN
        return self.tokens[pos]

    def _advance(self) -> Token:
        token = self._peek()
        if not self._at_end():
            self._pos += 1
        return token

    def _check(self, text: str) -> bool:
        token = self._peek()
        return token.kind != TokenKind.EOF and token.text == text

    def _check_kind(self, kind: TokenKind) -> bool:
        return self._peek().kind == kind

    def _match(self, text: str) -> bool:
        """Consume the current token if its text matches."""
        if self._check(text):
            self._advance()
            return True
        return False

    def _consume(self, text: str) -> bool:
        """Consume an expected token, recording a diagnostic if it is missing."""
        if self._match(text):
            return True
        self.session.error(f"Expected '{text}' but got '{self._peek().text}'")
        return False

    def _skip(self) -> None:
        token = self._advance()
        logger.debug(f"Skipping unexpected token {token!r}")

    # =========================================================================
    # Functions
    # =========================================================================

    def _parse_function(self) -> Optional[SyntaxNode]:
        """
        Parse ``int NAME ( params ) block``.

        Only commits when the next three tokens are ``int``, an identifier
        and ``(``; otherwise nothing is consumed and None is returned.
        """
        if not (
            self._check("int")
            and self._peek(1).kind == TokenKind.IDENTIFIER
            and self._peek(2).text == "("
        ):
            return None

        self._advance()  # int
        name = self._advance().text
        self._advance()  # (

        function = SyntaxNode(NodeKind.FUNCTION, name)
        params = self._parse_params()
        self._consume(")")

        if name in self.session.functions:
            self.session.error(f"Function '{name}' re-defined.")
        self.session.functions[name] = len(params.children)

        function.add(params)
        function.add(self._parse_block())
        return function

    def _parse_params(self) -> SyntaxNode:
        params = SyntaxNode(NodeKind.PARAMS)

        while not self._check(")") and not self._at_end():
            if not self._match("int"):
                self.session.error("Expected parameter type 'int'")
                break
            if not self._check_kind(TokenKind.IDENTIFIER):
                self.session.error(
                    f"Expected 'identifier' but got '{self._peek().text}'"
                )
                break
            params.add(SyntaxNode(NodeKind.PARAM, self._advance().text))
            if not self._check(")"):
                self._match(",")

        return params

    def _parse_block(self) -> SyntaxNode:
        """Parse ``{ statement* }``, skipping tokens no statement accepts."""
        block = SyntaxNode(NodeKind.BLOCK)
        self._consume("{")

        while not self._check("}") and not self._at_end():
            start = self._pos
            statement = self._parse_statement()
            if statement is not None:
                block.add(statement)
            elif self._pos == start:
                self._skip()

        self._consume("}")
        return block

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_statement(self) -> Optional[SyntaxNode]:
        token = self._peek()

        if token.kind == TokenKind.KEYWORD and token.text == "int":
            return self._parse_var_decl()
        if token.kind == TokenKind.KEYWORD and token.text == "return":
            return self._parse_return()
        if token.kind == TokenKind.IDENTIFIER:
            if self._peek(1).text == "(":
                call = self._parse_call()
                self._consume(";")
                return call
            return self._parse_assignment()

        return None

    def _parse_var_decl(self) -> Optional[SyntaxNode]:
        self._advance()  # int
        if not self._check_kind(TokenKind.IDENTIFIER):
            self.session.error("Expected variable name after 'int'.")
            return None

        declaration = SyntaxNode(NodeKind.VAR_DECL, self._advance().text)
        declaration.add(SyntaxNode(NodeKind.TYPE, "int"))

        if self._match("="):
            declaration.add(self._parse_expression())

        self._consume(";")
        return declaration

    def _parse_assignment(self) -> Optional[SyntaxNode]:
        name = self._advance().text
        if not self._match("="):
            self.session.error("Expected '=' after identifier.")
            return None

        assignment = SyntaxNode(NodeKind.ASSIGNMENT, name)
        assignment.add(self._parse_expression())
        self._consume(";")
        return assignment

    def _parse_return(self) -> SyntaxNode:
        self._advance()  # return
        statement = SyntaxNode(NodeKind.RETURN)
        if not self._check(";"):
            statement.add(self._parse_expression())
        self._consume(";")
        return statement

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> Optional[SyntaxNode]:
        if self.flat_expressions:
            return self._parse_chain(
                ADDITIVE_OPERATORS + MULTIPLICATIVE_OPERATORS, self._parse_primary
            )
        return self._parse_chain(ADDITIVE_OPERATORS, self._parse_term)

    def _parse_term(self) -> Optional[SyntaxNode]:
        return self._parse_chain(MULTIPLICATIVE_OPERATORS, self._parse_primary)

    def _parse_chain(
        self,
        operators: tuple[str, ...],
        operand: Callable[[], Optional[SyntaxNode]],
    ) -> Optional[SyntaxNode]:
        """Parse a left-associative chain ``operand (op operand)*``."""
        left = operand()
        if left is None:
            return None

        while self._check_kind(TokenKind.SYMBOL) and self._peek().text in operators:
            operator = self._advance().text
            right = operand()
            if right is None:
                # primary already recorded the diagnostic
                return left
            left = SyntaxNode(NodeKind.BINARY_OP, operator, [left, right])

        return left

    def _parse_primary(self) -> Optional[SyntaxNode]:
        token = self._peek()

        if token.kind == TokenKind.INTEGER:
            self._advance()
            return SyntaxNode(NodeKind.LITERAL, token.text)

        if token.is_string():
            self._advance()
            return SyntaxNode(NodeKind.LITERAL, token.text)

        if token.kind == TokenKind.IDENTIFIER:
            if self._peek(1).text == "(":
                return self._parse_call()
            self._advance()
            return SyntaxNode(NodeKind.IDENTIFIER, token.text)

        if token.kind == TokenKind.SYMBOL and token.text == "(":
            self._advance()
            expression = self._parse_expression()
            self._consume(")")
            return expression

        self.session.error(f"Expected expression but got '{token.text}'")
        return None

    def _parse_call(self) -> SyntaxNode:
        call = SyntaxNode(NodeKind.CALL, self._advance().text)
        self._advance()  # (

        if not self._check(")"):
            while True:
                argument = self._parse_expression()
                if argument is None:
                    break
                call.add(argument)
                if not self._match(","):
                    break

        self._consume(")")
        return call


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_tokens(tokens: list[Token], session: CompilationSession) -> SyntaxNode:
    """Parse a token list within an existing session."""
    return ToyCParser(tokens, session).parse()


def parse_source(
    source: str, session: Optional[CompilationSession] = None
) -> tuple[SyntaxNode, CompilationSession]:
    """
    Tokenize and parse source text.

    Args:
        source: Toy C source code
        session: Session to use; a fresh one is created when None

    Returns:
        Tuple of (ROOT node, session holding diagnostics and functions)
    """
    if session is None:
        session = CompilationSession()
    return parse_tokens(tokenize(source), session), session
