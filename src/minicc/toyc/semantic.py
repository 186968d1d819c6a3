"""
Toy C Semantic Analyzer
=======================

A depth-first, pre-order walk over the syntax tree that checks
declaration/use consistency and call targets. It writes only to the
session's diagnostics (and to the metadata slots of the nodes it
declares); it never raises and always visits every node.

Checks
------
- ``VarDecl``/``Param``: a name already declared in the *current* scope is
  reported as ``Variable 'x' re-declared.``; the first declaration stays
  registered.
- ``Identifier``/``Assignment``: a name not declared in any enclosing scope
  is reported as ``Undeclared variable: x``.
- ``Call``: a target that is neither a parsed function nor a builtin is
  reported as ``Function not defined: f``.

Scopes
------
Top-level statements share the global scope. Each function opens its own
scope holding its parameters and locals, so two functions may both
declare ``x`` without conflict.
"""

import logging

from minicc.toyc.ast import ASTVisitor, NodeKind, SyntaxNode
from minicc.toyc.session import CompilationSession

logger = logging.getLogger(__name__)


# Call targets accepted without a definition in the program
BUILTIN_FUNCTIONS = frozenset({
    "add", "sub", "mul", "div", "divide",
    "main",
    "printf", "scanf",
})


class SemanticAnalyzer(ASTVisitor):
    """
    Declaration and call-target checker.

    Usage:
        analyzer = SemanticAnalyzer(session)
        analyzer.analyze(root)
        for message in session.diagnostics:
            print(message)
    """

    def __init__(self, session: CompilationSession):
        self.session = session
        self.symbols = session.declarations

    def analyze(self, root: SyntaxNode) -> None:
        before = len(self.session.diagnostics)
        self.visit(root)
        logger.debug(
            f"Semantic analysis added {len(self.session.diagnostics) - before} diagnostics"
        )

    # =========================================================================
    # Scoping
    # =========================================================================

    def visit_Function(self, node: SyntaxNode) -> None:
        self.symbols.push_scope()
        try:
            self.generic_visit(node)
        finally:
            self.symbols.pop_scope()

    # =========================================================================
    # Declarations
    # =========================================================================

    def _declare(self, node: SyntaxNode) -> None:
        if self.symbols.declare(node.label, "int"):
            node.is_declared = True
            node.inferred_type = "int"
        else:
            self.session.error(f"Variable '{node.label}' re-declared.")

    def visit_Param(self, node: SyntaxNode) -> None:
        self._declare(node)

    def visit_VarDecl(self, node: SyntaxNode) -> None:
        # Pre-order: the name is visible inside its own initializer.
        self._declare(node)
        self.generic_visit(node)

    # =========================================================================
    # Uses
    # =========================================================================

    def _check_declared(self, name: str) -> None:
        if name not in self.symbols:
            self.session.error(f"Undeclared variable: {name}")

    def visit_Identifier(self, node: SyntaxNode) -> None:
        self._check_declared(node.label)
        node.inferred_type = self.symbols.lookup(node.label)

    def visit_Assignment(self, node: SyntaxNode) -> None:
        self._check_declared(node.label)
        self.generic_visit(node)

    def visit_Call(self, node: SyntaxNode) -> None:
        name = node.label
        if name not in self.session.functions and name not in BUILTIN_FUNCTIONS:
            self.session.error(f"Function not defined: {name}")
        self.generic_visit(node)


def analyze(root: SyntaxNode, session: CompilationSession) -> None:
    """Run semantic analysis on a tree, appending to session diagnostics."""
    SemanticAnalyzer(session).analyze(root)
