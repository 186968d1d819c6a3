"""
Toy C Abstract Syntax Tree (AST) Definitions
============================================

The toy C AST uses a single uniform node type: every node has a kind, a
label holding the associated name, operator or literal text, and an owned
list of children.

Node Shapes
-----------
ROOT
├── Function(name)
│   ├── Params
│   │   └── Param(name)
│   └── Block
│       ├── VarDecl(name)      [Type(int), initializer?]
│       ├── Assignment(name)   [expression]
│       ├── Call(name)         [arguments...]
│       └── Return             [expression?]
└── (top-level statements, same shapes as in a Block)

Expressions are Literal(text), Identifier(name), Call(name) and
BinaryOp(op) with exactly two children. String literals are Literal nodes
whose label keeps its surrounding quotes.

Design Notes
------------
- Nodes are dataclasses; a parent exclusively owns its children, so the
  whole tree is released when the root goes out of scope.
- ``inferred_type`` and ``is_declared`` are metadata slots filled by the
  semantic analyzer; no later stage depends on them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class NodeKind(Enum):
    """Syntactic category of a SyntaxNode."""
    ROOT = "ROOT"
    FUNCTION = "Function"
    PARAMS = "Params"
    PARAM = "Param"
    BLOCK = "Block"
    VAR_DECL = "VarDecl"
    ASSIGNMENT = "Assignment"
    CALL = "Call"
    RETURN = "Return"
    BINARY_OP = "BinaryOp"
    IDENTIFIER = "Identifier"
    LITERAL = "Literal"
    TYPE = "Type"


@dataclass
class SyntaxNode:
    """
    A node of the syntax tree.

    Attributes:
        kind: The syntactic category
        label: Name, operator or literal text ("" when not applicable)
        children: Owned child nodes, in source order
        inferred_type: Type assigned during semantic analysis
        is_declared: True once the analyzer has registered the declaration
    """
    kind: NodeKind
    label: str = ""
    children: list["SyntaxNode"] = field(default_factory=list)
    inferred_type: Optional[str] = field(default=None, compare=False)
    is_declared: bool = field(default=False, compare=False)

    def add(self, child: Optional["SyntaxNode"]) -> "SyntaxNode":
        """Append a child if it is not None; returns self for chaining."""
        if child is not None:
            self.children.append(child)
        return self

    def child(self, kind: NodeKind) -> Optional["SyntaxNode"]:
        """Return the first child of the given kind, if any."""
        for node in self.children:
            if node.kind == kind:
                return node
        return None

    def is_string_literal(self) -> bool:
        return self.kind == NodeKind.LITERAL and self.label.startswith('"')

    def __repr__(self) -> str:
        if self.label:
            return f"{self.kind.value}({self.label})"
        return self.kind.value


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches on node kind to ``visit_<Kind>`` methods, e.g.
    ``visit_VarDecl``. Unhandled kinds fall through to ``generic_visit``,
    which visits every child in order.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_Call(self, node):
                self.count += 1
                self.generic_visit(node)
    """

    def visit(self, node: SyntaxNode) -> Any:
        method_name = f"visit_{node.kind.value}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: SyntaxNode) -> None:
        for child in node.children:
            self.visit(child)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Indented tree printer.

    Each node is one line, ``Kind(label)`` or just ``Kind`` when the label
    is empty, indented two spaces per depth.

    Usage:
        printer = ASTPrinter()
        print(printer.print(root))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: SyntaxNode) -> str:
        """Print the tree and return it, newline-terminated."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "".join(f"{line}\n" for line in self.output)

    def generic_visit(self, node: SyntaxNode) -> None:
        self.output.append("  " * self.indent_level + repr(node))
        self.indent_level += 1
        for child in node.children:
            self.visit(child)
        self.indent_level -= 1
