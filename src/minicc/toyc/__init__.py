"""
minicc Toy C Pipeline
=====================

This package implements a miniature compile-and-run pipeline for a small
C-like toy language: integer variables, assignment, functions with integer
parameters, calls, ``return`` and the two I/O primitives ``printf`` and
``scanf``.

Pipeline
--------
    Source → Lexer → Parser → Semantic Analyzer → IR Generator
           → Peephole Optimizer → IR Interpreter → Trace

Every stage can be run on its own; the token list, syntax tree and IR text
are the contracts between stages. All mutable state for one run lives in
a CompilationSession.

Usage
-----
>>> from minicc.toyc import MiniCEngine
>>> engine = MiniCEngine()
>>> print(engine.parse_and_check("int main() { return 1; }"))
ROOT
  Function(main)
    Params
    Block
      Return
        Literal(1)
<BLANKLINE>
Semantic analysis passed.
<BLANKLINE>

Language Subset
---------------
Supported:
- ``int`` declarations with optional initializer
- Assignment, calls, ``return``
- ``+ - * /`` with conventional precedence (or a flat chain, see
  CompilerOptions.flat_expressions)
- ``printf("fmt", v)`` and ``scanf("fmt", x)``

Not supported:
- Control flow (``if``/``else`` are reserved words only), loops
- Types other than ``int``
- Native code generation
"""

__version__ = "1.0.0"

from minicc.toyc.compiler import (
    MiniCEngine,
    PipelineResult,
    generate_ir_text,
    optimize_ir,
    parse_and_check,
    run,
    tokenize_text,
)
from minicc.toyc.config import CompilerOptions
from minicc.toyc.errors import (
    ToyCError,
    CompilationFailedError,
    IRFormatError,
    ExecutionError,
    DivisionByZeroError,
    UnsupportedFunctionError,
    UndefinedValueError,
    NoReturnError,
    CallDepthError,
    DiagnosticList,
)
from minicc.toyc.lexer import Token, TokenKind, tokenize
from minicc.toyc.ast import ASTPrinter, ASTVisitor, NodeKind, SyntaxNode
from minicc.toyc.parser import ToyCParser, parse_source, parse_tokens
from minicc.toyc.semantic import SemanticAnalyzer, analyze
from minicc.toyc.session import CompilationSession, SymbolTable
from minicc.toyc.irgen import IRGenerator, generate_ir
from minicc.toyc.optimizer import OptimizationStats, PeepholeOptimizer, optimize
from minicc.toyc.interpreter import ExecutionResult, Interpreter, execute

__all__ = [
    # Version
    "__version__",
    # Boundary
    "MiniCEngine",
    "PipelineResult",
    "CompilerOptions",
    "tokenize_text",
    "parse_and_check",
    "generate_ir_text",
    "optimize_ir",
    "run",
    # Errors
    "ToyCError",
    "CompilationFailedError",
    "IRFormatError",
    "ExecutionError",
    "DivisionByZeroError",
    "UnsupportedFunctionError",
    "UndefinedValueError",
    "NoReturnError",
    "CallDepthError",
    "DiagnosticList",
    # Stages
    "Token",
    "TokenKind",
    "tokenize",
    "ASTPrinter",
    "ASTVisitor",
    "NodeKind",
    "SyntaxNode",
    "ToyCParser",
    "parse_source",
    "parse_tokens",
    "SemanticAnalyzer",
    "analyze",
    "CompilationSession",
    "SymbolTable",
    "IRGenerator",
    "generate_ir",
    "OptimizationStats",
    "PeepholeOptimizer",
    "optimize",
    "ExecutionResult",
    "Interpreter",
    "execute",
]
