"""
Toy C Compiler Main Module
==========================

This module provides the boundary a host uses to drive the toy C
pipeline. Every stage is independently invocable and text in / text out:

    Source → Lex → Parse → Analyze → IR → Optimize → Execute

Usage
-----
Command line:
    $ mcc all hello.c --input 7

Programmatic:
    >>> from minicc.toyc import MiniCEngine
    >>> engine = MiniCEngine()
    >>> ir = engine.generate_ir_text("int main() { return 42; }")
    >>> print(engine.run(engine.optimize_ir(ir)))
    [return] Execution result: 42
    ...

Sessions
--------
Each entry point creates its own CompilationSession, so diagnostics and
symbol tables never leak between calls and separate engines can be used
from separate threads. The only state an engine keeps between calls is
its options and the external input set with ``set_input``.

Error Handling
--------------
No entry point raises for problems in the toy program. Syntax and
semantic problems are reported in the ``parse_and_check`` text;
execution faults are reported as ``Execution error: ...`` trace lines.
Source nested deeper than the tree walkers can recurse is reported as a
diagnostic and leaves an empty tree (and empty IR) behind.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Union

from minicc.toyc.ast import ASTPrinter, NodeKind, SyntaxNode
from minicc.toyc.config import CompilerOptions
from minicc.toyc.errors import DiagnosticList
from minicc.toyc.interpreter import ExecutionResult, Interpreter
from minicc.toyc.irgen import IRGenerator
from minicc.toyc.lexer import Token, format_tokens, tokenize
from minicc.toyc.optimizer import PeepholeOptimizer
from minicc.toyc.parser import ToyCParser
from minicc.toyc.semantic import SemanticAnalyzer
from minicc.toyc.session import CompilationSession

logger = logging.getLogger(__name__)


SUCCESS_MARKER = "Semantic analysis passed."
ERRORS_HEADER = "Semantic Errors:"
TOO_DEEP_MESSAGE = "Program is nested too deeply to compile."


class MiniCEngine:
    """
    Toy C compile-and-run engine.

    Example:
        engine = MiniCEngine()
        engine.set_input(7)
        print(engine.run(engine.generate_ir_text(source)))

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the engine.

        Args:
            options: Compiler configuration (uses defaults if None)
        """
        self.options = options or CompilerOptions()
        self._input: Optional[str] = None

    # =========================================================================
    # Input
    # =========================================================================

    def set_input(self, value: Union[str, int, None]) -> None:
        """Store the value consumed by simulated ``scanf``; replaces any previous one."""
        self._input = None if value is None else str(value)

    @property
    def input_value(self) -> Optional[str]:
        return self._input

    # =========================================================================
    # Stages
    # =========================================================================

    def new_session(self) -> CompilationSession:
        return CompilationSession(options=self.options)

    def tokenize(self, source: str) -> str:
        """Return one ``TOKEN(KIND, "text")`` line per token."""
        return format_tokens(tokenize(source))

    def parse(
        self, source: str, check: bool = True
    ) -> tuple[SyntaxNode, CompilationSession]:
        """
        Parse (and by default semantically check) source text.

        Returns:
            Tuple of (ROOT node, the session holding diagnostics)
        """
        session = self.new_session()
        root = self._parse_tokens(tokenize(source), session, check)
        logger.info(f"Parsed source with {len(session.diagnostics)} diagnostics")
        return root, session

    def parse_and_check(self, source: str) -> str:
        """
        Return the indented tree followed by the diagnostic report.

        The report is a blank line and either the success marker or a
        ``Semantic Errors:`` header with one ``  - message`` line per
        diagnostic, in the order they were found.
        """
        root, session = self.parse(source)
        return self._report(root, session)

    def generate_ir_text(self, source: str) -> str:
        """Parse source text and lower its functions to IR text."""
        root, session = self.parse(source, check=False)
        return self._lower(root, session)

    def optimize_ir(self, ir_text: str) -> str:
        """Fold the first constant ``ret i32 A + B``; prefixes the marker line."""
        optimizer = PeepholeOptimizer(enable=self.options.optimize)
        text, stats = optimizer.optimize(ir_text)
        logger.info(f"Optimizer applied {stats.constant_folds} constant folds")
        return text

    def execute(
        self, ir_text: str, external_input: Union[str, int, None] = None
    ) -> ExecutionResult:
        """Execute IR text; falls back to the stored input when none is given."""
        if external_input is None:
            external_input = self._input
        session = self.new_session()
        return Interpreter(session.environment).execute(ir_text, external_input)

    def run(self, ir_text: str, external_input: Union[str, int, None] = None) -> str:
        """Execute IR text and return the trace plus the stats block."""
        result = self.execute(ir_text, external_input)
        return result.format(report_timing=self.options.report_timing)

    def compile_and_run(
        self, source: str, external_input: Union[str, int, None] = None
    ) -> "PipelineResult":
        """
        Run every stage on source text.

        Returns:
            PipelineResult with each stage's artifact and the total time
        """
        start = time.perf_counter()

        session = self.new_session()
        tokens = tokenize(source)
        root = self._parse_tokens(tokens, session, check=True)
        tree = self._report(root, session)
        ir_text = self._lower(root, session)
        optimized = self.optimize_ir(ir_text)
        execution = self.execute(optimized, external_input)

        return PipelineResult(
            tokens=format_tokens(tokens),
            tree=tree,
            ir=ir_text,
            optimized_ir=optimized,
            execution=execution,
            diagnostics=list(session.diagnostics),
            elapsed_ms=(time.perf_counter() - start) * 1000.0,
            report_timing=self.options.report_timing,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _parse_tokens(
        self, tokens: list[Token], session: CompilationSession, check: bool
    ) -> SyntaxNode:
        try:
            root = ToyCParser(tokens, session).parse()
            if check:
                SemanticAnalyzer(session).analyze(root)
        except RecursionError:
            return self._too_deep(session)
        return root

    def _report(self, root: SyntaxNode, session: CompilationSession) -> str:
        try:
            text = ASTPrinter().print(root)
        except RecursionError:
            text = ASTPrinter().print(self._too_deep(session))

        if session.diagnostics.has_errors():
            lines = "".join(f"  - {message}\n" for message in session.diagnostics)
            return f"{text}\n{ERRORS_HEADER}\n{lines}"
        return f"{text}\n{SUCCESS_MARKER}\n"

    def _lower(self, root: SyntaxNode, session: CompilationSession) -> str:
        try:
            return IRGenerator().generate(root)
        except RecursionError:
            self._too_deep(session)
            return ""

    @staticmethod
    def _too_deep(session: CompilationSession) -> SyntaxNode:
        """Record the nesting diagnostic and return an empty tree."""
        logger.warning("Source nesting exceeds the recursion limit")
        session.error(TOO_DEEP_MESSAGE)
        return SyntaxNode(NodeKind.ROOT)


@dataclass
class PipelineResult:
    """
    Artifacts of a full compile-and-run.

    Attributes:
        tokens: ``tokenize`` output
        tree: ``parse_and_check`` output
        ir: Unoptimized IR text
        optimized_ir: ``optimize_ir`` output
        execution: Result of executing the optimized IR
        diagnostics: Parse and semantic diagnostics
        elapsed_ms: Wall-clock time for all stages
        report_timing: Whether the execution stats block is rendered
    """
    tokens: str = ""
    tree: str = ""
    ir: str = ""
    optimized_ir: str = ""
    execution: ExecutionResult = field(default_factory=ExecutionResult)
    diagnostics: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0
    report_timing: bool = True

    @property
    def success(self) -> bool:
        return not self.diagnostics and self.execution.success

    def raise_for_diagnostics(self) -> None:
        """Raise CompilationFailedError if parsing or analysis reported problems."""
        diagnostics = DiagnosticList(max_errors=len(self.diagnostics) + 1)
        for message in self.diagnostics:
            diagnostics.add(message)
        diagnostics.raise_if_errors()

    def format(self) -> str:
        """Execution trace followed by the total compilation time."""
        output = self.execution.format(report_timing=self.report_timing)
        return f"{output}Total Compilation Time: {self.elapsed_ms:.2f} ms\n"


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize_text(source: str) -> str:
    """``TOKEN(KIND, "text")`` lines for source text."""
    return MiniCEngine().tokenize(source)


def parse_and_check(source: str) -> str:
    """Indented tree plus diagnostic report for source text."""
    return MiniCEngine().parse_and_check(source)


def generate_ir_text(source: str) -> str:
    """IR text for source text."""
    return MiniCEngine().generate_ir_text(source)


def optimize_ir(ir_text: str) -> str:
    """Optimized IR text, prefixed with the marker line."""
    return MiniCEngine().optimize_ir(ir_text)


def run(ir_text: str, external_input: Union[str, int, None] = None) -> str:
    """Execution trace plus stats block for IR text."""
    return MiniCEngine().run(ir_text, external_input)
