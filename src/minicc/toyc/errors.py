"""
Toy C Error Hierarchy and Diagnostics
=====================================

This module defines the exception hierarchy for the toy C pipeline and the
diagnostic list that the parser and semantic analyzer write to.

Exception Hierarchy
-------------------
ToyCError (base for all toy C errors)
├── CompilationFailedError - raised on demand from collected diagnostics
├── IRFormatError - malformed IR text
└── ExecutionError - faults during simulated execution
    ├── DivisionByZeroError - div/divide (or '/') with a zero divisor
    ├── UnsupportedFunctionError - call to a name the IR does not define
    ├── UndefinedValueError - operand names an unbound value
    ├── NoReturnError - execution ended without reaching 'ret'
    └── CallDepthError - runaway calls between user-defined functions

Diagnostics vs Exceptions
-------------------------
Syntax and semantic problems never raise. They are appended to a
DiagnosticList as plain strings, in the order they are found, and every
stage still returns its best-effort artifact. A host that wants a hard
failure calls ``DiagnosticList.raise_if_errors()``.
"""

from typing import List, Optional

from minicc.errors import MiniCError


# =============================================================================
# Base Toy C Exception
# =============================================================================

class ToyCError(MiniCError):
    """Base exception for all toy C pipeline errors."""
    kind = "ToyCError"


class CompilationFailedError(ToyCError):
    """
    Aggregate error built from collected diagnostics.

    The message is already a formatted report and is passed through as-is.
    """
    kind = "CompilationFailed"

    def __init__(self, report: str, diagnostics: Optional[List[str]] = None):
        self.diagnostics = list(diagnostics or [])
        super().__init__(report)

    def _format_message(self) -> str:
        return self.message


class IRFormatError(ToyCError):
    """IR text that does not follow the IR line grammar."""
    kind = "IRFormat"

    def __init__(self, line: str, reason: str):
        self.line = line
        super().__init__(f"cannot decode IR line {line!r}: {reason}")


# =============================================================================
# Execution Errors
# =============================================================================

class ExecutionError(ToyCError):
    """
    Fault raised by the interpreter while executing IR.

    The boundary layer turns these into ``Execution error: ...`` trace
    lines; ``trace_message`` is the text that follows that prefix.
    """
    kind = "ExecutionError"

    @property
    def trace_message(self) -> str:
        return self.message


class DivisionByZeroError(ExecutionError):
    """Integer division with a zero divisor."""
    kind = "DivisionByZero"

    def __init__(self, dividend: int):
        self.dividend = dividend
        super().__init__(
            f"division by zero ({dividend} / 0)",
            hint="the divisor of div/divide must be non-zero",
        )

    @property
    def trace_message(self) -> str:
        return "division by zero"


class UnsupportedFunctionError(ExecutionError):
    """Call to a function the executor cannot evaluate."""
    kind = "UnsupportedFunction"

    def __init__(self, function_name: str, reason: Optional[str] = None):
        self.function_name = function_name
        self.reason = reason
        super().__init__(reason or f"unsupported function '{function_name}'")


class UndefinedValueError(ExecutionError):
    """Operand that names a value nothing has bound."""
    kind = "UndefinedValue"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"undefined value '{name}'")


class NoReturnError(ExecutionError):
    """The executed code finished without reaching a ``ret``."""
    kind = "NoReturn"

    def __init__(self):
        super().__init__("no recognizable return.")


class CallDepthError(ExecutionError):
    """Calls between the module's own functions nested too deeply."""
    kind = "CallDepth"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"call depth limit of {limit} exceeded")


# =============================================================================
# Diagnostic Collection
# =============================================================================

class DiagnosticList:
    """
    Ordered, append-only list of diagnostic messages.

    One list belongs to one compilation session. Once ``max_errors``
    messages have been recorded, a single suppression notice is appended
    and later messages are dropped.

    Example:
        diagnostics = DiagnosticList(max_errors=100)
        diagnostics.add("Undeclared variable: y")
        if diagnostics.has_errors():
            print(diagnostics.report())
    """

    SUPPRESSED = "Too many errors; further diagnostics suppressed."

    def __init__(self, max_errors: int = 100):
        self.messages: List[str] = []
        self.max_errors = max_errors
        self._suppressed = False

    def add(self, message: str) -> None:
        """Append a diagnostic, respecting the error cap."""
        if self._suppressed:
            return
        if len(self.messages) >= self.max_errors:
            self.messages.append(self.SUPPRESSED)
            self._suppressed = True
            return
        self.messages.append(message)

    def has_errors(self) -> bool:
        return len(self.messages) > 0

    def error_count(self) -> int:
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    def report(self) -> str:
        """Format all diagnostics followed by a summary line."""
        lines = [f"error: {message}" for message in self.messages]
        word = "error" if len(self.messages) == 1 else "errors"
        lines.append(f"{len(self.messages)} {word}")
        return "\n".join(lines)

    def clear(self) -> None:
        self.messages.clear()
        self._suppressed = False

    def raise_if_errors(self) -> None:
        """Raise a CompilationFailedError if any diagnostics were collected."""
        if self.has_errors():
            raise CompilationFailedError(self.report(), self.messages)
