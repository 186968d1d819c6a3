"""
minicc Error Hierarchy
======================

This module defines the root of the exception hierarchy for minicc.
All exceptions inherit from MiniCError, allowing callers to catch every
toolchain-related error with a single except clause if desired.

Exception Hierarchy
-------------------
MiniCError (base)
└── ToyCError (toy C compiler and executor, see minicc.toyc.errors)
    ├── CompilationFailedError - aggregate of collected diagnostics
    ├── IRFormatError - IR text that cannot be decoded
    └── ExecutionError - simulated execution fault
        ├── DivisionByZeroError
        ├── UnsupportedFunctionError
        ├── UndefinedValueError
        └── NoReturnError

Design Philosophy
-----------------
Lexical, syntactic and semantic problems in a toy C program are *not*
exceptions: they are collected as diagnostics and the pipeline carries on.
Exceptions are reserved for conditions a stage cannot produce a best-effort
artifact for, such as a division by zero during simulated execution.

Every exception carries a short machine-readable ``kind`` so that hosts can
branch on the failure category without parsing the message.

Error messages follow this format:
    error: description
    hint: suggestion for fixing (when available)
"""

from typing import Optional


class MiniCError(Exception):
    """
    Base exception for all minicc errors.

        try:
            engine.run(ir_text)
        except MiniCError as e:
            print(f"Error: {e}")

    Attributes:
        message: The error description
        hint: A suggestion for fixing the error (optional)
    """

    kind: str = "Error"

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with its hint.

        Example output:
            error: division by zero in 'div(7, 0)'
            hint: guard the divisor before calling div
        """
        parts = [f"error: {self.message}"]
        if self.hint:
            parts.append(f"hint: {self.hint}")
        return "\n".join(parts)
