"""
Compilation Session
===================

A CompilationSession holds every piece of mutable state one run of the
pipeline needs: the declaration table, the table of parsed functions, the
diagnostic list and the runtime value environment. A fresh session is
created by each top-level entry point and passed explicitly to every
stage, so two sessions never interfere with each other.

Static and runtime information are kept apart:

- ``declarations`` maps names to their declared type ("int"), scoped per
  function. Only the semantic analyzer writes it.
- ``functions`` maps each parsed function name to its parameter count.
  Only the parser writes it.
- ``environment`` maps names (and IR temporaries) to their current value
  during simulated execution. Only the interpreter touches it.
"""

from dataclasses import dataclass, field
from typing import Optional

from minicc.toyc.config import CompilerOptions
from minicc.toyc.errors import DiagnosticList


class SymbolTable:
    """
    Scoped name → type table.

    Scopes form a stack. Declarations go into the innermost scope; lookups
    search from innermost to outermost. The global scope is never popped.

    Example:
        table = SymbolTable()
        table.declare("x", "int")
        table.push_scope()
        table.declare("x", "int")      # shadows, no conflict
        table.declared_in_current_scope("x")   # True
        table.pop_scope()
    """

    def __init__(self):
        self._scopes: list[dict[str, str]] = [{}]

    def push_scope(self) -> None:
        self._scopes.append({})

    def pop_scope(self) -> None:
        if len(self._scopes) > 1:
            self._scopes.pop()

    @property
    def depth(self) -> int:
        return len(self._scopes)

    def declare(self, name: str, type_name: str) -> bool:
        """
        Declare a name in the current scope.

        Returns:
            False (and leaves the existing entry untouched) if the name is
            already declared in the current scope, True otherwise.
        """
        scope = self._scopes[-1]
        if name in scope:
            return False
        scope[name] = type_name
        return True

    def declared_in_current_scope(self, name: str) -> bool:
        return name in self._scopes[-1]

    def lookup(self, name: str) -> Optional[str]:
        """Return the declared type of name, or None if undeclared."""
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return None

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def clear(self) -> None:
        self._scopes = [{}]


@dataclass
class CompilationSession:
    """
    State for one end-to-end invocation of the pipeline.

    Attributes:
        options: Compiler configuration
        declarations: Compile-time declaration table
        functions: Parsed function name → parameter count
        diagnostics: Parse and semantic diagnostics, in order
        environment: Runtime values during simulated execution
    """
    options: CompilerOptions = field(default_factory=CompilerOptions)
    declarations: SymbolTable = field(default_factory=SymbolTable)
    functions: dict[str, int] = field(default_factory=dict)
    diagnostics: DiagnosticList = None
    environment: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.diagnostics is None:
            self.diagnostics = DiagnosticList(self.options.max_diagnostics)

    def error(self, message: str) -> None:
        """Record a diagnostic."""
        self.diagnostics.add(message)

    def reset(self) -> None:
        """Return the session to its freshly created state."""
        self.declarations.clear()
        self.functions.clear()
        self.diagnostics.clear()
        self.environment.clear()
