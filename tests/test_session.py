"""
Compilation Session Tests
=========================

Tests for the scoped symbol table, the diagnostic list and session reset.
"""

import pytest

from minicc.errors import MiniCError
from minicc.toyc.config import CompilerOptions
from minicc.toyc.errors import CompilationFailedError, DiagnosticList, ToyCError
from minicc.toyc.session import CompilationSession, SymbolTable


class TestSymbolTable:
    """Tests for SymbolTable scoping."""

    def test_declare_and_lookup(self):
        table = SymbolTable()
        assert table.declare("x", "int")
        assert table.lookup("x") == "int"
        assert "x" in table
        assert "y" not in table

    def test_duplicate_in_same_scope(self):
        table = SymbolTable()
        table.declare("x", "int")
        assert not table.declare("x", "int")

    def test_shadowing(self):
        table = SymbolTable()
        table.declare("x", "int")
        table.push_scope()
        assert not table.declared_in_current_scope("x")
        assert table.declare("x", "int")
        assert table.depth == 2
        table.pop_scope()
        assert table.depth == 1
        assert table.declared_in_current_scope("x")

    def test_inner_names_gone_after_pop(self):
        table = SymbolTable()
        table.push_scope()
        table.declare("local", "int")
        table.pop_scope()
        assert table.lookup("local") is None

    def test_global_scope_never_popped(self):
        table = SymbolTable()
        table.declare("g", "int")
        table.pop_scope()
        assert table.depth == 1
        assert "g" in table

    def test_clear(self):
        table = SymbolTable()
        table.declare("x", "int")
        table.push_scope()
        table.clear()
        assert table.depth == 1
        assert "x" not in table


class TestDiagnosticList:
    """Tests for DiagnosticList."""

    def test_order_preserved(self):
        diagnostics = DiagnosticList()
        diagnostics.add("first")
        diagnostics.add("second")
        assert list(diagnostics) == ["first", "second"]
        assert diagnostics.error_count() == 2

    def test_cap(self):
        diagnostics = DiagnosticList(max_errors=1)
        for message in ("a", "b", "c"):
            diagnostics.add(message)
        assert list(diagnostics) == ["a", DiagnosticList.SUPPRESSED]

    def test_report(self):
        diagnostics = DiagnosticList()
        diagnostics.add("Undeclared variable: y")
        assert diagnostics.report() == "error: Undeclared variable: y\n1 error"

    def test_raise_if_errors(self):
        diagnostics = DiagnosticList()
        diagnostics.raise_if_errors()
        diagnostics.add("bad")
        with pytest.raises(CompilationFailedError) as excinfo:
            diagnostics.raise_if_errors()
        assert str(excinfo.value) == "error: bad\n1 error"

    def test_clear(self):
        diagnostics = DiagnosticList(max_errors=1)
        diagnostics.add("a")
        diagnostics.add("b")
        diagnostics.clear()
        diagnostics.add("c")
        assert list(diagnostics) == ["c"]
        assert not DiagnosticList().has_errors()


class TestCompilationSession:
    """Tests for CompilationSession."""

    def test_diagnostic_cap_from_options(self):
        session = CompilationSession(options=CompilerOptions(max_diagnostics=7))
        assert session.diagnostics.max_errors == 7

    def test_error(self):
        session = CompilationSession()
        session.error("oops")
        assert list(session.diagnostics) == ["oops"]

    def test_reset(self):
        session = CompilationSession()
        session.error("oops")
        session.functions["f"] = 1
        session.declarations.declare("x", "int")
        session.environment["x"] = "1"
        session.reset()
        assert len(session.diagnostics) == 0
        assert session.functions == {}
        assert "x" not in session.declarations
        assert session.environment == {}

    def test_sessions_share_nothing(self):
        first = CompilationSession()
        second = CompilationSession()
        first.error("only here")
        first.declarations.declare("x", "int")
        assert len(second.diagnostics) == 0
        assert "x" not in second.declarations


class TestErrorHierarchy:
    """Tests for the exception classes."""

    def test_hierarchy(self):
        assert issubclass(ToyCError, MiniCError)
        assert issubclass(CompilationFailedError, ToyCError)

    def test_message_format(self):
        error = MiniCError("something broke", hint="try again")
        assert str(error) == "error: something broke\nhint: try again"
        assert error.kind == "Error"
